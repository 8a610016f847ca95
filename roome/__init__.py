"""RooMe dynamic UI component service."""

__version__ = "0.1.0"
