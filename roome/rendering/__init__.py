"""Server-side rendering of dynamic UI component descriptors."""

from roome.rendering.component import ComponentQuery, DynamicComponent
from roome.rendering.interpolate import MISSING, interpolate, resolve_path
from roome.rendering.renderer import render
from roome.rendering.sanitize import sanitize_html
from roome.rendering.tracking import UsageRecord, UsageTracker

__all__ = [
    "MISSING",
    "ComponentQuery",
    "DynamicComponent",
    "UsageRecord",
    "UsageTracker",
    "interpolate",
    "render",
    "resolve_path",
    "sanitize_html",
]
