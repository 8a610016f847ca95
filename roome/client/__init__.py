"""HTTP client for the UI component API."""

from roome.client.cache import QueryCache
from roome.client.components import ComponentClient, ComponentRequestError

__all__ = ["ComponentClient", "ComponentRequestError", "QueryCache"]
