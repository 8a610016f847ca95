"""Business logic services package."""

from roome.services.component_service import ComponentService
from roome.services.crud import CRUDBase

__all__ = ["CRUDBase", "ComponentService"]
