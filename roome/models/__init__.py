"""SQLAlchemy models package."""

from roome.models.ui_component import ComponentUsage, UIComponent
from roome.models.user import User, UserRole

__all__ = [
    # User
    "User",
    "UserRole",
    # Components
    "UIComponent",
    "ComponentUsage",
]
