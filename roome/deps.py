"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from roome.config import Settings, get_settings
from roome.database import DbSession
from roome.services.component_service import ComponentService

# Re-export DbSession for convenience
__all__ = ["ComponentServiceDep", "DbSession", "SettingsDep"]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_component_service(db: DbSession) -> ComponentService:
    return ComponentService(db)


ComponentServiceDep = Annotated[ComponentService, Depends(get_component_service)]
