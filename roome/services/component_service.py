"""Component registry: descriptors, usage events and analytics."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from roome.exceptions import ConflictError, NotFoundError, ValidationError
from roome.metrics import record_usage_event
from roome.models import ComponentUsage, UIComponent, User
from roome.schemas.component_config import format_config_errors, normalize_config
from roome.schemas.ui_component import (
    ComponentAnalytics,
    ComponentCreate,
    ComponentUpdate,
    UsageCreate,
)
from roome.services.crud import CRUDBase

logger = structlog.get_logger(__name__)

# Columns that cannot be cleared with an explicit null in an update
NON_NULLABLE_FIELDS = frozenset(
    ["name", "display_name", "category", "component_type", "config", "is_active", "is_public"]
)

RECENT_USAGE_WINDOW = timedelta(days=7)
TOP_PAGES_LIMIT = 10

components = CRUDBase(UIComponent)
usage_events = CRUDBase(ComponentUsage)


def validation_errors(e: PydanticValidationError) -> list[dict[str, Any]]:
    """JSON-safe copy of pydantic error entries."""
    return [
        {"loc": [str(p) for p in err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in e.errors()
    ]


class ComponentService:
    """Service for UI component descriptors and their usage log."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_components(
        self,
        *,
        category: str | None = None,
        is_active: bool | None = None,
        is_public: bool | None = None,
    ) -> list[UIComponent]:
        """List descriptors matching the supplied filters, newest first."""
        return await components.get_multi(
            self.db,
            filters={"category": category, "is_active": is_active, "is_public": is_public},
            order_by=UIComponent.created_at.desc(),
        )

    async def get_component(self, component_id: uuid.UUID) -> UIComponent:
        component = await components.get(self.db, component_id)
        if not component:
            raise NotFoundError("Component", str(component_id))
        return component

    async def get_component_by_name(self, name: str) -> UIComponent:
        component = await components.get_by(self.db, name=name)
        if not component:
            raise NotFoundError("Component", name)
        return component

    async def create_component(self, component_in: ComponentCreate, user: User) -> UIComponent:
        """Create a descriptor. Config has already been checked by the schema."""
        if await components.get_by(self.db, name=component_in.name):
            raise ConflictError(f"Component with name '{component_in.name}' already exists")

        data = component_in.model_dump()
        data["component_type"] = component_in.component_type.value
        data.update(created_by=user.id, updated_by=user.id)

        component = await components.create(self.db, obj_in=data)
        logger.info(
            "component_created",
            component_id=str(component.id),
            name=component.name,
            component_type=component.component_type,
        )
        return component

    async def update_component(
        self,
        component_id: uuid.UUID,
        component_in: ComponentUpdate,
        user: User,
    ) -> UIComponent:
        """Apply a partial update. Last writer wins."""
        component = await self.get_component(component_id)

        patch = {
            key: value
            for key, value in component_in.model_dump(exclude_unset=True).items()
            if value is not None or key not in NON_NULLABLE_FIELDS
        }

        new_name = patch.get("name")
        if new_name and new_name != component.name:
            if await components.get_by(self.db, name=new_name):
                raise ConflictError(f"Component with name '{new_name}' already exists")

        if "component_type" in patch:
            patch["component_type"] = patch["component_type"].value

        # Check the config that will be stored against the type that will be stored
        if "config" in patch or "component_type" in patch:
            new_type = patch.get("component_type", component.component_type)
            new_config = patch.get("config", component.config)
            try:
                patch["config"] = normalize_config(new_type, new_config)
            except PydanticValidationError as e:
                raise ValidationError(
                    format_config_errors(e.errors()),
                    field="config",
                    errors=validation_errors(e),
                ) from None
            except ValueError:
                raise ValidationError(
                    f"Unknown component type '{new_type}'", field="componentType"
                ) from None

        patch.update(updated_by=user.id, version=component.version + 1)
        component = await components.update(self.db, db_obj=component, obj_in=patch)
        logger.info(
            "component_updated",
            component_id=str(component.id),
            fields=sorted(k for k in patch if k not in ("updated_by", "version")),
            version=component.version,
        )
        return component

    async def delete_component(self, component_id: uuid.UUID) -> None:
        """Delete a descriptor. Its usage history is kept."""
        if not await components.delete(self.db, id=component_id):
            raise NotFoundError("Component", str(component_id))
        logger.info("component_deleted", component_id=str(component_id))

    async def track_usage(self, usage_in: UsageCreate, user: User | None = None) -> ComponentUsage:
        """Append a usage event and bump the descriptor's cached counter."""
        # The referenced component must exist at write time
        await self.get_component(usage_in.component_id)

        metrics = (
            usage_in.performance_metrics.model_dump(by_alias=True, exclude_none=True)
            if usage_in.performance_metrics
            else None
        )
        usage = await usage_events.create(
            self.db,
            obj_in={
                "component_id": usage_in.component_id,
                "user_id": usage_in.user_id or (user.id if user else None),
                "page": usage_in.page,
                "context": usage_in.context,
                "performance_metrics": metrics,
                "load_time_ms": (
                    usage_in.performance_metrics.load_time
                    if usage_in.performance_metrics
                    else None
                ),
                "user_agent": usage_in.user_agent,
            },
        )

        await self.db.execute(
            update(UIComponent)
            .where(UIComponent.id == usage_in.component_id)
            .values(usage_count=UIComponent.usage_count + 1)
        )
        record_usage_event()
        return usage

    async def get_analytics(self, component_id: uuid.UUID) -> ComponentAnalytics:
        """Aggregate the usage log for one component."""
        component = await self.get_component(component_id)
        since = datetime.now(UTC) - RECENT_USAGE_WINDOW

        totals = await self.db.execute(
            select(
                func.count(ComponentUsage.id),
                func.count(func.distinct(ComponentUsage.user_id)),
                func.avg(ComponentUsage.load_time_ms),
            ).where(ComponentUsage.component_id == component_id)
        )
        total_usage, unique_users, avg_load_time = totals.one()

        recent = await self.db.execute(
            select(func.count(ComponentUsage.id)).where(
                ComponentUsage.component_id == component_id,
                ComponentUsage.created_at >= since,
            )
        )

        pages = await self.db.execute(
            select(ComponentUsage.page)
            .where(ComponentUsage.component_id == component_id)
            .group_by(ComponentUsage.page)
            .order_by(func.count(ComponentUsage.id).desc(), ComponentUsage.page)
            .limit(TOP_PAGES_LIMIT)
        )

        return ComponentAnalytics(
            component_id=component_id,
            total_usage=total_usage or 0,
            unique_users=unique_users or 0,
            avg_load_time=round(float(avg_load_time), 2) if avg_load_time is not None else 0.0,
            top_pages=list(pages.scalars().all()),
            recent_usage=recent.scalar_one() or 0,
            usage_count=component.usage_count,
        )
