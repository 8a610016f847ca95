"""UI component registry endpoints."""

import time
import uuid

import structlog
from fastapi import APIRouter, BackgroundTasks, Query, Request, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from roome.auth import AdminUser, OptionalUser
from roome.database import SessionFactory
from roome.deps import ComponentServiceDep, SettingsDep
from roome.exceptions import ValidationError
from roome.metrics import record_tracking_failure
from roome.rendering import DynamicComponent
from roome.schemas.responses import MessageResponse
from roome.schemas.ui_component import (
    ComponentAnalytics,
    ComponentCreate,
    ComponentResponse,
    ComponentUpdate,
    PerformanceMetrics,
    RenderRequest,
    UsageCreate,
    UsageResponse,
)
from roome.services.component_service import ComponentService

router = APIRouter(prefix="/ui-components", tags=["UI Components"])
logger = structlog.get_logger(__name__)


async def record_usage(
    session_factory: async_sessionmaker[AsyncSession],
    usage_in: UsageCreate,
) -> None:
    """Write a usage event after the response has been sent. Failures are dropped."""
    try:
        async with session_factory() as session:
            await ComponentService(session).track_usage(usage_in)
            await session.commit()
    except Exception as e:
        record_tracking_failure()
        logger.warning(
            "usage_tracking_failed",
            component_id=str(usage_in.component_id),
            page=usage_in.page,
            error=str(e),
        )


@router.get("", response_model=list[ComponentResponse])
async def list_components(
    service: ComponentServiceDep,
    category: str | None = Query(default=None),
    is_active: bool | None = Query(default=None, alias="isActive"),
    is_public: bool | None = Query(default=None, alias="isPublic"),
) -> list[ComponentResponse]:
    """List component descriptors, optionally filtered."""
    rows = await service.list_components(
        category=category, is_active=is_active, is_public=is_public
    )
    return [ComponentResponse.model_validate(row) for row in rows]


@router.get("/name/{name}", response_model=ComponentResponse)
async def get_component_by_name(name: str, service: ComponentServiceDep) -> ComponentResponse:
    return ComponentResponse.model_validate(await service.get_component_by_name(name))


@router.post(
    "/track-usage",
    response_model=UsageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def track_usage(
    usage_in: UsageCreate,
    request: Request,
    service: ComponentServiceDep,
    user: OptionalUser,
) -> UsageResponse:
    """
    Record one usage event.

    Open to anonymous callers; the signed-in user is attached when present.
    """
    if usage_in.user_agent is None:
        usage_in.user_agent = request.headers.get("user-agent")
    usage = await service.track_usage(usage_in, user)
    return UsageResponse.model_validate(usage)


@router.post(
    "/render",
    response_class=HTMLResponse,
    responses={204: {"description": "Component is inactive"}},
)
async def render_component(
    body: RenderRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    service: ComponentServiceDep,
    session_factory: SessionFactory,
    settings: SettingsDep,
    user: OptionalUser,
) -> Response:
    """
    Render a descriptor to HTML against the supplied data.

    The name takes precedence when both name and id are given. Usage is
    recorded after the response is sent.
    """
    started = time.perf_counter()
    if body.name:
        component = await service.get_component_by_name(body.name)
    elif body.id is not None:
        component = await service.get_component(body.id)
    else:
        raise ValidationError("Either name or id is required", field="name")

    if body.track_usage and settings.usage_tracking_enabled:
        background_tasks.add_task(
            record_usage,
            session_factory,
            UsageCreate(
                component_id=component.id,
                user_id=user.id if user else None,
                page=body.page,
                context=body.context,
                performance_metrics=PerformanceMetrics(
                    load_time=round((time.perf_counter() - started) * 1000, 2)
                ),
                user_agent=request.headers.get("user-agent"),
            ),
        )

    view = DynamicComponent(
        name=component.name,
        id=component.id,
        data=body.data,
        class_name=body.class_name,
        track_usage=False,
        page=body.page,
        context=body.context,
    )
    markup = view.render_descriptor(component)
    if markup is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT, background=background_tasks)
    return HTMLResponse(content=str(markup), background=background_tasks)


@router.get("/{component_id}", response_model=ComponentResponse)
async def get_component(
    component_id: uuid.UUID, service: ComponentServiceDep
) -> ComponentResponse:
    return ComponentResponse.model_validate(await service.get_component(component_id))


@router.post("", response_model=ComponentResponse, status_code=status.HTTP_201_CREATED)
async def create_component(
    component_in: ComponentCreate,
    service: ComponentServiceDep,
    user: AdminUser,
) -> ComponentResponse:
    """Create a component descriptor. Admin only."""
    component = await service.create_component(component_in, user)
    return ComponentResponse.model_validate(component)


@router.put("/{component_id}", response_model=ComponentResponse)
async def update_component(
    component_id: uuid.UUID,
    component_in: ComponentUpdate,
    service: ComponentServiceDep,
    user: AdminUser,
) -> ComponentResponse:
    """Partially update a component descriptor. Admin only."""
    component = await service.update_component(component_id, component_in, user)
    return ComponentResponse.model_validate(component)


@router.delete("/{component_id}", response_model=MessageResponse)
async def delete_component(
    component_id: uuid.UUID,
    service: ComponentServiceDep,
    user: AdminUser,
) -> MessageResponse:
    """Delete a component descriptor. Admin only."""
    await service.delete_component(component_id)
    return MessageResponse(message="Component deleted successfully")


@router.get("/{component_id}/analytics", response_model=ComponentAnalytics)
async def get_component_analytics(
    component_id: uuid.UUID,
    service: ComponentServiceDep,
    user: AdminUser,
) -> ComponentAnalytics:
    """Usage statistics for one component. Admin only."""
    return await service.get_analytics(component_id)
