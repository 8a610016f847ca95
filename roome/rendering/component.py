"""Fetch, render and track one component descriptor."""

import time
import uuid
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol

import structlog
from markupsafe import Markup

from roome.config import get_settings
from roome.metrics import record_render
from roome.rendering.renderer import Descriptor, branch_name, render, render_template
from roome.rendering.tracking import UsageRecord, UsageTracker

logger = structlog.get_logger(__name__)


@dataclass
class ComponentQuery:
    """Result of fetching a descriptor: data or error, never both."""

    data: Descriptor | None = None
    is_loading: bool = False
    error: str | None = None
    enabled: bool = True


class Loader(Protocol):
    def __call__(
        self, *, name: str | None = None, id: uuid.UUID | None = None
    ) -> Awaitable[ComponentQuery]: ...


class DynamicComponent:
    """A descriptor reference plus the data it is rendered against.

    ``render`` never raises: load failures and render failures each produce
    their own error block. Usage is handed to the tracker at most once per
    ``(component_id, page)`` for the lifetime of the instance.
    """

    def __init__(
        self,
        name: str | None = None,
        id: uuid.UUID | None = None,
        data: dict[str, Any] | None = None,
        class_name: str | None = None,
        track_usage: bool = True,
        page: str = "unknown",
        context: dict[str, Any] | None = None,
        user_agent: str | None = None,
    ):
        self.name = name
        self.id = id
        self.data = data or {}
        self.class_name = class_name
        self.track_usage = track_usage
        self.page = page
        self.context = context or {}
        self.user_agent = user_agent
        self._tracked: set[tuple[uuid.UUID, str]] = set()

    @property
    def reference(self) -> str:
        return self.name or (str(self.id) if self.id else "")

    def loading_markup(self) -> Markup:
        return render_template("loading.html", reference=self.reference)

    async def render(
        self,
        loader: Loader,
        tracker: UsageTracker | None = None,
    ) -> Markup | None:
        started = time.perf_counter()
        query = await loader(name=self.name, id=self.id)

        if query.error or query.data is None:
            record_render("none", "load_error")
            logger.info("component_load_failed", reference=self.reference, error=query.error)
            return render_template(
                "load_error.html", reference=self.reference, error=query.error
            )

        component = query.data
        if tracker is not None:
            self._track(component, tracker, started)

        return self.render_descriptor(component)

    def render_descriptor(self, component: Descriptor) -> Markup | None:
        """Render an already resolved descriptor. None when it is inactive."""
        if not component.is_active:
            record_render(branch_name(component), "inactive")
            return None

        try:
            body = render(component, self.data)
        except Exception as e:
            record_render(branch_name(component), "render_error")
            logger.exception(
                "component_render_failed",
                component_id=str(component.id),
                name=component.name,
            )
            return render_template("render_error.html", component=component, error=str(e))

        record_render(branch_name(component), "ok")
        return render_template(
            "container.html", component=component, class_name=self.class_name, body=body
        )

    def _track(self, component: Descriptor, tracker: UsageTracker, started: float) -> None:
        if not self.track_usage or not get_settings().usage_tracking_enabled:
            return
        key = (component.id, self.page)
        if key in self._tracked:
            return
        self._tracked.add(key)
        tracker.track(
            UsageRecord(
                component_id=component.id,
                page=self.page,
                context=self.context,
                load_time=round((time.perf_counter() - started) * 1000, 2),
                user_agent=self.user_agent,
            )
        )
