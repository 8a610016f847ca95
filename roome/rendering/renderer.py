"""Render dispatcher: one branch per component type.

Each branch parses the descriptor's config with the model for its type,
interpolates the configured strings against the data context and renders a
Jinja2 template. Autoescaping is on for every template; the only markup that
reaches the output unescaped has been through the allow-list sanitizer.
"""

import json
import re
import uuid
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from roome.rendering.interpolate import interpolate
from roome.rendering.sanitize import is_safe_url, sanitize_html
from roome.schemas.component_config import (
    BannerConfig,
    CardConfig,
    ComponentType,
    EventInteraction,
    FormConfig,
    HtmlConfig,
    ListConfig,
    NavigateInteraction,
    ReactConfig,
)


class Descriptor(Protocol):
    """What the renderer needs from a stored component (ORM row or API schema)."""

    id: uuid.UUID
    name: str
    display_name: str
    description: str | None
    category: str
    component_type: str
    config: dict[str, Any]
    template: str | None
    styles: dict[str, Any] | None
    interactions: dict[str, Any] | None
    is_active: bool


env = Environment(
    loader=PackageLoader("roome", "templates/components"),
    autoescape=select_autoescape(default_for_string=True, default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)

BUTTON_VARIANTS = {
    "primary": "bg-blue-600 text-white hover:bg-blue-700",
    "secondary": "bg-gray-200 text-gray-900 hover:bg-gray-300",
}
BUTTON_DEFAULT = "bg-transparent border border-gray-300 hover:bg-gray-50"

BANNER_STYLES = {
    "info": "bg-blue-50 border-blue-400 dark:bg-blue-900/20 dark:border-blue-400",
    "success": "bg-green-50 border-green-400 dark:bg-green-900/20 dark:border-green-400",
    "warning": "bg-yellow-50 border-yellow-400 dark:bg-yellow-900/20 dark:border-yellow-400",
    "error": "bg-red-50 border-red-400 dark:bg-red-900/20 dark:border-red-400",
}
BANNER_NEUTRAL = "bg-gray-50 border-gray-400 dark:bg-gray-900/20 dark:border-gray-400"


def cx(*classes: str | None) -> str:
    """Join the truthy class names."""
    return " ".join(c for c in classes if c)


def slugify(text: str) -> str:
    return re.sub(r"\s+", "-", text.lower())


def dump_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def interaction_attrs(interaction: Any, data: Any) -> Markup:
    """Turn an onClick/onDismiss interaction into data attributes.

    URLs go to ``data-href`` and named events to ``data-event``; anything
    else, including URLs with a script scheme, renders no attribute.
    """
    if interaction is None:
        return Markup("")

    if isinstance(interaction, str):
        url = interaction if interaction.startswith(("http", "/")) else None
    elif isinstance(interaction, NavigateInteraction):
        url = interaction.url
    elif isinstance(interaction, EventInteraction):
        return Markup(' data-event="{}"').format(interaction.name)
    elif isinstance(interaction, Mapping) and interaction.get("type") == "navigate":
        url = interaction.get("url")
    elif isinstance(interaction, Mapping) and interaction.get("type") == "event":
        return Markup(' data-event="{}"').format(interaction.get("name", ""))
    else:
        url = None

    if not url:
        return Markup("")
    url = interpolate(str(url), data)
    if not is_safe_url(url):
        return Markup("")
    return Markup(' data-href="{}"').format(url)


env.globals.update(cx=cx, interaction_attrs=interaction_attrs)


def _sub(value: str | None, data: Any) -> str:
    return interpolate(value, data) if value else ""


def _template(name: str, **context: Any) -> Markup:
    return Markup(env.get_template(name).render(**context))


def render_react(component: Descriptor, data: Any) -> Markup:
    config = ReactConfig.model_validate(component.config or {})

    if config.type == "button":
        label = config.label or "Button"
        return _template(
            "react_button.html",
            classes=cx(
                "px-4 py-2 rounded-md font-medium transition-colors",
                BUTTON_VARIANTS.get(config.variant or "", BUTTON_DEFAULT),
                config.class_name,
            ),
            label=_sub(label, data),
            testid=slugify(config.label or "button"),
            on_click=(component.interactions or {}).get("onClick"),
            data=data,
        )

    if config.type == "text":
        return _template(
            "react_text.html",
            tag=config.tag,
            class_name=config.class_name,
            content=Markup(sanitize_html(_sub(config.content, data))),
        )

    return _template(
        "react_fallback.html",
        component=component,
        class_name=config.class_name,
        config_json=dump_json(component.config),
    )


def render_html(component: Descriptor, data: Any) -> Markup:
    if not component.template:
        return _template("missing_template.html", component=component)

    config = HtmlConfig.model_validate(component.config or {})
    return _template(
        "html.html",
        component=component,
        classes=cx("html-component", (component.styles or {}).get("className"), config.class_name),
        content=Markup(sanitize_html(interpolate(component.template, data))),
    )


def render_card(component: Descriptor, data: Any) -> Markup:
    config = CardConfig.model_validate(component.config or {})
    image = _sub(config.image, data)
    return _template(
        "card.html",
        component=component,
        class_name=config.class_name,
        image=image if is_safe_url(image) else "",
        image_alt=_sub(config.image_alt, data),
        title=_sub(config.title, data),
        description=_sub(config.description, data),
        actions=[
            {
                "label": _sub(action.label, data),
                "classes": BUTTON_VARIANTS["primary"]
                if action.variant == "primary"
                else BUTTON_VARIANTS["secondary"],
                "on_click": action.on_click,
            }
            for action in config.actions
        ],
        data=data,
    )


def render_banner(component: Descriptor, data: Any) -> Markup:
    config = BannerConfig.model_validate(component.config or {})
    return _template(
        "banner.html",
        component=component,
        classes=cx(
            "p-4 rounded-md border-l-4",
            BANNER_STYLES.get(config.type or "", BANNER_NEUTRAL),
            config.class_name,
        ),
        icon=config.icon,
        title=_sub(config.title, data),
        message=_sub(config.message, data),
        dismissible=config.dismissible,
        on_dismiss=config.on_dismiss,
        data=data,
    )


def render_form(component: Descriptor, data: Any) -> Markup:
    config = FormConfig.model_validate(component.config or {})
    submit_label = None
    if config.submit_button is not None:
        submit_label = _sub(config.submit_button.label or "Submit", data)
    return _template(
        "form.html",
        component=component,
        class_name=config.class_name,
        fields=[
            {
                "name": field.name,
                "label": _sub(field.label, data),
                "type": field.type,
                "placeholder": _sub(field.placeholder, data),
                "required": field.required,
            }
            for field in config.fields
        ],
        submit_label=submit_label,
    )


def resolve_list_items(config: ListConfig, data: Any) -> list[Any]:
    """Items from ``data[dataKey]`` when that is a list, otherwise ``config.items``."""
    if config.data_key and isinstance(data, Mapping):
        source = data.get(config.data_key)
        if isinstance(source, list):
            return source
    return config.items


def render_list(component: Descriptor, data: Any) -> Markup:
    config = ListConfig.model_validate(component.config or {})

    rendered: list[dict[str, Any]] = []
    for item in resolve_list_items(config, data):
        if isinstance(item, str):
            rendered.append({"text": item, "literal": True})
        elif config.item_template:
            rendered.append({"text": interpolate(config.item_template, item), "literal": False})
        else:
            rendered.append({"text": json.dumps(item, default=str), "literal": False})

    return _template(
        "list.html",
        component=component,
        class_name=config.class_name,
        items=rendered,
    )


def render_custom(component: Descriptor, data: Any) -> Markup:
    return _template(
        "custom.html",
        component=component,
        class_name=(component.styles or {}).get("className"),
        payload_json=dump_json({"config": component.config, "data": data}),
    )


def render_default(component: Descriptor, data: Any) -> Markup:
    return _template("default.html", component=component)


Branch = Callable[[Descriptor, Any], Markup]

BRANCHES: dict[ComponentType, Branch] = {
    ComponentType.REACT: render_react,
    ComponentType.HTML: render_html,
    ComponentType.CARD: render_card,
    ComponentType.BANNER: render_banner,
    ComponentType.FORM: render_form,
    ComponentType.LIST: render_list,
    ComponentType.CUSTOM: render_custom,
}


def branch_name(component: Descriptor) -> str:
    """The branch a descriptor dispatches to ("default" for unknown types)."""
    try:
        return ComponentType(component.component_type).value
    except ValueError:
        return "default"


def render(component: Descriptor, data: Any = None) -> Markup:
    """Render a descriptor's body. May raise; callers own error containment."""
    data = {} if data is None else data
    try:
        component_type = ComponentType(component.component_type)
    except ValueError:
        return render_default(component, data)
    return BRANCHES[component_type](component, data)


def render_template(name: str, **context: Any) -> Markup:
    """Render one of the component chrome templates (container, errors, loading)."""
    return _template(name, **context)
