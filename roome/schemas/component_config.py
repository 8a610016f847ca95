"""Typed configuration payloads, one per component type.

A descriptor's ``config`` column is stored as JSON; these models give each
``componentType`` its own schema. They are applied when a descriptor is
written and again when it is rendered.
"""

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ComponentType(StrEnum):
    """Closed set of renderable component types."""

    REACT = "react"
    HTML = "html"
    CARD = "card"
    BANNER = "banner"
    FORM = "form"
    LIST = "list"
    CUSTOM = "custom"


# Elements a react "text" config may render as
TEXT_TAGS = frozenset(
    ["p", "span", "div", "h1", "h2", "h3", "h4", "h5", "h6", "small", "strong", "em", "blockquote"]
)

INPUT_TYPES = frozenset(
    [
        "text",
        "email",
        "password",
        "number",
        "tel",
        "url",
        "date",
        "datetime-local",
        "time",
        "search",
        "checkbox",
        "hidden",
    ]
)


class ConfigModel(BaseModel):
    """Base for config payloads: camelCase on the wire, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    class_name: str | None = None


class NavigateInteraction(BaseModel):
    type: Literal["navigate"]
    url: str


class EventInteraction(BaseModel):
    type: Literal["event"]
    name: str = Field(..., min_length=1, max_length=100)


# A bare string is a URL to navigate to
Interaction = str | NavigateInteraction | EventInteraction


class ReactConfig(ConfigModel):
    """Built-in mini components (``button``, ``text``)."""

    type: str | None = None
    label: str | None = None
    variant: str | None = None
    content: str | None = None
    tag: str = "p"

    @field_validator("tag")
    @classmethod
    def check_tag(cls, v: str) -> str:
        v = v.lower()
        if v not in TEXT_TAGS:
            raise ValueError(f"tag must be one of: {', '.join(sorted(TEXT_TAGS))}")
        return v


class HtmlConfig(ConfigModel):
    """Markup lives in the descriptor's ``template`` column."""


class CardAction(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    label: str
    variant: str | None = None
    on_click: Interaction | None = None


class CardConfig(ConfigModel):
    image: str | None = None
    image_alt: str | None = None
    title: str | None = None
    description: str | None = None
    actions: list[CardAction] = Field(default_factory=list)


class BannerConfig(ConfigModel):
    # info | success | warning | error; anything else renders neutral
    type: str | None = None
    icon: str | None = None
    title: str | None = None
    message: str | None = None
    dismissible: bool = False
    on_dismiss: Interaction | None = None


class FormField(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    label: str | None = None
    type: str = "text"
    placeholder: str | None = None
    required: bool = False

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        if v not in INPUT_TYPES:
            raise ValueError(f"unsupported input type '{v}'")
        return v


class SubmitButton(BaseModel):
    label: str | None = None


class FormConfig(ConfigModel):
    fields: list[FormField] = Field(default_factory=list)
    submit_button: SubmitButton | None = None


class ListConfig(ConfigModel):
    data_key: str | None = None
    items: list[Any] = Field(default_factory=list)
    item_template: str | None = None


class CustomConfig(ConfigModel):
    """Free-form payload, rendered as a JSON dump."""


CONFIG_MODELS: dict[ComponentType, type[ConfigModel]] = {
    ComponentType.REACT: ReactConfig,
    ComponentType.HTML: HtmlConfig,
    ComponentType.CARD: CardConfig,
    ComponentType.BANNER: BannerConfig,
    ComponentType.FORM: FormConfig,
    ComponentType.LIST: ListConfig,
    ComponentType.CUSTOM: CustomConfig,
}


def parse_config(component_type: ComponentType | str, config: dict[str, Any] | None) -> ConfigModel:
    """Parse a raw config dict into the model for ``component_type``.

    Raises:
        ValueError: if the type is not a known component type
        pydantic.ValidationError: if the config does not match the type
    """
    model = CONFIG_MODELS[ComponentType(component_type)]
    return model.model_validate(config or {})


def normalize_config(component_type: ComponentType | str, config: dict[str, Any] | None) -> dict[str, Any]:
    """Validate a config and return it in its stored (camelCase) form."""
    return parse_config(component_type, config).model_dump(by_alias=True, exclude_none=True)


def format_config_errors(errors: list[Any]) -> str:
    """Flatten pydantic error entries into a single message."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"config.{loc}: {err.get('msg')}" if loc else f"config: {err.get('msg')}")
    return "; ".join(parts)
