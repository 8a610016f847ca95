"""``{{dotted.path}}`` substitution against a data context."""

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

TOKEN_PATTERN = re.compile(r"\{\{(\w+(?:\.\w+)*)\}\}")


class _Missing:
    """Sentinel for a path that does not resolve."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def resolve_path(data: Any, path: str) -> Any:
    """Walk ``path`` through mappings (by key) and sequences (by index).

    Returns MISSING as soon as a segment cannot be followed. Never raises.
    """
    current = data
    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return MISSING
            current = current[key]
        elif isinstance(current, Sequence) and not isinstance(current, str | bytes):
            if not key.isdigit() or int(key) >= len(current):
                return MISSING
            current = current[int(key)]
        else:
            return MISSING
    return current


def stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Mapping | list | tuple):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def interpolate(template: str, data: Any) -> str:
    """Replace every resolvable token in a single pass; leave the rest verbatim.

    No escaping happens here; output escaping is the renderer's job.
    """

    def replace(match: re.Match[str]) -> str:
        value = resolve_path(data, match.group(1))
        if value is MISSING:
            return match.group(0)
        return stringify(value)

    return TOKEN_PATTERN.sub(replace, template)
