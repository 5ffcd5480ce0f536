"""Field value helpers — stringification, emptiness, and path utilities.

Pure functions, no I/O. Settings mappings handled here are already
decoded (JSON/YAML/.env parsing is the caller's concern).
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fieldrules.domain.models import Field, FieldValue

_INDEX_KEY = re.compile(r"^\d+$")


def field_value_to_string(value: object) -> str:
    """Render a field value the way it is displayed and compared as text.

    Sequences become compact JSON, booleans become ``true``/``false`` and
    integral floats drop their fractional part.

    Examples:
        >>> field_value_to_string(["a", "b"])
        '["a","b"]'
        >>> field_value_to_string(True)
        'true'
        >>> field_value_to_string(None)
        ''
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def is_field_value_empty(value: FieldValue | None) -> bool:
    """Whether *value* counts as empty for display purposes.

    Numbers and booleans are never empty.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, list):
        return len(value) == 0
    return False


def parse_json_list(text: str) -> list[Any] | None:
    """Decode *text* as a JSON array, or return None if it is not one."""
    try:
        decoded = json.loads(text)
    except (ValueError, TypeError):
        return None
    return decoded if isinstance(decoded, list) else None


def has_empty_property(field: Field) -> bool:
    """Whether the field is missing its example, info, or range."""
    return field.example == "" or field.info == "" or field.range == ""


def child_fields(fields: Iterable[Field], prefix: str) -> list[Field]:
    """Return the fields nested under *prefix* (``prefix.*``), in order."""
    start = f"{prefix}."
    return [f for f in fields if f.name.startswith(start)]


def generate_parent_paths(field_names: Iterable[str]) -> list[str]:
    """Every ancestor path of every name, plus the names themselves, sorted.

    Examples:
        >>> generate_parent_paths(["a.b.c", "a.b.d"])
        ['a', 'a.b', 'a.b.c', 'a.b.d']
    """
    paths: set[str] = set()
    for name in field_names:
        parts = name.split(".")
        for i in range(1, len(parts) + 1):
            paths.add(".".join(parts[:i]))
    return sorted(paths)


def flatten_object(obj: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a nested mapping into dot-path keys.

    List items are addressed by 1-based index: ``{"a": [{"b": 1}]}``
    becomes ``{"a.1.b": 1}``.
    """
    result: dict[str, Any] = {}
    pre = f"{prefix}." if prefix else ""
    for key, value in obj.items():
        path = f"{pre}{key}"
        if isinstance(value, list):
            for index, item in enumerate(value, start=1):
                if isinstance(item, Mapping):
                    result.update(flatten_object(item, f"{path}.{index}"))
                else:
                    result[f"{path}.{index}"] = item
        elif isinstance(value, Mapping):
            result.update(flatten_object(value, path))
        else:
            result[path] = value
    return result


def _listify(node: Any) -> Any:
    """Turn dicts keyed only by integers into index-ordered lists."""
    if not isinstance(node, dict):
        return node
    converted = {k: _listify(v) for k, v in node.items()}
    if converted and all(_INDEX_KEY.match(k) for k in converted):
        return [converted[k] for k in sorted(converted, key=int)]
    return converted


def fields_to_nested_object(fields: Iterable[Field]) -> dict[str, Any]:
    """Build a nested mapping from the *checked* fields only.

    Numeric path segments produce lists, so this inverts
    :func:`flatten_object`.
    """
    result: dict[str, Any] = {}
    for field in fields:
        if not field.checked:
            continue
        *parents, leaf = field.name.split(".")
        current = result
        for key in parents:
            nxt = current.get(key)
            if not isinstance(nxt, dict):
                nxt = {}
                current[key] = nxt
            current = nxt
        current[leaf] = field.value
    return _listify(result)


def to_field_values(obj: Mapping[str, Any]) -> dict[str, FieldValue]:
    """Coerce decoded settings values into field values.

    ``None`` becomes an empty string and nested objects are JSON-encoded.
    """
    result: dict[str, FieldValue] = {}
    for key, value in obj.items():
        if value is None:
            result[key] = ""
        elif isinstance(value, (str, int, float, bool, list)):
            result[key] = value
        elif isinstance(value, Mapping):
            result[key] = json.dumps(value, separators=(",", ":"))
        else:
            result[key] = str(value)
    return result


def merge_settings_into_fields(
    template_fields: Iterable[Field],
    settings: Mapping[str, FieldValue],
) -> list[Field]:
    """Overlay a flat settings mapping onto copies of the template fields.

    Every template field is marked checked; settings keys unknown to the
    template are appended as new bare fields.
    """
    from fieldrules.domain.models import Field

    merged: dict[str, Field] = {}
    for field in template_fields:
        merged[field.name] = field.model_copy(update={"checked": True})

    for name, value in settings.items():
        existing = merged.get(name)
        if existing is not None:
            existing.value = value
            existing.checked = True
        else:
            merged[name] = Field(name=name, value=value, checked=True)

    return list(merged.values())
