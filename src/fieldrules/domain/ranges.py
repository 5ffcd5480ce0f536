"""Range DSL — parse a field's ``range`` string and validate values against it.

Grammar (informal)::

    string | boolean | integer | url          scalar
    integer(1..100) | string(..64) | number(0..)   bounded scalar
    string[] | integer[2..5]                  typed array
    (a||b||c)[] | (a||b)[1..2]                enum array
    a||b||c | a / b / c                       enum (``/`` is legacy)
    ^[A-Z]{3}$                                regex pattern

INVARIANT: Neither parsing nor validation ever raises. Unrecognized syntax
degrades to the most permissive variant (scalar string) and a malformed
value or regex simply fails validation.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, assert_never
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from fieldrules.domain.fields import field_value_to_string, parse_json_list
from fieldrules.domain.types import DataType, ItemType, RangeType

# ---------------------------------------------------------------------------
# Parsed range variants
# ---------------------------------------------------------------------------


class ScalarRange(BaseModel):
    """A single value with optional bounds (length for strings)."""

    model_config = {"frozen": True}

    range_type: Literal[RangeType.SCALAR] = RangeType.SCALAR
    data_type: DataType
    min: int | None = None
    max: int | None = None


class ArrayRange(BaseModel):
    """A typed list with optional size bounds."""

    model_config = {"frozen": True}

    range_type: Literal[RangeType.ARRAY] = RangeType.ARRAY
    item_type: ItemType
    min_size: int | None = None
    max_size: int | None = None


class EnumRange(BaseModel):
    """One of a fixed set of options."""

    model_config = {"frozen": True}

    range_type: Literal[RangeType.ENUM] = RangeType.ENUM
    options: tuple[str, ...]


class EnumArrayRange(BaseModel):
    """A list whose items are each one of a fixed set of options."""

    model_config = {"frozen": True}

    range_type: Literal[RangeType.ENUM_ARRAY] = RangeType.ENUM_ARRAY
    options: tuple[str, ...]
    min_size: int | None = None
    max_size: int | None = None


class PatternRange(BaseModel):
    """A regular expression the stringified value must match."""

    model_config = {"frozen": True}

    range_type: Literal[RangeType.PATTERN] = RangeType.PATTERN
    regex: str


ParsedRange = Annotated[
    ScalarRange | ArrayRange | EnumRange | EnumArrayRange | PatternRange,
    Field(discriminator="range_type"),
]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_BOUNDED_SCALAR = re.compile(r"^(string|integer|number)\((-?\d*)\.\.(-?\d*)\)$")
_TYPED_ARRAY = re.compile(r"^(string|integer)\[(?:(\d*)\.\.?(\d*))?\]$")
_ENUM_ARRAY = re.compile(r"^\(([^)]+)\)\[(?:(\d*)\.\.?(\d*))?\]$")

# Leading/trailing characters that mark a range as a regular expression.
_REGEX_LEADERS = frozenset("^[(\\.")
_REGEX_TRAILERS = frozenset("$])*+?}")


def _bound(text: str | None) -> int | None:
    return int(text) if text else None


def _split_options(text: str) -> tuple[str, ...]:
    if "||" in text:
        return tuple(text.split("||"))
    return tuple(part.strip() for part in text.split(" / "))


def _looks_like_regex(text: str) -> bool:
    return text[0] in _REGEX_LEADERS or text[-1] in _REGEX_TRAILERS


def parse_range(range_dsl: str | None) -> ParsedRange:
    """Parse a range DSL string into a typed :data:`ParsedRange`.

    Examples:
        >>> parse_range("integer(1..100)").max
        100
        >>> parse_range("a||b").options
        ('a', 'b')
    """
    text = (range_dsl or "").strip()
    if not text:
        return ScalarRange(data_type=DataType.STRING)

    if text in {"string", "boolean", "integer", "url"}:
        return ScalarRange(data_type=DataType(text))

    if match := _BOUNDED_SCALAR.match(text):
        base = "integer" if match.group(1) == "number" else match.group(1)
        try:
            return ScalarRange(
                data_type=DataType(base),
                min=_bound(match.group(2)),
                max=_bound(match.group(3)),
            )
        except ValueError:
            # A lone "-" bound; fall through to the permissive variants.
            pass

    if match := _TYPED_ARRAY.match(text):
        return ArrayRange(
            item_type=ItemType(match.group(1)),
            min_size=_bound(match.group(2)),
            max_size=_bound(match.group(3)),
        )

    if match := _ENUM_ARRAY.match(text):
        return EnumArrayRange(
            options=_split_options(match.group(1)),
            min_size=_bound(match.group(2)),
            max_size=_bound(match.group(3)),
        )

    if "||" in text:
        return EnumRange(options=tuple(text.split("||")))

    if " / " in text:
        return EnumRange(options=tuple(o.strip() for o in text.split(" / ")))

    if _looks_like_regex(text):
        return PatternRange(regex=text)

    return ScalarRange(data_type=DataType.STRING)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

# Schemes that are only meaningful with a host component.
_HOST_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
# Plain decimal notation only; no digit separators, hex, inf or nan.
_INTEGER_TEXT = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_TEXT = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def _as_integer(value: object) -> int | None:
    """Coerce *value* to an integer, or None if it is not integral."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _INTEGER_TEXT.match(text):
            return int(text)
        if not _DECIMAL_TEXT.match(text):
            return None
        number = float(text)
        return int(number) if number.is_integer() else None
    return None


def _is_absolute_url(text: str) -> bool:
    if not text or any(c.isspace() for c in text):
        return False
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME.match(parts.scheme):
        return False
    if parts.scheme.lower() in _HOST_SCHEMES:
        return bool(parts.netloc)
    return bool(parts.netloc or parts.path)


def _as_list(value: object) -> list[object] | None:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return parse_json_list(value)
    return None


def _size_ok(items: list[object], min_size: int | None, max_size: int | None) -> bool:
    if min_size is not None and len(items) < min_size:
        return False
    return not (max_size is not None and len(items) > max_size)


def _validate_scalar(value: object, text: str, rng: ScalarRange) -> bool:
    data_type = rng.data_type
    if data_type is DataType.STRING:
        if rng.min is not None and len(text) < rng.min:
            return False
        if rng.max is not None and len(text) > rng.max:
            return False
        return True
    if data_type is DataType.BOOLEAN:
        return isinstance(value, bool) or text in {"true", "false"}
    if data_type is DataType.URL:
        return _is_absolute_url(text)
    if data_type is DataType.INTEGER:
        number = _as_integer(value)
        if number is None:
            return False
        if rng.min is not None and number < rng.min:
            return False
        return not (rng.max is not None and number > rng.max)
    assert_never(data_type)


def _validate_array(value: object, rng: ArrayRange) -> bool:
    items = _as_list(value)
    if items is None or not _size_ok(items, rng.min_size, rng.max_size):
        return False
    if rng.item_type is ItemType.INTEGER:
        return all(
            not isinstance(item, bool)
            and (isinstance(item, int) or (isinstance(item, float) and item.is_integer()))
            for item in items
        )
    return all(isinstance(item, str) for item in items)


def _validate_enum_array(value: object, rng: EnumArrayRange) -> bool:
    items = _as_list(value)
    if items is None or not _size_ok(items, rng.min_size, rng.max_size):
        return False
    return all(field_value_to_string(item) in rng.options for item in items)


def _validate_pattern(text: str, rng: PatternRange) -> bool:
    try:
        return re.search(rng.regex, text) is not None
    except re.error:
        return False


def validate_with_parsed_range(value: object, parsed: ParsedRange) -> bool:
    """Validate *value* against an already-parsed range."""
    text = field_value_to_string(value)
    if isinstance(parsed, ScalarRange):
        return _validate_scalar(value, text, parsed)
    if isinstance(parsed, ArrayRange):
        return _validate_array(value, parsed)
    if isinstance(parsed, EnumRange):
        return text in parsed.options
    if isinstance(parsed, EnumArrayRange):
        return _validate_enum_array(value, parsed)
    if isinstance(parsed, PatternRange):
        return _validate_pattern(text, parsed)
    assert_never(parsed)


def validate_value(value: object, range_dsl: str | None) -> bool:
    """Validate a field value against its range DSL string. Never raises."""
    return validate_with_parsed_range(value, parse_range(range_dsl))


# ---------------------------------------------------------------------------
# Human-readable descriptions
# ---------------------------------------------------------------------------


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def _describe_scalar(rng: ScalarRange) -> str:
    lo, hi = rng.min, rng.max
    if rng.data_type is DataType.STRING:
        if lo is not None and hi is not None:
            if lo == hi:
                return f"Text with exactly {_plural(lo, 'character')}"
            return f"Text between {lo} and {hi} characters"
        if lo is not None:
            return f"Text with at least {_plural(lo, 'character')}"
        if hi is not None:
            return f"Text with up to {_plural(hi, 'character')}"
        return "Any text"
    if rng.data_type is DataType.BOOLEAN:
        return "Yes or No (true/false)"
    if rng.data_type is DataType.URL:
        return "A valid web address (URL)"
    if rng.data_type is DataType.INTEGER:
        if lo is not None and hi is not None:
            return f"A whole number between {lo} and {hi}"
        if lo is not None:
            return f"A whole number of {lo} or more"
        if hi is not None:
            return f"A whole number up to {hi}"
        return "A whole number"
    assert_never(rng.data_type)


def _describe_array(rng: ArrayRange) -> str:
    items = "text values" if rng.item_type is ItemType.STRING else "whole numbers"
    lo, hi = rng.min_size, rng.max_size
    if lo is not None and hi is not None:
        if lo == hi:
            return f"A list of exactly {lo} {items}"
        return f"A list of {lo} to {hi} {items}"
    if lo is not None:
        return f"A list of at least {lo} {items}"
    if hi is not None:
        return f"A list of up to {hi} {items}"
    return f"A list of {items}"


def _summarize_options(options: tuple[str, ...]) -> str:
    if len(options) <= 5:
        return ", ".join(options)
    return f"{', '.join(options[:3])}, ... ({len(options)} options)"


def _describe_enum(rng: EnumRange) -> str:
    options = rng.options
    if not options:
        return "Any value"
    if len(options) == 1:
        return f"Must be: {options[0]}"
    if len(options) == 2:
        return f'Either "{options[0]}" or "{options[1]}"'
    return f"One of: {_summarize_options(options)}"


def _describe_enum_array(rng: EnumArrayRange) -> str:
    options = _summarize_options(rng.options) if rng.options else "any values"
    lo, hi = rng.min_size, rng.max_size
    size = ""
    if lo is not None and hi is not None:
        size = f" (exactly {lo})" if lo == hi else f" ({lo} to {hi} items)"
    elif lo is not None:
        size = f" (at least {lo})"
    elif hi is not None:
        size = f" (up to {hi})"
    return f"Multiple of: {options}{size}"


_COMMON_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^\^?\[.*@.*\]\*?\$?$|email", re.I), "A valid email address"),
    (re.compile(r"[0-9a-f]{8}.*[0-9a-f]{4}.*[0-9a-f]{4}", re.I), "A unique identifier (UUID/GUID)"),
    (
        re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}|\[0-9\].*\[0-9\].*\[0-9\].*\[0-9\]"),
        "An IP address",
    ),
    (re.compile(r"\d{4}.*\d{2}.*\d{2}|yyyy|mm|dd", re.I), "A date"),
    (re.compile(r"^\^?\[a-z0-9\]", re.I), "Letters and numbers only"),
    (re.compile(r"^\^?\[a-z\]", re.I), "Letters only"),
    (re.compile(r"^\^?\[0-9\]|\^?\\d", re.I), "Numbers only"),
    (re.compile(r"#?[0-9a-f]{6}|#?[0-9a-f]{3}", re.I), "A color code (e.g., #FF5733)"),
    (re.compile(r"path|file|directory|folder", re.I), "A file or folder path"),
    (re.compile(r"\d+\.\d+\.\d+|version|semver", re.I), "A version number (e.g., 1.0.0)"),
]

_SIMPLE_CHAR_CLASS = re.compile(r"^\^?\[([^\]]+)\][+*]?\$?$")
_LENGTH_QUANTIFIER = re.compile(r"\{(\d+),?(\d*)\}")


def _describe_pattern(rng: PatternRange) -> str:
    for pattern, description in _COMMON_PATTERNS:
        if pattern.search(rng.regex):
            return description
    if match := _SIMPLE_CHAR_CLASS.match(rng.regex):
        return f"Text containing only: {match.group(1)}"
    if match := _LENGTH_QUANTIFIER.search(rng.regex):
        lo, hi = match.group(1), match.group(2)
        if hi:
            return f"Text matching a specific format ({lo}-{hi} characters)"
        return f"Text matching a specific format ({lo}+ characters)"
    return "Text matching a specific format"


def describe_range(range_dsl: str | None) -> str:
    """Translate a range DSL string into a short user-facing description.

    Examples:
        >>> describe_range("integer(1..100)")
        'A whole number between 1 and 100'
        >>> describe_range("debug||info||warn")
        'One of: debug, info, warn'
        >>> describe_range("")
        'Any value'
    """
    if not range_dsl or not range_dsl.strip():
        return "Any value"
    parsed = parse_range(range_dsl)
    if isinstance(parsed, ScalarRange):
        return _describe_scalar(parsed)
    if isinstance(parsed, ArrayRange):
        return _describe_array(parsed)
    if isinstance(parsed, EnumRange):
        return _describe_enum(parsed)
    if isinstance(parsed, EnumArrayRange):
        return _describe_enum_array(parsed)
    if isinstance(parsed, PatternRange):
        return _describe_pattern(parsed)
    assert_never(parsed)
