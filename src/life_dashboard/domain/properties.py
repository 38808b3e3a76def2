"""Typed lookups over Notion page property maps.

A Notion page carries a ``properties`` mapping whose keys are user-chosen
column names. Column names drift over time, so every field is resolved from an
ordered list of acceptable keys. The first key *present* in the map wins even
when its value is empty. When no key matches, the typed extractor receives
``None`` and returns its default. None of these functions raise.
"""

from collections.abc import Mapping, Sequence

PropertyMap = Mapping[str, object]


def first_existing(props: PropertyMap, keys: Sequence[str]) -> object | None:
    """Return the property stored under the first key present in ``props``."""
    for key in keys:
        if key in props:
            return props[key]
    return None


def text_array_to_string(value: object) -> str:
    """Join the ``plain_text`` of each fragment and strip the result."""
    if not isinstance(value, list):
        return ""
    parts = []
    for fragment in value:
        if isinstance(fragment, Mapping):
            text = fragment.get("plain_text")
            parts.append(text if isinstance(text, str) else "")
    return "".join(parts).strip()


def _field(prop: object, name: str) -> object | None:
    if isinstance(prop, Mapping):
        return prop.get(name)
    return None


def prop_title(prop: object) -> str:
    return text_array_to_string(_field(prop, "title"))


def prop_rich_text(prop: object) -> str:
    return text_array_to_string(_field(prop, "rich_text"))


def prop_number(prop: object) -> float:
    """Return the numeric value, or 0 when it is missing or not a number."""
    value = _field(prop, "number")
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return value


def prop_date(prop: object) -> str:
    start = _field(_field(prop, "date"), "start")
    return start if isinstance(start, str) and start else ""


def prop_select(prop: object) -> str:
    name = _field(_field(prop, "select"), "name")
    return name if isinstance(name, str) and name else ""


def title_of(props: PropertyMap, keys: Sequence[str]) -> str:
    return prop_title(first_existing(props, keys))


def rich_text_of(props: PropertyMap, keys: Sequence[str]) -> str:
    return prop_rich_text(first_existing(props, keys))


def number_of(props: PropertyMap, keys: Sequence[str]) -> float:
    return prop_number(first_existing(props, keys))


def date_of(props: PropertyMap, keys: Sequence[str]) -> str:
    return prop_date(first_existing(props, keys))


def select_of(props: PropertyMap, keys: Sequence[str]) -> str:
    return prop_select(first_existing(props, keys))
