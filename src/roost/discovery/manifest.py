"""Manifest parser — a precomputed descriptor list.

The manifest is a JSON-style array of objects::

    [
      {
        "name": "myapp.controllers.HomeController",
        "allDeclaredConstructors": true,
        "fields": [{"name": "layout"}]
      }
    ]

Object boundaries are found by brace-depth counting instead of a full
grammar, and the parser is forgiving: an object without a ``name``, a
malformed member, or an unterminated trailing object is skipped and the
rest of the array is still read. Non-array input yields no descriptors.
"""

import json
import logging
from collections.abc import Iterable, Iterator

from roost.discovery.descriptor import ComponentDescriptor, ReflectionFlags
from roost.errors import DescriptorParseError

logger = logging.getLogger("roost.discovery")

# Manifest key -> ReflectionFlags field
FLAG_KEYS: dict[str, str] = {
    "allDeclaredConstructors": "all_declared_constructors",
    "allPublicConstructors": "all_public_constructors",
    "allDeclaredMethods": "all_declared_methods",
    "allPublicMethods": "all_public_methods",
    "allPrivateMethods": "all_private_methods",
}


def parse_manifest(text: str) -> list[ComponentDescriptor]:
    """Parse manifest *text* into unresolved descriptors, preserving order.

    Never raises: anything it cannot read is logged and skipped.
    """
    content = text.strip()
    if not content.startswith("["):
        logger.warning("Manifest is not an array; no components declared")
        return []

    body = content[1:-1] if content.endswith("]") else content[1:]
    descriptors: list[ComponentDescriptor] = []
    for raw in iter_objects(body):
        try:
            descriptors.append(parse_entry(raw))
        except DescriptorParseError as exc:
            logger.debug("Skipping manifest entry: %s", exc)
    return descriptors


def parse_entry(raw: str) -> ComponentDescriptor:
    """Parse one ``{...}`` manifest object.

    Raises ``DescriptorParseError`` when the required ``name`` is missing
    or is not a string.
    """
    members = split_members(raw)

    name = _string(members.get("name"))
    if not name:
        msg = f"missing 'name' in {_preview(raw)}"
        raise DescriptorParseError(msg)

    flags = ReflectionFlags(
        **{attr: _boolean(members.get(key)) for key, attr in FLAG_KEYS.items()}
    )

    fields: list[str] = []
    raw_fields = members.get("fields")
    if raw_fields is not None:
        if raw_fields.startswith("["):
            for field_obj in iter_objects(raw_fields[1:]):
                field_name = _string(split_members(field_obj).get("name"))
                if field_name:
                    fields.append(field_name)
        else:
            logger.debug("Ignoring non-array 'fields' in %s", name)

    return ComponentDescriptor(name=name, flags=flags, fields=tuple(fields))


def iter_objects(text: str) -> Iterator[str]:
    """Yield each balanced top-level ``{...}`` object in *text*.

    Braces inside string literals are ignored. Scanning stops at an
    object that never closes.
    """
    depth = 0
    start = -1
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                yield text[start : index + 1]

    if depth > 0:
        logger.debug("Unterminated manifest object skipped: %s", _preview(text[start:]))


def split_members(obj: str) -> dict[str, str]:
    """Split an object into ``{key: raw value}`` for its top-level members.

    Values are returned as stripped source text. The first occurrence of
    a key wins. Members without a ``:`` are dropped.
    """
    inner = obj.strip()
    if inner.startswith("{"):
        inner = inner[1:]
    if inner.endswith("}"):
        inner = inner[:-1]

    members: dict[str, str] = {}
    for member in _split_top_level(inner):
        key, sep, value = _partition_colon(member)
        if not sep:
            continue
        key = key.strip().strip('"')
        if key and key not in members:
            members[key] = value.strip()
    return members


def dump_manifest(descriptors: Iterable[ComponentDescriptor]) -> str:
    """Serialize descriptors back into manifest text."""
    entries = []
    for descriptor in descriptors:
        entry: dict[str, object] = {"name": descriptor.name}
        for key, attr in FLAG_KEYS.items():
            if getattr(descriptor.flags, attr):
                entry[key] = True
        if descriptor.fields:
            entry["fields"] = [{"name": name} for name in descriptor.fields]
        entries.append(entry)
    return json.dumps(entries, indent=2)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _split_top_level(text: str) -> Iterator[str]:
    depth = 0
    in_string = False
    escaped = False
    start = 0
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
        elif char == "," and depth == 0:
            yield text[start:index]
            start = index + 1
    tail = text[start:]
    if tail.strip():
        yield tail


def _partition_colon(member: str) -> tuple[str, str, str]:
    in_string = False
    escaped = False
    for index, char in enumerate(member):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == ":":
            return member[:index], ":", member[index + 1 :]
    return member, "", ""


def _string(raw: str | None) -> str | None:
    if raw is None or len(raw) < 2 or not (raw.startswith('"') and raw.endswith('"')):
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw[1:-1]
    return value.strip() if isinstance(value, str) else None


def _boolean(raw: str | None) -> bool:
    if raw is None:
        return False
    return raw.strip('"').strip().lower() == "true"


def _preview(text: str, limit: int = 60) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[:limit] + "..."
