"""Compile declared parameter type text into a TypeSchema.

Object type literals (``{ name: string; tags: string[] }``) become ordered
dicts of nested schemas (ObjectShape, which also records the fields
declared optional with `name?:`). Everything else, including arrays, generics,
unions and intersections, is kept verbatim as opaque type text.

The parser never raises: malformed text yields a best-effort shape or is
returned unchanged.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional, Tuple

from telephone.core.contracts import ObjectShape, ParamInfo, TypeSchema

_OPENERS = "{[(<"
_CLOSERS = "}])>"
_QUOTES = "\"'`"
_SEPARATORS = ";,"

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_QUOTED = re.compile(r"^(['\"])(.*)\1$", re.DOTALL)
# A newline acts as a member separator only when another member follows it
_MEMBER_START = re.compile(r"\s*(?:[A-Za-z_$][\w$]*|\"[^\"]*\"|'[^']*')\s*\??\s*:")
_CONTINUATIONS = ("|", "&", ":", "=>", ",", ";")


def _top_level(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (index, char) for characters outside nesting and string literals."""
    depth = 0
    quote: Optional[str] = None
    prev = ""
    for i, ch in enumerate(text):
        if quote is not None:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            # `=>` in a function type is not a closing angle bracket
            if not (ch == ">" and prev == "="):
                depth = max(depth - 1, 0)
        elif depth == 0:
            yield i, ch
        prev = ch


def _braces_balanced(text: str) -> bool:
    depth = 0
    quote: Optional[str] = None
    prev = ""
    for ch in text:
        if quote is not None:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                return False
        prev = ch
    return depth == 0 and quote is None


def _split_members(body: str) -> List[str]:
    members: List[str] = []
    start = 0
    for i, ch in _top_level(body):
        if ch in _SEPARATORS:
            members.append(body[start:i])
            start = i + 1
        elif ch == "\n":
            pending = body[start:i].strip()
            if pending and not pending.endswith(_CONTINUATIONS) and _MEMBER_START.match(body, i + 1):
                members.append(body[start:i])
                start = i + 1
    members.append(body[start:])
    return members


def _member_name(raw: str) -> Tuple[Optional[str], bool]:
    """Return the field name and whether it was declared with `?`."""
    name = raw.strip()
    optional = name.endswith("?")
    if optional:
        name = name[:-1].rstrip()
    quoted = _QUOTED.match(name)
    if quoted:
        return quoted.group(2), optional
    if _IDENTIFIER.match(name):
        return name, optional
    # Index and call signatures do not name a concrete field
    return None, optional


def _parse_member(member: str) -> Optional[Tuple[str, TypeSchema, bool]]:
    colon = next((i for i, ch in _top_level(member) if ch == ":"), -1)
    if colon < 0:
        return None
    name, optional = _member_name(member[:colon])
    value = member[colon + 1:].strip()
    if not name or not value:
        return None
    return name, parse_type_annotation(value), optional


def parse_type_annotation(text: str) -> TypeSchema:
    """Transform the type text declared for a parameter into a TypeSchema.

    >>> parse_type_annotation("{ user: { name: string }; roles: string[] }")
    {'user': {'name': 'string'}, 'roles': 'string[]'}
    >>> parse_type_annotation("Map<string, number>")
    'Map<string, number>'
    """
    stripped = text.strip()
    if len(stripped) < 2 or not (stripped.startswith("{") and stripped.endswith("}")):
        return text

    body = stripped[1:-1]
    if not _braces_balanced(body):
        # e.g. `{ a: string } & { b: number }`
        return text

    shape: Dict[str, TypeSchema] = {}
    optional_fields = set()
    for member in _split_members(body):
        if not member.strip():
            continue
        parsed = _parse_member(member)
        if parsed is None:
            continue
        name, schema, optional = parsed
        shape[name] = schema
        if optional:
            optional_fields.add(name)
        else:
            optional_fields.discard(name)
    return ObjectShape(shape, optional=optional_fields)


def parse_param(name: str, type_text: str = "any", optional: bool = False) -> ParamInfo:
    """Build a ParamInfo from a declared name and type text.

    A trailing ``?`` on the name (``label?``) marks the parameter optional.
    """
    name = name.strip()
    if name.endswith("?"):
        name = name[:-1]
        optional = True
    return ParamInfo(name=name, type=parse_type_annotation(type_text), optional=optional)
