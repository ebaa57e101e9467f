#!/usr/bin/env python3
"""
Helpers for reading and stripping bridge annotations from attribute lists.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple
import logging

from ..errors import StructuringError
from ..syntax import Attribute, Lit, Meta, Span, UNKNOWN_SPAN

logger = logging.getLogger(__name__)

# Attribute paths that select what kind of member an item is.
KIND_ATTRIBUTES: Dict[str, Tuple[str, ...]] = {
    "qobject": ("cxx_qt::qobject",),
    "qproperty": ("qproperty", "cxx_qt::qproperty"),
    "qsignal": ("qsignal", "cxx_qt::qsignal"),
    "qinvokable": ("qinvokable", "cxx_qt::qinvokable"),
    "inherit": ("inherit", "cxx_qt::inherit"),
}

FLAG = "flag"
STRING = "str"


def attribute_kind(attr: Attribute) -> Optional[str]:
    for kind, paths in KIND_ATTRIBUTES.items():
        if attr.path in paths:
            return kind
    return None


def select_kind(attrs: Sequence[Attribute], allowed: Sequence[str], span: Span = UNKNOWN_SPAN, what: str = "item") -> Optional[str]:
    """
    Determine the single kind an item is annotated with.

    `inherit` may be combined with `qsignal` (an inherited signal); the pair is
    reported as "qsignal". Any other combination, a duplicate, or a kind not in
    `allowed` is a StructuringError.
    """
    found: List[Tuple[str, Attribute]] = []
    for attr in attrs:
        kind = attribute_kind(attr)
        if kind is None:
            continue
        for previous, _ in found:
            if previous == kind:
                raise StructuringError(f"Duplicate #[{kind}] attribute", attr.span)
        found.append((kind, attr))

    kinds = [kind for kind, _ in found]
    if not kinds:
        return None
    if sorted(kinds) == ["inherit", "qsignal"]:
        selected = "qsignal"
    elif len(kinds) > 1:
        raise StructuringError(
            f"Conflicting attributes #[{kinds[0]}] and #[{kinds[1]}], an {what} can only have one kind",
            found[1][1].span,
        )
    else:
        selected = kinds[0]
    for kind, attr in found:
        if kind not in allowed and not (kind == "inherit" and selected == "qsignal" and "qsignal" in allowed):
            raise StructuringError(f"#[{kind}] is not allowed on this {what}", attr.span)
    return selected


def find_attribute(attrs: Sequence[Attribute], *paths: str) -> Optional[Attribute]:
    for attr in attrs:
        if attr.path in paths:
            return attr
    return None


def take_attribute(attrs: List[Attribute], *paths: str) -> Optional[Attribute]:
    """
    Remove and return the first attribute whose path matches.
    """
    for index, attr in enumerate(attrs):
        if attr.path in paths:
            return attrs.pop(index)
    return None


def strip_attributes(attrs: Sequence[Attribute], *paths: str) -> List[Attribute]:
    return [attr for attr in attrs if attr.path not in paths]


def string_value(attr: Attribute) -> str:
    """
    Value of `#[name = "value"]`.
    """
    meta = attr.meta
    if meta.kind != "name_value" or meta.value is None or meta.value.kind != "str":
        raise StructuringError(f'Expected #[{meta.name} = "..."]', attr.span)
    return str(meta.value.value)


def string_attribute(attrs: Sequence[Attribute], *paths: str) -> Optional[str]:
    attr = find_attribute(attrs, *paths)
    return string_value(attr) if attr is not None else None


def parse_options(meta: Meta, allowed: Dict[str, str]) -> Dict[str, object]:
    """
    Parse the arguments of `#[path(key = "value", flag, ...)]`.

    `allowed` maps option names to FLAG or STRING. A bare word attribute has no
    options. Unknown, duplicated or ill-typed options raise StructuringError.
    """
    if meta.kind == "word":
        return {}
    if meta.kind == "name_value":
        raise StructuringError(f"Expected #[{meta.name}] or #[{meta.name}(...)]", meta.span)

    options: Dict[str, object] = {}
    for item in meta.items:
        if isinstance(item, Lit):
            raise StructuringError(f"Unexpected literal in #[{meta.name}(...)]", item.span)
        key = item.name
        kind = allowed.get(key)
        if kind is None:
            raise StructuringError(f"Unknown option `{key}` in #[{meta.name}(...)]", item.span)
        if key in options:
            raise StructuringError(f"Duplicate option `{key}` in #[{meta.name}(...)]", item.span)
        if kind == FLAG:
            if item.kind != "word":
                raise StructuringError(f"Option `{key}` does not take a value", item.span)
            options[key] = True
        else:
            if item.kind != "name_value" or item.value is None or item.value.kind != "str":
                raise StructuringError(f'Option `{key}` expects a string value: {key} = "..."', item.span)
            options[key] = str(item.value.value)
    return options


__all__ = [
    "KIND_ATTRIBUTES",
    "FLAG",
    "STRING",
    "attribute_kind",
    "select_kind",
    "find_attribute",
    "take_attribute",
    "strip_attributes",
    "string_value",
    "string_attribute",
    "parse_options",
]
