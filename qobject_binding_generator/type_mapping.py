#!/usr/bin/env python3
"""
Type mapping from Rust bridge types to their C++ spelling.

This module turns `syntax.Type` nodes into the C++ text the generated glue uses.
It provides:

- A catalog of primitive mappings (`u32` -> `::std::uint32_t`, `String` -> `::rust::String`)
- Template mappings for the cxx smart pointers and containers
- Lookup through the NameMappings table (local `#[cxx_name]`/`#[namespace]`
  declarations and dependency manifests)
- TypeDescriptor construction that keeps the declared mapping and an explicit
  `cxx_type` override side by side

Typical usage:

    mapper = TypeMapper(module.mappings)
    mapper.map(parse_type("&mut u32"))          # "::std::uint32_t&"
    mapper.descriptor(ty, override="QColor")    # TypeDescriptor(rust=..., declared=..., exposed="QColor")

Shapes C++ cannot express through cxx (parenthesized generics, lifetimes as
generic arguments, slices, trait objects...) raise TypeMappingError with the
span of the offending type.
"""

from __future__ import annotations

from typing import Dict, List, Optional
import logging

from . import syntax
from .errors import TypeMappingError
from .models import NameMappings, TypeDescriptor

logger = logging.getLogger(__name__)


# --------------------------
# Catalogs
# --------------------------

PRIMITIVES: Dict[str, str] = {
    "bool": "bool",
    "c_char": "char",
    "u8": "::std::uint8_t",
    "u16": "::std::uint16_t",
    "u32": "::std::uint32_t",
    "u64": "::std::uint64_t",
    "usize": "::std::size_t",
    "i8": "::std::int8_t",
    "i16": "::std::int16_t",
    "i32": "::std::int32_t",
    "i64": "::std::int64_t",
    "isize": "::rust::isize",
    "f32": "float",
    "f64": "double",
    "CxxString": "::std::string",
    "String": "::rust::String",
    "str": "::rust::Str",
}

TEMPLATES: Dict[str, str] = {
    "Box": "::rust::Box",
    "Vec": "::rust::Vec",
    "UniquePtr": "::std::unique_ptr",
    "SharedPtr": "::std::shared_ptr",
    "WeakPtr": "::std::weak_ptr",
    "CxxVector": "::std::vector",
}

TRANSPARENT_WRAPPERS = frozenset({"Pin"})


class TypeMapper:
    """
    Stateless apart from the mapping table; safe to share across generators.
    """

    def __init__(self, mappings: Optional[NameMappings] = None) -> None:
        self.mappings = mappings if mappings is not None else NameMappings()

    # ---- public API

    def map(self, ty: syntax.Type) -> str:
        if isinstance(ty, syntax.TypeReference):
            inner = self.map(ty.elem)
            return f"{inner}&" if ty.mutable else f"const {inner}&"
        if isinstance(ty, syntax.TypePath):
            return self._map_path(ty)
        raise TypeMappingError("Unsupported type, needs to be a TypePath", ty.span)

    def map_return(self, ty: Optional[syntax.Type]) -> str:
        """
        Map a return type; a missing type or `()` is `void`.
        """
        if ty is None or (isinstance(ty, syntax.TypeTuple) and ty.is_unit):
            return "void"
        return self.map(ty)

    def descriptor(self, ty: syntax.Type, override: Optional[str] = None) -> TypeDescriptor:
        declared = self.map(ty)
        return TypeDescriptor(rust=ty.to_rust(), declared=declared, exposed=override or declared)

    def return_descriptor(self, ty: Optional[syntax.Type]) -> Optional[TypeDescriptor]:
        if ty is None:
            return None
        return TypeDescriptor(rust=ty.to_rust(), declared=self.map_return(ty), exposed=self.map_return(ty))

    # ---- paths

    def _map_path(self, path: syntax.TypePath) -> str:
        for seg in path.segments:
            if seg.arguments is not None and seg.arguments.kind == "paren":
                raise TypeMappingError("Parenthesized arguments are unsupported", path.span)

        if len(path.segments) == 1 and not path.leading_colon:
            seg = path.segments[0]
            if seg.arguments is None:
                return self._map_ident(seg.ident)
            args = self._map_arguments(seg, path.span)
            if seg.ident in TRANSPARENT_WRAPPERS:
                return ", ".join(args)
            base = TEMPLATES.get(seg.ident) or self.mappings.get(seg.ident) or seg.ident
            return f"{base}<{', '.join(args)}>"

        if all(seg.arguments is None for seg in path.segments):
            mapped = self.mappings.get(path.plain.lstrip(":"))
            if mapped is not None:
                return mapped

        if path.last.ident in TRANSPARENT_WRAPPERS and path.last.arguments is not None:
            return ", ".join(self._map_arguments(path.last, path.span))

        parts: List[str] = []
        for seg in path.segments:
            if seg.arguments is None:
                parts.append(seg.ident)
            else:
                parts.append(f"{seg.ident}<{', '.join(self._map_arguments(seg, path.span))}>")
        prefix = "::" if path.leading_colon else ""
        return prefix + "::".join(parts)

    def _map_ident(self, ident: str) -> str:
        mapped = self.mappings.get(ident)
        if mapped is not None:
            return mapped
        return PRIMITIVES.get(ident, ident)

    def _map_arguments(self, seg: syntax.PathSegment, span: syntax.Span) -> List[str]:
        out: List[str] = []
        for arg in seg.arguments.args if seg.arguments is not None else []:
            if not isinstance(arg, syntax.Type):
                raise TypeMappingError("Unsupported GenericArgument type", getattr(arg, "span", span))
            out.append(self.map(arg))
        return out


def map_type(ty: syntax.Type, mappings: Optional[NameMappings] = None) -> str:
    """
    Convenience wrapper around `TypeMapper(mappings).map(ty)`.
    """
    return TypeMapper(mappings).map(ty)


__all__ = ["PRIMITIVES", "TEMPLATES", "TypeMapper", "map_type"]
