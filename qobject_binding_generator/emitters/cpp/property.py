#!/usr/bin/env python3
"""
C++ fragments for `#[qproperty]` fields.

Per property:
- `Q_PROPERTY(T name READ getter [WRITE setter] [NOTIFY changed] ...)`
- public getter taking the lock and returning the Rust-side wrapper result
- public `Q_SLOT` setter unless read-only or constant
- private `noexcept` wrappers implemented by the Rust side
- `Q_SIGNAL void nameChanged();` unless notification is suppressed
"""

from __future__ import annotations

from typing import List, Sequence
import logging

from ...errors import ErrorCollector
from ...models import Property
from ...naming import QObjectNames
from ..fragments import LOCK_GUARD, CppFragment, GeneratedCppBlocks, convert, definition

logger = logging.getLogger(__name__)


def q_property_line(prop: Property) -> str:
    names = prop.names
    flags = prop.flags
    parts: List[str] = [prop.descriptor.exposed, names.name.cpp, "READ", names.getter.cpp]
    if flags.writable:
        parts += ["WRITE", names.setter.cpp]
    if flags.notify:
        parts += ["NOTIFY", names.notify.cpp]
    if flags.constant:
        parts.append("CONSTANT")
    if flags.required:
        parts.append("REQUIRED")
    if flags.final:
        parts.append("FINAL")
    return f"Q_PROPERTY({' '.join(parts)})"


def _generate(prop: Property, qobject: QObjectNames, locking: bool) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    names = prop.names
    declared = prop.descriptor.declared
    exposed = prop.descriptor.exposed
    cls = qobject.cpp_class.cpp
    guard = [LOCK_GUARD] if locking else []

    blocks.metaobjects.append(q_property_line(prop))
    if prop.descriptor.overridden:
        blocks.add_include('"cxx-qt-common/cxxqt_convert.h"')

    blocks.methods.append(
        CppFragment(
            header=f"{exposed} const& {names.getter.cpp}() const;",
            source=definition(
                f"{exposed} const&",
                f"{cls}::{names.getter.cpp}",
                "",
                guard + [f"return {convert(f'{exposed} const&', f'{declared} const&', f'{names.getter_wrapper.cpp}()')};"],
                const=True,
            ),
        )
    )
    blocks.private_methods.append(CppFragment(header=f"{declared} const& {names.getter_wrapper.cpp}() const noexcept;"))

    if prop.flags.writable:
        value = convert(declared, f"{exposed} const&", "value") if prop.descriptor.overridden else "value"
        blocks.methods.append(
            CppFragment(
                header=f"Q_SLOT void {names.setter.cpp}({exposed} const& value);",
                source=definition(
                    "void",
                    f"{cls}::{names.setter.cpp}",
                    f"{exposed} const& value",
                    guard + [f"{names.setter_wrapper.cpp}({value});"],
                ),
            )
        )
        blocks.private_methods.append(CppFragment(header=f"void {names.setter_wrapper.cpp}({declared} value) noexcept;"))

    if prop.flags.notify:
        blocks.methods.append(CppFragment(header=f"Q_SIGNAL void {names.notify.cpp}();"))
    return blocks


def generate_cpp_properties(properties: Sequence[Property], qobject: QObjectNames, locking: bool = True) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    errors = ErrorCollector()
    for prop in properties:
        with errors.collect():
            blocks.append(_generate(prop, qobject, locking))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_cpp_properties", "q_property_line"]
