#!/usr/bin/env python3
"""
Rust fragments for `#[qproperty]` fields.

The property value lives in the field of the user's struct. The bridge declares
the getter/setter wrappers the C++ side calls and the C++ notify signal; the
implementation module provides the getter, the setter (which returns early when
the value is unchanged, then stores it, then notifies) and the unsafe mutable
accessor.
"""

from __future__ import annotations

from typing import Sequence
import logging

from ...errors import ErrorCollector
from ...models import Property
from ...naming import QObjectNames
from ..fragments import GeneratedRustBlocks, doc_attributes, rust_block

logger = logging.getLogger(__name__)


def setter_body(prop: Property) -> list:
    """
    Statements of the generated setter, in order: guard, mutation, notify.
    """
    field = prop.ident
    lines = [
        f"if self.{field} == value {{\n    return;\n}}",
        f"self.as_mut().rust_mut().{field} = value;",
    ]
    if prop.flags.notify:
        lines.append(f"self.as_mut().{prop.names.notify.rust}();")
    return lines


def _generate(prop: Property, qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    names = prop.names
    qt = qobject.cpp_class.rust
    ty = prop.ty.to_rust()
    field = prop.ident

    blocks.cxx_mod_contents.append(
        rust_block(
            'extern "Rust"',
            [f'#[cxx_name = "{names.getter_wrapper.cpp}"]', f"unsafe fn {names.getter.rust}<'a>(self: &'a {qt}) -> &'a {ty};"],
        )
    )
    blocks.implementation.append(
        rust_block(
            f"impl {qt}",
            [
                "\n".join(doc_attributes("Getter for the Q_PROPERTY ", names.name.cpp)),
                rust_block(f"pub fn {names.getter.rust}(&self) -> &{ty}", [f"&self.{field}"]),
            ],
        )
    )

    if prop.flags.writable:
        blocks.cxx_mod_contents.append(
            rust_block(
                'extern "Rust"',
                [f'#[cxx_name = "{names.setter_wrapper.cpp}"]', f"fn {names.setter.rust}(self: Pin<&mut {qt}>, value: {ty});"],
            )
        )
        blocks.implementation.append(
            rust_block(
                f"impl {qt}",
                [
                    "\n".join(doc_attributes("Setter for the Q_PROPERTY ", names.name.cpp)),
                    rust_block(f"pub fn {names.setter.rust}(mut self: Pin<&mut Self>, value: {ty})", setter_body(prop)),
                ],
            )
        )
        blocks.implementation.append(
            rust_block(
                f"impl {qt}",
                [
                    "\n".join(
                        doc_attributes(
                            "Unsafe mutable access to the Q_PROPERTY ",
                            names.name.cpp,
                            "\n",
                            "This does not emit the notify signal, it must be emitted manually.",
                        )
                    ),
                    rust_block(
                        f"pub unsafe fn {names.mutable_accessor}<'a>(self: Pin<&'a mut Self>) -> &'a mut {ty}",
                        [f"&mut self.rust_mut().get_unchecked_mut().{field}"],
                    ),
                ],
            )
        )

    if prop.flags.notify:
        blocks.cxx_mod_contents.append(
            rust_block(
                'unsafe extern "C++"',
                [
                    *doc_attributes("Notify for the Q_PROPERTY"),
                    f'#[cxx_name = "{names.notify.cpp}"]',
                    f"fn {names.notify.rust}(self: Pin<&mut {qt}>);",
                ],
            )
        )
    return blocks


def generate_rust_properties(properties: Sequence[Property], qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    errors = ErrorCollector()
    for prop in properties:
        with errors.collect():
            blocks.append(_generate(prop, qobject))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_rust_properties", "setter_body"]
