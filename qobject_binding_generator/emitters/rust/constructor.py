#!/usr/bin/env python3
"""
Rust fragments for constructors.

Each `cxx_qt::Constructor<(..)>` impl gets a `newRs<N>` factory and an
`initialize<N>` hook exported to C++, both delegating to the user's impl with
the argument group they receive. Objects without constructors get `createRs`,
which builds the struct through `Default`.
"""

from __future__ import annotations

from typing import List, Sequence
import logging

from ... import syntax
from ...errors import ErrorCollector
from ...models import Constructor, ObjectDescription
from ..fragments import GeneratedRustBlocks, doc_attributes, rust_block

logger = logging.getLogger(__name__)


def _arguments(types: Sequence[syntax.Type]) -> List[str]:
    return [f"arg{i}: {ty.to_rust()}" for i, ty in enumerate(types)]


def _tuple(count: int) -> str:
    return syntax.render_tuple([f"arg{i}" for i in range(count)])


def _default(obj: ObjectDescription) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    names = obj.names
    rust = names.rust_struct.rust
    blocks.cxx_mod_contents.append(
        rust_block(
            'extern "Rust"',
            [
                f'#[cxx_name = "{names.create_rs.cpp}"]',
                f'#[namespace = "{names.internals_namespace}"]',
                f"fn {names.create_rs.rust}() -> Box<{rust}>;",
            ],
        )
    )
    blocks.implementation.append(
        "\n".join(
            [
                *doc_attributes("Generated CXX-Qt method which creates a boxed rust struct of a QObject"),
                rust_block(f"pub fn {names.create_rs.rust}() -> std::boxed::Box<{rust}>", ["std::default::Default::default()"]),
            ]
        )
    )
    return blocks


def _constructor(obj: ObjectDescription, constructor: Constructor) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    names = obj.names
    qt = names.cpp_class.rust
    rust = names.rust_struct.rust
    new = names.constructor_new(constructor.index)
    initialize = names.constructor_initialize(constructor.index)
    trait = f"<{qt} as cxx_qt::Constructor<{constructor.arguments_rust}>>"
    internals = names.internals_namespace

    new_args = _arguments(constructor.new_arguments)
    init_args = [f"qobject: Pin<&mut {qt}>"] + _arguments(constructor.initialize_arguments)

    blocks.cxx_mod_contents.append(
        rust_block(
            'extern "Rust"',
            [
                f'#[cxx_name = "{new.cpp}"]',
                f'#[namespace = "{internals}"]',
                f"fn {new.rust}({', '.join(new_args)}) -> Box<{rust}>;",
                f'#[cxx_name = "{initialize.cpp}"]',
                f'#[namespace = "{internals}"]',
                f"fn {initialize.rust}({', '.join(init_args)});",
            ],
        )
    )
    blocks.implementation.append(
        "\n".join(
            [
                "#[doc(hidden)]",
                rust_block(
                    f"pub fn {new.rust}({', '.join(new_args)}) -> std::boxed::Box<{rust}>",
                    [f"std::boxed::Box::new({trait}::new({_tuple(len(new_args))}))"],
                ),
            ]
        )
    )
    blocks.implementation.append(
        "\n".join(
            [
                "#[doc(hidden)]",
                rust_block(
                    f"pub fn {initialize.rust}({', '.join(init_args)})",
                    [f"{trait}::initialize(qobject, {_tuple(len(constructor.initialize_arguments))});"],
                ),
            ]
        )
    )
    return blocks


def generate_rust_constructors(obj: ObjectDescription) -> GeneratedRustBlocks:
    if obj.has_default_constructor:
        return _default(obj)
    blocks = GeneratedRustBlocks()
    errors = ErrorCollector()
    for constructor in obj.constructors:
        with errors.collect():
            blocks.append(_constructor(obj, constructor))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_rust_constructors"]
