#!/usr/bin/env python3
"""
Rust fragments for `#[qinvokable]` methods. The user's method stays in the
implementation module; the bridge only binds it to the C++ wrapper name.
"""

from __future__ import annotations

from typing import Sequence

from ...errors import ErrorCollector
from ...models import Invokable
from ...naming import QObjectNames
from ..fragments import GeneratedRustBlocks, rust_block, rust_parameters, rust_return


def _generate(invokable: Invokable, qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    qt = qobject.cpp_class.rust
    receiver = f"self: Pin<&mut {qt}>" if invokable.mutable else f"self: &{qt}"
    params = rust_parameters(invokable.parameters)
    args = ", ".join([receiver] + ([params] if params else []))
    unsafe = "" if invokable.safe else "unsafe "
    blocks.cxx_mod_contents.append(
        rust_block(
            'extern "Rust"',
            [
                f'#[cxx_name = "{invokable.names.wrapper.cpp}"]',
                f"{unsafe}fn {invokable.names.wrapper.rust}({args}){rust_return(invokable.return_type)};",
            ],
        )
    )
    return blocks


def generate_rust_invokables(invokables: Sequence[Invokable], qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    errors = ErrorCollector()
    for invokable in invokables:
        with errors.collect():
            blocks.append(_generate(invokable, qobject))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_rust_invokables"]
