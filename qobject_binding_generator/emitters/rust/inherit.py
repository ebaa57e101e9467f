#!/usr/bin/env python3
"""
Rust fragments for `#[inherit]` methods: a C++ declaration bound to the
`CxxQtInherit` forwarding template.
"""

from __future__ import annotations

from typing import Sequence

from ...errors import ErrorCollector
from ...models import InheritedMethod
from ...naming import QObjectNames
from ..fragments import GeneratedRustBlocks, rust_block, rust_parameters, rust_return


def _generate(method: InheritedMethod, qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    qt = qobject.cpp_class.rust
    receiver = f"self: Pin<&mut {qt}>" if method.mutable else f"self: &{qt}"
    params = rust_parameters(method.parameters)
    args = ", ".join([receiver] + ([params] if params else []))
    decl = f"fn {method.names.name.rust}({args}){rust_return(method.return_type)};"
    lines = [f'#[cxx_name = "{method.names.wrapper.cpp}"]']
    if method.safe:
        blocks.cxx_mod_contents.append(rust_block('unsafe extern "C++"', lines + [decl]))
    else:
        blocks.cxx_mod_contents.append(rust_block('extern "C++"', lines + [f"unsafe {decl}"]))
    return blocks


def generate_rust_inherited_methods(methods: Sequence[InheritedMethod], qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    errors = ErrorCollector()
    for method in methods:
        with errors.collect():
            blocks.append(_generate(method, qobject))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_rust_inherited_methods"]
