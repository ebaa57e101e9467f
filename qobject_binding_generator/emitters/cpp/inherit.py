#!/usr/bin/env python3
"""
C++ fragments for `#[inherit]` methods: a header-only variadic template that
forwards to the base class implementation.
"""

from __future__ import annotations

from typing import Sequence

from ...errors import ErrorCollector
from ...models import InheritedMethod
from ..fragments import CppFragment, GeneratedCppBlocks


def _generate(method: InheritedMethod, base_class: str) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    ret = method.return_descriptor.exposed if method.return_descriptor else "void"
    const = "" if method.mutable else " const"
    header = "\n".join(
        [
            "template<class... Args>",
            f"{ret} {method.names.wrapper.cpp}(Args... args){const}",
            "{",
            f"  return {base_class}::{method.names.name.cpp}(args...);",
            "}",
        ]
    )
    blocks.methods.append(CppFragment(header=header))
    return blocks


def generate_cpp_inherited_methods(methods: Sequence[InheritedMethod], base_class: str) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    errors = ErrorCollector()
    for method in methods:
        with errors.collect():
            blocks.append(_generate(method, base_class))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_cpp_inherited_methods"]
