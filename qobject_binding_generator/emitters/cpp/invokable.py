#!/usr/bin/env python3
"""
C++ fragments for `#[qinvokable]` methods: a public `Q_INVOKABLE` that takes the
lock and calls the private `noexcept` wrapper implemented on the Rust side.
"""

from __future__ import annotations

from typing import Sequence
import logging

from ...errors import ErrorCollector
from ...models import Invokable, InvokableSpecifier
from ...naming import QObjectNames
from ..fragments import LOCK_GUARD, CppFragment, GeneratedCppBlocks, cpp_ident, cpp_parameters, definition, forward_argument

logger = logging.getLogger(__name__)


def _generate(invokable: Invokable, qobject: QObjectNames, locking: bool) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    names = invokable.names
    cls = qobject.cpp_class.cpp
    ret = invokable.return_descriptor.exposed if invokable.return_descriptor else "void"
    params = cpp_parameters(invokable.parameters)
    const = not invokable.mutable

    prefix = "virtual " if invokable.has(InvokableSpecifier.VIRTUAL) else ""
    suffix = " const" if const else ""
    if invokable.has(InvokableSpecifier.FINAL):
        suffix += " final"
    if invokable.has(InvokableSpecifier.OVERRIDE):
        suffix += " override"

    arguments = ", ".join(forward_argument(cpp_ident(p.ident), p.descriptor.exposed) for p in invokable.parameters)
    call = f"{names.wrapper.cpp}({arguments});"
    body = ([LOCK_GUARD] if locking else []) + [call if ret == "void" else f"return {call}"]

    blocks.methods.append(
        CppFragment(
            header=f"Q_INVOKABLE {prefix}{ret} {names.name.cpp}({params}){suffix};",
            source=definition(ret, f"{cls}::{names.name.cpp}", params, body, const=const),
        )
    )
    blocks.private_methods.append(
        CppFragment(header=f"{ret} {names.wrapper.cpp}({params}){' const' if const else ''} noexcept;")
    )
    return blocks


def generate_cpp_invokables(invokables: Sequence[Invokable], qobject: QObjectNames, locking: bool = True) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    errors = ErrorCollector()
    for invokable in invokables:
        with errors.collect():
            blocks.append(_generate(invokable, qobject, locking))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_cpp_invokables"]
