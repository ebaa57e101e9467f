#!/usr/bin/env python3
"""
C++ constructors.

Without any `cxx_qt::Constructor` impl the class gets the default
`explicit X(QObject* parent = nullptr)`, which creates the Rust struct through
`createRs()`. Each declared constructor instead routes its arguments:

- base arguments to the base-class initializer
- new arguments to `newRs<N>(...)`, which builds the Rust struct
- initialize arguments to `initialize<N>(*this, ...)` once the object exists

Every argument is moved exactly once.
"""

from __future__ import annotations

from typing import List, Sequence
import logging

from ...errors import ErrorCollector
from ...models import Constructor, ObjectDescription
from ..fragments import CppFragment, GeneratedCppBlocks, definition

logger = logging.getLogger(__name__)


def member_initializers(obj: ObjectDescription) -> List[str]:
    """
    Initializers for the members that follow `m_rustObj`.
    """
    cls = obj.names.cpp_class.cpp
    out: List[str] = []
    if obj.locking:
        out.append("m_rustObjMutex(::std::make_shared<::std::recursive_mutex>())")
    if obj.threading:
        out.append(f"m_cxxQtThreadObj(::std::make_shared<::rust::cxxqtlib1::CxxQtGuardedPointer<{cls}>>(this))")
    return out


def _default_constructor(obj: ObjectDescription) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    names = obj.names
    cls = names.cpp_class.cpp
    initializers = [
        f"{obj.base_class}(parent)",
        f"m_rustObj({names.qualified_internals_namespace}::{names.create_rs.cpp}())",
        *member_initializers(obj),
    ]
    blocks.methods.append(
        CppFragment(
            header=f"explicit {cls}(QObject* parent = nullptr);",
            source=definition(None, f"{cls}::{cls}", "QObject* parent", [], initializers=initializers),
        )
    )
    return blocks


def _constructor(obj: ObjectDescription, constructor: Constructor) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    names = obj.names
    cls = names.cpp_class.cpp
    internals = names.qualified_internals_namespace
    routing = constructor.routing

    def moved(indices: Sequence[int]) -> List[str]:
        return [f"::std::move(arg{i})" for i in indices]

    params = ", ".join(f"{d.exposed} arg{i}" for i, d in enumerate(constructor.descriptors))
    new_name = names.constructor_new(constructor.index).cpp
    initialize_name = names.constructor_initialize(constructor.index).cpp
    initializers = [
        f"{obj.base_class}({', '.join(moved(routing.base))})",
        f"m_rustObj({internals}::{new_name}({', '.join(moved(routing.new))}))",
        *member_initializers(obj),
    ]
    body = [f"{internals}::{initialize_name}({', '.join(['*this'] + moved(routing.initialize))});"]
    blocks.methods.append(
        CppFragment(
            header=f"explicit {cls}({params});",
            source=definition(None, f"{cls}::{cls}", params, body, initializers=initializers),
        )
    )
    return blocks


def generate_cpp_constructors(obj: ObjectDescription) -> GeneratedCppBlocks:
    if obj.has_default_constructor:
        return _default_constructor(obj)
    blocks = GeneratedCppBlocks()
    errors = ErrorCollector()
    for constructor in obj.constructors:
        with errors.collect():
            blocks.append(_constructor(obj, constructor))
    errors.raise_if_any()
    return blocks


__all__ = ["generate_cpp_constructors", "member_initializers"]
