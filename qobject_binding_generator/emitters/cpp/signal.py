#!/usr/bin/env python3
"""
C++ fragments for signals declared in `extern "RustQt"` blocks.

A new signal gets a `Q_SIGNAL` declaration; an `#[inherit]` signal already exists
on the base class and only gets the connect helper. The connect helper wraps the
Rust function pointer in a lambda that takes the object lock (when locking is
enabled) and forwards every parameter by move after the receiver.
"""

from __future__ import annotations

from typing import Sequence
import logging

from ...errors import ErrorCollector
from ...models import Signal
from ...naming import QObjectNames
from ..fragments import LOCK_GUARD, CppFragment, GeneratedCppBlocks, cpp_ident, cpp_parameters, definition

logger = logging.getLogger(__name__)

CONNECTION_INCLUDES = ('"cxx-qt-lib/qt.h"', '"cxx-qt-lib/qmetaobjectconnection.h"')


def _generate(signal: Signal, qobject: QObjectNames, locking: bool) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    for include in CONNECTION_INCLUDES:
        blocks.add_include(include)

    names = signal.names
    cls = qobject.cpp_class.cpp
    params = cpp_parameters(signal.parameters)
    fn_params = ", ".join([f"{cls}&"] + [f"{p.descriptor.exposed} {cpp_ident(p.ident)}" for p in signal.parameters])
    fn_type = f"::rust::Fn<void({fn_params})>"
    forwarded = ", ".join(["*this"] + [f"::std::move({cpp_ident(p.ident)})" for p in signal.parameters])

    if not signal.inherit:
        blocks.methods.append(CppFragment(header=f"Q_SIGNAL void {names.name.cpp}({params});"))

    lambda_body = ([LOCK_GUARD] if locking else []) + [f"func({forwarded});"]
    lambda_lines = [f"[&, func = ::std::move(func)]({params}) {{"]
    lambda_lines += [f"  {line}" for line in lambda_body]
    lambda_lines.append("},")
    body = [
        "return ::QObject::connect(",
        "  this,",
        f"  &{cls}::{names.name.cpp},",
        "  this,",
        *[f"  {line}" for line in lambda_lines],
        "  type);",
    ]
    blocks.methods.append(
        CppFragment(
            header=f"::QMetaObject::Connection {names.connect.cpp}({fn_type} func, ::Qt::ConnectionType type);",
            source=definition(
                "::QMetaObject::Connection",
                f"{cls}::{names.connect.cpp}",
                f"{fn_type} func, ::Qt::ConnectionType type",
                body,
            ),
        )
    )
    return blocks


def generate_cpp_signals(signals: Sequence[Signal], qobject: QObjectNames, locking: bool = True) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    errors = ErrorCollector()
    for signal in signals:
        with errors.collect():
            blocks.append(_generate(signal, qobject, locking))
    errors.raise_if_any()
    return blocks


__all__ = ["CONNECTION_INCLUDES", "generate_cpp_signals"]
