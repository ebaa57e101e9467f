#!/usr/bin/env python3
"""
Rust fragments for signals.

Bridge side: the C++ signal itself (callable from Rust to emit it) and its
connect helper taking a function pointer and a connection type. Implementation
side: the `on_` helper using `AutoConnection` plus the handler and closure type
aliases. The `ConnectionType`/`QMetaObjectConnection` declarations the connect
helpers need are emitted once per bridge by `connection_types()`.
"""

from __future__ import annotations

from typing import List, Sequence
import logging

from ...errors import ErrorCollector
from ...models import Signal
from ...naming import QObjectNames
from ..fragments import GeneratedRustBlocks, doc_attributes, rust_block, rust_parameters

logger = logging.getLogger(__name__)


def connection_types() -> str:
    return rust_block(
        'unsafe extern "C++"',
        [
            'include!("cxx-qt-lib/qt.h");',
            "#[doc(hidden)]",
            '#[namespace = "Qt"]',
            '#[rust_name = "CxxQtConnectionType"]',
            "type ConnectionType = cxx_qt_lib::ConnectionType;",
            'include!("cxx-qt-lib/qmetaobjectconnection.h");',
            "#[doc(hidden)]",
            '#[namespace = "rust::cxxqtlib1"]',
            '#[rust_name = "CxxQtQMetaObjectConnection"]',
            "type QMetaObjectConnection = cxx_qt_lib::QMetaObjectConnection;",
        ],
    )


def _connect_docs(signal: Signal) -> List[str]:
    return doc_attributes(
        "Connect the given function pointer to the signal ",
        signal.names.name.cpp,
        ", so that when the signal is emitted the function pointer is executed.",
    )


def _generate(signal: Signal, qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    names = signal.names
    qt = qobject.cpp_class.rust
    receiver = f"self: Pin<&mut {qt}>" if signal.mutable else f"self: &{qt}"
    params = rust_parameters(signal.parameters)
    args = ", ".join([receiver] + ([params] if params else []))
    handler_args = ", ".join([f"Pin<&mut {qt}>"] + [p.ty.to_rust() for p in signal.parameters])
    fn_pointer = f"fn({', '.join([f'Pin<&mut {qt}>'] + ([params] if params else []))})"

    emit = [a.to_rust() for a in signal.docs] + [f'#[cxx_name = "{names.name.cpp}"]']
    if signal.safe:
        emit.append(f"fn {names.name.rust}({args});")
        blocks.cxx_mod_contents.append(rust_block('unsafe extern "C++"', emit))
    else:
        emit.append(f"unsafe fn {names.name.rust}({args});")
        blocks.cxx_mod_contents.append(rust_block('extern "C++"', emit))

    blocks.cxx_mod_contents.append(
        rust_block(
            'unsafe extern "C++"',
            [
                *_connect_docs(signal),
                "#[must_use]",
                f'#[cxx_name = "{names.connect.cpp}"]',
                f"fn {names.connect.rust}(self: Pin<&mut {qt}>, func: {fn_pointer}, conn_type: CxxQtConnectionType) -> CxxQtQMetaObjectConnection;",
            ],
        )
    )

    blocks.implementation.append(
        "\n".join(["#[doc(hidden)]", f"pub type {names.handler_type} = fn({handler_args});"])
    )
    blocks.implementation.append(
        "\n".join(["#[doc(hidden)]", f"pub type {names.closure_type} = dyn FnMut({handler_args}) + Send;"])
    )
    blocks.implementation.append(
        rust_block(
            f"impl {qt}",
            [
                *_connect_docs(signal),
                *doc_attributes("\n", "Note that this method uses a AutoConnection connection type."),
                "#[must_use]",
                rust_block(
                    f"pub fn {names.on_helper}(self: Pin<&mut {qt}>, func: {names.handler_type}) -> CxxQtQMetaObjectConnection",
                    [f"self.{names.connect.rust}(func, CxxQtConnectionType::AutoConnection)"],
                ),
            ],
        )
    )
    return blocks


def generate_rust_signals(signals: Sequence[Signal], qobject: QObjectNames) -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    errors = ErrorCollector()
    for signal in signals:
        with errors.collect():
            blocks.append(_generate(signal, qobject))
    errors.raise_if_any()
    return blocks


__all__ = ["connection_types", "generate_rust_signals"]
