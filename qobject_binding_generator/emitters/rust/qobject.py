#!/usr/bin/env python3
"""
Per-object Rust assembly.

`generate_rust_qobject(obj, bridge_namespace)` runs every member generator for
one object and adds:

- the `XQt` C++ type and the `X` Rust type declarations
- `unsafeRust()`/`unsafeRustMut()` bindings with the `Deref` and
  `cxx_qt::CxxQtType` impls built on them
- `newCppObject()` for default-constructible objects
- the `cxx_qt::Threading` impl with its FIFO `queue` helper when enabled
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from ...errors import ErrorCollector
from ...models import ObjectDescription
from ..fragments import GeneratedRustBlocks, doc_attributes, rust_block
from .constructor import generate_rust_constructors
from .inherit import generate_rust_inherited_methods
from .invokable import generate_rust_invokables
from .property import generate_rust_properties
from .signal import generate_rust_signals

logger = logging.getLogger(__name__)


@dataclass
class GeneratedRustQObject:
    ident: str
    cpp_type: str
    blocks: GeneratedRustBlocks = field(default_factory=GeneratedRustBlocks)

    def to_dict(self) -> Dict:
        return {"ident": self.ident, "cpp_type": self.cpp_type, "blocks": self.blocks.to_dict()}


def _namespace_attr(obj: ObjectDescription, bridge_namespace: str) -> List[str]:
    if obj.namespace == bridge_namespace:
        return []
    return [f'#[namespace = "{obj.namespace}"]']


def generate_rust_base(obj: ObjectDescription, bridge_namespace: str = "") -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    names = obj.names
    qt = names.cpp_class.rust
    rust = names.rust_struct.rust
    ns = _namespace_attr(obj, bridge_namespace)

    blocks.cxx_mod_contents.append(
        rust_block(
            'unsafe extern "C++"',
            [
                *doc_attributes("The C++ type for the QObject ", obj.ident, "\n", "Use this type when referring to the QObject as a pointer"),
                f'#[cxx_name = "{names.cpp_class.cpp}"]',
                *ns,
                f"type {qt};",
            ],
        )
    )
    blocks.cxx_mod_contents.append(
        rust_block('extern "Rust"', [f'#[cxx_name = "{names.rust_struct.cpp}"]', *ns, f"type {rust};"])
    )
    blocks.cxx_mod_contents.append(
        rust_block(
            'unsafe extern "C++"',
            [
                "#[doc(hidden)]",
                f'#[cxx_name = "{names.rust_accessor.cpp}"]',
                f"fn {names.rust_accessor.rust}(self: &{qt}) -> &{rust};",
                "#[doc(hidden)]",
                f'#[cxx_name = "{names.rust_mut_accessor.cpp}"]',
                f"fn {names.rust_mut_accessor.rust}(self: Pin<&mut {qt}>) -> Pin<&mut {rust}>;",
            ],
        )
    )
    if obj.has_default_constructor:
        blocks.cxx_mod_contents.append(
            rust_block(
                'unsafe extern "C++"',
                [
                    *doc_attributes("Generated CXX-Qt method which creates a new", qt, "as a UniquePtr with no parent in Qt"),
                    f'#[cxx_name = "{names.new_cpp_object.cpp}"]',
                    f'#[namespace = "{names.internals_namespace}"]',
                    f"fn {names.new_cpp_object.rust}() -> UniquePtr<{qt}>;",
                ],
            )
        )

    blocks.implementation.append(
        rust_block(
            f"impl core::ops::Deref for {qt}",
            [f"type Target = {rust};", rust_block("fn deref(&self) -> &Self::Target", [f"self.{names.rust_accessor.rust}()"])],
        )
    )
    blocks.implementation.append(
        rust_block(
            f"impl cxx_qt::CxxQtType for {qt}",
            [
                f"type Rust = {rust};",
                rust_block("fn rust(&self) -> &Self::Rust", [f"self.{names.rust_accessor.rust}()"]),
                rust_block("fn rust_mut(self: Pin<&mut Self>) -> Pin<&mut Self::Rust>", [f"self.{names.rust_mut_accessor.rust}()"]),
            ],
        )
    )
    return blocks


def generate_rust_threading(obj: ObjectDescription, bridge_namespace: str = "") -> GeneratedRustBlocks:
    blocks = GeneratedRustBlocks()
    if not obj.threading:
        return blocks
    names = obj.names
    qt = names.cpp_class.rust
    thread = names.thread_class
    queued = names.thread_queued_fn

    blocks.cxx_mod_contents.append(
        rust_block(
            'unsafe extern "C++"',
            [
                "#[doc(hidden)]",
                *_namespace_attr(obj, bridge_namespace),
                f"type {thread};",
                "#[doc(hidden)]",
                f'#[cxx_name = "{names.qt_thread.cpp}"]',
                f"fn {names.qt_thread.rust}(self: &{qt}) -> UniquePtr<{thread}>;",
                "#[doc(hidden)]",
                '#[cxx_name = "queue"]',
                f"fn queue_boxed_fn(self: &{thread}, func: fn(Pin<&mut {qt}>, Box<{queued}>), arg: Box<{queued}>) -> Result<()>;",
            ],
        )
    )
    blocks.cxx_mod_contents.append(
        rust_block('extern "Rust"', [f'#[namespace = "{names.internals_namespace}"]', f"type {queued};"])
    )

    blocks.implementation.append(
        rust_block(
            f"impl cxx_qt::Threading for {qt}",
            [
                f"type Item = cxx::UniquePtr<{thread}>;",
                rust_block("fn qt_thread(&self) -> Self::Item", [f"self.{names.qt_thread.rust}()"]),
            ],
        )
    )
    blocks.implementation.append(
        "\n".join(
            [
                "#[doc(hidden)]",
                rust_block(f"pub struct {queued}", [f"inner: std::boxed::Box<dyn FnOnce(Pin<&mut {qt}>) + Send>,"]),
            ]
        )
    )
    queue_body = [
        "\n".join(
            [
                "#[allow(clippy::boxed_local)]",
                "#[doc(hidden)]",
                rust_block(f"fn func(obj: Pin<&mut {qt}>, arg: std::boxed::Box<{queued}>)", ["(arg.inner)(obj)"]),
            ]
        ),
        f"let arg = {queued} {{ inner: std::boxed::Box::new(f) }};",
        "self.queue_boxed_fn(func, std::boxed::Box::new(arg))",
    ]
    blocks.implementation.append(
        rust_block(
            f"impl {thread}",
            [
                *doc_attributes("Queue the given closure onto the Qt event loop of this QObject"),
                "\n".join(
                    [
                        "pub fn queue<F>(&self, f: F) -> std::result::Result<(), cxx::Exception>",
                        "where",
                        f"    F: FnOnce(Pin<&mut {qt}>),",
                        "    F: Send + 'static,",
                    ]
                )
                + "\n"
                + rust_block("", queue_body).lstrip(),
            ],
        )
    )
    return blocks


def generate_rust_qobject(obj: ObjectDescription, bridge_namespace: str = "") -> GeneratedRustQObject:
    """
    Generate every Rust fragment of one object. Errors of all members are
    collected and raised together.
    """
    names = obj.names
    errors = ErrorCollector()
    parts: List[Optional[GeneratedRustBlocks]] = [generate_rust_base(obj, bridge_namespace)]
    with errors.collect():
        parts.append(generate_rust_constructors(obj))
    with errors.collect():
        parts.append(generate_rust_properties(obj.properties, names))
    with errors.collect():
        parts.append(generate_rust_invokables(obj.invokables, names))
    with errors.collect():
        parts.append(generate_rust_signals(obj.signals, names))
    with errors.collect():
        parts.append(generate_rust_inherited_methods(obj.inherited_methods, names))
    parts.append(generate_rust_threading(obj, bridge_namespace))
    errors.raise_if_any()

    blocks = GeneratedRustBlocks()
    for part in parts:
        blocks.append(part)
    logger.debug("Generated %d bridge items for %s", len(blocks.cxx_mod_contents), obj.ident)
    return GeneratedRustQObject(ident=obj.ident, cpp_type=names.cpp_class.rust, blocks=blocks)


__all__ = ["GeneratedRustQObject", "generate_rust_base", "generate_rust_threading", "generate_rust_qobject"]
