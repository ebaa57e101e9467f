#!/usr/bin/env python3
"""
Per-object C++ assembly.

`generate_cpp_qobject(obj)` runs every member generator for one object and adds
the boilerplate each generated class carries:

- forward declaration (and the `XCxxQtThread` alias when threading is enabled)
- destructor, `unsafeRust()` / `unsafeRustMut()` accessors
- `qtThread()` and the guarded pointer that the destructor clears
- data members: the boxed Rust struct, its mutex and the thread guard
- QML registration macros

The result is a GeneratedCppQObject, ready for the header/source templates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from ...errors import ErrorCollector
from ...models import ObjectDescription
from ..fragments import CppFragment, GeneratedCppBlocks, definition
from .constructor import generate_cpp_constructors
from .inherit import generate_cpp_inherited_methods
from .invokable import generate_cpp_invokables
from .property import generate_cpp_properties
from .signal import generate_cpp_signals

logger = logging.getLogger(__name__)

THREAD_INCLUDE = '"cxx-qt-common/cxxqt_thread.h"'
QML_INCLUDE = "<QtQml/QQmlEngine>"


@dataclass
class GeneratedCppQObject:
    ident: str
    class_name: str
    namespace: str
    base_class: str
    internals_namespace: str
    qualified_class: str
    has_default_constructor: bool = True
    threading: bool = False
    qml: List[str] = field(default_factory=list)
    blocks: GeneratedCppBlocks = field(default_factory=GeneratedCppBlocks)

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "class_name": self.class_name,
            "namespace": self.namespace,
            "base_class": self.base_class,
            "internals_namespace": self.internals_namespace,
            "qualified_class": self.qualified_class,
            "has_default_constructor": self.has_default_constructor,
            "threading": self.threading,
            "qml": list(self.qml),
            "blocks": self.blocks.to_dict(),
        }


# --------------------------
# Boilerplate
# --------------------------

def qml_lines(obj: ObjectDescription) -> List[str]:
    if obj.qml is None:
        return []
    lines = [f"QML_NAMED_ELEMENT({obj.qml.name})"]
    if obj.qml.singleton:
        lines.append("QML_SINGLETON")
    if obj.qml.uncreatable:
        lines.append('QML_UNCREATABLE("Not creatable from QML")')
    return lines


def generate_cpp_base(obj: ObjectDescription) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    names = obj.names
    cls = names.cpp_class.cpp
    rust = names.rust_struct.cpp

    blocks.forward_declares.append(f"class {cls};")

    destructor_body: List[str] = []
    if obj.threading:
        destructor_body = [
            "const auto guard = ::std::unique_lock(m_cxxQtThreadObj->mutex);",
            "m_cxxQtThreadObj->ptr = nullptr;",
        ]
    blocks.methods.append(CppFragment(header=f"~{cls}();", source=definition(None, f"{cls}::~{cls}", "", destructor_body)))
    blocks.methods.append(
        CppFragment(
            header=f"{rust} const& {names.rust_accessor.cpp}() const;",
            source=definition(f"{rust} const&", f"{cls}::{names.rust_accessor.cpp}", "", ["return *m_rustObj;"], const=True),
        )
    )
    blocks.methods.append(
        CppFragment(
            header=f"{rust}& {names.rust_mut_accessor.cpp}();",
            source=definition(f"{rust}&", f"{cls}::{names.rust_mut_accessor.cpp}", "", ["return *m_rustObj;"]),
        )
    )

    blocks.members.append(f"::rust::Box<{rust}> m_rustObj;")
    if obj.locking:
        blocks.members.append("::std::shared_ptr<::std::recursive_mutex> m_rustObjMutex;")
    if obj.qml is not None:
        blocks.add_include(QML_INCLUDE)
    return blocks


def generate_cpp_threading(obj: ObjectDescription) -> GeneratedCppBlocks:
    blocks = GeneratedCppBlocks()
    if not obj.threading:
        return blocks
    names = obj.names
    cls = names.cpp_class.cpp
    thread = names.thread_class
    blocks.add_include(THREAD_INCLUDE)
    blocks.forward_declares.append(f"using {thread} = ::rust::cxxqtlib1::CxxQtThread<{cls}>;")
    blocks.methods.append(
        CppFragment(
            header=f"::std::unique_ptr<{thread}> {names.qt_thread.cpp}() const;",
            source=definition(
                f"::std::unique_ptr<{thread}>",
                f"{cls}::{names.qt_thread.cpp}",
                "",
                [f"return ::std::make_unique<{thread}>(m_cxxQtThreadObj, m_rustObjMutex);"],
                const=True,
            ),
        )
    )
    blocks.members.append(f"::std::shared_ptr<::rust::cxxqtlib1::CxxQtGuardedPointer<{cls}>> m_cxxQtThreadObj;")
    return blocks


# --------------------------
# Assembly
# --------------------------

def generate_cpp_qobject(obj: ObjectDescription) -> GeneratedCppQObject:
    """
    Generate every C++ fragment of one object. Errors of all members are
    collected and raised together.
    """
    names = obj.names
    blocks = GeneratedCppBlocks()
    errors = ErrorCollector()

    parts: List[Optional[GeneratedCppBlocks]] = []
    with errors.collect():
        parts.append(generate_cpp_constructors(obj))
    parts.append(generate_cpp_base(obj))
    with errors.collect():
        parts.append(generate_cpp_properties(obj.properties, names, obj.locking))
    with errors.collect():
        parts.append(generate_cpp_invokables(obj.invokables, names, obj.locking))
    with errors.collect():
        parts.append(generate_cpp_signals(obj.signals, names, obj.locking))
    with errors.collect():
        parts.append(generate_cpp_inherited_methods(obj.inherited_methods, obj.base_class))
    parts.append(generate_cpp_threading(obj))
    errors.raise_if_any()

    for part in parts:
        blocks.append(part)

    logger.debug("Generated %d C++ methods for %s", len(blocks.methods) + len(blocks.private_methods), obj.ident)
    return GeneratedCppQObject(
        ident=obj.ident,
        class_name=names.cpp_class.cpp,
        namespace=obj.namespace,
        base_class=obj.base_class,
        internals_namespace=names.internals_namespace,
        qualified_class=names.qualified_cpp_class,
        has_default_constructor=obj.has_default_constructor,
        threading=obj.threading,
        qml=qml_lines(obj),
        blocks=blocks,
    )


__all__ = [
    "GeneratedCppQObject",
    "generate_cpp_base",
    "generate_cpp_threading",
    "generate_cpp_qobject",
    "qml_lines",
]
