#!/usr/bin/env python3
"""
Naming subsystem.

Every identifier the generators emit for a member is derived here exactly once
and stored on the IR member as a frozen NameSet, so the Rust bridge and the C++
glue always agree on the spelling:

- PropertyNames: getter/setter/notify and their wrappers
- SignalNames: emission, connect, on_ helper, handler/closure types
- MethodNames: invokables and inherited methods with their wrappers
- QObjectNames: class, Rust alias, internal namespace, thread and factory names

`Name` pairs the Rust spelling with the C++ spelling of one entity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING
import logging
import re

from .errors import GeneratorErrorGroup, StructuringError

if TYPE_CHECKING:  # pragma: no cover
    from .models import ObjectDescription
    from .syntax import Span

logger = logging.getLogger(__name__)

CPP_KEYWORDS = frozenset(
    """
    alignas alignof and and_eq asm auto bitand bitor bool break case catch char char8_t
    char16_t char32_t class compl concept const consteval constexpr constinit const_cast
    continue co_await co_return co_yield decltype default delete do double dynamic_cast
    else enum explicit export extern false float for friend goto if inline int long
    mutable namespace new noexcept not not_eq nullptr operator or or_eq private protected
    public register reinterpret_cast requires return short signed sizeof static
    static_assert static_cast struct switch template this thread_local throw true try
    typedef typeid typename union unsigned using virtual void volatile wchar_t while xor
    xor_eq
    """.split()
)

# Strict and reserved words; `crate`, `self`, `super` and `Self` cannot be raw
# identifiers.
RUST_KEYWORDS = frozenset(
    """
    abstract as async await become box break const continue do dyn else enum extern
    false final fn for gen if impl in let loop macro match mod move mut override priv
    pub ref return static struct trait true try type typeof unsafe unsized use virtual
    where while yield
    """.split()
)

# --------------------------
# Casing helpers
# --------------------------

def snake_to_camel(name: str) -> str:
    """
    `data_changed` -> `dataChanged`. Leading underscores are preserved.
    """
    stripped = name.lstrip("_")
    prefix = name[: len(name) - len(stripped)]
    parts = [p for p in stripped.split("_") if p]
    if not parts:
        return name
    return prefix + parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


def camel_to_snake(name: str) -> str:
    """
    `MyObject` -> `my_object`, `HTTPServer` -> `http_server`.
    """
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def cpp_safe(name: str) -> str:
    """
    Append `_` to identifiers that are C++ keywords.
    """
    return f"{name}_" if name in CPP_KEYWORDS else name


def strip_raw(name: str) -> str:
    return name[2:] if name.startswith("r#") else name


def rust_safe(name: str) -> str:
    """
    Re-add the `r#` prefix to identifiers that are Rust keywords.
    """
    return f"r#{name}" if name in RUST_KEYWORDS else name


# --------------------------
# NameSets
# --------------------------

@dataclass(frozen=True)
class Name:
    rust: str
    cpp: str

    def to_dict(self) -> Dict[str, str]:
        return {"rust": self.rust, "cpp": self.cpp}


@dataclass(frozen=True)
class PropertyNames:
    name: Name
    getter: Name
    getter_wrapper: Name
    setter: Name
    setter_wrapper: Name
    notify: Name
    mutable_accessor: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name.to_dict(),
            "getter": self.getter.to_dict(),
            "getter_wrapper": self.getter_wrapper.to_dict(),
            "setter": self.setter.to_dict(),
            "setter_wrapper": self.setter_wrapper.to_dict(),
            "notify": self.notify.to_dict(),
            "mutable_accessor": self.mutable_accessor,
        }


@dataclass(frozen=True)
class SignalNames:
    name: Name
    connect: Name
    on_helper: str
    handler_type: str
    closure_type: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name.to_dict(),
            "connect": self.connect.to_dict(),
            "on_helper": self.on_helper,
            "handler_type": self.handler_type,
            "closure_type": self.closure_type,
        }


@dataclass(frozen=True)
class MethodNames:
    name: Name
    wrapper: Name

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name.to_dict(), "wrapper": self.wrapper.to_dict()}


@dataclass(frozen=True)
class QObjectNames:
    ident: str
    namespace: str
    cpp_class: Name
    rust_struct: Name
    internals_namespace: str
    thread_class: str
    thread_queued_fn: str
    create_rs: Name
    new_cpp_object: Name
    rust_accessor: Name
    rust_mut_accessor: Name
    qt_thread: Name

    @property
    def qualified_cpp_class(self) -> str:
        """`::cxx_qt::my_object::MyObject`"""
        if self.namespace:
            return f"::{self.namespace}::{self.cpp_class.cpp}"
        return f"::{self.cpp_class.cpp}"

    @property
    def qualified_internals_namespace(self) -> str:
        return f"::{self.internals_namespace}"

    def constructor_new(self, index: int) -> Name:
        return Name(rust=f"new_rs_{camel_to_snake(self.ident)}_{index}", cpp=f"newRs{index}")

    def constructor_initialize(self, index: int) -> Name:
        return Name(rust=f"initialize_{camel_to_snake(self.ident)}_{index}", cpp=f"initialize{index}")

    def to_dict(self) -> Dict[str, object]:
        return {
            "ident": self.ident,
            "namespace": self.namespace,
            "cpp_class": self.cpp_class.to_dict(),
            "rust_struct": self.rust_struct.to_dict(),
            "internals_namespace": self.internals_namespace,
            "thread_class": self.thread_class,
            "qualified_cpp_class": self.qualified_cpp_class,
        }


def property_names(ident: str, cxx_name: Optional[str] = None) -> PropertyNames:
    rust = strip_raw(ident)
    cpp = cxx_name or snake_to_camel(rust)
    return PropertyNames(
        name=Name(rust=rust_safe(rust), cpp=cpp_safe(cpp)),
        getter=Name(rust=rust_safe(rust), cpp=f"get{upper_first(cpp)}"),
        getter_wrapper=Name(rust=rust_safe(rust), cpp=f"get{upper_first(cpp)}Wrapper"),
        setter=Name(rust=f"set_{rust}", cpp=f"set{upper_first(cpp)}"),
        setter_wrapper=Name(rust=f"set_{rust}", cpp=f"set{upper_first(cpp)}Wrapper"),
        notify=Name(rust=f"{rust}_changed", cpp=f"{cpp}Changed"),
        mutable_accessor=f"{rust}_mut",
    )


def signal_names(
    ident: str,
    object_names: QObjectNames,
    cxx_name: Optional[str] = None,
    rust_name: Optional[str] = None,
) -> SignalNames:
    rust = rust_name or strip_raw(ident)
    cpp = cpp_safe(cxx_name or snake_to_camel(rust))
    owner = object_names.cpp_class.cpp
    return SignalNames(
        name=Name(rust=rust_safe(rust), cpp=cpp),
        connect=Name(rust=f"connect_{rust}", cpp=f"{cpp}Connect"),
        on_helper=f"on_{rust}",
        handler_type=f"{owner}CxxQtSignalHandler{cpp}",
        closure_type=f"{owner}CxxQtSignalClosure{cpp}",
    )


def invokable_names(ident: str, cxx_name: Optional[str] = None, rust_name: Optional[str] = None) -> MethodNames:
    rust = rust_name or strip_raw(ident)
    cpp = cpp_safe(cxx_name or snake_to_camel(rust))
    return MethodNames(
        name=Name(rust=rust_safe(rust), cpp=cpp),
        wrapper=Name(rust=rust_safe(rust), cpp=f"{cpp}Wrapper"),
    )


def inherited_method_names(ident: str, cxx_name: Optional[str] = None, rust_name: Optional[str] = None) -> MethodNames:
    rust = rust_name or strip_raw(ident)
    cpp = cxx_name or snake_to_camel(rust)
    return MethodNames(
        name=Name(rust=rust_safe(rust), cpp=cpp),
        wrapper=Name(rust=rust_safe(rust), cpp=f"{cpp}CxxQtInherit"),
    )


def qobject_names(ident: str, namespace: str = "") -> QObjectNames:
    snake = camel_to_snake(ident)
    internals = f"cxx_qt_{snake}"
    return QObjectNames(
        ident=ident,
        namespace=namespace,
        cpp_class=Name(rust=f"{ident}Qt", cpp=cpp_safe(ident)),
        rust_struct=Name(rust=ident, cpp=f"{ident}Rust"),
        internals_namespace=f"{namespace}::{internals}" if namespace else internals,
        thread_class=f"{ident}CxxQtThread",
        thread_queued_fn=f"{ident}CxxQtThreadQueuedFn",
        create_rs=Name(rust=f"create_rs_{snake}", cpp="createRs"),
        new_cpp_object=Name(rust=f"new_cpp_object_{snake}_qt", cpp="newCppObject"),
        rust_accessor=Name(rust="cxx_qt_ffi_rust", cpp="unsafeRust"),
        rust_mut_accessor=Name(rust="cxx_qt_ffi_rust_mut", cpp="unsafeRustMut"),
        qt_thread=Name(rust="cxx_qt_ffi_qt_thread", cpp="qtThread"),
    )


# --------------------------
# Collisions
# --------------------------

def _claims(obj: "ObjectDescription") -> Iterable[Tuple[str, str, str, Optional["Span"]]]:
    """
    Yield (language, identifier, owner description, span) for every generated member.
    """
    names = obj.names
    yield "cpp", names.rust_accessor.cpp, "the object accessors", None
    yield "cpp", names.rust_mut_accessor.cpp, "the object accessors", None
    if obj.threading:
        yield "cpp", names.qt_thread.cpp, "threading", None
    for prop in obj.properties:
        owner = f"property `{prop.ident}`"
        p = prop.names
        yield "cpp", p.getter.cpp, owner, prop.span
        yield "cpp", p.getter_wrapper.cpp, owner, prop.span
        yield "rust", p.getter.rust, owner, prop.span
        if prop.flags.writable:
            yield "cpp", p.setter.cpp, owner, prop.span
            yield "cpp", p.setter_wrapper.cpp, owner, prop.span
            yield "rust", p.setter.rust, owner, prop.span
            yield "rust", p.mutable_accessor, owner, prop.span
        if prop.flags.notify:
            yield "cpp", p.notify.cpp, owner, prop.span
            yield "rust", p.notify.rust, owner, prop.span
    for signal in obj.signals:
        owner = f"signal `{signal.ident}`"
        s = signal.names
        if not signal.inherit:
            yield "cpp", s.name.cpp, owner, signal.span
        yield "rust", s.name.rust, owner, signal.span
        yield "cpp", s.connect.cpp, owner, signal.span
        yield "rust", s.connect.rust, owner, signal.span
        yield "rust", s.on_helper, owner, signal.span
    for invokable in obj.invokables:
        owner = f"invokable `{invokable.ident}`"
        yield "cpp", invokable.names.name.cpp, owner, invokable.span
        yield "cpp", invokable.names.wrapper.cpp, owner, invokable.span
    for method in obj.inherited_methods:
        owner = f"inherited method `{method.ident}`"
        yield "cpp", method.names.wrapper.cpp, owner, method.span
        yield "rust", method.names.name.rust, owner, method.span


def check_collisions(obj: "ObjectDescription") -> None:
    """
    Raise StructuringError if two members of one object derive the same identifier.
    """
    seen: Dict[Tuple[str, str], str] = {}
    errors: List[StructuringError] = []
    for language, identifier, owner, span in _claims(obj):
        key = (language, identifier)
        previous = seen.get(key)
        if previous is not None and previous != owner:
            lang = "C++" if language == "cpp" else "Rust"
            errors.append(
                StructuringError(
                    f"{lang} identifier `{identifier}` of `{obj.ident}` is generated by both {previous} and {owner}",
                    span if span is not None else obj.span,
                )
            )
            continue
        seen[key] = owner
    if errors:
        raise errors[0] if len(errors) == 1 else GeneratorErrorGroup(errors)


__all__ = [
    "CPP_KEYWORDS",
    "RUST_KEYWORDS",
    "Name",
    "PropertyNames",
    "SignalNames",
    "MethodNames",
    "QObjectNames",
    "snake_to_camel",
    "camel_to_snake",
    "upper_first",
    "cpp_safe",
    "rust_safe",
    "strip_raw",
    "property_names",
    "signal_names",
    "invokable_names",
    "inherited_method_names",
    "qobject_names",
    "check_collisions",
]
