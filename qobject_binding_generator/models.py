#!/usr/bin/env python3
"""
Data models for the QObject binding generator.

This module provides the intermediate representation built by the structuring
layer and consumed by the fragment generators:
- TypeDescriptor: a declared type with its native mapping and optional override
- Member kinds: Property, Signal, Invokable, InheritedMethod, Constructor
- ObjectDescription: one annotated struct with all its members and policies
- NameMappings: the ordered internal-path -> exposed-name table
- BridgeModule: one bridge with its objects and passthrough items
- GenerationContext: paths and flags of a single run

Every model offers `to_dict()` so emitters, manifests and debug dumps can
serialize it without knowing its shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from . import syntax
from .naming import MethodNames, PropertyNames, QObjectNames, SignalNames
from .syntax import Span, UNKNOWN_SPAN

# --------------------------
# Types
# --------------------------

@dataclass(frozen=True)
class TypeDescriptor:
    """
    `rust` is the declared type as Rust source, `declared` its native mapping,
    `exposed` the explicit override (or `declared` when there is none).
    """
    rust: str
    declared: str
    exposed: str

    @property
    def overridden(self) -> bool:
        return self.exposed != self.declared

    def to_dict(self) -> Dict:
        return {"rust": self.rust, "declared": self.declared, "exposed": self.exposed}


@dataclass
class Parameter:
    ident: str
    ty: syntax.Type
    descriptor: TypeDescriptor
    span: Span = UNKNOWN_SPAN

    def to_dict(self) -> Dict:
        return {"ident": self.ident, "type": self.descriptor.to_dict()}


# --------------------------
# Members
# --------------------------

@dataclass(frozen=True)
class PropertyFlags:
    read_only: bool = False
    constant: bool = False
    no_notify: bool = False
    required: bool = False
    final: bool = False

    @property
    def writable(self) -> bool:
        return not (self.read_only or self.constant)

    @property
    def notify(self) -> bool:
        return not (self.no_notify or self.constant)

    def to_dict(self) -> Dict:
        return {
            "read_only": self.read_only,
            "constant": self.constant,
            "no_notify": self.no_notify,
            "required": self.required,
            "final": self.final,
            "writable": self.writable,
            "notify": self.notify,
        }


@dataclass
class Property:
    ident: str
    ty: syntax.Type
    descriptor: TypeDescriptor
    names: PropertyNames
    flags: PropertyFlags = field(default_factory=PropertyFlags)
    span: Span = UNKNOWN_SPAN

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "type": self.descriptor.to_dict(),
            "flags": self.flags.to_dict(),
            "names": self.names.to_dict(),
        }


@dataclass
class Signal:
    ident: str
    parameters: List[Parameter]
    names: SignalNames
    mutable: bool = True
    safe: bool = True
    inherit: bool = False
    docs: List[syntax.Attribute] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "parameters": [p.to_dict() for p in self.parameters],
            "mutable": self.mutable,
            "safe": self.safe,
            "inherit": self.inherit,
            "names": self.names.to_dict(),
        }


class InvokableSpecifier(Enum):
    FINAL = auto()
    OVERRIDE = auto()
    VIRTUAL = auto()


@dataclass
class Invokable:
    ident: str
    parameters: List[Parameter]
    names: MethodNames
    return_type: Optional[syntax.Type] = None
    return_descriptor: Optional[TypeDescriptor] = None
    mutable: bool = False
    safe: bool = True
    specifiers: Tuple[InvokableSpecifier, ...] = ()
    span: Span = UNKNOWN_SPAN

    def has(self, specifier: InvokableSpecifier) -> bool:
        return specifier in self.specifiers

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "parameters": [p.to_dict() for p in self.parameters],
            "return": self.return_descriptor.to_dict() if self.return_descriptor else None,
            "mutable": self.mutable,
            "safe": self.safe,
            "specifiers": [s.name.lower() for s in self.specifiers],
            "names": self.names.to_dict(),
        }


@dataclass
class InheritedMethod:
    ident: str
    parameters: List[Parameter]
    names: MethodNames
    return_type: Optional[syntax.Type] = None
    return_descriptor: Optional[TypeDescriptor] = None
    mutable: bool = False
    safe: bool = True
    span: Span = UNKNOWN_SPAN

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "parameters": [p.to_dict() for p in self.parameters],
            "return": self.return_descriptor.to_dict() if self.return_descriptor else None,
            "mutable": self.mutable,
            "safe": self.safe,
            "names": self.names.to_dict(),
        }


@dataclass(frozen=True)
class ConstructorRouting:
    """
    Indices into the declared argument tuple used by each group, in order.
    """
    base: Tuple[int, ...] = ()
    new: Tuple[int, ...] = ()
    initialize: Tuple[int, ...] = ()

    def to_dict(self) -> Dict:
        return {"base": list(self.base), "new": list(self.new), "initialize": list(self.initialize)}


@dataclass
class Constructor:
    arguments: List[syntax.Type]
    descriptors: List[TypeDescriptor]
    routing: ConstructorRouting
    new_arguments: List[syntax.Type] = field(default_factory=list)
    base_arguments: List[syntax.Type] = field(default_factory=list)
    initialize_arguments: List[syntax.Type] = field(default_factory=list)
    index: int = 0
    span: Span = UNKNOWN_SPAN

    @property
    def arguments_rust(self) -> str:
        """Declared argument tuple as Rust source, e.g. `(i32, QString)`."""
        return syntax.render_tuple([a.to_rust() for a in self.arguments])

    def to_dict(self) -> Dict:
        return {
            "index": self.index,
            "arguments": [d.to_dict() for d in self.descriptors],
            "routing": self.routing.to_dict(),
        }


# --------------------------
# Objects
# --------------------------

@dataclass(frozen=True)
class QmlElementMetadata:
    uri: str
    name: str
    version_major: int
    version_minor: int = 0
    uncreatable: bool = False
    singleton: bool = False

    @property
    def version(self) -> str:
        return f"{self.version_major}.{self.version_minor}"

    def to_dict(self) -> Dict:
        return {
            "uri": self.uri,
            "name": self.name,
            "version_major": self.version_major,
            "version_minor": self.version_minor,
            "uncreatable": self.uncreatable,
            "singleton": self.singleton,
        }


@dataclass
class ObjectDescription:
    ident: str
    names: QObjectNames
    struct: syntax.ItemStruct
    base_class: str = "QObject"
    qml: Optional[QmlElementMetadata] = None
    locking: bool = True
    threading: bool = False
    properties: List[Property] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)
    invokables: List[Invokable] = field(default_factory=list)
    inherited_methods: List[InheritedMethod] = field(default_factory=list)
    constructors: List[Constructor] = field(default_factory=list)
    passthrough_items: List[syntax.ImplItem] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    @property
    def namespace(self) -> str:
        return self.names.namespace

    @property
    def has_default_constructor(self) -> bool:
        return not self.constructors

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "names": self.names.to_dict(),
            "base_class": self.base_class,
            "qml": self.qml.to_dict() if self.qml else None,
            "locking": self.locking,
            "threading": self.threading,
            "properties": [p.to_dict() for p in self.properties],
            "signals": [s.to_dict() for s in self.signals],
            "invokables": [i.to_dict() for i in self.invokables],
            "inherited_methods": [m.to_dict() for m in self.inherited_methods],
            "constructors": [c.to_dict() for c in self.constructors],
            "passthrough_items": [item.ident for item in self.passthrough_items],
        }


# --------------------------
# Name mappings
# --------------------------

class NameMappings:
    """
    Ordered mapping from internal identifiers or qualified paths
    (`QColor`, `cxx_qt_lib::QPoint`) to exposed native names (`::QColor`).
    Later insertions of an existing key override earlier ones.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._entries: Dict[str, str] = {}
        if entries:
            self.update(entries)

    def insert(self, key: str, value: str) -> None:
        self._entries.pop(key, None)
        self._entries[key] = value

    def update(self, entries: Mapping[str, str]) -> None:
        for key, value in entries.items():
            self.insert(key, value)

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterable[Tuple[str, str]]:
        return self._entries.items()

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def __repr__(self) -> str:
        return f"NameMappings({self._entries!r})"


# --------------------------
# Bridge module
# --------------------------

@dataclass
class BridgeModule:
    """
    Result of structuring one `#[cxx_qt::bridge]` module.

    `bridge_items` are re-emitted inside the generated `#[cxx::bridge]` module,
    `implementation_items` in the implementation module next to it.
    `exported_mappings` lists the names this module defines for other modules.
    """
    ident: str
    namespace: str = ""
    cxx_file_stem: str = ""
    objects: List[ObjectDescription] = field(default_factory=list)
    mappings: NameMappings = field(default_factory=NameMappings)
    exported_mappings: NameMappings = field(default_factory=NameMappings)
    bridge_items: List[syntax.Item] = field(default_factory=list)
    implementation_items: List[syntax.Item] = field(default_factory=list)
    attrs: List[syntax.Attribute] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    @property
    def stem(self) -> str:
        return self.cxx_file_stem or self.ident

    @property
    def has_signals(self) -> bool:
        return any(obj.signals for obj in self.objects)

    @property
    def uses_qml(self) -> bool:
        return any(obj.qml is not None for obj in self.objects)

    def to_dict(self) -> Dict:
        return {
            "ident": self.ident,
            "namespace": self.namespace,
            "cxx_file_stem": self.stem,
            "objects": [o.to_dict() for o in self.objects],
            "mappings": self.mappings.to_dict(),
            "exported_mappings": self.exported_mappings.to_dict(),
        }


# --------------------------
# Generation context
# --------------------------

@dataclass(frozen=True)
class GenerationContext:
    """
    Parameters for a single generation run.

    Generated Rust and C++ sources go to `output_dir`; headers go to
    `include_dir/include_prefix` so they can be included as
    `#include "{include_prefix}/{stem}.cxxqt.h"`.
    """
    output_dir: Path
    include_dir: Path
    templates_dir: Optional[Path] = None
    include_prefix: str = "cxx-qt-gen"
    dry_run: bool = False

    @property
    def header_dir(self) -> Path:
        return self.include_dir / self.include_prefix if self.include_prefix else self.include_dir

    def to_dict(self) -> Dict:
        return {
            "output_dir": str(self.output_dir),
            "include_dir": str(self.include_dir),
            "templates_dir": str(self.templates_dir) if self.templates_dir else None,
            "include_prefix": self.include_prefix,
            "dry_run": self.dry_run,
        }


__all__ = [
    "TypeDescriptor",
    "Parameter",
    "PropertyFlags",
    "Property",
    "Signal",
    "InvokableSpecifier",
    "Invokable",
    "InheritedMethod",
    "ConstructorRouting",
    "Constructor",
    "QmlElementMetadata",
    "ObjectDescription",
    "NameMappings",
    "BridgeModule",
    "GenerationContext",
]
