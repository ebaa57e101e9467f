#!/usr/bin/env python3
"""
Fragment containers shared by the per-member generators.

A generator never writes a whole file. It returns blocks that the assembly step
(QObjectEmitter + templates) concatenates per object:

- CppFragment: one declaration, header-only or paired with an out-of-line definition
- GeneratedCppBlocks: includes, forward declarations, meta-object lines,
  public/private methods and data members of one C++ class
- GeneratedRustBlocks: items for the `#[cxx::bridge]` module and for the
  implementation module next to it

The small text helpers here keep the C++ layout uniform (return type on its own
line, two-space bodies) across generators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .. import syntax
from ..models import Parameter
from ..naming import cpp_safe, strip_raw

LOCK_GUARD = "const ::std::lock_guard<::std::recursive_mutex> guard(*m_rustObjMutex);"


# --------------------------
# Containers
# --------------------------

@dataclass
class CppFragment:
    header: str
    source: Optional[str] = None

    @property
    def header_only(self) -> bool:
        return self.source is None

    def to_dict(self) -> Dict:
        return {"header": self.header, "source": self.source}


@dataclass
class GeneratedCppBlocks:
    includes: List[str] = field(default_factory=list)
    forward_declares: List[str] = field(default_factory=list)
    metaobjects: List[str] = field(default_factory=list)
    methods: List[CppFragment] = field(default_factory=list)
    private_methods: List[CppFragment] = field(default_factory=list)
    members: List[str] = field(default_factory=list)

    def add_include(self, include: str) -> None:
        if include not in self.includes:
            self.includes.append(include)

    def append(self, other: "GeneratedCppBlocks") -> "GeneratedCppBlocks":
        for include in other.includes:
            self.add_include(include)
        self.forward_declares.extend(other.forward_declares)
        self.metaobjects.extend(other.metaobjects)
        self.methods.extend(other.methods)
        self.private_methods.extend(other.private_methods)
        self.members.extend(other.members)
        return self

    @property
    def definitions(self) -> List[str]:
        return [f.source for f in self.methods + self.private_methods if f.source is not None]

    def to_dict(self) -> Dict:
        return {
            "includes": list(self.includes),
            "forward_declares": list(self.forward_declares),
            "metaobjects": list(self.metaobjects),
            "methods": [f.to_dict() for f in self.methods],
            "private_methods": [f.to_dict() for f in self.private_methods],
            "members": list(self.members),
            "definitions": self.definitions,
        }


@dataclass
class GeneratedRustBlocks:
    cxx_mod_contents: List[str] = field(default_factory=list)
    implementation: List[str] = field(default_factory=list)

    def append(self, other: "GeneratedRustBlocks") -> "GeneratedRustBlocks":
        self.cxx_mod_contents.extend(other.cxx_mod_contents)
        self.implementation.extend(other.implementation)
        return self

    def to_dict(self) -> Dict:
        return {"cxx_mod_contents": list(self.cxx_mod_contents), "implementation": list(self.implementation)}


# --------------------------
# C++ text helpers
# --------------------------

def cpp_parameters(parameters: Sequence[Parameter], exposed: bool = True) -> str:
    """
    `::std::int32_t first, QColor const& second`
    """
    parts = []
    for p in parameters:
        ty = p.descriptor.exposed if exposed else p.descriptor.declared
        parts.append(f"{ty} {cpp_ident(p.ident)}")
    return ", ".join(parts)


def cpp_ident(ident: str) -> str:
    return cpp_safe(strip_raw(ident))


def is_by_value(cpp_type: str) -> bool:
    return not (cpp_type.endswith("&") or cpp_type.endswith("*"))


def forward_argument(name: str, cpp_type: str) -> str:
    return f"::std::move({name})" if is_by_value(cpp_type) else name


def convert(target: str, source: str, expr: str) -> str:
    """
    Wrap `expr` in a conversion when the exposed and declared types differ.
    """
    if target == source:
        return expr
    return f"::rust::cxxqtlib1::cxx_qt_convert<{target}, {source}>{{}}({expr})"


def definition(
    return_type: Optional[str],
    qualified_name: str,
    parameters: str,
    body: Iterable[str],
    const: bool = False,
    initializers: Sequence[str] = (),
) -> str:
    """
    Out-of-line definition in the layout the rest of the generated source uses:

        R
        Class::name(params) const
        {
          body;
        }

    `return_type` is None for constructors and destructors.
    """
    lines: List[str] = []
    if return_type is not None:
        lines.append(return_type)
    lines.append(f"{qualified_name}({parameters}){' const' if const else ''}")
    for index, init in enumerate(initializers):
        lines.append(f"  {':' if index == 0 else ','} {init}")
    lines.append("{")
    for line in body:
        lines.extend(f"  {part}" if part else "" for part in line.split("\n"))
    lines.append("}")
    return "\n".join(lines)


# --------------------------
# Rust text helpers
# --------------------------

def doc_attributes(*lines: str) -> List[str]:
    out = []
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        out.append(f'#[doc = "{escaped}"]')
    return out


def rust_block(header: str, lines: Iterable[str]) -> str:
    """
    `header { ... }` with each (possibly multi-line) entry indented by four spaces.
    """
    body = [syntax.indent_lines(line) for line in lines]
    if not body:
        return f"{header} {{}}"
    return header + " {\n" + "\n".join(body) + "\n}"


def rust_parameters(parameters: Sequence[Parameter]) -> str:
    return ", ".join(f"{p.ident}: {p.ty.to_rust()}" for p in parameters)


def rust_return(ty: Optional[syntax.Type]) -> str:
    if ty is None or (isinstance(ty, syntax.TypeTuple) and ty.is_unit):
        return ""
    return f" -> {ty.to_rust()}"


__all__ = [
    "LOCK_GUARD",
    "CppFragment",
    "GeneratedCppBlocks",
    "GeneratedRustBlocks",
    "cpp_parameters",
    "cpp_ident",
    "is_by_value",
    "forward_argument",
    "convert",
    "definition",
    "doc_attributes",
    "rust_block",
    "rust_parameters",
    "rust_return",
]
