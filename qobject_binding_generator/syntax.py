#!/usr/bin/env python3
"""
Syntax tree for the subset of Rust that bridge modules are written in.

This module provides the input contract of the structuring layer:
- Spans (line/column) used by every diagnostic
- Attributes with structured meta arguments
- Types (paths, references, pointers, tuples, slices, bare fns)
- Function signatures with receivers
- Items: modules, structs, impl blocks, foreign blocks and verbatim items

Nodes can be produced by the text front end (parsing/rust_parser.py) or built
directly by callers. Every node renders itself back to Rust with `to_rust()` so
that passthrough items can be re-emitted after annotations are stripped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union
import re
import textwrap

# --------------------------
# Spans
# --------------------------

@dataclass(frozen=True)
class Span:
    """
    Location of a construct in the source text. Lines and columns are 1-based;
    `start`/`end` are character offsets into the text. A zero line means unknown.
    """
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0
    start: int = 0
    end: int = 0

    @staticmethod
    def from_meta(meta) -> Span:
        """
        Build a Span from a lark node meta (missing positions become zero).
        """
        return Span(
            line=getattr(meta, "line", 0) or 0,
            column=getattr(meta, "column", 0) or 0,
            end_line=getattr(meta, "end_line", 0) or 0,
            end_column=getattr(meta, "end_column", 0) or 0,
            start=getattr(meta, "start_pos", 0) or 0,
            end=getattr(meta, "end_pos", 0) or 0,
        )

    @property
    def known(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


UNKNOWN_SPAN = Span()


def indent_lines(text: str, width: int = 4) -> str:
    pad = " " * width
    return "\n".join(pad + line if line.strip() else "" for line in text.splitlines())


# --------------------------
# Literals, meta and attributes
# --------------------------

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}
_INT_SUFFIX = re.compile(r"[iu](?:8|16|32|64|128|size)$")
_FLOAT_SUFFIX = re.compile(r"f(?:32|64)$")


def unescape_string(raw: str) -> str:
    """
    Decode the contents of a (possibly raw) Rust string literal token.
    """
    if raw.startswith("r"):
        body = raw[1:].strip("#")
        return body[1:-1]
    body = raw[1:-1]
    out: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass
class Lit:
    """
    A literal inside attribute arguments. `kind` is one of str/int/float/bool/char.
    """
    kind: str
    raw: str
    span: Span = UNKNOWN_SPAN

    @property
    def value(self) -> Union[str, int, float, bool]:
        if self.kind == "str":
            return unescape_string(self.raw)
        if self.kind == "bool":
            return self.raw == "true"
        if self.kind == "int":
            text = _INT_SUFFIX.sub("", self.raw.replace("_", ""))
            return int(text, 0) if text[:2].lower() in ("0x", "0o", "0b") else int(text)
        if self.kind == "float":
            return float(_FLOAT_SUFFIX.sub("", self.raw.replace("_", "")))
        return self.raw

    def to_rust(self) -> str:
        return self.raw


@dataclass
class Meta:
    """
    Structured attribute argument, mirroring `#[path]`, `#[path = lit]` and
    `#[path(items, ...)]`.
    """
    path: Tuple[str, ...]
    kind: str = "word"  # "word" | "name_value" | "list"
    value: Optional[Lit] = None
    items: List[Union["Meta", Lit]] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    @property
    def name(self) -> str:
        return "::".join(self.path)

    def is_path(self, *candidates: str) -> bool:
        return self.name in candidates

    def to_rust(self) -> str:
        if self.kind == "name_value" and self.value is not None:
            return f"{self.name} = {self.value.to_rust()}"
        if self.kind == "list":
            return f"{self.name}({', '.join(item.to_rust() for item in self.items)})"
        return self.name


@dataclass
class Attribute:
    meta: Meta
    inner: bool = False
    span: Span = UNKNOWN_SPAN

    @property
    def path(self) -> str:
        return self.meta.name

    def to_rust(self) -> str:
        bang = "!" if self.inner else ""
        return f"#{bang}[{self.meta.to_rust()}]"


def render_attributes(attrs: Sequence[Attribute]) -> str:
    return "".join(attr.to_rust() + "\n" for attr in attrs)


@dataclass
class Visibility:
    """
    Visibility qualifier as written. Only plain `pub` counts as public.
    """
    text: str = "pub"
    span: Span = UNKNOWN_SPAN

    @property
    def is_public(self) -> bool:
        return self.text == "pub"


# --------------------------
# Types
# --------------------------

class Type:
    """
    Base class of type nodes.
    """
    span: Span

    def to_rust(self) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_rust()


@dataclass
class Lifetime:
    name: str
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        return self.name


@dataclass
class AssocBinding:
    """`Item = Type` inside angle-bracketed generic arguments."""
    ident: str
    ty: Type
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        return f"{self.ident} = {self.ty.to_rust()}"


GenericArgument = Union[Type, Lifetime, AssocBinding]


@dataclass
class PathArguments:
    kind: str  # "angle" | "paren"
    args: List[GenericArgument] = field(default_factory=list)
    output: Optional[Type] = None

    def to_rust(self) -> str:
        if self.kind == "paren":
            inner = f"({', '.join(a.to_rust() for a in self.args)})"
            return inner + (f" -> {self.output.to_rust()}" if self.output is not None else "")
        return f"<{', '.join(a.to_rust() for a in self.args)}>"


@dataclass
class PathSegment:
    ident: str
    arguments: Optional[PathArguments] = None

    def to_rust(self) -> str:
        return self.ident + (self.arguments.to_rust() if self.arguments is not None else "")


@dataclass
class TypePath(Type):
    segments: List[PathSegment]
    leading_colon: bool = False
    span: Span = UNKNOWN_SPAN

    @property
    def idents(self) -> List[str]:
        return [seg.ident for seg in self.segments]

    @property
    def plain(self) -> str:
        """Joined path without generic arguments."""
        return ("::" if self.leading_colon else "") + "::".join(self.idents)

    @property
    def last(self) -> PathSegment:
        return self.segments[-1]

    def is_ident(self, name: str) -> bool:
        return len(self.segments) == 1 and self.segments[0].ident == name and self.segments[0].arguments is None

    def to_rust(self) -> str:
        prefix = "::" if self.leading_colon else ""
        return prefix + "::".join(seg.to_rust() for seg in self.segments)


@dataclass
class TypeReference(Type):
    elem: Type
    mutable: bool = False
    lifetime: Optional[str] = None
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        lifetime = f"{self.lifetime} " if self.lifetime else ""
        mut = "mut " if self.mutable else ""
        return f"&{lifetime}{mut}{self.elem.to_rust()}"


@dataclass
class TypePtr(Type):
    elem: Type
    mutable: bool = False
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        return f"*{'mut' if self.mutable else 'const'} {self.elem.to_rust()}"


@dataclass
class TypeTuple(Type):
    elems: List[Type] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    @property
    def is_unit(self) -> bool:
        return not self.elems

    def to_rust(self) -> str:
        return render_tuple([e.to_rust() for e in self.elems])


@dataclass
class TypeSlice(Type):
    elem: Type
    length: Optional[str] = None
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        if self.length is not None:
            return f"[{self.elem.to_rust()}; {self.length}]"
        return f"[{self.elem.to_rust()}]"


@dataclass
class TypeBareFn(Type):
    params: List[Tuple[Optional[str], Type]] = field(default_factory=list)
    output: Optional[Type] = None
    unsafe: bool = False
    abi: Optional[str] = None
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        head = ("unsafe " if self.unsafe else "") + (f'extern "{self.abi}" ' if self.abi is not None else "")
        params = ", ".join(f"{name}: {ty.to_rust()}" if name else ty.to_rust() for name, ty in self.params)
        ret = f" -> {self.output.to_rust()}" if self.output is not None else ""
        return f"{head}fn({params}){ret}"


@dataclass
class TypeTraitObject(Type):
    """`dyn Trait + Send` or `impl Trait`; bounds are kept as source text."""
    keyword: str
    bounds: List[str] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        return f"{self.keyword} {' + '.join(self.bounds)}"


def render_tuple(parts: Sequence[str]) -> str:
    if len(parts) == 1:
        return f"({parts[0]},)"
    return f"({', '.join(parts)})"


def unwrap_pin(ty: Type) -> Type:
    """
    `Pin<T>` -> `T`; any other type is returned unchanged.
    """
    if isinstance(ty, TypePath) and ty.last.ident == "Pin" and ty.last.arguments is not None:
        args = [a for a in ty.last.arguments.args if isinstance(a, Type)]
        if len(args) == 1:
            return args[0]
    return ty


# --------------------------
# Functions
# --------------------------

@dataclass
class Receiver:
    """
    The `self` argument: `self`, `mut self`, `&self`, `&mut self`, `self: T`.
    """
    reference: bool = False
    mutable_ref: bool = False
    mut_binding: bool = False
    ty: Optional[Type] = None
    lifetime: Optional[str] = None
    attrs: List[Attribute] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    @property
    def is_mutable(self) -> bool:
        """
        Whether the receiver grants mutable access (`&mut self` or `Pin<&mut T>`).
        """
        if self.ty is None:
            return self.reference and self.mutable_ref
        inner = unwrap_pin(self.ty)
        return isinstance(inner, TypeReference) and inner.mutable

    @property
    def is_reference(self) -> bool:
        if self.ty is None:
            return self.reference
        return isinstance(unwrap_pin(self.ty), TypeReference)

    @property
    def is_pinned(self) -> bool:
        return self.ty is not None and unwrap_pin(self.ty) is not self.ty

    @property
    def self_path(self) -> Optional[TypePath]:
        """
        The path the receiver refers to (`qobject::MyObject` in
        `self: Pin<&mut qobject::MyObject>`), or None for shorthand receivers.
        """
        if self.ty is None:
            return None
        inner = unwrap_pin(self.ty)
        if isinstance(inner, TypeReference):
            inner = inner.elem
        return inner if isinstance(inner, TypePath) else None

    def to_rust(self) -> str:
        if self.ty is not None:
            return f"{'mut ' if self.mut_binding else ''}self: {self.ty.to_rust()}"
        if self.reference:
            lifetime = f"{self.lifetime} " if self.lifetime else ""
            return f"&{lifetime}{'mut ' if self.mutable_ref else ''}self"
        return f"{'mut ' if self.mut_binding else ''}self"


@dataclass
class TypedArg:
    ident: str
    ty: Type
    mut_binding: bool = False
    attrs: List[Attribute] = field(default_factory=list)
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        return f"{'mut ' if self.mut_binding else ''}{self.ident}: {self.ty.to_rust()}"


FnArg = Union[Receiver, TypedArg]


@dataclass
class Signature:
    ident: str
    inputs: List[FnArg] = field(default_factory=list)
    output: Optional[Type] = None
    unsafe: bool = False
    constness: bool = False
    asyncness: bool = False
    abi: Optional[str] = None
    generics: Optional[str] = None
    where_clause: Optional[str] = None
    span: Span = UNKNOWN_SPAN

    @property
    def receiver(self) -> Optional[Receiver]:
        if self.inputs and isinstance(self.inputs[0], Receiver):
            return self.inputs[0]
        return None

    @property
    def typed_args(self) -> List[TypedArg]:
        return [arg for arg in self.inputs if isinstance(arg, TypedArg)]

    def to_rust(self) -> str:
        head = ""
        if self.constness:
            head += "const "
        if self.asyncness:
            head += "async "
        if self.unsafe:
            head += "unsafe "
        if self.abi is not None:
            head += f'extern "{self.abi}" '
        args = ", ".join(arg.to_rust() for arg in self.inputs)
        ret = f" -> {self.output.to_rust()}" if self.output is not None else ""
        where = f" {self.where_clause}" if self.where_clause else ""
        return f"{head}fn {self.ident}{self.generics or ''}({args}){ret}{where}"


# --------------------------
# Items
# --------------------------

@dataclass
class Field:
    ident: Optional[str]
    ty: Type
    attrs: List[Attribute] = field(default_factory=list)
    vis: Optional[Visibility] = None
    span: Span = UNKNOWN_SPAN

    def to_rust(self) -> str:
        vis = f"{self.vis.text} " if self.vis is not None else ""
        name = f"{self.ident}: " if self.ident is not None else ""
        return f"{render_attributes(self.attrs)}{vis}{name}{self.ty.to_rust()}"


@dataclass
class Item:
    """
    Base of every item. `source` is the item's normalized text without its outer
    attributes; it is what passthrough emission re-uses verbatim.
    """
    attrs: List[Attribute] = field(default_factory=list)
    vis: Optional[Visibility] = None
    source: str = ""
    span: Span = UNKNOWN_SPAN

    @property
    def is_public(self) -> bool:
        return self.vis is not None and self.vis.is_public

    def to_rust(self) -> str:
        return render_attributes(self.attrs) + self.source


@dataclass
class ItemStruct(Item):
    ident: str = ""
    style: str = "named"  # "named" | "tuple" | "unit"
    fields: List[Field] = field(default_factory=list)
    generics: Optional[str] = None
    where_clause: Optional[str] = None

    def to_rust(self) -> str:
        vis = f"{self.vis.text} " if self.vis is not None else ""
        head = f"{vis}struct {self.ident}{self.generics or ''}"
        where = f" {self.where_clause}" if self.where_clause else ""
        if self.style == "unit":
            body = f"{head}{where};"
        elif self.style == "tuple":
            fields = ", ".join(f.to_rust().replace("\n", " ") for f in self.fields)
            body = f"{head}({fields}){where};"
        elif self.fields:
            fields = "\n".join(indent_lines(f.to_rust() + ",") for f in self.fields)
            body = f"{head}{where} {{\n{fields}\n}}"
        else:
            body = f"{head}{where} {{}}"
        return render_attributes(self.attrs) + body


@dataclass
class ImplItem(Item):
    """
    Member of an impl block. `kind` is fn/type/const/macro.
    """
    kind: str = "fn"
    ident: Optional[str] = None
    sig: Optional[Signature] = None
    ty: Optional[Type] = None
    has_body: bool = True


@dataclass
class ItemImpl(Item):
    self_ty: Optional[Type] = None
    trait: Optional[TypePath] = None
    unsafe: bool = False
    negative: bool = False
    generics: Optional[str] = None
    where_clause: Optional[str] = None
    items: List[ImplItem] = field(default_factory=list)

    @property
    def trait_path(self) -> Optional[str]:
        return self.trait.plain if self.trait is not None else None

    def header(self) -> str:
        head = "unsafe " if self.unsafe else ""
        head += f"impl{self.generics or ''} "
        if self.trait is not None:
            head += ("!" if self.negative else "") + f"{self.trait.to_rust()} for "
        head += self.self_ty.to_rust() if self.self_ty is not None else ""
        if self.where_clause:
            head += f" {self.where_clause}"
        return head

    def to_rust(self) -> str:
        if not self.items:
            return f"{render_attributes(self.attrs)}{self.header()} {{}}"
        members = "\n".join(indent_lines(member.to_rust()) for member in self.items)
        return f"{render_attributes(self.attrs)}{self.header()} {{\n{members}\n}}"


@dataclass
class ForeignItem(Item):
    """
    Member of an `extern` block. `kind` is fn/type/macro. Type items may carry an
    `alias` (`type QPoint = cxx_qt_lib::QPoint;`).
    """
    kind: str = "fn"
    ident: Optional[str] = None
    sig: Optional[Signature] = None
    alias: Optional[Type] = None


@dataclass
class ItemForeignMod(Item):
    abi: str = "C"
    unsafe: bool = False
    items: List[ForeignItem] = field(default_factory=list)

    def header(self) -> str:
        return f'{"unsafe " if self.unsafe else ""}extern "{self.abi}"'

    def to_rust(self) -> str:
        if not self.items:
            return f"{render_attributes(self.attrs)}{self.header()} {{}}"
        members = "\n".join(indent_lines(member.to_rust()) for member in self.items)
        return f"{render_attributes(self.attrs)}{self.header()} {{\n{members}\n}}"


@dataclass
class ItemMod(Item):
    ident: str = ""
    items: Optional[List[Item]] = None
    inner_attrs: List[Attribute] = field(default_factory=list)


@dataclass
class ItemVerbatim(Item):
    """
    Any item the structuring layer never looks inside: use, fn, enum, type alias,
    const, static, trait and macro invocations.
    """
    kind: str = "use"
    ident: Optional[str] = None


@dataclass
class File:
    items: List[Item] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    text: str = ""


def normalize_source(text: str, column: int) -> str:
    """
    Dedent a multi-line slice whose first line started at `column` (1-based).
    """
    padded = " " * max(column - 1, 0) + text
    return textwrap.dedent(padded).strip("\n").rstrip()


__all__ = [
    "Span",
    "UNKNOWN_SPAN",
    "Lit",
    "Meta",
    "Attribute",
    "Visibility",
    "Type",
    "TypePath",
    "PathSegment",
    "PathArguments",
    "GenericArgument",
    "Lifetime",
    "AssocBinding",
    "TypeReference",
    "TypePtr",
    "TypeTuple",
    "TypeSlice",
    "TypeBareFn",
    "TypeTraitObject",
    "Receiver",
    "TypedArg",
    "FnArg",
    "Signature",
    "Field",
    "Item",
    "ItemStruct",
    "ImplItem",
    "ItemImpl",
    "ForeignItem",
    "ItemForeignMod",
    "ItemMod",
    "ItemVerbatim",
    "File",
    "render_attributes",
    "render_tuple",
    "indent_lines",
    "unwrap_pin",
    "unescape_string",
    "normalize_source",
]
