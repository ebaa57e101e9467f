#!/usr/bin/env python3
"""
Text front end: parse bridge source into the syntax tree of `syntax.py`.

The grammar covers the item-level subset of Rust that bridge modules use:
- inner/outer attributes with structured meta arguments
- modules, structs, enums, impl blocks (unsafe, negative, trait impls)
- `extern` blocks with fns, types and macro invocations (`include!`)
- fns, uses, type aliases, consts/statics, traits and macro invocations
- types: paths with generic arguments, references, pointers, tuples, slices,
  bare fns and trait objects

Function bodies, enum bodies and macro arguments are matched as balanced token
groups; their text is recovered from positions so passthrough items keep their
original source.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence
import logging

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from .. import syntax
from ..errors import GeneratorError, SyntaxParseError
from ..syntax import Span

logger = logging.getLogger(__name__)


grammar = r"""
    start: inner_attr* item*
    type_only: type

    // Attributes
    inner_attr: "#" "!" "[" meta "]"
    outer_attr: "#" "[" meta "]"
    meta: simple_path                                              -> meta_word
        | simple_path "=" lit                                      -> meta_name_value
        | simple_path "(" (_meta_arg ("," _meta_arg)* ","?)? ")"   -> meta_list
    _meta_arg: meta | lit
    lit: STRING | RAW_STRING | NUMBER | BOOL | CHAR_LIT
    simple_path: leading_colon? _path_word ("::" _path_word)*
    _path_word: IDENT | PATH_KW
    leading_colon: "::"

    // Items
    item: outer_attr* visibility? _item_kind
    _item_kind: mod_item
              | struct_item
              | enum_item
              | impl_item
              | foreign_mod
              | use_item
              | fn_item
              | type_alias
              | const_item
              | trait_item
              | macro_item

    visibility: _PUB vis_restriction?
    vis_restriction: "(" (PATH_KW | _IN simple_path) ")"

    mod_item: _MOD IDENT (";" | "{" inner_attr* item* "}")

    struct_item: _STRUCT IDENT generics? (where_clause? named_fields | tuple_fields where_clause? ";" | where_clause? ";")
    named_fields: "{" (field ("," field)* ","?)? "}"
    field: outer_attr* visibility? IDENT ":" type
    tuple_fields: "(" (tuple_field ("," tuple_field)* ","?)? ")"
    tuple_field: outer_attr* visibility? type

    enum_item: _ENUM IDENT generics? where_clause? brace_group

    impl_item: unsafe_kw? _IMPL generics? impl_trait? type where_clause? "{" impl_member* "}"
    impl_trait: negative? type_path _FOR
    negative: "!"
    impl_member: outer_attr* visibility? _impl_member_kind
    _impl_member_kind: impl_fn | impl_type | impl_const | impl_macro
    impl_fn: fn_sig (brace_group | ";")
    impl_type: _TYPE IDENT generics? "=" type ";"
    impl_const: _CONST IDENT ":" type ("=" tt_nosemi+)? ";"
    impl_macro: simple_path "!" group ";"?

    foreign_mod: unsafe_kw? _EXTERN STRING? "{" foreign_item* "}"
    foreign_item: outer_attr* visibility? _foreign_item_kind
    _foreign_item_kind: foreign_fn | foreign_type | foreign_macro
    foreign_fn: fn_sig ";"
    foreign_type: _TYPE IDENT generics? (":" bound ("+" bound)*)? ("=" type)? ";"
    foreign_macro: simple_path "!" group ";"?

    use_item: _USE USE_TREE ";"
    fn_item: fn_sig brace_group
    type_alias: _TYPE IDENT generics? where_clause? "=" type ";"
    const_item: (_CONST | _STATIC) mut_kw? IDENT ":" type "=" tt_nosemi+ ";"
    trait_item: unsafe_kw? _TRAIT IDENT generics? (":" bound ("+" bound)*)? where_clause? brace_group
    macro_item: simple_path "!" IDENT? group ";"?

    // Functions
    fn_sig: const_kw? async_kw? unsafe_kw? extern_abi? _FN IDENT generics? "(" (fn_arg ("," fn_arg)* ","?)? ")" ret_type? where_clause?
    extern_abi: _EXTERN STRING?
    fn_arg: outer_attr* (receiver | typed_arg)
    receiver: mut_kw? _SELF (":" type)?       -> value_receiver
            | "&" LIFETIME? mut_kw? _SELF       -> ref_receiver
    typed_arg: mut_kw? (IDENT | group) ":" type
    ret_type: "->" type

    // Types
    ?type: type_path
         | type_ref
         | type_ptr
         | type_tuple
         | type_slice
         | type_bare_fn
         | type_trait_object
    type_ref: "&" LIFETIME? mut_kw? type
    type_ptr: "*" (mut_kw | const_kw) type
    type_tuple: "(" (type ("," type)* ","?)? ")"
    type_slice: "[" type (";" tt_nosemi+)? "]"
    type_bare_fn: unsafe_kw? extern_abi? _FN "(" (bare_fn_arg ("," bare_fn_arg)* ","?)? ")" ret_type?
    bare_fn_arg: (IDENT ":")? type
    type_trait_object: (dyn_kw | impl_kw) bound ("+" bound)*
    dyn_kw: _DYN
    impl_kw: _IMPL
    type_path: leading_colon? path_segment ("::" path_segment)*
    path_segment: _path_word generic_args?
    generic_args: "<" (_generic_arg ("," _generic_arg)* ","?)? ">"   -> angle_args
                | "(" (type ("," type)* ","?)? ")" ret_type?          -> paren_args
    _generic_arg: type | lifetime | assoc_binding
    lifetime: LIFETIME
    assoc_binding: IDENT "=" type
    bound: QUESTION? type_path | lifetime

    // Generics
    generics: "<" (generic_param ("," generic_param)* ","?)? ">"
    generic_param: LIFETIME (":" LIFETIME ("+" LIFETIME)*)?
                 | const_kw IDENT ":" type
                 | IDENT (":" bound ("+" bound)*)? ("=" type)?
    where_clause: _WHERE (where_pred ("," where_pred)* ","?)?
    where_pred: (type | LIFETIME) ":" (bound ("+" bound)*)?

    // Flags
    unsafe_kw: _UNSAFE
    mut_kw: _MUT
    const_kw: _CONST
    async_kw: _ASYNC

    // Balanced token trees
    brace_group: "{" _tt* "}"
    group: "(" _tt* ")"
         | "[" _tt* "]"
         | "{" _tt* "}"
    _tt: group | TT_ATOM | _SEMI
    tt_nosemi: group | TT_ATOM

    _PUB: /pub\b/
    _FN: /fn\b/
    _MOD: /mod\b/
    _STRUCT: /struct\b/
    _ENUM: /enum\b/
    _IMPL: /impl\b/
    _FOR: /for\b/
    _UNSAFE: /unsafe\b/
    _EXTERN: /extern\b/
    _TYPE: /type\b/
    _USE: /use\b/
    _CONST: /const\b/
    _STATIC: /static\b/
    _MUT: /mut\b/
    _SELF: /self\b/
    _WHERE: /where\b/
    _DYN: /dyn\b/
    _TRAIT: /trait\b/
    _ASYNC: /async\b/
    _IN: /in\b/
    _SEMI: ";"
    QUESTION: "?"

    PATH_KW: /(?:self|Self|crate|super)\b/
    IDENT: /(?!(?:as|async|await|box|break|const|continue|crate|dyn|else|enum|extern|false|fn|for|if|impl|in|let|loop|match|mod|move|mut|pub|ref|return|self|Self|static|struct|super|trait|true|type|unsafe|use|where|while)\b)(?:r#)?[A-Za-z_][A-Za-z0-9_]*/
    BOOL: /(?:true|false)\b/
    STRING: /b?"(?:[^"\\]|\\.)*"/
    RAW_STRING: /r"[^"]*"|r#"[\s\S]*?"#/
    CHAR_LIT: /b?'(?:[^'\\]|\\.)'/
    NUMBER: /-?[0-9][0-9A-Za-z_]*(?:\.[0-9][0-9A-Za-z_]*)?/
    LIFETIME: /'[A-Za-z_][A-Za-z0-9_]*/
    USE_TREE: /[^;]+/
    TT_ATOM: /r"[^"]*"|r#"[\s\S]*?"#|b?"(?:[^"\\]|\\.)*"|b?'(?:[^'\\]|\\.)'|'[A-Za-z_][A-Za-z0-9_]*|[A-Za-z_][A-Za-z0-9_]*|[0-9][0-9A-Za-z_.]*|[^\s\w()\[\]{};"']/

    LINE_COMMENT: /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//

    %import common.WS
    %ignore WS
    %ignore LINE_COMMENT
    %ignore BLOCK_COMMENT
"""

parser = Lark(
    grammar,
    start=["start", "type_only"],
    parser="earley",
    propagate_positions=True,
)


# --------------------------
# Tree -> syntax nodes
# --------------------------

class _Part:
    """
    Intermediate value passed between rule callbacks (generics, groups, flags...).
    """
    __slots__ = ("kind", "value", "span")

    def __init__(self, kind: str, value: Any = None, span: Span = syntax.UNKNOWN_SPAN) -> None:
        self.kind = kind
        self.value = value
        self.span = span

    def __repr__(self) -> str:
        return f"_Part({self.kind!r}, {self.value!r})"


def _parts(children: Sequence[Any], kind: str) -> List[_Part]:
    return [c for c in children if isinstance(c, _Part) and c.kind == kind]


def _part(children: Sequence[Any], kind: str) -> Optional[_Part]:
    found = _parts(children, kind)
    return found[0] if found else None


def _has(children: Sequence[Any], kind: str) -> bool:
    return _part(children, kind) is not None


def _tokens(children: Sequence[Any], *types: str) -> List[Token]:
    return [c for c in children if isinstance(c, Token) and c.type in types]


def _of(children: Sequence[Any], cls) -> List[Any]:
    return [c for c in children if isinstance(c, cls)]


def _one(children: Sequence[Any], cls) -> Any:
    found = _of(children, cls)
    return found[0] if found else None


@v_args(meta=True)
class SyntaxBuilder(Transformer):
    """
    Build `syntax` nodes bottom-up from the parse tree of `grammar`.
    """

    def __init__(self, text: str) -> None:
        super().__init__()
        self._text = text

    def _raw(self, meta) -> str:
        return self._text[meta.start_pos:meta.end_pos]

    def _normalized(self, start: int, end: int, column: int) -> str:
        return syntax.normalize_source(self._text[start:end], column)

    def _attach(self, meta, children: Sequence[Any], node: syntax.Item) -> syntax.Item:
        """
        Attach outer attributes, visibility, span and attribute-free source to an item.
        """
        attrs = [c for c in children if isinstance(c, syntax.Attribute)]
        vis = _one(children, syntax.Visibility)
        first = vis.span if vis is not None else node.span
        node.attrs = attrs
        node.vis = vis
        node.source = self._normalized(first.start, meta.end_pos, first.column)
        node.span = Span.from_meta(meta)
        return node

    # ---- top level

    def start(self, meta, children):
        attrs = _of(children, syntax.Attribute)
        items = _of(children, syntax.Item)
        return syntax.File(items=items, attrs=attrs, text=self._text)

    def type_only(self, meta, children):
        return children[0]

    # ---- attributes

    def simple_path(self, meta, children):
        words = tuple(str(t) for t in _tokens(children, "IDENT", "PATH_KW"))
        return _Part("path", words, Span.from_meta(meta))

    def leading_colon(self, meta, children):
        return _Part("leading_colon")

    def lit(self, meta, children):
        token = children[0]
        kind = {
            "STRING": "str",
            "RAW_STRING": "str",
            "BOOL": "bool",
            "CHAR_LIT": "char",
        }.get(token.type)
        if kind is None:
            text = str(token)
            is_float = "." in text or ("e" in text.lower() and not text.lower().startswith("0x"))
            kind = "float" if is_float or text.endswith(("f32", "f64")) else "int"
        return syntax.Lit(kind=kind, raw=str(token), span=Span.from_meta(meta))

    def meta_word(self, meta, children):
        return syntax.Meta(path=children[0].value, kind="word", span=Span.from_meta(meta))

    def meta_name_value(self, meta, children):
        return syntax.Meta(path=children[0].value, kind="name_value", value=children[1], span=Span.from_meta(meta))

    def meta_list(self, meta, children):
        items = [c for c in children[1:] if isinstance(c, (syntax.Meta, syntax.Lit))]
        return syntax.Meta(path=children[0].value, kind="list", items=items, span=Span.from_meta(meta))

    def inner_attr(self, meta, children):
        return syntax.Attribute(meta=children[0], inner=True, span=Span.from_meta(meta))

    def outer_attr(self, meta, children):
        return syntax.Attribute(meta=children[0], inner=False, span=Span.from_meta(meta))

    def visibility(self, meta, children):
        return syntax.Visibility(text="".join(self._raw(meta).split()), span=Span.from_meta(meta))

    def vis_restriction(self, meta, children):
        return None

    # ---- flags

    def unsafe_kw(self, meta, children):
        return _Part("unsafe")

    def mut_kw(self, meta, children):
        return _Part("mut")

    def const_kw(self, meta, children):
        return _Part("const")

    def async_kw(self, meta, children):
        return _Part("async")

    def negative(self, meta, children):
        return _Part("negative")

    def dyn_kw(self, meta, children):
        return _Part("keyword", "dyn")

    def impl_kw(self, meta, children):
        return _Part("keyword", "impl")

    # ---- token trees and generics (kept as source text)

    def brace_group(self, meta, children):
        return _Part("body", self._raw(meta), Span.from_meta(meta))

    def group(self, meta, children):
        return _Part("group", self._raw(meta), Span.from_meta(meta))

    def tt_nosemi(self, meta, children):
        return None

    def generics(self, meta, children):
        return _Part("generics", self._raw(meta))

    def generic_param(self, meta, children):
        return None

    def where_clause(self, meta, children):
        return _Part("where", " ".join(self._raw(meta).split()))

    def where_pred(self, meta, children):
        return None

    def bound(self, meta, children):
        return _Part("bound", " ".join(self._raw(meta).split()))

    # ---- types

    def path_segment(self, meta, children):
        ident = _tokens(children, "IDENT", "PATH_KW")[0]
        return syntax.PathSegment(ident=str(ident), arguments=_one(children, syntax.PathArguments))

    def type_path(self, meta, children):
        return syntax.TypePath(
            segments=_of(children, syntax.PathSegment),
            leading_colon=_has(children, "leading_colon"),
            span=Span.from_meta(meta),
        )

    def angle_args(self, meta, children):
        args = [c for c in children if isinstance(c, (syntax.Type, syntax.Lifetime, syntax.AssocBinding))]
        return syntax.PathArguments(kind="angle", args=args)

    def paren_args(self, meta, children):
        ret = _part(children, "ret")
        return syntax.PathArguments(
            kind="paren",
            args=_of(children, syntax.Type),
            output=ret.value if ret is not None else None,
        )

    def lifetime(self, meta, children):
        return syntax.Lifetime(name=str(children[0]), span=Span.from_meta(meta))

    def assoc_binding(self, meta, children):
        return syntax.AssocBinding(ident=str(children[0]), ty=children[1], span=Span.from_meta(meta))

    def ret_type(self, meta, children):
        return _Part("ret", children[0])

    def type_ref(self, meta, children):
        lifetime = _tokens(children, "LIFETIME")
        return syntax.TypeReference(
            elem=_one(children, syntax.Type),
            mutable=_has(children, "mut"),
            lifetime=str(lifetime[0]) if lifetime else None,
            span=Span.from_meta(meta),
        )

    def type_ptr(self, meta, children):
        return syntax.TypePtr(elem=_one(children, syntax.Type), mutable=_has(children, "mut"), span=Span.from_meta(meta))

    def type_tuple(self, meta, children):
        return syntax.TypeTuple(elems=_of(children, syntax.Type), span=Span.from_meta(meta))

    def type_slice(self, meta, children):
        elem = _one(children, syntax.Type)
        raw = self._raw(meta)
        length = None
        if len(children) > 1:
            length = raw[raw.rfind(";") + 1:-1].strip()
        return syntax.TypeSlice(elem=elem, length=length, span=Span.from_meta(meta))

    def bare_fn_arg(self, meta, children):
        name = _tokens(children, "IDENT")
        return _Part("bare_arg", (str(name[0]) if name else None, _one(children, syntax.Type)))

    def extern_abi(self, meta, children):
        abi = _tokens(children, "STRING")
        return _Part("abi", syntax.unescape_string(str(abi[0])) if abi else "C")

    def type_bare_fn(self, meta, children):
        ret = _part(children, "ret")
        abi = _part(children, "abi")
        return syntax.TypeBareFn(
            params=[p.value for p in _parts(children, "bare_arg")],
            output=ret.value if ret is not None else None,
            unsafe=_has(children, "unsafe"),
            abi=abi.value if abi is not None else None,
            span=Span.from_meta(meta),
        )

    def type_trait_object(self, meta, children):
        return syntax.TypeTraitObject(
            keyword=_part(children, "keyword").value,
            bounds=[b.value for b in _parts(children, "bound")],
            span=Span.from_meta(meta),
        )

    # ---- functions

    def value_receiver(self, meta, children):
        return syntax.Receiver(
            reference=False,
            mut_binding=_has(children, "mut"),
            ty=_one(children, syntax.Type),
            span=Span.from_meta(meta),
        )

    def ref_receiver(self, meta, children):
        lifetime = _tokens(children, "LIFETIME")
        return syntax.Receiver(
            reference=True,
            mutable_ref=_has(children, "mut"),
            lifetime=str(lifetime[0]) if lifetime else None,
            span=Span.from_meta(meta),
        )

    def typed_arg(self, meta, children):
        ident = _tokens(children, "IDENT")
        pattern = str(ident[0]) if ident else _part(children, "group").value
        return syntax.TypedArg(
            ident=pattern,
            ty=_one(children, syntax.Type),
            mut_binding=_has(children, "mut"),
            span=Span.from_meta(meta),
        )

    def fn_arg(self, meta, children):
        arg = children[-1]
        arg.attrs = _of(children, syntax.Attribute)
        return arg

    def fn_sig(self, meta, children):
        abi = _part(children, "abi")
        ret = _part(children, "ret")
        generics = _part(children, "generics")
        where = _part(children, "where")
        return syntax.Signature(
            ident=str(_tokens(children, "IDENT")[0]),
            inputs=[c for c in children if isinstance(c, (syntax.Receiver, syntax.TypedArg))],
            output=ret.value if ret is not None else None,
            unsafe=_has(children, "unsafe"),
            constness=_has(children, "const"),
            asyncness=_has(children, "async"),
            abi=abi.value if abi is not None else None,
            generics=generics.value if generics is not None else None,
            where_clause=where.value if where is not None else None,
            span=Span.from_meta(meta),
        )

    # ---- items

    def item(self, meta, children):
        return self._attach(meta, children, children[-1])

    def mod_item(self, meta, children):
        has_body = self._raw(meta).rstrip().endswith("}")
        return syntax.ItemMod(
            ident=str(children[0]),
            items=_of(children, syntax.Item) if has_body else None,
            inner_attrs=_of(children, syntax.Attribute),
            span=Span.from_meta(meta),
        )

    def named_fields(self, meta, children):
        return _Part("fields", ("named", _of(children, syntax.Field)))

    def tuple_fields(self, meta, children):
        return _Part("fields", ("tuple", _of(children, syntax.Field)))

    def field(self, meta, children):
        ident = _tokens(children, "IDENT")
        return syntax.Field(
            ident=str(ident[0]),
            ty=_one(children, syntax.Type),
            attrs=_of(children, syntax.Attribute),
            vis=_one(children, syntax.Visibility),
            span=Span.from_meta(meta),
        )

    def tuple_field(self, meta, children):
        return syntax.Field(
            ident=None,
            ty=_one(children, syntax.Type),
            attrs=_of(children, syntax.Attribute),
            vis=_one(children, syntax.Visibility),
            span=Span.from_meta(meta),
        )

    def struct_item(self, meta, children):
        fields = _part(children, "fields")
        generics = _part(children, "generics")
        where = _part(children, "where")
        style, members = fields.value if fields is not None else ("unit", [])
        return syntax.ItemStruct(
            ident=str(children[0]),
            style=style,
            fields=members,
            generics=generics.value if generics is not None else None,
            where_clause=where.value if where is not None else None,
            span=Span.from_meta(meta),
        )

    def enum_item(self, meta, children):
        return syntax.ItemVerbatim(kind="enum", ident=str(children[0]), span=Span.from_meta(meta))

    def impl_trait(self, meta, children):
        return _Part("trait", (_one(children, syntax.TypePath), _has(children, "negative")))

    def impl_item(self, meta, children):
        trait = _part(children, "trait")
        generics = _part(children, "generics")
        where = _part(children, "where")
        trait_path, negative = trait.value if trait is not None else (None, False)
        return syntax.ItemImpl(
            self_ty=_one(children, syntax.Type),
            trait=trait_path,
            unsafe=_has(children, "unsafe"),
            negative=negative,
            generics=generics.value if generics is not None else None,
            where_clause=where.value if where is not None else None,
            items=_of(children, syntax.ImplItem),
            span=Span.from_meta(meta),
        )

    def impl_member(self, meta, children):
        return self._attach(meta, children, children[-1])

    def impl_fn(self, meta, children):
        sig = children[0]
        return syntax.ImplItem(
            kind="fn",
            ident=sig.ident,
            sig=sig,
            has_body=_has(children, "body"),
            span=Span.from_meta(meta),
        )

    def impl_type(self, meta, children):
        return syntax.ImplItem(kind="type", ident=str(children[0]), ty=_one(children, syntax.Type), span=Span.from_meta(meta))

    def impl_const(self, meta, children):
        return syntax.ImplItem(kind="const", ident=str(children[0]), ty=_one(children, syntax.Type), span=Span.from_meta(meta))

    def impl_macro(self, meta, children):
        return syntax.ImplItem(kind="macro", ident="::".join(children[0].value), span=Span.from_meta(meta))

    def foreign_mod(self, meta, children):
        abi = _tokens(children, "STRING")
        return syntax.ItemForeignMod(
            abi=syntax.unescape_string(str(abi[0])) if abi else "C",
            unsafe=_has(children, "unsafe"),
            items=_of(children, syntax.ForeignItem),
            span=Span.from_meta(meta),
        )

    def foreign_item(self, meta, children):
        return self._attach(meta, children, children[-1])

    def foreign_fn(self, meta, children):
        sig = children[0]
        return syntax.ForeignItem(kind="fn", ident=sig.ident, sig=sig, span=Span.from_meta(meta))

    def foreign_type(self, meta, children):
        return syntax.ForeignItem(
            kind="type",
            ident=str(children[0]),
            alias=_one(children, syntax.Type),
            span=Span.from_meta(meta),
        )

    def foreign_macro(self, meta, children):
        return syntax.ForeignItem(kind="macro", ident="::".join(children[0].value), span=Span.from_meta(meta))

    def use_item(self, meta, children):
        return syntax.ItemVerbatim(kind="use", span=Span.from_meta(meta))

    def fn_item(self, meta, children):
        return syntax.ItemVerbatim(kind="fn", ident=children[0].ident, span=Span.from_meta(meta))

    def type_alias(self, meta, children):
        return syntax.ItemVerbatim(kind="type", ident=str(children[0]), span=Span.from_meta(meta))

    def const_item(self, meta, children):
        ident = _tokens(children, "IDENT")
        return syntax.ItemVerbatim(kind="const", ident=str(ident[0]), span=Span.from_meta(meta))

    def trait_item(self, meta, children):
        ident = _tokens(children, "IDENT")
        return syntax.ItemVerbatim(kind="trait", ident=str(ident[0]), span=Span.from_meta(meta))

    def macro_item(self, meta, children):
        ident = _tokens(children, "IDENT")
        name = str(ident[0]) if ident else "::".join(children[0].value)
        return syntax.ItemVerbatim(kind="macro", ident=name, span=Span.from_meta(meta))


# --------------------------
# Entry points
# --------------------------

def _parse(text: str, start: str):
    try:
        tree = parser.parse(text, start=start)
    except UnexpectedInput as e:
        line = getattr(e, "line", 0) or 0
        column = getattr(e, "column", 0) or 0
        if line < 1:
            line = text.count("\n") + 1
            column = len(text) - text.rfind("\n")
        message = str(e).strip().splitlines()[0] if str(e).strip() else "Unexpected input"
        raise SyntaxParseError(message, Span(line=line, column=column)) from e
    try:
        return SyntaxBuilder(text).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, GeneratorError):
            raise e.orig_exc from e
        raise


def parse_source(text: str) -> syntax.File:
    """
    Parse a whole source file into a `syntax.File`.
    """
    result = _parse(text, "start")
    logger.debug("Parsed %d top-level item(s)", len(result.items))
    return result


def parse_type(text: str) -> syntax.Type:
    """
    Parse a single Rust type (e.g. `Pin<&mut qobject::MyObject>`).
    """
    return _parse(text, "type_only")


__all__ = ["grammar", "parser", "SyntaxBuilder", "parse_source", "parse_type"]
