import pytest

from qobject_binding_generator import syntax
from qobject_binding_generator.errors import SyntaxParseError
from qobject_binding_generator.parsing.rust_parser import parse_source, parse_type


def _bridge_mod(source):
    file = parse_source(source)
    mods = [item for item in file.items if isinstance(item, syntax.ItemMod)]
    assert len(mods) == 1
    return mods[0]


def test_parse_bridge_module_items(my_object_source):
    mod = _bridge_mod(my_object_source)
    assert mod.ident == "ffi"
    assert mod.is_public
    assert mod.attrs[0].path == "cxx_qt::bridge"
    kinds = [type(item).__name__ for item in mod.items]
    assert kinds == [
        "ItemForeignMod",
        "ItemVerbatim",
        "ItemStruct",
        "ItemForeignMod",
        "ItemForeignMod",
        "ItemImpl",
        "ItemImpl",
    ]


def test_parse_bridge_attribute_options(my_object_source):
    attr = _bridge_mod(my_object_source).attrs[0]
    assert attr.meta.kind == "list"
    options = {item.name: item.value.value for item in attr.meta.items}
    assert options == {"namespace": "cxx_qt::my_object", "cxx_file_stem": "my_object"}


def test_parse_struct_fields_and_attributes(my_object_source):
    struct = [i for i in _bridge_mod(my_object_source).items if isinstance(i, syntax.ItemStruct)][0]
    assert struct.ident == "MyObject"
    assert struct.style == "named"
    assert [f.ident for f in struct.fields] == ["number", "string", "color", "internal"]
    assert struct.fields[0].attrs[0].path == "qproperty"
    assert struct.fields[0].ty.to_rust() == "i32"
    assert [a.path for a in struct.attrs] == ["cxx_qt::qobject", "derive"]


def test_parse_foreign_block(my_object_source):
    block = _bridge_mod(my_object_source).items[0]
    assert block.abi == "C++"
    assert block.unsafe
    types = [i for i in block.items if i.kind == "type"]
    assert [t.ident for t in types] == ["QString", "QColor", "Thing"]
    assert types[0].alias.to_rust() == "cxx_qt_lib::QString"
    assert types[2].alias is None
    macros = [i for i in block.items if i.kind == "macro"]
    assert len(macros) == 3
    assert macros[0].to_rust() == 'include!("cxx-qt-lib/qstring.h");'


def test_parse_rustqt_signatures(my_object_source):
    block = _bridge_mod(my_object_source).items[3]
    assert block.abi == "RustQt"
    ready = block.items[0]
    assert ready.sig.ident == "ready"
    receiver = ready.sig.receiver
    assert receiver.is_mutable
    assert receiver.is_pinned
    assert receiver.self_path.to_rust() == "qobject::MyObject"
    data_changed = block.items[1]
    assert [(a.ident, a.ty.to_rust()) for a in data_changed.sig.typed_args] == [("first", "i32"), ("second", "QString")]
    has_children = block.items[3]
    assert not has_children.sig.receiver.is_mutable
    assert has_children.sig.output.to_rust() == "bool"


def test_parse_impl_blocks(my_object_source):
    impls = [i for i in _bridge_mod(my_object_source).items if isinstance(i, syntax.ItemImpl)]
    threading, methods = impls
    assert threading.trait_path == "cxx_qt::Threading"
    assert threading.self_ty.to_rust() == "qobject::MyObject"
    assert threading.items == []
    assert [m.ident for m in methods.items] == ["say_hi", "increment", "double_number", "helper"]
    assert methods.items[0].attrs[0].path == "qinvokable"
    assert "println!" in methods.items[0].source


def test_parse_negative_unsafe_impl(constructor_source):
    impls = [i for i in _bridge_mod(constructor_source).items if isinstance(i, syntax.ItemImpl)]
    locking = impls[1]
    assert locking.unsafe
    assert locking.negative
    assert locking.header() == "unsafe impl !cxx_qt::Locking for qobject::Model"


def test_parse_constructor_trait_arguments(constructor_source):
    impls = [i for i in _bridge_mod(constructor_source).items if isinstance(i, syntax.ItemImpl)]
    ctor = impls[0]
    args = ctor.trait.last.arguments.args
    assert len(args) == 1
    assert args[0].to_rust() == "(i32, f64, QString)"
    types = {m.ident: m.ty.to_rust() for m in ctor.items if m.kind == "type"}
    assert types == {
        "NewArguments": "(i32,)",
        "BaseArguments": "(f64,)",
        "InitializeArguments": "(QString,)",
    }


def test_parse_type_shapes():
    assert parse_type("&mut u32").mutable
    assert parse_type("Pin<&mut qobject::MyObject>").to_rust() == "Pin<&mut qobject::MyObject>"
    assert isinstance(parse_type("*const QObject"), syntax.TypePtr)
    assert parse_type("()").is_unit
    assert isinstance(parse_type("fn(i32) -> bool"), syntax.TypeBareFn)


def test_passthrough_source_is_dedented(my_object_source):
    impl = [i for i in _bridge_mod(my_object_source).items if isinstance(i, syntax.ItemImpl)][1]
    helper = impl.items[3]
    assert helper.source.splitlines()[0] == "pub fn helper(&self) -> u64 {"
    assert helper.source.splitlines()[-1] == "}"


def test_syntax_error_has_position():
    with pytest.raises(SyntaxParseError) as info:
        parse_source("#[cxx_qt::bridge]\nmod ffi {\n    pub struct {\n}\n")
    assert info.value.span.line >= 3
