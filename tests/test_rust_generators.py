import re
from pathlib import Path

import pytest

from qobject_binding_generator.emitters.cpp.qobject import generate_cpp_qobject
from qobject_binding_generator.emitters.fragments import doc_attributes, rust_block
from qobject_binding_generator.emitters.qobject_emitter import QObjectEmitter
from qobject_binding_generator.emitters.rust.constructor import generate_rust_constructors
from qobject_binding_generator.emitters.rust.inherit import generate_rust_inherited_methods
from qobject_binding_generator.emitters.rust.invokable import generate_rust_invokables
from qobject_binding_generator.emitters.rust.property import generate_rust_properties, setter_body
from qobject_binding_generator.emitters.rust.qobject import generate_rust_qobject
from qobject_binding_generator.emitters.rust.signal import connection_types, generate_rust_signals
from qobject_binding_generator.errors import GeneratorError, TypeMappingError
from qobject_binding_generator.models import GenerationContext
from qobject_binding_generator.naming import RUST_KEYWORDS
from qobject_binding_generator.utils import TemplateRenderer


def _joined(blocks):
    return "\n".join(blocks.cxx_mod_contents), "\n".join(blocks.implementation)


def test_rust_block_layout():
    assert rust_block("impl Foo", []) == "impl Foo {}"
    assert rust_block("impl Foo", ["fn a() {}", "fn b() {\n    1\n}"]) == (
        "impl Foo {\n    fn a() {}\n    fn b() {\n        1\n    }\n}"
    )


def test_doc_attributes_escape():
    assert doc_attributes('say "hi"', "\n") == ['#[doc = "say \\"hi\\""]', '#[doc = "\\n"]']


# --------------------------
# Properties
# --------------------------

def test_property_bridge_declarations(my_object):
    bridge, implementation = _joined(generate_rust_properties(my_object.properties[:1], my_object.names))
    assert '#[cxx_name = "getNumberWrapper"]' in bridge
    assert "unsafe fn number<'a>(self: &'a MyObjectQt) -> &'a i32;" in bridge
    assert '#[cxx_name = "setNumberWrapper"]' in bridge
    assert "fn set_number(self: Pin<&mut MyObjectQt>, value: i32);" in bridge
    assert '#[cxx_name = "numberChanged"]' in bridge
    assert "fn number_changed(self: Pin<&mut MyObjectQt>);" in bridge
    assert "pub fn number(&self) -> &i32" in implementation
    assert "pub unsafe fn number_mut<'a>(self: Pin<&'a mut Self>) -> &'a mut i32" in implementation


def test_setter_guards_then_mutates_then_notifies(my_object):
    number = my_object.properties[0]
    body = setter_body(number)
    assert body[0].startswith("if self.number == value")
    assert body[1] == "self.as_mut().rust_mut().number = value;"
    assert body[2] == "self.as_mut().number_changed();"

    _, implementation = _joined(generate_rust_properties([number], my_object.names))
    guard = implementation.index("if self.number == value")
    mutation = implementation.index("self.as_mut().rust_mut().number = value;")
    notify = implementation.index("self.as_mut().number_changed();")
    assert guard < mutation < notify


def test_read_only_property_has_no_setter(my_object):
    color = my_object.properties[2]
    bridge, implementation = _joined(generate_rust_properties([color], my_object.names))
    assert "set_color" not in bridge
    assert "set_color" not in implementation
    assert "color_mut" not in implementation
    assert "unsafe fn color<'a>(self: &'a MyObjectQt) -> &'a QColor;" in bridge


def test_no_notify_property(structure_bridge):
    module = structure_bridge('''
    #[cxx_qt::bridge]
    mod ffi {
        #[cxx_qt::qobject]
        pub struct Quiet {
            #[qproperty(no_notify)]
            level: u8,
        }
    }
    ''')
    obj = module.objects[0]
    prop = obj.properties[0]
    assert len(setter_body(prop)) == 2
    bridge, _ = _joined(generate_rust_properties([prop], obj.names))
    assert "level_changed" not in bridge


def test_keyword_property_keeps_raw_identifier(structure_bridge):
    module = structure_bridge('''
    #[cxx_qt::bridge]
    mod ffi {
        #[cxx_qt::qobject]
        pub struct Token {
            #[qproperty]
            r#type: i32,
        }
    }
    ''')
    obj = module.objects[0]
    bridge, implementation = _joined(generate_rust_properties(obj.properties, obj.names))
    assert '#[cxx_name = "getTypeWrapper"]' in bridge
    assert "unsafe fn r#type<'a>(self: &'a TokenQt) -> &'a i32;" in bridge
    assert "fn set_type(self: Pin<&mut TokenQt>, value: i32);" in bridge
    assert "pub fn r#type(&self) -> &i32" in implementation
    assert "&self.r#type" in implementation
    assert "if self.r#type == value" in implementation
    assert "fn type(" not in bridge + implementation

    header = "\n".join(generate_cpp_qobject(obj).blocks.metaobjects)
    assert "Q_PROPERTY(::std::int32_t type_ READ getType WRITE setType NOTIFY typeChanged)" in header


# --------------------------
# Invokables and inherited methods
# --------------------------

def test_invokable_declarations(my_object):
    bridge, implementation = _joined(generate_rust_invokables(my_object.invokables, my_object.names))
    assert '#[cxx_name = "sayHiWrapper"]' in bridge
    assert "fn say_hi(self: &MyObjectQt, string: &QString, number: i32);" in bridge
    assert "fn increment(self: Pin<&mut MyObjectQt>);" in bridge
    assert "fn double_number(self: &MyObjectQt) -> i32;" in bridge
    assert implementation == ""


def test_unsafe_invokable(structure_bridge):
    module = structure_bridge('''
    #[cxx_qt::bridge]
    mod ffi {
        #[cxx_qt::qobject]
        pub struct Store {
            value: i32,
        }

        impl qobject::Store {
            #[qinvokable]
            pub unsafe fn store(self: Pin<&mut Self>, target: u64) {}
        }
    }
    ''')
    obj = module.objects[0]
    bridge, _ = _joined(generate_rust_invokables(obj.invokables, obj.names))
    assert "unsafe fn store(self: Pin<&mut StoreQt>, target: u64);" in bridge


def test_pointer_parameters_are_rejected(structure_bridge):
    with pytest.raises(GeneratorError) as info:
        structure_bridge('''
        #[cxx_qt::bridge]
        mod ffi {
            #[cxx_qt::qobject]
            pub struct Store {
                value: i32,
            }

            impl qobject::Store {
                #[qinvokable]
                pub unsafe fn store(self: Pin<&mut Self>, target: *mut i32) {}
            }
        }
        ''')
    assert isinstance(info.value, TypeMappingError)
    assert info.value.message == "Unsupported type, needs to be a TypePath"


def test_inherited_method_declaration(my_object):
    bridge, _ = _joined(generate_rust_inherited_methods(my_object.inherited_methods, my_object.names))
    assert bridge.startswith('unsafe extern "C++" {')
    assert '#[cxx_name = "hasChildrenCxxQtInherit"]' in bridge
    assert "fn has_children(self: &MyObjectQt) -> bool;" in bridge


# --------------------------
# Signals
# --------------------------

def test_safe_signal_declarations(my_object):
    bridge, implementation = _joined(generate_rust_signals(my_object.signals[1:2], my_object.names))
    assert '#[cxx_name = "dataChanged"]' in bridge
    assert "fn data_changed(self: Pin<&mut MyObjectQt>, first: i32, second: QString);" in bridge
    assert '#[cxx_name = "dataChangedConnect"]' in bridge
    assert (
        "fn connect_data_changed(self: Pin<&mut MyObjectQt>, func: fn(Pin<&mut MyObjectQt>, first: i32, second: QString), "
        "conn_type: CxxQtConnectionType) -> CxxQtQMetaObjectConnection;"
    ) in bridge
    assert "pub type MyObjectCxxQtSignalHandlerdataChanged = fn(Pin<&mut MyObjectQt>, i32, QString);" in implementation
    assert "pub type MyObjectCxxQtSignalClosuredataChanged = dyn FnMut(Pin<&mut MyObjectQt>, i32, QString) + Send;" in implementation
    assert "self.connect_data_changed(func, CxxQtConnectionType::AutoConnection)" in implementation


def test_unsafe_signal_goes_in_plain_extern_block(my_object):
    unchecked = my_object.signals[3]
    blocks = generate_rust_signals([unchecked], my_object.names)
    emit = blocks.cxx_mod_contents[0]
    assert emit.startswith('extern "C++" {')
    assert "unsafe fn unchecked_event(self: Pin<&mut MyObjectQt>, value: u64);" in emit


def test_connection_types_declared_once():
    text = connection_types()
    assert text.count("type ConnectionType = cxx_qt_lib::ConnectionType;") == 1
    assert '#[rust_name = "CxxQtQMetaObjectConnection"]' in text


# --------------------------
# Constructors and object boilerplate
# --------------------------

def test_default_rust_constructor(my_object):
    bridge, implementation = _joined(generate_rust_constructors(my_object))
    assert '#[cxx_name = "createRs"]' in bridge
    assert '#[namespace = "cxx_qt::my_object::cxx_qt_my_object"]' in bridge
    assert "fn create_rs_my_object() -> Box<MyObject>;" in bridge
    assert "pub fn create_rs_my_object() -> std::boxed::Box<MyObject>" in implementation


def test_routed_rust_constructor(constructor_module):
    model = constructor_module.objects[0]
    bridge, implementation = _joined(generate_rust_constructors(model))
    assert '#[cxx_name = "newRs0"]' in bridge
    assert "fn new_rs_model_0(arg0: i32) -> Box<Model>;" in bridge
    assert '#[cxx_name = "initialize0"]' in bridge
    assert "fn initialize_model_0(qobject: Pin<&mut ModelQt>, arg0: QString);" in bridge
    assert "<ModelQt as cxx_qt::Constructor<(i32, f64, QString)>>::new((arg0,))" in implementation
    assert "<ModelQt as cxx_qt::Constructor<(i32, f64, QString)>>::initialize(qobject, (arg0,));" in implementation


def test_rust_qobject_boilerplate(my_object):
    generated = generate_rust_qobject(my_object, "cxx_qt::my_object")
    assert generated.cpp_type == "MyObjectQt"
    bridge, implementation = _joined(generated.blocks)
    assert "type MyObjectQt;" in bridge
    assert '#[cxx_name = "MyObjectRust"]' in bridge
    assert "type MyObject;" in bridge
    assert "fn new_cpp_object_my_object_qt() -> UniquePtr<MyObjectQt>;" in bridge
    assert '#[namespace = "cxx_qt::my_object"]' not in bridge
    assert "impl cxx_qt::Threading for MyObjectQt" in implementation
    assert "impl cxx_qt::CxxQtType for MyObjectQt" in implementation


def test_rust_qobject_without_threading(constructor_module):
    generated = generate_rust_qobject(constructor_module.objects[0])
    bridge, implementation = _joined(generated.blocks)
    assert "Threading" not in implementation
    assert "new_cpp_object" not in bridge


def test_cpp_and_rust_names_agree(my_object):
    """Every cxx_name the Rust side binds must be declared by the C++ side."""
    cpp = generate_cpp_qobject(my_object)
    declared = "\n".join(f.header for f in cpp.blocks.methods + cpp.blocks.private_methods)
    rust_bridge, _ = _joined(generate_rust_qobject(my_object, "cxx_qt::my_object").blocks)
    for name in ("getNumberWrapper", "setNumberWrapper", "numberChanged", "sayHiWrapper",
                 "incrementWrapper", "doubleNumberWrapper", "dataChangedConnect",
                 "objectNameChangedConnect", "hasChildrenCxxQtInherit", "unsafeRust",
                 "unsafeRustMut", "qtThread"):
        assert f'#[cxx_name = "{name}"]' in rust_bridge
        assert f"{name}(" in declared


_WORDS = [
    ["value"],
    ["data", "changed"],
    ["a", "b", "c", "d"],
    ["x1", "y2"],
    ["item", "2"],
    ["type"],
    ["move"],
    ["delete"],
    ["r", "match"],
]
GENERATED_NAMES = [prefix + "_".join(words) for prefix in ("", "_") for words in _WORDS]

NAMES_BRIDGE = '''
#[cxx_qt::bridge(namespace = "names")]
mod ffi {
    #[cxx_qt::qobject]
    pub struct PropertyHolder {
        #[qproperty]
        IDENT: i32,
    }

    #[cxx_qt::qobject]
    pub struct SignalHolder {
        value: i32,
    }

    unsafe extern "RustQt" {
        #[qsignal]
        fn IDENT(self: Pin<&mut qobject::SignalHolder>, value: i32);
    }

    #[cxx_qt::qobject]
    pub struct InvokableHolder {
        value: i32,
    }

    impl qobject::InvokableHolder {
        #[qinvokable]
        pub fn IDENT(&self, value: i32) -> i32 {
            value
        }
    }
}
'''

_CXX_NAME_BINDING = re.compile(r'#\[cxx_name = "(\w+)"\]\s*(?:#\[[^\]]*\]\s*)*(?:pub )?(?:unsafe )?(fn|type)\b')


@pytest.mark.parametrize("name", GENERATED_NAMES)
def test_bound_cxx_names_exist_on_cpp_side(structure_bridge, temp_dir, name):
    ident = f"r#{name}" if name in RUST_KEYWORDS else name
    module = structure_bridge(NAMES_BRIDGE.replace("IDENT", ident))
    ctx = GenerationContext(output_dir=Path(temp_dir), include_dir=Path(temp_dir))
    rendered = QObjectEmitter(ctx, TemplateRenderer()).render(module)
    cpp = rendered.header + rendered.source

    bound = _CXX_NAME_BINDING.findall(rendered.bridge)
    assert len(bound) > 10
    for cxx_name, kind in bound:
        pattern = rf"\b{re.escape(cxx_name)}\(" if kind == "fn" else rf"\b{re.escape(cxx_name)}\b"
        assert re.search(pattern, cpp), cxx_name

    keywords = "|".join(sorted(RUST_KEYWORDS))
    assert not re.search(rf"\bfn (?:{keywords})\b", rendered.bridge)
