from tempfile import TemporaryDirectory
import pytest

from qobject_binding_generator.cfg import StaticCfgResolver
from qobject_binding_generator.parsing.bridge_parser import parse_bridge
from qobject_binding_generator.parsing.rust_parser import parse_source


MY_OBJECT_BRIDGE = r'''
/// A QObject with every kind of member
#[cxx_qt::bridge(namespace = "cxx_qt::my_object", cxx_file_stem = "my_object")]
pub mod ffi {
    unsafe extern "C++" {
        include!("cxx-qt-lib/qstring.h");
        type QString = cxx_qt_lib::QString;

        include!("cxx-qt-lib/qcolor.h");
        #[namespace = ""]
        type QColor = cxx_qt_lib::QColor;

        include!("external/thing.h");
        #[cxx_name = "ExternalThing"]
        #[namespace = "external"]
        type Thing;
    }

    pub enum Mode {
        Idle,
        Busy,
    }

    #[cxx_qt::qobject(qml_uri = "com.kdab.cxx_qt.demo", qml_version = "1.0")]
    #[derive(Default)]
    pub struct MyObject {
        #[qproperty]
        number: i32,
        #[qproperty(cxx_name = "displayName")]
        string: QString,
        #[qproperty(cxx_type = "QColor", read_only)]
        color: QColor,
        internal: u64,
    }

    unsafe extern "RustQt" {
        #[qsignal]
        fn ready(self: Pin<&mut qobject::MyObject>);

        #[qsignal]
        fn data_changed(self: Pin<&mut qobject::MyObject>, first: i32, second: QString);

        #[inherit]
        #[qsignal]
        fn object_name_changed(self: Pin<&mut qobject::MyObject>);

        #[inherit]
        fn has_children(self: &qobject::MyObject) -> bool;
    }

    extern "RustQt" {
        #[qsignal]
        unsafe fn unchecked_event(self: Pin<&mut qobject::MyObject>, value: u64);
    }

    impl cxx_qt::Threading for qobject::MyObject {}

    impl qobject::MyObject {
        #[qinvokable]
        pub fn say_hi(&self, string: &QString, number: i32) {
            println!("Hi from Rust! String is {} and number is {}", string, number);
        }

        #[qinvokable(cxx_virtual)]
        pub fn increment(self: Pin<&mut Self>) {
            let value = *self.number() + 1;
            self.set_number(value);
        }

        #[qinvokable]
        pub fn double_number(&self) -> i32 {
            self.number * 2
        }

        pub fn helper(&self) -> u64 {
            self.internal
        }
    }
}
'''


CONSTRUCTOR_BRIDGE = r'''
#[cxx_qt::bridge]
mod constructors {
    unsafe extern "C++" {
        include!("cxx-qt-lib/qstring.h");
        type QString = cxx_qt_lib::QString;
    }

    #[cxx_qt::qobject(base = "QAbstractListModel")]
    pub struct Model {
        #[qproperty]
        count: i32,
    }

    impl cxx_qt::Constructor<(i32, f64, QString)> for qobject::Model {
        type NewArguments = (i32,);
        type BaseArguments = (f64,);
        type InitializeArguments = (QString,);

        fn new(arguments: (i32,)) -> Model {
            Model { count: arguments.0 }
        }
    }

    unsafe impl !cxx_qt::Locking for qobject::Model {}
}
'''


CFG_BRIDGE = r'''
#[cxx_qt::bridge(namespace = "cfg_demo")]
mod cfg_bridge {
    #[cxx_qt::qobject]
    pub struct Always {
        #[qproperty]
        value: i32,
        #[cfg(feature = "extra")]
        #[qproperty]
        extra: i32,
    }

    #[cfg(feature = "optional")]
    #[cxx_qt::qobject]
    pub struct Optional {
        #[qproperty]
        flag: bool,
    }

    unsafe extern "RustQt" {
        #[qsignal]
        fn pinged(self: Pin<&mut qobject::Always>);

        #[cfg(feature = "extra")]
        #[qsignal]
        fn extra_pinged(self: Pin<&mut qobject::Always>);

        #[qsignal]
        fn toggled(self: Pin<&mut qobject::Optional>);
    }

    impl qobject::Optional {
        #[qinvokable]
        pub fn toggle(self: Pin<&mut Self>) {}
    }
}
'''


def structure(text, cfg=(), strict=False, dependency_mappings=None):
    """Parse bridge text and structure it with a static cfg resolver."""
    resolver = StaticCfgResolver.from_strings(list(cfg), strict=strict)
    return parse_bridge(parse_source(text), resolver, dependency_mappings)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with TemporaryDirectory() as dir_path:
        yield dir_path


@pytest.fixture
def structure_bridge():
    return structure


@pytest.fixture
def my_object_source():
    return MY_OBJECT_BRIDGE


@pytest.fixture
def constructor_source():
    return CONSTRUCTOR_BRIDGE


@pytest.fixture
def cfg_source():
    return CFG_BRIDGE


@pytest.fixture
def my_object_module():
    return structure(MY_OBJECT_BRIDGE)


@pytest.fixture
def my_object(my_object_module):
    return my_object_module.objects[0]


@pytest.fixture
def constructor_module():
    return structure(CONSTRUCTOR_BRIDGE)
