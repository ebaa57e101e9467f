from qobject_binding_generator.emitters.cpp.constructor import generate_cpp_constructors
from qobject_binding_generator.emitters.cpp.inherit import generate_cpp_inherited_methods
from qobject_binding_generator.emitters.cpp.invokable import generate_cpp_invokables
from qobject_binding_generator.emitters.cpp.property import generate_cpp_properties, q_property_line
from qobject_binding_generator.emitters.cpp.qobject import generate_cpp_qobject, qml_lines
from qobject_binding_generator.emitters.cpp.signal import generate_cpp_signals
from qobject_binding_generator.emitters.fragments import LOCK_GUARD


def _headers(blocks):
    return [f.header for f in blocks.methods]


def _private_headers(blocks):
    return [f.header for f in blocks.private_methods]


# --------------------------
# Properties
# --------------------------

def test_q_property_lines(my_object):
    lines = [q_property_line(p) for p in my_object.properties]
    assert lines == [
        "Q_PROPERTY(::std::int32_t number READ getNumber WRITE setNumber NOTIFY numberChanged)",
        "Q_PROPERTY(QString displayName READ getDisplayName WRITE setDisplayName NOTIFY displayNameChanged)",
        "Q_PROPERTY(QColor color READ getColor NOTIFY colorChanged)",
    ]


def test_property_flags_in_q_property(structure_bridge):
    module = structure_bridge('''
    #[cxx_qt::bridge]
    mod ffi {
        #[cxx_qt::qobject]
        pub struct Settings {
            #[qproperty(constant, required, final)]
            limit: i32,
            #[qproperty(no_notify)]
            quiet: bool,
        }
    }
    ''')
    limit, quiet = module.objects[0].properties
    assert q_property_line(limit) == "Q_PROPERTY(::std::int32_t limit READ getLimit CONSTANT REQUIRED FINAL)"
    assert q_property_line(quiet) == "Q_PROPERTY(bool quiet READ getQuiet WRITE setQuiet)"
    blocks = generate_cpp_properties([limit, quiet], module.objects[0].names)
    headers = _headers(blocks)
    assert "Q_SLOT void setLimit(::std::int32_t const& value);" not in headers
    assert not any(h.startswith("Q_SIGNAL") for h in headers)


def test_property_methods(my_object):
    blocks = generate_cpp_properties(my_object.properties[:1], my_object.names)
    assert _headers(blocks) == [
        "::std::int32_t const& getNumber() const;",
        "Q_SLOT void setNumber(::std::int32_t const& value);",
        "Q_SIGNAL void numberChanged();",
    ]
    assert _private_headers(blocks) == [
        "::std::int32_t const& getNumberWrapper() const noexcept;",
        "void setNumberWrapper(::std::int32_t value) noexcept;",
    ]
    getter = blocks.methods[0].source
    assert getter.splitlines()[:2] == ["::std::int32_t const&", "MyObject::getNumber() const"]
    assert LOCK_GUARD in getter
    assert "return getNumberWrapper();" in getter
    setter = blocks.methods[1].source
    assert "setNumberWrapper(value);" in setter


def test_property_type_override_converts(my_object):
    color = my_object.properties[2]
    blocks = generate_cpp_properties([color], my_object.names)
    assert '"cxx-qt-common/cxxqt_convert.h"' in blocks.includes
    assert _headers(blocks)[0] == "QColor const& getColor() const;"
    assert (
        "return ::rust::cxxqtlib1::cxx_qt_convert<QColor const&, ::QColor const&>{}(getColorWrapper());"
        in blocks.methods[0].source
    )
    assert _private_headers(blocks) == ["::QColor const& getColorWrapper() const noexcept;"]


def test_property_without_locking(my_object):
    blocks = generate_cpp_properties(my_object.properties[:1], my_object.names, locking=False)
    assert all(LOCK_GUARD not in (f.source or "") for f in blocks.methods)


# --------------------------
# Invokables
# --------------------------

def test_invokable_declarations(my_object):
    blocks = generate_cpp_invokables(my_object.invokables, my_object.names)
    assert _headers(blocks) == [
        "Q_INVOKABLE void sayHi(const QString& string, ::std::int32_t number) const;",
        "Q_INVOKABLE virtual void increment();",
        "Q_INVOKABLE ::std::int32_t doubleNumber() const;",
    ]
    assert _private_headers(blocks) == [
        "void sayHiWrapper(const QString& string, ::std::int32_t number) const noexcept;",
        "void incrementWrapper() noexcept;",
        "::std::int32_t doubleNumberWrapper() const noexcept;",
    ]


def test_invokable_forwards_by_value_arguments(my_object):
    blocks = generate_cpp_invokables(my_object.invokables, my_object.names)
    say_hi = blocks.methods[0].source
    assert "sayHiWrapper(string, ::std::move(number));" in say_hi
    assert "MyObject::sayHi(const QString& string, ::std::int32_t number) const" in say_hi
    assert "return doubleNumberWrapper();" in blocks.methods[2].source


def test_invokable_specifiers(structure_bridge):
    module = structure_bridge('''
    #[cxx_qt::bridge]
    mod ffi {
        #[cxx_qt::qobject]
        pub struct Widget {
            value: i32,
        }

        impl qobject::Widget {
            #[qinvokable(cxx_final, cxx_override)]
            pub fn refresh(self: Pin<&mut Self>) {}
        }
    }
    ''')
    obj = module.objects[0]
    blocks = generate_cpp_invokables(obj.invokables, obj.names)
    assert _headers(blocks) == ["Q_INVOKABLE void refresh() final override;"]


# --------------------------
# Signals
# --------------------------

def test_signal_declarations(my_object):
    blocks = generate_cpp_signals(my_object.signals, my_object.names)
    headers = _headers(blocks)
    assert "Q_SIGNAL void ready();" in headers
    assert "Q_SIGNAL void dataChanged(::std::int32_t first, QString second);" in headers
    assert "Q_SIGNAL void objectNameChanged();" not in headers
    assert (
        "::QMetaObject::Connection objectNameChangedConnect(::rust::Fn<void(MyObject&)> func, ::Qt::ConnectionType type);"
        in headers
    )
    assert '"cxx-qt-lib/qt.h"' in blocks.includes
    assert '"cxx-qt-lib/qmetaobjectconnection.h"' in blocks.includes


def test_signal_connect_definition(my_object):
    blocks = generate_cpp_signals(my_object.signals[1:2], my_object.names)
    connect = blocks.methods[1].source
    assert "[&, func = ::std::move(func)](::std::int32_t first, QString second) {" in connect
    assert "func(*this, ::std::move(first), ::std::move(second));" in connect
    assert "&MyObject::dataChanged," in connect
    assert LOCK_GUARD in connect


def test_signal_without_locking(my_object):
    blocks = generate_cpp_signals(my_object.signals[:1], my_object.names, locking=False)
    assert LOCK_GUARD not in blocks.methods[1].source


# --------------------------
# Inherited methods
# --------------------------

def test_inherited_method_template(my_object):
    blocks = generate_cpp_inherited_methods(my_object.inherited_methods, my_object.base_class)
    assert blocks.methods[0].header_only
    assert blocks.methods[0].header.splitlines() == [
        "template<class... Args>",
        "bool hasChildrenCxxQtInherit(Args... args) const",
        "{",
        "  return QObject::hasChildren(args...);",
        "}",
    ]


# --------------------------
# Constructors
# --------------------------

def test_default_constructor(my_object):
    blocks = generate_cpp_constructors(my_object)
    assert _headers(blocks) == ["explicit MyObject(QObject* parent = nullptr);"]
    lines = blocks.methods[0].source.splitlines()
    assert lines[0] == "MyObject::MyObject(QObject* parent)"
    assert lines[1] == "  : QObject(parent)"
    assert lines[2] == "  , m_rustObj(::cxx_qt::my_object::cxx_qt_my_object::createRs())"
    assert "  , m_rustObjMutex(::std::make_shared<::std::recursive_mutex>())" in lines
    assert "  , m_cxxQtThreadObj(::std::make_shared<::rust::cxxqtlib1::CxxQtGuardedPointer<MyObject>>(this))" in lines


def test_routed_constructor(constructor_module):
    model = constructor_module.objects[0]
    blocks = generate_cpp_constructors(model)
    assert _headers(blocks) == ["explicit Model(::std::int32_t arg0, double arg1, QString arg2);"]
    source = blocks.methods[0].source
    assert "  : QAbstractListModel(::std::move(arg1))" in source
    assert "  , m_rustObj(::cxx_qt_model::newRs0(::std::move(arg0)))" in source
    assert "::cxx_qt_model::initialize0(*this, ::std::move(arg2));" in source
    assert "m_rustObjMutex" not in source


# --------------------------
# Whole object
# --------------------------

def test_generate_qobject(my_object):
    generated = generate_cpp_qobject(my_object)
    assert generated.class_name == "MyObject"
    assert generated.namespace == "cxx_qt::my_object"
    assert generated.qualified_class == "::cxx_qt::my_object::MyObject"
    assert generated.qml == ["QML_NAMED_ELEMENT(MyObject)"]
    blocks = generated.blocks
    assert "using MyObjectCxxQtThread = ::rust::cxxqtlib1::CxxQtThread<MyObject>;" in blocks.forward_declares
    assert "::std::unique_ptr<MyObjectCxxQtThread> qtThread() const;" in _headers(blocks)
    assert "::rust::Box<MyObjectRust> m_rustObj;" in blocks.members
    assert '"cxx-qt-common/cxxqt_thread.h"' in blocks.includes
    assert "<QtQml/QQmlEngine>" in blocks.includes
    assert len(blocks.includes) == len(set(blocks.includes))


def test_unlocked_object_has_no_mutex(constructor_module):
    generated = generate_cpp_qobject(constructor_module.objects[0])
    assert generated.qml == []
    assert not any("recursive_mutex" in m for m in generated.blocks.members)
    assert not generated.has_default_constructor


def test_qml_singleton_lines(structure_bridge):
    module = structure_bridge('''
    #[cxx_qt::bridge]
    mod ffi {
        #[cxx_qt::qobject(qml_uri = "com.demo", qml_version = "1.2", qml_singleton, qml_uncreatable)]
        pub struct Registry {
            value: i32,
        }
    }
    ''')
    assert qml_lines(module.objects[0]) == [
        "QML_NAMED_ELEMENT(Registry)",
        "QML_SINGLETON",
        'QML_UNCREATABLE("Not creatable from QML")',
    ]
