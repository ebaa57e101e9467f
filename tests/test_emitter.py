import dataclasses
from pathlib import Path

import pytest

from qobject_binding_generator.emitters.qobject_emitter import EmitterConfig, QObjectEmitter, header_include
from qobject_binding_generator.models import GenerationContext
from qobject_binding_generator.utils import TemplateRenderer, namespace_close, namespace_open


def _context(temp_dir, dry_run=False, templates_dir=None):
    root = Path(temp_dir)
    return GenerationContext(
        output_dir=root / "out",
        include_dir=root / "include",
        templates_dir=templates_dir,
        dry_run=dry_run,
    )


@pytest.fixture
def emitter(temp_dir):
    ctx = _context(temp_dir)
    return QObjectEmitter(ctx, TemplateRenderer(ctx.templates_dir))


@pytest.fixture
def rendered(emitter, my_object_module):
    return emitter.render(my_object_module)


def test_generation_context_is_frozen(temp_dir):
    ctx = _context(temp_dir)
    assert ctx.header_dir == Path(temp_dir) / "include" / "cxx-qt-gen"
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.dry_run = True


def test_header_include_paths():
    assert header_include("cxx-qt-gen", "my_object") == "cxx-qt-gen/my_object.cxxqt.h"
    assert header_include("", "my_object", "cxx.h") == "my_object.cxx.h"


def test_namespace_filters():
    assert namespace_open("a::b") == "namespace a::b {"
    assert namespace_close("a::b") == "} // namespace a::b"
    assert namespace_open("") == ""
    assert namespace_close("") == ""


def test_file_names(rendered):
    assert rendered.bridge_name == "my_object.cxxqt.rs"
    assert rendered.header_name == "my_object.cxxqt.h"
    assert rendered.source_name == "my_object.cxxqt.cpp"


def test_rendered_header(rendered):
    header = rendered.header
    assert header.startswith("#pragma once")
    assert '#include "cxx-qt-lib/qt.h"' in header
    assert '#include "cxx-qt-common/cxxqt_convert.h"' in header
    assert "namespace rust::cxxqtlib1 {" in header
    assert "class MyObject;" in header
    assert '#include "cxx-qt-gen/my_object.cxx.h"' in header
    assert "namespace cxx_qt::my_object {" in header
    assert "class MyObject : public QObject" in header
    assert "  Q_OBJECT" in header
    assert "  QML_NAMED_ELEMENT(MyObject)" in header
    assert "  Q_PROPERTY(::std::int32_t number READ getNumber WRITE setNumber NOTIFY numberChanged)" in header
    assert "  Q_INVOKABLE void sayHi(const QString& string, ::std::int32_t number) const;" in header
    assert "  ::rust::Box<MyObjectRust> m_rustObj;" in header
    assert "namespace cxx_qt::my_object::cxx_qt_my_object {" in header
    assert "::std::unique_ptr<::cxx_qt::my_object::MyObject>\nnewCppObject();" in header
    assert "Q_DECLARE_METATYPE(cxx_qt::my_object::MyObject*)" in header
    # the forward declaration precedes the cxx header which precedes the class
    assert header.index("class MyObject;") < header.index("my_object.cxx.h") < header.index("class MyObject : public")


def test_rendered_header_orders_public_before_private(rendered):
    header = rendered.header
    public = header.index("public:")
    private = header.index("private:")
    assert public < header.index("getNumber() const;") < private
    assert private < header.index("getNumberWrapper() const noexcept;")


def test_rendered_source(rendered):
    source = rendered.source
    assert source.startswith('#include "cxx-qt-gen/my_object.cxxqt.h"')
    assert "MyObject::MyObject(QObject* parent)" in source
    assert "  , m_rustObj(::cxx_qt::my_object::cxx_qt_my_object::createRs())" in source
    assert "sayHiWrapper(string, ::std::move(number));" in source
    assert "return ::std::make_unique<::cxx_qt::my_object::MyObject>();" in source
    assert "} // namespace cxx_qt::my_object" in source


def test_rendered_bridge(rendered):
    bridge = rendered.bridge
    assert '#[cxx::bridge(namespace = "cxx_qt::my_object")]' in bridge
    assert "mod ffi {" in bridge
    assert 'include!("cxx-qt-gen/my_object.cxxqt.h");' in bridge
    assert "    pub enum Mode {" in bridge
    assert 'include!("cxx-qt-lib/qcolor.h");' in bridge
    assert "type ConnectionType = cxx_qt_lib::ConnectionType;" in bridge
    assert "pub use self::cxx_qt_ffi::*;" in bridge
    assert "mod cxx_qt_ffi {" in bridge
    assert "    use super::ffi::*;" in bridge
    assert "        pub type MyObject = super::MyObjectQt;" in bridge
    assert "    impl qobject::MyObject {" in bridge
    assert "pub fn helper(&self) -> u64 {" in bridge
    assert "#[qinvokable" not in bridge
    assert "#[cxx_qt::qobject" not in bridge
    assert "#[qproperty" not in bridge


def test_bridge_without_namespace_or_signals(emitter, constructor_module):
    bridge = emitter.render(constructor_module).bridge
    assert "#[cxx::bridge]\nmod constructors {" in bridge
    assert "ConnectionType" not in bridge
    header = emitter.render(constructor_module).header
    assert "class Model : public QAbstractListModel" in header
    assert "newCppObject" not in header
    assert "Q_DECLARE_METATYPE(Model*)" in header


def test_emit_writes_files(temp_dir, my_object_module):
    ctx = _context(temp_dir)
    generated = QObjectEmitter(ctx, TemplateRenderer()).emit([my_object_module])
    assert [g.stem for g in generated] == ["my_object"]
    out = Path(temp_dir) / "out"
    header = Path(temp_dir) / "include" / "cxx-qt-gen" / "my_object.cxxqt.h"
    assert (out / "my_object.cxxqt.rs").read_text(encoding="utf-8") == generated[0].bridge
    assert (out / "my_object.cxxqt.cpp").read_text(encoding="utf-8") == generated[0].source
    assert header.read_text(encoding="utf-8") == generated[0].header


def test_emit_is_idempotent(temp_dir, my_object_module):
    ctx = _context(temp_dir)
    emitter = QObjectEmitter(ctx, TemplateRenderer())
    emitter.emit([my_object_module])
    target = Path(temp_dir) / "out" / "my_object.cxxqt.rs"
    first = target.stat().st_mtime_ns
    emitter.emit([my_object_module])
    assert target.stat().st_mtime_ns == first


def test_dry_run_writes_nothing(temp_dir, my_object_module):
    ctx = _context(temp_dir, dry_run=True)
    generated = QObjectEmitter(ctx, TemplateRenderer()).emit([my_object_module])
    assert generated[0].header
    assert not (Path(temp_dir) / "out").exists()
    assert not (Path(temp_dir) / "include").exists()


def test_template_override(temp_dir, my_object_module):
    templates = Path(temp_dir) / "templates"
    templates.mkdir()
    (templates / "custom_header.h.j2").write_text("// {{ stem }}: {{ cpp_objects | length }} object(s)\n", encoding="utf-8")
    ctx = _context(temp_dir, templates_dir=templates)
    emitter = QObjectEmitter(ctx, TemplateRenderer(templates), EmitterConfig(header_template="custom_header.h.j2"))
    rendered = emitter.render(my_object_module)
    assert rendered.header == "// my_object: 1 object(s)\n"
    assert rendered.source.startswith('#include "cxx-qt-gen/my_object.cxxqt.h"')


def test_missing_template(temp_dir, my_object_module):
    ctx = _context(temp_dir)
    emitter = QObjectEmitter(ctx, TemplateRenderer(), EmitterConfig(bridge_template="missing.rs.j2"))
    with pytest.raises(RuntimeError, match="Template not found: missing.rs.j2"):
        emitter.render(my_object_module)
