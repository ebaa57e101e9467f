import json
import logging
from pathlib import Path

import pytest

from conftest import CFG_BRIDGE, CONSTRUCTOR_BRIDGE, MY_OBJECT_BRIDGE
from qobject_binding_generator.generate_bindings import discover_source_files, main, parse_args


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("qobject_binding_generator").setLevel(logging.NOTSET)


@pytest.fixture
def sources(temp_dir):
    src = Path(temp_dir) / "src"
    (src / "nested").mkdir(parents=True)
    (src / "my_object.rs").write_text(MY_OBJECT_BRIDGE, encoding="utf-8")
    (src / "nested" / "constructors.rs").write_text(CONSTRUCTOR_BRIDGE, encoding="utf-8")
    (src / "notes.txt").write_text("not rust", encoding="utf-8")
    return src


def test_parse_args_defaults():
    ns = parse_args([])
    assert ns.output_dir == "generated"
    assert ns.include_prefix == "cxx-qt-gen"
    assert ns.name == "crate"
    assert ns.cfg == []
    assert not ns.dry_run


def test_discover_source_files(sources):
    found = discover_source_files([str(sources), str(sources / "my_object.rs"), str(sources / "missing.rs")])
    assert [p.name for p in found] == ["my_object.rs", "constructors.rs"]


def test_generate_all_outputs(temp_dir, sources):
    out = Path(temp_dir) / "out"
    code = main(["--input", str(sources), "--output-dir", str(out), "--name", "demo", "-q"])
    assert code == 0
    for stem in ("my_object", "constructors"):
        assert (out / f"{stem}.cxxqt.rs").is_file()
        assert (out / f"{stem}.cxxqt.cpp").is_file()
        assert (out / "include" / "cxx-qt-gen" / f"{stem}.cxxqt.h").is_file()
    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["name"] == "demo"
    assert manifest["name_mappings"]["demo::ffi::qobject::MyObject"] == "::cxx_qt::my_object::MyObject"
    assert manifest["name_mappings"]["demo::constructors::qobject::Model"] == "::Model"
    assert [m["stem"] for m in manifest["modules"]] == ["my_object", "constructors"]


def test_custom_include_dir_and_prefix(temp_dir, sources):
    out = Path(temp_dir) / "out"
    include = Path(temp_dir) / "headers"
    code = main([
        "--input", str(sources / "my_object.rs"),
        "--output-dir", str(out),
        "--include-dir", str(include),
        "--include-prefix", "gen/",
        "--no-manifest",
        "-q",
    ])
    assert code == 0
    assert (include / "gen" / "my_object.cxxqt.h").is_file()
    assert (out / "my_object.cxxqt.cpp").read_text(encoding="utf-8").startswith('#include "gen/my_object.cxxqt.h"')
    assert not (out / "manifest.json").exists()


def test_dry_run(temp_dir, sources):
    out = Path(temp_dir) / "out"
    assert main(["--input", str(sources), "--output-dir", str(out), "--dry-run", "-q"]) == 0
    assert not out.exists()


def test_no_inputs(temp_dir):
    assert main(["--output-dir", str(Path(temp_dir) / "out"), "-q"]) == 2


def test_parse_error(temp_dir):
    broken = Path(temp_dir) / "broken.rs"
    broken.write_text("#[cxx_qt::bridge]\nmod ffi {\n    #[cxx_qt::qobject]\n    struct Hidden {}\n}\n", encoding="utf-8")
    out = Path(temp_dir) / "out"
    assert main(["--input", str(broken), "--output-dir", str(out), "-q"]) == 3
    assert not out.exists()


def test_cfg_flags(temp_dir):
    source = Path(temp_dir) / "cfg_bridge.rs"
    source.write_text(CFG_BRIDGE, encoding="utf-8")
    out = Path(temp_dir) / "out"
    assert main(["--input", str(source), "--output-dir", str(out), "--cfg", 'feature="optional"', "-q"]) == 0
    header = (out / "include" / "cxx-qt-gen" / "cfg_bridge.cxxqt.h").read_text(encoding="utf-8")
    assert "class Optional : public QObject" in header
    assert "extra" not in header


def test_strict_cfg_fails(temp_dir):
    source = Path(temp_dir) / "cfg_bridge.rs"
    source.write_text(CFG_BRIDGE, encoding="utf-8")
    assert main(["--input", str(source), "--output-dir", str(Path(temp_dir) / "out"), "--strict-cfg", "-q"]) == 3


def test_invalid_cfg_flag(temp_dir, sources):
    assert main(["--input", str(sources), "--output-dir", str(Path(temp_dir) / "out"), "--cfg", "=x", "-q"]) == 3


def test_duplicate_stems(temp_dir):
    root = Path(temp_dir)
    (root / "a.rs").write_text(CONSTRUCTOR_BRIDGE, encoding="utf-8")
    (root / "b.rs").write_text(CONSTRUCTOR_BRIDGE, encoding="utf-8")
    assert main(["--input", str(root / "a.rs"), "--input", str(root / "b.rs"), "--output-dir", str(root / "out"), "-q"]) == 3


def test_dependency_manifest(temp_dir, sources):
    root = Path(temp_dir)
    dependency = root / "dependency.json"
    dependency.write_text(json.dumps({"name_mappings": {"cxx_qt_lib::QString": "::QString"}}), encoding="utf-8")
    out = root / "out"
    code = main([
        "--input", str(sources / "my_object.rs"),
        "--output-dir", str(out),
        "--dependency-manifest", str(dependency),
        "-q",
    ])
    assert code == 0
    header = (out / "include" / "cxx-qt-gen" / "my_object.cxxqt.h").read_text(encoding="utf-8")
    assert "Q_PROPERTY(::QString displayName" in header


def test_broken_dependency_manifest(temp_dir, sources):
    dependency = Path(temp_dir) / "dependency.json"
    dependency.write_text("[", encoding="utf-8")
    assert main(["--input", str(sources), "--dependency-manifest", str(dependency), "--output-dir", str(Path(temp_dir) / "out"), "-q"]) == 3
