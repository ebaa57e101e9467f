#!/usr/bin/env python3
"""
Manifest input/output.

The manifest describes what one generation run exports to downstream consumers:

- generator metadata and the invocation
- `name_mappings`: ordered path -> exposed C++ name, e.g.
  `my_crate::QColor -> ::QColor` or
  `my_crate::ffi::qobject::MyObject -> ::cxx_qt::my_object::MyObject`
- `objects`: class, namespace, header, base, QML metadata and policies
- `qt_modules`, `qml_modules` and `exported_include_prefixes`

Dependency manifests are read back with `load_dependency_manifests`; their
`name_mappings` feed the type mapper of the next run.
"""

from __future__ import annotations

import json
import shlex
import sys
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union
import logging

from .emitters.qobject_emitter import header_include
from .errors import GeneratorError
from .models import BridgeModule, GenerationContext, NameMappings
from .utils import write_text

logger = logging.getLogger(__name__)

DIST_NAME = "qobject-binding-generator"
MANIFEST_NAME = "manifest.json"


def generator_version() -> str:
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def exported_name_mappings(name: str, modules: Sequence[BridgeModule]) -> Dict[str, str]:
    """
    Qualify every exported mapping with the crate `name` (and, for QObjects,
    the bridge module) so consumers can look it up by Rust path.
    """
    mappings: Dict[str, str] = {}
    for module in modules:
        for key, value in module.exported_mappings.items():
            if key.startswith("qobject::"):
                mappings[f"{name}::{module.ident}::{key}"] = value
            else:
                mappings[f"{name}::{key}"] = value
    return mappings


def build_manifest(
    name: str,
    modules: Sequence[BridgeModule],
    include_prefix: str = "cxx-qt-gen",
    argv: Optional[Sequence[str]] = None,
) -> Dict:
    argv = list(sys.argv if argv is None else argv)
    uses_qml = any(module.uses_qml for module in modules)

    objects: List[Dict] = []
    qml_modules: List[Dict] = []
    for module in modules:
        for obj in module.objects:
            objects.append(
                {
                    "module": module.ident,
                    "class": obj.names.cpp_class.cpp,
                    "qualified_class": obj.names.qualified_cpp_class,
                    "namespace": obj.namespace,
                    "header": header_include(include_prefix, module.stem),
                    "base": obj.base_class,
                    "qml": obj.qml.to_dict() if obj.qml else None,
                    "locking": obj.locking,
                    "threading": obj.threading,
                }
            )
            if obj.qml is not None:
                entry = {"uri": obj.qml.uri, "version_major": obj.qml.version_major, "version_minor": obj.qml.version_minor}
                if entry not in qml_modules:
                    qml_modules.append(entry)

    return {
        "generator": {"name": DIST_NAME, "version": generator_version()},
        "invocation": {"argv": argv, "command_line": " ".join(shlex.quote(a) for a in argv)},
        "name": name,
        "qt_modules": ["Core", "Qml"] if uses_qml else ["Core"],
        "exported_include_prefixes": [include_prefix] if include_prefix else [],
        "name_mappings": exported_name_mappings(name, modules),
        "objects": objects,
        "qml_modules": qml_modules,
        "modules": [
            {
                "ident": module.ident,
                "namespace": module.namespace,
                "stem": module.stem,
                "bridge": f"{module.stem}.cxxqt.rs",
                "header": header_include(include_prefix, module.stem),
                "source": f"{module.stem}.cxxqt.cpp",
            }
            for module in modules
        ],
    }


def emit_manifest(ctx: GenerationContext, name: str, modules: Sequence[BridgeModule]) -> Path:
    """
    Write `manifest.json` into the output directory and return its path.
    """
    manifest = build_manifest(name, modules, ctx.include_prefix)
    manifest_path = ctx.output_dir / MANIFEST_NAME
    content = json.dumps(manifest, indent=2) + "\n"
    try:
        write_text(manifest_path, content, dry_run=ctx.dry_run)
    except Exception:
        logger.exception("Failed to write manifest to %s", manifest_path)
        raise
    return manifest_path


def load_dependency_manifests(paths: Iterable[Union[str, Path]]) -> NameMappings:
    """
    Merge the `name_mappings` of dependency manifests in order. A key defined
    by several manifests takes the value of the last one.
    """
    mappings = NameMappings()
    for path in paths:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise GeneratorError(f"Could not read dependency manifest {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise GeneratorError(f"Invalid JSON in dependency manifest {path}: {e}") from e

        entries = data.get("name_mappings", {}) if isinstance(data, dict) else None
        if not isinstance(entries, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in entries.items()
        ):
            raise GeneratorError(f"Dependency manifest {path} has no valid `name_mappings` object")

        for key in entries:
            if key in mappings and mappings.get(key) != entries[key]:
                logger.debug("Mapping %s from %s overrides an earlier manifest", key, path)
        mappings.update(entries)
        logger.debug("Loaded %d name mapping(s) from %s", len(entries), path)
    return mappings


__all__ = [
    "DIST_NAME",
    "MANIFEST_NAME",
    "generator_version",
    "exported_name_mappings",
    "build_manifest",
    "emit_manifest",
    "load_dependency_manifests",
]
