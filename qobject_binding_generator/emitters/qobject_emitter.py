#!/usr/bin/env python3
"""
Emitter module for generating the CXX-Qt style outputs of one bridge.

This module takes a structured BridgeModule, runs the C++ and Rust fragment
generators for every object and uses a Jinja2-based renderer to emit:

- <output_dir>/<stem>.cxxqt.rs                 (the #[cxx::bridge] module + implementation module)
- <include_dir>/<include_prefix>/<stem>.cxxqt.h
- <output_dir>/<stem>.cxxqt.cpp

Design goals:
- Generators only produce fragments; layout lives in the templates.
- Shared boilerplate (connection types, forward declarations of the thread
  template, includes) is emitted once per bridge.
- Production-grade file writing (atomic, idempotent, dry-run aware).
- Configurable template names.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging

from ..errors import ErrorCollector
from ..models import BridgeModule, GenerationContext
from ..utils import TemplateRenderer, ensure_dir, write_text
from .cpp.qobject import GeneratedCppQObject, generate_cpp_qobject
from .rust.qobject import GeneratedRustQObject, generate_rust_qobject
from .rust.signal import connection_types

logger = logging.getLogger(__name__)


# --------------------------
# Configuration
# --------------------------

@dataclass(frozen=True)
class EmitterConfig:
    """
    Template names used by the emitter. Override them to pick custom templates
    from a `--templates-dir` (see utils.TemplateRenderer for loader layering).
    """
    header_template: str = "qobject_header.h.j2"
    source_template: str = "qobject_source.cpp.j2"
    bridge_template: str = "bridge.rs.j2"


@dataclass
class GeneratedModule:
    """
    Rendered text of one bridge, keyed by file kind.
    """
    module: BridgeModule
    bridge: str
    header: str
    source: str

    @property
    def stem(self) -> str:
        return self.module.stem

    @property
    def bridge_name(self) -> str:
        return f"{self.stem}.cxxqt.rs"

    @property
    def header_name(self) -> str:
        return f"{self.stem}.cxxqt.h"

    @property
    def source_name(self) -> str:
        return f"{self.stem}.cxxqt.cpp"

    def to_dict(self) -> Dict:
        return {
            "stem": self.stem,
            "bridge": self.bridge_name,
            "header": self.header_name,
            "source": self.source_name,
        }


def header_include(include_prefix: str, stem: str, suffix: str = "cxxqt.h") -> str:
    name = f"{stem}.{suffix}"
    return f"{include_prefix}/{name}" if include_prefix else name


# --------------------------
# Emitter
# --------------------------

class QObjectEmitter:
    """
    Render and write the generated sources of structured bridge modules.

    Usage:
        emitter = QObjectEmitter(ctx, renderer, config)
        emitter.emit(modules)
    """

    def __init__(self, ctx: GenerationContext, renderer: TemplateRenderer, config: Optional[EmitterConfig] = None) -> None:
        self.ctx = ctx
        self.renderer = renderer
        self.config = config or EmitterConfig()

    # ---- Public API ----

    def render(self, module: BridgeModule) -> GeneratedModule:
        """
        Generate the fragments of every object in `module` and render the three
        templates. Errors from all objects are raised together.
        """
        cpp_objects: List[GeneratedCppQObject] = []
        rust_objects: List[GeneratedRustQObject] = []
        errors = ErrorCollector()
        for obj in module.objects:
            with errors.collect():
                cpp_objects.append(generate_cpp_qobject(obj))
            with errors.collect():
                rust_objects.append(generate_rust_qobject(obj, module.namespace))
        errors.raise_if_any()

        context = self._context(module, cpp_objects, rust_objects)
        header = self.renderer.render(self.config.header_template, context)
        source = self.renderer.render(self.config.source_template, context)
        bridge = self.renderer.render(self.config.bridge_template, context)
        return GeneratedModule(module=module, bridge=bridge, header=header, source=source)

    def emit(self, modules: Sequence[BridgeModule]) -> List[GeneratedModule]:
        """
        Render every module and write its files. Returns the rendered modules.
        """
        if not self.ctx.dry_run:
            ensure_dir(self.ctx.output_dir)
            ensure_dir(self.ctx.header_dir)

        generated: List[GeneratedModule] = []
        for module in modules:
            try:
                result = self.render(module)
            except Exception:
                logger.exception("Failed to render bridge `%s`; aborting generation", module.ident)
                raise
            self._write(result)
            generated.append(result)

        logger.info("Generation complete under: %s", self.ctx.output_dir)
        return generated

    # ---- Internals ----

    def _context(
        self,
        module: BridgeModule,
        cpp_objects: Sequence[GeneratedCppQObject],
        rust_objects: Sequence[GeneratedRustQObject],
    ) -> Dict:
        includes: List[str] = []
        for obj in cpp_objects:
            for include in obj.blocks.includes:
                if include not in includes:
                    includes.append(include)

        cxx_mod_contents: List[str] = []
        implementation: List[str] = []
        for obj in rust_objects:
            cxx_mod_contents.extend(obj.blocks.cxx_mod_contents)
            implementation.extend(obj.blocks.implementation)

        prefix = self.ctx.include_prefix
        return {
            "ident": module.ident,
            "namespace": module.namespace,
            "stem": module.stem,
            "attrs": [attr.to_rust() for attr in module.attrs],
            "includes": includes,
            "cxx_header": header_include(prefix, module.stem, "cxx.h"),
            "cxxqt_header": header_include(prefix, module.stem),
            "any_threading": any(obj.threading for obj in cpp_objects),
            "cpp_objects": [obj.to_dict() for obj in cpp_objects],
            "rust_objects": [obj.to_dict() for obj in rust_objects],
            "has_signals": module.has_signals,
            "connection_types": connection_types(),
            "bridge_items": [item.to_rust() for item in module.bridge_items],
            "implementation_items": [item.to_rust() for item in module.implementation_items],
            "cxx_mod_contents": cxx_mod_contents,
            "implementation": implementation,
        }

    def _write(self, result: GeneratedModule) -> None:
        outputs = [
            (self.ctx.output_dir / result.bridge_name, result.bridge),
            (self.ctx.header_dir / result.header_name, result.header),
            (self.ctx.output_dir / result.source_name, result.source),
        ]
        try:
            for path, content in outputs:
                write_text(path, content, dry_run=self.ctx.dry_run)
        except Exception:
            logger.exception("Failed to write generated files for `%s`", result.stem)
            raise


__all__ = ["EmitterConfig", "GeneratedModule", "QObjectEmitter", "header_include"]
