#!/usr/bin/env python3
"""
QObject binding generator for annotated Rust bridge modules.

This entrypoint wires together:
- Parsing (Lark-based) of `#[cxx_qt::bridge]` modules into structured QObject descriptions
- Emitting (Jinja2-based) of the Rust cxx bridge, the C++ header and the C++ source
- An optional JSON manifest that exports names for downstream generation runs

Outputs, per bridge module:
- <output_dir>/<stem>.cxxqt.rs
- <output_dir>/<stem>.cxxqt.cpp
- <include_dir>/<include_prefix>/<stem>.cxxqt.h
- <optional> <output_dir>/manifest.json

Usage (example):
  python -m qobject_binding_generator.generate_bindings \
    --input src/bridges \
    --name my_crate \
    --cfg 'feature="qml"' \
    --dependency-manifest ../cxx-qt-lib/manifest.json \
    --output-dir target/cxxqt \
    --include-dir target/cxxqt/include
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

from .cfg import StaticCfgResolver
from .emitters.qobject_emitter import EmitterConfig, QObjectEmitter
from .errors import GeneratorError, format_error
from .manifest import emit_manifest, load_dependency_manifests
from .models import BridgeModule, GenerationContext, NameMappings
from .parsing.bridge_parser import parse_bridge
from .parsing.rust_parser import parse_source
from .utils import TemplateRenderer, configure_logging


# --------------------------
# Helpers
# --------------------------

def discover_source_files(paths: List[str]) -> List[Path]:
    """
    Expand files and directories into a unique list of `.rs` files; directories
    are searched recursively in sorted order.
    """
    results: List[Path] = []
    for p in paths:
        pp = Path(p)
        if pp.is_file() and pp.suffix == ".rs":
            results.append(pp.resolve())
        elif pp.is_dir():
            results.extend(sorted(pp.rglob("*.rs")))
        else:
            logger.warning("Skipping non-existent or non-Rust path: %s", p)

    seen: set[str] = set()
    unique: List[Path] = []
    for f in results:
        s = str(f.resolve())
        if s in seen:
            continue
        seen.add(s)
        unique.append(Path(s))
    return unique


def parse_bridge_file(
    path: Path,
    resolver: StaticCfgResolver,
    dependency_mappings: NameMappings,
) -> BridgeModule:
    text = Path(path).read_text(encoding="utf-8")
    module = parse_bridge(parse_source(text), resolver, dependency_mappings)
    logger.debug("Parsed bridge `%s` from %s with %d QObject(s)", module.ident, path, len(module.objects))
    return module


def check_unique_stems(modules: Sequence[BridgeModule], sources: Sequence[Path]) -> None:
    owners = {}
    for module, source in zip(modules, sources):
        if module.stem in owners:
            raise GeneratorError(
                f"Bridges in {owners[module.stem]} and {source} both generate files named `{module.stem}`; "
                "set a distinct cxx_file_stem"
            )
        owners[module.stem] = source


# --------------------------
# CLI
# --------------------------

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate C++/Rust QObject bindings from annotated Rust bridge modules")

    p.add_argument(
        "--input",
        action="append",
        default=[],
        help="Rust source file or directory containing bridge modules (repeatable). Directories are searched for .rs files.",
    )
    p.add_argument(
        "--output-dir",
        default="generated",
        help="Output directory for the generated .cxxqt.rs and .cxxqt.cpp files (and manifest.json).",
    )
    p.add_argument(
        "--include-dir",
        default=None,
        help="Root directory for generated headers (default: <output-dir>/include).",
    )
    p.add_argument(
        "--include-prefix",
        default="cxx-qt-gen",
        help="Directory under --include-dir that headers are written to and included from.",
    )
    p.add_argument(
        "--cfg",
        action="append",
        default=[],
        help="Enabled cfg flag, as `key` or `key=value` (repeatable), e.g. --cfg 'feature=\"qml\"'.",
    )
    p.add_argument(
        "--strict-cfg",
        action="store_true",
        help="Treat cfg keys that were never passed with --cfg as undetermined (an error) instead of false.",
    )
    p.add_argument(
        "--dependency-manifest",
        action="append",
        default=[],
        help="manifest.json of a dependency whose name mappings should be used (repeatable, later wins).",
    )
    p.add_argument(
        "--name",
        default="crate",
        help="Name under which this run's exported types are recorded in the manifest.",
    )
    p.add_argument(
        "--templates-dir",
        default=None,
        help="Optional templates directory. Templates found there override the package templates.",
    )
    p.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not emit the JSON manifest alongside generated sources.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and render every bridge, reporting files without writing them.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for DEBUG).",
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease verbosity (-q for WARNING, -qq for ERROR).",
    )
    p.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET", "critical", "error", "warning", "info", "debug", "notset"],
        default=None,
        help="Explicit log level (overrides -v/-q).",
    )
    p.add_argument(
        "--log-format",
        default="%(levelname)s: %(message)s",
        help="Logging format string.",
    )
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional file to write logs to.",
    )

    return p.parse_args(argv)


def _log_level(ns: argparse.Namespace) -> int:
    if ns.log_level:
        return getattr(logging, str(ns.log_level).upper(), logging.INFO)
    if ns.verbose >= 1:
        return logging.DEBUG
    if ns.quiet >= 2:
        return logging.ERROR
    if ns.quiet == 1:
        return logging.WARNING
    return logging.INFO


# --------------------------
# Main
# --------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = parse_args(argv)

    configure_logging(level=_log_level(ns), log_file=ns.log_file, fmt=ns.log_format)

    out_dir = Path(ns.output_dir).resolve()
    include_dir = Path(ns.include_dir).resolve() if ns.include_dir else out_dir / "include"

    ctx = GenerationContext(
        output_dir=out_dir,
        include_dir=include_dir,
        templates_dir=Path(ns.templates_dir).resolve() if ns.templates_dir else None,
        include_prefix=ns.include_prefix.strip("/"),
        dry_run=ns.dry_run,
    )

    try:
        renderer = TemplateRenderer(ctx.templates_dir)
    except Exception:
        logger.exception("Failed to initialize templating")
        return 1

    sources = discover_source_files(ns.input)
    if not sources:
        logger.error("No Rust sources found to parse. Provide --input.")
        return 2

    try:
        resolver = StaticCfgResolver.from_strings(ns.cfg, strict=ns.strict_cfg)
        dependency_mappings = load_dependency_manifests(ns.dependency_manifest)
    except (GeneratorError, ValueError) as e:
        logger.error("%s", e)
        return 3

    modules: List[BridgeModule] = []
    failed = False
    for source in sources:
        try:
            modules.append(parse_bridge_file(source, resolver, dependency_mappings))
        except GeneratorError as e:
            failed = True
            for line in format_error(e, str(source)).splitlines():
                logger.error("%s", line)
        except OSError as e:
            failed = True
            logger.error("Could not read %s: %s", source, e)
    if failed:
        return 3

    try:
        check_unique_stems(modules, sources)
    except GeneratorError as e:
        logger.error("%s", e)
        return 3

    logger.info("Parsed %d bridge(s) with %d QObject(s)", len(modules), sum(len(m.objects) for m in modules))

    try:
        emitter = QObjectEmitter(ctx=ctx, renderer=renderer, config=EmitterConfig())
        emitter.emit(modules)
    except GeneratorError as e:
        for line in format_error(e).splitlines():
            logger.error("%s", line)
        return 4
    except Exception:
        logger.exception("Failed to generate files")
        return 4

    if not ns.no_manifest:
        try:
            emit_manifest(ctx, ns.name, modules)
        except Exception:
            logger.exception("Failed to emit generation manifest")
            return 5

    if ctx.dry_run:
        logger.info("Dry-run complete (no files written).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
