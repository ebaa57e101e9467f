#!/usr/bin/env python3
"""
Shared plumbing for the QObject binding generator: logging setup, the Jinja2
renderer used by the emitter, and the file writer for generated outputs.

- `configure_logging` installs one console handler (plus an optional log file)
  on the root logger and aligns the package logger with it.
- `TemplateRenderer` searches a user templates directory before the packaged
  templates and registers the filters the `.j2` files use.
- `write_text` writes generated files atomically, leaves unchanged files alone
  and only reports what it would write in dry-run mode.
"""

from __future__ import annotations

import os
import re
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union
import logging

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from .naming import camel_to_snake, snake_to_camel

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "qobject_binding_generator"
PACKAGE_TEMPLATES = Path(__file__).parent / "templates"
DEFAULT_LOG_FORMAT = "%(levelname)s: %(message)s"


# --------------------------
# Logging
# --------------------------

def resolve_level(level: Optional[Union[int, str]]) -> int:
    """
    Accept a level number or name (case-insensitive); anything unknown is INFO.
    """
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: Optional[Union[int, str]] = None,
    *,
    log_file: Optional[Union[str, Path]] = None,
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Route generator logs to `stream` (stderr by default) and, when given, to
    `log_file` (truncated on each run). Replaces handlers installed by an
    earlier call.
    """
    resolved = resolve_level(level)
    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(str(log_file), mode="w", encoding="utf-8"))
    logging.basicConfig(level=resolved, format=fmt or DEFAULT_LOG_FORMAT, handlers=handlers, force=True)
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)


# --------------------------
# Templates
# --------------------------

def namespace_open(namespace: str) -> str:
    """
    `a::b` -> `namespace a::b {`; the global namespace renders as nothing.
    """
    return f"namespace {namespace} {{" if namespace else ""


def namespace_close(namespace: str) -> str:
    return f"}} // namespace {namespace}" if namespace else ""


class TemplateRenderer:
    """
    Jinja2 environment over `[templates_dir, package templates]`; a template in
    `templates_dir` shadows the packaged one of the same name.

    Rendering is strict: a name missing from the context is an error rather
    than an empty string.
    """

    FILTERS = {
        "to_snake": camel_to_snake,
        "to_camel": snake_to_camel,
        "namespace_open": namespace_open,
        "namespace_close": namespace_close,
    }

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        search_path: List[str] = []
        if templates_dir is not None:
            if Path(templates_dir).is_dir():
                search_path.append(str(templates_dir))
            else:
                logger.warning("Templates directory %s does not exist; using package templates", templates_dir)
        search_path.append(str(PACKAGE_TEMPLATES))
        self.search_path = search_path

        self.env = Environment(
            loader=FileSystemLoader(search_path),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters.update(self.FILTERS)

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound as e:
            raise RuntimeError(f"Template not found: {template_name} (searched {', '.join(self.search_path)})") from e
        logger.debug("Rendering %s", template.filename)
        return template.render(**context)


# --------------------------
# Output files
# --------------------------

_LINE_ENDINGS = re.compile(r"\r\n?")


def ensure_dir(path: Union[str, Path]) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def normalize_newlines(text: str) -> str:
    return _LINE_ENDINGS.sub("\n", text)


def _unchanged(path: Path, content: str, encoding: str) -> bool:
    if not path.is_file():
        return False
    with open(path, encoding=encoding, newline="") as f:
        return normalize_newlines(f.read()) == content


def _replace_atomically(path: Path, content: str, encoding: str) -> None:
    """
    Write into a sibling temporary file and rename it over `path`, so readers
    never observe a partially written output.
    """
    with tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        newline="\n",
        dir=str(path.parent),
        prefix=f".{path.name}.",
        delete=False,
    ) as tmp:
        tmp.write(content)
    try:
        os.chmod(tmp.name, 0o644)
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise


def write_text(path: Union[str, Path], content: str, encoding: str = "utf-8", dry_run: bool = False) -> bool:
    """
    Write a generated file with Unix newlines. Returns True when the file was
    written, False when it was already up to date or `dry_run` is set.
    """
    path = Path(path)
    content = normalize_newlines(content)
    if dry_run:
        logger.info("[dry-run] write %s", path)
        return False
    ensure_dir(path.parent)
    if _unchanged(path, content, encoding):
        logger.debug("[skip] %s (unchanged)", path)
        return False
    _replace_atomically(path, content, encoding)
    logger.info("[write] %s", path)
    return True


__all__ = [
    "DEFAULT_LOG_FORMAT",
    "TemplateRenderer",
    "configure_logging",
    "resolve_level",
    "namespace_open",
    "namespace_close",
    "ensure_dir",
    "normalize_newlines",
    "write_text",
]
