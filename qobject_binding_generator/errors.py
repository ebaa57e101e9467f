#!/usr/bin/env python3
"""
Error types for the QObject binding generator.

Every error raised while turning a bridge module into generated code carries the
source span of the construct that caused it, so build tools can report
`file:line:column: message` verbatim.

Taxonomy:
- SyntaxParseError: the text front end could not parse the input
- StructuringError: malformed or contradictory annotations, missing companion
  attributes, visibility violations
- TypeMappingError: a declared type has a shape the native target cannot express
- CfgError: one or more conditional-compilation predicates could not be decided
- GeneratorErrorGroup: several of the above collected across items or members
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, TYPE_CHECKING
import logging

if TYPE_CHECKING:  # pragma: no cover
    from .syntax import Span

logger = logging.getLogger(__name__)


class GeneratorError(Exception):
    """
    Base class of every error surfaced by the generator.
    """

    def __init__(self, message: str, span: Optional["Span"] = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        if self.span is not None and self.span.known:
            return f"{self.span}: {self.message}"
        return self.message

    def diagnostics(self) -> List["GeneratorError"]:
        """
        Flatten into the list of leaf errors (a single error is its own leaf).
        """
        return [self]


class SyntaxParseError(GeneratorError):
    pass


class StructuringError(GeneratorError):
    pass


class TypeMappingError(GeneratorError):
    pass


class CfgError(GeneratorError):
    """
    Aggregates every undetermined cfg leaf found while evaluating one item.
    """

    def __init__(self, reasons: Sequence[str], span: Optional["Span"] = None) -> None:
        self.reasons = list(reasons)
        super().__init__("\n".join(self.reasons), span)


class GeneratorErrorGroup(GeneratorError):
    """
    A collection of errors gathered from independent items or members.
    """

    def __init__(self, errors: Sequence[GeneratorError]) -> None:
        flattened: List[GeneratorError] = []
        for err in errors:
            flattened.extend(err.diagnostics())
        self.errors = flattened
        first_span = flattened[0].span if flattened else None
        super().__init__(f"{len(flattened)} error(s) while generating bindings", first_span)

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def diagnostics(self) -> List[GeneratorError]:
        return list(self.errors)


class ErrorCollector:
    """
    Collect GeneratorErrors from independent units of work and raise them together.

    Usage:
        errors = ErrorCollector()
        for item in items:
            with errors.collect():
                handle(item)
        errors.raise_if_any()
    """

    def __init__(self) -> None:
        self.errors: List[GeneratorError] = []

    @contextmanager
    def collect(self) -> Iterator[None]:
        try:
            yield
        except GeneratorError as err:
            logger.debug("Collected error: %s", err)
            self.errors.extend(err.diagnostics())

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self) -> None:
        if not self.errors:
            return
        if len(self.errors) == 1:
            raise self.errors[0]
        raise GeneratorErrorGroup(self.errors)


def format_error(error: GeneratorError, filename: Optional[str] = None) -> str:
    """
    Render an error (or every error of a group) as `file:line:column: message` lines.
    """
    lines: List[str] = []
    for err in error.diagnostics():
        location = ""
        if filename:
            location = filename
        if err.span is not None and err.span.known:
            location = f"{location}:{err.span}" if location else str(err.span)
        prefix = f"{location}: " if location else ""
        message_lines = err.message.splitlines() or [""]
        lines.append(prefix + message_lines[0])
        lines.extend(message_lines[1:])
    return "\n".join(lines)


__all__ = [
    "GeneratorError",
    "SyntaxParseError",
    "StructuringError",
    "TypeMappingError",
    "CfgError",
    "GeneratorErrorGroup",
    "ErrorCollector",
    "format_error",
]
