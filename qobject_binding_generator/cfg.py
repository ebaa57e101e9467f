#!/usr/bin/env python3
"""
Conditional-compilation (`#[cfg(...)]`) evaluation.

- CfgExpr variants model the predicate tree of one or more cfg attributes
- Resolvers answer single `key` / `key = "value"` leaves with True, False or
  Undetermined(reason)
- try_eval folds a tree, accumulating every undetermined leaf instead of
  stopping at the first one, so a single diagnostic can list all of them
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union
import logging

from .errors import CfgError, StructuringError
from .syntax import Attribute, Lit, Meta, Span, UNKNOWN_SPAN

logger = logging.getLogger(__name__)

# --------------------------
# Expressions
# --------------------------

class CfgExpr:
    def merge(self, other: "CfgExpr") -> "CfgExpr":
        """
        Combine two expressions with `all` semantics.
        """
        if isinstance(other, CfgUnconditional):
            return self
        return CfgAll([self, other])


@dataclass
class CfgUnconditional(CfgExpr):
    def merge(self, other: CfgExpr) -> CfgExpr:
        return other


@dataclass
class CfgEq(CfgExpr):
    key: str
    value: Optional[str] = None
    span: Span = UNKNOWN_SPAN


@dataclass
class CfgAll(CfgExpr):
    items: List[CfgExpr] = field(default_factory=list)

    def merge(self, other: CfgExpr) -> CfgExpr:
        if isinstance(other, CfgUnconditional):
            return self
        return CfgAll(self.items + [other])


@dataclass
class CfgAny(CfgExpr):
    items: List[CfgExpr] = field(default_factory=list)


@dataclass
class CfgNot(CfgExpr):
    item: CfgExpr


def _parse_predicate(node: Union[Meta, Lit]) -> CfgExpr:
    if isinstance(node, Lit):
        raise StructuringError("expected cfg predicate, found literal", node.span)
    if len(node.path) != 1:
        raise StructuringError(f"unsupported cfg predicate `{node.name}`", node.span)
    name = node.path[0]
    if node.kind == "word":
        return CfgEq(key=name, span=node.span)
    if node.kind == "name_value":
        if node.value is None or node.value.kind != "str":
            raise StructuringError("expected a string literal in cfg predicate", node.span)
        return CfgEq(key=name, value=str(node.value.value), span=node.span)
    if name == "all":
        return CfgAll([_parse_predicate(item) for item in node.items])
    if name == "any":
        return CfgAny([_parse_predicate(item) for item in node.items])
    if name == "not":
        if len(node.items) != 1:
            raise StructuringError("expected exactly one cfg predicate inside not(...)", node.span)
        return CfgNot(_parse_predicate(node.items[0]))
    raise StructuringError(f"unsupported cfg predicate `{name}(...)`", node.span)


def parse_cfg_attribute(attr: Attribute) -> CfgExpr:
    """
    Parse one `#[cfg(...)]` attribute into a CfgExpr.
    """
    meta = attr.meta
    if not meta.is_path("cfg") or meta.kind != "list" or len(meta.items) != 1:
        raise StructuringError("expected #[cfg(predicate)]", attr.span)
    return _parse_predicate(meta.items[0])


def is_cfg_attribute(attr: Attribute) -> bool:
    return attr.meta.is_path("cfg")


# --------------------------
# Resolvers
# --------------------------

@dataclass(frozen=True)
class Undetermined:
    reason: str


CfgResult = Union[bool, Undetermined]


class CfgResolver:
    """
    Answers single cfg leaves. Subclasses override `eval`.
    """

    def eval(self, key: str, value: Optional[str]) -> CfgResult:  # pragma: no cover - abstract
        raise NotImplementedError


class UnsupportedCfgResolver(CfgResolver):
    """
    Resolver used when no cfg information is available: every leaf is undetermined.
    """

    def eval(self, key: str, value: Optional[str]) -> CfgResult:
        query = f'{key} = "{value}"' if value is not None else key
        return Undetermined(f"cfg attribute `{query}` cannot be evaluated without a cfg resolver")


class StaticCfgResolver(CfgResolver):
    """
    Resolver backed by a fixed set of `key` / `key=value` flags (as given on the
    command line). In strict mode a key that was never mentioned is undetermined
    instead of false.
    """

    def __init__(self, flags: Iterable[Tuple[str, Optional[str]]] = (), strict: bool = False) -> None:
        self.flags: Set[Tuple[str, Optional[str]]] = set(flags)
        self.keys: Set[str] = {key for key, _ in self.flags}
        self.strict = strict

    @classmethod
    def from_strings(cls, values: Sequence[str], strict: bool = False) -> "StaticCfgResolver":
        """
        Build from `key` or `key=value` strings; quotes around values are optional.
        """
        flags: List[Tuple[str, Optional[str]]] = []
        for raw in values:
            key, sep, value = raw.partition("=")
            key = key.strip()
            if not key:
                raise ValueError(f"invalid cfg flag: {raw!r}")
            flags.append((key, value.strip().strip('"') if sep else None))
        return cls(flags, strict=strict)

    def eval(self, key: str, value: Optional[str]) -> CfgResult:
        if (key, value) in self.flags:
            return True
        if self.strict and key not in self.keys:
            return Undetermined(f"cfg key `{key}` is unknown to the generator")
        return False


# --------------------------
# Evaluation
# --------------------------

def try_eval(resolver: CfgResolver, expr: CfgExpr) -> Union[bool, List[str]]:
    """
    Evaluate an expression. Returns a bool, or the list of reasons for every
    undetermined leaf that decided the outcome.
    """
    if isinstance(expr, CfgUnconditional):
        return True
    if isinstance(expr, CfgEq):
        result = resolver.eval(expr.key, expr.value)
        if isinstance(result, Undetermined):
            return [result.reason]
        return bool(result)
    if isinstance(expr, CfgAll):
        errors: List[str] = []
        for sub in expr.items:
            value = try_eval(resolver, sub)
            if value is False:
                return False
            if isinstance(value, list):
                errors.extend(value)
        return errors if errors else True
    if isinstance(expr, CfgAny):
        errors = []
        for sub in expr.items:
            value = try_eval(resolver, sub)
            if value is True:
                return True
            if isinstance(value, list):
                errors.extend(value)
        return errors if errors else False
    if isinstance(expr, CfgNot):
        value = try_eval(resolver, expr.item)
        if isinstance(value, list):
            return value
        return not value
    raise TypeError(f"unknown cfg expression: {expr!r}")


def evaluate_attributes(resolver: CfgResolver, attrs: Sequence[Attribute], span: Span = UNKNOWN_SPAN) -> bool:
    """
    Merge every cfg attribute of one item with `all` semantics and evaluate it.

    Raises CfgError carrying every undetermined reason at the item's span.
    """
    expr: CfgExpr = CfgUnconditional()
    found = False
    for attr in attrs:
        if is_cfg_attribute(attr):
            expr = expr.merge(parse_cfg_attribute(attr))
            found = True
    if not found:
        return True
    result = try_eval(resolver, expr)
    if isinstance(result, list):
        raise CfgError(result, span)
    logger.debug("cfg evaluated to %s at %s", result, span)
    return result


__all__ = [
    "CfgExpr",
    "CfgUnconditional",
    "CfgEq",
    "CfgAll",
    "CfgAny",
    "CfgNot",
    "Undetermined",
    "CfgResolver",
    "StaticCfgResolver",
    "UnsupportedCfgResolver",
    "parse_cfg_attribute",
    "is_cfg_attribute",
    "try_eval",
    "evaluate_attributes",
]
