"""Naming heuristics used to classify callees and methods.

Every heuristic is an ordered table of rules; the first matching rule wins.
Nothing here looks at types: the classification is purely textual.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from flowgraph.model import CallKind, MethodType

T = TypeVar("T")

SELF_PREFIX = "this."

# Callee prefixes dropped from the structural graph (prefix match, so "map"
# also covers "mapValues").
DEFAULT_IGNORED_PACKAGES: tuple[str, ...] = (
    "console",
    "logger",
    "supabase",
    "dayjs",
    "moment",
    "axios",
    "fetch",
    "localStorage",
    "JSON",
    "Object",
    "supabaseAdmin",
    "Math",
    "Date",
    "Error",
    "map",
    "from",
    "to",
    "Array",
    "Set",
    "Map",
    "Promise",
    "pg_execute",
)

# module.method shape: an all-lowercase receiver such as ``fs`` or ``lodash``.
_MODULE_CALL_RE = re.compile(r"^[a-z][a-z0-9_]*\.")

EXTERNAL_SERVICES: tuple[str, ...] = (
    "supabaseAdmin",
    "axios",
    "pg_execute",
    "this.slack",
    "this.broadcastMessageInfoQueue",
    "this.broadcastProgressQueue",
    "EventHandler",
    "SlackWebhook",
)

DATABASE_PATTERNS: tuple[str, ...] = (
    "repository",
    "dao",
    "db",
    "database",
    "query",
    "transaction",
)

API_PATTERNS: tuple[str, ...] = ("api", "client", "http", "request", "fetch")


@dataclass(frozen=True)
class SubstringRule(Generic[T]):
    """Match when any needle occurs in the text."""

    result: T
    needles: tuple[str, ...]
    ignore_case: bool = False

    def matches(self, text: str) -> bool:
        haystack = text.lower() if self.ignore_case else text
        return any(needle in haystack for needle in self.needles)


@dataclass(frozen=True)
class PrefixRule(Generic[T]):
    """Match when the text starts with any of the prefixes."""

    result: T
    prefixes: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return text.startswith(self.prefixes)


def first_match(text: str, rules: Sequence[SubstringRule[T] | PrefixRule[T]], default: T) -> T:
    for rule in rules:
        if rule.matches(text):
            return rule.result
    return default


CALL_KIND_RULES: tuple[SubstringRule[CallKind], ...] = (
    SubstringRule(CallKind.DATABASE, ("supabaseAdmin", "pg_execute", "repository", "dao", "db")),
    SubstringRule(CallKind.API, ("axios", "fetch", "http", "request")),
    SubstringRule(CallKind.QUEUE, ("Queue", "queue", "EventHandler")),
    SubstringRule(CallKind.SERVICE, ("Service", "Client")),
    SubstringRule(CallKind.UTILITY, ("logger", "this.slack")),
)

EXTERNAL_CALL_RULES: tuple[SubstringRule[bool] | PrefixRule[bool], ...] = (
    SubstringRule(True, EXTERNAL_SERVICES),
    SubstringRule(True, DATABASE_PATTERNS, ignore_case=True),
    SubstringRule(True, API_PATTERNS, ignore_case=True),
    # Anything reached through the instance counts as a collaborator.
    PrefixRule(True, (SELF_PREFIX,)),
)

METHOD_TYPE_RULES: tuple[PrefixRule[MethodType], ...] = (
    PrefixRule(MethodType.PROCESSOR, ("process",)),
    PrefixRule(MethodType.ACTION, ("handle", "send")),
    PrefixRule(MethodType.VALIDATOR, ("validate",)),
    PrefixRule(MethodType.HELPER, ("get", "check")),
)


def strip_self_prefix(callee: str) -> str:
    """``this.helper`` -> ``helper``; anything else is returned unchanged."""
    return callee.removeprefix(SELF_PREFIX)


def is_external_package_call(
    callee: str,
    ignored_packages: Iterable[str] = DEFAULT_IGNORED_PACKAGES,
) -> bool:
    """Return True if *callee* looks like library code rather than project code."""
    name = strip_self_prefix(callee)
    if name.startswith(tuple(ignored_packages)):
        return True
    return bool(_MODULE_CALL_RE.match(name)) or name.startswith(("$", "_"))


def is_external_call(target: str) -> bool:
    """Return True if a method-call receiver is a collaborator of the handler."""
    return first_match(target, EXTERNAL_CALL_RULES, False)


def determine_call_type(target: str) -> CallKind:
    return first_match(target, CALL_KIND_RULES, CallKind.UNKNOWN)


def method_type_for_name(name: str) -> MethodType:
    return first_match(name, METHOD_TYPE_RULES, MethodType.HELPER)
