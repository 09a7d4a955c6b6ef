"""Semantic-version range handling with SemVer 2.0 precedence.

Supported expressions:
- exact versions (e.g., "1.2.3", "=1.2.3", "==1.2.3")
- comparators ">", ">=", "<", "<=", "!=" (or "!")
- comparator sets split by spaces, all of which must hold: ">=1.2.3 <2.0.0"
- alternatives split by "||", any of which may hold: "<1.0.0 || >=2.0.0"
- wildcards "1.x", "1.2.x", "*"
- caret ranges ^x.y.z → >=x.y.z <x+1.0.0
- tilde ranges ~x.y.z → >=x.y.z <x.y+1.0

Candidates must be strict ``MAJOR.MINOR.PATCH[-pre][+build]`` versions. A
pre-release ranks below its release; its dot-separated identifiers compare
numerically when numeric, in ASCII order otherwise, and numeric identifiers
rank below alphanumeric ones. Build metadata is ignored when comparing.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import total_ordering
from typing import TypeAlias


class SemverParseError(ValueError):
    """Raised when a version or range expression is not valid semver syntax."""


PrereleaseKey: TypeAlias = tuple[tuple[int, int | str], ...]


def _identifier_key(identifier: str) -> tuple[int, int | str]:
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


@total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed semantic version ordered by SemVer 2.0 precedence."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)

    def _key(self) -> tuple[int, int, int, int, PrereleaseKey]:
        # A release (no pre-release) outranks every pre-release of it.
        if not self.prerelease:
            return (self.major, self.minor, self.patch, 1, ())
        prerelease = tuple(_identifier_key(i) for i in self.prerelease)
        return (self.major, self.minor, self.patch, 0, prerelease)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text = f"{text}-{'.'.join(self.prerelease)}"
        if self.build:
            text = f"{text}+{'.'.join(self.build)}"
        return text


Comparator: TypeAlias = Callable[[SemVer], bool]

_NUMBER = r"(0|[1-9]\d*)"
_IDENTIFIERS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_SEMVER_RE = re.compile(
    rf"^{_NUMBER}\.{_NUMBER}\.{_NUMBER}(?:-({_IDENTIFIERS}))?(?:\+({_IDENTIFIERS}))?$"
)
_NUMBER_RE = re.compile(rf"^{_NUMBER}$")

_WILDCARDS = {"x", "X", "*"}

# Longest prefixes first so ">=" is not read as ">".
_OPERATOR_PREFIXES = (">=", "<=", "!=", "==", ">", "<", "=", "!")
_OPERATORS: dict[str, Callable[[SemVer, SemVer], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "=": operator.eq,
    "": operator.eq,
    "!=": operator.ne,
    "!": operator.ne,
}


def parse_version(value: str) -> SemVer:
    """Parse a strict semantic version."""
    match = _SEMVER_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise SemverParseError(f"Invalid semantic version: {value!r}")

    major, minor, patch, prerelease, build = match.groups()
    identifiers = tuple(prerelease.split(".")) if prerelease else ()
    for identifier in identifiers:
        if identifier.isdigit() and len(identifier) > 1 and identifier.startswith("0"):
            raise SemverParseError(f"Leading zero in pre-release of version: {value!r}")

    return SemVer(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        prerelease=identifiers,
        build=tuple(build.split(".")) if build else (),
    )


def _next_major(v: SemVer) -> SemVer:
    return SemVer(v.major + 1, 0, 0)


def _next_minor(v: SemVer) -> SemVer:
    return SemVer(v.major, v.minor + 1, 0)


def _split_operator(token: str) -> tuple[str, str]:
    for prefix in _OPERATOR_PREFIXES:
        if token.startswith(prefix):
            return prefix, token[len(prefix) :]
    return "", token


def _wildcard_bounds(text: str) -> tuple[SemVer, SemVer] | None | bool:
    """Return (lower, upper) for "1.x"/"1.2.x", True for "*", None if no wildcard."""
    if "-" in text or "+" in text:
        return None
    parts = text.split(".")
    if not any(part in _WILDCARDS for part in parts):
        return None
    if len(parts) > 3:
        raise SemverParseError(f"Invalid wildcard version: {text!r}")

    fixed: list[int] = []
    for position, part in enumerate(parts):
        if part in _WILDCARDS:
            if any(rest not in _WILDCARDS for rest in parts[position + 1 :]):
                raise SemverParseError(f"Invalid wildcard version: {text!r}")
            break
        if not _NUMBER_RE.match(part):
            raise SemverParseError(f"Invalid wildcard version: {text!r}")
        fixed.append(int(part))

    if not fixed:
        return True
    if len(fixed) == 1:
        lower = SemVer(fixed[0], 0, 0)
        return lower, _next_major(lower)
    lower = SemVer(fixed[0], fixed[1], 0)
    return lower, _next_minor(lower)


def _wildcard_comparator(op: str, bounds: tuple[SemVer, SemVer] | bool) -> Comparator:
    if bounds is True:
        everything = op in {"", "=", "==", ">=", "<="}
        return lambda v: everything

    lower, upper = bounds
    if op in {"", "=", "=="}:
        return lambda v: lower <= v < upper
    if op in {"!=", "!"}:
        return lambda v: not (lower <= v < upper)
    if op == ">=":
        return lambda v: v >= lower
    if op == ">":
        return lambda v: v >= upper
    if op == "<":
        return lambda v: v < lower
    return lambda v: v < upper


def _parse_token(token: str) -> list[Comparator]:
    # caret ^x.y.z
    if token.startswith("^"):
        base = parse_version(token[1:])
        upper = _next_major(base)
        return [lambda v: v >= base, lambda v: v < upper]

    # tilde ~x.y.z
    if token.startswith("~"):
        base = parse_version(token[1:])
        upper = _next_minor(base)
        return [lambda v: v >= base, lambda v: v < upper]

    op, text = _split_operator(token)
    if not text:
        raise SemverParseError(f"Missing version after operator in {token!r}")

    bounds = _wildcard_bounds(text)
    if bounds is not None:
        return [_wildcard_comparator(op, bounds)]

    target = parse_version(text)
    compare = _OPERATORS[op]
    return [lambda v: compare(v, target)]


def _tokenize(part: str) -> list[str]:
    """Split a comparator set on whitespace, joining "> 1.2.3" into ">1.2.3"."""
    tokens: list[str] = []
    pending = ""
    for raw in part.split():
        if raw in _OPERATOR_PREFIXES:
            if pending:
                raise SemverParseError(f"Dangling operator {pending!r} in {part!r}")
            pending = raw
            continue
        tokens.append(pending + raw)
        pending = ""
    if pending:
        raise SemverParseError(f"Dangling operator {pending!r} in {part!r}")
    return tokens


def parse_range(expr: str) -> Comparator:
    """Parse a range expression into a predicate over ``SemVer`` values."""
    if not isinstance(expr, str) or not expr.strip():
        raise SemverParseError(f"Invalid semantic version range: {expr!r}")

    alternatives: list[list[Comparator]] = []
    for part in expr.split("||"):
        tokens = _tokenize(part)
        if not tokens:
            raise SemverParseError(f"Empty alternative in range: {expr!r}")
        alternatives.append([c for token in tokens for c in _parse_token(token)])

    def contains(v: SemVer) -> bool:
        return any(all(check(v) for check in group) for group in alternatives)

    return contains


def matches(range_expr: str, candidate: str) -> bool:
    """Return True when ``candidate`` satisfies ``range_expr``.

    Raises:
        SemverParseError: If either argument is not valid semver syntax.
    """
    contains = parse_range(range_expr)
    return contains(parse_version(candidate))


def version_sort_key(text: str) -> tuple[int, SemVer | str]:
    """Sort key that ranks unparseable versions below every valid one.

    Unparseable versions are ordered among themselves as text.
    """
    try:
        return (1, parse_version(text))
    except SemverParseError:
        return (0, text)
