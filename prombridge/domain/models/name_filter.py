"""Name-based filters deciding which metrics leave the process.

Two filters exist:

- NameFilter: included names, included prefixes and excluded prefixes.
  Used for the static include/exclude configuration and for the
  ``?name[]=`` restriction of a scrape.
- SampleNameFilter: same clauses plus an excluded-names set. Names are
  matched against series names, so histogram and summary children must
  be listed explicitly (``x_count``, ``x_sum``, ``x_bucket``).

Every clause is independent and passes vacuously when its set is empty;
the clauses combine with AND. An excluded prefix therefore rejects a
name even when the same name is listed as included.

Prefix matching is a literal ``str.startswith`` test, never a glob or
regular expression.

Usage:
    name_filter = (
        NameFilter.builder()
        .include_prefixes(["http_", "process_"])
        .exclude_prefixes(["process_virtual"])
        .build()
    )
    name_filter.accepts("http_requests_total")  # True
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

_LIST_DELIMITERS = re.compile(r"[,; \t\n]+")


def _as_strings(values: Iterable[str] | str) -> list[str]:
    # A bare string is one name, not a sequence of characters.
    if isinstance(values, str):
        return [values]
    return list(values)


class NamePredicate(ABC):
    """Predicate over metric or series names."""

    @abstractmethod
    def accepts(self, name: str) -> bool:
        """Return True if ``name`` should be exported."""

    def and_(self, other: NamePredicate) -> NamePredicate:
        """Return a new predicate accepting names both predicates accept.

        Neither operand is modified.

        Raises:
            TypeError: If ``other`` is None.
        """
        if other is None:
            raise TypeError("cannot compose a name filter with None")
        return AndPredicate(self, other)

    def __call__(self, name: str) -> bool:
        return self.accepts(name)


class _AcceptAll(NamePredicate):
    """Stateless predicate accepting every name."""

    def accepts(self, name: str) -> bool:
        return True

    def __repr__(self) -> str:
        return "ACCEPT_ALL"


ACCEPT_ALL: NamePredicate = _AcceptAll()


@dataclass(frozen=True)
class AndPredicate(NamePredicate):
    """Logical AND of two predicates."""

    left: NamePredicate
    right: NamePredicate

    def accepts(self, name: str) -> bool:
        return self.left.accepts(name) and self.right.accepts(name)


def _starts_with_any(name: str, prefixes: tuple[str, ...]) -> bool:
    return bool(prefixes) and name.startswith(prefixes)


@dataclass(frozen=True)
class NameFilter(NamePredicate):
    """Immutable include/exclude filter over metric names.

    Attributes:
        included_names: Exact names; if non-empty the name must be one of them.
        included_prefixes: If non-empty the name must start with one of them.
        excluded_prefixes: A name starting with any of them is rejected.
    """

    included_names: frozenset[str] = frozenset()
    included_prefixes: tuple[str, ...] = ()
    excluded_prefixes: tuple[str, ...] = ()

    def accepts(self, name: str) -> bool:
        return (
            self._matches_included_names(name)
            and self._matches_included_prefixes(name)
            and not _starts_with_any(name, self.excluded_prefixes)
        )

    def _matches_included_names(self, name: str) -> bool:
        if not self.included_names:
            return True
        return name in self.included_names

    def _matches_included_prefixes(self, name: str) -> bool:
        if not self.included_prefixes:
            return True
        return name.startswith(self.included_prefixes)

    @staticmethod
    def builder() -> NameFilterBuilder:
        """Return an empty builder."""
        return NameFilterBuilder()

    def to_builder(self) -> NameFilterBuilder:
        """Return a builder pre-populated with this filter's clauses."""
        return (
            NameFilterBuilder()
            .include_names(self.included_names)
            .include_prefixes(self.included_prefixes)
            .exclude_prefixes(self.excluded_prefixes)
        )


class NameFilterBuilder:
    """Accumulates raw names and prefixes for a NameFilter.

    ``build()`` snapshots the accumulated values, so building again
    after adding more values never changes a filter built earlier.
    Empty collections mean no restriction.
    """

    def __init__(self) -> None:
        self._included_names: list[str] = []
        self._included_prefixes: list[str] = []
        self._excluded_prefixes: list[str] = []

    def include_names(self, names: Iterable[str] | str) -> NameFilterBuilder:
        self._included_names.extend(_as_strings(names))
        return self

    def include_prefixes(self, prefixes: Iterable[str] | str) -> NameFilterBuilder:
        self._included_prefixes.extend(_as_strings(prefixes))
        return self

    def exclude_prefixes(self, prefixes: Iterable[str] | str) -> NameFilterBuilder:
        self._excluded_prefixes.extend(_as_strings(prefixes))
        return self

    def build(self) -> NameFilter:
        return NameFilter(
            included_names=frozenset(self._included_names),
            included_prefixes=tuple(self._included_prefixes),
            excluded_prefixes=tuple(self._excluded_prefixes),
        )


@dataclass(frozen=True)
class SampleNameFilter(NamePredicate):
    """Immutable filter over series (sample) names.

    Adds an excluded-names clause to the NameFilter clauses. Evaluation
    order: included names, excluded names, included prefixes, excluded
    prefixes.
    """

    included_names: frozenset[str] = frozenset()
    excluded_names: frozenset[str] = frozenset()
    included_prefixes: tuple[str, ...] = ()
    excluded_prefixes: tuple[str, ...] = ()

    def accepts(self, name: str) -> bool:
        return (
            (not self.included_names or name in self.included_names)
            and name not in self.excluded_names
            and (not self.included_prefixes or name.startswith(self.included_prefixes))
            and not _starts_with_any(name, self.excluded_prefixes)
        )

    @staticmethod
    def builder() -> SampleNameFilterBuilder:
        return SampleNameFilterBuilder()


class SampleNameFilterBuilder:
    """Builder for SampleNameFilter."""

    def __init__(self) -> None:
        self._included_names: list[str] = []
        self._excluded_names: list[str] = []
        self._included_prefixes: list[str] = []
        self._excluded_prefixes: list[str] = []

    def name_must_be_equal_to(
        self, names: Iterable[str] | str
    ) -> SampleNameFilterBuilder:
        """Only series with one of ``names`` are included.

        This is what HTTP exporters use for the ``?name[]=`` parameter.
        """
        self._included_names.extend(_as_strings(names))
        return self

    def name_must_not_be_equal_to(
        self, names: Iterable[str] | str
    ) -> SampleNameFilterBuilder:
        self._excluded_names.extend(_as_strings(names))
        return self

    def name_must_start_with(
        self, prefixes: Iterable[str] | str
    ) -> SampleNameFilterBuilder:
        self._included_prefixes.extend(_as_strings(prefixes))
        return self

    def name_must_not_start_with(
        self, prefixes: Iterable[str] | str
    ) -> SampleNameFilterBuilder:
        self._excluded_prefixes.extend(_as_strings(prefixes))
        return self

    def build(self) -> SampleNameFilter:
        return SampleNameFilter(
            included_names=frozenset(self._included_names),
            excluded_names=frozenset(self._excluded_names),
            included_prefixes=tuple(self._included_prefixes),
            excluded_prefixes=tuple(self._excluded_prefixes),
        )


def string_to_list(text: str | None) -> list[str]:
    """Split a delimiter-separated list of names.

    Delimiters are any of ``,`` ``;`` space, tab and newline. Empty
    tokens are dropped. This gives exporters one consistent format for
    configuring name lists (e.g. through environment variables).

    Args:
        text: Raw list, or None.

    Returns:
        The non-empty tokens in order.
    """
    if not text:
        return []
    return [token for token in _LIST_DELIMITERS.split(text.strip()) if token]


def restrict_to_names_equal_to(
    name_filter: NamePredicate | None, allowed_names: Iterable[str] | None
) -> NamePredicate | None:
    """Compose ``name_filter`` with an exact-name restriction.

    Args:
        name_filter: Existing filter, or None for no existing filter.
        allowed_names: Names to restrict to; None or empty leaves
            ``name_filter`` unchanged.

    Returns:
        The composed filter, ``name_filter`` itself when there is nothing
        to restrict, or None when both arguments are absent.
    """
    names = list(allowed_names or ())
    if not names:
        return name_filter
    included = SampleNameFilter.builder().name_must_be_equal_to(names).build()
    if name_filter is None:
        return included
    return included.and_(name_filter)
