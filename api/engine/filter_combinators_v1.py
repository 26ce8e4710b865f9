from __future__ import annotations

from typing import Any, Callable, Sequence

VERSION = "filter_combinators_v1"

Filter = Callable[[Any], bool]


def and_filters(filters: Sequence[Filter]) -> Filter:
    members = tuple(filters)

    def _and(element: Any) -> bool:
        return all(fn(element) for fn in members)

    return _and


def or_filters(filters: Sequence[Filter]) -> Filter:
    # An empty OR group never denies; see and_filters.
    members = tuple(filters)

    def _or(element: Any) -> bool:
        if len(members) == 0:
            return True
        return any(fn(element) for fn in members)

    return _or


def not_filter(fn: Filter) -> Filter:
    def _not(element: Any) -> bool:
        return not fn(element)

    return _not


def not_unless(not_fn: Filter, unless_filters: Sequence[Filter]) -> Filter:
    exceptions = tuple(unless_filters)
    unless = or_filters(exceptions)

    def _not_unless(element: Any) -> bool:
        if len(exceptions) > 0 and unless(element):
            return True
        return not not_fn(element)

    return _not_unless
