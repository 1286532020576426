"""Public API functions for mutation-summary.

This module provides the three stateless entry points: project, summarize and
compile_patterns.  Each ``project`` call creates a fresh MutationProjection,
so no state is shared between batches.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from mutation_summary.patterns import FilterPattern, parse_element_filter
from mutation_summary.projection import MutationProjection
from mutation_summary.queries import Query, validate_query
from mutation_summary.records import MutationRecord
from mutation_summary.summary import Summary, create_summary

__all__ = ["compile_patterns", "project", "summarize"]


def project(
    root: Any,
    records: Iterable[MutationRecord],
    patterns: Sequence[FilterPattern] | None = None,
    *,
    track_reordering: bool = False,
) -> MutationProjection:
    """Project one batch of records onto the tree under ``root``.

    Args:
        root:             The fixed observed root.
        records:          The batch, in emission order.
        patterns:         Merged element filter of the queries that will be
                          summarized, or None.
        track_reordering: Compute reordering for nodes that stayed in.  Only
                          needed when an ``all`` query will be summarized.

    Returns:
        A ``MutationProjection`` ready for ``summarize``.
    """
    return MutationProjection(root, records, patterns, track_reordering=track_reordering)


def summarize(projection: MutationProjection, query: Query | Mapping[str, Any]) -> Summary:
    """Answer one query from a projection.

    Args:
        projection: Result of ``project``.
        query:      A query object or its mapping form, e.g. ``{"element": "p"}``.

    Returns:
        A ``Summary`` bound to ``projection`` for old-value lookups.

    Raises:
        QueryError: If ``query`` is invalid.
        UsageError: If ``projection`` has been discarded.
    """
    return create_summary(projection, validate_query(query))


def compile_patterns(text: str) -> tuple[FilterPattern, ...]:
    """Compile element filter text such as ``div.note, a[href]`` into patterns.

    Raises:
        PatternSyntaxError: On malformed input, naming the offending position.
    """
    return parse_element_filter(text)
