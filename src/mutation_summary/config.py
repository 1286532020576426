"""SummaryOptions: validated configuration for a MutationSummary.

SummaryOptions is a frozen (immutable) dataclass.  Query requests given as
mappings are converted to query objects on construction, so an options
instance always holds validated queries.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mutation_summary.errors import QueryError
from mutation_summary.patterns import FilterPattern
from mutation_summary.queries import AllQuery, Query, validate_query

if TYPE_CHECKING:
    from mutation_summary.summary import Summary


@dataclass(frozen=True, slots=True)
class SummaryOptions:
    """Immutable configuration for a MutationSummary.

    Attributes:
        root: The observed root node.
        callback: Called with the list of summaries for every batch.
        queries: Validated queries, in declaration order.  Accepts query
            objects or their mapping form.
        observe_own_changes: When False (the default), changes made by the
            callback itself are not reported in a later batch.
    """

    root: Any
    callback: Callable[[list[Summary]], Any]
    queries: tuple[Query, ...]
    observe_own_changes: bool = False

    def __post_init__(self) -> None:
        if self.root is None:
            msg = "Invalid options: root is required"
            raise QueryError(msg)
        if not callable(self.callback):
            msg = "Invalid options: callback is required and must be a function"
            raise QueryError(msg)
        if isinstance(self.queries, (str, Mapping)) or not isinstance(self.queries, Iterable):
            msg = "Invalid options: queries must be a sequence of query requests"
            raise QueryError(msg)
        queries = tuple(validate_query(request) for request in self.queries)
        if not queries:
            msg = "Invalid options: queries must contain at least one query request object."
            raise QueryError(msg)
        object.__setattr__(self, "queries", queries)

    @property
    def track_reordering(self) -> bool:
        """True when some query reports reordered nodes."""
        return any(isinstance(query, AllQuery) for query in self.queries)

    @property
    def merged_element_filter(self) -> tuple[FilterPattern, ...] | None:
        """Every query's element filter concatenated, or None if none has one."""
        patterns: list[FilterPattern] = []
        has_filter = False
        for query in self.queries:
            if query.element_filter is not None:
                has_filter = True
                patterns.extend(query.element_filter)
        return tuple(patterns) if has_filter else None
