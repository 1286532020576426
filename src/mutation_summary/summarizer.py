"""MutationSummary: orchestrator that wires options, projection and summaries.

This is the layer a host talks to.  It validates the options, derives the
ObserverOptions a change source must honour, and turns every delivered batch
of records into one Summary per query.

Architecture:
- ``process(records)`` builds one MutationProjection for the batch, creates
  the summaries in query order, invokes the callback and returns them.
- When constructed with a ``MutationSource``, the summary subscribes to it.
  Unless ``observe_own_changes`` is set, it disconnects while the callback
  runs and re-observes afterwards, so the callback's own edits are never
  reported back to it.
- All per-batch state lives in the projection; two batches never share
  caches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from mutation_summary.config import SummaryOptions
from mutation_summary.observer import ObserverOptions, create_observer_options
from mutation_summary.projection import MutationProjection
from mutation_summary.summary import Summary, create_summary

if TYPE_CHECKING:
    from mutation_summary.protocols import MutationSource
    from mutation_summary.queries import Query
    from mutation_summary.records import MutationRecord

__all__ = ["MutationSummary"]

logger = logging.getLogger(__name__)


class MutationSummary:
    """Turns batches of mutation records into per-query summaries.

    Example::

        from mutation_summary import MutationSummary
        from mutation_summary.tree import MutationRecorder, TreeBuilder

        root = TreeBuilder().build({"tag": "div"})
        recorder = MutationRecorder()
        summary = MutationSummary(
            root, callback=print, queries=[{"element": "p"}], source=recorder
        )
        recorder.append_child(root, TreeBuilder().build({"tag": "p"}))
        recorder.flush()   # callback receives [Summary(added=[<P>], ...)]
    """

    def __init__(
        self,
        root: Any,
        callback: Callable[[list[Summary]], Any],
        queries: Iterable[Query | Mapping[str, Any]],
        *,
        observe_own_changes: bool = False,
        source: MutationSource | None = None,
    ) -> None:
        """Validate the options and, when given a source, start observing it.

        Args:
            root: The node whose subtree is observed.
            callback: Receives the list of summaries for every batch.
            queries: Query objects or their mapping form, in order.
            observe_own_changes: Report changes made by the callback itself.
            source: Optional change source to subscribe to.

        Raises:
            QueryError: On invalid options or queries.
            PatternSyntaxError: If an element filter is malformed.
        """
        self.options = SummaryOptions(
            root=root,
            callback=callback,
            queries=tuple(queries),
            observe_own_changes=observe_own_changes,
        )
        self.observer_options: ObserverOptions = create_observer_options(
            self.options.queries
        )
        self._source = source
        self._connected = False
        if source is not None:
            self._observe()

    @property
    def root(self) -> Any:
        return self.options.root

    @property
    def queries(self) -> tuple[Query, ...]:
        return self.options.queries

    @property
    def connected(self) -> bool:
        return self._connected

    def _observe(self) -> None:
        if self._source is None:
            return
        self._source.observe(self.root, self.observer_options, self._on_records)
        self._connected = True
        logger.debug("Observing %r", self.root)

    def disconnect(self) -> None:
        """Stop observing the source.  Pending records are dropped."""
        if self._source is not None and self._connected:
            self._source.disconnect()
            logger.debug("Disconnected from %r", self.root)
        self._connected = False

    def project(self, records: Iterable[MutationRecord]) -> MutationProjection:
        """Build the projection for one batch under this summary's options."""
        return MutationProjection(
            self.root,
            records,
            self.options.merged_element_filter,
            track_reordering=self.options.track_reordering,
        )

    def summarize(self, records: Iterable[MutationRecord]) -> list[Summary]:
        """One Summary per query for one batch, without invoking the callback."""
        projection = self.project(records)
        return [create_summary(projection, query) for query in self.queries]

    def process(self, records: Iterable[MutationRecord]) -> list[Summary]:
        """Summarize one batch, deliver it to the callback and return it."""
        summaries = self.summarize(records)
        logger.debug(
            "Delivering %d summaries (%d empty)",
            len(summaries),
            sum(summary.is_empty() for summary in summaries),
        )
        self.options.callback(summaries)
        return summaries

    def _on_records(self, records: list[MutationRecord]) -> None:
        reconnect = not self.options.observe_own_changes and self._connected
        if reconnect:
            self.disconnect()
        try:
            self.process(records)
        finally:
            if reconnect:
                self._observe()
