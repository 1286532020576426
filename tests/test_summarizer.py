"""Tests for the MutationSummary orchestrator."""

from __future__ import annotations

import pytest

from mutation_summary.errors import PatternSyntaxError, QueryError
from mutation_summary.queries import AllQuery, ElementQuery
from mutation_summary.summarizer import MutationSummary
from mutation_summary.summary import Summary
from mutation_summary.tree.nodes import TreeNode, element
from mutation_summary.tree.recorder import MutationRecorder


@pytest.fixture
def root() -> TreeNode:
    return element("div", {"id": "root"}, element("p", {"class": "x"}))


class TestConstruction:
    def test_derives_observer_options(self, root: TreeNode) -> None:
        summary = MutationSummary(root, lambda s: None, [{"element": ".x"}])
        assert summary.observer_options.attributes
        assert summary.observer_options.attribute_filter == ("class",)
        assert summary.queries == (ElementQuery(".x"),)

    def test_invalid_query(self, root: TreeNode) -> None:
        with pytest.raises(QueryError):
            MutationSummary(root, lambda s: None, [{"all": True, "x": 1}])

    def test_invalid_filter(self, root: TreeNode) -> None:
        with pytest.raises(PatternSyntaxError):
            MutationSummary(root, lambda s: None, [{"element": "div["}])

    def test_observes_source(self, root: TreeNode) -> None:
        recorder = MutationRecorder()
        summary = MutationSummary(root, lambda s: None, [AllQuery()], source=recorder)
        assert summary.connected
        assert recorder.observing

    def test_without_source_not_connected(self, root: TreeNode) -> None:
        assert not MutationSummary(root, lambda s: None, [AllQuery()]).connected

    def test_without_source_delivery_leaves_it_disconnected(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        summary = MutationSummary(root, delivered.append, [AllQuery()])
        summary._on_records([])
        assert len(delivered) == 1
        assert not summary.connected


class TestProcess:
    def test_one_summary_per_query_in_order(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        summary = MutationSummary(root, delivered.append, [{"element": "p"}, {"all": True}])
        summaries = summary.process([])
        assert delivered == [summaries]
        assert [s.query for s in summaries] == [ElementQuery("p"), AllQuery()]

    def test_queries_share_one_projection(self, root: TreeNode) -> None:
        summary = MutationSummary(root, lambda s: None, [{"element": "p"}, {"all": True}])
        first, second = summary.process([])
        assert first.projection is second.projection

    def test_summarize_skips_callback(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        summary = MutationSummary(root, delivered.append, [AllQuery()])
        summary.summarize([])
        assert delivered == []

    def test_empty_batch_still_delivered(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        MutationSummary(root, delivered.append, [AllQuery()]).process([])
        assert len(delivered) == 1
        assert delivered[0][0].is_empty()


class TestWithRecorder:
    def test_flush_delivers_summaries(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        recorder = MutationRecorder()
        MutationSummary(root, delivered.append, [{"element": "p"}], source=recorder)
        new = recorder.append_child(root, element("p"))
        recorder.flush()
        [[summary]] = delivered
        assert summary.added == [new]

    def test_own_changes_not_reported(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        recorder = MutationRecorder()

        def callback(summaries: list[Summary]) -> None:
            delivered.append(summaries)
            if len(delivered) == 1:
                recorder.append_child(root, element("span"))

        summary = MutationSummary(root, callback, [AllQuery()], source=recorder)
        recorder.append_child(root, element("p"))
        recorder.flush()
        recorder.flush()
        assert len(delivered) == 1
        assert summary.connected
        assert len(root.children) == 3

    def test_own_changes_reported_when_requested(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        recorder = MutationRecorder()
        span = element("span")

        def callback(summaries: list[Summary]) -> None:
            delivered.append(summaries)
            if len(delivered) == 1:
                recorder.append_child(root, span)

        MutationSummary(
            root, callback, [AllQuery()], observe_own_changes=True, source=recorder
        )
        recorder.append_child(root, element("p"))
        recorder.flush()
        recorder.flush()
        assert len(delivered) == 2
        assert delivered[1][0].added == [span]

    def test_still_observing_after_callback_error(self, root: TreeNode) -> None:
        recorder = MutationRecorder()

        def callback(summaries: list[Summary]) -> None:
            raise RuntimeError("callback failed")

        summary = MutationSummary(root, callback, [AllQuery()], source=recorder)
        recorder.append_child(root, element("p"))
        with pytest.raises(RuntimeError):
            recorder.flush()
        assert summary.connected
        assert recorder.observing

    def test_disconnect(self, root: TreeNode) -> None:
        delivered: list[list[Summary]] = []
        recorder = MutationRecorder()
        summary = MutationSummary(root, delivered.append, [AllQuery()], source=recorder)
        summary.disconnect()
        recorder.append_child(root, element("p"))
        recorder.flush()
        assert delivered == []
        assert not summary.connected
