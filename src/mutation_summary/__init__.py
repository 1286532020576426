"""Mutation summary - per-query change summaries for batches of tree mutations."""

from __future__ import annotations

from mutation_summary.api import compile_patterns, project, summarize
from mutation_summary.config import SummaryOptions
from mutation_summary.errors import (
    MutationSummaryError,
    PatternSyntaxError,
    QueryError,
    UsageError,
)
from mutation_summary.observer import ObserverOptions, create_observer_options
from mutation_summary.patterns import FilterPattern
from mutation_summary.projection import MutationProjection
from mutation_summary.queries import (
    AllQuery,
    AttributeQuery,
    CharacterDataQuery,
    ElementQuery,
    Query,
)
from mutation_summary.records import (
    AttributeChange,
    MutationRecord,
    StructuralChange,
    TextChange,
)
from mutation_summary.states import ChangeState, Movement
from mutation_summary.summarizer import MutationSummary
from mutation_summary.summary import Summary

__version__: str = "0.1.0"
__all__: list[str] = [
    "AllQuery",
    "AttributeChange",
    "AttributeQuery",
    "ChangeState",
    "CharacterDataQuery",
    "ElementQuery",
    "FilterPattern",
    "Movement",
    "MutationProjection",
    "MutationRecord",
    "MutationSummary",
    "MutationSummaryError",
    "ObserverOptions",
    "PatternSyntaxError",
    "Query",
    "QueryError",
    "StructuralChange",
    "Summary",
    "SummaryOptions",
    "TextChange",
    "UsageError",
    "compile_patterns",
    "create_observer_options",
    "project",
    "summarize",
]
