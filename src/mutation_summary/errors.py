"""Mutation summary error hierarchy.

All mutation-summary errors inherit from MutationSummaryError for easy catching.
"""


class MutationSummaryError(Exception):
    """Base error for all mutation-summary operations."""


class PatternSyntaxError(MutationSummaryError, ValueError):
    """Malformed element filter text.

    Raised synchronously when a pattern is compiled, never during projection.
    """


class QueryError(MutationSummaryError, ValueError):
    """Invalid query request or summary option."""


class UsageError(MutationSummaryError):
    """An old-value accessor was called for a node outside its changed set."""
