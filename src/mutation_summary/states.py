"""ChangeState and Movement StrEnums plus the matchability lattice.

A ChangeState is the permutation of two booleans observed at the start and
end of a batch (was / is):

- STAYED_OUT -> "stayed_out" : neither before nor after
- ENTERED    -> "entered"    : after only
- STAYED_IN  -> "stayed_in"  : before and after
- EXITED     -> "exited"     : before only

The same four states describe reachability (descendant of the root) and
matchability (satisfies at least one filter pattern).
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum, auto

__all__ = ["ChangeState", "Movement", "combine_matchability", "entered_or_exited"]


class ChangeState(StrEnum):
    """Transition of a boolean property of a node across one batch."""

    STAYED_OUT = auto()
    ENTERED = auto()
    STAYED_IN = auto()
    EXITED = auto()

    @classmethod
    def of(cls, was: bool, is_now: bool) -> ChangeState:
        """Build the state from the before/after values."""
        if is_now:
            return cls.STAYED_IN if was else cls.ENTERED
        return cls.EXITED if was else cls.STAYED_OUT


class Movement(StrEnum):
    """Sub-state of a node whose reachability STAYED_IN."""

    STABLE = auto()
    REPARENTED = auto()
    REORDERED = auto()


def entered_or_exited(state: ChangeState) -> bool:
    return state in (ChangeState.ENTERED, ChangeState.EXITED)


def combine_matchability(states: Iterable[ChangeState]) -> ChangeState:
    """Fold per-pattern states into the state for the whole pattern set.

    A node matches the set when it matches *any* pattern, so:

    - STAYED_IN for any pattern makes the result STAYED_IN.
    - ENTERED via one pattern and EXITED via another also nets out as
      STAYED_IN (matched at both endpoints, not by the same pattern).
    - Otherwise the most recent ENTERED / EXITED wins; STAYED_OUT never
      changes the accumulator.

    The fold stops early once STAYED_IN is reached.
    """
    accum = ChangeState.STAYED_OUT
    for state in states:
        if state is ChangeState.STAYED_IN:
            return ChangeState.STAYED_IN
        if state is ChangeState.ENTERED:
            if accum is ChangeState.EXITED:
                return ChangeState.STAYED_IN
            accum = ChangeState.ENTERED
        elif state is ChangeState.EXITED:
            if accum is ChangeState.ENTERED:
                return ChangeState.STAYED_IN
            accum = ChangeState.EXITED
    return accum
