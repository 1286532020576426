"""Element filter compiler: selector-like text -> FilterPattern tuple.

Grammar (whitespace separates clauses)::

    *                 any element
    div               tag
    div.note          tag with class
    .note             any tag with class
    div[href]         tag with attribute present
    div[rel=next]     tag with attribute equal to an unquoted value
    div[title="a b"]  tag with attribute equal to a quoted value ('...' or "...")

Parsing is a single pass of a character state machine.  Any character that is
not valid in the current state raises ``PatternSyntaxError``; so does empty
input or input that ends in the middle of a clause.

Compiled results are immutable tuples and are memoized in an LRU cache keyed
by the pattern text, so every query declaring the same filter shares one
compilation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from cachetools import LRUCache, cached

from mutation_summary.errors import PatternSyntaxError
from mutation_summary.names import NAME_CHAR, NAME_INITIAL_CHAR, NameNormalizer

__all__ = ["FilterPattern", "parse_element_filter"]

_normalizer = NameNormalizer()

_SYNTAX_ERROR = "Invalid element syntax."


@dataclass(frozen=True, slots=True)
class FilterPattern:
    """One compiled clause of an element filter.

    Attributes:
        tag_name: ``"*"`` or an upper-cased tag name.
        class_name: Required class token, or None.
        attr_name: Required attribute name, or None.
        attr_value: Required attribute value, or None for "present with any
            value".  The empty string is a legitimate required value.
    """

    tag_name: str = "*"
    class_name: str | None = None
    attr_name: str | None = None
    attr_value: str | None = None

    @property
    def name(self) -> str:
        """Canonical ``TAG[.class][[attr[="value"]]]`` form, unique per pattern."""
        result = self.tag_name
        if self.class_name:
            result += "." + self.class_name
        if self.attr_name:
            result += "[" + self.attr_name
            if self.attr_value is not None:
                result += '="' + self.attr_value.replace('"', '\\"') + '"'
            result += "]"
        return result

    def __str__(self) -> str:
        return self.name


class _State(Enum):
    OUTSIDE = auto()
    TAG_NAME = auto()
    CLASS_NAME = auto()
    BEGIN_ATTR_NAME = auto()
    ATTR_NAME = auto()
    END_ATTR_NAME = auto()
    BEGIN_VALUE = auto()
    VALUE = auto()
    QUOTED_VALUE = auto()
    END_VALUE = auto()


class _Clause:
    """Mutable accumulator for the clause currently being parsed."""

    __slots__ = ("attr_name", "attr_value", "class_name", "tag_name")

    def __init__(self, tag_name: str, class_name: str | None = None) -> None:
        self.tag_name = tag_name
        self.class_name = class_name
        self.attr_name: str | None = None
        self.attr_value: str | None = None

    def freeze(self) -> FilterPattern:
        tag_name = self.tag_name if self.tag_name == "*" else _normalizer.tag(self.tag_name)
        return FilterPattern(
            tag_name=tag_name,
            class_name=self.class_name,
            attr_name=self.attr_name,
            attr_value=self.attr_value,
        )


def _is_name_initial(c: str) -> bool:
    return NAME_INITIAL_CHAR.fullmatch(c) is not None


def _is_name_char(c: str) -> bool:
    return NAME_CHAR.fullmatch(c) is not None


@cached(cache=LRUCache(maxsize=256))
def parse_element_filter(text: str) -> tuple[FilterPattern, ...]:
    """Compile element filter text into FilterPatterns, in declaration order.

    Args:
        text: Whitespace-separated filter clauses (see module docstring).

    Returns:
        A non-empty tuple of FilterPattern.

    Raises:
        PatternSyntaxError: On an unexpected character, an unterminated
            clause, or when no clause is present.
    """
    patterns: list[FilterPattern] = []
    # Only read outside the OUTSIDE state, which always replaces it first.
    current = _Clause("*")
    quote_char = ""
    state = _State.OUTSIDE

    def fail(position: int) -> PatternSyntaxError:
        return PatternSyntaxError(f"{_SYNTAX_ERROR} {text!r} at position {position}")

    for position, c in enumerate(text):
        if state is _State.OUTSIDE:
            if _is_name_initial(c):
                current = _Clause(c)
                state = _State.TAG_NAME
            elif c == "*":
                current = _Clause("*")
                state = _State.TAG_NAME
            elif c == ".":
                current = _Clause("*", class_name="")
                state = _State.CLASS_NAME
            elif not c.isspace():
                raise fail(position)
            continue

        if state is _State.TAG_NAME:
            if c == ".":
                current.class_name = ""
                state = _State.CLASS_NAME
            elif _is_name_char(c) and current.tag_name != "*":
                current.tag_name += c
            elif c == "[":
                state = _State.BEGIN_ATTR_NAME
            elif c.isspace():
                patterns.append(current.freeze())
                state = _State.OUTSIDE
            else:
                raise fail(position)

        elif state is _State.CLASS_NAME:
            if _is_name_char(c):
                current.class_name = (current.class_name or "") + c
            elif c.isspace() and current.class_name:
                patterns.append(current.freeze())
                state = _State.OUTSIDE
            else:
                raise fail(position)

        elif state is _State.BEGIN_ATTR_NAME:
            if _is_name_initial(c):
                current.attr_name = c
                state = _State.ATTR_NAME
            elif not c.isspace():
                raise fail(position)

        elif state is _State.ATTR_NAME:
            if _is_name_char(c):
                current.attr_name = (current.attr_name or "") + c
            elif c.isspace():
                state = _State.END_ATTR_NAME
            elif c == "=":
                state = _State.BEGIN_VALUE
            elif c == "]":
                patterns.append(current.freeze())
                state = _State.OUTSIDE
            else:
                raise fail(position)

        elif state is _State.END_ATTR_NAME:
            if c == "]":
                patterns.append(current.freeze())
                state = _State.OUTSIDE
            elif c == "=":
                state = _State.BEGIN_VALUE
            elif not c.isspace():
                raise fail(position)

        elif state is _State.BEGIN_VALUE:
            if c in ("'", '"'):
                quote_char = c
                current.attr_value = ""
                state = _State.QUOTED_VALUE
            elif c == "]":
                raise fail(position)
            elif not c.isspace():
                current.attr_value = c
                state = _State.VALUE

        elif state is _State.VALUE:
            if c.isspace():
                state = _State.END_VALUE
            elif c == "]":
                patterns.append(current.freeze())
                state = _State.OUTSIDE
            else:
                current.attr_value = (current.attr_value or "") + c

        elif state is _State.QUOTED_VALUE:
            if c == quote_char:
                quote_char = ""
                state = _State.END_VALUE
            else:
                current.attr_value = (current.attr_value or "") + c

        elif state is _State.END_VALUE:
            if c == "]":
                patterns.append(current.freeze())
                state = _State.OUTSIDE
            elif not c.isspace():
                raise fail(position)

    if state is not _State.OUTSIDE:
        if state is _State.TAG_NAME or (state is _State.CLASS_NAME and current.class_name):
            patterns.append(current.freeze())
        else:
            raise fail(len(text))

    if not patterns:
        raise fail(len(text))

    return tuple(patterns)
