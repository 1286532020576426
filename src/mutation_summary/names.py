"""NameNormalizer: canonical tag names and validated attribute names.

Two naming rules, shared by the tree, the pattern compiler and queries:
- Tag names compare case-insensitively, so they are stored upper-cased
  (e.g. "div" -> "DIV", "svg:rect" -> "SVG:RECT").
- Attribute names are case-sensitive and must be XML-ish names: an initial
  letter, colon or underscore followed by letters, digits, "_", "-", ":" or ".".
"""

import re

# Compiled regex patterns (module-level, compiled once)

# A single character that may start a tag or attribute name
NAME_INITIAL_CHAR = re.compile(r"[a-zA-Z:_]")

# A single character that may continue a tag, class or attribute name
NAME_CHAR = re.compile(r"[a-zA-Z0-9_\-:.]")

# A whole attribute name
_ATTRIBUTE_NAME = re.compile(r"[a-zA-Z:_][a-zA-Z0-9_\-:.]*")


class NameNormalizer:
    """Normalizes tag names and validates attribute names.

    Example usage:
        normalizer = NameNormalizer()
        normalizer.tag("div")             # "DIV"
        normalizer.attribute(" data-id ")  # "data-id"
        normalizer.attribute("1bad")       # raises ValueError
    """

    def tag(self, name: str) -> str:
        """Return the canonical (upper-case) form of a tag name."""
        return name.upper()

    def is_attribute_name(self, name: str) -> bool:
        return _ATTRIBUTE_NAME.fullmatch(name) is not None

    def attribute(self, name: str) -> str:
        """Trim and validate an attribute name.

        Args:
            name: Raw attribute name, possibly padded with whitespace.

        Returns:
            The trimmed name.

        Raises:
            ValueError: If ``name`` is empty after trimming or is not a valid
                attribute name.
        """
        if not isinstance(name, str):
            msg = "attribute must be a non-zero length string"
            raise ValueError(msg)
        trimmed = name.strip()
        if not trimmed:
            msg = "attribute must be a non-zero length string"
            raise ValueError(msg)
        if not self.is_attribute_name(trimmed):
            msg = f"invalid attribute name: {trimmed}"
            raise ValueError(msg)
        return trimmed

    def attribute_list(self, names: str) -> list[str]:
        """Split a whitespace-separated attribute list and validate each name.

        Duplicates are dropped, keeping first-seen order.

        Raises:
            ValueError: If the list is blank or contains an invalid name.
        """
        tokens = names.split()
        if not tokens:
            msg = "attribute list must contain at least one attribute"
            raise ValueError(msg)
        return list(dict.fromkeys(self.attribute(token) for token in tokens))
