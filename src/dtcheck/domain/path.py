from __future__ import annotations

"""
Path Value Model.

Immutable, ordered sequence of non-empty name components used as the key
of every directory tree node. Provides depth, canonical rendering, ordered
comparison and shared-prefix computations consumed by the checker and by
the reference directory tree.
"""

from dataclasses import dataclass
from typing import Tuple

SEPARATOR: str = "/"


class InvalidPathError(ValueError):
    """Raised when a textual pathname cannot be turned into a Path."""


# -----------------------------------------------------------------------------
# PATH VALUE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Path:
    """
    Represents a pathname such as ``a/b/c``.

    Attributes:
        components: Ordered name components, at least one, none empty.
    """
    components: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.components:
            raise InvalidPathError("A path needs at least one component.")
        for component in self.components:
            if not component or SEPARATOR in component:
                raise InvalidPathError(f"Invalid path component: {component!r}")

    @classmethod
    def parse(cls, text: str) -> Path:
        """
        Build a Path from its textual form.

        Leading or trailing separators and empty components (``a//b``)
        are rejected.

        Args:
            text: Pathname using '/' as separator.

        Returns:
            Path: The parsed path value.

        Raises:
            InvalidPathError: If the text is not a well-formed pathname.
        """
        if not isinstance(text, str):
            raise InvalidPathError(f"Expected str pathname, received {type(text).__name__}.")
        if not text:
            raise InvalidPathError("Empty pathname.")
        parts = text.split(SEPARATOR)
        if any(not p for p in parts):
            raise InvalidPathError(f"Malformed pathname: {text!r}")
        return cls(tuple(parts))

    # --- Observers ---

    @property
    def depth(self) -> int:
        return len(self.components)

    @property
    def pathname(self) -> str:
        return SEPARATOR.join(self.components)

    def __str__(self) -> str:
        return self.pathname

    def shared_prefix_depth(self, other: Path) -> int:
        """
        Count the leading components this path shares with another one.

        Args:
            other: Path to compare against.

        Returns:
            int: Largest k such that the first k components are equal.
        """
        shared = 0
        for mine, theirs in zip(self.components, other.components):
            if mine != theirs:
                break
            shared += 1
        return shared

    def compare(self, other: Path) -> int:
        """
        Three-way lexicographic comparison over the component sequence.

        Components compare by code point (the UTF-8 byte order); on an
        equal prefix the shorter path sorts first.

        Returns:
            int: Negative, zero or positive.
        """
        for mine, theirs in zip(self.components, other.components):
            if mine != theirs:
                return -1 if mine < theirs else 1
        return (self.depth > other.depth) - (self.depth < other.depth)

    def prefix(self, depth: int) -> Path:
        """
        Return the ancestor path made of the first ``depth`` components.

        Raises:
            InvalidPathError: If depth is outside [1, self.depth].
        """
        if depth < 1 or depth > self.depth:
            raise InvalidPathError(f"Prefix depth {depth} out of range for '{self.pathname}'.")
        return Path(self.components[:depth])
