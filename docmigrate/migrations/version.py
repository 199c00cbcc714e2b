"""Semantic version parsing and comparison for document schema versions."""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A parsed ``major.minor.patch`` version.

    Ordering compares major, then minor, then patch. ``"1.0"`` and
    ``"1.0.0"`` parse to equal values.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _component(part: str) -> int:
    part = part.strip()
    if part.isascii() and part.isdigit():
        return int(part)
    return 0


def parse_version(value: "str | SemanticVersion | None") -> SemanticVersion:
    """Parse a dot-separated version string.

    Never raises: non-numeric or missing components are read as 0, so an
    unparsable version is the oldest possible version ``0.0.0``.

    Args:
        value: The version string (or an already parsed version)

    Returns:
        The parsed SemanticVersion
    """
    if isinstance(value, SemanticVersion):
        return value
    if not isinstance(value, str) or not value:
        return SemanticVersion()

    parts = value.split(".")[:3]
    numbers = [_component(p) for p in parts]
    numbers += [0] * (3 - len(numbers))
    return SemanticVersion(*numbers)


def compare_versions(
    a: "str | SemanticVersion | None",
    b: "str | SemanticVersion | None",
) -> int:
    """Compare two versions.

    Returns:
        -1 if a < b, 0 if they are equal, 1 if a > b
    """
    va = parse_version(a)
    vb = parse_version(b)
    if va > vb:
        return 1
    if va < vb:
        return -1
    return 0
