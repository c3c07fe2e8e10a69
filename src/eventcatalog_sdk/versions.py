"""Semantic version comparison for resource versions.

Resource versions are free-form strings; only those that parse as semver
(``1``, ``1.2`` and ``1.2.3`` forms accepted) take part in ordering.
"""

from collections.abc import Iterable

import semver


def parse(version: str | None) -> semver.Version | None:
    """Parse a version string, or return None when it is not semver."""
    if not version:
        return None
    try:
        return semver.Version.parse(version, optional_minor_and_patch=True)
    except (TypeError, ValueError):
        return None


def is_greater(candidate: str, current: str) -> bool:
    """True when ``candidate`` is strictly greater than ``current``.

    Unparseable versions are never greater than anything.
    """
    new, old = parse(candidate), parse(current)
    if new is None or old is None:
        return False
    return new > old


def highest(versions: Iterable[str]) -> str | None:
    """Pick the highest version; semver wins over unparseable strings."""
    best: str | None = None
    for version in versions:
        if best is None or is_greater(version, best):
            best = version
        elif parse(best) is None and parse(version) is not None:
            best = version
    return best
