"""Glob-style path patterns for include/exclude filtering."""

import re
from collections.abc import Iterable
from functools import lru_cache


@lru_cache(maxsize=256)
def _glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a path glob: ``**`` crosses directories, ``*`` stays inside one."""
    parts = []
    for chunk in pattern.split("**"):
        parts.append("[^/]*".join(re.escape(piece) for piece in chunk.split("*")))
    return re.compile(".*".join(parts))


def matches(path: str, pattern: str) -> bool:
    """Return True if ``path`` matches ``pattern``.

    Patterns containing ``**``, or ``*`` together with ``/``, are path globs
    matched against the whole path. Otherwise ``*foo*`` is a substring test,
    ``*foo`` a suffix test, and anything else must equal the path exactly.
    """
    if "**" in pattern or ("*" in pattern and "/" in pattern):
        return _glob_to_regex(pattern).fullmatch(path) is not None

    if len(pattern) > 1 and pattern.startswith("*") and pattern.endswith("*"):
        return pattern[1:-1] in path

    if pattern.startswith("*"):
        return path.endswith(pattern[1:])

    return path == pattern


def should_include(path: str, include: Iterable[str] = (), exclude: Iterable[str] = ()) -> bool:
    """Apply include patterns (any, if given) and then exclude patterns (none)."""
    include = list(include)
    if include and not any(matches(path, pattern) for pattern in include):
        return False
    return not any(matches(path, pattern) for pattern in exclude)
