"""Regex helpers shared by the pattern-based content analyzers."""

import re
from typing import Iterable, List, Pattern


def compile_patterns(patterns: Iterable[str], flags: int = re.IGNORECASE) -> List[Pattern]:
    return [re.compile(p, flags) for p in patterns]


def find_all(pattern: Pattern, content: str) -> List[str]:
    """Every full-match string of pattern in content (group-agnostic)."""
    return [m.group(0) for m in pattern.finditer(content)]


def first_match(pattern: Pattern, content: str):
    match = pattern.search(content)
    return match.group(0) if match else None


def quote_examples(matches: Iterable[str], limit: int = 2) -> str:
    """First `limit` distinct matches, quoted and comma-separated."""
    unique = list(dict.fromkeys(matches))
    return ", ".join(f'"{m}"' for m in unique[:limit])
