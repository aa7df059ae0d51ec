"""
Candidate target names for the catalog.

Candidates come either from a newline-delimited list (one name per line, extra
annotation after whitespace ignored) or straight from a ``make -p`` dump using
the same lexical rule as the classic ``make -p | awk`` pipeline.
"""

import re

# A real rule line: identifier start char, no ``$ # / \t =`` before the colon,
# and the colon is not the start of an ``:=`` assignment.
DECLARATION_PATTERN = re.compile(r"^[a-zA-Z0-9][^$#/\t=]*:([^=]|$)")

# Tokens that leak out of make's own printed rules and recipes.
STOPLIST = frozenset("Makefile list fail i in not if else for".split())

# Names starting with these are guards or template artifacts, never user targets.
EXCLUDED_PREFIXES = ("assert", "range(")

INTERNAL_MARKER = "__"


def is_noise(name: str) -> bool:
    """
    Return True if ``name`` must never appear in the catalog.

    Rejects blanks, stoplist tokens, excluded prefixes, pattern diagnostics
    containing ``[``, and internal sentinel targets using ``__``.
    """
    if not name:
        return True
    if name in STOPLIST:
        return True
    if name.startswith(EXCLUDED_PREFIXES):
        return True
    if "[" in name:
        return True
    return INTERNAL_MARKER in name


def is_target_declaration(line: str) -> bool:
    """Check a raw dump line against the rule-declaration lexical rule."""
    if "[" in line:
        return False
    return DECLARATION_PATTERN.match(line) is not None


def parse_candidates(text: str) -> list[str]:
    """
    Parse a newline-delimited candidate list.

    Only the first whitespace-delimited token of each line is used. Noise is
    dropped and duplicates are removed, keeping first-seen order.

    Args:
        text: Candidate list, one name per line

    Returns:
        Ordered list of candidate target names
    """
    seen: dict[str, None] = {}
    for line in text.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        name = tokens[0]
        if not is_noise(name):
            seen.setdefault(name, None)
    return list(seen)


def candidates_from_database(dump: str) -> list[str]:
    """
    Derive candidate names from a ``make -p`` dump.

    Every declaration line contributes the space-separated names in front of
    its first colon (``a b: c`` declares both ``a`` and ``b``).

    Args:
        dump: Full text of ``make -p`` output

    Returns:
        Sorted, de-duplicated candidate names with noise removed
    """
    names: set[str] = set()
    for line in dump.splitlines():
        if not is_target_declaration(line):
            continue
        head = line.split(":", 1)[0]
        for name in head.split():
            if not is_noise(name):
                names.add(name)
    return sorted(names)
