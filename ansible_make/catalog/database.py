"""
Parser for make's internal rule database (``make -p`` output).

The dump is make's debug format, so this module relies on two block-shape
assumptions only:

1. A line whose stripped text starts with ``TARGET:`` introduces a rule.
2. Within the five lines after it, a line containing
   ``recipe to execute (from `` carries ``FILE, line N)`` right after that
   phrase. GNU make 4.x quotes FILE (``'Makefile', line 4``), older releases
   use a backtick and a quote; both are accepted.

Anything that does not fit is recorded as missing metadata instead of raising.
"""

import logging
import re
from typing import Iterable, NamedTuple

logger = logging.getLogger(__name__)

RECIPE_MARKER = "recipe to execute (from "

# Rule line plus at most the five lines that follow it.
BLOCK_SIZE = 6

_PROVENANCE_PATTERN = re.compile(
    re.escape(RECIPE_MARKER) + r"""[`'"]?(?P<file>.+?)['"]?, line (?P<line>\d+)\)"""
)


class RuleHint(NamedTuple):
    """
    Metadata recovered for one rule line of the dump.

    Attributes:
        target: Target name (text before the colon)
        raw_args: Prerequisite names listed after the colon
        file: Makefile path as printed by make, or None
        line: Recipe line number, or None
    """

    target: str
    raw_args: list[str]
    file: str | None
    line: int | None


def split_rule_line(line: str) -> tuple[str, list[str]] | None:
    """
    Split a rule line into (target, prerequisites).

    Returns None for lines that only look like rules: variable assignments
    (``x := y``) and target-specific variables (``t: VAR = value``).

    Examples:
        >>> split_rule_line("build: assert-HOST run-tests")
        ('build', ['assert-HOST', 'run-tests'])
        >>> split_rule_line("vault-secret: ANSIBLE_VAULT_PASSWORD_FILE = x") is None
        True
    """
    head, sep, rest = line.strip().partition(":")
    if not sep:
        return None
    rest = rest.lstrip(":")
    if "=" in rest:
        return None
    return head.strip(), rest.split()


def parse_provenance(block: str) -> tuple[str | None, int | None]:
    """
    Extract (file, line) from a metadata block.

    Args:
        block: Rule line plus the following lines of the dump

    Returns:
        (file, line), or (None, None) when the block names no recipe
    """
    match = _PROVENANCE_PATTERN.search(block)
    if match is None:
        return None, None
    return match.group("file"), int(match.group("line"))


def parse_database(dump: str, candidates: Iterable[str]) -> list[RuleHint]:
    """
    Collect a RuleHint for every rule line naming a candidate target.

    Rule lines are matched by a set lookup on the text in front of the colon,
    so the scan is a single pass over the dump. Hints are returned in dump
    order; callers resolving duplicates should let later hints win.

    Args:
        dump: Full ``make -p`` output
        candidates: Target names to look for

    Returns:
        List of RuleHint, possibly empty
    """
    wanted = set(candidates)
    lines = dump.splitlines()
    hints: list[RuleHint] = []

    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        name = stripped.split(":", 1)[0]
        if name not in wanted or ":" not in stripped:
            continue

        parsed = split_rule_line(stripped)
        if parsed is None:
            continue
        target, raw_args = parsed

        block_lines = [line]
        for follower in lines[i + 1 : i + BLOCK_SIZE]:
            # make separates entries with a blank line
            if not follower.strip():
                break
            block_lines.append(follower)
        file, lineno = parse_provenance("\n".join(block_lines))
        if file is None:
            logger.debug(f"No recipe provenance for target '{target}'")
        hints.append(RuleHint(target, raw_args, file, lineno))

    return hints
