"""
Data model for the make target catalog.

A catalog is rebuilt from scratch on every ``make help`` run: one TargetRecord
per declared target, optionally grouped by the makefile that defines it.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

logger = logging.getLogger(__name__)

# Prerequisites named ``assert-VAR`` declare that the target needs $VAR set.
ASSERT_PREFIX = "assert-"


class ArgKind(Enum):
    """
    How a prerequisite name is interpreted.

    Kinds:
        REQUIRED_VARIABLE: ``assert-VAR`` guard, surfaced as a declared argument
        PREREQUISITE: any other prerequisite target
    """

    REQUIRED_VARIABLE = "REQUIRED_VARIABLE"
    PREREQUISITE = "PREREQUISITE"

    def __str__(self) -> str:
        """Return the string value for display."""
        return self.value


class ClassifiedArg(NamedTuple):
    """A prerequisite name after classification."""

    kind: ArgKind
    name: str


def classify(name: str) -> ClassifiedArg:
    """
    Classify a raw prerequisite name.

    Examples:
        >>> classify("assert-HOST")
        ClassifiedArg(kind=<ArgKind.REQUIRED_VARIABLE: 'REQUIRED_VARIABLE'>, name='HOST')
        >>> classify("run-tests").kind
        <ArgKind.PREREQUISITE: 'PREREQUISITE'>
    """
    if name.startswith(ASSERT_PREFIX):
        return ClassifiedArg(ArgKind.REQUIRED_VARIABLE, name[len(ASSERT_PREFIX) :])
    return ClassifiedArg(ArgKind.PREREQUISITE, name)


def partition_args(raw_args: list[str]) -> tuple[list[str], list[str]]:
    """
    Split raw prerequisite names into (declared_args, prerequisites).

    Every name lands in exactly one of the two lists, order preserved.
    """
    declared: list[str] = []
    prereqs: list[str] = []
    for raw in raw_args:
        arg = classify(raw)
        if arg.kind is ArgKind.REQUIRED_VARIABLE:
            declared.append(arg.name)
        else:
            prereqs.append(arg.name)
    return declared, prereqs


@dataclass
class TargetRecord:
    """
    Everything the catalog knows about one make target.

    Attributes:
        name: Target name
        defining_file: Display path of the defining makefile (relative to cwd when possible)
        abs_path: Path used to re-read the makefile for documentation
        defining_line: Line number of the recipe in defining_file
        declared_args: Variables the target asserts (``assert-VAR`` prerequisites)
        prerequisites: Remaining prerequisite targets
        doc_lines: Comment lines documenting the target, markers stripped
    """

    name: str
    defining_file: str | None = None
    abs_path: str | None = None
    defining_line: int | None = None
    declared_args: list[str] = field(default_factory=list)
    prerequisites: list[str] = field(default_factory=list)
    doc_lines: list[str] = field(default_factory=list)

    @property
    def source(self) -> str:
        """``file:line`` when both are known, ``?`` otherwise."""
        if self.defining_file and self.defining_line is not None:
            return f"{self.defining_file}:{self.defining_line}"
        return "?"

    def to_dict(self) -> dict:
        return {
            "target": self.name,
            "file": self.defining_file,
            "line": self.defining_line,
            "source": self.source,
            "args": list(self.declared_args),
            "prereqs": list(self.prerequisites),
            "docs": list(self.doc_lines),
        }


class SourceGroup(NamedTuple):
    """Targets sharing the same defining file."""

    path: str
    targets: list[TargetRecord]


class Catalog:
    """
    Collection of TargetRecords keyed by target name.

    Duplicate names follow a last-seen-wins policy.
    """

    def __init__(self):
        self._records: dict[str, TargetRecord] = {}

    def add(self, record: TargetRecord) -> None:
        previous = self._records.get(record.name)
        if previous is not None and previous.defining_file and previous.source != record.source:
            logger.debug(
                f"Target '{record.name}' redefined: {previous.source} replaced by {record.source}"
            )
        self._records[record.name] = record

    def get(self, name: str) -> TargetRecord | None:
        return self._records.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def all_targets(self) -> list[TargetRecord]:
        """All records sorted by target name."""
        return [self._records[name] for name in sorted(self._records)]

    def by_source(self) -> list[SourceGroup]:
        """
        Records grouped by defining file, groups sorted by path.

        Records without a defining file are left out of this view. Inside a
        group, targets are sorted by name.
        """
        groups: dict[str, list[TargetRecord]] = {}
        for record in self.all_targets():
            if record.defining_file:
                groups.setdefault(record.defining_file, []).append(record)
        return [SourceGroup(path, groups[path]) for path in sorted(groups)]
