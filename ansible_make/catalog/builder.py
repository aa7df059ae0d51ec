"""
Assemble a Catalog from candidate names and a make database dump.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from ansible_make.catalog.database import RuleHint, parse_database
from ansible_make.catalog.docs import extract_docs, read_source
from ansible_make.catalog.models import Catalog, TargetRecord, partition_args

logger = logging.getLogger(__name__)


def display_path(path: str, cwd: str) -> str:
    """
    Shorten an absolute makefile path for display.

    Examples:
        >>> display_path("/src/app/Makefile.base.mk", "/src/app")
        './Makefile.base.mk'
        >>> display_path("Makefile", "/src/app")
        'Makefile'
    """
    if cwd and path.startswith(cwd.rstrip(os.sep) + os.sep):
        return "." + path[len(cwd.rstrip(os.sep)) :]
    return path


def absolute_path(path: str, cwd: str) -> str:
    """Resolve a makefile path as printed by make against the working directory."""
    if not os.path.isabs(path):
        path = os.path.join(cwd, path)
    return os.path.normpath(path)


def record_from_hint(hint: RuleHint, cwd: str) -> TargetRecord:
    """Convert a parsed RuleHint into a TargetRecord without documentation."""
    declared, prereqs = partition_args(hint.raw_args)
    abs_path = absolute_path(hint.file, cwd) if hint.file else None
    return TargetRecord(
        name=hint.target,
        defining_file=display_path(abs_path, cwd) if abs_path else None,
        abs_path=abs_path,
        defining_line=hint.line,
        declared_args=declared,
        prerequisites=prereqs,
    )


def build_catalog(
    candidates: Iterable[str],
    dump: str,
    cwd: str | Path | None = None,
    read_docs: bool = True,
) -> Catalog:
    """
    Build the target catalog.

    Candidates missing from the dump still get an (empty) record so they show
    up in the full listing. When a target has several rule lines in the dump,
    the last one wins.

    Args:
        candidates: Candidate target names, already filtered for noise
        dump: ``make -p`` output
        cwd: Directory used to shorten and resolve makefile paths
        read_docs: Re-read makefiles to attach documentation lines

    Returns:
        Populated Catalog
    """
    cwd = str(cwd if cwd is not None else os.getcwd())
    candidates = list(candidates)

    catalog = Catalog()
    for name in candidates:
        catalog.add(TargetRecord(name=name))

    for hint in parse_database(dump, candidates):
        catalog.add(record_from_hint(hint, cwd))

    if read_docs:
        # each makefile is read once, however many targets it defines
        reader = lru_cache(maxsize=None)(read_source)
        for record in catalog.all_targets():
            record.doc_lines = extract_docs(record.abs_path, record.name, reader=reader)

    logger.info(f"Catalog built with {len(catalog)} targets")
    return catalog
