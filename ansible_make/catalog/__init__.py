"""
Target catalog for ``make help``.

Builds a catalog of make targets from ``make -p`` output and renders it
grouped by defining makefile, with declared arguments (``assert-VAR``
prerequisites), plain prerequisites and attached comment docs.
"""

from ansible_make.catalog.builder import build_catalog
from ansible_make.catalog.candidates import candidates_from_database, parse_candidates
from ansible_make.catalog.models import Catalog, TargetRecord, classify
from ansible_make.catalog.render import ReportStyle, render_json, render_markdown, render_text

__all__ = [
    "Catalog",
    "ReportStyle",
    "TargetRecord",
    "build_catalog",
    "candidates_from_database",
    "classify",
    "parse_candidates",
    "render_json",
    "render_markdown",
    "render_text",
]
