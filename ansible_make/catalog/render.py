"""
Report rendering for the target catalog.

The text report is built as a rich ``Text`` so colour is applied by style name
and emitted as ANSI escapes only when the console supports colour. JSON and
Markdown views are provided for tooling and docs generation.
"""

import json
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from rich.console import Console
from rich.text import Text

from ansible_make.catalog.models import Catalog, TargetRecord

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

INDENT = "    "


@dataclass(frozen=True)
class ReportStyle:
    """
    Rich style names used by the text report.

    Defaults follow the colour constants of Makefile.base.mk.
    """

    header: str = "bright_yellow"
    file: str = "bright_blue"
    count: str = "bright_cyan"
    target: str = "bright_green"
    source: str = "bright_cyan"
    args: str = "magenta"
    prereqs: str = "bright_red"
    docs: str = "dim"


PLAIN_STYLE = ReportStyle(*([""] * 8))


def _format_list(items: list[str]) -> str:
    return "[" + ", ".join(items) + "]"


def _target_header(record: TargetRecord, style: ReportStyle) -> Text:
    return Text.assemble(
        "[",
        (record.name, style.target),
        "] (",
        (record.source, style.source),
        ")",
    )


def render_text(catalog: Catalog, style: ReportStyle = ReportStyle()) -> Text:
    """
    Render the two-section catalog report.

    Args:
        catalog: Catalog to render
        style: Styles applied to headers, files, targets and docs

    Returns:
        Rich Text ready to print
    """
    out = Text()
    out.append("\n")
    out.append("--- TARGETS BY SOURCE ---", style=style.header)
    out.append("\n\n")

    for group in catalog.by_source():
        out.append("[")
        out.append(group.path, style=style.file)
        out.append("] (")
        out.append(f"{len(group.targets)} targets", style=style.count)
        out.append(")\n")
        for record in group.targets:
            out.append(INDENT)
            out.append_text(_target_header(record, style))
            out.append("\n")
        out.append("\n")

    out.append("--- ALL TARGETS ---", style=style.header)
    out.append("\n\n")

    for record in catalog.all_targets():
        out.append("  ")
        out.append_text(_target_header(record, style))
        out.append("\n")
        if record.declared_args:
            out.append(INDENT)
            out.append("args:", style=style.args)
            out.append(f" {_format_list(record.declared_args)}\n")
        if record.prerequisites:
            out.append(INDENT)
            out.append("prereqs:", style=style.prereqs)
            out.append(f" {_format_list(record.prerequisites)}\n")
        for line in record.doc_lines:
            out.append(INDENT)
            out.append(line, style=style.docs)
            out.append("\n")

    return out


def print_report(catalog: Catalog, console: Console, style: ReportStyle = ReportStyle()) -> None:
    """Print the text report without wrapping or highlighting."""
    console.print(render_text(catalog, style), soft_wrap=True, highlight=False, end="")


def render_json(catalog: Catalog) -> str:
    """Render the catalog as JSON (targets sorted by name, sources by path)."""
    data = {
        "targets": [record.to_dict() for record in catalog.all_targets()],
        "sources": {
            group.path: [record.name for record in group.targets]
            for group in catalog.by_source()
        },
    }
    return json.dumps(data, indent=2)


def render_markdown(catalog: Catalog) -> str:
    """Render the catalog as Markdown using the packaged Jinja2 template."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.get_template("catalog.md.j2")
    return template.render(groups=catalog.by_source(), targets=catalog.all_targets())
