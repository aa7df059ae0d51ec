"""
Documentation extraction for make targets.

Target docs are the comment lines attached to a rule in its makefile:

    # Builds the project            <- comment block directly above the rule
    build: assert-HOST run-tests ## inline doc
    	@# recipe comment lines       <- comment lines right after the header
    	$(MAKE) compile

Reading is best effort: a missing or unreadable makefile yields no docs.
"""

import logging
import re
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

# Header line, then comment lines (``#`` or ``@#``, any indentation). Blank
# lines may separate recipe comments but never precede a column-0 comment,
# which belongs to whatever rule comes next.
_RECIPE_DOCS_TEMPLATE = r"^{target}:(?!=).*\n(?:[ \t]*@?#.*\n|(?:[ \t]*\n)+[ \t]+@?#.*\n)+"

_COMMENT_PREFIX = re.compile(r"^@?#+ ?")


def clean_comment(line: str) -> str:
    """
    Strip indentation and comment markers from one comment line.

    Examples:
        >>> clean_comment("\\t@# dump env vars for debugging")
        'dump env vars for debugging'
        >>> clean_comment("## usage example:")
        'usage example:'
    """
    return _COMMENT_PREFIX.sub("", line.strip()).rstrip()


def _trim_blank_edges(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start]:
        start += 1
    while end > start and not lines[end - 1]:
        end -= 1
    return lines[start:end]


def docs_from_text(text: str, target: str) -> list[str]:
    """
    Extract documentation lines for ``target`` from makefile source.

    Three sources are combined in order: the comment block directly above the
    first rule header for the target, an inline ``## doc`` on the header, and
    the comment lines following the header.

    Args:
        text: Makefile contents
        target: Target name

    Returns:
        Documentation lines with comment markers removed (possibly empty)
    """
    if not text.endswith("\n"):
        text += "\n"
    header = re.search(rf"^{re.escape(target)}:(?!=).*$", text, re.MULTILINE)
    if header is None:
        return []

    above: list[str] = []
    for line in reversed(text[: header.start()].splitlines()):
        if not line.startswith("#"):
            break
        above.insert(0, clean_comment(line))

    inline: list[str] = []
    _, marker, inline_doc = header.group(0).partition("##")
    if marker and inline_doc.strip():
        inline.append(inline_doc.strip())

    pattern = _RECIPE_DOCS_TEMPLATE.format(target=re.escape(target))
    recipe: list[str] = []
    match = re.search(pattern, text[header.start() :], re.MULTILINE)
    if match:
        recipe = [clean_comment(line) for line in match.group(0).split("\n")[1:]]

    return _trim_blank_edges(_trim_blank_edges(above) + inline + _trim_blank_edges(recipe))


def read_source(path: str | Path) -> str | None:
    """Read a makefile, returning None (and logging at debug) when it cannot be read."""
    try:
        return Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path} for documentation: {e}")
        return None


def extract_docs(
    abs_path: str | Path | None,
    target: str,
    reader: Callable[[str | Path], str | None] = read_source,
) -> list[str]:
    """
    Read a makefile and extract documentation for one target.

    Args:
        abs_path: Path to the defining makefile, or None when unknown
        target: Target name
        reader: Function returning the file text or None; lets callers cache reads

    Returns:
        Documentation lines, [] when the file is unknown or unreadable
    """
    if not abs_path:
        return []
    text = reader(abs_path)
    if text is None:
        return []
    return docs_from_text(text, target)
