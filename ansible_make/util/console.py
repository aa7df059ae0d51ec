"""
Coloured console messaging for make targets, using rich.

Everything goes to stderr so targets that pipe stdin to stdout (``make
secret``, ``make unsecret``) keep their output clean.
"""

import platform
import re
from typing import Mapping

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True, highlight=False, soft_wrap=True)

LEVEL_STYLES = {
    "INFO": "bright_yellow",
    "WARN": "bright_red",
    "DEBUG": "bright_red",
}


def hostname() -> str:
    return platform.node() or "localhost"


def log(level: str, message: str, target: str = "") -> None:
    """
    Print a ``(host) [target]: LEVEL message`` line.

    Args:
        level: INFO, WARN or DEBUG
        message: Text to print
        target: Name of the make target emitting the message
    """
    level = level.upper()
    style = LEVEL_STYLES.get(level, "bright_yellow")
    console.print(
        f"[{style}]({escape(hostname())}) \\[{escape(target)}]:[/{style}] {level} {escape(message)}"
    )


def announce_target(target: str, makefile: str = "") -> None:
    """Announce entry into a target, naming the top-level makefile when known."""
    location = f"[bright_cyan] *{escape(makefile)}*[/bright_cyan]" if makefile else ""
    console.print(
        f"[bright_green]({escape(hostname())})[/bright_green]{location}\n"
        f"   [bright_blue]\\[target]:[/bright_blue] {escape(target)}"
    )


def announce_assert(name: str, value: str) -> None:
    """Show the value an ``assert-VAR`` guard is checking."""
    console.print(
        f"[bright_yellow]({escape(hostname())})[/bright_yellow] "
        f"\\[{escape(name.strip())}]: (={escape(value)})"
    )


def announce_section(name: str) -> None:
    """Print an upper-cased section divider."""
    console.print(f"\n\n------------[bright_yellow]{escape(name.upper())}[/bright_yellow]------------\n")


def stage(name: str) -> None:
    """Announce a stage inside a target that has several."""
    console.print(f"[bright_yellow]({escape(hostname())}) \\[stage]:[/bright_yellow] {escape(name)}")


def fail(message: str) -> None:
    """Print the FAIL banner; the caller is responsible for exiting non-zero."""
    console.print(f"[bright_red]({escape(hostname())}) \\[FAIL]:[/bright_red]\n  {escape(message)}")


def matching_env(pattern: str, environ: Mapping[str, str]) -> list[str]:
    """
    Return sorted ``KEY=value`` entries whose text matches ``pattern``.

    Examples:
        >>> matching_env("ANSIBLE|VIRTUAL", {"ANSIBLE_USER": "ci", "HOME": "/root"})
        ['ANSIBLE_USER=ci']
    """
    regex = re.compile(pattern)
    entries = [f"{key}={value}" for key, value in environ.items()]
    return sorted(entry for entry in entries if regex.search(entry))


def show_env(pattern: str, environ: Mapping[str, str]) -> None:
    """
    Dump environment variables matching ``pattern`` for debugging.

    Args:
        pattern: Regular expression applied to each ``KEY=value`` entry
        environ: Environment mapping to filter
    """
    host = escape(hostname())
    console.print(f"[bright_yellow]({host}) \\[<env filter={escape(pattern)}>]:[/bright_yellow]")
    for entry in matching_env(pattern, environ):
        console.print(f"  {escape(entry)}")
    console.print(f"[bright_yellow]({host}) \\[</env>]:[/bright_yellow]")
