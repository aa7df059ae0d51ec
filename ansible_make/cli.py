"""
CLI entry point for ansible-make.
"""

import json
import logging
import os
import sys
from enum import Enum
from functools import wraps
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from ansible_make.ansible import playbook, vault
from ansible_make.ansible.runner import CommandRunner
from ansible_make.catalog import (
    ReportStyle,
    build_catalog,
    candidates_from_database,
    parse_candidates,
    render_json,
    render_markdown,
)
from ansible_make.catalog.make import dump_database
from ansible_make.catalog.render import PLAIN_STYLE, print_report
from ansible_make.config import load_settings
from ansible_make.exceptions import (
    AnsibleMakeError,
    ConflictingInputError,
    MissingInputError,
    UnreadableInputError,
    format_error_for_cli,
)
from ansible_make.guards import assert_env, assert_not_env, require_executable
from ansible_make.util import console as make_console
from ansible_make.util.logging import configure_logging

app = typer.Typer(
    name="ansible-make",
    help="Helpers behind the ansible makefile includes: make help, guards, vault and playbooks",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

MAKEFILES_DIR = Path(__file__).parent / "makefiles"


class ReportFormat(str, Enum):
    """Output formats of the help report."""

    text = "text"
    json = "json"
    markdown = "markdown"


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except AnsibleMakeError as e:
            # Our custom exceptions with helpful messages
            make_console.console.print(format_error_for_cli(e))
            raise typer.Exit(1)
        except Exception as e:
            make_console.console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            logger.exception("Unexpected error")
            raise typer.Exit(1)

    return wrapper


guard_app = typer.Typer(help="Precondition guards (assert-%, assertnot-%, require-%)")
app.add_typer(guard_app, name="guard")

log_app = typer.Typer(help="Coloured stderr messages for make targets")
app.add_typer(log_app, name="log")

vault_app = typer.Typer(help="ansible-vault workflows")
app.add_typer(vault_app, name="vault")

ansible_app = typer.Typer(help="ansible, ansible-playbook and inventory workflows")
app.add_typer(ansible_app, name="ansible")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Helpers behind the ansible makefile includes."""
    configure_logging(verbose=verbose)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text()
    except OSError as e:
        raise UnreadableInputError(source, e.strerror or str(e)) from e


@app.command(name="help")
@handle_errors
def help_cmd(
    database: str | None = typer.Option(
        None, "--database", "-d", help="File holding `make -p` output, or - for stdin"
    ),
    candidates: str | None = typer.Option(
        None,
        "--candidates",
        "-c",
        help="File listing candidate targets, or - for stdin (derived from the database if omitted)",
    ),
    makefile: list[str] | None = typer.Option(
        None, "--makefile", "-f", help="Makefile to load when running make (repeatable)"
    ),
    make_cmd: str = typer.Option("make", "--make-cmd", help="make executable"),
    format: ReportFormat = typer.Option(ReportFormat.text, "--format", help="Report format"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colours"),
    no_docs: bool = typer.Option(False, "--no-docs", help="Skip reading makefiles for docs"),
):
    """Show every make target grouped by makefile, with args, prereqs and docs."""
    if database == "-" and candidates == "-":
        raise ConflictingInputError()

    if database is None:
        dump = dump_database(makefile or [], make_cmd=make_cmd)
    else:
        dump = _read_input(database)
    if not dump.strip():
        raise MissingInputError("the make rule database")

    if candidates is None:
        names = candidates_from_database(dump)
    else:
        candidate_text = _read_input(candidates)
        if not candidate_text.strip():
            raise MissingInputError("the candidate target list")
        names = parse_candidates(candidate_text)

    catalog = build_catalog(names, dump, cwd=os.getcwd(), read_docs=not no_docs)

    if format is ReportFormat.json:
        typer.echo(render_json(catalog))
    elif format is ReportFormat.markdown:
        typer.echo(render_markdown(catalog), nl=False)
    else:
        out = Console(no_color=no_color, highlight=False)
        print_report(catalog, out, PLAIN_STYLE if no_color else ReportStyle())


@app.command()
def makefiles():
    """Print the directory holding the makefile includes."""
    typer.echo(str(MAKEFILES_DIR))


# Guards


@guard_app.command(name="assert")
@handle_errors
def assert_cmd(names: list[str] = typer.Argument(..., help="Environment variables to require")):
    """Fail unless every named environment variable is set."""
    for name in names:
        make_console.announce_assert(f"assert-{name}", os.environ.get(name, ""))
        assert_env(name)


@guard_app.command(name="assertnot")
@handle_errors
def assertnot_cmd(names: list[str] = typer.Argument(..., help="Environment variables to forbid")):
    """Fail if any named environment variable is set."""
    for name in names:
        assert_not_env(name)


@guard_app.command(name="require")
@handle_errors
def require_cmd(names: list[str] = typer.Argument(..., help="Executables to require in $PATH")):
    """Fail unless every named executable is on $PATH."""
    for name in names:
        require_executable(name)


# Logging helpers


@log_app.command()
def info(
    message: str = typer.Argument(...),
    target: str = typer.Option("", "--target", "-t", help="Make target ($@)"),
):
    """Print an INFO line."""
    make_console.log("INFO", message, target)


@log_app.command()
def warn(
    message: str = typer.Argument(...),
    target: str = typer.Option("", "--target", "-t", help="Make target ($@)"),
):
    """Print a WARN line."""
    make_console.log("WARN", message, target)


@log_app.command()
def debug(
    message: str = typer.Argument(...),
    target: str = typer.Option("", "--target", "-t", help="Make target ($@)"),
):
    """Print a DEBUG line."""
    make_console.log("DEBUG", message, target)


@log_app.command(name="announce-target")
def announce_target(
    target: str = typer.Argument(...),
    makefile: str = typer.Option("", "--makefile", help="Top-level makefile"),
):
    """Announce entry into a make target."""
    make_console.announce_target(target, makefile)


@log_app.command()
def section(name: str = typer.Argument(...)):
    """Print a section divider."""
    make_console.announce_section(name)


@log_app.command()
def stage(name: str = typer.Argument(...)):
    """Announce a stage within a target."""
    make_console.stage(name)


@log_app.command(name="show-env")
def show_env(pattern: str = typer.Argument(..., help="Regex matched against KEY=value")):
    """Dump matching environment variables to stderr."""
    make_console.show_env(pattern, os.environ)


@log_app.command()
def fail(message: str = typer.Argument("", envvar="MSG")):
    """Print the FAIL banner and exit 1."""
    make_console.fail(message)
    raise typer.Exit(1)


# Vault

CONFIG_HELP = "Settings file (default: ./ansible-make.yaml if present)"
DRY_RUN_HELP = "Print commands instead of running them"


def _run(command, dry_run: bool) -> None:
    CommandRunner(dry_run=dry_run).run(command)
    if dry_run:
        typer.echo(str(command))


@vault_app.command()
@handle_errors
def encrypt(
    path: str = typer.Argument(..., envvar="path", help="File to encrypt"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Encrypt a file with the standard vault password file."""
    _run(vault.encrypt(load_settings(config_file=config), path), dry_run)


@vault_app.command()
@handle_errors
def decrypt(
    path: str = typer.Argument(..., envvar="path", help="File to decrypt"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Decrypt a file with the standard vault password file."""
    _run(vault.decrypt(load_settings(config_file=config), path), dry_run)


@vault_app.command()
@handle_errors
def edit(
    path: str = typer.Argument(..., envvar="path", help="Vaulted file to edit"),
    editor: str = typer.Option(vault.DEFAULT_EDITOR, "--editor", help="Editor for ansible-vault"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Edit a vaulted file in place."""
    _run(vault.edit(load_settings(config_file=config), path, editor=editor), dry_run)


@vault_app.command()
@handle_errors
def rekey(
    path: str = typer.Argument(..., envvar="path", help="Vaulted file to rekey"),
    old_key: str = typer.Option(..., "--old-key", envvar="oldkey", help="Current password file"),
    new_key: str = typer.Option(..., "--new-key", envvar="newkey", help="New password file"),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Re-encrypt a file with a new password file."""
    _run(vault.rekey(path, old_key, new_key), dry_run)


@vault_app.command()
@handle_errors
def secret(
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Encrypt a secret from stdin to a vaulted string on stdout."""
    _run(vault.secret(load_settings(config_file=config)), dry_run)


@vault_app.command()
@handle_errors
def unsecret(
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Decrypt vaulted data from stdin to stdout."""
    _run(vault.unsecret(load_settings(config_file=config)), dry_run)


# Ansible


@ansible_app.command()
@handle_errors
def provision(
    host: str = typer.Option(..., "--host", envvar="host", help="Host to provision"),
    playbook_name: str = typer.Option(..., "--playbook", envvar="playbook", help="Playbook name"),
    extra_args: str = typer.Option("", "--extra-args", envvar="extra_ansible_args"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Run a playbook against one host with every configured vars file."""
    settings = load_settings(config_file=config)
    make_console.show_env("ANSIBLE|VIRTUAL", os.environ)
    runner = CommandRunner(dry_run=dry_run)
    runner.run(playbook.version())
    _run(playbook.provision(settings, host, playbook_name, extra_args), dry_run)


@ansible_app.command()
@handle_errors
def play(
    host: str = typer.Option(..., "--host", envvar="host", help="Host to run against"),
    playbook_name: str = typer.Option(..., "--playbook", envvar="playbook", help="Playbook name"),
    extra_args: str = typer.Option("", "--extra-args", envvar="extra_ansible_args"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Run a playbook against one host (no terraform vars)."""
    settings = load_settings(config_file=config)
    _run(playbook.play(settings, host, playbook_name, extra_args), dry_run)


@ansible_app.command(name="test-role")
@handle_errors
def role_test_cmd(
    role: str = typer.Option(..., "--role", envvar="role", help="Role to test"),
    tags: str = typer.Option("all", "--tags", envvar="tags"),
    extra_args: str = typer.Option("", "--extra-args", envvar="extra_ansible_args"),
    ansible_extra: str = typer.Option("", "--ansible-extra", envvar="ANSIBLE_EXTRA"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Run a role's tests/test.yml against the test host."""
    settings = load_settings(config_file=config)
    runner = CommandRunner(dry_run=dry_run)
    runner.run(playbook.version())
    _run(playbook.role_test(settings, role, tags, extra_args, ansible_extra), dry_run)


@ansible_app.command()
@handle_errors
def requirements(
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help=DRY_RUN_HELP),
):
    """Install galaxy roles from the requirements file."""
    _run(playbook.galaxy_requirements(load_settings(config_file=config)), dry_run)


@ansible_app.command(name="describe-inventory")
@handle_errors
def describe_inventory(config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP)):
    """Print host variables for the whole inventory as JSON."""
    settings = load_settings(config_file=config)
    hostvars = playbook.describe_inventory(settings, CommandRunner())
    typer.echo(json.dumps(hostvars, indent=2, sort_keys=True))


@ansible_app.command(name="inventory-get")
@handle_errors
def inventory_get(
    host: str = typer.Option(..., "--host", envvar="host", help="Inventory host"),
    var: str | None = typer.Option(None, "--var", envvar="var", help="Single variable to print"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
):
    """Print merged variables for one host (or one variable)."""
    settings = load_settings(config_file=config)
    value = playbook.inventory_get(settings, CommandRunner(), host, var)
    if isinstance(value, str):
        typer.echo(value)
    else:
        typer.echo(json.dumps(value, indent=2, sort_keys=True))


@ansible_app.command()
@handle_errors
def graph(
    host: str = typer.Option(..., "--host", envvar="host", help="Inventory host to graph"),
    output: Path = typer.Option(Path("tmp.png"), "--output", "-o", help="PNG file to write"),
    open_file: bool = typer.Option(True, "--open/--no-open", help="Open the PNG when done"),
    config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP),
):
    """Render the inventory graph for a host to PNG."""
    require_executable("ansible-inventory-grapher")
    settings = load_settings(config_file=config)
    written = playbook.graph(settings, CommandRunner(), host, output)
    console.print(f"[green]✓ Inventory graph written to {written}[/green]")
    if open_file:
        typer.launch(str(written))


@ansible_app.command()
@handle_errors
def clean(config: Path | None = typer.Option(None, "--config", help=CONFIG_HELP)):
    """Remove .retry files under SRC_ROOT."""
    settings = load_settings(config_file=config)
    removed = playbook.clean(settings.src_root)
    console.print(f"[green]✓ Removed {len(removed)} .retry file(s)[/green]")


@ansible_app.command(name="describe-context")
@handle_errors
def describe_context():
    """Show ansible version and configuration."""
    playbook.describe_context(CommandRunner())


@ansible_app.command()
@handle_errors
def require():
    """Fail fast if ansible is not usable."""
    playbook.require_ansible(CommandRunner())


if __name__ == "__main__":
    app()
