"""
Command builders and helpers for ``ansible``, ``ansible-playbook``,
``ansible-inventory`` and ``ansible-galaxy`` workflows.
"""

import json
import logging
import shlex
from pathlib import Path
from typing import Any

from ansible_make.ansible.runner import Command, CommandRunner
from ansible_make.config import Settings
from ansible_make.exceptions import CommandFailedError

logger = logging.getLogger(__name__)

PROVISION_VARS = ("secret", "tf", "jenkins", "base")
PLAY_VARS = ("secret", "jenkins", "base")

TEST_ROLE_FORKS = 12


def _extra_vars(settings: Settings, keys: tuple[str, ...]) -> list[str]:
    args: list[str] = []
    for key in keys:
        path = settings.vars_files.get(key)
        if not path:
            logger.debug(f"Skipping unset vars file '{key}' (ANSIBLE_VARS_{key.upper()})")
            continue
        args.extend(["-e", f"@{path}"])
    return args


def playbook_path(settings: Settings, playbook: str) -> str:
    """Resolve a playbook name to ``<ansible_root>/<name>.yml``."""
    name = playbook if playbook.endswith((".yml", ".yaml")) else f"{playbook}.yml"
    return str(settings.ansible_root / name)


def _host_playbook_command(
    settings: Settings,
    host: str,
    playbook: str,
    vars_keys: tuple[str, ...],
    extra_args: str = "",
) -> Command:
    argv = [
        "ansible-playbook",
        "--user",
        settings.require("user"),
        f"--vault-password-file={settings.require('vault_password_file')}",
        "--private-key",
        settings.require("private_key"),
        # trailing comma makes ansible treat the host as an inline inventory
        "--inventory",
        f"{host},",
        *_extra_vars(settings, vars_keys),
        *shlex.split(extra_args),
        playbook_path(settings, playbook),
    ]
    return Command(argv, env={"host": host, "playbook": playbook})


def provision(settings: Settings, host: str, playbook: str, extra_args: str = "") -> Command:
    """
    Run a playbook against a single host with every configured vars file.

    Args:
        settings: Resolved settings (user, vault password file and private key required)
        host: Target host, used as a one-host inline inventory
        playbook: Playbook name relative to ansible_root, ``.yml`` optional
        extra_args: Additional ansible-playbook arguments, shell-quoted
    """
    return _host_playbook_command(settings, host, playbook, PROVISION_VARS, extra_args)


def play(settings: Settings, host: str, playbook: str, extra_args: str = "") -> Command:
    """Like provision, without the terraform vars file."""
    return _host_playbook_command(settings, host, playbook, PLAY_VARS, extra_args)


def role_test(
    settings: Settings,
    role: str,
    tags: str = "all",
    extra_args: str = "",
    ansible_extra: str = "",
) -> Command:
    """
    Run a role's ``tests/test.yml`` against the configured test host.

    Args:
        settings: Resolved settings (inventory and test_host required)
        role: Role directory name under ``<ansible_root>/roles``
        tags: Tags to run
        extra_args: Additional ansible-playbook arguments
        ansible_extra: Further arguments placed right before the playbook path
    """
    test_playbook = settings.ansible_root / "roles" / role / "tests" / "test.yml"
    argv = [
        "ansible-playbook",
        "-f",
        str(TEST_ROLE_FORKS),
        "-i",
        settings.require("inventory"),
        *shlex.split(extra_args),
        "--tags",
        tags,
        "-l",
        settings.require("test_host"),
        *shlex.split(ansible_extra),
        str(test_playbook),
    ]
    return Command(argv)


def galaxy_requirements(settings: Settings) -> Command:
    """Install galaxy roles listed in the requirements file."""
    return Command(["ansible-galaxy", "install", "-r", settings.requirements_file])


def version() -> Command:
    return Command(["ansible", "--version"])


def require_ansible(runner: CommandRunner) -> None:
    """Fail fast unless ``ansible --version`` succeeds."""
    runner.run(version(), capture=True)


def describe_context(runner: CommandRunner) -> None:
    """Show ansible's version and effective configuration."""
    runner.run(version())
    runner.run(Command(["ansible-config", "dump"]))


def _inventory_json(runner: CommandRunner, argv: list[str]) -> Any:
    result = runner.run(Command(argv), capture=True)
    if runner.dry_run:
        return {}
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise CommandFailedError(argv, 0, f"ansible-inventory returned invalid JSON: {e}") from e


def describe_inventory(settings: Settings, runner: CommandRunner) -> dict[str, Any]:
    """
    Return host variables for the whole inventory (``_meta.hostvars``).
    """
    argv = ["ansible-inventory", "--inventory", settings.require("inventory"), "--list"]
    data = _inventory_json(runner, argv)
    return data.get("_meta", {}).get("hostvars", {})


def inventory_get(
    settings: Settings, runner: CommandRunner, host: str, var: str | None = None
) -> Any:
    """
    Return merged host and group variables for one host.

    Args:
        settings: Resolved settings (inventory required)
        runner: Command runner
        host: Inventory host name
        var: Optional variable name; the whole mapping is returned when omitted
    """
    argv = ["ansible-inventory", "--inventory", settings.require("inventory"), "--host", host]
    data = _inventory_json(runner, argv)
    if var:
        return data.get(var)
    return data


def graph(settings: Settings, runner: CommandRunner, host: str, output: Path) -> Path:
    """
    Render a host's inventory graph to PNG with ansible-inventory-grapher and dot.

    Args:
        settings: Resolved settings (inventory required)
        runner: Command runner
        host: Inventory host to graph
        output: PNG file to write

    Returns:
        The output path
    """
    grapher = Command(
        ["ansible-inventory-grapher", "-i", settings.require("inventory"), "-q", host]
    )
    dot_source = runner.run(grapher, capture=True).stdout
    rendered = runner.run(Command(["dot", "-Tpng"]), capture=True, input=dot_source.encode())
    if not runner.dry_run:
        output.write_bytes(rendered.stdout)
    return output


def clean(src_root: Path) -> list[Path]:
    """
    Delete ``*.retry`` files left behind by failed playbook runs.

    Returns:
        The removed paths, sorted
    """
    removed = sorted(p for p in Path(src_root).rglob("*.retry") if p.is_file())
    for path in removed:
        path.unlink()
        logger.info(f"Removed {path}")
    return removed
