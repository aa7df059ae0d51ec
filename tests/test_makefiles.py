"""
Tests that run GNU make against the shipped makefile includes.
"""

import os
import shlex
import shutil
import subprocess
import sys

import pytest

from ansible_make.cli import MAKEFILES_DIR

pytestmark = pytest.mark.skipif(
    shutil.which("make") is None or shutil.which("bash") is None,
    reason="GNU make and bash are required",
)

ANSIBLE_MAKE = f"{shlex.quote(sys.executable)} -m ansible_make.cli"


@pytest.fixture
def project(tmp_path):
    """A project makefile that includes the base and ansible makefiles."""
    (tmp_path / "Makefile").write_text(
        f"include {MAKEFILES_DIR / 'Makefile.base.mk'}\n"
        f"include {MAKEFILES_DIR / 'Makefile.ansible.mk'}\n"
        "\n"
        "show-requirements:\n"
        '\t@echo "requirements=$${ANSIBLE_GALAXY_REQUIREMENTS:-unset}"\n'
        "\n"
        "requirements-dry-run:\n"
        "\t@$(ANSIBLE_MAKE) ansible requirements --dry-run\n"
    )
    return tmp_path


def run_make(project, *targets):
    env = {
        name: value
        for name, value in os.environ.items()
        if not name.startswith(("ANSIBLE_", "MAKE")) and name not in ("SRC_ROOT", "FORCE_COLOR")
    }
    env["NO_COLOR"] = "1"
    return subprocess.run(
        ["make", *targets, f"ANSIBLE_MAKE={ANSIBLE_MAKE}"],
        cwd=project,
        env=env,
        capture_output=True,
        text=True,
    )


def target_block(report: str, target: str) -> list[str]:
    """Return the ALL TARGETS entry for ``target``: its header and detail lines."""
    lines = report.split("--- ALL TARGETS ---", 1)[1].splitlines()
    header = f"  [{target}] ("
    start = next(i for i, line in enumerate(lines) if line.startswith(header))
    block = [lines[start]]
    for line in lines[start + 1 :]:
        if not line.startswith("    "):
            break
        block.append(line)
    return block


class TestHelpTarget:
    """Tests for `make help` with the includes loaded once."""

    def test_args_listed_once(self, project):
        """Test that included rules are not duplicated in the catalog."""
        result = run_make(project, "help")

        assert result.returncode == 0, result.stderr
        play = target_block(result.stdout, "ansible-play")
        assert play[0].endswith("Makefile.ansible.mk:47)")
        assert play[1] == "    args: [host, playbook]"

    def test_prereqs_and_variables(self, project):
        result = run_make(project, "help")

        assert result.returncode == 0, result.stderr
        assert target_block(result.stdout, "ansible-graph")[1:3] == [
            "    args: [host]",
            "    prereqs: [require-ansible-inventory-grapher, require-dot]",
        ]
        assert target_block(result.stdout, "ansible-describe-inventory")[1] == "    args: [ANSIBLE_INVENTORY]"

    def test_docs_and_groups(self, project):
        result = run_make(project, "help")

        assert result.returncode == 0, result.stderr
        assert "    List every target with its makefile, required variables and docs" in target_block(
            result.stdout, "help"
        )
        assert "[./Makefile] (2 targets)" in result.stdout
        assert "no_targets__" not in result.stdout
        assert "assert-%" not in result.stdout


class TestAnsibleMakefile:
    """Tests for the variables the ansible include leaves to the CLI."""

    def test_requirements_not_exported(self, project):
        """Test that loading the include defines no galaxy requirements path."""
        result = run_make(project, "show-requirements")

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "requirements=unset"
        assert "undefined variable" not in result.stderr

    def test_requirements_default(self, project):
        """Test that the CLI falls back to the ansible root requirements file."""
        result = run_make(project, "requirements-dry-run")

        assert result.returncode == 0, result.stderr
        expected = project / "ansible" / "galaxy-requirements.yml"
        assert result.stdout.strip() == f"ansible-galaxy install -r {expected}"
