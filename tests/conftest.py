"""
Pytest configuration and shared fixtures.
"""

import logging
from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_makefile(fixtures_dir):
    """Return path to the sample project makefile."""
    return fixtures_dir / "Makefile"


@pytest.fixture
def sample_database(fixtures_dir):
    """Return the `make -p` output recorded for the sample makefile."""
    return (fixtures_dir / "make-database.txt").read_text()


@pytest.fixture
def rule_entry():
    """
    Return a builder for one rule entry of a `make -p` dump.

    The entry mimics GNU make 4.x: the rule line, three status comments, the
    recipe provenance line and one recipe line, followed by a blank line.
    """

    def build(target, prereqs="", file=None, line=None, quote="'"):
        rule = f"{target}: {prereqs}".rstrip()
        lines = [
            rule,
            "#  Implicit rule search has not been done.",
            "#  Modification time never checked.",
            "#  File has not been updated.",
        ]
        if file is not None:
            closing = "'" if quote == "`" else quote
            lines.append(f"#  recipe to execute (from {quote}{file}{closing}, line {line}):")
            lines.append("\t@echo " + target)
        return "\n".join(lines) + "\n\n"

    return build


@pytest.fixture
def settings_env(tmp_path):
    """Environment with every ansible setting configured."""
    return {
        "SRC_ROOT": str(tmp_path),
        "ANSIBLE_ROOT": str(tmp_path / "ansible"),
        "ANSIBLE_VAULT_PASSWORD_FILE": str(tmp_path / ".vault_password"),
        "ANSIBLE_USER": "deploy",
        "ANSIBLE_KEY": str(tmp_path / "id_rsa"),
        "ANSIBLE_INVENTORY": str(tmp_path / "inventory"),
        "ANSIBLE_TEST_HOST": "testbox",
        "ANSIBLE_VARS_SECRET": "vars/secret.yml",
        "ANSIBLE_VARS_TF": "vars/tf.yml",
        "ANSIBLE_VARS_JENKINS": "vars/jenkins.yml",
        "ANSIBLE_VARS_BASE": "vars/base.yml",
    }


@pytest.fixture
def reset_logging():
    """Remove handlers installed on the ansible_make logger during a test."""
    logger = logging.getLogger("ansible_make")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
