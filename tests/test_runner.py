"""
Tests for running external commands.
"""

import subprocess
from unittest.mock import patch

import pytest

from ansible_make.ansible.runner import Command, CommandRunner
from ansible_make.exceptions import CommandFailedError, ExecutableNotFoundError


class TestCommand:
    """Tests for Command rendering."""

    def test_plain(self):
        assert str(Command(["ansible", "--version"])) == "ansible --version"

    def test_env_prefix_sorted_and_quoted(self):
        command = Command(["ansible-vault", "edit", "my file.yml"], env={"EDITOR": "vim -n", "A": "1"})

        assert str(command) == "A=1 EDITOR='vim -n' ansible-vault edit 'my file.yml'"


class TestCommandRunner:
    """Tests for CommandRunner."""

    def test_dry_run(self):
        runner = CommandRunner(dry_run=True)

        with patch("ansible_make.ansible.runner.subprocess.run") as run:
            result = runner.run(Command(["ansible", "--version"]))

        run.assert_not_called()
        assert result.returncode == 0
        assert result.stdout == ""
        assert runner.history == [Command(["ansible", "--version"])]

    def test_environment_merged(self):
        runner = CommandRunner(environ={"PATH": "/usr/bin", "EDITOR": "vi"})

        with patch("ansible_make.ansible.runner.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 0, stdout="", stderr="")
            runner.run(Command(["ansible-vault", "edit", "x"], env={"EDITOR": "nano"}))

        kwargs = run.call_args.kwargs
        assert kwargs["env"] == {"PATH": "/usr/bin", "EDITOR": "nano"}
        assert kwargs["text"] is True
        assert kwargs["capture_output"] is False

    def test_capture(self):
        runner = CommandRunner(environ={})

        with patch("ansible_make.ansible.runner.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 0, stdout="2.16.0\n", stderr="")
            result = runner.run(Command(["ansible", "--version"]), capture=True)

        assert result.stdout == "2.16.0\n"
        assert run.call_args.kwargs["capture_output"] is True

    def test_bytes_input_uses_binary_mode(self):
        runner = CommandRunner(environ={})

        with patch("ansible_make.ansible.runner.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 0, stdout=b"PNG", stderr=b"")
            runner.run(Command(["dot", "-Tpng"]), capture=True, input=b"digraph {}")

        assert run.call_args.kwargs["text"] is False
        assert run.call_args.kwargs["input"] == b"digraph {}"

    def test_missing_executable(self):
        runner = CommandRunner(environ={})

        with patch("ansible_make.ansible.runner.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(ExecutableNotFoundError) as exc_info:
                runner.run(Command(["ansible-vault", "encrypt", "x"]))

        assert exc_info.value.name == "ansible-vault"

    def test_failure(self):
        runner = CommandRunner(environ={})

        with patch("ansible_make.ansible.runner.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 4, stdout="", stderr="no inventory\n")
            with pytest.raises(CommandFailedError) as exc_info:
                runner.run(Command(["ansible-inventory", "--list"]), capture=True)

        assert exc_info.value.returncode == 4
        assert "no inventory" in str(exc_info.value)

    def test_failure_unchecked(self):
        runner = CommandRunner(environ={})

        with patch("ansible_make.ansible.runner.subprocess.run") as run:
            run.return_value = subprocess.CompletedProcess([], 1, stdout="", stderr="")
            result = runner.run(Command(["false"]), check=False)

        assert result.returncode == 1
