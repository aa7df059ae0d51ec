"""
Tests for dumping make's rule database.
"""

import subprocess
from unittest.mock import patch

import pytest

from ansible_make.catalog.make import NO_TARGETS, database_command, dump_database
from ansible_make.exceptions import MakeNotFoundError


class TestDatabaseCommand:
    """Tests for building the make invocation."""

    def test_with_makefiles(self):
        assert database_command(["Makefile.base.mk", "Makefile"]) == [
            "make",
            "-p",
            "-f",
            "Makefile.base.mk",
            "-f",
            "Makefile",
            NO_TARGETS,
        ]

    def test_default_makefile(self):
        assert database_command([], make_cmd="gmake") == ["gmake", "-p", "no_targets__"]


class TestDumpDatabase:
    """Tests for running make."""

    def test_returns_stdout(self, sample_database):
        completed = subprocess.CompletedProcess([], 0, stdout=sample_database, stderr="")

        with patch("ansible_make.catalog.make.subprocess.run", return_value=completed) as run:
            assert dump_database(["Makefile"], cwd="/src") == sample_database

        assert run.call_args.args[0] == ["make", "-p", "-f", "Makefile", "no_targets__"]
        assert run.call_args.kwargs["cwd"] == "/src"

    def test_non_zero_exit_still_returns_database(self):
        """Test that a missing sentinel target does not hide the dump."""
        completed = subprocess.CompletedProcess(
            [], 2, stdout="build:\n", stderr="make: *** No rule to make target 'no_targets__'.  Stop.\n"
        )

        with patch("ansible_make.catalog.make.subprocess.run", return_value=completed):
            assert dump_database() == "build:\n"

    def test_make_missing(self):
        with patch("ansible_make.catalog.make.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(MakeNotFoundError) as exc_info:
                dump_database(make_cmd="gmake")

        assert "gmake" in str(exc_info.value)
