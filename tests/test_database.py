"""
Tests for parsing make's rule database.
"""

from ansible_make.catalog.database import (
    RuleHint,
    parse_database,
    parse_provenance,
    split_rule_line,
)


class TestSplitRuleLine:
    """Tests for splitting rule lines."""

    def test_target_and_prerequisites(self):
        assert split_rule_line("build: assert-HOST run-tests") == ("build", ["assert-HOST", "run-tests"])

    def test_no_prerequisites(self):
        assert split_rule_line("clean:") == ("clean", [])

    def test_double_colon_rule(self):
        """Test that the second colon of a double-colon rule is dropped."""
        assert split_rule_line("install:: docs") == ("install", ["docs"])

    def test_assignment(self):
        """Test that := assignments are not rules."""
        assert split_rule_line("build := yes") is None

    def test_target_specific_variable(self):
        assert split_rule_line("deploy: HOST = web1") is None

    def test_no_colon(self):
        assert split_rule_line("just text") is None


class TestParseProvenance:
    """Tests for recovering file and line from a metadata block."""

    def test_gnu_make_4_quotes(self):
        """Test the quoted form printed by GNU make 4.x."""
        block = "build:\n#  recipe to execute (from 'Makefile', line 7):\n\techo"
        assert parse_provenance(block) == ("Makefile", 7)

    def test_backtick_form(self):
        """Test the backtick form printed by older releases."""
        block = "build:\n#  recipe to execute (from `Makefile', line 12):"
        assert parse_provenance(block) == ("Makefile", 12)

    def test_unquoted_form(self):
        block = "#  recipe to execute (from file.mk, line 10):"
        assert parse_provenance(block) == ("file.mk", 10)

    def test_path_with_spaces(self):
        block = "#  recipe to execute (from '/src/my project/Makefile', line 3):"
        assert parse_provenance(block) == ("/src/my project/Makefile", 3)

    def test_no_marker(self):
        """Test that blocks without a recipe give no metadata."""
        assert parse_provenance("build:\n#  Phony target (prerequisite of .PHONY).") == (None, None)


class TestParseDatabase:
    """Tests for collecting rule hints from a dump."""

    def test_sample_database(self, sample_database):
        """Test hints recovered from the recorded dump."""
        hints = parse_database(sample_database, ["build", "deploy", "clean"])

        assert hints == [
            RuleHint("build", ["assert-HOST", "run-tests"], "Makefile", 7),
            RuleHint("deploy", ["assert-HOST", "assert-PLAYBOOK", "build"], "Makefile", 14),
            RuleHint("clean", [], "Makefile", 20),
        ]

    def test_only_candidates(self, sample_database):
        """Test that rule lines of non-candidates are ignored."""
        hints = parse_database(sample_database, ["run-tests"])
        assert [h.target for h in hints] == ["run-tests"]

    def test_missing_candidate(self, rule_entry):
        """Test that a candidate absent from the dump yields no hint."""
        dump = rule_entry("build", file="Makefile", line=3)
        assert parse_database(dump, ["build", "ghost"]) == [RuleHint("build", [], "Makefile", 3)]

    def test_missing_recipe(self, rule_entry):
        """Test that a rule without a recipe marker has no file or line."""
        dump = rule_entry("all", "build")
        assert parse_database(dump, ["all"]) == [RuleHint("all", ["build"], None, None)]

    def test_marker_outside_block(self):
        """Test that a recipe marker more than five lines down is not used."""
        dump = "\n".join(
            [
                "build:",
                "#  one",
                "#  two",
                "#  three",
                "#  four",
                "#  five",
                "#  recipe to execute (from 'Makefile', line 9):",
            ]
        )
        assert parse_database(dump, ["build"]) == [RuleHint("build", [], None, None)]

    def test_marker_of_next_entry_not_borrowed(self, rule_entry):
        """Test that the block stops at the blank line ending an entry."""
        dump = rule_entry("all") + rule_entry("build", file="Makefile", line=4)
        hints = parse_database(dump, ["all", "build"])
        assert hints == [
            RuleHint("all", [], None, None),
            RuleHint("build", [], "Makefile", 4),
        ]

    def test_duplicate_rule_lines_kept_in_order(self, rule_entry):
        """Test that every occurrence is reported so later hints can win."""
        dump = rule_entry("build", file="a.mk", line=1) + rule_entry("build", file="b.mk", line=2)
        hints = parse_database(dump, ["build"])
        assert [(h.file, h.line) for h in hints] == [("a.mk", 1), ("b.mk", 2)]

    def test_assignments_ignored(self):
        """Test that a variable named like a candidate is not a rule."""
        dump = "build := yes\n\nbuild: deps\n#  recipe to execute (from 'Makefile', line 2):\n"
        assert parse_database(dump, ["build"]) == [RuleHint("build", ["deps"], "Makefile", 2)]

    def test_backtick_entry(self, rule_entry):
        dump = rule_entry("build", file="/src/Makefile", line=8, quote="`")
        assert parse_database(dump, ["build"]) == [RuleHint("build", [], "/src/Makefile", 8)]

    def test_empty_dump(self):
        assert parse_database("", ["build"]) == []
