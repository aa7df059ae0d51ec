"""
Wrappers around the ansible command-line tools.

Builders return ``Command`` objects; ``CommandRunner`` executes them (or logs
them in dry-run mode) so every command line can be inspected in tests.
"""

from ansible_make.ansible.runner import Command, CommandRunner

__all__ = ["Command", "CommandRunner"]
