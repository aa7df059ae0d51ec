"""
Precondition guards used as make prerequisites.

``assert-VAR`` fails unless $VAR is set, ``assertnot-VAR`` fails when it is,
and ``require-CMD`` fails unless CMD is on $PATH:

    grep-json: assert-PATH assert-KEY require-jq
    	cat $$PATH | jq .$$KEY
"""

import os
import shutil
from typing import Mapping

from ansible_make.exceptions import (
    ExecutableNotFoundError,
    MissingEnvironmentVariableError,
    UnexpectedEnvironmentVariableError,
)


def assert_env(name: str, environ: Mapping[str, str] | None = None) -> str:
    """
    Require an environment variable to be set and non-empty.

    Args:
        name: Variable name
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The variable's value

    Raises:
        MissingEnvironmentVariableError: If the variable is unset or empty
    """
    environ = os.environ if environ is None else environ
    value = environ.get(name, "")
    if value == "":
        raise MissingEnvironmentVariableError(name)
    return value


def assert_not_env(name: str, environ: Mapping[str, str] | None = None) -> None:
    """
    Require an environment variable to be unset (or empty).

    Raises:
        UnexpectedEnvironmentVariableError: If the variable has a value
    """
    environ = os.environ if environ is None else environ
    if environ.get(name, "") != "":
        raise UnexpectedEnvironmentVariableError(name)


def require_executable(name: str) -> str:
    """
    Require an executable to be present in $PATH.

    Returns:
        Full path of the executable

    Raises:
        ExecutableNotFoundError: If it cannot be found
    """
    path = shutil.which(name)
    if path is None:
        raise ExecutableNotFoundError(name)
    return path
