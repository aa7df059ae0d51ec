"""
Run make to obtain its internal rule database.
"""

import logging
import subprocess
from pathlib import Path

from ansible_make.exceptions import MakeNotFoundError

logger = logging.getLogger(__name__)

# Declared in Makefile.base.mk with no recipe, so ``make -p`` prints the
# database without building anything.
NO_TARGETS = "no_targets__"


def database_command(makefiles: list[str | Path] | None = None, make_cmd: str = "make") -> list[str]:
    """
    Build the argv used to dump make's database.

    Examples:
        >>> database_command(["Makefile.base.mk", "Makefile"])
        ['make', '-p', '-f', 'Makefile.base.mk', '-f', 'Makefile', 'no_targets__']
    """
    argv = [make_cmd, "-p"]
    for makefile in makefiles or []:
        argv.extend(["-f", str(makefile)])
    argv.append(NO_TARGETS)
    return argv


def dump_database(
    makefiles: list[str | Path] | None = None,
    make_cmd: str = "make",
    cwd: str | Path | None = None,
) -> str:
    """
    Run ``make -p`` and return its output.

    make exits non-zero when the sentinel target is missing from the loaded
    makefiles; the database is still printed in that case, so the exit code is
    only logged.

    Args:
        makefiles: Makefiles to load with ``-f`` (make's default lookup when empty)
        make_cmd: make executable
        cwd: Directory to run make in

    Returns:
        The database text

    Raises:
        MakeNotFoundError: If the make executable cannot be started
    """
    argv = database_command(makefiles, make_cmd)
    logger.info(f"Dumping make database: {' '.join(argv)}")
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            cwd=cwd,
            check=False,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise MakeNotFoundError(make_cmd) from e

    if result.returncode != 0:
        logger.debug(f"{make_cmd} exited with {result.returncode}: {result.stderr.strip()}")
    return result.stdout
