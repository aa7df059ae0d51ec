"""
Custom exceptions for ansible-make with helpful error messages.
"""


class AnsibleMakeError(Exception):
    """Base exception for ansible-make errors."""

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class CatalogError(AnsibleMakeError):
    """Errors raised while collecting input for the target catalog."""

    pass


class MissingInputError(CatalogError):
    """A required input stream for the target catalog is empty or absent."""

    def __init__(self, stream_name: str):
        message = f"No input received for {stream_name}."
        suggestion = (
            "Pipe the make database into the reporter, for example:\n"
            "  make -p no_targets__ | ansible-make help --database -\n\n"
            "Or let ansible-make run make itself:\n"
            "  ansible-make help -f Makefile"
        )
        super().__init__(message, suggestion)


class UnreadableInputError(CatalogError):
    """A catalog input file could not be opened."""

    def __init__(self, path: str, reason: str):
        message = f"Cannot read {path}: {reason}"
        suggestion = (
            "Check the path passed to --database or --candidates, or use - to\n"
            "read it from stdin."
        )
        super().__init__(message, suggestion)


class ConflictingInputError(CatalogError):
    """Both catalog inputs were requested from standard input."""

    def __init__(self):
        message = "Candidates and database cannot both be read from stdin."
        suggestion = (
            "Pass one of them as a file path, or omit --candidates to derive\n"
            "the candidate list from the make database."
        )
        super().__init__(message, suggestion)


class MakeNotFoundError(CatalogError):
    """The make executable could not be started."""

    def __init__(self, make_cmd: str):
        message = f"Could not run '{make_cmd}' to dump the rule database."
        suggestion = (
            "Install GNU make or point ansible-make at it:\n"
            "  ansible-make help --make-cmd /usr/bin/gmake"
        )
        super().__init__(message, suggestion)


class GuardError(AnsibleMakeError):
    """A precondition guard (assert-%, assertnot-%, require-%) failed."""

    pass


class MissingEnvironmentVariableError(GuardError):
    """A required environment variable is unset or empty."""

    def __init__(self, name: str):
        self.name = name
        message = f"Environment variable {name} is not set"
        suggestion = f"Set it before running the target:\n  {name}=<value> make <target>"
        super().__init__(message, suggestion)


class UnexpectedEnvironmentVariableError(GuardError):
    """An environment variable that must stay unset is present."""

    def __init__(self, name: str):
        self.name = name
        message = f"Environment variable {name} is set, and shouldn't be!"
        suggestion = f"Unset it before running the target:\n  unset {name}"
        super().__init__(message, suggestion)


class ExecutableNotFoundError(GuardError):
    """A required executable is not present in $PATH."""

    def __init__(self, name: str):
        self.name = name
        message = f"Executable not found in $PATH: {name}"
        suggestion = f"Install {name} or extend $PATH, then check with:\n  which {name}"
        super().__init__(message, suggestion)


class CommandFailedError(AnsibleMakeError):
    """An external command exited with a non-zero status."""

    def __init__(self, argv: list[str], returncode: int, stderr: str | None = None):
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed with exit code {returncode}: {' '.join(argv)}"
        if stderr:
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class ConfigurationError(AnsibleMakeError):
    """Configuration file errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""

    def __init__(self, error_details: str):
        message = f"Invalid configuration file: {error_details}"

        suggestion = (
            "Fix ansible-make.yaml. Every key is optional, for example:\n"
            "  ansible_root: ./ansible\n"
            "  vault_password_file: ./ansible/.vault_password\n"
            "  vars_files:\n"
            "    base: ./ansible/vars/base.yml"
        )
        super().__init__(message, suggestion)


class MissingSettingError(ConfigurationError):
    """A setting needed by an ansible wrapper is not configured."""

    def __init__(self, setting: str, env_var: str):
        self.setting = setting
        self.env_var = env_var
        message = f"Setting '{setting}' is not configured."
        suggestion = (
            f"Export it in the environment:\n"
            f"  export {env_var}=<value>\n\n"
            f"Or add '{setting}' to ansible-make.yaml"
        )
        super().__init__(message, suggestion)


def format_error_for_cli(error: Exception) -> str:
    """
    Format an exception for CLI display with helpful information.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string (rich markup)
    """
    from rich.markup import escape

    if isinstance(error, AnsibleMakeError):
        output = f"[red]Error:[/red] {escape(error.message)}"
        if error.suggestion:
            output += f"\n\n[yellow]{escape(error.suggestion)}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {escape(str(error))}"
