"""
Command builders for ``ansible-vault`` workflows.

Standard operations act on a path with the configured password file:
encrypt, decrypt, edit and rekey. The piped operations ``secret`` and
``unsecret`` read stdin and write stdout, e.g.:

    echo hunter2 | make secret > password.txt
"""

from ansible_make.ansible.runner import Command
from ansible_make.config import Settings

VAULT = "ansible-vault"
DEFAULT_EDITOR = "nano"


def vault_command(settings: Settings, *args: str, editor: str = DEFAULT_EDITOR) -> Command:
    """
    Build an ``ansible-vault`` command using the configured password file.

    The password file is handed over through $ANSIBLE_VAULT_PASSWORD_FILE,
    which ansible-vault reads natively.

    Args:
        settings: Resolved settings; vault_password_file is required
        *args: ansible-vault subcommand and arguments
        editor: Editor used by ``ansible-vault edit``

    Raises:
        MissingSettingError: If no vault password file is configured
    """
    password_file = settings.require("vault_password_file")
    return Command(
        [VAULT, *args],
        env={"EDITOR": editor, "ANSIBLE_VAULT_PASSWORD_FILE": password_file},
    )


def encrypt(settings: Settings, path: str) -> Command:
    return vault_command(settings, "encrypt", path)


def decrypt(settings: Settings, path: str) -> Command:
    return vault_command(settings, "decrypt", path)


def edit(settings: Settings, path: str, editor: str = DEFAULT_EDITOR) -> Command:
    return vault_command(settings, "edit", path, editor=editor)


def secret(settings: Settings) -> Command:
    """Encrypt a secret read from stdin into a vaulted string on stdout."""
    return vault_command(settings, "encrypt_string", "-")


def unsecret(settings: Settings) -> Command:
    """Decrypt vaulted data read from stdin to stdout."""
    return vault_command(settings, "decrypt", "-")


def rekey(path: str, old_key: str, new_key: str) -> Command:
    """
    Re-encrypt ``path`` with a new password file.

    The vault id is the path itself, matching how files are labelled when
    encrypted through these targets.

    Args:
        path: Vaulted file
        old_key: Password file currently protecting ``path``
        new_key: Password file to re-encrypt with
    """
    return Command(
        [
            VAULT,
            "rekey",
            f"--new-vault-id={path}",
            f"--new-vault-password-file={new_key}",
            f"--vault-password-file={old_key}",
            path,
        ]
    )
