"""
Settings for the ansible wrapper commands.

Values come from an optional ``ansible-make.yaml`` file, validated against the
packaged JSON schema, and are overridden by the environment variables the
makefile includes have always used (``ANSIBLE_ROOT``, ``ANSIBLE_USER`` ...).
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from jsonschema import ValidationError, validate

from ansible_make.exceptions import InvalidConfigError, MissingSettingError

PACKAGE_ROOT = Path(__file__).parent
SCHEMA_FILE = PACKAGE_ROOT / "schema" / "config.schema.json"
DEFAULT_CONFIG_NAME = "ansible-make.yaml"

# Order matters: provision passes vars files to ansible-playbook in this order.
VARS_FILE_KEYS = ("secret", "tf", "jenkins", "base")

# setting name -> environment variable
ENV_OVERRIDES = {
    "src_root": "SRC_ROOT",
    "ansible_root": "ANSIBLE_ROOT",
    "vault_password_file": "ANSIBLE_VAULT_PASSWORD_FILE",
    "user": "ANSIBLE_USER",
    "private_key": "ANSIBLE_KEY",
    "inventory": "ANSIBLE_INVENTORY",
    "test_host": "ANSIBLE_TEST_HOST",
    "galaxy_requirements": "ANSIBLE_GALAXY_REQUIREMENTS",
}


@dataclass
class Settings:
    """Resolved settings handed to the ansible and vault wrappers."""

    src_root: Path
    ansible_root: Path
    vault_password_file: str | None = None
    user: str | None = None
    private_key: str | None = None
    inventory: str | None = None
    test_host: str | None = None
    galaxy_requirements: str | None = None
    vars_files: dict[str, str] = field(default_factory=dict)

    def require(self, name: str) -> str:
        """
        Return a configured setting or raise a helpful error.

        Args:
            name: Attribute name of the setting

        Returns:
            The setting value as a string

        Raises:
            MissingSettingError: If the setting is unset or empty
        """
        value = getattr(self, name)
        if value in (None, ""):
            raise MissingSettingError(name, ENV_OVERRIDES.get(name, name.upper()))
        return str(value)

    @property
    def requirements_file(self) -> str:
        """Galaxy requirements file, defaulting to ``<ansible_root>/galaxy-requirements.yml``."""
        if self.galaxy_requirements:
            return self.galaxy_requirements
        return str(self.ansible_root / "galaxy-requirements.yml")


def load_config_file(config_file: Path) -> dict[str, Any]:
    """
    Load and validate a YAML settings file.

    Args:
        config_file: Path to ansible-make.yaml

    Returns:
        The parsed mapping ({} for an empty file)

    Raises:
        InvalidConfigError: If the YAML is malformed or fails schema validation
    """
    try:
        with open(config_file) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfigError(f"{config_file}: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise InvalidConfigError(f"expected a mapping, got {type(config).__name__}")

    schema = json.loads(SCHEMA_FILE.read_text())
    try:
        validate(instance=config, schema=schema)
    except ValidationError as e:
        path = ".".join(str(p) for p in e.path)
        raise InvalidConfigError(f"{e.message} (at '{path or '<root>'}')") from e

    return config


def load_settings(
    environ: Mapping[str, str] | None = None,
    config_file: Path | None = None,
    cwd: Path | None = None,
) -> Settings:
    """
    Build Settings from an optional config file and the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        config_file: Explicit config path; defaults to ./ansible-make.yaml when present
        cwd: Directory used for defaults (defaults to the current directory)

    Returns:
        Resolved Settings instance
    """
    environ = os.environ if environ is None else environ
    cwd = Path.cwd() if cwd is None else Path(cwd)

    if config_file is None:
        candidate = cwd / DEFAULT_CONFIG_NAME
        config = load_config_file(candidate) if candidate.exists() else {}
    else:
        config = load_config_file(Path(config_file))

    values: dict[str, Any] = {k: v for k, v in config.items() if k != "vars_files"}
    for setting, env_var in ENV_OVERRIDES.items():
        if environ.get(env_var):
            values[setting] = environ[env_var]

    vars_files = dict(config.get("vars_files", {}))
    for key in VARS_FILE_KEYS:
        env_var = f"ANSIBLE_VARS_{key.upper()}"
        if environ.get(env_var):
            vars_files[key] = environ[env_var]

    src_root = Path(values.pop("src_root", cwd))
    ansible_root = Path(values.pop("ansible_root", src_root / "ansible"))

    return Settings(
        src_root=src_root,
        ansible_root=ansible_root,
        vars_files=vars_files,
        **values,
    )
