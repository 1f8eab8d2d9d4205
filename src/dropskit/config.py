"""
Configuration - Operator supplied identity and secrets.

Values come from the process environment, optionally seeded from a
``.env`` file:

    ACCOUNT_NAME      (required) actor transactions are signed as
    PERMISSION_LEVEL  (required) permission of the actor, e.g. "active"
    PRIVATE_KEY       (required) key material for the wallet plugin
    API_ENDPOINT      (optional) chain API node, default Jungle 4

Only presence is checked here. Malformed keys or permissions surface when
the wallet is built or when the chain rejects a transaction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_API_ENDPOINT = "https://jungle4.greymass.com"

REQUIRED_VARIABLES = (
    ("ACCOUNT_NAME", "An"),
    ("PERMISSION_LEVEL", "A"),
    ("PRIVATE_KEY", "A"),
)


class ConfigError(Exception):
    """Configuration is unusable."""


class MissingConfigError(ConfigError):
    """A required configuration value is absent or empty."""

    def __init__(self, variable: str, article: str = "A") -> None:
        super().__init__(
            f"{article} {variable} value must be provided in an .env file or on the command line."
        )
        self.variable = variable


@dataclass(frozen=True)
class Config:
    account_name: str
    permission_level: str
    private_key: str = field(repr=False)
    api_endpoint: str = DEFAULT_API_ENDPOINT


def load_env_file(env_path: Optional[Path] = None) -> bool:
    """
    Load a ``.env`` file into the process environment.

    Variables already set in the environment take precedence.

    Args:
        env_path: Path to the .env file (default: search from the working directory)

    Returns:
        True if a file was found and loaded
    """
    path = env_path or find_dotenv(usecwd=True)
    if not path:
        return False
    return load_dotenv(path, override=False)


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Read configuration from the environment.

    Args:
        environ: Mapping to read from (default: ``os.environ``)

    Returns:
        Config instance

    Raises:
        MissingConfigError: If ACCOUNT_NAME, PERMISSION_LEVEL or PRIVATE_KEY
            is missing or empty
    """
    env = os.environ if environ is None else environ

    values = {}
    for variable, article in REQUIRED_VARIABLES:
        value = env.get(variable)
        if not value:
            raise MissingConfigError(variable, article)
        values[variable] = value

    return Config(
        account_name=values["ACCOUNT_NAME"],
        permission_level=values["PERMISSION_LEVEL"],
        private_key=values["PRIVATE_KEY"],
        api_endpoint=env.get("API_ENDPOINT") or DEFAULT_API_ENDPOINT,
    )
