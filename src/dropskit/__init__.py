__all__ = [
    # Configuration
    "Config",
    "ConfigError",
    "MissingConfigError",
    "DEFAULT_API_ENDPOINT",
    "load_config",
    "load_env_file",
    # Bootstrap
    "ClientContext",
    "bootstrap",
    "bootstrap_from_env",
    # Chain
    "APIClient",
    "APIError",
    "ChainDefinition",
    "Chains",
    "Action",
    "PermissionLevel",
    "Transaction",
    # Keys & wallets
    "InvalidKeyError",
    "PrivateKey",
    "PublicKey",
    "Signature",
    "WalletPlugin",
    "WalletPluginPrivateKey",
    # Session
    "ChainMismatchError",
    "Session",
    "TransactResult",
    # Contracts
    "Contract",
    "DropsContract",
    "EpochContract",
]

from .chain.chains import ChainDefinition, Chains
from .chain.rpc import APIClient, APIError
from .chain.tx import Action, PermissionLevel, Transaction
from .config import (
    DEFAULT_API_ENDPOINT,
    Config,
    ConfigError,
    MissingConfigError,
    load_config,
    load_env_file,
)
from .context import ClientContext, bootstrap, bootstrap_from_env
from .contracts import Contract, DropsContract, EpochContract
from .session import ChainMismatchError, Session, TransactResult
from .sigil.keys import InvalidKeyError, PrivateKey, PublicKey, Signature
from .sigil.wallet import WalletPlugin, WalletPluginPrivateKey
