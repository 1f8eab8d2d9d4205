"""
Bootstrap - Assemble the client, contracts and session from configuration.

``bootstrap()`` performs no network I/O; it only constructs objects. Every
object in the returned context shares a single API client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .chain.chains import ChainDefinition, Chains
from .chain.rpc import APIClient
from .config import Config, load_config
from .contracts import DropsContract, EpochContract
from .session import Session
from .sigil.wallet import WalletPluginPrivateKey

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = Chains.Jungle4


@dataclass(frozen=True)
class ClientContext:
    config: Config
    url: str
    client: APIClient
    drops_contract: DropsContract
    epoch_contract: EpochContract
    session: Session

    def close(self) -> None:
        self.client.close()


def bootstrap(config: Config, chain: ChainDefinition = DEFAULT_CHAIN) -> ClientContext:
    """
    Build the wallet, client, contract accessors and session.

    Args:
        config: Loaded configuration
        chain: Chain the session signs for (default: Jungle 4)

    Returns:
        ClientContext

    Raises:
        InvalidKeyError: If the private key is malformed
    """
    wallet_plugin = WalletPluginPrivateKey(config.private_key)

    url = config.api_endpoint
    client = APIClient(url)

    drops_contract = DropsContract(client)
    epoch_contract = EpochContract(client)

    session = Session(
        chain=chain,
        wallet_plugin=wallet_plugin,
        actor=config.account_name,
        permission=config.permission_level,
        client=client,
    )
    logger.debug("Bootstrapped %r against %s", session, url)

    return ClientContext(
        config=config,
        url=url,
        client=client,
        drops_contract=drops_contract,
        epoch_contract=epoch_contract,
        session=session,
    )


def bootstrap_from_env(environ: Optional[Mapping[str, str]] = None) -> ClientContext:
    """Load configuration from the environment and bootstrap it."""
    return bootstrap(load_config(environ))
