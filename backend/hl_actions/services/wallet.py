import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import ConfigurationError
from .environment import ChainConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletContext:
    """
    Signing capability bound to one chain.

    `address` is the trading account. With an API (agent) wallet it differs
    from `signer.address`.
    """

    address: str
    chain: ChainConfig
    signer: LocalAccount


class WalletProvider(ABC):
    """Hands out a fresh wallet context per request."""

    @abstractmethod
    def wallet(self, chain: ChainConfig) -> WalletContext:
        raise NotImplementedError


class LocalKeyWalletProvider(WalletProvider):
    def __init__(self, private_key: str | None, account_address: str | None = None) -> None:
        self._private_key = private_key
        self._account_address = account_address

    def wallet(self, chain: ChainConfig) -> WalletContext:
        if not self._private_key:
            raise ConfigurationError("HYPERLIQUID_PRIVATE_KEY is not configured.")
        try:
            signer: LocalAccount = Account.from_key(self._private_key)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError("HYPERLIQUID_PRIVATE_KEY is not a valid private key.") from exc

        address = (self._account_address or "").strip() or signer.address
        logger.debug("wallet context for %s on %s (signer %s)", address, chain.chain, signer.address)
        return WalletContext(address=address, chain=chain, signer=signer)
