from dataclasses import dataclass
from enum import Enum

from hyperliquid.utils import constants

from ..config import Settings


class Environment(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ChainConfig:
    """Chain the wallet context is bound to for one environment."""

    chain: str
    chain_id: int
    rpc_url: str | None


_CHAINS: dict[Environment, tuple[str, int]] = {
    Environment.MAINNET: ("arbitrum", 42161),
    Environment.TESTNET: ("arbitrum-sepolia", 421614),
}


def resolve_chain_config(environment: Environment, settings: Settings) -> ChainConfig:
    """
    Map a logical environment to its chain name, chain id and RPC URL.

    Mainnet uses ARBITRUM_RPC_URL, testnet ARBITRUM_SEPOLIA_RPC_URL; both fall
    back to RPC_URL.
    """
    environment = Environment(environment)
    chain, chain_id = _CHAINS[environment]
    if environment is Environment.MAINNET:
        rpc_url = settings.ARBITRUM_RPC_URL
    else:
        rpc_url = settings.ARBITRUM_SEPOLIA_RPC_URL
    return ChainConfig(chain=chain, chain_id=chain_id, rpc_url=rpc_url or settings.RPC_URL)


def network_tag(environment: Environment) -> str:
    """Network label written on action records."""
    return "hyperliquid" if Environment(environment) is Environment.MAINNET else "hyperliquid-testnet"


def api_url(environment: Environment) -> str:
    if Environment(environment) is Environment.MAINNET:
        return constants.MAINNET_API_URL
    return constants.TESTNET_API_URL
