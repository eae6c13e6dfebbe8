import re
import time
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from ..services.environment import Environment
from .common import ADDRESS_PATTERN, DecimalStr


def _default_subaccount_name() -> str:
    return f"subaccount-{int(time.time() * 1000)}"


class StatusRequest(BaseModel):
    environment: Environment = Environment.TESTNET
    sub_accounts: list[str] = Field(default_factory=list, alias="subAccounts")

    class Config:
        populate_by_name = True

    @field_validator("sub_accounts")
    @classmethod
    def _addresses(cls, value: list[str]) -> list[str]:
        for address in value:
            if not re.match(ADDRESS_PATTERN, address):
                raise ValueError("subAccount must be a 0x address")
        return value


class AccountSnapshot(BaseModel):
    wallet_address: str = Field(..., serialization_alias="walletAddress")
    clearinghouse: Any


class StatusResponse(BaseModel):
    ok: bool = True
    environment: Environment
    wallet_address: str = Field(..., serialization_alias="walletAddress")
    snapshots: list[AccountSnapshot]


class CreateSubAccountRequest(BaseModel):
    name: str = Field(default_factory=_default_subaccount_name, min_length=1)
    environment: Environment = Environment.TESTNET


class CreateSubAccountResponse(BaseModel):
    ok: bool = True
    environment: Environment
    name: str
    wallet_address: str = Field(..., serialization_alias="walletAddress")
    result: Any


class TransferSubAccountRequest(BaseModel):
    """
    Move USDC between the main account and a sub-account.

    `deposit` moves funds into the sub-account, `withdraw` back to the main
    account.
    """

    sub_account_user: str = Field(..., alias="subAccountUser", pattern=ADDRESS_PATTERN)
    amount: DecimalStr
    direction: Literal["deposit", "withdraw"] = "deposit"
    environment: Environment = Environment.TESTNET

    class Config:
        populate_by_name = True

    @field_validator("amount")
    @classmethod
    def _valid_amount(cls, value: str) -> str:
        amount = Decimal(value)
        if amount < 0:
            raise ValueError("amount must be non-negative")
        # The exchange moves whole micro-USD (6 decimals).
        if (amount * 1_000_000) % 1 != 0:
            raise ValueError("amount must have at most 6 decimal places")
        return value


class TransferSubAccountResponse(BaseModel):
    ok: bool = True
    environment: Environment
    sub_account_user: str = Field(..., serialization_alias="subAccountUser")
    direction: Literal["deposit", "withdraw"]
    amount: str
    result: Any


class PortfolioMarginRequest(BaseModel):
    enabled: bool = True
    environment: Environment = Environment.TESTNET


class PortfolioMarginResponse(BaseModel):
    ok: bool = True
    environment: Environment
    enabled: bool
    user: str
    result: Any


class BuilderFeeRequest(BaseModel):
    environment: Environment = Environment.TESTNET


class BuilderFeeResponse(BaseModel):
    ok: bool = True
    environment: Environment
    wallet_address: str = Field(..., serialization_alias="walletAddress")
    approval: Any
