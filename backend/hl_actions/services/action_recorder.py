from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ActionError, UnknownError
from ..models import ActionRecord
from .environment import Environment, network_tag
from .wallet import WalletContext

logger = logging.getLogger(__name__)


class ActionRecorder:
    """
    Append-only action log backed by the `action_records` table.

    A failed write is logged and swallowed: the exchange action it describes
    has already happened and must not be reported as failed because the audit
    row could not be stored.
    """

    def __init__(self, db: Session, source: str = "hyperliquid") -> None:
        self.db = db
        self.source = source

    def store(
        self,
        *,
        ref: str,
        status: str,
        wallet_address: str,
        action: str,
        metadata: dict[str, Any] | None = None,
        notional: str | None = None,
        network: str | None = None,
    ) -> ActionRecord | None:
        try:
            record = ActionRecord(
                source=self.source,
                ref=ref,
                status=status,
                wallet_address=wallet_address,
                action=action,
                notional=notional,
                network=network,
                details=jsonable_encoder(metadata) if metadata is not None else None,
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except (SQLAlchemyError, TypeError, ValueError):
            self.db.rollback()
            logger.exception("[ActionRecorder] failed to store %s %s ref=%s", action, status, ref)
            return None

        logger.info("[ActionRecorder] stored %s %s ref=%s wallet=%s", action, status, ref, wallet_address)
        return record


class ActionAttempt:
    """
    One attempt of an action, recorded exactly once with its real outcome.

    Orchestrators fill `metadata` as the steps complete, run the exchange
    calls inside `guard()` and finish with `succeed()`. Errors escaping
    `guard()` are recorded with the error's status before being re-raised as
    `ActionError`.
    """

    def __init__(
        self,
        recorder: ActionRecorder,
        *,
        action: str,
        wallet: WalletContext,
        environment: Environment,
        ref: str | None = None,
        notional: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.recorder = recorder
        self.action = action
        self.wallet = wallet
        self.environment = Environment(environment)
        self.ref = ref
        self.notional = notional
        self.metadata: dict[str, Any] = dict(metadata or {})
        # Status used when a guarded step fails; orchestrators may raise it to
        # "partial" once an irreversible step went through.
        self.failure_status: str | None = None
        self.record: ActionRecord | None = None
        self._recorded = False

    def _store(self, status: str, ref: str | None) -> ActionRecord | None:
        if self._recorded:
            return self.record
        self._recorded = True
        self.record = self.recorder.store(
            ref=ref or self.ref or f"{self.environment}-{self.action}-{int(time.time() * 1000)}",
            status=status,
            wallet_address=self.wallet.address,
            action=self.action,
            metadata=self.metadata or None,
            notional=self.notional,
            network=network_tag(self.environment),
        )
        return self.record

    def succeed(self, status: str = "submitted", *, ref: str | None = None, **metadata: Any) -> ActionRecord | None:
        self.metadata.update(metadata)
        return self._store(status, ref)

    def fail(self, error: ActionError) -> None:
        self.metadata["error"] = error.message
        for key, value in error.details.items():
            self.metadata.setdefault(key, value)
        status = self.failure_status if error.record_status == "failed" and self.failure_status else error.record_status
        self._store(status, None)

    def reject(self, error: ActionError) -> ActionError:
        """Record a precondition failure and hand the error back for raising."""
        logger.warning("[%s] rejected: %s", self.action, error.message)
        self.fail(error)
        return error

    @contextmanager
    def guard(self) -> Iterator[ActionAttempt]:
        try:
            yield self
        except ActionError as exc:
            logger.error("[%s] failed: %s details=%s", self.action, exc.message, exc.details)
            self.fail(exc)
            raise
        except Exception as exc:
            logger.exception("[%s] unexpected error", self.action)
            error = UnknownError()
            self.metadata["cause"] = repr(exc)
            self.fail(error)
            raise error from exc
