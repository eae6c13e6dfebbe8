"""
Error taxonomy shared by the orchestrators and the HTTP layer.

Every failure that leaves a handler is an `ActionError`; `main.py` turns it
into the `{ok: false, error, ...details}` JSON envelope with the error's
status code.
"""

from typing import Any


class ActionError(Exception):
    """Base class for failures surfaced to the HTTP caller."""

    status_code: int = 500
    # Status written to the action record when this error ends an attempt.
    record_status: str = "failed"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def to_payload(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message, **self.details}


class PreconditionError(ActionError):
    """Well-formed request that is logically incomplete (e.g. limit order without price)."""

    status_code = 400
    record_status = "rejected"


class ConfigurationError(ActionError):
    """A required external endpoint or credential is not configured."""

    status_code = 500


class PriceUnavailableError(ActionError):
    """The price gateway did not return a usable mark price."""

    status_code = 502


class ExchangeError(ActionError):
    """The exchange rejected a call. Carries the raw exchange response."""

    status_code = 500

    def __init__(self, message: str, *, response: Any = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details=details)
        self.response = response
        self.details.setdefault("exchangeResponse", response)


class UnknownError(ActionError):
    status_code = 500

    def __init__(self, message: str = "Unknown error", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details=details)


def flatten_validation_errors(errors: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Collapse pydantic error entries into `{formErrors, fieldErrors}`.

    Errors located on the body itself (bad JSON, wrong top-level type) go to
    `formErrors`; everything else is keyed by its top-level field name.
    """
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for err in errors:
        loc = [part for part in err.get("loc", ()) if part != "body"]
        message = err.get("msg", "Invalid value")
        if not loc or not isinstance(loc[0], str):
            form_errors.append(message)
            continue
        field_errors.setdefault(loc[0], []).append(message)
    return {"formErrors": form_errors, "fieldErrors": field_errors}
