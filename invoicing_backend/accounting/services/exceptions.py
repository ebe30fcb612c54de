# accounting/services/exceptions.py

"""
CORE SERVICE ERRORS

Centralized domain errors for the accounting, documents and payments services.

Every service contract raises one of these typed errors instead of a generic
failure. The API layer maps them to HTTP responses; translating them into
user-facing messages is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class CoreServiceError(Exception):
    """Base exception for all core service failures."""


class InvalidInputError(CoreServiceError):
    """Malformed, caller-correctable input. Nothing is persisted."""


class UnbalancedEntryError(InvalidInputError):
    """Raised when a journal entry's debits and credits differ."""


class NotFoundError(CoreServiceError):
    """Referenced record does not exist or belongs to another company."""


class ConversionNotAllowedError(CoreServiceError):
    """Target kind is not a legal conversion target of the source kind."""


class ConcurrencyConflictError(CoreServiceError):
    """Unique-number collision on simultaneous creation. Caller must retry."""


class PaymentStatusRefreshError(CoreServiceError):
    """
    Raised by refresh_payment_status when the recompute fails.

    Callers that treat the refresh as a secondary effect downgrade it to a
    NonBlockingWarning.
    """


@dataclass(frozen=True)
class NonBlockingWarning:
    """
    Secondary-effect failure reported alongside a successful operation.

    The primary operation succeeded; the state it refers to may be
    transiently inconsistent until the next recompute.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)
