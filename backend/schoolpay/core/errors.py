"""Error Hierarchy — typed, categorized exceptions for all SchoolPay failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller errors (400/409) are rejected synchronously and never change state
    - Collaborator errors (502/503) degrade to a visible state, never crash the process
    - to_response() produces REST envelope; to_sse_event() produces SSE envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SchoolPayError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    requester_id: str | None = None
    transaction_state: str | None = None
    phase: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class SchoolPayError(Exception):
    """Base exception for all SchoolPay errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "requester_id": self.context.requester_id,
                    "transaction_state": self.context.transaction_state,
                    "phase": self.context.phase,
                },
            }
        }

    def to_sse_event(self) -> dict:
        """Convert to SSE error event."""
        return {
            "type": "error",
            "data": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "severity": self.severity.value,
                "recoverable": self.severity in (
                    ErrorSeverity.INFO, ErrorSeverity.WARNING,
                ),
            },
        }


# ─── Caller Errors (400/409) ────────────────────────────────────

class UnknownGradeBandError(SchoolPayError):
    """Fee lookup for a tier outside the closed grade-band table."""
    def __init__(self, tier: object, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown grade band: {tier!r}",
            "UNKNOWN_GRADE_BAND", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.tier = tier


class InvalidAmountError(SchoolPayError):
    """Payment amount is not a positive integer."""
    def __init__(self, amount: object, context: ErrorContext | None = None):
        super().__init__(
            f"Payment amount must be a positive integer, got {amount!r}",
            "INVALID_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.amount = amount


class TransactionInProgressError(SchoolPayError):
    """submit() called while another transaction is still on screen."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Transaction already in progress",
            "TRANSACTION_IN_PROGRESS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class SessionNotReadyError(SchoolPayError):
    """Privileged action attempted before the session identity resolved."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Session identity is not resolved yet",
            "SESSION_NOT_READY", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class InvalidTransitionError(SchoolPayError):
    """State machine asked to move along an edge it does not have."""
    def __init__(self, machine: str, current: str, target: str):
        super().__init__(
            f"Illegal {machine} transition: {current} -> {target}",
            "INVALID_TRANSITION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, None, 500,
        )
        self.current = current
        self.target = target


class OrchestratorDisposedError(SchoolPayError):
    """submit() on an orchestrator whose host has shut down."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Payment orchestrator has been disposed",
            "ORCHESTRATOR_DISPOSED", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, context, 503,
        )


# ─── Session Errors ─────────────────────────────────────────────

class ConfigurationAbsentError(SchoolPayError):
    """Optional start-up configuration is missing. Expected; triggers fallback."""
    def __init__(self, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"Configuration '{setting}' is not set",
            "CONFIGURATION_ABSENT", ErrorCategory.CONFIGURATION,
            ErrorSeverity.INFO, context, 503,
        )
        self.setting = setting


class CredentialProviderError(SchoolPayError):
    """Credential provider call failed (network or provider rejection)."""
    def __init__(
        self,
        message: str,
        operation: str,
        code: str = "CREDENTIAL_PROVIDER_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Credential provider {operation} failed: {message}",
            code, ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 502,
        )
        self.operation = operation


class CredentialExchangeFailedError(CredentialProviderError):
    """Start-up credential token could not be exchanged. Next tier is tried."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "token exchange", "CREDENTIAL_EXCHANGE_FAILED", context,
        )


class IdentityResolutionExhaustedError(SchoolPayError):
    """Every sign-in strategy failed. Session continues with the sentinel identity."""
    def __init__(self, cause: str, context: ErrorContext | None = None):
        super().__init__(
            f"No identity could be resolved: {cause}",
            "IDENTITY_RESOLUTION_EXHAUSTED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.ERROR, context, 503,
        )


# ─── Payment Errors (collaborator) ──────────────────────────────

class PaymentNetworkError(SchoolPayError):
    """Payment request never produced a readable response."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Payment transport failure: {message}",
            "PAYMENT_NETWORK_FAILURE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )


class PaymentRejectedError(SchoolPayError):
    """Payment collaborator answered with a non-2xx status."""
    def __init__(self, status_code: int, context: ErrorContext | None = None):
        super().__init__(
            f"Payment rejected by remote (HTTP {status_code})",
            "PAYMENT_REMOTE_REJECTED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.status_code = status_code
