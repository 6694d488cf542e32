"""Error Hierarchy — envelopes, categories and the fallback taxonomy."""

from schoolpay.core.errors import (
    ConfigurationAbsentError,
    CredentialExchangeFailedError,
    CredentialProviderError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    IdentityResolutionExhaustedError,
    PaymentRejectedError,
    SchoolPayError,
    TransactionInProgressError,
)


def test_to_response_envelope():
    err = TransactionInProgressError(
        ErrorContext(transaction_state="processing", requester_id="anon-1"),
    )
    body = err.to_response()["error"]
    assert body["code"] == "TRANSACTION_IN_PROGRESS"
    assert body["message"] == "Transaction already in progress"
    assert body["category"] == "conflict"
    assert body["context"]["transaction_state"] == "processing"
    assert body["context"]["requester_id"] == "anon-1"
    assert err.http_status == 409


def test_sse_event_prefers_user_message():
    err = PaymentRejectedError(503, ErrorContext(user_message="Payment failed."))
    event = err.to_sse_event()
    assert event["type"] == "error"
    assert event["data"]["message"] == "Payment failed."
    assert event["data"]["recoverable"] is False


def test_fallback_errors_are_recoverable():
    assert ConfigurationAbsentError("apiKey").to_sse_event()["data"]["recoverable"]
    assert CredentialExchangeFailedError("INVALID_CUSTOM_TOKEN").severity is ErrorSeverity.WARNING


def test_exchange_failure_is_a_provider_error():
    err = CredentialExchangeFailedError("TOKEN_EXPIRED")
    assert isinstance(err, CredentialProviderError)
    assert isinstance(err, SchoolPayError)
    assert err.code == "CREDENTIAL_EXCHANGE_FAILED"
    assert "TOKEN_EXPIRED" in err.message


def test_exhausted_identity_is_authentication_error():
    err = IdentityResolutionExhaustedError("signUp: OPERATION_NOT_ALLOWED")
    assert err.category is ErrorCategory.AUTHENTICATION
    assert "OPERATION_NOT_ALLOWED" in err.message
