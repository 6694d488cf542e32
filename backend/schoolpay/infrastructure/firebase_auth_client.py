"""Firebase Auth Client — CredentialProvider over the Identity Toolkit REST API.

Invariants:
    - Constructed only with an API key; without one raises ConfigurationAbsentError
    - Signed-in principal is held in process memory only; resolve_existing() returns it
    - Listeners are notified synchronously after every successful sign-in
    - httpx errors never escape: token exchange -> CredentialExchangeFailedError,
      everything else -> CredentialProviderError

Design Decisions:
    - Custom-token sign-in does not return the uid, so it is followed by accounts:lookup
    - No retry here: the bootstrapper's fallback chain is the recovery policy
    - Provider error message (e.g. INVALID_CUSTOM_TOKEN) kept in the exception text
      for logs, never shown to users
"""

import logging
from collections.abc import Callable

import httpx

from schoolpay.core.collaborator_protocols import IdentityListener
from schoolpay.core.errors import (
    ConfigurationAbsentError,
    CredentialExchangeFailedError,
    CredentialProviderError,
)
from schoolpay.core.identity import Principal

logger = logging.getLogger(__name__)


def _provider_message(response: httpx.Response) -> str:
    """Extract error.message from an Identity Toolkit error body."""
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP {response.status_code}"


class FirebaseAuthClient:
    """Signs the process in against Firebase Auth and reports identity changes."""

    DEFAULT_BASE_URL = "https://identitytoolkit.googleapis.com/v1"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ConfigurationAbsentError("firebase_config.apiKey")
        self._api_key = api_key
        self.client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds, transport=transport,
        )
        self._current: Principal | None = None
        self._listeners: list[IdentityListener] = []

    @property
    def current_principal(self) -> Principal | None:
        return self._current

    def on_identity_change(
        self, listener: IdentityListener,
    ) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def resolve_existing(self) -> Principal | None:
        return self._current

    async def exchange_token(self, token: str) -> Principal:
        try:
            data = await self._post(
                "/accounts:signInWithCustomToken",
                {"token": token, "returnSecureToken": True},
            )
            id_token = data["idToken"]
            lookup = await self._post("/accounts:lookup", {"idToken": id_token})
            uid = lookup["users"][0]["localId"]
        except CredentialProviderError as e:
            raise CredentialExchangeFailedError(e.message) from e
        except (KeyError, IndexError, TypeError) as e:
            raise CredentialExchangeFailedError(
                f"malformed sign-in response ({e!r})",
            ) from e
        return self._signed_in(Principal(uid=uid, id_token=id_token))

    async def resolve_anonymous(self) -> Principal:
        data = await self._post("/accounts:signUp", {"returnSecureToken": True})
        try:
            principal = Principal(uid=data["localId"], id_token=data.get("idToken"))
        except (KeyError, TypeError) as e:
            raise CredentialProviderError(
                f"malformed sign-up response ({e!r})", "anonymous sign-in",
            ) from e
        return self._signed_in(principal)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _post(self, path: str, payload: dict) -> dict:
        operation = path.lstrip("/")
        try:
            response = await self.client.post(
                path, params={"key": self._api_key}, json=payload,
            )
        except httpx.HTTPError as e:
            raise CredentialProviderError(
                f"{type(e).__name__}: {e}", operation,
            ) from e
        if not response.is_success:
            raise CredentialProviderError(_provider_message(response), operation)
        try:
            return response.json()
        except ValueError as e:
            raise CredentialProviderError("response is not JSON", operation) from e

    def _signed_in(self, principal: Principal) -> Principal:
        self._current = principal
        logger.info("Firebase sign-in succeeded", extra={"requester_id": principal.uid})
        for listener in list(self._listeners):
            try:
                listener(principal)
            except Exception as e:
                logger.error(f"Identity listener failed: {e}", exc_info=True)
        return principal
