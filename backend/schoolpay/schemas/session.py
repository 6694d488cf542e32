"""Session Schemas — current identity as shown in the site header."""

from pydantic import BaseModel

from schoolpay.core.domain_types import BootstrapPhase, IdentityOrigin
from schoolpay.core.identity import SessionSnapshot


class IdentityResponse(BaseModel):
    id: str
    origin: IdentityOrigin


class SessionResponse(BaseModel):
    phase: BootstrapPhase
    ready: bool
    identity: IdentityResponse | None = None
    app_id: str
    error: dict | None = None

    @classmethod
    def from_snapshot(
        cls, snapshot: SessionSnapshot, app_id: str, error: dict | None = None,
    ) -> "SessionResponse":
        identity = snapshot.identity
        return cls(
            phase=snapshot.phase,
            ready=snapshot.phase.is_terminal,
            identity=(
                IdentityResponse(id=identity.id, origin=identity.origin)
                if identity else None
            ),
            app_id=app_id,
            error=error,
        )
