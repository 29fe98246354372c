from __future__ import annotations

from dataclasses import dataclass

from app.core.errors import AuthenticationRequired

ANONYMOUS_NAME = "Anonymous"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, passed explicitly into every service call."""

    user_id: str
    display_name: str | None = None
    is_guest: bool = False

    @property
    def name(self) -> str:
        return self.display_name or ANONYMOUS_NAME


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise AuthenticationRequired()
    return identity
