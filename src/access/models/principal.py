"""Principal model: the authenticated user record guards read."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt, StrictStr


class Principal(BaseModel):
    """Authenticated marketplace user, as handed over by the auth layer.

    Read-only to this library. ``role_id`` is the opaque id the registry
    resolves; it may be missing or unknown, which resolves to GUEST.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, description="Stable user identifier")
    # strict: bool and float must not coerce onto a real role id
    role_id: StrictInt | StrictStr | None = Field(None, description="Opaque role id")
    email: EmailStr | None = None
    display_name: str | None = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> Principal:
        """Create a Principal from a user payload or token claims.

        Accepts the camelCase keys the web client uses (``roleId``, ``id``)
        as well as snake_case and ``sub``.
        """
        user_id = claims.get("user_id") or claims.get("id") or claims.get("sub")
        role_id = claims.get("role_id", claims.get("roleId"))
        return cls(
            user_id=str(user_id) if user_id is not None else "",
            role_id=role_id,
            email=claims.get("email"),
            display_name=claims.get("display_name") or claims.get("name"),
        )
