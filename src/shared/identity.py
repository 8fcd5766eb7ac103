"""Caller identity: a registered user or an anonymous guest session.

Callers resolve exactly one of the two per request. The ``kind`` literal is
the discriminator, so a payload can be parsed straight into the right variant
with ``IdentityAdapter.validate_python``.
"""

from typing import Annotated, Literal

from protean.exceptions import ValidationError
from pydantic import BaseModel, Field, TypeAdapter


class UserIdentity(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["user"] = "user"
    user_id: int = Field(gt=0)

    @property
    def owner(self) -> dict:
        return {"user_id": self.user_id}

    def __str__(self) -> str:
        return f"user:{self.user_id}"


class GuestIdentity(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["guest"] = "guest"
    session_token: str = Field(min_length=1, max_length=255)

    @property
    def owner(self) -> dict:
        return {"session_token": self.session_token}

    def __str__(self) -> str:
        return f"guest:{self.session_token[:8]}"


Identity = Annotated[UserIdentity | GuestIdentity, Field(discriminator="kind")]

IdentityAdapter: TypeAdapter[UserIdentity | GuestIdentity] = TypeAdapter(Identity)


def owns(identity: UserIdentity | GuestIdentity, user_id: int | None, session_token: str | None) -> bool:
    """True when a record stamped with ``user_id``/``session_token`` belongs to ``identity``."""
    match identity:
        case UserIdentity(user_id=uid):
            return user_id is not None and user_id == uid
        case GuestIdentity(session_token=token):
            return user_id is None and session_token == token
    return False


def identity_of(command) -> UserIdentity | GuestIdentity:
    """Resolve the caller of a command from its ``user_id``/``session_token`` pair."""
    user_id = getattr(command, "user_id", None)
    session_token = getattr(command, "session_token", None)
    if (user_id is None) == (not session_token):
        raise ValidationError({"owner": ["Exactly one of user_id or session_token is required"]})
    if user_id is not None:
        return UserIdentity(user_id=user_id)
    return GuestIdentity(session_token=session_token)
