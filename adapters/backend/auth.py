"""
Email/password authentication against the backend identity API.

Session state is observable: listeners registered with
`on_auth_state_change` are told about every sign-in and sign-out, which is
what switches an app between its authenticated and unauthenticated flows.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from adapters.backend.client import AuthError, BackendClient
from adapters.backend.records import AdminProfile
from neowatch.services.results import logger

ADMIN_TABLE = "UserAdministrador"


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class AuthUser(BaseModel):
    id: str
    email: str | None = None
    phone: str | None = None
    user_metadata: dict = Field(default_factory=dict)


class Session(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    issued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    user: AuthUser

    @property
    def expires_at(self) -> datetime | None:
        if self.expires_in is None:
            return None
        return self.issued_at + timedelta(seconds=self.expires_in)

    def is_expired(self, now: datetime | None = None) -> bool:
        expires_at = self.expires_at
        return expires_at is not None and (now or datetime.now(UTC)) >= expires_at


AuthListener = Callable[[AuthEvent, Session | None], None]


class AuthService:
    """Sign-up, sign-in, sign-out and the current session."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client
        self._session: Session | None = None
        self._listeners: list[AuthListener] = []
        self.logger = logger.bind(component="auth_service")

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and not self._session.is_expired()

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Observe sign-in/sign-out. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_session(self, session: Session | None, event: AuthEvent) -> None:
        self._session = session
        self.client.set_access_token(session.access_token if session else None)
        self.logger.info(
            "auth_state_changed",
            auth_event=event.value,
            user_id=session.user.id if session else None,
        )
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                self.logger.exception("auth_listener_failed", error=str(e))

    async def sign_up(
        self, email: str, password: str, phone_number: str, full_name: str
    ) -> AuthUser:
        """
        Create the identity, then the linked account holder row.

        The password is never written to the data tables.
        """
        body = await self.client.auth_request(
            "POST",
            "signup",
            json={
                "email": email,
                "password": password,
                "data": {"full_name": full_name, "phone_number": phone_number},
            },
        )
        if not isinstance(body, dict):
            raise AuthError("Failed to create the user account")

        # Auto-confirmed projects return a session, others return the bare user
        user_data = body.get("user") or (body if body.get("id") else None)
        if not user_data:
            raise AuthError("Failed to create the user account")
        user = AuthUser.model_validate(user_data)
        if body.get("access_token"):
            self._set_session(Session.model_validate(body), AuthEvent.SIGNED_IN)

        profile = AdminProfile(id=user.id, email=user.email, username=full_name)
        try:
            await self.client.insert(ADMIN_TABLE, profile.to_payload())
        except Exception as e:
            self.logger.error("admin_profile_insert_failed", user_id=user.id, error=str(e))
            raise

        self.logger.info("user_signed_up", user_id=user.id)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        body = await self.client.auth_request(
            "POST",
            "token",
            params=[("grant_type", "password")],
            json={"email": email, "password": password},
        )
        session = Session.model_validate(body)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session.user

    async def sign_out(self) -> None:
        if self._session is None:
            return
        await self.client.auth_request("POST", "logout")
        self._set_session(None, AuthEvent.SIGNED_OUT)

    async def get_session(self) -> Session | None:
        return self._session if self.is_authenticated else None

    async def get_user(self) -> AuthUser:
        """Fetch the signed-in user from the identity API."""
        if self._session is None:
            raise AuthError("Not signed in", code="not_authenticated", status_code=401)
        body = await self.client.auth_request("GET", "user")
        return AuthUser.model_validate(body)

    async def current_user_id(self) -> str:
        return (await self.get_user()).id
