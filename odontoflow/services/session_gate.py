"""
Session gate: nothing touches patient records until a user is signed in.

The identity provider is the backend's /auth API, reached through AuthApiClient.
Any object with the same methods (get_current_session, subscribe, sign_up,
sign_in, refresh, sign_out) can stand in for it.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import httpx

from ..core.config import settings

logger = logging.getLogger(__name__)

AUTH_PATH = "/api/v1/auth"

SessionListener = Callable[[Optional["Session"]], None]


class AuthenticationError(Exception):
    """Sign-up, sign-in or sign-out was rejected; message is shown to the user."""


class SessionRequiredError(Exception):
    """A record operation was attempted without a signed-in session."""


class SessionStatus(str, Enum):
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str
    access_token: str
    refresh_token: str


def _detail(resp: httpx.Response, fallback: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return fallback


class AuthApiClient:
    """Identity provider backed by the /auth endpoints."""

    def __init__(self, base_url: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        self.base_url = (base_url or settings.RECORD_STORE_URL or "").rstrip("/")
        self._client = http_client
        self._session: Optional[Session] = None
        self._listeners: List[SessionListener] = []

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=settings.RECORD_STORE_TIMEOUT)
        return self._client

    def _post(self, path: str, fallback: str, **kwargs) -> httpx.Response:
        try:
            resp = self._http().post(f"{AUTH_PATH}{path}", **kwargs)
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Could not reach the identity provider: {exc}") from exc
        if resp.is_error:
            raise AuthenticationError(_detail(resp, fallback))
        return resp

    def get_current_session(self) -> Optional[Session]:
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call listener on every session change; returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_session(self, session: Optional[Session]) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def sign_up(self, email: str, password: str) -> str:
        self._post("/signup", "Sign-up failed", json={"email": email, "password": password})
        return "Account created. You can now sign in."

    def sign_in(self, email: str, password: str) -> Session:
        resp = self._post("/login", "Sign-in failed", json={"email": email, "password": password})
        tokens = resp.json()
        try:
            me = self._http().get(
                f"{AUTH_PATH}/me",
                headers={"Authorization": f"Bearer {tokens['access_token']}"},
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Could not reach the identity provider: {exc}") from exc
        if me.is_error:
            raise AuthenticationError(_detail(me, "Sign-in failed"))
        profile = me.json()

        session = Session(
            user_id=profile["id"],
            email=profile["email"],
            access_token=tokens["access_token"],
            refresh_token=tokens["refresh_token"],
        )
        self._set_session(session)
        return session

    def refresh(self) -> Session:
        if self._session is None:
            raise AuthenticationError("No session to refresh")
        resp = self._post(
            "/refresh", "Session refresh failed",
            json={"refresh_token": self._session.refresh_token},
        )
        tokens = resp.json()
        session = Session(
            user_id=self._session.user_id,
            email=self._session.email,
            access_token=tokens["access_token"],
            refresh_token=tokens["refresh_token"],
        )
        self._set_session(session)
        return session

    def sign_out(self) -> None:
        """End the session locally even when the server cannot revoke it."""
        if self._session is None:
            return
        try:
            self._post(
                "/logout", "Sign-out failed",
                headers={"Authorization": f"Bearer {self._session.access_token}"},
            )
        except AuthenticationError as exc:
            logger.warning("Server-side sign-out failed, clearing local session: %s", exc)
        finally:
            self._set_session(None)


class SessionGate:
    """Tracks whether a user is signed in and notifies on transitions."""

    def __init__(self, provider):
        self.provider = provider
        self.session: Optional[Session] = None
        self._authenticated_listeners: List[Callable[[Session], None]] = []
        self._signed_out_listeners: List[Callable[[], None]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def status(self) -> SessionStatus:
        if self.session is None:
            return SessionStatus.UNAUTHENTICATED
        return SessionStatus.AUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED

    def on_authenticated(self, listener: Callable[[Session], None]) -> None:
        self._authenticated_listeners.append(listener)

    def on_signed_out(self, listener: Callable[[], None]) -> None:
        self._signed_out_listeners.append(listener)

    def start(self) -> SessionStatus:
        """Read the provider's current session once, then follow its changes."""
        self._unsubscribe = self.provider.subscribe(self._handle_change)
        self._handle_change(self.provider.get_current_session())
        return self.status

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_change(self, session: Optional[Session]) -> None:
        was_authenticated = self.is_authenticated
        self.session = session
        if session is not None and not was_authenticated:
            logger.info("Session started for %s", session.email)
            for listener in list(self._authenticated_listeners):
                listener(session)
        elif session is None and was_authenticated:
            logger.info("Session ended")
            for listener in list(self._signed_out_listeners):
                listener()

    def require_session(self) -> Session:
        if self.session is None:
            raise SessionRequiredError("Sign in to access patient records")
        return self.session

    def access_token(self) -> Optional[str]:
        return self.session.access_token if self.session else None

    def refresh(self) -> Optional[str]:
        """
        Renew the access token after the store rejected it.

        Returns the new token, or None once the session is gone. A refused
        refresh signs the user out.
        """
        if self.session is None:
            return None
        try:
            session = self.provider.refresh()
        except AuthenticationError as exc:
            logger.warning("Session refresh failed, signing out: %s", exc)
            self.sign_out()
            return None
        return session.access_token

    def sign_up(self, email: str, password: str) -> str:
        return self.provider.sign_up(email, password)

    def sign_in(self, email: str, password: str) -> None:
        self.provider.sign_in(email, password)

    def sign_out(self) -> None:
        self.provider.sign_out()
