"""Client-side session lifecycle: who is signed in and with which token."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from .api import TaskTrackerAPI
from .errors import AuthError, ClientError
from .forms import LoginForm, RegisterForm, validate_form
from .models import AuthResult, UserInfo
from .notifications import Notifier
from .token_store import MemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"


SessionListener = Callable[["SessionContext"], None]


class SessionContext:
    """Owns the identity and bearer token shared by every client component.

    Transitions run ``anonymous -> restoring -> authenticated -> anonymous``;
    listeners are called after every transition so dependent state (the
    task store) can follow the identity.
    """

    def __init__(
        self,
        api: TaskTrackerAPI,
        *,
        token_store: TokenStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._api = api
        self._token_store = token_store or MemoryTokenStore()
        self._notifier = notifier or Notifier()
        self._state = SessionState.ANONYMOUS
        self._user: UserInfo | None = None
        self._token: str | None = None
        self._listeners: list[SessionListener] = []

    @property
    def api(self) -> TaskTrackerAPI:
        return self._api

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> UserInfo | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def require_token(self) -> str:
        """Return the bearer token, or raise ``AuthError`` unless authenticated."""
        if self._state is not SessionState.AUTHENTICATED or not self._token:
            raise AuthError("Not signed in.")
        return self._token

    def _transition(self, state: SessionState, *, user: UserInfo | None, token: str | None) -> None:
        previous = self._state
        self._state = state
        self._user = user
        self._token = token
        logger.info(
            "Session state changed",
            extra={"from_state": previous.value, "to_state": state.value},
        )
        for listener in list(self._listeners):
            listener(self)

    def _accept(self, result: AuthResult) -> None:
        self._token_store.save(result.token)
        self._transition(SessionState.AUTHENTICATED, user=result.user, token=result.token)

    async def restore(self) -> bool:
        """Confirm a persisted token with the server.

        An expired or rejected token is dropped silently. When the server
        cannot be reached the token is kept for a later attempt. An answer
        that arrives after a login, registration or logout is ignored.
        """
        token = self._token_store.load()
        if not token:
            return False

        self._transition(SessionState.RESTORING, user=None, token=None)
        try:
            user = await self._api.me(token)
        except AuthError:
            if self._superseded(token):
                return False
            logger.info("Persisted token rejected; starting anonymous")
            self._token_store.clear()
            self._transition(SessionState.ANONYMOUS, user=None, token=None)
            return False
        except ClientError as exc:
            if self._superseded(token):
                return False
            self._transition(SessionState.ANONYMOUS, user=None, token=None)
            self._notifier.error(exc.message)
            return False

        if self._superseded(token):
            return False
        self._transition(SessionState.AUTHENTICATED, user=user, token=token)
        return True

    def _superseded(self, token: str) -> bool:
        if self._state is SessionState.RESTORING and self._token_store.load() == token:
            return False
        logger.debug("Ignoring stale session restore result")
        return True

    async def login(self, email: str, password: str) -> UserInfo:
        try:
            form = validate_form(LoginForm, email=email, password=password)
            result = await self._api.login(email=form.email, password=form.password)
        except ClientError as exc:
            self._notifier.error(exc.message)
            raise
        self._accept(result)
        self._notifier.success("Welcome back!")
        return result.user

    async def register(self, name: str, email: str, password: str) -> UserInfo:
        try:
            form = validate_form(RegisterForm, name=name, email=email, password=password)
            result = await self._api.register(name=form.name, email=form.email, password=form.password)
        except ClientError as exc:
            self._notifier.error(exc.message)
            raise
        self._accept(result)
        self._notifier.success("Account created!")
        return result.user

    async def update_profile(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> UserInfo:
        token = self.require_token()
        try:
            user = await self._api.update_profile(token, name=name, email=email, password=password)
        except AuthError as exc:
            self._notifier.error(exc.message)
            self.invalidate()
            raise
        except ClientError as exc:
            self._notifier.error(exc.message)
            raise
        self._transition(SessionState.AUTHENTICATED, user=user, token=token)
        self._notifier.success("Profile updated")
        return user

    def logout(self) -> None:
        """Forget the identity locally; there is no server call."""
        self._token_store.clear()
        self._transition(SessionState.ANONYMOUS, user=None, token=None)

    def invalidate(self) -> None:
        """Drop a session whose token the server no longer accepts."""
        if self._state is SessionState.ANONYMOUS and self._token is None:
            return
        logger.warning("Session invalidated after the server rejected the token")
        self._token_store.clear()
        self._transition(SessionState.ANONYMOUS, user=None, token=None)


__all__ = ["SessionContext", "SessionListener", "SessionState"]
