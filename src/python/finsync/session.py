"""Session state machine: restore, login, register, logout and invalidation."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Mapping

from finsync.api import AuthResult, FinanceAPI
from finsync.events import InvalidationBus, InvalidationEvent
from finsync.exceptions import FinanceError, UnauthorizedError
from finsync.models import Session, SessionState, User, normalize_user
from finsync.normalizer import normalize_error
from finsync.persistence import PersistenceStore
from finsync.schema import (
    CREDENTIAL_KEYS,
    REMEMBER_ME_KEY,
    REMEMBER_ME_VALUE,
    TOKEN_KEY,
    USER_KEY,
)

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]

UNAUTHENTICATED = Session(
    user=None,
    token=None,
    authenticated=False,
    loading=False,
    state=SessionState.UNAUTHENTICATED,
)


class SessionManager:
    """Own the client session and the credentials held in the store.

    The manager is the only writer of the persistence store. Other components
    report a rejected token by publishing on the :class:`InvalidationBus`; every
    manager subscribed to that bus drops its session in response.

    States::

        INITIALIZING -> RESTORING -> AUTHENTICATED | DEGRADED_OFFLINE | UNAUTHENTICATED
        any state -> UNAUTHENTICATED   (logout, 401 on any request)

    ``DEGRADED_OFFLINE`` keeps the cached user and token so a caller may show
    stale data, but ``authenticated`` stays False until the user logs in again.
    """

    def __init__(
        self,
        api: FinanceAPI,
        store: PersistenceStore,
        bus: InvalidationBus,
    ) -> None:
        self.api = api
        self.store = store
        self.bus = bus
        self._lock = threading.RLock()
        self._session = Session()
        self._listeners: list[SessionListener] = []
        self._unsubscribe_bus = bus.subscribe(self._on_invalidated)

    # ---------------------------------------------------------------- state

    @property
    def session(self) -> Session:
        with self._lock:
            return self._session

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def user(self) -> User | None:
        return self.session.user

    @property
    def token(self) -> str | None:
        return self.session.token

    @property
    def authenticated(self) -> bool:
        return self.session.authenticated

    @property
    def loading(self) -> bool:
        return self.session.loading

    @property
    def remember_me(self) -> bool:
        return self.store.get(REMEMBER_ME_KEY) == REMEMBER_ME_VALUE

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` with the new :class:`Session` after every transition."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, session: Session) -> Session:
        with self._lock:
            previous = self._session.state
            self._session = session
            listeners = list(self._listeners)
        if previous != session.state:
            logger.info("Session %s -> %s", previous.value, session.state.value)
        for listener in listeners:
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener %r failed", listener)
        return session

    # --------------------------------------------------------------- storage

    def _persist(self, user: User, token: str | None = None) -> None:
        if token is not None:
            self.store.set(TOKEN_KEY, token)
        self.store.set(USER_KEY, json.dumps(user.to_payload()))

    def _clear_credentials(self) -> None:
        self.store.delete_many(CREDENTIAL_KEYS)

    def _read_cached_user(self, raw: str) -> User:
        """Parse the stored user; raises ValueError when it is unusable."""
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError("Stored user is not valid JSON") from exc
        if not isinstance(payload, Mapping):
            raise ValueError("Stored user is not an object")
        user = normalize_user(payload)
        if not user.id:
            raise ValueError("Stored user has no id")
        return user

    # ------------------------------------------------------------ operations

    def start(self) -> Session:
        """Restore the session from the store, verifying it with the backend.

        Never raises: every failure ends in a terminal state.
        """
        self._transition(Session(state=SessionState.INITIALIZING, loading=True))
        token = self.store.get(TOKEN_KEY)
        raw_user = self.store.get(USER_KEY)
        if not token or not raw_user:
            logger.debug("No stored credentials")
            return self._transition(UNAUTHENTICATED)

        try:
            cached_user = self._read_cached_user(raw_user)
        except ValueError as exc:
            logger.error("Discarding stored credentials: %s", exc)
            self._clear_credentials()
            return self._transition(UNAUTHENTICATED)

        self._transition(
            Session(user=cached_user, token=token, loading=True, state=SessionState.RESTORING)
        )
        try:
            fresh_user = self.api.get_profile(cached_user.id)
        except UnauthorizedError:
            # The invalidation broadcast has already cleared the store
            logger.info("Stored token rejected by the backend")
            with self._lock:
                if self._session.state != SessionState.UNAUTHENTICATED:
                    self._clear_credentials()
                    self._transition(UNAUTHENTICATED)
            return self.session
        except FinanceError as exc:
            logger.warning(
                "Backend unavailable (%s); using cached user until next login",
                exc.category.value,
            )
            with self._lock:
                if self._session.state != SessionState.RESTORING:
                    return self._session
                return self._transition(
                    Session(
                        user=cached_user,
                        token=token,
                        authenticated=False,
                        loading=False,
                        state=SessionState.DEGRADED_OFFLINE,
                    )
                )

        with self._lock:
            # Invalidated while the profile request was in flight
            if self._session.state != SessionState.RESTORING:
                return self._session
            self._persist(fresh_user)
            return self._transition(
                Session(
                    user=fresh_user,
                    token=token,
                    authenticated=True,
                    loading=False,
                    state=SessionState.AUTHENTICATED,
                )
            )

    def _authenticate(self, result: AuthResult, remember_me: bool | None = None) -> User:
        self._persist(result.user, result.token)
        if remember_me is not None:
            if remember_me:
                self.store.set(REMEMBER_ME_KEY, REMEMBER_ME_VALUE)
            else:
                self.store.delete(REMEMBER_ME_KEY)
        self._transition(
            Session(
                user=result.user,
                token=result.token,
                authenticated=True,
                loading=False,
                state=SessionState.AUTHENTICATED,
            )
        )
        return result.user

    def login(self, email: str, password: str, remember_me: bool = False) -> User:
        """Log in and persist the credentials.

        Raises:
            FinanceError: Normalized failure; the session is left unchanged.
                Wrong credentials surface as :class:`UnauthorizedError`.
        """
        try:
            result = self.api.login(email, password)
        except Exception as exc:
            error = normalize_error(exc)
            logger.error("Login failed: %s", error.message)
            raise error from exc
        logger.info("Logged in as user %s", result.user.id)
        return self._authenticate(result, remember_me)

    def register(
        self,
        email: str,
        password: str,
        name: str,
        age: int | None = None,
    ) -> User:
        """Create an account, then behave like a successful login.

        Raises:
            FinanceError: :class:`ConflictError` for an existing account,
                :class:`InvalidInputError` with field details for bad input.
        """
        try:
            result = self.api.register(email, password, name, age)
        except Exception as exc:
            error = normalize_error(exc)
            logger.error("Registration failed: %s", error.message)
            raise error from exc
        logger.info("Registered user %s", result.user.id)
        return self._authenticate(result)

    def logout(self) -> Session:
        """Drop the session locally; no network access."""
        self._clear_credentials()
        logger.info("Logged out")
        return self._transition(UNAUTHENTICATED)

    def update_profile(self, changes: Mapping[str, Any]) -> User | None:
        """Send profile changes for the authenticated user.

        Returns None without network access unless the session is authenticated.
        """
        session = self.session
        if not session.authenticated or session.user is None:
            logger.debug("Profile update ignored: session is %s", session.state.value)
            return None
        try:
            updated = self.api.update_profile(session.user.id, changes)
        except Exception as exc:
            error = normalize_error(exc)
            logger.error("Profile update failed: %s", error.message)
            raise error from exc

        with self._lock:
            current = self._session
            if not current.authenticated:
                logger.debug("Discarding profile update: session ended meanwhile")
                return None
            self._persist(updated)
            self._transition(
                Session(
                    user=updated,
                    token=current.token,
                    authenticated=True,
                    loading=False,
                    state=SessionState.AUTHENTICATED,
                )
            )
        return updated

    def _on_invalidated(self, event: InvalidationEvent) -> None:
        with self._lock:
            self._clear_credentials()
            self._transition(UNAUTHENTICATED)

    def close(self) -> None:
        """Stop listening for invalidation events."""
        self._unsubscribe_bus()
