"""
Client-held session state and page navigation.

The session is the (token, role) pair issued at login. It is read on every
API request and cleared on logout or on any 401. Storage sits behind
SessionStore so views and the API client can be handed an in-memory store
in tests and the Streamlit-backed one in the app.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol

import streamlit as st
import structlog

from shop_console.models import Role

logger = structlog.get_logger(__name__)

TOKEN_KEY = "token"
ROLE_KEY = "role"


@dataclass(frozen=True)
class Session:
    token: Optional[str] = None
    role: Optional[Role] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.token) and self.role is not None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class SessionStore(Protocol):
    def read(self) -> Session: ...

    def write(self, token: str, role: Role) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStore:
    """Session store backed by a plain dict."""

    def __init__(self, token: Optional[str] = None, role: Optional[str] = None):
        self._data: Dict[str, Optional[str]] = {TOKEN_KEY: token, ROLE_KEY: role}

    def read(self) -> Session:
        return Session(self._data.get(TOKEN_KEY), Role.parse(self._data.get(ROLE_KEY)))

    def write(self, token: str, role: Role) -> None:
        self._data[TOKEN_KEY] = token
        self._data[ROLE_KEY] = Role(role).value

    def clear(self) -> None:
        self._data[TOKEN_KEY] = None
        self._data[ROLE_KEY] = None


class StreamlitSessionStore:
    """Session store kept in st.session_state under the keys token and role."""

    def read(self) -> Session:
        return Session(st.session_state.get(TOKEN_KEY), Role.parse(st.session_state.get(ROLE_KEY)))

    def write(self, token: str, role: Role) -> None:
        st.session_state[TOKEN_KEY] = token
        st.session_state[ROLE_KEY] = Role(role).value

    def clear(self) -> None:
        st.session_state.pop(TOKEN_KEY, None)
        st.session_state.pop(ROLE_KEY, None)


class Page(str, Enum):
    HOME = "home"
    LOGIN = "login"
    DASHBOARD = "dashboard"
    ADMIN_DASHBOARD = "admin_dashboard"
    SHOP_DETAIL = "shop_detail"
    REGISTER_SHOP = "register_shop"
    DELETE_SHOPS = "delete_shops"
    ADMIN_DELETE_SHOPS = "admin_delete_shops"


class Navigator(Protocol):
    def go(self, page: Page, **params: Any) -> None: ...


class StreamlitNavigator:
    """Records the target page in session state; the app reruns on change."""

    PAGE_KEY = "page"
    PARAMS_KEY = "page_params"

    @property
    def page(self) -> Page:
        return Page(st.session_state.get(self.PAGE_KEY, Page.HOME.value))

    @property
    def params(self) -> Dict[str, Any]:
        return st.session_state.get(self.PARAMS_KEY, {})

    def go(self, page: Page, **params: Any) -> None:
        st.session_state[self.PAGE_KEY] = Page(page).value
        st.session_state[self.PARAMS_KEY] = params


def dashboard_for(session: Session) -> Page:
    """Landing page for a session's role."""
    if session.role is Role.ADMIN:
        return Page.ADMIN_DASHBOARD
    if session.role is Role.SHOP:
        return Page.DASHBOARD
    return Page.LOGIN


@dataclass
class AuthState:
    is_authenticated: Optional[bool] = None
    is_loading: bool = True
    session: Session = field(default_factory=Session)


class SessionGuard:
    """
    Single synchronous session check run when a protected view is entered.

    Unauthenticated sessions (no token, or a role outside ADMIN/SHOP) and,
    when require_admin is set, non-admin sessions are sent to the login page.
    """

    def __init__(self, store: SessionStore, navigator: Navigator, require_admin: bool = False):
        self.store = store
        self.navigator = navigator
        self.require_admin = require_admin
        self.state = AuthState()

    def check(self) -> AuthState:
        session = self.store.read()
        allowed = session.is_valid and (session.is_admin or not self.require_admin)
        self.state = AuthState(is_authenticated=allowed, is_loading=False, session=session)
        if not allowed:
            logger.info("Redirecting to login", require_admin=self.require_admin, has_token=bool(session.token))
            self.navigator.go(Page.LOGIN)
        return self.state


def logout(store: SessionStore, navigator: Navigator) -> None:
    store.clear()
    navigator.go(Page.LOGIN)
