"""Validate the session guard, logout and role capabilities."""

from shop_console.models import Role
from shop_console.permissions import resolve_permissions
from shop_console.session import MemorySessionStore, Page, SessionGuard, dashboard_for, logout

from conftest import RecordingNavigator


class TestSessionGuard:
    """Single synchronous check on view entry."""

    def setup_method(self):
        self.navigator = RecordingNavigator()

    def test_state_before_check_is_loading(self):
        guard = SessionGuard(MemorySessionStore(), self.navigator)

        assert guard.state.is_loading
        assert guard.state.is_authenticated is None

    def test_shop_session_passes(self):
        state = SessionGuard(MemorySessionStore("tok", "SHOP"), self.navigator).check()

        assert state.is_authenticated
        assert not state.is_loading
        assert self.navigator.history == []

    def test_missing_token_redirects(self):
        state = SessionGuard(MemorySessionStore(None, "SHOP"), self.navigator).check()

        assert state.is_authenticated is False
        assert not state.is_loading
        assert self.navigator.page == Page.LOGIN

    def test_unknown_role_redirects(self):
        state = SessionGuard(MemorySessionStore("tok", "GUEST"), self.navigator).check()

        assert state.is_authenticated is False
        assert self.navigator.page == Page.LOGIN

    def test_admin_only_guard_rejects_shop_role(self):
        state = SessionGuard(MemorySessionStore("tok", "SHOP"), self.navigator, require_admin=True).check()

        assert state.is_authenticated is False
        assert self.navigator.page == Page.LOGIN

    def test_admin_only_guard_accepts_admin(self):
        state = SessionGuard(MemorySessionStore("tok", "ADMIN"), self.navigator, require_admin=True).check()

        assert state.is_authenticated


class TestSessionStore:
    def test_write_read_clear(self):
        store = MemorySessionStore()

        store.write("tok", Role.ADMIN)
        assert store.read().is_admin

        store.clear()
        assert not store.read().is_valid

    def test_logout_clears_and_redirects(self):
        store = MemorySessionStore("tok", "SHOP")
        navigator = RecordingNavigator()

        logout(store, navigator)

        assert store.read().token is None
        assert navigator.page == Page.LOGIN

    def test_dashboard_for_role(self):
        assert dashboard_for(MemorySessionStore("t", "ADMIN").read()) == Page.ADMIN_DASHBOARD
        assert dashboard_for(MemorySessionStore("t", "SHOP").read()) == Page.DASHBOARD
        assert dashboard_for(MemorySessionStore().read()) == Page.LOGIN


class TestPermissions:
    def test_admin_capabilities(self):
        perms = resolve_permissions(Role.ADMIN)

        assert perms.can_delete_any_shop
        assert perms.can_assign_owner
        assert perms.can_view_owner
        assert not perms.can_edit_product
        assert not perms.can_delete_product

    def test_shop_capabilities(self):
        perms = resolve_permissions(Role.SHOP)

        assert perms.can_edit_product
        assert perms.can_delete_product
        assert perms.can_create_shop
        assert not perms.can_delete_any_shop
        assert not perms.can_assign_owner

    def test_no_role_has_nothing(self):
        perms = resolve_permissions(None)

        assert not any(vars(perms).values())
