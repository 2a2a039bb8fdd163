# app.py
"""
Streamlit admin console for the shop inventory API.
Features:
- Login against the backend (bearer token + role kept in session state)
- Shop owner dashboard: my shops, shop details, product add/edit/delete
- Shop detail: product search, multi-select bulk delete with confirmation
- Shop registration with automatic location capture (admins may assign an owner)
- Remove shops: select, review, confirm (owner and admin variants)
- Admin dashboard: all shops with product counts, search by shop or product
Any 401 from the API clears the session and returns to the login page.
All interactive widgets have unique keys to avoid duplicate-element errors.
Run with: streamlit run app.py
"""

from typing import Callable, List, Optional

import streamlit as st
from streamlit.runtime.scriptrunner import add_script_run_ctx, get_script_run_ctx

from shop_console.api import ShopApiClient
from shop_console.config import get_settings
from shop_console.deletion import DeleteFlow
from shop_console.formatting import (
    DELIVERY_LABELS,
    delivery_label,
    describe_product,
    describe_shop,
    format_coordinate,
    format_price,
    found_message,
    or_dash,
    pluralize,
)
from shop_console.forms import ProductForm
from shop_console.geolocation import IpLocationProvider
from shop_console.logging import get_logger, setup_logging
from shop_console.models import DeliveryOption, Product, Shop
from shop_console.session import Page, StreamlitNavigator, StreamlitSessionStore
from shop_console.views import (
    AdminDashboardView,
    DeleteShopsView,
    LoginView,
    OwnerDashboardView,
    RegisterShopView,
    ShopDetailView,
    route_home,
)

# --------------------------
# Configuration
# --------------------------
settings = get_settings()


@st.cache_resource
def init_logging() -> bool:
    setup_logging(debug=settings.debug, rich_output=not settings.log_json)
    return True


init_logging()
logger = get_logger("app")

st.set_page_config(page_title="Shop Inventory Console", page_icon="🏪", layout="wide")

# small CSS
st.markdown("""
<style>
.card { background: #fff; border-radius:12px; padding:12px; box-shadow:0 6px 18px rgba(0,0,0,0.06); margin-bottom:12px; }
.badge { display:inline-block; background:#e7f1ff; color:#0056b3; border-radius:12px; padding:2px 10px; font-size:13px; }
.target { background:#fff3cd; border:1px solid #ffc107; border-radius:4px; padding:10px; margin-bottom:8px; }
.muted { color: #6b7280; }
</style>
""", unsafe_allow_html=True)

store = StreamlitSessionStore()
navigator = StreamlitNavigator()

# session defaults
if "client" not in st.session_state:
    st.session_state.client = ShopApiClient(settings.api_url, store, navigator)
if "view" not in st.session_state: st.session_state.view = None
if "view_key" not in st.session_state: st.session_state.view_key = None

client: ShopApiClient = st.session_state.client


# helpers for UI
def rerun_if_moved(before) -> None:
    if (navigator.page, navigator.params) != before:
        st.rerun()


def run(action: Callable, *args) -> None:
    """Run a view action from a button, then redraw with the new state."""
    action(*args)
    st.rerun()


def worker_init() -> Callable[[], None]:
    # fan-out threads need the script context to reach session state on a 401
    ctx = get_script_run_ctx()
    return lambda: add_script_run_ctx(ctx=ctx)


def show_error(message: Optional[str]) -> None:
    if message:
        st.error(message)


def sync_checkboxes(flow: DeleteFlow, items, prefix: str) -> None:
    for item in items:
        st.session_state[f"{prefix}_{item.id}"] = flow.is_selected(item.id)


def search_box(label: str, key: str, on_query: Callable[[str], None], count: Callable[[], int], noun: str) -> str:
    query = st.text_input(label, key=key, placeholder=label)
    on_query(query)
    if query:
        st.caption(found_message(count(), noun))
    return query


# --- Presentational pieces ---
def shop_details(shop: Shop, show_owner: bool = False):
    if show_owner:
        st.markdown(f"**Owner ID:** {shop.owner_id}")
    st.markdown(f"**Address:** {shop.address}")
    st.markdown(f"**Phone:** {shop.phone}")
    st.markdown(f"**Open Hours:** {shop.open_hours}")
    st.markdown(f"**Delivery Option:** {delivery_label(shop.delivery_option)}")
    st.markdown(f"**Location:** Lat {format_coordinate(shop.latitude)}, Lng {format_coordinate(shop.longitude)}")


def shop_card(shop: Shop, product_count: int, featured: List[str], on_open: Callable[[int], None]):
    st.markdown("<div class='card'>", unsafe_allow_html=True)
    st.subheader(shop.name)
    st.write(f"📍 {shop.address}")
    st.write(f"📞 {shop.phone}")
    st.write(f"🕒 {shop.open_hours}")
    st.markdown(f"<span class='badge'>{delivery_label(shop.delivery_option, short=True)}</span>",
                unsafe_allow_html=True)
    st.divider()
    st.markdown(f"**{pluralize(product_count, 'Product')}**")
    if featured:
        st.caption("Featured:")
        for name in featured:
            st.write(f"• {name}")
    else:
        st.caption("No products yet")
    if st.button("View Details →", key=f"card_open_{shop.id}"):
        run(on_open, shop.id)
    st.markdown("</div>", unsafe_allow_html=True)


def product_row(product: Product):
    return [product.name, or_dash(product.description), format_price(product.price),
            str(product.stock), or_dash(product.category)]


def product_table(products: List[Product], key: str, flow: Optional[DeleteFlow] = None,
                  on_edit: Optional[Callable[[Product], None]] = None,
                  on_delete: Optional[Callable[[Product], None]] = None):
    headers = ["Name", "Description", "Price", "Stock", "Category"]
    widths = [3, 4, 1, 1, 2]
    if flow is not None:
        headers, widths = [""] + headers, [0.5] + widths
        sync_checkboxes(flow, products, f"{key}_sel")
    actions = on_edit is not None or on_delete is not None
    if actions:
        headers, widths = headers + ["Actions"], widths + [2]

    cols = st.columns(widths)
    for col, title in zip(cols, headers):
        col.markdown(f"**{title}**")
    for p in products:
        cols = st.columns(widths)
        offset = 0
        if flow is not None:
            cols[0].checkbox("Select", key=f"{key}_sel_{p.id}", label_visibility="collapsed",
                             on_change=flow.toggle, args=(p.id,))
            offset = 1
        for col, value in zip(cols[offset:], product_row(p)):
            col.write(value)
        if actions:
            with cols[-1]:
                if on_edit and st.button("Edit", key=f"{key}_edit_{p.id}"):
                    run(on_edit, p)
                if on_delete and st.button("Delete", key=f"{key}_del_{p.id}"):
                    run(on_delete, p)


def product_form_ui(form: ProductForm, prefix: str, on_cancel: Callable[[], None]):
    # one key set per form instance so a new form never shows stale input
    key = f"{prefix}_{id(form)}"
    st.markdown("<div class='card'>", unsafe_allow_html=True)
    st.subheader(form.title)
    show_error(form.error)
    with st.form(key=f"{key}_form"):
        name = st.text_input("Product Name *", value=form.name, key=f"{key}_name")
        desc = st.text_area("Description", value=form.description, key=f"{key}_desc")
        c1, c2 = st.columns(2)
        with c1:
            price = st.text_input("Price *", value=str(form.price), key=f"{key}_price")
        with c2:
            stock = st.text_input("Stock *", value=str(form.stock), key=f"{key}_stock")
        category = st.text_input("Category", value=form.category, key=f"{key}_cat")
        submitted = st.form_submit_button(form.submit_label, disabled=form.submitting)
    if submitted:
        form.set_values(name, desc, price, stock, category)
        form.submit(client)
        st.rerun()
    if st.button("Cancel", key=f"{key}_cancel"):
        run(on_cancel)
    st.markdown("</div>", unsafe_allow_html=True)


def confirmation_ui(flow: DeleteFlow, noun: str, describe: Callable, extra: str = ""):
    st.title("Confirm Deletion")
    show_error(flow.error)
    st.subheader(f"Are you sure you want to delete these {noun}s?")
    st.write(f"The following {len(flow.targets)} {noun}(s) will be permanently deleted. {extra}"
             "This action cannot be undone.")
    for item in flow.targets:
        st.markdown(f"<div class='target'>{describe(item)}</div>", unsafe_allow_html=True)
    c1, c2 = st.columns(2)
    with c1:
        label = "Deleting..." if flow.deleting else f"Yes, Delete These {noun.title()}s"
        if st.button(label, key=f"confirm_{noun}_delete", type="primary", disabled=flow.deleting):
            return True
    with c2:
        if st.button("No, Go Back", key=f"cancel_{noun}_delete", disabled=flow.deleting):
            run(flow.cancel)
    return False


# --- Login ---
def login_page(view: LoginView):
    st.title("🏪 Shop Inventory Console")
    st.write("Sign in to manage your shops and products.")
    show_error(view.error)
    with st.form(key="login_form"):
        username = st.text_input("Username", key="login_user_key")
        password = st.text_input("Password", type="password", key="login_pass_key")
        submitted = st.form_submit_button("Logging in..." if view.loading else "Login")
    if submitted:
        view.submit(username, password)
        st.rerun()


# --- Owner dashboard ---
def dashboard_page(view: OwnerDashboardView):
    if view.shops.is_loading:
        st.info("Loading shops...")
        return
    if view.product_delete.is_confirming:
        if confirmation_ui(view.product_delete, "product", describe_product):
            run(view.confirm_product_delete)
        return

    top_left, top_right = st.columns([4, 1])
    with top_left:
        st.title("Dashboard")
    with top_right:
        if st.button("Logout", key="dash_logout_btn"):
            run(view.logout)

    if view.shops.is_loaded and not view.shops.data:
        st.header("No Shops Found")
        st.write("You need to register a shop first.")
        if st.button("Register Shop", key="dash_register_empty_btn"):
            run(view.go_register_shop)
        return

    show_error(view.error)
    st.header("My Shops")
    cols = st.columns(len(view.shops.data) + 3)
    for i, shop in enumerate(view.shops.data):
        selected = view.selected_shop is not None and view.selected_shop.id == shop.id
        if cols[i].button(shop.name, key=f"dash_shop_{shop.id}", type="primary" if selected else "secondary"):
            run(view.select_shop, shop)
    if cols[-3].button("+ Add Shop", key="dash_add_shop_btn"):
        run(view.go_register_shop)
    if cols[-2].button("Remove Shop", key="dash_remove_shop_btn"):
        run(view.go_delete_shops)
    if view.selected_shop and cols[-1].button("Open Shop", key="dash_open_shop_btn"):
        run(view.open_shop, view.selected_shop.id)

    if not view.selected_shop:
        return
    st.subheader("Shop Details")
    st.markdown(f"**Name:** {view.selected_shop.name}")
    shop_details(view.selected_shop)

    st.divider()
    c1, c2 = st.columns([4, 1])
    with c1:
        st.header("Products")
    with c2:
        if st.button("+ Add Product", key="dash_add_product_btn"):
            run(view.open_add_form)
    if view.form:
        product_form_ui(view.form, "dash_product", view.close_form)
    if not view.products.data:
        st.info("No products found. Add your first product!")
        return
    product_table(view.products.data, "dash_products",
                  on_edit=view.open_edit_form, on_delete=view.request_product_delete)


# --- Shop detail ---
def shop_detail_page(view: ShopDetailView):
    if view.shop_id is not None and view.shop_state.is_loading:
        st.info("Loading shop details...")
        return
    shop = view.shop
    if shop is None:
        st.header("Shop Not Found")
        if st.button("Back to Dashboard", key="detail_back_missing_btn"):
            run(view.back_to_dashboard)
        return

    if view.product_delete.is_confirming:
        if confirmation_ui(view.product_delete, "product", describe_product):
            run(view.confirm_delete)
        return

    top_left, top_right = st.columns([4, 1])
    with top_left:
        st.title(shop.name)
    with top_right:
        if st.button("Back to Dashboard", key="detail_back_btn"):
            run(view.back_to_dashboard)

    show_error(view.error)
    st.header("Shop Information")
    shop_details(shop, show_owner=view.permissions.can_view_owner)

    st.divider()
    can_edit = view.permissions.can_edit_product
    flow = view.product_delete
    c1, c2, c3 = st.columns([3, 1, 1])
    with c1:
        st.header(f"Products ({len(view.products.data)})")
    with c2:
        if view.permissions.can_delete_product and flow.selected:
            if st.button(f"Delete Selected ({len(flow.selected)})", key="detail_bulk_delete_btn"):
                run(view.request_bulk_delete)
    with c3:
        if can_edit and st.button("+ Add Product", key="detail_add_product_btn"):
            run(view.open_add_form)

    if view.form:
        product_form_ui(view.form, "detail_product", view.close_form)

    if not view.products.data:
        st.info("No products found." + ("" if not can_edit else " Add your first product!"))
        return

    search_box("Search products by name, description, or category...", "detail_search_key",
               view.set_query, lambda: len(view.filtered_products), "product")
    products = view.filtered_products
    if not products:
        st.info(f'No products found matching "{view.query}"')
        return
    if can_edit:
        label = "Clear selection" if flow.all_selected(products) else "Select all"
        if st.button(label, key="detail_select_all_btn"):
            run(view.toggle_all)
    product_table(products, "detail_products",
                  flow=flow if view.permissions.can_delete_product else None,
                  on_edit=view.open_edit_form if can_edit else None)


# --- Admin dashboard ---
def admin_dashboard_page(view: AdminDashboardView):
    if view.shops.is_loading:
        st.info("Loading shops...")
        return
    top_left, top_right = st.columns([4, 1])
    with top_left:
        st.title("Admin Dashboard")
        st.caption("Manage all shops in the system")
    with top_right:
        if st.button("Logout", key="admin_logout_btn"):
            run(view.logout)

    show_error(view.error)
    c1, c2 = st.columns(2)
    c1.metric("Total Shops", len(view.shops.data))
    c2.metric("Total Products", view.total_products)

    b1, b2, _ = st.columns([1, 1, 3])
    if b1.button("+ Add New Shop", key="admin_add_shop_btn"):
        run(view.go_register_shop)
    if b2.button("Remove Shops", key="admin_remove_shops_btn"):
        run(view.go_delete_shops)

    search_box("Search shops by name, address, phone, or products...", "admin_search_key",
               view.set_query, lambda: len(view.filtered_shops), "shop")

    if not view.shops.data:
        st.header("No Shops in System")
        st.write("There are no shops registered yet.")
        if st.button("Register First Shop", key="admin_register_first_btn"):
            run(view.go_register_shop)
        return
    shops = view.filtered_shops
    if not shops:
        st.info(f'No shops found matching "{view.query}"')
        return
    for i in range(0, len(shops), 3):
        cols = st.columns(3)
        for j, shop in enumerate(shops[i:i + 3]):
            with cols[j]:
                shop_card(shop, view.product_count(shop.id), view.featured_products(shop.id), view.open_shop)


# --- Remove shops ---
def delete_shops_page(view: DeleteShopsView):
    if view.shops.is_loading:
        st.info("Loading shops...")
        return
    flow = view.delete
    if flow.is_confirming:
        if confirmation_ui(flow, "shop", describe_shop, "This will also delete all products in these shops. "):
            run(view.confirm_delete)
        return

    top_left, top_right = st.columns([4, 1])
    with top_left:
        st.title("Remove Shops")
    with top_right:
        if st.button("Back to Dashboard", key="del_back_btn"):
            run(view.back_to_dashboard)

    show_error(view.error)
    if view.shops.is_loaded and not view.shops.data:
        st.header("No Shops Found")
        st.write("There are no shops to remove.")
        return

    st.write('Select the shops you want to remove. Then click "Delete Selected" to proceed to confirmation.')
    sync_checkboxes(flow, view.shops.data, "del_shop")
    for shop in view.shops.data:
        label = f"{shop.name} · {shop.address} · {shop.phone}"
        if view.permissions.can_view_owner:
            label += f" · Owner ID: {shop.owner_id}"
        st.checkbox(label, key=f"del_shop_{shop.id}", on_change=flow.toggle, args=(shop.id,))

    if flow.selected:
        count = len(flow.selected)
        if st.button(f"Delete Selected ({pluralize(count, 'shop')})", key="del_selected_btn", type="primary"):
            run(view.request_delete)
    else:
        st.caption("No shops selected.")


# --- Register shop ---
def register_shop_page(view: RegisterShopView):
    form = view.form
    st.title("Register Your Shop")
    show_error(form.error)
    options = [o.value for o in DeliveryOption]
    with st.form(key="register_form"):
        name = st.text_input("Shop Name *", value=form.name, key="reg_name_key")
        address = st.text_input("Address *", value=form.address, key="reg_address_key")
        phone = st.text_input("Phone *", value=form.phone, key="reg_phone_key")
        open_hours = st.text_input("Open Hours *", value=form.open_hours, key="reg_hours_key",
                                   placeholder="e.g., Mon-Sat: 9 AM - 9 PM")
        delivery = st.selectbox("Delivery Option *", options, index=options.index(form.delivery_option.value),
                                format_func=lambda v: DELIVERY_LABELS[DeliveryOption(v)], key="reg_delivery_key",
                                help="Choose how customers can receive deliveries from your shop.")
        owner_id = ""
        if view.permissions.can_assign_owner:
            owner_id = st.text_input("Owner ID (Admin Only)", value=form.owner_id, key="reg_owner_key",
                                     placeholder="Enter User ID to assign shop to",
                                     help="Leave blank to assign to yourself.")
        submitted = st.form_submit_button(form.submit_label, disabled=form.submitting)

    st.subheader("Current Location (captured automatically)")
    loc = view.location
    st.write(f"**Latitude:** {loc.latitude if loc.latitude is not None else 'Detecting...'}")
    st.write(f"**Longitude:** {loc.longitude if loc.longitude is not None else 'Detecting...'}")
    st.caption(loc.status)
    if st.button("Refresh Current Location", key="reg_refresh_loc_btn"):
        run(view.refresh_location)
    if st.button("Back to Dashboard", key="reg_back_btn"):
        run(view.back_to_dashboard)

    if submitted:
        form.set_values(name, address, phone, open_hours, delivery, owner_id)
        run(view.submit)


# Router
PAGES = {
    Page.LOGIN: login_page,
    Page.DASHBOARD: dashboard_page,
    Page.SHOP_DETAIL: shop_detail_page,
    Page.ADMIN_DASHBOARD: admin_dashboard_page,
    Page.DELETE_SHOPS: delete_shops_page,
    Page.ADMIN_DELETE_SHOPS: delete_shops_page,
    Page.REGISTER_SHOP: register_shop_page,
}


def build_view(page: Page, params: dict):
    if page is Page.LOGIN:
        return LoginView(client, store, navigator)
    if page is Page.DASHBOARD:
        return OwnerDashboardView(client, store, navigator)
    if page is Page.SHOP_DETAIL:
        return ShopDetailView(client, store, navigator, params.get("shop_id"))
    if page is Page.ADMIN_DASHBOARD:
        return AdminDashboardView(client, store, navigator, settings.max_workers, worker_init())
    if page is Page.DELETE_SHOPS:
        return DeleteShopsView(client, store, navigator)
    if page is Page.ADMIN_DELETE_SHOPS:
        return DeleteShopsView(client, store, navigator, admin=True)
    if page is Page.REGISTER_SHOP:
        provider = IpLocationProvider(settings.geolocation_url)
        return RegisterShopView(client, store, navigator, provider, settings.geolocation_timeout)
    raise ValueError(f"Unknown page: {page}")


def router():
    page = navigator.page
    if page is Page.HOME:
        route_home(store, navigator)
        st.rerun()

    key = (page.value, tuple(sorted(navigator.params.items())))
    if st.session_state.view_key != key:
        # entering a page mounts a fresh view, which re-fetches its data
        view = build_view(page, navigator.params)
        st.session_state.view = view
        st.session_state.view_key = key
        logger.debug("Mounting view", page=page.value, params=navigator.params)
        before = (navigator.page, dict(navigator.params))
        if hasattr(view, "mount"):
            view.mount()
        rerun_if_moved(before)

    PAGES[page](st.session_state.view)


# Entry point
router()
