"""
Streamlit Frontend for Budget Tracker

Monthly and annual view of the household budget.

DESIGN PRINCIPLES:
1. One owned BudgetSession per browser session
2. Every button maps to exactly one session operation
3. Destructive actions (replace) need an explicit confirmation box
4. Errors are shown, never raised into the page

Share links arrive as query parameters (`?v2=...` or legacy `?data=...`),
since a URL fragment never reaches the server. The links the app
generates still use the `#v2=` fragment form; paste one into the
"Open a shared link" box to load it.
"""

import asyncio
from datetime import date
from typing import Optional

import plotly.graph_objects as go
import streamlit as st

from src.budget import (
    expense_by_category,
    format_currency,
    month_pending,
    month_totals,
)
from src.config import get_settings
from src.models.budget import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    MONTHS,
    BudgetEntry,
    EntryDraft,
    EntryType,
)
from src.orchestrator import BudgetSession, ConfirmationRequiredError, create_session
from src.sharing import ImportMode, ImportRejectedError, ShareLinkError


# Page configuration
st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

COLORS = ["#10b981", "#ef4444", "#3b82f6", "#f59e0b", "#8b5cf6", "#ec4899"]
CUSTOM_CATEGORY = "➕ New category..."


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def money(amount: float) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def get_session() -> BudgetSession:
    """Create the session on first run and decode an incoming share link."""
    if "session" not in st.session_state:
        session = create_session(initial_month=date.today().month - 1)
        fragment = None
        for version in ("v2", "data"):
            if version in st.query_params:
                fragment = f"{version}={st.query_params[version]}"
                break
        startup = session.start(share_fragment=fragment)
        if startup.share_link_error:
            st.session_state.flash = (
                "warning",
                "The shared link could not be read. Showing your saved data instead.",
            )
            st.query_params.clear()
        st.session_state.session = session
    return st.session_state.session


def flash():
    """Show the one-shot message left by the previous run."""
    message = st.session_state.pop("flash", None)
    if message:
        kind, text = message
        getattr(st, kind)(text)


def main():
    """Main application entry point."""
    session = get_session()

    st.sidebar.title("💰 Budget Tracker")
    st.sidebar.caption(f"Year {session.year}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Month", "📊 Year", "🔄 Share & Backup", "⚙️ Settings"],
        index=0,
    )

    flash()
    render_pending_share_link(session)
    render_totals(session)

    if page == "📅 Month":
        session.select_tab("month")
        render_month_page(session)
    elif page == "📊 Year":
        session.select_tab("year")
        render_year_page(session)
    elif page == "🔄 Share & Backup":
        render_exchange_page(session)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_pending_share_link(session: BudgetSession):
    """Ask what to do with a decoded share link."""
    pending = session.pending_share_link
    if pending is None:
        return

    with st.container(border=True):
        st.markdown(
            f"### 🔗 Shared data detected\n"
            f"The link carries **{pending.entry_count}** entries for {pending.year}. "
            "Merging keeps all your entries; replacing discards them."
        )
        confirm = st.checkbox("I understand that replacing deletes my local data")
        col1, col2, col3 = st.columns(3)
        decision: Optional[ImportMode] = None
        with col1:
            if st.button("Merge", type="primary"):
                decision = ImportMode.MERGE
        with col2:
            if st.button("Replace", disabled=not confirm):
                decision = ImportMode.REPLACE
        with col3:
            if st.button("Ignore"):
                session.dismiss_share_link()
                st.query_params.clear()
                st.rerun()

        if decision is not None:
            report = session.apply_share_link(mode=decision, confirmed=confirm)
            st.query_params.clear()
            if report is None:
                st.session_state.flash = ("success", "Local data replaced with the shared version.")
            else:
                st.session_state.flash = (
                    "success",
                    f"Merged {report.added} entries ({report.skipped} already present).",
                )
            st.rerun()


def render_totals(session: BudgetSession):
    summary = session.summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("Annual income", money(summary.total_income))
    col2.metric("Annual expenses", money(summary.total_expenses))
    col3.metric("Overall balance", money(summary.balance))


def render_month_page(session: BudgetSession):
    """Month selector, income and expense tables, category chart."""
    month = st.radio(
        "Month",
        options=list(range(12)),
        index=session.state.month,
        format_func=lambda i: MONTHS[i][:3],
        horizontal=True,
    )
    if month != session.state.month:
        session.select_month(month)
        st.rerun()

    data = session.month_data
    income, expenses, balance = month_totals(data)
    income_pending, expenses_pending = month_pending(data)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", money(income))
    col2.metric("Expenses", money(expenses))
    col3.metric("Balance", money(balance))
    col4.metric("Still to pay", money(expenses_pending), help=f"Income still to receive: {money(income_pending)}")

    left, right = st.columns(2)
    with left:
        render_entry_table(session, EntryType.INCOME, f"Income • {MONTHS[month]}")
    with right:
        render_entry_table(session, EntryType.EXPENSES, f"Expenses • {MONTHS[month]}")

    breakdown = expense_by_category(data)
    if breakdown:
        st.markdown("### Month composition")
        fig = go.Figure(
            go.Pie(
                labels=[c.name for c in breakdown],
                values=[c.value for c in breakdown],
                hole=0.6,
                marker={"colors": COLORS},
            )
        )
        fig.update_layout(margin={"t": 10, "b": 10})
        st.plotly_chart(fig, use_container_width=True)


def render_entry_table(session: BudgetSession, entry_type: EntryType, title: str):
    entries = session.month_data.entries(entry_type)
    st.markdown(f"### {title}")
    st.caption(f"Total: {money(sum(e.amount for e in entries))}")

    for entry in entries:
        if session.state.editing == entry.id:
            render_edit_row(session, entry_type, entry)
        else:
            render_entry_row(session, entry_type, entry)

    render_add_form(session, entry_type)


def render_entry_row(session: BudgetSession, entry_type: EntryType, entry: BudgetEntry):
    key = f"{entry_type.value}-{entry.id}"
    col1, col2, col3, col4, col5 = st.columns([3, 2, 1, 1, 1])
    col1.markdown(f"**{entry.description}**  \n{entry.category}")
    col2.markdown(money(entry.amount))
    status = "✅" if entry.paid else "⏳"
    if col3.button(status, key=f"toggle-{key}", help="Toggle paid"):
        session.toggle_paid(entry_type, entry.id)
        st.rerun()
    if col4.button("✏️", key=f"edit-{key}", help="Edit"):
        session.start_editing(entry.id)
        st.rerun()
    if col5.button("🗑️", key=f"delete-{key}", help="Delete"):
        session.delete_entry(entry_type, entry.id)
        st.rerun()


def render_edit_row(session: BudgetSession, entry_type: EntryType, entry: BudgetEntry):
    with st.form(key=f"edit-form-{entry.id}"):
        category = st.text_input("Category", value=entry.category)
        description = st.text_input("Description", value=entry.description)
        amount = st.number_input("Amount", value=float(entry.amount), min_value=0.0, step=10.0)
        col1, col2 = st.columns(2)
        save = col1.form_submit_button("Save", type="primary")
        cancel = col2.form_submit_button("Cancel")

    if cancel:
        session.cancel_editing()
        st.rerun()
    if save:
        try:
            draft = EntryDraft(category=category, description=description, amount=amount)
        except ValueError:
            st.error("Category, description and a positive amount are required.")
            return
        session.update_entry(entry_type, entry.id, draft)
        st.rerun()


def render_add_form(session: BudgetSession, entry_type: EntryType):
    categories = INCOME_CATEGORIES if entry_type is EntryType.INCOME else EXPENSE_CATEGORIES
    with st.form(key=f"add-{entry_type.value}", clear_on_submit=True):
        choice = st.selectbox("Category", categories + [CUSTOM_CATEGORY])
        custom = st.text_input("Custom category", help=f"Used when '{CUSTOM_CATEGORY}' is selected")
        description = st.text_input("Description")
        amount = st.number_input("Amount", min_value=0.0, step=10.0)
        submitted = st.form_submit_button("Add")

    if submitted:
        category = custom if choice == CUSTOM_CATEGORY else choice
        try:
            draft = EntryDraft(category=category, description=description, amount=amount)
        except ValueError:
            st.error("Category, description and a positive amount are required.")
            return
        session.add_entry(entry_type, draft)
        st.rerun()


def render_year_page(session: BudgetSession):
    """Annual flow chart."""
    summary = session.summary()
    names = [m.name for m in summary.months]

    fig = go.Figure()
    fig.add_bar(x=names, y=[m.income for m in summary.months], name="Income", marker_color="#10b981")
    fig.add_bar(x=names, y=[m.expenses for m in summary.months], name="Expenses", marker_color="#ef4444")
    fig.update_layout(barmode="group", margin={"t": 30, "b": 10})
    st.markdown("### Annual flow")
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("### Tips")
    if st.button("💡 Get financial tips"):
        with st.spinner("Asking for tips..."):
            insight = run_async(session.insights())
        if insight.generated:
            st.markdown(insight.text)
        else:
            st.info(insight.text)


def render_exchange_page(session: BudgetSession):
    """Share link, export and import."""
    st.title("🔄 Share & Backup")
    st.info(
        "Your data is stored on this machine only. To let someone else see your "
        "latest numbers, send them a fresh share link."
    )

    st.markdown("### Share link")
    if st.button("🔗 Create share link"):
        st.code(session.share_url(), language=None)

    link = st.text_input("Open a shared link", placeholder="https://...#v2=...")
    if st.button("Open link") and link:
        try:
            if session.receive_share_link(link) is None:
                st.warning("That link does not carry any shared budget data.")
            else:
                st.rerun()
        except ShareLinkError:
            st.error("The link could not be read. Your data was not changed.")

    st.markdown("---")
    st.markdown("### Export")
    filename, content = session.export_file()
    st.download_button(
        "⬇️ Download JSON",
        data=content,
        file_name=filename,
        mime="application/json",
        on_click=session.record_export,
        args=(filename,),
    )

    st.markdown("---")
    st.markdown("### Import")
    uploaded = st.file_uploader("Choose a budget JSON file", type=["json"])
    mode = st.radio(
        "How should the file be applied?",
        options=list(ImportMode),
        format_func=lambda m: "Merge with my data" if m is ImportMode.MERGE else "Replace my data",
        horizontal=True,
    )
    confirmed = False
    if mode is ImportMode.REPLACE:
        confirmed = st.checkbox("I understand that replacing deletes my local data")

    if uploaded and st.button("📥 Import", type="primary"):
        try:
            report = session.import_file(
                uploaded.getvalue(),
                mode=mode,
                confirmed=confirmed,
                filename=uploaded.name,
            )
        except ImportRejectedError as e:
            st.error(str(e))
            return
        except ConfirmationRequiredError:
            st.warning("Please confirm that you want to replace your data.")
            return
        except Exception as e:
            session.audit_logger.log_error(
                error_type="import_failed",
                error_message=str(e),
                details={"filename": uploaded.name},
            )
            st.error(f"Import failed: {e}")
            return
        if report is None:
            st.success("Your data was replaced with the file contents.")
        else:
            st.success(f"Merged {report.added} entries ({report.skipped} already present).")


def render_settings_page(session: BudgetSession):
    """Render the settings page."""
    st.title("⚙️ Settings")

    from src.config import validate_all_settings

    status = validate_all_settings()
    services = [
        ("Local storage", "storage"),
        ("Gemini (financial tips)", "gemini"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown("---")
    st.markdown("### Recent activity")
    for event in session.audit_logger.history[:20]:
        st.text(f"{event.timestamp:%H:%M:%S}  {event.description}")


if __name__ == "__main__":
    main()
