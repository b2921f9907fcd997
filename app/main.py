"""
Streamlit Frontend for Dancer Money Tracker

The daily-use interface: log a night, keep bills current, check the
weekly target and write the Sunday reflection.

DESIGN PRINCIPLES:
1. Every number on screen comes from one dashboard recompute
2. Every edit goes through the tracker (clamped, persisted, audited)
3. Clear messages in simple language
4. No hidden actions
"""

from datetime import date

import streamlit as st

from money_tracker.config import get_settings
from money_tracker.engine import flags_series, net_series, tier_table
from money_tracker.engine.insights import format_usd
from money_tracker.models import FlagName, NightTier
from money_tracker.storage import InMemoryRecordStore, StorageError
from money_tracker.tracker import MoneyTracker, create_tracker
from money_tracker.validation import MAX_AMOUNT

# Stored amounts are floored at 0 and capped, so inputs share those bounds
AMOUNT_BOUNDS = {"min_value": 0.0, "max_value": float(MAX_AMOUNT)}


# Page configuration
st.set_page_config(
    page_title="Dancer Money Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for the dark pink theme
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .insight-box {
        padding: 16px;
        background-color: #0b0b10;
        border-radius: 14px;
        border-left: 5px solid #ff5ca8;
        margin: 10px 0;
    }
    .affirmation {
        color: #ff5ca8;
        font-weight: 900;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_tracker() -> MoneyTracker:
    """Get or create the tracker (cached)."""
    try:
        return create_tracker()
    except StorageError as e:
        st.error(f"Could not open your saved data: {e}")
        return MoneyTracker(InMemoryRecordStore())


def main():
    """Main application entry point."""
    tracker = get_tracker()

    st.sidebar.title("💸 Dancer Money Tracker")
    st.sidebar.markdown("Track your bag. Protect your energy.")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Bills", "🌙 Tracker", "☀️ Sunday", "⚙️ Settings"],
        index=0,
    )

    planned = st.session_state.get("planned_nights")
    dashboard = tracker.dashboard(planned_nights=planned)

    st.sidebar.markdown("---")
    st.sidebar.markdown("**Daily affirmation**")
    st.sidebar.markdown(
        f'<div class="affirmation">{dashboard.affirmation}</div>',
        unsafe_allow_html=True,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(tracker, dashboard)
    elif page == "🧾 Bills":
        render_bills_page(tracker, dashboard)
    elif page == "🌙 Tracker":
        render_tracker_page(tracker, dashboard)
    elif page == "☀️ Sunday":
        render_sunday_page(tracker, dashboard)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def render_dashboard_page(tracker: MoneyTracker, dashboard):
    """30-day boss dashboard plus the weekly target."""
    st.title("📊 30-Day Boss Dashboard")
    st.caption(f"Week: {dashboard.week_start} → {dashboard.week_end}")

    totals = dashboard.totals30
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Net (30 days)", format_usd(totals.net))
    col2.metric("Gross", format_usd(totals.gross))
    col3.metric("Tip-out", format_usd(totals.tipout))
    col4.metric("Expenses", format_usd(totals.expenses))

    col1, col2, col3 = st.columns(3)
    col1.metric("Min hit days", f"{totals.min_hits} / 30")
    col2.metric("Left-early days", totals.left_early_days)
    col3.metric(
        "Bills paid this month",
        format_usd(dashboard.bills_paid_this_month.total),
        f"{dashboard.bills_paid_this_month.count} bills",
    )

    st.markdown("### Net per day")
    st.line_chart([float(v) for v in net_series(dashboard.last30)])
    st.markdown("### Flags per day")
    st.bar_chart(flags_series(dashboard.last30))

    insights = dashboard.insights
    st.markdown("### Insights")
    st.markdown(
        f'<div class="insight-box">{insights.money_energy_line}</div>'
        f'<div class="insight-box">{insights.boss_line}</div>',
        unsafe_allow_html=True,
    )
    st.caption(
        f"Avg net (flag nights): {format_usd(insights.avg_flagged)} · "
        f"Avg net (calm nights): {format_usd(insights.avg_calm)} · "
        f"Hit rate: {insights.hit_rate_pct:.0f}%"
    )

    render_weekly_target(dashboard)


def render_weekly_target(dashboard):
    """Weekly target summary and plan selector."""
    target = dashboard.weekly_target
    st.markdown("### Weekly target")
    st.caption(f"Unpaid bills due this week + buffer ({target.buffer_percent}%).")

    col1, col2, col3 = st.columns(3)
    col1.metric("Bills due", target.total_count, f"{target.unpaid_count} unpaid")
    col2.metric(
        "Target",
        format_usd(target.total),
        f"base {format_usd(target.base)} + buffer {format_usd(target.buffer)}",
    )
    col3.metric("Nights needed", target.nights_needed, f"at ~{format_usd(target.per_night)}/night")

    planned = st.selectbox(
        "Nights I plan to work this week",
        options=list(range(1, 8)),
        index=dashboard.weekly_plan.planned_nights - 1,
    )
    if planned != dashboard.weekly_plan.planned_nights:
        st.session_state.planned_nights = planned
        st.rerun()
    st.markdown(
        f"Per-night goal: **{format_usd(dashboard.weekly_plan.per_night_planned)}**"
    )


def render_bills_page(tracker: MoneyTracker, dashboard):
    """Bills list with due dates and paid checkbox."""
    st.title("🧾 Bills")

    if st.button("➕ Add bill", type="primary"):
        tracker.add_bill()
        st.rerun()

    if not dashboard.bills:
        st.info("Add bills first so weekly targets calculate automatically.")
        return

    for bill in dashboard.bills:
        with st.container(border=True):
            col1, col2, col3, col4, col5 = st.columns([3, 2, 2, 1, 1])
            name = col1.text_input("Name", value=bill.name, key=f"bill_name_{bill.id}")
            amount = col2.number_input(
                "Amount", value=float(bill.amount), key=f"bill_amount_{bill.id}", **AMOUNT_BOUNDS
            )
            due = col3.date_input(
                "Due date",
                value=date.fromisoformat(bill.due_date) if bill.due_date else None,
                key=f"bill_due_{bill.id}",
            )
            paid = col4.checkbox("Paid", value=bill.paid, key=f"bill_paid_{bill.id}")
            if col5.button("🗑️", key=f"bill_remove_{bill.id}"):
                tracker.remove_bill(bill.id)
                st.rerun()

            changes = {}
            if name.strip() != bill.name:
                changes["name"] = name
            if str(amount) != str(float(bill.amount)):
                changes["amount"] = amount
            due_key = due.isoformat() if due else None
            if due_key != bill.due_date:
                changes["due_date"] = due_key
            if paid != bill.paid:
                changes["paid"] = paid
            if changes:
                tracker.update_bill(bill.id, **changes)
                st.rerun()

    st.markdown("### Due this week")
    rows = dashboard.weekly_bills.rows
    if not rows:
        st.markdown("No bills due this week.")
    else:
        st.table([
            {
                "Bill": row.bill.name or "(Unnamed)",
                "Due date": row.bill.due_date,
                "Amount": format_usd(row.bill.amount),
                "Status": "PAID" if row.bill.paid else "UNPAID",
                "Running unpaid total": format_usd(row.running_unpaid),
            }
            for row in rows
        ])


def render_tracker_page(tracker: MoneyTracker, dashboard):
    """Nightly tracker, energy rules and flags."""
    st.title("🌙 Nightly tracker")
    st.markdown("Log money and protect your energy.")

    min_net = tracker.settings.min_net_default
    with st.expander("Minimum rule tiers"):
        st.markdown(f"Default minimum net: **{format_usd(min_net)}**")
        for band in tier_table():
            upper = format_usd(band.upper) if band.upper is not None else "and up"
            st.markdown(f"- {format_usd(band.lower)} – {upper}: **{band.tier.value}**")

    if st.button("➕ Add night", type="primary"):
        tracker.add_entry()
        st.rerun()

    if not dashboard.entries:
        st.info("No nights logged yet. Add your first night above.")
        return

    entries = {entry.id: entry for entry in tracker.snapshot.entries}
    for view in dashboard.entries:
        entry = entries[view.entry_id]
        tier = view.tier.value if view.tier is not NightTier.UNCLASSIFIED else "Unclassified"
        with st.container(border=True):
            st.markdown(
                f"**{entry.date or 'No date'}** · Net **{format_usd(view.net)}** · "
                f"{tier} · {'✅ min hit' if view.hit_min else '⬜ below min'}"
            )
            col1, col2, col3, col4 = st.columns(4)
            day = col1.date_input(
                "Date",
                value=date.fromisoformat(entry.date) if entry.date else None,
                key=f"entry_date_{entry.id}",
            )
            gross = col2.number_input(
                "Gross", value=float(entry.gross), key=f"entry_gross_{entry.id}", **AMOUNT_BOUNDS
            )
            tipout = col3.number_input(
                "Tip-out", value=float(entry.tipout), key=f"entry_tipout_{entry.id}", **AMOUNT_BOUNDS
            )
            expenses = col4.number_input(
                "Expenses", value=float(entry.expenses), key=f"entry_expenses_{entry.id}", **AMOUNT_BOUNDS
            )

            col1, col2 = st.columns(2)
            min_kept = col1.checkbox("I kept my minimum", value=entry.min_kept, key=f"entry_min_{entry.id}")
            left_early = col2.checkbox("I left early", value=entry.left_early, key=f"entry_left_{entry.id}")

            flag_cols = st.columns(len(FlagName))
            flags = {
                flag.value: flag_cols[i].checkbox(
                    flag.value.capitalize(),
                    value=getattr(entry.flags, flag.value),
                    key=f"entry_flag_{flag.value}_{entry.id}",
                )
                for i, flag in enumerate(FlagName)
            }
            notes = st.text_area("Notes", value=entry.notes, key=f"entry_notes_{entry.id}")

            if st.button("🗑️ Remove night", key=f"entry_remove_{entry.id}"):
                tracker.remove_entry(entry.id)
                st.rerun()

            changes = {}
            day_key = day.isoformat() if day else None
            if day_key != entry.date:
                changes["date"] = day_key
            for field, value in (("gross", gross), ("tipout", tipout), ("expenses", expenses)):
                if str(value) != str(float(getattr(entry, field))):
                    changes[field] = value
            if min_kept != entry.min_kept:
                changes["min_kept"] = min_kept
            if left_early != entry.left_early:
                changes["left_early"] = left_early
            if flags != entry.flags.model_dump():
                changes["flags"] = flags
            if notes != entry.notes:
                changes["notes"] = notes
            if changes:
                tracker.update_entry(entry.id, **changes)
                st.rerun()


def render_sunday_page(tracker: MoneyTracker, dashboard):
    """Sunday check-in and weekly reflection."""
    st.title("☀️ Sunday check-in")
    st.markdown(f"Week of **{dashboard.week_start}** → **{dashboard.week_end}**")

    weekly = dashboard.weekly_bills
    col1, col2 = st.columns(2)
    col1.metric("Bills paid (due this week)", f"{len(weekly.paid)} / {len(weekly.rows)}")
    col2.metric("Weekly target", format_usd(dashboard.weekly_target.total))

    st.markdown("### Bills due this week")
    if not weekly.rows:
        st.markdown("No bills due this week.")
    for row in weekly.rows:
        bill = row.bill
        paid = st.checkbox(
            f"{bill.name or '(Unnamed)'}, {format_usd(bill.amount)}, due {bill.due_date}",
            value=bill.paid,
            key=f"sunday_paid_{bill.id}",
        )
        if paid != bill.paid:
            tracker.mark_bill_paid(bill.id, paid)
            st.rerun()

    st.markdown("### Reflection")
    reflection = st.text_area(
        "What worked? What drained you? What's the one rule you're not breaking next week?",
        value=dashboard.checkin.reflection,
        height=160,
    )
    col1, col2 = st.columns(2)
    if col1.button("💾 Save reflection", type="primary"):
        tracker.save_reflection(reflection, dashboard.week_start)
        st.success("Reflection saved.")
    if col2.button("Clear"):
        tracker.clear_reflection(dashboard.week_start)
        st.rerun()


def render_settings_page(tracker: MoneyTracker):
    """User settings. Values are clamped on save."""
    st.title("⚙️ Settings")

    current = tracker.settings
    col1, col2, col3 = st.columns(3)
    min_net = col1.number_input("Default minimum net", value=float(current.min_net_default))
    buffer_pct = col2.number_input("Weekly buffer %", value=float(current.buffer_percent))
    per_night = col3.number_input("Expected net per night", value=float(current.expected_net_per_night))

    if st.button("💾 Save settings", type="primary"):
        saved = tracker.update_settings(
            min_net_default=min_net,
            buffer_percent=buffer_pct,
            expected_net_per_night=per_night,
        )
        st.success(
            f"Saved: minimum {format_usd(saved.min_net_default)}, "
            f"buffer {saved.buffer_percent}%, "
            f"{format_usd(saved.expected_net_per_night)} per night."
        )

    st.markdown("---")
    st.markdown("### Storage")
    st.markdown(f"Data file: `{get_settings().data_path}`")
    st.markdown(
        "To change where data is kept, set `MONEY_TRACKER_DATA_PATH` in a `.env` file. "
        "See `.env.example`."
    )


if __name__ == "__main__":
    main()
