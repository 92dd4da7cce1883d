from datetime import date, datetime, timedelta

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import streamlit as st
from dateutil import parser

from bluehour.analytics import ANALYTICS_KEY, compute_streak
from bluehour.storage import JsonStore, app_data_dir

plt.style.use("dark_background")

COLUMNS = ["day", "minutes", "sessions"]
WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

CSS = """
<style>
:root { color-scheme: dark; }
.stApp { background: #0e1117; color: #d6e6ea; }
.kpi-container { display:flex; gap:14px; justify-content:center; flex-wrap:wrap; }
.kpi-card {
    background: linear-gradient(180deg, rgba(10,14,16,0.8), rgba(7,11,13,0.6));
    border-radius: 10px; padding: 12px 16px; min-width: 150px;
    border: 1px solid rgba(255,255,255,0.03);
    display:flex; flex-direction:column; align-items:center;
}
.kpi-number { font-size: 26px; color: #e7fff8; font-weight: 700; }
.kpi-label { font-size: 12px; color: #9fbfc0; margin-top:6px; }
.section-title { color: #bfeee6; font-weight: 600; margin-bottom: 6px; }
</style>
"""


def _count(v) -> int:
    try:
        return max(0, int(float(v)))
    except (TypeError, ValueError, OverflowError):
        return 0


def frame_from_store(raw) -> pd.DataFrame:
    days = raw.get("days") if isinstance(raw, dict) else None
    if not isinstance(days, dict):
        return pd.DataFrame(columns=COLUMNS)
    rows = []
    for key, rec in days.items():
        try:
            day = parser.parse(str(key)).date()
        except (ValueError, OverflowError):
            continue
        if not isinstance(rec, dict):
            continue
        rows.append({
            "day": pd.Timestamp(day),
            "minutes": _count(rec.get("focus_seconds")) // 60,
            "sessions": _count(rec.get("completed_sessions")),
        })
    df = pd.DataFrame(rows, columns=COLUMNS)
    return df.sort_values("day").reset_index(drop=True)


@st.cache_data(ttl=30)
def load_data(data_dir: str) -> pd.DataFrame:
    return frame_from_store(JsonStore(data_dir).get(ANALYTICS_KEY, {}))


def monthly_totals(df, year, month) -> pd.Series:
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    last = next_first - timedelta(days=1)
    all_days = pd.date_range(first, last, freq="D").date
    grouped = df.groupby(df["day"].dt.date)["minutes"].sum() if len(df) else pd.Series(dtype=int)
    series = pd.Series({d: int(grouped.get(d, 0)) for d in all_days})
    series.index.name = "day"
    return series


def weekday_totals(df) -> pd.Series:
    if df.empty:
        return pd.Series([0] * 7, index=range(7))
    return df.groupby(df["day"].dt.weekday)["minutes"].sum().reindex(range(7), fill_value=0)


def week_window(df, today: date) -> pd.DataFrame:
    index = pd.date_range(end=pd.Timestamp(today), periods=7, freq="D")
    return df.set_index("day").reindex(index, fill_value=0)


def kpi_html(items) -> str:
    cards = "".join(
        f'<div class="kpi-card"><div class="kpi-number">{value}</div>'
        f'<div class="kpi-label">{label}</div></div>'
        for label, value in items
    )
    return f'<div class="kpi-container">{cards}</div>'


def main():
    st.set_page_config(page_title="Blue Hour Dashboard", layout="wide")
    st.markdown(CSS, unsafe_allow_html=True)
    st.markdown("<h1 style='text-align:center;color:#bfeee6'>Blue Hour</h1>", unsafe_allow_html=True)

    data_dir = str(app_data_dir())
    df = load_data(data_dir)
    if df.empty:
        st.info("No focus time recorded yet. Finish a pomodoro and come back.")
        st.stop()

    today = date.today()
    week = week_window(df, today)
    current, longest = compute_streak([d.date() for d in df.loc[df["minutes"] > 0, "day"]], today)
    st.markdown(kpi_html([
        ("Week minutes", int(week["minutes"].sum())),
        ("Week sessions", int(week["sessions"].sum())),
        ("Today minutes", int(week["minutes"].iloc[-1])),
        ("Current streak", f"{current}d"),
        ("Longest streak", f"{longest}d"),
    ]), unsafe_allow_html=True)
    st.markdown("---")

    min_day = df["day"].min().date()
    col_m, col_y = st.sidebar.columns([1, 1])
    sel_month = col_m.selectbox(
        "Month",
        options=list(range(1, 13)),
        index=today.month - 1,
        format_func=lambda m: datetime(2000, m, 1).strftime("%B"),
    )
    sel_year = col_y.number_input("Year", min_value=min(min_day.year, today.year),
                                  max_value=today.year, value=today.year, step=1)

    month_series = monthly_totals(df, int(sel_year), int(sel_month))
    fig, ax = plt.subplots(figsize=(10, 4), dpi=100)
    days = [d.day for d in month_series.index]
    vals = month_series.values
    ax.bar(days, vals, color="#22c1a8", edgecolor="#0b3a33", linewidth=0.6)
    ax.set_facecolor("#0b0f13")
    ax.set_xlabel("Day of month", color="#9fbfc0")
    ax.set_ylabel("Minutes focused", color="#9fbfc0")
    ax.set_title(f"Monthly Focus — {datetime(int(sel_year), int(sel_month), 1).strftime('%B %Y')}", color="#bfeee6")
    ax.tick_params(colors="#9fbfc0")
    if vals.size and vals.max() > 0:
        top_idx = int(np.argmax(vals))
        ax.annotate(f"Best: {days[top_idx]} ({vals[top_idx]}m)", xy=(days[top_idx], vals[top_idx]),
                    xytext=(0, 8), textcoords="offset points", ha="center", color="#e7fff8", fontsize=9)
    ax.set_ylim(0, max(vals.max() * 1.2 if vals.size else 0, 30))
    ax.grid(axis="y", color="#072a24", linestyle="--", linewidth=0.6, alpha=0.8)
    plt.tight_layout()
    st.pyplot(fig)

    st.markdown("<div class='section-title'>Minutes by weekday</div>", unsafe_allow_html=True)
    wd = weekday_totals(df)
    fig_wd, axw = plt.subplots(figsize=(6, 3), dpi=100)
    axw.bar(range(7), wd.values, color="#2fbf9a", edgecolor="#08332b")
    axw.set_xticks(range(7))
    axw.set_xticklabels(WEEKDAYS, color="#9fbfc0")
    axw.set_ylabel("Minutes", color="#9fbfc0")
    axw.grid(axis="y", color="#072a24", linestyle="--", linewidth=0.6, alpha=0.8)
    plt.tight_layout()
    st.pyplot(fig_wd)

    table = df.assign(day=df["day"].dt.date)
    st.dataframe(table, use_container_width=True)
    st.download_button("Download CSV", data=table.to_csv(index=False).encode("utf-8"),
                       file_name="bluehour-days.csv", mime="text/csv")


if __name__ == "__main__":
    main()
