import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from .analytics import AnalyticsAggregator
from .storage import JsonStore

plt.style.use("dark_background")

# minutes; keeps a quiet week from drawing full-height bars
SCALE_FLOOR = 30

BAR = "#22c1a8"
BAR_TODAY = "#9be7d6"
EDGE = "#0b3a33"
MUTED = "#9fbfc0"


def scale_top(minutes) -> int:
    vals = np.clip(np.asarray(minutes, dtype=float), 0, None)
    return int(max(SCALE_FLOOR, vals.max() if vals.size else 0))


def bar_heights(minutes, height: float = 1.0) -> list:
    """Bar heights for ``minutes`` scaled into ``[0, height]``."""
    vals = np.clip(np.asarray(minutes, dtype=float), 0, None)
    return (vals / scale_top(vals) * height).tolist()


def draw_week_chart(days, ax=None):
    """Draw the last-7-days bars onto ``ax`` (a new Figure when omitted)."""
    if ax is None:
        fig = Figure(figsize=(6, 3), dpi=100, facecolor="#0b0f13")
        ax = fig.add_subplot(111)
    else:
        fig = ax.figure
    minutes = [d.minutes for d in days]
    labels = [pd.Timestamp(d.key).strftime("%a") for d in days]
    colors = [BAR] * len(days)
    if colors:
        colors[-1] = BAR_TODAY
    x = np.arange(len(days))
    bars = ax.bar(x, minutes, color=colors, edgecolor=EDGE, linewidth=0.6, width=0.62)
    top = scale_top(minutes)
    for b, v in zip(bars, minutes):
        ax.annotate(f"{v}", xy=(b.get_x() + b.get_width() / 2, b.get_height()),
                    xytext=(0, 3), textcoords="offset points",
                    ha="center", va="bottom", fontsize=8, color="#e7fff8")
    ax.set_facecolor("#0b0f13")
    ax.set_xticks(x)
    ax.set_xticklabels(labels, color=MUTED)
    ax.set_ylabel("Minutes", color=MUTED)
    ax.set_ylim(0, top * 1.15)
    ax.tick_params(colors=MUTED)
    ax.grid(axis="y", color="#072a24", linestyle="--", linewidth=0.6, alpha=0.8)
    ax.set_title(f"Last 7 Days — {sum(minutes)}m", color="#bfeee6")
    return fig


def run_week_chart(data_dir=None):
    agg = AnalyticsAggregator(JsonStore(data_dir))
    fig, ax = plt.subplots(figsize=(8, 4), facecolor="#0b0f13")
    draw_week_chart(agg.last_7_days(), ax=ax)
    fig.tight_layout()
    try:
        plt.show()
    finally:
        plt.close("all")
