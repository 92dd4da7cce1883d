import tkinter as tk
from tkinter import ttk, messagebox, filedialog
import argparse
import logging
import multiprocessing
import os
import platform
import random
import subprocess
import sys
from pathlib import Path

from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

from .alarm import ToneAlarm
from .analytics import AnalyticsAggregator
from .preferences import FONTS, THEMES, load_preferences, save_preferences
from .settings import ALARM_KINDS, MINUTE_BOUNDS, Mode, Settings, load_settings, save_settings
from .storage import JsonStore
from .timer import CountdownTimer, Status
from .visual import draw_week_chart, run_week_chart

LOGGER = logging.getLogger(__name__)

QUOTES = [
    ("The secret of getting ahead is getting started.", "Mark Twain"),
    ("Discipline is choosing between what you want now and what you want most.", "Abraham Lincoln (attributed)"),
    ("It always seems impossible until it's done.", "Nelson Mandela"),
    ("What you do every day matters more than what you do once in a while.", "Gretchen Rubin"),
    ("Be regular and orderly in your life, so that you may be violent and original in your work.", "Gustave Flaubert"),
]

PALETTES = {
    "blue": {"bg": "#0d1117", "surface": "#161b22", "field": "#1e242c", "accent": "#3b82f6", "fg": "#e5e7eb"},
    "dusk": {"bg": "#1a1024", "surface": "#241733", "field": "#2e1f40", "accent": "#f59e0b", "fg": "#f3e8ff"},
    "forest": {"bg": "#0c1510", "surface": "#132219", "field": "#1a2d21", "accent": "#22c1a8", "fg": "#e7fff8"},
    "mono": {"bg": "#111111", "surface": "#1b1b1b", "field": "#242424", "accent": "#d4d4d4", "fg": "#f5f5f5"},
}

MODE_LABELS = {Mode.POMODORO: "Pomodoro", Mode.SHORT: "Short Break", Mode.LONG: "Long Break"}


def resource_path(relative_path: str) -> Path:
    base_path = getattr(sys, "_MEIPASS", Path(__file__).resolve().parent)
    return Path(base_path) / relative_path


def dashboard_command(data_dir=None):
    """Command line and environment for serving the streamlit dashboard."""
    env = dict(os.environ)
    if data_dir:
        env["BLUEHOUR_DATA"] = str(data_dir)
    page = Path(__file__).resolve().with_name("dashboard.py")
    return [sys.executable, "-m", "streamlit", "run", str(page)], env


def launch_dashboard(data_dir=None):
    cmd, env = dashboard_command(data_dir)
    return subprocess.Popen(cmd, env=env)


def font_family(font: str) -> str:
    if font == "serif":
        return "Georgia" if platform.system() != "Linux" else "DejaVu Serif"
    if font == "mono":
        return "Menlo" if platform.system() == "Darwin" else "Consolas" if platform.system() == "Windows" else "DejaVu Sans Mono"
    if platform.system() == "Darwin":
        return "Helvetica"
    if platform.system() == "Windows":
        return "Segoe UI"
    return "Ubuntu"


class TkScheduler:
    def __init__(self, widget):
        self.widget = widget

    def call_later(self, delay_ms, fn):
        return self.widget.after(delay_ms, fn)

    def cancel(self, handle):
        try:
            self.widget.after_cancel(handle)
        except tk.TclError:
            pass


class App(tk.Tk):
    def __init__(self, store: JsonStore):
        super().__init__()
        self.title("Blue Hour")
        self.geometry("760x560")
        self.minsize(620, 480)
        self.configure(padx=14, pady=14)
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.store = store
        self._closing = False
        self._quotes_after_id = None
        self.quote_interval_ms = 10 * 60 * 1000
        self.quotes = []
        self.quote_index = -1
        self._bg_image = None
        self.analytics_win = None
        self.prefs = load_preferences(store)
        self.settings = load_settings(store)
        self.analytics = AnalyticsAggregator(store)
        self._build_ui()
        self.apply_preferences()
        self.timer = CountdownTimer(
            self.settings, self.analytics, self, TkScheduler(self),
            player=ToneAlarm(store.base_dir / "sounds", fallback=self.bell),
        )
        self.timer.refresh()
        self._load_quotes()
        self._show_next_quote(schedule_next=True)

    # ---------- layout ----------

    def _build_ui(self):
        self.style = ttk.Style(self)
        self.style.theme_use("clam")
        self.bg_label = tk.Label(self, borderwidth=0)
        self.bg_label.place(x=0, y=0, relwidth=1, relheight=1)
        self.columnconfigure(0, weight=1)
        self.rowconfigure(2, weight=1)

        header = ttk.Frame(self)
        header.grid(row=0, column=0, sticky="ew", pady=(0, 12))
        header.columnconfigure(0, weight=1)
        ttk.Label(header, text="Blue Hour", style="Title.TLabel").grid(row=0, column=0, sticky="w")
        dots = ttk.Frame(header)
        dots.grid(row=0, column=1, sticky="e")
        self.theme_var = tk.StringVar(value=self.prefs["theme"])
        for i, name in enumerate(THEMES):
            ttk.Radiobutton(dots, text=name.title(), value=name, variable=self.theme_var,
                            command=self.on_theme).grid(row=0, column=i, padx=4)
        self.quote_lbl = ttk.Label(header, text="", style="Quote.TLabel", wraplength=680, justify="left")
        self.quote_lbl.grid(row=1, column=0, columnspan=2, sticky="w", pady=(6, 0))

        modes = ttk.Frame(self)
        modes.grid(row=1, column=0, sticky="ew")
        self.mode_buttons = {}
        for i, mode in enumerate(Mode):
            modes.columnconfigure(i, weight=1)
            btn = ttk.Button(modes, text=MODE_LABELS[mode], style="Mode.TButton",
                             command=lambda m=mode: self.timer.set_mode(m))
            btn.grid(row=0, column=i, sticky="ew", padx=6)
            self.mode_buttons[mode] = btn

        card = ttk.Frame(self, style="Card.TFrame")
        card.grid(row=2, column=0, sticky="nsew", pady=12)
        card.columnconfigure(0, weight=1)
        self.time_lbl = ttk.Label(card, text="00:00", style="Big.TLabel")
        self.time_lbl.grid(row=0, column=0, pady=(24, 4))
        self.status_lbl = ttk.Label(card, text="", style="Status.TLabel")
        self.status_lbl.grid(row=1, column=0, pady=(0, 16))
        btns = ttk.Frame(card, style="Card.TFrame")
        btns.grid(row=2, column=0, pady=(0, 24))
        self.btn_start = ttk.Button(btns, text="Start", style="Primary.TButton", command=self.on_start_pause)
        self.btn_start.grid(row=0, column=0, padx=6)
        ttk.Button(btns, text="Reset", style="Secondary.TButton", command=self.on_reset).grid(row=0, column=1, padx=6)

        toolbar = ttk.Frame(self)
        toolbar.grid(row=3, column=0, sticky="ew")
        for i, (text, cmd) in enumerate([
            ("Settings", self.open_settings),
            ("Analytics", self.open_analytics),
            ("Background", self.open_background),
            ("Quit", self.on_close),
        ]):
            toolbar.columnconfigure(i, weight=1)
            ttk.Button(toolbar, text=text, style="Secondary.TButton", command=cmd).grid(row=0, column=i, sticky="ew", padx=4)

    def apply_preferences(self):
        pal = PALETTES[self.prefs["theme"]]
        family = font_family(self.prefs["font"])
        BG, SURFACE, FIELD, ACCENT, FG = pal["bg"], pal["surface"], pal["field"], pal["accent"], pal["fg"]
        style = self.style
        self.configure(bg=BG)
        self.bg_label.configure(bg=BG)
        style.configure(".", background=BG, foreground=FG, font=(family, 12))
        style.configure("TFrame", background=BG)
        style.configure("Card.TFrame", background=SURFACE)
        style.configure("TLabel", background=BG, foreground=FG, font=(family, 12))
        style.configure("TRadiobutton", background=BG, foreground=FG)
        style.configure("TCheckbutton", background=BG, foreground=FG)
        style.configure("Title.TLabel", font=(family, 13, "bold"))
        style.configure("Quote.TLabel", font=(family, 14, "italic"))
        style.configure("Big.TLabel", background=SURFACE, font=(family, 72, "bold"))
        style.configure("Status.TLabel", background=SURFACE, font=(family, 13))
        style.configure("TEntry", fieldbackground=FIELD, foreground=FG)
        style.configure("TButton", padding=(12, 10), borderwidth=0, focusthickness=0)
        style.configure("Primary.TButton", background=ACCENT, foreground="#001018")
        style.configure("Secondary.TButton", background=FIELD, foreground=FG)
        style.configure("Mode.TButton", background=SURFACE, foreground=FG)
        style.configure("ModeActive.TButton", background=ACCENT, foreground="#001018")
        style.map("Mode.TButton", foreground=[("disabled", "#6b7280")])
        self._apply_background()

    def _apply_background(self):
        bg = self.prefs["background"]
        self._bg_image = None
        self.bg_label.configure(image="")
        if not bg["path"]:
            return
        if bg["type"] == "video":
            LOGGER.info("Video backgrounds are not rendered in the desktop window")
            return
        try:
            self._bg_image = tk.PhotoImage(file=bg["path"])
        except tk.TclError as e:
            LOGGER.warning("Could not load background %s: %s", bg["path"], e)
            return
        self.bg_label.configure(image=self._bg_image)
        self.bg_label.lower()

    # ---------- render sink ----------

    def render_time(self, minutes: int, seconds: int):
        if self._closing:
            return
        self.time_lbl.configure(text=f"{minutes:02d}:{seconds:02d}")

    def set_status(self, text: str):
        if self._closing:
            return
        self.status_lbl.configure(text=text)
        self._sync_controls()

    def highlight_mode(self, mode: Mode):
        if self._closing:
            return
        for m, btn in self.mode_buttons.items():
            btn.configure(style="ModeActive.TButton" if m is mode else "Mode.TButton")

    def _sync_controls(self):
        timer = getattr(self, "timer", None)
        running = bool(timer and timer.running)
        self.btn_start.configure(text="Pause" if running else "Start")
        for btn in self.mode_buttons.values():
            btn.configure(state="disabled" if running else "normal")
        if timer and timer.status is Status.COMPLETED and timer.mode is Mode.POMODORO:
            self.render_analytics(self.analytics.last_7_days())

    # ---------- actions ----------

    def on_start_pause(self):
        self.timer.toggle()

    def on_reset(self):
        self.timer.reset()

    def on_theme(self):
        self.prefs = save_preferences(self.store, {**self.prefs, "theme": self.theme_var.get()})
        self.apply_preferences()

    def open_settings(self):
        win = tk.Toplevel(self)
        win.title("Settings")
        win.configure(bg=PALETTES[self.prefs["theme"]]["bg"], padx=16, pady=16)
        win.transient(self)
        s = self.settings
        fields = [
            ("Pomodoro (min)", "pomodoro_minutes", s.pomodoro_minutes),
            ("Short break (min)", "short_minutes", s.short_minutes),
            ("Long break (min)", "long_minutes", s.long_minutes),
        ]
        vars_ = {}
        for row, (label, key, value) in enumerate(fields):
            _, lo, hi = MINUTE_BOUNDS[key]
            ttk.Label(win, text=f"{label} [{lo}–{hi}]").grid(row=row, column=0, sticky="w", pady=4)
            vars_[key] = tk.StringVar(value=str(value))
            ttk.Entry(win, textvariable=vars_[key], width=8).grid(row=row, column=1, sticky="w", padx=(12, 0))
        ttk.Label(win, text="Alarm").grid(row=3, column=0, sticky="w", pady=4)
        alarm_var = tk.StringVar(value=s.alarm_kind)
        ttk.Combobox(win, textvariable=alarm_var, values=list(ALARM_KINDS), width=10,
                     state="readonly").grid(row=3, column=1, sticky="w", padx=(12, 0))
        ttk.Label(win, text="Font").grid(row=4, column=0, sticky="w", pady=4)
        font_var = tk.StringVar(value=self.prefs["font"])
        ttk.Combobox(win, textvariable=font_var, values=list(FONTS), width=10,
                     state="readonly").grid(row=4, column=1, sticky="w", padx=(12, 0))
        auto_var = tk.BooleanVar(value=s.auto_next)
        ttk.Checkbutton(win, text="Auto-start next session", variable=auto_var).grid(row=5, column=0, columnspan=2, sticky="w", pady=(8, 12))

        def on_save():
            raw = {k: v.get() for k, v in vars_.items()}
            raw.update(alarm_kind=alarm_var.get(), auto_next=auto_var.get())
            self.settings = Settings.from_dict(raw)
            save_settings(self.store, self.settings)
            self.timer.apply_settings(self.settings)
            if font_var.get() != self.prefs["font"]:
                self.prefs = save_preferences(self.store, {**self.prefs, "font": font_var.get()})
                self.apply_preferences()
            win.destroy()

        ttk.Button(win, text="Save", style="Primary.TButton", command=on_save).grid(row=6, column=0, columnspan=2, sticky="ew")

    def open_background(self):
        win = tk.Toplevel(self)
        win.title("Background")
        win.configure(bg=PALETTES[self.prefs["theme"]]["bg"], padx=16, pady=16)
        win.transient(self)
        bg = self.prefs["background"]
        path_var = tk.StringVar(value=bg["path"])
        type_var = tk.StringVar(value=bg["type"])
        dim_var = tk.DoubleVar(value=bg["dim"])
        ttk.Label(win, text="Image / video path").grid(row=0, column=0, sticky="w")
        ttk.Entry(win, textvariable=path_var, width=36).grid(row=1, column=0, sticky="ew")
        ttk.Button(win, text="…", style="Secondary.TButton",
                   command=lambda: path_var.set(filedialog.askopenfilename(parent=win) or path_var.get())).grid(row=1, column=1, padx=(6, 0))
        ttk.Combobox(win, textvariable=type_var, values=["image", "video"], state="readonly", width=8).grid(row=2, column=0, sticky="w", pady=8)
        ttk.Label(win, text="Dim").grid(row=3, column=0, sticky="w")
        ttk.Scale(win, from_=0.15, to=0.70, variable=dim_var).grid(row=4, column=0, columnspan=2, sticky="ew", pady=(0, 12))

        def apply(background):
            self.prefs = save_preferences(self.store, {**self.prefs, "background": background})
            self.apply_preferences()

        ttk.Button(win, text="Apply", style="Primary.TButton",
                   command=lambda: (apply({"path": path_var.get(), "type": type_var.get(), "dim": dim_var.get()}), win.destroy())).grid(row=5, column=0, sticky="ew")
        ttk.Button(win, text="Clear", style="Secondary.TButton",
                   command=lambda: (apply({}), win.destroy())).grid(row=5, column=1, sticky="ew", padx=(6, 0))

    # ---------- analytics ----------

    def open_analytics(self):
        if self.analytics_win is not None and self.analytics_win.winfo_exists():
            self.analytics_win.lift()
            self.render_analytics(self.analytics.last_7_days())
            return
        win = tk.Toplevel(self)
        win.title("Analytics")
        win.configure(bg=PALETTES[self.prefs["theme"]]["bg"], padx=14, pady=14)
        self.analytics_win = win
        nums = ttk.Frame(win)
        nums.pack(fill="x")
        self.week_minutes_lbl = ttk.Label(nums, text="")
        self.week_sessions_lbl = ttk.Label(nums, text="")
        self.today_minutes_lbl = ttk.Label(nums, text="")
        for i, lbl in enumerate((self.week_minutes_lbl, self.week_sessions_lbl, self.today_minutes_lbl)):
            nums.columnconfigure(i, weight=1)
            lbl.grid(row=0, column=i, sticky="w")
        self.chart_fig = draw_week_chart(self.analytics.last_7_days())
        self.chart_canvas = FigureCanvasTkAgg(self.chart_fig, master=win)
        self.chart_canvas.get_tk_widget().pack(fill="both", expand=True, pady=10)
        bar = ttk.Frame(win)
        bar.pack(fill="x")
        ttk.Button(bar, text="Open Chart", style="Secondary.TButton", command=self.on_analyze).pack(side="left", padx=4)
        ttk.Button(bar, text="Dashboard", style="Secondary.TButton", command=self.on_dashboard).pack(side="left", padx=4)
        ttk.Button(bar, text="Clear data", style="Secondary.TButton", command=self.on_clear_data).pack(side="right", padx=4)
        self.render_analytics(self.analytics.last_7_days())

    def render_analytics(self, days):
        if self.analytics_win is None or not self.analytics_win.winfo_exists():
            return
        self.week_minutes_lbl.configure(text=f"Week: {sum(d.minutes for d in days)} min")
        self.week_sessions_lbl.configure(text=f"Sessions: {sum(d.completed_sessions for d in days)}")
        self.today_minutes_lbl.configure(text=f"Today: {days[-1].minutes} min")
        self.chart_fig.clf()
        draw_week_chart(days, ax=self.chart_fig.add_subplot(111))
        self.chart_canvas.draw_idle()

    def on_clear_data(self):
        if not messagebox.askyesno("Clear data", "Delete all focus statistics?", parent=self.analytics_win):
            return
        self.analytics.clear_all()
        self.render_analytics(self.analytics.last_7_days())

    def on_analyze(self):
        try:
            p = multiprocessing.Process(target=run_week_chart, args=(str(self.store.base_dir),), daemon=True)
            p.start()
        except Exception as exc:
            messagebox.showerror("Analyze error", f"Failed to start chart process:\n{exc}")

    def on_dashboard(self):
        try:
            launch_dashboard(self.store.base_dir)
        except OSError as exc:
            messagebox.showerror("Dashboard error", f"Failed to start dashboard:\n{exc}")

    # ---------- quotes ----------

    def _load_quotes(self):
        lines = []
        try:
            with open(resource_path("quotes.txt"), "r", encoding="utf-8") as f:
                for line in f:
                    s = line.strip()
                    if s and not s.startswith("#"):
                        lines.append(s)
        except OSError:
            lines = []
        self.quotes = lines or [f"“{t}” — {a}" for t, a in QUOTES]
        self.quote_index = -1

    def _show_next_quote(self, schedule_next=False):
        if self.quotes:
            new_idx = random.randrange(len(self.quotes))
            if len(self.quotes) > 1 and new_idx == self.quote_index:
                new_idx = (new_idx + 1) % len(self.quotes)
            self.quote_index = new_idx
            self.quote_lbl.configure(text=self.quotes[new_idx])
        if schedule_next and not self._closing:
            self._quotes_after_id = self.after(self.quote_interval_ms, self._show_next_quote, True)

    def on_close(self):
        self._closing = True
        self.timer.reset()
        if self._quotes_after_id:
            try:
                self.after_cancel(self._quotes_after_id)
            except tk.TclError:
                pass
            self._quotes_after_id = None
        try:
            self.destroy()
        except tk.TclError:
            pass


def main(argv=None):
    ap = argparse.ArgumentParser(prog="bluehour", description="Pomodoro focus timer with daily analytics.")
    ap.add_argument("--data-dir", help="Where settings and analytics are stored (default: per-user app dir)")
    ap.add_argument("--debug", action="store_true", help="Verbose logging")
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    App(JsonStore(args.data_dir)).mainloop()


if __name__ == "__main__":
    multiprocessing.freeze_support()
    main()
