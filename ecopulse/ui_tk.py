from __future__ import annotations

# -----------------------------------------------------------------------------
# UI layer (Tkinter + Matplotlib)
# -----------------------------------------------------------------------------
# Verantwortlich für:
# - Erfassen neuer Aktivitäten (Dialog mit Name/Kategorie/Impact-Slider)
# - Löschen einzelner Aktivitäten und „Alles löschen“
# - Anzeige der Liste (neueste zuerst) und des Balkendiagramms pro Tag/Kategorie
#
# Wichtig (Architekturregel):
# Die UI greift nicht direkt auf SQL/DB zu, sondern verwendet ausschließlich `EcoPulseService`.
# Neu gezeichnet wird nur über den Live-Query-Callback (`_on_records_changed`).
# -----------------------------------------------------------------------------


import logging
from tkinter import DoubleVar, StringVar, Tk, Toplevel, messagebox, ttk
from typing import Optional, Sequence

import matplotlib
matplotlib.use("TkAgg")
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
import matplotlib.dates as mdates

from ecopulse.aggregation import format_impact, stack_by_category, total_impact
from ecopulse.config import AppConfig
from ecopulse.db import StorageError
from ecopulse.models import Activity, Category
from ecopulse.services import EcoPulseService
from ecopulse.validation import ValidationError, parse_category, parse_impact, parse_name, snap_to_step

logger = logging.getLogger(__name__)

CATEGORY_COLORS: dict[Category, str] = {
    Category.TRANSPORT: "#1f77b4",
    Category.FOOD: "#ff7f0e",
    Category.HOME: "#2ca02c",
    Category.ENERGY: "#d62728",
}

EMPTY_STATE_MESSAGE = "Noch keine Aktivitäten erfasst.\nDaten eingeben, um das Diagramm zu erzeugen"


class EcoPulseApp:
    """
    Tkinter-Hauptfenster (UI-Schicht).

    Zweck:
        Stellt Liste, Diagramm und Eingabedialog bereit und leitet Nutzeraktionen
        (Anlegen, Löschen, Alles löschen) an den Service weiter.

    Ablauf:
        1) Service bootstrappen (DB öffnen + Schema sicherstellen)
        2) Widgets aufbauen
        3) Live-Sicht abonnieren; der erste Callback kommt sofort und füllt Liste/Diagramm

    Hinweise:
        Fehler aus Service/Repository (`ValidationError`, `StorageError`) werden als
        wegklickbare Fehlermeldung angezeigt.
    """

    def __init__(self, root: Tk, config: Optional[AppConfig] = None) -> None:
        self.root = root
        self.config = config or AppConfig()
        root.title("EcoPulse – CO2-Tagebuch")

        self.svc = EcoPulseService.bootstrap(config=self.config)

        # UI state: aktuell angezeigte Sicht (neueste zuerst)
        self._records: list[Activity] = []

        self._build_ui()
        self._subscription = self.svc.subscribe(self._on_records_changed)

    # -----------------------------
    # UI build
    # -----------------------------
    def _build_ui(self) -> None:
        """
        Erzeugt und arrangiert alle Widgets der Oberfläche.

        Zweck:
            Links Aktionen + Liste, rechts das Diagramm.
        """

        self.root.geometry("1100x620")
        self.root.minsize(900, 500)

        # PanedWindow: links Liste, rechts Diagramm
        paned = ttk.Panedwindow(self.root, orient="horizontal")
        paned.pack(fill="both", expand=True)

        left = ttk.Frame(paned, padding=12)
        right = ttk.Frame(paned, padding=8)
        paned.add(left, weight=2)
        paned.add(right, weight=3)

        left.columnconfigure(0, weight=1)

        btns = ttk.Frame(left)
        btns.grid(row=0, column=0, sticky="ew", pady=(0, 8))
        ttk.Button(btns, text="Neue Aktivität…", command=self.on_add_dialog).grid(row=0, column=0, padx=(0, 6))
        self.btn_delete = ttk.Button(btns, text="Löschen", command=self.on_delete_selected)
        self.btn_delete.grid(row=0, column=1, padx=(0, 6))
        self.btn_clear = ttk.Button(btns, text="Alles löschen", command=self.on_clear_all)
        self.btn_clear.grid(row=0, column=2, padx=(0, 6))
        ttk.Button(btns, text="Schließen", command=self.on_close).grid(row=0, column=3)

        self.summary_var = StringVar(value="")
        ttk.Label(left, textvariable=self.summary_var, justify="left").grid(row=1, column=0, sticky="w", pady=(0, 6))

        ttk.Label(left, text="Letzte Einträge").grid(row=2, column=0, sticky="w")
        self.table = ttk.Treeview(
            left,
            columns=("name", "category", "impact"),
            show="headings",
            height=14,
        )
        for col, title, width, anchor in [
            ("name", "Aktivität", 220, "w"),
            ("category", "Kategorie", 100, "w"),
            ("impact", "CO2", 80, "e"),
        ]:
            self.table.heading(col, text=title)
            self.table.column(col, width=width, anchor=anchor)
        self.table.grid(row=3, column=0, sticky="nsew")
        left.rowconfigure(3, weight=1)
        self.table.bind("<Delete>", lambda _e: self.on_delete_selected())
        self.table.bind("<BackSpace>", lambda _e: self.on_delete_selected())

        # ---------------- Right side: chart ----------------
        right.rowconfigure(0, weight=1)
        right.columnconfigure(0, weight=1)

        self._fig = Figure(figsize=(5, 3.2), dpi=100)
        self._ax = self._fig.add_subplot(111)
        self._canvas = FigureCanvasTkAgg(self._fig, master=right)
        self._canvas.get_tk_widget().grid(row=0, column=0, sticky="nsew")

    # -----------------------------
    # Live view
    # -----------------------------
    def _on_records_changed(self, records: Sequence[Activity]) -> None:
        """
        Callback der Live-Query: Liste, Kopfzeile und Diagramm neu aufbauen.
        """

        self._records = list(records)

        for item in self.table.get_children():
            self.table.delete(item)
        for a in self._records:
            self.table.insert("", "end", values=(a.name, a.category.value, format_impact(a.carbon_impact)))

        has_data = bool(self._records)
        self.btn_clear.state(["!disabled"] if has_data else ["disabled"])
        self.btn_delete.state(["!disabled"] if has_data else ["disabled"])
        self.summary_var.set(
            f"{len(self._records)} Einträge · gesamt {format_impact(total_impact(self._records))} CO2"
        )

        self._safe_update_plot()

    # -----------------------------
    # Chart
    # -----------------------------
    def _clear_ax_with_message(self, ax, msg: str) -> None:
        """
        Leert eine Matplotlib-Achse und zeigt eine Statusmeldung.

        Zweck:
            Leerzustand („keine Daten“) lesbar im Plotbereich darstellen.
        """

        ax.clear()
        ax.text(0.5, 0.5, msg, ha="center", va="center", transform=ax.transAxes)
        ax.set_xticks([])
        ax.set_yticks([])

    def _safe_update_plot(self) -> None:
        try:
            self._update_plot()
        except Exception as exc:
            logger.exception("Plot update failed")
            messagebox.showerror("Plot-Fehler", str(exc))

    def _update_plot(self) -> None:
        """
        Zeichnet das gestapelte Balkendiagramm (kg CO2 pro Tag, Farbe je Kategorie).

        Hinweise:
            Die Daten kommen aus dem Service (`get_series`), die Darstellung passiert hier.
        """

        series = self.svc.get_series(self._records)
        self._ax.clear()
        if not series:
            self._clear_ax_with_message(self._ax, EMPTY_STATE_MESSAGE)
        else:
            days, values = stack_by_category(series)
            bottoms = [0.0] * len(days)
            for category, ys in values.items():
                self._ax.bar(
                    days,
                    ys,
                    width=0.8,
                    bottom=bottoms,
                    color=CATEGORY_COLORS[category],
                    label=category.value,
                )
                bottoms = [b + y for b, y in zip(bottoms, ys)]
            self._ax.set_title("Analyse pro Tag (kg CO2)")
            self._ax.set_ylabel("kg CO2")
            self._ax.xaxis.set_major_locator(mdates.DayLocator())
            self._ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m-%d"))
            self._ax.tick_params(axis="x", rotation=30)
            self._ax.legend(loc="best", title="Kategorie")
        self._fig.tight_layout()
        self._canvas.draw()

    # -----------------------------
    # Actions
    # -----------------------------
    def on_add_dialog(self) -> None:
        """
        Öffnet den Dialog „Neuer Eintrag“.

        Zweck:
            Erfasst Name, Kategorie und Impact (Slider 0.1 .. 30.0, Schritt 0.1) und speichert
            die Aktivität über den Service. „Speichern“ ist deaktiviert, solange der Name leer ist.
        """

        cfg = self.config
        win = Toplevel(self.root)
        win.title("Neuer Eintrag")
        win.transient(self.root)

        v_name = StringVar(value="")
        v_category = StringVar(value=Category.TRANSPORT.value)
        v_impact = DoubleVar(value=cfg.default_impact)
        v_impact_label = StringVar(value=f"{cfg.default_impact:.1f} kg CO2")

        frm = ttk.Frame(win, padding=12)
        frm.pack(fill="both", expand=True)
        frm.columnconfigure(1, weight=1)

        ttk.Label(frm, text="Aktivität (z. B. Flug, Abendessen …)").grid(row=0, column=0, sticky="w", pady=2)
        name_entry = ttk.Entry(frm, textvariable=v_name)
        name_entry.grid(row=0, column=1, sticky="ew", pady=2)

        ttk.Label(frm, text="Kategorie").grid(row=1, column=0, sticky="w", pady=2)
        ttk.Combobox(
            frm,
            textvariable=v_category,
            values=[c.value for c in Category],
            state="readonly",
        ).grid(row=1, column=1, sticky="ew", pady=2)

        ttk.Label(frm, text="Geschätzter Impact").grid(row=2, column=0, sticky="w", pady=2)
        ttk.Label(frm, textvariable=v_impact_label, font=("TkDefaultFont", 10, "bold")).grid(
            row=2, column=1, sticky="w", pady=2
        )

        def _on_slide(_value: str) -> None:
            snapped = snap_to_step(v_impact.get(), cfg.impact_step)
            v_impact.set(snapped)
            v_impact_label.set(f"{snapped:.1f} kg CO2")

        ttk.Scale(
            frm,
            from_=cfg.min_impact,
            to=cfg.max_impact,
            variable=v_impact,
            orient="horizontal",
            command=_on_slide,
        ).grid(row=3, column=0, columnspan=2, sticky="ew", pady=(2, 8))

        btns = ttk.Frame(frm)
        btns.grid(row=4, column=0, columnspan=2, sticky="e", pady=(10, 0))

        def _save() -> None:
            try:
                name = parse_name(v_name.get())
                category = parse_category(v_category.get())
                impact = parse_impact(
                    v_impact.get(),
                    min_value=cfg.min_impact,
                    max_value=cfg.max_impact,
                    step=cfg.impact_step,
                )
                self.svc.add_activity(name, category, impact)
                win.destroy()
            except (ValidationError, StorageError) as exc:
                messagebox.showerror("Fehler", str(exc), parent=win)

        save_btn = ttk.Button(btns, text="Speichern", command=_save)
        save_btn.grid(row=0, column=0, padx=(0, 6))
        ttk.Button(btns, text="Abbrechen", command=win.destroy).grid(row=0, column=1)

        def _toggle_save(*_args: object) -> None:
            save_btn.state(["!disabled"] if v_name.get().strip() else ["disabled"])

        v_name.trace_add("write", _toggle_save)
        _toggle_save()
        name_entry.focus_set()

    def on_delete_selected(self) -> None:
        """
        Event-Handler: ausgewählte Zeilen löschen.

        Zweck:
            Übersetzt die Tabellenzeilen in Positionen der angezeigten Sicht; der Service
            löst diese in IDs auf.
        """

        sel = self.table.selection()
        if not sel:
            return
        indices = [self.table.index(item) for item in sel]
        try:
            self.svc.delete_activities_at(indices)
        except StorageError as exc:
            messagebox.showerror("Fehler", str(exc))

    def on_clear_all(self) -> None:
        """
        Event-Handler: alle Aktivitäten löschen (mit Bestätigung).
        """

        if not self._records:
            return
        if not messagebox.askyesno("Bestätigung", f"Wirklich alle {len(self._records)} Einträge löschen?"):
            return
        try:
            self.svc.clear_all()
        except StorageError as exc:
            messagebox.showerror("Fehler", str(exc))

    def on_close(self) -> None:
        """
        Schließt die Anwendung kontrolliert.

        Zweck:
            Beendet das Abonnement, schließt Service/DB und danach das Tkinter-Fenster.
        """

        try:
            self.svc.unsubscribe(self._subscription)
            self.svc.close()
        finally:
            self.root.destroy()


def run(config: Optional[AppConfig] = None) -> None:
    """
    Startet die Tkinter-GUI (Hilfsfunktion für main.py).
    """

    root = Tk()
    try:
        ttk.Style().theme_use("clam")
    except Exception:
        logger.debug("Theme 'clam' not available, using default")
    app = EcoPulseApp(root, config)
    root.protocol("WM_DELETE_WINDOW", app.on_close)
    root.mainloop()
