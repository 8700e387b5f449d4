"""
Startpunkt der Anwendung (EcoPulse-Dashboard).

Zweck:
    Richtet das Logging ein und startet die Tkinter-GUI. Die Oberfläche kapselt alle
    Interaktionen und ruft dafür ausschließlich die Service-Schicht auf.

Ausführung:
    python -m ecopulse.main
"""

from __future__ import annotations

try:
    import tkinter  # noqa: F401
except ModuleNotFoundError:
    raise SystemExit(
        "Tkinter fehlt. Unter Linux installiere z.B. 'python3-tk'. "
        "Unter Windows/macOS Python neu installieren und Tcl/Tk mit installieren."
    )

from ecopulse.config import AppConfig
from ecopulse.logs import setup_logging


def main() -> None:
    config = AppConfig()
    setup_logging(config.log_level)

    from ecopulse.ui_tk import run

    run(config)


if __name__ == "__main__":
    main()
