"""
Konfiguration der Anwendung.

Zweck:
    Bündelt alle einstellbaren Werte (DB-Pfad, Zeitzone für die Tages-Buckets, Log-Level,
    Grenzen der Eingabemaske) in einem Dataclass-Objekt, das an `EcoPulseService.bootstrap()`
    bzw. an die GUI übergeben wird.

Hinweise:
    Es gibt bewusst keine Umgebungsvariablen oder CLI-Parameter; Abweichungen vom Standard
    werden im Code (z. B. in Tests) über `AppConfig(...)` gesetzt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional

import pendulum


def default_db_path() -> Path:
    """
    Ermittelt den Standardpfad der SQLite-Datenbank.

    Zweck:
        Legt die Datenbank standardmäßig unterhalb des Projektordners an:
        `data/ecopulse.db`.

    Hinweise:
        Das Zielverzeichnis wird von `db.connect()` bei Bedarf erstellt.
    """

    here = Path(__file__).resolve()
    project_root = here.parents[1]
    return project_root / "data" / "ecopulse.db"


def local_timezone() -> tzinfo:
    """Gibt die lokale Zeitzone des Hosts zurück (pendulum fällt notfalls auf UTC zurück)."""

    return pendulum.local_timezone()


@dataclass(slots=True)
class AppConfig:
    """
    Einstellungen für Service und GUI.

    Attribute:
        db_path (str | None): Pfad zur SQLite-Datei; `None` → `default_db_path()`.
        reset_db (bool): Tabelle beim Start löschen (nur Demo/Test).
        timezone (str | None): IANA-Name für die Tages-Buckets; `None` → lokale Zeitzone.
        log_level (int): Level für `setup_logging`.
        default_impact (float): Vorbelegung des Sliders.
        min_impact / max_impact / impact_step (float): Grenzen und Raster des Sliders.
    """

    db_path: Optional[str] = None
    reset_db: bool = False
    timezone: Optional[str] = None
    log_level: int = logging.INFO
    default_impact: float = 5.0
    min_impact: float = 0.1
    max_impact: float = 30.0
    impact_step: float = 0.1

    def __post_init__(self) -> None:
        if not (0 < self.min_impact <= self.default_impact <= self.max_impact):
            raise ValueError("default_impact muss zwischen min_impact und max_impact liegen")
        if self.impact_step <= 0:
            raise ValueError("impact_step muss > 0 sein")

    def resolve_timezone(self) -> tzinfo:
        """
        Liefert die Zeitzone, nach der Aktivitäten in Kalendertage einsortiert werden.

        Ausnahmen:
            pendulum.tz.exceptions.InvalidTimezone: Bei unbekanntem IANA-Namen.
        """

        if self.timezone:
            return pendulum.timezone(self.timezone)
        return local_timezone()
