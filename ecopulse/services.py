from __future__ import annotations

# -----------------------------------------------------------------------------
# Service-Schicht (Anwendungsfälle + Diagramm-Serien)
# -----------------------------------------------------------------------------
# Diese Schicht kapselt die Anwendungsfälle und stellt eine stabile API für die UI bereit.
#
# Architektur-Regel:
# - UI spricht nur mit Services.
# - Services orchestrieren Use-Cases und nutzen Repository + Live-Query.
# - Das Repository kapselt SQL und nutzt `DatabaseProtocol` für den DB-Zugriff.
#
# Ausnahme: `EcoPulseService.bootstrap()` fungiert als „Composition Root“.
# Dort werden DB-Verbindung/Schema initialisiert und Repository/Live-Query instanziiert.
# -----------------------------------------------------------------------------


"""Service-Schicht des EcoPulse-Dashboards.

Zweck:
    Kapselt die Use-Cases der Anwendung (Aktivität anlegen, löschen, alles löschen,
    Live-Sicht abonnieren) und liefert die Diagramm-Serien.

Architektur:
    - UI → Services → Live-Query/Repository → Datenbank
"""

import logging
from datetime import tzinfo
from typing import Any, Iterable, Optional, Sequence

from ecopulse.aggregation import SeriesPoint, aggregate
from ecopulse.config import AppConfig
from ecopulse.db import connect, create_schema
from ecopulse.db_protocol import DatabaseProtocol
from ecopulse.live_query import LiveActivityQuery, Subscriber, Subscription
from ecopulse.models import Activity
from ecopulse.repositories import ActivityRepository, Clock

logger = logging.getLogger(__name__)


class EcoPulseService:
    """
    Fassade für alle Anwendungsfälle der Anwendung.

    Zweck:
        Stellt eine stabile API für die UI bereit. Die GUI kennt nur diese Klasse und
        greift weder direkt auf das Repository noch auf SQL zu.

    Hinweise:
        - `bootstrap()` erzeugt DB + Repository + Live-Query (Composition Root).
        - Mutationen delegieren an das Repository; die Live-Query wird dadurch automatisch
          aktualisiert und benachrichtigt ihre Abonnenten.
    """

    def __init__(
        self,
        db: DatabaseProtocol,
        repo: ActivityRepository,
        live: LiveActivityQuery,
        *,
        tz: Optional[tzinfo] = None,
        owns_db: bool = False,
    ) -> None:
        """
        Initialisiert den Service.

        Parameter:
            db (DatabaseProtocol): Datenbank-Adapter.
            repo (ActivityRepository): Record Store.
            live (LiveActivityQuery): Sortierte, beobachtbare Sicht.
            tz (tzinfo | None): Zeitzone für die Tages-Buckets (`None` → UTC).
            owns_db (bool): Wenn True, wird die DB bei `close()` geschlossen.
        """

        self._db = db
        self._owns_db = owns_db
        self._tz = tz

        self.repo = repo
        self.live = live

    # -----------------------------
    # Factory helpers
    # -----------------------------
    @classmethod
    def from_db(
        cls,
        db: DatabaseProtocol,
        *,
        owns_db: bool = False,
        clock: Optional[Clock] = None,
        tz: Optional[tzinfo] = None,
    ) -> "EcoPulseService":
        """
        Erzeugt einen Service für ein bereits existierendes DB-Objekt.

        Parameter:
            db (DatabaseProtocol): Geöffnete Datenbank (Schema muss existieren).
            owns_db (bool): Ob der Service die DB später selbst schließen soll.
            clock (Callable | None): Zeitquelle für `created_at` (Tests).
            tz (tzinfo | None): Zeitzone für die Tages-Buckets.
        """

        repo = ActivityRepository(db, clock=clock)
        return cls(db=db, repo=repo, live=LiveActivityQuery(repo), tz=tz, owns_db=owns_db)

    @classmethod
    def bootstrap(
        cls,
        *,
        db_path: Optional[str] = None,
        reset_db: bool = False,
        config: Optional[AppConfig] = None,
        clock: Optional[Clock] = None,
    ) -> "EcoPulseService":
        """
        Bootstrapt die Anwendung (DB öffnen + Schema anlegen).

        Parameter:
            db_path (str | None): Optionaler Pfad zur SQLite-Datei (überschreibt `config.db_path`).
            reset_db (bool): Wenn True, wird die Tabelle vorher gelöscht (Demo/Test).
            config (AppConfig | None): Einstellungen; `None` → Standardwerte.
            clock (Callable | None): Zeitquelle (Tests).

        Hinweise:
            Für Persistenz über Neustarts sollte `reset_db=False` bleiben (Standard im UI).
        """

        cfg = config or AppConfig()
        path = db_path if db_path is not None else cfg.db_path
        db = connect(path)
        try:
            create_schema(db, reset_db=reset_db or cfg.reset_db)
        except Exception:
            db.close()
            raise
        logger.info("EcoPulse service ready (db=%s)", path or "default")
        return cls.from_db(db, owns_db=True, clock=clock, tz=cfg.resolve_timezone())

    def close(self) -> None:
        """
        Löst die Live-Query und schließt die DB-Verbindung (nur wenn der Service sie besitzt).
        """

        self.live.close()
        if self._owns_db:
            self._db.close()

    # -----------------------------
    # Use-Cases
    # -----------------------------
    def add_activity(self, name: str, category: Any, carbon_impact: float) -> Activity:
        """
        Legt eine neue Aktivität an.

        Ausnahmen:
            ValidationError: Bei ungültigen Feldern.
            StorageError: Wenn das Speichern fehlschlägt.
        """

        return self.repo.insert(name, category, carbon_impact)

    def delete_activity(self, activity_id: str) -> None:
        self.repo.delete_one(activity_id)

    def delete_activity_at(self, index: int) -> Optional[Activity]:
        """
        Löscht die Aktivität an Position `index` der aktuell angezeigten Sicht.

        Zweck:
            Übersetzt die Listen-Position (Tabellenzeile) in die ID des Datensatzes.

        Rückgabe:
            Activity | None: Der gelöschte Datensatz oder `None`, wenn der Index (z. B. wegen
            einer veralteten Ansicht) nicht mehr existiert.
        """

        # Auflösen und Löschen unter dem Repository-Lock, damit kein anderer Thread dazwischen schreibt.
        with self.repo.lock:
            view = self.live.snapshot()
            if index < 0 or index >= len(view):
                logger.debug("delete_activity_at(%s): index outside current view (%s)", index, len(view))
                return None
            target = view[index]
            self.repo.delete_one(target.activity_id)
        return target

    def delete_activities_at(self, indices: Iterable[int]) -> list[Activity]:
        """
        Löscht mehrere Positionen der aktuellen Sicht (Mehrfachauswahl).

        Die Positionen werden vor dem ersten Löschen gegen dieselbe Sicht aufgelöst.
        """

        with self.repo.lock:
            view = self.live.snapshot()
            targets = [view[i] for i in sorted(set(indices)) if 0 <= i < len(view)]
            for a in targets:
                self.repo.delete_one(a.activity_id)
        return targets

    def clear_all(self) -> None:
        self.repo.delete_all()

    # -----------------------------
    # Live-Sicht
    # -----------------------------
    def subscribe(self, callback: Subscriber) -> Subscription:
        return self.live.subscribe(callback)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.live.unsubscribe(subscription)

    def list_activities(self) -> list[Activity]:
        """Aktuelle Sicht, neueste zuerst."""

        return self.live.snapshot()

    # -----------------------------
    # Plot data (UI does matplotlib)
    # -----------------------------
    def get_series(self, records: Optional[Sequence[Activity]] = None) -> list[SeriesPoint]:
        """
        Datenserie für das Balkendiagramm (Impact pro Tag und Kategorie).

        Parameter:
            records: Bereits vorliegende Sicht (z. B. aus einem Subscriber-Callback);
                `None` → aktuelle Sicht der Live-Query.
        """

        data = self.live.snapshot() if records is None else records
        if self._tz is None:
            return aggregate(data)
        return aggregate(data, tz=self._tz)
