from __future__ import annotations

# -----------------------------------------------------------------------------
# Repository layer (Persistence)
# -----------------------------------------------------------------------------
# Das Repository kapselt *sämtliche* SQL-Zugriffe und stellt die CRUD-Operationen
# für Aktivitäten bereit (insert / delete_one / delete_all / list).
# Es enthält bewusst keine GUI-Logik und keine Sortier-/Aggregationslogik.
#
# Abhängigkeiten:
# - Das Repository kennt nur `DatabaseProtocol` (ein kleines Interface/Protocol).
# - Die Live-Query (`live_query.py`) registriert sich als Listener und wird nach
#   jeder Änderung synchron benachrichtigt.
# -----------------------------------------------------------------------------


import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ecopulse.db import StorageError
from ecopulse.db_protocol import DatabaseProtocol
from ecopulse.models import Activity
from ecopulse.validation import parse_category, parse_name, validate_carbon_impact

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ChangeListener = Callable[[], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    """
    Konvertiert einen Zeitpunkt in das ISO-Format für die Datenbank.

    Zweck:
        Zeitstempel werden als TEXT in UTC mit fester Mikrosekunden-Genauigkeit gespeichert,
        damit die lexikografische Sortierung in SQLite der zeitlichen entspricht.
    """

    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_activity(r: Any) -> Activity:
    return Activity(
        activity_id=str(r["activity_id"]),
        name=str(r["name"]),
        category=parse_category(r["category"]),
        carbon_impact=float(r["carbon_impact"]),
        created_at=datetime.fromisoformat(str(r["created_at"])),
        seq=int(r["seq"]),
    )


class ActivityRepository:
    """
    Repository für `Activity` (Record Store).

    Zweck:
        Kapselt SQL-Zugriffe auf die Tabelle `activity` und garantiert, dass jede
        Änderung vor der Rückkehr committet ist.

    Hinweise:
        - Alle Mutationen und Lesezugriffe laufen unter einem gemeinsamen Lock; Listener werden
          noch innerhalb des Locks aufgerufen, damit kein Beobachter einen Zwischenzustand sieht.
        - Die Live-Query verwendet dasselbe Lock (`lock`), es gibt also nur eine Lock-Reihenfolge.
        - `created_at` ist in Einfüge-Reihenfolge monoton nicht fallend: geht die Uhr
          zurück, wird der zuletzt vergebene Zeitstempel erneut verwendet.
    """

    def __init__(self, db: DatabaseProtocol, *, clock: Optional[Clock] = None) -> None:
        """
        Initialisiert das Repository.

        Parameter:
            db (DatabaseProtocol): Datenbank-Adapter, über den alle SQL-Zugriffe laufen.
            clock (Callable | None): Zeitquelle (Default: aktuelle UTC-Zeit).
        """

        self.db = db
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self._listeners: list[ChangeListener] = []
        self._last_created_at: Optional[datetime] = None
        self._last_loaded = False

    @property
    def lock(self) -> threading.RLock:
        """Gemeinsames Lock für Mutationen, Lesezugriffe und abhängige Sichten (Live-Query)."""

        return self._lock

    # -----------------------------
    # Listener
    # -----------------------------
    def add_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                # Die Änderung ist bereits committet; ein defekter Listener darf sie nicht "zurücknehmen".
                logger.exception("Change listener %r failed", listener)

    # -----------------------------
    # Helpers
    # -----------------------------
    def _next_timestamp(self) -> datetime:
        if not self._last_loaded:
            cursor = self.db.execute("SELECT MAX(created_at) AS m FROM activity")
            row = cursor.fetchone()
            if row is not None and row["m"]:
                self._last_created_at = datetime.fromisoformat(str(row["m"]))
            self._last_loaded = True

        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc)
        if self._last_created_at is not None and now < self._last_created_at:
            logger.debug("Clock went backwards (%s < %s), reusing last timestamp", now, self._last_created_at)
            now = self._last_created_at
        return now

    def _rollback_quietly(self) -> None:
        try:
            self.db.rollback()
        except StorageError:
            logger.warning("Rollback failed after storage error", exc_info=True)

    # -----------------------------
    # CRUD
    # -----------------------------
    def insert(self, name: str, category: Any, carbon_impact: float) -> Activity:
        """
        Legt eine neue Aktivität an (INSERT + COMMIT).

        Zweck:
            Vergibt ID und Zeitstempel, speichert den Datensatz dauerhaft und benachrichtigt
            anschließend alle Listener.

        Parameter:
            name (str): Anzeigename (darf nicht leer sein; wird unverändert gespeichert).
            category (Category | str): Kategorie.
            carbon_impact (float): Impact in kg CO2e (endlich, > 0).

        Rückgabe:
            Activity: Der gespeicherte Datensatz inkl. `seq`.

        Ausnahmen:
            ValidationError: Bei leerem Namen, unbekannter Kategorie oder ungültigem Impact.
                Die Datenbank bleibt in diesem Fall unverändert.
            StorageError: Wenn das Schreiben fehlschlägt (die Transaktion wird zurückgerollt).
        """

        checked_name = parse_name(name)
        cat = parse_category(category)
        impact = validate_carbon_impact(carbon_impact)

        with self._lock:
            created_at = self._next_timestamp()
            activity = Activity(
                activity_id=uuid.uuid4().hex,
                name=checked_name,
                category=cat,
                carbon_impact=impact,
                created_at=created_at,
            )
            try:
                cursor = self.db.execute(
                    """
                    INSERT INTO activity(activity_id, name, category, carbon_impact, created_at)
                    VALUES(?,?,?,?,?)
                    """,
                    (
                        activity.activity_id,
                        activity.name,
                        activity.category.value,
                        activity.carbon_impact,
                        _iso(activity.created_at),
                    ),
                )
                self.db.commit()
            except StorageError:
                self._rollback_quietly()
                raise

            self._last_created_at = created_at
            stored = Activity(
                activity_id=activity.activity_id,
                name=activity.name,
                category=activity.category,
                carbon_impact=activity.carbon_impact,
                created_at=activity.created_at,
                seq=int(cursor.lastrowid) if getattr(cursor, "lastrowid", None) else None,
            )
            logger.info(
                "Inserted activity %s (%s, %s, %.1f kg)",
                stored.activity_id,
                stored.name,
                stored.category.value,
                stored.carbon_impact,
            )
            self._notify()
            return stored

    def delete_one(self, activity_id: str) -> None:
        """
        Löscht eine Aktivität anhand ihrer ID.

        Hinweise:
            Eine nicht (mehr) vorhandene ID ist kein Fehler: Löschungen kommen aus einer
            Ansicht, die um einen Benachrichtigungszyklus veraltet sein kann.

        Ausnahmen:
            StorageError: Wenn das Löschen fehlschlägt.
        """

        with self._lock:
            try:
                cursor = self.db.execute("DELETE FROM activity WHERE activity_id=?", (activity_id,))
                self.db.commit()
            except StorageError:
                self._rollback_quietly()
                raise

            if not getattr(cursor, "rowcount", 0):
                logger.debug("delete_one(%s): no such activity, nothing to do", activity_id)
                return
            logger.info("Deleted activity %s", activity_id)
            self._notify()

    def delete_all(self) -> None:
        """
        Löscht alle Aktivitäten (Bulk Clear).

        Hinweise:
            Gelingt auch bei leerer Tabelle. Fehler der Speicherschicht werden als `StorageError` weitergegeben
            (kein "best effort"-Clear).
        """

        with self._lock:
            try:
                cursor = self.db.execute("DELETE FROM activity")
                self.db.commit()
            except StorageError:
                self._rollback_quietly()
                raise

            logger.info("Cleared all activities (%s rows)", getattr(cursor, "rowcount", "?"))
            self._notify()

    def list(self) -> list[Activity]:
        """
        Listet alle aktuellen Aktivitäten.

        Rückgabe:
            list[Activity]: Alle Datensätze; die Reihenfolge ist nicht festgelegt
            (Sortierung ist Aufgabe der Live-Query).
        """

        with self._lock:
            cursor = self.db.execute("SELECT * FROM activity")
            rows = cursor.fetchall()
        return [_row_to_activity(r) for r in rows]

    def get(self, activity_id: str) -> Optional[Activity]:
        with self._lock:
            cursor = self.db.execute("SELECT * FROM activity WHERE activity_id=?", (activity_id,))
            r = cursor.fetchone()
        if not r:
            return None
        return _row_to_activity(r)

    def count(self) -> int:
        with self._lock:
            cursor = self.db.execute("SELECT COUNT(*) AS n FROM activity")
            row = cursor.fetchone()
        return int(row["n"])
