from __future__ import annotations

# -----------------------------------------------------------------------------
# Infrastructure: SQLite DB
# -----------------------------------------------------------------------------
# Enthält:
# - StorageError: einheitlicher Fehler der Speicherschicht
# - SQLiteDatabase: dünner Adapter um sqlite3.Connection (für DatabaseProtocol)
# - connect(): öffnet DB (Default-Pfad: siehe config.default_db_path)
# - create_schema(): legt Tabelle/Index an (optional reset_db für Demo/Test)
#
# Repositories typisieren gegen `DatabaseProtocol` (typing.Protocol), nicht gegen sqlite3.
# -----------------------------------------------------------------------------


"""SQLite-Infrastruktur.

Zweck:
    Stellt die konkrete SQLite-Implementierung bereit, die von der Anwendung genutzt wird.
    Repositories und Services typisieren dabei gegen `DatabaseProtocol` (siehe `db_protocol.py`).

Hinweise:
    Jeder `sqlite3.Error` wird im Adapter protokolliert und als `StorageError` weitergereicht.
    Damit müssen höhere Schichten `sqlite3` nicht kennen.
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Optional, Sequence

from ecopulse.config import default_db_path
from ecopulse.db_protocol import DatabaseProtocol
from ecopulse.models import Category

__all__ = [
    "DatabaseProtocol",
    "SQLiteDatabase",
    "StorageError",
    "connect",
    "create_schema",
]

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """
    Fehler beim Zugriff auf die Speicherschicht (Datei, Quota, geschlossene Verbindung ...).

    Hinweise:
        Die ursprüngliche Ausnahme ist über `__cause__` verfügbar.
    """


class SQLiteDatabase:
    """
    SQLite-Adapter passend zu `DatabaseProtocol`.

    Zweck:
        Kapselt eine `sqlite3.Connection` und bietet nur die Methoden an, die in
        Repository-/Service-Schicht benötigt werden.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- DatabaseProtocol ---
    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """
        Führt ein einzelnes SQL-Statement aus.

        Parameter:
            sql (str): SQL-Statement (ggf. mit Platzhaltern `?`).
            params (Sequence[Any]): Parameterwerte für die Platzhalter.

        Rückgabe:
            Any: Cursor-ähnliches Objekt (bei sqlite3: `sqlite3.Cursor`).

        Ausnahmen:
            StorageError: Bei jedem Fehler der SQLite-Schicht.
        """

        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            logger.error("SQLite execute() error: %s\nQuery: %s\nParams: %s", exc, sql, params)
            raise StorageError(str(exc)) from exc

    def executescript(self, sql_script: str) -> None:
        try:
            self._conn.executescript(sql_script)
        except sqlite3.Error as exc:
            logger.error("SQLite executescript() error: %s", exc)
            raise StorageError(str(exc)) from exc

    def commit(self) -> None:
        """
        Bestätigt die aktuelle Transaktion (COMMIT).
        """

        try:
            self._conn.commit()
        except sqlite3.Error as exc:
            logger.error("SQLite commit() error: %s", exc)
            raise StorageError(str(exc)) from exc

    def rollback(self) -> None:
        """
        Setzt die aktuelle Transaktion zurück (ROLLBACK).
        """

        try:
            self._conn.rollback()
        except sqlite3.Error as exc:
            logger.error("SQLite rollback() error: %s", exc)
            raise StorageError(str(exc)) from exc

    def close(self) -> None:
        self._conn.close()


def connect(db_path: Optional[str | os.PathLike[str]] = None) -> SQLiteDatabase:
    """
    Öffnet eine SQLite-Verbindung und gibt einen `SQLiteDatabase`-Adapter zurück.

    Zweck:
        Erstellt eine Verbindung zur Datenbankdatei und setzt `row_factory` auf
        `sqlite3.Row`, damit das Repository spaltenbasiert zugreifen kann.

    Parameter:
        db_path (str | PathLike | None): Optionaler Pfad zur Datenbankdatei.

    Rückgabe:
        SQLiteDatabase: Adapter-Objekt, das `DatabaseProtocol` erfüllt.

    Ausnahmen:
        StorageError: Wenn die Datei nicht geöffnet werden kann.

    Hinweise:
        `check_same_thread=False`, weil das Repository alle Schreibzugriffe über ein
        eigenes Lock serialisiert.
    """

    path = Path(db_path) if db_path is not None else default_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(path, check_same_thread=False)
    except sqlite3.Error as exc:
        logger.error("SQLite connect() error: %s (path=%s)", exc, path)
        raise StorageError(str(exc)) from exc
    conn.row_factory = sqlite3.Row
    logger.debug("Opened database %s", path)
    return SQLiteDatabase(conn)


def create_schema(db: DatabaseProtocol, reset_db: bool = False) -> None:
    """
    Legt das Datenbankschema (Tabelle/Index) an.

    Zweck:
        Erstellt die Tabelle `activity` inklusive Index auf `created_at`. Optional kann das
        Schema für einen reproduzierbaren Demo-Lauf vorher zurückgesetzt werden.

    Parameter:
        db (DatabaseProtocol): Datenbank-Adapter.
        reset_db (bool): Wenn True, wird die bestehende Tabelle vorher gelöscht.

    Hinweise:
        Es gibt genau eine Schema-Version, daher keine Migrationen.
    """

    if reset_db:
        db.executescript("DROP TABLE IF EXISTS activity;")

    categories = ", ".join(f"'{c.value}'" for c in Category)
    db.executescript(
        f"""
        -- seq: Einfüge-Reihenfolge (Tie-Breaker bei gleichem Zeitstempel)
        CREATE TABLE IF NOT EXISTS activity(
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            activity_id TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL CHECK(length(trim(name)) > 0),
            category TEXT NOT NULL CHECK(category IN ({categories})),
            carbon_impact REAL NOT NULL CHECK(carbon_impact > 0),
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_activity_created_at ON activity(created_at);
        """
    )
    db.commit()
