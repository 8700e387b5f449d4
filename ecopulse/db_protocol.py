"""
Datenbank-Interfaces (Protocols) für Repository- und Service-Schicht.

Zweck:
    Entkoppelt die Anwendung von der konkreten Datenbank-Implementierung (hier: SQLite),
    indem Repositories/Services nur gegen kleine, stabile Interfaces typisieren.

Inhalt:
    - CursorProtocol: minimales Cursor-Verhalten (fetchone/fetchall/rowcount/lastrowid)
    - DatabaseProtocol: minimale DB-API (execute/executescript + Transaktionen)

Hinweise:
    Die konkrete Implementierung des Interfaces erfolgt in `db.py` (SQLiteDatabase).
    Fehler der Speicherschicht werden dort einheitlich als `StorageError` gemeldet.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence


class CursorProtocol(Protocol):
    """
    Cursor-Interface, das vom Repository benötigt wird.

    Hinweise:
        `rowcount` wird nach DELETE genutzt, um Löschungen zu protokollieren.
    """

    lastrowid: Any
    rowcount: int

    def fetchone(self) -> Any: ...
    def fetchall(self) -> list[Any]: ...


class DatabaseProtocol(Protocol):
    """
    Minimales Datenbank-Interface für Repositories/Services.

    Zweck:
        Vereinheitlicht den Zugriff auf die Persistenz (execute/commit/rollback/close),
        ohne die Anwendung an `sqlite3` zu koppeln.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> CursorProtocol: ...
    def executescript(self, sql_script: str) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def close(self) -> None: ...
