"""
Live-Query über dem Activity-Repository (Query/Observer-Schicht).

Zweck:
    Hält eine stets aktuelle, nach `created_at` absteigend sortierte Sicht auf alle
    Aktivitäten und benachrichtigt Abonnenten synchron nach jeder Änderung.

Ablauf:
    1) Die Live-Query registriert sich als Listener am Repository.
    2) Nach jedem insert/delete_one/delete_all lädt sie die komplette Liste neu,
       sortiert sie und liefert sie vollständig (kein Diff) an alle Abonnenten.

Hinweise:
    Die Sicht ist nur abgeleitet; die Wahrheit liegt immer im Repository.
    Das vollständige Neuberechnen ist für die erwartete Datenmenge (persönliches
    Tagebuch) ausreichend.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from ecopulse.models import Activity
from ecopulse.repositories import ActivityRepository

logger = logging.getLogger(__name__)

Subscriber = Callable[[Sequence[Activity]], None]


def sort_newest_first(records: Iterable[Activity]) -> list[Activity]:
    """
    Sortiert Aktivitäten nach `created_at` absteigend.

    Bei gleichem Zeitstempel gewinnt der zuletzt eingefügte Datensatz (`seq` absteigend).
    """

    return sorted(
        records,
        key=lambda a: (a.created_at, a.seq if a.seq is not None else -1),
        reverse=True,
    )


@dataclass(frozen=True, slots=True)
class Subscription:
    """Handle für ein Abonnement (wird an `unsubscribe` zurückgegeben)."""

    token: int


class LiveActivityQuery:
    """
    Beobachtbare, sortierte Sicht auf das Repository.

    Zweck:
        Stellt `subscribe`/`unsubscribe` bereit und liefert jedem Abonnenten die
        komplette aktuelle Liste, sofort beim Abonnieren und nach jeder Änderung.
    """

    def __init__(self, repo: ActivityRepository) -> None:
        self._repo = repo
        # Dasselbe Lock wie das Repository: Benachrichtigung, Abo-Verwaltung und close()
        # können sich so nicht gegenseitig blockieren.
        self._lock = repo.lock
        self._subscribers: dict[int, Subscriber] = {}
        self._tokens = itertools.count(1)
        self._view: Optional[list[Activity]] = None
        self._closed = False
        repo.add_listener(self._on_store_changed)

    # -----------------------------
    # Subscription API
    # -----------------------------
    def subscribe(self, callback: Subscriber) -> Subscription:
        """
        Registriert einen Abonnenten.

        Parameter:
            callback: Wird mit der vollständigen, sortierten Liste aufgerufen.

        Rückgabe:
            Subscription: Handle für `unsubscribe`.

        Hinweise:
            Der Callback wird sofort mit dem aktuellen Stand aufgerufen, damit die
            Oberfläche nicht erst leer gerendert wird.
        """

        with self._lock:
            if self._closed:
                raise RuntimeError("LiveActivityQuery is closed")
            sub = Subscription(next(self._tokens))
            self._subscribers[sub.token] = callback
            view = self.snapshot()
            logger.debug("Subscriber %s registered (%s records)", sub.token, len(view))
            self._deliver(sub.token, callback, view)
            return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if self._subscribers.pop(subscription.token, None) is not None:
                logger.debug("Subscriber %s removed", subscription.token)

    def snapshot(self) -> list[Activity]:
        """
        Liefert die aktuelle, sortierte Sicht (Kopie).
        """

        with self._lock:
            if self._view is None:
                self._view = sort_newest_first(self._repo.list())
            return list(self._view)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def close(self) -> None:
        """Löst die Live-Query vom Repository und verwirft alle Abonnements."""

        with self._lock:
            self._repo.remove_listener(self._on_store_changed)
            self._subscribers.clear()
            self._view = None
            self._closed = True

    # -----------------------------
    # Internals
    # -----------------------------
    def _on_store_changed(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._view = sort_newest_first(self._repo.list())
            view = list(self._view)
            for token, callback in list(self._subscribers.items()):
                self._deliver(token, callback, view)

    def _deliver(self, token: int, callback: Subscriber, view: list[Activity]) -> None:
        try:
            callback(list(view))
        except Exception:
            logger.exception("Subscriber %s failed while handling %s records", token, len(view))
