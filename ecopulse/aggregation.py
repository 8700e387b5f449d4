"""
Aggregation für das Balkendiagramm.

Zweck:
    Reine Funktionen (ohne Seiteneffekte), die eine Liste von Aktivitäten in
    Diagramm-Serien umwandeln: ein Bucket pro (Kalendertag, Kategorie) mit der Summe
    des CO2-Impacts.

Hinweise zur Zeitzone:
    Der Kalendertag wird aus `created_at` in der übergebenen Zeitzone `tz` bestimmt.
    Default ist UTC; die Anwendung übergibt die konfigurierte Anzeigezeitzone
    (standardmäßig die lokale Zeitzone des Hosts), damit die Balken zum Kalender der
    Nutzer:innen passen.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timezone, tzinfo
from typing import Iterable

import pendulum

from ecopulse.models import Activity, Category


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """Ein Bucket des Diagramms: Summe des Impacts pro Tag und Kategorie."""

    day: date
    category: Category
    total_impact: float


def bucket_day(activity: Activity, tz: tzinfo = timezone.utc) -> date:
    """Kalendertag einer Aktivität in der Zeitzone `tz`."""

    return pendulum.instance(activity.created_at).in_timezone(tz).date()


def aggregate(records: Iterable[Activity], *, tz: tzinfo = timezone.utc) -> list[SeriesPoint]:
    """
    Gruppiert Aktivitäten nach (Tag, Kategorie) und summiert den Impact.

    Parameter:
        records: Beliebig sortierte Aktivitäten (z. B. die Live-Sicht).
        tz (tzinfo): Zeitzone für die Tagesgrenzen.

    Rückgabe:
        list[SeriesPoint]: Nach Tag aufsteigend, danach in der festen Kategorie-Reihenfolge
        (Transport, Food, Home, Energy). Leere Eingabe → leere Liste.
    """

    sums: dict[tuple[date, Category], float] = {}
    for a in records:
        key = (bucket_day(a, tz), a.category)
        sums[key] = sums.get(key, 0.0) + float(a.carbon_impact)

    return [
        SeriesPoint(day=d, category=c, total_impact=v)
        for (d, c), v in sorted(sums.items(), key=lambda kv: (kv[0][0], kv[0][1].order))
    ]


def stack_by_category(points: Iterable[SeriesPoint]) -> tuple[list[date], dict[Category, list[float]]]:
    """
    Formt Buckets in Eingabedaten für ein gestapeltes Balkendiagramm um.

    Rückgabe:
        (days, values): `days` aufsteigend; `values[category]` enthält pro Tag einen Wert
        (0.0, wenn an diesem Tag nichts in der Kategorie erfasst wurde). Es sind nur
        Kategorien enthalten, die mindestens einmal vorkommen, in fester Reihenfolge.
    """

    pts = list(points)
    days = sorted({p.day for p in pts})
    index = {d: i for i, d in enumerate(days)}
    present = sorted({p.category for p in pts}, key=lambda c: c.order)
    values: dict[Category, list[float]] = {c: [0.0] * len(days) for c in present}
    for p in pts:
        values[p.category][index[p.day]] += p.total_impact
    return days, values


def total_impact(records: Iterable[Activity]) -> float:
    return sum(float(a.carbon_impact) for a in records)


def format_impact(value: float) -> str:
    """Formatiert einen Impact für die Listenansicht, z. B. `12.5 kg`."""

    return f"{value:.1f} kg"
