from __future__ import annotations

# -----------------------------------------------------------------------------
# Domain model (Entities)
# -----------------------------------------------------------------------------
# Diese Datei enthält die fachlichen Kernobjekte (Entities) des Dashboards.
#
# Ziel: schlanke, gut testbare Datenklassen (dataclasses).
# - Invarianten / Wertebereiche werden über __post_init__ als Basisschutz geprüft.
# - UI-spezifisches Parsing (String → float/Category) passiert in `validation.py`.
# - Persistenzdetails (SQL/Row-Objekte) bleiben in den Repositories.
#
# Hinweis zur Unveränderlichkeit:
# Eine Aktivität wird nach dem Speichern nie mehr geändert (es gibt kein Update),
# deshalb ist `Activity` ein eingefrorenes Dataclass-Objekt.
# -----------------------------------------------------------------------------


from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ecopulse.validation import ValidationError, validate_carbon_impact


def _require_non_empty(val: str, field: str) -> None:
    """
    Prüft, ob ein Pflicht-String nicht leer ist.

    Parameter:
        val (str): Zu prüfender Wert.
        field (str): Feldname für die Fehlermeldung.

    Ausnahmen:
        ValidationError: Wenn `val` leer/whitespace ist.
    """

    if not isinstance(val, str) or not val.strip():
        raise ValidationError(f"{field} darf nicht leer sein")


class Category(str, Enum):
    """
    Feste Kategorien einer Aktivität.

    Die Reihenfolge der Definition ist fachlich relevant: Diagramm, Legende und
    Aggregation sortieren immer Transport → Food → Home → Energy.
    """

    TRANSPORT = "Transport"
    FOOD = "Food"
    HOME = "Home"
    ENERGY = "Energy"

    @property
    def order(self) -> int:
        return list(Category).index(self)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Activity:
    """
    Ein erfasster Eintrag (Activity Record) im Dashboard.

    Zweck:
        Hält Name, Kategorie und geschätzten CO2-Impact einer Aktivität sowie die vom
        Repository vergebene ID und den Erstellungszeitpunkt.

    Attribute:
        activity_id (str): Opake, eindeutige ID (uuid4 hex).
        name (str): Anzeigename (Pflicht).
        category (Category): Eine der festen Kategorien.
        carbon_impact (float): Impact in kg CO2e (> 0, endlich).
        created_at (datetime): Erstellungszeitpunkt (zeitzonenbewusst, UTC).
        seq (int | None): Einfüge-Reihenfolge aus der DB; `None` vor dem INSERT.

    Hinweise:
        Der Wertebereich 0.1 .. 30.0 kg wird nur von der Eingabemaske erzwungen,
        nicht vom Modell.
    """

    activity_id: str
    name: str
    category: Category
    carbon_impact: float
    created_at: datetime
    seq: Optional[int] = None

    def __post_init__(self) -> None:
        """
        Validiert Pflichtfelder und Wertebereiche nach der Initialisierung.
        """

        _require_non_empty(self.activity_id, "activity_id")
        _require_non_empty(self.name, "name")
        if not isinstance(self.category, Category):
            raise ValidationError(f"Unbekannte Kategorie: {self.category!r}")
        validate_carbon_impact(self.carbon_impact)
        if self.created_at.tzinfo is None:
            raise ValidationError("created_at muss zeitzonenbewusst sein")
