"""
Validierung und Parsing von Benutzereingaben.

Zweck:
    Die GUI nimmt Eingaben als Strings bzw. Slider-Werte entgegen. Dieses Modul wandelt
    diese Werte in passende Python-Typen (str/Category/float) um und prüft einfache
    Wertebereiche, damit keine ungültigen Daten in Service/Repository-Schicht gelangen.

Hinweise:
    Der Wertebereich für den CO2-Impact (0.1 bis 30.0, Schrittweite 0.1) gilt nur für die
    Eingabemaske. Das Repository selbst akzeptiert jeden endlichen, positiven Wert und prüft
    zusätzlich nur die Invarianten der Entity (siehe `models.py`).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ecopulse.models import Category


class ValidationError(ValueError):
    """
    Fehlerklasse für ungültige Eingaben bzw. ungültige Datensätze.

    Zweck:
        Wird in der UI abgefangen, um eine verständliche Fehlermeldung anzuzeigen,
        ohne einen technischen Traceback zu präsentieren.
    """


def parse_name(text: Optional[str]) -> str:
    """
    Prüft den Namen einer Aktivität.

    Parameter:
        text (str | None): Eingabetext aus dem Namensfeld.

    Rückgabe:
        str: Der Name unverändert, so wie er eingegeben wurde.

    Ausnahmen:
        ValidationError: Wenn der Name leer ist oder nur aus Leerzeichen besteht.
    """

    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Name darf nicht leer sein")
    return text


def parse_category(value: Any) -> Category:
    """
    Wandelt einen Auswahlwert in eine `Category` um.

    Zweck:
        Akzeptiert sowohl ein `Category`-Objekt als auch dessen Textwert
        (z. B. aus der Combobox oder aus einer DB-Zeile).

    Ausnahmen:
        ValidationError: Wenn der Wert keiner bekannten Kategorie entspricht.
    """

    from ecopulse.models import Category

    if isinstance(value, Category):
        return value
    t = str(value or "").strip()
    for c in Category:
        if t == c.value or t.lower() == c.name.lower():
            return c
    allowed = ", ".join(c.value for c in Category)
    raise ValidationError(f"Kategorie muss eine von {allowed} sein")


def parse_float(text: Any, *, field: str, min_value: Optional[float] = None, max_value: Optional[float] = None) -> float:
    """
    Parst eine Fließkommazahl (Komma oder Punkt).

    Zweck:
        Wandelt den Text in `float` um (`,` wird als Dezimaltrennzeichen akzeptiert) und
        prüft optional einen Wertebereich.

    Parameter:
        text (str | float): Eingabewert.
        field (str): Feldname für Fehlermeldungen.
        min_value (float | None): Untere Schranke (optional).
        max_value (float | None): Obere Schranke (optional).

    Rückgabe:
        float: Geparste Zahl.

    Ausnahmen:
        ValidationError: Bei ungültiger Eingabe oder Verletzung des Wertebereichs.
    """

    try:
        v = float(str(text).strip().replace(",", "."))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} muss eine Zahl sein") from exc
    if not math.isfinite(v):
        raise ValidationError(f"{field} muss eine endliche Zahl sein")
    if min_value is not None and v < min_value:
        raise ValidationError(f"{field} muss >= {min_value} sein")
    if max_value is not None and v > max_value:
        raise ValidationError(f"{field} muss <= {max_value} sein")
    return v


def snap_to_step(value: float, step: float) -> float:
    """Rundet `value` auf das nächste Vielfache von `step` (Slider-Raster)."""

    if step <= 0:
        return value
    return round(round(value / step) * step, 10)


def parse_impact(
    text: Any,
    *,
    min_value: float = 0.1,
    max_value: float = 30.0,
    step: float = 0.1,
) -> float:
    """
    Parst den geschätzten CO2-Impact aus der Eingabemaske.

    Zweck:
        Der Wert wird auf das Slider-Raster gerundet und anschließend gegen den
        zulässigen Bereich der Maske geprüft.

    Rückgabe:
        float: Impact in kg CO2e (z. B. 5.0).

    Ausnahmen:
        ValidationError: Bei nicht numerischer Eingabe oder Verletzung des Bereichs.
    """

    v = parse_float(text, field="CO2-Impact")
    v = snap_to_step(v, step)
    if v < min_value or v > max_value:
        raise ValidationError(f"CO2-Impact muss zwischen {min_value} und {max_value} kg liegen")
    return v


def validate_carbon_impact(value: Any) -> float:
    """
    Prüft den Impact auf Repository-Ebene (endlich und > 0).

    Ausnahmen:
        ValidationError: Wenn der Wert keine endliche, positive Zahl ist.
    """

    if isinstance(value, bool):
        raise ValidationError("carbon_impact muss eine Zahl sein")
    try:
        v = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("carbon_impact muss eine Zahl sein") from exc
    if not math.isfinite(v) or v <= 0:
        raise ValidationError("carbon_impact muss eine endliche Zahl > 0 sein")
    return v
