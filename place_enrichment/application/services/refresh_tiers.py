"""
Cadencia de refresco: qué tiers de atributos se refrescan en una corrida.

Se calcula UNA vez por corrida y se pasa explícitamente a la
materialización (no se lee la fecha dentro del pipeline).
"""

from __future__ import annotations

from datetime import date
from typing import FrozenSet

from place_enrichment.shared.constants.attribute_constants import UpdateTier


def tiers_for_date(
    day: date,
    *,
    weekly_weekday: int = 0,
    monthly_day: int = 1,
) -> FrozenSet[UpdateTier]:
    """
    every_run siempre; weekly el día de semana indicado (0 = lunes);
    monthly el día del mes indicado.
    """
    tiers = {UpdateTier.EVERY_RUN}
    if day.weekday() == weekly_weekday:
        tiers.add(UpdateTier.WEEKLY)
    if day.day == monthly_day:
        tiers.add(UpdateTier.MONTHLY)
    return frozenset(tiers)


ALL_TIERS: FrozenSet[UpdateTier] = frozenset(UpdateTier)
