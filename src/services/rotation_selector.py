"""Rotation selector - deterministic "N of M" selection for property rules.

Candidates are ordered by (name, id) and a window of
``k = min(selection_count, n)`` consecutive candidates is taken, wrapping
around the end. The window start is

    (offset(property_id, rule_id) + cycle * k) mod n

where ``cycle`` is the rule frequency's occurrence index for the date. The
window advances by ``k`` on every firing, so each candidate is selected at
least once in any ``ceil(n / k)`` consecutive firings. No selection state is
stored anywhere: the same (property, rule, date) always yields the same set.
"""

import hashlib
from datetime import date
from typing import Iterable

from src.models.asset import Asset
from src.models.scheduling_rule import PropertySchedulingRule
from src.services.frequency_evaluator import occurrence_index


def rotation_offset(property_id: str, rule_id: str) -> int:
    """Stable starting offset so rules on a property do not move in lockstep."""
    digest = hashlib.sha256(f"{property_id}:{rule_id}".encode("utf-8")).hexdigest()
    return int(digest[:12], 16)


def order_candidates(candidate_pool: Iterable[Asset]) -> list[Asset]:
    """Candidates in selection order, one entry per asset ID."""
    unique: dict[str, Asset] = {}
    for asset in candidate_pool:
        unique.setdefault(asset.id, asset)
    return sorted(unique.values(), key=lambda asset: (asset.name, asset.id))


def select_rotation(
    rule: PropertySchedulingRule,
    candidate_pool: Iterable[Asset],
    on_date: date,
) -> frozenset[str]:
    """Asset IDs selected by ``rule`` on ``on_date``."""
    plan = rule.plan
    if plan is None:
        return frozenset()

    ordered = order_candidates(candidate_pool)
    size = len(ordered)
    if size == 0:
        return frozenset()

    count = min(plan.selection_count, size)
    cycle = occurrence_index(plan.spec, on_date)
    start = (rotation_offset(rule.property_id, rule.id) + cycle * count) % size
    return frozenset(ordered[(start + i) % size].id for i in range(count))
