# src/reconcile_flow/core/pipeline/conditions.py
"""
Helpers do conjunto de conditions de um objeto.

Semântica equivalente aos helpers `meta.*StatusCondition` do apiserver:

    - upsert por `type` (chave única)
    - `last_transition_time` muda apenas quando `status` muda
    - reason, message e observed_generation são sempre sobrescritos

Todas as funções operam in-place sobre a lista de conditions do objeto e
devolvem se houve alteração, para que os steps possam decidir se vale
persistir.

Invariantes:
    - Após qualquer helper a lista contém no máximo uma entrada por type
    - A ordem das entradas remanescentes é preservada
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from .types import Condition, ConditionStatus


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def find_status_condition(conditions: List[Condition], condition_type: str) -> Optional[Condition]:
    for c in conditions:
        if c.type == condition_type:
            return c
    return None


def set_status_condition(
    conditions: List[Condition],
    new_condition: Condition,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """
    Faz upsert de `new_condition` em `conditions` (in-place).

    Se o type já existe:
        - status diferente → status e last_transition_time atualizados
          (usa o tempo da nova condition, ou `now`)
        - status igual → last_transition_time preservado
        - reason/message/observed_generation sempre sobrescritos
    Se não existe, a condition é anexada ao final.

    Returns:
        bool: True se a lista foi alterada.
    """
    transition_time = new_condition.last_transition_time or now or _now()

    index = None
    for i, c in enumerate(conditions):
        if c.type == new_condition.type:
            index = i
            break

    if index is None:
        conditions.append(replace(new_condition, last_transition_time=transition_time))
        return True

    # entradas duplicadas do mesmo type: mantém apenas a primeira
    collapsed = [c for i, c in enumerate(conditions) if i <= index or c.type != new_condition.type]
    deduplicated = len(collapsed) != len(conditions)
    if deduplicated:
        conditions[:] = collapsed

    existing = conditions[index]
    updated = existing
    if existing.status != new_condition.status:
        updated = replace(updated, status=new_condition.status, last_transition_time=transition_time)

    updated = replace(
        updated,
        reason=new_condition.reason,
        message=new_condition.message,
        observed_generation=new_condition.observed_generation,
    )

    if updated == existing:
        return deduplicated

    conditions[index] = updated
    return True


def remove_status_condition(conditions: List[Condition], condition_type: str) -> bool:
    """Remove a condition do type informado (in-place). True se removeu."""
    before = len(conditions)
    conditions[:] = [c for c in conditions if c.type != condition_type]
    return len(conditions) != before


def is_status_condition_present_and_equal(
    conditions: List[Condition],
    condition_type: str,
    status: ConditionStatus,
) -> bool:
    c = find_status_condition(conditions, condition_type)
    return c is not None and c.status == status


def is_status_condition_true(conditions: List[Condition], condition_type: str) -> bool:
    return is_status_condition_present_and_equal(conditions, condition_type, ConditionStatus.TRUE)


def is_status_condition_false(conditions: List[Condition], condition_type: str) -> bool:
    return is_status_condition_present_and_equal(conditions, condition_type, ConditionStatus.FALSE)
