"""Steps genéricos: conditions.

- `remove_condition(type)`: remove uma condition específica e persiste o
  status, preservando as demais (primeiro step do pipeline de deleção,
  tipicamente para retirar `Ready`).
- `set_condition_and_stop(cond)`: define exatamente `cond`, descarta as
  demais conditions e encerra a passada (StopAndForget). É o último step
  usual do pipeline ativo.

Ambos delegam a escrita ao builder de status.
"""

from __future__ import annotations

from typing import Optional

from reconcile_flow.core.engine.status import update_status
from reconcile_flow.core.pipeline.action import FunctionAction
from reconcile_flow.core.pipeline.conditions import find_status_condition, remove_status_condition
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.signals import CONTINUE, Signal
from reconcile_flow.core.pipeline.state import State
from reconcile_flow.core.pipeline.types import Condition


def remove_condition(condition_type: str, *, name: Optional[str] = None) -> FunctionAction:
    step_name = name or f"remove{condition_type}Condition"

    def _run(ctx: ReconcileContext, state: State):
        if find_status_condition(state.conditions, condition_type) is None:
            return CONTINUE
        remove_status_condition(state.conditions, condition_type)
        return (
            update_status(state.obj)
            .named(step_name)
            .keep_all_conditions()
            .success_signal(CONTINUE)
            .run(ctx, state)
        )

    return FunctionAction(step_name, _run)


def set_condition_and_stop(
    condition: Condition,
    *,
    keep: tuple = (),
    success_signal: Optional[Signal] = None,
    name: str = "updateSuccessStatus",
) -> FunctionAction:
    def _run(ctx: ReconcileContext, state: State):
        builder = (
            update_status(state.obj)
            .named(name)
            .set_condition(Condition(
                type=condition.type,
                status=condition.status,
                reason=condition.reason,
                message=condition.message,
                last_transition_time=condition.last_transition_time,
                observed_generation=condition.observed_generation or getattr(state.obj, "generation", 0),
            ))
            .remove_all_conditions_except(*keep)
        )
        if success_signal is not None:
            builder = builder.success_signal(success_signal)
        return builder.run(ctx, state)

    return FunctionAction(name, _run)
