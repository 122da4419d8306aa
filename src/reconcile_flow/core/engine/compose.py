# src/reconcile_flow/core/engine/compose.py
"""
Composer sequencial do Reconcile Flow.

`compose_actions(name, *actions)` encadeia Actions em um único Action:

    - executa os steps na ordem declarada, um de cada vez, contra o
      mesmo State
    - Continue → próximo step, levando o contexto substituído (se houver)
    - qualquer outro sinal → devolvido imediatamente; nenhum step
      posterior executa
    - lista esgotada → Continue, para que composers se aninhem

O composer nunca captura, converte ou reclassifica erros e sinais: o modo
de falha de um step é escolhido inteiramente pelo próprio step.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from reconcile_flow.core.pipeline.action import Action, ActionOutcome, as_action, run_traced
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.signals import CONTINUE, is_terminal
from reconcile_flow.core.pipeline.state import State
from reconcile_flow.core.traceability import ACTION_KIND_SEQUENCE


class ComposedAction:
    """Sequência nomeada de Actions, executada em ordem estrita."""

    trace_kind = ACTION_KIND_SEQUENCE

    def __init__(self, name: str, actions: Tuple[Action, ...]):
        if not isinstance(name, str) or not name.strip():
            raise ValueError("composer name must be a non-empty string")
        self.name = name
        self.actions: Tuple[Action, ...] = actions

    def run(self, ctx: ReconcileContext, state: State) -> ActionOutcome:
        current = ctx
        replaced: Optional[ReconcileContext] = None

        for act in self.actions:
            outcome = run_traced(act, current, state)
            if outcome.ctx is not None:
                current = outcome.ctx
                replaced = outcome.ctx

            if is_terminal(outcome.signal):
                state.log(
                    step_id=self.name,
                    level="DEBUG",
                    message="sequence stopped",
                    at=act.name,
                    signal=outcome.signal.label,
                )
                return ActionOutcome(signal=outcome.signal, ctx=replaced)

        return ActionOutcome(signal=CONTINUE, ctx=replaced)

    def names(self) -> List[str]:
        return [a.name for a in self.actions]

    def __repr__(self) -> str:
        return f"ComposedAction({self.name!r}, {self.names()!r})"


def compose_actions(name: str, *actions: Any) -> ComposedAction:
    """
    Encadeia `actions` em um único Action nomeado.

    Aceita Actions prontos ou funções `fn(ctx, state)`.
    """
    return ComposedAction(name, tuple(as_action(a) for a in actions))
