# src/reconcile_flow/core/engine/switch.py
"""
Composer de seleção (Switch) do Reconcile Flow.

`build_switch_action(name, default, *cases)` codifica a máquina de estados
de topo de um tipo de recurso. No caso comum há dois macro-estados:
"ativo" (default) e "em deleção" (caso com `marked_for_deletion`), mas o
engine aceita quantos casos forem necessários.

Regras:
    - predicados avaliados na ordem de declaração
    - o primeiro que casar tem seu pipeline executado com exclusividade
    - nenhum casou → default (ou Continue, se não houver default)
    - no máximo um pipeline roda por invocação

Também expõe os atalhos de ramificação `build_branching_action` e `if_then`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from reconcile_flow.core.pipeline.action import Action, ActionOutcome, as_action, run_traced
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.predicates import Predicate
from reconcile_flow.core.pipeline.signals import CONTINUE
from reconcile_flow.core.pipeline.state import State
from reconcile_flow.core.traceability import ACTION_KIND_SWITCH, branch_selected

from .compose import compose_actions


@dataclass(frozen=True)
class Case:
    """Par (predicado, pipeline) avaliado pelo Switch."""

    predicate: Predicate
    action: Action


def new_case(predicate: Predicate, *actions: Any) -> Case:
    """Cria um Case; vários actions são encadeados num composer sequencial."""
    if not callable(predicate):
        raise TypeError("case predicate must be callable")
    if len(actions) == 1:
        return Case(predicate=predicate, action=as_action(actions[0]))
    name = f"case[{getattr(predicate, '__name__', 'predicate')}]"
    return Case(predicate=predicate, action=compose_actions(name, *actions))


def _evaluate(predicate: Predicate, ctx: ReconcileContext, state: State) -> bool:
    result = predicate(ctx, state)
    if not isinstance(result, bool):
        raise TypeError(
            f"Predicate {getattr(predicate, '__name__', predicate)!r} must return bool, "
            f"got {type(result).__name__}"
        )
    return result


class SwitchAction:
    """Seleciona exclusivamente o pipeline do primeiro caso que casar."""

    trace_kind = ACTION_KIND_SWITCH

    def __init__(self, name: str, default: Optional[Action], cases: Tuple[Case, ...]):
        if not isinstance(name, str) or not name.strip():
            raise ValueError("switch name must be a non-empty string")
        self.name = name
        self.default = default
        self.cases = cases

    def select(self, ctx: ReconcileContext, state: State) -> Tuple[Optional[Action], Optional[int]]:
        """Devolve (action escolhido, índice do caso); índice None indica o default."""
        for i, case in enumerate(self.cases):
            if _evaluate(case.predicate, ctx, state):
                return case.action, i
        return self.default, None

    def run(self, ctx: ReconcileContext, state: State) -> ActionOutcome:
        chosen, index = self.select(ctx, state)

        if state.trace is not None:
            branch = chosen.name if chosen is not None else "<none>"
            branch_selected(state.trace, switch=self.name, branch=branch, case_index=index)

        if chosen is None:
            return ActionOutcome(signal=CONTINUE)
        return run_traced(chosen, ctx, state)

    def __repr__(self) -> str:
        return f"SwitchAction({self.name!r}, cases={len(self.cases)})"


def build_switch_action(name: str, default: Any, *cases: Case) -> SwitchAction:
    for c in cases:
        if not isinstance(c, Case):
            raise TypeError(f"switch cases must be Case instances, got {type(c).__name__}")
    default_action = as_action(default) if default is not None else None
    return SwitchAction(name, default_action, tuple(cases))


def build_branching_action(name: str, predicate: Predicate, true_action: Any, false_action: Any) -> SwitchAction:
    """Switch de dois ramos: `true_action` se o predicado casar, senão `false_action`."""
    return build_switch_action(name, false_action, new_case(predicate, true_action))


def if_then(predicate: Predicate, *actions: Any) -> SwitchAction:
    """Executa `actions` somente quando o predicado casar; senão Continue."""
    name = f"if[{getattr(predicate, '__name__', 'predicate')}]"
    return build_switch_action(name, None, new_case(predicate, *actions))
