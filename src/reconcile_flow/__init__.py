# src/reconcile_flow/__init__.py
"""
Reconcile Flow — engine de pipelines de reconciliação para controllers.

Um controller expressa a convergência de um recurso como uma sequência
ordenada de steps pequenos e testáveis isoladamente, com ramificação
condicional (ex.: "objeto em deleção"), sinais de curto-circuito e um
builder dedicado para persistir o conjunto de conditions.

Princípios centrais:
    - Cada passada é síncrona, em processo, sobre um único objeto
    - Steps executam em ordem estrita; o primeiro sinal terminal encerra
    - A decisão "tentar de novo" vs "desistir" é um valor explícito
    - O scheduler reentra do zero sempre que um retry é pedido

Limites explícitos:
    - Não executa steps em paralelo
    - Não é um log de workflow durável
    - Não contém steps de providers concretos
"""

from reconcile_flow.core.engine.compose import ComposedAction, compose_actions
from reconcile_flow.core.engine.reconciler import (
    DEFAULT_ENGINE_CONFIG,
    ReconcileOutcome,
    ReconcileResult,
    Reconciler,
    handle_signal,
)
from reconcile_flow.core.engine.status import StatusUpdateConfig, UpdateStatusBuilder, update_status
from reconcile_flow.core.engine.switch import (
    Case,
    SwitchAction,
    build_branching_action,
    build_switch_action,
    if_then,
    new_case,
)
from reconcile_flow.core.pipeline.action import (
    CONTINUE_ACTION,
    STOP_AND_FORGET_ACTION,
    STOP_WITH_REQUEUE_ACTION,
    Action,
    ActionOutcome,
    FunctionAction,
    action,
    log_error_and_return,
)
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.predicates import all_of, any_of, marked_for_deletion, negate
from reconcile_flow.core.pipeline.registry import ActionRegistry
from reconcile_flow.core.pipeline.signals import (
    CONTINUE,
    STOP_AND_FORGET,
    STOP_WITH_REQUEUE,
    Continue,
    Propagate,
    Signal,
    StopAndForget,
    StopWithRequeue,
    is_terminal,
    propagate,
    stop_with_requeue_delay,
)
from reconcile_flow.core.pipeline.state import State
from reconcile_flow.core.pipeline.types import Condition, ConditionStatus, ResourceObject

__all__ = [
    "Action",
    "ActionOutcome",
    "ActionRegistry",
    "CONTINUE",
    "CONTINUE_ACTION",
    "Case",
    "ComposedAction",
    "Condition",
    "ConditionStatus",
    "Continue",
    "DEFAULT_ENGINE_CONFIG",
    "FunctionAction",
    "Propagate",
    "ReconcileContext",
    "ReconcileOutcome",
    "ReconcileResult",
    "Reconciler",
    "ResourceObject",
    "STOP_AND_FORGET",
    "STOP_AND_FORGET_ACTION",
    "STOP_WITH_REQUEUE",
    "STOP_WITH_REQUEUE_ACTION",
    "Signal",
    "State",
    "StatusUpdateConfig",
    "StopAndForget",
    "StopWithRequeue",
    "SwitchAction",
    "UpdateStatusBuilder",
    "action",
    "all_of",
    "any_of",
    "build_branching_action",
    "build_switch_action",
    "compose_actions",
    "handle_signal",
    "if_then",
    "is_terminal",
    "log_error_and_return",
    "marked_for_deletion",
    "negate",
    "new_case",
    "propagate",
    "stop_with_requeue_delay",
    "update_status",
]
