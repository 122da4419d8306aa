# src/reconcile_flow/core/pipeline/action.py
"""
Contrato canônico de Action do Reconcile Flow.

Um Action é a menor unidade executável de uma passada de reconciliação:
uma função de (contexto ambiente, State) → (sinal de controle, contexto
possivelmente substituído).

Responsabilidades de um Action:
    - executar sua lógica (tipicamente uma chamada idempotente a um
      sistema externo)
    - interagir com outros steps exclusivamente via State
    - devolver um `ActionOutcome`

Princípios fundamentais:
    - Actions não conhecem os composers nem a ordem em que rodam
    - Conformidade é garantida por duck typing (@runtime_checkable)
    - Funções simples são adaptadas via `@action("nome")`

Invariantes:
    - O retorno de `run` é sempre um `ActionOutcome`
    - `ActionOutcome.ctx is None` significa "contexto inalterado"
    - Quem invoca um Action registra seu início/término no trace

Limites explícitos:
    - Não define retry (responsabilidade do scheduler)
    - Não captura exceções
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

from reconcile_flow.core.errors import ReconcileErrorPayload, error_to_payload
from reconcile_flow.core.traceability import ACTION_KIND_STEP, action_finished, action_started

from .context import ReconcileContext
from .signals import (
    CONTINUE,
    STOP_AND_FORGET,
    STOP_WITH_REQUEUE,
    Signal,
    is_signal,
    normalize_signal,
)
from .state import State


@dataclass(frozen=True)
class ActionOutcome:
    """Par (sinal de controle, contexto substituído ou None)."""

    signal: Signal = CONTINUE
    ctx: Optional[ReconcileContext] = None

    def __post_init__(self) -> None:
        if not is_signal(self.signal):
            raise TypeError(f"ActionOutcome.signal must be a Signal, got {type(self.signal).__name__}")


@runtime_checkable
class Action(Protocol):
    """
    Contrato canônico de um Action.

    Atributos obrigatórios:
        - name: nome estável, usado apenas para diagnóstico e trace
    """

    name: str

    def run(self, ctx: ReconcileContext, state: State) -> ActionOutcome:
        """Executa o Action uma vez contra o State compartilhado."""
        ...


StepResult = Union[None, Signal, ActionOutcome]
StepFunction = Callable[[ReconcileContext, State], StepResult]


def as_outcome(value: Any) -> ActionOutcome:
    """Normaliza None / Signal / ActionOutcome para ActionOutcome."""
    if isinstance(value, ActionOutcome):
        return value
    return ActionOutcome(signal=normalize_signal(value))


class FunctionAction:
    """Adapta uma função `fn(ctx, state)` ao protocolo Action."""

    trace_kind = ACTION_KIND_STEP

    def __init__(self, name: str, fn: StepFunction):
        if not isinstance(name, str) or not name.strip():
            raise ValueError("action name must be a non-empty string")
        if not callable(fn):
            raise TypeError("fn must be callable")
        self.name = name
        self.fn = fn

    def run(self, ctx: ReconcileContext, state: State) -> ActionOutcome:
        return as_outcome(self.fn(ctx, state))

    def __call__(self, ctx: ReconcileContext, state: State) -> ActionOutcome:
        return self.run(ctx, state)

    def __repr__(self) -> str:
        return f"FunctionAction({self.name!r})"


def action(name: Optional[str] = None) -> Callable[[StepFunction], FunctionAction]:
    """
    Decorator que transforma uma função de step em Action.

    Exemplo:
        @action("loadVpc")
        def load_vpc(ctx, state):
            state.set_artifact("vpc", client.describe_vpc(...))
    """

    def decorator(fn: StepFunction) -> FunctionAction:
        return FunctionAction(name or fn.__name__, fn)

    return decorator


def as_action(obj: Any) -> Action:
    """Aceita um Action pronto ou um callable simples (nomeado por `__name__`)."""
    if isinstance(obj, Action):
        return obj
    if callable(obj):
        return FunctionAction(getattr(obj, "__name__", repr(obj)), obj)
    raise TypeError(f"Expected an Action or a callable, got {type(obj).__name__}")


def run_traced(act: Action, ctx: ReconcileContext, state: State) -> ActionOutcome:
    """Executa `act` registrando início e término no trace da passada."""
    kind = getattr(act, "trace_kind", ACTION_KIND_STEP)
    if state.trace is not None:
        action_started(state.trace, name=act.name, kind=kind)

    outcome = act.run(ctx, state)
    if not isinstance(outcome, ActionOutcome):
        raise TypeError(f"Action {act.name!r} must return ActionOutcome, got {type(outcome).__name__}")

    if state.trace is not None:
        action_finished(state.trace, name=act.name, signal=outcome.signal.label)
    return outcome


def log_error_and_return(
    state: State,
    err: BaseException,
    message: str,
    signal: Signal,
    *,
    ctx: Optional[ReconcileContext] = None,
    step_id: str = "engine",
    payload: Optional[ReconcileErrorPayload] = None,
) -> ActionOutcome:
    """Registra `err` como evento ERROR estruturado e devolve `signal`."""
    state.log(
        step_id=step_id,
        level="ERROR",
        message=message,
        error=(payload or error_to_payload(err)).to_dict(),
        signal=signal.label,
    )
    return ActionOutcome(signal=signal, ctx=ctx)


# ---------------------------------------------------------------------------
# Actions prontos
# ---------------------------------------------------------------------------

CONTINUE_ACTION = FunctionAction("continue", lambda ctx, state: CONTINUE)
STOP_AND_FORGET_ACTION = FunctionAction("stopAndForget", lambda ctx, state: STOP_AND_FORGET)
STOP_WITH_REQUEUE_ACTION = FunctionAction("stopWithRequeue", lambda ctx, state: STOP_WITH_REQUEUE)
