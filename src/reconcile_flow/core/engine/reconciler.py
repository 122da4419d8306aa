# src/reconcile_flow/core/engine/reconciler.py
"""
Ponto de entrada de uma passada de reconciliação.

O `Reconciler` é a fronteira entre o engine e o scheduler externo:

    - constrói exatamente um State por chamada a partir do objeto recebido
    - aplica o `state_factory` opcional (State específico de provider)
    - executa o Action de topo (tipicamente um Switch)
    - traduz o sinal final em um `ReconcileOutcome` para o scheduler

Mapeamento de sinais (`handle_signal`):
    - Continue / StopAndForget → forget (nenhuma nova tentativa)
    - StopWithRequeue          → requeue (delay próprio, inclusive zero, ou
                                 backoff padrão)
    - Propagate                → failure (payload PROPAGATED_ERROR + causa)

Guardrails:
    - Exceções que escapam do Action não são capturadas pelos composers;
      aqui elas viram Propagate com payload RECONCILE_EXECUTION_ERROR e
      um evento ERROR, a menos que `engine.raise_unexpected` seja true
    - Falha do `state_factory` (ou retorno que não é State) vira
      StateFactoryError, é logada e encerra a passada com StopAndForget
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from reconcile_flow.core.config.hashing import compute_config_hash
from reconcile_flow.core.config.merge import deep_merge
from reconcile_flow.core.errors import (
    ReconcileErrorPayload,
    error_to_payload,
    propagated_error,
    state_factory_error,
)
from reconcile_flow.core.exceptions import ReconcileException, StateFactoryError
from reconcile_flow.core.pipeline.action import Action, as_action, log_error_and_return, run_traced
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.signals import (
    STOP_AND_FORGET,
    Propagate,
    Signal,
    StopWithRequeue,
    propagate,
)
from reconcile_flow.core.pipeline.state import ObjectWriter, State, StatusWriter
from reconcile_flow.core.pipeline.types import ObjectWithConditions
from reconcile_flow.core.traceability import PassTrace, create_trace


DEFAULT_ENGINE_CONFIG: Dict[str, Any] = {
    "engine": {
        "requeue_after_seconds": 5,
        "log_level": "INFO",
        "raise_unexpected": False,
        "trace": True,
    }
}

StateFactory = Callable[[ReconcileContext, State], State]


@dataclass(frozen=True)
class ReconcileOutcome:
    """Decisão entregue ao scheduler ao fim de uma passada."""

    requeue: bool = False
    requeue_after: Optional[timedelta] = None
    error: Optional[ReconcileErrorPayload] = None
    cause: Optional[BaseException] = field(default=None, compare=False)

    @classmethod
    def forget(cls) -> "ReconcileOutcome":
        return cls()

    @classmethod
    def requeue_after_delay(cls, after: Optional[timedelta]) -> "ReconcileOutcome":
        return cls(requeue=True, requeue_after=after)

    @classmethod
    def failure(cls, cause: BaseException) -> "ReconcileOutcome":
        return cls(error=error_to_payload(cause), cause=cause)

    @property
    def is_failure(self) -> bool:
        return self.error is not None


def handle_signal(signal: Signal, *, default_requeue_after: Optional[timedelta] = None) -> ReconcileOutcome:
    if isinstance(signal, Propagate):
        return ReconcileOutcome.failure(signal.cause, propagated_error(error=signal.cause))
    if isinstance(signal, StopWithRequeue):
        after = signal.after if signal.after is not None else default_requeue_after
        return ReconcileOutcome.requeue_after_delay(after)
    return ReconcileOutcome.forget()


@dataclass(frozen=True)
class ReconcileResult:
    """Resultado agregado de uma passada."""

    outcome: ReconcileOutcome
    signal: Signal
    state: State
    trace: Optional[PassTrace] = None


class Reconciler:
    """Executa o Action de topo de um controller, uma passada por chamada."""

    def __init__(
        self,
        action: Any,
        *,
        config: Optional[Dict[str, Any]] = None,
        state_factory: Optional[StateFactory] = None,
    ):
        self.action: Action = as_action(action)
        self.config: Dict[str, Any] = deep_merge(DEFAULT_ENGINE_CONFIG, config or {})
        self.config_hash: str = compute_config_hash(self.config)
        self.state_factory = state_factory

    def _engine_cfg(self) -> Dict[str, Any]:
        return self.config.get("engine", {}) or {}

    def _default_requeue_after(self) -> Optional[timedelta]:
        seconds = self._engine_cfg().get("requeue_after_seconds")
        if seconds is None:
            return None
        return timedelta(seconds=float(seconds))

    def new_state(
        self,
        obj: ObjectWithConditions,
        *,
        status_writer: Optional[StatusWriter] = None,
        object_writer: Optional[ObjectWriter] = None,
    ) -> State:
        state = State(
            obj=obj,
            status_writer=status_writer,
            object_writer=object_writer,
            config=self.config,
        )
        if bool(self._engine_cfg().get("trace", True)):
            state.trace = create_trace(
                pass_id=state.pass_id,
                object_name=state.name,
                config_hash=self.config_hash,
                started_at=state.created_at,
            )
        return state

    def _build_state(self, ctx: ReconcileContext, state: State) -> Optional[State]:
        if self.state_factory is None:
            return state
        try:
            specific = self.state_factory(ctx, state)
            if not isinstance(specific, State):
                raise StateFactoryError(
                    message="state_factory deve devolver um State",
                    details={"returned_type": type(specific).__name__},
                    hint="Derive o State do provider a partir do State base recebido",
                )
            return specific
        except Exception as exc:  # noqa: BLE001
            if isinstance(exc, ReconcileException):
                payload = error_to_payload(exc)
            else:
                payload = state_factory_error(error=exc)
            log_error_and_return(
                state,
                exc,
                "Error creating provider state",
                STOP_AND_FORGET,
                step_id=self.action.name,
                payload=payload,
            )
            return None

    def reconcile(
        self,
        obj: ObjectWithConditions,
        *,
        ctx: Optional[ReconcileContext] = None,
        status_writer: Optional[StatusWriter] = None,
        object_writer: Optional[ObjectWriter] = None,
    ) -> ReconcileResult:
        ctx = ctx or ReconcileContext.background()
        base = self.new_state(obj, status_writer=status_writer, object_writer=object_writer)

        state = self._build_state(ctx, base)
        if state is None:
            return ReconcileResult(
                outcome=ReconcileOutcome.forget(),
                signal=STOP_AND_FORGET,
                state=base,
                trace=base.trace,
            )

        try:
            signal = run_traced(self.action, ctx, state).signal
        except Exception as exc:  # noqa: BLE001
            if bool(self._engine_cfg().get("raise_unexpected", False)):
                raise
            signal = log_error_and_return(
                state,
                exc,
                "Unexpected error during reconciliation",
                propagate(exc),
                step_id=self.action.name,
            ).signal
            # exceção não tratada por nenhum step → RECONCILE_EXECUTION_ERROR
            outcome = ReconcileOutcome.failure(exc)
        else:
            outcome = handle_signal(signal, default_requeue_after=self._default_requeue_after())

        state.log(
            step_id=self.action.name,
            level="WARNING" if outcome.is_failure else "INFO",
            message="reconciliation pass finished",
            signal=signal.label,
            requeue=outcome.requeue,
        )
        return ReconcileResult(outcome=outcome, signal=signal, state=state, trace=state.trace)
