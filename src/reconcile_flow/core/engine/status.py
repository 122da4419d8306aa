# src/reconcile_flow/core/engine/status.py
"""
Builder de atualização de status do Reconcile Flow.

Este módulo reconcilia o conjunto de conditions de um objeto e persiste
o status em uma única passada, traduzindo o resultado da persistência em
um sinal de controle por meio de hooks configuráveis.

Fluxo de `run(ctx, state)`:
    1. política de remoção ativa → remove todo type presente no objeto e
       ausente da keep-list (types configurados em `set_condition` contam
       como mantidos)
    2. upsert de cada condition configurada (chave única = type)
    3. `state.update_obj_status(ctx)`
    4. falha → error wrapper (uma vez) → hook de erro → sinal
    5. sucesso → hook de sucesso → sinal

Padrões:
    - política de retenção: remover tudo que não estiver na keep-list
    - error wrapper: identidade
    - hook de erro: loga ERROR com o erro encapsulado e devolve
      `failed_signal` (padrão STOP_WITH_REQUEUE)
    - hook de sucesso: devolve `success_signal` (padrão STOP_AND_FORGET)
    - hooks podem devolver Signal, ActionOutcome ou None

Decisões arquiteturais:
    - A configuração é um `StatusUpdateConfig` imutável; cada setter
      fluente devolve um novo builder
    - `finalize()` valida e aplica defaults explicitamente, sem estados
      parcialmente configurados
    - `keep_all_conditions()` combinado com uma keep-list não vazia é
      rejeitado (`StatusUpdateConfigurationError`)

Limites explícitos:
    - Não relê o objeto antes de escrever
    - Não resolve conflitos de escrita concorrente: o colaborador de
      persistência reporta, o hook decide o sinal
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, FrozenSet, Optional, Tuple

from reconcile_flow.core.errors import error_to_payload, status_update_failed
from reconcile_flow.core.exceptions import StatusPersistenceError, StatusUpdateConfigurationError
from reconcile_flow.core.pipeline.action import ActionOutcome, as_outcome, log_error_and_return
from reconcile_flow.core.pipeline.conditions import remove_status_condition, set_status_condition
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.signals import (
    STOP_AND_FORGET,
    STOP_WITH_REQUEUE,
    Signal,
    is_signal,
)
from reconcile_flow.core.pipeline.state import State
from reconcile_flow.core.pipeline.types import Condition, ObjectWithConditions
from reconcile_flow.core.traceability import ACTION_KIND_STEP


ErrorWrapper = Callable[[BaseException], BaseException]
OnUpdateError = Callable[[ReconcileContext, State, BaseException], ActionOutcome]
OnUpdateSuccess = Callable[[ReconcileContext, State], ActionOutcome]


def _status_error_payload(err: BaseException, object_kind: str, object_name: str):
    if isinstance(err, StatusPersistenceError):
        return error_to_payload(err)
    return status_update_failed(object_kind=object_kind, object_name=object_name, error=err)


@dataclass(frozen=True)
class StatusUpdateConfig:
    """
    Configuração imutável do builder de status.

    Campos None indicam "usar o padrão"; após `finalize()` todos os campos
    estão resolvidos.
    """

    conditions_to_set: Tuple[Condition, ...] = ()
    conditions_to_keep: FrozenSet[str] = field(default_factory=frozenset)
    keep_all: bool = False
    error_log_message: Optional[str] = None
    error_wrapper: Optional[ErrorWrapper] = None
    on_error: Optional[OnUpdateError] = None
    on_success: Optional[OnUpdateSuccess] = None
    failed_signal: Optional[Signal] = None
    success_signal: Optional[Signal] = None
    finalized: bool = False

    @property
    def remove_conditions(self) -> bool:
        return not self.keep_all

    def validate(self) -> None:
        if self.keep_all and self.conditions_to_keep:
            raise StatusUpdateConfigurationError(
                message="keep_all_conditions() e remove_all_conditions_except() são mutuamente exclusivos",
                details={"conditions_to_keep": sorted(self.conditions_to_keep)},
                hint="Escolha apenas uma política de retenção de conditions",
            )
        for sig_name in ("failed_signal", "success_signal"):
            sig = getattr(self, sig_name)
            if sig is not None and not is_signal(sig):
                raise StatusUpdateConfigurationError(
                    message=f"{sig_name} deve ser um Signal",
                    details={"received": type(sig).__name__},
                )
        seen = set()
        for c in self.conditions_to_set:
            if c.type in seen:
                raise StatusUpdateConfigurationError(
                    message="Condition configurada mais de uma vez",
                    details={"type": c.type},
                    hint="Cada type deve aparecer uma única vez em set_condition()",
                )
            seen.add(c.type)

    def finalize(self, *, object_kind: str, step_id: str = "updateStatus") -> "StatusUpdateConfig":
        """Valida e devolve uma nova configuração com todos os defaults aplicados."""
        if self.finalized:
            return self
        self.validate()

        error_log_message = self.error_log_message or f"Error updating status for {object_kind}"
        failed_signal = self.failed_signal or STOP_WITH_REQUEUE
        success_signal = self.success_signal or STOP_AND_FORGET
        error_wrapper = self.error_wrapper or (lambda err: err)

        on_error = self.on_error
        if on_error is None:
            def on_error(ctx: ReconcileContext, state: State, err: BaseException) -> ActionOutcome:
                return log_error_and_return(
                    state,
                    err,
                    error_log_message,
                    failed_signal,
                    step_id=step_id,
                    payload=_status_error_payload(err, object_kind, state.name),
                )

        on_success = self.on_success
        if on_success is None:
            def on_success(ctx: ReconcileContext, state: State) -> ActionOutcome:
                return ActionOutcome(signal=success_signal)

        return replace(
            self,
            error_log_message=error_log_message,
            error_wrapper=error_wrapper,
            on_error=on_error,
            on_success=on_success,
            failed_signal=failed_signal,
            success_signal=success_signal,
            finalized=True,
        )


class UpdateStatusBuilder:
    """
    Builder fluente e imutável de atualização de status.

    Exemplo:
        return (
            update_status(state.obj)
            .set_condition(Condition(type="Ready", status=ConditionStatus.TRUE, reason="Ready"))
            .run(ctx, state)
        )

    Também é um Action (`name = "updateStatus"`) e pode ir direto num composer.
    """

    trace_kind = ACTION_KIND_STEP

    def __init__(
        self,
        obj: Optional[ObjectWithConditions] = None,
        config: Optional[StatusUpdateConfig] = None,
        name: str = "updateStatus",
    ):
        self.obj = obj
        self.config = config or StatusUpdateConfig()
        self.name = name

    def _with(self, **changes) -> "UpdateStatusBuilder":
        return UpdateStatusBuilder(self.obj, replace(self.config, **changes), self.name)

    # -----------------------------
    # Fluent setters
    # -----------------------------
    def named(self, name: str) -> "UpdateStatusBuilder":
        return UpdateStatusBuilder(self.obj, self.config, name)

    def set_condition(self, cond: Condition) -> "UpdateStatusBuilder":
        return self._with(conditions_to_set=self.config.conditions_to_set + (cond,))

    def remove_all_conditions_except(self, *condition_types: str) -> "UpdateStatusBuilder":
        return self._with(conditions_to_keep=self.config.conditions_to_keep | frozenset(condition_types))

    def keep_all_conditions(self) -> "UpdateStatusBuilder":
        return self._with(keep_all=True)

    def error_log_message(self, msg: str) -> "UpdateStatusBuilder":
        return self._with(error_log_message=msg)

    def update_error_wrapper(self, fn: ErrorWrapper) -> "UpdateStatusBuilder":
        return self._with(error_wrapper=fn)

    def on_update_error(self, hook: OnUpdateError) -> "UpdateStatusBuilder":
        return self._with(on_error=hook)

    def on_update_success(self, hook: OnUpdateSuccess) -> "UpdateStatusBuilder":
        return self._with(on_success=hook)

    def failed_signal(self, signal: Signal) -> "UpdateStatusBuilder":
        return self._with(failed_signal=signal)

    def success_signal(self, signal: Signal) -> "UpdateStatusBuilder":
        return self._with(success_signal=signal)

    # -----------------------------
    # Finalize & run
    # -----------------------------
    def finalize(self, state: Optional[State] = None) -> StatusUpdateConfig:
        obj = self.obj if self.obj is not None else (state.obj if state is not None else None)
        kind = getattr(obj, "kind", None) or type(obj).__name__
        return self.config.finalize(object_kind=kind, step_id=self.name)

    def run(self, ctx: ReconcileContext, state: State) -> ActionOutcome:
        cfg = self.finalize(state)
        obj = self.obj if self.obj is not None else state.obj

        if cfg.remove_conditions:
            # types configurados contam como mantidos: preserva last_transition_time
            keep = cfg.conditions_to_keep | {c.type for c in cfg.conditions_to_set}
            to_remove = [c.type for c in obj.conditions if c.type not in keep]
            for condition_type in to_remove:
                remove_status_condition(obj.conditions, condition_type)

        for c in cfg.conditions_to_set:
            set_status_condition(obj.conditions, c)

        try:
            state.update_obj_status(ctx)
        except Exception as err:  # noqa: BLE001
            wrapped = cfg.error_wrapper(err)
            return as_outcome(cfg.on_error(ctx, state, wrapped))

        return as_outcome(cfg.on_success(ctx, state))

    def __repr__(self) -> str:
        return f"UpdateStatusBuilder({self.name!r})"


def update_status(obj: Optional[ObjectWithConditions] = None) -> UpdateStatusBuilder:
    """Ponto de entrada do builder; sem `obj`, usa `state.obj` no `run`."""
    return UpdateStatusBuilder(obj)
