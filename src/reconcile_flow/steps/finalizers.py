"""Steps genéricos: finalizers.

Responsabilidades:
- `add_finalizer(f)`: garante o finalizer em objetos ativos, antes de
  qualquer recurso externo ser criado.
- `remove_finalizer(f)`: último step do pipeline de deleção; libera o
  objeto para o apiserver removê-lo.

Persistência via `state.update_obj(ctx)` (colaborador `ObjectWriter`).

Sinais:
- add: objeto em deleção ou finalizer já presente → Continue (sem escrita);
  adicionado e persistido → Continue; falha → ERROR logado + StopWithRequeue.
- remove: finalizer ausente → Continue; removido e persistido →
  StopAndForget; falha → ERROR logado + StopWithRequeue.

Limites explícitos:
- NÃO relê o objeto antes de escrever.
- NÃO trata conflitos de versão: a próxima passada parte de um objeto novo.
"""

from __future__ import annotations

from reconcile_flow.core.errors import error_to_payload, object_update_failed
from reconcile_flow.core.exceptions import ObjectPersistenceError
from reconcile_flow.core.pipeline.action import FunctionAction, log_error_and_return
from reconcile_flow.core.pipeline.context import ReconcileContext
from reconcile_flow.core.pipeline.predicates import marked_for_deletion
from reconcile_flow.core.pipeline.signals import CONTINUE, STOP_AND_FORGET, STOP_WITH_REQUEUE
from reconcile_flow.core.pipeline.state import State


def _persist(ctx: ReconcileContext, state: State, step_id: str, message: str):
    try:
        state.update_obj(ctx)
    except Exception as err:  # noqa: BLE001
        return log_error_and_return(
            state,
            err,
            message,
            STOP_WITH_REQUEUE,
            step_id=step_id,
            payload=(
                error_to_payload(err)
                if isinstance(err, ObjectPersistenceError)
                else object_update_failed(object_kind=state.kind, object_name=state.name, error=err)
            ),
        )
    return None


def add_finalizer(finalizer: str, *, name: str = "addFinalizer") -> FunctionAction:
    if not finalizer:
        raise ValueError("finalizer must be a non-empty string")

    def _run(ctx: ReconcileContext, state: State):
        if marked_for_deletion(ctx, state):
            return CONTINUE
        finalizers = state.obj.finalizers
        if finalizer in finalizers:
            return CONTINUE

        finalizers.append(finalizer)
        failed = _persist(ctx, state, name, "Error adding finalizer")
        if failed is not None:
            return failed

        state.log(step_id=name, level="INFO", message="finalizer added", finalizer=finalizer)
        return CONTINUE

    return FunctionAction(name, _run)


def remove_finalizer(finalizer: str, *, name: str = "removeFinalizer") -> FunctionAction:
    if not finalizer:
        raise ValueError("finalizer must be a non-empty string")

    def _run(ctx: ReconcileContext, state: State):
        finalizers = state.obj.finalizers
        if finalizer not in finalizers:
            return CONTINUE

        finalizers[:] = [f for f in finalizers if f != finalizer]
        failed = _persist(ctx, state, name, "Error removing finalizer")
        if failed is not None:
            return failed

        state.log(step_id=name, level="INFO", message="finalizer removed", finalizer=finalizer)
        return STOP_AND_FORGET

    return FunctionAction(name, _run)
