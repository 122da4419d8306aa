# tests/conftest.py
"""
Fixtures compartilhados para testes do Reconcile Flow.

Este módulo define fixtures reutilizáveis que fornecem:
- objetos reconciliáveis mínimos (ResourceObject)
- colaboradores de persistência em memória (sucesso e falha)
- State e ReconcileContext determinísticos
- uma fábrica de steps que registram a ordem em que foram chamados

Decisões arquiteturais:
    - Colaboradores são duck-typed, sem herança
    - Imports do core são lazy, para que falhas de import apareçam
      no teste e não na coleta
    - Nenhuma fixture realiza I/O

Limites explícitos:
    - Não substituem testes de integração com um apiserver real
"""

from datetime import datetime, timezone

import pytest


FIXED_TS = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)


class RecordingStatusWriter:
    """Persiste em memória: guarda um snapshot das conditions a cada chamada."""

    def __init__(self):
        self.calls = 0
        self.snapshots = []

    def persist_status(self, ctx, obj):
        self.calls += 1
        self.snapshots.append(list(obj.conditions))


class FailingStatusWriter:
    """Sempre falha ao persistir (ex.: conflito de versão)."""

    def __init__(self, error=None):
        self.calls = 0
        self.error = error or RuntimeError("the object has been modified; please apply your changes to the latest version")

    def persist_status(self, ctx, obj):
        self.calls += 1
        raise self.error


class RecordingObjectWriter:
    def __init__(self, fail=False):
        self.calls = 0
        self.fail = fail
        self.snapshots = []

    def persist_object(self, ctx, obj):
        self.calls += 1
        if self.fail:
            raise RuntimeError("conflict")
        self.snapshots.append(list(obj.finalizers))


@pytest.fixture
def status_writer():
    return RecordingStatusWriter()


@pytest.fixture
def failing_status_writer():
    return FailingStatusWriter()


@pytest.fixture
def object_writer():
    return RecordingObjectWriter()


@pytest.fixture
def failing_object_writer():
    return RecordingObjectWriter(fail=True)


@pytest.fixture
def resource_obj():
    """Objeto ativo (sem deletion timestamp), sem conditions."""
    from reconcile_flow.core.pipeline.types import ResourceObject

    return ResourceObject(name="iprange-a", namespace="kcp-system", generation=3, kind="IpRange")


@pytest.fixture
def deleting_obj():
    """Objeto marcado para deleção, com finalizer."""
    from reconcile_flow.core.pipeline.types import ResourceObject

    return ResourceObject(
        name="iprange-b",
        namespace="kcp-system",
        generation=4,
        kind="IpRange",
        deletion_timestamp=FIXED_TS,
        finalizers=["cloud-control.kyma-project.io/deletion-hook"],
    )


@pytest.fixture
def ctx():
    from reconcile_flow.core.pipeline.context import ReconcileContext

    return ReconcileContext.background()


@pytest.fixture
def make_state(status_writer, object_writer):
    """
    Fábrica de State determinístico para testes.

    O trace é habilitado por padrão para que os testes possam inspecionar
    a ordem de execução.
    """
    from reconcile_flow.core.pipeline.state import State
    from reconcile_flow.core.traceability import create_trace

    def _make(obj, *, writer=None, obj_writer=None, config=None, trace=True):
        state = State(
            obj=obj,
            status_writer=writer if writer is not None else status_writer,
            object_writer=obj_writer if obj_writer is not None else object_writer,
            config=config or {"engine": {"log_level": "DEBUG"}},
            pass_id="pass-test-001",
            created_at=FIXED_TS,
        )
        if trace:
            state.trace = create_trace(
                pass_id=state.pass_id,
                object_name=obj.name,
                config_hash="0" * 64,
                started_at=FIXED_TS,
            )
        return state

    return _make


@pytest.fixture
def state(make_state, resource_obj):
    return make_state(resource_obj)


@pytest.fixture
def engine_config_defaults_yaml() -> str:
    """Conteúdo YAML mínimo de defaults do engine."""
    return (
        "engine:\n"
        "  requeue_after_seconds: 5\n"
        "  log_level: INFO\n"
        "  raise_unexpected: false\n"
        "  trace: true\n"
        "controllers:\n"
        "  iprange:\n"
        "    finalizer: cloud-control.kyma-project.io/deletion-hook\n"
        "    keep_conditions: [Ready]\n"
    )


@pytest.fixture
def engine_config_local_yaml() -> str:
    """Override local: nível de log e backoff mais agressivo."""
    return (
        "engine:\n"
        "  requeue_after_seconds: 0.5\n"
        "  log_level: DEBUG\n"
        "controllers:\n"
        "  iprange:\n"
        "    keep_conditions: []\n"
    )


@pytest.fixture
def recorder():
    """
    Fábrica de steps que registram chamadas em uma lista compartilhada.

    Uso:
        calls, step = recorder
        a = step("a")                  # Continue
        b = step("b", STOP_AND_FORGET) # sinal fixo
    """
    from reconcile_flow.core.pipeline.action import FunctionAction

    calls = []

    def step(name, signal=None, ctx_value=None):
        def _run(ctx, state):
            calls.append(name)
            state.set_artifact(f"{name}.ran", True)
            if ctx_value is not None:
                from reconcile_flow.core.pipeline.action import ActionOutcome
                from reconcile_flow.core.pipeline.signals import CONTINUE

                return ActionOutcome(signal=signal or CONTINUE, ctx=ctx.with_value(*ctx_value))
            return signal

        return FunctionAction(name, _run)

    return calls, step
