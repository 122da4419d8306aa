# tests/core/engine/test_status_update.py
"""
Testes do builder de atualização de status.

Os testes asseguram que:
- o conjunto de conditions final respeita a política de retenção
  (remover tudo fora da keep-list / manter tudo)
- a persistência é chamada exatamente uma vez por execução
- falhas de persistência passam pelo error wrapper uma única vez e
  resultam em StopWithRequeue (padrão) com evento ERROR estruturado
- sucesso resulta em StopAndForget (padrão)
- executar duas vezes o mesmo builder é idempotente
- o builder é imutável e validado no finalize

Invariantes:
    - No máximo uma condition por type após a execução
    - last_transition_time muda somente quando o status muda
"""

from datetime import datetime, timezone

import pytest

try:
    from reconcile_flow.core.engine.compose import compose_actions
    from reconcile_flow.core.engine.status import StatusUpdateConfig, update_status
    from reconcile_flow.core.exceptions import (
        StatusPersistenceError,
        StatusUpdateConfigurationError,
    )
    from reconcile_flow.core.pipeline.action import ActionOutcome
    from reconcile_flow.core.pipeline.signals import (
        CONTINUE,
        STOP_AND_FORGET,
        STOP_WITH_REQUEUE,
        propagate,
    )
    from reconcile_flow.core.pipeline.types import Condition, ConditionStatus
except Exception as e:  # noqa: BLE001
    update_status = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


T0 = datetime(2026, 1, 10, 12, 0, 0, tzinfo=timezone.utc)
T1 = datetime(2026, 1, 16, 8, 30, 0, tzinfo=timezone.utc)


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing status update builder. Implement:\n"
            "- src/reconcile_flow/core/engine/status.py (update_status, StatusUpdateConfig)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _cond(type_, status="True", reason="", ts=None):
    return Condition(type=type_, status=status, reason=reason or type_, last_transition_time=ts)


def _types(obj):
    return [c.type for c in obj.conditions]


def _ready():
    return Condition(type="Ready", status=ConditionStatus.TRUE, reason="Ready", message="Ready")


# -----------------------------
# Success path
# -----------------------------
def test_success_sets_condition_persists_once_and_forgets(ctx, state, status_writer, resource_obj):
    _require_imports()

    outcome = update_status(resource_obj).set_condition(_ready()).run(ctx, state)

    assert outcome.signal == STOP_AND_FORGET
    assert status_writer.calls == 1
    assert _types(resource_obj) == ["Ready"]
    ready = resource_obj.conditions[0]
    assert ready.status == ConditionStatus.TRUE
    assert ready.last_transition_time is not None


def test_builder_without_obj_uses_state_obj(ctx, state, resource_obj):
    _require_imports()

    update_status().set_condition(_ready()).run(ctx, state)

    assert _types(resource_obj) == ["Ready"]


def test_custom_success_signal(ctx, state):
    _require_imports()

    outcome = update_status().set_condition(_ready()).success_signal(CONTINUE).run(ctx, state)

    assert outcome.signal == CONTINUE


def test_custom_success_hook_is_called(ctx, state):
    _require_imports()
    seen = []

    def hook(c, s):
        seen.append(s.name)
        return ActionOutcome(signal=STOP_WITH_REQUEUE)

    outcome = update_status().set_condition(_ready()).on_update_success(hook).run(ctx, state)

    assert seen == ["iprange-a"]
    assert outcome.signal == STOP_WITH_REQUEUE


# -----------------------------
# Retention policy
# -----------------------------
def test_removal_policy_keeps_only_keep_list_and_configured_types(ctx, state, resource_obj):
    """Objeto com {A, B, C}; set Ready, keep {B} → {B, Ready}."""
    _require_imports()
    resource_obj.conditions.extend([_cond("A"), _cond("B"), _cond("C")])

    update_status(resource_obj).set_condition(_ready()).remove_all_conditions_except("B").run(ctx, state)

    assert sorted(_types(resource_obj)) == ["B", "Ready"]


def test_default_policy_removes_every_unconfigured_type(ctx, state, resource_obj):
    _require_imports()
    resource_obj.conditions.extend([_cond("Error", "True"), _cond("Deleting", "True")])

    update_status(resource_obj).set_condition(_ready()).run(ctx, state)

    assert _types(resource_obj) == ["Ready"]


def test_keep_all_preserves_existing_conditions(ctx, state, resource_obj):
    _require_imports()
    resource_obj.conditions.extend([_cond("A"), _cond("B")])

    update_status(resource_obj).set_condition(_ready()).keep_all_conditions().run(ctx, state)

    assert _types(resource_obj) == ["A", "B", "Ready"]


def test_keep_all_without_conditions_to_set_leaves_existing_untouched(ctx, state, status_writer, resource_obj):
    """Objeto com {A, B}, keep-all, nada a definir → A e B inalterados."""
    _require_imports()
    resource_obj.conditions.extend([_cond("A", "True", reason="Synced", ts=T0), _cond("B", "False", reason="Pending", ts=T1)])
    before = list(resource_obj.conditions)

    outcome = update_status(resource_obj).keep_all_conditions().run(ctx, state)

    assert outcome.signal == STOP_AND_FORGET
    assert status_writer.calls == 1
    assert resource_obj.conditions == before
    a, b = resource_obj.conditions
    assert (a.type, a.status, a.reason, a.last_transition_time) == ("A", "True", "Synced", T0)
    assert (b.type, b.status, b.reason, b.last_transition_time) == ("B", "False", "Pending", T1)


def test_keep_all_combined_with_keep_list_is_rejected(ctx, state, status_writer):
    _require_imports()

    builder = update_status().keep_all_conditions().remove_all_conditions_except("B")

    with pytest.raises(StatusUpdateConfigurationError):
        builder.run(ctx, state)
    assert status_writer.calls == 0


def test_configured_type_replaces_existing_entry(ctx, state, resource_obj):
    _require_imports()
    resource_obj.conditions.append(_cond("Ready", "False", reason="Provisioning", ts=T0))

    update_status(resource_obj).set_condition(_ready()).run(ctx, state)

    assert len(resource_obj.conditions) == 1
    ready = resource_obj.conditions[0]
    assert ready.status == ConditionStatus.TRUE
    assert ready.reason == "Ready"
    assert ready.last_transition_time != T0


# -----------------------------
# Idempotence
# -----------------------------
def test_running_twice_is_idempotent(ctx, state, status_writer, resource_obj):
    _require_imports()
    resource_obj.conditions.append(_cond("Stale"))

    builder = update_status(resource_obj).set_condition(_ready())
    builder.run(ctx, state)
    builder.run(ctx, state)

    assert status_writer.calls == 2
    assert status_writer.snapshots[0] == status_writer.snapshots[1]
    assert _types(resource_obj) == ["Ready"]


def test_same_status_preserves_transition_time(ctx, state, resource_obj):
    _require_imports()
    resource_obj.conditions.append(_cond("Ready", "True", reason="Old", ts=T0))

    update_status(resource_obj).set_condition(_ready()).run(ctx, state)

    ready = resource_obj.conditions[0]
    assert ready.reason == "Ready"
    assert ready.last_transition_time == T0


def test_status_change_uses_new_transition_time(ctx, state, resource_obj):
    _require_imports()
    resource_obj.conditions.append(_cond("Ready", "False", ts=T0))

    update_status(resource_obj).set_condition(_cond("Ready", "True", ts=T1)).run(ctx, state)

    assert resource_obj.conditions[0].last_transition_time == T1


# -----------------------------
# Failure path
# -----------------------------
def test_failure_requeues_and_logs_structured_error(ctx, make_state, resource_obj, failing_status_writer):
    _require_imports()
    state = make_state(resource_obj, writer=failing_status_writer)

    outcome = update_status(resource_obj).set_condition(_ready()).run(ctx, state)

    assert outcome.signal == STOP_WITH_REQUEUE
    assert failing_status_writer.calls == 1

    errors = [e for e in state.events if e["level"] == "ERROR"]
    assert len(errors) == 1
    ev = errors[0]
    assert ev["step_id"] == "updateStatus"
    assert ev["message"] == "Error updating status for IpRange"
    assert ev["signal"] == "stop_with_requeue"
    assert ev["error"]["type"] == "STATUS_UPDATE_FAILED"
    assert ev["error"]["details"]["object_name"] == "iprange-a"
    assert ev["error"]["details"]["exception_class"] == "RuntimeError"


def test_error_wrapper_is_applied_exactly_once(ctx, make_state, resource_obj, failing_status_writer):
    _require_imports()
    state = make_state(resource_obj, writer=failing_status_writer)
    wrapped = []
    received = []

    def wrapper(err):
        wrapped.append(err)
        return StatusPersistenceError(message=f"wrapped: {err}")

    def on_error(c, s, err):
        received.append(err)
        return ActionOutcome(signal=propagate(err))

    outcome = (
        update_status(resource_obj)
        .set_condition(_ready())
        .update_error_wrapper(wrapper)
        .on_update_error(on_error)
        .run(ctx, state)
    )

    assert len(wrapped) == 1
    assert isinstance(wrapped[0], StatusPersistenceError)
    assert wrapped[0].__cause__ is failing_status_writer.error
    assert len(received) == 1
    assert isinstance(received[0], StatusPersistenceError)
    assert outcome.signal == propagate(received[0])


def test_wrapped_error_reaches_default_error_hook(ctx, make_state, resource_obj, failing_status_writer):
    _require_imports()
    state = make_state(resource_obj, writer=failing_status_writer)

    class PatchConflictError(Exception):
        pass

    update_status().update_error_wrapper(
        lambda err: PatchConflictError(str(err))
    ).error_log_message("could not patch IpRange status").run(ctx, state)

    ev = [e for e in state.events if e["level"] == "ERROR"][0]
    assert ev["message"] == "could not patch IpRange status"
    assert ev["error"]["type"] == "STATUS_UPDATE_FAILED"
    assert ev["error"]["details"]["exception_class"] == "PatchConflictError"


def test_custom_failed_signal(ctx, make_state, resource_obj, failing_status_writer):
    _require_imports()
    state = make_state(resource_obj, writer=failing_status_writer)

    outcome = update_status().failed_signal(STOP_AND_FORGET).run(ctx, state)

    assert outcome.signal == STOP_AND_FORGET


def test_missing_status_writer_goes_through_error_hook(ctx, make_state, resource_obj):
    _require_imports()
    state = make_state(resource_obj)
    state.status_writer = None

    outcome = update_status().set_condition(_ready()).run(ctx, state)

    assert outcome.signal == STOP_WITH_REQUEUE
    ev = [e for e in state.events if e["level"] == "ERROR"][0]
    assert ev["error"]["details"]["exception_class"] == "StatusWriterMissingError"


# -----------------------------
# Builder contract
# -----------------------------
def test_setters_return_new_builders():
    _require_imports()

    base = update_status()
    derived = base.set_condition(_ready()).keep_all_conditions()

    assert base.config == StatusUpdateConfig()
    assert derived is not base
    assert derived.config.keep_all is True
    assert [c.type for c in derived.config.conditions_to_set] == ["Ready"]


def test_finalize_applies_defaults(resource_obj):
    _require_imports()

    cfg = update_status(resource_obj).finalize()

    assert cfg.finalized is True
    assert cfg.remove_conditions is True
    assert cfg.failed_signal == STOP_WITH_REQUEUE
    assert cfg.success_signal == STOP_AND_FORGET
    assert cfg.error_log_message == "Error updating status for IpRange"
    assert callable(cfg.on_error) and callable(cfg.on_success)
    assert cfg.finalize(object_kind="Other") is cfg


def test_finalize_rejects_duplicate_condition_types(resource_obj):
    _require_imports()

    builder = update_status(resource_obj).set_condition(_ready()).set_condition(_cond("Ready", "False"))

    with pytest.raises(StatusUpdateConfigurationError):
        builder.finalize()


def test_finalize_rejects_non_signal_values(resource_obj):
    _require_imports()

    with pytest.raises(StatusUpdateConfigurationError):
        update_status(resource_obj).success_signal("done").finalize()


def test_builder_is_usable_as_a_composed_step(ctx, state, recorder, resource_obj):
    _require_imports()
    calls, step = recorder

    seq = compose_actions(
        "active",
        step("ensureVpc"),
        update_status().set_condition(_ready()).named("updateSuccessStatus"),
        step("unreachable"),
    )
    outcome = seq.run(ctx, state)

    assert outcome.signal == STOP_AND_FORGET
    assert calls == ["ensureVpc"]
    assert _types(resource_obj) == ["Ready"]


def test_hooks_returning_bare_signals_work_inside_a_composer(ctx, make_state, resource_obj, recorder, failing_status_writer):
    _require_imports()
    calls, step = recorder

    seq = compose_actions(
        "active",
        update_status().set_condition(_ready()).on_update_success(lambda c, s: CONTINUE),
        step("afterStatus"),
    )
    assert seq.run(ctx, make_state(resource_obj)).signal == CONTINUE
    assert calls == ["afterStatus"]

    failing = compose_actions(
        "active",
        update_status().set_condition(_ready()).on_update_error(lambda c, s, err: STOP_AND_FORGET),
        step("unreachable"),
    )
    outcome = failing.run(ctx, make_state(resource_obj, writer=failing_status_writer))

    assert isinstance(outcome, ActionOutcome)
    assert outcome.signal == STOP_AND_FORGET
    assert calls == ["afterStatus"]
