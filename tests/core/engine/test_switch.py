# tests/core/engine/test_switch.py
"""
Testes do composer de seleção (Switch).

Cobre:
- exclusividade: apenas o pipeline do primeiro caso verdadeiro executa
- ordem de avaliação dos predicados
- fallback para o default e Continue quando não há default
- atalhos build_branching_action / if_then
- registro do ramo escolhido no trace
"""

import pytest

try:
    from reconcile_flow.core.engine.switch import (
        build_branching_action,
        build_switch_action,
        if_then,
        new_case,
    )
    from reconcile_flow.core.pipeline.predicates import marked_for_deletion
    from reconcile_flow.core.pipeline.signals import (
        CONTINUE,
        STOP_AND_FORGET,
        STOP_WITH_REQUEUE,
    )
except Exception as e:  # noqa: BLE001
    build_switch_action = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing switch composer. Implement:\n"
            "- src/reconcile_flow/core/engine/switch.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _always(value):
    def _predicate(ctx, state):
        return value

    _predicate.__name__ = f"always_{value}"
    return _predicate


def test_deleting_object_runs_only_deletion_pipeline(ctx, make_state, deleting_obj, recorder):
    """
    Switch(default=[X], case(marked_for_deletion → [Y])): com deletion
    timestamp somente Y executa.
    """
    _require_imports()
    calls, step = recorder
    state = make_state(deleting_obj)

    sw = build_switch_action(
        "main",
        step("X"),
        new_case(marked_for_deletion, step("Y", STOP_WITH_REQUEUE)),
    )
    outcome = sw.run(ctx, state)

    assert calls == ["Y"]
    assert outcome.signal == STOP_WITH_REQUEUE


def test_active_object_runs_default(ctx, state, recorder):
    _require_imports()
    calls, step = recorder

    sw = build_switch_action("main", step("X", STOP_AND_FORGET), new_case(marked_for_deletion, step("Y")))

    assert sw.run(ctx, state).signal == STOP_AND_FORGET
    assert calls == ["X"]


def test_first_matching_case_wins_and_later_predicates_are_not_evaluated(ctx, state, recorder):
    _require_imports()
    calls, step = recorder
    evaluated = []

    def tracking(label, value):
        def _predicate(c, s):
            evaluated.append(label)
            return value

        return _predicate

    sw = build_switch_action(
        "main",
        step("default"),
        new_case(tracking("p1", False), step("one")),
        new_case(tracking("p2", True), step("two")),
        new_case(tracking("p3", True), step("three")),
    )
    sw.run(ctx, state)

    assert evaluated == ["p1", "p2"]
    assert calls == ["two"]


def test_no_match_and_no_default_returns_continue(ctx, state, recorder):
    _require_imports()
    calls, step = recorder

    sw = build_switch_action("main", None, new_case(_always(False), step("never")))

    assert sw.run(ctx, state).signal == CONTINUE
    assert calls == []


def test_case_with_multiple_actions_is_sequential(ctx, state, recorder):
    _require_imports()
    calls, step = recorder

    case = new_case(_always(True), step("a"), step("b", STOP_AND_FORGET), step("c"))
    sw = build_switch_action("main", None, case)

    assert sw.run(ctx, state).signal == STOP_AND_FORGET
    assert calls == ["a", "b"]
    assert case.action.name == "case[always_True]"


def test_switch_result_is_the_selected_pipeline_result(ctx, state, recorder):
    """Switch não reinterpreta sinais: devolve o do pipeline escolhido."""
    _require_imports()
    _, step = recorder

    sw = build_switch_action("main", step("default", STOP_WITH_REQUEUE))
    assert sw.run(ctx, state).signal is STOP_WITH_REQUEUE


def test_non_bool_predicate_raises_type_error(ctx, state, recorder):
    _require_imports()
    _, step = recorder

    sw = build_switch_action("main", None, new_case(lambda c, s: "yes", step("x")))

    with pytest.raises(TypeError, match="must return bool"):
        sw.run(ctx, state)


def test_invalid_case_is_rejected_at_build_time(recorder):
    _require_imports()
    _, step = recorder

    with pytest.raises(TypeError):
        build_switch_action("main", None, (marked_for_deletion, step("x")))

    with pytest.raises(TypeError):
        new_case("not-callable", step("x"))


def test_branching_action_selects_true_or_false_branch(ctx, make_state, resource_obj, deleting_obj, recorder):
    _require_imports()
    calls, step = recorder

    br = build_branching_action("branch", marked_for_deletion, step("deleting"), step("active"))

    br.run(ctx, make_state(resource_obj))
    br.run(ctx, make_state(deleting_obj))

    assert calls == ["active", "deleting"]


def test_if_then_runs_only_when_predicate_matches(ctx, make_state, resource_obj, deleting_obj, recorder):
    _require_imports()
    calls, step = recorder

    guard = if_then(marked_for_deletion, step("cleanup"), step("release"))

    assert guard.run(ctx, make_state(resource_obj)).signal == CONTINUE
    assert calls == []

    guard.run(ctx, make_state(deleting_obj))
    assert calls == ["cleanup", "release"]
    assert guard.name == "if[marked_for_deletion]"


def test_branch_selection_is_recorded_in_trace(ctx, make_state, deleting_obj, recorder):
    _require_imports()
    _, step = recorder
    state = make_state(deleting_obj)

    sw = build_switch_action("main", step("X"), new_case(marked_for_deletion, step("Y")))
    sw.run(ctx, state)

    selected = [e for e in state.trace.events if e["event_type"] == "branch_selected"]
    assert len(selected) == 1
    assert selected[0]["name"] == "main"
    assert selected[0]["payload"] == {"branch": "Y", "case_index": 0}


def test_default_branch_is_recorded_without_case_index(ctx, state, recorder):
    _require_imports()
    _, step = recorder

    build_switch_action("main", step("X")).run(ctx, state)

    selected = [e for e in state.trace.events if e["event_type"] == "branch_selected"]
    assert selected[0]["payload"] == {"branch": "X", "case_index": None}
