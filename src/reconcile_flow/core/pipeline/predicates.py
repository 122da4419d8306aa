# src/reconcile_flow/core/pipeline/predicates.py
"""
Biblioteca de predicados usados pelos casos do Switch.

Um predicado é uma função pura `(ctx, state) -> bool`. Ele deve ser livre
de efeitos colaterais e total (sempre devolver um bool); isso é contrato,
não é imposto estruturalmente. O Switch apenas rejeita retornos que não
sejam bool.
"""

from __future__ import annotations

from typing import Callable

from .context import ReconcileContext
from .state import State


Predicate = Callable[[ReconcileContext, State], bool]


def marked_for_deletion(ctx: ReconcileContext, state: State) -> bool:
    """Objeto possui deletion timestamp."""
    return getattr(state.obj, "deletion_timestamp", None) is not None


def has_finalizer(finalizer: str) -> Predicate:
    def _predicate(ctx: ReconcileContext, state: State) -> bool:
        return finalizer in (getattr(state.obj, "finalizers", None) or [])

    _predicate.__name__ = f"has_finalizer[{finalizer}]"
    return _predicate


def negate(predicate: Predicate) -> Predicate:
    def _predicate(ctx: ReconcileContext, state: State) -> bool:
        return not predicate(ctx, state)

    _predicate.__name__ = f"not[{getattr(predicate, '__name__', 'predicate')}]"
    return _predicate


def all_of(*predicates: Predicate) -> Predicate:
    """Verdadeiro se todos forem verdadeiros (curto-circuito, em ordem)."""

    def _predicate(ctx: ReconcileContext, state: State) -> bool:
        return all(p(ctx, state) for p in predicates)

    _predicate.__name__ = "all_of"
    return _predicate


def any_of(*predicates: Predicate) -> Predicate:
    """Verdadeiro se algum for verdadeiro (curto-circuito, em ordem)."""

    def _predicate(ctx: ReconcileContext, state: State) -> bool:
        return any(p(ctx, state) for p in predicates)

    _predicate.__name__ = "any_of"
    return _predicate
