"""Steps genéricos reutilizáveis entre controllers (finalizers, conditions)."""

from .conditions import remove_condition, set_condition_and_stop
from .finalizers import add_finalizer, remove_finalizer

__all__ = ["add_finalizer", "remove_finalizer", "remove_condition", "set_condition_and_stop"]
