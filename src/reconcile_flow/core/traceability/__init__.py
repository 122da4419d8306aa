"""
Pacote de rastreabilidade do Reconcile Flow — trace por passada.

API pública exposta:
    - PassTrace         → Event Log ordenado de uma passada
    - create_trace      → criação explícita do trace
    - add_event         → registro explícito de eventos
    - action_started    → marca início de um Action
    - action_finished   → registra término de um Action e seu sinal
    - branch_selected   → registra o ramo escolhido por um Switch
    - executed_actions  → nomes dos steps executados, em ordem
    - finished_signal   → sinal com que um Action terminou

Limites explícitos:
    - Não persiste nada: não é um log durável de workflow
    - Não executa Actions
"""

from .trace import (
    ACTION_KIND_SEQUENCE,
    ACTION_KIND_STEP,
    ACTION_KIND_SWITCH,
    PassTrace,
    action_finished,
    action_started,
    add_event,
    branch_selected,
    create_trace,
    executed_actions,
    finished_signal,
)

__all__ = [
    "ACTION_KIND_SEQUENCE",
    "ACTION_KIND_STEP",
    "ACTION_KIND_SWITCH",
    "PassTrace",
    "action_finished",
    "action_started",
    "add_event",
    "branch_selected",
    "create_trace",
    "executed_actions",
    "finished_signal",
]
