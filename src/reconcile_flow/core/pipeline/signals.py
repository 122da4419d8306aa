# src/reconcile_flow/core/pipeline/signals.py
"""
Vocabulário de sinais de controle do Reconcile Flow.

Todo Action devolve exatamente um destes quatro sinais, e os composers
decidem continuar ou interromper a cadeia olhando apenas para eles:

    - Continue         → segue para o próximo step
    - StopAndForget    → encerra a passada, sem retry
    - StopWithRequeue  → encerra a passada e agenda retry (backoff)
    - Propagate        → falha inesperada, encapsula a causa original

Princípios fundamentais:
    - O canal de controle é um *valor*, não uma exceção: a decisão
      "tentar de novo" vs "desistir" fica explícita em cada fronteira
    - O conjunto é fechado: nenhum outro tipo é aceito como sinal
    - Sinais sem estado (Continue, StopAndForget, StopWithRequeue sem
      delay) são constantes imutáveis compartilhadas pelo processo

Invariantes:
    - Um sinal diferente de Continue é terminal para o composer corrente
    - `None` devolvido por um step é normalizado para CONTINUE

Limites explícitos:
    - Não decide backoff (responsabilidade do scheduler)
    - Não registra logs
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Continue:
    """Segue para o próximo step."""

    @property
    def label(self) -> str:
        return "continue"


@dataclass(frozen=True)
class StopAndForget:
    """Convergência atingida ou condição permanentemente não aplicável."""

    @property
    def label(self) -> str:
        return "stop_and_forget"


@dataclass(frozen=True)
class StopWithRequeue:
    """
    Convergência ainda não atingida (ou conflito benigno): reenfileirar.

    `after=None` significa "usar o backoff padrão do engine".
    """

    after: Optional[timedelta] = None

    def __post_init__(self) -> None:
        if self.after is not None and self.after < timedelta(0):
            raise ValueError("StopWithRequeue.after must not be negative")

    @property
    def label(self) -> str:
        return "stop_with_requeue"


@dataclass(frozen=True, eq=False)
class Propagate:
    """
    Falha inesperada encapsulando a causa original.

    Dois Propagate são iguais apenas se carregam a mesma instância de exceção.
    """

    cause: BaseException

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Propagate) and other.cause is self.cause

    def __hash__(self) -> int:
        return id(self.cause)

    @property
    def label(self) -> str:
        return "propagate"


Signal = Union[Continue, StopAndForget, StopWithRequeue, Propagate]

SIGNAL_TYPES = (Continue, StopAndForget, StopWithRequeue, Propagate)

CONTINUE = Continue()
STOP_AND_FORGET = StopAndForget()
STOP_WITH_REQUEUE = StopWithRequeue()


def stop_with_requeue_delay(after: timedelta) -> StopWithRequeue:
    return StopWithRequeue(after=after)


def propagate(cause: BaseException) -> Propagate:
    if not isinstance(cause, BaseException):
        raise TypeError(f"propagate() requires an exception, got {type(cause).__name__}")
    return Propagate(cause=cause)


def is_signal(value: Any) -> bool:
    return isinstance(value, SIGNAL_TYPES)


def is_terminal(signal: Signal) -> bool:
    """Tudo que não é Continue encerra o composer corrente."""
    return not isinstance(signal, Continue)


def normalize_signal(value: Any) -> Signal:
    """
    Normaliza o retorno bruto de um step para um Signal.

    Raises:
        TypeError: Se o valor não for None nem um dos quatro sinais.
    """
    if value is None:
        return CONTINUE
    if is_signal(value):
        return value
    raise TypeError(
        f"Step must return a Signal or None, got {type(value).__name__}"
    )
