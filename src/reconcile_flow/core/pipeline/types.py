# src/reconcile_flow/core/pipeline/types.py
"""
Tipos canônicos do objeto reconciliado.

O engine não conhece o schema de nenhum recurso concreto. Ele precisa
apenas de um pequeno contrato estrutural:

    - identidade (name, namespace, generation)
    - marca de deleção (deletion_timestamp) e finalizers
    - o conjunto de conditions do status

Componentes principais:
    - ConditionStatus      → enum tri-state (True / False / Unknown)
    - Condition            → entrada imutável do conjunto de conditions
    - ObjectWithConditions → Protocol estrutural exigido pelo engine
    - ResourceObject       → implementação simples do Protocol

Invariantes:
    - `Condition.type` é uma string não vazia e é a chave única no conjunto
    - Valores textuais do enum seguem a convenção do apiserver
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable


class ConditionStatus(str, Enum):
    """Status tri-state de uma Condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Condition:
    """
    Entrada imutável do conjunto de conditions de um objeto.

    Campos:
        - type: chave única da condition (ex.: "Ready")
        - status: ConditionStatus
        - reason: código curto em CamelCase
        - message: mensagem humana
        - last_transition_time: última mudança de `status` (UTC); None = agora
        - observed_generation: geração do objeto observada ao definir a condition
    """

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_transition_time: Optional[datetime] = None
    observed_generation: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type.strip():
            raise ValueError("condition.type must be a non-empty string")
        if not isinstance(self.status, ConditionStatus):
            # aceita "True"/"False"/"Unknown" e bool
            if isinstance(self.status, bool):
                status = ConditionStatus.TRUE if self.status else ConditionStatus.FALSE
            else:
                status = ConditionStatus(self.status)
            object.__setattr__(self, "status", status)


@runtime_checkable
class ObjectWithConditions(Protocol):
    """
    Contrato estrutural mínimo de um objeto reconciliável.

    `finalizers` e `conditions` são listas mutáveis: o engine e os steps
    genéricos as alteram in-place antes de pedir a persistência.
    """

    name: str
    namespace: str
    generation: int
    deletion_timestamp: Optional[datetime]
    finalizers: List[str]
    conditions: List[Condition]


@dataclass
class ResourceObject:
    """Implementação simples de `ObjectWithConditions`."""

    name: str
    namespace: str = ""
    generation: int = 1
    deletion_timestamp: Optional[datetime] = None
    finalizers: List[str] = field(default_factory=list)
    conditions: List[Condition] = field(default_factory=list)
    kind: str = "Resource"

    @property
    def marked_for_deletion(self) -> bool:
        return self.deletion_timestamp is not None
