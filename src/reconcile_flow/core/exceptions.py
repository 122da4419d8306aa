"""
Reconcile Flow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Reconcile Flow.

Objetivo:
- Permitir que o engine e os steps levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ReconcileErrorPayload
- Evitar ValueError/RuntimeError genéricos em pontos críticos

Regras:
- Não contém lógica de nenhum provider específico.
- Exceções carregam apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from reconcile_flow.core.errors import (
    BUILDER_CONFIGURATION_ERROR,
    OBJECT_UPDATE_FAILED,
    RECONCILE_EXECUTION_ERROR,
    STATE_FACTORY_ERROR,
    STATUS_UPDATE_FAILED,
)


@dataclass(frozen=True)
class ReconcileException(Exception):
    """Base class para exceções internas do Reconcile Flow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    error_type: ClassVar[str] = RECONCILE_EXECUTION_ERROR

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Configuração do engine
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusUpdateConfigurationError(ReconcileException):
    """Configuração do builder de status inconsistente (ex.: keep-all + keep-list)."""

    error_type: ClassVar[str] = BUILDER_CONFIGURATION_ERROR


# ---------------------------------------------------------------------------
# Persistência
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusWriterMissingError(ReconcileException):
    """O State não possui o colaborador de persistência requerido."""

    error_type: ClassVar[str] = BUILDER_CONFIGURATION_ERROR


@dataclass(frozen=True)
class StatusPersistenceError(ReconcileException):
    """Falha reportada pelo colaborador ao persistir o status do objeto."""

    error_type: ClassVar[str] = STATUS_UPDATE_FAILED


@dataclass(frozen=True)
class ObjectPersistenceError(ReconcileException):
    """Falha reportada pelo colaborador ao persistir o objeto (ex.: finalizers)."""

    error_type: ClassVar[str] = OBJECT_UPDATE_FAILED


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReconcileCancelledError(ReconcileException):
    """O contexto ambiente foi cancelado pelo scheduler."""


@dataclass(frozen=True)
class StateFactoryError(ReconcileException):
    """Falha ao construir o State específico de um provider."""

    error_type: ClassVar[str] = STATE_FACTORY_ERROR
