"""
Reconcile Flow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Reconcile Flow.
Erros são artefatos operacionais: aparecem no log estruturado do State,
no trace da passada e no `ReconcileOutcome` entregue ao scheduler.
Devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhum stack trace cru é exposto ao operador.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReconcileErrorPayload:
    """
    Payload canônico de erro do Reconcile Flow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Persistência de status
STATUS_UPDATE_FAILED = "STATUS_UPDATE_FAILED"
OBJECT_UPDATE_FAILED = "OBJECT_UPDATE_FAILED"

# Construção do State
STATE_FACTORY_ERROR = "STATE_FACTORY_ERROR"

# Engine / Execução
RECONCILE_EXECUTION_ERROR = "RECONCILE_EXECUTION_ERROR"
BUILDER_CONFIGURATION_ERROR = "BUILDER_CONFIGURATION_ERROR"
PROPAGATED_ERROR = "PROPAGATED_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def status_update_failed(
    *,
    object_kind: str,
    object_name: str,
    error: BaseException,
    hint: str = "Verifique conflitos de versão (optimistic concurrency) e permissões de escrita no subresource status.",
) -> ReconcileErrorPayload:
    return ReconcileErrorPayload(
        type=STATUS_UPDATE_FAILED,
        message=f"Falha ao persistir status de {object_kind}",
        details={
            "object_kind": object_kind,
            "object_name": object_name,
            "exception_class": error.__class__.__name__,
            "error": str(error),
        },
        hint=hint,
    )


def object_update_failed(
    *,
    object_kind: str,
    object_name: str,
    error: BaseException,
) -> ReconcileErrorPayload:
    return ReconcileErrorPayload(
        type=OBJECT_UPDATE_FAILED,
        message=f"Falha ao persistir {object_kind}",
        details={
            "object_kind": object_kind,
            "object_name": object_name,
            "exception_class": error.__class__.__name__,
            "error": str(error),
        },
        hint="O objeto será relido do cluster na próxima passada",
    )


def state_factory_error(*, error: BaseException) -> ReconcileErrorPayload:
    return ReconcileErrorPayload(
        type=STATE_FACTORY_ERROR,
        message="Falha ao construir o State específico do provider",
        details={
            "exception_class": error.__class__.__name__,
            "error": str(error),
        },
        hint="Verifique credenciais e configuração do provider; a passada não será reenfileirada",
    )


def propagated_error(*, error: BaseException) -> ReconcileErrorPayload:
    """Payload de um Propagate devolvido explicitamente por um step.

    ReconcileException mantém seu próprio payload; demais causas viram
    PROPAGATED_ERROR.
    """
    from reconcile_flow.core.exceptions import ReconcileException

    if isinstance(error, ReconcileException):
        return error_to_payload(error)

    return ReconcileErrorPayload(
        type=PROPAGATED_ERROR,
        message=str(error) or "Falha propagada por um step",
        details={
            "exception_class": error.__class__.__name__,
        },
        hint="O step sinalizou uma falha explícita; verifique o log estruturado da passada",
    )


def error_to_payload(exc: BaseException) -> ReconcileErrorPayload:
    """Converte exceções em ReconcileErrorPayload (serializável, acionável).

    Regras:
    - ReconcileException: já vem com message/details/hint.
    - Outras exceções: encapsular como RECONCILE_EXECUTION_ERROR sem expor stack trace.
    """
    # import local: exceptions depende deste módulo apenas por tipo
    from reconcile_flow.core.exceptions import ReconcileException

    if isinstance(exc, ReconcileException):
        return ReconcileErrorPayload(
            type=exc.error_type,
            message=exc.message or "Erro de reconciliação",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return ReconcileErrorPayload(
        type=RECONCILE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante reconciliação",
        details={
            "exception_class": exc.__class__.__name__,
        },
        hint="Verifique o log estruturado da passada",
    )
