# src/reconcile_flow/core/pipeline/context.py
"""
Contexto ambiente de uma passada de reconciliação.

O `ReconcileContext` é o valor passado a todos os Actions junto com o
State. Ele carrega apenas dados *ambientes*, que não pertencem ao objeto
reconciliado:

    - um bag imutável de valores (ex.: campos de log, clientes por provider)
    - um token de cancelamento cooperativo compartilhado com o scheduler
    - um deadline opcional

Um Action pode devolver um contexto substituído (ex.: `with_value`), e o
composer sequencial o repassa ao próximo step. O engine nunca altera o
contexto por conta própria.

Invariantes:
    - `with_value` e `with_deadline` nunca mutam a instância original
    - Contextos derivados compartilham o mesmo token de cancelamento
    - O engine não impõe timeout; steps longos observam `cancelled`
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from reconcile_flow.core.exceptions import ReconcileCancelledError


class CancelToken:
    """Token de cancelamento cooperativo (thread-safe)."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class ReconcileContext:
    """
    Contexto ambiente imutável de uma passada de reconciliação.

    Exemplo:
        ctx = ReconcileContext.background().with_value("provider", "aws")
    """

    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    token: CancelToken = field(default_factory=CancelToken, compare=False, repr=False)
    deadline: Optional[datetime] = None

    @classmethod
    def background(cls) -> "ReconcileContext":
        return cls()

    # -----------------------------
    # Values
    # -----------------------------
    def with_value(self, key: str, value: Any) -> "ReconcileContext":
        merged = dict(self.values)
        merged[key] = value
        return replace(self, values=MappingProxyType(merged))

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    # -----------------------------
    # Cancellation & deadline
    # -----------------------------
    def with_deadline(self, deadline: datetime) -> "ReconcileContext":
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        if self.deadline is not None and self.deadline < deadline:
            # deadline herdado mais restritivo prevalece
            deadline = self.deadline
        return replace(self, deadline=deadline)

    def cancel(self, reason: Optional[str] = None) -> None:
        self.token.cancel(reason)

    @property
    def expired(self) -> bool:
        return self.deadline is not None and datetime.now(timezone.utc) >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled or self.expired

    def raise_if_cancelled(self) -> None:
        if not self.cancelled:
            return
        reason = self.token.reason or ("deadline exceeded" if self.expired else "cancelled")
        raise ReconcileCancelledError(
            message=f"Contexto de reconciliação cancelado: {reason}",
            details={"reason": reason},
        )
