# src/reconcile_flow/core/pipeline/state.py
"""
State compartilhado de uma passada de reconciliação.

Este módulo define o `State`, a estrutura canônica passada a todos os
Actions durante uma passada. O State é o único meio permitido de:

    - acessar o objeto reconciliado (posse exclusiva da passada)
    - trocar resultados intermediários entre steps (artifact store)
    - registrar logs estruturados e warnings
    - persistir o status (e, opcionalmente, o próprio objeto)

Princípios fundamentais:
    - Isolamento por passada (cada passada possui seu próprio State)
    - Um step não assume nada sobre steps anteriores além do que está
      explicitamente no artifact store
    - Persistência é delegada a colaboradores externos com contrato
      simples: "persistir; levantar exceção em caso de falha"; a falha
      chega aos steps como StatusPersistenceError / ObjectPersistenceError
      (causa original em `__cause__`)

Invariantes:
    - Exatamente um State por passada, nunca compartilhado
    - Logs sempre incluem `pass_id` e `step_id`
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa Actions
    - Não decide sinais de controle
    - Não relê o objeto do cluster
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from reconcile_flow.core.errors import object_update_failed, status_update_failed
from reconcile_flow.core.exceptions import (
    ObjectPersistenceError,
    ReconcileException,
    StatusPersistenceError,
    StatusWriterMissingError,
)
from reconcile_flow.core.traceability import PassTrace

from .context import ReconcileContext
from .types import Condition, ObjectWithConditions


LOG_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}

_MISSING = object()


@runtime_checkable
class StatusWriter(Protocol):
    """Colaborador que persiste o status do objeto. Levanta exceção em caso de falha."""

    def persist_status(self, ctx: ReconcileContext, obj: ObjectWithConditions) -> None:
        ...


@runtime_checkable
class ObjectWriter(Protocol):
    """Colaborador que persiste metadados/spec do objeto (ex.: finalizers)."""

    def persist_object(self, ctx: ReconcileContext, obj: ObjectWithConditions) -> None:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class State:
    """
    Contexto mutável de uma passada de reconciliação.

    Campos canônicos:
    - obj: objeto reconciliado
    - status_writer / object_writer: colaboradores de persistência
    - config: configuração efetiva do engine
    - pass_id: identificador único da passada
    - created_at: timestamp UTC de criação
    - trace: trace da passada (None quando desabilitado)
    - events / warnings: log estruturado e warnings por step
    """

    obj: ObjectWithConditions
    status_writer: Optional[StatusWriter] = None
    object_writer: Optional[ObjectWriter] = None
    config: Dict[str, Any] = field(default_factory=dict)
    pass_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=_utcnow)
    trace: Optional[PassTrace] = None

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    # -----------------------------
    # Object shortcuts
    # -----------------------------
    @property
    def name(self) -> str:
        return getattr(self.obj, "name", "")

    @property
    def kind(self) -> str:
        return getattr(self.obj, "kind", None) or type(self.obj).__name__

    @property
    def conditions(self) -> List[Condition]:
        return self.obj.conditions

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str, default: Any = _MISSING) -> Any:
        if key not in self._artifacts:
            if default is _MISSING:
                raise KeyError(key)
            return default
        return self._artifacts[key]

    def pop_artifact(self, key: str, default: Any = None) -> Any:
        return self._artifacts.pop(key, default)

    # -----------------------------
    # Persistence
    # -----------------------------
    def update_obj_status(self, ctx: ReconcileContext) -> None:
        """Persiste o status atual do objeto via `status_writer`.

        Falhas do colaborador são encapsuladas em `StatusPersistenceError`.
        """
        if self.status_writer is None:
            raise StatusWriterMissingError(
                message="State sem status_writer configurado",
                details={"object": self.name},
                hint="Informe status_writer ao Reconciler ou ao State",
            )
        try:
            self.status_writer.persist_status(ctx, self.obj)
        except ReconcileException:
            raise
        except Exception as err:
            payload = status_update_failed(object_kind=self.kind, object_name=self.name, error=err)
            raise StatusPersistenceError(message=payload.message, details=payload.details, hint=payload.hint) from err

    def update_obj(self, ctx: ReconcileContext) -> None:
        """Persiste o objeto (metadados/spec) via `object_writer`."""
        if self.object_writer is None:
            raise StatusWriterMissingError(
                message="State sem object_writer configurado",
                details={"object": self.name},
                hint="Informe object_writer ao Reconciler ou ao State",
            )
        try:
            self.object_writer.persist_object(ctx, self.obj)
        except ReconcileException:
            raise
        except Exception as err:
            payload = object_update_failed(object_kind=self.kind, object_name=self.name, error=err)
            raise ObjectPersistenceError(message=payload.message, details=payload.details, hint=payload.hint) from err

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def _log_threshold(self) -> int:
        engine_cfg = (self.config or {}).get("engine", {}) or {}
        level = str(engine_cfg.get("log_level", "DEBUG")).upper()
        return LOG_LEVELS.get(level, LOG_LEVELS["DEBUG"])

    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        level = level.upper()
        if LOG_LEVELS.get(level, LOG_LEVELS["INFO"]) < self._log_threshold():
            return
        event = {
            "pass_id": self.pass_id,
            "object": self.name,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": _utcnow().isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
