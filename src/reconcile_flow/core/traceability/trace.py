# src/reconcile_flow/core/traceability/trace.py
"""
Trace de uma passada de reconciliação.

Este módulo define o `PassTrace`, o registro ordenado do que o engine
executou durante uma passada: quais Actions começaram, em que ordem,
com que sinal terminaram e qual ramo cada Switch escolheu.

Os nomes dados a composers e steps existem apenas para diagnóstico, e é
aqui que eles aparecem.

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente: composers chamam a API
    - A ordem do Event Log reflete a ordem real de execução
    - A estrutura é serializável (`to_dict`)

Invariantes:
    - `events` é sempre uma lista ordenada
    - Todo `action_finished` corresponde a um `action_started` anterior
      (exceto quando o step levanta exceção, que não é capturada)

Limites explícitos:
    - Não é um log durável de workflow: o trace vive apenas durante a passada
      e no `ReconcileResult` devolvido ao chamador
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


ACTION_KIND_STEP = "step"
ACTION_KIND_SEQUENCE = "sequence"
ACTION_KIND_SWITCH = "switch"


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PassTrace:
    """
    Registro ordenado de uma passada de reconciliação.

    Campos:
        - pass_id: identificador da passada (mesmo do State)
        - object: nome do objeto reconciliado
        - config_hash: hash da configuração efetiva do engine
        - started_at: timestamp UTC ISO de criação
        - events: Event Log ordenado
    """

    pass_id: str
    object: str
    config_hash: str
    started_at: str
    events: List[Dict[str, Any]] = field(default_factory=list)

    # pilha de inícios abertos: (nome, timestamp)
    _open: List[Any] = field(default_factory=list, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pass_id": self.pass_id,
            "object": self.object,
            "config_hash": self.config_hash,
            "started_at": self.started_at,
            "events": [dict(e) for e in self.events],
        }


def create_trace(
    *,
    pass_id: str,
    object_name: str,
    config_hash: str,
    started_at: Optional[datetime] = None,
) -> PassTrace:
    return PassTrace(
        pass_id=pass_id,
        object=object_name,
        config_hash=config_hash,
        started_at=_iso(started_at or _utcnow()),
    )


def add_event(
    trace: PassTrace,
    *,
    event_type: str,
    name: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
    ts: Optional[datetime] = None,
) -> None:
    """Adiciona um evento explícito ao Event Log, na ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts or _utcnow())}
    if name is not None:
        ev["name"] = name
    if payload is not None:
        ev["payload"] = payload
    trace.events.append(ev)


def action_started(trace: PassTrace, *, name: str, kind: str) -> None:
    ts = _utcnow()
    trace._open.append((name, ts))
    add_event(trace, event_type="action_started", name=name, payload={"kind": kind}, ts=ts)


def action_finished(trace: PassTrace, *, name: str, signal: str) -> None:
    """
    Registra o término de um Action com o rótulo do sinal devolvido
    (continue / stop_and_forget / stop_with_requeue / propagate).
    """
    ts = _utcnow()
    duration_ms = 0
    # fecha o início aberto mais recente com o mesmo nome
    for i in range(len(trace._open) - 1, -1, -1):
        open_name, started = trace._open[i]
        if open_name == name:
            duration_ms = _ms_between(started, ts)
            del trace._open[i]
            break
    add_event(
        trace,
        event_type="action_finished",
        name=name,
        payload={"signal": signal, "duration_ms": duration_ms},
        ts=ts,
    )


def branch_selected(trace: PassTrace, *, switch: str, branch: str, case_index: Optional[int]) -> None:
    add_event(
        trace,
        event_type="branch_selected",
        name=switch,
        payload={"branch": branch, "case_index": case_index},
    )


def executed_actions(trace: PassTrace, *, kind: str = ACTION_KIND_STEP) -> List[str]:
    """Nomes dos Actions do tipo `kind` que começaram, em ordem de execução."""
    return [
        e["name"]
        for e in trace.events
        if e["event_type"] == "action_started" and (e.get("payload") or {}).get("kind") == kind
    ]


def finished_signal(trace: PassTrace, name: str) -> Optional[str]:
    """Rótulo do sinal do último `action_finished` com o nome informado."""
    for e in reversed(trace.events):
        if e["event_type"] == "action_finished" and e.get("name") == name:
            return e["payload"]["signal"]
    return None
