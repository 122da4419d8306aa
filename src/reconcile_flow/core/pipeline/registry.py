# src/reconcile_flow/core/pipeline/registry.py
"""
Biblioteca de steps nomeados de um controller.

Este módulo define o `ActionRegistry`, o mapeamento nome → Action que um
controller monta no build time. Cada step registrado é testável de forma
isolada, dado um State construído no teste.

Responsabilidades do módulo:
    - Validar nome não vazio e único
    - Preservar ordem de registro
    - Montar pipelines sequenciais a partir de nomes registrados

Invariantes:
    - Cada Action registrado possui um `name` único
    - `list()` reflete exatamente a ordem de registro

Limites explícitos:
    - Não executa Actions
    - Não contém lógica de provider
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .action import Action, as_action


class DuplicateActionNameError(ValueError):
    """
    Dois Actions com o mesmo `name` no registry.

    A duplicidade é tratada como erro fatal de build do controller:
    nenhum registro parcial é aceito após a detecção.
    """


class UnknownActionError(KeyError):
    """Nome de step não registrado."""


@dataclass
class ActionRegistry:
    """Registro canônico de steps nomeados (step library)."""

    _actions: Dict[str, Action] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, act) -> Action:
        act = as_action(act)
        name = getattr(act, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("action.name must be a non-empty string")

        if name in self._actions:
            raise DuplicateActionNameError(f"Duplicate action name: {name}")

        self._actions[name] = act
        self._order.append(name)
        return act

    def get(self, name: str) -> Action:
        if name not in self._actions:
            raise UnknownActionError(name)
        return self._actions[name]

    def __contains__(self, name: str) -> bool:
        return name in self._actions

    def names(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[Action]:
        return [self._actions[n] for n in self._order]

    def compose(self, name: str, *step_names: str):
        """Monta um Sequential Composer com os steps registrados, na ordem dada."""
        # import local: engine depende de pipeline
        from reconcile_flow.core.engine.compose import compose_actions

        return compose_actions(name, *(self.get(n) for n in step_names))
