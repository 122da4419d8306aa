# src/reconcile_flow/core/config/__init__.py
"""
Camada de configuração do Reconcile Flow.

Este pacote carrega, mescla e identifica a configuração do engine de
reconciliação (backoff padrão de requeue, nível de log, política para
exceções inesperadas, trace da passada).

A configuração é:
    - declarativa (arquivo de defaults + override local opcional)
    - determinística (deep-merge sem heurísticas)
    - rastreável (hash SHA-256 canônico registrado no trace da passada)

Limites explícitos:
    - Não valida semântica de providers
    - Não executa reconciliação
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
]
