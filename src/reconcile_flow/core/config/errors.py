# src/reconcile_flow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Reconcile Flow.

As exceções aqui definidas representam violações estruturais da
configuração do engine, e não falhas de uma passada de reconciliação.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de provider ou de step
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Reconcile Flow.

    Permite captura genérica de erros de configuração no bootstrap do
    controller, antes de qualquer passada de reconciliação.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    O arquivo de defaults é obrigatório: sem ele o controller não sobe.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"requeue_after_seconds": 5}}
        - override: {"engine": "fast"}

    Números (int/float) são intercambiáveis; bool não é número.
    Nenhum merge parcial é produzido em caso de conflito.
    """
