"""
Core do Reconcile Flow.

Este pacote contém o engine genérico de reconciliação, independente de
qualquer tipo de recurso ou provider.

Componentes principais:
    - config       → carregamento, merge e hashing da configuração do engine
    - pipeline     → sinais, contexto, State, Action, predicados, registry
    - engine       → composer sequencial, Switch, builder de status, Reconciler
    - traceability → trace ordenado de cada passada

Limites explícitos:
    - Não contém steps de provider
    - Não conhece o client do cluster nem o scheduler
"""
