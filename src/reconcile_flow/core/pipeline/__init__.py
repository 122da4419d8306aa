"""
# Pipeline Core — Reconcile Flow

Contratos e estruturas fundamentais de uma passada de reconciliação.

## Componentes

- **signals**: vocabulário fechado de sinais (Continue, StopAndForget,
  StopWithRequeue, Propagate)
- **context**: `ReconcileContext`, contexto ambiente imutável e cancelável
- **types**: `Condition`, `ConditionStatus`, `ObjectWithConditions`
- **conditions**: upsert/remoção de conditions por type
- **state**: `State`, contexto mutável da passada (objeto, artefatos, logs,
  persistência)
- **action**: `Action` (Protocol), `ActionOutcome`, `@action`
- **predicates**: predicados para casos de Switch
- **registry**: `ActionRegistry`, biblioteca de steps nomeados

## Invariantes

- Um State por passada, nunca compartilhado
- Steps se comunicam apenas via State
- Nenhum sinal fora do vocabulário fechado
"""
