"""
Engine do Reconcile Flow.

Combinadores e fronteira com o scheduler:
    - compose    → composer sequencial (para no primeiro sinal terminal)
    - switch     → seleção exclusiva pelo primeiro predicado que casar
    - status     → builder de atualização de conditions + persistência
    - reconciler → uma passada por chamada, sinal → decisão do scheduler

Invariantes:
    - Steps executam em ordem estrita, um por vez
    - Composers nunca capturam nem reclassificam erros ou sinais
    - Apenas o builder de status traduz erro de persistência em sinal
"""
