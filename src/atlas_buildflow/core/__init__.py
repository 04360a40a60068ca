# src/atlas_buildflow/core/__init__.py
"""
Core do Atlas BuildFlow.

Este pacote contém o núcleo de orquestração:
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - context      → escopos de nomes e variáveis
    - model        → schemas, partições, resultados e contratos
    - execution    → instanciação com cache, monitoramento por listeners, sessão
    - engine       → planejamento de targets e execução de jobs
    - traceability → Manifest e Event Log para auditoria

Limites explícitos:
    - Não faz parsing de especificações declarativas
    - Não depende de CLI ou serviços externos
"""
