# src/atlas_buildflow/__init__.py
"""
Atlas BuildFlow — núcleo de orquestração de builds declarativos de dados.

O Atlas BuildFlow transforma um grafo de mappings (transformações
nomeadas) e relations (armazenamento) numa sequência executada de fases
de build, com observabilidade por listeners e reuso correto de
resultados já computados.

Arquitetura em alto nível:
    - core.context      → resolução de nomes e variáveis com escopos
    - core.execution    → instanciação com cache e monitoramento
    - core.engine       → planejamento e execução de jobs
    - relations         → relações locais particionadas em arquivos
    - mappings          → transformações sobre DataFrames
    - targets           → unidades de build por fase
    - assertions        → verificações sobre artefatos
    - listeners         → Manifest e log de execução
"""

__version__ = "0.1.0"
