# src/atlas_buildflow/core/config/errors.py
"""
Exceções da camada de configuração do Atlas BuildFlow.

Todas herdam de `ConfigError` e representam violações estruturais da
configuração (arquivo ausente, formato desconhecido, raiz inválida,
conflito de tipos no merge). Não representam erros de execução.
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Atlas BuildFlow.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais e falhas de orquestração.
    """


class ConfigNotFoundError(ConfigError):
    """Arquivo de configuração declarado explicitamente não existe."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"fail_fast": true}}
        - override: {"engine": "DEBUG"}
    """
