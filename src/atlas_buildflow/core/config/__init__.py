# src/atlas_buildflow/core/config/__init__.py
"""
Camada de configuração do Atlas BuildFlow.

A configuração é declarativa, determinística e separada da definição dos
projetos (mappings, relations, targets e jobs). Este pacote carrega
arquivos YAML/JSON, resolve camadas via deep-merge e gera o hash canônico
gravado no Manifest.
"""

from .errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULT_CONFIG, config_value, load_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "DEFAULT_CONFIG",
    "compute_config_hash",
    "config_value",
    "deep_merge",
    "load_config",
]
