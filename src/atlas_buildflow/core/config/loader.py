# src/atlas_buildflow/core/config/loader.py
"""
Loader canônico de configuração do Atlas BuildFlow.

A configuração efetiva de uma sessão é resolvida em camadas:
    1. `DEFAULT_CONFIG` embutido (sempre presente)
    2. arquivo de defaults do projeto (opcional)
    3. arquivo local de overrides (opcional, ignorado se não existir)
    4. overrides programáticos (opcional)

Cada camada é aplicada via `deep_merge`, com precedência da camada mais
específica. Arquivos aceitos: YAML (.yaml, .yml) e JSON (.json).

Chaves consumidas pelo núcleo:
    - engine.fail_fast          → Runner interrompe o lifecycle na 1ª falha
    - engine.log_level          → nível do logger `atlas_buildflow`
    - execution.shutdown_hook   → registra o hook de término abrupto
    - relations.local.format    → formato default de LocalRelation
    - manifest.path             → Session anexa um ManifestListener
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    ConfigNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "fail_fast": True,
        "log_level": "INFO",
    },
    "execution": {
        "shutdown_hook": True,
    },
    "relations": {
        "local": {"format": "csv"},
    },
    "manifest": {
        "path": None,
    },
}

_MISSING = object()


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        ConfigNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise ConfigNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: Optional[Union[str, Path]] = None,
    local_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva de uma sessão.

    Política de resolução:
        - `DEFAULT_CONFIG` é sempre a base
        - `defaults_path`, quando informado, deve existir
        - `local_path` é opcional e ignorado quando o arquivo não existe
        - `overrides` tem a maior precedência

    Args:
        defaults_path: Caminho opcional para o arquivo de defaults do projeto.
        local_path: Caminho opcional para overrides locais.
        overrides: Overrides programáticos (ex.: vindos de testes).

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        ConfigNotFoundError: Se `defaults_path` não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    effective = deepcopy(DEFAULT_CONFIG)

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    if overrides:
        effective = deep_merge(effective, overrides)

    return effective


def config_value(config: Optional[Dict[str, Any]], key: str, default: Any = None) -> Any:
    """Lê uma chave pontuada (`engine.fail_fast`) de uma configuração resolvida.

    Chaves ausentes (ou com valor None) retornam `default`.
    """
    node: Any = config or {}
    for part in key.split("."):
        if not isinstance(node, dict):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return default if node is None else node
