# src/atlas_buildflow/core/config/hashing.py
"""
Hashing canônico de configuração.

O hash representa a identidade estrutural da configuração efetiva de uma
sessão e é gravado no Manifest de cada run (`inputs.config_hash`).

Política (v1): JSON canônico (chaves ordenadas, separadores compactos,
UTF-8) + SHA-256. Valores não serializáveis em JSON são convertidos via
`str`, para que caminhos (`Path`) não quebrem o hashing.
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash SHA-256 determinístico da configuração efetiva.

    Args:
        config (Dict[str, Any]): Configuração efetiva.

    Returns:
        str: Hash hexadecimal de 64 caracteres.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
