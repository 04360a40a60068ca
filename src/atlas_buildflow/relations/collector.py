"""
FileCollector: resolução de coordenadas de partição em arquivos.

O coletor combina um diretório base (`location`) e um padrão relativo com
variáveis (`pattern`), por exemplo:

    year=${year}/month=${month}/part-00000.csv

Operações:
    - resolve(spec)  → caminho com as variáveis substituídas (`*` nos campos não ligados)
    - glob(spec)     → caminhos existentes que casam com o padrão resolvido
    - collect(spec)  → apenas os arquivos de `glob(spec)`
    - extract(path)  → valores das variáveis recuperados de um caminho
    - delete(specs)  → remove os arquivos das coordenadas (e diretórios que ficarem vazios)
    - truncate()     → remove todo o conteúdo sob `location`, preservando o diretório

Invariantes:
    - nenhuma operação remove o próprio diretório base
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from atlas_buildflow.core.model.partition import PartitionSpec

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")

WILDCARD = "*"


class FileCollector:
    def __init__(self, location: Union[str, Path], pattern: str, variables: Sequence[str] = ()) -> None:
        self.location = Path(location)
        self.pattern = pattern.lstrip("/")
        self.variables = list(variables)
        self._regex = self._compile(self.pattern)

    @staticmethod
    def _compile(pattern: str) -> "re.Pattern[str]":
        parts: List[str] = []
        seen: List[str] = []
        pos = 0
        for match in _PLACEHOLDER.finditer(pattern):
            parts.append(re.escape(pattern[pos:match.start()]))
            name = match.group(1) or match.group(2)
            if name in seen:
                parts.append(f"(?P={name})")
            else:
                seen.append(name)
                parts.append(f"(?P<{name}>[^/]+)")
            pos = match.end()
        parts.append(re.escape(pattern[pos:]))
        return re.compile("^" + "".join(parts) + "$")

    def _relative(self, spec: Optional[PartitionSpec]) -> str:
        values: Dict[str, str] = {name: WILDCARD for name in self.variables}
        if spec is not None:
            values.update({k: str(v) for k, v in spec.items()})

        def replace(match: "re.Match[str]") -> str:
            name = match.group(1) or match.group(2)
            return values.get(name, WILDCARD)

        return _PLACEHOLDER.sub(replace, self.pattern)

    def resolve(self, spec: Optional[PartitionSpec] = None) -> Path:
        return self.location / self._relative(spec)

    def glob(self, spec: Optional[PartitionSpec] = None) -> List[Path]:
        if not self.location.is_dir():
            return []
        relative = self._relative(spec)
        if not any(ch in relative for ch in "*?["):
            path = self.location / relative
            return [path] if path.exists() else []
        return sorted(self.location.glob(relative))

    def collect(self, spec: Optional[PartitionSpec] = None) -> List[Path]:
        return [p for p in self.glob(spec) if p.is_file()]

    def extract(self, path: Union[str, Path]) -> Dict[str, str]:
        """Valores das variáveis do padrão presentes em `path` (vazio se não casar)."""
        candidate = Path(path)
        try:
            relative = candidate.relative_to(self.location).as_posix()
        except ValueError:
            relative = candidate.as_posix()
        match = self._regex.match(relative)
        return dict(match.groupdict()) if match else {}

    def delete(self, specs: Iterable[PartitionSpec]) -> int:
        """Remove os arquivos das coordenadas; retorna quantos foram removidos."""
        removed = 0
        for spec in specs:
            for path in self.glob(spec):
                if path.is_dir():
                    shutil.rmtree(path)
                else:
                    path.unlink()
                removed += 1
                self._prune(path.parent)
        if removed:
            logger.info("Deleted %d partition files under %s", removed, self.location)
        return removed

    def _prune(self, directory: Path) -> None:
        root = self.location.resolve()
        current = directory
        while current.exists() and current.resolve() != root and root in current.resolve().parents:
            if any(current.iterdir()):
                break
            current.rmdir()
            current = current.parent

    def truncate(self) -> None:
        if not self.location.is_dir():
            return
        for child in self.location.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()
        logger.info("Truncated %s", self.location)
