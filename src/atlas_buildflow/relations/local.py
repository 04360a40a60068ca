"""
LocalRelation: relação particionada em arquivos do sistema local.

Layout físico:
    <location>/<pattern>

O padrão padrão depende do particionamento:
    - sem partições: `part-00000.<ext>`
    - com partições: `c1=${c1}/c2=${c2}/part-00000.<ext>` (estilo Hive)

Formatos suportados:
    - csv      (sem índice)
    - json     (JSON lines, orient=records)
    - parquet  (requer um engine de parquet instalado, ex.: pyarrow)

Colunas de partição não são gravadas nos arquivos: são recuperadas do
caminho na leitura e adicionadas ao artefato com o tipo do campo.

Configuração consumida:
    - relations.local.format → formato quando a relação não declara um
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Set, Union

import pandas as pd

from atlas_buildflow.core.config import config_value
from atlas_buildflow.core.exceptions import (
    OutputExistsError,
    RelationAlreadyExistsError,
    RelationNotFoundError,
)
from atlas_buildflow.core.identifiers import ResourceIdentifier
from atlas_buildflow.core.model.partition import PartitionField, PartitionSchema
from atlas_buildflow.core.model.relation import OutputMode, Relation
from atlas_buildflow.core.model.types import Field, Schema

from .collector import FileCollector

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context

logger = logging.getLogger(__name__)

FORMATS = {"csv": "csv", "json": "json", "parquet": "parquet"}


def _partition_schema(partitions: Any) -> PartitionSchema:
    if isinstance(partitions, PartitionSchema):
        return partitions
    fields: List[PartitionField] = []
    for p in partitions or ():
        if isinstance(p, PartitionField):
            fields.append(p)
        elif isinstance(p, dict):
            fields.append(PartitionField(**p))
        else:
            fields.append(PartitionField(str(p)))
    return PartitionSchema(tuple(fields))


def _schema(schema: Any) -> Optional[Schema]:
    if schema is None or isinstance(schema, Schema):
        return schema
    return Schema(tuple(f if isinstance(f, Field) else Field(**f) for f in schema))


class LocalRelation(Relation):
    """
    Args:
        location: diretório base da relação
        pattern: padrão relativo dos arquivos (variáveis `${campo}`)
        format: csv, json ou parquet (default: `relations.local.format`)
        schema: schema aplicado na leitura
        partitions: campos de partição (PartitionField, dict ou nome)
        options: opções repassadas ao leitor/escritor do pandas
    """

    kind = "local"

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        location: Union[str, Path],
        pattern: Optional[str] = None,
        format: Optional[str] = None,
        schema: Any = None,
        partitions: Sequence[Any] = (),
        options: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> None:
        super().__init__(name, context, description=description)
        config = context.config if context is not None else {}
        fmt = str(format or config_value(config, "relations.local.format", "csv")).lower()
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported local relation format: {fmt}")

        self.location = Path(location)
        self.format = fmt
        self.schema = _schema(schema)
        self.partitions = _partition_schema(partitions)
        self.options: Dict[str, Any] = dict(options or {})
        self.pattern = pattern or self._default_pattern()
        self.collector = FileCollector(self.location, self.pattern, self.partitions.names)

    def _default_pattern(self) -> str:
        filename = f"part-00000.{FORMATS[self.format]}"
        if not self.partitions:
            return filename
        prefix = "/".join(f"{n}=${{{n}}}" for n in self.partitions.names)
        return f"{prefix}/{filename}"

    # -----------------------------
    # Recursos
    # -----------------------------
    def provides(self) -> Set[ResourceIdentifier]:
        return {ResourceIdentifier.of_local(self.location)}

    def requires(self) -> Set[ResourceIdentifier]:
        return set()

    def resources(self, partition: Optional[Mapping[str, Any]] = None) -> Set[ResourceIdentifier]:
        """Um recurso por coordenada: o caminho do padrão substituído, com os pares da partição."""
        self.partitions.validate(partition)
        if not self.partitions:
            return {ResourceIdentifier.of_local(self.location)}
        return {
            ResourceIdentifier.of_local(self.collector.resolve(spec), spec.to_dict())
            for spec in self.partitions.interpolate(partition)
        }

    # -----------------------------
    # Leitura
    # -----------------------------
    def _read_file(self, path: Path) -> pd.DataFrame:
        if self.format == "csv":
            return pd.read_csv(path, **self.options)
        if self.format == "json":
            return pd.read_json(path, orient="records", lines=True, **self.options)
        return pd.read_parquet(path, **self.options)

    def _files(self, partition: Optional[Mapping[str, Any]]) -> List[Path]:
        self.partitions.validate(partition)
        if not self.partitions:
            return self.collector.collect()
        files: List[Path] = []
        for spec in self.partitions.interpolate(partition):
            for path in self.collector.collect(spec):
                if path not in files:
                    files.append(path)
        return files

    def read(self, schema: Optional[Schema] = None, partition: Optional[Mapping[str, Any]] = None) -> pd.DataFrame:
        """
        Lê os arquivos cobertos pelo predicado de partição.

        Sem arquivos, retorna um artefato vazio (com as colunas do schema,
        quando houver). O schema, se informado, é aplicado ao resultado.
        """
        files = self._files(partition)
        frames: List[pd.DataFrame] = []
        for path in files:
            df = self._read_file(path)
            values = self.collector.extract(path)
            for f in self.partitions:
                if f.name in values:
                    df[f.name] = f.coerce(values[f.name])
            frames.append(df)

        logger.info("Read %d files from relation '%s' at %s", len(files), self.name, self.location)

        effective = schema or self.schema
        if frames:
            out = pd.concat(frames, ignore_index=True)
        elif effective is not None:
            out = pd.DataFrame({name: pd.Series(dtype="object") for name in effective.names})
        else:
            out = pd.DataFrame()

        if effective is not None:
            out = effective.apply(out)
        return out

    # -----------------------------
    # Escrita
    # -----------------------------
    def _write_file(self, df: pd.DataFrame, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if self.format == "csv":
            df.to_csv(path, index=False, **self.options)
        elif self.format == "json":
            df.to_json(path, orient="records", lines=True, **self.options)
        else:
            df.to_parquet(path, index=False, **self.options)

    def write(
        self,
        df: pd.DataFrame,
        partition: Optional[Mapping[str, Any]] = None,
        mode: OutputMode = OutputMode.OVERWRITE,
    ) -> None:
        """
        Escreve o artefato em exatamente uma partição.

        Raises:
            InvalidPartitionError: predicado incompleto ou com conjunto/intervalo.
            OutputExistsError: destino com dados e modo ERROR_IF_EXISTS.
        """
        mode = OutputMode(mode)
        spec = self.partitions.spec(partition)
        path = self.collector.resolve(spec)

        if path.exists():
            if mode == OutputMode.ERROR_IF_EXISTS:
                raise OutputExistsError(
                    message=f"Relation '{self.name}' already holds data at {path}",
                    details={"relation": self.name, "path": str(path), "partition": spec.to_dict()},
                    hint="Use mode overwrite or append",
                )
            if mode == OutputMode.IGNORE_IF_EXISTS:
                logger.info("Skipping write of relation '%s': %s already exists", self.name, path)
                return

        data = df.drop(columns=[n for n in self.partitions.names if n in df.columns])
        if mode == OutputMode.APPEND and path.exists():
            data = pd.concat([self._read_file(path), data], ignore_index=True)

        self._write_file(data, path)
        logger.info(
            "Wrote %d rows to relation '%s' at %s (mode=%s)", len(data), self.name, path, mode.value
        )

    def truncate(self, partition: Optional[Mapping[str, Any]] = None) -> None:
        self.partitions.validate(partition)
        if self.partitions and partition:
            self.collector.delete(self.partitions.interpolate(partition))
        else:
            self.collector.truncate()

    # -----------------------------
    # Estado e ciclo de vida
    # -----------------------------
    def exists(self) -> bool:
        return self.location.is_dir()

    def loaded(self, partition: Optional[Mapping[str, Any]] = None) -> bool:
        self.partitions.validate(partition)
        if not self.partitions:
            return self.collector.resolve().is_file()
        return any(self.collector.collect(spec) for spec in self.partitions.interpolate(partition))

    def create(self, if_not_exists: bool = False) -> None:
        if self.exists():
            if if_not_exists:
                return
            raise RelationAlreadyExistsError(
                message=f"Relation '{self.name}' already exists at {self.location}",
                details={"relation": self.name, "location": str(self.location)},
            )
        self.location.mkdir(parents=True)
        logger.info("Created relation '%s' at %s", self.name, self.location)

    def migrate(self) -> None:
        logger.info("Relation '%s' has no physical schema to migrate", self.name)

    def destroy(self, if_exists: bool = False) -> None:
        if not self.exists():
            if if_exists:
                return
            raise RelationNotFoundError(
                message=f"Relation '{self.name}' does not exist at {self.location}",
                details={"relation": self.name, "location": str(self.location)},
            )
        shutil.rmtree(self.location)
        logger.info("Destroyed relation '%s' at %s", self.name, self.location)

    def describe(self) -> Optional[Schema]:
        if self.schema is None:
            return None
        extra = [Field(f.name, f.ftype, description=f.description) for f in self.partitions if f.name not in self.schema.names]
        return Schema(tuple(self.schema.fields) + tuple(extra))
