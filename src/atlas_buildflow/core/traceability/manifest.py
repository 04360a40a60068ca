# src/atlas_buildflow/core/traceability/manifest.py
"""
Manifest v1 — rastreabilidade forense de execuções no Atlas BuildFlow.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run)
    - hash semântico da configuração
    - estado incremental de cada unidade monitorada (lifecycle, job,
      target, assertion), indexado pelo id do token
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico
    - O Manifest é independente de executor, runner e listeners

Limites explícitos:
    - Não executa jobs
    - Não decide políticas de execução
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, nunca negativa."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class BuildManifest:
    """
    Manifest v1 — registro forense de uma sessão de build.

    Campos principais:
        - run: metadados da execução (run_id, started_at, version)
        - inputs: hashes semânticos das entradas (config_hash)
        - units: estado incremental de cada unidade, por unit_id
        - events: Event Log ordenado

    Invariantes:
        - `units` é sempre um dicionário indexado por unit_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    units: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "units": {k: dict(v) for k, v in self.units.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildManifest":
        """Reconstrução permissiva: campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            units={k: dict(v) for k, v in (data.get("units", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
) -> BuildManifest:
    """
    Cria o Manifest inicial de uma sessão (Manifest v1).

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio e só é preenchido por `add_event`,
    `unit_started` ou `unit_finished`.
    """
    started_at = _ensure_tzaware_utc(started_at)
    return BuildManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "version": version,
        },
        inputs={"config_hash": config_hash},
        units={},
        events=[],
    )


def _get_manifest(manifest: Union[BuildManifest, Dict[str, Any]]) -> Tuple[BuildManifest, bool]:
    if isinstance(manifest, BuildManifest):
        return manifest, False
    return BuildManifest.from_dict(manifest), True


def _sync(manifest: Union[BuildManifest, Dict[str, Any]], m: BuildManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[BuildManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    unit_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    Invariantes:
        - Cada chamada adiciona exatamente um evento
        - `event_type` e `timestamp` estão sempre presentes
        - Eventos não são reordenados ou deduplicados
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if unit_id is not None:
        ev["unit_id"] = unit_id
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync(manifest, m, is_dict)


def unit_started(
    manifest: Union[BuildManifest, Dict[str, Any]],
    *,
    unit_id: str,
    category: str,
    name: str,
    ts: datetime,
    parent_id: Optional[str] = None,
    phase: Optional[str] = None,
) -> None:
    """
    Registra o início de uma unidade monitorada.

    A unidade passa a existir no Manifest com status `"running"`, e um
    evento `<category>_started` é adicionado ao Event Log.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    unit: Dict[str, Any] = {
        "unit_id": unit_id,
        "category": category,
        "name": name,
        "status": "running",
        "started_at": _iso(ts),
    }
    if parent_id is not None:
        unit["parent_id"] = parent_id
    if phase is not None:
        unit["phase"] = phase
    m.units.setdefault(unit_id, {}).update(unit)

    payload: Dict[str, Any] = {"name": name}
    if phase is not None:
        payload["phase"] = phase
    add_event(m, event_type=f"{category}_started", ts=ts, unit_id=unit_id, payload=payload)
    _sync(manifest, m, is_dict)


def unit_finished(
    manifest: Union[BuildManifest, Dict[str, Any]],
    *,
    unit_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra o término de uma unidade monitorada.

    Atualiza status final, `finished_at`, `duration_ms` (a partir de
    `started_at` quando disponível) e o erro, quando presente. Um evento
    `<category>_finished` é adicionado ao Event Log.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    u = m.units.setdefault(unit_id, {"unit_id": unit_id})
    started_iso = u.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = result.get("status", "success")
    u.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
        }
    )
    if result.get("error") is not None:
        u["error"] = result["error"]
    if result.get("tests"):
        u["tests"] = list(result["tests"])

    category = u.get("category") or result.get("category", "unit")
    add_event(
        m,
        event_type=f"{category}_finished",
        ts=ts,
        unit_id=unit_id,
        payload={"status": status, "duration_ms": u["duration_ms"]},
    )
    _sync(manifest, m, is_dict)


def save_manifest(manifest: Union[BuildManifest, Dict[str, Any]], path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (`sort_keys=True`).

    Diretórios intermediários são criados automaticamente.
    """
    data = manifest.to_dict() if isinstance(manifest, BuildManifest) else manifest
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> BuildManifest:
    """Restaura um Manifest persistido; erros de I/O e JSON propagam."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return BuildManifest.from_dict(data)
