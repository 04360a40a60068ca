# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas BuildFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações YAML mínimas e determinísticas (loader de config)
- um listener que grava a sequência de notificações recebidas
- um mapping em memória que conta quantas vezes foi executado
- projetos pequenos montados com prototypes

Decisões arquiteturais:
    - Fixtures que retornam *classes* (não instâncias) permitem que cada
      teste monte seu próprio grafo de prototypes
    - Artefatos são pandas.DataFrame pequenos e literais
    - Testes que fazem I/O usam `tmp_path`

Invariantes:
    - Nenhuma fixture executa jobs
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração (ver tests/core/engine)
"""

import pytest


# =====================================================
# Config loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Este fixture representa o conteúdo típico de um arquivo `config.defaults.yaml`,
    servindo como base canônica sobre a qual configurações locais são aplicadas
    via deep-merge.

    Ele é utilizado para validar:
    - leitura de configuração padrão em formato YAML
    - comportamento correto do merge com overrides locais
    - preservação de valores não sobrescritos

    Decisões arquiteturais:
        - Configuração fornecida como string para evitar I/O
        - Estrutura alinhada ao DEFAULT_CONFIG
        - Defaults sempre representam a base completa e estável

    Invariantes:
        - YAML sintaticamente válido
        - Contém configuração base suficiente para o engine
        - Pode ser combinado com config local sem ambiguidade

    Limites explícitos:
        - Não testa leitura de arquivo
        - Não testa validação semântica profunda
        - Não representa necessariamente configuração final de produção

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge (defaults + local)
        - Testes de hashing de config resolvida

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """

    return """\
engine:
  fail_fast: true
  log_level: INFO
relations:
  local:
    format: csv
execution:
  shutdown_hook: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração local semelhante ao uso real do projeto.

    Este fixture representa uma configuração *local* (override) em formato YAML,
    simulando o conteúdo típico de um arquivo `config.local.yaml` em projetos
    baseados no Atlas BuildFlow.

    Ele é usado para testar:
    - carregamento de configuração a partir de string YAML
    - aplicação de overrides sobre defaults
    - políticas de deep-merge definidas pelo core de config

    Decisões arquiteturais:
        - A configuração é fornecida como string, não como arquivo físico
        - Estrutura alinhada ao DEFAULT_CONFIG
        - Foco em comportamento de override, não em valores absolutos

    Invariantes:
        - YAML sintaticamente válido
        - Representa apenas overrides locais
        - Não contém configuração completa do projeto

    Limites explícitos:
        - Não testa acesso a filesystem
        - Não testa variáveis de ambiente
        - Não representa config final resolvida

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge (defaults + local)
        - Testes de hashing pós-merge

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """

    return """\
engine:
  log_level: DEBUG
relations:
  local:
    format: json
"""


# =====================================================


# =====================================================
# Execução: listener gravador e mapping em memória
# =====================================================

@pytest.fixture
def RecordingListener():
    """
    Fixture que fornece uma classe de listener que grava cada notificação.

    Cada evento é registrado como tupla `(hook, nome, ...)` em `events`,
    na ordem em que o monitor o entregou. Com `fail_on`, o hook indicado
    levanta RuntimeError, simulando um listener defeituoso.

    Returns:
        type: subclasse de ExecutionListener.
    """
    from atlas_buildflow.core.execution import (
        AssertionToken,
        ExecutionListener,
        JobToken,
        LifecycleToken,
        TargetToken,
    )

    class _RecordingListener(ExecutionListener):
        def __init__(self, label="listener", fail_on=None, events=None):
            self.label = label
            self.fail_on = fail_on
            self.events = events if events is not None else []
            self.results = []

        def _record(self, hook, *payload):
            if hook == self.fail_on:
                raise RuntimeError(f"{self.label} failed on {hook}")
            self.events.append((self.label, hook) + payload)

        def start_lifecycle(self, execution, job, lifecycle, parent):
            self._record("start_lifecycle", job.job)
            return LifecycleToken()

        def finish_lifecycle(self, execution, token, result):
            self.results.append(result)
            self._record("finish_lifecycle", result.name, result.status)

        def start_job(self, execution, job, phase, parent):
            self._record("start_job", job.job, phase)
            return JobToken()

        def finish_job(self, execution, token, result):
            self.results.append(result)
            self._record("finish_job", result.name, result.status)

        def start_target(self, execution, target, phase, parent):
            self._record("start_target", target.name, phase)
            return TargetToken()

        def finish_target(self, execution, token, result):
            self.results.append(result)
            self._record("finish_target", result.name, result.status)

        def start_assertion(self, execution, assertion, parent):
            self._record("start_assertion", assertion.name)
            return AssertionToken()

        def finish_assertion(self, execution, token, result):
            self.results.append(result)
            self._record("finish_assertion", result.name, result.status)

    return _RecordingListener


@pytest.fixture
def FrameMapping():
    """
    Fixture que fornece um mapping de teste baseado em DataFrame literal.

    O mapping concatena os inputs (ou devolve `rows` na coluna `value`
    quando não há inputs) e registra cada execução em `calls`, lista de
    classe: como a fixture cria uma classe nova por teste, a lista é
    isolada entre testes.

    Returns:
        type: subclasse de Mapping.
    """
    import pandas as pd

    from atlas_buildflow.core.model import Mapping

    class _FrameMapping(Mapping):
        calls = []

        def __init__(self, name, context=None, *, rows=None, fail=False, **kwargs):
            super().__init__(name, context, **kwargs)
            self.rows = rows if rows is not None else [1]
            self.fail = fail

        def execute(self, execution, inputs):
            self.calls.append(self.name)
            if self.fail:
                raise RuntimeError(f"mapping {self.name} failed")
            if not inputs:
                return pd.DataFrame({"value": list(self.rows)})
            frames = [inputs[ident] for ident in self.inputs]
            return pd.concat(frames, ignore_index=True)

    return _FrameMapping


@pytest.fixture
def root_context():
    """Contexto raiz com a configuração embutida (sem arquivos)."""
    from atlas_buildflow.core.config import load_config
    from atlas_buildflow.core.context import Context

    return Context(config=load_config())
