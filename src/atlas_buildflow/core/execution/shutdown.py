# src/atlas_buildflow/core/execution/shutdown.py
"""
Garantias de término abrupto para unidades monitoradas.

    - ShutdownHook       → registra um callback no `atexit` enquanto a unidade roda
    - TerminationSignals → converte SIGTERM em `SystemExit` no thread principal

O MonitorExecution usa o ShutdownHook para que listeners recebam o
`finish` FAILED mesmo se o interpretador encerrar com a unidade ainda
em execução (ex.: thread não-principal ao fim do processo). Com os
sinais instalados, um SIGTERM vira `SystemExit`, que percorre o caminho
normal de exceção do monitor antes de encerrar o processo.

Limites explícitos:
    - SIGKILL e `os._exit` não executam hooks; nenhuma notificação é possível
"""

from __future__ import annotations

import atexit
import logging
import signal
import threading
from typing import Callable, Dict, Optional, Sequence

logger = logging.getLogger(__name__)


class ShutdownHook:
    """Context manager que mantém `callback` registrado no `atexit` durante o bloco.

    O registro é desfeito em toda saída do bloco (normal ou por exceção),
    então o hook nunca dispara depois que a unidade terminou.
    """

    def __init__(self, callback: Callable[[], None], *, enabled: bool = True) -> None:
        self._callback = callback
        self.enabled = enabled
        self.registered = False

    def _fire(self) -> None:
        logger.warning("Process is exiting while a monitored unit is still running")
        self._callback()

    def __enter__(self) -> "ShutdownHook":
        if self.enabled:
            atexit.register(self._fire)
            self.registered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.registered:
            atexit.unregister(self._fire)
            self.registered = False
        return False


class TerminationSignals:
    """Instala handlers que convertem sinais de término em `SystemExit`.

    Só tem efeito no thread principal (restrição do módulo `signal`).
    Os handlers originais são restaurados na saída.
    """

    def __init__(self, signals: Sequence[int] = (signal.SIGTERM,), *, enabled: bool = True) -> None:
        self.signals = tuple(signals)
        self.enabled = enabled
        self._original: Dict[int, object] = {}

    def _handle(self, signum: int, frame: Optional[object]) -> None:
        name = signal.Signals(signum).name
        logger.warning("Received %s, aborting running units", name)
        raise SystemExit(128 + signum)

    def install(self) -> None:
        if not self.enabled or self._original:
            return
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, termination signals not installed")
            return
        for sig in self.signals:
            self._original[sig] = signal.signal(sig, self._handle)

    def uninstall(self) -> None:
        for sig, handler in self._original.items():
            signal.signal(sig, handler)
        self._original.clear()

    def __enter__(self) -> "TerminationSignals":
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.uninstall()
        return False
