"""Event log of the kernel."""

from __future__ import annotations

import itertools
import logging
import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from minikernel.kernel.pcb import State, state_name

_instances = itertools.count()


def format_metrics(
    state_counts: Mapping[State, int],
    state_times: Mapping[State, Iterable[int]],
) -> str:
    """Render ``STATE (visits) (total ms)`` for every state, in state order."""
    return ", ".join(
        f"{state.name} ({state_counts.get(state, 0)}) ({sum(state_times.get(state, ()))})"
        for state in State
    )


class KernelLogger:
    """Writes kernel events to a log file and to standard output."""

    def __init__(self, level: int = logging.INFO, log_file: Union[str, Path] = "kernel.log"):
        self.path = Path(log_file)
        self._logger = logging.getLogger(f"minikernel.kernel.{next(_instances)}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        formatter = logging.Formatter("[%(levelname)s] %(asctime)s Kernel: %(message)s")
        for handler in (
            logging.FileHandler(self.path, encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ):
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def close(self) -> None:
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)

    def __enter__(self) -> "KernelLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _info(self, message: str) -> None:
        self._logger.info(message)

    def event(self, message: str) -> None:
        self._info(message)

    def error(self, message: str) -> None:
        self._info(message)

    def syscall_received(self, pid: int, syscall: str) -> None:
        self._info(f"## ({pid}) - Solicitó syscall: {syscall}")

    def process_created(self, pid: int) -> None:
        self._info(f"## ({pid}) Se crea el proceso - Estado: NEW")

    def state_changed(self, pid: int, previous: Optional[State], current: Optional[State]) -> None:
        self._info(
            f"## ({pid}) Pasa del estado {state_name(previous)} al estado {state_name(current)}"
        )

    def blocked_for_io(self, pid: int, device: str) -> None:
        self._info(f"## ({pid}) - Bloqueado por IO: {device}")

    def io_finished(self, pid: int) -> None:
        self._info(f"## ({pid}) finalizó IO y pasa a READY")

    def srt_eviction(self, pid: int) -> None:
        self._info(f"## ({pid}) - Desalojado por fin de SRT")

    def process_finished(self, pid: int) -> None:
        self._info(f"## ({pid}) - Finaliza el proceso")

    def process_metrics(
        self,
        pid: int,
        state_counts: Mapping[State, int],
        state_times: Mapping[State, Iterable[int]],
    ) -> None:
        self._info(f"## ({pid}) - Métricas de estado: {format_metrics(state_counts, state_times)}")

    def timer_started(self, pid: int, duration_ms: int) -> None:
        self._info(f"## ({pid}) - Cronómetro arrancado por {duration_ms} ms")

    def process_suspended(self, pid: int, duration_ms: int) -> None:
        self._info(f"## ({pid}) - Proceso suspendido por {duration_ms} ms")