"""Event log of a CPU process."""

from __future__ import annotations

import enum
import itertools
import logging
import sys
from pathlib import Path
from typing import Iterable, Union

_instances = itertools.count()


class MemoryAccess(enum.Enum):
    WRITE = "ESCRITURA"
    READ = "LEER"


class CpuLogger:
    """Writes CPU events to ``cpu_<id>.log`` and to standard output."""

    def __init__(self, cpu_id: str, level: int = logging.INFO, log_dir: Union[str, Path] = "."):
        self.path = Path(log_dir) / f"cpu_{cpu_id}.log"
        self._logger = logging.getLogger(f"minikernel.cpu.{cpu_id}.{next(_instances)}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        formatter = logging.Formatter("[%(levelname)s] %(asctime)s CPU: %(message)s")
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

    def __enter__(self) -> "CpuLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _info(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str) -> None:
        self._info(message)

    def fetch(self, pid: int, program_counter: int) -> None:
        self._info(f"## PID: {pid} - FETCH - Program Counter: {program_counter}")

    def interrupt_received(self) -> None:
        self._info("## Llega interrupción al puerto Interrupt")

    def instruction_executed(self, pid: int, opcode: str, params: Union[str, Iterable[str]]) -> None:
        text = params if isinstance(params, str) else " ".join(params)
        self._info(f"## PID: {pid} - Ejecutando: {opcode} - {text}")

    def memory_access(self, pid: int, access: MemoryAccess, physical_address: int, value: str) -> None:
        self._info(
            f"## PID: {pid} - Acción: {access.value} - Dirección Física: {physical_address} - Valor: {value}"
        )

    def frame_obtained(self, pid: int, page: int, frame: int) -> None:
        self._info(f"## PID: {pid} - OBTENER MARCO - Página: {page} - Frame: {frame}")

    def tlb_hit(self, pid: int, page: int) -> None:
        self._info(f"## PID: {pid} - TLB HIT - Pagina: {page}")

    def tlb_miss(self, pid: int, page: int) -> None:
        self._info(f"## PID: {pid} - TLB MISS - Pagina: {page}")

    def tlb_add(self, pid: int, page: int) -> None:
        self._info(f"## PID: {pid} - TLB ADD - Pagina: {page}")

    def cache_hit(self, pid: int, page: int) -> None:
        self._info(f"## PID: {pid} - Cache Hit - Pagina: {page}")

    def cache_miss(self, pid: int, page: int) -> None:
        self._info(f"## PID: {pid} - Cache Miss - Pagina: {page}")

    def cache_add(self, pid: int, page: int) -> None:
        self._info(f"## PID: {pid} - Cache Add - Pagina: {page}")

    def cache_written_back(self, pid: int, page: int, frame: int) -> None:
        self._info(f"## PID: {pid} - Memory Update - Página: {page} - Frame: {frame}")