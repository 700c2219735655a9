"""Configuration files for the CPU, IO device and kernel processes."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

PathLike = Union[str, Path]

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LOG_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def parse_log_level(name: str) -> int:
    """Return the ``logging`` level for a level name such as ``INFO``."""
    try:
        return _LOG_LEVELS[name.strip().upper()]
    except KeyError:
        raise ValueError(f"unknown log level: {name!r}") from None


class ConfigFile:
    """A flat ``KEY=VALUE`` configuration file."""

    def __init__(self, values: Optional[Mapping[str, str]] = None, path: Optional[Path] = None):
        self._values = dict(values or {})
        self.path = path

    @classmethod
    def parse(cls, text: str, path: Optional[Path] = None) -> "ConfigFile":
        """Build a configuration from file text; blank lines and ``#`` comments are skipped."""
        values = {}
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip()
        return cls(values, path)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get_string(self, key: str) -> str:
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(f"missing configuration key: {key}") from None

    def get_int(self, key: str) -> int:
        return int(self.get_string(key))

    def get_float(self, key: str) -> float:
        return float(self.get_string(key))


def load_config(path: PathLike) -> ConfigFile:
    """Read a configuration file; raises ``FileNotFoundError`` if it is missing."""
    file_path = Path(path)
    return ConfigFile.parse(file_path.read_text(encoding="utf-8"), file_path)


class ReplacementAlgorithm(enum.Enum):
    FIFO = "FIFO"
    LRU = "LRU"
    CLOCK = "CLOCK"
    CLOCK_M = "CLOCK-M"


class SchedulingAlgorithm(enum.Enum):
    FIFO = "FIFO"
    SJF = "SJF"
    SRT = "SRT"
    PMCP = "PMCP"


class ListenPort(enum.Enum):
    CPU_DISPATCH = "PUERTO_ESCUCHA_DISPATCH"
    CPU_INTERRUPT = "PUERTO_ESCUCHA_INTERRUPT"
    IO = "PUERTO_ESCUCHA_IO"


@dataclass(frozen=True)
class CpuConfig:
    kernel_ip: str
    kernel_dispatch_port: str
    kernel_interrupt_port: str
    memory_ip: str
    memory_port: str
    log_level: int
    tlb_entries: int
    tlb_replacement: ReplacementAlgorithm
    cache_entries: int
    cache_replacement: ReplacementAlgorithm
    cache_delay_ms: int

    @classmethod
    def from_file(cls, config: ConfigFile) -> "CpuConfig":
        tlb = config.get_string("REEMPLAZO_TLB")
        cache = config.get_string("REEMPLAZO_CACHE")
        return cls(
            kernel_ip=config.get_string("IP_KERNEL"),
            kernel_dispatch_port=config.get_string("PUERTO_KERNEL_DISPATCH"),
            kernel_interrupt_port=config.get_string("PUERTO_KERNEL_INTERRUPT"),
            memory_ip=config.get_string("IP_MEMORIA"),
            memory_port=config.get_string("PUERTO_MEMORIA"),
            log_level=parse_log_level(config.get_string("LOG_LEVEL")),
            tlb_entries=config.get_int("ENTRADAS_TLB"),
            tlb_replacement=ReplacementAlgorithm.FIFO if tlb == "FIFO" else ReplacementAlgorithm.LRU,
            cache_entries=config.get_int("ENTRADAS_CACHE"),
            cache_replacement=(
                ReplacementAlgorithm.CLOCK if cache == "CLOCK" else ReplacementAlgorithm.CLOCK_M
            ),
            cache_delay_ms=config.get_int("RETARDO_CACHE"),
        )


@dataclass(frozen=True)
class IoConfig:
    kernel_ip: str
    kernel_port: str
    log_level: int

    @classmethod
    def from_file(cls, config: ConfigFile) -> "IoConfig":
        return cls(
            kernel_ip=config.get_string("IP_KERNEL"),
            kernel_port=config.get_string("PUERTO_KERNEL"),
            log_level=parse_log_level(config.get_string("LOG_LEVEL")),
        )


_SHORT_TERM = {a.value: a for a in (SchedulingAlgorithm.FIFO, SchedulingAlgorithm.SJF, SchedulingAlgorithm.SRT)}
_ADMISSION = {a.value: a for a in (SchedulingAlgorithm.FIFO, SchedulingAlgorithm.PMCP)}


@dataclass(frozen=True)
class KernelConfig:
    dispatch_port: str
    interrupt_port: str
    io_port: str
    memory_ip: str
    memory_port: str
    short_term_algorithm: SchedulingAlgorithm
    admission_algorithm: SchedulingAlgorithm
    alpha: float
    initial_estimate: float
    suspension_time_ms: int
    log_level: int

    @classmethod
    def from_file(cls, config: ConfigFile) -> "KernelConfig":
        short_term = config.get_string("ALGORITMO_CORTO_PLAZO")
        admission = config.get_string("ALGORITMO_INGRESO_A_READY")
        if short_term not in _SHORT_TERM:
            raise ValueError(f"unsupported short-term scheduling algorithm: {short_term!r}")
        if admission not in _ADMISSION:
            raise ValueError(f"unsupported ready admission algorithm: {admission!r}")
        return cls(
            dispatch_port=config.get_string(ListenPort.CPU_DISPATCH.value),
            interrupt_port=config.get_string(ListenPort.CPU_INTERRUPT.value),
            io_port=config.get_string(ListenPort.IO.value),
            memory_ip=config.get_string("IP_MEMORIA"),
            memory_port=config.get_string("PUERTO_MEMORIA"),
            short_term_algorithm=_SHORT_TERM[short_term],
            admission_algorithm=_ADMISSION[admission],
            alpha=config.get_float("ALFA"),
            initial_estimate=config.get_float("ESTIMACION_INICIAL"),
            suspension_time_ms=config.get_int("TIEMPO_SUSPENSION"),
            log_level=parse_log_level(config.get_string("LOG_LEVEL")),
        )

    def listen_port(self, port: ListenPort) -> str:
        """Return the port the kernel listens on for the given kind of client."""
        return {
            ListenPort.CPU_DISPATCH: self.dispatch_port,
            ListenPort.CPU_INTERRUPT: self.interrupt_port,
            ListenPort.IO: self.io_port,
        }[port]


def load_cpu_config(cpu_id: str, directory: PathLike = ".") -> CpuConfig:
    """Load ``cpu<id>.config`` from ``directory``."""
    return CpuConfig.from_file(load_config(Path(directory) / f"cpu{cpu_id}.config"))


def load_io_config(path: PathLike = "io.config") -> IoConfig:
    return IoConfig.from_file(load_config(path))


def load_kernel_config(path: PathLike = "kernel.config") -> KernelConfig:
    return KernelConfig.from_file(load_config(path))