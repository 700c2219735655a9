"""An IO device that serves sleep requests from the kernel."""

from __future__ import annotations

import itertools
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Tuple, Union

_instances = itertools.count()

Request = Optional[Tuple[int, int]]


class IoLogger:
    """Writes IO device events to a log file and to standard output."""

    def __init__(self, level: int = logging.INFO, log_file: Union[str, Path] = "io.log"):
        self.path = Path(log_file)
        self._logger = logging.getLogger(f"minikernel.io.{next(_instances)}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        formatter = logging.Formatter("[%(levelname)s] %(asctime)s IO: %(message)s")
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

    def __enter__(self) -> "IoLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def error(self, message: str) -> None:
        self._logger.info(message)

    def io_started(self, pid: int, duration_ms: int) -> None:
        self._logger.info(f"## PID: {pid} - Inicio de IO - Tiempo: {duration_ms}")

    def io_finished(self, pid: int) -> None:
        self._logger.info(f"## PID: {pid} - Fin de IO")

    def bad_request(self, message: str) -> None:
        self._logger.info(f"El siguiente mensaje no se recibio correctamente: {message}")


class IoDevice:
    """A named device that blocks for the requested time on each request."""

    def __init__(self, name: str, logger: IoLogger, sleep: Callable[[float], None] = time.sleep):
        self.name = name
        self.logger = logger
        self._sleep = sleep

    def handle(self, pid: int, duration_ms: int) -> None:
        """Serve one request: wait ``duration_ms`` milliseconds on behalf of ``pid``."""
        if duration_ms < 0:
            raise ValueError("IO duration cannot be negative")
        self.logger.io_started(pid, duration_ms)
        self._sleep(duration_ms / 1000)
        self.logger.io_finished(pid)

    def serve(self, requests: Iterable[Request]) -> Iterator[int]:
        """Serve ``(pid, duration_ms)`` requests in order, yielding each finished pid.

        A ``None`` request stands for a broken connection and raises ``ConnectionError``.
        """
        for request in requests:
            if request is None:
                self.logger.error("Error al recibir la petición de IO")
                raise ConnectionError("Error al recibir la petición de IO")
            pid, duration_ms = request
            self.handle(pid, duration_ms)
            yield pid