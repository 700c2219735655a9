"""Requests the kernel makes to main memory."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional


class MemoryOperation(enum.Enum):
    INICIAR_PROCESO = "INICIAR_PROCESO"
    FINALIZAR_PROCESO = "FINALIZAR_PROCESO"
    DUMP_PROCESO = "DUMP_PROCESO"
    SWAP_OUT = "SWAP_OUT"
    SWAP_IN = "SWAP_IN"


@dataclass(frozen=True)
class MemoryRequest:
    operation: MemoryOperation
    pid: int
    size: int = 0
    path: Optional[str] = None


class MemoryUnavailableError(RuntimeError):
    """Raised when memory cannot be reached or does not answer."""


class MemoryService:
    """Sends one request per connection to memory and waits for its answer.

    ``send`` delivers a request over a fresh connection and returns memory's
    answer: ``1`` for success, ``0`` for refusal and ``-1`` for a broken reply.
    """

    def __init__(self, send: Callable[[MemoryRequest], int], logger):
        self._send = send
        self._logger = logger

    def _request(self, request: MemoryRequest) -> bool:
        try:
            answer = self._send(request)
        except (OSError, EOFError) as exc:
            self._logger.error("Error al conectar a memoria")
            raise MemoryUnavailableError("could not connect to memory") from exc

        if answer == -1:
            self._logger.error("Error al recibir respuesta de memoria")
            self._logger.event("Memoria desconectada")
            raise MemoryUnavailableError("memory did not answer the request")

        self._logger.event("Memoria desconectada")
        return answer >= 1

    def create_process(self, pid: int, size: int, path: str) -> bool:
        """Ask memory to load a new process; ``False`` if it does not fit."""
        return self._request(MemoryRequest(MemoryOperation.INICIAR_PROCESO, pid, size, path))

    def finish_process(self, pid: int) -> bool:
        return self._request(MemoryRequest(MemoryOperation.FINALIZAR_PROCESO, pid))

    def dump_process(self, pid: int) -> bool:
        return self._request(MemoryRequest(MemoryOperation.DUMP_PROCESO, pid))

    def swap_out(self, pid: int) -> bool:
        return self._request(MemoryRequest(MemoryOperation.SWAP_OUT, pid))

    def swap_in(self, pid: int) -> bool:
        return self._request(MemoryRequest(MemoryOperation.SWAP_IN, pid))