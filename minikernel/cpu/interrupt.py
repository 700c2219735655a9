"""Interrupt flag raised by the kernel on the CPU's interrupt connection."""

from __future__ import annotations

import threading
from typing import Callable


class InterruptFlag:
    """Thread-safe pending-interrupt flag, optionally fed by a listener thread."""

    def __init__(self, logger=None):
        self._pending = threading.Event()
        self._logger = logger

    def set(self) -> None:
        self._pending.set()

    def is_pending(self) -> bool:
        return self._pending.is_set()

    def reset(self) -> None:
        self._pending.clear()

    def start_listener(
        self,
        receive_signal: Callable[[], int],
        on_error: Callable[[], None],
    ) -> threading.Thread:
        """Raise the flag on every signal received until ``receive_signal`` fails.

        A signal of ``-1``, or a connection error, stops the listener and calls ``on_error``.
        """

        def listen() -> None:
            while True:
                try:
                    signal = receive_signal()
                except (OSError, EOFError):
                    signal = -1
                if signal == -1:
                    if self._logger is not None:
                        self._logger.error("Error al recibir señal de interrupcion.")
                    on_error()
                    return
                if self._logger is not None:
                    self._logger.interrupt_received()
                self.set()

        thread = threading.Thread(target=listen, name="interrupt-listener", daemon=True)
        thread.start()
        return thread