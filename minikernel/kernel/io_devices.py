"""IO devices connected to the kernel and the queueing of processes on them."""

from __future__ import annotations

import enum
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List

from minikernel.kernel.pcb import Pcb


class IoOutcome(enum.Enum):
    """How an IO request ended."""

    EXECUTED = 0
    DISCONNECTED = 1


class IoLink(ABC):
    """The connection to one instance of an IO device."""

    @abstractmethod
    def request(self, pid: int, duration_ms: int) -> IoOutcome:
        """Ask the device to serve ``pid`` for ``duration_ms`` and wait for its answer."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""


class UnknownDeviceError(LookupError):
    """Raised when a process asks for a device that is not connected."""


@dataclass(frozen=True)
class _Request:
    pcb: Pcb
    duration_ms: int


class _Device:
    def __init__(self, name: str):
        self.name = name
        self.instances: List[IoLink] = []
        self.requests: "queue.Queue[_Request]" = queue.Queue()


class IoManager:
    """Keeps the connected devices and their instances, and serves requests on them.

    Requests for a device are served in arrival order by whichever of its
    instances is free. ``on_finished(pcb, failed)`` is called, from a
    dedicated thread, each time a request ends. An instance that fails is
    dropped; when a device loses its last instance every request still
    waiting for it ends as failed.
    """

    def __init__(self, logger, on_finished: Callable[[Pcb, bool], None]):
        self._logger = logger
        self._on_finished = on_finished
        self._devices: Dict[str, _Device] = {}
        self._lock = threading.Lock()
        self._finished: "queue.Queue[tuple]" = queue.Queue()
        threading.Thread(target=self._handle_finished, name="io-finished", daemon=True).start()

    def connect(self, name: str, link: IoLink) -> None:
        """Add an instance of device ``name``, creating the device if it is new."""
        with self._lock:
            device = self._devices.get(name)
            if device is None:
                device = _Device(name)
                self._devices[name] = device
            device.instances.append(link)
        threading.Thread(
            target=self._serve, args=(device, link), name=f"io-{name}", daemon=True
        ).start()

    def block_for_io(self, name: str, pcb: Pcb, duration_ms: int) -> None:
        """Queue ``pcb`` on device ``name``; raises :class:`UnknownDeviceError` if absent."""
        with self._lock:
            device = self._devices.get(name)
            if device is None:
                raise UnknownDeviceError(f"IO device not connected: {name}")
            device.requests.put(_Request(pcb, duration_ms))
        self._logger.blocked_for_io(pcb.pid, name)

    def device_names(self) -> List[str]:
        """Names of the connected devices, in connection order."""
        with self._lock:
            return list(self._devices)

    def _serve(self, device: _Device, link: IoLink) -> None:
        while True:
            request = device.requests.get()
            try:
                outcome = link.request(request.pcb.pid, request.duration_ms)
            except (OSError, EOFError):
                outcome = IoOutcome.DISCONNECTED
            if outcome is IoOutcome.EXECUTED:
                self._finish(request.pcb, IoOutcome.EXECUTED)
                continue
            self._finish(request.pcb, IoOutcome.DISCONNECTED)
            break
        self._disconnect_instance(device, link)

    def _disconnect_instance(self, device: _Device, link: IoLink) -> None:
        with self._lock:
            if link in device.instances:
                device.instances.remove(link)
            link.close()
            if device.instances:
                return
            if self._devices.get(device.name) is device:
                del self._devices[device.name]
            while True:
                try:
                    pending = device.requests.get_nowait()
                except queue.Empty:
                    break
                self._finish(pending.pcb, IoOutcome.DISCONNECTED)

    def _finish(self, pcb: Pcb, outcome: IoOutcome) -> None:
        self._finished.put((pcb, outcome))

    def _handle_finished(self) -> None:
        while True:
            pcb, outcome = self._finished.get()
            try:
                self._on_finished(pcb, outcome is not IoOutcome.EXECUTED)
            except Exception as exc:  # keep serving the other devices
                self._logger.error(f"Error al desbloquear el proceso {pcb.pid}: {exc}")