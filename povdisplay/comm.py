"""UDP messages between the stationary and the rotating controller.

The stationary side broadcasts one timing packet per revolution and relays
settings patches as JSON; the rotating side feeds received datagrams into
``WifiTimingSource`` and ``ConfigRelayReceiver``.
"""

from __future__ import annotations

import json
import logging
import socket
import struct
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from .settings import Scope

TIMING_UDP_PORT = 4210
CONFIG_UDP_PORT = 4211
BROADCAST_ADDRESS = "192.168.4.255"
MAX_CONFIG_PACKET = 2047

_U32 = 0xFFFFFFFF
_PACKET = struct.Struct("<II")
_log = logging.getLogger("povdisplay.relay")

Sender = Callable[[bytes, "tuple[str, int]"], None]


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000) & _U32


@dataclass(frozen=True)
class TimingPacket:
    """One revolution's period and the sender's millisecond clock."""

    rot_period_us: int
    sender_ms: int

    SIZE: ClassVar[int] = _PACKET.size

    def pack(self) -> bytes:
        """Wire form: two little-endian unsigned 32-bit integers."""
        return _PACKET.pack(self.rot_period_us & _U32, self.sender_ms & _U32)

    @classmethod
    def unpack(cls, data: bytes) -> "TimingPacket":
        """Decode the first eight bytes of ``data``."""
        raw = bytes(data)
        if len(raw) < _PACKET.size:
            raise ValueError(
                f"timing packet needs {_PACKET.size} bytes, got {len(raw)}")
        period, sender_ms = _PACKET.unpack_from(raw)
        return cls(period, sender_ms)


class TimingBroadcaster:
    """Broadcasts the rotation period after each Hall trigger.

    Without a ``sender`` callable, a UDP broadcast socket is opened on first
    use.
    """

    def __init__(self, port: int = TIMING_UDP_PORT, *,
                 address: str = BROADCAST_ADDRESS,
                 sender: Sender | None = None,
                 clock_ms: Callable[[], int] | None = None) -> None:
        self.port = port
        self.address = address
        self._sender = sender
        self._clock_ms = clock_ms or _monotonic_ms
        self._socket: socket.socket | None = None

    def _send(self, data: bytes) -> None:
        destination = (self.address, self.port)
        if self._sender is not None:
            self._sender(data, destination)
            return
        if self._socket is None:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            self._socket = sock
        self._socket.sendto(data, destination)

    def broadcast(self, period_us: int) -> TimingPacket:
        """Send one timing packet and return what was sent."""
        packet = TimingPacket(period_us & _U32, self._clock_ms() & _U32)
        self._send(packet.pack())
        return packet

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self) -> "TimingBroadcaster":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class WifiTimingSource:
    """Rotation timing taken from received timing packets."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rot_period_us = 0
        self._last_trigger_ms = 0
        self._new_rotation = False

    @property
    def rotation_period_us(self) -> int:
        return self._rot_period_us

    @property
    def last_trigger_ms(self) -> int:
        return self._last_trigger_ms

    def handle_packet(self, data: bytes, now_ms: int) -> bool:
        """Take in one datagram; short packets and zero periods are ignored."""
        if len(data) < TimingPacket.SIZE:
            return False
        packet = TimingPacket.unpack(data)
        if packet.rot_period_us == 0:
            return False
        with self._lock:
            self._rot_period_us = packet.rot_period_us
            self._last_trigger_ms = now_ms & _U32
            self._new_rotation = True
        return True

    def consume_new_rotation(self) -> bool:
        """True once for each accepted packet."""
        with self._lock:
            if not self._new_rotation:
                return False
            self._new_rotation = False
            return True


class ConfigRelayReceiver:
    """Applies relayed JSON settings patches to a settings registry."""

    def __init__(self, registry: Any,
                 on_config_change: Callable[[], None] | None = None) -> None:
        self.registry = registry
        self.on_config_change = on_config_change

    def handle_packet(self, data: bytes) -> bool:
        """Apply one datagram; returns False if it was empty or not a JSON object."""
        payload = bytes(data)[:MAX_CONFIG_PACKET]
        if not payload:
            return False
        try:
            patch = json.loads(payload)
        except ValueError:
            _log.warning("bad JSON")
            return False
        if not isinstance(patch, Mapping):
            _log.warning("bad JSON")
            return False

        self.registry.apply_json(patch, Scope.MCU_ONLY)
        _log.info("applied %d bytes", len(payload))
        if self.on_config_change is not None:
            self.on_config_change()
        return True