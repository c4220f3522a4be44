"""
OSC Listener
============

Bounded Context: Message Consumption

Receives occupancy messages on a UDP port and hands typed OccupancyMessage
instances to a callback. Used by `marquee-cli listen` and by integration tests
standing in for a lighting controller.

Design:
- python-osc Dispatcher routes the address pattern to the handler
- Server runs in a background thread (start/stop)
- Malformed messages are logged and dropped

Example:
    >>> from marquee_osc import OccupancyListener, create_logger
    >>>
    >>> def on_occupancy(msg):
    ...     print(f"zone -> {msg.zone_id}")
    >>>
    >>> listener = OccupancyListener(
    ...     host="127.0.0.1",
    ...     port=5005,
    ...     on_occupancy=on_occupancy,
    ...     logger=create_logger("listener")
    ... )
    >>> listener.start()
    >>> # ...
    >>> listener.stop()
"""

import threading
from typing import Any, Callable, Dict, Optional, Tuple

from pythonosc.dispatcher import Dispatcher
from pythonosc.osc_server import ThreadingOSCUDPServer

from .schemas import OccupancyMessage, DEFAULT_ADDRESS
from .logging import StructuredLogger, LogEvent


class OccupancyListener:
    """
    OSC server decoding occupancy broadcasts.

    Attributes:
        host: Bind address
        port: Bind port (0 picks a free port; see server_address)
        address: OSC address pattern to accept
        on_occupancy: Callback for each decoded message
        logger: Structured logger instance

    Thread Safety:
        Callbacks run in server threads. Keep them fast.
    """

    def __init__(
        self,
        host: str,
        port: int,
        on_occupancy: Callable[[OccupancyMessage], None],
        logger: StructuredLogger,
        address: str = DEFAULT_ADDRESS
    ):
        self.host = host
        self.port = port
        self.address = address
        self.on_occupancy = on_occupancy
        self.logger = logger

        self.dispatcher = Dispatcher()
        self.dispatcher.map(address, self._handle_occupancy)
        self.dispatcher.set_default_handler(self._handle_unknown)

        self._server: Optional[ThreadingOSCUDPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._stats_lock = threading.Lock()
        self._received = 0
        self._rejected = 0

    @property
    def server_address(self) -> Tuple[str, int]:
        """Bound (host, port); only valid after start()."""
        if self._server is None:
            raise RuntimeError("Listener not started")
        return self._server.server_address[:2]

    def _handle_occupancy(self, address: str, *args: Any) -> None:
        """
        Dispatcher handler for the occupancy address.

        Args:
            address: Matched OSC address
            *args: Decoded OSC arguments
        """
        try:
            if len(args) != 1:
                raise ValueError(f"Expected one argument, got {len(args)}")
            msg = OccupancyMessage(zone_id=args[0], address=address)
        except ValueError as e:
            with self._stats_lock:
                self._rejected += 1
            self.logger.error(
                event=LogEvent.DESERIALIZATION_ERROR,
                message="Occupancy message failed validation",
                exc_info=e,
                metadata={'address': address, 'args': list(args)}
            )
            return

        with self._stats_lock:
            self._received += 1

        self.logger.info(
            event=LogEvent.OSC_RECEIVED,
            message=f"Received zone {msg.zone_id}",
            metadata={'address': address, 'zone_id': msg.zone_id}
        )
        self.on_occupancy(msg)

    def _handle_unknown(self, address: str, *args: Any) -> None:
        with self._stats_lock:
            self._rejected += 1
        self.logger.warning(
            event=LogEvent.DESERIALIZATION_ERROR,
            message=f"Received message for unknown address: {address}",
            metadata={'args': list(args)}
        )

    def start(self) -> None:
        """Bind the UDP socket and serve in a background thread."""
        if self._server is not None:
            return

        self._server = ThreadingOSCUDPServer((self.host, self.port), self.dispatcher)
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="osc-listener",
            daemon=True
        )
        self._thread.start()

        host, port = self.server_address
        self.logger.info(
            event=LogEvent.OSC_LISTENING,
            message=f"Listening on {host}:{port}{self.address}",
            metadata={'host': host, 'port': port, 'address': self.address}
        )

    def serve_forever(self) -> None:
        """Serve on the calling thread until interrupted (CLI usage)."""
        self.start()
        try:
            self._thread.join()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def stop(self) -> None:
        """Shut the server down. Safe to call multiple times."""
        if self._server is None:
            return
        server, self._server = self._server, None
        server.shutdown()
        server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            return {
                'received': self._received,
                'rejected': self._rejected,
                'listening': self._server is not None,
            }
