"""
Base UDP Publisher
==================

Bounded Context: OSC/UDP Infrastructure

This module provides the abstract base class for connectionless publishers.

Design:
- One socket per send (open, sendto, close); no persistent connection
- Bounded socket timeout so a slow endpoint never stalls the caller
- Best-effort: network errors are logged and reported as False, never raised
- Idempotent close(); nothing is sent once closing has begun

Architecture:
    BasePublisher (abstract)
        ↓
    ZoneBroadcaster (concrete)

Responsibilities:
- Endpoint handling and datagram transmission
- Error handling and logging
- NOT responsible for: Message formatting (delegated to subclasses)
"""

import socket
import threading
from abc import ABC, abstractmethod
from typing import Dict, Any, Tuple

from ..logging import StructuredLogger, LogEvent


class BasePublisher(ABC):
    """
    Abstract base class for OSC-over-UDP publishers.

    Attributes:
        host: Destination host (IP or hostname)
        port: Destination UDP port
        send_timeout: Upper bound in seconds for a single send
        logger: Structured logger instance

    Thread Safety:
        publish() may be called from the frame thread and the timer thread at
        once; counters are guarded by a lock and each send owns its socket.
    """

    def __init__(
        self,
        host: str,
        port: int,
        logger: StructuredLogger,
        send_timeout: float = 0.25
    ):
        """
        Initialize UDP publisher.

        Args:
            host: Destination host
            port: Destination port (1-65535)
            logger: Structured logger for observability
            send_timeout: Socket timeout in seconds for each send
        """
        if not 1 <= port <= 65535:
            raise ValueError(f"port must be in [1, 65535], got {port}")
        if send_timeout <= 0:
            raise ValueError(f"send_timeout must be > 0, got {send_timeout}")

        self.host = host
        self.port = port
        self.logger = logger
        self.send_timeout = send_timeout

        self._closed = threading.Event()
        self._message_count = 0
        self._failure_count = 0
        self._stats_lock = threading.Lock()

    @property
    def endpoint(self) -> Tuple[str, int]:
        return (self.host, self.port)

    @property
    def endpoint_label(self) -> str:
        return f"{self.host}:{self.port}"

    def is_closed(self) -> bool:
        return self._closed.is_set()

    @abstractmethod
    def format_message(self, *args, **kwargs) -> bytes:
        """
        Format a datagram for publication.

        Subclasses must implement this to provide message-specific encoding.

        Returns:
            Datagram bytes
        """
        raise NotImplementedError("Subclasses must implement format_message()")

    def publish(self, dgram: bytes) -> bool:
        """
        Send one datagram to the configured endpoint.

        Args:
            dgram: Encoded message (already formatted)

        Returns:
            True if the datagram was handed to the network stack, False otherwise
        """
        if self._closed.is_set():
            self.logger.warning(
                event=LogEvent.OSC_SEND_SKIPPED,
                message="Cannot publish: publisher closed",
                metadata={'endpoint': self.endpoint_label}
            )
            return False

        try:
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
                sock.settimeout(self.send_timeout)
                sock.sendto(dgram, self.endpoint)

        except OSError as e:
            with self._stats_lock:
                self._failure_count += 1
            self.logger.error(
                event=LogEvent.OSC_SEND_ERROR,
                message="Error sending datagram",
                exc_info=e,
                metadata={'endpoint': self.endpoint_label}
            )
            return False

        with self._stats_lock:
            self._message_count += 1
            count = self._message_count

        self.logger.debug(
            event=LogEvent.OSC_SEND_SUCCESS,
            message="Sent datagram",
            metadata={
                'endpoint': self.endpoint_label,
                'bytes': len(dgram),
                'message_count': count
            }
        )
        return True

    def close(self) -> None:
        """
        Stop issuing sends. Safe to call more than once.

        No socket outlives a send, so there is nothing else to release.
        """
        if self._closed.is_set():
            return
        self._closed.set()
        self.logger.info(
            event=LogEvent.OSC_PUBLISHER_CLOSED,
            message="Publisher closed",
            metadata={
                'endpoint': self.endpoint_label,
                'message_count': self._message_count
            }
        )

    def get_stats(self) -> Dict[str, Any]:
        """
        Get publisher statistics.

        Returns:
            Dictionary with message/failure counts and endpoint
        """
        with self._stats_lock:
            return {
                'message_count': self._message_count,
                'failure_count': self._failure_count,
                'closed': self._closed.is_set(),
                'endpoint': self.endpoint_label
            }
