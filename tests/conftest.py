"""
Pytest configuration and shared fixtures.
"""

import socket

import pytest

from marquee_osc import create_logger
from marquee_processor import ManualClock


class RecordingBroadcaster:
    """Stands in for ZoneBroadcaster.broadcast; remembers every zone id."""

    def __init__(self, result=True):
        self.sent = []
        self.result = result

    def __call__(self, zone_id):
        self.sent.append(zone_id)
        return self.result


@pytest.fixture
def clock():
    """Manual clock starting at t=0 (seconds)."""
    return ManualClock(0.0)


@pytest.fixture
def sent():
    """Recording broadcaster."""
    return RecordingBroadcaster()


@pytest.fixture
def logger():
    return create_logger("test")


@pytest.fixture
def udp_receiver():
    """Loopback UDP socket on a free port; yields (sock, port)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    try:
        yield sock, sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def presence_yaml(tmp_path):
    """Write a valid presence config and return its path."""
    path = tmp_path / "presence.yaml"
    path.write_text("""
service_id: "test_stage"
model_resolution_wh: [416, 416]
qualifying_label: "person"
time_to_stationary_ms: 8000
zones:
  - {x: 0, y: 0, width: 250, height: 1000}
  - {x: 0, y: 0, width: 1000, height: 1000}
  - {x: 0, y: 260, width: 100, height: 100}
osc_config:
  ip: "127.0.0.1"
  port: 5005
  address: "/test"
log_level: "INFO"
""")
    return path
