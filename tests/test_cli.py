"""
Tests for the marquee-cli entry point.
"""

import json
import logging

import pytest

from marquee_cli.cli import build_parser, main
from marquee_osc import OccupancyMessage


@pytest.fixture(autouse=True)
def restore_marquee_propagation():
    """main() detaches the structured loggers from the root handler."""
    yield
    logging.getLogger("marquee").propagate = True


class TestParser:

    def test_send_defaults(self):
        args = build_parser().parse_args(["send", "2"])

        assert args.zone_id == 2
        assert args.ip == "127.0.0.1"
        assert args.port == 5005
        assert args.address == "/test"

    def test_negative_zone_id_is_positional(self):
        assert build_parser().parse_args(["send", "-1"]).zone_id == -1

    def test_replay_fast_flag(self):
        args = build_parser().parse_args(["replay", "c.yaml", "r.jsonl", "--fast"])

        assert args.fast is True
        assert args.config == "c.yaml"


class TestCommands:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "marquee-cli" in capsys.readouterr().out

    def test_send(self, udp_receiver, capsys):
        sock, port = udp_receiver

        assert main(["send", "3", "--port", str(port)]) == 0

        data, _ = sock.recvfrom(1024)
        assert OccupancyMessage.from_dgram(data).zone_id == 3
        assert "Sent /test 3" in capsys.readouterr().out

    def test_send_out_of_range(self, capsys):
        assert main(["send", "-7"]) == 1
        assert "zone_id" in capsys.readouterr().err

    def test_send_invalid_port(self, capsys):
        assert main(["send", "1", "--port", "0"]) == 1

    def test_replay_missing_config(self, tmp_path, capsys):
        code = main(["replay", str(tmp_path / "none.yaml"), str(tmp_path / "none.jsonl")])

        assert code == 1
        assert "not found" in capsys.readouterr().err

    def test_replay_fast(self, tmp_path, udp_receiver, capsys):
        sock, port = udp_receiver
        config = tmp_path / "presence.yaml"
        config.write_text(f"""
zones:
  - {{x: 0, y: 0, width: 250, height: 1000}}
time_to_stationary_ms: 1000
osc_config:
  port: {port}
""")
        recording = tmp_path / "rec.jsonl"
        recording.write_text(json.dumps({
            "t": 0.0,
            "canvas": [832, 832],
            "detections": [{"label": "person", "box": [50, 50, 20, 150]}],
        }) + "\n")

        assert main(["replay", str(config), str(recording), "--fast"]) == 0

        received = [OccupancyMessage.from_dgram(sock.recvfrom(1024)[0]).zone_id for _ in range(2)]
        assert received == [0, -1]
        assert "Replayed 1 frames" in capsys.readouterr().out

    def test_invalid_log_level(self, capsys):
        assert main(["--log-level", "LOUD", "send", "1"]) == 1
        assert "Invalid log level" in capsys.readouterr().err

    def test_replay_realtime_sends_trailing_idle(self, tmp_path, udp_receiver, capsys):
        sock, port = udp_receiver
        config = tmp_path / "presence.yaml"
        config.write_text(f"""
zones:
  - {{x: 0, y: 0, width: 250, height: 1000}}
time_to_stationary_ms: 100
osc_config:
  port: {port}
""")
        recording = tmp_path / "rec.jsonl"
        recording.write_text(json.dumps({
            "t": 0.0,
            "canvas": [832, 832],
            "detections": [{"label": "person", "box": [50, 50, 20, 150]}],
        }) + "\n")

        assert main(["replay", str(config), str(recording)]) == 0

        received = [OccupancyMessage.from_dgram(sock.recvfrom(1024)[0]).zone_id for _ in range(2)]
        assert received == [0, -1]
