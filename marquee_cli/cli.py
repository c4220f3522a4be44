"""
Marquee CLI - Main entry point.

Sends, receives and replays occupancy signals without a camera attached.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from marquee_osc import OccupancyListener, OccupancyMessage, ZoneBroadcaster, create_logger
from marquee_processor import (
    ManualClock,
    OccupancyService,
    PresenceConfig,
    read_recording,
    replay_accelerated,
    replay_realtime,
    wait_for_idle,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (exposed for tests)."""
    parser = argparse.ArgumentParser(
        prog="marquee-cli",
        description="Marquee CLI - Zone occupancy signals over OSC",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Tell the lighting controller zone 2 is occupied
  marquee-cli send 2

  # Release (idle)
  marquee-cli send -1

  # Print every occupancy message arriving on port 5005
  marquee-cli listen --port 5005

  # Replay a detection recording through a venue config
  marquee-cli replay config/presence.yaml recordings/rehearsal.jsonl
  marquee-cli replay config/presence.yaml recordings/rehearsal.jsonl --fast
"""
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level (default: INFO)"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    send = subparsers.add_parser('send', help='Broadcast one zone id')
    send.add_argument('zone_id', type=int, help='Zone index, -1 for idle')
    send.add_argument('--ip', default="127.0.0.1", help='Destination IP (default: 127.0.0.1)')
    send.add_argument('--port', type=int, default=5005, help='Destination port (default: 5005)')
    send.add_argument('--address', default="/test", help='OSC address (default: /test)')

    listen = subparsers.add_parser('listen', help='Print received occupancy messages')
    listen.add_argument('--ip', default="127.0.0.1", help='Bind IP (default: 127.0.0.1)')
    listen.add_argument('--port', type=int, default=5005, help='Bind port (default: 5005)')
    listen.add_argument('--address', default="/test", help='OSC address (default: /test)')

    replay = subparsers.add_parser('replay', help='Replay a JSON-lines detection recording')
    replay.add_argument('config', help='Path to presence config YAML')
    replay.add_argument('recording', help='Path to JSON-lines recording')
    replay.add_argument(
        '--fast',
        action='store_true',
        help='Ignore recorded timing and run on a manual clock'
    )

    return parser


def resolve_level(name: str) -> int:
    """
    Map a level name ("debug", "INFO", ...) to its number.

    Raises:
        ValueError: If the name is not a logging level
    """
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {name}")
    return level


def cmd_send(args: argparse.Namespace) -> int:
    try:
        OccupancyMessage(zone_id=args.zone_id, address=args.address)
    except ValueError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    level = resolve_level(args.log_level)
    broadcaster = ZoneBroadcaster(
        host=args.ip,
        port=args.port,
        address=args.address,
        logger=create_logger("cli", level=level),
    )

    ok = broadcaster.broadcast(args.zone_id)
    broadcaster.close()
    if ok:
        print(f"✅ Sent {args.address} {args.zone_id} to {args.ip}:{args.port}")
        return 0
    print(f"❌ Failed to send to {args.ip}:{args.port}", file=sys.stderr)
    return 1


def cmd_listen(args: argparse.Namespace) -> int:
    level = resolve_level(args.log_level)

    def on_occupancy(msg: OccupancyMessage) -> None:
        state = "idle" if msg.is_idle else f"zone {msg.zone_id}"
        print(f"📥 {msg.address} {msg.zone_id} ({state})", flush=True)

    listener = OccupancyListener(
        host=args.ip,
        port=args.port,
        address=args.address,
        on_occupancy=on_occupancy,
        logger=create_logger("listener", level=level),
    )
    print(f"👂 Listening on {args.ip}:{args.port}{args.address} (Ctrl+C to stop)")
    listener.serve_forever()
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    config = PresenceConfig.from_yaml(Path(args.config))
    frames = read_recording(Path(args.recording))

    if args.fast:
        clock = ManualClock()
        service = OccupancyService(config, clock=clock)
        try:
            count = replay_accelerated(service, frames, clock)
        finally:
            service.stop()
    else:
        with OccupancyService(config) as service:
            count = replay_realtime(service.on_frame, frames)
            wait_for_idle(service.tracker)

    stats = service.tracker.get_stats()
    print(
        f"✅ Replayed {count} frames: {stats['transitions']} transitions, "
        f"{stats['broadcasts']} broadcasts ({stats['broadcast_failures']} failed)"
    )
    return 0


COMMANDS = {
    'send': cmd_send,
    'listen': cmd_listen,
    'replay': cmd_replay,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        level = resolve_level(args.log_level)
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )
        # Structured loggers ("marquee.<component>") print their own JSON lines
        logging.getLogger("marquee").propagate = False

        return COMMANDS[args.command](args)
    except KeyboardInterrupt:
        return 130
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
