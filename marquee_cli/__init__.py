"""
Marquee CLI - Command-line interface for occupancy signals.

Usage:
    marquee-cli send 2
    marquee-cli send -1
    marquee-cli listen --port 5005
    marquee-cli replay config/presence.yaml recordings/rehearsal.jsonl --fast
"""

__version__ = "1.0.0"
