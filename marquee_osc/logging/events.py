"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators

Event Naming Convention:
    <component>.<category>.<action>

    component: osc, zone, tracker, config, error
    category: send, entered, timer
    action: success, failed, expired

Example Log Query:
    fields @timestamp, event, metadata.zone_id
    | filter event = "zone.entered"
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - osc.*: OSC/UDP interactions
    - zone.*: Occupancy transitions
    - tracker.*: Tracker lifecycle and timer
    - config.*: Configuration loading
    - error.*: Error conditions
    """

    # ========== OSC Events ==========
    OSC_SEND_SUCCESS = "osc.send.success"
    """Datagram handed to the network stack."""

    OSC_SEND_FAILED = "osc.send.failed"
    """Datagram could not be sent (non-fatal)."""

    OSC_SEND_SKIPPED = "osc.send.skipped"
    """Send requested after the publisher was closed."""

    OSC_PUBLISHER_CLOSED = "osc.publisher.closed"
    """Publisher released."""

    OSC_RECEIVED = "osc.received"
    """Occupancy message received by a listener."""

    OSC_LISTENING = "osc.listening"
    """Listener bound and serving."""

    # ========== Zone Events ==========
    ZONE_ENTERED = "zone.entered"
    """Tracker moved to a new occupied zone."""

    ZONE_IDLE = "zone.idle"
    """Tracker went idle after the stationary timeout."""

    ZONE_REFRESHED = "zone.refreshed"
    """Qualifying detection refreshed the current zone."""

    FRAME_PROCESSED = "zone.frame.processed"
    """Detections of one frame classified."""

    # ========== Tracker Events ==========
    TRACKER_STARTED = "tracker.started"
    """Idle timer thread started."""

    TRACKER_STOPPED = "tracker.stopped"
    """Tracker disposed."""

    TIMER_EXPIRED = "tracker.timer.expired"
    """Idle timer fired."""

    # ========== Error Events ==========
    SERIALIZATION_ERROR = "error.serialization"
    """Failed to build an OSC datagram."""

    DESERIALIZATION_ERROR = "error.deserialization"
    """Failed to parse an incoming OSC datagram."""

    OSC_SEND_ERROR = "error.osc_send"
    """Socket error during send."""

    BROADCAST_ERROR = "error.broadcast"
    """Broadcast callback raised inside the tracker."""


# Event categories for filtering
OSC_EVENTS = {
    LogEvent.OSC_SEND_SUCCESS,
    LogEvent.OSC_SEND_FAILED,
    LogEvent.OSC_SEND_SKIPPED,
    LogEvent.OSC_PUBLISHER_CLOSED,
    LogEvent.OSC_RECEIVED,
    LogEvent.OSC_LISTENING,
}

ZONE_EVENTS = {
    LogEvent.ZONE_ENTERED,
    LogEvent.ZONE_IDLE,
    LogEvent.ZONE_REFRESHED,
    LogEvent.FRAME_PROCESSED,
}

TRACKER_EVENTS = {
    LogEvent.TRACKER_STARTED,
    LogEvent.TRACKER_STOPPED,
    LogEvent.TIMER_EXPIRED,
}

ERROR_EVENTS = {
    LogEvent.SERIALIZATION_ERROR,
    LogEvent.DESERIALIZATION_ERROR,
    LogEvent.OSC_SEND_ERROR,
    LogEvent.BROADCAST_ERROR,
}
