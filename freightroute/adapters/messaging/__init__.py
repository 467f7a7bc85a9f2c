"""Control-channel messages exchanged with the external traffic simulator."""

from .control_channel import (
    MessageType,
    SyncCode,
    TripControlCode,
    TripInfoCode,
    format_add_trip,
    format_add_trip_for_path,
    format_message,
    format_sync_end,
    format_sync_go,
    format_sync_request,
    parse_message,
    parse_trip_end,
    parse_trip_info,
)

__all__ = [
    "MessageType",
    "SyncCode",
    "TripControlCode",
    "TripInfoCode",
    "format_message",
    "format_sync_request",
    "format_sync_go",
    "format_sync_end",
    "format_add_trip",
    "format_add_trip_for_path",
    "parse_message",
    "parse_trip_info",
    "parse_trip_end",
]
