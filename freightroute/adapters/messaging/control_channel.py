"""Text messages for the traffic simulator's control channel.

Messages are slash-delimited::

    id/ack/type/code/00/00/00/00/<payload>/-1

The payload may itself contain slashes. For trip information it is a
JSON object.
"""

from __future__ import annotations

import json
import logging
from enum import IntEnum
from typing import Any, Dict, Optional, Sequence

from ...domain.errors import MessageFormatError
from ...domain.models import ControlMessage, PathResult

logger = logging.getLogger(__name__)

RESERVED_FIELDS = "00/00/00/00"
TERMINATOR = "-1"
MIN_PARTS = 9


class MessageType(IntEnum):
    SYNC = 1000
    TRIP_CONTROL = 1001
    TRIPS_INFO = 1002


class SyncCode(IntEnum):
    REQUEST = 0
    GO = 1
    WAIT = 2
    END = 9


class TripControlCode(IntEnum):
    ADD_TRIP = 0
    CANCEL_TRIP = 1


class TripInfoCode(IntEnum):
    TRIP_INFO = 0
    TRIP_END = 1


def _number(value: float) -> str:
    return f"{value:g}"


def format_message(
    message_id: int, ack: int, message_type: int, code: int, content: str = ""
) -> str:
    """Assemble a control-channel message."""
    return (
        f"{message_id}/{ack}/{int(message_type)}/{int(code)}/"
        f"{RESERVED_FIELDS}/{content}/{TERMINATOR}"
    )


def format_sync_request(message_id: int, sim_time: float, horizon: float) -> str:
    return format_message(
        message_id,
        0,
        MessageType.SYNC,
        SyncCode.REQUEST,
        f"{_number(sim_time)}/{_number(horizon)}",
    )


def format_sync_go(
    message_id: int, current_time: float, next_time: float, ack: int = 0
) -> str:
    return format_message(
        message_id,
        ack,
        MessageType.SYNC,
        SyncCode.GO,
        f"{int(current_time)}/{int(next_time)}",
    )


def format_sync_end(message_id: int, end_time: float, ack: int = 0) -> str:
    return format_message(
        message_id, ack, MessageType.SYNC, SyncCode.END, str(int(end_time))
    )


def format_add_trip(
    message_id: int,
    trip_id: str,
    origin_id: int,
    destination_id: int,
    start_time: float,
    link_ids: Sequence[int],
) -> str:
    """Message asking the simulator to start a trip along given links.

    Payload: ``tripId/originId/destinationId/startTime/linkCount/link...``
    """
    parts = [
        str(trip_id),
        str(origin_id),
        str(destination_id),
        str(int(start_time)),
        str(len(link_ids)),
    ]
    parts.extend(str(link_id) for link_id in link_ids)
    return format_message(
        message_id, 0, MessageType.TRIP_CONTROL, TripControlCode.ADD_TRIP, "/".join(parts)
    )


def format_add_trip_for_path(
    message_id: int, trip_id: str, path: PathResult, start_time: float
) -> str:
    """Add-trip message following a routed path.

    Raises:
        MessageFormatError: If the path is empty.
    """
    if path.is_empty:
        raise MessageFormatError(
            f"Cannot add trip {trip_id} along an empty path", raw_message=""
        )
    return format_add_trip(
        message_id,
        trip_id,
        path.node_ids[0],
        path.node_ids[-1],
        start_time,
        path.link_ids,
    )


def parse_message(message: str) -> ControlMessage:
    """Split a message into its fixed fields and payload.

    Raises:
        MessageFormatError: If the message has fewer than nine parts or a
            non-numeric header field.
    """
    parts = message.strip().split("/")
    if len(parts) < MIN_PARTS:
        raise MessageFormatError(
            f"Control message has {len(parts)} parts, expected at least {MIN_PARTS}",
            raw_message=message,
        )
    try:
        message_id, ack, message_type, code = (int(part) for part in parts[:4])
    except ValueError as e:
        raise MessageFormatError(
            "Control message header is not numeric", raw_message=message, cause=e
        )

    payload = parts[8:]
    if TERMINATOR in payload:
        payload = payload[: payload.index(TERMINATOR)]

    return ControlMessage(
        message_id=message_id,
        ack=ack,
        message_type=message_type,
        code=code,
        content="/".join(payload),
    )


def _json_content(message: ControlMessage) -> Optional[Dict[str, Any]]:
    try:
        content = json.loads(message.content)
    except json.JSONDecodeError:
        logger.warning(
            "Trip message content is not JSON",
            extra={"message_id": message.message_id},
        )
        return None
    return content if isinstance(content, dict) else None


def parse_trip_info(message: str) -> Optional[Dict[str, Any]]:
    """JSON payload of a trip-info message, or None for other messages."""
    parsed = parse_message(message)
    if parsed.message_type != MessageType.TRIPS_INFO or parsed.code != TripInfoCode.TRIP_INFO:
        return None
    return _json_content(parsed)


def parse_trip_end(message: str) -> Optional[Dict[str, Any]]:
    """JSON payload of a trip-end message, or None for other messages."""
    parsed = parse_message(message)
    if parsed.message_type != MessageType.TRIPS_INFO or parsed.code != TripInfoCode.TRIP_END:
        return None
    return _json_content(parsed)
