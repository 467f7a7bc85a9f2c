"""Typed domain errors for freightroute.

All errors inherit from FreightRouteError and can optionally wrap a
root cause exception for debugging.

Missing nodes, links and networks are not errors: queries return None
or an empty PathResult, and registry mutators return False.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FreightRouteError(Exception):
    """Base error for the freightroute domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class InvalidArgumentError(FreightRouteError):
    """An argument is out of range or of the wrong shape.

    Raised for unknown routing criteria or metric names, negative
    weights or traffic counts, unsupported attribute values and
    malformed documents or records.

    Attributes:
        argument: Name of the offending argument
    """

    argument: str = ""


@dataclass
class NetworkFileError(FreightRouteError):
    """A network or configuration file cannot be used.

    Covers missing, unreadable and empty files and bad header lines.
    Individual malformed rows are skipped by the readers instead.

    Attributes:
        file_path: Path to the offending file
        line_number: 1-based line number if relevant
    """

    file_path: Optional[str] = None
    line_number: Optional[int] = None


@dataclass
class NetworkIntegrityError(FreightRouteError):
    """A link references a node that is not part of the network.

    Attributes:
        link_id: User id of the offending link
    """

    link_id: Optional[int] = None


@dataclass
class ConfigurationError(FreightRouteError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class MessageFormatError(FreightRouteError):
    """A control-channel message does not follow the wire layout.

    Attributes:
        raw_message: The message as received
    """

    raw_message: str = ""
