"""Decoded SyS-T message representation and CSV formatting."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .guid import Guid
from .printer import PrintfError, host_printf, to_hex_value

if TYPE_CHECKING:
    from .collateral import Collateral

__all__ = [
    "DecodeState",
    "MessageType",
    "Severity",
    "LocationType",
    "Header",
    "Location",
    "Message",
    "type_to_string",
    "location_to_string",
    "csv_quote",
    "CSV_HEADER",
    "BUILD_COMPACT32",
    "BUILD_COMPACT64",
    "BUILD_LONG",
    "STRING_GENERIC",
    "STRING_FUNCTIONENTER",
    "STRING_FUNCTIONEXIT",
    "STRING_INVALIDPARAM",
    "STRING_ASSERT",
    "STRING_PRINTF_32",
    "STRING_PRINTF_64",
    "CATALOG_ID32_P32",
    "CATALOG_ID64_P32",
    "CATALOG_ID32_P64",
    "CATALOG_ID64_P64",
    "CLOCK_SYNC",
]

CSV_HEADER = (
    "Decode Status,Payload,Type,Severity,Origin,Unit,Message TimeStamp,"
    "Context TimeStamp,Location,Raw Length,Checksum,Collateral"
)

_HIDE_TS = "<--UNITTEST-HIDE_TS-->"
_HIDE_CRC = "<--UNITTEST-HIDE_CRC-->"

# Build subtypes
BUILD_COMPACT32 = 0
BUILD_COMPACT64 = 1
BUILD_LONG = 2

# String subtypes
STRING_GENERIC = 1
STRING_FUNCTIONENTER = 2
STRING_FUNCTIONEXIT = 3
STRING_INVALIDPARAM = 5
STRING_ASSERT = 7
STRING_PRINTF_32 = 11
STRING_PRINTF_64 = 12

# Catalog subtypes
CATALOG_ID32_P32 = 1
CATALOG_ID64_P32 = 2
CATALOG_ID32_P64 = 5
CATALOG_ID64_P64 = 6

# Clock subtypes
CLOCK_SYNC = 1


class DecodeState(enum.IntEnum):
    """Result of decoding one message."""

    OK = 0
    UNKNOWN_TYPE = 1
    TOO_SHORT = 2
    TOO_LONG = 3
    CHECKSUM_ERROR = 4
    MISSING_COLLATERAL = 5


class MessageType(enum.IntEnum):
    """SyS-T message type IDs."""

    BUILD = 0
    SHORT32 = 1
    STRING = 2
    CATALOG = 3
    RAW = 6
    SHORT64 = 7
    CLOCK = 8


class Severity(enum.IntEnum):
    """Message severity levels."""

    MAX = 0
    FATAL = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    USER1 = 5
    USER2 = 6
    DEBUG = 7


class LocationType(enum.IntFlag):
    """Kinds of location information attached to a message."""

    NONE = 0
    ADDRESS32 = 1 << 1
    ADDRESS64 = 1 << 2
    IDANDLINE = 1 << 3


def _bits(shift: int, width: int, doc: str) -> property:
    mask = (1 << width) - 1

    def getter(self: "Header") -> int:
        return (self.val >> shift) & mask

    def setter(self: "Header", value: int) -> None:
        self.val = (self.val & ~(mask << shift) & 0xFFFFFFFF) | (
            (int(value) & mask) << shift
        )

    return property(getter, setter, doc=doc)


@dataclass
class Header:
    """The 32 bit SyS-T message header with its bit fields."""

    val: int = 0

    type = _bits(0, 4, "message type ID")
    severity = _bits(4, 3, "severity level")
    res7 = _bits(7, 1, "reserved bit 7")
    location = _bits(8, 1, "location record present")
    length = _bits(9, 1, "length field present")
    chksum = _bits(10, 1, "CRC32 present")
    timestamp = _bits(11, 1, "64 bit timestamp present")
    origin_unit = _bits(12, 11, "origin/unit field")
    guid = _bits(23, 1, "128 bit GUID present")
    subtype = _bits(24, 6, "type dependent subtype")
    res30 = _bits(30, 1, "reserved bit 30")
    res31 = _bits(31, 1, "reserved bit 31")

    def is_short(self) -> bool:
        """True for headers of short messages (short and compact build)."""
        if self.type in (MessageType.SHORT32, MessageType.SHORT64):
            return True
        return self.type == MessageType.BUILD and self.subtype in (
            BUILD_COMPACT32,
            BUILD_COMPACT64,
        )


@dataclass
class Location:
    """Location information of a message."""

    tag: int = 0
    address: int = 0
    file: int = 0
    line: int = 0


_STATUS_NAMES = {
    DecodeState.OK: "OK",
    DecodeState.UNKNOWN_TYPE: "UNKNOWN_TYPE",
    DecodeState.TOO_SHORT: "TOO_SHORT",
    DecodeState.CHECKSUM_ERROR: "CHECKSUM_ERROR",
    DecodeState.MISSING_COLLATERAL: "MISSING_COLLATERAL",
}

_TYPE_NAMES = (
    "BUILD", "SHORT32", "STRING", "CATALOG", "UNKNOWN(4)", "UNKNOWN(5)",
    "RAW", "SHORT64", "CLOCK", "UNKNOWN(9)", "UNKNOWN(10)", "UNKNOWN(11)",
    "UNKNOWN(12)", "UNKNOWN(13)", "UNKNOWN(14)", "UNKNOWN(15)",
)

_SUBTYPE_NAMES = {
    MessageType.BUILD: {
        BUILD_LONG: "LONG",
        BUILD_COMPACT32: "COMPACT32",
        BUILD_COMPACT64: "COMPACT64",
    },
    MessageType.STRING: {
        STRING_GENERIC: "GENERIC",
        STRING_FUNCTIONENTER: "ENTER",
        STRING_FUNCTIONEXIT: "EXIT",
        STRING_INVALIDPARAM: "INVPARAM",
        STRING_ASSERT: "ASSERT",
        STRING_PRINTF_32: "PRINTF32",
        STRING_PRINTF_64: "PRINTF64",
    },
    MessageType.CATALOG: {
        CATALOG_ID32_P32: "ID32P32",
        CATALOG_ID64_P32: "ID64P32",
        CATALOG_ID32_P64: "ID32P64",
        CATALOG_ID64_P64: "ID64P64",
    },
    MessageType.CLOCK: {CLOCK_SYNC: "SYNC"},
}


def type_to_string(header: Header, collateral: Optional["Collateral"]) -> str:
    """Render the type:subtype of a header, e.g. "CATALOG:ID32P32"."""
    msg_type = header.type
    subtype_id = header.subtype
    subtype = "??"

    if msg_type in (MessageType.SHORT32, MessageType.SHORT64):
        subtype = ""
    elif msg_type == MessageType.RAW:
        name = collateral.write_type(subtype_id) if collateral else None
        if name is not None:
            try:
                subtype = host_printf(name, subtype_id, [])
            except PrintfError as exc:
                subtype = str(exc)
        else:
            subtype = str(subtype_id)
    elif msg_type in _SUBTYPE_NAMES:
        subtype = _SUBTYPE_NAMES[MessageType(msg_type)].get(subtype_id, "??")

    text = _TYPE_NAMES[msg_type]
    return f"{text}:{subtype}" if subtype else text


def location_to_string(location: Location,
                       collateral: Optional["Collateral"]) -> str:
    """Render location information as "file:line" and/or an address."""
    has_address = bool(location.tag & LocationType.ADDRESS32)
    has_file_line = bool(location.tag & LocationType.IDANDLINE)
    parts = []

    if has_file_line:
        name = collateral.source_file(location.file) if collateral else None
        source = name if name is not None else str(location.file)
        parts.append(f"{source}:{location.line}")

    if has_address:
        if location.tag & LocationType.ADDRESS32:
            parts.append(to_hex_value(location.address, 32))
        else:
            parts.append(to_hex_value(location.address, 64))

    return " ".join(parts)


def csv_quote(text: str) -> str:
    """Escape text for a CSV field: double quotes, newlines become spaces."""
    return text.replace("\n", " ").replace('"', '""')


@dataclass
class Message:
    """A decoded SyS-T message."""

    state: DecodeState = DecodeState.UNKNOWN_TYPE
    header: Header = field(default_factory=Header)
    message_ts: int = 0
    context_ts: int = 0
    build: int = 0
    guid: Guid = field(default_factory=Guid)
    location: Location = field(default_factory=Location)
    payload: str = ""
    client_name: str = ""
    length: int = 0
    crc: int = 0
    collateral: Optional["Collateral"] = None

    def set_loc_addr32(self, addr: int) -> None:
        """Attach a 32 bit address location."""
        self.location.tag |= LocationType.ADDRESS32
        self.location.tag &= ~LocationType.ADDRESS64
        self.location.address = addr

    def set_loc_addr64(self, addr: int) -> None:
        """Attach a 64 bit address location."""
        self.location.tag |= LocationType.ADDRESS64
        self.location.tag &= ~LocationType.ADDRESS32
        self.location.address = addr

    def set_loc_file_line(self, file: int, line: int) -> None:
        """Attach a file ID and line number location."""
        self.location.tag |= LocationType.IDANDLINE
        self.location.file = file
        self.location.line = line

    def header_origin(self) -> int:
        """The module/origin part of the header's origin/unit field."""
        return (self.header.origin_unit >> 4) & 0xFF

    def unit(self) -> int:
        """The unit number of the sending client."""
        if self.header.guid:
            return self.header.origin_unit
        return self.header.origin_unit & 0xF

    def is_short(self) -> bool:
        """True if this is a short message."""
        return self.header.is_short()

    def to_csv(self, unit_testing: Optional[bool] = None) -> str:
        """Render the message as one CSV line, newline included.

        With unit_testing set, volatile timestamp and CRC values are hidden;
        when None, the SYST_UNITTESTING environment variable decides.
        """
        if unit_testing is None:
            unit_testing = "SYST_UNITTESTING" in os.environ

        status = _STATUS_NAMES.get(self.state, "UNKNOWN_STATE")
        head = f'{status},"{csv_quote(self.payload)}",'

        if self.state not in (DecodeState.OK, DecodeState.MISSING_COLLATERAL):
            return head + ",,,,,\n"

        coll = self.collateral
        hdr = self.header
        fields = [
            type_to_string(hdr, coll),
            Severity(hdr.severity).name,
            self.client_name,
            str(self.unit()),
        ]
        if hdr.timestamp:
            fields.append(_HIDE_TS if unit_testing
                          else to_hex_value(self.message_ts, 64))
        else:
            fields.append("")
        fields.append(_HIDE_TS if unit_testing
                      else to_hex_value(self.context_ts, 64))
        fields.append(csv_quote(location_to_string(self.location, coll)))
        fields.append(str(self.length))
        if hdr.chksum:
            fields.append(_HIDE_CRC if unit_testing
                          else to_hex_value(self.crc, 32))
        else:
            fields.append("")
        fields.append(csv_quote(coll.file_name) if coll is not None else "")
        return head + ",".join(fields) + "\n"

    def __str__(self) -> str:
        return self.to_csv()