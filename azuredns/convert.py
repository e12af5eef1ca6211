"""Conversion between DNS records and Azure DNS record-set documents.

Record sets are dictionaries shaped like the Azure DNS REST API's JSON:
``{"name": ..., "type": "Microsoft.Network/dnszones/A", "properties": {"TTL": 30, ...}}``.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterable, Iterator, Mapping
from datetime import timedelta
from enum import Enum
from typing import Any

from .records import CAA, CNAME, MX, NS, RR, SRV, TXT, Address, Record, relative_name

_TYPE_PREFIX = "Microsoft.Network/dnszones/"
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MAX = (1 << 63) - 1
_SOA_KEYS = ("host", "email", "serialNumber", "refreshTime", "retryTime", "expireTime", "minimumTTL")


class RecordType(str, Enum):
    """Record types that Azure DNS record sets support here."""

    A = "A"
    AAAA = "AAAA"
    CAA = "CAA"
    CNAME = "CNAME"
    MX = "MX"
    NS = "NS"
    SRV = "SRV"
    TXT = "TXT"
    PTR = "PTR"
    SOA = "SOA"

    def __str__(self) -> str:
        return self.value


class ConversionError(ValueError):
    """A record or record set cannot be converted."""


def _uninterpretable(type_name: str) -> ConversionError:
    return ConversionError(f"the type {type_name} cannot be interpreted")


def generate_record_set_name(name: str, zone: str) -> str:
    """Return the record-set name for name in zone, "@" for the apex."""
    return relative_name(name.removesuffix(".") + ".", zone) or "@"


def convert_string_to_record_type(type_name: str) -> RecordType:
    """Return the RecordType for a standard type name."""
    try:
        return RecordType(type_name)
    except ValueError:
        raise _uninterpretable(type_name) from None


def record_sets_to_records(record_sets: Iterable[Mapping[str, Any]]) -> list[Record]:
    """Convert Azure record sets into DNS records, one per record value."""
    records: list[Record] = []
    for record_set in record_sets:
        type_name = record_set["type"].removeprefix(_TYPE_PREFIX)
        if type_name not in RecordType.__members__:
            raise _uninterpretable(type_name)
        properties = record_set["properties"]
        ttl = timedelta(seconds=properties["TTL"])
        records.extend(_read(type_name, record_set["name"], ttl, properties))
    return records


def record_to_record_set(record: Record) -> dict[str, Any]:
    """Convert a DNS record into an Azure record set holding its properties."""
    try:
        parsed = record.rr().parse()
    except ValueError as exc:
        raise ConversionError(f"unable to parse RR: {exc}") from exc

    properties: dict[str, Any] = {"TTL": int(parsed.ttl.total_seconds())}
    match parsed:
        case Address(ip=ip) if ip.version == 6:
            properties["AAAARecords"] = [{"ipv6Address": str(ip)}]
        case Address(ip=ip):
            properties["ARecords"] = [{"ipv4Address": str(ip)}]
        case CAA():
            properties["caaRecords"] = [
                {"flags": parsed.flags, "tag": parsed.tag, "value": parsed.value}
            ]
        case CNAME():
            properties["CNAMERecord"] = {"cname": parsed.target}
        case MX():
            properties["MXRecords"] = [{"preference": parsed.preference, "exchange": parsed.target}]
        case NS():
            properties["NSRecords"] = [{"nsdname": parsed.target}]
        case SRV():
            properties["SRVRecords"] = [
                {
                    "priority": parsed.priority,
                    "weight": parsed.weight,
                    "port": parsed.port,
                    "target": parsed.target,
                }
            ]
        case TXT():
            properties["TXTRecords"] = [{"value": [parsed.text]}]
        case RR() if parsed.type.upper() == "PTR":
            properties["PTRRecords"] = [{"ptrdname": parsed.data}]
        case RR() if parsed.type.upper() == "SOA":
            values = parsed.data.split(" ")
            if len(values) < 7:
                raise ConversionError(f"invalid SOA record data: {parsed.data}")
            soa: dict[str, Any] = dict(zip(_SOA_KEYS[:2], values[:2]))
            soa.update(zip(_SOA_KEYS[2:], map(_parse_int64, values[2:7])))
            properties["SOARecord"] = soa
        case _:
            raise _uninterpretable(parsed.rr().type)
    return {"properties": properties}


def _parse_int64(text: str) -> int:
    """Parse a decimal integer, yielding 0 when malformed and clamping on overflow."""
    if not _INT_RE.fullmatch(text):
        return 0
    return max(-_INT64_MAX - 1, min(_INT64_MAX, int(text)))


def _parse_ip(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    try:
        return ipaddress.ip_address(text)
    except ValueError as exc:
        raise ConversionError(f"failed to parse IP address: {exc}") from exc


def _read(type_name: str, name: str, ttl: timedelta, props: Mapping[str, Any]) -> Iterator[Record]:
    def values(key: str) -> list[Any]:
        return props.get(key) or []

    match type_name:
        case "A":
            for v in values("ARecords"):
                yield Address(name=name, ttl=ttl, ip=_parse_ip(v["ipv4Address"]))
        case "AAAA":
            for v in values("AAAARecords"):
                yield Address(name=name, ttl=ttl, ip=_parse_ip(v["ipv6Address"]))
        case "CAA":
            for v in values("caaRecords"):
                yield CAA(name=name, ttl=ttl, flags=v["flags"] & 0xFF, tag=v["tag"], value=v["value"])
        case "CNAME":
            yield CNAME(name=name, ttl=ttl, target=props["CNAMERecord"]["cname"])
        case "MX":
            for v in values("MXRecords"):
                yield MX(name=name, ttl=ttl, preference=v["preference"] & 0xFFFF, target=v["exchange"])
        case "NS":
            for v in values("NSRecords"):
                yield NS(name=name, ttl=ttl, target=v["nsdname"])
        case "SRV":
            for v in values("SRVRecords"):
                parts = name.split(".", 2)
                if len(parts) < 2:
                    raise ConversionError(
                        f"name {name} does not contain enough fields; "
                        "expected format: '_service._proto.name' or '_service._proto'"
                    )
                yield SRV(
                    service=parts[0].removeprefix("_"),
                    transport=parts[1].removeprefix("_"),
                    name=parts[2] if len(parts) == 3 else "@",
                    ttl=ttl,
                    priority=v["priority"] & 0xFFFF,
                    weight=v["weight"] & 0xFFFF,
                    port=v["port"] & 0xFFFF,
                    target=v["target"],
                )
        case "TXT":
            for v in values("TXTRecords"):
                for text in v.get("value") or []:
                    yield TXT(name=name, ttl=ttl, text=text)
        case "PTR":
            for v in values("PTRRecords"):
                yield RR(name=name, type="PTR", ttl=ttl, data=v["ptrdname"])
        case "SOA":
            soa = props["SOARecord"]
            data = " ".join(str(soa[key]) for key in _SOA_KEYS)
            yield RR(name=name, type="SOA", ttl=ttl, data=data)