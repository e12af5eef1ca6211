"""DNS record types shared by the provider and the record-set conversions."""

from __future__ import annotations

import ipaddress
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class Record(ABC):
    """A DNS record that can be expressed as a generic resource record."""

    @abstractmethod
    def rr(self) -> RR:
        """Return the generic resource-record form of this record."""


@dataclass(frozen=True, kw_only=True)
class RR(Record):
    """A generic resource record: name, type, TTL and textual data."""

    name: str
    type: str
    data: str = ""
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        return self

    def parse(self) -> Record:
        """Return the specific record for this RR, or the RR itself if its type is not known.

        Raises ValueError when the data does not fit the record type.
        """
        parser = _PARSERS.get(self.type)
        return parser(self) if parser is not None else self


@dataclass(frozen=True, kw_only=True)
class Address(Record):
    """An A or AAAA record, depending on the IP version."""

    name: str
    ip: IPAddress
    ttl: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if isinstance(self.ip, str):
            object.__setattr__(self, "ip", ipaddress.ip_address(self.ip))

    def rr(self) -> RR:
        record_type = "AAAA" if self.ip.version == 6 else "A"
        return RR(name=self.name, type=record_type, data=str(self.ip), ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class CAA(Record):
    """A certification authority authorization record."""

    name: str
    tag: str
    value: str
    flags: int = 0
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        data = f'{self.flags} {self.tag} "{escaped}"'
        return RR(name=self.name, type="CAA", data=data, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class CNAME(Record):
    """A canonical name record."""

    name: str
    target: str
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        return RR(name=self.name, type="CNAME", data=self.target, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class MX(Record):
    """A mail exchange record."""

    name: str
    target: str
    preference: int = 0
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        data = f"{self.preference} {self.target}"
        return RR(name=self.name, type="MX", data=data, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class NS(Record):
    """A name server record."""

    name: str
    target: str
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        return RR(name=self.name, type="NS", data=self.target, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class SRV(Record):
    """A service locator record; the owner name is _service._transport.name."""

    service: str
    transport: str
    name: str
    target: str
    priority: int = 0
    weight: int = 0
    port: int = 0
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        if not self.service and not self.transport:
            owner = self.name
        else:
            owner = f"_{self.service}._{self.transport}"
            if self.name and self.name != "@":
                owner += "." + self.name
        data = f"{self.priority} {self.weight} {self.port} {self.target}"
        return RR(name=owner, type="SRV", data=data, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class TXT(Record):
    """A text record."""

    name: str
    text: str
    ttl: timedelta = timedelta(0)

    def rr(self) -> RR:
        return RR(name=self.name, type="TXT", data=self.text, ttl=self.ttl)


def relative_name(fqdn: str, zone: str) -> str:
    """Return fqdn relative to zone, ignoring trailing dots on both."""
    name = fqdn.removesuffix(".").removesuffix(zone.removesuffix("."))
    return name.removesuffix(".")


def _unquote(text: str) -> str:
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return text
    return re.sub(r"\\(.)", r"\1", text[1:-1])


def _uint(text: str, bits: int, what: str) -> int:
    if not (text.isascii() and text.isdigit()) or int(text) >= 1 << bits:
        raise ValueError(f"invalid {what}: {text!r}")
    return int(text)


def _fields(rr: RR, count: int) -> list[str]:
    fields = rr.data.split()
    if len(fields) != count:
        raise ValueError(
            f"malformed {rr.type} data: expected {count} fields, got {len(fields)}"
        )
    return fields


def _parse_address(rr: RR) -> Address:
    try:
        ip = ipaddress.ip_address(rr.data)
    except ValueError as exc:
        raise ValueError(f"invalid IP address: {rr.data!r}") from exc
    return Address(name=rr.name, ip=ip, ttl=rr.ttl)


def _parse_caa(rr: RR) -> CAA:
    fields = rr.data.split(None, 2)
    if len(fields) < 3:
        raise ValueError(f"malformed CAA data: {rr.data!r}")
    return CAA(
        name=rr.name,
        flags=_uint(fields[0], 8, "CAA flags"),
        tag=fields[1],
        value=_unquote(fields[2].strip()),
        ttl=rr.ttl,
    )


def _parse_mx(rr: RR) -> MX:
    preference, target = _fields(rr, 2)
    return MX(
        name=rr.name,
        preference=_uint(preference, 16, "MX preference"),
        target=target,
        ttl=rr.ttl,
    )


def _parse_srv(rr: RR) -> SRV:
    labels = rr.name.split(".", 2)
    if len(labels) < 2 or not labels[0].startswith("_") or not labels[1].startswith("_"):
        raise ValueError(f"SRV name {rr.name!r} is not of the form _service._proto[.name]")
    priority, weight, port, target = _fields(rr, 4)
    return SRV(
        service=labels[0][1:],
        transport=labels[1][1:],
        name=labels[2] if len(labels) == 3 else "@",
        priority=_uint(priority, 16, "SRV priority"),
        weight=_uint(weight, 16, "SRV weight"),
        port=_uint(port, 16, "SRV port"),
        target=target,
        ttl=rr.ttl,
    )


_PARSERS = {
    "A": _parse_address,
    "AAAA": _parse_address,
    "CAA": _parse_caa,
    "CNAME": lambda rr: CNAME(name=rr.name, target=rr.data, ttl=rr.ttl),
    "MX": _parse_mx,
    "NS": lambda rr: NS(name=rr.name, target=rr.data, ttl=rr.ttl),
    "SRV": _parse_srv,
    "TXT": lambda rr: TXT(name=rr.name, text=rr.data, ttl=rr.ttl),
}