"""Flow tuple data model and Community ID based flow grouping."""
from __future__ import annotations

import dataclasses
import enum
import ipaddress
import typing as t

from .constants import (
    PROTO_ICMP,
    PROTO_ICMPV6,
    PROTO_KEYWORDS,
    PROTO_NAMES,
    PROTO_SCTP,
    PROTO_TCP,
    PROTO_UDP,
)


class Encoding(enum.Enum):
    BASE64 = "base64"
    HEX = "hex"


@dataclasses.dataclass(frozen=True)
class Config:
    seed: int = 0
    encoding: Encoding = Encoding.BASE64

    def __post_init__(self):
        if not 0 <= self.seed <= 0xFFFF:
            raise ValueError(f"seed out of range 0-65535: {self.seed!r}")


def parse_protocol(text: str) -> int:
    """Map a protocol keyword ("tcp", "icmp6", ...) or decimal number to an int."""
    key = text.strip().lower()
    if key in PROTO_KEYWORDS:
        return PROTO_KEYWORDS[key]
    try:
        proto = int(key, 10)
    except ValueError:
        raise ValueError(f"unknown protocol: {text!r}") from None
    if not 0 <= proto <= 0xFF:
        raise ValueError(f"protocol out of range 0-255: {text!r}")
    return proto


def parse_port(text: str) -> int:
    try:
        port = int(text, 10)
    except ValueError:
        raise ValueError(f"invalid port: {text!r}") from None
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range 0-65535: {text!r}")
    return port


def parse_addresses(saddr: str, daddr: str) -> t.Tuple[bytes, bytes]:
    """Decode a textual address pair; both must be IPv4 or both IPv6."""
    try:
        src = ipaddress.ip_address(saddr.strip())
    except ValueError:
        raise ValueError(f"invalid source address: {saddr!r}") from None
    try:
        dst = ipaddress.ip_address(daddr.strip())
    except ValueError:
        raise ValueError(f"invalid destination address: {daddr!r}") from None
    if src.version != dst.version:
        raise ValueError("both addresses must be either IPv4 or IPv6")
    return src.packed, dst.packed


def format_address(addr: bytes) -> str:
    return str(ipaddress.ip_address(addr))


@dataclasses.dataclass(frozen=True)
class FlowTuple:
    protocol: int
    saddr: bytes
    daddr: bytes
    sport: t.Optional[int] = None
    dport: t.Optional[int] = None

    @property
    def addr_len(self) -> int:
        return len(self.saddr)

    @property
    def has_ports(self) -> bool:
        return self.sport is not None and self.dport is not None

    @classmethod
    def from_strings(
        cls,
        proto: t.Union[str, int],
        saddr: str,
        daddr: str,
        sport: t.Union[str, int, None] = None,
        dport: t.Union[str, int, None] = None,
    ) -> "FlowTuple":
        """Build a tuple from human-readable values, raising ValueError on bad input."""
        protocol = proto if isinstance(proto, int) else parse_protocol(proto)
        src, dst = parse_addresses(saddr, daddr)
        if (sport is None) != (dport is None):
            raise ValueError("source and destination ports must be given together")
        if sport is not None:
            sport = sport if isinstance(sport, int) else parse_port(sport)
            dport = dport if isinstance(dport, int) else parse_port(dport)
        return cls(protocol=protocol, saddr=src, daddr=dst, sport=sport, dport=dport)

    @classmethod
    def make_tcp(cls, saddr, daddr, sport, dport):
        return cls.from_strings(PROTO_TCP, saddr, daddr, sport, dport)

    @classmethod
    def make_udp(cls, saddr, daddr, sport, dport):
        return cls.from_strings(PROTO_UDP, saddr, daddr, sport, dport)

    @classmethod
    def make_sctp(cls, saddr, daddr, sport, dport):
        return cls.from_strings(PROTO_SCTP, saddr, daddr, sport, dport)

    @classmethod
    def make_icmp(cls, saddr, daddr, icmp_type, icmp_code):
        return cls.from_strings(PROTO_ICMP, saddr, daddr, icmp_type, icmp_code)

    @classmethod
    def make_icmp6(cls, saddr, daddr, icmp_type, icmp_code):
        return cls.from_strings(PROTO_ICMPV6, saddr, daddr, icmp_type, icmp_code)

    @classmethod
    def make_ip(cls, saddr, daddr, protocol):
        return cls.from_strings(protocol, saddr, daddr)

    def fingerprint(self, config: t.Optional[Config] = None) -> str:
        from .digest import compute_fingerprint

        return compute_fingerprint(config, self.protocol, self.addr_len, self.saddr, self.daddr, self.sport, self.dport)

    def describe(self) -> str:
        proto = PROTO_NAMES.get(self.protocol, str(self.protocol))
        sport = "-" if self.sport is None else str(self.sport)
        dport = "-" if self.dport is None else str(self.dport)
        return f"{proto} {format_address(self.saddr)} {format_address(self.daddr)} {sport} {dport}"


@dataclasses.dataclass
class PacketMeta:
    ts: float
    flow_tuple: FlowTuple
    length: int


@dataclasses.dataclass
class Flow:
    community_id: str
    flow_tuple: FlowTuple
    first_ts: float
    last_ts: float
    packet_count: int = 0
    byte_count: int = 0

    def add(self, pkt: PacketMeta):
        self.packet_count += 1
        self.byte_count += pkt.length
        self.first_ts = min(self.first_ts, pkt.ts)
        self.last_ts = max(self.last_ts, pkt.ts)


class FlowEngine:
    """Group packets into flows keyed by their Community ID.

    Both directions of a connection land in the same Flow; `flow_tuple` keeps the
    orientation of the first packet seen.
    """

    def __init__(self, config: t.Optional[Config] = None):
        self.config = config or Config()
        self._flows: dict[str, Flow] = {}

    def ingest_packet(self, meta: PacketMeta) -> str:
        cid = meta.flow_tuple.fingerprint(self.config)
        flow = self._flows.get(cid)
        if flow is None:
            flow = Flow(community_id=cid, flow_tuple=meta.flow_tuple, first_ts=meta.ts, last_ts=meta.ts)
            self._flows[cid] = flow
        flow.add(meta)
        return cid

    def __len__(self):
        return len(self._flows)

    def flows(self) -> t.Iterator[Flow]:
        # first-seen order
        yield from self._flows.values()
