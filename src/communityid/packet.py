"""Packet parsing helpers: convert raw frames into PacketMeta."""
from __future__ import annotations

import typing as t
import dpkt

from .constants import PROTO_ICMP, PROTO_ICMPV6, PROTO_SCTP, PROTO_TCP, PROTO_UDP
from .flow import FlowTuple, PacketMeta

LINKTYPE_ETHERNET = dpkt.pcap.DLT_EN10MB
LINKTYPE_LINUX_SLL = dpkt.pcap.DLT_LINUX_SLL
# DLT_RAW differs between platforms (12 or 14); 101 is the pcap file value
LINKTYPES_RAW = (12, 14, 101)

_PORT_LAYERS = {
    PROTO_TCP: dpkt.tcp.TCP,
    PROTO_UDP: dpkt.udp.UDP,
    PROTO_SCTP: dpkt.sctp.SCTP,
}
_ICMP_LAYERS = {
    PROTO_ICMP: dpkt.icmp.ICMP,
    PROTO_ICMPV6: dpkt.icmp6.ICMP6,
}


def _network_layer(raw: bytes, linktype: int):
    if linktype in LINKTYPES_RAW:
        if not raw:
            return None
        version = raw[0] >> 4
        if version == 4:
            return dpkt.ip.IP(raw)
        if version == 6:
            return dpkt.ip6.IP6(raw)
        return None
    if linktype == LINKTYPE_LINUX_SLL:
        return dpkt.sll.SLL(raw).data
    return dpkt.ethernet.Ethernet(raw).data


def _ports(proto: int, payload) -> t.Tuple[t.Optional[int], t.Optional[int]]:
    """Return the port-equivalent pair for the transport layer, if any.

    TCP/UDP/SCTP yield ports, ICMP/ICMPv6 yield (type, code). Anything else,
    including truncated or fragmented payloads dpkt left as bytes, has none.
    """
    layer = _PORT_LAYERS.get(proto)
    if layer is not None and isinstance(payload, layer):
        return payload.sport, payload.dport
    layer = _ICMP_LAYERS.get(proto)
    if layer is not None and isinstance(payload, layer):
        return payload.type, payload.code
    return None, None


def parse_raw(ts: float, raw: bytes, linktype: int = LINKTYPE_ETHERNET) -> t.Optional[PacketMeta]:
    """Parse a captured frame and return a PacketMeta or None if unsupported.

    Supports Ethernet, Linux cooked and raw IP framing carrying IPv4/IPv6.
    Returns None for non-IP or malformed packets, and for non-first IPv4
    fragments, whose ports are not visible and would hash as a different flow.
    """
    try:
        ip = _network_layer(raw, linktype)
    except (dpkt.UnpackError, IndexError):
        return None

    if isinstance(ip, dpkt.ip.IP):
        if ip.off & dpkt.ip.IP_OFFMASK:
            return None
        proto = ip.p
    elif isinstance(ip, dpkt.ip6.IP6):
        # dpkt resolves extension headers into `p`; fall back to the first header
        proto = getattr(ip, "p", ip.nxt)
    else:
        return None

    sport, dport = _ports(proto, ip.data)
    tup = FlowTuple(protocol=proto, saddr=bytes(ip.src), daddr=bytes(ip.dst), sport=sport, dport=dport)
    return PacketMeta(ts=ts, flow_tuple=tup, length=len(raw))
