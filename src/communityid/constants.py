"""Protocol and ICMP type numbers used by the Community ID computation."""
from __future__ import annotations

import typing as t

# IP protocol numbers
PROTO_ICMP = 1
PROTO_IP = 4
PROTO_TCP = 6
PROTO_UDP = 17
PROTO_IPV6 = 41
PROTO_ICMPV6 = 58
PROTO_SCTP = 132

# ICMP types
ICMP_ECHO_REPLY = 0
ICMP_ECHO = 8
ICMP_RTR_ADVERT = 9
ICMP_RTR_SOLICIT = 10
ICMP_TSTAMP = 13
ICMP_TSTAMP_REPLY = 14
ICMP_INFO = 15
ICMP_INFO_REPLY = 16
ICMP_MASK = 17
ICMP_MASK_REPLY = 18

# ICMPv6 types
ICMPV6_ECHO_REQUEST = 128
ICMPV6_ECHO_REPLY = 129
ICMPV6_MLD_LISTENER_QUERY = 130
ICMPV6_MLD_LISTENER_REPORT = 131
ICMPV6_ND_ROUTER_SOLICIT = 133
ICMPV6_ND_ROUTER_ADVERT = 134
ICMPV6_ND_NEIGHBOR_SOLICIT = 135
ICMPV6_ND_NEIGHBOR_ADVERT = 136
ICMPV6_WRU_REQUEST = 139
ICMPV6_WRU_REPLY = 140
ICMPV6_HAAD_REQUEST = 144
ICMPV6_HAAD_REPLY = 145


def _symmetric(pairs: t.Iterable[t.Tuple[int, int]]) -> t.Dict[int, int]:
    out: t.Dict[int, int] = {}
    for a, b in pairs:
        out[a] = b
        out[b] = a
    return out


# request <-> reply, keyed both ways
ICMP_TYPE_MAPPING: t.Dict[int, int] = _symmetric([
    (ICMP_ECHO, ICMP_ECHO_REPLY),
    (ICMP_TSTAMP, ICMP_TSTAMP_REPLY),
    (ICMP_INFO, ICMP_INFO_REPLY),
    (ICMP_RTR_SOLICIT, ICMP_RTR_ADVERT),
    (ICMP_MASK, ICMP_MASK_REPLY),
])

ICMPV6_TYPE_MAPPING: t.Dict[int, int] = _symmetric([
    (ICMPV6_ECHO_REQUEST, ICMPV6_ECHO_REPLY),
    (ICMPV6_MLD_LISTENER_QUERY, ICMPV6_MLD_LISTENER_REPORT),
    (ICMPV6_ND_ROUTER_SOLICIT, ICMPV6_ND_ROUTER_ADVERT),
    (ICMPV6_ND_NEIGHBOR_SOLICIT, ICMPV6_ND_NEIGHBOR_ADVERT),
    (ICMPV6_WRU_REQUEST, ICMPV6_WRU_REPLY),
    (ICMPV6_HAAD_REQUEST, ICMPV6_HAAD_REPLY),
])

TYPE_MAPPINGS: t.Dict[int, t.Dict[int, int]] = {
    PROTO_ICMP: ICMP_TYPE_MAPPING,
    PROTO_ICMPV6: ICMPV6_TYPE_MAPPING,
}

# keywords accepted on the command line in place of a protocol number
PROTO_KEYWORDS: t.Dict[str, int] = {
    "icmp": PROTO_ICMP,
    "icmp6": PROTO_ICMPV6,
    "tcp": PROTO_TCP,
    "udp": PROTO_UDP,
    "sctp": PROTO_SCTP,
}

PROTO_NAMES: t.Dict[int, str] = {v: k for k, v in PROTO_KEYWORDS.items()}

# only v1 exists
VERSION_PREFIX = "1:"

ADDR_LENGTHS = (4, 16)
