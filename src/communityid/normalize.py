"""Flow tuple canonicalization.

Both directions of a flow must produce the same ordered tuple. For most
protocols this is a plain comparison of addresses, then ports. ICMP and
ICMPv6 carry message type and code where other protocols carry ports; a
request and its reply have different types, so the destination type is
rewritten from the request/reply table before comparing. Types with no
counterpart (unreachables, redirects, ...) have a well-defined originator
and are never flipped.
"""
from __future__ import annotations

import typing as t

from .constants import TYPE_MAPPINGS


class NormalizedTuple(t.NamedTuple):
    saddr: bytes
    daddr: bytes
    sport: t.Optional[int]
    dport: t.Optional[int]


def tuple_is_ordered(saddr: bytes, daddr: bytes, sport: t.Optional[int], dport: t.Optional[int]) -> bool:
    """True if (saddr, sport) already sorts before (daddr, dport)."""
    # bytes compare unsigned and lexicographically, like memcmp
    if saddr != daddr:
        return saddr < daddr
    if sport is None or dport is None:
        return True
    return sport < dport


def resolve_ports(protocol: int, sport: int, dport: int) -> t.Tuple[int, int, bool]:
    """Return (sport, dport, is_one_way) after protocol-specific handling."""
    mapping = TYPE_MAPPINGS.get(protocol)
    if mapping is None:
        # no protocol needs special port handling here
        return sport, dport, False
    if sport in mapping:
        return sport, mapping[sport], False
    return sport, dport, True


def normalize_tuple(
    protocol: int,
    addr_len: int,
    saddr: bytes,
    daddr: bytes,
    sport: t.Optional[int] = None,
    dport: t.Optional[int] = None,
) -> NormalizedTuple:
    """Put the flow tuple into its canonical, direction-independent order.

    Addresses must already be `addr_len` bytes long; callers validate. Ports are
    used only when both are given.
    """
    saddr = bytes(saddr)
    daddr = bytes(daddr)

    if sport is None or dport is None:
        sport = dport = None
        is_one_way = False
    else:
        sport, dport, is_one_way = resolve_ports(protocol, sport, dport)

    if is_one_way or tuple_is_ordered(saddr, daddr, sport, dport):
        return NormalizedTuple(saddr, daddr, sport, dport)
    return NormalizedTuple(daddr, saddr, dport, sport)
