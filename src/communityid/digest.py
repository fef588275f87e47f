"""Community ID digest construction and encoding.

The SHA-1 input layout is fixed by the Community ID v1 format:

    seed (2, NBO) | saddr | daddr | proto (1) | pad 0x00 (1) [| sport (2) | dport (2)]

Ports are left out entirely, not zero-filled, when the flow has none.
"""
from __future__ import annotations

import base64
import hashlib
import logging
import struct
import typing as t

from .constants import ADDR_LENGTHS, VERSION_PREFIX
from .errors import DigestEngineFailure, InvalidAddressLength, InvalidPort, MissingAddress
from .flow import Config, Encoding
from .normalize import normalize_tuple

log = logging.getLogger("communityid.digest")

PADDING = 0


def _check_inputs(protocol, addr_len, saddr, daddr, sport, dport):
    if addr_len not in ADDR_LENGTHS:
        raise InvalidAddressLength(addr_len)
    if saddr is None:
        raise MissingAddress("source")
    if daddr is None:
        raise MissingAddress("destination")
    if len(saddr) != addr_len:
        raise InvalidAddressLength(addr_len, f"source address has {len(saddr)} bytes")
    if len(daddr) != addr_len:
        raise InvalidAddressLength(addr_len, f"destination address has {len(daddr)} bytes")
    if not 0 <= protocol <= 0xFF:
        raise ValueError(f"protocol out of range 0-255: {protocol!r}")
    for which, port in (("source", sport), ("destination", dport)):
        if port is not None and not 0 <= port <= 0xFFFF:
            raise InvalidPort(which, port)


def build_digest_input(
    config: Config,
    protocol: int,
    addr_len: int,
    saddr: bytes,
    daddr: bytes,
    sport: t.Optional[int] = None,
    dport: t.Optional[int] = None,
) -> bytes:
    """Return the exact byte string that gets hashed for this flow."""
    _check_inputs(protocol, addr_len, saddr, daddr, sport, dport)
    norm = normalize_tuple(protocol, addr_len, saddr, daddr, sport, dport)

    parts = [
        ("seed", struct.pack("!H", config.seed)),
        ("saddr", norm.saddr),
        ("daddr", norm.daddr),
        ("proto", struct.pack("!B", protocol)),
        ("padding", struct.pack("!B", PADDING)),
    ]
    if norm.sport is not None and norm.dport is not None:
        parts.append(("sport", struct.pack("!H", norm.sport)))
        parts.append(("dport", struct.pack("!H", norm.dport)))

    if log.isEnabledFor(logging.DEBUG):
        for name, data in parts:
            log.debug("%s: %s", name, data.hex())

    return b"".join(data for _, data in parts)


def _sha1(data: bytes) -> bytes:
    try:
        h = hashlib.new("sha1")
    except ValueError as exc:
        raise DigestEngineFailure(f"SHA-1 unavailable: {exc}") from exc
    h.update(data)
    return h.digest()


def encode_digest(digest: bytes, encoding: Encoding = Encoding.BASE64) -> str:
    """Render a raw digest as a version-prefixed Community ID string."""
    if encoding is Encoding.HEX:
        return VERSION_PREFIX + digest.hex()
    return VERSION_PREFIX + base64.b64encode(digest).decode("ascii")


def compute_fingerprint(
    config: t.Optional[Config],
    protocol: int,
    addr_len: int,
    saddr: bytes,
    daddr: bytes,
    sport: t.Optional[int] = None,
    dport: t.Optional[int] = None,
) -> str:
    """Compute the Community ID for one flow tuple.

    Addresses are raw network-order bytes (4 or 16 of them); ports are ints
    and are optional as a pair. Raises a `FingerprintError` subclass on bad
    input, never returns a partial value.
    """
    if config is None:
        config = Config()
    data = build_digest_input(config, protocol, addr_len, saddr, daddr, sport, dport)
    return encode_digest(_sha1(data), config.encoding)
