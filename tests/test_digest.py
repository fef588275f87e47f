import base64
import logging
import socket

import pytest

from communityid import (
    Config,
    DigestEngineFailure,
    Encoding,
    InvalidAddressLength,
    InvalidPort,
    MissingAddress,
    build_digest_input,
    compute_fingerprint,
)
from communityid.constants import PROTO_ICMP, PROTO_ICMPV6, PROTO_SCTP, PROTO_TCP, PROTO_UDP

SRC = socket.inet_aton("128.232.110.120")
DST = socket.inet_aton("66.35.250.204")
KNOWN_ID = "1:LQU9qZlK+B5F3KDmev6m5PMibrg="


def test_known_vector():
    assert compute_fingerprint(Config(), PROTO_TCP, 4, SRC, DST, 34855, 80) == KNOWN_ID


def test_known_vector_reversed():
    assert compute_fingerprint(Config(), PROTO_TCP, 4, DST, SRC, 80, 34855) == KNOWN_ID


@pytest.mark.parametrize("proto,src,dst,sport,dport,expected", [
    (PROTO_ICMP, "192.168.0.89", "192.168.0.1", 8, 0, "1:X0snYXpgwiv9TZtqg64sgzUn6Dk="),
    (PROTO_ICMP, "192.168.0.1", "192.168.0.89", 0, 0, "1:X0snYXpgwiv9TZtqg64sgzUn6Dk="),
    (PROTO_UDP, "192.168.1.52", "8.8.8.8", 54585, 53, "1:d/FP5EW3wiY1vCndhwleRRKHowQ="),
    (PROTO_ICMPV6, "fe80::200:86ff:fe05:80da", "fe80::260:97ff:fe07:69ea", 135, 0, "1:dGHyGvjMfljg6Bppwm3bg0LO8TY="),
])
def test_reference_vectors(proto, src, dst, sport, dport, expected):
    family = socket.AF_INET6 if ":" in src else socket.AF_INET
    s = socket.inet_pton(family, src)
    d = socket.inet_pton(family, dst)
    assert compute_fingerprint(Config(), proto, len(s), s, d, sport, dport) == expected


def test_default_config_when_none():
    assert compute_fingerprint(None, PROTO_TCP, 4, SRC, DST, 34855, 80) == KNOWN_ID


def test_hex_encoding_matches_base64():
    b64 = compute_fingerprint(Config(), PROTO_TCP, 4, SRC, DST, 34855, 80)
    hx = compute_fingerprint(Config(encoding=Encoding.HEX), PROTO_TCP, 4, SRC, DST, 34855, 80)
    assert hx.startswith("1:")
    assert len(hx) == 2 + 40
    assert hx[2:] == hx[2:].lower()
    assert base64.b64decode(b64[2:]) == bytes.fromhex(hx[2:])
    assert len(bytes.fromhex(hx[2:])) == 20


def test_seed_changes_output_and_is_reproducible():
    a = compute_fingerprint(Config(seed=1), PROTO_TCP, 4, SRC, DST, 34855, 80)
    b = compute_fingerprint(Config(seed=2), PROTO_TCP, 4, SRC, DST, 34855, 80)
    assert a != b
    assert a != KNOWN_ID
    assert a == compute_fingerprint(Config(seed=1), PROTO_TCP, 4, SRC, DST, 34855, 80)


@pytest.mark.parametrize("proto", [PROTO_TCP, PROTO_UDP, PROTO_SCTP, 47, 255])
def test_generic_symmetry(proto):
    a = compute_fingerprint(Config(), proto, 4, SRC, DST, 1234, 5678)
    b = compute_fingerprint(Config(), proto, 4, DST, SRC, 5678, 1234)
    assert a == b


def test_symmetry_ipv6():
    s = socket.inet_pton(socket.AF_INET6, "fe80::1")
    d = socket.inet_pton(socket.AF_INET6, "2001:db8::2")
    assert compute_fingerprint(Config(), PROTO_UDP, 16, s, d, 53, 40000) == compute_fingerprint(
        Config(), PROTO_UDP, 16, d, s, 40000, 53
    )


def test_digest_input_layout():
    data = build_digest_input(Config(seed=0x0102), PROTO_TCP, 4, SRC, DST, 34855, 80)
    assert len(data) == 8 + 2 * 4
    assert data[:2] == b"\x01\x02"
    # 66.35.250.204 sorts first
    assert data[2:6] == DST
    assert data[6:10] == SRC
    assert data[10] == PROTO_TCP
    assert data[11] == 0
    assert data[12:14] == (80).to_bytes(2, "big")
    assert data[14:16] == (34855).to_bytes(2, "big")


def test_portless_input_is_shorter():
    data = build_digest_input(Config(), 47, 4, SRC, DST)
    assert len(data) == 4 + 2 * 4
    s6 = socket.inet_pton(socket.AF_INET6, "2001:db8::1")
    d6 = socket.inet_pton(socket.AF_INET6, "2001:db8::2")
    assert len(build_digest_input(Config(), 47, 16, s6, d6)) == 4 + 2 * 16
    assert len(build_digest_input(Config(), PROTO_UDP, 16, s6, d6, 1, 2)) == 8 + 2 * 16


def test_portless_fingerprint_is_symmetric_and_distinct():
    a = compute_fingerprint(Config(), PROTO_TCP, 4, SRC, DST)
    assert a == compute_fingerprint(Config(), PROTO_TCP, 4, DST, SRC)
    assert a != KNOWN_ID


def test_single_port_is_treated_as_portless():
    assert compute_fingerprint(Config(), PROTO_TCP, 4, SRC, DST, 34855, None) == compute_fingerprint(
        Config(), PROTO_TCP, 4, SRC, DST
    )


def test_deterministic():
    results = {compute_fingerprint(Config(), PROTO_ICMP, 4, SRC, DST, 3, 1) for _ in range(5)}
    assert len(results) == 1


@pytest.mark.parametrize("addr_len", [0, 6, 8, 15, 32])
def test_invalid_address_length(addr_len):
    with pytest.raises(InvalidAddressLength):
        compute_fingerprint(Config(), PROTO_TCP, addr_len, bytes(addr_len), bytes(addr_len), 1, 2)


def test_address_buffer_must_match_length():
    with pytest.raises(InvalidAddressLength):
        compute_fingerprint(Config(), PROTO_TCP, 16, SRC, DST, 1, 2)


def test_missing_address():
    with pytest.raises(MissingAddress):
        compute_fingerprint(Config(), PROTO_TCP, 4, None, DST, 1, 2)
    with pytest.raises(MissingAddress):
        compute_fingerprint(Config(), PROTO_TCP, 4, SRC, None, 1, 2)


def test_port_out_of_range():
    with pytest.raises(InvalidPort):
        compute_fingerprint(Config(), PROTO_TCP, 4, SRC, DST, 70000, 80)


def test_protocol_out_of_range():
    with pytest.raises(ValueError):
        compute_fingerprint(Config(), 256, 4, SRC, DST, 1, 2)


def test_digest_engine_failure(monkeypatch):
    import communityid.digest as digest

    def _broken(name, *args, **kwargs):
        raise ValueError(f"unsupported hash type {name}")

    monkeypatch.setattr(digest.hashlib, "new", _broken)
    with pytest.raises(DigestEngineFailure):
        compute_fingerprint(Config(), PROTO_TCP, 4, SRC, DST, 34855, 80)


def test_debug_trace(caplog):
    with caplog.at_level(logging.DEBUG, logger="communityid.digest"):
        build_digest_input(Config(), PROTO_TCP, 4, SRC, DST, 34855, 80)
    messages = [r.getMessage() for r in caplog.records]
    assert "seed: 0000" in messages
    assert "proto: 06" in messages
    assert "dport: 8827" in messages
