"""Community ID flow hashing.

Computes direction-independent flow fingerprints that interoperate with
other Community ID implementations (Zeek, Suricata, the reference tools).
"""

__version__ = "1.0.0"

from .constants import (
    PROTO_ICMP,
    PROTO_ICMPV6,
    PROTO_SCTP,
    PROTO_TCP,
    PROTO_UDP,
)
from .digest import build_digest_input, compute_fingerprint
from .errors import (
    DigestEngineFailure,
    FingerprintError,
    InvalidAddressLength,
    InvalidPort,
    MissingAddress,
)
from .flow import Config, Encoding, FlowTuple
from .normalize import NormalizedTuple, normalize_tuple

__all__ = [
    "__version__",
    "PROTO_ICMP",
    "PROTO_ICMPV6",
    "PROTO_SCTP",
    "PROTO_TCP",
    "PROTO_UDP",
    "build_digest_input",
    "compute_fingerprint",
    "DigestEngineFailure",
    "FingerprintError",
    "InvalidAddressLength",
    "InvalidPort",
    "MissingAddress",
    "Config",
    "Encoding",
    "FlowTuple",
    "NormalizedTuple",
    "normalize_tuple",
]
