"""Exceptions raised by the Community ID computation."""


class FingerprintError(Exception):
    """Base class: the flow tuple could not be turned into a Community ID."""


class InvalidAddressLength(FingerprintError):
    def __init__(self, addr_len, detail=None):
        self.addr_len = addr_len
        msg = f"address length must be 4 or 16, got {addr_len}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class MissingAddress(FingerprintError):
    def __init__(self, which: str):
        self.which = which
        super().__init__(f"{which} address is missing")


class InvalidPort(FingerprintError):
    def __init__(self, which: str, value):
        self.which = which
        self.value = value
        super().__init__(f"{which} port out of range 0-65535: {value!r}")


class DigestEngineFailure(FingerprintError):
    """SHA-1 is unavailable in this interpreter (e.g. a restricted FIPS build)."""
