"""PCAP and PCAPNG streaming ingestion utilities.

Provides a streaming iterator that yields timestamp, raw packet bytes and the
capture's link type. dpkt handles both classic pcap and pcapng.
"""
from __future__ import annotations

import logging
import typing as t
import dpkt

log = logging.getLogger("communityid.ingest")


def _open_reader(fh):
    try:
        return dpkt.pcap.Reader(fh)
    except (ValueError, dpkt.UnpackError):
        fh.seek(0)
    try:
        return dpkt.pcapng.Reader(fh)
    except (ValueError, dpkt.UnpackError) as exc:
        raise ValueError(f"not a pcap or pcapng file: {exc}") from exc


def iter_packets(path: str) -> t.Iterator[t.Tuple[float, bytes, int]]:
    """Yield (ts, raw_bytes, linktype) for packets in a pcap or pcapng file.

    This is streaming and does not load the entire file in memory. Raises
    OSError if the file cannot be opened and ValueError if it is not a
    capture file or is cut off partway through a record.
    """
    count = 0
    with open(path, "rb") as fh:
        rdr = _open_reader(fh)
        linktype = rdr.datalink()
        log.debug("reading %s (linktype %d)", path, linktype)
        try:
            for ts, buf in rdr:
                count += 1
                yield float(ts), bytes(buf), linktype
        except dpkt.UnpackError as exc:
            log.warning("%s is truncated after %d packets", path, count)
            raise ValueError(f"truncated capture after {count} packets: {exc}") from exc
