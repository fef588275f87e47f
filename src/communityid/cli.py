"""Command-line front ends: `community-id` and `community-id-pcap`."""
from __future__ import annotations

import argparse
import logging
import sys

from .logging_config import setup_logging
from . import __version__
from .errors import FingerprintError
from .flow import Config, Encoding, FlowEngine, FlowTuple

TUPLE_HELP = """\
This calculator prints the Community ID value for a given tuple
to stdout. It supports the following format for the tuple:

  [protocol] [src address] [dst address] [src port] [dst port]

The protocol is either a numeric IP protocol number, or one of
the constants "icmp", "icmp6", "tcp", "udp", or "sctp". Ports may
be omitted for protocols without them. For ICMP and ICMPv6 the
ports are the message type and code.
"""


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _seed(text):
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid seed: {text!r}") from None
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"seed out of range 0-65535: {text!r}")
    return value


def _add_common(p):
    p.add_argument("--seed", type=_seed, default=0, metavar="NUM", help="Seed value for hash operations")
    p.add_argument("--no-base64", action="store_true", help="Don't base64-encode the SHA1 binary value")
    p.add_argument("--log", default="WARNING", help="Log level")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")


def _config_from_args(args) -> Config:
    return Config(seed=args.seed, encoding=Encoding.HEX if args.no_base64 else Encoding.BASE64)


def build_parser():
    p = _Parser(
        prog="community-id",
        description="Community ID calculator",
        epilog=TUPLE_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("flowtuple", nargs="+", help="Flow tuple, in the above order")
    _add_common(p)
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log)
    log = logging.getLogger("communityid.cli")

    parts = args.flowtuple
    if len(parts) not in (3, 5):
        print("Please provide full flow tuple arguments.", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        tup = FlowTuple.from_strings(*parts)
        cid = tup.fingerprint(_config_from_args(args))
    except FingerprintError as e:
        log.debug("computation failed for %s", parts, exc_info=True)
        print(f"Could not generate Community ID value: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(cid)
    return 0


def build_pcap_parser():
    p = _Parser(prog="community-id-pcap", description="Print Community ID values for the IP packets in pcap/pcapng files")
    p.add_argument("pcaps", nargs="+", metavar="PCAP", help="Path to pcap/pcapng")
    p.add_argument("--flows", action="store_true", help="Print one line per flow instead of per packet")
    _add_common(p)
    return p


def pcap_main(argv=None):
    from .ingest import iter_packets
    from .packet import parse_raw

    parser = build_pcap_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log)
    log = logging.getLogger("communityid.cli")

    config = _config_from_args(args)
    engine = FlowEngine(config) if args.flows else None
    rc = 0

    for path in args.pcaps:
        pkt_count = 0
        skipped = 0
        try:
            for ts, raw, linktype in iter_packets(path):
                pkt_count += 1
                meta = parse_raw(ts, raw, linktype)
                if meta is None:
                    skipped += 1
                    continue
                try:
                    if engine is not None:
                        engine.ingest_packet(meta)
                        continue
                    cid = meta.flow_tuple.fingerprint(config)
                except FingerprintError:
                    log.warning("packet %d in %s: could not compute Community ID", pkt_count, path, exc_info=True)
                    skipped += 1
                    continue
                print(f"{ts:.6f} {meta.flow_tuple.describe()} {cid}")
        except (OSError, ValueError) as e:
            print(f"community-id-pcap: cannot read {path}: {e}", file=sys.stderr)
            rc = 1
            continue
        log.info("Read %d packets from %s, skipped %d", pkt_count, path, skipped)

    if engine is not None:
        for flow in engine.flows():
            print(f"{flow.community_id} {flow.flow_tuple.describe()} {flow.packet_count} {flow.byte_count}")
    return rc


if __name__ == "__main__":
    sys.exit(main())
