"""Process-wide logging setup for the command-line tools."""
import logging


def setup_logging(level: str = "WARNING"):
    levelno = getattr(logging, level.upper(), logging.WARNING)
    fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    logging.basicConfig(level=levelno, format=fmt)
