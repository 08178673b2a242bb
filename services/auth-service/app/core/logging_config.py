"""
Auth Service — Logging setup
"""
import logging
import sys


def configure_logging(level_name: str = "INFO") -> None:
    """Install a single stderr handler on the root logger."""
    level = getattr(logging, level_name.strip().upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate handlers on reload
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s [%(name)s] %(message)s"))
    root.addHandler(handler)
