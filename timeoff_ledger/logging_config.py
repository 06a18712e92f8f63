"""Logging setup for the ledger service."""

import logging
import sys

_HANDLER_NAME = "timeoff_ledger"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "info") -> None:
    """Attach one stream handler to the package logger at *level*.

    Safe to call more than once; the handler is only installed the first time.
    """
    root = logging.getLogger("timeoff_ledger")
    root.setLevel(level.upper())

    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
