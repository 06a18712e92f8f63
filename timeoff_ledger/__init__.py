"""Time-Off Ledger & Scheduling Conflict Engine."""

__version__ = "1.0.0"
