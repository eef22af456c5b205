"""Roster spreadsheet bookkeeping: row consolidation and per-student sheet routing."""

__version__ = "0.1.0"
