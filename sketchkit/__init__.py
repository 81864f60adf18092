"""Compact JSON building and logging, dynamic JSON values, and DER encoding for P-256 certificates and CSRs."""

__version__ = "0.1.0"
__all__ = ["jsonbuilder", "logger", "jsonvar", "der", "certificate"]