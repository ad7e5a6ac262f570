"""Snapshot directory verification."""

from verify.verify import VerificationResult, verify_snapshots

__all__ = ["VerificationResult", "verify_snapshots"]
