"""Signature matching against a hex fingerprint."""

from __future__ import annotations

from typing import Iterable, Optional

from sigrepair.catalog.models import SignatureRecord


def is_signature_match(fingerprint: Optional[str], pattern: Optional[str]) -> bool:
    """Return True when ``pattern`` occurs in ``fingerprint``.

    A pattern matches anywhere in the fingerprint, not only at its start.
    Patterns longer than two characters also match case-insensitively.
    """
    if fingerprint is None or pattern is None:
        return False
    return (
        fingerprint.startswith(pattern)
        or pattern in fingerprint
        or (len(pattern) > 2 and pattern.lower() in fingerprint.lower())
    )


def match_signature(
    fingerprint: Optional[str], records: Iterable[SignatureRecord]
) -> Optional[SignatureRecord]:
    """Return the first record, in iteration order, whose pattern matches ``fingerprint``.

    Records with an empty pattern never match. There is no scoring: when
    several patterns occur in the fingerprint the earliest record wins.
    """
    if not fingerprint:
        return None
    for record in records:
        if record.hex_signature and is_signature_match(fingerprint, record.hex_signature):
            return record
    return None


__all__ = ["is_signature_match", "match_signature"]
