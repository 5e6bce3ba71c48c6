"""Decode and resolve a storage path without touching storage.

Used by the ingestion-check page to verify how a previously seen path would be
routed before automated ingestion relies on it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from filename_decoder import DecodedIdentifier, decode
from resolver import ResolvedIdentity, resolve


@dataclass(frozen=True, slots=True)
class PreviewResult:
    decoded: DecodedIdentifier
    resolved: ResolvedIdentity

    def to_dict(self) -> dict:
        data = asdict(self.decoded)
        data.update(asdict(self.resolved))
        return data


def preview(path: str, lookups) -> PreviewResult:
    decoded = decode(path)
    return PreviewResult(decoded=decoded, resolved=resolve(decoded, lookups))
