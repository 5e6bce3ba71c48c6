"""Decode ride-photo storage paths into camera, time, file and speed codes.

Camera firmware generations name their uploads differently and all of them
coexist in the same buckets:

* ``<prefix>/<16 digits>.jpg``                 plain encoded core
* ``<prefix>/<16 digits><4 digits>.jpg``       core followed by speed digits
* ``<prefix>/<16 digits>_S<4 digits>.jpg``     core with explicit speed tag
* ``<prefix>/... 42,50 km/h ....jpg``          human readable speed text

The encoded core carries the customer/camera code, an 8-digit time code and a
4-digit file sequence. The customer code of newer firmware is interleaved
across the core (digits 0, 8, 3, 9); the first four digits remain available as
the legacy code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

EXTENSION_RE = re.compile(r"\.[^.]+\Z")
SPEED_SUFFIX_RE = re.compile(r"[_-][sS]([0-9]{4})\Z")
DIGITS_RE = re.compile(r"[0-9]+\Z")
KMH_TEXT_RE = re.compile(r"([0-9]{1,3}[,.][0-9]{1,2})\s*km/h", re.IGNORECASE)

CORE_LENGTH = 16
CORE_WITH_SPEED_LENGTH = 20

# Positions of the modern customer code inside the encoded core. Fixed by the
# camera firmware; must stay bit-exact.
CUSTOMER_CODE_POSITIONS = (0, 8, 3, 9)


@dataclass(frozen=True, slots=True)
class DecodedIdentifier:
    prefix: Optional[str]
    filename: str
    customer_code: Optional[str] = None
    legacy_customer_code: Optional[str] = None
    time_code: Optional[str] = None
    file_code: Optional[str] = None
    speed_kmh: float = 0.0


@dataclass(frozen=True, slots=True)
class SpeedSource:
    """One speed signal found in a filename.

    ``kind`` is ``"suffix"``, ``"trailing"`` or ``"text"``; ``raw`` is the
    matched text before scaling.
    """

    kind: str
    raw: str

    def kmh(self) -> float:
        if self.kind == "text":
            return float(self.raw.replace(",", "."))
        return int(self.raw, 10) / 100


def split_path(path: str) -> tuple[Optional[str], str]:
    """Return ``(prefix, filename)`` for a trimmed storage path."""

    if "/" not in path:
        return None, path
    head, _, rest = path.partition("/")
    return head or None, rest


def _speed_sources(trimmed: str, suffix_raw: Optional[str], trailing_raw: Optional[str]) -> Iterator[SpeedSource]:
    # Yielded in priority order; the caller takes the first one.
    if suffix_raw is not None:
        yield SpeedSource("suffix", suffix_raw)
    if trailing_raw is not None:
        yield SpeedSource("trailing", trailing_raw)
    match = KMH_TEXT_RE.search(trimmed)
    if match:
        yield SpeedSource("text", match.group(1))


def decode(path: Optional[str]) -> DecodedIdentifier:
    """Decode ``path``. Never raises; unknown shapes leave fields empty."""

    trimmed = (path or "").strip()
    prefix, filename = split_path(trimmed)
    stem = EXTENSION_RE.sub("", filename)

    suffix_raw = None
    base_stem = stem
    suffix = SPEED_SUFFIX_RE.search(stem)
    if suffix:
        suffix_raw = suffix.group(1)
        base_stem = stem[: suffix.start()]

    core = None
    trailing_raw = None
    if DIGITS_RE.match(base_stem):
        if len(base_stem) == CORE_LENGTH:
            core = base_stem
        elif len(base_stem) == CORE_WITH_SPEED_LENGTH:
            core = base_stem[:CORE_LENGTH]
            trailing_raw = base_stem[CORE_LENGTH:]

    source = next(_speed_sources(trimmed, suffix_raw, trailing_raw), None)
    speed_kmh = source.kmh() if source else 0.0

    if core is None:
        return DecodedIdentifier(prefix=prefix, filename=filename, speed_kmh=speed_kmh)

    return DecodedIdentifier(
        prefix=prefix,
        filename=filename,
        customer_code="".join(core[i] for i in CUSTOMER_CODE_POSITIONS),
        legacy_customer_code=core[0:4],
        time_code=core[4:12],
        file_code=core[12:16],
        speed_kmh=speed_kmh,
    )
