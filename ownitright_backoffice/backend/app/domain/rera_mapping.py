# backend/app/domain/rera_mapping.py
from __future__ import annotations

from typing import Optional

VERIFICATION_STATUSES = ("verified", "pending", "failed", "outdated")
COMPLIANCE_STATUSES = ("active", "non-compliant", "suspended", "cancelled")
PROJECT_STATUSES = ("under-construction", "completed", "delayed", "cancelled", "approved")
PROJECT_TYPES = ("residential", "commercial", "mixed", "plotted-development", "other")


def map_project_type(raw: Optional[str]) -> str:
    s = (raw or "").strip().lower()
    if not s:
        return "residential"
    if "residential" in s:
        return "residential"
    if "commercial" in s:
        return "commercial"
    if "mixed" in s:
        return "mixed"
    if "plot" in s:
        return "plotted-development"
    return "other"


def map_project_status(raw: Optional[str]) -> str:
    s = (raw or "").strip().lower()
    if not s:
        return "under-construction"
    if "completed" in s or "ready" in s:
        return "completed"
    if "delayed" in s or "postponed" in s:
        return "delayed"
    if "cancelled" in s or "revoked" in s:
        return "cancelled"
    if "approved" in s or "registered" in s:
        return "approved"
    return "under-construction"


def map_compliance_status(raw: Optional[str]) -> str:
    s = (raw or "").strip().lower()
    if not s:
        return "active"
    # "non-compliant" contains "compliant", so test it first
    if "non-compliant" in s or "violation" in s:
        return "non-compliant"
    if "active" in s or "compliant" in s:
        return "active"
    if "suspended" in s:
        return "suspended"
    if "cancelled" in s or "revoked" in s:
        return "cancelled"
    return "active"


def parse_rera_ids(text: str, *, dedupe: bool = True) -> list[str]:
    """
    One RERA id per line: trim, drop blanks, optionally dedupe keeping
    first-seen order.

        "A\\n\\nB\\n  \\nA" -> ["A", "B"]           (dedupe)
        "A\\n\\nB\\n  \\nA" -> ["A", "B", "A"]      (no dedupe)
    """
    ids = [line.strip() for line in (text or "").splitlines()]
    ids = [x for x in ids if x]
    if not dedupe:
        return ids

    seen: set[str] = set()
    out: list[str] = []
    for x in ids:
        if x in seen:
            continue
        seen.add(x)
        out.append(x)
    return out


def normalize_rera_ids(ids: list[str], *, dedupe: bool = True) -> list[str]:
    """Same normalization for ids that already arrive as a JSON list."""
    return parse_rera_ids("\n".join(str(x) for x in ids), dedupe=dedupe)
