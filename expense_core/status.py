"""
Application status ids as defined by the backend, and their display mapping.

Only the five ids below are meaningful. Anything else gets the neutral
"unknown" style instead of an error.
"""
from enum import IntEnum
from typing import Optional


class StatusId(IntEnum):
    PENDING = 1
    REJECTED = 2
    APPROVED = 3
    PAID = 4
    DELETED = 9


STATUS_LABELS = {
    StatusId.PENDING: "申請中",
    StatusId.REJECTED: "修正依頼",
    StatusId.APPROVED: "承認済",
    StatusId.PAID: "領収済",
    StatusId.DELETED: "削除",
}

UNKNOWN_LABEL = "不明"
UNKNOWN_STYLE = "unknown"

_STYLES = {
    StatusId.PENDING: "pending",
    StatusId.REJECTED: "rejected",
    StatusId.APPROVED: "approved",
    StatusId.PAID: "approved",
    StatusId.DELETED: "deleted",
}


def parse_status(status_id) -> Optional[StatusId]:
    try:
        return StatusId(int(status_id))
    except (TypeError, ValueError):
        return None


def status_style(status_id) -> str:
    status = parse_status(status_id)
    return _STYLES[status] if status is not None else UNKNOWN_STYLE


def status_label(status_id, label: str = "") -> str:
    """Prefer the backend's label; fall back to the known label, then to 不明."""
    if label:
        return label
    status = parse_status(status_id)
    return STATUS_LABELS[status] if status is not None else UNKNOWN_LABEL
