"""Issue and comment records plus the coercion rules applied to client input.

Records serialize to the camelCase shape used both on the wire and in
``issues.json`` (``createdBy``, ``createdAt``).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

logger = logging.getLogger(__name__)

Status = Literal["Open", "In Progress", "Closed"]

STATUS_OPEN: Status = "Open"
STATUS_IN_PROGRESS: Status = "In Progress"
STATUS_CLOSED: Status = "Closed"
VALID_STATUSES: tuple[str, ...] = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)


def now_iso() -> str:
    """UTC timestamp in the ``2024-01-31T12:00:00.000Z`` form browsers parse."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_str(value: object) -> str:
    """Coerce a JSON value to text. ``None`` becomes ``""``.

    Objects and arrays are stored as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_id(value: object) -> int | None:
    """Coerce a client-supplied issue id. Returns None when it cannot be an id."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@dataclass
class Comment:
    author: str
    text: str
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"author": self.author, "text": self.text, "createdAt": self.created_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Comment:
        return cls(
            author=coerce_str(data.get("author")),
            text=coerce_str(data.get("text")),
            created_at=coerce_str(data.get("createdAt")),
        )


@dataclass
class Issue:
    id: int
    title: str
    description: str = ""
    status: str = STATUS_OPEN
    created_by: str = ""
    created_at: str = ""
    comments: list[Comment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Issue:
        """Build an Issue from a stored record, tolerating missing fields."""
        issue_id = coerce_id(data.get("id"))
        raw_comments = data.get("comments") or []
        if not isinstance(raw_comments, list):
            raw_comments = []
        comments = []
        for raw in raw_comments:
            if not isinstance(raw, dict):
                logger.warning("Skipping malformed comment on issue %r: %r", issue_id, raw)
                continue
            comments.append(Comment.from_dict(raw))
        return cls(
            id=issue_id or 0,
            title=coerce_str(data.get("title")),
            description=coerce_str(data.get("description")),
            status=coerce_str(data.get("status", STATUS_OPEN)),
            created_by=coerce_str(data.get("createdBy")),
            created_at=coerce_str(data.get("createdAt")),
            comments=comments,
        )


def next_issue_id(issues: list[Issue]) -> int:
    """Max existing id + 1, or 1 for an empty collection."""
    return max((i.id for i in issues if i.id > 0), default=0) + 1


def find_issue(issues: list[Issue], issue_id: int | None) -> Issue | None:
    if issue_id is None:
        return None
    for issue in issues:
        if issue.id == issue_id:
            return issue
    return None
