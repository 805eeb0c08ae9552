"""Mutations applied to an in-memory issue collection.

Each function edits *issues* in place and returns the commit message that
describes the change. Unknown issue ids raise ``KeyError`` before anything is
modified.
"""

from __future__ import annotations

from typing import Any

from issuecast.models import (
    STATUS_OPEN,
    Comment,
    Issue,
    coerce_id,
    coerce_str,
    find_issue,
    next_issue_id,
    now_iso,
)

UPDATABLE_FIELDS = ("title", "description", "status")

DEFAULT_CREATOR = "Unknown"
DEFAULT_ACTOR = "Someone"
DEFAULT_AUTHOR = "Anonymous"


def _as_mapping(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _or_default(value: object, default: str) -> str:
    """Text of *value*, or *default* when it is JSON null, false, 0 or ``""``."""
    if value is None or value == "" or (isinstance(value, (int, float)) and value == 0):
        return default
    return coerce_str(value)


def _require_issue(issues: list[Issue], raw_id: object) -> Issue:
    issue = find_issue(issues, coerce_id(raw_id))
    if issue is None:
        raise KeyError(raw_id)
    return issue


def create_issue(issues: list[Issue], payload: object) -> tuple[Issue, str]:
    data = _as_mapping(payload)
    issue = Issue(
        id=next_issue_id(issues),
        title=coerce_str(data.get("title")).strip(),
        description=coerce_str(data.get("description")).strip(),
        status=STATUS_OPEN,
        created_by=_or_default(data.get("createdBy"), DEFAULT_CREATOR).strip(),
        created_at=now_iso(),
    )
    issues.append(issue)
    return issue, f"Issue #{issue.id} created by {issue.created_by}: {issue.title}"


def update_issue(issues: list[Issue], raw_id: object, fields: object, actor: object) -> tuple[Issue, str]:
    """Overwrite any of title, description and status. Other keys are ignored."""
    issue = _require_issue(issues, raw_id)
    changes = _as_mapping(fields)
    who = _or_default(actor, DEFAULT_ACTOR)

    changed: list[str] = []
    for name in UPDATABLE_FIELDS:
        if name not in changes:
            continue
        setattr(issue, name, coerce_str(changes[name]))
        changed.append(name)
    summary = ", ".join(changed) or "no-op"
    return issue, f"Issue #{issue.id} updated ({summary}) by {who}"


def add_comment(issues: list[Issue], raw_id: object, payload: object) -> tuple[Comment, str]:
    issue = _require_issue(issues, raw_id)
    data = _as_mapping(payload)
    comment = Comment(
        author=_or_default(data.get("author"), DEFAULT_AUTHOR),
        text=coerce_str(data.get("text")).strip(),
        created_at=now_iso(),
    )
    issue.comments.append(comment)
    return comment, f"Comment added to issue #{issue.id} by {comment.author}"
