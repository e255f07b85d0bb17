"""
catalog/models.py -- Domain dataclasses for stacks and content.

These are pure data containers with zero logic. Stack resolution and the
ownership rules live in catalog/orchestrator.py; persistence lives in
catalog/store.py.

Content.stack holds copies of Stack values taken when the content was
written. They are snapshots, not references: renaming or deleting a Stack
afterwards does not touch existing content.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Stack:
    """A named, colored category tag. Names are unique across all stacks."""

    name: str
    color: str
    id: Optional[int] = None


@dataclass
class ContentDraft:
    """Client-editable content fields, before stack names are resolved.

    Used for both create and update: update is a full replace of every field
    here, description included.
    """

    name: str
    description: str = ""
    url: str = ""
    img_url: str = ""
    stack_names: list[str] = field(default_factory=list)


@dataclass
class Content:
    """A content item owned by exactly one user.

    user_id is stamped from the authenticated identity at creation and never
    changes. id is None before the record is written to the database.
    """

    user_id: int
    name: str
    description: str = ""
    url: str = ""
    img_url: str = ""
    stack: list[Stack] = field(default_factory=list)
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
