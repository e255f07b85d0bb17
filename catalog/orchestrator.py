"""
catalog/orchestrator.py -- Content write path: stack resolution and ownership.

Pipeline for every content write:

    draft (client fields + stack names)
        -> (update only) owned?      missing or foreign id -> NotFoundOrForbidden (404)
        -> resolve_stacks()          unknown name -> PartialResolution (400), nothing written
        -> stamp owner_id            always the caller's verified id, never client input
        -> store                     create, or owner-scoped conditional update/delete

owner_id arrives as a plain int. The API layer takes it from the Identity the
auth gate produced; catalog/ does not know about tokens or requests.

Update and delete are single conditional statements (WHERE id AND user_id).
A zero-row result means "missing or not yours" and is reported as
NotFoundOrForbidden either way.
"""

import logging

from catalog.models import Content, ContentDraft
from catalog.store import CatalogStore
from core.errors import NotFoundOrForbidden

logger = logging.getLogger("cms.catalog")


def create_content(store: CatalogStore, owner_id: int, draft: ContentDraft) -> Content:
    """Resolve the draft's stacks, stamp ownership, and persist a new content item."""
    stacks = store.resolve_stacks(draft.stack_names)
    content = store.insert_content(
        Content(
            user_id=owner_id,
            name=draft.name,
            description=draft.description,
            url=draft.url,
            img_url=draft.img_url,
            stack=stacks,
        )
    )
    logger.info("User %d created content id=%d with %d stack(s)", owner_id, content.id, len(stacks))
    return content


def list_owned_content(store: CatalogStore, owner_id: int) -> list[Content]:
    return store.list_contents(user_id=owner_id)


def list_all_content(store: CatalogStore) -> list[Content]:
    return store.list_contents()


def update_content(store: CatalogStore, content_id: int, owner_id: int, draft: ContentDraft) -> Content:
    """Full-replace an owned content item and return the stored result.

    Ownership is checked first, so a missing or foreign id is 404 whatever
    the draft contains. Stack names are then resolved exactly as on create.
    The write itself stays conditional on owner_id, so a delete between the
    check and the write still ends in NotFoundOrForbidden.
    """
    if store.get_content(content_id, user_id=owner_id) is None:
        raise NotFoundOrForbidden()
    stacks = store.resolve_stacks(draft.stack_names)
    updated = store.update_owned_content(
        content_id,
        owner_id,
        name=draft.name,
        description=draft.description,
        url=draft.url,
        img_url=draft.img_url,
        stack=stacks,
    )
    if not updated:
        raise NotFoundOrForbidden()
    content = store.get_content(content_id)
    if content is None:
        # Deleted between the update and the read-back.
        raise NotFoundOrForbidden()
    logger.info("User %d updated content id=%d", owner_id, content_id)
    return content


def delete_content(store: CatalogStore, content_id: int, owner_id: int) -> None:
    if not store.delete_owned_content(content_id, owner_id):
        raise NotFoundOrForbidden()
    logger.info("User %d deleted content id=%d", owner_id, content_id)
