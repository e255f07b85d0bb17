"""
api/routes/content.py -- Content endpoints.

Routes:
  GET    /contents       -- public listing of every content item
  POST   /content        -- create content owned by the caller (requires auth)
  GET    /content        -- the caller's own content (requires auth)
  PUT    /content/{id}   -- full replace, owner only (requires auth)
  DELETE /content/{id}   -- delete, owner only (requires auth)

Ownership: the owner id always comes from the Identity injected by
require_identity, never from the request body. PUT and DELETE pass that id
down to a conditional write, so another user's content id behaves exactly
like an id that does not exist (404).
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from api.models import ContentRequest, ContentResponse, MessageResponse
from auth.dependencies import require_identity
from auth.models import Identity
from catalog import orchestrator
from catalog.store import CatalogStore

# Auth policy:
# - GET /contents:           public -- read-only listing
# - everything on `router`:  requires auth (router-level require_identity)
public_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_identity)])


@public_router.get("/contents", response_model=list[ContentResponse])
def list_contents(request: Request) -> list[ContentResponse]:
    catalog: CatalogStore = request.app.state.catalog
    return [ContentResponse.from_domain(c) for c in orchestrator.list_all_content(catalog)]


@router.post("/content", response_model=MessageResponse, status_code=201)
def create_content(
    request: Request,
    body: ContentRequest,
    identity: Identity = Depends(require_identity),
) -> MessageResponse:
    """Create a content item for the caller.

    Every name in body.stack must already be registered; otherwise 400 and
    nothing is stored.
    """
    catalog: CatalogStore = request.app.state.catalog
    orchestrator.create_content(catalog, identity.user_id, body.to_draft())
    return MessageResponse(message="Content created successfully")


@router.get("/content", response_model=list[ContentResponse])
def list_my_content(request: Request, identity: Identity = Depends(require_identity)) -> list[ContentResponse]:
    catalog: CatalogStore = request.app.state.catalog
    return [ContentResponse.from_domain(c) for c in orchestrator.list_owned_content(catalog, identity.user_id)]


@router.put("/content/{content_id}", response_class=PlainTextResponse)
def update_content(
    request: Request,
    content_id: int,
    body: ContentRequest,
    identity: Identity = Depends(require_identity),
) -> PlainTextResponse:
    catalog: CatalogStore = request.app.state.catalog
    orchestrator.update_content(catalog, content_id, identity.user_id, body.to_draft())
    return PlainTextResponse("Content updated successfully")


@router.delete("/content/{content_id}", response_class=PlainTextResponse)
def delete_content(
    request: Request,
    content_id: int,
    identity: Identity = Depends(require_identity),
) -> PlainTextResponse:
    catalog: CatalogStore = request.app.state.catalog
    orchestrator.delete_content(catalog, content_id, identity.user_id)
    return PlainTextResponse("Content deleted successfully")
