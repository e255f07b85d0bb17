"""
api/routes/stacks.py -- Stack registry endpoints.

Routes:
  GET    /stacks       -- list all stacks
  POST   /stacks       -- register a stack; 409 on duplicate name
  PUT    /stacks/{id}  -- full replace of name and color; 404 if absent
  DELETE /stacks/{id}  -- delete; succeeds even if the id is unknown

None of these routes require a session. Renaming or deleting a stack never
touches content that already embeds it -- content holds copies.
"""

from fastapi import APIRouter, Request

from api.models import MessageResponse, StackRequest, StackResponse
from catalog.store import CatalogStore

router = APIRouter()


@router.get("/stacks", response_model=list[StackResponse])
def list_stacks(request: Request) -> list[StackResponse]:
    catalog: CatalogStore = request.app.state.catalog
    return [StackResponse.from_domain(s) for s in catalog.list_stacks()]


@router.post("/stacks", response_model=StackResponse, status_code=201)
def create_stack(request: Request, body: StackRequest) -> StackResponse:
    """Register a new stack. Names are unique (exact, case-sensitive)."""
    catalog: CatalogStore = request.app.state.catalog
    return StackResponse.from_domain(catalog.create_stack(body.name, body.color))


@router.put("/stacks/{stack_id}", response_model=StackResponse)
def update_stack(request: Request, stack_id: int, body: StackRequest) -> StackResponse:
    catalog: CatalogStore = request.app.state.catalog
    return StackResponse.from_domain(catalog.update_stack(stack_id, body.name, body.color))


@router.delete("/stacks/{stack_id}", response_model=MessageResponse)
def delete_stack(request: Request, stack_id: int) -> MessageResponse:
    catalog: CatalogStore = request.app.state.catalog
    catalog.delete_stack(stack_id)
    return MessageResponse(message="Stack deleted successfully")
