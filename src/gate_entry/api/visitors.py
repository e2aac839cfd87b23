"""Visitor entry and approval endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query, Request, status

from gate_entry.api.models import (
    BlockRequest,
    UnblockDecisionRequest,
    UnblockRequest,
    VisitorEntryRequest,
)

if TYPE_CHECKING:
    from gate_entry.containers import AppContainer

router = APIRouter(tags=["visitors"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post("/visitors", status_code=status.HTTP_201_CREATED)
async def create_visitor(
    entry: VisitorEntryRequest, request: Request
) -> dict[str, object]:
    """Register a visitor at the gate."""
    registration = _container(request).visitor_service.register_visitor(
        entry.to_record()
    )
    return {"visitor": registration.visitor, "warnings": registration.warnings}


@router.post("/guest-entries", status_code=status.HTTP_201_CREATED)
async def create_guest_entry(
    entry: VisitorEntryRequest, request: Request
) -> dict[str, object]:
    """Register a guest who filled the entry form themselves."""
    registration = _container(request).visitor_service.register_guest(
        entry.to_record()
    )
    return {"visitor": registration.visitor, "warnings": registration.warnings}


@router.get("/visitors")
async def list_visitors(
    request: Request,
    society_id: str | None = Query(default=None, alias="societyId"),
    resident_id: str | None = Query(default=None, alias="residentId"),
) -> dict[str, object]:
    """Return visitors for a society and/or resident."""
    visitors = _container(request).visitor_service.list_visitors(
        society_id=society_id, resident_id=resident_id
    )
    return {"visitors": visitors}


@router.get("/visitors/{visitor_id}")
async def get_visitor(visitor_id: str, request: Request) -> dict[str, object]:
    """Return a single visitor."""
    visitor = _container(request).visitor_service.get_visitor(visitor_id)
    if visitor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"visitor": visitor}


@router.post("/visitors/{visitor_id}/approve")
async def approve_visitor(visitor_id: str, request: Request) -> dict[str, object]:
    """Approve a pending visit."""
    return {"visitor": _container(request).visitor_service.approve(visitor_id)}


@router.post("/visitors/{visitor_id}/reject")
async def reject_visitor(visitor_id: str, request: Request) -> dict[str, object]:
    """Reject a pending visit."""
    return {"visitor": _container(request).visitor_service.reject(visitor_id)}


@router.post("/visitors/{visitor_id}/exit")
async def record_exit(visitor_id: str, request: Request) -> dict[str, object]:
    """Record that an approved visitor left."""
    return {"visitor": _container(request).visitor_service.record_exit(visitor_id)}


@router.post("/visitors/{visitor_id}/block")
async def block_visitor(
    visitor_id: str, body: BlockRequest, request: Request
) -> dict[str, object]:
    """Block a visitor."""
    visitor = _container(request).visitor_service.block(visitor_id, body.blocked_by)
    return {"visitor": visitor}


@router.post("/visitors/{visitor_id}/unblock-request")
async def request_unblock(
    visitor_id: str, body: UnblockRequest, request: Request
) -> dict[str, object]:
    """Ask for a block to be lifted."""
    visitor = _container(request).visitor_service.request_unblock(
        visitor_id, body.requested_by
    )
    return {"visitor": visitor}


@router.post("/visitors/{visitor_id}/unblock-request/approve")
async def approve_unblock(
    visitor_id: str, body: UnblockDecisionRequest, request: Request
) -> dict[str, object]:
    """Lift a block so the resident can decide on the visit again."""
    visitor = _container(request).visitor_service.approve_unblock(
        visitor_id, body.approved_by
    )
    return {"visitor": visitor}


@router.post("/visitors/{visitor_id}/unblock-request/reject")
async def reject_unblock(visitor_id: str, request: Request) -> dict[str, object]:
    """Keep the visitor blocked."""
    return {"visitor": _container(request).visitor_service.reject_unblock(visitor_id)}
