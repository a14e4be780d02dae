"""
View session endpoints: tree selection state and the derived query.
"""

from fastapi import APIRouter, HTTPException, Query, status

from pricewatch.deps import get_session_service
from pricewatch.core.sessions import SessionNotFound
from pricewatch.schemas.sessions import ExpandRequest, SelectionEventRequest, SessionView

router = APIRouter()


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Session '{session_id}' not found"
    )


@router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session():
    """Mount a products view: new empty selection, freshly fetched tree."""
    service = await get_session_service()
    session_id = await service.mount()
    return await service.view(session_id)


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str, q: str = Query("", description="Category search")):
    """Current rows, selection and query of a session."""
    service = await get_session_service()
    try:
        return await service.view(session_id, search=q)
    except SessionNotFound:
        raise _not_found(session_id)


@router.delete("/{session_id}")
async def delete_session(session_id: str):
    """Unmount a view. In-flight listing fetches are cancelled."""
    service = await get_session_service()
    deleted = await service.unmount(session_id)
    if not deleted:
        raise _not_found(session_id)
    return {"success": True, "message": "Session deleted"}


@router.post("/{session_id}/events", response_model=SessionView)
async def post_event(session_id: str, request: SelectionEventRequest):
    """Apply toggle / activate / set_mode / clear."""
    service = await get_session_service()
    try:
        return await service.dispatch(
            session_id,
            request.type,
            path=request.path,
            mode=request.mode
        )
    except SessionNotFound:
        raise _not_found(session_id)
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e)
        )


@router.post("/{session_id}/tree/refresh", response_model=SessionView)
async def refresh_tree(session_id: str):
    """Refetch the category tree. Selection is not reconciled."""
    service = await get_session_service()
    try:
        return await service.refresh_tree(session_id)
    except SessionNotFound:
        raise _not_found(session_id)


@router.post("/{session_id}/tree/expand", response_model=SessionView)
async def toggle_node(session_id: str, request: ExpandRequest):
    """Open or close one node."""
    service = await get_session_service()
    try:
        return await service.change_expansion(session_id, "toggle", request.path)
    except SessionNotFound:
        raise _not_found(session_id)


@router.post("/{session_id}/tree/expand-all", response_model=SessionView)
async def expand_all_nodes(session_id: str):
    service = await get_session_service()
    try:
        return await service.change_expansion(session_id, "expand_all")
    except SessionNotFound:
        raise _not_found(session_id)


@router.post("/{session_id}/tree/collapse-all", response_model=SessionView)
async def collapse_all_nodes(session_id: str):
    service = await get_session_service()
    try:
        return await service.change_expansion(session_id, "collapse_all")
    except SessionNotFound:
        raise _not_found(session_id)
