from __future__ import annotations

from fastapi import APIRouter, HTTPException, Path, Request
from fastapi.responses import Response

from gamekit.core.workspaces import WorkspaceRegistry

from .clipboard import get_clipboard
from .schemas import (
    CATEGORIES,
    RARITY_COLORS,
    BuilderOptionsOut,
    BuilderSessionDeleteOut,
    BuilderSessionOut,
    BuilderState,
    DraftFieldIn,
    PackSummaryOut,
    RarityOption,
    Resource,
    SimulationIn,
)
from .service import (
    PACK_FILENAME,
    add_resource,
    average_value,
    copy_pack,
    mark_downloaded,
    new_builder_state,
    preview,
    reset_form,
    run_simulation,
    serialize_pack,
    update_draft_field,
)

router = APIRouter(prefix="/builder", tags=["builder"])

sessions: WorkspaceRegistry[BuilderState] = WorkspaceRegistry("builder")


def _rid(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _load(session_id: str) -> BuilderState:
    state = sessions.get(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Builder session not found: {session_id}")
    return state


def _out(session_id: str, state: BuilderState) -> BuilderSessionOut:
    sessions.put(session_id, state)
    return BuilderSessionOut(session_id=session_id, state=state)


@router.get("/options", response_model=BuilderOptionsOut)
def get_options() -> BuilderOptionsOut:
    return BuilderOptionsOut(
        rarities=[RarityOption(name=name, color=color) for name, color in RARITY_COLORS.items()],
        categories=list(CATEGORIES),
    )


@router.post("/sessions", response_model=BuilderSessionOut)
def create_session() -> BuilderSessionOut:
    session_id, state = sessions.create(new_builder_state())
    return BuilderSessionOut(session_id=session_id, state=state)


@router.get("/sessions/{session_id}", response_model=BuilderSessionOut)
def get_session(session_id: str = Path(...)) -> BuilderSessionOut:
    return BuilderSessionOut(session_id=session_id, state=_load(session_id))


@router.delete("/sessions/{session_id}", response_model=BuilderSessionDeleteOut)
def delete_session(session_id: str = Path(..., min_length=1)) -> BuilderSessionDeleteOut:
    if not sessions.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Builder session not found: {session_id}")
    return BuilderSessionDeleteOut(session_id=session_id, deleted=True)


@router.get("/sessions/{session_id}/summary", response_model=PackSummaryOut)
def get_summary(session_id: str) -> PackSummaryOut:
    state = _load(session_id)
    return PackSummaryOut(resources_count=len(state.resources), average_value=average_value(state.resources))


@router.get("/sessions/{session_id}/preview", response_model=Resource)
def get_preview(session_id: str) -> Resource:
    return preview(_load(session_id))


@router.patch("/sessions/{session_id}/draft", response_model=BuilderSessionOut)
def patch_draft(session_id: str, body: DraftFieldIn) -> BuilderSessionOut:
    state = _load(session_id)
    try:
        state = update_draft_field(state, body.field, body.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _out(session_id, state)


@router.post("/sessions/{session_id}/reset", response_model=BuilderSessionOut)
def post_reset(session_id: str) -> BuilderSessionOut:
    return _out(session_id, reset_form(_load(session_id)))


@router.post("/sessions/{session_id}/pack", response_model=BuilderSessionOut)
def post_pack(session_id: str) -> BuilderSessionOut:
    return _out(session_id, add_resource(_load(session_id)))


@router.post("/sessions/{session_id}/pack/copy", response_model=BuilderSessionOut)
async def post_copy(session_id: str, request: Request) -> BuilderSessionOut:
    state = await copy_pack(_load(session_id), get_clipboard(), request_id=_rid(request))
    return _out(session_id, state)


@router.get("/sessions/{session_id}/pack/download")
def get_download(session_id: str) -> Response:
    state = _load(session_id)
    payload = serialize_pack(state.resources)
    sessions.put(session_id, mark_downloaded(state))
    return Response(
        content=payload.encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{PACK_FILENAME}"'},
    )


@router.post("/sessions/{session_id}/simulate", response_model=BuilderSessionOut)
def post_simulate(session_id: str, body: SimulationIn) -> BuilderSessionOut:
    return _out(session_id, run_simulation(_load(session_id), body.attempts))
