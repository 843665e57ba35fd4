from __future__ import annotations

from typing import Any, Callable, List, TypeVar

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from gamekit.core.workspaces import WorkspaceRegistry

from .schemas import (
    STAT_LABELS,
    STAT_ORDER,
    BasicSheetDeleteOut,
    BasicSheetOut,
    CharacterSheet,
    SheetState,
    SheetSummaryOut,
    SheetUpdateIn,
    StatOption,
)
from .service import append_item, apply_update, remove_item, sheet_summary, snapshot
from .store import load_sheet, reset_sheet, save_sheet

router = APIRouter(prefix="/sheets", tags=["sheets"])

basic_sheets: WorkspaceRegistry[CharacterSheet] = WorkspaceRegistry("sheets.basic")

T = TypeVar("T")


def _rid(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _guard(fn: Callable[..., T], *args: Any) -> T:
    try:
        return fn(*args)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _snapshot_response(text: str) -> Response:
    return Response(content=text.encode("utf-8"), media_type="application/json")


@router.get("/stats", response_model=List[StatOption])
def get_stat_options() -> List[StatOption]:
    return [StatOption(key=k, label=STAT_LABELS[k]) for k in STAT_ORDER]


# ---------- basic sheet (v1, in-memory) ----------

def _load_basic(sheet_id: str) -> CharacterSheet:
    sheet = basic_sheets.get(sheet_id)
    if sheet is None:
        raise HTTPException(status_code=404, detail=f"Sheet not found: {sheet_id}")
    return sheet


@router.post("/basic", response_model=BasicSheetOut)
def create_basic_sheet() -> BasicSheetOut:
    sheet_id, sheet = basic_sheets.create(CharacterSheet())
    return BasicSheetOut(sheet_id=sheet_id, sheet=sheet)


@router.get("/basic/{sheet_id}", response_model=BasicSheetOut)
def get_basic_sheet(sheet_id: str) -> BasicSheetOut:
    return BasicSheetOut(sheet_id=sheet_id, sheet=_load_basic(sheet_id))


@router.delete("/basic/{sheet_id}", response_model=BasicSheetDeleteOut)
def delete_basic_sheet(sheet_id: str) -> BasicSheetDeleteOut:
    if not basic_sheets.remove(sheet_id):
        raise HTTPException(status_code=404, detail=f"Sheet not found: {sheet_id}")
    return BasicSheetDeleteOut(sheet_id=sheet_id, deleted=True)


@router.get("/basic/{sheet_id}/summary", response_model=SheetSummaryOut)
def get_basic_summary(sheet_id: str) -> SheetSummaryOut:
    return sheet_summary(_load_basic(sheet_id))


@router.get("/basic/{sheet_id}/snapshot")
def get_basic_snapshot(sheet_id: str) -> Response:
    return _snapshot_response(snapshot(_load_basic(sheet_id)))


@router.patch("/basic/{sheet_id}", response_model=BasicSheetOut)
def patch_basic_sheet(sheet_id: str, body: SheetUpdateIn) -> BasicSheetOut:
    sheet = _guard(apply_update, _load_basic(sheet_id), body.path, body.value)
    return BasicSheetOut(sheet_id=sheet_id, sheet=basic_sheets.put(sheet_id, sheet))


@router.post("/basic/{sheet_id}/{list_name}", response_model=BasicSheetOut)
def append_basic_item(sheet_id: str, list_name: str) -> BasicSheetOut:
    sheet = _guard(append_item, _load_basic(sheet_id), list_name)
    return BasicSheetOut(sheet_id=sheet_id, sheet=basic_sheets.put(sheet_id, sheet))


# ---------- deep sheet (v2, persisted after every change) ----------

@router.get("/deep", response_model=SheetState)
def get_deep_sheet(request: Request) -> SheetState:
    return load_sheet(_rid(request))


@router.get("/deep/summary", response_model=SheetSummaryOut)
def get_deep_summary(request: Request) -> SheetSummaryOut:
    return sheet_summary(load_sheet(_rid(request)))


@router.get("/deep/snapshot")
def get_deep_snapshot(request: Request) -> Response:
    return _snapshot_response(snapshot(load_sheet(_rid(request))))


@router.patch("/deep", response_model=SheetState)
def patch_deep_sheet(body: SheetUpdateIn, request: Request) -> SheetState:
    sheet = _guard(apply_update, load_sheet(_rid(request)), body.path, body.value)
    return save_sheet(sheet)


@router.post("/deep/{list_name}", response_model=SheetState)
def append_deep_item(list_name: str, request: Request) -> SheetState:
    sheet = _guard(append_item, load_sheet(_rid(request)), list_name)
    return save_sheet(sheet)


@router.delete("/deep/{list_name}/{index}", response_model=SheetState)
def remove_deep_item(list_name: str, index: int, request: Request) -> SheetState:
    sheet = _guard(remove_item, load_sheet(_rid(request)), list_name, index)
    return save_sheet(sheet)


@router.delete("/deep", response_model=SheetState)
def reset_deep_sheet() -> SheetState:
    return reset_sheet()
