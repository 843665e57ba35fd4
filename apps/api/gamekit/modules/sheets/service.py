from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Sequence, TypeVar, Union

from pydantic import BaseModel

from gamekit.core.numbers import coerce_number

from .schemas import (
    LIST_ITEM_TYPES,
    SIGNATURE_STAT,
    STAT_ORDER,
    TEXT_FIELDS,
    Ability,
    BaseSheet,
    Equipment,
    SessionNote,
    SheetResource,
    SheetState,
    SheetSummaryOut,
    Skill,
    Wounds,
)

Sheet = TypeVar("Sheet", bound=BaseSheet)

NEW_ITEMS: Dict[str, Callable[[], BaseModel]] = {
    "skills": lambda: Skill(name="New skill", stat="STR", level=1, notes=""),
    "abilities": lambda: Ability(name="New ability", effect="Describe what it does."),
    "resources": lambda: SheetResource(name="New resource", quantity="1", detail="Usage notes."),
    "equipment": lambda: Equipment(slot="New slot", item="New equipment", durability="100%", status="Ready for action."),
    "sessions": lambda: SessionNote(title="New session", date="Session", summary="Key beats, discoveries, and consequences."),
}


def _field_name(model_cls: type, key: str) -> str:
    # accepts the python name or the wire alias (characterName)
    for name, info in model_cls.model_fields.items():
        if key == name or (info.alias is not None and key == info.alias):
            return name
    raise ValueError(f"unknown field: {key}")


def _list_name(state: BaseSheet, list_name: str) -> str:
    name = _field_name(type(state), list_name)
    if name not in LIST_ITEM_TYPES:
        raise ValueError(f"not a list field: {list_name}")
    return name


# -------------------------
# Targeted updates
# -------------------------
def update_field(state: Sheet, field: str, value: Any) -> Sheet:
    name = _field_name(type(state), field)
    if name not in TEXT_FIELDS:
        raise ValueError(f"not a text field: {field}")
    return state.model_copy(update={name: "" if value is None else str(value)})


def update_stat(state: Sheet, key: str, value: Any) -> Sheet:
    if key not in STAT_ORDER:
        raise ValueError(f"unknown stat: {key}")
    stats = state.stats.model_copy(update={key: "" if value is None else str(value)})
    return state.model_copy(update={"stats": stats})


def update_wounds(state: Sheet, field: str, value: Any) -> Sheet:
    name = _field_name(Wounds, field)
    wounds = Wounds.model_validate({**state.wounds.model_dump(), name: value})
    return state.model_copy(update={"wounds": wounds})


def update_list_item(state: Sheet, list_name: str, index: int, field: str, value: Any) -> Sheet:
    name = _list_name(state, list_name)
    item_cls = LIST_ITEM_TYPES[name]
    items = list(getattr(state, name))
    if index < 0 or index >= len(items):
        raise IndexError(f"{name}[{index}] not found")

    field_name = _field_name(item_cls, field)
    items[index] = item_cls.model_validate({**items[index].model_dump(), field_name: value})
    return state.model_copy(update={name: items})


def update_skill(state: Sheet, index: int, field: str, value: Any) -> Sheet:
    return update_list_item(state, "skills", index, field, value)


def update_ability(state: Sheet, index: int, field: str, value: Any) -> Sheet:
    return update_list_item(state, "abilities", index, field, value)


def update_resource(state: Sheet, index: int, field: str, value: Any) -> Sheet:
    return update_list_item(state, "resources", index, field, value)


def update_equipment(state: Sheet, index: int, field: str, value: Any) -> Sheet:
    return update_list_item(state, "equipment", index, field, value)


def update_session(state: SheetState, index: int, field: str, value: Any) -> SheetState:
    return update_list_item(state, "sessions", index, field, value)


def apply_update(state: Sheet, path: Sequence[Union[int, str]], value: Any) -> Sheet:
    """
    Route a field path to the matching targeted update:
      ["characterName"]           -> update_field
      ["stats", "LUK"]            -> update_stat
      ["wounds", "tokens"]        -> update_wounds
      ["skills", 0, "level"]      -> update_list_item
    """
    if not path:
        raise ValueError("empty path")

    head = str(path[0])
    if len(path) == 1:
        return update_field(state, head, value)
    if head == "stats" and len(path) == 2:
        return update_stat(state, str(path[1]), value)
    if head == "wounds" and len(path) == 2:
        return update_wounds(state, str(path[1]), value)
    if len(path) == 3:
        try:
            index = int(path[1])
        except (TypeError, ValueError):
            raise ValueError(f"list index must be an integer, got {path[1]!r}")
        return update_list_item(state, head, index, str(path[2]), value)

    raise ValueError(f"unsupported path: {list(path)}")


# -------------------------
# List append / remove
# -------------------------
def append_item(state: Sheet, list_name: str) -> Sheet:
    name = _list_name(state, list_name)
    return state.model_copy(update={name: [*getattr(state, name), NEW_ITEMS[name]()]})


def remove_item(state: SheetState, list_name: str, index: int) -> SheetState:
    # out-of-range index leaves the list as-is
    name = _list_name(state, list_name)
    items: List[BaseModel] = [x for i, x in enumerate(getattr(state, name)) if i != index]
    return state.model_copy(update={name: items})


# -------------------------
# Derived values
# -------------------------
def total_skill_bonus(state: BaseSheet) -> Union[int, float]:
    return sum(coerce_number(s.level) for s in state.skills)


def sheet_summary(state: BaseSheet) -> SheetSummaryOut:
    return SheetSummaryOut(
        character_name=state.character_name,
        wounds=f"{state.wounds.tokens} / {state.wounds.max}",
        total_skill_bonus=total_skill_bonus(state),
        signature_stat=getattr(state.stats, SIGNATURE_STAT),
    )


def to_json_dict(state: BaseSheet) -> Dict[str, Any]:
    return state.model_dump(mode="json", by_alias=True)


def snapshot(state: BaseSheet) -> str:
    return json.dumps(to_json_dict(state), ensure_ascii=False, indent=2)
