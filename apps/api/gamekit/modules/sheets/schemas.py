from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gamekit.core.numbers import Number, clamp, coerce_number

StatKey = Literal["STR", "SPD", "SIT", "STH", "SRC", "CRM", "SPL", "LUK"]

STAT_ORDER: List[str] = ["STR", "SPD", "SIT", "STH", "SRC", "CRM", "SPL", "LUK"]

STAT_LABELS: Dict[str, str] = {
    "STR": "Strength (STR)",
    "SPD": "Speed (SPD)",
    "SIT": "Sight (SIT)",
    "STH": "Stealth (STH)",
    "SRC": "Search (SRC)",
    "CRM": "Charm (CRM)",
    "SPL": "Special (SPL)",
    "LUK": "Luck (LUK)",
}

SIGNATURE_STAT = "LUK"


class _Item(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)


# ---------- Sheet parts ----------

class StatBlock(_Item):
    STR: str = "d8"
    SPD: str = "d10"
    SIT: str = "d8"
    STH: str = "d12"
    SRC: str = "d10"
    CRM: str = "d6"
    SPL: str = "d4"
    LUK: str = "d20"


class Skill(_Item):
    name: str
    stat: StatKey = "STR"
    level: Number = 0
    notes: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, v: Any) -> Number:
        return max(0, coerce_number(v))


class Ability(_Item):
    name: str
    effect: str = ""


class SheetResource(_Item):
    name: str
    quantity: str = ""
    detail: str = ""


class Equipment(_Item):
    slot: str = ""
    item: str = ""
    durability: str = ""
    status: str = ""


class SessionNote(_Item):
    title: str
    date: str = ""
    summary: str = ""


class Wounds(_Item):
    tokens: Number = 0
    max: Number = 5
    notes: str = ""

    @field_validator("tokens", "max", mode="before")
    @classmethod
    def _number(cls, v: Any) -> Number:
        return coerce_number(v)

    @model_validator(mode="after")
    def _capped(self) -> "Wounds":
        self.max = max(1, self.max)
        self.tokens = clamp(self.tokens, 0, self.max)
        return self


# ---------- Defaults ----------

def default_skills() -> List[Skill]:
    return [
        Skill(name="Kinetic Cushion", stat="SPD", level=2, notes="Ignore first fall consequence each scene."),
        Skill(name="Lock Lore", stat="SRC", level=1, notes="Advantage on ancient mechanisms."),
        Skill(name="Quick Wit", stat="CRM", level=1, notes="Bonus when defusing tense moments."),
    ]


def default_abilities() -> List[Ability]:
    return [
        Ability(name="Lucky Break", effect="Once per scene re-roll a failed Luck check; accept new result."),
        Ability(name="Shadow Slip", effect="Advantage on first Stealth roll after entering a new area."),
    ]


def default_resources() -> List[SheetResource]:
    return [
        SheetResource(
            name="Wound tokens",
            quantity="1 / 5",
            detail="-1 to all rolls per token; at max suffer critical consequence.",
        ),
        SheetResource(name="Bandages", quantity="2", detail="Removes 1 wound token after a short rest."),
        SheetResource(name="Glow charges", quantity="3", detail="Single-use light sources; dim light for 10 minutes."),
    ]


def default_equipment() -> List[Equipment]:
    return [
        Equipment(
            slot="Primary hand",
            item="Collapsible staff",
            durability="85%",
            status="Bent tip (50% effective on heavy strikes)",
        ),
        Equipment(
            slot="Pack",
            item="Worn satchel",
            durability="65%",
            status="Advantage on stealth checks unless overfilled",
        ),
        Equipment(slot="Charm", item="Spyglass charm", durability="100%", status="+1 to Sight on long-range scans"),
    ]


def default_wounds() -> Wounds:
    return Wounds(
        tokens=1,
        max=5,
        notes="Took a nasty scrape while vaulting a fence. -1 to physical checks until tended.",
    )


def default_sessions() -> List[SessionNote]:
    return [
        SessionNote(
            title="Chasing echoes",
            date="Session 01",
            summary="Tracked stolen relic into the drowned tunnels; secured map fragment and earned favor with the Archivist.",
        )
    ]


# ---------- Sheets ----------

class BaseSheet(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    version: int = 1
    character_name: str = Field(default="Lumen Harper", alias="characterName")
    stats: StatBlock = Field(default_factory=StatBlock)
    skills: List[Skill] = Field(default_factory=default_skills)
    abilities: List[Ability] = Field(default_factory=default_abilities)
    resources: List[SheetResource] = Field(default_factory=default_resources)
    equipment: List[Equipment] = Field(default_factory=default_equipment)
    wounds: Wounds = Field(default_factory=default_wounds)
    notes: str = ""


class CharacterSheet(BaseSheet):
    """Basic sheet (v1): in-memory only, lists can grow but not shrink."""

    version: int = 1


class SheetState(BaseSheet):
    """Deep sheet (v2): adds portrait, appearance and a session log; persisted."""

    version: int = 2
    character_image: str = Field(
        default="https://images.unsplash.com/photo-1508214751196-bcfd4ca60f91?auto=format&fit=crop&w=480&q=80",
        alias="characterImage",
    )
    appearance: str = (
        "Weathered trench coat over tactical streetwear; a faint hum of stored kinetic energy surrounds them."
    )
    sessions: List[SessionNote] = Field(default_factory=default_sessions)


LIST_ITEM_TYPES: Dict[str, type] = {
    "skills": Skill,
    "abilities": Ability,
    "resources": SheetResource,
    "equipment": Equipment,
    "sessions": SessionNote,
}

TEXT_FIELDS = frozenset({"character_name", "character_image", "appearance", "notes"})


# ---------- IO ----------

class SheetUpdateIn(BaseModel):
    path: List[Union[int, str]] = Field(..., min_length=1)
    value: Any = None


class BasicSheetOut(BaseModel):
    sheet_id: str
    sheet: CharacterSheet


class SheetSummaryOut(BaseModel):
    character_name: str
    wounds: str
    total_skill_bonus: Number
    signature_stat: str


class BasicSheetDeleteOut(BaseModel):
    sheet_id: str
    deleted: bool


class StatOption(BaseModel):
    key: StatKey
    label: str
