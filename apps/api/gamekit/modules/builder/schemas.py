from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gamekit.core.numbers import Number, clamp, coerce_number

Rarity = Literal["Common", "Uncommon", "Rare", "Epic", "Legendary"]

RARITY_COLORS: Dict[str, str] = {
    "Common": "#cbd5e1",
    "Uncommon": "#22c55e",
    "Rare": "#3b82f6",
    "Epic": "#a855f7",
    "Legendary": "#f59e0b",
}

CATEGORIES: List[str] = ["Material", "Consumable", "Weapon", "Armor", "Quest Item", "Currency"]

BUILDER_STATE_VERSION = 1


# ---------- Draft ----------

class ResourceForm(BaseModel):
    name: str = "Arcstone Fragment"
    category: str = "Material"
    rarity: Rarity = "Rare"
    description: str = "A charged shard used to craft mid-tier gear and enchantments."
    value: Number = 185
    weight: Number = 0.3
    quantity_min: Number = 1
    quantity_max: Number = 4
    power: Number = 12
    defense: Number = 4
    utility: Number = 8
    tags_text: str = "material, forge, electric, mid-game"
    drop_rate: Number = 28
    notes: str = "Combine four shards to stabilize a conduit core."


NUMERIC_FORM_FIELDS = frozenset(
    {"value", "weight", "quantity_min", "quantity_max", "power", "defense", "utility", "drop_rate"}
)


# ---------- Resource (export shape, camelCase on the wire) ----------

class QuantityRange(BaseModel):
    min: Number = 0
    max: Number = 0

    @model_validator(mode="after")
    def _ordered(self) -> "QuantityRange":
        if self.min > self.max:
            self.min, self.max = self.max, self.min
        return self


class ResourceStats(BaseModel):
    power: Number = 0
    defense: Number = 0
    utility: Number = 0

    @field_validator("power", "defense", "utility", mode="before")
    @classmethod
    def _non_negative(cls, v: Any) -> Number:
        return max(0, coerce_number(v))


class Resource(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    category: str
    rarity: Rarity
    description: str = ""
    value: Number = 0
    weight: Number = 0
    quantity_range: QuantityRange = Field(default_factory=QuantityRange, alias="quantityRange")
    stats: ResourceStats = Field(default_factory=ResourceStats)
    tags: List[str] = Field(default_factory=list)
    drop_rate: Number = Field(default=0, alias="dropRate")
    notes: str = ""

    @field_validator("value", "weight", mode="before")
    @classmethod
    def _number(cls, v: Any) -> Number:
        return coerce_number(v)

    @field_validator("drop_rate", mode="before")
    @classmethod
    def _drop_rate_bounds(cls, v: Any) -> Number:
        return clamp(coerce_number(v), 0, 100)

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_trimmed(cls, v: Any) -> List[str]:
        out: List[str] = []
        for raw in v or []:
            tag = str(raw).strip()
            if tag and tag not in out:
                out.append(tag)
        return out


# ---------- Screen state ----------

class DropTally(BaseModel):
    name: str
    count: int


class BuilderState(BaseModel):
    version: int = BUILDER_STATE_VERSION
    form: ResourceForm = Field(default_factory=ResourceForm)
    resources: List[Resource] = Field(default_factory=list)
    status: str = "Ready to build a new resource file."
    simulation_attempts: int = 5
    simulation_result: str = ""
    last_tallies: List[DropTally] = Field(default_factory=list)


# ---------- IO ----------

class BuilderSessionOut(BaseModel):
    session_id: str
    state: BuilderState


class DraftFieldIn(BaseModel):
    field: str = Field(..., min_length=1)
    value: Any = None


class SimulationIn(BaseModel):
    attempts: int = Field(..., le=100_000)


class RarityOption(BaseModel):
    name: Rarity
    color: str


class BuilderOptionsOut(BaseModel):
    rarities: List[RarityOption]
    categories: List[str]


class PackSummaryOut(BaseModel):
    resources_count: int
    average_value: Number


class BuilderSessionDeleteOut(BaseModel):
    session_id: str
    deleted: bool
