from __future__ import annotations

import json
import math
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from gamekit.core.events import emit
from gamekit.core.ids import new_resource_id
from gamekit.core.numbers import Number, coerce_number

from .clipboard import ClipboardAdapter
from .schemas import (
    NUMERIC_FORM_FIELDS,
    RARITY_COLORS,
    BuilderState,
    DropTally,
    QuantityRange,
    Resource,
    ResourceForm,
    ResourceStats,
)

PACK_FILENAME = "resource-pack.json"
UNNAMED_RESOURCE = "Unnamed Resource"

STATUS_MISSING_NAME = "Please provide a name before saving the resource."
STATUS_RESET = "Form reset to defaults."
STATUS_COPIED = "Resource pack copied to clipboard as JSON."
STATUS_COPY_FAILED = "Copy failed. You can still download the JSON file."
STATUS_DOWNLOAD = f"Download started for {PACK_FILENAME}"

SIM_EMPTY_PACK = "Add at least one resource before simulating drops."
SIM_BAD_ATTEMPTS = "Simulation attempts must be at least 1."
SIM_NO_DROPS = "No drops recorded. Adjust drop rates and try again."


def starter_resources() -> List[Resource]:
    return [
        Resource(
            id="iron-ingot",
            name="Iron Ingot",
            category="Material",
            rarity="Common",
            description="Refined metal used by most blacksmiths for core crafting recipes.",
            value=45,
            weight=1.2,
            quantity_range=QuantityRange(min=1, max=6),
            stats=ResourceStats(power=4, defense=6, utility=3),
            tags=["material", "smithing", "low-tier"],
            drop_rate=50,
            notes="Found in starter regions and mine chests.",
        ),
        Resource(
            id="void-silk",
            name="Void-Silk Thread",
            category="Material",
            rarity="Epic",
            description="Mystic thread harvested from void spiders, ideal for rare cloaks.",
            value=420,
            weight=0.1,
            quantity_range=QuantityRange(min=1, max=3),
            stats=ResourceStats(power=6, defense=10, utility=15),
            tags=["stealth", "tailoring", "magic"],
            drop_rate=12,
            notes="Enhances stealth and resistance when woven into armor.",
        ),
    ]


def new_builder_state() -> BuilderState:
    return BuilderState(resources=starter_resources())


# -------------------------
# Draft
# -------------------------
def parse_tags(text: str) -> List[str]:
    out: List[str] = []
    for part in (text or "").split(","):
        tag = part.strip()
        if tag and tag not in out:
            out.append(tag)
    return out


def update_draft_field(state: BuilderState, field: str, value: Any) -> BuilderState:
    if field not in ResourceForm.model_fields:
        raise ValueError(f"unknown draft field: {field}")

    if field in NUMERIC_FORM_FIELDS:
        value = coerce_number(value)
    elif field == "rarity":
        if not isinstance(value, str) or value not in RARITY_COLORS:
            raise ValueError(f"unknown rarity: {value!r}")
    else:
        value = "" if value is None else str(value)

    form = state.form.model_copy(update={field: value})
    return state.model_copy(update={"form": form})


def build_resource_from_form(form: ResourceForm, resource_id: str = "preview") -> Resource:
    qmin = max(0, coerce_number(form.quantity_min))
    qmax = max(0, coerce_number(form.quantity_max))
    return Resource(
        id=resource_id,
        name=form.name.strip() or UNNAMED_RESOURCE,
        category=form.category,
        rarity=form.rarity,
        description=form.description.strip(),
        value=coerce_number(form.value),
        weight=coerce_number(form.weight),
        quantity_range=QuantityRange(min=min(qmin, qmax), max=max(qmin, qmax)),
        stats=ResourceStats(power=form.power, defense=form.defense, utility=form.utility),
        tags=parse_tags(form.tags_text),
        drop_rate=form.drop_rate,
        notes=form.notes.strip(),
    )


def preview(state: BuilderState) -> Resource:
    return build_resource_from_form(state.form)


def add_resource(state: BuilderState) -> BuilderState:
    if not state.form.name.strip():
        return state.model_copy(update={"status": STATUS_MISSING_NAME})

    prepared = build_resource_from_form(state.form, new_resource_id())
    return state.model_copy(
        update={
            "resources": [prepared, *state.resources],
            "status": f"Added {prepared.name} to the local test pack.",
        }
    )


def reset_form(state: BuilderState) -> BuilderState:
    return state.model_copy(update={"form": ResourceForm(), "status": STATUS_RESET})


# -------------------------
# Pack
# -------------------------
def average_value(resources: Sequence[Resource]) -> Number:
    if not resources:
        return 0
    total = sum(r.value for r in resources)
    # halves round up
    return math.floor(total / len(resources) * 100 + 0.5) / 100


def serialize_pack(resources: Sequence[Resource]) -> str:
    payload = [r.model_dump(mode="json", by_alias=True) for r in resources]
    return json.dumps(payload, ensure_ascii=False, indent=2)


def mark_downloaded(state: BuilderState) -> BuilderState:
    return state.model_copy(update={"status": STATUS_DOWNLOAD})


async def copy_pack(state: BuilderState, clipboard: ClipboardAdapter, request_id: Optional[str] = None) -> BuilderState:
    payload = serialize_pack(state.resources)
    try:
        await clipboard.write_text(payload)
    except Exception as e:
        emit("error", "builder.copy.failed", str(e), request_id, __name__, clipboard=clipboard.name)
        return state.model_copy(update={"status": STATUS_COPY_FAILED})
    return state.model_copy(update={"status": STATUS_COPIED})


# -------------------------
# Drop simulation
# -------------------------
def pick_weighted(resources: Sequence[Resource], roll: float) -> Optional[Resource]:
    # first entry whose running weight reaches the roll wins
    cumulative: Number = 0
    for res in resources:
        cumulative += res.drop_rate
        if roll <= cumulative:
            return res
    return None


def simulate_drops(
    resources: Sequence[Resource],
    attempts: int,
    rng: Optional[random.Random] = None,
) -> List[Tuple[str, int]]:
    rng = rng or random.Random()
    weight_sum = sum(r.drop_rate for r in resources)

    totals: Dict[str, int] = {}
    for _ in range(attempts):
        roll = rng.random() * weight_sum
        choice = pick_weighted(resources, roll)
        if choice is None:
            continue
        totals[choice.name] = totals.get(choice.name, 0) + 1

    return sorted(totals.items(), key=lambda kv: kv[1], reverse=True)


def format_simulation(attempts: int, tallies: Sequence[Tuple[str, int]]) -> str:
    if not tallies:
        return SIM_NO_DROPS
    lines = " | ".join(f"{name}: {count}" for name, count in tallies)
    return f"Drop test ({attempts} rolls): {lines}"


def run_simulation(state: BuilderState, attempts: int, rng: Optional[random.Random] = None) -> BuilderState:
    base = state.model_copy(update={"simulation_attempts": attempts, "last_tallies": []})

    if not state.resources:
        return base.model_copy(update={"simulation_result": SIM_EMPTY_PACK})
    if attempts < 1:
        return base.model_copy(update={"simulation_result": SIM_BAD_ATTEMPTS})

    tallies = simulate_drops(state.resources, attempts, rng)
    return base.model_copy(
        update={
            "simulation_result": format_simulation(attempts, tallies),
            "last_tallies": [DropTally(name=name, count=count) for name, count in tallies],
        }
    )
