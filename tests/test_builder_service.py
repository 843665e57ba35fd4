import asyncio
import json
import random

import pytest

from gamekit.modules.builder.clipboard import StorageClipboard, UnavailableClipboard
from gamekit.modules.builder.schemas import BuilderState, Resource, ResourceForm
from gamekit.modules.builder.service import (
    SIM_BAD_ATTEMPTS,
    SIM_EMPTY_PACK,
    SIM_NO_DROPS,
    STATUS_COPIED,
    STATUS_COPY_FAILED,
    STATUS_MISSING_NAME,
    STATUS_RESET,
    add_resource,
    average_value,
    build_resource_from_form,
    copy_pack,
    new_builder_state,
    parse_tags,
    pick_weighted,
    reset_form,
    run_simulation,
    serialize_pack,
    simulate_drops,
    update_draft_field,
)


def _res(name, drop_rate):
    return Resource(id=name.lower(), name=name, category="Material", rarity="Common", drop_rate=drop_rate)


# ---------- draft / preview ----------

@pytest.mark.parametrize("qmin,qmax", [(1, 4), (9, 2), (3, 3), (-5, 2)])
def test_preview_quantity_range_is_ordered(qmin, qmax):
    preview = build_resource_from_form(ResourceForm(quantity_min=qmin, quantity_max=qmax))
    assert preview.quantity_range.min <= preview.quantity_range.max


def test_preview_stats_never_negative():
    preview = build_resource_from_form(ResourceForm(power=-5, defense=-1, utility=7))
    assert preview.stats.power == 0
    assert preview.stats.defense == 0
    assert preview.stats.utility == 7


@pytest.mark.parametrize("raw,expected", [(150, 100), (-3, 0), (28, 28), (100, 100)])
def test_preview_drop_rate_is_clamped(raw, expected):
    assert build_resource_from_form(ResourceForm(drop_rate=raw)).drop_rate == expected


def test_parse_tags_drops_blanks_and_trims():
    assert parse_tags("a, b ,, c") == ["a", "b", "c"]
    assert parse_tags(" fire , fire, ice ") == ["fire", "ice"]
    assert parse_tags("") == []


def test_preview_defaults_and_trimming():
    form = ResourceForm(name="   ", description="  shiny  ", notes=" n ")
    preview = build_resource_from_form(form)
    assert preview.id == "preview"
    assert preview.name == "Unnamed Resource"
    assert preview.description == "shiny"
    assert preview.notes == "n"


def test_update_draft_field_coerces_numbers():
    state = new_builder_state()
    state2 = update_draft_field(state, "value", "not-a-number")
    assert state2.form.value == 0
    assert state.form.value == 185
    assert update_draft_field(state, "weight", "1.5").form.weight == 1.5


def test_update_draft_field_rejects_unknown_field_and_rarity():
    state = new_builder_state()
    with pytest.raises(ValueError):
        update_draft_field(state, "colour", "red")
    with pytest.raises(ValueError):
        update_draft_field(state, "rarity", "Mythic")
    for bad in (["Rare"], {"name": "Rare"}, 3, None):
        with pytest.raises(ValueError):
            update_draft_field(state, "rarity", bad)
    assert update_draft_field(state, "rarity", "Legendary").form.rarity == "Legendary"


# ---------- pack ----------

def test_add_resource_prepends_to_pack():
    state = new_builder_state()
    state2 = add_resource(state)
    assert len(state2.resources) == 3
    assert state2.resources[0].name == "Arcstone Fragment"
    assert state2.resources[0].id != "preview"
    assert state2.status == "Added Arcstone Fragment to the local test pack."
    assert len(state.resources) == 2


def test_add_resource_with_blank_name_is_rejected():
    state = update_draft_field(new_builder_state(), "name", "   ")
    state2 = add_resource(state)
    assert state2.status == STATUS_MISSING_NAME
    assert state2.resources == state.resources


def test_reset_form_restores_defaults():
    state = update_draft_field(new_builder_state(), "name", "Sunspire Ember")
    state2 = reset_form(state)
    assert state2.form == ResourceForm()
    assert state2.status == STATUS_RESET


def test_average_value():
    assert average_value([]) == 0
    assert average_value(new_builder_state().resources) == 232.5


def test_average_value_rounds_halves_up():
    pack = [
        Resource(id="a", name="A", category="Material", rarity="Common", value=0),
        Resource(id="b", name="B", category="Material", rarity="Common", value=0.25),
    ]
    assert average_value(pack) == 0.13


def test_serialize_pack_uses_export_keys():
    text = serialize_pack(new_builder_state().resources)
    data = json.loads(text)
    assert data[0]["quantityRange"] == {"min": 1, "max": 6}
    assert data[0]["dropRate"] == 50
    assert data[1]["name"] == "Void-Silk Thread"
    assert "\n  {" in text


def test_copy_pack_writes_clipboard(tmp_path):
    clipboard = StorageClipboard(root=tmp_path)
    state = asyncio.run(copy_pack(new_builder_state(), clipboard))
    assert state.status == STATUS_COPIED
    assert clipboard.read_text() == serialize_pack(state.resources)


def test_copy_pack_failure_is_reported(capsys):
    state = asyncio.run(copy_pack(new_builder_state(), UnavailableClipboard()))
    assert state.status == STATUS_COPY_FAILED
    assert "builder.copy.failed" in capsys.readouterr().out


# ---------- simulation ----------

def test_single_resource_gets_every_drop():
    tallies = simulate_drops([_res("Gem", 10)], 25, random.Random(7))
    assert tallies == [("Gem", 25)]


def test_zero_total_weight_selects_first_resource():
    tallies = simulate_drops([_res("A", 0), _res("B", 0)], 5, random.Random(1))
    assert tallies == [("A", 5)]


def test_boundary_roll_goes_to_first_match():
    pack = [_res("A", 50), _res("B", 12)]
    assert pick_weighted(pack, 50).name == "A"
    assert pick_weighted(pack, 50.0001).name == "B"
    assert pick_weighted(pack, 62.5) is None


def test_tallies_sorted_by_count(seq_random):
    state = run_simulation(new_builder_state(), 3, seq_random([0.9, 0.9, 0.1]))
    assert state.simulation_result == "Drop test (3 rolls): Void-Silk Thread: 2 | Iron Ingot: 1"
    assert [(t.name, t.count) for t in state.last_tallies] == [("Void-Silk Thread", 2), ("Iron Ingot", 1)]


def test_simulation_with_empty_pack():
    state = run_simulation(BuilderState(), 10)
    assert state.simulation_result == SIM_EMPTY_PACK
    assert state.last_tallies == []


@pytest.mark.parametrize("attempts", [0, -4])
def test_simulation_rejects_attempts_below_one(attempts):
    state = run_simulation(new_builder_state(), attempts)
    assert state.simulation_result == SIM_BAD_ATTEMPTS
    assert state.last_tallies == []


def test_simulation_tally_total_matches_attempts():
    state = run_simulation(new_builder_state(), 200, random.Random(42))
    assert sum(t.count for t in state.last_tallies) == 200
    assert state.simulation_attempts == 200
    assert state.simulation_result != SIM_NO_DROPS
