from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from cflp.sa import (
    DemandExceedsCapacityError,
    generate_instance,
    parse_cflp_text,
    read_cflp,
    write_cflp,
)

DATA_DIR = Path(__file__).parent / "data"


def test_read_scenario_a_maps_ids_to_zero_based():
    data = read_cflp(DATA_DIR / "scenario_a.cflp")
    assert (data.m, data.n) == (3, 5)
    assert data.demand.tolist() == [80, 270, 250, 160, 180]
    assert data.capacity.tolist() == [500, 500, 500]
    assert data.fixed_cost.tolist() == [1000.0, 1000.0, 1000.0]
    # client 4 (file id) -> row 3
    assert data.var_cost[3].tolist() == [8.0, 5.0, 3.0]


def test_read_scale_instance():
    data = read_cflp(DATA_DIR / "scale_14x61.cflp")
    assert (data.m, data.n) == (14, 61)
    assert int(data.demand.sum()) == 1037


def test_sections_may_list_ids_out_of_order():
    text = "\n".join(
        [
            "NAME: shuffled",
            "FACILITIES: 2",
            "CLIENTS: 1",
            "FIXED_COST_SECTION",
            "2 7",
            "1 5",
            "CAPACITY_SECTION",
            "1 10",
            "2 20",
            "DEMAND_SECTION",
            "1 4",
            "VARIABLE_COST_SECTION",
            "1 1.5 2.5",
            "EOF",
        ]
    )
    name, data = parse_cflp_text(text)
    assert name == "shuffled"
    assert data.fixed_cost.tolist() == [5.0, 7.0]


def test_missing_section_is_reported():
    text = "FACILITIES: 1\nCLIENTS: 1\nFIXED_COST_SECTION\n1 5\nCAPACITY_SECTION\n1 10\nDEMAND_SECTION\n1 4\nEOF\n"
    with pytest.raises(ValueError, match="VARIABLE_COST_SECTION"):
        parse_cflp_text(text)


def test_missing_id_is_reported():
    text = (
        "FACILITIES: 2\nCLIENTS: 1\nFIXED_COST_SECTION\n1 5\nCAPACITY_SECTION\n1 10\n2 10\n"
        "DEMAND_SECTION\n1 4\nVARIABLE_COST_SECTION\n1 1 1\nEOF\n"
    )
    with pytest.raises(ValueError, match="FIXED_COST_SECTION missing ids"):
        parse_cflp_text(text)


def test_invalid_instance_raises_data_error():
    text = (
        "FACILITIES: 1\nCLIENTS: 1\nFIXED_COST_SECTION\n1 5\nCAPACITY_SECTION\n1 3\n"
        "DEMAND_SECTION\n1 4\nVARIABLE_COST_SECTION\n1 1\nEOF\n"
    )
    with pytest.raises(DemandExceedsCapacityError):
        parse_cflp_text(text)


def test_written_instance_reads_back(tmp_path: Path):
    data = generate_instance(np.random.default_rng(3), facility_number=4, client_number=6)
    path = tmp_path / "gen.cflp"
    write_cflp(path, data)
    assert path.read_text().startswith("NAME : gen\n")
    back = read_cflp(path)
    assert np.array_equal(back.demand, data.demand)
    assert np.array_equal(back.capacity, data.capacity)
    assert np.allclose(back.var_cost, data.var_cost)
    assert np.allclose(back.fixed_cost, data.fixed_cost)


def test_generated_instance_respects_bounds():
    rng = np.random.default_rng(0)
    data = generate_instance(rng, facility_number=10, client_number=15)
    assert (data.m, data.n) == (10, 15)
    assert data.demand.min() >= 3 and data.demand.max() <= 30
    assert data.capacity.min() >= 100 and data.capacity.max() <= 1000
    assert data.var_cost.max() <= 100
    assert data.fixed_cost.max() <= 1000
    assert np.allclose(data.var_cost, np.round(data.var_cost, 2))
    assert data.demand.sum() <= data.capacity.sum()


def test_generator_is_seeded():
    a = generate_instance(np.random.default_rng(8))
    b = generate_instance(np.random.default_rng(8))
    assert np.array_equal(a.var_cost, b.var_cost)
    assert np.array_equal(a.demand, b.demand)
