"""Tests for round-robin zone placement"""

import pytest

from vpc_planner.planner.errors import ZoneResolutionError
from vpc_planner.planner.models import Zone
from vpc_planner.planner.placement import place


def test_place_is_periodic(zones):
    for index in range(20):
        assert place(index, zones) == place(index + len(zones), zones)


def test_five_subnets_cycle_over_three_zones(zones):
    assigned = [zones.index(place(i, zones)) for i in range(5)]
    assert assigned == [0, 1, 2, 0, 1]


def test_single_zone_takes_everything():
    only = (Zone("us-west-1a"),)
    assert {place(i, only) for i in range(7)} == {only[0]}


def test_repeated_calls_agree(zones):
    assert [place(4, zones) for _ in range(3)] == [zones[1]] * 3


def test_empty_zone_list():
    with pytest.raises(ZoneResolutionError):
        place(0, ())


def test_negative_index():
    with pytest.raises(ValueError):
        place(-1, (Zone("a"),))
