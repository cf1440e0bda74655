"""
Property-based tests for the almanac remapping engine using Hypothesis.

This module verifies Range, Map and apply_chain by testing invariant
properties that must hold for all valid inputs.
"""

import pytest
from hypothesis import given, strategies as st, assume, settings
from hypothesis.strategies import lists, integers

# Import the functions to test
from software_reference.almanac import Range, Map, apply_chain, convert_seeds


values = integers(min_value=-10**12, max_value=10**12)


# Strategy for generating a range row (destination_start, source_start, length)
@st.composite
def range_row(draw, max_length=10**6):
    """Generate a row with a strictly positive length."""
    destination_start = draw(values)
    source_start = draw(values)
    length = draw(integers(min_value=1, max_value=max_length))
    return (destination_start, source_start, length)


@st.composite
def almanac_map(draw):
    """Generate a map with 0-8 rows, overlaps allowed."""
    rows = draw(lists(range_row(max_length=1000), min_size=0, max_size=8))
    ranges = tuple(Range.new(*row) for row in rows)
    return Map("from", "to", ranges)


def brute_force_convert(rows, value):
    """Reference resolution: last row containing the value wins."""
    for destination_start, source_start, length in reversed(rows):
        if source_start <= value < source_start + length:
            return destination_start + (value - source_start)
    return value


# Property 1: Identity outside the interval
@given(range_row(), values)
def test_range_identity_outside(row, value):
    r = Range.new(*row)
    assume(not (r.source_start <= value < r.source_start + r.length))

    assert r.convert(value) == value


# Property 2: Constant offset inside the interval
@given(range_row(), integers(min_value=0, max_value=10**6))
def test_range_constant_offset_inside(row, position):
    destination_start, source_start, length = row
    assume(position < length)
    r = Range.new(*row)
    value = source_start + position

    assert r.convert(value) == value + (destination_start - source_start)
    assert r.convert(value) - value == r.offset


# Property 3: Half-open boundary
@given(range_row())
def test_range_half_open_boundary(row):
    r = Range.new(*row)

    assert r.is_in_source_range(r.source_start)
    assert not r.is_in_source_range(r.source_start + r.length)
    assert not r.is_in_source_range(r.source_start - 1)
    assert r.is_in_source_range(r.source_start + r.length - 1)


# Property 4: Non-positive lengths claim nothing
@given(values, values, integers(min_value=-100, max_value=0), values)
def test_range_non_positive_length_is_empty(destination_start, source_start, length, value):
    r = Range.new(destination_start, source_start, length)

    assert not r.is_in_source_range(value)
    assert r.convert(value) == value


# Property 5: Map resolution matches the last-wins brute force
@given(lists(range_row(max_length=1000), min_size=0, max_size=8), values)
@settings(max_examples=500)
def test_map_matches_brute_force(rows, value):
    m = Map("from", "to", tuple(Range.new(*row) for row in rows))

    assert m.convert(value) == brute_force_convert(rows, value)


# Property 6: Values claimed by a range are resolved against that range
@given(lists(range_row(max_length=1000), min_size=1, max_size=8), st.data())
def test_map_value_inside_last_range(rows, data):
    m = Map("from", "to", tuple(Range.new(*row) for row in rows))
    last = m.ranges[-1]
    value = data.draw(integers(min_value=last.source_start, max_value=last.source_end - 1))

    assert m.convert(value) == last.convert(value)


# Property 7: Empty map is the identity
@given(values)
def test_empty_map_is_identity(value):
    assert Map("from", "to").convert(value) == value


# Property 8: Chain composition
@given(lists(almanac_map(), min_size=0, max_size=5), lists(almanac_map(), min_size=0, max_size=5), values)
def test_chain_composition(head, tail, value):
    """Chaining head then tail equals chaining head + tail in one pass."""
    assert apply_chain(apply_chain(value, head), tail) == apply_chain(value, head + tail)


# Property 9: Seeds convert independently and in order
@given(lists(almanac_map(), max_size=4), lists(values, max_size=20))
def test_convert_seeds_matches_per_seed_chain(maps, seeds):
    locations = convert_seeds(seeds, maps)

    assert len(locations) == len(seeds)
    assert locations == [apply_chain(seed, maps) for seed in seeds]
    assert convert_seeds(list(reversed(seeds)), maps) == list(reversed(locations))


# Concrete test cases for edge cases
def test_seed_to_soil_example():
    """Test the seed-to-soil row 50 98 2."""
    m, error = Map.try_from(["seed-to-soil map", "50 98 2"])

    assert error is None
    assert m.from_category == "seed"
    assert m.to_category == "soil"
    assert m.ranges == (Range(source_start=98, length=2, offset=-48),)
    assert m.convert(98) == 50
    assert m.convert(99) == 51
    assert m.convert(100) == 100
    assert m.convert(97) == 97


def test_two_stage_chain():
    """Seed 98 becomes soil 50, which is inside [15, 52) and becomes 35."""
    soil, _ = Map.try_from(["seed-to-soil map", "50 98 2"])
    fertilizer, _ = Map.try_from(["soil-to-fertilizer map", "0 15 37"])

    assert soil.convert(98) == 50
    assert apply_chain(98, [soil, fertilizer]) == 35


def test_overlap_last_declared_wins():
    m, _ = Map.try_from(["a-to-b map", "100 0 10", "200 5 10"])

    assert m.convert(3) == 103
    assert m.convert(5) == 200
    assert m.convert(12) == 207


def test_membership_uses_original_value():
    """A result landing inside a later row is not converted again."""
    m, _ = Map.try_from(["a-to-b map", "20 0 5", "100 20 5"])

    assert m.convert(1) == 21
    assert m.convert(21) == 101


def test_disconnected_chain_still_applies():
    first, _ = Map.try_from(["seed-to-soil map", "10 0 5"])
    unrelated, _ = Map.try_from(["water-to-light map", "100 10 5"])

    assert apply_chain(2, [first, unrelated]) == 102


def test_range_is_immutable():
    r = Range.new(50, 98, 2)

    with pytest.raises(AttributeError):
        r.offset = 0


def test_large_values():
    r = Range.new(2**63 + 10, 2**63, 5)

    assert r.convert(2**63 + 1) == 2**63 + 11
    assert r.destination_start == 2**63 + 10


if __name__ == "__main__":
    # Run pytest
    pytest.main([__file__, "-v", "--tb=short"])
