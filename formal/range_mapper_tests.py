"""
Property-based testing for the hardware range mapper using Hypothesis.

This complements the example benches by testing the hardware implementation
against Map.convert with randomly generated tables, including overlapping
rows, empty tables and values on every range boundary.
"""

from hypothesis import given, strategies as st, settings, Phase
from amaranth.sim import Simulator
from rtl.range_mapper import RangeMapper
from rtl.almanac_chain import AlmanacChain
from software_reference.almanac import Range, Map, apply_chain


def simulate_range_mapper(almanac_map, values, max_ranges=16, width=32):
    """Simulate the range mapper hardware and return converted values."""
    dut = RangeMapper(max_ranges=max_ranges, width=width)
    converted = []

    async def testbench(ctx):
        # Load range table
        for row in almanac_map.ranges:
            ctx.set(dut.load_dest_in, row.destination_start)
            ctx.set(dut.load_src_in, row.source_start)
            ctx.set(dut.load_length_in, row.length)
            ctx.set(dut.load_valid_in, 1)
            await ctx.tick()

        ctx.set(dut.load_valid_in, 0)

        # Convert values (with timeout)
        for value in values:
            ctx.set(dut.value_in, value)
            ctx.set(dut.valid_in, 1)
            await ctx.tick()
            ctx.set(dut.valid_in, 0)

            for cycle in range(1000):
                await ctx.tick()
                if ctx.get(dut.valid_out):
                    converted.append(ctx.get(dut.value_out))
                    break

    sim = Simulator(dut)
    sim.add_clock(1e-6)
    sim.add_testbench(testbench)
    sim.run()

    return converted


def simulate_chain(maps, seeds, max_ranges=8, width=32):
    """Simulate the almanac chain and return (locations, lowest)."""
    dut = AlmanacChain(num_maps=len(maps), max_ranges=max_ranges, width=width)
    locations = []
    lowest = [None]

    async def testbench(ctx):
        for map_idx, almanac_map in enumerate(maps):
            ctx.set(dut.load_map_in, map_idx)
            for row in almanac_map.ranges:
                ctx.set(dut.load_dest_in, row.destination_start)
                ctx.set(dut.load_src_in, row.source_start)
                ctx.set(dut.load_length_in, row.length)
                ctx.set(dut.load_valid_in, 1)
                await ctx.tick()

        ctx.set(dut.load_valid_in, 0)

        for seed in seeds:
            while not ctx.get(dut.ready):
                await ctx.tick()

            ctx.set(dut.seed_in, seed)
            ctx.set(dut.seed_valid_in, 1)
            await ctx.tick()
            ctx.set(dut.seed_valid_in, 0)

            for cycle in range(5000):
                await ctx.tick()
                if ctx.get(dut.location_valid_out):
                    locations.append(ctx.get(dut.location_out))
                    break

        await ctx.tick()
        lowest[0] = ctx.get(dut.lowest_out)

    sim = Simulator(dut)
    sim.add_clock(1e-6)
    sim.add_testbench(testbench)
    sim.run()

    return locations, lowest[0]


# Strategy: rows whose values and results fit comfortably in 32 bits
row_tuple = st.tuples(
    st.integers(min_value=0, max_value=1000),  # destination_start
    st.integers(min_value=0, max_value=1000),  # source_start
    st.integers(min_value=0, max_value=100),   # length
)


@st.composite
def small_map(draw, max_size=6):
    rows = draw(st.lists(row_tuple, min_size=0, max_size=max_size))
    return Map("from", "to", tuple(Range.new(*row) for row in rows))


def boundary_values(almanac_map):
    """Every range start and end, plus neighbours, as candidate inputs."""
    values = {0}
    for row in almanac_map.ranges:
        for edge in (row.source_start, row.source_end):
            values.update(v for v in (edge - 1, edge, edge + 1) if v >= 0)
    return sorted(values)


@given(small_map(), st.lists(st.integers(min_value=0, max_value=1200), min_size=1, max_size=4))
@settings(max_examples=40, deadline=None, phases=[Phase.generate, Phase.target])
def test_range_mapper_property_random_values(almanac_map, values):
    """
    Property: Hardware range mapper produces the same result as Map.convert
    """
    expected = [almanac_map.convert(v) for v in values]
    actual = simulate_range_mapper(almanac_map, values)

    assert actual == expected, f"Conversion mismatch for {values}: {actual} != {expected}"


@given(small_map())
@settings(max_examples=25, deadline=None)
def test_range_mapper_property_boundaries(almanac_map):
    """
    Property: Half-open boundaries and overlap resolution match the software
    """
    values = boundary_values(almanac_map)
    expected = [almanac_map.convert(v) for v in values]
    actual = simulate_range_mapper(almanac_map, values)

    assert actual == expected


@given(st.lists(small_map(max_size=4), min_size=1, max_size=4),
       st.lists(st.integers(min_value=0, max_value=1200), min_size=1, max_size=4))
@settings(max_examples=20, deadline=None)
def test_almanac_chain_property(maps, seeds):
    """
    Property: Hardware chain matches apply_chain per seed and tracks the minimum
    """
    expected = [apply_chain(seed, maps) for seed in seeds]
    locations, lowest = simulate_chain(maps, seeds)

    assert locations == expected
    assert lowest == min(expected)


def stream_chain(maps, seeds, max_ranges=8, width=32, timeout=20000):
    """Offer a new seed on every cycle where ready is high, collecting results as they appear."""
    dut = AlmanacChain(num_maps=len(maps), max_ranges=max_ranges, width=width)
    locations = []

    async def testbench(ctx):
        for map_idx, almanac_map in enumerate(maps):
            ctx.set(dut.load_map_in, map_idx)
            for row in almanac_map.ranges:
                ctx.set(dut.load_dest_in, row.destination_start)
                ctx.set(dut.load_src_in, row.source_start)
                ctx.set(dut.load_length_in, row.length)
                ctx.set(dut.load_valid_in, 1)
                await ctx.tick()

        ctx.set(dut.load_valid_in, 0)

        pending = list(seeds)
        for cycle in range(timeout):
            if pending and ctx.get(dut.ready):
                ctx.set(dut.seed_in, pending.pop(0))
                ctx.set(dut.seed_valid_in, 1)
            else:
                ctx.set(dut.seed_valid_in, 0)

            await ctx.tick()

            if ctx.get(dut.location_valid_out):
                locations.append(ctx.get(dut.location_out))
            if len(locations) == len(seeds):
                break

    sim = Simulator(dut)
    sim.add_clock(1e-6)
    sim.add_testbench(testbench)
    sim.run()

    return locations


@given(st.lists(small_map(max_size=4), min_size=1, max_size=4),
       st.lists(st.integers(min_value=0, max_value=1200), min_size=1, max_size=6))
@settings(max_examples=20, deadline=None)
def test_almanac_chain_property_back_to_back(maps, seeds):
    """
    Property: Feeding seeds as soon as ready rises loses and reorders nothing
    """
    expected = [apply_chain(seed, maps) for seed in seeds]

    assert stream_chain(maps, seeds) == expected
