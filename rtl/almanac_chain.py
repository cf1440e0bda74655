"""
Almanac Chain - Hardware RTL implementation of the full seed-to-location chain

Connects one RangeMapper per almanac map so that a seed flows through every
category in declaration order, and tracks the lowest location produced.

System Architecture:
    seed → [seed-to-soil] → [soil-to-fertilizer] → ... → [humidity-to-location] → location
                                                                                   ↓
                                                                            lowest tracker

Components:
    1. RangeMapper stages: one BRAM range table per map
       - Rows are routed to a stage with load_map_in
       - Each stage scans its rows in order, last match wins
    2. Lowest tracker: keeps the minimum location seen and counts results

Operation:
    One seed is in flight at a time: ready drops when a seed is accepted and
    rises again the cycle after its location_valid_out pulse. Seeds offered
    while ready is low are ignored.
"""

from amaranth import *
from rtl.range_mapper import RangeMapper


class AlmanacChain(Elaboratable):
    """
    Complete system: RangeMapper stages chained output to input
    """

    def __init__(self, num_maps=7, max_ranges=64, width=64):
        if num_maps < 1:
            raise ValueError(f"AlmanacChain needs at least one map, got {num_maps}")

        self.num_maps = num_maps
        self.max_ranges = max_ranges
        self.width = width

        # Range load interface
        self.load_map_in = Signal(range(num_maps))
        self.load_dest_in = Signal(width)
        self.load_src_in = Signal(width)
        self.load_length_in = Signal(width)
        self.load_valid_in = Signal()

        # Seed input interface
        self.seed_in = Signal(width)
        self.seed_valid_in = Signal()

        # Output interface
        self.location_out = Signal(width)
        self.location_valid_out = Signal()
        self.lowest_out = Signal(width)
        self.result_count_out = Signal(32)

        # Control
        self.ready = Signal()

        # Exposed for testbench access
        self.stages = [RangeMapper(max_ranges=max_ranges, width=width)
                       for _ in range(num_maps)]

    def elaborate(self, platform):
        m = Module()

        for i, stage in enumerate(self.stages):
            m.submodules[f"stage_{i}"] = stage

            # Shared row bus, enabled only on the selected stage
            m.d.comb += [
                stage.load_dest_in.eq(self.load_dest_in),
                stage.load_src_in.eq(self.load_src_in),
                stage.load_length_in.eq(self.load_length_in),
                stage.load_valid_in.eq(self.load_valid_in & (self.load_map_in == i)),
            ]

        # Set when a seed is accepted, cleared when its location leaves the chain
        busy = Signal()
        accept = Signal()
        m.d.comb += accept.eq(self.seed_valid_in & self.ready)

        # Seed enters the first stage
        first = self.stages[0]
        m.d.comb += [
            first.value_in.eq(self.seed_in),
            first.valid_in.eq(accept),
        ]

        # Each stage feeds the next one
        for upstream, downstream in zip(self.stages, self.stages[1:]):
            m.d.comb += [
                downstream.value_in.eq(upstream.value_out),
                downstream.valid_in.eq(upstream.valid_out),
            ]

        last = self.stages[-1]
        m.d.comb += [
            self.location_out.eq(last.value_out),
            self.location_valid_out.eq(last.valid_out),
            self.ready.eq(~busy & Cat(*[stage.ready for stage in self.stages]).all()),
        ]

        with m.If(last.valid_out):
            m.d.sync += busy.eq(0)
        with m.Elif(accept):
            m.d.sync += busy.eq(1)

        # Lowest location tracker
        lowest = Signal(self.width)
        have_result = Signal()
        result_count = Signal(32)

        m.d.comb += [
            self.lowest_out.eq(lowest),
            self.result_count_out.eq(result_count),
        ]

        with m.If(last.valid_out):
            m.d.sync += result_count.eq(result_count + 1)

            with m.If(~have_result | (last.value_out < lowest)):
                m.d.sync += [
                    lowest.eq(last.value_out),
                    have_result.eq(1),
                ]

        return m


if __name__ == "__main__":
    import sys
    from amaranth.back import verilog

    output_path = sys.argv[1] if len(sys.argv) > 1 else "almanac_chain.v"

    top = AlmanacChain(num_maps=7, max_ranges=64, width=64)
    v = verilog.convert(top, name="top", ports=[
        # Range load interface
        top.load_map_in, top.load_dest_in, top.load_src_in,
        top.load_length_in, top.load_valid_in,
        # Seed input interface
        top.seed_in, top.seed_valid_in,
        # Output interface
        top.location_out, top.location_valid_out,
        top.lowest_out, top.result_count_out,
        # Control
        top.ready,
    ])

    with open(output_path, "w") as f:
        f.write(v)
    print(f"Generated {output_path}")
