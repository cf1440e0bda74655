"""
Range Mapper - Hardware RTL implementation of one almanac map

Converts values from one category to the next using a table of ranges held
in BRAM. Mirrors software_reference.almanac.Map.convert exactly.

Architecture:
    1. Load phase: each (dest, src, length) row is written to BRAM as
       (start, end, dest) with an exclusive end = src + length
    2. Convert phase: for each value, scan every row in declaration order
    3. Each row that contains the value overwrites the result, so the last
       matching row wins and unmatched values pass through

Components:
    - BRAM storage for range starts, ends and destinations
    - Linear scan FSM (3 cycles per row)
"""

from amaranth import *
from amaranth.lib.memory import Memory


class RangeMapper(Elaboratable):
    """
    Hardware module that remaps a value through one table of ranges.

    Ports:
        Input (range loading phase):
            - load_dest_in: Destination range start
            - load_src_in: Source range start
            - load_length_in: Range length
            - load_valid_in: Append one row (only while ready)

        Input (conversion phase):
            - value_in: Value to convert
            - valid_in: Value input data valid signal

        Output:
            - value_out: Converted value
            - valid_out: One-cycle pulse when value_out is valid
            - range_count_out: Number of rows loaded so far

        Control:
            - ready: Idle, accepting rows or a value
    """

    def __init__(self, max_ranges=64, width=64):
        self.max_ranges = max_ranges
        self.width = width

        # Range load interface
        self.load_dest_in = Signal(width)
        self.load_src_in = Signal(width)
        self.load_length_in = Signal(width)
        self.load_valid_in = Signal()

        # Value input interface
        self.value_in = Signal(width)
        self.valid_in = Signal()

        # Output interface
        self.value_out = Signal(width)
        self.valid_out = Signal()
        self.range_count_out = Signal(range(max_ranges + 1))

        # Control
        self.ready = Signal()

    def elaborate(self, platform):
        m = Module()

        # BRAM storage for the range table
        m.submodules.starts_mem = starts_mem = Memory(
            shape=unsigned(self.width), depth=self.max_ranges, init=[])
        m.submodules.ends_mem = ends_mem = Memory(
            shape=unsigned(self.width + 1), depth=self.max_ranges, init=[])
        m.submodules.dests_mem = dests_mem = Memory(
            shape=unsigned(self.width), depth=self.max_ranges, init=[])

        starts_rd = starts_mem.read_port()
        starts_wr = starts_mem.write_port()
        ends_rd = ends_mem.read_port()
        ends_wr = ends_mem.write_port()
        dests_rd = dests_mem.read_port()
        dests_wr = dests_mem.write_port()

        # State variables
        range_count = Signal(range(self.max_ranges + 1))
        range_idx = Signal(range(self.max_ranges + 1))

        m.d.comb += self.range_count_out.eq(range_count)

        # Value being converted and running result
        current_value = Signal(self.width)
        result = Signal(self.width)

        # Latched row from memory
        range_start = Signal(self.width)
        range_end = Signal(self.width + 1)
        range_dest = Signal(self.width)

        with m.FSM():

            with m.State("IDLE"):
                m.d.comb += self.ready.eq(1)
                m.d.sync += self.valid_out.eq(0)

                # Append a row while there is room for it
                with m.If(self.load_valid_in & (range_count < self.max_ranges)):
                    m.d.comb += [
                        starts_wr.addr.eq(range_count),
                        starts_wr.data.eq(self.load_src_in),
                        starts_wr.en.eq(1),
                        ends_wr.addr.eq(range_count),
                        ends_wr.data.eq(self.load_src_in + self.load_length_in),
                        ends_wr.en.eq(1),
                        dests_wr.addr.eq(range_count),
                        dests_wr.data.eq(self.load_dest_in),
                        dests_wr.en.eq(1),
                    ]
                    m.d.sync += range_count.eq(range_count + 1)

                with m.If(self.valid_in):
                    m.d.sync += [
                        current_value.eq(self.value_in),
                        result.eq(self.value_in),
                        range_idx.eq(0),
                    ]
                    m.next = "SCAN"

            with m.State("SCAN"):
                with m.If(range_idx >= range_count):
                    # Every row checked
                    m.d.sync += [
                        self.value_out.eq(result),
                        self.valid_out.eq(1),
                    ]
                    m.next = "IDLE"

                with m.Else():
                    m.d.comb += [
                        starts_rd.addr.eq(range_idx),
                        ends_rd.addr.eq(range_idx),
                        dests_rd.addr.eq(range_idx),
                    ]
                    m.next = "LATCH"

            with m.State("LATCH"):
                # Wait for memory read (1 cycle latency)
                m.d.sync += [
                    range_start.eq(starts_rd.data),
                    range_end.eq(ends_rd.data),
                    range_dest.eq(dests_rd.data),
                ]
                m.next = "COMPARE"

            with m.State("COMPARE"):
                # Membership is always tested on the original value
                with m.If((current_value >= range_start) & (current_value < range_end)):
                    m.d.sync += result.eq(current_value - range_start + range_dest)

                m.d.sync += range_idx.eq(range_idx + 1)
                m.next = "SCAN"

        return m
