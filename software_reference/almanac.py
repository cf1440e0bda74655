"""
Almanac - Seed to Location Conversion

Software reference for the category remapping engine. An almanac lists the
seeds to plant and an ordered chain of maps (seed-to-soil, soil-to-fertilizer,
...). Each map is a table of ranges; a value inside a range is shifted by that
range's offset, any other value passes through unchanged.

Construction never raises: parsers return a (result, error) tuple and the
caller decides what to do with the error.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


SEEDS_PREFIX = "seeds:"
MAP_SUFFIX = " map"
NAME_SEPARATOR = "-to-"


class AlmanacError(ValueError):
    """Base class for almanac construction failures."""


class InvalidHeader(AlmanacError):
    """Map header does not name exactly two categories."""


class InvalidRange(AlmanacError):
    """Map data line is not three integers."""


class EmptyBlock(AlmanacError):
    """Map block has no header line."""


class InvalidSeeds(AlmanacError):
    """Seeds line is missing or malformed."""


@dataclass(frozen=True)
class Range:
    """One row of a map: [source_start, source_start + length) shifted by offset."""

    source_start: int
    length: int
    offset: int

    @classmethod
    def new(cls, destination_start: int, source_start: int, length: int) -> "Range":
        return cls(source_start, length, destination_start - source_start)

    @property
    def source_end(self) -> int:
        return self.source_start + self.length

    @property
    def destination_start(self) -> int:
        return self.source_start + self.offset

    def is_in_source_range(self, value: int) -> bool:
        # Half-open, so a non-positive length claims nothing
        return self.source_start <= value < self.source_end

    def convert(self, value: int) -> int:
        if not self.is_in_source_range(value):
            return value
        return value + self.offset


@dataclass(frozen=True)
class Map:
    """Ordered table of ranges converting one category into the next."""

    from_category: str
    to_category: str
    ranges: Tuple[Range, ...] = ()

    @classmethod
    def try_from(cls, lines: Sequence[str]) -> Tuple[Optional["Map"], Optional[AlmanacError]]:
        """
        Build a map from a block of stripped, non-blank lines.

        Args:
            lines: Header line followed by zero or more data lines

        Returns:
            tuple: (map, None) on success or (None, error) on the first
                   malformed line; no partial map is ever returned
        """
        if not lines:
            return None, EmptyBlock("Map block has no header line")

        names, error = parse_header(lines[0])
        if error is not None:
            return None, error

        ranges = []
        for line in lines[1:]:
            row, error = parse_range(line)
            if error is not None:
                return None, error
            ranges.append(row)

        return cls(names[0], names[1], tuple(ranges)), None

    def convert(self, value: int) -> int:
        """
        Convert a value from the source category to the destination category.

        Every range is tested against the original value and each match
        overwrites the result, so on overlapping ranges the last one declared
        wins. Unmatched values pass through unchanged.
        """
        result = value
        for row in self.ranges:
            if row.is_in_source_range(value):
                result = row.convert(value)
        return result


@dataclass(frozen=True)
class Almanac:
    seeds: Tuple[int, ...]
    maps: Tuple[Map, ...]


def parse_header(line: str) -> Tuple[Optional[Tuple[str, str]], Optional[AlmanacError]]:
    """Split '<from>-to-<to> map' into its two category names."""
    text = line.strip()
    if text.endswith(":"):
        text = text[:-1]
    if text.endswith(MAP_SUFFIX):
        text = text[:-len(MAP_SUFFIX)]

    names = text.split(NAME_SEPARATOR)
    if len(names) != 2 or not all(names):
        return None, InvalidHeader(f"Invalid map header: {line!r}")

    return (names[0], names[1]), None


def parse_range(line: str) -> Tuple[Optional[Range], Optional[AlmanacError]]:
    """Parse '<destination_start> <source_start> <length>' into a Range."""
    tokens = line.split()
    if len(tokens) != 3:
        return None, InvalidRange(f"Expected 3 integers, got {len(tokens)}: {line!r}")

    try:
        destination_start, source_start, length = (int(token) for token in tokens)
    except ValueError:
        return None, InvalidRange(f"Failed to parse range: {line!r}")

    return Range.new(destination_start, source_start, length), None


def apply_chain(value: int, maps: Sequence[Map]) -> int:
    """
    Fold a value through every map in order.

    Category names are not checked: maps whose categories do not connect
    end-to-end are still applied in the order given.
    """
    for almanac_map in maps:
        value = almanac_map.convert(value)
    return value


def convert_seeds(seeds: Sequence[int], maps: Sequence[Map]) -> List[int]:
    """Apply the whole chain to each seed independently, in seed order."""
    return [apply_chain(seed, maps) for seed in seeds]


def strip_lines(lines):
    """Remove surrounding whitespace (and line endings) from every line."""
    return [line.strip() for line in lines]


def read_lines(filename):
    """
    Read an almanac file.

    Args:
        filename: Path to input file

    Returns:
        list: Every line of the file with surrounding whitespace removed
    """
    with open(filename) as f:
        return strip_lines(f)


def parse_seeds(line: str) -> Tuple[Optional[Tuple[int, ...]], Optional[AlmanacError]]:
    """Parse 'seeds: n1 n2 ...' keeping the declared order."""
    if not line.startswith(SEEDS_PREFIX):
        return None, InvalidSeeds(f"Expected '{SEEDS_PREFIX}' line, got {line!r}")

    try:
        seeds = tuple(int(token) for token in line[len(SEEDS_PREFIX):].split())
    except ValueError:
        return None, InvalidSeeds(f"Failed to parse seeds: {line!r}")

    return seeds, None


def split_blocks(lines: Sequence[str]) -> List[List[str]]:
    """Group lines into blank-line separated blocks."""
    blocks = []
    current = []

    for line in lines:
        if line:
            current.append(line)
        elif current:
            blocks.append(current)
            current = []

    if current:
        blocks.append(current)

    return blocks


def parse_almanac(lines: Sequence[str]) -> Tuple[Optional[Almanac], Optional[AlmanacError]]:
    """
    Parse a full almanac: the seeds line, then one block per map.

    Args:
        lines: Stripped text lines of the whole almanac

    Returns:
        tuple: (almanac, None), or (None, error) for the first malformed part
    """
    if not lines:
        return None, InvalidSeeds("Almanac is empty")

    seeds, error = parse_seeds(lines[0])
    if error is not None:
        return None, error

    maps = []
    for block in split_blocks(lines[1:]):
        almanac_map, error = Map.try_from(block)
        if error is not None:
            return None, error
        maps.append(almanac_map)

    return Almanac(seeds, tuple(maps)), None


def read_input(filename):
    """Read and parse an almanac file, returning (almanac, error)."""
    return parse_almanac(read_lines(filename))
