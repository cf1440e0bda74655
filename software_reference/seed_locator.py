#!/usr/bin/env python3
"""
Seed Locator - Lowest Location Number

Converts every seed of an almanac through the full map chain and reports the
lowest resulting location (or every location with --all).
"""

import sys
import time

from software_reference.almanac import parse_almanac, convert_seeds, strip_lines


def lowest_location(almanac):
    """
    Find the lowest final value over all seeds.

    Args:
        almanac: Parsed Almanac

    Returns:
        int: Minimum converted value, or None when there are no seeds
    """
    locations = convert_seeds(almanac.seeds, almanac.maps)
    if not locations:
        return None
    return min(locations)


def format_map(almanac_map):
    """Render a map as its header followed by 'source_start length offset' rows."""
    lines = [f"{almanac_map.from_category}-to-{almanac_map.to_category}"]
    for row in almanac_map.ranges:
        lines.append(f"{row.source_start} {row.length} {row.offset}")
    return "\n".join(lines) + "\n"


def format_almanac(almanac):
    """Render the parsed seeds and maps for inspection."""
    lines = [f"seeds: {len(almanac.seeds)}"]
    lines.extend(str(seed) for seed in almanac.seeds)
    lines.append("")
    lines.append(f"maps: {len(almanac.maps)}")
    text = "\n".join(lines) + "\n"
    return text + "\n".join(format_map(m) for m in almanac.maps)


def main(argv=None):
    """Command-line interface for the seed locator."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Convert almanac seeds to locations and report the lowest'
    )
    parser.add_argument('input_file', nargs='?', type=argparse.FileType('r'),
                        default=sys.stdin,
                        help='Almanac input file (default: stdin)')
    parser.add_argument('--all', '-a', action='store_true',
                        help='Print the location of every seed')
    parser.add_argument('--dump', '-d', action='store_true',
                        help='Print the parsed seeds and maps first')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Print progress and statistics')
    args = parser.parse_args(argv)

    # Read input
    lines = strip_lines(args.input_file)
    almanac, error = parse_almanac(lines)

    if error is not None:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Loaded {len(almanac.seeds)} seeds and {len(almanac.maps)} maps", file=sys.stderr)

    if args.dump:
        print(format_almanac(almanac))

    start_time = time.time()
    locations = convert_seeds(almanac.seeds, almanac.maps)
    elapsed = time.time() - start_time

    if args.all:
        for seed, location in zip(almanac.seeds, locations):
            print(f"{seed} -> {location}")
    elif locations:
        print(min(locations))
    else:
        print("Error: Almanac has no seeds", file=sys.stderr)
        return 1

    if args.verbose:
        total_ranges = sum(len(m.ranges) for m in almanac.maps)
        print(f"\nStatistics:", file=sys.stderr)
        print(f"  Seeds: {len(almanac.seeds)}", file=sys.stderr)
        print(f"  Maps: {len(almanac.maps)}", file=sys.stderr)
        print(f"  Ranges: {total_ranges}", file=sys.stderr)
        print(f"  Time: {elapsed:.6f}s", file=sys.stderr)

    return 0


if __name__ == '__main__':
    sys.exit(main())
