#!/usr/bin/env python3
"""
Drive a log source through a few cycles against an in-memory oracle.

Simulates a service that keeps receiving events while retention expires
old ones, and prints the batch plan of every cycle.
"""

import argparse
import tempfile

from logsource.source import (
    BoundedRange,
    EventPosition,
    LogSource,
    SourceConfig,
    StartingPositions,
    StaticBoundsOracle,
    StaticWorkerInventory,
    WorkerId,
)
from logsource.utils.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description='logsource cycle simulation')
    parser.add_argument('--partitions', type=int, default=4, help='Number of partitions')
    parser.add_argument('--cycles', type=int, default=5, help='Cycles to run')
    parser.add_argument('--budget', type=int, default=500, help='Events per cycle')
    args = parser.parse_args()

    configure_logging(log_level='WARNING', log_format='console', log_output='stderr')

    oracle = StaticBoundsOracle({
        index: BoundedRange(0, 200 * (index + 1))
        for index in range(args.partitions)
    })
    inventory = StaticWorkerInventory([
        WorkerId('worker-a', '1'),
        WorkerId('worker-b', '1'),
    ])

    with tempfile.TemporaryDirectory() as checkpoint_dir:
        config = SourceConfig(
            stream_name='orders',
            checkpoint_dir=checkpoint_dir,
            starting_positions=StartingPositions(default=EventPosition.from_start_of_stream()),
            max_events_per_cycle=args.budget,
        )
        source = LogSource(config, oracle, worker_inventory=inventory)

        previous = None
        try:
            for cycle in range(args.cycles):
                end = source.propose_offset()
                plan = source.materialize_batch(previous, end)

                print(f"Cycle {cycle}: {plan.total_events} events")
                for item in plan:
                    print(f"  {item}")

                previous = end

                # New events arrive, and retention trims partition 0.
                for index, bounds in oracle.all_bounded_ranges().items():
                    latest = bounds.latest + 100
                    earliest = min(bounds.earliest + (150 if index == 0 else 0), latest)
                    oracle.set_range(index, BoundedRange(earliest, latest))
        finally:
            source.stop()

        for report in source.guard.reports:
            print(f"Data loss: {report.partition}: {report.message}")


if __name__ == '__main__':
    main()
