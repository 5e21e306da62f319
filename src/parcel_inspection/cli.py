"""Command-line interface for parcel inspection."""

import argparse
import json
import logging
import sys

from parcel_inspection.config import get_settings
from parcel_inspection.errors import InspectionError
from parcel_inspection.generation import DayRuleGenerator, ItemRecordGenerator, RandomSource
from parcel_inspection.session import AcceptanceStation, DayScheduler, Spawner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parcel Inspection - generate day rules and parcels, evaluate deliveries"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible output (default: SEED env var or random)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Item command
    item_parser = subparsers.add_parser("item", help="Generate parcel records")
    item_parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of parcels to generate",
    )

    # Rules command
    subparsers.add_parser("rules", help="Generate one day's rule set")

    # Simulate command
    simulate_parser = subparsers.add_parser(
        "simulate", help="Run days of deliveries where every parcel reaches the belt end"
    )
    simulate_parser.add_argument(
        "--days",
        type=int,
        default=1,
        help="Number of days to simulate",
    )

    return parser


def _simulate(days: int, rng: RandomSource) -> list[dict]:
    settings = get_settings()
    scheduler = DayScheduler(DayRuleGenerator(settings.day_rules), rng, settings.economy)
    spawner = Spawner(
        ItemRecordGenerator(settings.item_generation),
        rng,
        settings.economy.max_items_per_day,
    )
    station = AcceptanceStation(scheduler, settings.economy)

    report = []
    for _ in range(days):
        rules = scheduler.start_day()
        spawner.begin_day()
        deliveries = []
        while (item := spawner.spawn()) is not None:
            verdict = station.deliver(item)
            deliveries.append(
                {
                    "item_id": item.item_id,
                    "display_name": item.display_name,
                    "accepted": verdict.accepted,
                    "reasons": verdict.reasons,
                }
            )
        summary = station.close_day()
        report.append(
            {
                "day": summary.day,
                "rules": rules.model_dump(mode="json"),
                "deliveries": deliveries,
                "correct": summary.correct,
                "incorrect": summary.incorrect,
                "fee": summary.fee,
                "money": station.money,
            }
        )
    return report


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return 0

    seed = args.seed if args.seed is not None else settings.seed
    rng = RandomSource(seed)

    try:
        if args.command == "item":
            generator = ItemRecordGenerator(settings.item_generation)
            output = [generator.generate(rng).model_dump(mode="json") for _ in range(args.count)]
        elif args.command == "rules":
            output = DayRuleGenerator(settings.day_rules).generate(rng).model_dump(mode="json")
        else:
            output = _simulate(args.days, rng)
    except InspectionError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
