from argparse import ArgumentParser
import json
import logging
from pathlib import Path

from atlas.config import Settings
from atlas.engine import AggregationEngine
from atlas.loaders import load_snapshot
from atlas.search import result_to_dict

BASE_DIR = Path(__file__).resolve().parent

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)


def build_engine(data_file: Path | None, layer: str, settings: Settings | None = None) -> AggregationEngine:
    settings = settings or Settings.from_env(BASE_DIR)
    engine = AggregationEngine(settings)
    engine.load_snapshot(load_snapshot(data_file or settings.data_file))
    engine.set_layer(layer)
    return engine


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    parser = ArgumentParser(description="Hemp Atlas globe engine utility CLI")
    parser.add_argument("--data", type=Path, default=None, help="Entity snapshot JSON (default: ATLAS_DATA_FILE)")
    parser.add_argument(
        "--layer",
        default="all",
        help="Layer: off, places, organizations, products, events or all (default: all)",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("markers", help="Print projected markers for the layer")
    sub.add_parser("countries", help="Print per-country counts and colors for the layer")
    search = sub.add_parser("search", help="Search countries, cities and entities")
    search.add_argument("query", help="Case-insensitive substring")
    args = parser.parse_args(argv)

    try:
        engine = build_engine(args.data, args.layer)
    except ValueError as error:
        parser.error(str(error))

    if args.command == "markers":
        _print_json([marker.to_dict() for marker in engine.markers()])
        return 0
    if args.command == "countries":
        _print_json(
            [
                {
                    "country": country,
                    "entity_count": engine.index.entity_count(country),
                    "colors": engine.country_style(country).to_dict(),
                }
                for country in sorted(engine.index.countries())
            ]
        )
        return 0
    if args.command == "search":
        results = engine.search(args.query, track=False)
        _print_json([result_to_dict(result) for result in results])
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
