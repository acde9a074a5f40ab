from __future__ import annotations

import argparse
import logging
from typing import Sequence

from worldtick.content.io import load_content_dir, load_state_json, save_state_json
from worldtick.sim.engine import TickOptions, WorldTickEngine
from worldtick.sim.hash import result_hash, state_hash
from worldtick.sim.state import DEFAULT_BANDS, next_clock
from worldtick.sim.weather import WeatherChange, weather_effects


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _band_list(value: str) -> tuple[str, ...]:
    bands = tuple(band.strip() for band in value.split(",") if band.strip())
    if not bands:
        raise argparse.ArgumentTypeError("bands must name at least one band")
    return bands


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worldtick-tick",
        description=(
            "Deterministic world tick runner. Advances a state fixture N ticks against a content "
            "directory, stepping the clock one band between ticks."
        ),
    )
    parser.add_argument("state_path", help="Path to a simulation state JSON fixture")
    parser.add_argument("content_dir", help="Directory holding regions.json, events.json and schedules.json")
    parser.add_argument("--world", required=True, help="World id the ticks are keyed by")
    parser.add_argument("--ticks", type=_non_negative_int, default=1, help="Ticks to advance")
    parser.add_argument(
        "--bands",
        type=_band_list,
        default=DEFAULT_BANDS,
        help="Comma-separated band cycle used to step the clock between ticks",
    )
    parser.add_argument("--dry-run", action="store_true", help="Compute proposed changes without committing them")
    parser.add_argument("--max-events", type=_non_negative_int, default=None, help="Scan at most N world events")
    parser.add_argument("--max-regions", type=_non_negative_int, default=None, help="Drift at most N regions")
    parser.add_argument("--per-tick", action="store_true", help="Print result and state hashes after each tick")
    parser.add_argument("--print-acts", action="store_true", help="Print every world act produced")
    parser.add_argument("--dump-final-state", help="Optional path to write the state after the last tick")
    parser.add_argument("--log-level", default="WARNING", help="Logging level for engine diagnostics")
    return parser


def _format_act(payload: dict[str, object]) -> str:
    fields = " ".join(f"{key}={payload[key]}" for key in sorted(payload) if key != "type")
    return f"act type={payload['type']} {fields}".rstrip()


def _format_weather_effects(change: WeatherChange) -> list[str]:
    lines: list[str] = []
    for effect in weather_effects(change.state):
        line = (
            f"weather_effect region_id={change.region_id} state={change.state} "
            f"effect_type={effect.effect_type} magnitude={effect.magnitude}"
        )
        if effect.duration is not None:
            line += f" duration={effect.duration}"
        lines.append(line)
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
        state = load_state_json(args.state_path)
        content = load_content_dir(args.content_dir)
        engine = WorldTickEngine(content.regions, content.events, content.schedules)
        options = TickOptions(dry_run=args.dry_run, max_events=args.max_events, max_regions=args.max_regions)

        print(
            "header "
            f"world={args.world} "
            f"day={state.clock.day_index} "
            f"band={state.clock.band} "
            f"regions={len(state.regions)} "
            f"npcs={len(state.npcs)} "
            f"events={len(content.events.for_world(args.world))}"
        )
        print(f"start_hash={state_hash(state)}")

        for index in range(args.ticks):
            if index > 0:
                state.clock = next_clock(state.clock, args.bands)
            result = engine.advance(args.world, state, options)
            if not result.success:
                for message in result.errors:
                    print(f"error: {message}")
                return 1

            print(f"tick day={state.clock.day_index} band={state.clock.band} summary={result.summary}")
            if args.print_acts:
                for act in result.new_acts:
                    print(_format_act(act.to_dict()))
                for change in result.deltas.weather.values():
                    for line in _format_weather_effects(change):
                        print(line)
            if args.per_tick:
                print(f"result_hash={result_hash(result)} state_hash={state_hash(state)}")

        print(f"end_hash={state_hash(state)}")

        if args.dump_final_state:
            save_state_json(args.dump_final_state, state)
            print(f"dumped_final_state={args.dump_final_state}")

    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
