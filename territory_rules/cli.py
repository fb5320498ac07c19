"""CLI entrypoint for territory postcode rules."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from territory_rules.common.config_loader import StyleConfig, load_style_config
from territory_rules.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from territory_rules.common.errors import TerritoryRulesError
from territory_rules.common.fs import read_text, write_json
from territory_rules.common.logging import build_logger, log_event
from territory_rules.pipeline.export import classification_rows, write_classification_csv, write_paint_json
from territory_rules.pipeline.maplibre import paint_properties
from territory_rules.pipeline.models import DiagnosticKind
from territory_rules.pipeline.sources import read_territory_text
from territory_rules.service import TerritoryMap

STRICT_DIAGNOSTICS = {
    DiagnosticKind.UNREACHABLE_RULE,
    DiagnosticKind.STATUS_UNRECOGNIZED,
    DiagnosticKind.DUPLICATE_TERRITORY,
}


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("territories", help="Path or http(s) URL of the territory CSV")
    parser.add_argument("codes", nargs="*", help="Postcode district codes to look up")
    parser.add_argument("--codes-file", default=None, help="File with one code per line")
    parser.add_argument("--out", default=None)
    parser.add_argument("--areas-manifest", default=None, help="Path or URL of the postcode area index (inspect)")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def _collect_codes(args: argparse.Namespace) -> list[str]:
    codes = list(args.codes)
    if args.codes_file:
        codes.extend(line.strip() for line in read_text(Path(args.codes_file)).splitlines())
    return [code for code in codes if code.strip()]


def _emit(payload, out: str | None) -> None:
    if out:
        write_json(Path(out), payload)
    else:
        print(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True))


def execute_command(args: argparse.Namespace, territory_map: TerritoryMap, style: StyleConfig) -> None:
    rule_set = territory_map.rule_set
    if args.command == "classify":
        rows = classification_rows(rule_set, _collect_codes(args), style)
        if args.out:
            write_classification_csv(Path(args.out), rows)
        else:
            _emit(rows, None)
    elif args.command == "describe":
        summaries = [territory_map.describe(code) for code in _collect_codes(args)]
        if args.out:
            _emit([{"code": s.code, "territory_id": s.territory_id, "lines": list(s.lines)} for s in summaries], args.out)
        else:
            print("\n\n".join(summary.as_text() for summary in summaries))
    elif args.command == "style":
        if args.out:
            write_paint_json(Path(args.out), rule_set, style)
        else:
            _emit(
                paint_properties(territory_map.color_expression(), territory_map.opacity_expression(), style),
                None,
            )
    elif args.command == "inspect":
        payload = {
            "territories": {
                territory_id: territory_map.territory_metadata(territory_id).to_dict()
                for territory_id in rule_set.territories
            },
            "rule_counts": {
                "exact": len(rule_set.exact),
                "letter_continuation": len(rule_set.letter_rules),
                "any_continuation": len(rule_set.any_rules),
            },
            "diagnostics": [diagnostic.to_dict() for diagnostic in rule_set.diagnostics],
        }
        if args.areas_manifest:
            payload["areas"] = territory_map.areas(args.areas_manifest)
        _emit(payload, args.out)
    else:
        raise ValueError(f"Unknown command: {args.command}")


def run_command(args: argparse.Namespace) -> int:
    logger = build_logger(
        level=args.log_level,
        log_path=Path(args.log_file) if args.log_file else None,
    )
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None

    try:
        style = load_style_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
        territory_map = TerritoryMap(style=style, logger=logger)
        territory_map.reload(read_territory_text(args.territories))
    except TerritoryRulesError as exc:
        log_event(
            logger,
            f"load failed: {exc}",
            level=logging.ERROR,
            stage="load",
            event="LOAD_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    log_event(logger, "command start", stage=args.command, event="COMMAND_START", status="ok")
    try:
        execute_command(args, territory_map, style)
    except Exception as exc:
        log_event(
            logger,
            f"command failed: {exc}",
            level=logging.ERROR,
            stage=args.command,
            event="COMMAND_FAIL",
            status="error",
            error_code=getattr(exc, "error_code", type(exc).__name__),
        )
        return EXIT_HARD_FAIL
    log_event(logger, "command end", stage=args.command, event="COMMAND_END", status="ok")

    if args.strict and any(d.kind in STRICT_DIAGNOSTICS for d in territory_map.rule_set.diagnostics):
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except TerritoryRulesError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
