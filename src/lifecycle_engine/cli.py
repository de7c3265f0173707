"""
Command-line front end for the lifecycle engine.

Usage:
    lifecycle-engine transitions job in_progress
    lifecycle-engine check lead new won
    lifecycle-engine score --job-type repair --urgency asap --photos 3
    lifecycle-engine funnel lead leads.json
    lifecycle-engine aging invoices.json --as-of 2025-06-30
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from .config.scoring_loader import load_scoring_rules
from .errors import LifecycleError
from .logging_config import configure_from_settings, get_logger
from .pipeline.aggregator import PipelineAggregator
from .pipeline.aging import AgingBucketer
from .scoring.lead_scorer import LeadScorer, ScoreInput
from .status.statuses import EntityKind
from .status.transitions import allowed_transitions, get_transition_table, is_valid_transition

logger = get_logger(__name__)

_KINDS = [k.value for k in EntityKind]


def _read_records(path: str) -> List[Any]:
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    records = json.loads(text)
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a JSON array of records")
    return records


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_transitions(args) -> int:
    table = get_transition_table(args.kind)
    targets = allowed_transitions(table, args.status)
    if args.status not in table:
        logger.warning(f"Unrecognized {args.kind} status: {args.status}")
    _print_json({
        "status": args.status,
        "allowed": [{"status": t, "label": table.label(t)} for t in targets],
    })
    return 0


def cmd_check(args) -> int:
    table = get_transition_table(args.kind)
    valid = is_valid_transition(table, args.from_status, args.to_status)
    print("valid" if valid else "invalid transition")
    return 0 if valid else 1


def cmd_score(args) -> int:
    rules = load_scoring_rules(Path(args.rules) if args.rules else None)
    result = LeadScorer(rules).score(ScoreInput(
        job_type=args.job_type,
        timeline_urgency=args.urgency,
        photo_count=args.photos,
        has_insurance_claim=args.insurance_claim,
        roof_size_sqft=args.roof_size,
    ))
    _print_json(result.to_dict())
    return 0


def cmd_funnel(args) -> int:
    aggregator = PipelineAggregator(get_transition_table(args.kind), value_field=args.value_field)
    _print_json(aggregator.aggregate(_read_records(args.file)).to_dict())
    return 0


def cmd_aging(args) -> int:
    as_of = args.as_of or datetime.now(timezone.utc)
    bucketer = AgingBucketer(due_field=args.due_field, amount_field=args.amount_field)
    _print_json(bucketer.bucket_by_age(_read_records(args.file), as_of).to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifecycle-engine",
        description="Lead/job lifecycle decisions and pipeline reports",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: LIFECYCLE_LOG_LEVEL)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit JSON log lines (default: LIFECYCLE_LOG_JSON)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("transitions", help="List statuses reachable from a status")
    p.add_argument("kind", choices=_KINDS)
    p.add_argument("status")
    p.set_defaults(func=cmd_transitions)

    p = sub.add_parser("check", help="Exit 0 if FROM -> TO is allowed, 1 otherwise")
    p.add_argument("kind", choices=_KINDS)
    p.add_argument("from_status")
    p.add_argument("to_status")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("score", help="Score a lead")
    p.add_argument("--job-type")
    p.add_argument("--urgency")
    p.add_argument("--photos", type=int, default=0)
    p.add_argument("--insurance-claim", action="store_true")
    p.add_argument("--roof-size", type=float)
    p.add_argument("--rules", help="YAML scoring rules file")
    p.set_defaults(func=cmd_score)

    p = sub.add_parser("funnel", help="Funnel report from a JSON array of records")
    p.add_argument("kind", choices=_KINDS)
    p.add_argument("file", help="JSON file, or - for stdin")
    p.add_argument("--value-field", default="value")
    p.set_defaults(func=cmd_funnel)

    p = sub.add_parser("aging", help="Aging report from a JSON array of invoices")
    p.add_argument("file", help="JSON file, or - for stdin")
    p.add_argument("--as-of", help="ISO date/time (default: now)")
    p.add_argument("--due-field", default="due_date")
    p.add_argument("--amount-field", default="amount")
    p.set_defaults(func=cmd_aging)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_from_settings(level=args.log_level, json_output=args.json_logs)
        return args.func(args)
    except LifecycleError as e:
        _print_json(e.to_dict())
        return 2
    except (OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
