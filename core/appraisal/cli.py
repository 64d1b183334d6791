#!/usr/bin/env python3
"""
CLI for running appraisals against the local JSON store.

Usage:
    python -m core.appraisal.cli seed
    python -m core.appraisal.cli appraise <property_id>
    python -m core.appraisal.cli batch [--limit N]
    python -m core.appraisal.cli list [--property-id ID]

Examples:
    # Load sample properties, then appraise everything pending
    python -m core.appraisal.cli seed
    python -m core.appraisal.cli batch --limit 10
"""

import argparse
import json
import sys
from typing import Optional

from core.errors import AppraisalError
from utils.config import Config
from utils.logging import setup_logging

from .audit_log import AuditLog
from .orchestrator import AppraisalOrchestrator
from .repository import JsonAppraisalStore
from .sample_data import create_sample_assets


def build_orchestrator(config: Config) -> tuple[JsonAppraisalStore, AppraisalOrchestrator]:
    """Create the store, audit log and orchestrator from configuration."""
    store = JsonAppraisalStore(
        str(config.store_path),
        unique_per_asset=config.unique_appraisals,
    )
    audit_log = AuditLog(str(config.audit_log_path))
    return store, AppraisalOrchestrator(store, audit_log)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_seed(args, config: Config) -> int:
    store, _ = build_orchestrator(config)
    count = store.add_assets(create_sample_assets())
    _print_json({"seeded": count, "total_properties": store.count_assets()})
    return 0


def cmd_appraise(args, config: Config) -> int:
    _, orchestrator = build_orchestrator(config)
    appraisal = orchestrator.appraise_one(args.property_id)
    _print_json({
        "appraisal": appraisal.record.to_dict(),
        "result": appraisal.valuation.to_dict(),
    })
    return 0


def cmd_batch(args, config: Config) -> int:
    _, orchestrator = build_orchestrator(config)
    batch = orchestrator.appraise_batch(max_items=args.limit or config.batch_limit)
    _print_json({
        "processed": batch.processed_count,
        "results": [
            {"propertyId": o.asset_id, "propertyName": o.asset_name, "result": o.record.to_dict()}
            for o in batch.results
        ],
        "failures": [
            {"propertyId": o.asset_id, "reason": o.reason}
            for o in batch.failures
        ],
    })
    return 0


def cmd_list(args, config: Config) -> int:
    store, _ = build_orchestrator(config)
    _print_json([r.to_dict() for r in store.list_appraisals(args.property_id)])
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Income-approach property appraisal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data-dir",
        help="Directory holding the JSON store and audit log",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Load sample properties")
    seed_parser.set_defaults(func=cmd_seed)

    appraise_parser = subparsers.add_parser("appraise", help="Appraise one property")
    appraise_parser.add_argument("property_id", help="Property ID")
    appraise_parser.set_defaults(func=cmd_appraise)

    batch_parser = subparsers.add_parser("batch", help="Appraise unappraised properties")
    batch_parser.add_argument("--limit", type=int, help="Maximum properties to appraise")
    batch_parser.set_defaults(func=cmd_batch)

    list_parser = subparsers.add_parser("list", help="List stored appraisals")
    list_parser.add_argument("--property-id", help="Only this property")
    list_parser.set_defaults(func=cmd_list)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config.load()
    if args.data_dir:
        config.data_dir = args.data_dir
    setup_logging(config.log_level, stream=sys.stderr)

    try:
        return args.func(args, config)
    except AppraisalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
