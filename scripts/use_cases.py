"""
CLI for managing inspection use cases in the local slot.

Usage:
    python scripts/use_cases.py options
    python scripts/use_cases.py list [--json]
    python scripts/use_cases.py create --name "Blade Scan" --type visual --anomaly cracks --anomaly delamination
    python scripts/use_cases.py delete <id>
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import VERSION, validate_config
from src.core.dao import UseCaseStore
from src.core.schema import ANOMALY_OPTIONS, INSPECTION_TYPE_OPTIONS, format_created_at
from src.core.storage import SQLiteSlotStorage, get_storage
from src.core.validation import UseCaseValidationError
from util.logging import logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage inspection use cases")
    parser.add_argument(
        "--db",
        default=None,
        metavar="PATH",
        help="SQLite database path (default: $DB_PATH or ./data/inspection.db)"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("options", help="Show available inspection types and anomalies")

    lst = sub.add_parser("list", help="List saved use cases")
    lst.add_argument("--json", action="store_true", help="Print the stored JSON layout")

    create = sub.add_parser("create", help="Create a new use case")
    create.add_argument("--name", default=None, help="Use case name (at least 2 characters)")
    create.add_argument(
        "--type",
        dest="inspection_type",
        default=None,
        help="Inspection type: " + ", ".join(value for value, _ in INSPECTION_TYPE_OPTIONS)
    )
    create.add_argument(
        "--anomaly",
        dest="anomalies",
        action="append",
        default=[],
        help="Target anomaly (repeatable): " + ", ".join(value for value, _ in ANOMALY_OPTIONS)
    )

    delete = sub.add_parser("delete", help="Delete a use case by id")
    delete.add_argument("id", help="Use case id")

    return parser


def open_store(db_path: Optional[str] = None) -> UseCaseStore:
    """Build a store for the CLI, honouring --db."""
    storage = SQLiteSlotStorage(db_path) if db_path else get_storage()
    return UseCaseStore(storage=storage)


def cmd_options() -> int:
    print("Inspection types:")
    for value, label in INSPECTION_TYPE_OPTIONS:
        print(f"  {value:<12} {label}")
    print("Anomalies:")
    for value, label in ANOMALY_OPTIONS:
        print(f"  {value:<12} {label}")
    return 0


def cmd_list(store: UseCaseStore, as_json: bool = False) -> int:
    use_cases = store.list()

    if as_json:
        print(json.dumps([u.to_dict() for u in use_cases], indent=2))
        return 0

    if not use_cases:
        print("No inspection use cases found. Create one to get started.")
        return 0

    for use_case in use_cases:
        print(f"📋 {use_case.name}  [{use_case.id}]")
        print(f"   Inspection type:  {use_case.inspection_type.value}")
        print(f"   Target anomalies: {', '.join(a.value for a in use_case.anomalies)}")
        print(f"   Created at:       {format_created_at(use_case)}")
    print(f"\n{len(use_cases)} use case(s)")
    return 0


def cmd_create(store: UseCaseStore, name: Optional[str], inspection_type: Optional[str], anomalies: List[str]) -> int:
    draft = {"name": name, "inspectionType": inspection_type, "anomalies": anomalies}
    try:
        use_case = store.create(draft)
    except UseCaseValidationError as e:
        print("❌ Failed to create use case:")
        for field_name, message in e.errors.items():
            print(f"   {field_name}: {message}")
        return 1

    print("✅ Use case created successfully!")
    print(f"   id: {use_case.id}")
    return 0


def cmd_delete(store: UseCaseStore, use_case_id: str) -> int:
    if store.delete(use_case_id):
        print("✅ Inspection use case deleted successfully")
        return 0
    print("❌ Failed to delete inspection use case")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "options":
        return cmd_options()

    issues = validate_config()
    if issues and not args.db:
        for issue in issues:
            print(f"⚠️  {issue}")
        return 1

    try:
        store = open_store(args.db)
        if args.command == "list":
            return cmd_list(store, as_json=args.json)
        if args.command == "create":
            return cmd_create(store, args.name, args.inspection_type, args.anomalies)
        if args.command == "delete":
            return cmd_delete(store, args.id)
    except Exception as e:
        print(f"❌ {args.command} failed with unexpected error: {e}")
        logger.error(f"CLI {args.command} failed: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
