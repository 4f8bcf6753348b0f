"""CLI for listing, restoring and deleting content versions."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from contentstudio.errors import ContentStudioError
from contentstudio.services.content_history import ContentHistoryService
from contentstudio.storage.json_store import JsonContentStore
from contentstudio.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)

load_dotenv()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage content version history")
    parser.add_argument("--store", type=Path, help="JSON store file (default: CONTENT_STORE_PATH)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List versions of a content item")
    list_parser.add_argument("--content-id", type=int, required=True)

    restore_parser = subparsers.add_parser("restore", help="Make a historical version active")
    restore_parser.add_argument("--history-id", type=int, required=True)

    delete_parser = subparsers.add_parser("delete", help="Delete a historical version")
    delete_parser.add_argument("--history-id", type=int, required=True)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level.upper())

    store = JsonContentStore(args.store)
    service = ContentHistoryService(store.content, store.history)

    try:
        if args.command == "list":
            output = service.get_history_by_content(args.content_id)
        elif args.command == "restore":
            output = service.restore_version(args.history_id).to_record()
            store.save()
        else:
            service.delete_version(args.history_id)
            store.save()
            output = {"deleted": args.history_id}
    except ContentStudioError as e:
        print(json.dumps({"error": e.to_dict()}, indent=2, ensure_ascii=False), file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
