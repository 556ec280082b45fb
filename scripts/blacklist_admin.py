#!/usr/bin/env python3
"""
Inspect and edit this display's media blacklist.
"""

import argparse
from concurrent import futures
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from signage_client.config.config_loader import ConfigLoader
from signage_client.config.settings import load_settings
from signage_client.monitoring.blacklist_reporter import BlacklistScope, reporter_from_settings, report_outcome
from signage_client.monitoring.structured_logger import set_log_level
from signage_client.storage.blacklist import BlacklistStore
from signage_client.storage.blacklist_xml import load_blacklist_xml


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the local media blacklist")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml (default: config.yaml)")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Blacklist a media id and report it to the CMS")
    add.add_argument("media_id")
    add.add_argument("--all", action="store_true", help="Blacklist on all displays, not just this one")
    add.add_argument("--reason", default="", help="Reason sent to the CMS")
    add.add_argument("--no-report", action="store_true", help="Only add to the local list")
    add.add_argument("--wait", type=float, default=30.0, help="Seconds to wait for the CMS (default: 30)")

    check = sub.add_parser("check", help="Exit 0 if the media id is blacklisted, 1 otherwise")
    check.add_argument("media_id")

    sub.add_parser("list", help="Print blacklisted ids")

    imp = sub.add_parser("import", help="Add every <file id=..> in an XML document (local only)")
    imp.add_argument("xml_file")

    sub.add_parser("truncate", help="Delete the local blacklist")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(ConfigLoader(args.config))
    set_log_level(settings.log_level)

    reporter = None
    if args.command == "add" and not args.no_report:
        reporter = reporter_from_settings(settings)
    store = BlacklistStore.from_settings(settings, reporter=reporter)

    if args.command == "add":
        scope = BlacklistScope.ALL if args.all else BlacklistScope.SINGLE
        future = store.add(args.media_id, scope, args.reason)
        print(f"🛑 Media {args.media_id} blacklisted locally ({store.path})")
        if future is not None:
            try:
                success, error = report_outcome(future, timeout=args.wait)
            except futures.TimeoutError:
                success, error = False, f"no answer within {args.wait}s"
            print("✅ Reported to CMS" if success else f"⚠️ CMS report failed: {error}")
            reporter.stop()
        return 0

    if args.command == "check":
        listed = store.is_blacklisted(args.media_id)
        print(f"{args.media_id}: {'blacklisted' if listed else 'not blacklisted'}")
        return 0 if listed else 1

    if args.command == "list":
        for media_id in store.entries():
            print(media_id)
        return 0

    if args.command == "import":
        added = store.add_bulk(load_blacklist_xml(args.xml_file))
        print(f"🛑 Imported {added} blacklist entries")
        return 0

    if args.command == "truncate":
        store.truncate()
        print("🗑️ Blacklist truncated")
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
