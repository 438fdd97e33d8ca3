"""Command line entry point: inspect and drain the offline queue."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional, Sequence

from hubsync.connectivity import ConnectivityMonitor
from hubsync.errors import HubSyncError, NotConfiguredError
from hubsync.local import FileKeyValueStore
from hubsync.manager import SyncController
from hubsync.models import Notice
from hubsync.remote import RemoteConfig

logger = logging.getLogger(__name__)

ENV_STORAGE_DIR = "HUBSYNC_STORAGE_DIR"
DEFAULT_STORAGE_DIR = os.path.join("~", ".hubsync")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hubsync", description="Offline sync for project data.")
    parser.add_argument(
        "--storage-dir",
        default=os.environ.get(ENV_STORAGE_DIR, DEFAULT_STORAGE_DIR),
        help="directory holding the local snapshot and queue (default: %(default)s)",
    )
    parser.add_argument("--env-file", default=None, help="path to a .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="show sync status and pending operation count")
    sub.add_parser("queue", help="print queued operations as JSON lines")
    sub.add_parser("drain", help="replay queued operations against the remote store")
    return parser


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.level}] {notice.message}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    storage = FileKeyValueStore(os.path.expanduser(args.storage_dir))
    try:
        config = RemoteConfig.from_env(dotenv_path=args.env_file)
    except ValueError as exc:
        print(f"error: invalid remote configuration: {exc}", file=sys.stderr)
        return 2

    controller = SyncController.from_config(config, storage, notify=_print_notice)

    try:
        if args.command == "queue":
            for op in controller.queue.peek_all():
                print(json.dumps(op.to_dict(), sort_keys=True))
            return 0

        if args.command == "status":
            if config is not None:
                # Probe only; a transition here would start a drain.
                controller.session.connectivity = ConnectivityMonitor.for_config(config).probe()
            snapshot = controller.status()
            print(snapshot.label)
            print(f"pending: {snapshot.pending}")
            return 0

        if args.command == "drain":
            if controller.local_only:
                raise NotConfiguredError(
                    "Remote store not configured; set HUBSYNC_SUPABASE_URL and HUBSYNC_SUPABASE_ANON_KEY"
                )
            result = controller.drain()
            print(json.dumps(result.to_dict(), sort_keys=True))
            for item in result.results:
                if not item.succeeded:
                    print(
                        f"{item.status}: {item.entity_type}/{item.action} {item.op_id}"
                        f" ({item.error_type}: {item.error_message})",
                        file=sys.stderr,
                    )
            return 0 if result.failed == 0 else 1
    except HubSyncError as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        controller.stop()

    return 2


if __name__ == "__main__":
    sys.exit(main())
