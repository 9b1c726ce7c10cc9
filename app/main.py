# File: app/main.py

import argparse
import logging
import sys
from pathlib import Path

from app.core.config.settings import settings
from app.core.errors import ConfigurationError
from app.features.source_scanner.domain.models import ScanRequest
from app.features.source_scanner.service.scanner import InboxScanner

logger = logging.getLogger("app")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Segment new recordings and transcribe published segments."
    )
    parser.add_argument("inbox", nargs="?", type=Path, default=None,
                        help="Directory of arrived blobs (default: $DATA_DIR/inbox)")
    parser.add_argument("--recursive", action="store_true", help="Descend into sub-directories")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    try:
        settings.validate()
    except ConfigurationError as e:
        logger.critical(str(e))
        return 2

    settings.ensure_dirs()
    inbox = args.inbox or settings.INBOX_DIR

    try:
        summary = InboxScanner().scan_and_process(ScanRequest(root_path=inbox, recursive=args.recursive))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    for error in summary.errors:
        logger.error(error)
    return 0 if summary.files_failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
