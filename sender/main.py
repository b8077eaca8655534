"""CLI entry point: chunkrelay-send <file_path> <receiver_host> <receiver_port>."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from common.logging_config import setup_logging
from sender.config import load_settings
from sender.exceptions import SenderError
from sender.orchestrator import SenderOrchestrator
from sender.receiver_client import ReceiverClient
from sender.utils import receiver_base_url


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunkrelay-send",
        description="Send a file to a chunkrelay receiver in verified chunks",
    )
    parser.add_argument("file_path", help="File to send")
    parser.add_argument("receiver_host", help="Receiver host name or IP")
    parser.add_argument("receiver_port", type=int, help="Receiver port")
    parser.add_argument(
        "--config", type=Path, default=None,
        help="JSON file with timeout, max_retries and retry_backoff_multiplier"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the sender CLI; returns the process exit status."""
    args = build_parser().parse_args(argv)

    logger = setup_logging('sender', log_level='DEBUG' if args.debug else None)

    try:
        settings = load_settings(args.config)
        base_url = receiver_base_url(args.receiver_host, args.receiver_port)
        with ReceiverClient(base_url, settings) as client:
            result = SenderOrchestrator(client).send_file(args.file_path)
    except SenderError as e:
        logger.error(f"Transfer aborted: {e}")
        return 1
    except OSError as e:
        logger.error(f"Transfer aborted: {e}")
        return 1

    logger.info(
        f"File upload completed successfully: {result.file_name} as {result.upload_id} "
        f"({result.chunks_sent} chunks, {result.bytes_sent} bytes)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
