"""
Command-line entry point for generating previews by hand.

Runs one job in a throwaway scratch directory and prints the outcome as JSON.

To run:
    python -m worker.main ./slides.pptx
    python -m worker.main https://vimeo.com/76979871 --kind link
    python -m worker.main s3://previews/uploads/clip.mov --upload

Without --upload the output references files in the scratch directory, which
is deleted on exit; pass --keep to keep it around for inspection.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import tempfile

from config.settings import settings
from models.enums import JobKind
from models.job import PreviewJob
from worker.executor import PreviewExecutor

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m worker.main",
        description="Generate a thumbnail and a full-size preview for a file or a link.",
    )
    parser.add_argument("source", help="local path, http(s) URL or s3://bucket/key")
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in JobKind if kind is not JobKind.UNSUPPORTED],
        help="declared content kind; required for links",
    )
    parser.add_argument("--mime-type", help="declared MIME type of a file source")
    parser.add_argument("--upload", action="store_true", help="upload outputs to object storage")
    parser.add_argument("--keep", action="store_true", help="keep the scratch directory")
    return parser


async def run(args: argparse.Namespace, directory: str) -> dict:
    source = args.source
    if not source.startswith(("http://", "https://", "s3://")):
        source = os.path.abspath(source)

    job = PreviewJob(
        source=source,
        directory=directory,
        mime_type=args.mime_type,
        kind=JobKind(args.kind) if args.kind else None,
    )
    executor = PreviewExecutor(upload=args.upload)
    return await executor.execute(job)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.keep:
        directory = tempfile.mkdtemp(prefix="preview-")
        logger.info(f"Scratch directory: {directory}")
        outcome = asyncio.run(run(args, directory))
    else:
        with tempfile.TemporaryDirectory(prefix="preview-") as directory:
            outcome = asyncio.run(run(args, directory))

    print(json.dumps(outcome, indent=2))
    return 0 if outcome["status"] != "failed" else 1


if __name__ == "__main__":
    sys.exit(main())
