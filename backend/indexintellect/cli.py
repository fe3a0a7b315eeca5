"""Command-line front end: generate a plan (and roadmap) and export it to PDF."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from indexintellect.client.backend_client import BackendClient
from indexintellect.client.session import StudySession
from indexintellect.core.config import settings
from indexintellect.core.errors import IndexIntellectError
from indexintellect.core.logging import configure_logging
from indexintellect.export.exporter import DEFAULT_FILENAME, PlanExporter
from indexintellect.export.normalizer import PALETTES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn a book index into a study plan")
    parser.add_argument("index_file", type=Path, help="File holding the book's table of contents")
    parser.add_argument("--goal", required=True, help="Your learning goal, e.g. 'interviews'")
    parser.add_argument("--url", default=settings.backend_url, help="Backend base URL")
    parser.add_argument(
        "--roadmap",
        nargs="?",
        type=int,
        const=0,
        default=None,
        help="Also build a sprint roadmap; give a sprint count or omit it to use the suggestion",
    )
    parser.add_argument("--pdf", type=Path, default=None, help=f"Write the plan to a PDF (e.g. {DEFAULT_FILENAME})")
    parser.add_argument("--palette", choices=sorted(PALETTES), default="print", help="PDF color palette")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_level=settings.log_level)

    exporter = PlanExporter(palette=PALETTES[args.palette])
    if args.pdf:
        exporter.loader.start()

    client = BackendClient(base_url=args.url)
    session = StudySession(client)
    try:
        index = args.index_file.read_text(encoding="utf-8")
        print("AI is strategizing your learning path... Please wait.", file=sys.stderr)
        session.submit(index, args.goal)
        print(session.state.plan)

        if args.roadmap is not None:
            tasks = session.request_roadmap(args.roadmap or None)
            print("\n## Sprint Roadmap\n")
            for number, task in enumerate(tasks, start=1):
                print(f"- [ ] Sprint {number}: {task.title}\n      {task.description}")

        if args.pdf:
            exporter.loader.wait()
            pages = exporter.export(session.state.plan or "", str(args.pdf), tasks=session.state.tasks)
            print(f"Saved {args.pdf} ({len(pages)} page(s))", file=sys.stderr)
    except IndexIntellectError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
