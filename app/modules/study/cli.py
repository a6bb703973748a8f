from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from app.modules.study.generator import QuestionSource
from app.modules.study.models import Difficulty
from app.modules.study.pdf import extract_pdf_text


async def _generate(args: argparse.Namespace) -> list[dict]:
    content = topic = None
    if args.pdf:
        path = Path(args.pdf)
        if not path.is_file():
            raise SystemExit(f"PDF not found: {path}")
        content = extract_pdf_text(path.read_bytes(), path.name)
        topic = path.name
    source = QuestionSource(use_upstream=False if args.offline else None)
    cards = await source.generate(
        args.subject,
        args.class_level,
        Difficulty(args.difficulty),
        args.count,
        content,
        topic=topic,
    )
    return [c.model_dump(mode="json") for c in cards]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="study-gen", description="Study flashcard generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate flashcards for a subject or PDF")
    g.add_argument("--subject", "-s", default="mathematics", help="Subject key")
    g.add_argument("--class-level", default="9", help="Class level, e.g. 5 or college")
    g.add_argument(
        "--difficulty",
        "-d",
        choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value,
    )
    g.add_argument("--count", "-n", type=int, default=5, help="Number of flashcards")
    g.add_argument("--pdf", help="Path to a PDF to base the questions on")
    g.add_argument(
        "--offline", action="store_true", help="Use the static question bank only"
    )

    args = parser.parse_args(argv)
    if args.cmd == "generate":
        if args.count < 1:
            raise SystemExit("--count must be at least 1")
        cards = asyncio.run(_generate(args))
        print(json.dumps(cards, indent=2, ensure_ascii=False))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
