from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.schemas.ats import ATSAnalysisError, ParserMetadata  # noqa: E402
from app.services.ats_service import analyze_ats_compatibility_enhanced  # noqa: E402


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def main() -> None:
    parser = argparse.ArgumentParser(description="Score a plain-text resume against a job description.")
    parser.add_argument("--resume", required=True, help="Path to the resume text file")
    parser.add_argument("--job", required=True, help="Path to the job description text file")
    parser.add_argument(
        "--metadata",
        default=None,
        help="Optional JSON file with document parser metadata (parsing_confidence, word_count, ...)",
    )
    args = parser.parse_args()

    metadata = None
    if args.metadata:
        metadata = ParserMetadata.model_validate(json.loads(_read_text(args.metadata)))

    result = asyncio.run(
        analyze_ats_compatibility_enhanced(_read_text(args.resume), _read_text(args.job), metadata)
    )
    print(result.model_dump_json(indent=2))
    if isinstance(result, ATSAnalysisError):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
