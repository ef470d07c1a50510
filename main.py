"""Content Analyzer

Simple CLI for scoring a piece of content, or serving the HTTP API.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.api.deps import get_content_analyzer, get_analyzer_config
from app.errors import AnalyzerError
from app.services.logger import request_scope


async def run_analysis(content: str) -> int:
    """Analyze content and print the JSON result."""
    print(f"Analyzing {len(content)} characters...", file=sys.stderr)
    print("-" * 50, file=sys.stderr)

    analyzer = get_content_analyzer()
    try:
        with request_scope():
            result = await analyzer.analyze({"content": content}, get_analyzer_config().agent_secret)
    except AnalyzerError as e:
        print(f"[!] Error ({e.status_code}): {e.public_message}", file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(by_alias=True), indent=2))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Content freshness and SEO analyzer")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--content", "-c", help="Content to analyze")
    source.add_argument("--file", "-f", type=Path, help="Read content from a file")
    source.add_argument("--serve", action="store_true", help="Run the HTTP API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()

    if args.serve:
        import uvicorn

        uvicorn.run("app.main:app", host=args.host, port=args.port)
        return

    content = args.content if args.content is not None else args.file.read_text(encoding="utf-8")
    sys.exit(asyncio.run(run_analysis(content)))


if __name__ == "__main__":
    main()
