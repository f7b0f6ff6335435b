"""
verixa.search.__main__
======================

Command-line entry point: answer a question end to end.

Example
-------
    python -m verixa.search "weather in Delhi"
    python -m verixa.search -v "what is retrieval augmented generation"
"""

import sys
import asyncio
import logging

import aiohttp

from verixa.config.settings import Settings
from verixa.core.errors import InvalidQueryError
from verixa.pipeline.factory import build_pipeline
from verixa.search.semantic import format_passages

USAGE = 'Usage: python -m verixa.search [-v] "your question"'


async def answer(query: str, verbose: bool = False) -> int:
    settings = Settings.from_env()
    async with aiohttp.ClientSession() as session:
        pipeline = build_pipeline(settings, session)
        try:
            result = await pipeline.run(query, settings.search.max_results)
        finally:
            await pipeline.close()

    if not result.ok:
        print(f"❌ {result.error}")
        return 1

    print(f"\n💬 {result.response}\n")
    if result.sources:
        print("📚 Sources:")
        for i, source in enumerate(result.sources, 1):
            print(f"  {i}. {source.title}\n     {source.url}")
    if verbose and result.passages:
        print("\n🔎 Passages:")
        print(format_passages(result.passages))
    return 0


def main() -> None:
    args = sys.argv[1:]
    verbose = "-v" in args
    args = [a for a in args if a != "-v"]
    if not args:
        print(USAGE)
        sys.exit(1)

    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    query = " ".join(args)     # support multi-word queries
    try:
        code = asyncio.run(answer(query, verbose))
    except InvalidQueryError:
        print(USAGE)
        code = 1
    sys.exit(code)

if __name__ == "__main__":  # pragma: no cover
    main()
