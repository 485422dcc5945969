"""Build a citation network for one identifier and write it as JSON.

Usage:
    python scripts/build_network.py 10.1038/nature14539 --depth 2 --output network.json
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from citenet.config import get_settings
from citenet.network.builder import CitationGraphBuilder
from citenet.services.sources import ResearchSources
from citenet.utils.exceptions import InputValidationError
from citenet.utils.logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a citation network around a research product")
    parser.add_argument("identifier", help="DOI or OpenAIRE id of the center product")
    parser.add_argument("--depth", type=int, default=1, help="BFS depth (1-3)")
    parser.add_argument(
        "--direction",
        choices=["citations", "references", "both"],
        default="both",
        help="Which links to expand at each node",
    )
    parser.add_argument("--max-nodes", type=int, default=None, help="Node budget (default from settings)")
    parser.add_argument("--output", default="-", help="Output file, '-' for stdout")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(log_level="INFO", log_format="console")
    settings = get_settings()

    sources = ResearchSources.from_settings(settings, enable_cache=False)
    builder = CitationGraphBuilder(
        sources.relationships,
        sources.metadata,
        links_per_node=sources.links_per_node,
    )

    try:
        network = await builder.build(
            args.identifier,
            depth=args.depth,
            direction=args.direction,
            max_nodes=args.max_nodes or settings.DEFAULT_MAX_NODES,
        )
    except InputValidationError as exc:
        print(f"Invalid arguments: {exc}", file=sys.stderr)
        return 2
    finally:
        await sources.close()

    content = network.model_dump_json(by_alias=True, indent=2)
    if args.output == "-":
        print(content)
    else:
        with open(args.output, "w") as f:
            f.write(content)
        print(f"Network written to {args.output}", file=sys.stderr)
    print(f"  Nodes: {network.metadata.total_nodes}", file=sys.stderr)
    print(f"  Edges: {network.metadata.total_edges}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
