"""
Parse N-Quads files from the command line.

Usage:
    # Per-file summary
    nquads-parse data/sample.nq

    # One JSON object per quad
    nquads-parse data/part_1.nq.gz data/part_2.nq.gz --format ndjson -o quads.ndjson

    # Fail on the first malformed statement
    nquads-parse data/sample.nq --strict
"""

import argparse
import gzip
import logging
import sys
from pathlib import Path

import orjson  # Faster than stdlib json
from tqdm import tqdm

from .core import GrammarMismatch, NQuadsParser, ParseStats

logger = logging.getLogger(__name__)


def read_document(path: Path) -> str:
    """Read a whole N-Quads file (gzipped or plain text)."""
    path = Path(path)

    if path.suffix == '.gz':
        opener = lambda: gzip.open(path, 'rt', encoding='utf-8', errors='replace')
    else:
        opener = lambda: open(path, 'r', encoding='utf-8', errors='replace')

    with opener() as f:
        return f.read()


def write_ndjson(out, source: str, dataset) -> None:
    for graph, quads in dataset.items():
        for quad in quads:
            record = {'source': source, 'graph': graph}
            record.update(quad.to_dict())
            out.write(orjson.dumps(record).decode() + '\n')


def write_summary(out, source: str, dataset, stats: ParseStats) -> None:
    out.write(f"{source}\n")
    out.write(f"  Statements matched: {stats.statements_matched:,}\n")
    out.write(f"  Statements skipped: {stats.statements_skipped:,}\n")
    out.write(f"  Duplicates dropped: {stats.duplicates_dropped:,}\n")
    out.write(f"  Quads stored: {dataset.quad_count():,}\n")
    out.write(f"  Graphs: {len(dataset):,}\n")
    for graph, quads in dataset.items():
        out.write(f"    {graph}: {len(quads):,}\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Parse N-Quads files into RDF datasets"
    )
    parser.add_argument(
        'files',
        nargs='+',
        type=Path,
        help='N-Quads files to parse (plain or .gz)'
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Fail on the first statement that does not match the grammar'
    )
    parser.add_argument(
        '--unescape',
        action='store_true',
        help='Decode escape sequences in literals and IRIs'
    )
    parser.add_argument(
        '--format', '-f',
        choices=['ndjson', 'json', 'summary'],
        default='summary',
        help='Output format'
    )
    parser.add_argument(
        '--output', '-o',
        type=Path,
        help='Output file (default: stdout)'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable the progress bar'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log skipped statements and per-file details'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    nq_parser = NQuadsParser(strict=args.strict, unescape=args.unescape)

    out = open(args.output, 'w', encoding='utf-8') if args.output else sys.stdout
    parsed = 0
    combined = {}

    try:
        for path in tqdm(args.files, desc="Parsing", unit="file",
                         disable=args.no_progress or len(args.files) < 2):
            if not path.exists():
                logger.warning(f"File not found: {path}")
                continue

            stats = ParseStats()
            try:
                dataset = nq_parser.parse(read_document(path), stats=stats)
            except GrammarMismatch as e:
                logger.error(f"{path}: {e}")
                return 1

            parsed += 1
            logger.info(f"Parsed {dataset.quad_count():,} quads in {len(dataset)} graph(s) from {path.name}")

            if args.format == 'ndjson':
                write_ndjson(out, str(path), dataset)
            elif args.format == 'json':
                combined[str(path)] = dataset.to_rdf_dict()
            else:
                write_summary(out, str(path), dataset, stats)

        if args.format == 'json' and parsed:
            out.write(orjson.dumps(combined, option=orjson.OPT_INDENT_2).decode() + '\n')
    finally:
        if out is not sys.stdout:
            out.close()

    if not parsed:
        logger.error("No input files could be parsed")
        return 1

    return 0


if __name__ == '__main__':
    exit(main())
