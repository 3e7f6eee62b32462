"""
Core modules for N-Quads dataset parsing.

This package contains the fundamental building blocks:
- rdf_dataset: RDF term, quad and dataset value types
- nquads_parser: Grammar-based N-Quads parser
- exceptions: Errors raised by the parser
"""

from .exceptions import GrammarMismatch, InvalidInputKind, NQuadsError
from .nquads_parser import NQuadsParser, ParseStats, parse
from .rdf_dataset import (
    DEFAULT_GRAPH,
    BlankNode,
    Dataset,
    DatasetBuilder,
    IRI,
    Literal,
    Quad,
)

__all__ = [
    'DEFAULT_GRAPH',
    'BlankNode',
    'Dataset',
    'DatasetBuilder',
    'GrammarMismatch',
    'IRI',
    'InvalidInputKind',
    'Literal',
    'NQuadsError',
    'NQuadsParser',
    'ParseStats',
    'Quad',
    'parse',
]
