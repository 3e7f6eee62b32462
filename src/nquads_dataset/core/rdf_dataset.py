"""
RDF Term and Dataset Model

Value types produced by the N-Quads parser:

    IRI, BlankNode, Literal   -> the node variants
    Quad                      -> subject/predicate/object plus graph name
    Dataset                   -> graph name -> ordered, deduplicated quads

All values are immutable and compared structurally. A Dataset can only be
grown through a DatasetBuilder, which hands over its content on build().
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterator, Optional, Union

# Graph name used when a statement carries no graph label
DEFAULT_GRAPH = '@default'

XSD_STRING = 'http://www.w3.org/2001/XMLSchema#string'
RDF_LANGSTRING = 'http://www.w3.org/1999/02/22-rdf-syntax-ns#langString'


@dataclass(frozen=True)
class IRI:
    """An IRI reference, stored without its angle brackets."""
    value: str

    @property
    def local_name(self) -> str:
        """Get the local name (after last # or /)."""
        if '#' in self.value:
            return self.value.split('#')[-1]
        elif '/' in self.value:
            return self.value.split('/')[-1]
        return self.value

    def to_dict(self) -> dict:
        return {'type': 'IRI', 'value': self.value}

    def __str__(self) -> str:
        return f'<{self.value}>'


@dataclass(frozen=True)
class BlankNode:
    """A document-local blank node. The label keeps its `_:` prefix."""
    label: str

    def to_dict(self) -> dict:
        return {'type': 'blank node', 'value': self.label}

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Literal:
    """
    A literal value with either a datatype or a language tag (or neither).

    With neither set the literal is a plain string (xsd:string).
    """
    value: str
    datatype: Optional[IRI] = None
    language: Optional[str] = None

    def __post_init__(self):
        if self.datatype is not None and not isinstance(self.datatype, IRI):
            raise TypeError(f"Literal datatype must be an IRI, got {type(self.datatype).__name__}")
        if self.datatype is not None and self.language is not None:
            raise ValueError(
                f"Literal {self.value!r} cannot have both a datatype "
                f"({self.datatype.value}) and a language ({self.language})"
            )

    @property
    def effective_datatype(self) -> str:
        """Datatype IRI string, resolving the implicit ones."""
        if self.datatype is not None:
            return self.datatype.value
        if self.language is not None:
            return RDF_LANGSTRING
        return XSD_STRING

    def to_dict(self) -> dict:
        d = {
            'type': 'literal',
            'value': self.value,
            'datatype': self.effective_datatype,
        }
        if self.language is not None:
            d['language'] = self.language
        return d

    def __str__(self) -> str:
        if self.language is not None:
            return f'"{self.value}"@{self.language}'
        if self.datatype is not None:
            return f'"{self.value}"^^{self.datatype}'
        return f'"{self.value}"'


Node = Union[IRI, BlankNode, Literal]


@dataclass(frozen=True)
class Quad:
    """A single RDF statement within a named (or the default) graph."""
    subject: Union[IRI, BlankNode]
    predicate: IRI
    object: Node
    graph: str = DEFAULT_GRAPH

    def __post_init__(self):
        if not isinstance(self.subject, (IRI, BlankNode)):
            raise TypeError(f"Quad subject must be an IRI or BlankNode, got {type(self.subject).__name__}")
        if not isinstance(self.predicate, IRI):
            raise TypeError(f"Quad predicate must be an IRI, got {type(self.predicate).__name__}")
        if not isinstance(self.object, (IRI, BlankNode, Literal)):
            raise TypeError(f"Quad object must be a node, got {type(self.object).__name__}")
        if not isinstance(self.graph, str):
            raise TypeError(f"Quad graph must be a string, got {type(self.graph).__name__}")

    @property
    def is_default_graph(self) -> bool:
        return self.graph == DEFAULT_GRAPH

    def to_dict(self) -> dict:
        """Triple in the RDF dict form used by JSON-LD processors."""
        return {
            'subject': self.subject.to_dict(),
            'predicate': self.predicate.to_dict(),
            'object': self.object.to_dict(),
        }


class Dataset(Mapping):
    """
    Read-only mapping of graph name to the ordered quads of that graph.

    Graphs appear in the order they were first seen. Within a graph no two
    quads are equal. Use DatasetBuilder to create a populated dataset.
    """

    def __init__(self, graphs: Optional[Mapping] = None):
        """
        Create a dataset from a mapping of graph name to quads.

        Quads go through a DatasetBuilder, so duplicates within a graph are
        dropped (first occurrence wins). Every quad must belong to the graph
        it is listed under.
        """
        builder = DatasetBuilder()
        for name, quads in (graphs or {}).items():
            for quad in quads:
                if not isinstance(quad, Quad):
                    raise TypeError(f"Dataset values must be Quads, got {type(quad).__name__}")
                if quad.graph != name:
                    raise ValueError(
                        f"Quad in graph {quad.graph!r} listed under graph {name!r}"
                    )
                builder.add(quad)
        self._graphs = builder._take()

    @classmethod
    def _adopt(cls, graphs: dict) -> 'Dataset':
        dataset = cls.__new__(cls)
        dataset._graphs = graphs
        return dataset

    def __getitem__(self, graph: str) -> tuple:
        return self._graphs[graph]

    def __iter__(self) -> Iterator[str]:
        return iter(self._graphs)

    def __len__(self) -> int:
        return len(self._graphs)

    def __eq__(self, other):
        if not isinstance(other, Dataset):
            return NotImplemented
        return self._graphs == other._graphs

    __hash__ = None

    def __repr__(self) -> str:
        return f"Dataset(graphs={len(self._graphs)}, quads={self.quad_count()})"

    @property
    def default_graph(self) -> tuple:
        return self._graphs.get(DEFAULT_GRAPH, ())

    def quads(self) -> Iterator[Quad]:
        """Iterate all quads, graph by graph."""
        for quads in self._graphs.values():
            yield from quads

    def quad_count(self) -> int:
        return sum(len(quads) for quads in self._graphs.values())

    def to_rdf_dict(self) -> dict:
        """
        Convert to the plain RDF dataset form (graph name -> list of triple
        dicts) that JSON-LD `fromRdf` implementations consume.
        """
        return {
            name: [quad.to_dict() for quad in quads]
            for name, quads in self._graphs.items()
        }


class DatasetBuilder:
    """
    Accumulates quads into per-graph sequences, dropping duplicates.

    The first occurrence of a quad wins; later equal quads are ignored.
    After build() the builder is spent and cannot be reused.
    """

    def __init__(self):
        self._graphs = {}
        self._seen = {}
        self._built = False

    def add(self, quad: Quad) -> bool:
        """Add a quad. Returns False if it was already in its graph."""
        if self._built:
            raise RuntimeError("DatasetBuilder already built; create a new one")

        seen = self._seen.get(quad.graph)
        if seen is None:
            seen = self._seen[quad.graph] = set()
            self._graphs[quad.graph] = []

        if quad in seen:
            return False

        seen.add(quad)
        self._graphs[quad.graph].append(quad)
        return True

    def build(self) -> Dataset:
        return Dataset._adopt(self._take())

    def _take(self) -> dict:
        """Hand over the per-graph sequences as tuples and spend the builder."""
        if self._built:
            raise RuntimeError("DatasetBuilder already built; create a new one")
        self._built = True
        graphs = {name: tuple(quads) for name, quads in self._graphs.items()}
        self._graphs = {}
        self._seen = {}
        return graphs
