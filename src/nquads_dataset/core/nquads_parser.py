"""
N-Quads Parser

Grammar-based parser turning an N-Quads document into an RDF Dataset.

N-Quads format:
    subject predicate object [graph] .

Example:
    _:node1 <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <http://schema.org/Event> <https://example.com/> .

Statements without a graph label go to the "@default" graph. Quads repeated
within a graph are stored once (first occurrence wins).
"""

import regex as re  # Faster than stdlib re
import logging
from dataclasses import dataclass, asdict
from typing import Iterator, Optional

from .exceptions import GrammarMismatch, InvalidInputKind
from .rdf_dataset import (
    DEFAULT_GRAPH,
    BlankNode,
    Dataset,
    DatasetBuilder,
    IRI,
    Literal,
    Node,
    Quad,
)

logger = logging.getLogger(__name__)

# Token patterns for N-Quads
# Based on W3C N-Quads spec: https://www.w3.org/TR/n-quads/

UCHAR = r'\\u[0-9A-Fa-f]{4}|\\U[0-9A-Fa-f]{8}'
ECHAR = r'\\[tbnrf"\'\\]'

PN_CHARS_BASE = (
    r'A-Za-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D'
    r'\u037F-\u1FFF\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF'
    r'\uF900-\uFDCF\uFDF0-\uFFFD\U00010000-\U000EFFFF'
)
PN_CHARS_U = PN_CHARS_BASE + r'_:'
PN_CHARS = PN_CHARS_U + r'\-0-9\u00B7\u0300-\u036F\u203F-\u2040'

# IRI reference body: <...> without the brackets
IRI_BODY = rf'(?:[^\x00-\x20<>"{{}}|^`\\]|{UCHAR})*'

# Blank node label: _:label (kept whole, prefix included)
BLANK_NODE_LABEL = rf'_:[{PN_CHARS_U}0-9](?:[{PN_CHARS}.]*[{PN_CHARS}])?'

# String literal body: "..." without the quotes
STRING_BODY = rf'(?:[^"\\\n\r]|{ECHAR}|{UCHAR})*'

LANGTAG = r'[a-zA-Z]+(?:-[a-zA-Z0-9]+)*'


def _iri(name: str) -> str:
    return rf'<(?P<{name}>{IRI_BODY})>'


def _blank_node(name: str) -> str:
    return rf'(?P<{name}>{BLANK_NODE_LABEL})'


# Subject: IRI or blank node
SUBJECT_PATTERN = rf'(?:{_iri("subject_iri")}|{_blank_node("subject_bnode")})'

# Predicate: IRI only
PREDICATE_PATTERN = _iri('predicate')

# Object: IRI, blank node, or literal with optional language tag or datatype
LITERAL_PATTERN = (
    rf'"(?P<literal>{STRING_BODY})"'
    rf'(?:@(?P<language>{LANGTAG})|\s*\^\^\s*{_iri("datatype")})?'
)
OBJECT_PATTERN = (
    rf'(?:{_iri("object_iri")}|{_blank_node("object_bnode")}|{LITERAL_PATTERN})'
)

# Graph label: IRI or blank node (optional)
GRAPH_PATTERN = rf'(?:{_iri("graph_iri")}|{_blank_node("graph_bnode")})'

# Full statement, matched at the current position
STATEMENT_RE = re.compile(
    rf'{SUBJECT_PATTERN}\s*{PREDICATE_PATTERN}\s*{OBJECT_PATTERN}'
    rf'\s*(?:{GRAPH_PATTERN}\s*)?\.'
)

# Whitespace and comments between statements
SKIP_RE = re.compile(r'(?:\s+|#[^\r\n]*)*')

EOL_RE = re.compile(r'[\r\n]')

ESCAPE_RE = re.compile(
    r'\\u(?P<high>[Dd][89ABab][0-9A-Fa-f]{2})\\u(?P<low>[Dd][C-Fc-f][0-9A-Fa-f]{2})'
    r'|\\u(?P<short>[0-9A-Fa-f]{4})'
    r'|\\U(?P<long>[0-9A-Fa-f]{8})'
    r'|\\(?P<echar>[tbnrf"\'\\])'
)

ECHAR_MAP = {
    't': '\t',
    'b': '\b',
    'n': '\n',
    'r': '\r',
    'f': '\f',
    '"': '"',
    "'": "'",
    '\\': '\\',
}


def _replace_escape(match) -> str:
    if match.group('echar') is not None:
        return ECHAR_MAP[match.group('echar')]

    if match.group('high') is not None:
        # UTF-16 surrogate pair written as two \u escapes
        high = int(match.group('high'), 16)
        low = int(match.group('low'), 16)
        return chr(0x10000 + ((high - 0xD800) << 10) + (low - 0xDC00))

    codepoint = int(match.group('short') or match.group('long'), 16)
    if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
        # Not a valid code point; keep the escape as written
        return match.group(0)
    return chr(codepoint)


def unescape(value: str) -> str:
    """Decode ECHAR and UCHAR escape sequences."""
    if '\\' not in value:
        return value
    return ESCAPE_RE.sub(_replace_escape, value)


@dataclass
class ParseStats:
    """Counters filled in by a parse call. Owned by the caller."""
    statements_matched: int = 0
    statements_skipped: int = 0
    duplicates_dropped: int = 0
    quads_stored: int = 0
    graphs: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class NQuadsParser:
    """
    Parser for N-Quads documents.

    Instances only carry configuration, so one parser can be shared and
    used for any number of (concurrent) parse calls.
    """

    def __init__(self, strict: bool = False, unescape: bool = False):
        """
        Initialize parser.

        Args:
            strict: Raise GrammarMismatch on the first statement that does
                    not match the grammar instead of skipping it.
            unescape: Decode escape sequences in literal values and IRIs.
                      By default they are kept as written.
        """
        self.strict = strict
        self.unescape = unescape

    def parse(self, text: str, stats: Optional[ParseStats] = None) -> Dataset:
        """
        Parse a complete N-Quads document.

        Args:
            text: The document
            stats: Optional ParseStats to accumulate counters into

        Returns:
            A Dataset keyed by graph name
        """
        if not isinstance(text, str):
            raise InvalidInputKind(text)

        if stats is None:
            stats = ParseStats()

        builder = DatasetBuilder()

        for match in self._statements(text, stats):
            stats.statements_matched += 1
            quad = self._build_quad(match)
            if builder.add(quad):
                stats.quads_stored += 1
            else:
                stats.duplicates_dropped += 1

        dataset = builder.build()
        stats.graphs += len(dataset)

        logger.debug(
            f"Parsed {stats.statements_matched:,} statements into "
            f"{dataset.quad_count():,} quads across {len(dataset)} graph(s) "
            f"({stats.statements_skipped:,} skipped, "
            f"{stats.duplicates_dropped:,} duplicates)"
        )
        return dataset

    def parse_line(self, line: str) -> Optional[Quad]:
        """
        Parse a single N-Quads statement.

        Returns:
            Quad object or None if line is empty/comment (or invalid, unless
            the parser is strict)
        """
        if not isinstance(line, str):
            raise InvalidInputKind(line)

        for match in self._statements(line, ParseStats()):
            return self._build_quad(match)
        return None

    def _statements(self, text: str, stats: ParseStats) -> Iterator:
        """Yield a grammar match for each statement, in document order."""
        pos = 0
        end = len(text)
        # Line bookkeeping, advanced lazily up to `counted`
        line_no = 1
        line_start = 0
        counted = 0

        while True:
            pos = SKIP_RE.match(text, pos).end()
            if pos >= end:
                return

            match = STATEMENT_RE.match(text, pos)
            if match is not None:
                yield match
                pos = match.end()
                continue

            # Resynchronize at the next line
            eol = EOL_RE.search(text, pos)
            line_end = eol.start() if eol else end
            if self.strict or logger.isEnabledFor(logging.DEBUG):
                line_no += text.count('\n', counted, pos)
                last_newline = text.rfind('\n', counted, pos)
                if last_newline != -1:
                    line_start = last_newline + 1
                counted = pos

                bad = text[pos:line_end]
                if self.strict:
                    raise GrammarMismatch(line_no, pos - line_start + 1, bad)
                logger.debug(f"Skipping invalid statement at line {line_no}: {bad[:100]}...")

            stats.statements_skipped += 1
            pos = line_end

    def _build_quad(self, match) -> Quad:
        graph = DEFAULT_GRAPH
        if match.group('graph_iri') is not None:
            graph = self._iri_value(match.group('graph_iri'))
        elif match.group('graph_bnode') is not None:
            graph = match.group('graph_bnode')

        return Quad(
            subject=self._subject_node(match),
            predicate=IRI(self._iri_value(match.group('predicate'))),
            object=self._object_node(match),
            graph=graph,
        )

    def _subject_node(self, match) -> Node:
        if match.group('subject_iri') is not None:
            return IRI(self._iri_value(match.group('subject_iri')))
        return BlankNode(match.group('subject_bnode'))

    def _object_node(self, match) -> Node:
        # Order matters: IRI, then blank node, then literal
        if match.group('object_iri') is not None:
            return IRI(self._iri_value(match.group('object_iri')))

        if match.group('object_bnode') is not None:
            return BlankNode(match.group('object_bnode'))

        value = match.group('literal')
        if self.unescape:
            value = unescape(value)

        if match.group('language') is not None:
            return Literal(value, language=match.group('language'))

        if match.group('datatype') is not None:
            return Literal(value, datatype=IRI(self._iri_value(match.group('datatype'))))

        return Literal(value)

    def _iri_value(self, value: str) -> str:
        if self.unescape:
            return unescape(value)
        return value


def parse(text: str, strict: bool = False, unescape: bool = False,
          stats: Optional[ParseStats] = None) -> Dataset:
    """Parse an N-Quads document into a Dataset."""
    return NQuadsParser(strict=strict, unescape=unescape).parse(text, stats=stats)
