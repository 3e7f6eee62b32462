"""Exceptions raised while parsing N-Quads documents."""


class NQuadsError(Exception):
    """Base class for N-Quads parsing errors."""


class InvalidInputKind(NQuadsError, TypeError):
    """
    Raised when the parser is handed something other than text.

    Raised before any parsing is attempted.
    """
    def __init__(self, value):
        self.kind = type(value).__name__
        super().__init__(f"Input must be a string, but got {self.kind}")


class GrammarMismatch(NQuadsError, ValueError):
    """
    Raised in strict mode when a statement does not match the N-Quads
    grammar.
    """
    def __init__(self, line: int, column: int, text: str):
        self.line = line
        self.column = column
        self.text = text
        super().__init__(
            f"Invalid N-Quads statement at line {line}, column {column}: {text[:100]}"
        )
