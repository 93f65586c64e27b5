from typing import Optional, Sequence


class GeneratorError(ValueError):
    """Base class for fatal errors: the source unit yields no output."""


class UnhandledNodeKind(GeneratorError):
    def __init__(
        self, kind: str, path: Sequence[str], line: Optional[int] = None
    ) -> None:
        self.kind = kind
        self.path = list(path)
        self.line = line
        where = f" at line {line}" if line is not None else ""
        super().__init__(
            f"Unexpected node type: {kind}{where}. "
            f"Actual path is: {' -> '.join(self.path)}"
        )


class UnsupportedTypeGrammar(GeneratorError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unsupported type expression: {tag}")


class SourceSyntaxError(GeneratorError):
    def __init__(self, line: int, snippet: str = "") -> None:
        self.line = line
        self.snippet = snippet
        super().__init__(f"Source could not be parsed near line {line}: {snippet!r}")
