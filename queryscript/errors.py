from typing import Any, Optional


class QueryError(Exception):
    """Base class for every error the engine reports.

    Each error carries a short `name` identifying its kind, a human readable
    `message` and, when known, the `span` of the source that caused it.
    """
    name = 'QueryError'

    def __init__(self, message: str, span: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"

    def describe(self, source: Optional[str] = None) -> str:
        """Render the error, with a line/column suffix when the span is known."""
        text = str(self)
        if source is not None and self.span is not None:
            line, column = self.span.location(source)
            text += f" at line {line}, column {column}"
        return text


class LexingError(QueryError):
    name = 'LexingError'


class ParsingError(QueryError):
    """Grammar violation. `token` is the offending token, None at end of input."""
    name = 'ParsingError'

    def __init__(self, message: str, token: Optional[Any] = None, span: Optional[Any] = None):
        super().__init__(message, span)
        self.token = token


class VariableNotDefined(QueryError):
    name = 'VariableNotDefined'

    def __init__(self, variable: str, span: Optional[Any] = None):
        super().__init__(f"variable {variable} is not defined", span)
        self.variable = variable


class InvalidType(QueryError):
    name = 'InvalidType'


class MathError(QueryError):
    name = 'MathError'


class EmptyProgramError(QueryError):
    name = 'EmptyProgram'

    def __init__(self, span: Optional[Any] = None):
        super().__init__('program has no statements', span)


class NestingTooDeep(QueryError):
    name = 'NestingTooDeep'

    def __init__(self, span: Optional[Any] = None):
        super().__init__('expression nests too deeply', span)
