"""
Compiler Errors
===============

Exception taxonomy for the compilation pipeline. Lexing, parsing and
generation failures are fatal for a compile call; validation findings are
reported as ValidationIssue values instead.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from n8n_dsl.models.schemas import ValidationIssue


class CompilationError(Exception):
    """Base exception for fatal compilation failures."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.message} at line {self.line}"
        return f"{self.message} at line {self.line}, column {self.column}"


class LexError(CompilationError):
    """Exception raised for malformed tokens and unterminated literals."""

    pass


class ParseError(CompilationError):
    """Exception raised on the first grammar violation."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message, line, column)


class ExpressionError(CompilationError):
    """Exception raised when an expression cannot be evaluated."""

    pass


class UnknownNodeTypeError(CompilationError):
    """Exception raised when a node uses a DSL type tag with no target type."""

    def __init__(self, node_type: str, line: Optional[int] = None, column: Optional[int] = None):
        self.node_type = node_type
        super().__init__(f"Unknown node type: {node_type}", line, column)


class UnsupportedModuleReferenceError(CompilationError):
    """Exception raised when a module declaration reaches generation."""

    def __init__(
        self,
        module_name: str,
        module_path: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.module_name = module_name
        self.module_path = module_path
        super().__init__(
            f"Module resolution is not supported: '{module_name}' = \"{module_path}\"",
            line,
            column,
        )


class UnknownConnectionEndpointError(CompilationError):
    """Exception raised when a connection names a node that was not generated."""

    def __init__(
        self,
        node_name: str,
        role: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.node_name = node_name
        self.role = role
        super().__init__(f"{role.capitalize()} node '{node_name}' not found", line, column)


class CompilationFailedError(Exception):
    """Exception raised by JSON compilation helpers when a compile fails."""

    def __init__(self, issues: List["ValidationIssue"]):
        self.issues = issues
        details = "\n".join(issue.message for issue in issues)
        super().__init__(f"Compilation failed:\n{details}")
