"""
Pydantic Models and Schemas
===========================

Compiler options, validation findings and compile results shared by the
pipeline stages and the orchestrator.
"""

from typing import Optional, List, Tuple, Union, TYPE_CHECKING
from enum import Enum

from pydantic import BaseModel, Field

from .ast import Program
from .workflow import WorkflowDocument

if TYPE_CHECKING:
    from n8n_dsl.config.settings import Settings

Number = Union[int, float]


# Enums
class Severity(str, Enum):
    """Validation finding severity."""
    ERROR = "error"
    WARNING = "warning"


# Validation Models
class ValidationIssue(BaseModel):
    """A single validation error or warning."""
    message: str = Field(..., description="Human readable description")
    line: Optional[int] = Field(None, description="Source line, when known")
    column: Optional[int] = Field(None, description="Source column, when known")
    severity: Severity = Field(Severity.ERROR, description="error or warning")

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        location = f" (line {self.line}:{self.column})" if self.line is not None else ""
        return f"{self.severity.value}: {self.message}{location}"


# Option Models
class GeneratorOptions(BaseModel):
    """Options for workflow generation."""
    auto_layout: bool = Field(True, description="Place nodes left to right automatically")
    start_position: Tuple[Number, Number] = Field((0, 0), description="First node position")
    spacing: Number = Field(200, gt=0, description="Horizontal gap between nodes")
    instance_id: Optional[str] = Field(None, description="Fixed instance id instead of a fresh one")


class CompilerOptions(GeneratorOptions):
    """Options for the full compile pipeline."""
    validation_enabled: bool = Field(True, description="Run the AST and output validators")
    strict: bool = Field(False, description="Fail on validation warnings")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CompilerOptions":
        """Build options from environment settings."""
        return cls(
            auto_layout=settings.auto_layout,
            start_position=(settings.start_x, settings.start_y),
            spacing=settings.node_spacing,
            validation_enabled=settings.validation_enabled,
            strict=settings.strict,
        )


# Compile Results
class CompileResult(BaseModel):
    """Result of a compile operation."""
    success: bool = Field(..., description="Whether compilation succeeded")
    workflow: Optional[WorkflowDocument] = Field(None, description="Generated workflow")
    ast: Optional[Program] = Field(None, description="Parsed program")
    errors: List[ValidationIssue] = Field(default_factory=list, description="Blocking findings")
    warnings: List[ValidationIssue] = Field(default_factory=list, description="Non-blocking findings")
    processing_time: Optional[float] = Field(None, description="Compile time in seconds")
