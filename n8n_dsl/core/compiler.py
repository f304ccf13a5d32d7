"""
Workflow Compiler
=================

Orchestrates the pipeline: lexing, parsing, AST validation, generation and
output validation. Fatal stage failures are converted into error findings
on the returned CompileResult; nothing raises out of ``compile``.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from n8n_dsl.config.logging import get_logger
from n8n_dsl.config.settings import get_settings
from n8n_dsl.core.dsl.lexer import Lexer
from n8n_dsl.core.dsl.parser import Parser
from n8n_dsl.core.errors import CompilationError, CompilationFailedError
from n8n_dsl.core.generator.evaluator import Clock, EnvLookup, FileLoader
from n8n_dsl.core.generator.generator import WorkflowGenerator
from n8n_dsl.core.validation.validator import WorkflowValidator
from n8n_dsl.models.ast import Program
from n8n_dsl.models.schemas import CompileResult, CompilerOptions, Severity, ValidationIssue
from n8n_dsl.models.workflow import WorkflowDocument

logger = get_logger(__name__)


class WorkflowCompiler:
    """Compiles DSL source into n8n workflow documents."""

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        env_lookup: Optional[EnvLookup] = None,
        clock: Optional[Clock] = None,
        file_loader: Optional[FileLoader] = None,
    ) -> None:
        self.options = options or CompilerOptions.from_settings(get_settings())
        self.env_lookup = env_lookup
        self.clock = clock
        self.file_loader = file_loader
        self.logger: Any = logger.bind(component="compiler")  # structlog.BoundLoggerBase

    def compile(self, source: str) -> CompileResult:
        """
        Compile DSL source.

        Args:
            source: DSL source text

        Returns:
            Compile result with the workflow on success and all findings
        """
        start_time = datetime.now(timezone.utc)
        self.logger.info("Compiling workflow", source_length=len(source))

        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []
        program: Optional[Program] = None
        workflow: Optional[WorkflowDocument] = None

        try:
            program, warnings = self._parse(source)

            if self.options.validation_enabled:
                for issue in WorkflowValidator().validate_program(program):
                    (errors if issue.is_error else warnings).append(issue)

            if self.options.strict and warnings:
                errors.extend(_as_errors(warnings))
                warnings = []

            if not errors:
                workflow = WorkflowGenerator(
                    self.options,
                    env_lookup=self.env_lookup,
                    clock=self.clock,
                    file_loader=self.file_loader,
                ).generate(program)

                if self.options.validation_enabled:
                    errors.extend(WorkflowValidator().validate_workflow(workflow))

        except CompilationError as e:
            errors.append(ValidationIssue(message=e.message, line=e.line, column=e.column))

        processing_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        success = not errors and workflow is not None

        if success:
            self.logger.info(
                "Compilation completed",
                nodes=len(workflow.nodes) if workflow else 0,
                warnings=len(warnings),
                processing_time=processing_time,
            )
        else:
            self.logger.warning(
                "Compilation failed",
                errors=[str(issue) for issue in errors],
                processing_time=processing_time,
            )

        return CompileResult(
            success=success,
            workflow=workflow if success else None,
            ast=program,
            errors=errors,
            warnings=warnings,
            processing_time=processing_time,
        )

    def compile_to_json(self, source: str) -> str:
        """
        Compile DSL source to n8n workflow JSON.

        Args:
            source: DSL source text

        Returns:
            Workflow JSON indented with two spaces

        Raises:
            CompilationFailedError: If compilation did not succeed
        """
        result = self.compile(source)
        if not result.success or result.workflow is None:
            raise CompilationFailedError(result.errors)
        return result.workflow.to_json(indent=2)

    def validate_only(self, source: str) -> List[ValidationIssue]:
        """
        Lex, parse and validate DSL source without generating output.

        Args:
            source: DSL source text

        Returns:
            Lexer warnings and AST findings, or the fatal lex/parse error
        """
        try:
            program, warnings = self._parse(source)
        except CompilationError as e:
            return [ValidationIssue(message=e.message, line=e.line, column=e.column)]
        return warnings + WorkflowValidator().validate_program(program)

    @staticmethod
    def _parse(source: str) -> Tuple[Program, List[ValidationIssue]]:
        lexer = Lexer(source)
        tokens = lexer.tokenize()
        program = Parser(tokens).parse()
        return program, list(lexer.warnings)


def _as_errors(issues: List[ValidationIssue]) -> List[ValidationIssue]:
    return [issue.model_copy(update={"severity": Severity.ERROR}) for issue in issues]


def compile_dsl(source: str, options: Optional[CompilerOptions] = None) -> CompileResult:
    """
    Compile DSL source with the given options.

    Args:
        source: DSL source text
        options: Compiler options; environment settings when omitted

    Returns:
        Compile result
    """
    return WorkflowCompiler(options).compile(source)


def compile_dsl_to_json(source: str, options: Optional[CompilerOptions] = None) -> str:
    """Compile DSL source straight to workflow JSON."""
    return WorkflowCompiler(options).compile_to_json(source)
