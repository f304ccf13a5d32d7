"""
n8n Workflow DSL Compiler
=========================

Compiles a human-authored workflow DSL into n8n workflow JSON.

This package provides:
- A lexer and recursive-descent parser producing a typed AST
- Expression and ${...} template evaluation against workflow parameters and variables
- Per-node-type parameter reshaping into n8n's node schemas
- Validation of both the parsed AST and the generated workflow graph
"""

__version__ = "0.1.0"

from n8n_dsl.core.compiler import WorkflowCompiler, compile_dsl, compile_dsl_to_json
from n8n_dsl.models.schemas import CompileResult, CompilerOptions, ValidationIssue

__all__ = [
    "__version__",
    "WorkflowCompiler",
    "compile_dsl",
    "compile_dsl_to_json",
    "CompileResult",
    "CompilerOptions",
    "ValidationIssue",
]
