"""
Test Configuration
==================

Pytest configuration with shared fixtures: test settings, compiler
instances with deterministic collaborators, and sample DSL sources.
"""

from datetime import datetime, timezone
from typing import Dict
from unittest.mock import patch

import pytest
from pydantic_settings import SettingsConfigDict

from n8n_dsl.config.settings import Settings
from n8n_dsl.core.compiler import WorkflowCompiler
from n8n_dsl.models.schemas import CompilerOptions

from tests.utils.data_generators import DSLSourceGenerator

FIXED_NOW = datetime(2024, 1, 15, 9, 30, 0, tzinfo=timezone.utc)


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="N8N_DSL_")


@pytest.fixture(scope="session")
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture(scope="session", autouse=True)
def override_settings(test_settings: TestSettings):
    """Override application settings for testing."""
    with patch("n8n_dsl.core.compiler.get_settings", return_value=test_settings):
        yield test_settings


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed UTC timestamp."""
    return lambda: FIXED_NOW


@pytest.fixture
def fake_env() -> Dict[str, str]:
    """Environment values visible to env() lookups."""
    return {"API_TOKEN": "secret-token", "REGION": "eu-west-1"}


@pytest.fixture
def compiler_options() -> CompilerOptions:
    """Default compiler options with a fixed instance id."""
    return CompilerOptions(instance_id="test-instance")


@pytest.fixture
def compiler(compiler_options: CompilerOptions, fake_env, fixed_clock) -> WorkflowCompiler:
    """Compiler with deterministic environment and clock."""
    return WorkflowCompiler(compiler_options, env_lookup=fake_env.get, clock=fixed_clock)


@pytest.fixture
def strict_compiler(fake_env, fixed_clock) -> WorkflowCompiler:
    """Compiler that treats warnings as errors."""
    return WorkflowCompiler(
        CompilerOptions(strict=True, instance_id="test-instance"),
        env_lookup=fake_env.get,
        clock=fixed_clock,
    )


@pytest.fixture
def sample_dsl() -> str:
    """Manual trigger wired to an HTTP request."""
    return DSLSourceGenerator.manual_to_http()


@pytest.fixture
def branching_dsl() -> str:
    """Workflow with an if node and both branches."""
    return DSLSourceGenerator.branching_if()


@pytest.fixture
def parameterized_dsl() -> str:
    """Workflow using parameters, variables and templates."""
    return DSLSourceGenerator.with_parameters()
