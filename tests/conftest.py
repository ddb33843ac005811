"""Shared pytest fixtures for apishape tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from dotenv import load_dotenv
from hypothesis import settings

from apishape.adapters.php import DeclarationWalker, SyntaxParser, TypeInferrer
from apishape.core.config import AnalyzerConfig
from apishape.docblock import DocBlockParser

# Load environment variables from .env file
load_dotenv()

# Configure hypothesis for property-based testing
settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def config() -> AnalyzerConfig:
    """Configuration with defaults only, ignoring the environment and .env."""
    with patch.dict(os.environ, {}, clear=True):
        return AnalyzerConfig(_env_file=None)


@pytest.fixture
def php_sample_path() -> Path:
    return FIXTURES / "php_sample"


@pytest.fixture
def php_broken_path() -> Path:
    return FIXTURES / "php_broken"


@pytest.fixture
def snapshot_path() -> Path:
    return FIXTURES / "reflection_snapshot.json"


@pytest.fixture
def parser(config: AnalyzerConfig) -> SyntaxParser:
    return SyntaxParser(config)


@pytest.fixture
def inferrer() -> TypeInferrer:
    return TypeInferrer()


@pytest.fixture
def walker(parser: SyntaxParser, inferrer: TypeInferrer) -> DeclarationWalker:
    return DeclarationWalker(parser, inferrer)


@pytest.fixture
def docblock_parser() -> DocBlockParser:
    return DocBlockParser()


@pytest.fixture
def user_service_snapshot(php_sample_path: Path) -> dict[str, Any]:
    """Reflection data for App\\Services\\UserService, pointing at the fixture source."""
    return {
        "classes": [
            {
                "name": "App\\Services\\UserService",
                "parent": "App\\Services\\BaseService",
                "interfaces": ["Countable"],
                "file": str(php_sample_path / "app" / "Services" / "UserService.php"),
                "line": 7,
                "methods": [
                    {"name": "find", "parameters": [{"name": "id", "position": 0}]},
                    {"name": "count", "return_type": {"kind": "named", "name": "int"}},
                    {
                        "name": "boot",
                        "class_name": "App\\Services\\BaseService",
                        "static": True,
                        "return_type": {"kind": "named", "name": "void"},
                    },
                ],
                "properties": [
                    {
                        "name": "connection",
                        "visibility": "protected",
                        "type": {"kind": "named", "name": "string", "allows_null": True},
                    }
                ],
                "constants": [{"name": "VERSION", "value": 2}],
            }
        ]
    }
