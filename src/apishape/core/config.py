"""Global configuration for apishape.

Values can be overridden via environment variables with the APISHAPE_ prefix
or a local ``.env`` file. Components accept an explicit ``AnalyzerConfig``;
``get_config()`` is only their default.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class AnalyzerConfig(BaseSettings):
    """apishape configuration settings.

    Example: APISHAPE_FILE_GLOB="*.inc" overrides file_glob.
    """

    file_glob: str = Field(
        default="*.php",
        min_length=1,
        description="Glob used when analyzing a directory tree",
    )
    source_encoding: str = Field(
        default="utf-8",
        description="Encoding of source files; other encodings are transcoded to UTF-8 before parsing",
    )
    collect_parse_errors: bool = Field(
        default=True,
        description="Record tree-sitter ERROR/MISSING nodes as ParseError entries",
    )
    follow_source_for_entities: bool = Field(
        default=True,
        description="Walk an introspected entity's source file and merge the results",
    )
    include_reflection_only_members: bool = Field(
        default=True,
        description="Keep members only reflection knows about (e.g. inherited methods)",
    )
    max_error_count: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Upper bound on ParseError records kept per parse",
    )

    model_config = {
        "env_prefix": "APISHAPE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_config() -> AnalyzerConfig:
    """Get cached configuration instance.

    Returns:
        AnalyzerConfig singleton instance.
    """
    return AnalyzerConfig()


def reload_config() -> AnalyzerConfig:
    """Reload configuration (clears cache).

    Returns:
        Fresh AnalyzerConfig instance.
    """
    get_config.cache_clear()
    return get_config()
