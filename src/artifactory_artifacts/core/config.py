"""
artifactory_artifacts.core.config - Configuration Management
==============================================================

Configuration for the artifact persistence core. It can be loaded from
multiple sources with the following priority (highest first):

    1. Explicit constructor arguments, including the values load_config()
       reads from a YAML file (artifactory.yaml)
    2. Environment variables (prefixed with ARTIFACTORY_)
    3. Default values defined in the models below

    A key present in the YAML file therefore wins over the
    matching environment variable; keys the file omits fall back to the
    environment.

Architecture Context:
    ArtifactsConfig is created once per build context and passed down:

        ArtifactsConfig
            ├── ServerConfig      → HttpObjectStore (endpoint, credentials, timeout)
            ├── RepositoryConfig  → PathResolver (base repo name, prefix)
            └── RetrySettings     → RetryPolicy of the HttpObjectStore

    RepositoryConfig is immutable: a build must never see its prefix change
    halfway through, or archive and download would disagree on keys.

Environment Variables:
    ARTIFACTORY_LOG_LEVEL=DEBUG
    ARTIFACTORY_SERVER__URL=https://repo.example.com/artifactory
    ARTIFACTORY_SERVER__USERNAME=ci
    ARTIFACTORY_REPOSITORY__BASE_REPO_NAME=my-generic-repo
    ARTIFACTORY_REPOSITORY__PREFIX=jenkins/
    ARTIFACTORY_RETRY__MAX_ATTEMPTS=5
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings

from artifactory_artifacts.core.exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = "artifactory.yaml"


# =============================================================================
# Repository Configuration
# =============================================================================
# Where in the remote repository a build's objects live. The prefix is used
# exactly as given: a missing trailing slash is a configuration mistake that
# is NOT silently corrected.
# =============================================================================
class RepositoryConfig(BaseModel):
    """Target repository and key prefix.

    Attributes:
        base_repo_name: Name of the generic repository (required).
        prefix: Optional key prefix, may contain '/' segments and spaces.
            Normally ends with '/' (e.g. "jenkins/").
    """

    model_config = ConfigDict(frozen=True)

    base_repo_name: str = Field(
        default="",
        description="Name of the generic repository objects are stored in",
    )
    prefix: str = Field(
        default="",
        description="Key prefix prepended to every object key (used as given)",
    )


class ServerConfig(BaseModel):
    """Remote repository endpoint and credentials.

    Attributes:
        url: Base URL of the repository server (without repository name).
        username: Optional basic-auth user.
        password: Optional basic-auth password or API token.
        timeout_seconds: Bound on every single network call.
    """

    url: str = Field(
        default="http://localhost:8081/artifactory",
        description="Base URL of the repository server",
    )
    username: Optional[str] = Field(default=None, description="Basic-auth user")
    password: Optional[str] = Field(default=None, description="Basic-auth password or token")
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=3600,
        description="Timeout in seconds for each network call",
    )


# =============================================================================
# Retry Settings
# =============================================================================
# Conservative defaults: 3 attempts in total, 200ms first back-off, doubling.
# These are tunables, not invariants.
# =============================================================================
class RetrySettings(BaseModel):
    """Tunable retry/backoff parameters for transient network failures."""

    max_attempts: int = Field(default=3, ge=1, le=20, description="Total attempts per call")
    initial_delay: float = Field(default=0.2, ge=0, le=30.0, description="First back-off in seconds")
    max_delay: float = Field(default=5.0, gt=0, le=300.0, description="Back-off cap in seconds")
    backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0, description="Growth per attempt")


# =============================================================================
# Main Configuration
# =============================================================================
class ArtifactsConfig(BaseSettings):
    """Top-level configuration for the artifact persistence core.

    Attributes:
        environment: Deployment environment.
        log_level: Minimum level of emitted structlog events.
        json_logs: Render logs as JSON lines instead of console output.
        chunk_size: Bytes per chunk when streaming uploads and downloads.
        server: Endpoint and credentials (see ServerConfig).
        repository: Base repository name and prefix (see RepositoryConfig).
        retry: Retry/backoff tunables (see RetrySettings).

    Example:
        >>> config = ArtifactsConfig(
        ...     repository=RepositoryConfig(base_repo_name="my-generic-repo", prefix="jenkins/"),
        ... )
    """

    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines (True) or human-readable console logs",
    )
    chunk_size: int = Field(
        default=64 * 1024,
        ge=1024,
        le=64 * 1024 * 1024,
        description="Streaming chunk size in bytes",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    model_config = {
        "env_prefix": "ARTIFACTORY_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


def ensure_repository_config(repository: RepositoryConfig) -> RepositoryConfig:
    """Fail fast on an unusable repository configuration.

    Raises:
        ConfigurationError: If the base repository name is blank.
    """
    if not repository.base_repo_name.strip():
        raise ConfigurationError(
            message="Base repository name is required",
            details={"field": "repository.base_repo_name"},
        )
    return repository


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> ArtifactsConfig:
    """Load configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML file. If None, 'artifactory.yaml' in the
            current directory is used when it exists, otherwise pure
            defaults + environment variables.

    The YAML values are passed as constructor arguments, so they take
    precedence over ARTIFACTORY_* environment variables.

    Returns:
        A fully validated ArtifactsConfig.

    Raises:
        ConfigurationError: If the YAML is malformed or values are invalid.
        FileNotFoundError: If an explicit path does not exist.
    """
    if path is None:
        default_path = Path(DEFAULT_CONFIG_FILE)
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Malformed configuration file: {path}",
                    error_code="CONFIG_PARSE_ERROR",
                    details={"path": path, "error": str(exc)},
                ) from exc
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    try:
        return ArtifactsConfig(**yaml_data)
    except ValidationError as exc:
        raise ConfigurationError(
            message=f"Invalid configuration: {exc.error_count()} error(s)",
            error_code="CONFIG_INVALID",
            details={"errors": exc.errors(include_url=False)},
        ) from exc
