"""Configuration management for gql-error-mock."""

from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Mock server configuration."""
    host: str = "127.0.0.1"
    port: int = 4000
    debug: bool = False
    threaded: bool = True
    graphql_path: str = "/graphql"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class ProbeConfig(BaseModel):
    """Probe run configuration."""
    base_url: Optional[str] = None  # None: start a server in-process
    timeout_ms: int = 30000
    request_timeout_ms: int = 50
    given_code: int = 500
    results_file: Optional[str] = None


class ReportingConfig(BaseModel):
    """Reporting configuration."""
    allure_enabled: bool = False
    output_dir: str = "allure-results"


class GqlMockConfig(BaseModel):
    """Main gql-error-mock configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "GqlMockConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML file.

        Returns:
            GqlMockConfig instance.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)


DEFAULT_CONFIG_PATHS = [
    Path("gqlmock.config.yaml"),
    Path("gqlmock.config.yml"),
    Path(".gqlmock.yaml"),
    Path.home() / ".gqlmock.yaml",
]


def load_config(config_path: Optional[str] = None) -> GqlMockConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, searches default locations.

    Returns:
        GqlMockConfig instance. Defaults are used when no file is found.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
    """
    if config_path is not None:
        if not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return GqlMockConfig.from_yaml(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return GqlMockConfig.from_yaml(str(path))

    return GqlMockConfig()


def create_default_config(output_path: str = "gqlmock.config.yaml", port: Optional[int] = None) -> GqlMockConfig:
    """Create a default configuration file.

    Args:
        output_path: Where to save the config file.
        port: Optional listening port to write instead of the default.

    Returns:
        The created GqlMockConfig.
    """
    config = GqlMockConfig()
    if port is not None:
        config.server.port = port

    with open(output_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

    return config
