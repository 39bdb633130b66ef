"""Configuration management for ReTed.

Supports TOML configuration format with auto-discovery. Environment
variables override file values, CLI options override both.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "reted.toml"
DEFAULT_UPSTREAM_URL = "https://api.ted.com/v1"

ENV_API_KEY = "RETED_API_KEY"
ENV_UPSTREAM_URL = "RETED_UPSTREAM_URL"
ENV_PORT = "RETED_PORT"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class CacheConfig:
    """Talk cache configuration."""

    dir: Path = field(default_factory=lambda: Path(".cache"))
    ttl: int = 3600
    enabled: bool = True


@dataclass
class UpstreamConfig:
    """Talks API configuration."""

    base_url: str = DEFAULT_UPSTREAM_URL
    api_key: str | None = None
    timeout: float = 10.0


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    cache: CacheConfig
    upstream: UpstreamConfig
    config_path: Path | None = None

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Config":
        """Load configuration from file and environment.

        If config_path is provided, loads from that file.
        Otherwise, searches for reted.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file
            environ: Environment mapping (default: os.environ)

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            config = cls._load_from_file(config_path)
        else:
            discovered_path = cls._discover_config()
            if discovered_path is None:
                config = cls._default()
            else:
                config = cls._load_from_file(discovered_path)

        return config._apply_env(os.environ if environ is None else environ)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            cache=CacheConfig(),
            upstream=UpstreamConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            cache=cls._parse_cache(data.get("cache"), config_dir),
            upstream=cls._parse_upstream(data.get("upstream")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_cache(cls, data: object, config_dir: Path) -> CacheConfig:
        """Parse cache configuration section.

        Args:
            data: Raw cache section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            CacheConfig instance
        """
        if data is None:
            return CacheConfig(dir=config_dir / ".cache")

        if not isinstance(data, dict):
            raise ValueError("cache section must be a dictionary")

        cache_dir = data.get("dir", ".cache")
        if not isinstance(cache_dir, str):
            raise ValueError("cache.dir must be a string")

        ttl = data.get("ttl", 3600)
        if not isinstance(ttl, int) or isinstance(ttl, bool) or ttl < 0:
            raise ValueError("cache.ttl must be a non-negative integer")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("cache.enabled must be a boolean")

        return CacheConfig(dir=config_dir / cache_dir, ttl=ttl, enabled=enabled)

    @classmethod
    def _parse_upstream(cls, data: object) -> UpstreamConfig:
        if data is None:
            return UpstreamConfig()

        if not isinstance(data, dict):
            raise ValueError("upstream section must be a dictionary")

        base_url = data.get("base_url", DEFAULT_UPSTREAM_URL)
        if not isinstance(base_url, str):
            raise ValueError("upstream.base_url must be a string")

        api_key = data.get("api_key")
        if api_key is not None and not isinstance(api_key, str):
            raise ValueError("upstream.api_key must be a string")

        timeout = data.get("timeout", 10.0)
        if not isinstance(timeout, int | float) or isinstance(timeout, bool):
            raise ValueError("upstream.timeout must be a number")

        return UpstreamConfig(
            base_url=base_url, api_key=api_key, timeout=float(timeout)
        )

    def _apply_env(self, environ: Mapping[str, str]) -> "Config":
        """Apply environment variable overrides.

        Raises:
            ValueError: If RETED_PORT is not an integer
        """
        upstream = self.upstream
        if ENV_API_KEY in environ:
            upstream = replace(upstream, api_key=environ[ENV_API_KEY] or None)
        if ENV_UPSTREAM_URL in environ:
            upstream = replace(upstream, base_url=environ[ENV_UPSTREAM_URL])

        server = self.server
        if ENV_PORT in environ:
            try:
                port = int(environ[ENV_PORT])
            except ValueError as e:
                raise ValueError(f"{ENV_PORT} must be an integer") from e
            server = replace(server, port=port)

        return replace(self, server=server, upstream=upstream)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        cache_dir: Path | None = None,
        cache_enabled: bool | None = None,
        upstream_url: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            cache_dir: Override cache.dir
            cache_enabled: Override cache.enabled
            upstream_url: Override upstream.base_url

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        cache = self.cache
        if cache_dir is not None:
            cache = replace(cache, dir=cache_dir)
        if cache_enabled is not None:
            cache = replace(cache, enabled=cache_enabled)

        upstream = self.upstream
        if upstream_url is not None:
            upstream = replace(upstream, base_url=upstream_url)

        return replace(self, server=server, cache=cache, upstream=upstream)
