"""Configuration management for Ultiserve.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from ultiserve.core.highlight import DEFAULT_THEME

CONFIG_FILENAME = "ultiserve.toml"
DEFAULT_ADDRESS = "127.0.0.1:8080"


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class ServeConfig:
    """Served directory configuration."""

    root_dir: Path = field(default_factory=lambda: Path("."))


@dataclass(frozen=True)
class HighlightConfig:
    """Syntax highlighting configuration."""

    theme: str = DEFAULT_THEME


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    server: ServerConfig
    serve: ServeConfig
    highlight: HighlightConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for ultiserve.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls.default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def default(cls) -> "Config":
        """Create config with all defaults."""
        return cls(
            server=ServerConfig(),
            serve=ServeConfig(),
            highlight=HighlightConfig(),
        )

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
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            serve=cls._parse_serve(data.get("serve"), config_dir),
            highlight=cls._parse_highlight(data.get("highlight")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section.

        Args:
            data: Raw server section data

        Returns:
            ServerConfig instance
        """
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
        if not 0 <= port <= 65535:
            raise ValueError("server.port must be between 0 and 65535")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_serve(cls, data: object, config_dir: Path) -> ServeConfig:
        """Parse serve configuration section.

        Args:
            data: Raw serve section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ServeConfig instance
        """
        if data is None:
            return ServeConfig(root_dir=config_dir)

        if not isinstance(data, dict):
            raise ValueError("serve section must be a dictionary")

        root_dir = data.get("root_dir", ".")
        if not isinstance(root_dir, str):
            raise ValueError("serve.root_dir must be a string")

        return ServeConfig(root_dir=config_dir / root_dir)

    @classmethod
    def _parse_highlight(cls, data: object) -> HighlightConfig:
        if data is None:
            return HighlightConfig()

        if not isinstance(data, dict):
            raise ValueError("highlight section must be a dictionary")

        theme = data.get("theme", DEFAULT_THEME)
        if not isinstance(theme, str):
            raise ValueError("highlight.theme must be a string")

        return HighlightConfig(theme=theme)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        root_dir: Path | None = None,
        theme: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            root_dir: Override serve.root_dir
            theme: Override highlight.theme

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

        serve = self.serve
        if root_dir is not None:
            serve = replace(self.serve, root_dir=root_dir)

        highlight = self.highlight
        if theme is not None:
            highlight = replace(self.highlight, theme=theme)

        return replace(self, server=server, serve=serve, highlight=highlight)


def parse_address(value: str) -> tuple[str, int]:
    """Split a "host:port" bind address.

    IPv6 hosts may be given in brackets, e.g. "[::1]:8080".

    Args:
        value: Address string

    Returns:
        Tuple of (host, port)

    Raises:
        ValueError: If the address is malformed
    """
    host, sep, port_str = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Expected HOST:PORT, got {value!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in address {value!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range in address {value!r}")

    return host, port
