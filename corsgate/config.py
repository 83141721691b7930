"""Config loading for corsgate.

Reads `.corsgate/config.yaml` (or `~/.corsgate/config.yaml`).
Raises SystemExit on parse errors, a missing `version` field or an invalid
CORS policy value. If no config file is found, returns default values (safe
to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. CORSGATE_CONFIG environment variable (if set)
  3. `.corsgate/config.yaml` (working directory — for development)
  4. `~/.corsgate/config.yaml` (home directory — for production deployments)

Environment variable overrides:
  CORSGATE_PORT         — overrides server.port
  CORSGATE_ALLOW_ORIGIN — overrides cors.allowOrigin
  CORSGATE_CONFIG       — sets an explicit config file path to try first

Example:

    version: 1
    server:
      host: 127.0.0.1
      port: 8080
    cors:
      allowOrigin: "https://app.example.com https://admin.example.com"
      supportedMethods: "GET, POST, PUT, OPTIONS"
      supportedHeaders: "Content-Type, X-Requested-With"
      supportsCredentials: true
      maxAge: 3600
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional

import yaml

from corsgate.policy.config import KEY_ALLOW_ORIGIN, ConfigError, PolicyConfig
from corsgate.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".corsgate/config.yaml",
    os.path.expanduser("~/.corsgate/config.yaml"),
]


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """HTTP binding configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class Config:
    """Root configuration object populated from .corsgate/config.yaml.

    ``cors`` is the raw string-keyed policy mapping; it is parsed into a
    PolicyConfig exactly once, by :meth:`policy`.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    cors: dict[str, Any] = field(default_factory=dict)
    path: Optional[str] = None

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): If the server or cors section is not a mapping.
        """
        server_raw = raw.get("server") or {}
        if not isinstance(server_raw, dict):
            _fail("CONFIG ERROR: 'server' must be a mapping.")
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 8080),
        )

        cors_raw = raw.get("cors") or {}
        if not isinstance(cors_raw, dict):
            _fail("CONFIG ERROR: 'cors' must be a mapping of policy keys to values.")

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            server=server,
            cors={str(k): v for k, v in cors_raw.items()},
            path=path,
        )

    def policy(self) -> PolicyConfig:
        """Parse the cors section into an immutable PolicyConfig.

        Raises:
            SystemExit(1): On any invalid policy value (bad origin URL,
                           method name, header name, boolean or integer).
        """
        try:
            policy = PolicyConfig.from_mapping(self.cors)
        except ConfigError as exc:
            source = self.path or "defaults"
            _fail(
                f"CONFIG ERROR: Invalid CORS policy in {source}: {exc}\n"
                "corsgate refuses to start with an invalid policy."
            )
        logger.info(
            "CORS policy built",
            allow_any_origin=policy.allow_any_origin,
            allowed_origins=sorted(policy.allowed_origins),
            suffix_matching=policy.allow_origin_suffix_matching,
            supported_methods=[m.value for m in policy.method_order],
            supports_credentials=policy.supports_credentials,
            max_age=policy.max_age,
        )
        return policy


# ─── Config loading ───────────────────────────────────────────────────────────


def _candidate_paths(config_path: Optional[str]) -> list[str]:
    """Explicit argument first, then CORSGATE_CONFIG, then the default locations."""
    explicit = [config_path, os.environ.get("CORSGATE_CONFIG")]
    return [p for p in explicit if p] + list(DEFAULT_CONFIG_PATHS)


def _find_config_file(candidates: list[str]) -> Optional[str]:
    for candidate in candidates:
        path = os.path.expanduser(candidate)
        if os.path.isfile(path):
            return path
    return None


def _read_mapping(path: str) -> dict:
    """Parse ``path`` as YAML and check it is a versioned mapping.

    Raises:
        SystemExit(1): Unreadable file, YAML syntax error, non-mapping document,
                       missing or unsupported ``version``.
    """
    missing_version = (
        f"CONFIG ERROR: {path} is missing the required 'version' field.\n"
        "Add 'version: 1' to the top of your config file."
    )

    try:
        with open(path) as fh:
            document = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {path}: {exc}\n"
            "corsgate refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {path}: {exc}")

    if document is None:
        _fail(missing_version)
    if not isinstance(document, dict):
        _fail(
            f"CONFIG ERROR: {path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )
    if document.get("version") is None:
        _fail(missing_version)
    if document["version"] not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {document['version']}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
    return document


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate corsgate configuration.

    No file at any search path means defaults (not an error). A file that is
    found but invalid is reported on stderr and stops startup. Environment
    overrides are applied last in both cases.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, non-mapping sections, or an invalid ``CORSGATE_PORT``.
    """
    candidates = _candidate_paths(config_path)
    path = _find_config_file(candidates)

    if path is None:
        logger.info("No config file found, using defaults", searched=candidates)
        config = Config.defaults()
    else:
        logger.info("Loading config", path=path)
        config = Config.from_dict(_read_mapping(path), path=path)

    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "SECURITY WARNING: corsgate is configured to bind on 0.0.0.0 (all interfaces). "
            "Recommended: use server.host: '127.0.0.1' behind a reverse proxy."
        )

    logger.info(
        "Config loaded",
        path=path,
        port=config.server.port,
        policy_keys=sorted(config.cors),
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Handles:
      CORSGATE_PORT         — overrides config.server.port (integer)
      CORSGATE_ALLOW_ORIGIN — overrides config.cors["allowOrigin"]

    Raises:
        SystemExit(1): If CORSGATE_PORT is set but not a valid integer.
    """
    env_port = os.environ.get("CORSGATE_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            _fail(
                f"CONFIG ERROR: CORSGATE_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )

    env_origin = os.environ.get("CORSGATE_ALLOW_ORIGIN")
    if env_origin is not None:
        config.cors.pop("cors." + KEY_ALLOW_ORIGIN, None)
        config.cors[KEY_ALLOW_ORIGIN] = env_origin
