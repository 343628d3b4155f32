"""Configuration management for hookfire.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **HOOKFIRE_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${HOOKFIRE_CONFIG_DIR}/hookfire.yaml`
   - Use case: Development, testing, custom deployments

2. **Current Working Directory**
   - Looks for: `./hookfire.yaml`
   - Use case: Project-local hook definitions

3. **~/.hookfire Directory** (Fallback)
   - Looks for: `~/.hookfire/hookfire.yaml`
   - Use case: Default user installations

The first existing `hookfire.yaml` found in this order is used.
If no `hookfire.yaml` is found, default configuration is applied.
Individual settings can also be overridden with `HOOKFIRE_*` environment
variables (e.g. `HOOKFIRE_HOOKS_FILE=/etc/webhook/hooks.json`).

Example hookfire.yaml:
---------------------
hookfire:
  hooks_file: hooks.json
  debug: false
  env_namespace: HOOK_
  response_headers:
    - name: Access-Control-Allow-Origin
      value: "*"
"""

import logging
import os
import threading
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hookfire.arguments import ENV_NAMESPACE
from hookfire.errors import HookConfigError
from hookfire.hook import Hooks, ResponseHeaders

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "hookfire.yaml"


class HookfireConfig(BaseSettings):
    """Main configuration for hookfire that reads from hookfire.yaml."""

    model_config = SettingsConfigDict(
        env_prefix="HOOKFIRE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Path to the hooks definition file (JSON or YAML)
    hooks_file: Path | None = None

    # Enable debug logging for all hookfire loggers
    debug: bool = False

    # Prefix for environment variables passed to hook commands
    env_namespace: str = ENV_NAMESPACE

    # Headers added to every hook response
    response_headers: ResponseHeaders = Field(default_factory=ResponseHeaders)

    # Path to hookfire config
    config_path: Path | None = None

    def load_hooks(self) -> Hooks:
        """Load the hooks referenced by this configuration.

        A relative hooks_file is resolved against the directory of the
        config file it came from.

        Returns:
            Loaded hooks, empty if no hooks_file is configured

        Raises:
            HookConfigError: If the hooks file cannot be loaded
        """
        if self.hooks_file is None:
            logger.warning("No hooks_file configured, no hooks loaded")
            return Hooks()

        hooks_path = self.hooks_file
        if not hooks_path.is_absolute() and self.config_path is not None:
            hooks_path = self.config_path.parent / hooks_path

        return Hooks.from_file(hooks_path)

    def apply_logging(self) -> None:
        """Raise hookfire loggers to DEBUG when debug is enabled."""
        if not self.debug:
            return
        hookfire_logger = logging.getLogger("hookfire")
        hookfire_logger.setLevel(logging.DEBUG)
        if not hookfire_logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(name)s:%(levelname)s: %(message)s"))
            hookfire_logger.addHandler(handler)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "HookfireConfig":
        """Load configuration from a hookfire.yaml file.

        Settings live under a top-level ``hookfire:`` key. Environment
        variables are applied first and file values override them.

        Args:
            yaml_path: Path to the hookfire.yaml file

        Returns:
            HookfireConfig instance

        Raises:
            HookConfigError: If the file cannot be read or parsed
        """
        instance = cls(config_path=yaml_path)

        if not yaml_path.exists():
            return instance

        try:
            with yaml_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise HookConfigError(f"couldn't read config {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise HookConfigError(f"config {yaml_path} must be a mapping")

        hookfire_data = data.get("hookfire", {}) or {}

        if "hooks_file" in hookfire_data:
            instance.hooks_file = Path(hookfire_data["hooks_file"])
        if "debug" in hookfire_data:
            instance.debug = bool(hookfire_data["debug"])
        if "env_namespace" in hookfire_data:
            instance.env_namespace = str(hookfire_data["env_namespace"])

        headers_data = hookfire_data.get("response_headers")
        if headers_data is not None:
            if isinstance(headers_data, list):
                instance.response_headers = ResponseHeaders.model_validate(headers_data)
            else:
                logger.warning("Invalid response_headers config format: %s", type(headers_data))

        return instance


# Global configuration instance
_config_instance: HookfireConfig | None = None
_config_lock = threading.Lock()


def _discover_config_path() -> Path | None:
    env_config_dir = os.environ.get("HOOKFIRE_CONFIG_DIR")
    if env_config_dir:
        logger.info("Using config directory from environment: %s", env_config_dir)
        return Path(env_config_dir) / CONFIG_FILENAME

    for config_dir in (Path.cwd(), Path.home() / ".hookfire"):
        candidate = config_dir / CONFIG_FILENAME
        if candidate.exists():
            return candidate

    return None


def get_config() -> HookfireConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                config_path = _discover_config_path()
                if config_path is not None and config_path.exists():
                    logger.info("Loading hookfire config from: %s", config_path)
                    _config_instance = HookfireConfig.from_yaml(config_path)
                else:
                    logger.info("No hookfire.yaml found, using default config")
                    _config_instance = HookfireConfig(config_path=config_path)

    return _config_instance


def set_config_instance(config: HookfireConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None
