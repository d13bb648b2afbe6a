"""Gateway configuration: YAML defaults overridden by environment variables."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

DEFAULT_MODEL_QUEUE = (
    "gemini-3-flash-preview",
    "gemini-2.5-flash",
    "gemini-1.5-flash",
)
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class ConfigError(RuntimeError):
    """Raised when the gateway cannot be configured to start."""


@dataclass(frozen=True)
class GatewayConfig:
    """Process-wide settings injected into the dispatcher and app."""
    api_key: str
    model_queue: tuple[str, ...] = DEFAULT_MODEL_QUEUE
    base_url: str = DEFAULT_BASE_URL
    max_retries: int = 2
    cycle_delay_ms: int = 1500
    network_delay_ms: int = 1000
    timeout_s: float = 60.0
    connect_timeout_s: float = 10.0
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("GOOGLE_API_KEY missing")
        if not self.model_queue:
            raise ConfigError("Model queue is empty")
        if self.max_retries < 0:
            raise ConfigError("max_retries must be >= 0")

    def endpoint_for(self, model: str) -> str:
        return f"{self.base_url.rstrip('/')}/models/{model}:generateContent"


def load_cfg(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    with open(p, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _split_queue(raw: str) -> tuple[str, ...]:
    return tuple(m.strip() for m in raw.split(",") if m.strip())


def _queue_from_cfg(value: Any) -> tuple[str, ...]:
    if not value:
        return DEFAULT_MODEL_QUEUE
    if isinstance(value, str):
        return _split_queue(value)
    if isinstance(value, list) and all(isinstance(m, str) for m in value):
        return tuple(m.strip() for m in value if m.strip())
    raise ConfigError("model_queue must be a string or a list of strings")


def load_config(path: str = "configs/gateway.yaml") -> GatewayConfig:
    """
    Build the gateway configuration.

    Values come from the optional YAML file at ``path`` and are overridden by
    environment variables (a local ``.env`` is loaded first).

    Raises:
        ConfigError: if GOOGLE_API_KEY is unset or the model queue is empty.
    """
    load_dotenv(override=False)
    cfg = load_cfg(path)

    queue = _queue_from_cfg(cfg.get("model_queue"))
    env_queue = os.getenv("GEMINI_MODEL_QUEUE", "")
    if env_queue.strip():
        queue = _split_queue(env_queue)

    try:
        return GatewayConfig(
            api_key=os.getenv("GOOGLE_API_KEY", "").strip(),
            model_queue=queue,
            base_url=os.getenv("GEMINI_BASE_URL", cfg.get("base_url", DEFAULT_BASE_URL)),
            max_retries=int(cfg.get("max_retries", 2)),
            cycle_delay_ms=int(cfg.get("cycle_delay_ms", 1500)),
            network_delay_ms=int(cfg.get("network_delay_ms", 1000)),
            timeout_s=float(os.getenv("GEMINI_TIMEOUT_S", cfg.get("timeout_s", 60.0))),
            connect_timeout_s=float(cfg.get("connect_timeout_s", 10.0)),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e
