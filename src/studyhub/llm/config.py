"""Loading and resolution of LLM provider options."""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from studyhub.errors import LLMConfigError

LOGGER = logging.getLogger(__name__)

DEFAULT_OPTIONS_PATH = Path(__file__).resolve().parent / "llm_options.json"
FALLBACK_PROVIDER_KEY = "anthropic_claude"


@dataclass(slots=True, frozen=True)
class LLMProviderConfig:
    label: str
    provider: str
    model: str
    env_var: str = ""
    max_output_tokens: Optional[int] = None
    temperature: Optional[float] = None
    description: Optional[str] = None
    timeout_seconds: float = 60.0

    @classmethod
    def from_mapping(cls, key: str, data: Mapping[str, Any]) -> "LLMProviderConfig":
        try:
            return cls(
                label=str(data.get("label") or key),
                provider=str(data["provider"]).lower(),
                model=str(data["model"]),
                env_var=str(data.get("env_var") or ""),
                max_output_tokens=int(data["max_output_tokens"]) if data.get("max_output_tokens") else None,
                temperature=float(data["temperature"]) if data.get("temperature") is not None else None,
                description=data.get("description"),
                timeout_seconds=float(data.get("timeout_seconds") or 60.0),
            )
        except (KeyError, TypeError, ValueError) as error:
            raise LLMConfigError(f"Invalid configuration for provider {key!r}: {error}") from error


@dataclass(slots=True, frozen=True)
class LLMConfig:
    providers: Dict[str, LLMProviderConfig]
    default_provider: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


_CACHE_LOCK = threading.Lock()
_cached_config: Optional[LLMConfig] = None
_cached_path: Optional[Path] = None


def _parse_config(path: Path) -> LLMConfig:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise LLMConfigError(f"Unable to read LLM configuration at {path}: {error}") from error

    if not isinstance(raw, dict) or not isinstance(raw.get("providers"), dict) or not raw["providers"]:
        raise LLMConfigError(f"Invalid LLM configuration at {path}")

    providers = {
        str(key): LLMProviderConfig.from_mapping(str(key), value)
        for key, value in raw["providers"].items()
    }
    return LLMConfig(
        providers=providers,
        default_provider=raw.get("default_provider"),
        metadata=dict(raw.get("metadata") or {}),
    )


def load_llm_config(path: Path | str | None = None) -> LLMConfig:
    """Return the parsed options file, memoised per path."""

    global _cached_config, _cached_path

    config_path = Path(path) if path is not None else DEFAULT_OPTIONS_PATH
    with _CACHE_LOCK:
        if _cached_config is not None and _cached_path == config_path:
            return _cached_config
        config = _parse_config(config_path)
        _cached_config = config
        _cached_path = config_path
    LOGGER.info("Loaded %s LLM provider(s) from %s", len(config.providers), config_path)
    return config


def reset_llm_config_cache() -> None:
    global _cached_config, _cached_path

    with _CACHE_LOCK:
        _cached_config = None
        _cached_path = None


def resolve_provider(
    provider_key: Optional[str] = None,
    *,
    path: Path | str | None = None,
) -> Tuple[str, LLMProviderConfig]:
    config = load_llm_config(path)
    selected = provider_key or config.default_provider or FALLBACK_PROVIDER_KEY
    provider = config.providers.get(selected)
    if provider is None:
        available = ", ".join(sorted(config.providers)) or "none"
        raise LLMConfigError(
            f'Provider "{selected}" not found in LLM options. Available providers: {available}'
        )
    return selected, provider
