"""Configuration helpers for the Akash chat client."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

try:
    from dotenv import load_dotenv
except ImportError as exc:  # pragma: no cover - import guard
    raise RuntimeError(
        "python-dotenv is required. Install dependencies via 'pip install -e .'."
    ) from exc

DEFAULT_BASE_URL = "https://chatapi.akash.network/api/v1"
DEFAULT_TIMEOUT_SECONDS = 180.0
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000
DEFAULT_MODELS_FILE = Path("config/models.yml")

# Static list of models published in the Akash Chat API documentation.
AVAILABLE_MODELS: Tuple[str, ...] = (
    "DeepSeek-R1",
    "DeepSeek-R1-Distill-Llama-70B",
    "DeepSeek-R1-Distill-Qwen-14B",
    "DeepSeek-R1-Distill-Qwen-32B",
    "Meta-Llama-3-1-8B-Instruct-FP8",
    "Meta-Llama-3-1-405B-Instruct-FP8",
    "Meta-Llama-3-2-3B-Instruct",
    "Meta-Llama-3-3-70B-Instruct",
)
# Works with most keys.
DEFAULT_MODEL = "Meta-Llama-3-2-3B-Instruct"


load_dotenv()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelRegistry:
    """Known model identifiers plus the one to fall back on.

    The remote service decides which models a key may use; this list is only
    a hint used to pick a sensible default.
    """

    models: Tuple[str, ...]
    default: str

    def __post_init__(self) -> None:
        if not self.models:
            raise ValueError("Model registry must contain at least one model")
        if self.default not in self.models:
            raise ValueError(f"Default model {self.default!r} is not in the registry")

    def __contains__(self, model: object) -> bool:
        return model in self.models

    def resolve(self, model: Optional[str]) -> str:
        """Return ``model`` if it is known, otherwise the registry default."""
        if model is not None and model in self.models:
            return model
        logger.warning(
            f"Model {model} is not in the list of known available models. "
            f"Using {self.default} instead."
        )
        return self.default

    def model_cards(self) -> List[Dict[str, object]]:
        """Describe the registry in the shape of an OpenAI ``/models`` listing."""
        created = int(time.time() * 1000)
        return [
            {"id": model, "object": "model", "created": created, "owned_by": "akash"}
            for model in self.models
        ]


DEFAULT_REGISTRY = ModelRegistry(models=AVAILABLE_MODELS, default=DEFAULT_MODEL)


def load_model_registry(path: Optional[Path] = None) -> ModelRegistry:
    """Load the model registry from YAML, or return the built-in one.

    The file is expected to look like::

        models:
          - DeepSeek-R1
          - Meta-Llama-3-2-3B-Instruct
        default: Meta-Llama-3-2-3B-Instruct
    """
    models_file = path or DEFAULT_MODELS_FILE
    if not models_file.exists():
        return DEFAULT_REGISTRY

    try:
        data = yaml.safe_load(models_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or "models" not in data:
            raise ValueError(f"{models_file} must contain a 'models' list")
        raw_models = data["models"]
        if not isinstance(raw_models, list):
            raise ValueError("'models' must be a list of model identifiers")
        names = (str(model).strip() for model in raw_models if model is not None)
        models = tuple(name for name in names if name)
        default = str(data.get("default") or (models[0] if models else ""))
        return ModelRegistry(models=models, default=default)
    except Exception as e:
        raise RuntimeError(f"Failed to load model registry: {e}") from e


@dataclass(frozen=True)
class AkashSettings:
    """Settings container for the Akash chat client."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "AkashSettings":
        api_key = os.getenv("AKASH_API_KEY")
        if not api_key:
            raise RuntimeError(
                "AKASH_API_KEY is not configured. Set it in the environment or .env file."
            )
        base_url = os.getenv("AKASH_BASE_URL", DEFAULT_BASE_URL)
        model = os.getenv("AKASH_MODEL", DEFAULT_MODEL)
        timeout_seconds = _get_float("AKASH_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        return cls(
            api_key=api_key,
            base_url=base_url,
            model=model,
            timeout_seconds=timeout_seconds,
        )


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a float, got: {raw}") from exc


def _get_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if not raw:
        return None
    return Path(raw)


@dataclass(frozen=True)
class AppSettings:
    """Aggregates configuration needed by the CLI entry points."""

    akash: AkashSettings
    registry: ModelRegistry

    @classmethod
    def load(cls) -> "AppSettings":
        return cls(AkashSettings.from_env(), load_model_registry(_get_path("AKASH_MODELS_FILE")))


__all__ = [
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "DEFAULT_REGISTRY",
    "AkashSettings",
    "AppSettings",
    "ModelRegistry",
    "load_model_registry",
]
