"""Model loading and the forward pass used by the prediction pipeline."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

import numpy as np
import torch

from ..config import Settings
from ..errors import InferenceError, ModelNotLoadedError
from ..utils.logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_device() -> torch.device:
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


class InferenceEngine:
    """Read-only holder of the loaded TorchScript classifier.

    An engine without a module is the degraded state left behind by a failed
    load; ``infer`` then raises ``ModelNotLoadedError``.
    """

    def __init__(self, module: torch.jit.ScriptModule | None = None, device: torch.device | None = None) -> None:
        self.device = device or get_device()
        self._module = module
        if self._module is not None:
            self._module.eval()

    @property
    def ready(self) -> bool:
        return self._module is not None

    @classmethod
    def from_path(cls, path: Path, device: torch.device | None = None) -> "InferenceEngine":
        device = device or get_device()
        module = torch.jit.load(str(path), map_location=device)
        return cls(module, device=device)

    def infer(self, tensor: torch.Tensor) -> np.ndarray:
        if self._module is None:
            raise ModelNotLoadedError()
        try:
            with torch.inference_mode():
                output = self._module(tensor.to(self.device))
        except (RuntimeError, IndexError, ValueError) as exc:
            raise InferenceError(f"Forward pass failed: {exc}") from exc
        if isinstance(output, (tuple, list)):
            output = output[0]
        return output.detach().cpu().reshape(-1).numpy()


def resolve_model_path(model_url: str, cache_dir: str) -> Path:
    """Return a local path for ``model_url``, downloading remote models into ``cache_dir``."""
    parsed = urlparse(model_url)
    if parsed.scheme not in ("http", "https"):
        return Path(model_url)
    target_dir = Path(cache_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / (Path(parsed.path).name or "model.ts")
    if not target.exists():
        logger.info("Downloading model", url=model_url, target=str(target))
        torch.hub.download_url_to_file(model_url, str(target), progress=False)
    return target


def load_engine(settings: Settings) -> InferenceEngine:
    """Load the classifier once at startup; failures leave an unready engine."""
    try:
        path = resolve_model_path(settings.model_url, settings.model_cache_dir)
        engine = InferenceEngine.from_path(path)
    except Exception as exc:
        logger.error("Error loading model", model_url=settings.model_url, error=str(exc))
        return InferenceEngine(None)
    logger.info("Model loaded successfully", model_url=settings.model_url, device=str(engine.device))
    return engine
