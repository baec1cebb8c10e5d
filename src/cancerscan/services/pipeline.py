"""Prediction pipeline: decode, preprocess, infer, classify and persist."""
from __future__ import annotations

import threading

import anyio
import numpy as np

from ..errors import InferenceError, PipelineError
from ..schemas import VerdictRecord
from ..utils.logger import get_logger
from . import preprocess
from .inference import InferenceEngine
from .store import ResultStore
from .verdict import classify_scores

logger = get_logger(__name__)


class PredictionPipeline:
    """Runs one uploaded image through the classifier and records the verdict.

    CPU-bound work runs on worker threads bounded by ``limiter`` and is given
    at most ``timeout`` seconds. A thread abandoned on timeout keeps its slot
    in ``_slots`` until its forward pass returns, so no more than
    ``limiter.total_tokens`` forward passes ever run at once. Store calls also
    run off the event loop.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        store: ResultStore,
        limiter: anyio.CapacityLimiter,
        timeout: float,
    ) -> None:
        self.engine = engine
        self.store = store
        self.limiter = limiter
        self.timeout = timeout
        self._slots = threading.BoundedSemaphore(int(limiter.total_tokens))

    def score(self, image_bytes: bytes) -> np.ndarray:
        with self._slots:
            tensor = preprocess.transform_image_bytes(image_bytes)
            return self.engine.infer(tensor)

    async def predict(self, image_bytes: bytes) -> VerdictRecord:
        """Return the persisted verdict for ``image_bytes``.

        Raises a ``PipelineError`` subclass for any failure before persistence
        and ``StoreError`` if the verdict could not be saved.
        """
        try:
            with anyio.fail_after(self.timeout):
                scores = await anyio.to_thread.run_sync(
                    self.score, image_bytes, limiter=self.limiter, abandon_on_cancel=True
                )
            verdict = classify_scores(scores)
        except TimeoutError as exc:
            raise InferenceError(f"Inference exceeded {self.timeout}s") from exc
        except PipelineError:
            raise
        except Exception as exc:
            raise PipelineError(f"Unexpected pipeline failure: {exc}") from exc

        record = VerdictRecord(result=verdict.result, suggestion=verdict.suggestion)
        await anyio.to_thread.run_sync(self.store.save, record)
        logger.info(
            "Prediction stored",
            id=record.id,
            result=record.result,
            confidence=verdict.confidence,
        )
        return record

    async def history(self) -> list[tuple[str, VerdictRecord]]:
        return await anyio.to_thread.run_sync(self.store.list_all)
