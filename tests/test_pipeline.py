"""Tests for the prediction pipeline outside the HTTP layer."""
from __future__ import annotations

import threading
import time

import anyio
import numpy as np
import pytest

from cancerscan.errors import DecodeError, InferenceError
from cancerscan.services import preprocess
from cancerscan.services.pipeline import PredictionPipeline
from cancerscan.services.store import ResultStore


class FixedEngine:
    def __init__(self, scores, delay: float = 0.0) -> None:
        self.scores = np.asarray(scores)
        self.delay = delay

    def infer(self, tensor):
        if self.delay:
            time.sleep(self.delay)
        return self.scores


@pytest.fixture
def store(tmp_path):
    result_store = ResultStore(f"sqlite:///{tmp_path / 'pipeline.db'}")
    result_store.create_schema()
    yield result_store
    result_store.close()


def make_pipeline(engine, store, timeout: float = 5.0) -> PredictionPipeline:
    return PredictionPipeline(engine=engine, store=store, limiter=anyio.CapacityLimiter(2), timeout=timeout)


@pytest.mark.anyio
async def test_predict_persists_verdict(store, jpeg_bytes):
    pipeline = make_pipeline(FixedEngine([0.0]), store)
    record = await pipeline.predict(jpeg_bytes)
    assert record.result == "Non-cancer"
    assert await pipeline.history() == [(record.id, record)]


@pytest.mark.anyio
async def test_decode_failure_stores_nothing(store):
    pipeline = make_pipeline(FixedEngine([0.9]), store)
    with pytest.raises(DecodeError):
        await pipeline.predict(b"not a jpeg")
    assert store.list_all() == []


@pytest.mark.anyio
async def test_slow_inference_times_out(store, jpeg_bytes):
    pipeline = make_pipeline(FixedEngine([0.9], delay=1.0), store, timeout=0.05)
    with pytest.raises(InferenceError):
        await pipeline.predict(jpeg_bytes)
    assert store.list_all() == []


class CountingEngine:
    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.running = 0
        self.peak = 0
        self.calls = 0
        self._lock = threading.Lock()

    def infer(self, tensor):
        with self._lock:
            self.running += 1
            self.calls += 1
            self.peak = max(self.peak, self.running)
        time.sleep(self.delay)
        with self._lock:
            self.running -= 1
        return np.array([0.9])


@pytest.mark.anyio
async def test_timed_out_requests_do_not_exceed_worker_limit(store, jpeg_bytes):
    engine = CountingEngine(delay=0.3)
    pipeline = make_pipeline(engine, store, timeout=0.05)
    for _ in range(4):
        with pytest.raises(InferenceError):
            await pipeline.predict(jpeg_bytes)
    with anyio.fail_after(5):
        while engine.calls < 4 or engine.running:
            await anyio.sleep(0.05)
    assert engine.peak <= 2
    assert store.list_all() == []


@pytest.mark.anyio
async def test_score_runs_through_transform_image_bytes(store, jpeg_bytes, monkeypatch):
    seen = []
    original = preprocess.transform_image_bytes

    def recording_transform(image_bytes):
        seen.append(image_bytes)
        return original(image_bytes)

    monkeypatch.setattr(preprocess, "transform_image_bytes", recording_transform)
    pipeline = PredictionPipeline(
        engine=FixedEngine([0.0]), store=store, limiter=anyio.CapacityLimiter(1), timeout=5.0
    )
    assert pipeline.score(jpeg_bytes).tolist() == [0.0]
    assert seen == [jpeg_bytes]
