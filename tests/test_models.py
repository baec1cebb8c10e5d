"""Smoke tests for the reference classifier architecture."""
from __future__ import annotations

import torch

from cancerscan.services.inference import InferenceEngine
from cancerscan.services.vision import VisionNet


def test_vision_net_outputs_single_probability():
    model = VisionNet()
    with torch.no_grad():
        output = model(torch.rand(1, 224, 224, 3) * 255)
    assert output.shape == (1, 1)
    assert 0.0 <= output.item() <= 1.0


def test_traced_vision_net_loads_into_engine(tmp_path):
    path = tmp_path / "vision.ts"
    torch.jit.trace(VisionNet(), torch.zeros(1, 224, 224, 3)).save(str(path))
    engine = InferenceEngine.from_path(path, device=torch.device("cpu"))
    scores = engine.infer(torch.zeros(1, 224, 224, 3))
    assert scores.shape == (1,)
