"""Shared fixtures: tiny TorchScript models, JPEG payloads and a configured app."""
from __future__ import annotations

import io
from pathlib import Path

import pytest
import torch
from fastapi.testclient import TestClient
from PIL import Image

from cancerscan.config import Settings
from cancerscan.main import create_app


class MeanScore(torch.nn.Module):
    def forward(self, tensor: torch.Tensor) -> torch.Tensor:
        return torch.sigmoid(tensor.mean(dim=(1, 2, 3))).unsqueeze(-1)


class ZeroScore(torch.nn.Module):
    def forward(self, tensor: torch.Tensor) -> torch.Tensor:
        return tensor.mean(dim=(1, 2, 3)).unsqueeze(-1) * 0.0


def save_traced(module: torch.nn.Module, path: Path) -> Path:
    traced = torch.jit.trace(module, torch.zeros(1, 224, 224, 3))
    traced.save(str(path))
    return path


def make_image_bytes(size=(64, 48), color=(200, 30, 30), fmt="JPEG", mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_mpo_bytes(size=(64, 48)) -> bytes:
    buffer = io.BytesIO()
    first = Image.new("RGB", size, color=(200, 30, 30))
    second = Image.new("RGB", size, color=(30, 30, 200))
    first.save(buffer, format="MPO", save_all=True, append_images=[second])
    return buffer.getvalue()


def build_settings(tmp_path: Path, model_path: Path, **overrides) -> Settings:
    values = {
        "MODEL_URL": str(model_path),
        "CANCERSCAN_MODEL_DIR": str(tmp_path / "models"),
        "DATABASE_URL": f"sqlite:///{tmp_path / 'predictions.db'}",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def model_path(tmp_path: Path) -> Path:
    return save_traced(MeanScore(), tmp_path / "mean_score.ts")


@pytest.fixture
def app_settings(tmp_path: Path, model_path: Path) -> Settings:
    return build_settings(tmp_path, model_path)


@pytest.fixture
def client(app_settings: Settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client
