"""Reference binary classifier architecture used to produce deployable models."""
from __future__ import annotations

import torch
from torchvision import models


class VisionNet(torch.nn.Module):
    """MobileNetV3 backbone with a single sigmoid output.

    Takes channels-last ``[N, 224, 224, 3]`` tensors with raw 0-255 values,
    matching what ``preprocess.to_input_tensor`` produces.
    """

    def __init__(self, pretrained: bool = False) -> None:
        super().__init__()
        weights = models.MobileNet_V3_Small_Weights.IMAGENET1K_V1 if pretrained else None
        self.backbone = models.mobilenet_v3_small(weights=weights)
        num_features = self.backbone.classifier[-1].in_features
        self.backbone.classifier[-1] = torch.nn.Linear(num_features, 1)
        self.eval()

    def forward(self, tensor: torch.Tensor) -> torch.Tensor:
        tensor = tensor.permute(0, 3, 1, 2) / 255.0
        return torch.sigmoid(self.backbone(tensor))
