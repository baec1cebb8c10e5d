"""Export the reference classifier to TorchScript for deployment."""
from __future__ import annotations

import argparse
from pathlib import Path

import torch

from cancerscan.services.vision import VisionNet


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trace VisionNet into a TorchScript file")
    parser.add_argument("--weights", default=None, help="Optional state_dict checkpoint to load before tracing")
    parser.add_argument("--output", default="models/model.ts", help="Where to write the TorchScript module")
    parser.add_argument("--pretrained", action="store_true", help="Start from ImageNet backbone weights")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    model = VisionNet(pretrained=args.pretrained)
    if args.weights:
        state = torch.load(args.weights, map_location="cpu")
        model.load_state_dict(state.get("state_dict", state))
    model.eval()
    dummy_input = torch.zeros(1, 224, 224, 3)
    traced = torch.jit.trace(model, dummy_input)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    traced.save(str(output))


if __name__ == "__main__":
    main()
