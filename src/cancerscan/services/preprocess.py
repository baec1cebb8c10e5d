"""Image decoding and tensor preparation for the classifier."""
from __future__ import annotations

import io

import numpy as np
import torch
from PIL import Image

from ..errors import DecodeError, PreprocessError

INPUT_SIZE = 224
# Multi-picture JPEGs from phone and stereo cameras open as MPO.
JPEG_FORMATS = frozenset({"JPEG", "MPO"})


def decode_jpeg(image_bytes: bytes) -> np.ndarray:
    """Decode JPEG bytes into an ``(H, W, 3)`` uint8 pixel array.

    Only the first frame of a multi-picture file is decoded. Anything that is
    not a complete JPEG stream raises ``DecodeError``.
    """
    if not image_bytes:
        raise DecodeError("Image payload is empty")
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            if image.format not in JPEG_FORMATS:
                raise DecodeError(f"Unsupported image format: {image.format}")
            image.load()
            pixels = np.asarray(image.convert("RGB"))
    except DecodeError:
        raise
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Invalid JPEG payload: {exc}") from exc
    return pixels


def resize_nearest(pixels: np.ndarray, size: int = INPUT_SIZE) -> np.ndarray:
    # Source index is floor(dst * src / dst_size), no half-pixel centres.
    height, width = pixels.shape[:2]
    rows = (np.arange(size) * height) // size
    cols = (np.arange(size) * width) // size
    return pixels[rows[:, None], cols[None, :]]


def to_input_tensor(pixels: np.ndarray) -> torch.Tensor:
    """Resize, batch and cast decoded pixels into a ``[1, 224, 224, 3]`` float tensor.

    Values stay in the decoder's native 0-255 range.
    """
    if pixels.ndim != 3 or pixels.shape[-1] != 3 or 0 in pixels.shape[:2]:
        raise PreprocessError(f"Expected an (H, W, 3) pixel array, got shape {pixels.shape}")
    resized = resize_nearest(pixels)
    tensor = torch.from_numpy(np.ascontiguousarray(resized)).unsqueeze(0)
    return tensor.float()


def transform_image_bytes(image_bytes: bytes) -> torch.Tensor:
    """Convert raw upload bytes into the tensor the classifier expects."""
    return to_input_tensor(decode_jpeg(image_bytes))
