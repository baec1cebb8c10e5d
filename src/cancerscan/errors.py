"""Exception hierarchy shared by the prediction pipeline and the HTTP layer.

Each pipeline stage raises its own ``PipelineError`` subclass so failures can
be told apart in the logs. Clients only ever see the generic prediction
failure message for all of them.
"""
from __future__ import annotations

IMAGE_REQUIRED_MESSAGE = "Image is required"
PREDICTION_FAILED_MESSAGE = "Terjadi kesalahan dalam melakukan prediksi"
HISTORY_FAILED_MESSAGE = "Terjadi kesalahan saat mengambil data history"
PAYLOAD_TOO_LARGE_MESSAGE = "Payload content length greater than maximum allowed: {max_bytes}"


class CancerScanError(Exception):
    """Base class for service errors."""


class ImageRequiredError(CancerScanError):
    def __init__(self) -> None:
        super().__init__(IMAGE_REQUIRED_MESSAGE)


class PayloadTooLargeError(CancerScanError):
    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        super().__init__(PAYLOAD_TOO_LARGE_MESSAGE.format(max_bytes=max_bytes))

    @property
    def message(self) -> str:
        return PAYLOAD_TOO_LARGE_MESSAGE.format(max_bytes=self.max_bytes)


class PipelineError(CancerScanError):
    stage = "pipeline"


class DecodeError(PipelineError):
    stage = "decode"


class PreprocessError(PipelineError):
    stage = "preprocess"


class InferenceError(PipelineError):
    stage = "inference"


class ModelNotLoadedError(InferenceError):
    def __init__(self) -> None:
        super().__init__("Model is not loaded")


class ClassificationError(PipelineError):
    stage = "classify"


class StoreError(CancerScanError):
    """Raised when the result store cannot be read or written."""


class PredictionFailedError(CancerScanError):
    """Client-facing translation of any pipeline or persistence failure."""

    def __init__(self) -> None:
        super().__init__(PREDICTION_FAILED_MESSAGE)
