"""
Runtime backend contract and model artifact helpers.

A runtime is opaque: given the input buffer it fills the output buffer.
"""

import logging
import mmap
from pathlib import Path
from typing import Protocol

import numpy as np

from litegen.config import TensorSpec
from litegen.exceptions import RuntimeBackendError

logger = logging.getLogger(__name__)

# FlatBuffer file identifier of TFLite / LiteRT models, stored at bytes 4..8.
TFLITE_IDENTIFIER = b"TFL3"

_SUFFIX_TO_RUNTIME = {
    ".tflite": "litert",
    ".lite": "litert",
    ".onnx": "onnx",
}


class InferenceRuntime(Protocol):
    """Blocking, single-shot model execution."""

    input_spec: TensorSpec
    output_spec: TensorSpec

    def run(self, input_buffer: np.ndarray, output_buffer: np.ndarray) -> None:
        """Execute the model once, writing the result into ``output_buffer`` in place."""
        ...

    def close(self) -> None: ...


def load_model_file(model_path: str | Path) -> mmap.mmap:
    """
    Memory-map a model artifact read-only.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeBackendError: If the file is empty.
    """
    model_path = Path(model_path)
    with open(model_path, "rb") as f:
        if model_path.stat().st_size == 0:
            raise RuntimeBackendError(f"Model file {model_path} is empty")
        # The mapping stays valid after the descriptor is closed.
        return mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)


def detect_runtime(model_path: str | Path) -> str:
    """Pick a backend name for ``model_path`` from its suffix, falling back to the file header."""
    model_path = Path(model_path)
    runtime = _SUFFIX_TO_RUNTIME.get(model_path.suffix.lower())
    if runtime is not None:
        return runtime

    mapped = load_model_file(model_path)
    try:
        if mapped[4:8] == TFLITE_IDENTIFIER:
            return "litert"
    finally:
        mapped.close()
    raise RuntimeBackendError(f"Cannot detect runtime for {model_path}; set runtime explicitly")


def check_tensor_shape(name: str, actual: tuple[int, ...], expected: TensorSpec) -> None:
    """Raise if a model tensor does not match the declared spec. Dynamic dims (<=0, None or named) match anything."""
    actual = tuple(actual)
    if len(actual) != len(expected.shape) or any(
        isinstance(dim, int) and dim > 0 and dim != want for dim, want in zip(actual, expected.shape, strict=True)
    ):
        raise RuntimeBackendError(f"Model tensor '{name}' has shape {list(actual)}, expected {list(expected.shape)}")
