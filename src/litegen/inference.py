"""
Single-step inference: buffer preparation, model invocation and greedy argmax.
"""

import logging
import threading

import numpy as np

from litegen.config import TensorSpec
from litegen.runtime.base import InferenceRuntime

logger = logging.getLogger(__name__)

# The running maximum starts here and only strictly larger values replace it,
# so NaN and -inf never win.
_LOGIT_FLOOR = -np.finfo(np.float32).max


def prepare_input_buffer(token_ids: np.ndarray | list[int], spec: TensorSpec, out: np.ndarray | None = None) -> np.ndarray:
    """
    Write token ids into a native-endian int32 buffer shaped like ``spec``.

    Args:
        token_ids: Exactly ``spec.size`` ids.
        spec: Declared input tensor spec, e.g. shape (1, 20) int32.
        out: Optional pre-allocated buffer to fill in place.

    Returns:
        np.ndarray: The filled buffer.
    """
    ids = np.asarray(token_ids, dtype=spec.numpy_dtype).reshape(-1)
    if ids.size != spec.size:
        raise ValueError(f"Expected {spec.size} token ids for input shape {list(spec.shape)}, got {ids.size}")

    if out is None:
        out = spec.allocate()
    out.reshape(-1)[:] = ids
    return out


def postprocess_output(output: np.ndarray, input_length: int, vocab_size: int = 50257) -> int:
    """
    Greedy decode: index of the largest logit in the row of the last real input position.

    Args:
        output: Logits, flat or shaped (1, seq_len, vocab_size).
        input_length: Number of real (unpadded) input tokens, 1-based.
        vocab_size: Row width.

    Returns:
        int: Row-relative index of the first maximum, or -1 if no value in the
        row exceeds the float32 floor (e.g. an empty or all ``-inf`` row).
    """
    logits = np.asarray(output).reshape(-1)
    seq_len = logits.size // vocab_size if vocab_size > 0 else 0
    if vocab_size > 0 and not 1 <= input_length <= seq_len:
        raise ValueError(f"input_length must be in [1, {seq_len}], got {input_length}")

    start = (input_length - 1) * vocab_size
    row = logits[start : start + vocab_size]

    candidates = row > _LOGIT_FLOOR
    if not candidates.any():
        return -1
    # argmax returns the first occurrence, so ties resolve to the lowest index.
    return int(np.argmax(np.where(candidates, row, -np.inf)))


class InferenceInvoker:
    """
    Owns the reusable input/output buffers around a runtime.

    The buffers are allocated once from the declared tensor specs. ``run`` is
    serialized with a lock so concurrent callers cannot overwrite each other's
    buffers mid-call.
    """

    def __init__(self, runtime: InferenceRuntime, input_spec: TensorSpec, output_spec: TensorSpec):
        self.runtime = runtime
        self.input_spec = input_spec
        self.output_spec = output_spec
        self.input_buffer = input_spec.allocate()
        self.output_buffer = output_spec.allocate()
        self._lock = threading.Lock()
        logger.debug(
            f"Allocated buffers: input {input_spec.nbytes} bytes {list(input_spec.shape)}, "
            f"output {output_spec.nbytes} bytes {list(output_spec.shape)}"
        )

    @property
    def vocab_size(self) -> int:
        return self.output_spec.shape[-1]

    def _forward(self, token_ids: np.ndarray | list[int]) -> None:
        # Caller must hold self._lock.
        prepare_input_buffer(token_ids, self.input_spec, out=self.input_buffer)
        self.runtime.run(self.input_buffer, self.output_buffer)

    def run(self, token_ids: np.ndarray | list[int]) -> np.ndarray:
        """Run one forward pass. Returns a copy of the logits owned by the caller."""
        with self._lock:
            self._forward(token_ids)
            return self.output_buffer.copy()

    def predict_next(self, token_ids: np.ndarray | list[int], input_length: int) -> int:
        """Run one forward pass and return the greedy next-token id."""
        with self._lock:
            self._forward(token_ids)
            return postprocess_output(self.output_buffer, input_length, self.vocab_size)
