"""ONNX Runtime backend."""

import logging
from pathlib import Path

import numpy as np

from litegen.config import TensorSpec
from litegen.runtime.base import check_tensor_shape

logger = logging.getLogger(__name__)


class OnnxRuntime:
    """
    Runs an ``.onnx`` model on the ONNX Runtime CPU provider.

    Models exported with int64 ``input_ids`` are accepted; the int32 input
    buffer is cast on the way in.
    """

    def __init__(
        self,
        model_path: str | Path,
        input_spec: TensorSpec,
        output_spec: TensorSpec,
        num_threads: int | None = None,
    ):
        try:
            import onnxruntime as ort
        except ImportError as e:
            raise ImportError("onnxruntime is required: pip install onnxruntime") from e

        self.input_spec = input_spec
        self.output_spec = output_spec

        options = ort.SessionOptions()
        if num_threads is not None:
            options.intra_op_num_threads = num_threads
        self._session = ort.InferenceSession(str(model_path), sess_options=options, providers=["CPUExecutionProvider"])

        model_input = self._session.get_inputs()[0]
        model_output = self._session.get_outputs()[0]
        check_tensor_shape(model_input.name, tuple(model_input.shape), input_spec)
        check_tensor_shape(model_output.name, tuple(model_output.shape), output_spec)
        self._input_name = model_input.name
        self._output_name = model_output.name
        self._cast_to = np.int64 if model_input.type == "tensor(int64)" else None

        logger.debug(f"ONNX input: {model_input.name} {model_input.shape} {model_input.type}")
        logger.debug(f"ONNX output: {model_output.name} {model_output.shape} {model_output.type}")

    def run(self, input_buffer: np.ndarray, output_buffer: np.ndarray) -> None:
        feed = input_buffer if self._cast_to is None else input_buffer.astype(self._cast_to)
        (logits,) = self._session.run([self._output_name], {self._input_name: feed})
        np.copyto(output_buffer, logits.reshape(output_buffer.shape))

    def close(self) -> None:
        self._session = None
