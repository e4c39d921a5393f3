"""LiteRT (TFLite) interpreter backend."""

import logging
from pathlib import Path

import numpy as np

from litegen.config import TensorSpec
from litegen.runtime.base import check_tensor_shape

logger = logging.getLogger(__name__)


class LiteRTRuntime:
    """
    Runs a ``.tflite`` model through the LiteRT interpreter.

    The interpreter memory-maps the model file read-only and keeps the mapping
    for its lifetime.
    """

    def __init__(
        self,
        model_path: str | Path,
        input_spec: TensorSpec,
        output_spec: TensorSpec,
        num_threads: int | None = None,
    ):
        try:
            from ai_edge_litert.interpreter import Interpreter
        except ImportError as e:
            raise ImportError("ai-edge-litert is required: pip install 'litegen[litert]'") from e

        self.input_spec = input_spec
        self.output_spec = output_spec
        self._interpreter = Interpreter(model_path=str(model_path), num_threads=num_threads)
        self._interpreter.allocate_tensors()

        input_detail = self._interpreter.get_input_details()[0]
        output_detail = self._interpreter.get_output_details()[0]
        check_tensor_shape(input_detail["name"], tuple(int(d) for d in input_detail["shape"]), input_spec)
        check_tensor_shape(output_detail["name"], tuple(int(d) for d in output_detail["shape"]), output_spec)
        self._input_index = input_detail["index"]
        self._output_index = output_detail["index"]

        logger.debug(f"LiteRT input: {input_detail['name']} {input_detail['shape']} {input_detail['dtype']}")
        logger.debug(f"LiteRT output: {output_detail['name']} {output_detail['shape']} {output_detail['dtype']}")

    def run(self, input_buffer: np.ndarray, output_buffer: np.ndarray) -> None:
        self._interpreter.set_tensor(self._input_index, input_buffer)
        self._interpreter.invoke()
        np.copyto(output_buffer, self._interpreter.get_tensor(self._output_index))

    def close(self) -> None:
        self._interpreter = None
