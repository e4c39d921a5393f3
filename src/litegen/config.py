from dataclasses import dataclass
from math import prod
from typing import Literal

import numpy as np
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass(frozen=True)
class TensorSpec:
    """
    Declared shape and dtype of a model input or output tensor.

    Buffer sizes are derived from here instead of being hard-coded per model.
    """

    shape: tuple[int, ...]
    dtype: str

    @property
    def numpy_dtype(self) -> np.dtype:
        # Native byte order, matching what the runtimes read and write.
        return np.dtype(self.dtype)

    @property
    def size(self) -> int:
        return prod(self.shape)

    @property
    def nbytes(self) -> int:
        return self.size * self.numpy_dtype.itemsize

    def allocate(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=self.numpy_dtype)


class GenerationConfig(BaseSettings):
    """
    Generation configuration using environment variables.
    """

    # Resources
    model_path: str | None = None  # .tflite or .onnx artifact
    vocab_path: str | None = None  # flat JSON token -> id map
    runtime: Literal["auto", "litert", "onnx"] = "auto"
    num_threads: int | None = Field(None, ge=1)

    # Model shape
    seq_len: int = Field(20, gt=0)
    vocab_size: int = Field(50257, gt=0)

    # Decoding
    max_output_length: int = Field(20, ge=0)
    eos_token_id: int | None = None  # None disables early stopping
    unk_token_id: int = 0
    unk_marker: str = "<unk>"

    # Observability
    log_level: LogLevel = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_prefix="LITEGEN_")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    def input_spec(self) -> TensorSpec:
        return TensorSpec(shape=(1, self.seq_len), dtype="int32")

    def output_spec(self) -> TensorSpec:
        return TensorSpec(shape=(1, self.seq_len, self.vocab_size), dtype="float32")
