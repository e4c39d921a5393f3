from pathlib import Path

from litegen.config import TensorSpec

from .base import InferenceRuntime, detect_runtime, load_model_file
from .litert import LiteRTRuntime
from .onnx import OnnxRuntime

RUNTIMES: dict[str, type] = {
    "litert": LiteRTRuntime,
    "onnx": OnnxRuntime,
}


def create_runtime(
    model_path: str | Path,
    input_spec: TensorSpec,
    output_spec: TensorSpec,
    runtime: str = "auto",
    num_threads: int | None = None,
) -> InferenceRuntime:
    """Build the backend named ``runtime`` (or detected from the file when "auto")."""
    name = detect_runtime(model_path) if runtime == "auto" else runtime
    if name not in RUNTIMES:
        raise ValueError(f"Unknown runtime '{name}'. Available: {list(RUNTIMES)}")
    return RUNTIMES[name](model_path, input_spec, output_spec, num_threads=num_threads)


__all__ = [
    "RUNTIMES",
    "InferenceRuntime",
    "LiteRTRuntime",
    "OnnxRuntime",
    "create_runtime",
    "detect_runtime",
    "load_model_file",
]
