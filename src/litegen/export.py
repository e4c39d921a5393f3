"""
ONNX Export Utilities.

Produces fixed-shape artifacts for the generation runtime: int32
``input_ids`` of shape [1, seq_len] in, float32 ``logits`` of shape
[1, seq_len, vocab_size] out.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import torch
import torch.nn as nn

from litegen.config import TensorSpec

logger = logging.getLogger(__name__)


class FixedShapeCausalLM(nn.Module):
    """
    Adapts a causal LM to the runtime's tensor contract.

    Accepts int32 ids, returns float32 logits. Tuple outputs and outputs with a
    ``logits`` attribute are both unwrapped.
    """

    def __init__(self, model: nn.Module):
        super().__init__()
        self.model = model

    def forward(self, input_ids: torch.Tensor) -> torch.Tensor:
        output = self.model(input_ids.long())
        if isinstance(output, tuple):
            output = output[0]
        elif hasattr(output, "logits"):
            output = output.logits
        return output.float()


def export_to_onnx(
    model: nn.Module,
    output_path: str | Path,
    seq_len: int = 20,
    opset_version: int = 17,
    verbose: bool = False,
) -> Path:
    """
    Export a causal LM to a fixed-shape ONNX file.

    Args:
        model: Module mapping ids of shape (batch, seq) to logits (batch, seq, vocab)
        output_path: Path to save the ONNX file
        seq_len: Fixed sequence length of the exported input
        opset_version: ONNX opset version (default: 17)
        verbose: Print export details

    Returns:
        Path to the exported ONNX file

    Example:
        >>> export_to_onnx(model, "gpt2.onnx", seq_len=20)
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    wrapped = FixedShapeCausalLM(model).eval()
    device = next(model.parameters()).device
    dummy_input = torch.zeros((1, seq_len), dtype=torch.int32, device=device)

    # Legacy exporter; no dynamic axes so the runtime sees static shapes.
    with torch.no_grad():
        torch.onnx.export(
            wrapped,
            (dummy_input,),
            str(output_path),
            input_names=["input_ids"],
            output_names=["logits"],
            opset_version=opset_version,
            do_constant_folding=True,
            verbose=verbose,
            dynamo=False,
        )

    logger.info(f"Exported model to {output_path}")
    return output_path


def export_pretrained(
    model_name_or_path: str,
    output_path: str | Path,
    seq_len: int = 20,
    opset_version: int = 17,
) -> Path:
    """
    Load a Hugging Face causal LM (e.g. "gpt2") and export it with ``export_to_onnx``.

    Raises:
        ImportError: If transformers is not installed
    """
    try:
        from transformers import AutoModelForCausalLM
    except ImportError as e:
        raise ImportError("transformers is required: pip install 'litegen[hf]'") from e

    logger.info(f"Loading {model_name_or_path}...")
    model = AutoModelForCausalLM.from_pretrained(model_name_or_path, torchscript=True)
    model.config.use_cache = False
    return export_to_onnx(model, output_path, seq_len=seq_len, opset_version=opset_version)


def verify_export(
    onnx_path: str | Path,
    model: nn.Module,
    seq_len: int = 20,
    rtol: float = 1e-3,
    atol: float = 1e-5,
) -> bool:
    """
    Check that the exported file runs on the ONNX runtime backend and matches PyTorch.

    Args:
        onnx_path: Path to ONNX file
        model: The PyTorch model that was exported
        seq_len: Sequence length the file was exported with
        rtol: Relative tolerance for comparison
        atol: Absolute tolerance for comparison

    Returns:
        True if the logits agree within tolerance
    """
    from litegen.runtime.onnx import OnnxRuntime

    wrapped = FixedShapeCausalLM(model).eval().cpu()
    test_input = torch.randint(0, 100, (1, seq_len), dtype=torch.int32)
    with torch.no_grad():
        expected = wrapped(test_input).numpy()

    input_spec = TensorSpec(shape=(1, seq_len), dtype="int32")
    output_spec = TensorSpec(shape=tuple(expected.shape), dtype="float32")
    runtime = OnnxRuntime(onnx_path, input_spec, output_spec)
    try:
        output = output_spec.allocate()
        runtime.run(test_input.numpy(), output)
    finally:
        runtime.close()

    return bool(np.allclose(output, expected, rtol=rtol, atol=atol))


def _tensor_dims(value_info) -> list[int | str]:
    # Unset dims come back as dim_value 0; report their symbolic name instead.
    return [d.dim_value or d.dim_param for d in value_info.type.tensor_type.shape.dim]


def inspect_onnx_model(onnx_path: str | Path) -> dict:
    """
    Read tensor names and shapes from an exported file.

    ``seq_len`` and ``vocab_size`` are taken from the first output when it is a
    static ``[1, seq_len, vocab_size]`` logits tensor, otherwise they are None.
    They can be fed straight into ``GenerationConfig``.
    """
    import onnx

    onnx_path = Path(onnx_path)
    model = onnx.load(str(onnx_path), load_external_data=False)

    inputs = [{"name": t.name, "shape": _tensor_dims(t)} for t in model.graph.input]
    outputs = [{"name": t.name, "shape": _tensor_dims(t)} for t in model.graph.output]

    seq_len = vocab_size = None
    if outputs:
        dims = outputs[0]["shape"]
        if len(dims) == 3 and all(isinstance(d, int) and d > 0 for d in dims):
            seq_len, vocab_size = dims[1], dims[2]

    opset = next((o.version for o in model.opset_import if o.domain in ("", "ai.onnx")), None)
    return {
        "opset_version": opset,
        "inputs": inputs,
        "outputs": outputs,
        "seq_len": seq_len,
        "vocab_size": vocab_size,
        "file_size_mb": onnx_path.stat().st_size / (1024 * 1024),
    }
