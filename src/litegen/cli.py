import logging
import statistics
import time

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from litegen.config import GenerationConfig
from litegen.engine import InitFailure, TextGenerationEngine
from litegen.utils.logging import setup_logging

app = typer.Typer(pretty_exceptions_show_locals=False, no_args_is_help=True)
console = Console()
logger = logging.getLogger("litegen.cli")

DEFAULT_PROMPT = "The weather is so good"


def _build_config(
    model_path: str | None,
    vocab_path: str | None,
    runtime: str | None,
    log_level: str | None,
    log_json: bool | None,
) -> GenerationConfig:
    # Command-line values override LITEGEN_* environment variables.
    overrides = {
        "model_path": model_path,
        "vocab_path": vocab_path,
        "runtime": runtime,
        "log_level": log_level,
        "log_json": log_json,
    }
    try:
        return GenerationConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e


def _start_engine(config: GenerationConfig) -> TextGenerationEngine:
    setup_logging(config.log_level, json_format=config.log_json)
    engine = TextGenerationEngine(config)
    result = engine.initialize()
    if isinstance(result, InitFailure):
        console.print(f"[red]Cannot initialize interpreter: {escape(str(result.error))}[/red]")
        raise typer.Exit(code=1)
    return engine


@app.command()
def generate(
    text: str = typer.Argument(DEFAULT_PROMPT, help="Start text"),
    model_path: str | None = typer.Option(None, "--model", "-m", help="Path to .tflite or .onnx model"),
    vocab_path: str | None = typer.Option(None, "--vocab", "-v", help="Path to vocab.json"),
    runtime: str | None = typer.Option(None, help="auto, litert or onnx"),
    max_output_length: int | None = typer.Option(None, "--max-output-length", "-n", min=0, help="Words to generate"),
    eos_token_id: int | None = typer.Option(None, help="Stop when this id is predicted"),
    log_level: str | None = typer.Option(None, help="DEBUG, INFO, WARNING, ERROR or CRITICAL"),
    log_json: bool | None = typer.Option(None, "--log-json/--log-text", help="Structured JSON logs"),
):
    """
    Run one greedy generation and log the result.
    """
    config = _build_config(model_path, vocab_path, runtime, log_level, log_json)
    engine = _start_engine(config)
    try:
        result = engine.generate_text(text, max_output_length=max_output_length, eos_token_id=eos_token_id)
    finally:
        engine.close()

    logger.info(f"generateText: {result}")
    console.print(result, markup=False, highlight=False)


def run_benchmark(engine: TextGenerationEngine, prompt: str, max_output_length: int, num_runs: int, warmup: int = 1):
    """运行推理基准测试."""
    for _ in range(warmup):
        engine.generate(prompt, max_output_length=max_output_length)

    latencies = []
    tokens_per_second = []
    for i in range(num_runs):
        start_time = time.perf_counter()
        result = engine.generate(prompt, max_output_length=max_output_length)
        latency = time.perf_counter() - start_time

        num_tokens = len(result.token_ids)
        tps = num_tokens / latency if latency > 0 else 0.0
        latencies.append(latency)
        tokens_per_second.append(tps)
        logger.info(f"Run {i + 1}: {latency:.4f}s, {tps:.2f} tokens/s")

    return statistics.mean(latencies), statistics.mean(tokens_per_second)


@app.command()
def benchmark(
    prompt: str = typer.Option(DEFAULT_PROMPT, help="Input prompt"),
    model_path: str | None = typer.Option(None, "--model", "-m", help="Path to .tflite or .onnx model"),
    vocab_path: str | None = typer.Option(None, "--vocab", "-v", help="Path to vocab.json"),
    runtime: str | None = typer.Option(None, help="auto, litert or onnx"),
    max_output_length: int = typer.Option(20, "--max-output-length", "-n", min=1, help="Words per run"),
    runs: int = typer.Option(5, min=1, help="Number of benchmark runs"),
    warmup: int = typer.Option(1, min=0, help="Warmup runs"),
):
    """
    Greedy generation latency benchmark.
    """
    config = _build_config(model_path, vocab_path, runtime, None, None)
    engine = _start_engine(config)
    try:
        avg_latency, avg_tps = run_benchmark(engine, prompt, max_output_length, runs, warmup)
    finally:
        engine.close()

    table = Table(title="Benchmark Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Runs", str(runs))
    table.add_row("Words per run", str(max_output_length))
    table.add_row("Avg Latency", f"{avg_latency:.4f}s")
    table.add_row("Avg TPS", f"{avg_tps:.2f} tokens/s")
    console.print(table)


@app.command()
def export(
    model_name: str = typer.Argument(..., help="Hugging Face model id or local checkpoint, e.g. gpt2"),
    output_path: str = typer.Option("gpt2.onnx", "--output", "-o", help="Where to write the ONNX file"),
    seq_len: int = typer.Option(20, min=1, help="Fixed input length"),
    opset_version: int = typer.Option(17, help="ONNX opset version"),
):
    """
    Export a causal LM to a fixed-shape ONNX artifact.
    """
    from litegen.export import export_pretrained, inspect_onnx_model

    setup_logging("INFO")
    path = export_pretrained(model_name, output_path, seq_len=seq_len, opset_version=opset_version)
    info = inspect_onnx_model(path)

    table = Table(title=str(path))
    table.add_column("Tensor", style="cyan")
    table.add_column("Shape", style="green")
    for tensor in info["inputs"] + info["outputs"]:
        table.add_row(tensor["name"], str(tensor["shape"]))
    console.print(table)
    console.print(
        f"opset {info['opset_version']}, seq_len {info['seq_len']}, "
        f"vocab_size {info['vocab_size']}, {info['file_size_mb']:.1f} MB"
    )


if __name__ == "__main__":
    app()
