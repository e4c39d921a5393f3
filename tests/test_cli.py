import pytest
from typer.testing import CliRunner

from litegen import cli
from litegen.engine import TextGenerationEngine
from tests.dummies import ShiftRuntime

runner = CliRunner()


@pytest.fixture
def fake_engine(monkeypatch):
    """Make the CLI build engines backed by ShiftRuntime."""

    class FakeEngine(TextGenerationEngine):
        def __init__(self, config):
            super().__init__(config, runtime=ShiftRuntime(config.input_spec(), config.output_spec()))

    monkeypatch.setattr(cli, "TextGenerationEngine", FakeEngine)
    return FakeEngine


def test_generate(fake_engine, vocab_file):
    result = runner.invoke(
        cli.app,
        ["generate", "The weather is so good", "--vocab", str(vocab_file), "-n", "2"],
        env={"LITEGEN_VOCAB_SIZE": "8"},
    )
    assert result.exit_code == 0, result.output
    assert "The weather is so good today and" in result.output
    assert "generateText: The weather is so good today and" in result.output


def test_generate_default_prompt(fake_engine, vocab_file):
    result = runner.invoke(
        cli.app,
        ["generate", "--vocab", str(vocab_file), "-n", "1", "--log-json"],
        env={"LITEGEN_VOCAB_SIZE": "8"},
    )
    assert result.exit_code == 0, result.output
    assert '"message": "generateText: The weather is so good today"' in result.output


def test_generate_init_failure_exits_nonzero(tmp_path):
    result = runner.invoke(cli.app, ["generate", "--vocab", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert "Cannot initialize interpreter" in result.output


def test_generate_unknown_log_level_is_usage_error(fake_engine, vocab_file):
    result = runner.invoke(cli.app, ["generate", "--vocab", str(vocab_file), "--log-level", "verbose"])
    assert result.exit_code == 2
    assert not isinstance(result.exception, AttributeError)


def test_benchmark(fake_engine, vocab_file):
    result = runner.invoke(
        cli.app,
        ["benchmark", "--vocab", str(vocab_file), "-n", "3", "--runs", "2", "--warmup", "0"],
        env={"LITEGEN_VOCAB_SIZE": "8"},
    )
    assert result.exit_code == 0, result.output
    assert "Benchmark Results" in result.output
    assert "Avg Latency" in result.output


def test_run_benchmark_counts_generated_tokens(ready_engine):
    avg_latency, avg_tps = cli.run_benchmark(ready_engine, "the weather", max_output_length=3, num_runs=2, warmup=1)
    assert avg_latency > 0
    assert avg_tps > 0
