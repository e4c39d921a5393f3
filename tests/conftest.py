import json
import logging

import pytest

from litegen.config import GenerationConfig
from litegen.engine import TextGenerationEngine
from litegen.vocabulary import Vocabulary
from tests.dummies import WEATHER_VOCAB, WEATHER_VOCAB_SIZE, ShiftRuntime


@pytest.fixture
def weather_vocab():
    return dict(WEATHER_VOCAB)


@pytest.fixture
def vocab_file(tmp_path, weather_vocab):
    path = tmp_path / "vocab.json"
    path.write_text(json.dumps(weather_vocab), encoding="utf-8")
    return path


@pytest.fixture
def tiny_config(vocab_file):
    """Provides a configuration matching WEATHER_VOCAB for fast unit testing."""
    return GenerationConfig(vocab_path=str(vocab_file), vocab_size=WEATHER_VOCAB_SIZE, seq_len=20)


@pytest.fixture
def shift_runtime(tiny_config):
    return ShiftRuntime(tiny_config.input_spec(), tiny_config.output_spec())


@pytest.fixture
def ready_engine(tiny_config, shift_runtime):
    """An initialized engine backed by ShiftRuntime."""
    engine = TextGenerationEngine(tiny_config, vocabulary=Vocabulary.from_dict(WEATHER_VOCAB), runtime=shift_runtime)
    engine.initialize().unwrap()
    yield engine
    engine.close()


@pytest.fixture(autouse=True)
def reset_litegen_logging():
    """Drop console handlers installed by setup_logging so they don't outlive the captured stream."""
    yield
    logger = logging.getLogger("litegen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
