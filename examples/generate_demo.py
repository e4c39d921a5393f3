#!/usr/bin/env python3
"""Initialize the engine in the background, then run one greedy generation.

Usage:
    LITEGEN_MODEL_PATH=gpt2-64-8bits.tflite LITEGEN_VOCAB_PATH=vocab.json python examples/generate_demo.py
"""

import logging

from litegen import GenerationConfig, InitFailure, TextGenerationEngine
from litegen.utils import setup_logging

config = GenerationConfig()
setup_logging(config.log_level)
logger = logging.getLogger("litegen.demo")

# 1. Start initialization without blocking the caller
engine = TextGenerationEngine(config)
future = engine.initialize_async()

# 2. Check the result before any generation request
result = future.result()
if isinstance(result, InitFailure):
    raise SystemExit(f"Cannot initialize interpreter: {result.error}")

# 3. Generate
text = engine.generate_text("The weather is so good")
logger.info(f"generateText: {text}")
engine.close()
