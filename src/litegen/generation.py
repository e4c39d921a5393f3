import logging
from collections.abc import Generator, Iterator
from dataclasses import dataclass, field

from litegen.inference import InferenceInvoker
from litegen.tokenization.tokenizer import BaseTokenizer

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generate call."""

    text: str
    token_ids: list[int] = field(default_factory=list)
    words: list[str] = field(default_factory=list)
    stopped_on_eos: bool = False


def stream_generate(
    invoker: InferenceInvoker,
    tokenizer: BaseTokenizer,
    start_text: str,
    max_output_length: int = 20,
    eos_token_id: int | None = None,
) -> Iterator[tuple[int, str]]:
    """
    Greedy autoregressive generation, one word per step.

    Each step re-tokenizes the whole running text, runs a forward pass and
    appends the argmax word. There is no KV cache; the model always sees the
    first ``seq_len`` words. Arguments are checked when called, before the
    first step runs.

    yields:
        tuple[int, str]: The predicted token id and its decoded word.
    """
    if max_output_length < 0:
        raise ValueError(f"max_output_length must be non-negative, got {max_output_length}")
    return _greedy_steps(invoker, tokenizer, start_text, max_output_length, eos_token_id)


def _greedy_steps(
    invoker: InferenceInvoker,
    tokenizer: BaseTokenizer,
    current_text: str,
    max_output_length: int,
    eos_token_id: int | None,
) -> Generator[tuple[int, str]]:
    for step in range(max_output_length):
        token_ids = tokenizer.encode_padded(current_text)
        input_length = tokenizer.count_tokens(current_text)
        logger.debug(f"step {step}: size: {len(token_ids)}, tokenIds: {', '.join(map(str, token_ids))}")

        next_token_id = invoker.predict_next(token_ids, input_length)

        if eos_token_id is not None and next_token_id == eos_token_id:
            logger.debug(f"step {step}: EOS token {eos_token_id} predicted, stopping")
            return

        next_word = tokenizer.decode_token(next_token_id)
        current_text += f" {next_word}"
        yield next_token_id, next_word


def generate(
    invoker: InferenceInvoker,
    tokenizer: BaseTokenizer,
    start_text: str,
    max_output_length: int = 20,
    eos_token_id: int | None = None,
) -> GenerationResult:
    """Run ``stream_generate`` to completion and collect the result."""
    result = GenerationResult(text=start_text)
    for token_id, word in stream_generate(invoker, tokenizer, start_text, max_output_length, eos_token_id):
        result.text += f" {word}"
        result.token_ids.append(token_id)
        result.words.append(word)
    result.stopped_on_eos = eos_token_id is not None and len(result.token_ids) < max_output_length
    return result


def generate_text(
    invoker: InferenceInvoker,
    tokenizer: BaseTokenizer,
    start_text: str,
    max_output_length: int = 20,
    eos_token_id: int | None = None,
) -> str:
    """
    Generate text from a start text using greedy decoding.
    """
    return generate(invoker, tokenizer, start_text, max_output_length, eos_token_id).text
