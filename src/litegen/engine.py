"""
Text generation engine.

Bundles the vocabulary, tokenizer, runtime and buffers built once at startup.
Callers construct one engine, check the result of ``initialize`` and pass the
engine to whatever issues generation requests.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from litegen.config import GenerationConfig
from litegen.exceptions import EngineNotInitializedError
from litegen.generation import GenerationResult, generate, stream_generate
from litegen.inference import InferenceInvoker
from litegen.runtime import InferenceRuntime, create_runtime
from litegen.tokenization.word_tokenizer import WordTokenizer
from litegen.vocabulary import Vocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitSuccess:
    engine: "TextGenerationEngine"

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> "TextGenerationEngine":
        return self.engine


@dataclass(frozen=True)
class InitFailure:
    error: BaseException

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> "TextGenerationEngine":
        raise EngineNotInitializedError(f"Interpreter initialization failed: {self.error}") from self.error


InitResult = InitSuccess | InitFailure


class TextGenerationEngine:
    """
    Greedy text generation over an on-device model.
    """

    def __init__(
        self,
        config: GenerationConfig | None = None,
        vocabulary: Vocabulary | None = None,
        runtime: InferenceRuntime | None = None,
    ) -> None:
        self.config = config or GenerationConfig()
        self.vocabulary = vocabulary
        self.tokenizer: WordTokenizer | None = None
        self.invoker: InferenceInvoker | None = None
        self._runtime = runtime
        self._init_lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self.invoker is not None and self.tokenizer is not None

    def _load(self) -> None:
        if self.vocabulary is None:
            if not self.config.vocab_path:
                raise ValueError("vocab_path is not configured")
            self.vocabulary = Vocabulary.from_file(self.config.vocab_path)

        input_spec = self.config.input_spec()
        output_spec = self.config.output_spec()

        runtime = self._runtime
        if runtime is None:
            if not self.config.model_path:
                raise ValueError("model_path is not configured")
            logger.info(f"Loading model from {self.config.model_path} (runtime={self.config.runtime})")
            runtime = create_runtime(
                self.config.model_path,
                input_spec,
                output_spec,
                runtime=self.config.runtime,
                num_threads=self.config.num_threads,
            )

        self.tokenizer = WordTokenizer(
            self.vocabulary,
            seq_len=self.config.seq_len,
            unk_token_id=self.config.unk_token_id,
            unk_marker=self.config.unk_marker,
            eos_token_id=self.config.eos_token_id,
        )
        self._runtime = runtime
        self.invoker = InferenceInvoker(runtime, input_spec, output_spec)

    def initialize(self) -> InitResult:
        """
        Load the vocabulary and model and build the interpreter.

        Failures are logged and returned, not raised. The engine stays unusable
        after a failure; there is no retry.
        """
        with self._init_lock:
            if self.is_ready:
                return InitSuccess(self)
            try:
                self._load()
            except Exception as e:
                logger.error("Cannot initialize interpreter", exc_info=e)
                self.tokenizer = None
                self.invoker = None
                return InitFailure(e)

        logger.info("Interpreter initialized")
        return InitSuccess(self)

    def initialize_async(
        self,
        executor: ThreadPoolExecutor | None = None,
        on_success: Callable[["TextGenerationEngine"], None] | None = None,
        on_failure: Callable[[BaseException], None] | None = None,
    ) -> Future:
        """
        Start ``initialize`` in the background.

        Returns:
            Future[InitResult]: Resolves once initialization finishes. The
            callbacks, if given, run on the worker thread.
        """
        own_executor = executor is None
        if own_executor:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="litegen-init")

        def _run() -> InitResult:
            result = self.initialize()
            if isinstance(result, InitSuccess) and on_success is not None:
                on_success(result.engine)
            elif isinstance(result, InitFailure) and on_failure is not None:
                on_failure(result.error)
            return result

        future = executor.submit(_run)
        if own_executor:
            executor.shutdown(wait=False)
        return future

    def _require_ready(self) -> tuple[InferenceInvoker, WordTokenizer]:
        if self.invoker is None or self.tokenizer is None:
            raise EngineNotInitializedError("Interpreter is not initialized; call initialize() and check its result")
        return self.invoker, self.tokenizer

    def run_inference(self, input_text: str) -> int:
        """Tokenize ``input_text``, run one forward pass and return the greedy next-token id."""
        invoker, tokenizer = self._require_ready()
        token_ids = tokenizer.encode_padded(input_text)
        logger.debug(f"size: {len(token_ids)}, tokenIds: {', '.join(map(str, token_ids))}")
        return invoker.predict_next(token_ids, tokenizer.count_tokens(input_text))

    def generate(
        self,
        start_text: str,
        max_output_length: int | None = None,
        eos_token_id: int | None = None,
    ) -> GenerationResult:
        invoker, tokenizer = self._require_ready()
        return generate(
            invoker,
            tokenizer,
            start_text,
            max_output_length=self.config.max_output_length if max_output_length is None else max_output_length,
            eos_token_id=self.config.eos_token_id if eos_token_id is None else eos_token_id,
        )

    def generate_text(
        self,
        start_text: str,
        max_output_length: int | None = None,
        eos_token_id: int | None = None,
    ) -> str:
        """Greedy generation; returns the start text followed by the generated words."""
        return self.generate(start_text, max_output_length, eos_token_id).text

    def stream_generate(
        self,
        start_text: str,
        max_output_length: int | None = None,
        eos_token_id: int | None = None,
    ) -> Iterator[tuple[int, str]]:
        invoker, tokenizer = self._require_ready()
        return stream_generate(
            invoker,
            tokenizer,
            start_text,
            max_output_length=self.config.max_output_length if max_output_length is None else max_output_length,
            eos_token_id=self.config.eos_token_id if eos_token_id is None else eos_token_id,
        )

    def close(self) -> None:
        """Release the runtime."""
        if self._runtime is not None:
            self._runtime.close()
        self._runtime = None
        self.invoker = None
        self.tokenizer = None
