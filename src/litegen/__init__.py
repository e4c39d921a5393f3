# Expose version

__version__ = "0.1.0"

from litegen.config import GenerationConfig, TensorSpec
from litegen.engine import InitFailure, InitResult, InitSuccess, TextGenerationEngine
from litegen.exceptions import EngineNotInitializedError, LitegenError, RuntimeBackendError, VocabularyError
from litegen.generation import GenerationResult, generate_text, stream_generate
from litegen.inference import InferenceInvoker, postprocess_output, prepare_input_buffer
from litegen.tokenization import WordTokenizer, tokenize
from litegen.vocabulary import Vocabulary, create_inverse_vocabulary, load_vocabulary

__all__ = [
    "EngineNotInitializedError",
    "GenerationConfig",
    "GenerationResult",
    "InferenceInvoker",
    "InitFailure",
    "InitResult",
    "InitSuccess",
    "LitegenError",
    "RuntimeBackendError",
    "TensorSpec",
    "TextGenerationEngine",
    "Vocabulary",
    "VocabularyError",
    "WordTokenizer",
    "create_inverse_vocabulary",
    "generate_text",
    "load_vocabulary",
    "postprocess_output",
    "prepare_input_buffer",
    "stream_generate",
    "tokenize",
]
