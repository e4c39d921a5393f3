from typing import Protocol

import numpy as np


class BaseTokenizer(Protocol):
    """
    Interface the generation loop needs from a tokenizer.
    """

    vocab_size: int
    pad_token_id: int
    unk_token_id: int
    eos_token_id: int | None

    def encode(self, text: str) -> list[int]:
        """Encodes a string into a list of token IDs (no padding)."""
        ...

    def encode_padded(self, text: str) -> np.ndarray:
        """Encodes a string into the fixed-length, zero-padded model input."""
        ...

    def count_tokens(self, text: str) -> int:
        """Number of real positions ``encode_padded`` fills."""
        ...

    def decode_token(self, token_id: int) -> str: ...

    def decode(self, tokens: list[int]) -> str:
        """Decodes a list of token IDs back into a string."""
        ...
