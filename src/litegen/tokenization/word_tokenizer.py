from collections.abc import Mapping

import numpy as np

from litegen.vocabulary import Vocabulary

DEFAULT_SEQ_LEN = 20
PAD_TOKEN_ID = 0
UNK_TOKEN_ID = 0
UNK_MARKER = "<unk>"


def _split_words(text: str) -> list[str]:
    # Single-space split: "a  b" gives ["a", "", "b"] and "" gives [""].
    return text.lower().split(" ")


def tokenize(
    text: str,
    vocabulary: Vocabulary | Mapping[str, int],
    seq_len: int = DEFAULT_SEQ_LEN,
    unk_token_id: int = UNK_TOKEN_ID,
) -> np.ndarray:
    """
    Map text to a fixed-length sequence of token ids.

    The text is lower-cased and split on single spaces. Words missing from the
    vocabulary become ``unk_token_id``. The ids are left-aligned, truncated to
    ``seq_len`` and zero-padded.

    Args:
        text: Raw input text.
        vocabulary: Token -> id mapping.
        seq_len: Length of the returned sequence.
        unk_token_id: Id substituted for out-of-vocabulary words.

    Returns:
        np.ndarray: int32 array of shape (seq_len,).
    """
    lookup = vocabulary.token_to_id_map if isinstance(vocabulary, Vocabulary) else vocabulary
    words = _split_words(text)[:seq_len]

    token_ids = np.full(seq_len, PAD_TOKEN_ID, dtype=np.int32)
    token_ids[: len(words)] = [lookup.get(word, unk_token_id) for word in words]
    return token_ids


def count_tokens(text: str, seq_len: int = DEFAULT_SEQ_LEN) -> int:
    """Number of real (non-padding) positions ``tokenize`` fills for ``text``."""
    return min(len(_split_words(text)), seq_len)


class WordTokenizer:
    """
    Whitespace tokenizer over a fixed vocabulary.

    Unknown words encode to ``unk_token_id`` and unknown ids decode to
    ``unk_marker``. Both substitutions are lossy on purpose: they keep
    generation running instead of failing on out-of-vocabulary input.
    """

    def __init__(
        self,
        vocabulary: Vocabulary,
        seq_len: int = DEFAULT_SEQ_LEN,
        unk_token_id: int = UNK_TOKEN_ID,
        unk_marker: str = UNK_MARKER,
        eos_token_id: int | None = None,
    ):
        if seq_len <= 0:
            raise ValueError("seq_len must be positive")
        self.vocabulary = vocabulary
        self.seq_len = seq_len
        self.unk_token_id = unk_token_id
        self.unk_marker = unk_marker
        self.eos_token_id = eos_token_id
        self.pad_token_id = PAD_TOKEN_ID

    @property
    def vocab_size(self) -> int:
        return self.vocabulary.size

    def encode(self, text: str) -> list[int]:
        return [self.vocabulary.token_to_id(word, self.unk_token_id) for word in _split_words(text)]

    def encode_padded(self, text: str) -> np.ndarray:
        return tokenize(text, self.vocabulary, self.seq_len, self.unk_token_id)

    def count_tokens(self, text: str) -> int:
        return count_tokens(text, self.seq_len)

    def decode_token(self, token_id: int) -> str:
        return self.vocabulary.id_to_token(token_id, self.unk_marker)

    def decode(self, tokens: list[int]) -> str:
        return " ".join(self.decode_token(token_id) for token_id in tokens)
