"""
Vocabulary loading.

The vocabulary is a flat JSON object mapping token strings to integer ids.
It is loaded once per engine and shared read-only afterwards.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from litegen.exceptions import VocabularyError

logger = logging.getLogger(__name__)


def load_vocabulary(path: str | Path) -> dict[str, int]:
    """
    Load a token -> id mapping from a JSON file.

    Args:
        path: Path to a JSON object of string -> integer pairs.

    Returns:
        dict[str, int]: Every pair in the object.

    Raises:
        FileNotFoundError: If the file does not exist.
        VocabularyError: If the file is not a JSON object of integer ids.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise VocabularyError(f"Vocabulary file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise VocabularyError(f"Vocabulary file {path} must contain a JSON object, got {type(data).__name__}")

    vocab: dict[str, int] = {}
    for token, token_id in data.items():
        # bool is an int subclass; "true" is not a token id.
        if isinstance(token_id, bool) or not isinstance(token_id, int):
            raise VocabularyError(f"Token {token!r} has non-integer id {token_id!r}")
        vocab[token] = token_id

    logger.info(f"Loaded vocabulary with {len(vocab)} entries from {path}")
    return vocab


def create_inverse_vocabulary(vocab: Mapping[str, int]) -> dict[int, str]:
    """Build the id -> token mapping. If ids repeat, the last token wins."""
    return {token_id: token for token, token_id in vocab.items()}


@dataclass(frozen=True)
class Vocabulary:
    """Immutable pair of token -> id and id -> token mappings."""

    token_to_id_map: Mapping[str, int]
    id_to_token_map: Mapping[int, str]

    @classmethod
    def from_dict(cls, vocab: Mapping[str, int]) -> "Vocabulary":
        forward = dict(vocab)
        return cls(
            token_to_id_map=MappingProxyType(forward),
            id_to_token_map=MappingProxyType(create_inverse_vocabulary(forward)),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "Vocabulary":
        return cls.from_dict(load_vocabulary(path))

    @property
    def size(self) -> int:
        return len(self.token_to_id_map)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, token: object) -> bool:
        return token in self.token_to_id_map

    def token_to_id(self, token: str, default: int = 0) -> int:
        return self.token_to_id_map.get(token, default)

    def id_to_token(self, token_id: int, default: str = "<unk>") -> str:
        return self.id_to_token_map.get(token_id, default)
