from .tokenizer import BaseTokenizer
from .word_tokenizer import WordTokenizer, count_tokens, tokenize

__all__ = ["BaseTokenizer", "WordTokenizer", "count_tokens", "tokenize"]
