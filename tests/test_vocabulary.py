import json

import pytest

from litegen.exceptions import VocabularyError
from litegen.vocabulary import Vocabulary, create_inverse_vocabulary, load_vocabulary


class TestLoadVocabulary:
    def test_loads_all_pairs(self, vocab_file, weather_vocab):
        assert load_vocabulary(vocab_file) == weather_vocab

    def test_accepts_str_path(self, vocab_file, weather_vocab):
        assert load_vocabulary(str(vocab_file)) == weather_vocab

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_vocabulary(tmp_path / "missing.json")

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(VocabularyError, match="not valid JSON"):
            load_vocabulary(path)

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps(["the", "weather"]), encoding="utf-8")
        with pytest.raises(VocabularyError, match="JSON object"):
            load_vocabulary(path)

    @pytest.mark.parametrize("bad_id", ["1", 1.5, None, True])
    def test_non_integer_id_raises(self, tmp_path, bad_id):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"the": 1, "weather": bad_id}), encoding="utf-8")
        with pytest.raises(VocabularyError, match="weather"):
            load_vocabulary(path)

    def test_vocabulary_error_is_value_error(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_vocabulary(path)

    def test_unicode_tokens(self, tmp_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({"Ġthe": 262, "你好": 7}, ensure_ascii=False), encoding="utf-8")
        assert load_vocabulary(path) == {"Ġthe": 262, "你好": 7}


class TestInverseVocabulary:
    def test_left_inverse(self, weather_vocab):
        inverse = create_inverse_vocabulary(weather_vocab)
        for token_id in weather_vocab.values():
            assert weather_vocab[inverse[token_id]] == token_id

    def test_left_inverse_with_duplicate_ids(self):
        vocab = {"a": 1, "b": 1, "c": 2}
        inverse = create_inverse_vocabulary(vocab)
        assert inverse == {1: "b", 2: "c"}
        for token_id in vocab.values():
            assert vocab[inverse[token_id]] == token_id

    def test_empty(self):
        assert create_inverse_vocabulary({}) == {}


class TestVocabulary:
    def test_from_file(self, vocab_file, weather_vocab):
        vocab = Vocabulary.from_file(vocab_file)
        assert vocab.size == len(weather_vocab)
        assert len(vocab) == len(weather_vocab)
        assert "weather" in vocab
        assert vocab.token_to_id("weather") == 2
        assert vocab.id_to_token(2) == "weather"

    def test_defaults_for_unknown(self, weather_vocab):
        vocab = Vocabulary.from_dict(weather_vocab)
        assert vocab.token_to_id("sunny") == 0
        assert vocab.token_to_id("sunny", default=-1) == -1
        assert vocab.id_to_token(999) == "<unk>"
        assert vocab.id_to_token(999, default="?") == "?"

    def test_is_immutable(self, weather_vocab):
        vocab = Vocabulary.from_dict(weather_vocab)
        with pytest.raises(TypeError):
            vocab.token_to_id_map["sunny"] = 9
        with pytest.raises(TypeError):
            vocab.id_to_token_map[9] = "sunny"

    def test_detached_from_source_dict(self, weather_vocab):
        vocab = Vocabulary.from_dict(weather_vocab)
        weather_vocab["sunny"] = 9
        assert "sunny" not in vocab
