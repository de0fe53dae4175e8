import json

import pytest

from skyrdle.config.game_settings import load_word_list
from skyrdle.services.vocabulary import Vocabulary


def test_bundled_word_list_loads():
    vocabulary = Vocabulary.load()
    assert len(vocabulary) > 100
    assert vocabulary.is_accepted('crane')
    assert 'CRANE' in vocabulary
    assert not vocabulary.is_accepted('ZZZZZ')


def test_word_list_accepts_plain_array(tmp_path):
    path = tmp_path / 'words.json'
    path.write_text(json.dumps(['lemon', 'Melon']))
    assert load_word_list(str(path)) == ['LEMON', 'MELON']


@pytest.mark.parametrize("content", ['[]', '{"words": []}', 'not json', '["ok", "n0pe"]'])
def test_word_list_rejects_bad_files(tmp_path, content):
    path = tmp_path / 'words.json'
    path.write_text(content)
    with pytest.raises(ValueError):
        load_word_list(str(path))


def test_word_list_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_word_list(str(tmp_path / 'missing.json'))
