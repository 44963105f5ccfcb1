"""
Tests for AlignmentOptions
==========================
Defaults, validation, dict and environment loading.
"""

import pytest

from config_logging import ConfigurationError, ValidationError
from sentence_align.options import AlignmentOptions


class TestDefaults:
    """Default option values."""

    def test_default_values(self):
        options = AlignmentOptions()
        assert options.window_size == 10
        assert options.similarity_threshold == 0.6
        assert options.ngram_size == 1
        assert options.ngram_granularity == 'char'
        assert options.anchor_offset == 1
        assert options.max_window_expansion == 3
        assert options.consecutive_fail_threshold == 3
        assert options.remove_inner_whitespace is True
        assert options.remove_punctuation is False
        assert options.remove_digits is False
        assert options.remove_latin is False
        assert options.remove_footnote_markers is False

    def test_index_range_follows_window(self):
        assert AlignmentOptions(window_size=7).index_range == 7

    def test_to_dict_omits_tokenizer(self):
        data = AlignmentOptions(tokenizer=str.split).to_dict()
        assert 'tokenizer' not in data
        assert data['window_size'] == 10

    def test_normalize_options(self):
        norm = AlignmentOptions(remove_digits=True).normalize_options()
        assert norm.remove_digits is True
        assert norm.remove_inner_whitespace is True


class TestValidation:
    """Invalid values raise ConfigurationError at construction."""

    @pytest.mark.parametrize("kwargs,field", [
        ({'window_size': 0}, 'window_size'),
        ({'window_size': -3}, 'window_size'),
        ({'window_size': True}, 'window_size'),
        ({'window_size': 2.5}, 'window_size'),
        ({'ngram_size': 0}, 'ngram_size'),
        ({'max_window_expansion': 0}, 'max_window_expansion'),
        ({'consecutive_fail_threshold': 0}, 'consecutive_fail_threshold'),
        ({'anchor_offset': -1}, 'anchor_offset'),
        ({'similarity_threshold': 1.5}, 'similarity_threshold'),
        ({'similarity_threshold': -0.1}, 'similarity_threshold'),
        ({'similarity_threshold': '0.6'}, 'similarity_threshold'),
        ({'ngram_granularity': 'token'}, 'ngram_granularity'),
        ({'remove_punctuation': 'yes'}, 'remove_punctuation'),
        ({'tokenizer': 'jieba'}, 'tokenizer'),
    ])
    def test_invalid_value(self, kwargs, field):
        with pytest.raises(ConfigurationError) as exc_info:
            AlignmentOptions(**kwargs)
        assert exc_info.value.field == field
        assert exc_info.value.code == 'CONFIGURATION_ERROR'

    def test_is_validation_error(self):
        with pytest.raises(ValidationError):
            AlignmentOptions(window_size=0)

    def test_boundary_values_accepted(self):
        AlignmentOptions(similarity_threshold=0.0, anchor_offset=0, window_size=1)
        AlignmentOptions(similarity_threshold=1)


class TestFromDict:
    """Tests for AlignmentOptions.from_dict()."""

    def test_snake_case(self):
        options = AlignmentOptions.from_dict({'window_size': 5, 'remove_digits': True})
        assert options.window_size == 5
        assert options.remove_digits is True

    def test_camel_case(self):
        options = AlignmentOptions.from_dict({
            'windowSize': 4,
            'similarityThreshold': 0.75,
            'ngramSize': 2,
            'ngramGranularity': 'word',
            'offset': 0,
            'removePunctuation': True,
        })
        assert options.window_size == 4
        assert options.similarity_threshold == 0.75
        assert options.ngram_size == 2
        assert options.ngram_granularity == 'word'
        assert options.anchor_offset == 0
        assert options.remove_punctuation is True

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AlignmentOptions.from_dict({'windowSzie': 4})
        assert exc_info.value.field == 'windowSzie'

    @pytest.mark.parametrize("data", [["windowSize", 3], "fast", 5, []])
    def test_non_mapping_rejected(self, data):
        with pytest.raises(ConfigurationError) as exc_info:
            AlignmentOptions.from_dict(data)
        assert exc_info.value.field == 'options'

    def test_none_gives_defaults(self):
        assert AlignmentOptions.from_dict(None) == AlignmentOptions()

    def test_tokenizer_passed_through(self):
        options = AlignmentOptions.from_dict({}, tokenizer=str.split)
        assert options.tokenizer is str.split


class TestFromEnv:
    """Tests for AlignmentOptions.from_env()."""

    def test_reads_prefixed_variables(self):
        options = AlignmentOptions.from_env(environ={
            'PA_ALIGN_WINDOW_SIZE': '4',
            'PA_ALIGN_SIMILARITY_THRESHOLD': '0.8',
            'PA_ALIGN_REMOVE_PUNCTUATION': 'yes',
            'PA_ALIGN_NGRAM_GRANULARITY': ' char ',
            'UNRELATED': 'x',
        })
        assert options.window_size == 4
        assert options.similarity_threshold == 0.8
        assert options.remove_punctuation is True
        assert options.ngram_granularity == 'char'

    def test_empty_environment(self):
        assert AlignmentOptions.from_env(environ={}) == AlignmentOptions()

    def test_custom_prefix(self):
        options = AlignmentOptions.from_env(prefix='X_', environ={'X_NGRAM_SIZE': '3'})
        assert options.ngram_size == 3

    def test_bad_boolean(self):
        with pytest.raises(ConfigurationError):
            AlignmentOptions.from_env(environ={'PA_ALIGN_REMOVE_DIGITS': 'maybe'})

    def test_bad_number(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AlignmentOptions.from_env(environ={'PA_ALIGN_WINDOW_SIZE': 'ten'})
        assert exc_info.value.field == 'window_size'

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv('PA_ALIGN_CONSECUTIVE_FAIL_THRESHOLD', '2')
        assert AlignmentOptions.from_env().consecutive_fail_threshold == 2
