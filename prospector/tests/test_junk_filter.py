import json
from unittest.mock import MagicMock, patch

import pytest

from prospector.classification.config import LLMConfig
from prospector.classification.junk_filter import JunkClassifier, chunked, parse_exclusions

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)

CHAINS = {"Carrefour", "Crédit Agricole", "La Poste", "McDonald's"}


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


def _deterministic_create(**kwargs):
    """Stand-in LLM that flags every known chain present in the request."""
    names = json.loads(kwargs["messages"][1]["content"])
    return _mock_groq_response(json.dumps({"excluded": [n for n in names if n in CHAINS]}))


@patch("prospector.classification.junk_filter.Groq")
def test_find_exclusions_returns_flagged_names(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps({"excluded": ["Crédit Agricole"]})
    )

    result = JunkClassifier(ENABLED_CONFIG).find_exclusions(["Boulangerie Dupont", "Crédit Agricole"])

    assert result == {"Crédit Agricole"}
    mock_groq_cls.assert_called_once_with(api_key="test-key", timeout=ENABLED_CONFIG.timeout)


@patch("prospector.classification.junk_filter.Groq")
def test_request_sends_names_as_json(mock_groq_cls):
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response('{"excluded": []}')

    JunkClassifier(ENABLED_CONFIG).find_exclusions(["Café de l'Église"])

    kwargs = create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.model
    assert kwargs["response_format"] == {"type": "json_object"}
    assert json.loads(kwargs["messages"][1]["content"]) == ["Café de l'Église"]


def test_thousand_names_make_two_calls_and_second_failure_is_skipped():
    client = MagicMock()
    client.chat.completions.create.side_effect = [
        _mock_groq_response(json.dumps({"excluded": ["name-3", "name-42"]})),
        Exception("API timeout"),
    ]
    names = [f"name-{i}" for i in range(1000)]

    result = JunkClassifier(ENABLED_CONFIG, client=client).find_exclusions(names)

    assert client.chat.completions.create.call_count == 2
    first_chunk = json.loads(client.chat.completions.create.call_args_list[0].kwargs["messages"][1]["content"])
    assert len(first_chunk) == 500
    assert result == {"name-3", "name-42"}


def test_every_chunk_failing_excludes_nothing():
    client = MagicMock()
    client.chat.completions.create.side_effect = ConnectionError("offline")

    result = JunkClassifier(LLMConfig(api_key="k", chunk_size=2), client=client).find_exclusions(
        ["Carrefour", "La Poste", "Chez Paul"]
    )

    assert result == set()
    assert client.chat.completions.create.call_count == 2


def test_failed_middle_chunk_keeps_other_chunks():
    client = MagicMock()
    client.chat.completions.create.side_effect = [
        _mock_groq_response('{"excluded": ["Carrefour"]}'),
        RuntimeError("boom"),
        _mock_groq_response('{"excluded": ["La Poste"]}'),
    ]
    result = JunkClassifier(LLMConfig(api_key="k", chunk_size=1), client=client).find_exclusions(
        ["Carrefour", "Lidl", "La Poste"]
    )
    assert result == {"Carrefour", "La Poste"}


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 500])
def test_exclusions_do_not_depend_on_chunking(chunk_size):
    names = ["Carrefour", "Chez Paul", "La Poste", "Boulangerie Dupont",
             "McDonald's", "Crédit Agricole", "Fleurs de Marie", "Carrefour"]
    single = MagicMock()
    single.chat.completions.create.side_effect = _deterministic_create
    chunked_client = MagicMock()
    chunked_client.chat.completions.create.side_effect = _deterministic_create

    whole = JunkClassifier(LLMConfig(api_key="k", chunk_size=len(names)), client=single).find_exclusions(names)
    split = JunkClassifier(LLMConfig(api_key="k", chunk_size=chunk_size), client=chunked_client).find_exclusions(names)

    assert whole == split == CHAINS


def test_names_outside_the_chunk_are_ignored():
    client = MagicMock()
    client.chat.completions.create.return_value = _mock_groq_response(
        '{"excluded": ["Carrefour", "carrefour", "Auchan"]}'
    )
    result = JunkClassifier(ENABLED_CONFIG, client=client).find_exclusions(["Carrefour", "Chez Paul"])
    assert result == {"Carrefour"}


@patch("prospector.classification.junk_filter.Groq")
def test_bad_json_excludes_nothing(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    result = JunkClassifier(ENABLED_CONFIG).find_exclusions(["Carrefour"])

    assert result == set()


def test_disabled_makes_no_call():
    client = MagicMock()
    assert JunkClassifier(DISABLED_CONFIG, client=client).find_exclusions(["Carrefour"]) == set()
    client.chat.completions.create.assert_not_called()


@patch("prospector.classification.junk_filter.Groq")
def test_missing_api_key_makes_no_call(mock_groq_cls):
    assert JunkClassifier(LLMConfig(api_key="")).find_exclusions(["Carrefour"]) == set()
    mock_groq_cls.assert_not_called()


def test_empty_names_makes_no_call():
    client = MagicMock()
    assert JunkClassifier(ENABLED_CONFIG, client=client).find_exclusions([]) == set()
    client.chat.completions.create.assert_not_called()


class TestParseExclusions:
    def test_object_form(self):
        assert parse_exclusions('{"excluded": ["A", "B"]}') == ["A", "B"]

    def test_bare_list(self):
        assert parse_exclusions('["A"]') == ["A"]

    def test_non_string_items(self):
        assert parse_exclusions('{"excluded": ["A", 3]}') == []

    def test_wrong_shape(self):
        assert parse_exclusions('{"excluded": "A"}') == []
        assert parse_exclusions('{"names": ["A"]}') == []
        assert parse_exclusions("42") == []

    def test_empty_content(self):
        assert parse_exclusions("") == []


def test_chunked_sizes():
    assert [len(c) for c in chunked(list(range(1001)), 500)] == [500, 500, 1]
    assert chunked([], 500) == []
    with pytest.raises(ValueError):
        chunked([1], 0)
