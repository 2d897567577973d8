import pytest

from gateway.normalizer import normalize_answer


def test_plain_string_is_returned_unchanged():
    assert normalize_answer("  just text \n") == "  just text \n"


@pytest.mark.parametrize("payload,expected", [
    ({"result": "r", "answer": "a", "output": "o"}, "r"),
    ({"answer": "a", "output": "o"}, "a"),
    ({"output": "o", "choices": [{"text": "t"}]}, "o"),
    ({"choices": [{"text": "t", "message": {"content": "m"}}]}, "t"),
    ({"choices": [{"message": {"content": "X"}}]}, "X"),
])
def test_field_priority(payload, expected):
    assert normalize_answer(payload) == expected


def test_empty_field_falls_through():
    assert normalize_answer({"result": "", "answer": "a"}) == "a"


def test_non_string_field_is_serialized():
    assert normalize_answer({"result": {"label": "cat", "score": 0.9}}) == '{"label":"cat","score":0.9}'


def test_unknown_shape_falls_back_to_json():
    assert normalize_answer({"data": [1, 2]}) == '{"data":[1,2]}'
    assert normalize_answer({"choices": []}) == '{"choices":[]}'
    assert normalize_answer([]) == "[]"
    assert normalize_answer(42) == "42"


@pytest.mark.parametrize("payload", [None, "", 0, False])
def test_absent_payload(payload):
    assert normalize_answer(payload) is None
