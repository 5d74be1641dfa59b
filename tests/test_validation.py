import pytest

from shiptivity.errors import ClientError, ErrorKind
from shiptivity.validation import MAX_ID, parse_id, parse_priority


@pytest.mark.parametrize("raw, expected", [("12", 12), ("-3", -3), (7, 7), (str(MAX_ID), MAX_ID)])
def test_parse_id(raw, expected):
    assert parse_id(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "1_0", "+1", " 1 ", "1.0", "\u0661", True, None])
def test_parse_id_rejects_non_integers(raw):
    with pytest.raises(ClientError) as exc:
        parse_id(raw)
    assert exc.value.kind is ErrorKind.INVALID_ID


@pytest.mark.parametrize("raw", [str(MAX_ID + 1), str(-MAX_ID - 2), 2**64])
def test_parse_id_out_of_range_is_not_found(raw):
    with pytest.raises(ClientError) as exc:
        parse_id(raw)
    assert exc.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.parametrize("raw", [0, -1, True, "3", 2.5])
def test_parse_priority_rejects(raw):
    with pytest.raises(ClientError) as exc:
        parse_priority(raw)
    assert exc.value.kind is ErrorKind.INVALID_PRIORITY


def test_parse_priority_accepts_positive_or_missing():
    assert parse_priority(4) == 4
    assert parse_priority(None) is None
