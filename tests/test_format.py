import datetime
import json
import math

import pytest

from lognormalizer.json_helpers import EncodeError, cleanup_json, encode_tree
from lognormalizer.normalizer import FormatResult, Normalizer


def _failing_chain() -> Exception:
    try:
        try:
            raise KeyError("missing")
        except KeyError as exc:
            raise RuntimeError("lookup failed") from exc
    except RuntimeError as exc:
        return exc
    raise AssertionError("unreachable")


def test_format_returns_text_unchanged() -> None:
    result = Normalizer().format("plain message / with slash")
    assert result == FormatResult(text="plain message / with slash")
    assert result.ok


def test_format_encodes_none_as_null_and_reports_success() -> None:
    result = Normalizer().format(None)
    assert result.ok
    assert result.text == "null"
    assert result.unwrap() == "null"


def test_format_combined_record_produces_parseable_json() -> None:
    record = {
        "when": datetime.datetime(2015, 3, 7, 9, 5, 4),
        "error": _failing_chain(),
        "nested": [[[[list(range(30))]]]],
        "ratio": math.nan,
        "path": "/var/log/app",
        "name": "Jürgen",
    }

    result = Normalizer().format(record)

    assert result.ok
    assert "/var/log/app" in result.text
    assert "Jürgen" in result.text

    parsed = json.loads(result.text)
    assert parsed["when"] == "2015-03-07 09:05:04"
    assert parsed["ratio"] == "NaN"
    assert parsed["error"]["class"] == "RuntimeError"
    assert parsed["error"]["previous"]["class"] == "KeyError"
    assert parsed["error"]["previous"]["message"] == "'missing'"
    innermost = parsed["nested"][0][0][0][0]
    assert innermost["0"] == 0
    assert innermost["..."] == "Over 20 items, aborting normalization"
    assert len(innermost) == 20


def test_format_strips_escaped_null_bytes() -> None:
    result = Normalizer().format({"key\x00name": "va\x00lue"})
    assert result.text == '{"keyname": "value"}'


def test_format_reports_encode_failure_distinctly_from_null() -> None:
    result = Normalizer().format({"blob": b"\xff\xfe"})
    assert not result.ok
    assert result.text is None
    assert result.error
    with pytest.raises(EncodeError):
        result.unwrap()


def test_format_fails_for_raw_infinity_past_depth_cutoff() -> None:
    class Holder:
        def __init__(self) -> None:
            self.value = math.inf

    result = Normalizer(max_object_depth=0).format(Holder())
    assert not result.ok


def test_format_encodes_raw_objects_past_depth_cutoff_by_fields() -> None:
    class Inner:
        def __init__(self) -> None:
            self.when = datetime.date(2020, 1, 2)

    class Outer:
        def __init__(self) -> None:
            self.inner = Inner()

    result = Normalizer(max_object_depth=0).format(Outer())
    parsed = json.loads(result.unwrap())
    assert parsed[1] == {"inner": {"when": "2020-01-02"}}


def test_cleanup_collapses_double_backslashes() -> None:
    assert cleanup_json('"a\\\\b"') == '"a\\b"'
    assert cleanup_json('"x\\u0000y"') == '"xy"'


def test_encode_tree_rejects_unencodable_values() -> None:
    with pytest.raises(EncodeError):
        encode_tree([object()])
    with pytest.raises(EncodeError):
        encode_tree({"n": float("nan")})
