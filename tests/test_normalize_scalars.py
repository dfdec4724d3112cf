import math

from lognormalizer.kinds import ValueKind, classify
from lognormalizer.normalizer import Normalizer, normalize_float


def test_normalize_returns_plain_scalars_unchanged() -> None:
    normalizer = Normalizer()
    assert normalizer.normalize(None) is None
    assert normalizer.normalize(True) is True
    assert normalizer.normalize(False) is False
    assert normalizer.normalize(3.5) == 3.5
    assert normalizer.normalize(42) == 42
    assert normalizer.normalize("hello") == "hello"


def test_normalize_replaces_non_finite_floats_with_markers() -> None:
    normalizer = Normalizer()
    assert normalizer.normalize(math.inf) == "INF"
    assert normalizer.normalize(-math.inf) == "-INF"
    assert normalizer.normalize(math.nan) == "NaN"


def test_normalize_keeps_negative_zero_and_integral_floats() -> None:
    normalizer = Normalizer()
    negative_zero = normalizer.normalize(-0.0)
    assert isinstance(negative_zero, float)
    assert math.copysign(1.0, negative_zero) == -1.0

    integral = normalizer.normalize(2.0)
    assert isinstance(integral, float)
    assert integral == 2.0


def test_normalize_float_helper_passes_finite_values() -> None:
    assert normalize_float(1.25) == 1.25
    assert normalize_float(float("inf")) == "INF"


def test_normalize_decodes_utf8_bytes_and_keeps_undecodable_bytes_raw() -> None:
    normalizer = Normalizer()
    assert normalizer.normalize("grüße".encode("utf-8")) == "grüße"
    assert normalizer.normalize(b"\xff\xfe") == b"\xff\xfe"


def test_unknown_values_render_as_type_marker() -> None:
    normalizer = Normalizer()
    assert normalizer.normalize(object()) == "[unknown(object)]"
    assert normalizer.normalize(len) == "[unknown(builtin_function_or_method)]"
    assert normalizer.normalize(1 + 2j) == "[unknown(complex)]"


def test_classify_covers_scalar_kinds() -> None:
    assert classify(None) is ValueKind.NIL
    assert classify(True) is ValueKind.BOOL
    assert classify(1) is ValueKind.NUMBER
    assert classify(1.5) is ValueKind.NUMBER
    assert classify("x") is ValueKind.TEXT
    assert classify(b"x") is ValueKind.TEXT
    assert classify(object()) is ValueKind.UNKNOWN


def test_classify_never_treats_classes_or_functions_as_objects() -> None:
    class Sample:
        pass

    def helper() -> None:
        return None

    assert classify(Sample) is ValueKind.UNKNOWN
    assert classify(helper) is ValueKind.UNKNOWN
    assert classify(math) is ValueKind.UNKNOWN
