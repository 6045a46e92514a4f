import json
import math

import pytest

from scraped.values import (
    NULL,
    Array,
    Bool,
    Null,
    Number,
    Object,
    String,
    dumps,
    from_python,
    loads,
    to_python,
)


SAMPLE = Object({
    "title": String("Résumé ✓"),
    "missing": NULL,
    "visible": Bool(False),
    "count": Number(3),
    "ratio": Number(0.1),
    "big": Number(1.7976931348623157e308),
    "headings": Array([String("A"), String("B")]),
    "nested": Object({"empty": Array(), "inner": Object({"x": Number(-2.5)})}),
})


class TestRoundTrip:

    def test_sample_survives_serialization(self):
        assert loads(dumps(SAMPLE)) == SAMPLE

    @pytest.mark.parametrize("value", [
        NULL,
        Bool(True),
        Number(0),
        Number(2 ** 60),
        Number(5e-324),
        String(""),
        Array(),
        Object(),
    ])
    def test_leaves_and_empty_containers(self, value):
        assert loads(dumps(value)) == value

    def test_object_keeps_insertion_order(self):
        value = Object({"z": NULL, "a": NULL, "m": NULL})
        assert list(json.loads(dumps(value))) == ["z", "a", "m"]


class TestConversion:

    def test_bool_is_not_a_number(self):
        assert from_python(True) == Bool(True)
        assert from_python(1) == Number(1.0)
        assert Bool(True) != Number(1)

    def test_integral_numbers_serialize_as_ints(self):
        assert to_python(Number(3)) == 3
        assert isinstance(to_python(Number(3)), int)
        assert to_python(Number(2.5)) == 2.5

    def test_numbers_are_stored_as_floats(self):
        assert Number(1) == Number(1.0)
        assert isinstance(Number(1).value, float)

    def test_non_finite_numbers_rejected(self):
        with pytest.raises(ValueError):
            Number(math.nan)
        with pytest.raises(ValueError):
            Number(math.inf)

    def test_unsupported_types_rejected(self):
        with pytest.raises(TypeError):
            from_python(object())
        with pytest.raises(TypeError):
            from_python({1: "x"})
        with pytest.raises(TypeError):
            String(3)

    def test_deep_equality(self):
        a = from_python({"list": [1, "two", None, {"k": True}]})
        b = from_python({"list": [1.0, "two", None, {"k": True}]})
        assert a == b
        assert a != from_python({"list": [1, "two", None, {"k": False}]})

    def test_null_instances_are_equal(self):
        assert Null() == NULL
        assert to_python(NULL) is None
