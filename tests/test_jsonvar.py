import math

import pytest

from sketchkit.jsonvar import JSONVar, parse, stringify, typeof, undefined


@pytest.mark.parametrize(
    "text",
    ['{"a":1,"b":[true,false,null],"c":"x"}', "[]", "{}", '"s\\n\\t"', "1.5"],
)
def test_round_trip(text):
    assert stringify(parse(text)) == text


def test_invalid_parse_is_undefined():
    value = parse("{bad")
    assert typeof(value) == "undefined"
    assert stringify(value) is None


def test_typeof():
    assert typeof(parse("true")) == "boolean"
    assert typeof(parse("null")) == "null"
    assert typeof(parse("3")) == "number"
    assert typeof(parse('"x"')) == "string"
    assert typeof(parse("[1]")) == "array"
    assert typeof(parse("{}")) == "object"


def test_nested_assignment_updates_root():
    var = JSONVar()
    var["a"]["b"] = 1
    var["list"][2] = "z"
    assert stringify(var) == '{"a":{"b":1},"list":[null,null,"z"]}'


def test_assign_undefined_removes_member():
    var = parse('{"a":1,"b":2}')
    var["a"] = undefined
    assert not var.has_own_property("a")
    assert var.keys() == JSONVar(["b"])


def test_conversions():
    var = parse('{"n":3.9,"s":"text","t":true,"big":1e20}')
    assert int(var["n"]) == 3
    assert float(var["n"]) == 3.9
    assert str(var["s"]) == "text"
    assert bool(var["t"])
    assert int(var["big"]) == 2147483647
    assert math.isnan(float(var["s"]))


def test_equality():
    assert parse('{"a":[1,2]}') == parse('{ "a" : [1, 2] }')
    assert parse("null") == None  # noqa: E711
    assert parse("[1]") != parse("[2]")


def test_length():
    assert parse("[1,2,3]").length() == 3
    assert parse('"abcd"').length() == 4
    assert parse("{}").length() == -1


def test_property_equal_and_filter():
    var = parse('[{"id":"a","v":1},{"id":"b","v":2},{"id":"a","v":3}]')
    matches = var.filter("id", "a")
    assert matches.length() == 2
    single = var.filter("id", "b")
    assert int(single["v"]) == 2
    assert typeof(var.filter("id", "q")) == "undefined"
    obj = parse('{"id":"a"}')
    assert obj.has_property_equal("id", JSONVar("a"))
    assert not obj.has_property_equal("id", "b")


def test_trailing_text_ignored_and_unicode():
    assert int(parse("12abc")) == 12
    assert str(parse('"\\ud83d\\ude00"')) == "\U0001F600"


def test_copy_is_independent():
    original = parse('{"a":1}')
    copy = JSONVar(original)
    copy["a"] = 2
    assert stringify(original) == '{"a":1}'