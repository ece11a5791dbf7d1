import pytest

from rosclient.msggen.parser import (
    BoundedArray,
    BoundedString,
    Comment,
    ComplexType,
    Constant,
    Field,
    MsgParseError,
    Primitive,
    StaticArray,
    TypeName,
    UnboundedArray,
    Value,
    ValueKind,
    comment,
    msg_spec,
)


def test_comment_cases():
    assert comment("#\n") == ("\n", Comment("#"))
    assert comment("# \n") == ("\n", Comment("# "))
    assert comment("# This message:\n#") == ("\n#", Comment("# This message:"))


def test_comment_requires_hash():
    with pytest.raises(MsgParseError):
        comment("abc\n")


def test_comment_with_lone_carriage_return_fails():
    with pytest.raises(MsgParseError):
        comment("#a\rb")


def test_spec_cases():
    assert msg_spec("\n") == ("", [(None, None)])
    assert msg_spec("") == ("", [])
    assert msg_spec("# \n") == ("", [(None, Comment("# "))])


def test_field():
    assert msg_spec("int32 x\n") == (
        "",
        [(Field(TypeName(Primitive("int32")), "x"), None)],
    )


def test_constant_with_comment():
    rest, lines = msg_spec("uint8 FOO=5 # five\n")
    assert rest == ""
    assert lines == [
        (
            Constant(TypeName(Primitive("uint8")), "FOO", Value(ValueKind.UINT, 5)),
            Comment("# five"),
        )
    ]


@pytest.mark.parametrize(
    "line, value",
    [
        ("int32 N = -3\n", Value(ValueKind.INT, -3)),
        ("float64 PI=3.14\n", Value(ValueKind.FLOAT, 3.14)),
        ("float64 E=1e5\n", Value(ValueKind.FLOAT, 1e5)),
        ("float64 H=.5\n", Value(ValueKind.FLOAT, 0.5)),
        ("float64 W=42.\n", Value(ValueKind.FLOAT, 42.0)),
        ("bool B=true\n", Value(ValueKind.BOOL, True)),
        ("bool B=false\n", Value(ValueKind.BOOL, False)),
        ('string S="hi"\n', Value(ValueKind.STRING, b"hi")),
    ],
)
def test_constant_values(line, value):
    rest, lines = msg_spec(line)
    assert rest == ""
    (item, note), = lines
    assert note is None
    assert item.value == value


def test_array_specifiers():
    rest, lines = msg_spec("int32[] a\nint32[5] b\nint32[<=3] c\n")
    assert rest == ""
    assert [item.type_name.array_spec for item, _ in lines] == [
        UnboundedArray(),
        StaticArray(5),
        BoundedArray(3),
    ]


def test_bounded_string():
    _, lines = msg_spec("string<=10 name\n")
    assert lines == [(Field(TypeName(BoundedString(10)), "name"), None)]


def test_complex_types():
    _, lines = msg_spec("geometry_msgs/Vector3 linear\nPose p\n")
    assert [item.type_name.base for item, _ in lines] == [
        ComplexType("geometry_msgs", "Vector3"),
        ComplexType(None, "Pose"),
    ]


def test_parsing_stops_at_bad_line():
    rest, lines = msg_spec("int32 x\n???\n")
    assert rest == "???\n"
    assert len(lines) == 1


def test_crlf_line_ending():
    assert msg_spec("int8 x\r\n") == (
        "",
        [(Field(TypeName(Primitive("int8")), "x"), None)],
    )


def test_missing_final_newline_leaves_text():
    assert msg_spec("int32 x") == ("int32 x", [])


def test_unterminated_string_is_error():
    with pytest.raises(MsgParseError):
        msg_spec('string S="abc\n')


def test_float_with_underscore_is_error():
    with pytest.raises(MsgParseError):
        msg_spec("float64 F=1_0.5\n")


def test_bad_string_escape_stops_parsing():
    text = 'string S="a\\q"\n'
    assert msg_spec(text) == (text, [])


def test_indented_field_with_comment():
    _, lines = msg_spec("  float32 y  # y coord\n")
    assert lines == [
        (Field(TypeName(Primitive("float32")), "y"), Comment("# y coord"))
    ]