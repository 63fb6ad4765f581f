"""Tests for type-literal decomposition."""

from __future__ import annotations

from tspress.analyzers.decompose import decompose
from tspress.models import DocBlock, FieldEntry, ShapeTag


def test_scalar_text_is_returned_trimmed() -> None:
    assert decompose("  string | number ") == ("string | number", ShapeTag.SCALAR)
    assert decompose("Partial<Options>") == ("Partial<Options>", ShapeTag.SCALAR)


def test_record_yields_single_representative_field() -> None:
    value, shape = decompose("Record<string, { id: number }>")
    assert shape is ShapeTag.KEYED_GENERIC
    assert value == {"string": FieldEntry(value="{ id: number }", doc=None)}


def test_map_is_treated_as_keyed_generic() -> None:
    value, shape = decompose("Map<UserId, Array<Role>>")
    assert shape is ShapeTag.KEYED_GENERIC
    assert list(value) == ["UserId"]
    assert value["UserId"].value == "Array<Role>"


def test_keyed_generic_without_value_degrades_to_scalar() -> None:
    assert decompose("Record<string>") == ("Record<string>", ShapeTag.SCALAR)


def test_inline_object_literal_fields() -> None:
    value, shape = decompose("{a: string, b: number}")
    assert shape is ShapeTag.OBJECT
    assert value == {
        "a": FieldEntry(value="string", doc=None),
        "b": FieldEntry(value="number", doc=None),
    }


def test_multiline_object_with_comments_preserves_order() -> None:
    text = """{
        /** user name */
        name: string;
        // age in years
        age?: number;
        tags: string[];
    }"""
    value, shape = decompose(text)
    assert shape is ShapeTag.OBJECT
    assert list(value) == ["name", "age", "tags"]
    assert value["name"].doc == DocBlock.single_line("user name")
    assert value["age"] == FieldEntry(value="number", doc=DocBlock.single_line("age in years"))
    assert value["tags"].doc is None


def test_array_of_object_literal() -> None:
    value, shape = decompose("{ id: number, label: string }[]")
    assert shape is ShapeTag.ARRAY
    assert [entry.value for entry in value.values()] == ["number", "string"]


def test_nested_literal_stays_opaque() -> None:
    value, shape = decompose("{ outer: { inner: string }, count: number }")
    assert shape is ShapeTag.OBJECT
    assert value["outer"].value == "{ inner: string }"
    assert value["count"].value == "number"


def test_function_valued_member_keeps_arrow() -> None:
    value, _ = decompose("{ onChange: (next: string) => void }")
    assert value["onChange"].value == "(next: string) => void"


def test_trailing_comment_is_not_attached_to_next_field() -> None:
    text = """{
        a: string, // belongs to a
        b: number
    }"""
    value, _ = decompose(text)
    assert value["b"].doc is None


def test_multiline_block_comment_becomes_single_line() -> None:
    text = """{
        /**
         * first line
         * second line
         */
        value: boolean
    }"""
    value, _ = decompose(text)
    assert value["value"].doc == DocBlock.single_line("first line second line")


def test_custom_line_separator_splits_comment_pieces() -> None:
    value, _ = decompose("{ /* one|two */ flag: boolean }", line_separator="|")
    assert value["flag"].doc == DocBlock.single_line("one two")


def test_empty_or_memberless_literal_is_scalar() -> None:
    assert decompose("{}") == ("{}", ShapeTag.SCALAR)
    assert decompose("{ [Symbol.iterator] }") == ("{ [Symbol.iterator] }", ShapeTag.SCALAR)


def test_union_of_literals_is_scalar() -> None:
    text = "{ a: string } | { b: number }"
    assert decompose(text) == (text, ShapeTag.SCALAR)


def test_union_spread_over_lines_stays_one_field() -> None:
    text = '{\n  mode:\n    | "light"\n    | "dark";\n  size: number;\n}'
    value, shape = decompose(text)
    assert shape is ShapeTag.OBJECT
    assert value == {
        "mode": FieldEntry(value='"light" | "dark"', doc=None),
        "size": FieldEntry(value="number", doc=None),
    }


def test_arrow_continued_on_next_line() -> None:
    value, _ = decompose("{\n  handler: (event: string) =>\n    void;\n}")
    assert value["handler"].value == "(event: string) => void"


def test_unrecognised_member_degrades_whole_literal() -> None:
    text = "{ a: string; [Symbol.iterator]; b: number }"
    assert decompose(text) == (text, ShapeTag.SCALAR)


def test_block_comment_after_separator_documents_next_field() -> None:
    value, _ = decompose("{ a: string; /** b doc */ b: number }")
    assert value["a"].doc is None
    assert value["b"].doc == DocBlock.single_line("b doc")


def test_block_comment_ending_the_line_trails_previous_field() -> None:
    value, _ = decompose("{\n  a: string, /* about a */\n  b: number\n}")
    assert value["b"].doc is None
