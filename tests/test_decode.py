"""Tests for GOD decoder."""

import sys
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from god import (
    DecodeOptions,
    GodTypeError,
    StructuralError,
    UsageError,
    decode,
    god_field,
    unmarshal,
)


@dataclass
class Person:
    name: str = ""
    age: int = 0
    address: str = god_field("addr", default="")


@dataclass
class Profile:
    person: Person = field(default_factory=Person)
    scores: dict[str, int] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    nickname: Optional[str] = None


@dataclass
class Flags:
    active: bool = False
    ratio: float = 0.0


@dataclass
class Response:
    status: int = 0
    error_code: str = god_field("errorCode", default="")
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Point:
    x: int = 0


@dataclass(frozen=True)
class Label:
    name: str = ""
    size: int = 0


@dataclass
class Shapes:
    coords: tuple[int, ...] = ()
    pair: tuple[int, str] = (0, "")
    tags: set[str] = field(default_factory=set)
    flags: frozenset = frozenset()


@dataclass
class Event:
    day: date = date.min
    at: datetime = datetime.min


class TestRecords:
    """Test decoding into records."""

    def test_simple(self):
        person = unmarshal(b'{name="John";age=12;addr="New York"}', Person)
        assert person == Person("John", 12, "New York")

    def test_whitespace_separated_pairs(self):
        with_semicolons = unmarshal(b'{name="Jane";age=15;}', Person)
        without = unmarshal(b'{name="Jane" age=15}', Person)
        assert with_semicolons == without == Person("Jane", 15)

    def test_multiline_layout(self):
        text = '{\n  name="John";\n  age=12;\n  addr=;\n}'
        assert decode(text, Person) == Person("John", 12)

    def test_empty_right_hand_side(self):
        assert decode("{name=;age=;addr=}", Person) == Person()

    def test_absent_keys(self):
        assert decode("{}", Person) == Person()

    def test_absent_equals_empty(self):
        assert decode('{name="A"}', Person) == decode('{name="A";age=;addr=}', Person)

    def test_stray_separators(self):
        assert decode('{;name="A";;age=1;}', Person) == Person("A", 1)

    def test_explicit_key_name(self):
        response = decode('{status=404;errorCode="E42"}', Response)
        assert response.error_code == "E42"

    def test_nested_values(self):
        text = '{person={name="A";age=1};scores={math=90;art=};tags=["x",y];nickname="Al"}'
        assert decode(text, Profile) == Profile(
            person=Person("A", 1),
            scores={"math": 90, "art": 0},
            tags=["x", "y"],
            nickname="Al",
        )

    def test_optional_absent(self):
        assert decode("{nickname=}", Profile).nickname is None
        assert decode("{nickname=\\0}", Profile).nickname is None

    def test_sentinel_grounds_to_zero(self):
        assert decode("{name=\\0;age=\\0}", Person) == Person()

    def test_dynamic_field(self):
        response = decode('{status=200;data={users=["alice","bob"];count=2}}', Response)
        assert response.data == {"users": ["alice", "bob"], "count": 2}

    def test_triple_quoted_field(self):
        person = decode('{name="""line1\nline2""";age=3}', Person)
        assert person == Person("line1\nline2", 3)

    def test_bare_string(self):
        assert decode("{name=John}", Person).name == "John"

    def test_bool_and_float(self):
        assert decode("{active=true;ratio=0.25}", Flags) == Flags(True, 0.25)

    def test_whole_float_into_int(self):
        assert decode("{age=30.0}", Person).age == 30

    def test_int_into_float(self):
        flags = decode("{ratio=3}", Flags)
        assert flags.ratio == 3.0
        assert isinstance(flags.ratio, float)


class TestUnknownKeys:
    """Test the structural skip of keys without a field."""

    def test_skipped(self):
        text = '{name="x";extra={a=[1,2,(3)];b="}"};age=3}'
        assert decode(text, Person) == Person("x", 3)

    def test_skipped_scalar(self):
        assert decode('{nick="y";name="x";other=12}', Person) == Person("x")

    def test_skipped_empty(self):
        assert decode('{other=;name="x"}', Person) == Person("x")

    def test_strict(self):
        with pytest.raises(StructuralError, match="Unknown key 'extra'"):
            decode('{extra=1;name="x"}', Person, DecodeOptions(strict=True))


class TestRoot:
    """Test root disambiguation."""

    def test_raw_string(self):
        assert unmarshal(b'{"Hello World"}', str) == "Hello World"

    def test_keyed_content_is_not_a_string(self):
        with pytest.raises(GodTypeError):
            unmarshal(b'{data="John"}', str)

    def test_keyed_content_into_mapping(self):
        assert unmarshal(b'{data="John"}', dict) == {"data": "John"}

    def test_raw_list(self):
        assert unmarshal(b"{[10,20,30]}", list) == [10, 20, 30]
        assert unmarshal(b"{[10,20,30]}", list[float]) == [10.0, 20.0, 30.0]

    def test_raw_number(self):
        assert decode("{ 42 }", int) == 42

    def test_raw_bool(self):
        assert decode("{true}", bool) is True

    def test_raw_bare_string(self):
        assert decode("{hello}", str) == "hello"

    def test_raw_string_with_equals(self):
        assert decode('{"a=b"}', str) == "a=b"

    def test_empty_root(self):
        assert decode("{}", str) == ""
        assert decode("{ }", list[Person]) == []

    def test_bare_table_root(self):
        people = unmarshal(b'{(name,age,addr:"Alice",28,"Seattle";)}', list[Person])
        assert people == [Person("Alice", 28, "Seattle")]

    def test_optional_root(self):
        assert decode('{"x"}', Optional[str]) == "x"

    def test_missing_open_brace(self):
        with pytest.raises(StructuralError, match="start of document"):
            decode('name="x"', Person)

    def test_missing_close_brace(self):
        with pytest.raises(StructuralError):
            decode('{"x"', str)

    def test_trailing_data(self):
        assert decode('{name="x"} junk', Person) == Person("x")
        with pytest.raises(StructuralError, match="trailing"):
            decode('{name="x"} junk', Person, DecodeOptions(strict=True))


class TestDynamic:
    """Test schema-less decoding."""

    def test_mapping(self):
        text = '{status=200;ok=true;no=false;name="x";ratio=0.5;tags=["a","b"];nested={k=1}}'
        assert decode(text) == {
            "status": 200,
            "ok": True,
            "no": False,
            "name": "x",
            "ratio": 0.5,
            "tags": ["a", "b"],
            "nested": {"k": 1},
        }

    def test_sentinel_is_none(self):
        assert decode("{a=\\0;b=[1,\\0]}") == {"a": None, "b": [1, None]}

    def test_empty_value_is_none(self):
        assert decode("{a=}") == {"a": None}

    def test_number_types(self):
        result = decode("{a=1;b=-2;c=1.5;d=1e3}")
        assert result == {"a": 1, "b": -2, "c": 1.5, "d": 1000.0}
        assert isinstance(result["a"], int)
        assert isinstance(result["d"], float)

    def test_raw_root(self):
        assert decode('{"hi"}') == "hi"
        assert decode("{[1,2]}") == [1, 2]

    def test_empty_root(self):
        assert decode("{}") == {}

    def test_table_unsupported(self):
        with pytest.raises(GodTypeError, match="table"):
            decode("{t=(a:1;)}")

    def test_table_root_unsupported(self):
        with pytest.raises(GodTypeError):
            decode("{(a:1;)}")


class TestInPlace:
    """Test decoding into existing values."""

    def test_record(self):
        person = Person("old", 99, "keep")
        result = unmarshal(b'{name="new";age=1}', person)
        assert result is person
        assert person == Person("new", 1, "keep")

    def test_dict(self):
        data = {"keep": 1}
        unmarshal(b"{a=2}", data)
        assert data == {"keep": 1, "a": 2}

    def test_list(self):
        items = [9]
        result = unmarshal(b"{[1,2]}", items)
        assert result is items
        assert items == [1, 2]

    def test_none_target(self):
        with pytest.raises(UsageError):
            unmarshal(b"{}", None)

    def test_immutable_target(self):
        with pytest.raises(UsageError):
            unmarshal(b'{"x"}', "not settable")
        with pytest.raises(UsageError):
            unmarshal(b"{1}", 5)

    def test_frozen_record(self):
        with pytest.raises(UsageError):
            unmarshal(b"{x=1}", Point())

    def test_usage_error_is_value_error(self):
        with pytest.raises(ValueError):
            unmarshal(b"{}", None)


class TestErrors:
    """Test error reporting."""

    def test_missing_equals(self):
        with pytest.raises(StructuralError, match="Expected '=' after key 'name'"):
            decode('{name "x"}', Person)

    def test_unterminated_object(self):
        with pytest.raises(StructuralError, match="Expected '}'"):
            decode('{name="x"', Person)

    def test_unterminated_string(self):
        with pytest.raises(StructuralError, match="Unterminated string"):
            decode('{name="x}', Person)

    def test_unterminated_list(self):
        with pytest.raises(StructuralError, match="Expected ']'"):
            decode("{tags=[1,2", Profile)

    def test_bad_integer(self):
        with pytest.raises(GodTypeError, match="Invalid integer"):
            decode("{age=abc}", Person)

    def test_fractional_integer(self):
        with pytest.raises(GodTypeError):
            decode("{age=12.5}", Person)

    def test_bad_bool(self):
        with pytest.raises(GodTypeError, match="Invalid boolean"):
            decode("{active=yes}", Flags)

    def test_bad_float(self):
        with pytest.raises(GodTypeError):
            decode("{ratio=1.2.3}", Flags)

    def test_missing_string(self):
        with pytest.raises(StructuralError, match="Expected string"):
            decode("{tags=[,]}", Profile)

    def test_list_for_record(self):
        with pytest.raises(StructuralError, match="Expected '{'"):
            decode("{person=[1]}", Profile)

    def test_unsupported_target(self):
        with pytest.raises(GodTypeError):
            decode("{1}", complex)

    def test_invalid_utf8(self):
        with pytest.raises(StructuralError, match="UTF-8"):
            unmarshal(b'{"\xff"}', str)

    def test_error_position(self):
        with pytest.raises(StructuralError, match="position 6"):
            decode('{name "x"}', Person)

    def test_unknown_escape(self):
        assert decode(r'{"a\qb"}', str) == "aqb"
        with pytest.raises(StructuralError):
            decode(r'{"a\qb"}', str, DecodeOptions(strict=True))

    def test_end_of_input_after_equals(self):
        with pytest.raises(StructuralError, match="Expected value or '}' after 'age='"):
            decode("{age=", Person)

    def test_end_of_input_after_equals_with_whitespace(self):
        with pytest.raises(StructuralError):
            decode("{name=\n  ", Person)

    def test_missing_list_element(self):
        with pytest.raises(StructuralError, match="Expected integer"):
            decode("{[1,,2]}", list[int])

    def test_missing_dynamic_element(self):
        with pytest.raises(StructuralError, match="Expected value"):
            decode("{[1,,2]}")


class TestFrozenRecords:
    """Test decoding into frozen record types."""

    def test_object(self):
        assert unmarshal(b'{name="x"}', Label) == Label("x", 0)

    def test_all_fields(self):
        assert decode('{name="x";size=3}', Label) == Label("x", 3)

    def test_table(self):
        labels = unmarshal(b'{(name,size:"a",1;"b",;)}', list[Label])
        assert labels == [Label("a", 1), Label("b", 0)]

    def test_nested(self):
        @dataclass
        class Box:
            label: Label = field(default_factory=Label)

        assert decode('{label={name="lid"}}', Box) == Box(Label("lid"))

    def test_in_place_still_rejected(self):
        with pytest.raises(UsageError):
            unmarshal(b'{name="x"}', Label())


class TestContainers:
    """Test sequence annotations other than list."""

    def test_tuple(self):
        shapes = decode('{coords=[1,2,3];pair=[7,"x"]}', Shapes)
        assert shapes.coords == (1, 2, 3)
        assert shapes.pair == (7, "x")

    def test_sets(self):
        shapes = decode('{tags=["b","a","b"];flags=[1,2]}', Shapes)
        assert shapes.tags == {"a", "b"}
        assert shapes.flags == frozenset({1, 2})

    def test_empty_containers(self):
        assert decode("{}", Shapes) == Shapes((), (), set(), frozenset())
        assert decode("{coords=;tags=}", Shapes).coords == ()

    def test_tuple_root(self):
        assert decode("{[1,2]}", tuple[int, ...]) == (1, 2)

    def test_tuple_of_records_table(self):
        rows = decode('{(name,age:"A",1;)}', tuple[Person, ...])
        assert rows == (Person("A", 1),)


class TestTemporal:
    """Test date and time destinations."""

    def test_iso_strings(self):
        event = decode('{day="2024-01-02";at="2024-01-02T03:04:05"}', Event)
        assert event == Event(date(2024, 1, 2), datetime(2024, 1, 2, 3, 4, 5))

    def test_zero_is_min(self):
        assert decode("{day=;at=\\0}", Event) == Event(date.min, datetime.min)

    def test_invalid(self):
        with pytest.raises(GodTypeError, match="Invalid date"):
            decode('{day="yesterday"}', Event)
