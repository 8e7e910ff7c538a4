"""Tests for the MapData, FormData and StructData sources."""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from validata.errors import ArgumentConversionError
from validata.sources import DataSource, FormData, MapData, StructData, lookup
from validata.types import SourceKind


@dataclass
class Address:
    city: str = ""
    zip: str = ""


@dataclass
class User:
    name: str = ""
    age: int = 0
    active: bool = False
    tags: list = field(default_factory=list)
    address: Address = field(default_factory=Address)

    def is_adult(self, value) -> bool:
        return self.age >= 18


class Profile(BaseModel):
    nickname: str = ""
    score: float = 0.0


class TestLookup:
    def test_nested_paths(self):
        data = {"user": {"name": "bob", "roles": [{"id": 1}, {"id": 2}]}}
        assert lookup(data, "user.name") == ("bob", True)
        assert lookup(data, "user.roles.1.id") == (2, True)
        assert lookup(data, "user.missing") == (None, False)

    def test_wildcard_fans_out(self):
        data = {"items": [{"id": 1}, {"id": 2}, {"name": "x"}]}
        assert lookup(data, "items.*.id") == ([1, 2], True)

    def test_literal_dotted_key_wins(self):
        data = {"a.b": 1, "a": {"b": 2}}
        assert lookup(data, "a.b") == (1, True)


class TestMapData:
    def test_protocol_and_kind(self):
        src = MapData({"name": "bob"})
        assert isinstance(src, DataSource)
        assert src.kind is SourceKind.MAP

    def test_try_get_never_reports_zero(self):
        src = MapData({"count": 0})
        assert src.try_get("count") == (0, True, False)

    def test_set_is_write_inert(self):
        data = {"name": "bob"}
        src = MapData(data)
        assert src.set("name", "alice") == "alice"
        assert data == {"name": "bob"}


class TestFormData:
    def test_single_and_multi_values(self):
        src = FormData({"name": ["bob"], "tags": ["a", "b"]})
        assert src.get("name") == ("bob", True)
        assert src.get("tags") == (["a", "b"], True)

    def test_bracket_key_always_yields_list(self):
        src = FormData({"ids": ["1"]})
        assert src.get("ids[]") == (["1"], True)

    def test_from_query_string_keeps_blanks(self):
        src = FormData.from_query_string("?page=2&q=&tags=a&tags=b")
        assert src.get("page") == ("2", True)
        assert src.get("q") == ("", True)
        assert src.get("tags") == (["a", "b"], True)

    def test_files_are_a_fallback(self):
        upload = object()
        src = FormData({"name": "bob"}, files={"avatar": upload})
        assert src.has_file("avatar")
        assert src.get("avatar") == (upload, True)
        assert src.get_file("avatar") is upload

    def test_set_is_write_inert(self):
        src = FormData({"name": ["bob"]})
        src.set("name", "alice")
        assert src.get("name") == ("bob", True)


class TestStructData:
    def test_rejects_non_objects(self):
        with pytest.raises(TypeError):
            StructData({"name": "bob"})
        with pytest.raises(TypeError):
            StructData(None)

    def test_reads_attributes_and_nested(self):
        src = StructData(User(name="bob", address=Address(city="Oslo")))
        assert src.kind is SourceKind.STRUCT
        assert src.get("name") == ("bob", True)
        assert src.get("address.city") == ("Oslo", True)

    def test_methods_and_private_names_are_not_fields(self):
        src = StructData(User())
        assert src.get("is_adult") == (None, False)
        assert src.get("__class__") == (None, False)

    def test_try_get_reports_zero(self):
        src = StructData(User(name="bob"))
        assert src.try_get("age") == (0, True, True)
        assert src.try_get("name") == ("bob", True, False)

    def test_set_converts_to_annotation(self):
        user = User()
        src = StructData(user)
        assert src.set("age", "42") == 42
        assert user.age == 42

    def test_set_nested_field(self):
        user = User()
        StructData(user).set("address.city", "Paris")
        assert user.address.city == "Paris"

    def test_set_unknown_field(self):
        with pytest.raises(ValueError, match="not found"):
            StructData(User()).set("nope", 1)

    def test_set_bad_conversion(self):
        with pytest.raises(ArgumentConversionError):
            StructData(User()).set("age", "forty")

    def test_pydantic_model(self):
        profile = Profile(nickname="neo")
        src = StructData(profile)
        assert src.get("nickname") == ("neo", True)
        src.set("score", "9.5")
        assert profile.score == 9.5

    def test_func_value(self):
        user = User(age=20)
        src = StructData(user)
        assert src.func_value("is_adult")(None) is True
        assert src.func_value("name") is None
        assert src.func_value("_private") is None
