"""Tests for payload decoding, dataclass binding, and submission decoding."""

from dataclasses import dataclass

import pytest

from post_models import PostCreate, PostSubmission, StubRequest, form_request, json_request
from submissions.config import SubmissionsConfig
from submissions.errors import BadRequest, UnsupportedMediaType
from submissions.http.forms import (
    FormBindingError,
    FormData,
    bind,
    decode_submission,
    form_values,
    parse_form_data,
    read_payload,
)
from submissions.validation import Field

# ---------------------------------------------------------------------------
# FormData unit tests
# ---------------------------------------------------------------------------


class TestFormData:
    def test_getitem(self) -> None:
        form = FormData({"name": ["alice"]})
        assert form["name"] == "alice"

    def test_getitem_returns_first(self) -> None:
        form = FormData({"color": ["red", "blue"]})
        assert form["color"] == "red"

    def test_getitem_missing_raises(self) -> None:
        form = FormData({})
        with pytest.raises(KeyError):
            form["missing"]

    def test_get_with_default(self) -> None:
        form = FormData({})
        assert form.get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        form = FormData({"tags": ["a", "b"]})
        assert form.get_list("tags") == ["a", "b"]
        assert form.get_list("missing") == []

    def test_mapping_protocol(self) -> None:
        form = FormData({"a": ["1"], "b": ["2"]})
        assert len(form) == 2
        assert set(form) == {"a", "b"}
        assert "a" in form

    def test_repr(self) -> None:
        assert repr(FormData({"a": ["1"]})) == "FormData({'a': '1'})"


# ---------------------------------------------------------------------------
# parse_form_data
# ---------------------------------------------------------------------------


class TestParseFormData:
    async def test_urlencoded(self) -> None:
        form = await parse_form_data(b"title=hello+world&body=", "application/x-www-form-urlencoded")
        assert form["title"] == "hello world"
        assert form["body"] == ""

    async def test_urlencoded_repeated_keys(self) -> None:
        form = await parse_form_data(b"tag=a&tag=b", "application/x-www-form-urlencoded")
        assert form.get_list("tag") == ["a", "b"]

    async def test_multipart_text_fields(self) -> None:
        body = (
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="title"\r\n'
            b"\r\n"
            b"hello world\r\n"
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="avatar"; filename="a.png"\r\n'
            b"Content-Type: image/png\r\n"
            b"\r\n"
            b"\x89PNG\r\n"
            b"--XyZ--\r\n"
        )
        form = await parse_form_data(body, "multipart/form-data; boundary=XyZ")
        assert form["title"] == "hello world"
        assert "avatar" not in form

    async def test_multipart_without_boundary(self) -> None:
        with pytest.raises(ValueError, match="boundary"):
            await parse_form_data(b"", "multipart/form-data")

    async def test_unsupported(self) -> None:
        with pytest.raises(ValueError):
            await parse_form_data(b"", "text/plain")


# ---------------------------------------------------------------------------
# bind
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Settings:
    name: str
    age: int = 0
    score: float = 0.0
    active: bool = False


class TestBind:
    def test_coerces_form_strings(self) -> None:
        form = FormData({"name": [" alice "], "age": ["30"], "score": ["1.5"], "active": ["on"]})
        assert bind(Settings, form) == Settings(name="alice", age=30, score=1.5, active=True)

    def test_json_values_arrive_typed(self) -> None:
        assert bind(Settings, {"name": "bob", "age": 4, "score": 2}) == Settings(
            name="bob", age=4, score=2.0
        )

    def test_missing_required(self) -> None:
        with pytest.raises(FormBindingError) as exc_info:
            bind(Settings, {})
        assert exc_info.value.errors == {"name": ["name is required."]}

    def test_blank_counts_as_missing(self) -> None:
        with pytest.raises(FormBindingError):
            bind(Settings, {"name": "   "})

    def test_blank_kept_when_configured(self) -> None:
        assert bind(Settings, {"name": ""}, blank_is_absent=False).name == ""

    def test_bad_int(self) -> None:
        with pytest.raises(FormBindingError) as exc_info:
            bind(Settings, {"name": "x", "age": "old"})
        assert exc_info.value.errors == {"age": ["Invalid value for age: expected int."]}

    def test_bool_is_not_an_int(self) -> None:
        with pytest.raises(FormBindingError):
            bind(Settings, {"name": "x", "age": True})

    def test_wrong_json_type(self) -> None:
        with pytest.raises(FormBindingError):
            bind(Settings, {"name": ["x"]})

    def test_optional_fields_default_to_none(self) -> None:
        assert bind(PostSubmission, {}) == PostSubmission()

    def test_strict_create_type(self) -> None:
        assert bind(PostCreate, {"title": "hello world"}) == PostCreate(title="hello world")


class TestFormValues:
    def test_dataclass(self) -> None:
        values = form_values(PostSubmission(title="hi", rating=3))
        assert values == {"title": "hi", "body": "", "rating": "3"}

    def test_mapping(self) -> None:
        assert form_values({"a": 1, "b": None}) == {"a": "1", "b": ""}

    def test_bools_match_field_cache(self) -> None:
        values = form_values({"active": True})
        entry = Field("active").bind(Settings(name="x", active=True))
        assert values["active"] == entry.value == "true"

    def test_other(self) -> None:
        assert form_values(42) == {}


# ---------------------------------------------------------------------------
# read_payload / decode_submission
# ---------------------------------------------------------------------------


class TestReadPayload:
    async def test_json_object(self) -> None:
        assert await read_payload(json_request({"title": "hi"})) == {"title": "hi"}

    async def test_json_with_charset(self) -> None:
        request = StubRequest("application/json; charset=utf-8", b'{"a": 1}')
        assert await read_payload(request) == {"a": 1}

    async def test_empty_json_body(self) -> None:
        assert await read_payload(StubRequest("application/json", b"")) == {}

    async def test_malformed_json(self) -> None:
        with pytest.raises(BadRequest):
            await read_payload(StubRequest("application/json", b"{nope"))

    async def test_json_array_rejected(self) -> None:
        with pytest.raises(BadRequest, match="object"):
            await read_payload(json_request(["title"]))

    async def test_form(self) -> None:
        payload = await read_payload(form_request(b"title=hi"))
        assert isinstance(payload, FormData)
        assert payload["title"] == "hi"

    async def test_unsupported_media_type(self) -> None:
        with pytest.raises(UnsupportedMediaType) as exc_info:
            await read_payload(StubRequest("text/plain", b"hi"))
        assert exc_info.value.status == 415

    async def test_missing_content_type(self) -> None:
        with pytest.raises(UnsupportedMediaType):
            await read_payload(StubRequest(None))


class TestDecodeSubmission:
    async def test_json(self) -> None:
        submission = await decode_submission(json_request({"title": "hi", "rating": 4}), PostSubmission)
        assert submission == PostSubmission(title="hi", rating=4)

    async def test_form(self) -> None:
        submission = await decode_submission(form_request(b"title=hi&rating=4"), PostSubmission)
        assert submission == PostSubmission(title="hi", rating=4)

    async def test_missing_values_decode_as_none(self) -> None:
        assert await decode_submission(json_request({}), PostSubmission) == PostSubmission()

    async def test_blank_form_values_are_absent(self) -> None:
        submission = await decode_submission(form_request(b"title=&body="), PostSubmission)
        assert submission.title is None
        assert submission.body is None

    async def test_blank_kept_when_configured(self) -> None:
        config = SubmissionsConfig(blank_is_absent=False)
        submission = await decode_submission(
            form_request(b"title=&body="), PostSubmission, config=config
        )
        assert submission.title == ""

    async def test_malformed_value(self) -> None:
        with pytest.raises(BadRequest, match="rating"):
            await decode_submission(form_request(b"rating=lots"), PostSubmission)
