"""Tests for the Response type, outcome serialization, and to_response()."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from post_models import Post, PostSubmission
from submissions.cache import FieldCache
from submissions.config import SubmissionsConfig
from submissions.errors import ConfigurationError, SubmissionValidationError
from submissions.http.response import Response
from submissions.responses import to_response
from submissions.returns import Accepted, Rejected, serialize
from submissions.templating import create_environment
from submissions.validation import validate_submission


def _rejected() -> Rejected:
    return Rejected(SubmissionValidationError({"title": ["data is not larger than 5"]}))


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert response.headers == ()

    def test_with_status_returns_new(self) -> None:
        original = Response("hi")
        changed = original.with_status(422)
        assert changed.status == 422
        assert original.status == 200

    def test_with_headers(self) -> None:
        response = Response().with_header("X-A", "1").with_headers({"X-B": "2"})
        assert response.headers == (("X-A", "1"), ("X-B", "2"))

    def test_hx_retarget(self) -> None:
        assert Response().with_hx_retarget("#form").headers == (("HX-Retarget", "#form"),)

    def test_text_and_json(self) -> None:
        response = Response(b'{"a": 1}')
        assert response.text == '{"a": 1}'
        assert response.json() == {"a": 1}


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass
class Tagged:
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"tag": self.name}


class TestSerialize:
    def test_dataclass(self) -> None:
        assert serialize(Post(title="hello world")) == {
            "title": "hello world",
            "body": "",
            "rating": None,
            "id": None,
        }

    def test_to_dict_preferred(self) -> None:
        assert serialize(Tagged("x")) == {"tag": "x"}

    def test_mapping(self) -> None:
        assert serialize({"a": 1}) == {"a": 1}

    def test_passthrough(self) -> None:
        assert serialize([1, 2]) == [1, 2]


class TestOutcomes:
    def test_accepted_to_dict(self) -> None:
        assert Accepted({"id": 1}).to_dict() == {"id": 1}

    def test_rejected_errors(self) -> None:
        assert _rejected().errors == {"title": ["data is not larger than 5"]}

    def test_pattern_matching(self) -> None:
        match _rejected():
            case Accepted():
                pytest.fail("expected Rejected")
            case Rejected(error=error):
                assert error.keys == ["title"]


# ---------------------------------------------------------------------------
# to_response
# ---------------------------------------------------------------------------


class TestToResponseJSON:
    def test_accepted(self) -> None:
        response = to_response(Accepted(Post(title="hello world", id=1)))
        assert response.status == 200
        assert response.content_type == "application/json; charset=utf-8"
        assert response.json()["id"] == 1

    def test_accepted_created(self) -> None:
        assert to_response(Accepted({"id": 1}), created=True).status == 201

    def test_rejected(self) -> None:
        response = to_response(_rejected())
        assert response.status == 422
        assert response.json() == {
            "error": True,
            "validationErrors": {"title": ["data is not larger than 5"]},
            "reason": "One or more fields failed to pass validation.",
        }

    def test_unknown_outcome(self) -> None:
        with pytest.raises(TypeError):
            to_response("done")  # type: ignore[arg-type]


class TestToResponseHTML:
    @pytest.fixture
    def env(self, tmp_path: Path):
        (tmp_path / "new.html").write_text(
            "<p>{{ reason }}</p>\n{{ text_group(\"title\", fields=fields) }}\n"
        )
        return create_environment(SubmissionsConfig(template_dir=tmp_path))

    async def test_rerenders_with_field_cache(self, env) -> None:
        cache = FieldCache()
        result = await validate_submission(PostSubmission(title="hi"), cache=cache)
        outcome = Rejected(result.error())

        response = to_response(outcome, kida_env=env, template="new.html", fields=cache)

        assert response.status == 422
        assert "text/html" in response.content_type
        assert "One or more fields failed to pass validation." in response.text
        assert 'value="hi"' in response.text
        assert '<span class="field-error">data is not larger than 5</span>' in response.text

    async def test_retarget_header(self, env) -> None:
        cache = FieldCache()
        result = await validate_submission(PostSubmission(title="hi"), cache=cache)
        response = to_response(
            Rejected(result.error()), kida_env=env, template="new.html", fields=cache, retarget="#form"
        )
        assert ("HX-Retarget", "#form") in response.headers

    def test_template_needs_environment(self) -> None:
        with pytest.raises(ConfigurationError):
            to_response(_rejected(), template="new.html")
