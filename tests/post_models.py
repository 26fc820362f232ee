"""Shared test collaborators: a Post domain type, a stub request, a memory repository."""

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar

from submissions.validation import Field, Mode, Submission, between, count


@dataclass(frozen=True, slots=True)
class PostSubmission(Submission):
    title: str | None = None
    body: str | None = None
    rating: int | None = None

    @classmethod
    def make_fields(cls, mode: Mode = Mode.CREATE) -> tuple[Field, ...]:
        return (
            Field(
                "title",
                label="Title",
                is_optional=mode is Mode.UPDATE,
                validators=(count(5),),
            ),
            Field("body", label="Body", validators=(count(max=50),)),
            Field("rating", validators=(between(1, 5),)),
        )


@dataclass(frozen=True, slots=True)
class PostCreate:
    title: str
    body: str | None = None
    rating: int | None = None


@dataclass
class Post:
    title: str
    body: str = ""
    rating: int | None = None
    id: int | None = None

    submission_type: ClassVar[type[Submission]] = PostSubmission
    create_type: ClassVar[type[Any]] = PostCreate

    @classmethod
    def make_submission(cls, existing: "Post | None") -> PostSubmission:
        if existing is None:
            return PostSubmission()
        return PostSubmission(title=existing.title, body=existing.body, rating=existing.rating)

    def update(self, submission: PostSubmission) -> None:
        if submission.title is not None:
            self.title = submission.title
        if submission.body is not None:
            self.body = submission.body
        if submission.rating is not None:
            self.rating = submission.rating

    @classmethod
    def create(cls, payload: PostCreate) -> "Post":
        return cls(title=payload.title, body=payload.body or "", rating=payload.rating)


@dataclass
class StubRequest:
    """The slice of a request the decoders read."""

    content_type: str | None
    raw: bytes = b""

    async def body(self) -> bytes:
        return self.raw


def json_request(payload: Any) -> StubRequest:
    return StubRequest("application/json", json.dumps(payload).encode())


def form_request(body: bytes) -> StubRequest:
    return StubRequest("application/x-www-form-urlencoded", body)


@dataclass
class MemoryRepository:
    posts: dict[int, Post] = field(default_factory=dict)
    saved: list[Post] = field(default_factory=list)

    async def get(self, identifier: Any) -> Post | None:
        return self.posts.get(identifier)

    async def save(self, obj: Post) -> Post:
        if obj.id is None:
            obj.id = len(self.posts) + 1
        self.posts[obj.id] = obj
        self.saved.append(obj)
        return obj
