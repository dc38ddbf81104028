"""Value objects for the extraction result and the transport-ready image."""
import base64
from dataclasses import dataclass
from typing import Any

from quiz2json.errors import SchemaMismatchError


@dataclass(frozen=True)
class EncodedImage:
    data: str
    mime_type: str

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)


@dataclass(frozen=True)
class Option:
    id: str
    text: str

    @classmethod
    def from_dict(cls, obj: Any, where: str) -> "Option":
        fields = _require_object(obj, ("id", "text"), where)
        return cls(
            id=_require_id(fields["id"], f"{where}.id"),
            text=_require_str(fields["text"], f"{where}.text"),
        )


@dataclass(frozen=True)
class Question:
    id: str
    statement: str
    options: tuple[Option, ...]

    @classmethod
    def from_dict(cls, obj: Any, where: str) -> "Question":
        fields = _require_object(obj, ("id", "statement", "options"), where)
        raw_options = _require_list(fields["options"], f"{where}.options")
        options = tuple(
            Option.from_dict(item, f"{where}.options[{i}]")
            for i, item in enumerate(raw_options)
        )
        ids = [o.id for o in options]
        match len(set(ids)) == len(ids):
            case False:
                raise SchemaMismatchError(f"{where}.options: duplicate option id")
            case True:
                pass
        return cls(
            id=_require_id(fields["id"], f"{where}.id"),
            statement=_require_str(fields["statement"], f"{where}.statement"),
            options=options,
        )


@dataclass(frozen=True)
class QuestionFile:
    questions: tuple[Question, ...]

    @classmethod
    def from_dict(cls, obj: Any) -> "QuestionFile":
        """Build from decoded JSON. Raises SchemaMismatchError on any shape violation."""
        fields = _require_object(obj, ("questions",), "$")
        raw = _require_list(fields["questions"], "$.questions")
        questions = tuple(
            Question.from_dict(item, f"$.questions[{i}]")
            for i, item in enumerate(raw)
        )
        seen: set[str] = set()
        for i, question in enumerate(questions):
            match question.id in seen:
                case True:
                    raise SchemaMismatchError(
                        f"$.questions[{i}].id: duplicate question id {question.id!r}"
                    )
                case False:
                    seen.add(question.id)
        return cls(questions=questions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "questions": [
                {
                    "id": q.id,
                    "statement": q.statement,
                    "options": [{"id": o.id, "text": o.text} for o in q.options],
                }
                for q in self.questions
            ]
        }


# ── shape checks ──────────────────────────────────────────────────────────────


def _require_object(obj: Any, required: tuple[str, ...], where: str) -> dict[str, Any]:
    match obj:
        case dict():
            pass
        case _:
            raise SchemaMismatchError(f"{where}: expected an object")
    missing = [name for name in required if name not in obj]
    match missing:
        case []:
            return obj
        case _:
            raise SchemaMismatchError(f"{where}: missing field(s) {', '.join(missing)}")


def _require_list(obj: Any, where: str) -> list[Any]:
    match obj:
        case list():
            return obj
        case _:
            raise SchemaMismatchError(f"{where}: expected an array")


def _require_str(obj: Any, where: str) -> str:
    match obj:
        case str():
            return obj
        case _:
            raise SchemaMismatchError(f"{where}: expected a string")


def _require_id(obj: Any, where: str) -> str:
    match _require_str(obj, where):
        case "":
            raise SchemaMismatchError(f"{where}: must not be empty")
        case value:
            return value
