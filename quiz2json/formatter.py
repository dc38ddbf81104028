"""ResponseFormatter — raw provider text → canonical pretty JSON."""
import json

from quiz2json.constants import ERR_MALFORMED_RESPONSE, ERR_NON_JSON_CONSTANT, JSON_INDENT
from quiz2json.errors import MalformedResponseError
from quiz2json.models import QuestionFile


def _reject_constant(name: str) -> float:
    # NaN / Infinity / -Infinity are Python extensions, not JSON.
    raise ValueError(ERR_NON_JSON_CONSTANT % name)


def format_response(raw_text: str, strict: bool = False) -> str:
    """Parse *raw_text* and re-serialize it with 2-space indentation.

    Any valid JSON is accepted unless *strict*, in which case the value must
    also have the QuestionFile shape (SchemaMismatchError otherwise).
    Non-JSON raises MalformedResponseError carrying the original text.
    """
    try:
        value = json.loads(raw_text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedResponseError(f"{ERR_MALFORMED_RESPONSE}: {exc}", raw_text) from exc

    match strict:
        case True:
            QuestionFile.from_dict(value)
        case False:
            pass

    pretty = json.dumps(value, indent=JSON_INDENT, ensure_ascii=False)
    try:
        pretty.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates cannot leave the process as UTF-8; emit \uXXXX escapes instead.
        return json.dumps(value, indent=JSON_INDENT, ensure_ascii=True)
    return pretty
