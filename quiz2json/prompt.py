"""PromptSpec — the fixed extraction prompt and response schema.

The schema uses Gemini's node type names (OBJECT / ARRAY / STRING) and is
sent as-is to Gemini; `to_json_schema` derives the standard JSON Schema
form for providers that expect it. PROMPT_SPEC is validated once at import
and shared by reference across requests.
"""
import copy
from dataclasses import dataclass
from typing import Any

INSTRUCTION_TEXT = """
Você é um especialista em extrair dados de imagens e formatá-los em JSON.
Analise a imagem fornecida, que contém uma pergunta e várias alternativas de resposta.
Extraia as informações e formate-as estritamente de acordo com o schema JSON fornecido.

O formato de saída para cada pergunta deve ser:
{ "id": "nome_curto", "statement": "Pergunta exibida", "options": [ { "id": "A", "text": "Opção 1" }, { "id": "B", "text": "Opção 2" } ] }

Instruções para preenchimento:
1. "id": Crie um id curto, em snake_case (ex.: pergunta_unica), baseado no conteúdo da pergunta.
2. "statement": Escreva a frase exata da pergunta que os alunos verão.
3. "options": Liste cada alternativa. Para cada uma:
   - "id": Use o identificador curto da opção (ex: A, B, C, 1, 2, 3...).
   - "text": Escreva o texto completo da opção.

Retorne o resultado como um array de perguntas dentro de um objeto principal com a chave "questions".
Exemplo de saída para uma única pergunta:
{
  "questions": [
    {
      "id": "pergunta_da_semana",
      "statement": "Qual iniciativa devemos priorizar?",
      "options": [
        { "id": "A", "text": "Treinamentos" },
        { "id": "B", "text": "Infraestrutura" },
        { "id": "C", "text": "Suporte aos alunos" }
      ]
    }
  ]
}
"""

OPTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "id": {
            "type": "STRING",
            "description": "O identificador da alternativa (ex: 'A', 'B', '1').",
        },
        "text": {
            "type": "STRING",
            "description": "O texto completo da alternativa.",
        },
    },
    "required": ["id", "text"],
}

QUESTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "id": {
            "type": "STRING",
            "description": "Um identificador curto e único para a pergunta, em formato snake_case.",
        },
        "statement": {
            "type": "STRING",
            "description": "O texto completo da pergunta.",
        },
        "options": {
            "type": "ARRAY",
            "description": "Uma lista de alternativas de resposta.",
            "items": OPTION_SCHEMA,
        },
    },
    "required": ["id", "statement", "options"],
}

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "questions": {
            "type": "ARRAY",
            "items": QUESTION_SCHEMA,
        },
    },
    "required": ["questions"],
}

# Required-field sets the schema must declare, per node.
_REQUIRED_ROOT = frozenset({"questions"})
_REQUIRED_QUESTION = frozenset({"id", "statement", "options"})
_REQUIRED_OPTION = frozenset({"id", "text"})


@dataclass(frozen=True)
class PromptSpec:
    instruction_text: str
    response_schema: dict[str, Any]


def validate_prompt_spec(spec: PromptSpec) -> PromptSpec:
    """Check the schema's required lists match the QuestionFile shape. Raises ValueError."""
    match spec.instruction_text.strip():
        case "":
            raise ValueError("Prompt instruction text must not be empty")
        case _:
            pass

    root = spec.response_schema
    _check_node(root, "OBJECT", _REQUIRED_ROOT, "$")
    questions = _child(root, "questions", "ARRAY", "$")
    question = _items(questions, "$.questions")
    _check_node(question, "OBJECT", _REQUIRED_QUESTION, "$.questions[]")
    options = _child(question, "options", "ARRAY", "$.questions[]")
    option = _items(options, "$.questions[].options")
    _check_node(option, "OBJECT", _REQUIRED_OPTION, "$.questions[].options[]")
    return spec


def _check_node(node: dict[str, Any], type_: str, required: frozenset[str], where: str) -> None:
    match node.get("type"):
        case t if t == type_:
            pass
        case other:
            raise ValueError(f"{where}: expected type {type_}, got {other!r}")
    declared = set(node.get("required", ()))
    match declared == required:
        case True:
            pass
        case False:
            raise ValueError(
                f"{where}: required must be {sorted(required)}, got {sorted(declared)}"
            )
    undeclared = declared - set(node.get("properties", {}))
    match bool(undeclared):
        case False:
            pass
        case True:
            raise ValueError(f"{where}: required but not in properties: {sorted(undeclared)}")


def _child(node: dict[str, Any], name: str, type_: str, where: str) -> dict[str, Any]:
    child = node["properties"][name]
    match child.get("type"):
        case t if t == type_:
            return child
        case other:
            raise ValueError(f"{where}.{name}: expected type {type_}, got {other!r}")


def _items(node: dict[str, Any], where: str) -> dict[str, Any]:
    match node.get("items"):
        case dict() as items:
            return items
        case _:
            raise ValueError(f"{where}: array node has no items schema")


def to_json_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Standard JSON Schema: lowercase types, closed objects. The input is not modified."""
    node = copy.deepcopy(schema)
    match node.get("type"):
        case str() as t:
            node["type"] = t.lower()
        case _:
            pass
    match node.get("type"):
        case "object":
            node["properties"] = {
                name: to_json_schema(child)
                for name, child in node.get("properties", {}).items()
            }
            node["additionalProperties"] = False
        case "array" if "items" in node:
            node["items"] = to_json_schema(node["items"])
        case _:
            pass
    return node


PROMPT_SPEC = validate_prompt_spec(
    PromptSpec(instruction_text=INSTRUCTION_TEXT, response_schema=RESPONSE_SCHEMA)
)
