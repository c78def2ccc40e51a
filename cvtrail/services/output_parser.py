"""Model output parser.

Turns raw model text into a tagged result. Malformed output is an ordinary
outcome here, not an error: text that does not decode into a JSON object
comes back as ``UnstructuredResult`` carrying the original text, and
``parse`` never raises. A decoded object is always structured, even when
some of its fields are null or oddly typed.
"""

import json
import re
from typing import Annotated, Any, Generic, List, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

# ```json ... ``` wrappers some providers add despite the JSON response format
_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class KeywordFacets(BaseModel):
    """Normalized keyword facets extracted from a resume."""
    model_config = ConfigDict(extra="allow")

    skills: List[Any] = []
    tools: List[Any] = []
    domains: List[Any] = []
    seniority: Optional[str] = None

    @field_validator("skills", "tools", "domains", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> list:
        return _as_list(v)

    @field_validator("seniority", mode="before")
    @classmethod
    def coerce_seniority(cls, v: Any) -> Optional[str]:
        return _as_text(v)


class ReviewContent(BaseModel):
    """Structured resume review as requested from the model."""
    model_config = ConfigDict(extra="allow")

    summary: Optional[str] = None
    strengths: List[Any] = []
    gaps: List[Any] = []
    suggested_improvements: List[Any] = []
    role_suggestions: List[Any] = []
    keywords: KeywordFacets = Field(default_factory=KeywordFacets)

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, v: Any) -> Optional[str]:
        return _as_text(v)

    @field_validator("strengths", "gaps", "suggested_improvements", "role_suggestions", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> list:
        return _as_list(v)

    @field_validator("keywords", mode="before")
    @classmethod
    def keywords_object(cls, v: Any) -> dict:
        # Anything but an object is kept under "raw"
        if v is None:
            return {}
        if isinstance(v, dict):
            return v
        return {"raw": v}


class EnhancementContent(BaseModel):
    """Model response for the resume generation path."""
    model_config = ConfigDict(extra="allow")

    enhanced_text: Optional[str] = None
    title: Optional[str] = None

    @field_validator("enhanced_text", "title", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _as_text(v)


SchemaT = TypeVar("SchemaT", bound=BaseModel)


class StructuredResult(BaseModel, Generic[SchemaT]):
    """Model output that decoded into the expected schema."""
    kind: Literal["structured"] = "structured"
    data: SchemaT


class UnstructuredResult(BaseModel):
    """Model output kept verbatim because it did not decode."""
    kind: Literal["unstructured"] = "unstructured"
    raw_text: str


ParsedResult = Annotated[
    Union[StructuredResult, UnstructuredResult],
    Field(discriminator="kind"),
]


def _strip_fences(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse(raw_text: Optional[str], schema: Type[SchemaT] = ReviewContent) -> ParsedResult:
    """Decode *raw_text* against *schema*.

    An empty response decodes as ``{}``, i.e. a structured result with every
    field at its default. Invalid JSON and JSON that is not an object produce
    ``UnstructuredResult``; null list fields become empty lists and unknown
    fields are kept.
    """
    text = raw_text if raw_text else "{}"
    try:
        decoded = json.loads(_strip_fences(text))
    except ValueError:
        return UnstructuredResult(raw_text=text)
    if not isinstance(decoded, dict):
        return UnstructuredResult(raw_text=text)

    try:
        data = schema.model_validate(decoded)
    except PydanticValidationError:
        # Declared fields are coerced above; keep the object as decoded regardless
        data = schema.model_construct(**decoded)
    return StructuredResult[schema](data=data)


def to_content(result: ParsedResult) -> dict:
    """JSON form stored in ``Analysis.content``."""
    if isinstance(result, UnstructuredResult):
        return {"kind": "unstructured", "rawText": result.raw_text}
    return {"kind": "structured", **result.data.model_dump(mode="json")}
