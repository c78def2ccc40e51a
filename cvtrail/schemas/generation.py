"""Resume generation and rendering schemas.

Wire names are camelCase (as sent by the web client and expected by the
rendering service); attributes are snake_case.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Resume"
DEFAULT_PAGE_SIZE = "Letter"
DEFAULT_MARGINS = "36px"
DEFAULT_FONT_FAMILY = "Inter, system-ui, -apple-system, Arial, sans-serif"
DEFAULT_LINE_HEIGHT = 1.5


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EducationEntry(_CamelModel):
    school_name: Optional[str] = Field(default=None, alias="schoolName")
    duration: Optional[str] = None
    descriptions: List[str] = []


class WorkEntry(_CamelModel):
    company: Optional[str] = None
    position: Optional[str] = None
    duration: Optional[str] = None
    descriptions: List[str] = []


class ProjectEntry(_CamelModel):
    name: Optional[str] = None
    duration: Optional[str] = None
    descriptions: List[str] = []


class ResumeFields(_CamelModel):
    """Structured resume content."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    summary: Optional[str] = None
    education: List[EducationEntry] = []
    work_experience: List[WorkEntry] = Field(default=[], alias="workExperience")
    project_experience: List[ProjectEntry] = Field(default=[], alias="projectExperience")
    skills: List[str] = []
    publications: List[str] = []


class RenderOptions(_CamelModel):
    """Formatting options forwarded to the rendering service."""
    title: Optional[str] = None
    page_size: Optional[str] = Field(default=None, alias="pageSize")
    margins: Optional[str] = None
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    line_height: Optional[float] = Field(default=None, alias="lineHeight")
    header_html: Optional[str] = Field(default=None, alias="headerHtml")
    footer_html: Optional[str] = Field(default=None, alias="footerHtml")
    page_numbers: Optional[bool] = Field(default=None, alias="pageNumbers")

    def resolved_title(self) -> str:
        return self.title or DEFAULT_TITLE


class RenderRequest(_CamelModel):
    """Payload for the txt_to_pdf rendering endpoint."""
    text: str
    title: str = DEFAULT_TITLE
    page_size: str = Field(default=DEFAULT_PAGE_SIZE, alias="pageSize")
    margins: str = DEFAULT_MARGINS
    font_family: str = Field(default=DEFAULT_FONT_FAMILY, alias="fontFamily")
    line_height: float = Field(default=DEFAULT_LINE_HEIGHT, alias="lineHeight")
    header_html: str = Field(default="", alias="headerHtml")
    footer_html: str = Field(default="", alias="footerHtml")
    page_numbers: bool = Field(default=True, alias="pageNumbers")

    @classmethod
    def from_options(cls, text: str, options: RenderOptions) -> "RenderRequest":
        """Fill unset options with the rendering defaults."""
        return cls(
            text=text,
            title=options.resolved_title(),
            page_size=options.page_size or DEFAULT_PAGE_SIZE,
            margins=options.margins or DEFAULT_MARGINS,
            font_family=options.font_family or DEFAULT_FONT_FAMILY,
            line_height=options.line_height or DEFAULT_LINE_HEIGHT,
            header_html=options.header_html or "",
            footer_html=options.footer_html or "",
            page_numbers=options.page_numbers is not False,
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class RenderedArtifact(BaseModel):
    """Rendering service response."""
    model_config = ConfigDict(extra="allow")

    pdf_url: str
    gcs_uri: Optional[str] = None
    page_count: Optional[int] = None
    bytes: Optional[int] = None
    title: Optional[str] = None
    rendered_at: Optional[str] = None


class GenerateResumeRequest(ResumeFields, RenderOptions):
    """Request to synthesize a resume PDF from structured fields and analyze it."""
    user_id: Optional[str] = Field(default=None, alias="userId")
    resume_id: Optional[str] = Field(default=None, alias="resumeId")
    version_id: Optional[str] = Field(default=None, alias="versionId")

    def resume_fields(self) -> ResumeFields:
        return ResumeFields.model_validate(self.model_dump(include=set(ResumeFields.model_fields)))

    def render_options(self) -> RenderOptions:
        return RenderOptions.model_validate(self.model_dump(include=set(RenderOptions.model_fields)))


class GenerateResumeResponse(BaseModel):
    """Outcome of a resume generation. Analysis status is reported separately."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    file_id: str = Field(alias="fileID")
    pdf_url: str
    storage_path: str
    gcs_uri: Optional[str] = None
    page_count: Optional[int] = None
    bytes: Optional[int] = None
    title: Optional[str] = None
    rendered_at: Optional[str] = None
    analysis_id: Optional[str] = Field(default=None, alias="analysisID")
    analysis_status: str
    analysis_error: Optional[str] = None
    generated_at: datetime
