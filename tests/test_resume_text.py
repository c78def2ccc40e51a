"""Tests for composing structured resume fields into plain text."""

from cvtrail.schemas.generation import EducationEntry, ProjectEntry, ResumeFields, WorkEntry
from cvtrail.services.resume_text import compose_resume_text


def test_full_layout():
    fields = ResumeFields(
        name="Jane Doe",
        phone="555-0100",
        email="jane@example.com",
        summary="Backend engineer.",
        education=[EducationEntry(school_name="MIT", duration="2015-2019", descriptions=["BSc CS"])],
        work_experience=[WorkEntry(company="Acme", position="Engineer", duration="2019-2024", descriptions=["Built APIs"])],
        project_experience=[ProjectEntry(name="cvtrail", duration="2024", descriptions=["Resume tooling"])],
        skills=["Python", "SQL"],
        publications=["Paper A"],
    )

    assert compose_resume_text(fields) == (
        "Jane Doe\n"
        "Phone: 555-0100\n"
        "Email: jane@example.com\n\n"
        "SUMMARY\nBackend engineer.\n\n"
        "EDUCATION\nMIT - 2015-2019\n• BSc CS\n\n"
        "WORK EXPERIENCE\nAcme - Engineer (2019-2024)\n• Built APIs\n\n"
        "PROJECTS\ncvtrail - 2024\n• Resume tooling\n\n"
        "SKILLS\nPython, SQL\n\n"
        "PUBLICATIONS\n• Paper A\n"
    )


def test_empty_sections_are_omitted():
    text = compose_resume_text(ResumeFields(name="Jane Doe", summary="Short."))
    assert text == "Jane Doe\nSUMMARY\nShort.\n\n"


def test_camel_case_wire_names():
    fields = ResumeFields.model_validate({
        "name": "Jane Doe",
        "workExperience": [{"company": "Acme", "position": "Engineer", "duration": "2019-2024"}],
        "projectExperience": [{"name": "cvtrail", "duration": "2024"}],
        "education": [{"schoolName": "MIT", "duration": "2015-2019"}],
    })
    text = compose_resume_text(fields)
    assert "Acme - Engineer (2019-2024)" in text
    assert "MIT - 2015-2019" in text
    assert "PROJECTS\ncvtrail - 2024" in text


def test_empty_fields_produce_empty_text():
    assert compose_resume_text(ResumeFields()) == ""
