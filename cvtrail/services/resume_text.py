"""Plain-text layout for structured resume fields."""

from ..schemas.generation import ResumeFields


def compose_resume_text(fields: ResumeFields) -> str:
    """Render resume fields in the section layout the reviewer prompt expects."""
    out = ""

    if fields.name:
        out += f"{fields.name}\n"
    if fields.phone:
        out += f"Phone: {fields.phone}\n"
    if fields.email:
        out += f"Email: {fields.email}\n\n"

    if fields.summary:
        out += f"SUMMARY\n{fields.summary}\n\n"

    if fields.education:
        out += "EDUCATION\n"
        for edu in fields.education:
            out += f"{edu.school_name or ''} - {edu.duration or ''}\n"
            for desc in edu.descriptions:
                out += f"• {desc}\n"
            out += "\n"

    if fields.work_experience:
        out += "WORK EXPERIENCE\n"
        for work in fields.work_experience:
            out += f"{work.company or ''} - {work.position or ''} ({work.duration or ''})\n"
            for desc in work.descriptions:
                out += f"• {desc}\n"
            out += "\n"

    if fields.project_experience:
        out += "PROJECTS\n"
        for project in fields.project_experience:
            out += f"{project.name or ''} - {project.duration or ''}\n"
            for desc in project.descriptions:
                out += f"• {desc}\n"
            out += "\n"

    if fields.skills:
        out += f"SKILLS\n{', '.join(fields.skills)}\n\n"

    if fields.publications:
        out += "PUBLICATIONS\n"
        for pub in fields.publications:
            out += f"• {pub}\n"

    return out
