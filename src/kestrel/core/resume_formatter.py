from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from kestrel.types import ExperienceDetail, ResumeProfile, Skills


def _numbered(items: list[str], separator: str) -> str:
    if not items:
        return "N/A"
    return separator.join(f"({index}) {item}" for index, item in enumerate(items, start=1))


def _block(title: str, lines: list[tuple[str, Any]]) -> str:
    rendered = [f"- {label}: {value}" for label, value in lines if value not in (None, "")]
    return "\n".join([f"{title}:", *rendered])


def format_experience_details(details: list[ExperienceDetail]) -> str:
    blocks = []
    for detail in details:
        lines = [
            f"{label}: {value}"
            for label, value in (
                ("Position", detail.position),
                ("Company", detail.company),
                ("Employment Period", detail.employment_period),
                ("Location", detail.location),
                ("Industry", detail.industry),
            )
            if value
        ]
        lines.append(f"Key Responsibilities:\n  {_numbered(detail.key_responsibilities, chr(10) + '  ')}")
        lines.append(f"Skills Acquired: {_numbered(detail.skills_acquired, ', ')}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_skills(skills: Skills) -> str:
    labels = (
        ("Libraries", skills.libraries),
        ("General Skills", skills.general_skills),
        ("Programming Languages", skills.programming_languages),
        ("Integrations", skills.integrations),
        ("Design", skills.design),
        ("Databases", skills.databases),
        ("IT", skills.IT),
        ("Environments", skills.environments),
        ("Server", skills.server),
    )
    return "Skills Summary:\n\n" + "\n".join(f"- **{label}**: {value}" for label, value in labels)


def format_resume(profile: ResumeProfile) -> str:
    personal = profile.personal_information
    phone = f"{personal.phone_country_code} {personal.phone}" if personal.phone_country_code and personal.phone else ""
    blocks = [
        _block(
            "Personal Information",
            [
                ("Name", f"{personal.first_name} {personal.last_name}".strip()),
                ("Date of Birth", personal.date_of_birth),
                ("Country", personal.country),
                ("City", personal.city),
                ("Address", personal.address),
                ("Phone", phone),
                ("Email", personal.email_address),
                ("GitHub", personal.github),
                ("LinkedIn", personal.linkedin),
            ],
        )
    ]

    for education in profile.education_details:
        blocks.append(
            _block(
                "Education",
                [
                    ("Degree", education.degree),
                    ("University", education.university),
                    ("GPA", education.gpa),
                    ("Graduation Year", education.graduation_year),
                    ("Field of Study", education.field_of_study),
                ],
            )
        )

    experience = format_experience_details(profile.experience_details)
    if experience:
        blocks.append(experience)

    for achievement in profile.achievements:
        if achievement.name:
            blocks.append(f"Achievements:\n- {achievement.name}: {achievement.description}")

    for language in profile.languages:
        if language.language:
            blocks.append(f"Languages:\n- {language.language}: {language.proficiency}")

    if profile.availability.notice_period:
        blocks.append(f"Availability:\n- Notice Period: {profile.availability.notice_period}")
    if profile.salary_expectations.salary_range_usd:
        blocks.append(
            f"Salary Expectations:\n- Salary Range (USD): {profile.salary_expectations.salary_range_usd}"
        )

    identity = profile.self_identification
    blocks.append(
        _block(
            "Self Identification",
            [
                ("Gender", identity.gender),
                ("Pronouns", identity.pronouns),
                ("Veteran", identity.veteran),
                ("Disability", identity.disability),
                ("Ethnicity", identity.ethnicity),
            ],
        )
    )

    legal = profile.legal_authorization
    blocks.append(
        _block(
            "Legal Authorization",
            [
                ("EU Work Authorization", legal.eu_work_authorization),
                ("US Work Authorization", legal.us_work_authorization),
                ("Requires US Visa", legal.requires_us_visa),
                ("Requires US Sponsorship", legal.requires_us_sponsorship),
                ("Requires EU Visa", legal.requires_eu_visa),
                ("Legally Allowed to Work in EU", legal.legally_allowed_to_work_in_eu),
                ("Legally Allowed to Work in US", legal.legally_allowed_to_work_in_us),
                ("Requires EU Sponsorship", legal.requires_eu_sponsorship),
            ],
        )
    )

    prefs = profile.work_preferences
    blocks.append(
        _block(
            "Work Preferences",
            [
                ("Remote Work", prefs.remote_work),
                ("In-Person Work", prefs.in_person_work),
                ("Open to Relocation", prefs.open_to_relocation),
                ("Willing to Complete Assessments", prefs.willing_to_complete_assessments),
                ("Willing to Undergo Drug Tests", prefs.willing_to_undergo_drug_tests),
                ("Willing to Undergo Background Checks", prefs.willing_to_undergo_background_checks),
            ],
        )
    )
    return "\n\n".join(block for block in blocks if block)


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value


def _mapping_lines(mapping: dict[str, Any]) -> str:
    return "\n".join(f"{key}: {value}" for key, value in mapping.items() if value not in (None, ""))


def format_section(name: str, value: Any) -> str:
    """Render one resume section as prompt text."""
    if name == "experience_details":
        return format_experience_details(value)

    value = _plain(value)
    if isinstance(value, list):
        items = []
        for item in value:
            item = _plain(item)
            if isinstance(item, dict):
                items.append("- " + "; ".join(f"{k}: {v}" for k, v in item.items() if v not in (None, "")))
            else:
                items.append(f"- {item}")
        return "\n".join(items)
    if isinstance(value, dict):
        return _mapping_lines(value)
    return "" if value is None else str(value)
