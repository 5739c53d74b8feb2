from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ProviderKind = Literal["openai", "anthropic", "ollama"]
QuestionType = Literal["radio", "textbox", "numeric", "date", "dropdown"]
QuestionKind = Literal["radio", "textbox", "numeric", "date", "dropdown", "multi_checkbox"]
Outcome = Literal["success", "failed", "skipped"]

RESUME_SECTIONS: tuple[str, ...] = (
    "personal_information",
    "self_identification",
    "legal_authorization",
    "work_preferences",
    "education_details",
    "experience_details",
    "projects",
    "availability",
    "salary_expectations",
    "certifications",
    "languages",
    "interests",
)
COVER_LETTER_SECTION = "cover_letter"


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def stringify_flags(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: ("Yes" if value else "No") if isinstance(value, bool) else value
                for key, value in data.items()
            }
        return data


class PersonalInformation(_Section):
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""
    country: str = ""
    city: str = ""
    address: str = ""
    phone_country_code: str = ""
    phone: str = ""
    email_address: str = ""
    github: str = ""
    linkedin: str = ""


class EducationDetail(_Section):
    degree: str = ""
    university: str = ""
    gpa: str = ""
    graduation_year: str = ""
    field_of_study: str = ""


class ExperienceDetail(_Section):
    position: str = ""
    company: str = ""
    employment_period: str = ""
    location: str = ""
    industry: str = ""
    key_responsibilities: list[str] = Field(default_factory=list)
    skills_acquired: list[str] = Field(default_factory=list)


class Achievement(_Section):
    name: str = ""
    description: str = ""


class Language(_Section):
    language: str = ""
    proficiency: str = ""


class Skills(_Section):
    libraries: str = ""
    general_skills: str = ""
    programming_languages: str = ""
    integrations: str = ""
    design: str = ""
    databases: str = ""
    IT: str = ""
    environments: str = ""
    server: str = ""


class Availability(_Section):
    notice_period: str = ""


class SalaryExpectations(_Section):
    salary_range_usd: str = ""


class SelfIdentification(_Section):
    gender: str = ""
    pronouns: str = ""
    veteran: str = ""
    disability: str = ""
    ethnicity: str = ""


class LegalAuthorization(_Section):
    eu_work_authorization: str = ""
    us_work_authorization: str = ""
    requires_us_visa: str = ""
    requires_us_sponsorship: str = ""
    requires_eu_visa: str = ""
    legally_allowed_to_work_in_eu: str = ""
    legally_allowed_to_work_in_us: str = ""
    requires_eu_sponsorship: str = ""


class WorkPreferences(_Section):
    remote_work: str = ""
    in_person_work: str = ""
    open_to_relocation: str = ""
    willing_to_complete_assessments: str = ""
    willing_to_undergo_drug_tests: str = ""
    willing_to_undergo_background_checks: str = ""


class ResumeProfile(BaseModel):
    """Structured candidate profile, read-only for the whole run."""

    model_config = ConfigDict(frozen=True)

    personal_information: PersonalInformation
    education_details: list[EducationDetail]
    experience_details: list[ExperienceDetail]
    skills: Skills = Field(default_factory=Skills)
    projects: list[Any]
    achievements: list[Achievement]
    certifications: list[Any]
    languages: list[Language]
    interests: list[Any]
    availability: Availability
    salary_expectations: SalaryExpectations
    self_identification: SelfIdentification
    legal_authorization: LegalAuthorization
    work_preferences: WorkPreferences

    def section(self, name: str) -> Any:
        return getattr(self, name, None)


class ProviderConfig(BaseModel):
    """The one language-model backend selected for a run."""

    model_config = ConfigDict(frozen=True)

    kind: ProviderKind
    model: str
    temperature: float = 0.2
    api_key: str = ""
    base_url: str = ""
    timeout_sec: int = 60

    @model_validator(mode="after")
    def validate_credentials(self) -> ProviderConfig:
        if self.kind == "ollama" and not self.base_url:
            raise ValueError("ollama provider requires a base_url")
        if self.kind in {"openai", "anthropic"} and not self.api_key:
            raise ValueError(f"{self.kind} provider requires an api_key")
        return self

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if value < 0 or value > 2:
            raise ValueError("temperature must be between 0 and 2")
        return value


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)


class QuestionRecord(BaseModel):
    type: QuestionType
    question: str
    answer: str

    @field_validator("answer", mode="before")
    @classmethod
    def stringify_answer(cls, value: Any) -> str:
        return "" if value is None else str(value)


class JobPosting(BaseModel):
    title: str = ""
    company: str = ""
    location: str = ""
    link: str = ""
    apply_method: str = ""
    description: str = ""
    summarized_description: str = ""
    recruiter_link: str = ""
    pdf_path: str = ""
    resume_path: str = ""
    outcome: Outcome | None = None

    def set_description(self, description: str | None) -> None:
        if description:
            self.description = description

    def formatted_job_information(self) -> str:
        return "\n".join(
            [
                "# Job Description",
                "## Job Information",
                f"- Position: {self.title}",
                f"- At: {self.company}",
                f"- Location: {self.location}",
                f"- Recruiter Profile: {self.recruiter_link or 'Not available'}",
                "",
                "## Description",
                self.description or "No description provided.",
            ]
        )


class OutcomeRecord(BaseModel):
    company: str
    job_title: str
    link: str
    job_recruiter: str
    job_location: str
    pdf_path: str
