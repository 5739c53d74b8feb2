from __future__ import annotations

import logging

from kestrel.core.resume_formatter import (
    format_experience_details,
    format_resume,
    format_section,
    format_skills,
)
from kestrel.errors import UnknownSectionError
from kestrel.llm.prompts import (
    COVER_LETTER_PROMPT,
    DATE_PROMPT,
    NUMERIC_PROMPT,
    OPTIONS_PROMPT,
    RESUME_OR_COVER_PROMPT,
    SECTION_CLASSIFIER_PROMPT,
    SECTION_PROMPTS,
    SUMMARIZE_JOB_PROMPT,
    TRY_TO_FIX_PROMPT,
)
from kestrel.llm.providers import LLMProvider, find_content
from kestrel.types import COVER_LETTER_SECTION, JobPosting, ResumeProfile

logger = logging.getLogger(__name__)


class ResumeAnswerer:
    """Turns application questions into model prompts grounded in the resume."""

    def __init__(self, provider: LLMProvider, resume: ResumeProfile):
        self.provider = provider
        self.resume = resume
        self.job: JobPosting | None = None

    def set_job(self, job: JobPosting | None) -> None:
        self.job = job

    def job_description(self) -> str:
        if self.job is None:
            return ""
        return self.job.summarized_description or self.job.description

    def classify_section(self, question: str) -> str:
        output = self._invoke(SECTION_CLASSIFIER_PROMPT.format(question=question))
        section = output.strip().lower().replace(" ", "_")
        logger.debug("Question %r classified as section=%s", question, section)
        return section

    def answer_textual(self, question: str, context: str | None = None) -> str:
        description = context if context is not None else self.job_description()
        section = self.classify_section(question)

        if section == COVER_LETTER_SECTION:
            return self._invoke(
                COVER_LETTER_PROMPT.format(
                    question=question,
                    job_description=description,
                    resume=format_resume(self.resume),
                )
            )

        template = SECTION_PROMPTS.get(section)
        if template is None:
            raise UnknownSectionError(f"Chain not defined for section '{section}'")

        prompt = template.format(
            resume_section=format_section(section, self.resume.section(section)),
            skills=format_skills(self.resume.skills),
            job_description=description,
            question=question,
        )
        answer = self._invoke(prompt)
        logger.debug("Section %s answered %r", section, answer)
        return answer

    def answer_numeric(self, question: str) -> str:
        return self._invoke(
            NUMERIC_PROMPT.format(
                resume_educations=format_section("education_details", self.resume.education_details),
                resume_jobs=format_experience_details(self.resume.experience_details),
                resume_projects=format_section("projects", self.resume.projects),
                question=question,
            )
        )

    def answer_date(self, question: str) -> str:
        return self._invoke(DATE_PROMPT.format(resume=format_resume(self.resume), question=question))

    def answer_from_options(self, question: str, options: list[str]) -> str:
        return self._invoke(
            OPTIONS_PROMPT.format(
                resume=format_resume(self.resume),
                question=question,
                options="\n".join(options),
            )
        )

    def resume_or_cover(self, phrase: str) -> str:
        output = self._invoke(RESUME_OR_COVER_PROMPT.format(phrase=phrase)).lower()
        if "resume" in output:
            return "resume"
        if "cover" in output:
            return "cover"
        return "resume"

    def write_cover_letter(self) -> str:
        return self._invoke(
            COVER_LETTER_PROMPT.format(
                question="Write a cover letter for this position.",
                job_description=self.job_description(),
                resume=format_resume(self.resume),
            )
        )

    def summarize_job_description(self, text: str) -> str:
        return self._invoke(SUMMARIZE_JOB_PROMPT.format(text=text))

    def fix_input(self, question: str, value: str, error: str) -> str:
        return self._invoke(TRY_TO_FIX_PROMPT.format(question=question, input=value, error=error))

    def _invoke(self, prompt: str) -> str:
        response = self.provider.complete_text(prompt)
        text = response.content or find_content(response.raw) or ""
        return text.strip()
