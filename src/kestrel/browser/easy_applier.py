from __future__ import annotations

import logging

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from kestrel.browser import selectors
from kestrel.browser.form_filler import ApplicationFormFiller
from kestrel.browser.job_details import JobDetailExtractor
from kestrel.config import Settings
from kestrel.core import pacing
from kestrel.core.answers import AnswerResolver
from kestrel.errors import NavigationError
from kestrel.types import JobPosting

logger = logging.getLogger(__name__)


class EasyApplier:
    """Opens one job posting and drives its Easy Apply flow to submission."""

    def __init__(
        self,
        driver: WebDriver,
        resolver: AnswerResolver,
        form_filler: ApplicationFormFiller,
        settings: Settings,
        extractor: JobDetailExtractor | None = None,
    ):
        self.driver = driver
        self.resolver = resolver
        self.form_filler = form_filler
        self.settings = settings
        self.extractor = extractor or JobDetailExtractor(driver, form_filler.utils)

    def job_apply(self, job: JobPosting) -> None:
        try:
            self.driver.get(job.link)
            pacing.sleep_random(1.5, 2.5)

            current_url = self.driver.current_url
            if current_url.split("?")[0].rstrip("/") != job.link.split("?")[0].rstrip("/"):
                raise NavigationError(
                    f"Failed to navigate to the job link. Expected {job.link}, but got {current_url}"
                )
            self.set_job(job)

            button = self.find_easy_apply_button()
            self.form_filler.utils.click(button)
            pacing.sleep_random(2, 3)
            self.form_filler.fill_application_form(job)
        except Exception:
            logger.exception("Failed to apply to %s at %s", job.title, job.company)
            self.discard_application()
            raise

    def set_job(self, job: JobPosting) -> None:
        job.set_description(self.extractor.extract_description())
        job.recruiter_link = self.extractor.extract_recruiter()
        if self.settings.summarize_job_descriptions and job.description:
            job.summarized_description = self.resolver.answerer.summarize_job_description(job.description)
        self.resolver.set_job(job)

    def find_easy_apply_button(self) -> WebElement:
        def locate() -> WebElement:
            for button in self.driver.find_elements(By.XPATH, selectors.EASY_APPLY_BUTTON):
                if button.is_displayed() and button.is_enabled():
                    self.form_filler.utils.scroll_into_view(button)
                    return button
            logger.info("No clickable 'Easy Apply' button yet, refreshing the page")
            self.driver.refresh()
            pacing.sleep_random(4, 6)
            raise NavigationError("No clickable 'Easy Apply' button found")

        return pacing.retry_with_backoff(
            locate,
            attempts=self.settings.navigation_attempts,
            base_delay=self.settings.navigation_backoff_sec,
            retryable=(NavigationError, WebDriverException),
            label="Easy Apply button lookup",
        )

    def discard_application(self) -> None:
        try:
            dismiss = self.driver.find_elements(By.CSS_SELECTOR, selectors.MODAL_DISMISS)
            if not dismiss:
                return
            pacing.sleep_random(1.5, 2.5)
            dismiss[0].click()
            confirm = self.driver.find_elements(By.CSS_SELECTOR, selectors.MODAL_CONFIRM_DISCARD)
            if confirm:
                pacing.sleep_random(1.5, 2.5)
                confirm[0].click()
        except WebDriverException as exc:
            logger.error("Error discarding application: %s", exc)
