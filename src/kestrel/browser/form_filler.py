from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from selenium.common.exceptions import StaleElementReferenceException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from kestrel.browser import selectors
from kestrel.browser.elements import ElementUtilities, first, with_stale_retry
from kestrel.browser.handlers import SectionHandler, default_handlers, run_handlers
from kestrel.browser.pdf import write_text_pdf
from kestrel.config import Settings
from kestrel.core import pacing
from kestrel.core.answers import AnswerResolver
from kestrel.errors import FormFillError, KestrelError
from kestrel.types import JobPosting

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9]+")


class ApplicationFormFiller:
    """Walks the Easy Apply modal page by page until the application is submitted."""

    def __init__(
        self,
        driver: WebDriver,
        resolver: AnswerResolver,
        settings: Settings,
        *,
        resume_path: Path | None = None,
        artifacts_dir: Path = Path("./output/cover_letters"),
        pdf_writer: Callable[[str, Path], Path] = write_text_pdf,
        handlers: list[SectionHandler] | None = None,
    ):
        self.driver = driver
        self.resolver = resolver
        self.settings = settings
        self.resume_path = resume_path
        self.artifacts_dir = artifacts_dir
        self.pdf_writer = pdf_writer
        self.utils = ElementUtilities(driver)
        self.handlers = handlers if handlers is not None else default_handlers(resolver, self.utils)
        self.processed_elements: set[str] = set()
        self.processed_sections: set[str] = set()

    def reset_page_state(self) -> None:
        self.processed_elements.clear()
        self.processed_sections.clear()

    def fill_application_form(self, job: JobPosting) -> None:
        self.reset_page_state()
        failed_passes = 0
        pages = 0

        while True:
            logger.info("Filling application form for %s at %s", job.title, job.company)
            if not self.fill_up(job):
                failed_passes += 1
                if failed_passes >= self.settings.max_form_fill_attempts:
                    raise FormFillError(
                        f"Form for {job.link} still incomplete after {failed_passes} attempts"
                    )
                logger.warning(
                    "One or more form sections could not be filled (attempt %d/%d); retrying in %ss",
                    failed_passes,
                    self.settings.max_form_fill_attempts,
                    self.settings.form_retry_cooldown_sec,
                )
                pacing.sleep(self.settings.form_retry_cooldown_sec)
                continue

            failed_passes = 0
            logger.info("All form sections on this page are filled")
            if self.next_or_submit():
                logger.info("Application submitted for %s", job.link)
                return

            pages += 1
            if pages >= self.settings.max_form_pages:
                raise FormFillError(f"Form for {job.link} did not reach submit after {pages} pages")

    def fill_up(self, job: JobPosting) -> bool:
        try:
            self.dismiss_safety_tips()
            return self.process_page(job)
        except KestrelError:
            raise
        except WebDriverException as exc:
            logger.error("Error filling up application form: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error filling up application form")
            return False

    def process_page(self, job: JobPosting) -> bool:
        content = self.driver.find_element(By.CSS_SELECTOR, selectors.EASY_APPLY_CONTENT)

        for index, upload in enumerate(content.find_elements(By.CSS_SELECTOR, selectors.FILE_INPUT)):
            with_stale_retry(
                lambda element: self.process_upload(element, job),
                upload,
                lambda index=index: self._relocate(selectors.FILE_INPUT, index),
            )

        sections = content.find_elements(By.CSS_SELECTOR, selectors.FORM_SECTION)
        logger.info("Found %d form sections", len(sections))
        for index, section in enumerate(sections, start=1):
            ok = with_stale_retry(
                self.process_section,
                section,
                lambda index=index: self._relocate(selectors.FORM_SECTION, index - 1),
            )
            if not ok:
                logger.warning("Form section %d/%d could not be filled", index, len(sections))
                return False
        return True

    def process_section(self, section: WebElement) -> bool:
        identifier = self.utils.unique_identifier(section)
        if identifier in self.processed_sections:
            logger.debug("Section %s already processed", identifier)
            return True

        if section.find_elements(By.CSS_SELECTOR, selectors.FILE_INPUT) or self.utils.section_is_filled(section):
            logger.info("Section %s already filled", identifier)
            self.processed_sections.add(identifier)
            return True

        pacing.sleep_random(0.5, 1)
        try:
            handled = run_handlers(self.handlers, section)
        except (StaleElementReferenceException, KestrelError):
            raise
        except WebDriverException as exc:
            logger.error("Error processing section %s: %s", identifier, exc)
            return False
        except Exception:
            logger.exception("Section %s failed, leaving it for the next pass", identifier)
            return False
        if handled:
            self.processed_sections.add(identifier)
        return handled

    def process_upload(self, upload: WebElement, job: JobPosting) -> None:
        identifier = self.utils.unique_identifier(upload)
        if identifier in self.processed_elements or self.utils.is_already_filled(upload):
            self.processed_elements.add(identifier)
            return

        parent = upload.find_element(By.XPATH, selectors.PARENT)
        self.driver.execute_script("arguments[0].classList.remove('hidden')", upload)
        kind = self.resolver.resume_or_cover((parent.text or "").lower())

        if kind == "resume":
            if self.resume_path is None:
                raise FormFillError("The form asks for a resume but no resume file is configured")
            path = Path(self.resume_path).resolve()
            upload.send_keys(str(path))
            job.resume_path = str(path)
        else:
            letter = self.resolver.cover_letter()
            slug = _UNSAFE_FILENAME.sub("_", f"{job.company}_{job.title}").strip("_").lower() or "job"
            path = self.pdf_writer(letter, self.artifacts_dir / f"cover_letter_{slug}.pdf")
            upload.send_keys(str(path))
            job.pdf_path = str(path)

        logger.info("Uploaded %s file %s", kind, path)
        self.processed_elements.add(identifier)

    def next_or_submit(self) -> bool:
        button = first(self.driver, By.CSS_SELECTOR, selectors.PRIMARY_BUTTON)
        if button is None:
            logger.error("Neither 'Next' nor 'Submit' button found")
            return False

        if "submit application" in (button.text or "").lower():
            self.unfollow_company()
            self.utils.click(button)
            pacing.sleep_random(3, 5)
            return True

        self.driver.execute_script("arguments[0].click();", button)
        pacing.sleep_random(3, 5)
        self.reset_page_state()
        return False

    def unfollow_company(self) -> None:
        label = first(self.driver, By.XPATH, selectors.UNFOLLOW_LABEL)
        if label is None:
            return
        self.utils.click(label)
        pacing.sleep_random(1, 2)

    def dismiss_safety_tips(self) -> None:
        if not self.driver.find_elements(By.CSS_SELECTOR, selectors.SAFETY_TIPS_MODAL):
            return
        logger.info("Safety tips modal shown, continuing to the application")
        self.driver.find_element(By.CSS_SELECTOR, selectors.CONTINUE_APPLYING_BUTTON).click()
        pacing.sleep_random(1, 1.5)

    def _relocate(self, selector: str, index: int) -> WebElement | None:
        content = first(self.driver, By.CSS_SELECTOR, selectors.EASY_APPLY_CONTENT)
        if content is None:
            return None
        fresh = content.find_elements(By.CSS_SELECTOR, selector)
        if index < len(fresh):
            return fresh[index]
        logger.error("Failed to re-locate form element %d after it went stale", index)
        return None
