from __future__ import annotations

import logging
import random
import time
from urllib.parse import quote

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from kestrel.browser import selectors
from kestrel.browser.easy_applier import EasyApplier
from kestrel.browser.elements import ElementUtilities, first
from kestrel.config import SearchConfig, Settings
from kestrel.core import pacing
from kestrel.core.outcomes import OutcomeLog
from kestrel.errors import NavigationError, NoMoreJobsError
from kestrel.types import JobPosting

logger = logging.getLogger(__name__)

SEARCH_BASE_URL = "https://www.linkedin.com/jobs/search/"
SKIPPED_APPLY_METHODS = {"Continue", "Applied", "Apply"}
NO_RESULTS_TEXT = "unfortunately, things aren"

DATE_FILTER_PARAMS = {
    "all_time": "",
    "month": "&f_TPR=r2592000",
    "week": "&f_TPR=r604800",
    "last_24_hours": "&f_TPR=r86400",
}


def build_search_query(config: SearchConfig) -> str:
    """Query string shared by every search page, e.g. ``?f_CF=f_WRA&distance=25&f_LF=f_AL``."""
    parts: list[str] = []
    if config.remote:
        parts.append("f_CF=f_WRA")

    levels = [
        str(index)
        for index, enabled in enumerate(config.experience_level.model_dump().values(), start=1)
        if enabled
    ]
    if levels:
        parts.append(f"f_E={','.join(levels)}")

    parts.append(f"distance={config.distance}")

    job_types = [name[0].upper() for name, enabled in config.job_types.model_dump(by_alias=True).items() if enabled]
    if job_types:
        parts.append(f"f_JT={','.join(job_types)}")

    parts.append("f_LF=f_AL")

    dates = config.date.model_dump()
    date_param = next((DATE_FILTER_PARAMS[name] for name in DATE_FILTER_PARAMS if dates.get(name)), "")
    return f"?{'&'.join(parts)}{date_param}"


class JobManager:
    def __init__(
        self,
        driver: WebDriver,
        config: SearchConfig,
        settings: Settings,
        applier: EasyApplier,
        outcomes: OutcomeLog,
        *,
        wait_timeout_sec: float = 15,
    ):
        self.driver = driver
        self.config = config
        self.settings = settings
        self.applier = applier
        self.outcomes = outcomes
        self.wait_timeout_sec = wait_timeout_sec
        self.utils = ElementUtilities(driver)
        self.base_query = build_search_query(config)
        self.seen_links: set[str] = set()
        self.title_blacklist = {word.lower() for word in config.title_blacklist}
        self.company_blacklist = {company.strip().lower() for company in config.company_blacklist}
        self._page_cycles = 0
        self._page_deadline = 0.0

    def search_url(self, position: str, location: str, page: int) -> str:
        return (
            f"{SEARCH_BASE_URL}{self.base_query}"
            f"&keywords={quote(position)}&location={quote(location)}"
            f"&start={page * self.settings.search_page_size}"
        )

    def start_applying(self) -> None:
        logger.info("Starting the job application process")
        while True:
            self.run_searches()
            if not self.settings.loop_forever:
                return
            logger.info("All searches done, starting over in %ss", self.settings.search_cycle_pause_sec)
            pacing.sleep(self.settings.search_cycle_pause_sec)

    def run_searches(self) -> None:
        searches = [(position, location) for position in self.config.positions for location in self.config.locations]
        random.shuffle(searches)
        self._page_deadline = time.monotonic() + self.settings.minimum_page_time_sec

        for position, location in searches:
            logger.info("Starting the search for %s in %s", position, location)
            page = -1
            try:
                while True:
                    page += 1
                    pacing.sleep_random(2, 3)
                    self.next_job_page(position, location, page)
                    pacing.sleep_random(2, 3)
                    self.apply_jobs()
                    logger.info("Job applications for page %d have been completed", page)
                    self.pace_page()
            except NoMoreJobsError as exc:
                logger.info("No more jobs for %s in %s: %s", position, location, exc)
            except NavigationError as exc:
                logger.error("Abandoning %s in %s on page %d: %s", position, location, page, exc)
            except Exception:
                logger.exception("Search for %s in %s failed on page %d, moving on", position, location, page)
        logger.info("Job application process completed for all searches")

    def pace_page(self) -> None:
        self._page_cycles += 1
        remaining = self._page_deadline - time.monotonic()
        if remaining > 0:
            logger.warning("Minimum page time not reached, sleeping for %.0fs", remaining)
            pacing.sleep(remaining)
        self._page_deadline = time.monotonic() + self.settings.minimum_page_time_sec

        if self._page_cycles % self.settings.long_break_every_pages == 0:
            duration = pacing.sleep_random(self.settings.long_break_min_sec, self.settings.long_break_max_sec)
            logger.warning("Took a longer break of %.0fs", duration)

    def next_job_page(self, position: str, location: str, page: int) -> None:
        url = self.search_url(position, location, page)
        logger.info("Navigating to job page %d for %s in %s", page, position, location)

        def load() -> None:
            self.driver.get(url)
            wait = WebDriverWait(self.driver, self.wait_timeout_sec)
            try:
                wait.until(EC.url_contains("/jobs/search/"))
                wait.until(
                    EC.any_of(
                        EC.presence_of_element_located((By.CSS_SELECTOR, selectors.JOB_CARD)),
                        EC.presence_of_element_located((By.CSS_SELECTOR, selectors.NO_RESULTS_BANNER)),
                    )
                )
            except TimeoutException as exc:
                raise NavigationError(f"Job page {page} never showed results") from exc

        pacing.retry_with_backoff(
            load,
            attempts=self.settings.navigation_attempts,
            base_delay=self.settings.navigation_backoff_sec,
            retryable=(NavigationError,),
            label=f"Job page {page} navigation",
        )

    def has_no_results(self) -> bool:
        if self.driver.find_elements(By.CSS_SELECTOR, selectors.NO_RESULTS_BANNER):
            return True
        return NO_RESULTS_TEXT in (self.driver.page_source or "").lower()

    def apply_jobs(self) -> None:
        if self.has_no_results():
            raise NoMoreJobsError("the site reports no matching jobs")

        results = first(self.driver, By.CSS_SELECTOR, selectors.RESULTS_LIST)
        if results is not None:
            self.utils.scroll_slow(results, start=0, end=3600, step=100)
            pacing.sleep_random(1, 2)
            self.utils.scroll_slow(results, start=0, end=3600, step=300, reverse=True)

        container = first(self.driver, By.CSS_SELECTOR, selectors.RESULTS_CONTAINER)
        tiles = (container or self.driver).find_elements(By.CSS_SELECTOR, selectors.JOB_TILE)
        if not tiles:
            raise NoMoreJobsError("no job tiles found on page")

        jobs = [self.extract_job(tile) for tile in tiles]
        for job in jobs:
            if not job.link:
                logger.warning("Job tile without a link (%r at %r), skipping", job.title, job.company)
                continue
            if job.link in self.seen_links:
                logger.debug("Already seen %s, skipping", job.link)
                continue
            if self.is_blacklisted(job):
                logger.info("Blacklisted %s at %s, skipping", job.title, job.company)
                self.seen_links.add(job.link)
                self.outcomes.write(job, "skipped")
                continue
            self.seen_links.add(job.link)

            if job.apply_method in SKIPPED_APPLY_METHODS:
                logger.info("%s at %s is not a fresh Easy Apply (%s), skipping", job.title, job.company, job.apply_method)
                self.outcomes.write(job, "skipped")
                continue

            try:
                self.applier.job_apply(job)
            except Exception as exc:
                logger.error("Application to %s at %s failed: %s", job.title, job.company, exc)
                self.outcomes.write(job, "failed")
                continue
            self.outcomes.write(job, "success")

    def extract_job(self, tile: WebElement) -> JobPosting:
        job = JobPosting(apply_method="Applied")
        try:
            title = first(tile, By.CSS_SELECTOR, selectors.JOB_TILE_TITLE)
            if title is not None:
                job.title = title.text.strip()
                job.link = (title.get_attribute("href") or "").split("?")[0]
        except WebDriverException as exc:
            logger.warning("Failed to read the job title and link: %s", exc)
        job.company = self._tile_text(tile, selectors.JOB_TILE_COMPANY, "company") or job.company
        job.location = self._tile_text(tile, selectors.JOB_TILE_LOCATION, "location") or job.location
        job.apply_method = self._tile_text(tile, selectors.JOB_TILE_APPLY_METHOD, "apply method") or job.apply_method
        return job

    def _tile_text(self, tile: WebElement, selector: str, field: str) -> str:
        try:
            element = first(tile, By.CSS_SELECTOR, selector)
            return element.text.strip() if element is not None else ""
        except WebDriverException as exc:
            logger.warning("Failed to read the job %s: %s", field, exc)
            return ""

    def is_blacklisted(self, job: JobPosting) -> bool:
        title_words = set(job.title.lower().split())
        if title_words & self.title_blacklist:
            return True
        if job.company.strip().lower() in self.company_blacklist:
            return True
        return job.link in self.seen_links
