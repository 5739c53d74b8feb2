from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver

from kestrel.browser import selectors
from kestrel.browser.elements import ElementUtilities, first
from kestrel.core import pacing
from kestrel.errors import NavigationError

logger = logging.getLogger(__name__)


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.extract()

    text = soup.get_text("\n")
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines)


class JobDetailExtractor:
    def __init__(self, driver: WebDriver, utils: ElementUtilities | None = None):
        self.driver = driver
        self.utils = utils or ElementUtilities(driver)

    def extract_description(self) -> str:
        pacing.sleep_random(2, 3)
        see_more = first(self.driver, By.XPATH, selectors.SEE_MORE_BUTTON)
        if see_more is not None:
            self.utils.click(see_more)
            pacing.sleep_random(0.5, 1)
        self.scroll_page()

        description = first(self.driver, By.CSS_SELECTOR, selectors.JOB_DESCRIPTION)
        if description is None:
            raise NavigationError("Job description not found on the job page")
        return html_to_text(description.get_attribute("innerHTML") or "")

    def extract_recruiter(self) -> str:
        link = first(self.driver, By.XPATH, selectors.HIRING_TEAM_LINKS)
        if link is None:
            logger.warning("Recruiter's profile not found, skipping it")
            return ""
        return link.get_attribute("href") or ""

    def scroll_page(self) -> None:
        page = first(self.driver, By.CSS_SELECTOR, "html")
        if page is None:
            return
        self.utils.scroll_slow(page, start=0, end=7200, step=300)
        pacing.sleep_random(1, 2)
        self.utils.scroll_slow(page, start=0, end=7200, step=300, reverse=True)
