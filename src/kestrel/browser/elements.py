from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TypeVar

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    StaleElementReferenceException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from kestrel.browser import selectors
from kestrel.core import pacing

logger = logging.getLogger(__name__)

T = TypeVar("T")

PLACEHOLDER_OPTIONS = {"", "default", "select an option"}
_WHITESPACE = re.compile(r"\s+")
_SKIPPED_INPUT_TYPES = {"hidden", "file", "submit", "button"}


def first(scope: WebDriver | WebElement, by: str, value: str) -> WebElement | None:
    found = scope.find_elements(by, value)
    return found[0] if found else None


def with_stale_retry(
    action: Callable[[WebElement], T],
    element: WebElement,
    relocate: Callable[[], WebElement | None],
) -> T:
    """Run ``action`` on ``element``; if the node went stale, re-locate it once and retry."""
    try:
        return action(element)
    except StaleElementReferenceException:
        logger.warning("Element went stale, re-locating and retrying once")
        fresh = relocate()
        if fresh is None:
            raise
        return action(fresh)


class ElementUtilities:
    def __init__(self, driver: WebDriver):
        self.driver = driver

    def scroll_into_view(self, element: WebElement) -> None:
        self.driver.execute_script(
            "arguments[0].scrollIntoView({block: 'center', inline: 'nearest'});", element
        )

    def scroll_slow(
        self,
        element: WebElement,
        start: int = 0,
        end: int = 3600,
        step: int = 100,
        reverse: bool = False,
    ) -> None:
        if reverse:
            start, end, step = end, start, -step
        if step == 0:
            raise ValueError("step cannot be zero")
        if not element.is_displayed():
            logger.warning("Element is not visible, not scrolling")
            return
        script = "arguments[0].scrollTop = arguments[1];"
        for position in range(start, end, step):
            self.driver.execute_script(script, element, position)
            pacing.sleep_random(0.1, 0.3)
        self.driver.execute_script(script, element, end)
        pacing.sleep(1)

    def click(self, element: WebElement) -> None:
        try:
            element.click()
        except (ElementClickInterceptedException, ElementNotInteractableException):
            self.driver.execute_script("arguments[0].click();", element)

    def enter_text(self, element: WebElement, text: str) -> bool:
        current = element.get_attribute("value") or ""
        if current == text:
            logger.info("Skipping text input, element already holds %r", current)
            return False
        element.clear()
        pacing.sleep_random(0.5, 1.5)
        element.send_keys(text)
        return True

    def is_already_filled(self, element: WebElement) -> bool:
        tag = (element.tag_name or "").lower()
        if tag == "input":
            input_type = (element.get_attribute("type") or "").lower()
            if input_type in {"radio", "checkbox"}:
                return element.is_selected()
            return bool(element.get_attribute("value"))
        if tag == "textarea":
            return bool(element.get_attribute("value"))
        if tag == "select":
            option = first(element, By.CSS_SELECTOR, selectors.CHECKED_OPTION)
            if option is None:
                return False
            value = (option.get_attribute("value") or "").strip().lower()
            text = (option.text or "").strip().lower()
            return value not in PLACEHOLDER_OPTIONS and text not in PLACEHOLDER_OPTIONS
        return self.section_is_filled(element)

    def section_is_filled(self, section: WebElement) -> bool:
        """True when every question in the section already carries an answer."""
        controls = [
            control
            for control in section.find_elements(By.CSS_SELECTOR, selectors.FORM_CONTROLS)
            if (control.get_attribute("type") or "").lower() not in _SKIPPED_INPUT_TYPES
        ]
        if not controls:
            return False

        choices = []
        for control in controls:
            control_type = (control.get_attribute("type") or "").lower()
            if control.tag_name == "input" and control_type in {"radio", "checkbox"}:
                choices.append(control)
            elif not self.is_already_filled(control):
                return False
        if choices and not any(choice.is_selected() for choice in choices):
            return False
        return True

    def is_numeric_field(self, field: WebElement) -> bool:
        field_type = (field.get_attribute("type") or "").lower()
        if "numeric" in field_type or field_type == "number":
            return True
        field_id = (field.get_attribute("id") or "").lower()
        return "number" in field_id

    def unique_identifier(self, element: WebElement) -> str:
        element_id = element.get_attribute("id")
        if element_id:
            return element_id
        name = element.get_attribute("name")
        if name:
            return name
        composite = f"{element.get_attribute('class') or ''}-{element.get_attribute('type') or ''}-{element.text or ''}"
        return _WHITESPACE.sub("-", composite)

    def question_text(self, section: WebElement) -> str:
        label = first(section, By.CSS_SELECTOR, selectors.LABEL)
        if label is not None and label.text.strip():
            return label.text.strip().lower()

        parent = first(section, By.XPATH, selectors.PARENT)
        if parent is not None:
            for selector in (selectors.GROUP_TITLE, selectors.GROUP_SUBTITLE):
                for element in parent.find_elements(By.CSS_SELECTOR, selector):
                    if element.text.strip():
                        return element.text.strip().lower()

        text = (section.text or "").strip().lower()
        if not text:
            raise ValueError("Failed to find valid question text")
        return text.splitlines()[0].strip()
