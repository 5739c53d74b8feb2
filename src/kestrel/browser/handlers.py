from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from datetime import date

from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement

from kestrel.browser import selectors
from kestrel.browser.elements import PLACEHOLDER_OPTIONS, ElementUtilities, first
from kestrel.core import pacing
from kestrel.core.answers import DEFAULT_NUMERIC_ANSWER, AnswerResolver, extract_number, find_best_match

logger = logging.getLogger(__name__)

_TERMS = re.compile(r"terms of service|privacy policy|terms of use", re.IGNORECASE)
_NON_WORD = re.compile(r"[^a-z0-9]+")


class SectionHandler(ABC):
    """One way of answering a form section; handlers are tried in a fixed order."""

    def __init__(self, resolver: AnswerResolver, utils: ElementUtilities):
        self.resolver = resolver
        self.utils = utils

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def can_handle(self, section: WebElement) -> bool: ...

    @abstractmethod
    def apply(self, section: WebElement) -> bool: ...


def _text_fields(section: WebElement) -> list[WebElement]:
    fields = section.find_elements(By.CSS_SELECTOR, selectors.TEXT_INPUTS)
    fields += section.find_elements(By.CSS_SELECTOR, selectors.TEXTAREA)
    return [
        field
        for field in fields
        if "artdeco-datepicker__input" not in (field.get_attribute("class") or "")
    ]


def _dropdown(section: WebElement) -> tuple[WebElement, WebElement] | None:
    container = first(section, By.CSS_SELECTOR, selectors.FORM_ELEMENT)
    if container is None:
        return None
    select = first(container, By.CSS_SELECTOR, selectors.SELECT)
    if select is None:
        return None
    return container, select


def _choose_option(utils: ElementUtilities, select: WebElement, answer: str) -> bool:
    for option in select.find_elements(By.CSS_SELECTOR, selectors.OPTION):
        if option.text.strip() == answer:
            if option.is_selected():
                logger.info("Dropdown already set to %r", answer)
                return True
            utils.click(option)
            pacing.sleep_random(1, 2)
            return True
    logger.warning("No dropdown option matches %r", answer)
    return False


def _real_options(select: WebElement) -> list[str]:
    texts = [option.text.strip() for option in select.find_elements(By.CSS_SELECTOR, selectors.OPTION)]
    return [text for text in texts if text.lower() not in PLACEHOLDER_OPTIONS]


def _radio_options(fieldset: WebElement) -> list[tuple[str, WebElement]]:
    options = []
    for option in fieldset.find_elements(By.CSS_SELECTOR, selectors.RADIO_OPTION):
        label = first(option, By.CSS_SELECTOR, selectors.LABEL)
        text = (label.text if label is not None else option.text).strip()
        options.append((text, option))
    return options


def _select_radio(utils: ElementUtilities, fieldset: WebElement, answer: str) -> bool:
    for text, option in _radio_options(fieldset):
        if text.lower() == answer.strip().lower():
            control = first(option, By.CSS_SELECTOR, selectors.INPUT) or option
            utils.click(control)
            logger.debug("Selected radio option %r", text)
            return True
    logger.warning("No radio option matches %r", answer)
    return False


def _to_form_date(answer: str) -> str:
    try:
        return date.fromisoformat(answer).strftime("%m/%d/%Y")
    except ValueError:
        return answer


class PredefinedValueHandler(SectionHandler):
    """Fills contact fields straight from the profile's personal information."""

    def _match(self, section: WebElement) -> str | None:
        try:
            label = self.utils.question_text(section)
        except ValueError:
            return None
        key_form = f"_{_NON_WORD.sub('_', label.lower()).strip('_')}_"
        values = self.resolver.personal_information()
        for key in sorted(values, key=len, reverse=True):
            if f"_{key.lower()}_" in key_form:
                return values[key]
        return None

    def can_handle(self, section: WebElement) -> bool:
        return self._match(section) is not None

    def apply(self, section: WebElement) -> bool:
        value = self._match(section)
        if value is None:
            return False

        dropdown = _dropdown(section)
        if dropdown is not None:
            options = _real_options(dropdown[1])
            if options:
                return _choose_option(self.utils, dropdown[1], find_best_match(value, options))

        fields = _text_fields(section)
        if fields:
            self.utils.enter_text(fields[0], value)
            return True

        fieldset = first(section, By.CSS_SELECTOR, selectors.RADIO_FIELDSET)
        if fieldset is not None:
            options = [text for text, _ in _radio_options(fieldset)]
            if options:
                return _select_radio(self.utils, fieldset, find_best_match(value, options))

        date_field = first(section, By.CSS_SELECTOR, selectors.DATE_INPUT)
        if date_field is not None:
            self.utils.enter_text(date_field, _to_form_date(value))
            return True
        return False


class TermsOfServiceHandler(SectionHandler):
    def can_handle(self, section: WebElement) -> bool:
        label = first(section, By.CSS_SELECTOR, selectors.LABEL)
        return label is not None and bool(_TERMS.search(label.text or ""))

    def apply(self, section: WebElement) -> bool:
        label = first(section, By.CSS_SELECTOR, selectors.LABEL)
        if label is None:
            return False
        checkbox = first(section, By.CSS_SELECTOR, selectors.CHECKBOX_INPUT)
        if checkbox is not None and checkbox.is_selected():
            return True
        self.utils.click(label)
        pacing.sleep_random(1, 2)
        return True


class SingleCheckboxHandler(SectionHandler):
    max_attempts = 3

    def can_handle(self, section: WebElement) -> bool:
        fieldset = first(section, By.CSS_SELECTOR, selectors.CHECKBOX_FIELDSET)
        return fieldset is not None and len(fieldset.find_elements(By.CSS_SELECTOR, selectors.CHECKBOX_INPUT)) == 1

    def apply(self, section: WebElement) -> bool:
        fieldset = first(section, By.CSS_SELECTOR, selectors.CHECKBOX_FIELDSET)
        if fieldset is None:
            return False
        label = first(fieldset, By.CSS_SELECTOR, selectors.LABEL)
        checkbox = first(fieldset, By.CSS_SELECTOR, selectors.CHECKBOX_INPUT)
        if label is None or checkbox is None:
            logger.warning("Checkbox label or input not found")
            return False
        if not (checkbox.is_displayed() and checkbox.is_enabled()):
            logger.warning("Checkbox is either not visible or not enabled")
            return False

        for attempt in range(1, self.max_attempts + 1):
            if checkbox.is_selected():
                return True
            self.utils.click(label)
            pacing.sleep_random(0.5, 1)
            if checkbox.is_selected():
                return True
            logger.warning("Checkbox not checked after attempt %d/%d", attempt, self.max_attempts)
        return False


class RadioHandler(SectionHandler):
    def can_handle(self, section: WebElement) -> bool:
        fieldset = first(section, By.CSS_SELECTOR, selectors.RADIO_FIELDSET)
        return fieldset is not None and bool(fieldset.find_elements(By.CSS_SELECTOR, selectors.RADIO_OPTION))

    def apply(self, section: WebElement) -> bool:
        for fieldset in section.find_elements(By.CSS_SELECTOR, selectors.RADIO_FIELDSET):
            options = [text for text, _ in _radio_options(fieldset)]
            if not options:
                continue
            legend = first(fieldset, By.CSS_SELECTOR, selectors.RADIO_LEGEND)
            question = (legend.text if legend is not None else fieldset.text).strip().lower()
            logger.info("Radio question: %s", question)

            answer = self.resolver.resolve(question, "radio", options)
            if answer and _select_radio(self.utils, fieldset, answer):
                return True
        return False


class DropdownHandler(SectionHandler):
    def can_handle(self, section: WebElement) -> bool:
        return _dropdown(section) is not None

    def apply(self, section: WebElement) -> bool:
        found = _dropdown(section)
        if found is None:
            return False
        container, select = found
        label = first(container, By.CSS_SELECTOR, selectors.LABEL)
        question = (label.text if label is not None else container.text).strip().lower()
        options = _real_options(select)
        if not question or not options:
            return False

        logger.debug("Dropdown question %r options=%s", question, options)
        answer = self.resolver.resolve(question, "dropdown", options)
        return bool(answer) and _choose_option(self.utils, select, answer)


class TextboxHandler(SectionHandler):
    def can_handle(self, section: WebElement) -> bool:
        return bool(_text_fields(section))

    def apply(self, section: WebElement) -> bool:
        fields = _text_fields(section)
        if not fields:
            return False
        field = fields[0]
        question = self.utils.question_text(section)
        numeric = self.utils.is_numeric_field(field)

        answer = self.resolver.resolve(question, "numeric" if numeric else "textbox")
        if answer is None or not answer.strip():
            return False
        self.utils.enter_text(field, answer)
        self._repair_inline_error(section, field, question, answer, numeric)
        return True

    def _repair_inline_error(
        self,
        section: WebElement,
        field: WebElement,
        question: str,
        answer: str,
        numeric: bool,
    ) -> None:
        error = first(section, By.CSS_SELECTOR, selectors.INLINE_ERROR)
        if error is None:
            return
        message = (error.text or "").strip()
        logger.warning("Inline error %r after answering %r", message, question)

        current = field.get_attribute("value") or answer
        if numeric or "number" in message.lower():
            fixed = str(extract_number(current, DEFAULT_NUMERIC_ANSWER))
        else:
            fixed = self.resolver.fix(question, current, message)
        self.utils.enter_text(field, fixed)


class MultiCheckboxHandler(SectionHandler):
    def can_handle(self, section: WebElement) -> bool:
        fieldset = first(section, By.CSS_SELECTOR, selectors.CHECKBOX_FIELDSET)
        return fieldset is not None and len(fieldset.find_elements(By.CSS_SELECTOR, selectors.CHECKBOX_INPUT)) > 1

    def apply(self, section: WebElement) -> bool:
        fieldset = first(section, By.CSS_SELECTOR, selectors.CHECKBOX_FIELDSET)
        if fieldset is None:
            return False
        checkboxes = fieldset.find_elements(By.CSS_SELECTOR, selectors.CHECKBOX_INPUT)
        labels = fieldset.find_elements(By.CSS_SELECTOR, selectors.LABEL)
        if not checkboxes or len(labels) < len(checkboxes):
            logger.warning("Checkboxes or labels not found within the fieldset")
            return False

        legend = first(fieldset, By.CSS_SELECTOR, selectors.RADIO_LEGEND)
        question = (legend.text if legend is not None else fieldset.text).strip().lower()
        options = [label.text.strip() for label in labels[: len(checkboxes)]]
        answer = self.resolver.resolve(question, "multi_checkbox", options)

        for checkbox, label, option in zip(checkboxes, labels, options):
            if option != answer:
                continue
            if not checkbox.is_selected():
                self.utils.click(label)
                pacing.sleep_random(0.5, 1)
            return checkbox.is_selected()
        return False


class DateHandler(SectionHandler):
    def can_handle(self, section: WebElement) -> bool:
        return first(section, By.CSS_SELECTOR, selectors.DATE_INPUT) is not None

    def apply(self, section: WebElement) -> bool:
        field = first(section, By.CSS_SELECTOR, selectors.DATE_INPUT)
        if field is None:
            return False
        question = self.utils.question_text(section)
        answer = self.resolver.resolve(question, "date")
        if answer is None:
            return False
        self.utils.enter_text(field, _to_form_date(answer))
        return True


HANDLER_ORDER: tuple[type[SectionHandler], ...] = (
    PredefinedValueHandler,
    TermsOfServiceHandler,
    SingleCheckboxHandler,
    RadioHandler,
    DropdownHandler,
    TextboxHandler,
    MultiCheckboxHandler,
    DateHandler,
)


def default_handlers(resolver: AnswerResolver, utils: ElementUtilities) -> list[SectionHandler]:
    return [handler(resolver, utils) for handler in HANDLER_ORDER]


def run_handlers(handlers: list[SectionHandler], section: WebElement) -> bool:
    """Try each handler in order; the first one that commits a value wins."""
    for handler in handlers:
        if not handler.can_handle(section):
            continue
        logger.debug("Trying %s", handler.name)
        if handler.apply(section):
            logger.info("Section handled by %s", handler.name)
            return True
        logger.debug("%s did not handle the section", handler.name)
    logger.warning("Section not handled by any handler")
    return False
