from __future__ import annotations

import pytest

from fakes import XPATH, FakeDriver, FakeElement
from kestrel.browser import selectors
from kestrel.browser.authenticator import LinkedInAuthenticator
from kestrel.browser.job_details import JobDetailExtractor, html_to_text
from kestrel.errors import NavigationError


def test_html_to_text_drops_scripts_and_blank_lines() -> None:
    html = """
    <div>
      <h2>About the job</h2>
      <script>track()</script>
      <p>Build <b>Python</b> services.</p>

      <ul><li>Remote friendly</li></ul>
    </div>
    """
    assert html_to_text(html) == "About the job\nBuild\nPython\nservices.\nRemote friendly"


def test_extract_description_expands_and_reads_html() -> None:
    driver = FakeDriver()
    see_more = FakeElement("button")
    driver.add(selectors.SEE_MORE_BUTTON, see_more, by=XPATH)
    driver.add(selectors.JOB_DESCRIPTION, FakeElement("div", attrs={"innerHTML": "<p>Ship APIs</p>"}))

    assert JobDetailExtractor(driver).extract_description() == "Ship APIs"
    assert see_more.clicks == 1


def test_extract_description_requires_description_block() -> None:
    with pytest.raises(NavigationError):
        JobDetailExtractor(FakeDriver()).extract_description()


def test_extract_recruiter_is_optional() -> None:
    driver = FakeDriver()
    extractor = JobDetailExtractor(driver)
    assert extractor.extract_recruiter() == ""

    driver.add(
        selectors.HIRING_TEAM_LINKS,
        FakeElement("a", attrs={"href": "https://www.linkedin.com/in/recruiter"}),
        by=XPATH,
    )
    assert extractor.extract_recruiter() == "https://www.linkedin.com/in/recruiter"


def test_authenticator_reuses_existing_session() -> None:
    driver = FakeDriver()
    driver.add(selectors.FEED_MARKER, FakeElement("button", "Start a post"), by="class name")

    LinkedInAuthenticator(driver, "ada@example.com", "secret", wait_timeout_sec=0.01).start()

    assert driver.visited == ["https://www.linkedin.com/feed"]


def test_authenticator_types_credentials_when_logged_out() -> None:
    driver = FakeDriver()
    email = FakeElement("input")
    password = FakeElement("input")
    submit = FakeElement("button")
    driver.add(selectors.USERNAME_FIELD, email, by="id")
    driver.add(selectors.PASSWORD_FIELD, password, by="id")
    driver.add(selectors.SUBMIT_BUTTON, submit, by=XPATH)

    LinkedInAuthenticator(driver, "ada@example.com", "secret", wait_timeout_sec=0.01).start()

    assert driver.visited[-1] == "https://www.linkedin.com/login"
    assert email.get_attribute("value") == "ada@example.com"
    assert len(email.sent_keys) == len("ada@example.com")
    assert password.get_attribute("value") == "secret"
    assert submit.clicks == 1
