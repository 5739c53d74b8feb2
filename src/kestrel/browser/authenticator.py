from __future__ import annotations

import logging

from selenium.common.exceptions import NoSuchElementException, TimeoutException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from kestrel.browser import selectors
from kestrel.core import pacing

logger = logging.getLogger(__name__)

FEED_URL = "https://www.linkedin.com/feed"
LOGIN_URL = "https://www.linkedin.com/login"
CHECKPOINT_MARKER = "linkedin.com/checkpoint/challenge/"


class LinkedInAuthenticator:
    def __init__(
        self,
        driver: WebDriver,
        email: str,
        password: str,
        *,
        wait_timeout_sec: float = 10,
        checkpoint_timeout_sec: float = 300,
    ):
        self.driver = driver
        self.email = email
        self.password = password
        self.wait_timeout_sec = wait_timeout_sec
        self.checkpoint_timeout_sec = checkpoint_timeout_sec

    def start(self) -> None:
        logger.info("Opening LinkedIn to check the session")
        if self.is_logged_in():
            logger.info("User is already logged in")
            return
        self.login()

    def is_logged_in(self) -> bool:
        self.driver.get(FEED_URL)
        self.wait_for_page_load()
        try:
            WebDriverWait(self.driver, self.wait_timeout_sec).until(
                EC.presence_of_element_located((By.CLASS_NAME, selectors.FEED_MARKER))
            )
        except TimeoutException:
            return False
        buttons = self.driver.find_elements(By.CLASS_NAME, selectors.FEED_MARKER)
        return any(button.text.strip() == "Start a post" for button in buttons)

    def login(self) -> None:
        current = self.driver.current_url
        if "linkedin.com/login" not in current and "linkedin.com/uas/login" not in current:
            logger.info("Navigating to the LinkedIn login page")
            self.driver.get(LOGIN_URL)
            self.wait_for_page_load()

        if "feed" in self.driver.current_url:
            logger.info("Already logged in, redirected to feed")
            return

        try:
            email_field = WebDriverWait(self.driver, self.wait_timeout_sec).until(
                EC.presence_of_element_located((By.ID, selectors.USERNAME_FIELD))
            )
            self.type_with_delay(email_field, self.email)
            pacing.sleep_random(0.3, 0.5)
            self.type_with_delay(self.driver.find_element(By.ID, selectors.PASSWORD_FIELD), self.password)
            pacing.sleep_random(0.7, 1.2)
            self.driver.find_element(By.XPATH, selectors.SUBMIT_BUTTON).click()
            pacing.sleep_random(1, 2)
        except TimeoutException:
            logger.error("Login form not found, aborting login")
        except NoSuchElementException:
            logger.error("Could not log in to LinkedIn. Please check your credentials.")

        self.handle_security_check()

    def type_with_delay(self, element: WebElement, text: str) -> None:
        for char in text:
            element.send_keys(char)
            pacing.sleep_random(0.05, 0.15)

    def handle_security_check(self) -> None:
        if CHECKPOINT_MARKER not in self.driver.current_url:
            logger.info("No security checkpoint detected")
            return
        logger.warning("Security checkpoint detected. Please complete the challenge in the browser.")
        try:
            WebDriverWait(self.driver, self.checkpoint_timeout_sec).until(
                EC.url_contains("https://www.linkedin.com/feed/")
            )
            logger.info("Security check completed")
        except TimeoutException:
            logger.warning("Security check not completed. Please try again later.")

    def wait_for_page_load(self) -> None:
        try:
            WebDriverWait(self.driver, self.wait_timeout_sec).until(
                lambda driver: driver.execute_script("return document.readyState") == "complete"
            )
        except TimeoutException:
            logger.error("Page load timed out")
