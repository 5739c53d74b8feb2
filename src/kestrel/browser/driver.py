from __future__ import annotations

import logging
from pathlib import Path

from selenium import webdriver
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.remote.webdriver import WebDriver

logger = logging.getLogger(__name__)


def chrome_options(profile_dir: Path, headless: bool = False) -> ChromeOptions:
    options = ChromeOptions()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--start-maximized")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-extensions")
    options.add_argument("--disable-blink-features=AutomationControlled")
    options.add_argument("--ignore-certificate-errors")
    options.add_argument(f"--user-data-dir={Path(profile_dir).resolve()}")
    return options


def create_chrome_driver(profile_dir: Path, headless: bool = False) -> WebDriver:
    """Start Chrome with a persistent profile so the LinkedIn session survives restarts."""
    profile_dir = Path(profile_dir)
    profile_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Starting Chrome with profile %s", profile_dir)
    # Selenium Manager resolves the chromedriver binary when no Service is given.
    return webdriver.Chrome(options=chrome_options(profile_dir, headless))
