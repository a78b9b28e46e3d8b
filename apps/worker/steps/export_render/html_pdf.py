"""
HTML -> PDF conversion through headless Chromium.

Each conversion launches its own browser and closes it on every exit path.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from playwright.sync_api import Browser, Error as PlaywrightError, sync_playwright

from packages.shared.errors import RenderingFailed

RENDER_TIMEOUT_SECONDS = float(os.getenv("RENDER_TIMEOUT_SECONDS", "60"))
CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
PDF_MARGIN = {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"}

logger = logging.getLogger(__name__)


class DocumentRenderer(Protocol):
    def render_markup_to_pdf(self, markup: str) -> bytes:
        ...


class ChromiumPdfRenderer:
    def __init__(self, timeout_seconds: float = RENDER_TIMEOUT_SECONDS, launch_args: list[str] | None = None):
        self.timeout_ms = timeout_seconds * 1000
        self.launch_args = list(launch_args if launch_args is not None else CHROMIUM_ARGS)

    @contextmanager
    def browser(self) -> Iterator[Browser]:
        with sync_playwright() as playwright:
            logger.info("Launching headless Chromium to generate PDF...")
            browser = playwright.chromium.launch(headless=True, args=self.launch_args)
            try:
                yield browser
            finally:
                browser.close()

    def render_markup_to_pdf(self, markup: str) -> bytes:
        try:
            with self.browser() as browser:
                page = browser.new_page()
                page.set_default_timeout(self.timeout_ms)
                page.set_content(markup, wait_until="networkidle")
                pdf_bytes = page.pdf(format="A4", print_background=True, margin=PDF_MARGIN)
        except PlaywrightError as exc:
            raise RenderingFailed(f"Chromium could not render the report: {exc}") from exc
        logger.info(f"Chromium rendered {len(pdf_bytes)} bytes")
        return pdf_bytes
