"""Playwright adapter for the timesheets.com Schedules grid.

Satisfies the SchedulePage contract (core/contracts/schedule_page.py). Owns
login, navigation, and the diagnostic screenshot/HTML dumps; the pipeline
only ever sees plain text and class attributes.
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from dotenv import load_dotenv
from playwright.sync_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeout,
    sync_playwright,
)

from core.contracts.schedule_page import BlockSnapshot
from core.errors import TransientPageError
from core.logger import get_logger
from core.polling import TimeBudget

load_dotenv()
logger = get_logger(__name__)

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

TS_BASE_URL = os.getenv("TS_BASE_URL", "https://secure.timesheets.com")
LOGIN_URL = f"{TS_BASE_URL}/default.cfm?page=Login"
SCHEDULES_URL = f"{TS_BASE_URL}/default.cfm?page=Schedules"

ARTIFACTS_DIR = Path(os.getenv("ARTIFACTS_DIR", "artifacts"))

NAVIGATION_TIMEOUT_MS = 90_000
ELEMENT_TIMEOUT_MS = 60_000
READ_TIMEOUT_MS = 5_000
VIEWPORT = {"width": 1400, "height": 900}

SELECTORS = {
    # Login page
    "username_input": "#username",
    "password_input": "#password",
    "login_button": 'button.loginButton[type="submit"]',

    # Schedules page anchors
    "schedule_grid": ".print-wrapper, .ts-schedule, .ts-schedule-table, .tsWeek",

    # Employee picker: people icon, select-all checkbox, Update button
    "people_icon": "i.open-menu.tour-BTS-Users, i.fa-users-medical-pos.open-menu",
    "select_all": "span.checkmark.cb-container-category.select-all",
    "update_button": "div.menu-link-item.update-menu-item",

    # Readiness indicator ("39 / 39" or "100%")
    "selection_counter": "span.float-right",

    # Week grid
    "header_label": ".grid-day-header .date_label",
    "row": ".schedule-row-item .grid-row-off, .schedule-row-item .schedule_row",
    "row_name": ".name-ellipses",
    "day_cell": '.grid-day[data-day-index="{index}"]',
    "block": ".timeOff, .default.schedule-item",
}


def save_artifacts(page: Page, name: str, artifacts_dir: Path = ARTIFACTS_DIR) -> None:
    """Save a full-page screenshot and the page HTML for diagnosis."""
    artifacts_dir.mkdir(parents=True, exist_ok=True)
    png_path = artifacts_dir / f"{name}.png"
    html_path = artifacts_dir / f"{name}.html"
    try:
        page.screenshot(path=str(png_path), full_page=True)
        html_path.write_text(page.content(), encoding="utf-8")
        logger.info(f"Saved artifacts: {png_path}, {html_path}")
    except PlaywrightError as e:
        logger.warning(f"Could not save artifacts '{name}': {e}")


def _inner_text(locator: Locator) -> str:
    """Visible text of the first match, or "" when absent."""
    if not locator.count():
        return ""
    return (locator.first.inner_text(timeout=READ_TIMEOUT_MS) or "").strip()


def _safe_click(locator: Locator) -> None:
    """Wait for, scroll to and click an element."""
    locator.wait_for(state="visible", timeout=ELEMENT_TIMEOUT_MS)
    try:
        locator.scroll_into_view_if_needed(timeout=READ_TIMEOUT_MS)
    except PlaywrightError:
        logger.debug("scroll_into_view_if_needed failed; clicking anyway")
    locator.click(timeout=ELEMENT_TIMEOUT_MS)


class TimesheetsRow:
    """RowHandle over one `.schedule_row` locator."""

    def __init__(self, locator: Locator) -> None:
        self._locator = locator

    def name(self) -> str:
        try:
            return _inner_text(self._locator.locator(SELECTORS["row_name"]))
        except PlaywrightError as e:
            raise TransientPageError(f"Reading row name failed: {e}") from e

    def blocks_for_column(self, index: int) -> List[BlockSnapshot]:
        try:
            cell = self._locator.locator(SELECTORS["day_cell"].format(index=index)).first
            if not cell.count():
                return []
            blocks = cell.locator(SELECTORS["block"])
            snapshots: List[BlockSnapshot] = []
            for i in range(blocks.count()):
                block = blocks.nth(i)
                snapshots.append({
                    "text": block.inner_text(timeout=READ_TIMEOUT_MS) or "",
                    "style_attr": block.get_attribute("class", timeout=READ_TIMEOUT_MS) or "",
                })
            return snapshots
        except PlaywrightError as e:
            raise TransientPageError(f"Reading column {index} failed: {e}") from e


class TimesheetsPage:
    """
    SchedulePage implementation backed by a logged-in Playwright page.

    Use open_timesheets_session() to build one; it handles browser lifetime.
    """

    def __init__(
        self,
        page: Page,
        artifacts_dir: Path = ARTIFACTS_DIR,
        budget: Optional[TimeBudget] = None,
    ) -> None:
        self.page = page
        self.artifacts_dir = artifacts_dir
        self.budget = budget

    def _navigation_timeout_ms(self, stage: str) -> float:
        """NAVIGATION_TIMEOUT_MS, clamped to what is left of the run budget."""
        if self.budget is None:
            return NAVIGATION_TIMEOUT_MS
        return self.budget.clamp(NAVIGATION_TIMEOUT_MS / 1000, stage) * 1000

    def login(self, username: str, password: str) -> None:
        """Sign in and wait for the post-login navigation."""
        logger.info("Navigating to login page...")
        self.page.goto(LOGIN_URL, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms("login"))
        self.page.locator(SELECTORS["username_input"]).fill(username, timeout=ELEMENT_TIMEOUT_MS)
        self.page.locator(SELECTORS["password_input"]).fill(password, timeout=ELEMENT_TIMEOUT_MS)
        save_artifacts(self.page, "01-login-page", self.artifacts_dir)

        with self.page.expect_navigation(
            wait_until="domcontentloaded", timeout=self._navigation_timeout_ms("login")
        ):
            self.page.locator(SELECTORS["login_button"]).click(timeout=ELEMENT_TIMEOUT_MS)

        save_artifacts(self.page, "02-after-login", self.artifacts_dir)
        logger.info("Login completed")

    def open_schedules(self) -> None:
        """Go straight to the Schedules page and wait for the grid."""
        self.page.goto(
            SCHEDULES_URL, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms("open_schedules")
        )
        self.wait_for_grid()
        save_artifacts(self.page, "03-on-schedules", self.artifacts_dir)

    def wait_for_grid(self) -> None:
        try:
            self.page.locator(SELECTORS["schedule_grid"]).first.wait_for(
                state="visible", timeout=self._navigation_timeout_ms("wait_for_grid")
            )
        except PlaywrightTimeout as e:
            save_artifacts(self.page, "99-error", self.artifacts_dir)
            raise TransientPageError(f"Schedule grid did not appear: {e}") from e

    # --- SchedulePage contract -------------------------------------------

    def apply_select_all(self) -> None:
        try:
            _safe_click(self.page.locator(SELECTORS["people_icon"]).first)
            _safe_click(self.page.locator(SELECTORS["select_all"]).first)
            _safe_click(self.page.locator(SELECTORS["update_button"]).first)
        except PlaywrightError as e:
            save_artifacts(self.page, "99-error", self.artifacts_dir)
            raise TransientPageError(f"Select-all/Update failed: {e}") from e

    def sample_selection_counter_text(self) -> str:
        try:
            return _inner_text(self.page.locator(SELECTORS["selection_counter"]))
        except PlaywrightError as e:
            raise TransientPageError(f"Reading selection counter failed: {e}") from e

    def get_header_labels(self) -> List[str]:
        try:
            self.wait_for_grid()
            labels = self.page.locator(SELECTORS["header_label"])
            return [
                (labels.nth(i).inner_text(timeout=READ_TIMEOUT_MS) or "").strip()
                for i in range(labels.count())
            ]
        except PlaywrightError as e:
            raise TransientPageError(f"Reading header labels failed: {e}") from e

    def get_rows(self) -> List[TimesheetsRow]:
        try:
            rows = self.page.locator(SELECTORS["row"])
            return [TimesheetsRow(rows.nth(i)) for i in range(rows.count())]
        except PlaywrightError as e:
            raise TransientPageError(f"Listing rows failed: {e}") from e

    def capture(self, name: str) -> None:
        """Write a named diagnostic snapshot."""
        save_artifacts(self.page, name, self.artifacts_dir)


@contextmanager
def open_timesheets_session(
    username: str,
    password: str,
    headless: bool = True,
    artifacts_dir: Optional[Path] = None,
    budget: Optional[TimeBudget] = None,
) -> Iterator[TimesheetsPage]:
    """
    Launch a private browser session, log in and open the Schedules grid.

    Each run gets its own browser and context, so concurrent runs never
    share a session. Login and navigation waits count against `budget`.

    Yields:
        TimesheetsPage ready for apply_select_all().
    """
    if not username or not password:
        raise ValueError("TS_USERNAME and TS_PASSWORD are required")

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=headless)
        context = browser.new_context(viewport=VIEWPORT)
        try:
            page = context.new_page()
            schedule_page = TimesheetsPage(page, artifacts_dir or ARTIFACTS_DIR, budget=budget)
            schedule_page.login(username, password)
            schedule_page.open_schedules()
            yield schedule_page
        finally:
            context.close()
            browser.close()
