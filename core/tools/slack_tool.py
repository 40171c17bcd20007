"""Slack Web API client for delivering report messages."""

import os
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.contracts.schedule_page import DeliveryRequest, DeliveryResult
from core.logger import get_logger

load_dotenv()
logger = get_logger(__name__)

SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN")
SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"
DEFAULT_TIMEOUT = 15
MAX_RETRIES = 2
MOCK_SLACK = os.getenv("MOCK_SLACK", "").lower() in ("true", "1", "yes")


class SlackClient:
    """
    Posts messages with chat.postMessage.

    Slack answers HTTP 200 even for most failures, so success is judged from
    the JSON body's "ok" field. Network errors and non-2xx responses are
    reported as a failed DeliveryResult rather than raised.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        mock: Optional[bool] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.token = token if token is not None else SLACK_BOT_TOKEN
        self.mock = MOCK_SLACK if mock is None else mock
        self.timeout = timeout
        self.sent: List[DeliveryRequest] = []
        self._session: Optional[requests.Session] = None

        logger.info(f"SlackClient initialized (MOCK_SLACK: {self.mock}, token loaded: {bool(self.token)})")

    def _get_session(self) -> requests.Session:
        """
        Get or create a requests session with retry configuration.

        Returns:
            Configured requests.Session with retry policy.
        """
        if self._session is None:
            self._session = requests.Session()

            retry_strategy = Retry(
                total=MAX_RETRIES,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["POST"],
                respect_retry_after_header=True,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self._session.mount("https://", adapter)

        return self._session

    def send(self, request: DeliveryRequest) -> DeliveryResult:
        """
        Deliver a message to a channel.

        Args:
            request: Channel id and message text.

        Returns:
            DeliveryResult with ok=True, or the Slack error code/message.
        """
        if self.mock:
            self.sent.append(request)
            logger.info(f"MOCK SLACK: channel={request.channel_id}\n{request.text}")
            return DeliveryResult(ok=True)

        if not self.token:
            return DeliveryResult(ok=False, error_code="missing_token", error_message="SLACK_BOT_TOKEN not set")
        if not request.channel_id:
            return DeliveryResult(ok=False, error_code="missing_channel", error_message="No channel id configured")

        payload: Dict[str, Any] = {"channel": request.channel_id, "text": request.text}
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json; charset=utf-8",
        }

        try:
            response = self._get_session().post(
                SLACK_POST_MESSAGE_URL,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.error("Slack API request timed out")
            return DeliveryResult(ok=False, error_code="timeout", error_message="Slack API request timed out")
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.error(f"Slack API HTTP error: {status}")
            return DeliveryResult(ok=False, error_code=f"http_{status}", error_message=str(e))
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Slack API request failed: {e}")
            return DeliveryResult(ok=False, error_code="request_failed", error_message=str(e))

        if not isinstance(data, dict) or data.get("ok") is not True:
            error = data.get("error", "unknown_error") if isinstance(data, dict) else "invalid_response"
            logger.error(f"Slack post failed: {error}")
            return DeliveryResult(ok=False, error_code=error, error_message=str(data)[:500])

        self.sent.append(request)
        logger.debug(f"Slack message posted to {request.channel_id} (ts={data.get('ts')})")
        return DeliveryResult(ok=True)
