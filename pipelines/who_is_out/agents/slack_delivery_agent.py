"""
Slack Delivery Agent for the Who-Is-Out pipeline.

Hands the rendered DeliveryRequest to a messaging client. A non-success
result aborts the run with DeliveryFailure; when a fallback channel is
configured a short failure notice is attempted there first.
"""

from typing import Any, Dict, Optional, Union

from core.contracts.schedule_page import DeliveryRequest, MessagingClient
from core.errors import DeliveryFailure
from core.logger import get_logger
from core.tools.slack_tool import SlackClient
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.config import RunConfig

logger = get_logger(__name__)

FAILURE_NOTICE_MAX_CHARS = 1200


def build_failure_notice(flow_label: str, error: Union[BaseException, str]) -> str:
    """Short "run did not work" text for the fallback channel."""
    return f"*{flow_label} run did not work*\n{str(error)[:FAILURE_NOTICE_MAX_CHARS]}"


def notify_failure(
    client: MessagingClient,
    channel_id: Optional[str],
    flow_label: str,
    error: Union[BaseException, str],
) -> bool:
    """
    Best-effort failure notice. Never raises.

    Returns:
        True if the notice was delivered.
    """
    if not channel_id:
        return False
    try:
        result = client.send(DeliveryRequest(channel_id=channel_id, text=build_failure_notice(flow_label, error)))
    except Exception as e:
        logger.error(f"Failure notice could not be sent: {e}")
        return False
    if not result.ok:
        logger.error(f"Failure notice rejected: {result.error_code}")
    return result.ok


class SlackDeliveryAgent(BaseAgent):
    """
    Agent that delivers the rendered message.

    Input: delivery_request, run_config
    Output: delivery_status

    Raises:
        DeliveryFailure: The client reported non-success.
    """

    def __init__(self, client: Optional[MessagingClient] = None, flow_label: str = "Daily") -> None:
        """
        Initialize the delivery agent.

        Args:
            client: Messaging client (SlackClient from environment if None).
            flow_label: Name used in failure notices ("Daily", "Weekly").
        """
        super().__init__(name="SlackDeliveryAgent")
        self.client = client or SlackClient()
        self.flow_label = flow_label

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        request: DeliveryRequest = self.require(input_data, "delivery_request")
        config: RunConfig = input_data.get("run_config") or RunConfig()

        result = self.client.send(request)
        if not result.ok:
            error_code = result.error_code or "unknown_error"
            failure = DeliveryFailure(error_code, result.error_message or "")
            if config.fallback_channel_id and config.fallback_channel_id != request.channel_id:
                notify_failure(self.client, config.fallback_channel_id, self.flow_label, failure)
            raise failure

        logger.info(f"Message delivered to {request.channel_id}")
        return {"delivery_status": {"ok": True, "channel_id": request.channel_id}}
