"""
DevRev tagging client for the Ticket Tagger.

Submits a ticket's tags and reasoning to the tagging endpoint and reports
the outcome as a TagOutcome instead of raising.
"""

import logging
from typing import Any, Optional

import httpx

from .config import TaggerConfig
from .models import TagOutcome, TagRequest


logger = logging.getLogger(__name__)


def _response_payload(response: httpx.Response) -> Any:
    """Parsed JSON body, or the raw text when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


class DevRevTagger:
    """
    Client for the DevRev ticket tagging endpoint.

    Authenticates with a static bearer token. No retries: every failure is
    logged once and returned to the caller.
    """

    def __init__(
        self,
        config: TaggerConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the tagger.

        Args:
            config: Tagger configuration with endpoint and credentials.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "DevRevTagger":
        """Context manager entry."""
        self._client = httpx.Client(
            timeout=self._config.request_timeout,
            transport=self._transport,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        if self._client:
            self._client.close()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    def tag(self, ticket_id: str, tags: list[str], reasoning: str) -> TagOutcome:
        """
        Tag a ticket.

        Args:
            ticket_id: Ticket identifier.
            tags: One or more tags to apply.
            reasoning: Explanation stored alongside the tags.

        Returns:
            TagOutcome describing success or failure.

        Raises:
            RuntimeError: If used outside the context manager.
        """
        if not self._client:
            raise RuntimeError("Client must be used within a context manager")

        request = TagRequest(ticket_id=ticket_id, tags=tags, reasoning=reasoning)
        logger.debug(f"POST {self._config.tag_url}: {request.to_payload()}")

        try:
            response = self._client.post(
                self._config.tag_url,
                json=request.to_payload(),
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            payload = _response_payload(e.response)
            outcome = TagOutcome(
                ticket_id=ticket_id,
                success=False,
                status_code=e.response.status_code,
                payload=payload,
                error=f"HTTP error: {e.response.status_code}",
            )
            logger.error(f"Error tagging ticket {ticket_id}: {outcome.describe()}")
            return outcome
        except (httpx.RequestError, UnicodeEncodeError) as e:
            outcome = TagOutcome(
                ticket_id=ticket_id,
                success=False,
                error=f"Request failed: {e}",
            )
            logger.error(f"Error tagging ticket {ticket_id}: {outcome.describe()}")
            return outcome

        outcome = TagOutcome(
            ticket_id=ticket_id,
            success=True,
            status_code=response.status_code,
            payload=_response_payload(response),
        )
        logger.info(f"Ticket {ticket_id} tagged successfully: {outcome.describe()}")
        return outcome


def tag_ticket(
    config: TaggerConfig,
    ticket_id: str,
    tags: list[str],
    reasoning: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> TagOutcome:
    """
    Convenience function to tag a single ticket.

    Args:
        config: Tagger configuration.
        ticket_id: Ticket identifier.
        tags: Tags to apply.
        reasoning: Explanation for the tags.
        transport: Optional httpx transport (used by tests).

    Returns:
        TagOutcome of the request.
    """
    with DevRevTagger(config, transport=transport) as tagger:
        return tagger.tag(ticket_id, tags, reasoning)
