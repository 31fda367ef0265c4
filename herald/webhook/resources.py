"""Falcon resource receiving GitHub webhook deliveries.

Usage
-----
Register the callback endpoint on the Falcon app::

    from herald.webhook.resources import WebhookResource

    app.add_route("/github/callback", WebhookResource(dispatcher))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon

from herald.dispatcher import DeliveryOutcome

from .models import WebhookDelivery
from .signature import SIGNATURE_HEADER

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.dispatcher import Dispatcher

__all__ = ["EVENT_HEADER", "DELIVERY_HEADER", "MAX_PAYLOAD_BYTES", "WebhookResource"]

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"
# GitHub caps webhook payloads at 25 MB.
MAX_PAYLOAD_BYTES = 25 * 1024 * 1024


class WebhookResource:
    """Accept deliveries and hand them to the dispatcher.

    Rejected deliveries answer ``401``. Every other outcome answers ``202``
    with ``{"outcome": ...}``: the delivery was authentic, whether or not it
    produced a chat message.

    Parameters
    ----------
    dispatcher
        Relay pipeline that processes each delivery.

    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        """Bind the resource to a dispatcher."""
        self._dispatcher = dispatcher

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /github/callback requests.

        Parameters
        ----------
        req
            Falcon request carrying the raw body and GitHub headers.
        resp
            Falcon response populated with the delivery outcome.

        Raises
        ------
        falcon.HTTPContentTooLarge
            If the declared body exceeds ``MAX_PAYLOAD_BYTES``.

        """
        if req.content_length is not None and req.content_length > MAX_PAYLOAD_BYTES:
            raise falcon.HTTPContentTooLarge(
                title="Payload too large",
                description=(
                    f"Webhook payloads are limited to {MAX_PAYLOAD_BYTES} bytes"
                ),
            )

        delivery = WebhookDelivery(
            payload=await req.stream.read(),
            signature=req.get_header(SIGNATURE_HEADER),
            event_type=req.get_header(EVENT_HEADER),
            delivery_id=req.get_header(DELIVERY_HEADER),
        )
        result = await self._dispatcher.dispatch(delivery)

        resp.media = {"outcome": result.outcome.value}
        if result.outcome is DeliveryOutcome.REJECTED:
            resp.status = HTTPStatus.UNAUTHORIZED
        else:
            resp.status = HTTPStatus.ACCEPTED
