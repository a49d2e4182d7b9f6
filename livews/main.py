from __future__ import annotations

import asyncio
import logging

from liveproto.errors import ProtocolError
from liveproto.messages import DecodedContainer, FetchResult
from livews.config import CLIENT_CONFIG, ConfigError, load_config
from livews.core import ClientEvent, PushConnection

logger = logging.getLogger(__name__)


def _log_fetch_result(result: FetchResult) -> None:
    methods = ", ".join(sorted({item.method for item in result.messages})) or "-"
    logger.info("Fetch result: %d messages (%s)", len(result.messages), methods)


def _log_entered_room(container: DecodedContainer) -> None:
    logger.info("Entered room (log_id=%s)", container.log_id)


def _log_decoding_failed(error: ProtocolError) -> None:
    logger.warning("Undecodable frame: %s", error.message)


async def run_client() -> None:
    try:
        load_config()
    except ConfigError as exc:
        logging.basicConfig(level="INFO")
        logger.error("Invalid configuration: %s", exc)
        return
    logging.basicConfig(level=CLIENT_CONFIG["log_level"])
    if not CLIENT_CONFIG["room_id"]:
        logger.error("LIVEWS_ROOM_ID is not set")
        return

    client = PushConnection()
    closed = asyncio.Event()
    client.on(ClientEvent.PROTO_MESSAGE_FETCH_RESULT, _log_fetch_result)
    client.on(ClientEvent.IM_ENTERED_ROOM, _log_entered_room)
    client.on(ClientEvent.MESSAGE_DECODING_FAILED, _log_decoding_failed)
    client.on(ClientEvent.CLOSE, closed.set)

    client.connect(
        CLIENT_CONFIG["ws_url"],
        {"room_id": CLIENT_CONFIG["room_id"]},
        options={"open_timeout": CLIENT_CONFIG["open_timeout"]},
    )
    try:
        await closed.wait()
    finally:
        await client.close()


def main() -> None:
    try:
        asyncio.run(run_client())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
