# dispatcher.py

import logging
import threading
from typing import Optional

from content import ContentStore
from errors import HandlerFault
from handlers import HANDLERS, HandlerContext, report_error
from protocol import Protocol, SERVER_VERSION
from state import GameState


class PacketDispatcher:
    """
    Routes decoded packets to their handlers and writes back the response.
    Owns the GameState; every handler call runs under one lock, so handlers
    never see another packet's half-applied mutation.
    """

    def __init__(self, state: GameState, content: ContentStore):
        self._state = state
        self._content = content
        self._lock = threading.Lock()

    def dispatch(self, conn, raw: bytes) -> None:
        response = self.process(raw)
        if response is not None:
            # a failed write means the peer is gone; the caller drops the connection
            conn.sendall(response)

    def reject(self, conn, err: Exception) -> None:
        """Answer a packet that could not even be framed with an error response."""
        conn.sendall(report_error(err, SERVER_VERSION))

    def process(self, raw: bytes) -> Optional[bytes]:
        """Return the response bytes for one raw packet, or None for unknown packet types."""
        try:
            packet = Protocol.decode(raw)
        except Exception as e:
            return report_error(e, SERVER_VERSION)

        handler = HANDLERS.get(packet.packet_type)
        if handler is None:
            logging.warning(f"Unknown packet type {packet.packet_type}, ignoring")
            return None

        logging.info(f"Handling packet type {packet.packet_type} (seq {packet.sequence})")
        ctx = HandlerContext(packet.version, packet.sequence, packet.payload, self._state, self._content)
        try:
            with self._lock:
                response = handler(ctx)
        except Exception as e:
            return report_error(e, SERVER_VERSION, packet.sequence)

        if not isinstance(response, bytes):
            return report_error(
                HandlerFault(f"handler for packet type {packet.packet_type} returned no response"),
                SERVER_VERSION,
                packet.sequence,
            )
        return response
