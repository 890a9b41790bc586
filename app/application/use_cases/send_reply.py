from __future__ import annotations

import logging

from app.application.ports.message_platform import MessagePlatformPort


def split_reply(text: str, limit: int) -> list[str]:
    """Split on line boundaries so no chunk exceeds `limit`; a single overlong line is cut hard."""
    chunks: list[str] = []
    current = ""
    for line in text.splitlines():
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current.strip():
        chunks.append(current)
    return chunks


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, auto_reply_enabled: bool) -> None:
        self._platform = platform
        self._auto_reply_enabled = auto_reply_enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, recipient_id: str, text: str) -> bool:
        """Send a reply, split to the channel's size limit. Returns True if anything was sent."""
        if not text.strip():
            return False
        if not self._auto_reply_enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"recipient_id": recipient_id, "reply_text": text})
            return False
        chunks = split_reply(text, self._platform.max_text_length)
        for chunk in chunks:
            self._platform.send_text(recipient_id=recipient_id, text=chunk)
        if len(chunks) > 1:
            self._logger.info("Reply split", extra={"recipient_id": recipient_id, "count": len(chunks)})
        return True
