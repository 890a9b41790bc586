#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp).

Usage:
  python3 scripts/chat_local.py [customer_phone]

Sends typed messages through the same HandleIncomingMessageUseCase the
webhook uses, without outbound delivery, and prints the context, the
actions taken and the reply text.
"""

from __future__ import annotations

import sys
import time
import uuid
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.domain.entities.message import Message  # noqa: E402
from app.wiring.dependencies import get_test_message_use_case  # noqa: E402

DEFAULT_CUSTOMER = "27820000000"


def _print_header(customer_id: str) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"customer: {customer_id}")
    print("Type your message and press Enter.")
    print("Commands: /new (new customer), /quit, /help")
    print("-" * 60)


def main() -> int:
    customer_id = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CUSTOMER
    use_case = get_test_message_use_case()
    _print_header(customer_id)

    while True:
        try:
            text = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        if not text:
            continue
        if text == "/quit":
            return 0
        if text == "/help":
            _print_header(customer_id)
            continue
        if text == "/new":
            customer_id = "2782" + str(int(time.time()))[-7:]
            _print_header(customer_id)
            continue

        result = use_case.handle(
            Message(
                id=f"local-{uuid.uuid4().hex}",
                sender_id=customer_id,
                text=text,
                timestamp=int(time.time()),
                contact_name="Local Tester",
                platform="local",
            )
        )
        actions = ", ".join(
            f"{a.action}({'ok' if a.success else a.code or 'failed'})" for a in result.actions
        )
        print(f"[context={result.context}] [actions={actions or '-'}]")
        print(f"bot> {result.response_text}\n")


if __name__ == "__main__":
    raise SystemExit(main())
