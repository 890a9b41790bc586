from datetime import date


def build_extract_prompt(text: str, today: date, services: list[dict], stylists: list[dict]) -> str:
    service_lines = "\n".join(f"  - {s['id']}: {s['name']}" for s in services)
    stylist_lines = "\n".join(f"  - {s['id']}: {s['name']}" for s in stylists)

    return (
        "You extract salon booking details from a single customer chat message.\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\"service_id\": str|null, \"date\": \"YYYY-MM-DD\"|null, \"time\": \"HH:MM\"|null,\n"
        "   \"stylist_id\": str|null, \"booking_id\": str|null, \"reason\": str|null}\n"
        "Rules:\n"
        "  - service_id and stylist_id must be one of the ids listed below, or null.\n"
        "  - Resolve relative dates (today, tomorrow, next Friday) against the reference date.\n"
        "  - Use null for anything the message does not state. Do not guess.\n"
        "  - morning means 09:00, afternoon 14:00, evening 17:00.\n"
        "  - booking_id looks like BK followed by letters and digits.\n"
        "  - reason is only set when the customer explains why they cancel or move a booking.\n"
        "\n"
        f"Reference date: {today.isoformat()} ({today.strftime('%A')})\n"
        "Services:\n"
        f"{service_lines}\n"
        "Stylists:\n"
        f"{stylist_lines}\n"
        "\n"
        "Message:\n"
        f"{text}\n"
    )
