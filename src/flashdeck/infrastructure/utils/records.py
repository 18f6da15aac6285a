from typing import Any

from flashdeck.domain.models import Card


def replace_card_record(
    records: list[Any], card_id: str, card: Card
) -> list[Any] | None:
    """
    Copy-on-write replacement of one card record.

    Returns a new list where the record with ``card_id`` has the card's fields
    merged onto it, or None if no record matched. Other entries are the same
    objects as in ``records``.
    """
    for idx, record in enumerate(records):
        if isinstance(record, dict) and record.get("id") == card_id:
            updated = list(records)
            updated[idx] = {**record, **card.to_record()}
            return updated
    return None
