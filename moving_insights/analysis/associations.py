"""
Client ↔ Lead association.

There is no foreign key between a client and the lead it came from. The two
are matched on name and phone, so this is a soft join: several leads can
share a name and phone, in which case the most recently created one wins.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

from moving_insights.models.records import Client, Lead, parse_records


def _key(name: Optional[str], phone: Optional[str]) -> Optional[tuple]:
    if not name or not phone:
        return None
    return (name.strip(), phone.strip())


def find_associated_lead(client: Any, leads: Iterable[Any]) -> Optional[Lead]:
    """
    Find the lead a client most likely converted from.

    Tie-break: latest created_at; leads without a timestamp lose; equal
    timestamps keep the first in input order.
    """
    client = client if isinstance(client, Client) else Client.model_validate(client)
    wanted = _key(client.name, client.phone)
    if wanted is None:
        return None

    best: Optional[Lead] = None
    for lead in parse_records(Lead, leads):
        if _key(lead.name, lead.phone) != wanted:
            continue
        if best is None or (lead.created_at or datetime.min) > (best.created_at or datetime.min):
            best = lead
    return best
