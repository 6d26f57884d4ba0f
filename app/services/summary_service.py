"""
Admin reporting: RSVP summary, guest responses and CSV export
"""

import csv
import io
import logging
from collections import defaultdict
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from app.services.repositories import AccessRepo, EventRepo, GuestRepo, RsvpRepo

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Full Name", "Event", "Response", "Dietary Restrictions",
    "Plus Ones", "Adults", "Children", "Responded At", "Updated At",
]


def _response_view(rsvp: Dict) -> Dict:
    return {
        "response": rsvp["response"],
        "dietary_restrictions": rsvp.get("dietary_restrictions") or "",
        "plus_one": bool(rsvp.get("has_plus_ones")),
        "plus_one_count": int(rsvp.get("plus_one_count") or 0),
        "adult_count": int(rsvp.get("adult_count") or 0),
        "children_count": int(rsvp.get("children_count") or 0),
        "responded_at": rsvp.get("responded_at"),
        "updated_at": rsvp.get("updated_at"),
    }


class SummaryService:
    """Service for the admin dashboard"""

    @staticmethod
    def rsvp_summary(db: Session) -> Dict:
        """Per-event answer counts and overall attendance totals"""
        events = EventRepo.list_active(db)
        events_by_id = {e["id"]: e for e in events}
        invited = defaultdict(int)
        for access in AccessRepo.list_all(db):
            invited[access["event_id"]] += 1

        summary = {
            "events": {},
            "total_guests": len(GuestRepo.list_all(db, active_only=True)),
            "total_responded": 0,
            "total_attending": 0,
            "total_plus_ones": 0,
        }
        for event in events:
            summary["events"][event["code"]] = {
                "name": event["name"],
                "is_parent": event.get("parent_event_id") is None,
                "yes": 0,
                "no": 0,
                "maybe": 0,
                "total_attending": 0,
                "plus_ones": 0,
                "adult_guests": 0,
                "children_guests": 0,
                "invited": invited[event["id"]],
            }

        responded = set()
        for rsvp in RsvpRepo.list_all(db):
            event = events_by_id.get(rsvp["event_id"])
            if not event:
                continue
            stats = summary["events"][event["code"]]
            responded.add(rsvp["guest_id"])

            if rsvp["response"] == "Yes":
                adults = int(rsvp.get("adult_count") or 0)
                children = int(rsvp.get("children_count") or 0)
                stats["yes"] += 1
                stats["total_attending"] += 1
                stats["plus_ones"] += adults + children
                stats["adult_guests"] += adults
                stats["children_guests"] += children
                if event.get("parent_event_id") is None:
                    summary["total_attending"] += 1
                    summary["total_plus_ones"] += adults + children
            elif rsvp["response"] == "No":
                stats["no"] += 1
            elif rsvp["response"] == "Maybe":
                stats["maybe"] += 1

        summary["total_responded"] = len(responded)
        return summary

    @staticmethod
    def guests_with_responses(db: Session) -> List[Dict]:
        """Active guests ordered by name with their answers keyed by event code"""
        events_by_id = {e["id"]: e for e in EventRepo.list_all(db)}
        rsvps_by_guest = defaultdict(list)
        for rsvp in RsvpRepo.list_all(db):
            rsvps_by_guest[rsvp["guest_id"]].append(rsvp)

        guests = []
        for guest in GuestRepo.list_all(db, active_only=True):
            event_responses = {}
            dietary_lines = []
            for rsvp in rsvps_by_guest.get(guest["id"], []):
                event = events_by_id.get(rsvp["event_id"])
                if not event:
                    continue
                event_responses[event["code"]] = _response_view(rsvp)
                restriction = (rsvp.get("dietary_restrictions") or "").strip()
                if restriction:
                    dietary_lines.append(f"{event['name']}: {restriction}")

            guests.append({
                "id": guest["id"],
                "full_name": guest["full_name"],
                "is_active": guest.get("is_active", True),
                "responded": bool(event_responses),
                "dietary_restrictions": "\n".join(dietary_lines),
                "event_responses": event_responses,
                "created_at": guest.get("created_at"),
                "updated_at": guest.get("updated_at"),
            })
        return guests

    @staticmethod
    def invited_count(db: Session, event_code: str) -> Optional[int]:
        event = EventRepo.get_by_code(db, event_code, active_only=False)
        if not event:
            return None
        count = AccessRepo.count_for_event(db, event["id"])
        logger.info(f"Found {count} guests invited to event: {event_code}")
        return count

    @staticmethod
    def export_event_csv(db: Session, event_code: str) -> Optional[str]:
        """CSV of every guest's answer to one event; None when the event does not exist"""
        event = EventRepo.get_by_code(db, event_code, active_only=False)
        if not event:
            return None

        guests_by_id = {g["id"]: g for g in GuestRepo.list_all(db)}
        rows = []
        for rsvp in RsvpRepo.list_all(db):
            if rsvp["event_id"] != event["id"] or rsvp["guest_id"] not in guests_by_id:
                continue
            adults = int(rsvp.get("adult_count") or 0)
            children = int(rsvp.get("children_count") or 0)
            rows.append({
                "Full Name": guests_by_id[rsvp["guest_id"]]["full_name"],
                "Event": event["code"],
                "Response": rsvp["response"],
                "Dietary Restrictions": rsvp.get("dietary_restrictions") or "",
                "Plus Ones": adults + children if rsvp.get("has_plus_ones") else 0,
                "Adults": adults,
                "Children": children,
                "Responded At": rsvp.get("responded_at") or "",
                "Updated At": rsvp.get("updated_at") or "",
            })

        df = pd.DataFrame(rows, columns=CSV_COLUMNS)
        if not df.empty:
            df = df.sort_values("Full Name", key=lambda s: s.str.lower())

        buffer = io.StringIO()
        buffer.write(",".join(CSV_COLUMNS) + "\n")
        df.to_csv(buffer, header=False, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        logger.info(f"Exported {len(df)} RSVP rows for event: {event_code}")
        return buffer.getvalue()
