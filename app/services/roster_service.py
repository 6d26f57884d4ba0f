"""
Guest roster import/export between the database and a CSV file
"""

import logging
from typing import Dict, List, Tuple

import pandas as pd
from sqlalchemy.orm import Session

from app.services.repositories import AccessRepo, EventRepo, GuestRepo

logger = logging.getLogger(__name__)

ROSTER_COLUMNS = ["name", "phoneNumber", "rsvpEventCodes"]


def _clean(value) -> str:
    if pd.isna(value):
        return ""
    return " ".join(str(value).split())


class RosterService:
    """Service for syncing the guest list"""

    @staticmethod
    def export_roster(db: Session) -> pd.DataFrame:
        """Active guests with their phone numbers and the event codes they can RSVP to"""
        codes = {e["id"]: e["code"] for e in EventRepo.list_all(db)}
        guest_codes: Dict[str, List[str]] = {}
        for access in AccessRepo.list_all(db):
            code = codes.get(access["event_id"])
            if code:
                guest_codes.setdefault(access["guest_id"], []).append(code)

        guests = GuestRepo.list_all(db, active_only=True)
        rows = [
            {
                "name": _clean(guest["full_name"]),
                "phoneNumber": guest.get("phone_number") or "",
                "rsvpEventCodes": ",".join(sorted(guest_codes.get(guest["id"], []))),
            }
            for guest in guests
        ]
        logger.info(f"Exported {len(rows)} guests to roster")
        return pd.DataFrame(rows, columns=ROSTER_COLUMNS)

    @staticmethod
    def validate_roster(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        errors = []
        if "name" not in [col.strip() for col in df.columns]:
            errors.append("Missing required column: name")
        return len(errors) == 0, errors

    @staticmethod
    def import_roster(db: Session, df: pd.DataFrame, deactivate_missing: bool = True) -> Dict[str, int]:
        """Create, reactivate or deactivate guests so the database matches the roster"""
        df = df.rename(columns=lambda col: col.strip())
        valid, errors = RosterService.validate_roster(df)
        if not valid:
            raise ValueError("; ".join(errors))

        events_by_code = {e["code"]: e for e in EventRepo.list_all(db)}
        existing = {g["full_name"].strip().lower(): g for g in GuestRepo.list_all(db)}
        counts = {"added": 0, "updated": 0, "unchanged": 0, "deactivated": 0}
        seen = set()

        for _, row in df.iterrows():
            name = _clean(row.get("name"))
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            phone = _clean(row.get("phoneNumber"))

            guest = existing.get(name.lower())
            if guest is None:
                guest = GuestRepo.create(db, name, phone_number=phone)
                counts["added"] += 1
            else:
                changes = {}
                if not guest.get("is_active"):
                    changes["is_active"] = True
                if phone and phone != (guest.get("phone_number") or ""):
                    changes["phone_number"] = phone
                if changes:
                    GuestRepo.update(db, guest["id"], **changes)
                    counts["updated"] += 1
                else:
                    counts["unchanged"] += 1

            for code in _clean(row.get("rsvpEventCodes")).split(","):
                code = code.strip()
                if not code:
                    continue
                event = events_by_code.get(code)
                if event is None:
                    logger.warning(f"Unknown event code '{code}' for guest {name}")
                    continue
                AccessRepo.grant(db, guest["id"], event["id"])

        if deactivate_missing:
            for key, guest in existing.items():
                if key not in seen and guest.get("is_active"):
                    GuestRepo.update(db, guest["id"], is_active=False)
                    counts["deactivated"] += 1

        logger.info(
            f"Roster import: {counts['added']} added, {counts['updated']} updated, "
            f"{counts['unchanged']} unchanged, {counts['deactivated']} deactivated"
        )
        return counts
