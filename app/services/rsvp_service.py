"""
RSVP submission with parent/child event cascade
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    EventNotFoundError,
    NotInvitedError,
    PartySizeError,
    RsvpClosedError,
    RsvpNotOpenError,
)
from app.schemas.rsvp import RsvpAnswer, RsvpRequest
from app.services import repositories
from app.services.event_service import RSVP_CLOSED, RSVP_NOT_OPEN, rsvp_window_state
from app.services.repositories import AccessRepo, EventRepo, RsvpRepo

logger = logging.getLogger(__name__)

DECLINED_FIELDS = {
    "response": RsvpAnswer.NO.value,
    "dietary_restrictions": "",
    "has_plus_ones": False,
    "plus_one_count": 0,
    "adult_count": 0,
    "children_count": 0,
}


def party_fields(request: RsvpRequest) -> Dict:
    """Normalise the party: plus-ones only count when at least one extra person is named"""
    adults = request.adult_count
    children = request.children_count
    has_plus_ones = request.plus_one and (adults > 0 or children > 0)
    if not has_plus_ones:
        adults = children = 0
    return {
        "dietary_restrictions": request.dietary_restrictions.strip(),
        "has_plus_ones": has_plus_ones,
        "plus_one_count": adults + children,
        "adult_count": adults,
        "children_count": children,
    }


class RsvpService:
    """Service for recording guest RSVPs"""

    @staticmethod
    def submit_rsvp(
        db: Session,
        guest: Dict,
        request: RsvpRequest,
        now: Optional[datetime] = None
    ) -> Dict:
        """Record the guest's answer for one event and keep parent/child answers consistent"""
        event = EventRepo.get_by_code(db, request.event_code)
        if not event:
            raise EventNotFoundError(request.event_code)

        if not AccessRepo.can_rsvp(db, guest["id"], event["id"]):
            raise NotInvitedError(request.event_code)

        window = rsvp_window_state(event, now)
        if window == RSVP_NOT_OPEN:
            raise RsvpNotOpenError(event["name"])
        if window == RSVP_CLOSED:
            raise RsvpClosedError(event["name"])

        fields = party_fields(request)
        max_plus_ones = event.get("max_plus_ones")
        if max_plus_ones is not None and fields["plus_one_count"] > max_plus_ones:
            raise PartySizeError(fields["plus_one_count"], max_plus_ones)

        fields["response"] = request.response.value
        logger.info(f"Updating RSVP for guest ID: {guest['id']}, event: {event['code']} -> {fields['response']}")
        rsvp = RsvpRepo.upsert(db, guest["id"], event["id"], fields, commit=False)

        cascaded: List[str] = []
        if event.get("parent_event_id") is None and request.response == RsvpAnswer.NO:
            cascaded = RsvpService._decline_children(db, guest["id"], event)
        elif event.get("parent_event_id") and request.response in (RsvpAnswer.YES, RsvpAnswer.MAYBE):
            parent_code = RsvpService._reopen_parent(db, guest["id"], event["parent_event_id"], fields)
            if parent_code:
                cascaded = [parent_code]

        repositories.commit(db)
        return {"event_code": event["code"], "rsvp": rsvp, "cascaded": cascaded}

    @staticmethod
    def _decline_children(db: Session, guest_id: str, parent: Dict) -> List[str]:
        children = EventRepo.list_children(db, parent["id"])
        for child in children:
            RsvpRepo.upsert(db, guest_id, child["id"], dict(DECLINED_FIELDS), commit=False)
        if children:
            logger.info(f"Auto-declined {len(children)} child events of {parent['code']}")
        return [child["code"] for child in children]

    @staticmethod
    def _reopen_parent(db: Session, guest_id: str, parent_id: str, fields: Dict) -> Optional[str]:
        """Move a declined parent to Maybe once one of its children is accepted"""
        parent_rsvp = RsvpRepo.get(db, guest_id, parent_id)
        if not parent_rsvp or parent_rsvp["response"] != RsvpAnswer.NO.value:
            return None

        RsvpRepo.upsert(db, guest_id, parent_id, dict(fields, response=RsvpAnswer.MAYBE.value), commit=False)
        parent = EventRepo.get_by_id(db, parent_id)
        logger.info(f"Parent event {parent_id} was declined; updated to Maybe")
        return parent["code"] if parent else None
