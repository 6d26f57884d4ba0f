"""
Tests for RSVP submission and the parent/child cascade
"""

import pytest
from datetime import datetime

from app.core.exceptions import (
    EventNotFoundError,
    NotInvitedError,
    PartySizeError,
    RsvpClosedError,
    RsvpNotOpenError,
)
from app.schemas.rsvp import RsvpRequest
from app.services.repositories import RsvpRepo
from app.services.rsvp_service import RsvpService

def submit(db, guest, event_code, response, **extra):
    return RsvpService.submit_rsvp(db, guest, RsvpRequest(event_code=event_code, response=response, **extra))

def answer(db, guest, event):
    rsvp = RsvpRepo.get(db, guest["id"], event["id"])
    return rsvp["response"] if rsvp else None

def test_submit_rsvp_records_party(db_session, wedding):
    alice = wedding["alice"]
    result = submit(
        db_session, alice, "WEDDING", "Yes",
        dietary_restrictions=" no nuts ", plus_one=True, adult_count=1, children_count=1,
    )

    assert result["event_code"] == "WEDDING"
    assert result["cascaded"] == []
    rsvp = result["rsvp"]
    assert rsvp["response"] == "Yes"
    assert rsvp["dietary_restrictions"] == "no nuts"
    assert rsvp["has_plus_ones"] is True
    assert rsvp["plus_one_count"] == 2
    assert rsvp["adult_count"] == 1
    assert rsvp["children_count"] == 1

def test_party_counts_ignored_without_plus_one(db_session, wedding):
    rsvp = submit(db_session, wedding["alice"], "WEDDING", "Yes", adult_count=2)["rsvp"]

    assert rsvp["has_plus_ones"] is False
    assert rsvp["plus_one_count"] == 0
    assert rsvp["adult_count"] == 0

def test_plus_one_without_people_is_not_counted(db_session, wedding):
    rsvp = submit(db_session, wedding["alice"], "WEDDING", "Yes", plus_one=True)["rsvp"]

    assert rsvp["has_plus_ones"] is False

def test_update_keeps_first_response_time(db_session, wedding):
    alice = wedding["alice"]
    first = submit(db_session, alice, "WELCOME", "Maybe")["rsvp"]
    second = submit(db_session, alice, "WELCOME", "Yes")["rsvp"]

    assert second["response"] == "Yes"
    assert second["responded_at"] == first["responded_at"]
    assert second["updated_at"] >= first["updated_at"]
    assert len(RsvpRepo.list_for_guest(db_session, alice["id"])) == 1

def test_declining_parent_declines_children(db_session, wedding):
    alice = wedding["alice"]
    events = wedding["events"]
    submit(db_session, alice, "DINNER", "Yes", dietary_restrictions="Vegan", plus_one=True, adult_count=1)

    result = submit(db_session, alice, "WEDDING", "No")

    assert sorted(result["cascaded"]) == ["AFTERPARTY", "DINNER"]
    assert answer(db_session, alice, events["DINNER"]) == "No"
    assert answer(db_session, alice, events["AFTERPARTY"]) == "No"
    dinner = RsvpRepo.get(db_session, alice["id"], events["DINNER"]["id"])
    assert dinner["dietary_restrictions"] == ""
    assert dinner["plus_one_count"] == 0
    assert dinner["adult_count"] == 0
    # Unrelated events are untouched
    assert answer(db_session, alice, events["WELCOME"]) is None

def test_accepting_child_reopens_declined_parent(db_session, wedding):
    alice = wedding["alice"]
    events = wedding["events"]
    submit(db_session, alice, "WEDDING", "No")

    result = submit(db_session, alice, "DINNER", "Yes", plus_one=True, adult_count=1)

    assert result["cascaded"] == ["WEDDING"]
    parent = RsvpRepo.get(db_session, alice["id"], events["WEDDING"]["id"])
    assert parent["response"] == "Maybe"
    assert parent["adult_count"] == 1
    assert answer(db_session, alice, events["AFTERPARTY"]) == "No"

def test_accepting_child_leaves_other_parent_answers(db_session, wedding):
    alice = wedding["alice"]
    submit(db_session, alice, "WEDDING", "Yes")

    result = submit(db_session, alice, "DINNER", "Maybe")

    assert result["cascaded"] == []
    assert answer(db_session, alice, wedding["events"]["WEDDING"]) == "Yes"

def test_declining_child_does_not_touch_parent(db_session, wedding):
    alice = wedding["alice"]
    submit(db_session, alice, "WEDDING", "No")

    result = submit(db_session, alice, "DINNER", "No")

    assert result["cascaded"] == []
    assert answer(db_session, alice, wedding["events"]["WEDDING"]) == "No"

def test_unknown_event(db_session, wedding):
    with pytest.raises(EventNotFoundError):
        submit(db_session, wedding["alice"], "NOPE", "Yes")

def test_guest_without_access(db_session, wedding):
    with pytest.raises(NotInvitedError) as exc_info:
        submit(db_session, wedding["bob"], "AFTERPARTY", "Yes")
    assert exc_info.value.status_code == 403

    # An access row with can_rsvp off does not count as an invitation
    with pytest.raises(NotInvitedError):
        submit(db_session, wedding["bob"], "WELCOME", "Yes")

def test_rsvp_window_enforced(db_session, wedding):
    request = RsvpRequest(event_code="WEDDING", response="Yes")

    with pytest.raises(RsvpNotOpenError):
        RsvpService.submit_rsvp(db_session, wedding["alice"], request, now=datetime(2019, 1, 1))
    with pytest.raises(RsvpClosedError) as exc_info:
        RsvpService.submit_rsvp(db_session, wedding["alice"], request, now=datetime(2100, 1, 1))
    assert "Wedding Ceremony" in exc_info.value.message

def test_party_size_limit(db_session, wedding):
    with pytest.raises(PartySizeError) as exc_info:
        submit(db_session, wedding["alice"], "WEDDING", "Yes", plus_one=True, adult_count=2, children_count=1)
    assert exc_info.value.status_code == 422
    assert answer(db_session, wedding["alice"], wedding["events"]["WEDDING"]) is None

def test_party_size_unlimited_without_max(db_session, wedding):
    rsvp = submit(db_session, wedding["alice"], "WELCOME", "Yes", plus_one=True, adult_count=5)["rsvp"]

    assert rsvp["plus_one_count"] == 5
