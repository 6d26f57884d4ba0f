"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).

Every public method returns plain dicts with the same keys for both backends,
so services never need to know which one is active. SQL write methods commit
unless called with ``commit=False``; callers batching several writes finish with
``commit(db)``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import AdminSession, AdminUser, Event, Guest, GuestEventAccess, GuestSession, Rsvp
from app.services.firebase_client import get_firestore_client


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def commit(db: Optional[Session]) -> None:
    if not use_firestore() and db is not None:
        db.commit()


def _doc_data(doc) -> Dict[str, Any]:
    """Document fields with native timestamps turned into ISO strings, as the SQL models return them"""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in (doc.to_dict() or {}).items()
    }


def _doc_to_dict(doc) -> Dict[str, Any]:
    data = _doc_data(doc)
    data.setdefault("id", doc.id)
    return data


def _pair_id(guest_id: str, event_id: str) -> str:
    return f"{guest_id}_{event_id}"


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_code(db: Session, code: str, active_only: bool = True) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return EventRepo.get_by_code_fs(code, active_only)
        return EventRepo.get_by_code_sql(db, code, active_only)

    @staticmethod
    def get_by_id(db: Session, event_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return EventRepo.get_by_id_fs(event_id)
        return EventRepo.get_by_id_sql(db, event_id)

    @staticmethod
    def list_active(db: Session) -> List[Dict[str, Any]]:
        """Active events ordered by date, then start time"""
        if use_firestore():
            return EventRepo.list_active_fs()
        return EventRepo.list_active_sql(db)

    @staticmethod
    def list_all(db: Session) -> List[Dict[str, Any]]:
        if use_firestore():
            return EventRepo.list_all_fs()
        return EventRepo.list_all_sql(db)

    @staticmethod
    def list_children(db: Session, parent_id: str, active_only: bool = False) -> List[Dict[str, Any]]:
        if use_firestore():
            return EventRepo.list_children_fs(parent_id, active_only)
        return EventRepo.list_children_sql(db, parent_id, active_only)

    # SQL

    @staticmethod
    def get_by_code_sql(db: Session, code: str, active_only: bool = True) -> Optional[Dict[str, Any]]:
        query = db.query(Event).filter(Event.code == code)
        if active_only:
            query = query.filter(Event.is_active == True)
        event = query.first()
        return event.to_dict() if event else None

    @staticmethod
    def get_by_id_sql(db: Session, event_id: str) -> Optional[Dict[str, Any]]:
        event = db.query(Event).filter(Event.id == event_id).first()
        return event.to_dict() if event else None

    @staticmethod
    def list_active_sql(db: Session) -> List[Dict[str, Any]]:
        events = db.query(Event).filter(Event.is_active == True).order_by(Event.date, Event.time_start).all()
        return [e.to_dict() for e in events]

    @staticmethod
    def list_all_sql(db: Session) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in db.query(Event).all()]

    @staticmethod
    def list_children_sql(db: Session, parent_id: str, active_only: bool = False) -> List[Dict[str, Any]]:
        query = db.query(Event).filter(Event.parent_event_id == parent_id)
        if active_only:
            query = query.filter(Event.is_active == True)
        return [e.to_dict() for e in query.order_by(Event.date, Event.time_start).all()]

    # Firestore shape: collection "events/{id}"

    @staticmethod
    def get_by_code_fs(code: str, active_only: bool = True) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection("events").where("code", "==", code).limit(1).get()
        if not docs:
            return None
        event = _doc_to_dict(docs[0])
        if active_only and not event.get("is_active", True):
            return None
        return event

    @staticmethod
    def get_by_id_fs(event_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection("events").document(event_id).get()
        return _doc_to_dict(doc) if doc.exists else None

    @staticmethod
    def list_active_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        events = [_doc_to_dict(d) for d in fs.collection("events").where("is_active", "==", True).get()]
        # sorted client-side so no composite index is needed
        return sorted(events, key=lambda e: (e.get("date") or "", e.get("time_start") or ""))

    @staticmethod
    def list_all_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        return [_doc_to_dict(d) for d in fs.collection("events").get()]

    @staticmethod
    def list_children_fs(parent_id: str, active_only: bool = False) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        children = [_doc_to_dict(d) for d in fs.collection("events").where("parent_event_id", "==", parent_id).get()]
        if active_only:
            children = [c for c in children if c.get("is_active", True)]
        return sorted(children, key=lambda e: (e.get("date") or "", e.get("time_start") or ""))


# -------- Guest repository --------

class GuestRepo:
    @staticmethod
    def find_by_name(db: Session, full_name: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive exact match on the trimmed full name"""
        if use_firestore():
            return GuestRepo.find_by_name_fs(full_name)
        return GuestRepo.find_by_name_sql(db, full_name)

    @staticmethod
    def get_by_id(db: Session, guest_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return GuestRepo.get_by_id_fs(guest_id)
        return GuestRepo.get_by_id_sql(db, guest_id)

    @staticmethod
    def list_all(db: Session, active_only: bool = False) -> List[Dict[str, Any]]:
        """Guests ordered by full name"""
        if use_firestore():
            return GuestRepo.list_all_fs(active_only)
        return GuestRepo.list_all_sql(db, active_only)

    @staticmethod
    def create(db: Session, full_name: str, phone_number: str = "", is_active: bool = True) -> Dict[str, Any]:
        if use_firestore():
            return GuestRepo.create_fs(full_name, phone_number, is_active)
        return GuestRepo.create_sql(db, full_name, phone_number, is_active)

    @staticmethod
    def update(db: Session, guest_id: str, **fields) -> None:
        if use_firestore():
            GuestRepo.update_fs(guest_id, **fields)
        else:
            GuestRepo.update_sql(db, guest_id, **fields)

    # SQL

    @staticmethod
    def find_by_name_sql(db: Session, full_name: str) -> Optional[Dict[str, Any]]:
        guest = db.query(Guest).filter(func.lower(Guest.full_name) == full_name.strip().lower()).first()
        return guest.to_dict() if guest else None

    @staticmethod
    def get_by_id_sql(db: Session, guest_id: str) -> Optional[Dict[str, Any]]:
        guest = db.query(Guest).filter(Guest.id == guest_id).first()
        return guest.to_dict() if guest else None

    @staticmethod
    def list_all_sql(db: Session, active_only: bool = False) -> List[Dict[str, Any]]:
        query = db.query(Guest)
        if active_only:
            query = query.filter(Guest.is_active == True)
        return [g.to_dict() for g in query.order_by(Guest.full_name).all()]

    @staticmethod
    def create_sql(db: Session, full_name: str, phone_number: str = "", is_active: bool = True) -> Dict[str, Any]:
        guest = Guest(full_name=full_name.strip(), phone_number=phone_number, is_active=is_active)
        db.add(guest)
        db.commit()
        db.refresh(guest)
        return guest.to_dict()

    @staticmethod
    def update_sql(db: Session, guest_id: str, **fields) -> None:
        guest = db.query(Guest).filter(Guest.id == guest_id).first()
        if not guest:
            return
        for key, value in fields.items():
            setattr(guest, key, value)
        guest.updated_at = datetime.utcnow()
        db.commit()

    # Firestore guest docs under collection guests/{id}

    @staticmethod
    def find_by_name_fs(full_name: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection("guests").where("full_name_lower", "==", full_name.strip().lower()).limit(1).get()
        return _doc_to_dict(docs[0]) if docs else None

    @staticmethod
    def get_by_id_fs(guest_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection("guests").document(guest_id).get()
        return _doc_to_dict(doc) if doc.exists else None

    @staticmethod
    def list_all_fs(active_only: bool = False) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        query = fs.collection("guests")
        if active_only:
            query = query.where("is_active", "==", True)
        guests = [_doc_to_dict(d) for d in query.get()]
        return sorted(guests, key=lambda g: g.get("full_name", ""))

    @staticmethod
    def create_fs(full_name: str, phone_number: str = "", is_active: bool = True) -> Dict[str, Any]:
        fs = get_firestore_client()
        now = datetime.utcnow().isoformat()
        data = {
            "full_name": full_name.strip(),
            "full_name_lower": full_name.strip().lower(),
            "phone_number": phone_number,
            "is_active": is_active,
            "dietary": "",
            "created_at": now,
            "updated_at": now,
        }
        ref = fs.collection("guests").document()
        ref.set(data)
        data["id"] = ref.id
        return data

    @staticmethod
    def update_fs(guest_id: str, **fields) -> None:
        fs = get_firestore_client()
        if "full_name" in fields:
            fields["full_name_lower"] = fields["full_name"].strip().lower()
        fields["updated_at"] = datetime.utcnow().isoformat()
        fs.collection("guests").document(guest_id).set(fields, merge=True)


# -------- Guest event access repository --------

class AccessRepo:
    @staticmethod
    def list_for_guest(db: Session, guest_id: str) -> List[Dict[str, Any]]:
        """Access rows granting RSVP rights to a guest"""
        if use_firestore():
            return AccessRepo.list_for_guest_fs(guest_id)
        return AccessRepo.list_for_guest_sql(db, guest_id)

    @staticmethod
    def can_rsvp(db: Session, guest_id: str, event_id: str) -> bool:
        if use_firestore():
            return AccessRepo.can_rsvp_fs(guest_id, event_id)
        return AccessRepo.can_rsvp_sql(db, guest_id, event_id)

    @staticmethod
    def count_for_event(db: Session, event_id: str) -> int:
        if use_firestore():
            return AccessRepo.count_for_event_fs(event_id)
        return AccessRepo.count_for_event_sql(db, event_id)

    @staticmethod
    def list_all(db: Session) -> List[Dict[str, Any]]:
        if use_firestore():
            return AccessRepo.list_all_fs()
        return AccessRepo.list_all_sql(db)

    @staticmethod
    def grant(db: Session, guest_id: str, event_id: str, can_rsvp: bool = True) -> None:
        if use_firestore():
            AccessRepo.grant_fs(guest_id, event_id, can_rsvp)
        else:
            AccessRepo.grant_sql(db, guest_id, event_id, can_rsvp)

    # SQL

    @staticmethod
    def list_for_guest_sql(db: Session, guest_id: str) -> List[Dict[str, Any]]:
        rows = db.query(GuestEventAccess).filter(
            GuestEventAccess.guest_id == guest_id,
            GuestEventAccess.can_rsvp == True
        ).all()
        return [r.to_dict() for r in rows]

    @staticmethod
    def can_rsvp_sql(db: Session, guest_id: str, event_id: str) -> bool:
        return db.query(GuestEventAccess).filter(
            GuestEventAccess.guest_id == guest_id,
            GuestEventAccess.event_id == event_id,
            GuestEventAccess.can_rsvp == True
        ).first() is not None

    @staticmethod
    def count_for_event_sql(db: Session, event_id: str) -> int:
        return db.query(GuestEventAccess).filter(
            GuestEventAccess.event_id == event_id,
            GuestEventAccess.can_rsvp == True
        ).count()

    @staticmethod
    def list_all_sql(db: Session) -> List[Dict[str, Any]]:
        rows = db.query(GuestEventAccess).filter(GuestEventAccess.can_rsvp == True).all()
        return [r.to_dict() for r in rows]

    @staticmethod
    def grant_sql(db: Session, guest_id: str, event_id: str, can_rsvp: bool = True) -> None:
        row = db.query(GuestEventAccess).filter(
            GuestEventAccess.guest_id == guest_id,
            GuestEventAccess.event_id == event_id
        ).first()
        if row:
            row.can_rsvp = can_rsvp
        else:
            db.add(GuestEventAccess(guest_id=guest_id, event_id=event_id, can_rsvp=can_rsvp))
        db.commit()

    # Firestore docs keyed guest_event_access/{guest_id}_{event_id}

    @staticmethod
    def list_for_guest_fs(guest_id: str) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection("guest_event_access").where("guest_id", "==", guest_id).get()
        return [_doc_data(d) for d in docs if _doc_data(d).get("can_rsvp")]

    @staticmethod
    def can_rsvp_fs(guest_id: str, event_id: str) -> bool:
        fs = get_firestore_client()
        doc = fs.collection("guest_event_access").document(_pair_id(guest_id, event_id)).get()
        return bool(doc.exists and _doc_data(doc).get("can_rsvp"))

    @staticmethod
    def count_for_event_fs(event_id: str) -> int:
        fs = get_firestore_client()
        docs = fs.collection("guest_event_access").where("event_id", "==", event_id).get()
        return sum(1 for d in docs if _doc_data(d).get("can_rsvp"))

    @staticmethod
    def list_all_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        return [_doc_data(d) for d in fs.collection("guest_event_access").get() if _doc_data(d).get("can_rsvp")]

    @staticmethod
    def grant_fs(guest_id: str, event_id: str, can_rsvp: bool = True) -> None:
        fs = get_firestore_client()
        fs.collection("guest_event_access").document(_pair_id(guest_id, event_id)).set({
            "guest_id": guest_id,
            "event_id": event_id,
            "can_rsvp": can_rsvp,
            "created_at": datetime.utcnow().isoformat(),
        }, merge=True)


# -------- RSVP repository --------

class RsvpRepo:
    @staticmethod
    def get(db: Session, guest_id: str, event_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return RsvpRepo.get_fs(guest_id, event_id)
        return RsvpRepo.get_sql(db, guest_id, event_id)

    @staticmethod
    def list_for_guest(db: Session, guest_id: str) -> List[Dict[str, Any]]:
        if use_firestore():
            return RsvpRepo.list_for_guest_fs(guest_id)
        return RsvpRepo.list_for_guest_sql(db, guest_id)

    @staticmethod
    def list_all(db: Session) -> List[Dict[str, Any]]:
        if use_firestore():
            return RsvpRepo.list_all_fs()
        return RsvpRepo.list_all_sql(db)

    @staticmethod
    def upsert(db: Session, guest_id: str, event_id: str, fields: Dict[str, Any], commit: bool = True) -> Dict[str, Any]:
        """Insert or update the (guest, event) RSVP, keeping the first responded_at"""
        if use_firestore():
            return RsvpRepo.upsert_fs(guest_id, event_id, fields)
        return RsvpRepo.upsert_sql(db, guest_id, event_id, fields, commit)

    # SQL

    @staticmethod
    def get_sql(db: Session, guest_id: str, event_id: str) -> Optional[Dict[str, Any]]:
        rsvp = db.query(Rsvp).filter(Rsvp.guest_id == guest_id, Rsvp.event_id == event_id).first()
        return rsvp.to_dict() if rsvp else None

    @staticmethod
    def list_for_guest_sql(db: Session, guest_id: str) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in db.query(Rsvp).filter(Rsvp.guest_id == guest_id).all()]

    @staticmethod
    def list_all_sql(db: Session) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in db.query(Rsvp).all()]

    @staticmethod
    def upsert_sql(db: Session, guest_id: str, event_id: str, fields: Dict[str, Any], commit: bool = True) -> Dict[str, Any]:
        now = datetime.utcnow()
        rsvp = db.query(Rsvp).filter(Rsvp.guest_id == guest_id, Rsvp.event_id == event_id).first()
        if rsvp is None:
            rsvp = Rsvp(guest_id=guest_id, event_id=event_id, responded_at=now)
            db.add(rsvp)
        for key, value in fields.items():
            setattr(rsvp, key, value)
        rsvp.updated_at = now
        if commit:
            db.commit()
        else:
            db.flush()
        return rsvp.to_dict()

    # Firestore docs keyed rsvps/{guest_id}_{event_id}

    @staticmethod
    def get_fs(guest_id: str, event_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection("rsvps").document(_pair_id(guest_id, event_id)).get()
        return _doc_data(doc) if doc.exists else None

    @staticmethod
    def list_for_guest_fs(guest_id: str) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        return [_doc_data(d) for d in fs.collection("rsvps").where("guest_id", "==", guest_id).get()]

    @staticmethod
    def list_all_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        return [_doc_data(d) for d in fs.collection("rsvps").get()]

    @staticmethod
    def upsert_fs(guest_id: str, event_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection("rsvps").document(_pair_id(guest_id, event_id))
        existing = ref.get()
        now = datetime.utcnow().isoformat()
        data = dict(fields, guest_id=guest_id, event_id=event_id, updated_at=now)
        if not existing.exists:
            data["responded_at"] = now
        ref.set(data, merge=True)
        return _doc_data(ref.get())


# -------- Session repository --------

class SessionRepo:
    @staticmethod
    def create_guest_session(db: Session, token: str, guest_id: str, expires_at: datetime) -> None:
        if use_firestore():
            SessionRepo._create_fs("guest_sessions", token, {"guest_id": guest_id}, expires_at)
        else:
            db.add(GuestSession(session_token=token, guest_id=guest_id, expires_at=expires_at))
            db.commit()

    @staticmethod
    def get_guest_session(db: Session, token: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return SessionRepo._get_fs("guest_sessions", token)
        row = db.query(GuestSession).filter(GuestSession.session_token == token).first()
        return row.to_dict() if row else None

    @staticmethod
    def delete_guest_session(db: Session, token: str) -> None:
        if use_firestore():
            SessionRepo._delete_fs("guest_sessions", token)
        else:
            db.query(GuestSession).filter(GuestSession.session_token == token).delete()
            db.commit()

    @staticmethod
    def create_admin_session(db: Session, token: str, username: str, expires_at: datetime) -> None:
        if use_firestore():
            SessionRepo._create_fs("admin_sessions", token, {"username": username}, expires_at)
        else:
            db.add(AdminSession(session_token=token, username=username, expires_at=expires_at))
            db.commit()

    @staticmethod
    def get_admin_session(db: Session, token: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return SessionRepo._get_fs("admin_sessions", token)
        row = db.query(AdminSession).filter(AdminSession.session_token == token).first()
        return row.to_dict() if row else None

    @staticmethod
    def delete_admin_session(db: Session, token: str) -> None:
        if use_firestore():
            SessionRepo._delete_fs("admin_sessions", token)
        else:
            db.query(AdminSession).filter(AdminSession.session_token == token).delete()
            db.commit()

    # Firestore session docs are keyed by token

    @staticmethod
    def _create_fs(collection: str, token: str, owner: Dict[str, Any], expires_at: datetime) -> None:
        fs = get_firestore_client()
        fs.collection(collection).document(token).set(dict(
            owner,
            session_token=token,
            created_at=datetime.utcnow().isoformat(),
            expires_at=expires_at.isoformat(),
        ))

    @staticmethod
    def _get_fs(collection: str, token: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection(collection).document(token).get()
        return _doc_data(doc) if doc.exists else None

    @staticmethod
    def _delete_fs(collection: str, token: str) -> None:
        fs = get_firestore_client()
        fs.collection(collection).document(token).delete()


# -------- Admin user repository --------

class AdminRepo:
    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive username lookup"""
        if use_firestore():
            fs = get_firestore_client()
            doc = fs.collection("admin_users").document(username.strip().lower()).get()
            return _doc_data(doc) if doc.exists else None
        user = db.query(AdminUser).filter(func.lower(AdminUser.username) == username.strip().lower()).first()
        return {"username": user.username, "password": user.password} if user else None

    @staticmethod
    def create(db: Session, username: str, password: str) -> None:
        if use_firestore():
            fs = get_firestore_client()
            fs.collection("admin_users").document(username.strip().lower()).set({
                "username": username.strip(),
                "password": password,
            })
        else:
            db.add(AdminUser(username=username.strip(), password=password))
            db.commit()
