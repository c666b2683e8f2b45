"""Tests for ConversationService."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.constants.conversations import ConversationStatus, SessionStatus
from app.exceptions import (
    DuplicateField,
    InvalidIdFormat,
    MissingIdentifier,
    NotFound,
    Unexpected,
)
from app.models.conversation import Conversation
from app.models.party import Customer
from app.models.session import Session as SessionModel
from app.schemas.conversation import ConversationCreate, ConversationUpdate
from app.services.conversation_service import ConversationService
from app.utils.object_id import generate_object_id


def test_create_conversation(db: Session, conversation_create: ConversationCreate):
    svc = ConversationService(db)
    conversation = svc.create(conversation_create)
    assert conversation.id is not None
    assert conversation.status == ConversationStatus.ACTIVE
    assert conversation.customer.id == conversation_create.customer.id
    assert conversation.customer.name == conversation_create.customer.name
    assert conversation.channel.id == conversation_create.channel.id
    assert conversation.session.id == conversation_create.session.id
    assert conversation.advisor is None
    assert conversation.messages == []


def test_create_conversation_with_advisor_and_status(
    db: Session, conversation_payload, faker
):
    advisor_id = generate_object_id()
    conversation_payload["advisor"] = {"id": advisor_id, "email": faker.email()}
    conversation_payload["status"] = "archive"
    conversation_payload["created_by"] = "user_456"
    svc = ConversationService(db)
    conversation = svc.create(ConversationCreate(**conversation_payload))
    assert conversation.advisor is not None
    assert conversation.advisor.id == advisor_id
    assert conversation.status == ConversationStatus.ARCHIVE
    assert conversation.created_by == "user_456"


def test_create_conversation_upserts_existing_customer(
    db: Session, conversation_payload, faker
):
    svc = ConversationService(db)
    first = svc.create(ConversationCreate(**conversation_payload))

    conversation_payload["customer"]["name"] = "Jane Updated"
    conversation_payload["customer"]["phone"] = "+15550100"
    conversation_payload["session"] = {
        "id": generate_object_id(),
        "status": "open",
    }
    second = svc.create(ConversationCreate(**conversation_payload))

    assert second.id != first.id
    assert second.customer.id == first.customer.id
    customer = db.get(Customer, first.customer.id)
    assert customer.name == "Jane Updated"
    assert customer.phone == "+15550100"
    assert db.query(Customer).count() == 1


@pytest.mark.parametrize("field", ["customer", "channel", "session"])
def test_create_conversation_invalid_id(db: Session, conversation_payload, field):
    conversation_payload[field]["id"] = "not-an-object-id"
    svc = ConversationService(db)
    with pytest.raises(InvalidIdFormat, match=f"Invalid {field} ID format"):
        svc.create(ConversationCreate(**conversation_payload))


def test_create_conversation_invalid_advisor_id(db: Session, conversation_payload):
    conversation_payload["advisor"] = {"id": "123", "name": "Agent"}
    with pytest.raises(InvalidIdFormat, match="advisor"):
        ConversationService(db).create(ConversationCreate(**conversation_payload))


def test_create_conversation_customer_without_identifier(
    db: Session, conversation_payload
):
    conversation_payload["customer"] = {"id": generate_object_id()}
    with pytest.raises(MissingIdentifier, match="Customer must have"):
        ConversationService(db).create(ConversationCreate(**conversation_payload))
    assert db.query(Conversation).count() == 0


def test_create_conversation_advisor_without_identifier(
    db: Session, conversation_payload
):
    conversation_payload["advisor"] = {"id": generate_object_id()}
    with pytest.raises(MissingIdentifier, match="Advisor must have"):
        ConversationService(db).create(ConversationCreate(**conversation_payload))


def test_create_conversation_duplicate_email_rolls_back(
    db: Session, conversation_payload, faker
):
    """A failure part way through leaves none of the related rows behind."""
    shared_email = faker.email()
    conversation_payload["advisor"] = {
        "id": generate_object_id(),
        "email": shared_email,
    }
    svc = ConversationService(db)
    svc.create(ConversationCreate(**conversation_payload))

    new_customer_id = generate_object_id()
    new_session_id = generate_object_id()
    payload = {
        "customer": {"id": new_customer_id, "name": faker.name()},
        "advisor": {"id": generate_object_id(), "email": shared_email},
        "channel": conversation_payload["channel"],
        "session": {"id": new_session_id, "status": "open"},
    }
    with pytest.raises(DuplicateField) as exc_info:
        svc.create(ConversationCreate(**payload))

    assert exc_info.value.fields == ["email"]
    assert db.get(Customer, new_customer_id) is None
    assert db.get(SessionModel, new_session_id) is None
    assert db.query(Conversation).count() == 1


def test_find_all_returns_only_active(
    db: Session, setup_conversation, setup_archived_conversation, make_conversation
):
    inactive = make_conversation(status=ConversationStatus.INACTIVE)
    svc = ConversationService(db)
    conversations = svc.find_all()
    ids = [c.id for c in conversations]
    assert setup_conversation.id in ids
    assert setup_archived_conversation.id not in ids
    assert inactive.id not in ids
    assert all(c.status == ConversationStatus.ACTIVE for c in conversations)


def test_find_all_newest_first_and_windowed(db: Session, make_conversation):
    created = [make_conversation() for _ in range(3)]
    for day, conversation in enumerate(created, start=1):
        conversation.created_at = datetime(2026, 3, day, 12, 0)
    db.commit()

    svc = ConversationService(db)
    all_ids = [c.id for c in svc.find_all(skip=0, take=10)]
    assert all_ids == [created[2].id, created[1].id, created[0].id]

    page = svc.find_all(skip=1, take=1)
    assert [c.id for c in page] == [created[1].id]


def test_find_all_includes_messages(db: Session, setup_messages, setup_conversation):
    conversations = ConversationService(db).find_all()
    found = next(c for c in conversations if c.id == setup_conversation.id)
    assert len(found.messages) == len(setup_messages)
    with_attachment = [m for m in found.messages if m.attachment is not None]
    assert len(with_attachment) == 1


def test_find_one(db: Session, setup_conversation, setup_messages):
    conversation = ConversationService(db).find_one(setup_conversation.id)
    assert conversation.id == setup_conversation.id
    assert conversation.advisor is not None
    # inactive message excluded, chronological order
    expected = [m.id for m in setup_messages if m.status == "active"]
    assert [m.id for m in conversation.messages] == expected
    timestamps = [m.timestamp for m in conversation.messages]
    assert timestamps == sorted(timestamps)


def test_find_one_invalid_id(db: Session):
    with pytest.raises(InvalidIdFormat, match="Invalid conversation ID format"):
        ConversationService(db).find_one("xyz")


def test_find_one_not_found(db: Session):
    missing = generate_object_id()
    with pytest.raises(NotFound, match=missing):
        ConversationService(db).find_one(missing)


def test_find_one_hides_archived(db: Session, setup_archived_conversation):
    with pytest.raises(NotFound):
        ConversationService(db).find_one(setup_archived_conversation.id)


def test_update_session_status(db: Session, setup_conversation):
    svc = ConversationService(db)
    data = ConversationUpdate(
        session={"status": "closed"},
        updated_by="user_456",
        updated_by_client="external_system",
    )
    updated = svc.update(setup_conversation.id, data)
    assert updated.session.id == setup_conversation.session_id
    assert updated.session.status == SessionStatus.CLOSED
    assert updated.status == ConversationStatus.ACTIVE
    assert updated.updated_by == "user_456"
    assert updated.updated_by_client == "external_system"


def test_update_repoints_session(db: Session, setup_conversation):
    previous_session_id = setup_conversation.session_id
    new_session_id = generate_object_id()
    svc = ConversationService(db)
    updated = svc.update(
        setup_conversation.id,
        ConversationUpdate(session={"id": new_session_id, "status": "closed"}),
    )
    assert updated.session.id == new_session_id
    assert updated.session.status == SessionStatus.CLOSED
    # previous session row untouched
    assert db.get(SessionModel, previous_session_id).status == "open"


def test_update_empty_payload_refreshes_updated_at(db: Session, setup_conversation):
    setup_conversation.updated_at = datetime(2020, 1, 1)
    db.commit()

    svc = ConversationService(db)
    updated = svc.update(setup_conversation.id, ConversationUpdate())
    assert updated.status == ConversationStatus.ACTIVE
    assert updated.updated_at.year > 2020


def test_update_not_found(db: Session):
    with pytest.raises(NotFound):
        ConversationService(db).update(generate_object_id(), ConversationUpdate())


def test_update_invalid_session_id(db: Session, setup_conversation):
    with pytest.raises(InvalidIdFormat, match="session"):
        ConversationService(db).update(
            setup_conversation.id, ConversationUpdate(session={"id": "bad"})
        )


def test_remove_soft_deletes(db: Session, setup_conversation):
    svc = ConversationService(db)
    removed = svc.remove(setup_conversation.id)
    assert removed.status == ConversationStatus.INACTIVE
    assert not hasattr(removed, "messages")

    with pytest.raises(NotFound):
        svc.find_one(setup_conversation.id)
    stored = db.get(Conversation, setup_conversation.id)
    assert stored is not None
    assert stored.status == "inactive"


def test_archive(db: Session, setup_conversation):
    svc = ConversationService(db)
    archived = svc.archive(setup_conversation.id)
    assert archived.status == ConversationStatus.ARCHIVE

    with pytest.raises(NotFound):
        svc.find_one(setup_conversation.id)
    assert db.get(Conversation, setup_conversation.id).status == "archive"


def test_remove_twice_is_not_found(db: Session, setup_conversation):
    svc = ConversationService(db)
    svc.remove(setup_conversation.id)
    with pytest.raises(NotFound):
        svc.remove(setup_conversation.id)


def test_find_by_customer(db: Session, setup_conversation, make_conversation):
    make_conversation()
    conversations = ConversationService(db).find_by_customer(
        setup_conversation.customer_id
    )
    assert [c.id for c in conversations] == [setup_conversation.id]


def test_find_by_customer_invalid_id(db: Session):
    with pytest.raises(InvalidIdFormat, match="customer"):
        ConversationService(db).find_by_customer("nope")


def test_find_by_status(db: Session, setup_conversation, setup_archived_conversation):
    archived = ConversationService(db).find_by_status(ConversationStatus.ARCHIVE)
    assert [c.id for c in archived] == [setup_archived_conversation.id]


def _raise_operational_error(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


def test_find_all_database_failure_is_unexpected(db: Session, monkeypatch):
    monkeypatch.setattr(db, "query", _raise_operational_error)
    with pytest.raises(Unexpected, match="Failed to fetch conversations") as exc_info:
        ConversationService(db).find_all()
    assert exc_info.value.status_code == 400
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_archive_commit_failure_rolls_back(
    db: Session, setup_conversation, monkeypatch
):
    monkeypatch.setattr(db, "commit", _raise_operational_error)
    with pytest.raises(Unexpected, match="Failed to archive conversation"):
        ConversationService(db).archive(setup_conversation.id)
    monkeypatch.undo()
    assert db.get(Conversation, setup_conversation.id).status == "active"


def test_timestamps_are_utc_after_reload(db: Session, setup_conversation):
    db.expire_all()
    stored = db.get(Conversation, setup_conversation.id)
    assert stored.created_at.utcoffset() == timedelta(0)
    assert stored.updated_at.utcoffset() == timedelta(0)
