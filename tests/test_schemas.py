from datetime import datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from helpdesk.shared.schemas import (
    AssigneeChangeContent,
    CreateTicket,
    GroupDestination,
    GroupProfileView,
    GroupView,
    MessageContent,
    PolicyViolation,
    SendTicketMessage,
    TelegramUserProfile,
    TicketCommand,
    TicketStatus,
    TicketTimelineItem,
    TicketView,
    UniversityUserProfile,
    UploadMetadata,
    UploadPolicy,
    UserDestination,
    UserIdentities,
    WithGroups,
    collect_group_ids,
    collect_user_ids,
    generate_id,
)


def test_destination_uses_tagged_encoding():
    gid = generate_id()
    command = TicketCommand.model_validate(
        {"type": "Create", "destination": {"type": "Group", "id": gid}, "title": "t", "body": "b"}
    ).root
    assert isinstance(command, CreateTicket)
    assert command.destination == GroupDestination(id=gid)
    assert command.model_dump(mode="json")["destination"] == {"type": "Group", "id": gid}


@pytest.mark.parametrize(
    "destination",
    [
        lambda gid: {"Group": gid},
        lambda gid: {"type": "Group", "id": gid, "Group": gid},
        lambda gid: {"type": "Channel", "id": gid},
    ],
)
def test_non_canonical_destinations_are_rejected(destination):
    gid = generate_id()
    with pytest.raises(ValidationError):
        TicketCommand.model_validate({"type": "Create", "destination": destination(gid), "title": "t", "body": "b"})


def test_ticket_command_dispatches_on_type():
    command = TicketCommand.model_validate({"type": "SendTicketMessage", "body": "hello"}).root
    assert isinstance(command, SendTicketMessage)
    with pytest.raises(ValidationError):
        TicketCommand.model_validate({"type": "Delete"})


def test_message_author_is_serialized_as_from():
    uid = generate_id()
    item = TicketTimelineItem.model_validate(
        {"date": "2024-01-01T00:00:00Z", "content": {"type": "Message", "from": uid, "text": "hi"}}
    )
    assert isinstance(item.content, MessageContent)
    assert item.content.from_ == uid
    assert item.model_dump(mode="json", by_alias=True)["content"]["from"] == uid


def test_external_profile_is_tagged_by_provider():
    adapter = TypeAdapter(UserIdentities)
    identities = adapter.validate_python({"telegram": None, "university": None})
    telegram = TelegramUserProfile(id=1, first_name="Ivan", last_name="Petrov")
    identities = identities.with_identity(telegram)
    assert telegram.model_dump()["type"] == "Telegram"
    assert identities.telegram.id == 1
    assert identities.display_name() == "Ivan Petrov"
    assert not identities.can_add_identity(TelegramUserProfile(id=2, first_name="x"))

    university = UniversityUserProfile(
        email="ivan@uni.example", commonname="Ivan P.", family_name="Petrov", given_name="Ivan"
    )
    assert identities.can_add_identity(university)
    identities = identities.with_identity(university)
    # университетский профиль авторитетнее
    assert identities.display_name() == "Ivan P."
    assert identities.identity_keys() == ["telegram-1", "university-ivan@uni.example"]


def test_telegram_name_without_last_name():
    assert TelegramUserProfile(id=1, first_name="Solo").display_name == "Solo"


def test_collect_ids_walks_ticket_references():
    owner, helper, other = generate_id(), generate_id(), generate_id()
    gid = generate_id()
    now = datetime.now(timezone.utc)
    view = TicketView(
        id=generate_id(),
        destination=GroupDestination(id=gid),
        owner=owner,
        assignee=helper,
        title="t",
        status=TicketStatus.PENDING,
        timeline=[
            TicketTimelineItem(date=now, content=MessageContent(from_=owner, text="a")),
            TicketTimelineItem(date=now, content=MessageContent(from_=other, text="b")),
            TicketTimelineItem(date=now, content=AssigneeChangeContent(old=None, new=helper)),
        ],
    )
    assert collect_user_ids(view) == [owner, helper, other]
    assert collect_group_ids(view) == [gid]
    assert collect_group_ids([view, view]) == [gid]


def test_collect_ids_for_user_destination_and_groups():
    uid = generate_id()
    view = TicketView(
        id=generate_id(),
        destination=UserDestination(id=uid),
        owner=uid,
        title="t",
        status=TicketStatus.PENDING,
        timeline=[],
    )
    assert collect_user_ids(view) == [uid]
    assert collect_group_ids(view) == []

    group = GroupView(id=generate_id(), title="g", members=[uid])
    assert collect_user_ids([group]) == [uid]


def test_upload_policy_reports_all_violations():
    policy = UploadPolicy(allowed_file_extensions=["png"], allowed_content_types=["image/png"], max_size=10)
    assert policy.check(UploadMetadata(filename="a.png", content_type="image/png", size=10)) == []
    assert policy.check(UploadMetadata(filename="../a.png", content_type="image/png", size=1)) == [
        PolicyViolation.INVALID_FILENAME
    ]
    assert policy.check(UploadMetadata(filename="noext", content_type="image/png", size=1)) == [
        PolicyViolation.INVALID_FILENAME
    ]
    assert policy.check(UploadMetadata(filename="a.exe", content_type="text/x", size=11)) == [
        PolicyViolation.FILE_EXTENSION_NOT_ALLOWED,
        PolicyViolation.CONTENT_TYPE_NOT_ALLOWED,
        PolicyViolation.FILE_TOO_LARGE,
    ]


def test_with_groups_reports_missing_profiles():
    gid, other = generate_id(), generate_id()
    wrapped = WithGroups[GroupView](
        groups={gid: GroupProfileView(id=gid, title="g")},
        payload=GroupView(id=gid, title="g", members=[]),
    )
    assert wrapped.missing_group_ids() == []

    view = TicketView(
        id=generate_id(),
        destination=GroupDestination(id=other),
        owner=generate_id(),
        title="t",
        status=TicketStatus.PENDING,
        timeline=[],
    )
    assert WithGroups[TicketView](groups={}, payload=view).missing_group_ids() == [other]
