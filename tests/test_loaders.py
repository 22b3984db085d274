from helpdesk.frontend.backend_client import BackendTransportError
from helpdesk.frontend.loaders import (
    fetch_profiles,
    load_assigned_tickets,
    load_group_page,
    load_group_tickets,
    load_me,
    load_owned_tickets,
    load_ticket_page,
)
from helpdesk.shared.schemas import (
    ApiError,
    Failure,
    GroupDestination,
    Success,
    UserDestination,
    UserProfileView,
    generate_id,
)

TRACE_ID = "e" * 32


def _failure(code="NotFound"):
    return Failure(payload=ApiError(underlying_error=code, report="nope", trace_id=TRACE_ID, span_id="f" * 16))


class FakeClient:
    def __init__(self, failing=(), broken=()):
        self.failing = set(failing)
        self.broken = set(broken)

    def get_user_profile(self, user_id):
        if user_id in self.broken:
            raise BackendTransportError("backend is down")
        if user_id in self.failing:
            return _failure()
        return Success(payload=UserProfileView(id=user_id, name=f"user-{user_id[:4]}"))

    def get_assigned_tickets(self):
        raise BackendTransportError("backend is down")

    def get_ticket(self, ticket_id):
        return _failure("Forbidden")


def test_fetch_profiles_tolerates_partial_failures():
    ok_ids = [generate_id() for _ in range(5)]
    failing, broken = generate_id(), generate_id()
    client = FakeClient(failing=[failing], broken=[broken])

    result = fetch_profiles(client, ok_ids + [failing, broken, ok_ids[0]], max_workers=4)
    assert list(result.profiles) == ok_ids
    assert set(result.errors) == {failing, broken}
    assert TRACE_ID in result.errors[failing]
    assert "backend is down" in result.errors[broken]


def test_listing_falls_back_to_empty_on_transport_error():
    loaded = load_assigned_tickets(FakeClient())
    assert not loaded.ok
    assert loaded.value.payload == []
    assert loaded.value.users == {}
    assert loaded.error.startswith("Сервер недоступен")


def test_ticket_page_keeps_error_report():
    loaded = load_ticket_page(FakeClient(), generate_id())
    assert loaded.value is None
    assert "Недостаточно прав" in loaded.error
    assert TRACE_ID in loaded.error


def test_loader_against_real_backend(make_user):
    client, user_id = make_user()
    ticket_id = generate_id()
    client.create_ticket(ticket_id, UserDestination(id=user_id), "Loader", "body").unwrap()

    loaded = load_owned_tickets(client)
    assert loaded.ok
    assert [t.id for t in loaded.value.payload] == [ticket_id]
    assert fetch_profiles(client, [user_id]).profiles[user_id].id == user_id


def test_group_page_and_me_loaders(make_user):
    client, user_id = make_user()
    group_id = generate_id()
    client.create_group(group_id, "Dorm manager").unwrap()
    ticket_id = generate_id()
    client.create_ticket(ticket_id, GroupDestination(id=group_id), "Broken chair", "body").unwrap()

    assert load_me(client).value.id == user_id
    page = load_group_page(client, group_id)
    assert page.ok
    assert page.value.payload.members == [user_id]
    tickets = load_group_tickets(client, group_id)
    assert [t.id for t in tickets.value.payload] == [ticket_id]

    missing = load_group_page(client, generate_id())
    assert missing.value is None
    assert "Объект не найден" in missing.error
