from helpdesk.shared.schemas import Failure, GroupDestination, generate_id


def test_search_users_by_username_prefix(make_user):
    client, user_id = make_user(first_name="Magic", last_name="Person", username="Abracadabra1337")
    make_user(first_name="Plain", username="nobody")

    results = client.search_users("Abra").unwrap()
    assert [hit.value.id for hit in results.top_hits] == [user_id]
    hit = results.top_hits[0]
    assert hit.highlights["identities.telegram.username"] == "<em>Abra</em>cad<em>abra</em>1337"
    assert hit.value.identities.telegram.username == "Abracadabra1337"

    # без учёта регистра
    assert [h.value.id for h in client.search_users("abra").unwrap().top_hits] == [user_id]


def test_search_ranking_and_limit(make_user, settings, monkeypatch):
    _, partial_id = make_user(first_name="Frank", last_name=None)
    _, exact_id = make_user(first_name="Rank", last_name=None)
    client, everywhere_id = make_user(first_name="Rank", last_name="Ranker", username="rank")

    # больше совпавших полей выше, при равенстве выше точное совпадение
    hits = client.search_users("rank").unwrap().top_hits
    assert [h.value.id for h in hits] == [everywhere_id, exact_id, partial_id]
    assert len(hits[0].highlights) == 4
    assert hits[1].highlights == {"name": "<em>Rank</em>", "identities.telegram.first_name": "<em>Rank</em>"}

    monkeypatch.setattr(settings, "SEARCH_LIMIT", 2)
    limited = client.search_users("rank").unwrap().top_hits
    assert [h.value.id for h in limited] == [everywhere_id, exact_id]


def test_search_groups_and_tickets(make_user):
    client, _ = make_user()
    group_id = generate_id()
    client.create_group(group_id, "Dorm manager").unwrap()
    ticket_id = generate_id()
    client.create_ticket(ticket_id, GroupDestination(id=group_id), "Broken chair", "Leg snapped off").unwrap()

    groups = client.search_groups("dorm").unwrap()
    assert [h.value.id for h in groups.top_hits] == [group_id]
    assert groups.top_hits[0].highlights == {"title": "<em>Dorm</em> manager"}

    by_title = client.search_tickets("chair").unwrap()
    assert [h.value.id for h in by_title.top_hits] == [ticket_id]

    by_message = client.search_tickets("snapped").unwrap()
    assert by_message.top_hits[0].highlights == {"timeline.0.content.text": "Leg <em>snapped</em> off"}

    assert client.search_tickets("nothing like this").unwrap().top_hits == []


def test_empty_query_is_rejected(make_user):
    client, _ = make_user()
    result = client.search_users("")
    assert isinstance(result, Failure)
    assert result.payload.underlying_error == "Validation"
