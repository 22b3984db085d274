from helpdesk.shared.schemas import Failure, generate_id


def test_group_membership_order(make_user):
    creator, creator_id = make_user(first_name="Creator")
    second, second_id = make_user(first_name="Second")
    _, third_id = make_user(first_name="Third")

    group_id = generate_id()
    creator.create_group(group_id, "Dorm manager").unwrap()
    assert creator.get_group(group_id).unwrap().payload.members == [creator_id]

    creator.add_group_member(group_id, second_id).unwrap()
    creator.add_group_member(group_id, third_id).unwrap()
    # повторное добавление ничего не меняет
    creator.add_group_member(group_id, third_id).unwrap()
    assert creator.get_group(group_id).unwrap().payload.members == [creator_id, second_id, third_id]

    # не-создатель может удалить создателя
    second.remove_group_member(group_id, creator_id).unwrap()
    assert second.get_group(group_id).unwrap().payload.members == [second_id, third_id]

    second.add_group_member(group_id, creator_id).unwrap()
    group = second.get_group(group_id).unwrap()
    assert group.payload.members == [second_id, third_id, creator_id]
    assert set(group.users) == {creator_id, second_id, third_id}
    assert group.users[creator_id].name == "Creator User"


def test_outsider_cannot_change_group(make_user):
    creator, _ = make_user()
    outsider, outsider_id = make_user()
    group_id = generate_id()
    creator.create_group(group_id, "IT").unwrap()

    result = outsider.add_group_member(group_id, outsider_id)
    assert isinstance(result, Failure)
    assert result.payload.underlying_error == "Forbidden"
    assert outsider.http.post(
        f"/api/groups/{group_id}", json={"type": "ChangeTitle", "new_title": "Mine"}
    ).status_code == 403


def test_group_validation_errors(make_user):
    creator, _ = make_user()
    group_id = generate_id()
    creator.create_group(group_id, "IT").unwrap()

    unknown_member = creator.add_group_member(group_id, generate_id())
    assert unknown_member.payload.underlying_error == "CommandRelatedItemNotFound"

    duplicate = creator.create_group(group_id, "IT again")
    assert duplicate.payload.underlying_error == "AlreadyExists"

    missing = creator.change_group_title(generate_id(), "Nope")
    assert missing.payload.underlying_error == "NotFound"

    empty_title = creator.http.post(f"/api/groups/{generate_id()}", json={"type": "Create", "title": ""})
    assert empty_title.status_code == 400
    assert empty_title.json()["payload"]["underlying_error"] == "Validation"


def test_change_title_and_user_groups(make_user):
    creator, creator_id = make_user()
    member, member_id = make_user()
    first, second = generate_id(), generate_id()
    creator.create_group(first, "Dorm manager").unwrap()
    creator.create_group(second, "IT support").unwrap()
    creator.add_group_member(second, member_id).unwrap()

    creator.change_group_title(first, "Dormitory").unwrap()
    # то же название: no-op
    creator.change_group_title(first, "Dormitory").unwrap()
    assert creator.get_group(first).unwrap().payload.title == "Dormitory"

    mine = creator.get_user_groups(creator_id).unwrap()
    assert [g.id for g in mine.payload] == [first, second]
    assert set(mine.users) == {creator_id, member_id}
    assert mine.missing_user_ids() == []

    theirs = member.get_user_groups(member_id).unwrap()
    assert [g.title for g in theirs.payload] == ["IT support"]


def test_group_commands_require_session(make_client):
    result = make_client().create_group(generate_id(), "Anonymous")
    assert isinstance(result, Failure)
    assert result.payload.underlying_error == "NoCookie"
