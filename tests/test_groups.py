import httpx
import pytest

from conftest import MEMBER_A, MEMBER_B, MISSING_ID, OUTSIDER, OWNER
from app.core.exceptions import (
    BackendTimeoutError, InvalidInputError, NotAuthorizedError, NotFoundError
)


def test_create_group_adds_owner_as_member(groups, supabase):
    group = groups.create_group("  Lions  ", OWNER)

    assert group.name == "Lions"
    assert group.owner_id == OWNER
    members = supabase.rows("group_members", group_id=group.id)
    assert [m["user_id"] for m in members] == [OWNER]


def test_create_group_rejects_blank_name_before_backend(groups, supabase):
    with pytest.raises(InvalidInputError):
        groups.create_group("   ", OWNER)
    assert supabase.calls == []


def test_create_group_invalidates_cached_group_list(groups):
    assert groups.list_my_groups(OWNER).items == []
    group = groups.create_group("Lions", OWNER)
    assert [g.id for g in groups.list_my_groups(OWNER).items] == [group.id]


def test_list_my_groups_newest_first(groups):
    first = groups.create_group("First", OWNER)
    second = groups.create_group("Second", OWNER)
    groups.create_group("Not mine", OUTSIDER)

    result = groups.list_my_groups(OWNER)

    assert result.error is None
    assert [g.id for g in result.items] == [second.id, first.id]


def test_list_my_groups_reports_backend_failure_as_empty_result(groups, supabase):
    groups.create_group("Lions", OWNER)
    groups.list_my_groups(OWNER)  # warm the membership cache
    supabase.fail_next("groups", httpx.ReadTimeout("timed out"))

    result = groups.list_my_groups(OWNER)

    assert result.items == []
    assert result.error == "Backend request timed out"


def test_add_members_owner_only(groups, group):
    with pytest.raises(NotAuthorizedError):
        groups.add_members(group.id, MEMBER_A, [OUTSIDER])


def test_add_members_skips_existing_and_duplicates(groups, group, supabase):
    added = groups.add_members(group.id, OWNER, [MEMBER_A, OUTSIDER, OUTSIDER, ""])

    assert [m.user_id for m in added] == [OUTSIDER]
    user_ids = sorted(m["user_id"] for m in supabase.rows("group_members", group_id=group.id))
    assert user_ids == sorted([OWNER, MEMBER_A, MEMBER_B, OUTSIDER])


def test_add_members_empty_list_is_noop(groups, group, supabase):
    calls = len(supabase.calls)
    assert groups.add_members(group.id, OWNER, []) == []
    assert len(supabase.calls) == calls


def test_added_member_sees_group(groups, group):
    assert [g.id for g in groups.list_my_groups(MEMBER_A).items] == [group.id]


def test_owner_removes_member(groups, group, supabase):
    assert groups.remove_member(group.id, OWNER, MEMBER_A) is True
    assert supabase.rows("group_members", group_id=group.id, user_id=MEMBER_A) == []
    assert groups.list_my_groups(MEMBER_A).items == []


def test_member_leaves_group(groups, group, supabase):
    groups.remove_member(group.id, MEMBER_B, MEMBER_B)
    assert supabase.rows("group_members", group_id=group.id, user_id=MEMBER_B) == []


def test_member_cannot_remove_someone_else(groups, group):
    with pytest.raises(NotAuthorizedError):
        groups.remove_member(group.id, MEMBER_A, MEMBER_B)


def test_owner_cannot_remove_themself(groups, group, supabase):
    with pytest.raises(NotAuthorizedError):
        groups.remove_member(group.id, OWNER, OWNER)
    assert supabase.rows("group_members", group_id=group.id, user_id=OWNER)


def test_remove_unknown_member(groups, group):
    with pytest.raises(NotFoundError):
        groups.remove_member(group.id, OWNER, OUTSIDER)


def test_remove_member_clears_their_slots(groups, teams, group, team, supabase):
    lineup = teams.set_formation(team.id, OWNER, "2-3-1")
    teams.assign_slot(lineup.slots[0].id, OWNER, MEMBER_A)

    groups.remove_member(group.id, MEMBER_A, MEMBER_A)

    assert supabase.rows("group_team_slots", team_id=team.id, user_id=MEMBER_A) == []


def test_send_message(groups, group):
    message = groups.send_message(group.id, MEMBER_A, "  hello  ")
    assert message.content == "hello"
    assert message.sender_id == MEMBER_A


def test_send_message_rejects_blank_content(groups, group, supabase):
    calls = len(supabase.calls)
    with pytest.raises(InvalidInputError):
        groups.send_message(group.id, MEMBER_A, " \n ")
    assert len(supabase.calls) == calls


def test_non_member_cannot_send(groups, group):
    with pytest.raises(NotAuthorizedError):
        groups.send_message(group.id, OUTSIDER, "hi")


def test_unknown_group_is_not_found(groups):
    with pytest.raises(NotFoundError):
        groups.send_message(MISSING_ID, OWNER, "hi")


def test_list_messages_oldest_first(groups, group):
    for text in ("one", "two", "three"):
        groups.send_message(group.id, MEMBER_A, text)

    result = groups.list_messages(group.id, MEMBER_B)

    assert [m.content for m in result.items] == ["one", "two", "three"]
    stamps = [m.created_at for m in result.items]
    assert stamps == sorted(stamps)


def test_list_messages_requires_membership(groups, group):
    with pytest.raises(NotAuthorizedError):
        groups.list_messages(group.id, OUTSIDER)


def test_list_members(groups, group):
    result = groups.list_members(group.id, MEMBER_A)
    assert sorted(m.user_id for m in result.items) == sorted([OWNER, MEMBER_A, MEMBER_B])


def test_delete_group_removes_everything(groups, teams, unread, group, team, supabase):
    teams.set_formation(team.id, OWNER, "3-2-1")
    groups.send_message(group.id, MEMBER_A, "bye")
    unread.mark_read(group.id, MEMBER_B)

    with pytest.raises(NotAuthorizedError):
        groups.delete_group(group.id, MEMBER_A)
    assert groups.delete_group(group.id, OWNER) is True

    for table in ("groups", "group_members", "group_messages", "group_reads", "group_teams", "group_team_slots"):
        assert supabase.tables.get(table, []) == [], table
    assert groups.list_my_groups(MEMBER_A).items == []


def test_timeout_is_distinct_from_not_found(groups, group, supabase):
    supabase.fail_next("group_messages", httpx.ConnectTimeout("slow"))
    with pytest.raises(BackendTimeoutError):
        groups.send_message(group.id, MEMBER_A, "hello")


@pytest.mark.parametrize("bad_id", ["abc", "12345", "not-a-uuid"])
def test_malformed_group_id_is_rejected_before_backend(groups, supabase, bad_id):
    calls = len(supabase.calls)
    with pytest.raises(InvalidInputError):
        groups.get_group(bad_id, OWNER)
    with pytest.raises(InvalidInputError):
        groups.list_messages(bad_id, OWNER)
    with pytest.raises(InvalidInputError):
        groups.list_members(bad_id, OWNER)
    assert len(supabase.calls) == calls
