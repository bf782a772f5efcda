import pytest

from noirkit.db import (
    delete_contact_field,
    delete_owned_row,
    get_contact_form,
    insert_contact_field,
    insert_contact_form,
    insert_owned_row,
    list_owned_rows,
    reorder_owned_rows,
    update_contact_form,
    update_owned_row,
    upsert_profile,
    get_first_profile_owner_id,
)


def test_owned_row_crud_is_scoped_to_owner(conn, make_owner):
    ana = make_owner("ana")
    bob = make_owner("bob")

    row = insert_owned_row(conn, "projects", ana, {"name": "Noir", "tech_stack": ["Python", "SQL"]}, 0)
    assert row["tech_stack"] == ["Python", "SQL"]
    assert row["images"] == []

    # Bob cannot touch Ana's row
    assert update_owned_row(conn, "projects", bob, row["id"], {"name": "Stolen"}) is None
    assert delete_owned_row(conn, "projects", bob, row["id"]) is False
    assert list_owned_rows(conn, "projects", bob) == []

    updated = update_owned_row(conn, "projects", ana, row["id"], {"images": ["a.png"], "deploy_link": None})
    assert updated["images"] == ["a.png"]
    assert updated["deploy_link"] is None
    assert list_owned_rows(conn, "projects", ana)[0]["images"] == ["a.png"]

    assert delete_owned_row(conn, "projects", ana, row["id"]) is True
    assert list_owned_rows(conn, "projects", ana) == []


def test_unknown_table_and_columns_are_rejected(conn, owner_id):
    with pytest.raises(ValueError):
        list_owned_rows(conn, "users", owner_id)
    with pytest.raises(ValueError):
        insert_owned_row(conn, "tech_stack", owner_id, {"name": "Go", "icon": "x", "user_id": "other"}, 0)


def test_reorder_is_all_or_nothing(conn, owner_id):
    ids = [insert_owned_row(conn, "tech_stack", owner_id, {"name": n, "icon": "x"}, i)["id"]
           for i, n in enumerate(["a", "b", "c"])]

    rejected = reorder_owned_rows(conn, "tech_stack", owner_id, [ids[2], "ghost", ids[0]])
    assert rejected == ["ghost"]
    assert [r["id"] for r in list_owned_rows(conn, "tech_stack", owner_id)] == ids

    assert reorder_owned_rows(conn, "tech_stack", owner_id, [ids[2], ids[0], ids[1]]) == []
    assert [r["id"] for r in list_owned_rows(conn, "tech_stack", owner_id)] == [ids[2], ids[0], ids[1]]


def test_profile_upsert_keeps_unsent_columns(conn, owner_id):
    upsert_profile(conn, owner_id, {"name": "Ana", "bio": "Hi"})
    profile = upsert_profile(conn, owner_id, {"bio": "Hello"})

    assert profile["name"] == "Ana"
    assert profile["bio"] == "Hello"
    assert get_first_profile_owner_id(conn) == owner_id


def test_contact_form_is_latest_per_owner_and_fields_scoped(conn, make_owner):
    ana = make_owner("ana")
    bob = make_owner("bob")

    insert_contact_form(conn, ana, {"title": "Old"})
    latest = insert_contact_form(conn, ana, {"title": "New", "show_contact_info": True})
    assert get_contact_form(conn, ana)["id"] == latest["id"]
    assert get_contact_form(conn, ana)["show_contact_info"] is True

    assert update_contact_form(conn, bob, latest["id"], {"title": "Hijack"}) is None
    assert insert_contact_field(conn, bob, latest["id"], {"name": "x", "label": "X", "type": "text"}, 0) is None

    field = insert_contact_field(conn, ana, latest["id"], {"name": "email", "label": "Email", "type": "email"}, 0)
    assert delete_contact_field(conn, bob, field["id"]) is False
    assert [f["name"] for f in get_contact_form(conn, ana)["fields"]] == ["email"]


def test_list_columns_reject_a_plain_string(conn, owner_id):
    with pytest.raises(ValueError):
        insert_owned_row(conn, "projects", owner_id, {"name": "Noir", "tech_stack": "Python"}, 0)
    assert list_owned_rows(conn, "projects", owner_id) == []
