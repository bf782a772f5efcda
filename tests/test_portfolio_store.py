import pytest

from noirkit.db import get_profile, list_owned_rows
from noirkit.models.portfolio import (
    DEFAULT_CONTACT_FORM_DESCRIPTION,
    DEFAULT_CONTACT_FORM_TITLE,
)
from noirkit.services.data_service import (
    ConstraintViolationError,
    DataService,
    DataServiceError,
    UnauthenticatedError,
    WriteRejectedError,
)
from noirkit.services.portfolio_store import PortfolioStore


class CountingDataService(DataService):
    """Records which remote writes the store issued."""

    def __init__(self, conn, user_id=None):
        super().__init__(conn, user_id)
        self.calls = []

    def update_row(self, table, row_id, values):
        self.calls.append(("update_row", table, row_id))
        return super().update_row(table, row_id, values)

    def update_contact_field(self, field_id, values):
        self.calls.append(("update_contact_field", field_id))
        return super().update_contact_field(field_id, values)


class BrokenListDataService(DataService):
    def list_rows(self, table, owner_id):
        raise DataServiceError(f"{table} fetch failed")


def _link(platform="GitHub"):
    return {"platform": platform, "url": f"https://{platform.lower()}.com/ana", "icon": "M0 0h24v24H0z"}


# ── fetch_all ────────────────────────────────────────────────────────

def test_fetch_all_without_any_portfolio_is_loaded_and_empty(conn):
    store = PortfolioStore(DataService(conn, None))

    store.fetch_all()

    assert store.status == "loaded"
    assert store.loading is False
    assert store.error is None
    assert store.owner_id is None
    assert store.personal_info is None
    assert store.projects == []
    assert store.contact_form is None


def test_fetch_all_loads_session_owner(conn, owner_id, store):
    store.update_personal_info({"name": "Ana", "job_title": "Engineer"})
    store.add_project({"name": "Noir", "description": "Dark portfolio", "tech_stack": ["Python"]})

    fresh = PortfolioStore(DataService(conn, owner_id))
    fresh.fetch_all()

    assert fresh.owner_id == owner_id
    assert fresh.personal_info.name == "Ana"
    assert [p.name for p in fresh.projects] == ["Noir"]
    assert fresh.projects[0].tech_stack == ["Python"]


def test_fetch_all_without_session_uses_first_portfolio(conn, make_owner):
    first = make_owner("first")
    second = make_owner("second")
    PortfolioStore(DataService(conn, first)).update_personal_info({"name": "First"})
    PortfolioStore(DataService(conn, second)).update_personal_info({"name": "Second"})

    public = PortfolioStore(DataService(conn, None))
    public.fetch_all()

    assert public.owner_id == first
    assert public.personal_info.name == "First"


def test_fetch_all_twice_is_idempotent(store):
    store.add_social_link(_link("GitHub"))
    store.add_tech_stack({"name": "Python", "icon": "<path/>"})
    store.update_contact_form({"title": "Say hi"})

    store.fetch_all()
    first = store.snapshot()
    store.fetch_all()

    assert store.snapshot() == first


def test_fetch_all_failure_sets_error_and_reraises(conn, owner_id):
    store = PortfolioStore(BrokenListDataService(conn, owner_id))

    with pytest.raises(DataServiceError):
        store.fetch_all()

    assert store.loading is False
    assert store.error == "social_links fetch failed"
    assert store.status == "uninitialized"


# ── add ──────────────────────────────────────────────────────────────

def test_add_appends_with_dense_order(store):
    a = store.add_social_link(_link("GitHub"))
    b = store.add_social_link(_link("LinkedIn"))
    c = store.add_social_link(_link("Twitter"))

    assert [a.order, b.order, c.order] == [0, 1, 2]
    assert [x.id for x in store.social_links] == [a.id, b.id, c.id]


def test_add_ignores_caller_supplied_id_and_order(store):
    item = store.add_tech_stack({"id": "mine", "order": 7, "name": "Go", "icon": "<g/>"})

    assert item.id != "mine"
    assert item.order == 0


def test_add_without_session_raises_and_leaves_state(conn):
    store = PortfolioStore(DataService(conn, None))
    store.fetch_all()

    with pytest.raises(UnauthenticatedError):
        store.add_project({"name": "Ghost", "description": ""})

    assert store.projects == []
    assert store.error == "No authenticated user"


def test_add_with_unknown_field_is_rejected(store):
    with pytest.raises(ValueError):
        store.add_social_link({**_link(), "colour": "red"})
    assert store.social_links == []


# ── update ───────────────────────────────────────────────────────────

def test_update_merges_fields(conn, owner_id, store):
    link = store.add_social_link(_link("GitHub"))

    updated = store.update_social_link(link.id, {"url": "https://github.com/ana-new"})

    assert updated.url == "https://github.com/ana-new"
    assert updated.platform == "GitHub"
    assert store.social_links[0].url == "https://github.com/ana-new"
    assert list_owned_rows(conn, "social_links", owner_id)[0]["url"] == "https://github.com/ana-new"


def test_update_unknown_id_is_a_local_noop_without_remote_call(conn, owner_id):
    service = CountingDataService(conn, owner_id)
    store = PortfolioStore(service)
    store.fetch_all()
    store.add_achievement({"title": "BSc", "description": "CS", "date": "2020", "type": "education"})
    before = store.snapshot()

    result = store.update_achievement("does-not-exist", {"title": "PhD"})

    assert result is None
    assert store.snapshot() == before
    assert service.calls == []


def test_update_rejected_remotely_keeps_local_state(conn, owner_id, make_owner, store):
    link = store.add_social_link(_link("GitHub"))
    # Another owner's store sees the same id locally but cannot write it
    intruder = PortfolioStore(DataService(conn, make_owner("mallory")))
    intruder.social_links = list(store.social_links)

    with pytest.raises(WriteRejectedError):
        intruder.update_social_link(link.id, {"url": "https://evil.example"})

    assert intruder.social_links[0].url == link.url
    assert intruder.error is not None
    assert list_owned_rows(conn, "social_links", owner_id)[0]["url"] == link.url


def test_clearing_optional_fields_matches_a_refetch(conn, owner_id, store):
    project = store.add_project({"name": "Site", "description": "Portfolio", "deploy_link": "https://site.dev"})
    achievement = store.add_achievement({"title": "BSc", "description": "CS", "date": "2020", "type": "education"})

    cleared = store.update_project(project.id, {"deploy_link": None, "description": None})
    store.update_achievement(achievement.id, {"description": None})

    assert (cleared.deploy_link, cleared.description) == ("", "")
    assert store.achievements[0].description == ""
    local = store.snapshot()
    store.fetch_all()
    assert store.snapshot() == local


# ── delete ───────────────────────────────────────────────────────────

def test_delete_removes_locally_and_remotely(conn, owner_id, store):
    keep = store.add_project({"name": "Keep", "description": ""})
    gone = store.add_project({"name": "Gone", "description": ""})

    assert store.delete_project(gone.id) is True

    assert [p.id for p in store.projects] == [keep.id]
    assert [r["id"] for r in list_owned_rows(conn, "projects", owner_id)] == [keep.id]


def test_delete_unknown_id_returns_false(store):
    store.add_project({"name": "Keep", "description": ""})
    assert store.delete_project("nope") is False
    assert len(store.projects) == 1


# ── reorder ──────────────────────────────────────────────────────────

FAMILY_CASES = [
    ("social_links", "add_social_link", "reorder_social_links",
     lambda i: _link(f"P{i}")),
    ("projects", "add_project", "reorder_projects",
     lambda i: {"name": f"Project {i}", "description": ""}),
    ("tech_stack", "add_tech_stack", "reorder_tech_stack",
     lambda i: {"name": f"Tech {i}", "icon": "<svg/>"}),
    ("achievements", "add_achievement", "reorder_achievements",
     lambda i: {"title": f"Award {i}", "description": "", "date": "2024", "type": "achievement"}),
]


@pytest.mark.parametrize("attr,add,reorder,make", FAMILY_CASES)
def test_reorder_persists_and_updates_local_order(conn, owner_id, store, attr, add, reorder, make):
    items = [getattr(store, add)(make(i)) for i in range(3)]
    wanted = [items[2], items[0], items[1]]

    result = getattr(store, reorder)(wanted)

    assert [x.id for x in result] == [x.id for x in wanted]
    assert [x.id for x in getattr(store, attr)] == [x.id for x in wanted]
    assert [x.order for x in getattr(store, attr)] == [0, 1, 2]

    rows = list_owned_rows(conn, attr, owner_id)
    assert [(r["id"], r["order_index"]) for r in rows] == [(x.id, i) for i, x in enumerate(wanted)]


def test_reorder_with_foreign_item_rolls_back(conn, owner_id, make_owner, store):
    mine = [store.add_tech_stack({"name": f"T{i}", "icon": "<svg/>"}) for i in range(2)]
    other = PortfolioStore(DataService(conn, make_owner("bob")))
    other.fetch_all()
    theirs = other.add_tech_stack({"name": "Theirs", "icon": "<svg/>"})

    with pytest.raises(WriteRejectedError):
        store.reorder_tech_stack([mine[1], theirs, mine[0]])

    assert [x.id for x in store.tech_stack] == [mine[0].id, mine[1].id]
    rows = list_owned_rows(conn, "tech_stack", owner_id)
    assert [(r["id"], r["order_index"]) for r in rows] == [(mine[0].id, 0), (mine[1].id, 1)]


def test_reorder_contact_fields(conn, owner_id, store):
    a = store.add_contact_field({"name": "name", "label": "Name", "type": "text", "required": True})
    b = store.add_contact_field({"name": "email", "label": "Email", "type": "email", "required": True})
    c = store.add_contact_field({"name": "message", "label": "Message", "type": "textarea"})

    store.reorder_contact_fields([c, a, b])

    assert [f.name for f in store.contact_form.fields] == ["message", "name", "email"]
    assert [f.order for f in store.contact_form.fields] == [0, 1, 2]

    fresh = PortfolioStore(DataService(conn, owner_id))
    fresh.fetch_all()
    assert [f.name for f in fresh.contact_form.fields] == ["message", "name", "email"]


# ── personal info ────────────────────────────────────────────────────

def test_update_personal_info_creates_then_merges(conn, owner_id, store):
    assert store.personal_info is None

    store.update_personal_info({"name": "Ana", "location": "Lisbon"})
    info = store.update_personal_info({"job_title": "Backend Engineer"})

    assert info.id == owner_id
    assert (info.name, info.job_title, info.location) == ("Ana", "Backend Engineer", "Lisbon")
    assert get_profile(conn, owner_id)["job_title"] == "Backend Engineer"


# ── contact form ─────────────────────────────────────────────────────

def test_update_contact_form_creates_when_missing(store):
    form = store.update_contact_form({"show_contact_info": True})

    assert form.id
    assert form.title == DEFAULT_CONTACT_FORM_TITLE
    assert form.description == DEFAULT_CONTACT_FORM_DESCRIPTION
    assert form.show_contact_info is True


def test_update_contact_form_updates_existing(store):
    created = store.update_contact_form({"title": "Hello"})
    updated = store.update_contact_form({"description": "Write me"})

    assert updated.id == created.id
    assert (updated.title, updated.description) == ("Hello", "Write me")


def test_first_contact_field_creates_default_form(store):
    field = store.add_contact_field({"name": "name", "label": "Name", "type": "text"})

    assert store.contact_form.title == DEFAULT_CONTACT_FORM_TITLE
    assert store.contact_form.description == DEFAULT_CONTACT_FORM_DESCRIPTION
    assert [f.id for f in store.contact_form.fields] == [field.id]
    assert field.order == 0


def test_first_contact_field_adopts_existing_remote_form(conn, owner_id):
    writer = PortfolioStore(DataService(conn, owner_id))
    writer.fetch_all()
    existing = writer.update_contact_form({"title": "Already here"})

    # A store that has not loaded the form yet
    store = PortfolioStore(DataService(conn, owner_id))
    store.add_contact_field({"name": "email", "label": "Email", "type": "email"})

    assert store.contact_form.id == existing.id
    assert store.contact_form.title == "Already here"


def test_duplicate_contact_field_name_is_a_constraint_violation(store):
    store.add_contact_field({"name": "email", "label": "Email", "type": "email"})

    with pytest.raises(ConstraintViolationError):
        store.add_contact_field({"name": "email", "label": "Email again", "type": "email"})

    assert len(store.contact_form.fields) == 1


def test_update_and_delete_contact_field(conn, owner_id):
    service = CountingDataService(conn, owner_id)
    store = PortfolioStore(service)
    store.fetch_all()
    field = store.add_contact_field({"name": "phone", "label": "Phone", "type": "text"})

    assert store.update_contact_field("missing", {"label": "x"}) is None
    assert service.calls == []

    updated = store.update_contact_field(field.id, {"label": "Phone number", "required": True})
    assert (updated.label, updated.required) == ("Phone number", True)

    cleared = store.update_contact_field(field.id, {"placeholder": None})
    assert cleared.placeholder is None
    assert store.contact_form.fields[0].label == "Phone number"

    assert store.delete_contact_field(field.id) is True
    assert store.contact_form.fields == []


# ── subscriptions and error reporting ────────────────────────────────

def test_subscribers_are_notified_until_unsubscribed(store):
    seen = []
    unsubscribe = store.subscribe(lambda s: seen.append(len(s.social_links)))

    store.add_social_link(_link("GitHub"))
    assert seen[-1] == 1

    unsubscribe()
    count = len(seen)
    store.add_social_link(_link("GitLab"))
    assert len(seen) == count


def test_error_is_cleared_by_the_next_operation(conn):
    store = PortfolioStore(DataService(conn, None))
    with pytest.raises(UnauthenticatedError):
        store.add_social_link(_link())
    assert store.error is not None

    store.fetch_all()
    assert store.error is None
