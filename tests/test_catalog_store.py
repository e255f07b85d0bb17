"""Unit tests for catalog/store.py -- stack registry and content persistence.

Covers:
- stack create/list, exact-name conflict, case-sensitive names, empty fields
- stack update: full replace, unknown id -> StackNotFound, name clash -> StackConflict
- stack delete: unconditional, no cascade into content snapshots
- resolve_stacks(): requested order, de-duplication, all-or-nothing
- owner-scoped content update/delete report zero-row matches as False
"""

import pytest

from catalog.models import Content
from catalog.store import CatalogStore
from core.errors import DuplicateStackNames, InvalidStack, PartialResolution, StackConflict, StackNotFound


@pytest.fixture
def store():
    s = CatalogStore("sqlite:///:memory:")
    yield s
    s.close()


# ---------------------------------------------------------------------------
# Stacks
# ---------------------------------------------------------------------------


class TestStackCreate:
    def test_create_assigns_id_and_lists(self, store: CatalogStore) -> None:
        go = store.create_stack("go", "blue")
        assert go.id is not None
        assert store.list_stacks() == [go]

    def test_duplicate_name_conflicts(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        with pytest.raises(StackConflict):
            store.create_stack("go", "green")
        assert len(store.list_stacks()) == 1

    def test_names_are_case_sensitive(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        store.create_stack("Go", "blue")
        assert [s.name for s in store.list_stacks()] == ["go", "Go"]

    @pytest.mark.parametrize("name,color", [("", "blue"), ("go", ""), ("   ", "blue")])
    def test_empty_fields_invalid(self, store: CatalogStore, name: str, color: str) -> None:
        with pytest.raises(InvalidStack):
            store.create_stack(name, color)


class TestStackUpdateDelete:
    def test_update_replaces_both_fields(self, store: CatalogStore) -> None:
        go = store.create_stack("go", "blue")
        updated = store.update_stack(go.id, "golang", "cyan")
        assert updated.id == go.id
        assert store.list_stacks()[0].name == "golang"
        assert store.list_stacks()[0].color == "cyan"

    def test_update_unknown_id(self, store: CatalogStore) -> None:
        with pytest.raises(StackNotFound):
            store.update_stack(999, "go", "blue")

    def test_update_to_taken_name(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        rust = store.create_stack("rust", "orange")
        with pytest.raises(StackConflict):
            store.update_stack(rust.id, "go", "orange")

    def test_update_empty_field(self, store: CatalogStore) -> None:
        go = store.create_stack("go", "blue")
        with pytest.raises(InvalidStack):
            store.update_stack(go.id, "go", "")

    def test_delete_unknown_id_is_not_an_error(self, store: CatalogStore) -> None:
        assert store.delete_stack(12345) is False

    def test_delete_removes_stack(self, store: CatalogStore) -> None:
        go = store.create_stack("go", "blue")
        assert store.delete_stack(go.id) is True
        assert store.list_stacks() == []


class TestResolveStacks:
    def test_returns_requested_order(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        store.create_stack("rust", "orange")
        store.create_stack("python", "yellow")
        resolved = store.resolve_stacks(["python", "go"])
        assert [s.name for s in resolved] == ["python", "go"]

    def test_unknown_name_rejects_batch(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        with pytest.raises(PartialResolution) as excinfo:
            store.resolve_stacks(["go", "rust", "zig"])
        assert excinfo.value.missing == ["rust", "zig"]

    def test_repeated_names_rejected(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        store.create_stack("rust", "orange")
        with pytest.raises(DuplicateStackNames) as excinfo:
            store.resolve_stacks(["go", "rust", "go"])
        assert excinfo.value.repeated == ["go"]
        assert excinfo.value.status_code == 400

    def test_result_matches_request_length(self, store: CatalogStore) -> None:
        store.create_stack("go", "blue")
        store.create_stack("rust", "orange")
        assert len(store.resolve_stacks(["go", "rust"])) == 2

    def test_empty_request(self, store: CatalogStore) -> None:
        assert store.resolve_stacks([]) == []


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class TestContent:
    def test_insert_and_list_by_owner(self, store: CatalogStore) -> None:
        store.insert_content(Content(user_id=1, name="a"))
        store.insert_content(Content(user_id=2, name="b"))
        store.insert_content(Content(user_id=1, name="c"))
        assert [c.name for c in store.list_contents(user_id=1)] == ["a", "c"]
        assert [c.name for c in store.list_contents()] == ["a", "b", "c"]

    def test_snapshots_survive_stack_edit_and_delete(self, store: CatalogStore) -> None:
        go = store.create_stack("go", "blue")
        created = store.insert_content(Content(user_id=1, name="site", stack=store.resolve_stacks(["go"])))

        store.update_stack(go.id, "golang", "cyan")
        assert store.get_content(created.id).stack[0].name == "go"
        assert store.get_content(created.id).stack[0].color == "blue"

        store.delete_stack(go.id)
        assert store.get_content(created.id).stack == [go]

    def test_owned_update_requires_matching_owner(self, store: CatalogStore) -> None:
        created = store.insert_content(Content(user_id=1, name="site"))
        fields = dict(name="new", description="d", url="u", img_url="i", stack=[])
        assert store.update_owned_content(created.id, 2, **fields) is False
        assert store.get_content(created.id).name == "site"
        assert store.update_owned_content(created.id, 1, **fields) is True
        assert store.get_content(created.id).description == "d"

    def test_owned_delete_requires_matching_owner(self, store: CatalogStore) -> None:
        created = store.insert_content(Content(user_id=1, name="site"))
        assert store.delete_owned_content(created.id, 2) is False
        assert store.get_content(created.id) is not None
        assert store.delete_owned_content(created.id, 1) is True
        assert store.get_content(created.id) is None
