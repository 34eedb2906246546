import random

import pytest

from services.errors import (
    CategoryError,
    CategoryHasDependentsError,
    InvalidCategoryNameError,
    InvalidParentAssignmentError,
    InvalidParentError,
)
from tests.helpers import create_chain, force_parent, has_cycle


class TestCreateCategory:
    """Tests for CategoryService.create_category."""

    def test_create_category_simple(self, services):
        """Test creating a root category."""
        category = services.categories.create_category("Fiction", "Imaginative works")

        assert category.id is not None
        assert category.id > 0
        assert category.name == "Fiction"
        assert category.description == "Imaginative works"
        assert category.parent_id is None
        assert category.created_at == category.updated_at

    def test_create_category_with_parent(self, services):
        """Test creating a category under an existing parent."""
        parent = services.categories.create_category("Fiction")
        child = services.categories.create_category(
            "Fantasy", "Magic and myth", parent_id=parent.id
        )

        assert child.parent_id == parent.id
        assert services.categories.get_category(child.id).parent_id == parent.id

    def test_create_category_without_description(self, services):
        """Test creating a category without a description."""
        category = services.categories.create_category("Reference")

        assert category.description is None

    def test_create_with_missing_parent_raises(self, services):
        """Test that a nonexistent parent is rejected and nothing is stored."""
        with pytest.raises(InvalidParentError) as exc_info:
            services.categories.create_category("X", parent_id=9999)

        assert exc_info.value.parent_id == 9999
        assert "9999" in str(exc_info.value)
        assert services.categories.get_all_categories() == []

    @pytest.mark.parametrize("name", ["", "   "])
    def test_create_with_blank_name_raises(self, services, name):
        """Test that blank names are rejected."""
        with pytest.raises(InvalidCategoryNameError):
            services.categories.create_category(name)

        assert services.categories.get_all_categories() == []

    def test_blank_name_error_is_value_error(self, services):
        """Test that a blank name can be handled as a plain ValueError."""
        with pytest.raises(ValueError):
            services.categories.create_category("")

    def test_duplicate_names_are_allowed(self, services):
        """Test that names need not be unique across the forest."""
        fiction = services.categories.create_category("Fiction")
        kids = services.categories.create_category("Children")
        services.categories.create_category("Classics", parent_id=fiction.id)
        services.categories.create_category("Classics", parent_id=kids.id)

        assert len(services.categories.search_categories_by_name("Classics")) == 2


class TestUpdateCategory:
    """Tests for CategoryService.update_category."""

    def test_round_trip_update(self, services):
        """Test that an updated name is read back with a later updated_at."""
        category = services.categories.create_category("Old Name", "Description")

        updated = services.categories.update_category(
            category.id, "New Name", "Description"
        )

        assert updated.id == category.id
        assert updated.name == "New Name"

        found = services.categories.get_category(category.id)
        assert found.name == "New Name"
        assert found.created_at == category.created_at
        assert found.updated_at >= found.created_at

    def test_update_missing_returns_none(self, services):
        """Test that updating an unknown ID returns None."""
        assert services.categories.update_category(9999, "Name") is None

    def test_update_sets_parent(self, services):
        """Test reparenting a root category under another."""
        parent = services.categories.create_category("Non-Fiction")
        child = services.categories.create_category("History")

        updated = services.categories.update_category(
            child.id, "History", parent_id=parent.id
        )

        assert updated.parent_id == parent.id
        assert services.categories.get_category(child.id).parent_id == parent.id

    def test_update_without_parent_makes_root(self, services):
        """Test that omitting parent_id detaches the category."""
        parent, child = create_chain(services, "Parent", "Child")

        updated = services.categories.update_category(child.id, "Child")

        assert updated.parent_id is None
        assert {c.id for c in services.categories.get_root_categories()} == {
            parent.id,
            child.id,
        }

    def test_update_all_fields_at_once(self, services):
        """Test updating name, description and parent together."""
        parent1 = services.categories.create_category("Parent1")
        parent2 = services.categories.create_category("Parent2")
        category = services.categories.create_category(
            "OldName", "Old description", parent_id=parent1.id
        )

        services.categories.update_category(
            category.id, "NewName", "New description", parent_id=parent2.id
        )

        found = services.categories.get_category(category.id)
        assert found.name == "NewName"
        assert found.description == "New description"
        assert found.parent_id == parent2.id

    def test_self_parent_rejected(self, services):
        """Test that a category cannot become its own parent."""
        category = services.categories.create_category("Fiction")

        with pytest.raises(InvalidParentAssignmentError) as exc_info:
            services.categories.update_category(
                category.id, "Fiction", parent_id=category.id
            )

        assert exc_info.value.category_id == category.id
        assert exc_info.value.parent_id == category.id

    def test_cycle_rejected(self, services):
        """Test that A cannot move under its grandchild C."""
        a, b, c = create_chain(services, "A", "B", "C")

        with pytest.raises(InvalidParentAssignmentError):
            services.categories.update_category(a.id, "A", parent_id=c.id)

        assert not has_cycle(services.categories.get_all_categories())
        assert [r.id for r in services.categories.get_root_categories()] == [a.id]
        assert services.categories.get_category(a.id).parent_id is None

    def test_grandchild_moves_under_grandparent(self, services):
        """Test that C can be attached directly to its grandparent A."""
        a, b, c = create_chain(services, "A", "B", "C")

        updated = services.categories.update_category(c.id, "C", parent_id=a.id)

        assert updated.parent_id == a.id
        hierarchy = services.categories.get_category_hierarchy()
        assert [r.id for r in hierarchy] == [a.id]
        assert {s.id for s in hierarchy[0].subcategories} == {b.id, c.id}

    def test_missing_parent_rejected_on_update(self, services):
        """Test that reparenting under an unknown ID fails."""
        category = services.categories.create_category("Fiction")

        with pytest.raises(InvalidParentAssignmentError):
            services.categories.update_category(category.id, "Fiction", parent_id=9999)

    def test_rejected_update_changes_nothing(self, services):
        """Test that a failed reparent leaves name and parent untouched."""
        a, b, c = create_chain(services, "A", "B", "C")

        with pytest.raises(InvalidParentAssignmentError):
            services.categories.update_category(a.id, "Renamed", parent_id=b.id)

        found = services.categories.get_category(a.id)
        assert found.name == "A"
        assert found.parent_id is None
        assert found.updated_at == a.updated_at

    def test_update_with_blank_name_raises(self, services):
        """Test that renaming to a blank name fails."""
        category = services.categories.create_category("Fiction")

        with pytest.raises(InvalidCategoryNameError):
            services.categories.update_category(category.id, " ")

    def test_moving_subtree_under_sibling(self, services):
        """Test that a subtree may move under an unrelated branch."""
        root = services.categories.create_category("Root")
        left = services.categories.create_category("Left", parent_id=root.id)
        right = services.categories.create_category("Right", parent_id=root.id)
        leaf = services.categories.create_category("Leaf", parent_id=left.id)

        services.categories.update_category(left.id, "Left", parent_id=right.id)

        path = services.categories.get_category_path(leaf.id)
        assert [c.name for c in path] == ["Root", "Right", "Left", "Leaf"]


class TestDeleteCategory:
    """Tests for CategoryService.delete_category."""

    def test_leaf_deletion_succeeds(self, services):
        """Test that a leaf without books is deleted."""
        category = services.categories.create_category("Leaf")

        assert services.categories.delete_category(category.id) is True
        assert services.categories.category_exists(category.id) is False

    def test_delete_missing_returns_false(self, services):
        """Test that deleting an unknown ID returns False."""
        assert services.categories.delete_category(9999) is False

    def test_non_leaf_deletion_blocked(self, services):
        """Test that a category with a child cannot be deleted."""
        parent, child = create_chain(services, "Parent", "Child")

        with pytest.raises(CategoryHasDependentsError) as exc_info:
            services.categories.delete_category(parent.id)

        assert exc_info.value.category_id == parent.id
        assert services.categories.category_exists(parent.id) is True
        assert services.categories.category_exists(child.id) is True

    def test_category_with_books_blocked(self, services):
        """Test that a category linked to a book cannot be deleted."""
        category = services.categories.create_category("Mystery")
        book = services.books.create("The Hound of the Baskervilles")
        services.books.link_category(book.id, category.id)

        with pytest.raises(CategoryHasDependentsError):
            services.categories.delete_category(category.id)

        assert services.categories.category_exists(category.id) is True

    def test_delete_bottom_up(self, services):
        """Test that a chain can be removed leaf first."""
        a, b, c = create_chain(services, "A", "B", "C")

        assert services.categories.delete_category(c.id) is True
        assert services.categories.delete_category(b.id) is True
        assert services.categories.delete_category(a.id) is True
        assert services.categories.get_all_categories() == []

    def test_can_delete_category(self, services):
        """Test the service-level guard query."""
        parent, child = create_chain(services, "Parent", "Child")

        assert services.categories.can_delete_category(parent.id) is False
        assert services.categories.can_delete_category(child.id) is True
        assert services.categories.can_delete_category(9999) is False

    def test_errors_share_base_class(self, services):
        """Test that callers can catch every category failure at once."""
        parent, child = create_chain(services, "Parent", "Child")

        with pytest.raises(CategoryError):
            services.categories.delete_category(parent.id)


class TestCategoryQueries:
    """Tests for the read operations of CategoryService."""

    def test_root_retrieval(self, services):
        """Test that only parentless categories are roots."""
        a = services.categories.create_category("A")
        services.categories.create_category("B", parent_id=a.id)

        roots = services.categories.get_root_categories()

        assert [r.id for r in roots] == [a.id]

    def test_get_sub_categories(self, services):
        """Test that direct children are returned, grandchildren are not."""
        a, b, c = create_chain(services, "A", "B", "C")
        d = services.categories.create_category("D", parent_id=a.id)

        subs = services.categories.get_sub_categories(a.id)

        assert {s.id for s in subs} == {b.id, d.id}

    def test_get_category_with_subcategories(self, services):
        """Test that a category is returned with its direct children attached."""
        a, b, c = create_chain(services, "A", "B", "C")

        category = services.categories.get_category_with_subcategories(a.id)

        assert category.id == a.id
        assert [s.id for s in category.subcategories] == [b.id]
        assert category.subcategories[0].subcategories == []

    def test_get_category_with_subcategories_missing(self, services):
        """Test that a missing category yields None."""
        assert services.categories.get_category_with_subcategories(9999) is None

    def test_hierarchy_nests_subtrees(self, services):
        """Test that the hierarchy returns roots with nested children."""
        fiction = services.categories.create_category("Fiction")
        scifi = services.categories.create_category("Science Fiction", parent_id=fiction.id)
        services.categories.create_category("Fantasy", parent_id=fiction.id)
        services.categories.create_category("Cyberpunk", parent_id=scifi.id)
        services.categories.create_category("Reference")

        hierarchy = services.categories.get_category_hierarchy()

        assert [r.name for r in hierarchy] == ["Fiction", "Reference"]
        fiction_node = hierarchy[0]
        assert [c.name for c in fiction_node.subcategories] == [
            "Fantasy",
            "Science Fiction",
        ]
        assert [c.name for c in fiction_node.subcategories[1].subcategories] == [
            "Cyberpunk"
        ]
        assert hierarchy[1].subcategories == []

    def test_hierarchy_empty(self, services):
        """Test that an empty store yields an empty hierarchy."""
        assert services.categories.get_category_hierarchy() == []

    def test_hierarchy_to_dict(self, services):
        """Test that the hierarchy serializes with nested subcategories."""
        a, b = create_chain(services, "A", "B")

        data = [root.to_dict() for root in services.categories.get_category_hierarchy()]

        assert data[0]["name"] == "A"
        assert data[0]["subcategories"][0]["id"] == b.id
        assert data[0]["subcategories"][0]["parent_id"] == a.id
        assert data[0]["subcategories"][0]["subcategories"] == []

    def test_hierarchy_survives_corrupt_cycle(self, services, test_db):
        """Test that a stored cycle does not hang hierarchy construction."""
        a, b, c = create_chain(services, "A", "B", "C")
        root = services.categories.create_category("Root")
        force_parent(test_db, a.id, c.id)

        hierarchy = services.categories.get_category_hierarchy()

        assert [r.id for r in hierarchy] == [root.id]

    def test_get_category_path(self, services):
        """Test that the path runs from the root down to the category."""
        a, b, c = create_chain(services, "A", "B", "C")

        assert [p.id for p in services.categories.get_category_path(c.id)] == [
            a.id,
            b.id,
            c.id,
        ]
        assert [p.id for p in services.categories.get_category_path(a.id)] == [a.id]
        assert services.categories.get_category_path(9999) == []

    def test_get_category_path_survives_corrupt_cycle(self, services, test_db):
        """Test that a stored cycle does not hang the ancestor walk."""
        a, b, c = create_chain(services, "A", "B", "C")
        force_parent(test_db, a.id, c.id)

        path = services.categories.get_category_path(c.id)

        assert {p.id for p in path} == {a.id, b.id, c.id}

    def test_search_categories_by_name(self, services):
        """Test case-insensitive search through the service."""
        services.categories.create_category("Science Fiction")
        services.categories.create_category("Computer Science", "Programming")
        services.categories.create_category("Poetry")

        names = [c.name for c in services.categories.search_categories_by_name("SCIENCE")]

        assert names == ["Computer Science", "Science Fiction"]

    def test_search_categories_with_accented_term(self, services):
        """Test that searching in a different case finds accented names."""
        services.categories.create_category("Éducation")
        services.categories.create_category("Education Policy")

        names = [c.name for c in services.categories.search_categories_by_name("éducation")]

        assert names == ["Éducation"]

    def test_category_exists(self, services):
        """Test existence checks."""
        category = services.categories.create_category("Fiction")

        assert services.categories.category_exists(category.id) is True
        assert services.categories.category_exists(9999) is False

    def test_is_valid_parent(self, services):
        """Test the service-level validator query."""
        a, b = create_chain(services, "A", "B")

        assert services.categories.is_valid_parent(b.id, a.id) is True
        assert services.categories.is_valid_parent(a.id, b.id) is False
        assert services.categories.is_valid_parent(None, a.id) is True


class TestAcyclicity:
    """The forest stays acyclic under any sequence of accepted mutations."""

    def test_random_reparenting_never_creates_cycle(self, services):
        """Test many random creates and reparents against the cycle checker."""
        rng = random.Random(20240501)
        ids = []

        for i in range(40):
            parent_id = rng.choice(ids) if ids and rng.random() < 0.7 else None
            ids.append(services.categories.create_category(f"N{i}", parent_id=parent_id).id)

        accepted = 0
        for _ in range(200):
            category_id = rng.choice(ids)
            parent_id = rng.choice(ids + [None])
            try:
                services.categories.update_category(
                    category_id, f"N{category_id}", parent_id=parent_id
                )
                accepted += 1
            except InvalidParentAssignmentError:
                pass

            assert not has_cycle(services.categories.get_all_categories())

        assert accepted > 0
