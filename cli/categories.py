#!/usr/bin/env python3

import sys
import json
from typing import List, Optional, Tuple
from config import get_seed_dir
from models.category import Category
from services.errors import CategoryNotFoundError
from logger import get_logger

logger = get_logger()


def _log_category(category: Category, services=None):
    logger.info(f"ID: {category.id}")
    logger.info(f"Name: {category.name}")
    if category.description:
        logger.info(f"Description: {category.description}")
    if not category.is_root and services is not None:
        parent = services.categories.get_category(category.parent_id)
        parent_name = parent.name if parent else "Unknown"
        logger.info(f"Parent: {parent_name} (ID: {category.parent_id})")


def _log_table(categories: List[Category], services, empty_message: str):
    if not categories:
        logger.info(empty_message)
        return

    logger.info("=" * 80)
    for category in categories:
        _log_category(category, services)
        logger.info("-" * 80)
    logger.info(f"\nTotal categories: {len(categories)}")


def format_tree(categories: List[Category], depth: int = 0) -> List[str]:
    """Render nested categories as indented lines."""
    lines = []
    for category in categories:
        lines.append(f"{'  ' * depth}- {category.name} (ID: {category.id})")
        lines.extend(format_tree(category.subcategories, depth + 1))
    return lines


def cmd_list(args, services):
    """List all categories in the database."""
    logger.info("\nCategories:")
    _log_table(services.categories.get_all_categories(), services, "No categories found.")


def cmd_roots(args, services):
    """List categories that have no parent."""
    logger.info("\nRoot categories:")
    _log_table(
        services.categories.get_root_categories(), services, "No root categories found."
    )


def cmd_children(args, services):
    """List the direct subcategories of a category."""
    if not services.categories.category_exists(args.parent_id):
        raise CategoryNotFoundError(args.parent_id)

    logger.info(f"\nSubcategories of {args.parent_id}:")
    _log_table(
        services.categories.get_sub_categories(args.parent_id),
        services,
        "No subcategories found.",
    )


def cmd_tree(args, services):
    """Show the full category hierarchy."""
    roots = services.categories.get_category_hierarchy()

    if args.json:
        print(json.dumps([root.to_dict() for root in roots], indent=2))
        return

    if not roots:
        logger.info("No categories found.")
        return

    for line in format_tree(roots):
        logger.info(line)


def cmd_show(args, services):
    """Show one category with its path and direct subcategories."""
    category = services.categories.get_category_with_subcategories(args.category_id)
    if category is None:
        raise CategoryNotFoundError(args.category_id)

    path = services.categories.get_category_path(args.category_id)
    _log_category(category)
    logger.info(f"Path: {' > '.join(c.name for c in path)}")
    logger.info(f"Created: {category.created_at}")
    logger.info(f"Updated: {category.updated_at}")

    if category.subcategories:
        logger.info("Subcategories:")
        for child in category.subcategories:
            logger.info(f"  - {child.name} (ID: {child.id})")

    books = services.books.find_by_category(args.category_id)
    logger.info(f"Books: {len(books)}")


def cmd_search(args, services):
    """Search categories by name or description."""
    term = args.term.strip()
    if not term:
        logger.error("Search term cannot be empty.")
        sys.exit(1)

    logger.info(f"\nCategories matching '{term}':")
    _log_table(
        services.categories.search_categories_by_name(term),
        services,
        "No matching categories found.",
    )


def cmd_create(args, services):
    """Interactively create a new category."""
    print("\nCreate New Category")
    print("=" * 80)

    name = input("Category name (e.g., Science Fiction): ").strip()
    if not name:
        logger.error("Category name cannot be empty.")
        sys.exit(1)

    description = input("Description (optional, press Enter to skip): ").strip()
    if not description:
        description = None

    parent_id = None
    parent_input = input("Parent category ID (optional, press Enter to skip): ").strip()
    if parent_input:
        try:
            parent_id = int(parent_input)
        except ValueError:
            logger.error("Parent category ID must be a number.")
            sys.exit(1)

    category = services.categories.create_category(name, description, parent_id)

    logger.info(f"\n✓ Category created successfully with ID: {category.id}")
    logger.info(f"  Name: {category.name}")
    if category.description:
        logger.info(f"  Description: {category.description}")
    if category.parent_id:
        logger.info(f"  Parent ID: {category.parent_id}")


def cmd_update(args, services):
    """Update a category. Unspecified fields keep their current values."""
    current = services.categories.get_category(args.category_id)
    if current is None:
        raise CategoryNotFoundError(args.category_id)

    name = args.name if args.name is not None else current.name
    description = args.description if args.description is not None else current.description
    if args.root:
        parent_id = None
    elif args.parent_id is not None:
        parent_id = args.parent_id
    else:
        parent_id = current.parent_id

    updated = services.categories.update_category(
        args.category_id, name, description, parent_id
    )
    if updated is None:
        raise CategoryNotFoundError(args.category_id)

    logger.info(f"✓ Category '{updated.name}' (ID: {updated.id}) updated.")


def cmd_delete(args, services):
    """Delete a category by ID."""
    category_id = args.category_id

    category = services.categories.get_category(category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)

    logger.info("\nCategory to delete:")
    logger.info(f"  ID: {category.id}")
    logger.info(f"  Name: {category.name}")
    if category.description:
        logger.info(f"  Description: {category.description}")

    if not args.yes:
        confirm = (
            input("\nAre you sure you want to delete this category? (yes/no): ")
            .strip()
            .lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    if not services.categories.delete_category(category_id):
        raise CategoryNotFoundError(category_id)

    logger.info(f"✓ Category '{category.name}' deleted successfully.")


def _find_child(services, parent_id: Optional[int], name: str) -> Optional[Category]:
    if parent_id is None:
        siblings = services.categories.get_root_categories()
    else:
        siblings = services.categories.get_sub_categories(parent_id)
    return next((c for c in siblings if c.name == name), None)


def seed_categories(services, categories_data: list) -> Tuple[int, int]:
    """Create a nested category tree, skipping nodes that already exist.

    A node is considered existing when a sibling under the same parent has
    the same name, so seeding twice is harmless.

    Args:
        services: Services container.
        categories_data: List of {"name", "description", "children"} dicts.

    Returns:
        Tuple of (created_count, skipped_count).
    """
    created_count = 0
    skipped_count = 0

    # (node data, parent id, depth)
    stack = [(data, None, 0) for data in reversed(categories_data)]

    while stack:
        data, parent_id, depth = stack.pop()
        indent = "  " * depth
        name = data.get("name")

        if not name:
            logger.warning(f"{indent}Skipping category with no name")
            continue

        existing = _find_child(services, parent_id, name)
        if existing:
            logger.info(f"{indent}⊘ Skipped '{name}' (already exists)")
            skipped_count += 1
            category = existing
        else:
            category = services.categories.create_category(
                name, data.get("description"), parent_id
            )
            logger.info(f"{indent}✓ Created '{name}' (ID: {category.id})")
            created_count += 1

        for child in reversed(data.get("children", [])):
            stack.append((child, category.id, depth + 1))

    return created_count, skipped_count


def cmd_seed(args, services):
    """Seed categories from JSON file."""
    seed_file = get_seed_dir() / "categories.json"

    if not seed_file.exists():
        logger.error(f"Seed file not found: {seed_file}")
        sys.exit(1)

    try:
        with open(seed_file, "r") as f:
            categories_data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing JSON file: {e}")
        sys.exit(1)

    logger.info("\nSeeding categories from db/seed/categories.json")
    logger.info("=" * 80)

    created_count, skipped_count = seed_categories(services, categories_data)

    logger.info("=" * 80)
    logger.info("\nSeeding complete!")
    logger.info(f"Created: {created_count}")
    logger.info(f"Skipped: {skipped_count}")
    logger.info(f"Total: {created_count + skipped_count}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="Create, browse, reparent and delete book categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="List all categories")
    list_parser.set_defaults(func=cmd_list)

    roots_parser = categories_subparsers.add_parser(
        "roots", help="List top-level categories"
    )
    roots_parser.set_defaults(func=cmd_roots)

    children_parser = categories_subparsers.add_parser(
        "children", help="List direct subcategories of a category"
    )
    children_parser.add_argument("parent_id", type=int, help="ID of the parent category")
    children_parser.set_defaults(func=cmd_children)

    tree_parser = categories_subparsers.add_parser(
        "tree", help="Show the full category hierarchy"
    )
    tree_parser.add_argument(
        "--json", action="store_true", help="Print the hierarchy as JSON"
    )
    tree_parser.set_defaults(func=cmd_tree)

    show_parser = categories_subparsers.add_parser("show", help="Show a category")
    show_parser.add_argument("category_id", type=int, help="ID of the category")
    show_parser.set_defaults(func=cmd_show)

    search_parser = categories_subparsers.add_parser(
        "search", help="Search categories by name or description"
    )
    search_parser.add_argument("term", help="Case-insensitive text to search for")
    search_parser.set_defaults(func=cmd_search)

    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category interactively"
    )
    create_parser.set_defaults(func=cmd_create)

    update_parser = categories_subparsers.add_parser(
        "update", help="Rename, describe or reparent a category"
    )
    update_parser.add_argument("category_id", type=int, help="ID of the category")
    update_parser.add_argument("--name", help="New name")
    update_parser.add_argument("--description", help="New description")
    parent_group = update_parser.add_mutually_exclusive_group()
    parent_group.add_argument("--parent-id", type=int, help="New parent category ID")
    parent_group.add_argument(
        "--root", action="store_true", help="Detach from parent (make top-level)"
    )
    update_parser.set_defaults(func=cmd_update)

    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete a category by ID"
    )
    delete_parser.add_argument(
        "category_id",
        type=int,
        help="ID of the category to delete",
    )
    delete_parser.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )
    delete_parser.set_defaults(func=cmd_delete)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed categories from JSON file"
    )
    seed_parser.set_defaults(func=cmd_seed)
