#!/usr/bin/env python3

from services.errors import BookNotFoundError
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List all books in the database."""
    books = services.books.find_all()

    if not books:
        logger.info("No books found.")
        return

    logger.info("\nBooks:")
    logger.info("=" * 80)
    for book in books:
        logger.info(f"ID: {book.id}")
        logger.info(f"Title: {book.title}")
        if book.isbn:
            logger.info(f"ISBN: {book.isbn}")
        logger.info("-" * 80)

    logger.info(f"\nTotal books: {len(books)}")


def cmd_create(args, services):
    """Create a new book."""
    book = services.books.create(args.title, args.isbn)
    logger.info(f"✓ Book created successfully with ID: {book.id}")


def cmd_link(args, services):
    """Attach a book to a category."""
    services.books.link_category(args.book_id, args.category_id)
    logger.info(f"✓ Book {args.book_id} linked to category {args.category_id}")


def cmd_unlink(args, services):
    """Detach a book from a category."""
    if services.books.find(args.book_id) is None:
        raise BookNotFoundError(args.book_id)

    if services.books.unlink_category(args.book_id, args.category_id):
        logger.info(f"✓ Book {args.book_id} unlinked from category {args.category_id}")
    else:
        logger.info(f"Book {args.book_id} was not linked to category {args.category_id}")


def setup_parser(subparsers):
    """Setup books subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "books",
        help="Manage books",
        description="Create books and link them to categories",
    )

    books_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available book commands",
        dest="subcommand",
        required=True,
    )

    list_parser = books_subparsers.add_parser("list", help="List all books")
    list_parser.set_defaults(func=cmd_list)

    create_parser = books_subparsers.add_parser("create", help="Create a new book")
    create_parser.add_argument("title", help="Book title")
    create_parser.add_argument("--isbn", help="Optional ISBN")
    create_parser.set_defaults(func=cmd_create)

    for name, func, help_text in (
        ("link", cmd_link, "Link a book to a category"),
        ("unlink", cmd_unlink, "Unlink a book from a category"),
    ):
        link_parser = books_subparsers.add_parser(name, help=help_text)
        link_parser.add_argument("book_id", type=int, help="ID of the book")
        link_parser.add_argument("category_id", type=int, help="ID of the category")
        link_parser.set_defaults(func=func)
