from __future__ import annotations

from querycat.catalog import OperationKind, bookstore_catalog
from querycat.runner import run


def test_bookstore_catalog_order() -> None:
    """Test that the bookstore catalog keeps the script's operation order."""
    catalog = bookstore_catalog()

    assert catalog.name == "bookstore"
    assert catalog.names() == [
        "fiction_books",
        "published_after_1950",
        "books_by_orwell",
        "update_hobbit_price",
        "delete_moby_dick",
        "in_stock_after_2010",
        "title_author_price",
        "by_price_ascending",
        "by_price_descending",
        "page_1",
        "page_2",
        "average_price_by_genre",
        "most_prolific_author",
        "books_by_decade",
        "index_title",
        "index_author_published_year",
        "explain_title_1984",
    ]


def test_mutations_precede_dependent_reads() -> None:
    """Test that mutations precede dependent reads."""
    kinds = [spec.kind for spec in bookstore_catalog()]

    first_aggregate = kinds.index(OperationKind.AGGREGATE)
    assert kinds.index(OperationKind.UPDATE_ONE) < first_aggregate
    assert kinds.index(OperationKind.DELETE_ONE) < first_aggregate


def test_pagination_and_index_parameters() -> None:
    """Test that the page and index operations carry the expected parameters."""
    catalog = {spec.name: spec for spec in bookstore_catalog()}

    assert (catalog["page_1"].skip, catalog["page_1"].limit) == (0, 5)
    assert (catalog["page_2"].skip, catalog["page_2"].limit) == (5, 5)
    assert catalog["index_author_published_year"].index_keys == {
        "author": 1,
        "published_year": -1,
    }
    assert catalog["update_hobbit_price"].update == {"$set": {"price": 17.99}}


def test_bookstore_catalog_runs_against_store(store) -> None:
    """Test that the whole bookstore catalog runs cleanly against a store."""
    report = run(bookstore_catalog(), store)

    assert len(report) == 17
    assert report.all_ok
    assert store.close_calls == 1
