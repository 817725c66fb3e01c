"""
The fixed bookstore catalog: CRUD queries, advanced queries, aggregation
pipelines and indexing against the ``books`` collection.

Order matters. The price update and the delete run before the later finds
and aggregations, which therefore observe the mutated collection.
"""
from __future__ import annotations

from .models import ASCENDING, DESCENDING, Catalog, OperationKind, OperationSpec

PAGE_SIZE = 5


def bookstore_catalog() -> Catalog:
    find = OperationKind.FIND
    return Catalog(
        "bookstore",
        [
            # Basic CRUD
            OperationSpec("fiction_books", find, filter={"genre": "Fiction"}),
            OperationSpec(
                "published_after_1950", find, filter={"published_year": {"$gt": 1950}}
            ),
            OperationSpec("books_by_orwell", find, filter={"author": "George Orwell"}),
            OperationSpec(
                "update_hobbit_price",
                OperationKind.UPDATE_ONE,
                filter={"title": "The Hobbit"},
                update={"price": 17.99},
            ),
            OperationSpec(
                "delete_moby_dick", OperationKind.DELETE_ONE, filter={"title": "Moby Dick"}
            ),
            # Advanced queries
            OperationSpec(
                "in_stock_after_2010",
                find,
                filter={"in_stock": True, "published_year": {"$gt": 2010}},
            ),
            OperationSpec(
                "title_author_price",
                find,
                filter={},
                projection={"title": 1, "author": 1, "price": 1, "_id": 0},
            ),
            OperationSpec("by_price_ascending", find, sort={"price": ASCENDING}),
            OperationSpec("by_price_descending", find, sort={"price": DESCENDING}),
            OperationSpec("page_1", find, limit=PAGE_SIZE),
            OperationSpec("page_2", find, skip=PAGE_SIZE, limit=PAGE_SIZE),
            # Aggregation pipelines
            OperationSpec(
                "average_price_by_genre",
                OperationKind.AGGREGATE,
                pipeline=[{"$group": {"_id": "$genre", "avgPrice": {"$avg": "$price"}}}],
            ),
            OperationSpec(
                "most_prolific_author",
                OperationKind.AGGREGATE,
                pipeline=[
                    {"$group": {"_id": "$author", "count": {"$sum": 1}}},
                    {"$sort": {"count": -1}},
                    {"$limit": 1},
                ],
            ),
            OperationSpec(
                "books_by_decade",
                OperationKind.AGGREGATE,
                pipeline=[
                    {
                        "$group": {
                            "_id": {
                                "$multiply": [
                                    {"$floor": {"$divide": ["$published_year", 10]}},
                                    10,
                                ]
                            },
                            "count": {"$sum": 1},
                        }
                    },
                    {"$sort": {"_id": 1}},
                ],
            ),
            # Indexing
            OperationSpec(
                "index_title", OperationKind.CREATE_INDEX, index_keys={"title": ASCENDING}
            ),
            OperationSpec(
                "index_author_published_year",
                OperationKind.CREATE_INDEX,
                index_keys={"author": ASCENDING, "published_year": DESCENDING},
            ),
            OperationSpec("explain_title_1984", OperationKind.EXPLAIN, filter={"title": "1984"}),
        ],
    )
