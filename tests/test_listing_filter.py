from __future__ import annotations

from datetime import datetime

from app.core.config import Config
from app.database import MAX_ID
from app.models.listings import ListingStatus
from app.services.listing_filter import MAX_PAGE, ListingQueryOptions, build_listing_query
from factories import make_listing


def _ids(page) -> list[int]:
    return [listing.id for listing in page.listings]


def test_category_filter_includes_subcategories(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(1, category_id=3, title="Laptop"),
        make_listing(2, category_id=1, title="Cable"),
        make_listing(3, category_id=4, title="Novel"),
    ])
    db.commit()

    page = build_listing_query(db, ListingQueryOptions(category_id=1))
    assert sorted(_ids(page)) == [1, 2]
    assert page.total_count == 2

    page = build_listing_query(db, ListingQueryOptions(category_id=2))
    assert _ids(page) == [1]


def test_unknown_category_matches_nothing(electronics_tree) -> None:
    db = electronics_tree
    db.add(make_listing(1, category_id=3))
    db.commit()

    page = build_listing_query(db, ListingQueryOptions(category_id=999))
    assert page.listings == []
    assert page.total_count == 0


def test_without_category_lists_everything_but_sold(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(1, category_id=3),
        make_listing(2, category_id=None),
        make_listing(3, category_id=1, status=ListingStatus.SOLD),
        make_listing(4, category_id=4, status=ListingStatus.DRAFT),
    ])
    db.commit()

    page = build_listing_query(db, ListingQueryOptions())
    assert sorted(_ids(page)) == [1, 2, 4]
    assert page.total_count == 3


def test_search_is_case_insensitive_on_title_and_long_description(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(1, category_id=3, title="Gaming LAPTOP"),
        make_listing(2, category_id=3, title="Bag", long_description="fits a laptop up to 15 inches"),
        make_listing(3, category_id=3, title="Mouse"),
    ])
    db.commit()

    page = build_listing_query(db, ListingQueryOptions(search_term="laptop"))
    assert sorted(_ids(page)) == [1, 2]


def test_search_treats_wildcards_literally(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(1, category_id=None, title="100% cotton shirt"),
        make_listing(2, category_id=None, title="1000 piece puzzle"),
    ])
    db.commit()

    page = build_listing_query(db, ListingQueryOptions(search_term="100%"))
    assert _ids(page) == [1]


def test_blank_search_term_is_ignored(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([make_listing(1, category_id=None), make_listing(2, category_id=None)])
    db.commit()

    page = build_listing_query(db, ListingQueryOptions(search_term="   "))
    assert page.total_count == 2


def test_default_sort_is_newest_first(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(1, category_id=None, created_at=datetime(2024, 3, 1)),
        make_listing(2, category_id=None, created_at=datetime(2024, 5, 1)),
        make_listing(3, category_id=None, created_at=datetime(2024, 4, 1)),
    ])
    db.commit()

    assert _ids(build_listing_query(db, ListingQueryOptions())) == [2, 3, 1]


def test_price_sort_breaks_ties_by_id(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(4, category_id=None, price="5.00"),
        make_listing(2, category_id=None, price="5.00"),
        make_listing(3, category_id=None, price="1.00"),
        make_listing(1, category_id=None, price="5.00"),
    ])
    db.commit()

    asc = build_listing_query(db, ListingQueryOptions(sort_by="price", sort_order="asc"))
    assert _ids(asc) == [3, 1, 2, 4]
    desc = build_listing_query(db, ListingQueryOptions(sort_by="price", sort_order="desc"))
    assert _ids(desc) == [1, 2, 4, 3]


def test_pagination_and_total_count(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([make_listing(i, category_id=None, price="5.00") for i in range(1, 8)])
    db.commit()

    options = ListingQueryOptions(sort_by="price", sort_order="asc", page=2, page_size=3)
    page = build_listing_query(db, options)
    assert _ids(page) == [4, 5, 6]
    assert page.total_count == 7
    assert (page.page, page.page_size) == (2, 3)

    last = build_listing_query(db, ListingQueryOptions(sort_by="price", sort_order="asc", page=3, page_size=3))
    assert _ids(last) == [7]


def test_repeated_queries_return_identical_pages(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([
        make_listing(i, category_id=3, created_at=datetime(2024, 1, 1)) for i in range(1, 15)
    ])
    db.commit()

    options = ListingQueryOptions(page=1, page_size=10)
    first = build_listing_query(db, options)
    second = build_listing_query(db, options)
    assert _ids(first) == _ids(second) == list(range(1, 11))


def test_paging_values_are_clamped() -> None:
    options = ListingQueryOptions(page=0, page_size=-5).normalized()
    assert (options.page, options.page_size) == (1, 1)

    options = ListingQueryOptions(page=-3, page_size=10_000).normalized()
    assert (options.page, options.page_size) == (1, Config.MAX_PAGE_SIZE)

    options = ListingQueryOptions().normalized()
    assert options.page_size == Config.DEFAULT_PAGE_SIZE
    assert options.offset == 0


def test_short_listing_carries_category_name(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([make_listing(1, category_id=3), make_listing(2, category_id=None)])
    db.commit()

    page = build_listing_query(db, ListingQueryOptions(sort_by="date", sort_order="asc"))
    assert [(item.category_id, item.category) for item in page.listings] == [(3, "Laptops"), (None, None)]


def test_out_of_range_category_matches_nothing(electronics_tree) -> None:
    db = electronics_tree
    db.add(make_listing(1, category_id=3))
    db.commit()

    for category_id in (2**64, -(2**64), 0):
        page = build_listing_query(db, ListingQueryOptions(category_id=category_id))
        assert page.listings == []
        assert page.total_count == 0


def test_huge_page_is_clamped_and_stays_queryable(electronics_tree) -> None:
    db = electronics_tree
    db.add_all([make_listing(1, category_id=3), make_listing(2, category_id=4)])
    db.commit()

    options = ListingQueryOptions(page=2**62, page_size=Config.MAX_PAGE_SIZE).normalized()
    assert options.page == MAX_PAGE
    assert options.offset <= MAX_ID

    page = build_listing_query(db, ListingQueryOptions(page=2**62))
    assert page.listings == []
    assert page.total_count == 2
