from unittest.mock import MagicMock

from conftest import item_ids, make_response
from miruro_search.pagination import PaginationController, ResultSet


def make_controller(max_page=10, pending=False):
    results = ResultSet()
    on_page_change = MagicMock()
    controller = PaginationController(
        results,
        max_page=max_page,
        on_page_change=on_page_change,
        fetch_pending=lambda: pending,
    )
    return controller, results, on_page_change


def test_first_page_replaces_later_pages_append():
    controller, results, _ = make_controller()

    controller.merge_response(1, make_response("a", "b", has_next=True))
    controller.merge_response(2, make_response("c", has_next=False))

    assert item_ids(results) == ["a", "b", "c"]
    assert results.has_next_page is False


def test_page_one_response_replaces_existing_items():
    controller, results, _ = make_controller()
    controller.merge_response(1, make_response("a", "b"))

    controller.merge_response(1, make_response("z"))

    assert item_ids(results) == ["z"]


def test_request_more_advances_and_notifies():
    controller, _, on_page_change = make_controller()

    assert controller.request_more() is True
    assert controller.page == 2
    on_page_change.assert_called_once()


def test_request_more_is_noop_while_fetch_pending():
    controller, _, on_page_change = make_controller(pending=True)

    assert controller.request_more() is False
    assert controller.page == 1
    on_page_change.assert_not_called()


def test_page_is_capped():
    controller, results, on_page_change = make_controller(max_page=10)
    results.has_next_page = True

    for _ in range(20):
        controller.request_more()

    assert controller.page == 10
    assert on_page_change.call_count == 9
    assert controller.capped is True
    assert controller.can_load_more is False


def test_filter_change_starts_over():
    controller, results, _ = make_controller()
    controller.merge_response(1, make_response("a", has_next=True))
    controller.request_more()

    controller.on_query_or_filter_change()

    assert controller.page == 1
    assert results.items == []
    assert results.has_next_page is False


def test_failed_load_more_steps_back_a_page():
    controller, _, _ = make_controller()
    controller.request_more()

    controller.on_fetch_failed(2)

    assert controller.page == 1
    assert controller.request_more() is True
    assert controller.page == 2


def test_failed_first_page_keeps_page_one():
    controller, _, _ = make_controller()

    controller.on_fetch_failed(1)

    assert controller.page == 1


def test_failure_for_an_outdated_page_is_ignored():
    controller, _, _ = make_controller()
    controller.request_more()
    controller.request_more()

    controller.on_fetch_failed(2)

    assert controller.page == 3
