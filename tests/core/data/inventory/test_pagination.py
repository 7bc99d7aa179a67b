"""
tests/core/data/inventory/test_pagination.py - 페이지네이션 테스트
"""

from unittest.mock import MagicMock

import pytest

from core.config import Settings
from core.data.inventory import drain_pages, paginate
from core.exceptions import ListingError, OperationCancelledError
from core.parallel import CancelToken


class TestPaginate:
    """메모리 내 결과 슬라이싱"""

    def test_four_items_limit_two(self):
        """4개, limit=2 예시"""
        items = ["a", "b", "c", "d"]

        first = paginate(items, limit=2, page=1)
        assert first.items == ["a", "b"]
        assert first.state.total_count == 4
        assert first.state.next_page_token != ""

        second = paginate(items, limit=2, page=2)
        assert second.items == ["c", "d"]
        assert second.state.next_page_token == ""

        third = paginate(items, limit=2, page=3)
        assert third.items == []
        assert third.state.total_count == 4
        assert third.state.next_page_token == ""

    @pytest.mark.parametrize("n,limit", [(0, 3), (1, 1), (7, 3), (9, 3), (10, 20)])
    def test_pages_concatenate_to_original(self, n, limit):
        """모든 페이지를 이어 붙이면 원본과 같음 (중복/누락 없음)"""
        items = list(range(n))
        pages = -(-n // limit)

        joined = []
        for page in range(1, pages + 1):
            joined.extend(paginate(items, limit, page).items)

        assert joined == items

    @pytest.mark.parametrize("n,limit,page", [(5, 2, 1), (5, 2, 2), (5, 2, 3), (4, 2, 2), (0, 5, 1), (3, 5, 4)])
    def test_token_iff_more_pages(self, n, limit, page):
        state = paginate(list(range(n)), limit, page).state
        assert bool(state.next_page_token) == (page * limit < n)
        assert state.has_next == (page * limit < n)

    def test_non_positive_limit_uses_default(self, monkeypatch):
        monkeypatch.setattr("core.data.inventory.pagination.get_settings", lambda: Settings(page_size=20))

        page = paginate(list(range(30)), limit=0, page=1)
        assert page.state.limit == 20
        assert len(page.items) == 20

        assert paginate(list(range(30)), limit=-1, page=1, default_limit=5).state.limit == 5

    def test_page_below_one_normalized(self):
        page = paginate(["a", "b", "c"], limit=2, page=0)
        assert page.state.page == 1
        assert page.items == ["a", "b"]

    def test_total_pages(self):
        assert paginate(list(range(5)), 2, 1).state.total_pages == 3
        assert paginate([], 2, 1).state.total_pages == 0


class TestDrainPages:
    """원격 페이지 순회"""

    def test_follows_tokens(self):
        list_page = MagicMock(side_effect=[(["a", "b"], "t1"), (["c"], "t2"), (["d"], "")])

        assert drain_pages(list_page, "vpc") == ["a", "b", "c", "d"]
        assert [c.args[0] for c in list_page.call_args_list] == ["", "t1", "t2"]

    def test_repeated_token_is_error(self):
        list_page = MagicMock(side_effect=[(["a"], "same"), (["b"], "same")])

        with pytest.raises(ListingError) as exc_info:
            drain_pages(list_page, "vpc", "test/ap-northeast-2")
        assert exc_info.value.kind == "vpc"
        assert exc_info.value.scope == "test/ap-northeast-2"

    def test_max_pages_guard(self):
        counter = iter(range(100))
        list_page = MagicMock(side_effect=lambda token: ([1], f"t{next(counter)}"))

        with pytest.raises(ListingError):
            drain_pages(list_page, "vpc", max_pages=3)
        assert list_page.call_count == 3

    def test_cancelled(self):
        token = CancelToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            drain_pages(MagicMock(), "vpc", cancel_token=token)
