"""Unit tests for the preview page registry."""

import pytest

from services.preview_page_service import (
    PreviewPage,
    PreviewPageNotFoundError,
    clear_pages,
    get_page,
    open_page,
    require_page,
)


@pytest.mark.unit
class TestPreviewPageRegistry:
    def test_open_page_starts_empty(self):
        page = open_page()

        assert isinstance(page, PreviewPage)
        assert page.page_id
        assert page.pending_avatar is None
        assert page.store.snapshot().model_dump() == {
            "camp_name": None,
            "session_number": None,
            "trainee_name": None,
            "trainee_avatar": None,
            "check_in_days": None,
            "total_target_count": None,
            "total_points": None,
        }

    def test_each_page_has_its_own_state(self):
        first = open_page()
        second = open_page()
        first.store.merge({"trainee_name": "A"})

        assert first.page_id != second.page_id
        assert second.store.snapshot().trainee_name is None

    def test_get_page_returns_same_instance(self):
        page = open_page()
        assert get_page(page.page_id) is page

    def test_get_page_returns_none_for_unknown(self):
        assert get_page("nonexistent") is None

    def test_require_page_raises_for_unknown(self):
        with pytest.raises(PreviewPageNotFoundError) as exc_info:
            require_page("ghost")
        assert exc_info.value.page_id == "ghost"

    def test_clear_pages(self):
        page = open_page()
        clear_pages()
        assert get_page(page.page_id) is None


@pytest.mark.unit
class TestPreviewPageRendering:
    def test_empty_page_renders_fallbacks(self):
        page = open_page()

        preview = page.preview()

        assert preview.title == "21天--第--期"
        assert preview.avatar_href is None
        assert preview.trainee_name == ""
        assert [m.value for m in preview.metrics] == [0, 0, 0]

    def test_render_svg_reflects_state(self):
        page = open_page()
        page.store.merge(
            {"camp_name": "学习训练营", "session_number": 7, "trainee_name": "王五"}
        )

        svg = page.render_svg()

        assert "21天学习训练营第7期" in svg
        assert "王五" in svg

    def test_avatar_change_does_not_recompute_metrics(self):
        page = open_page()
        page.store.merge({"check_in_days": 3})
        first = page.preview().metrics

        page.store.merge({"trainee_avatar": "data:image/png;base64,AAAA"})
        second = page.preview().metrics

        assert second is first
        assert page.projector.computations == 1
