"""Tests for certificate preview rendering module."""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from rendering.metrics import project_metrics
from rendering.preview import (
    TEMPLATE_IMAGE_HREF,
    build_preview,
    generate_preview_svg,
    render_title,
)
from schemas import FormState

pytestmark = pytest.mark.unit


def _render(state: FormState) -> str:
    metrics = project_metrics(
        state.check_in_days, state.total_target_count, state.total_points
    )
    return generate_preview_svg(build_preview(state, metrics))


class TestRenderTitle:
    def test_unset_fields_use_placeholder(self):
        assert render_title(FormState()) == "21天--第--期"

    def test_full_title(self):
        state = FormState(camp_name="学习训练营", session_number=12)
        assert render_title(state) == "21天学习训练营第12期"

    def test_only_camp_name(self):
        assert render_title(FormState(camp_name="学习训练营")) == "21天学习训练营第--期"

    def test_only_session_number(self):
        assert render_title(FormState(session_number=3)) == "21天--第3期"

    def test_empty_camp_name_uses_placeholder(self):
        assert render_title(FormState(camp_name="")) == "21天--第--期"


class TestBuildPreview:
    def test_fallbacks_for_empty_state(self):
        state = FormState()
        metrics = project_metrics(None, None, None)

        preview = build_preview(state, metrics)

        assert preview.title == "21天--第--期"
        assert preview.avatar_href is None
        assert preview.trainee_name == ""
        assert preview.metrics is metrics

    def test_empty_avatar_string_is_placeholder(self):
        preview = build_preview(
            FormState(trainee_avatar=""), project_metrics(None, None, None)
        )
        assert preview.avatar_href is None

    def test_avatar_and_name(self):
        state = FormState(
            trainee_avatar="data:image/jpeg;base64,AAAA", trainee_name="张三"
        )

        preview = build_preview(state, project_metrics(None, None, None))

        assert preview.avatar_href == "data:image/jpeg;base64,AAAA"
        assert preview.trainee_name == "张三"


class TestGeneratePreviewSvg:
    def test_contains_title_and_metric_labels(self):
        svg = _render(FormState(total_target_count=5))

        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert "21天--第--期" in svg
        assert "打卡天数" in svg
        assert "总目标数" in svg
        assert "总积分数" in svg
        assert ">5</text>" in svg

    def test_metric_blocks_in_fixed_order(self):
        svg = _render(FormState())

        assert svg.index("打卡天数") < svg.index("总目标数") < svg.index("总积分数")

    def test_uses_template_background(self):
        assert f'href="{TEMPLATE_IMAGE_HREF}"' in _render(FormState())

    def test_placeholder_when_no_avatar(self):
        svg = _render(FormState())

        assert "Avatar placeholder" in svg
        assert "avatarClip)" not in svg.split("</defs>", 1)[1]

    def test_avatar_image_when_set(self):
        svg = _render(FormState(trainee_avatar="data:image/png;base64,QUJD"))

        assert 'href="data:image/png;base64,QUJD"' in svg
        assert "Avatar placeholder" not in svg

    def test_escapes_user_text(self):
        svg = _render(FormState(trainee_name='<script>alert("x")</script>'))

        assert "<script>" not in svg
        assert "&lt;script&gt;" in svg

    def test_escapes_avatar_href(self):
        svg = _render(FormState(trainee_avatar='x" onload="alert(1)'))

        assert 'onload="alert(1)"' not in svg

    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        name=st.one_of(st.none(), st.text(max_size=30)),
        session=st.one_of(st.none(), st.integers(min_value=1, max_value=999)),
        days=st.one_of(st.none(), st.integers(min_value=0, max_value=21)),
    )
    def test_rendering_is_deterministic(self, name, session, days):
        state = FormState(trainee_name=name, session_number=session, check_in_days=days)

        assert _render(state) == _render(state)
