"""Form field catalogue for the certificate editor.

Labels, placeholders and declared ranges for every input on the page.
The template renders controls from this list, and the HTML ``required``,
``min`` and ``max`` attributes enforce the ranges on submit.
"""

from dataclasses import dataclass
from typing import Literal

from schemas import CAMP_TYPES

FieldKind = Literal["select", "number", "text", "image"]


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    kind: FieldKind
    placeholder: str
    required_message: str
    min_value: int | None = None
    max_value: int | None = None
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class FormSection:
    title: str
    fields: tuple[FormField, ...]


# The file input is named differently from the state field it feeds;
# its value never reaches the store directly.
AVATAR_UPLOAD_FIELD = "trainee_avatar_upload"

FORM_SECTIONS: tuple[FormSection, ...] = (
    FormSection(
        title="训练营设置",
        fields=(
            FormField(
                name="camp_name",
                label="训练营",
                kind="select",
                placeholder="请选择训练营类型",
                required_message="请选择训练营类型",
                options=CAMP_TYPES,
            ),
            FormField(
                name="session_number",
                label="训练营期数",
                kind="number",
                placeholder="请输入训练营期数",
                required_message="请输入训练营期数",
                min_value=1,
                max_value=999,
            ),
        ),
    ),
    FormSection(
        title="人员设置",
        fields=(
            FormField(
                name="trainee_name",
                label="学员姓名",
                kind="text",
                placeholder="请输入学员姓名",
                required_message="请输入学员姓名",
            ),
            FormField(
                name=AVATAR_UPLOAD_FIELD,
                label="学员头像",
                kind="image",
                placeholder="选择图片",
                required_message="请上传学员头像",
            ),
            FormField(
                name="check_in_days",
                label="打卡天数",
                kind="number",
                placeholder="请输入打卡天数",
                required_message="请输入打卡天数",
                min_value=0,
                max_value=21,
            ),
            FormField(
                name="total_target_count",
                label="总目标数",
                kind="number",
                placeholder="请输入总目标数",
                required_message="请输入总目标数",
                min_value=0,
                max_value=99,
            ),
            FormField(
                name="total_points",
                label="总积分",
                kind="number",
                placeholder="请输入总积分",
                required_message="请输入总积分",
                min_value=0,
                max_value=99,
            ),
        ),
    ),
)

SUBMIT_LABEL = "生成证书"


def editable_field_names() -> frozenset[str]:
    """Names of the fields posted by the form on every change (no file input)."""
    return frozenset(
        field.name
        for section in FORM_SECTIONS
        for field in section.fields
        if field.kind != "image"
    )
