"""Pydantic schemas and domain types for the certificate preview."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

# 训练营类型
CAMP_TYPES: tuple[str, ...] = ("学习训练营",)


class FormState(BaseModel):
    """Current value of every certificate field for one editing page.

    Every field is optional until submission; ``None`` means "unset".
    Instances are frozen: the store replaces the snapshot on each merge.
    """

    model_config = ConfigDict(frozen=True)

    camp_name: str | None = None
    session_number: int | None = None
    trainee_name: str | None = None
    # data URI of the selected image, or empty
    trainee_avatar: str | None = None
    check_in_days: int | None = None
    total_target_count: int | None = None
    total_points: int | None = None


DOMAIN_FIELDS: frozenset[str] = frozenset(FormState.model_fields)

INTEGER_FIELDS: frozenset[str] = frozenset(
    {"session_number", "check_in_days", "total_target_count", "total_points"}
)


@dataclass(frozen=True)
class MetricItem:
    """One numeric block on the certificate."""

    label: str
    value: int


DerivedMetrics = tuple[MetricItem, MetricItem, MetricItem]


class RejectionReason(str, Enum):
    UNSUPPORTED_TYPE = "unsupported type"
    TOO_LARGE = "too large"


@dataclass(frozen=True)
class UploadCandidate:
    """A selected file plus its pre-check outcome."""

    filename: str
    content_type: str
    size: int
    reasons: tuple[RejectionReason, ...] = ()

    @property
    def accepted(self) -> bool:
        return not self.reasons


@dataclass(frozen=True)
class EncodeSuccess:
    data_uri: str


@dataclass(frozen=True)
class EncodeFailure:
    reason: str


EncodeResult = EncodeSuccess | EncodeFailure


@dataclass(frozen=True)
class PreviewData:
    """Everything the certificate preview draws, already resolved to fallbacks."""

    title: str
    avatar_href: str | None
    trainee_name: str
    metrics: DerivedMetrics


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
