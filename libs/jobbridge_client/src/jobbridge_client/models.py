from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar

from common.utils import days_between, parse_wire_datetime
from pydantic import BaseModel, ConfigDict, FiniteFloat
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class AccountType(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]


_STATUS_LABELS = {
    ApplicationStatus.PENDING: "대기중",
    ApplicationStatus.REVIEWED: "검토완료",
    ApplicationStatus.ACCEPTED: "합격",
    ApplicationStatus.REJECTED: "불합격",
}
_STATUS_COLORS = {
    ApplicationStatus.PENDING: "blue",
    ApplicationStatus.REVIEWED: "orange",
    ApplicationStatus.ACCEPTED: "green",
    ApplicationStatus.REJECTED: "red",
}
UNKNOWN_STATUS = ("알 수 없음", "gray")

FITMENT_LEVELS: dict[str, tuple[str, str]] = {
    "EXCELLENT": ("완벽 매치", "red"),
    "VERY_GOOD": ("매우 좋음", "green"),
    "GOOD": ("좋음", "blue"),
    "FAIR": ("보통", "orange"),
    "POTENTIAL": ("잠재력", "purple"),
}
UNKNOWN_FITMENT = ("검토 필요", "gray")


# Requests


class LoginRequest(WireModel):
    email: str
    pw: str


class SignupRequest(WireModel):
    pw: str
    name: str
    address: str
    age: int | None = None
    email: str
    phonenumber: str
    user_type: AccountType


class ResumeRequest(WireModel):
    title: str
    content: str


class JobPostingRequest(WireModel):
    title: str
    description: str
    position: str
    required_skills: str
    experience_level: str
    location: str
    salary: str
    deadline: str


class PasswordResetConfirmRequest(WireModel):
    token: str
    new_password: str


# Responses


class LoginResponse(WireModel):
    token: str
    name: str
    email: str
    user_type: str


class Resume(WireModel):
    id: int
    title: str
    content: str
    user_name: str
    created_at: str
    updated_at: str
    match_rate: float | None = None


class JobPosting(WireModel):
    id: int
    title: str
    description: str
    position: str
    required_skills: str
    experience_level: str
    location: str
    salary: str
    deadline: str | None = None
    company_name: str | None = None
    company_email: str | None = None
    created_at: str
    match_rate: float | None = None


class Application(WireModel):
    job_posting_id: int
    job_title: str
    company_name: str
    applied_at: str


class CompanyApplication(WireModel):
    """Applicant row for one of the company's postings.

    The backend serves these as untyped maps, so they are decoded field by
    field; ``LENIENT_FIELDS`` lists every required key and its exact type.
    """

    LENIENT_FIELDS: ClassVar[dict[str, type]] = {
        "id": int,
        "jobPostingId": int,
        "applicantId": int,
        "applicantName": str,
        "applicantEmail": str,
        "appliedAt": str,
        "status": str,
    }

    id: int
    job_posting_id: int
    applicant_id: int
    applicant_name: str
    applicant_email: str
    applied_at: str
    status: str

    @property
    def known_status(self) -> ApplicationStatus | None:
        try:
            return ApplicationStatus(self.status)
        except ValueError:
            return None

    @property
    def status_label(self) -> str:
        known = self.known_status
        return known.label if known else UNKNOWN_STATUS[0]

    @property
    def status_color(self) -> str:
        known = self.known_status
        return known.color if known else UNKNOWN_STATUS[1]


class ApplicationStats(WireModel):
    total_applications: int
    pending_applications: int
    this_month_applications: int

    @property
    def pending_rate(self) -> float:
        if self.total_applications <= 0:
            return 0.0
        return self.pending_applications / self.total_applications * 100


class CareerRecommendations(WireModel):
    recommendations: list[str]


# Match records


class MatchingJob(WireModel):
    id: int
    title: str
    description: str
    created_at: str
    updated_at: str
    match_rate: FiniteFloat

    @property
    def record_id(self) -> int:
        return self.id

    @property
    def score(self) -> float:
        return self.match_rate


class MatchingResume(WireModel):
    id: int
    title: str
    content: str
    user_name: str
    created_at: str
    updated_at: str
    match_rate: FiniteFloat

    @property
    def record_id(self) -> int:
        return self.id

    @property
    def score(self) -> float:
        return self.match_rate


class JobRecommendation(WireModel):
    job_id: int
    title: str
    position: str
    company_name: str
    location: str | None = None
    salary: str | None = None
    experience_level: str | None = None
    deadline: str | None = None
    match_score: FiniteFloat
    match_reason: str

    @property
    def record_id(self) -> int:
        return self.job_id

    @property
    def score(self) -> float:
        return self.match_score

    def is_deadline_soon(self, now: datetime | None = None, *, within_days: int = 7) -> bool:
        deadline = parse_wire_datetime(self.deadline)
        if deadline is None:
            return False
        days_left = days_between(now or datetime.now(), deadline)
        return 0 < days_left <= within_days


class TalentMatch(WireModel):
    resume_id: int
    resume_title: str
    candidate_name: str
    candidate_email: str
    candidate_location: str | None = None
    candidate_age: int | None = None
    resume_updated_at: str
    match_score: FiniteFloat
    fitment_level: str
    recommendation_reason: str

    @property
    def record_id(self) -> int:
        return self.resume_id

    @property
    def score(self) -> float:
        return self.match_score

    @property
    def fitment_label(self) -> str:
        return FITMENT_LEVELS.get(self.fitment_level, UNKNOWN_FITMENT)[0]

    @property
    def fitment_color(self) -> str:
        return FITMENT_LEVELS.get(self.fitment_level, UNKNOWN_FITMENT)[1]

    def is_recently_updated(self, now: datetime | None = None, *, within_days: int = 30) -> bool:
        updated = parse_wire_datetime(self.resume_updated_at)
        if updated is None:
            return False
        return days_between(updated, now or datetime.now()) <= within_days


class StoredProfile(BaseModel):
    name: str
    email: str
    user_type: str

