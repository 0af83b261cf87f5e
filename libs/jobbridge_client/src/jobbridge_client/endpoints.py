from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from jobbridge_client.errors import FORBIDDEN_MESSAGE, SESSION_EXPIRED_MESSAGE
from jobbridge_client.models import (
    Application,
    ApplicationStats,
    CareerRecommendations,
    CompanyApplication,
    JobPosting,
    JobRecommendation,
    LoginResponse,
    MatchingJob,
    MatchingResume,
    Resume,
    TalentMatch,
)

COMPANY_ONLY_MESSAGE = "기업 회원만 접근할 수 있습니다."
INDIVIDUAL_ONLY_MESSAGE = "개인 회원만 접근할 수 있습니다."
AI_TIMEOUT_MESSAGE = "AI 분석이 예상보다 오래 걸리고 있습니다. 잠시 후 다시 시도해주세요."
CAREER_TIMEOUT_MESSAGE = "경력 분석이 예상보다 오래 걸리고 있습니다. 잠시 후 다시 시도해주세요."


class DecodeStrategy(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"
    STRING_LIST_OR_WRAPPED = "string_list_or_wrapped"
    TEXT = "text"
    MESSAGE = "message"
    APPLIED_FLAG = "applied_flag"
    NONE = "none"


@dataclass(frozen=True)
class Endpoint:
    name: str
    method: str
    path: str
    strategy: DecodeStrategy = DecodeStrategy.STRICT
    model: Any = None
    many: bool = False
    requires_auth: bool = True
    empty_body_is_empty_list: bool = False
    unauthorized_message: str = SESSION_EXPIRED_MESSAGE
    forbidden_message: str = FORBIDDEN_MESSAGE
    not_found_message: str | None = None
    timeout_message: str | None = None
    default_text: str | None = None

    def format_path(self, **path_params: Any) -> str:
        return self.path.format(**path_params)


LOGIN = Endpoint(
    "login",
    "POST",
    "/user/login",
    model=LoginResponse,
    requires_auth=False,
    unauthorized_message="아이디 또는 비밀번호가 일치하지 않습니다.",
)
SIGNUP = Endpoint(
    "signup",
    "POST",
    "/user/signup",
    strategy=DecodeStrategy.TEXT,
    requires_auth=False,
    default_text="회원가입이 완료되었습니다.",
)
SEND_VERIFICATION_CODE = Endpoint(
    "send_verification_code",
    "POST",
    "/user/send-code",
    strategy=DecodeStrategy.TEXT,
    requires_auth=False,
    default_text="인증코드가 발송되었습니다.",
)
VERIFY_CODE = Endpoint(
    "verify_code",
    "POST",
    "/user/verify",
    strategy=DecodeStrategy.TEXT,
    requires_auth=False,
    default_text="이메일 인증이 완료되었습니다.",
)
REQUEST_PASSWORD_RESET = Endpoint(
    "request_password_reset",
    "POST",
    "/user/password-reset",
    strategy=DecodeStrategy.MESSAGE,
    requires_auth=False,
    default_text="비밀번호 재설정 코드가 이메일로 발송되었습니다.",
)
CONFIRM_PASSWORD_RESET = Endpoint(
    "confirm_password_reset",
    "POST",
    "/user/password-reset/confirm",
    strategy=DecodeStrategy.MESSAGE,
    requires_auth=False,
    default_text="비밀번호가 성공적으로 변경되었습니다.",
)

MY_RESUMES = Endpoint("my_resumes", "GET", "/resume/my", model=Resume, many=True)
CREATE_RESUME = Endpoint("create_resume", "POST", "/resume", model=Resume)
UPDATE_RESUME = Endpoint(
    "update_resume",
    "PUT",
    "/resume/{resume_id}",
    model=Resume,
    not_found_message="이력서를 찾을 수 없습니다.",
)
DELETE_RESUME = Endpoint(
    "delete_resume",
    "DELETE",
    "/resume/{resume_id}",
    strategy=DecodeStrategy.NONE,
    not_found_message="이력서를 찾을 수 없습니다.",
)

RECENT_JOBS = Endpoint("recent_jobs", "GET", "/jobs/recent", model=JobPosting, many=True)
ALL_JOBS = Endpoint("all_jobs", "GET", "/jobs/all", model=JobPosting, many=True)
JOB_POSTING = Endpoint(
    "job_posting",
    "GET",
    "/job-posting/{job_id}",
    model=JobPosting,
    not_found_message="채용공고를 찾을 수 없습니다.",
)
MY_JOB_POSTINGS = Endpoint(
    "my_job_postings",
    "GET",
    "/job-posting/my",
    model=JobPosting,
    many=True,
    forbidden_message=COMPANY_ONLY_MESSAGE,
)
CREATE_JOB_POSTING = Endpoint(
    "create_job_posting",
    "POST",
    "/job-posting",
    model=JobPosting,
    forbidden_message="기업 회원만 채용공고를 등록할 수 있습니다.",
)
UPDATE_JOB_POSTING = Endpoint(
    "update_job_posting",
    "PUT",
    "/job-posting/{job_id}",
    model=JobPosting,
    forbidden_message="자신의 채용공고만 수정할 수 있습니다.",
    not_found_message="채용공고를 찾을 수 없습니다.",
)
DELETE_JOB_POSTING = Endpoint(
    "delete_job_posting",
    "DELETE",
    "/job-posting/{job_id}",
    strategy=DecodeStrategy.NONE,
    forbidden_message="자신의 채용공고만 삭제할 수 있습니다.",
    not_found_message="채용공고를 찾을 수 없습니다.",
)

MY_APPLICATIONS = Endpoint(
    "my_applications",
    "GET",
    "/applications/mine",
    model=Application,
    many=True,
    empty_body_is_empty_list=True,
)
APPLY_TO_JOB = Endpoint(
    "apply_to_job",
    "POST",
    "/apply/{job_id}",
    strategy=DecodeStrategy.TEXT,
    forbidden_message="권한이 없습니다. 개인 회원으로 로그인했는지 확인하세요.",
    default_text="지원이 완료되었습니다.",
)
CHECK_APPLIED = Endpoint(
    "check_applied",
    "GET",
    "/applications/check/{job_id}",
    strategy=DecodeStrategy.APPLIED_FLAG,
)

COMPANY_APPLICATIONS_FOR_JOB = Endpoint(
    "company_applications_for_job",
    "GET",
    "/company/applications/job/{job_id}",
    strategy=DecodeStrategy.LENIENT,
    model=CompanyApplication,
    many=True,
    forbidden_message=COMPANY_ONLY_MESSAGE,
    not_found_message="채용공고를 찾을 수 없습니다.",
)
COMPANY_APPLICATION_STATS = Endpoint(
    "company_application_stats",
    "GET",
    "/company/applications/stats",
    model=ApplicationStats,
    forbidden_message=COMPANY_ONLY_MESSAGE,
)

MATCHING_JOBS_FOR_RESUME = Endpoint(
    "matching_jobs_for_resume",
    "GET",
    "/match/jobs",
    model=MatchingJob,
    many=True,
    not_found_message="이력서를 찾을 수 없습니다.",
    timeout_message=AI_TIMEOUT_MESSAGE,
)
MATCHING_RESUMES_FOR_JOB = Endpoint(
    "matching_resumes_for_job",
    "GET",
    "/match/resumes",
    model=MatchingResume,
    many=True,
    forbidden_message=COMPANY_ONLY_MESSAGE,
    not_found_message="채용공고를 찾을 수 없습니다.",
    timeout_message=AI_TIMEOUT_MESSAGE,
)
JOB_RECOMMENDATIONS = Endpoint(
    "job_recommendations",
    "GET",
    "/api/job-recommendation",
    model=JobRecommendation,
    many=True,
    forbidden_message=INDIVIDUAL_ONLY_MESSAGE,
    not_found_message="이력서를 찾을 수 없습니다.",
    timeout_message=AI_TIMEOUT_MESSAGE,
)
TALENT_MATCHING = Endpoint(
    "talent_matching",
    "GET",
    "/api/talent-matching",
    model=TalentMatch,
    many=True,
    forbidden_message=COMPANY_ONLY_MESSAGE,
    not_found_message="채용공고를 찾을 수 없습니다.",
    timeout_message=AI_TIMEOUT_MESSAGE,
)
CAREER_RECOMMENDATIONS = Endpoint(
    "career_recommendations",
    "GET",
    "/match/career",
    strategy=DecodeStrategy.STRING_LIST_OR_WRAPPED,
    model=CareerRecommendations,
    timeout_message=CAREER_TIMEOUT_MESSAGE,
)
