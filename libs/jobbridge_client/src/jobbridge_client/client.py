from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

import httpx

from jobbridge_client import endpoints
from jobbridge_client.aggregation import HasPostingId, collect_counts
from jobbridge_client.classifier import classify_response
from jobbridge_client.config import ClientSettings, resolve_settings
from jobbridge_client.decoding import decode_payload
from jobbridge_client.endpoints import Endpoint
from jobbridge_client.errors import (
    AUTH_REQUIRED_MESSAGE,
    ApiResult,
    ErrorKind,
    ErrorOutcome,
    InvalidRequestError,
)
from jobbridge_client.metrics import ClientMetrics
from jobbridge_client.models import (
    Application,
    ApplicationStats,
    CareerRecommendations,
    CompanyApplication,
    JobPosting,
    JobPostingRequest,
    JobRecommendation,
    LoginRequest,
    LoginResponse,
    MatchingJob,
    MatchingResume,
    PasswordResetConfirmRequest,
    Resume,
    ResumeRequest,
    SignupRequest,
    StoredProfile,
    TalentMatch,
)
from jobbridge_client.ranking import RankedMatch, ScoredRecord, rank_matches
from jobbridge_client.request_builder import QueryParams, build_request
from jobbridge_client.session import SessionStore, SqliteBackend

LOGGER = logging.getLogger("jobbridge.client")

R = TypeVar("R", bound=ScoredRecord)


def _ranked(result: ApiResult[list[R]]) -> ApiResult[list[RankedMatch[R]]]:
    if not result.ok:
        return ApiResult.failure(result.error)
    return ApiResult.success(rank_matches(result.value or []))


def _require(**fields: str) -> ErrorOutcome | None:
    missing = [name for name, value in fields.items() if not str(value or "").strip()]
    if missing:
        return ErrorOutcome.invalid_input(f"필수 항목을 모두 입력해주세요: {', '.join(missing)}")
    return None


class JobBridgeClient:
    """Typed async client for the JobBridge backend.

    Every public coroutine returns an ``ApiResult``; no exception crosses
    this boundary. Calls are issued once: there is no retry or backoff here.
    A deployment that wants a timeout or connection retries passes them in
    (``timeout``, ``connect_retries``) or injects its own ``transport``.
    """

    def __init__(
        self,
        *,
        base_url: str = "http://localhost:8080/api",
        session: SessionStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: httpx.Timeout | None = None,
        connect_retries: int = 0,
        metrics: ClientMetrics | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else SessionStore()
        self.transport = transport
        self.timeout = timeout
        self.connect_retries = connect_retries
        self.metrics = metrics if metrics is not None else ClientMetrics()

    # Plumbing

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self.transport is not None:
            kwargs["transport"] = self.transport
        elif self.connect_retries:
            kwargs["transport"] = httpx.AsyncHTTPTransport(retries=self.connect_retries)
        return kwargs

    async def _send(self, request: httpx.Request) -> httpx.Response:
        async with httpx.AsyncClient(**self._client_kwargs()) as client:
            return await client.send(request)

    async def _call(
        self,
        endpoint: Endpoint,
        *,
        path_params: dict[str, Any] | None = None,
        params: QueryParams | None = None,
        json_body: Any = None,
    ) -> ApiResult[Any]:
        token = self.session.get() if endpoint.requires_auth else None
        if endpoint.requires_auth and token is None:
            return ApiResult.failure(ErrorOutcome.unauthorized(AUTH_REQUIRED_MESSAGE))

        try:
            request = build_request(
                self.base_url,
                endpoint.format_path(**(path_params or {})),
                endpoint.method,
                token=token,
                params=params,
                json_body=json_body,
            )
        except InvalidRequestError as exc:
            LOGGER.warning(
                json.dumps({"event": "request_invalid", "endpoint": endpoint.name, "error": str(exc)})
            )
            return ApiResult.failure(ErrorOutcome.invalid_input(str(exc)))

        request_id = request.headers["x-request-id"]
        started = time.perf_counter()
        try:
            response = await self._send(request)
        except httpx.HTTPError as exc:
            duration_ms = (time.perf_counter() - started) * 1000
            self.metrics.observe_transport_error(endpoint=endpoint.name, duration_ms=duration_ms)
            LOGGER.warning(
                json.dumps(
                    {
                        "event": "request_failed",
                        "request_id": request_id,
                        "endpoint": endpoint.name,
                        "method": request.method,
                        "path": request.url.path,
                        "duration_ms": round(duration_ms, 3),
                        "error": f"{exc.__class__.__name__}: {exc}",
                    }
                )
            )
            return ApiResult.failure(ErrorOutcome.unknown())

        duration_ms = (time.perf_counter() - started) * 1000
        self.metrics.observe(
            endpoint=endpoint.name,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        LOGGER.info(
            json.dumps(
                {
                    "event": "request_complete",
                    "request_id": request_id,
                    "endpoint": endpoint.name,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 3),
                }
            )
        )

        classified = classify_response(response.status_code, response.content, endpoint)
        if not classified.ok:
            return classified
        return decode_payload(classified.value or b"", endpoint)

    # Session

    @property
    def is_authenticated(self) -> bool:
        return self.session.get() is not None

    def current_profile(self) -> StoredProfile | None:
        return self.session.load_profile()

    async def login(
        self,
        email: str,
        password: str,
        *,
        remember_me: bool = False,
    ) -> ApiResult[LoginResponse]:
        invalid = _require(email=email, password=password)
        if invalid:
            return ApiResult.failure(invalid)

        result = await self._call(
            endpoints.LOGIN,
            json_body=LoginRequest(email=email.strip(), pw=password).to_wire(),
        )
        if result.ok:
            login: LoginResponse = result.value
            self.session.set(login.token, durable=remember_me)
            if remember_me:
                self.session.save_profile(login)
        return result

    def logout(self) -> None:
        self.session.clear()

    async def signup(self, request: SignupRequest) -> ApiResult[str]:
        invalid = _require(name=request.name, email=request.email, password=request.pw)
        if invalid:
            return ApiResult.failure(invalid)
        return await self._call(endpoints.SIGNUP, json_body=request.to_wire())

    async def send_verification_code(self, email: str) -> ApiResult[str]:
        invalid = _require(email=email)
        if invalid:
            return ApiResult.failure(invalid)
        return await self._call(endpoints.SEND_VERIFICATION_CODE, json_body={"email": email.strip()})

    async def verify_code(self, email: str, code: str) -> ApiResult[str]:
        invalid = _require(email=email, code=code)
        if invalid:
            return ApiResult.failure(invalid)
        return await self._call(
            endpoints.VERIFY_CODE,
            json_body={"email": email.strip(), "code": code.strip()},
        )

    async def request_password_reset(self, email: str) -> ApiResult[str]:
        invalid = _require(email=email)
        if invalid:
            return ApiResult.failure(invalid)
        return await self._call(endpoints.REQUEST_PASSWORD_RESET, json_body={"email": email.strip()})

    async def reset_password(self, token: str, new_password: str) -> ApiResult[str]:
        invalid = _require(token=token, new_password=new_password)
        if invalid:
            return ApiResult.failure(invalid)
        body = PasswordResetConfirmRequest(token=token, new_password=new_password)
        return await self._call(endpoints.CONFIRM_PASSWORD_RESET, json_body=body.to_wire())

    # Resumes

    async def get_my_resumes(self) -> ApiResult[list[Resume]]:
        return await self._call(endpoints.MY_RESUMES)

    async def create_resume(self, request: ResumeRequest) -> ApiResult[Resume]:
        invalid = _require(title=request.title, content=request.content)
        if invalid:
            return ApiResult.failure(invalid)
        return await self._call(endpoints.CREATE_RESUME, json_body=request.to_wire())

    async def update_resume(self, resume_id: int, request: ResumeRequest) -> ApiResult[Resume]:
        invalid = _require(title=request.title, content=request.content)
        if invalid:
            return ApiResult.failure(invalid)
        return await self._call(
            endpoints.UPDATE_RESUME,
            path_params={"resume_id": resume_id},
            json_body=request.to_wire(),
        )

    async def delete_resume(self, resume_id: int) -> ApiResult[None]:
        return await self._call(endpoints.DELETE_RESUME, path_params={"resume_id": resume_id})

    # Postings

    async def get_recent_jobs(self) -> ApiResult[list[JobPosting]]:
        return await self._call(endpoints.RECENT_JOBS)

    async def get_all_jobs(
        self,
        *,
        page: int = 0,
        size: int = 50,
        sort_by: str = "createdAt",
        sort_dir: str = "desc",
    ) -> ApiResult[list[JobPosting]]:
        return await self._call(
            endpoints.ALL_JOBS,
            params=[("page", page), ("size", size), ("sortBy", sort_by), ("sortDir", sort_dir)],
        )

    async def get_job_posting(self, job_id: int) -> ApiResult[JobPosting]:
        return await self._call(endpoints.JOB_POSTING, path_params={"job_id": job_id})

    async def get_my_job_postings(self) -> ApiResult[list[JobPosting]]:
        return await self._call(endpoints.MY_JOB_POSTINGS)

    async def create_job_posting(self, request: JobPostingRequest) -> ApiResult[JobPosting]:
        return await self._call(endpoints.CREATE_JOB_POSTING, json_body=request.to_wire())

    async def update_job_posting(
        self,
        job_id: int,
        request: JobPostingRequest,
    ) -> ApiResult[JobPosting]:
        return await self._call(
            endpoints.UPDATE_JOB_POSTING,
            path_params={"job_id": job_id},
            json_body=request.to_wire(),
        )

    async def delete_job_posting(self, job_id: int) -> ApiResult[None]:
        return await self._call(endpoints.DELETE_JOB_POSTING, path_params={"job_id": job_id})

    # Applications

    async def get_my_applications(self) -> ApiResult[list[Application]]:
        return await self._call(endpoints.MY_APPLICATIONS)

    async def apply_to_job(self, job_id: int) -> ApiResult[str]:
        return await self._call(endpoints.APPLY_TO_JOB, path_params={"job_id": job_id}, json_body={})

    async def check_if_already_applied(self, job_id: int) -> ApiResult[bool]:
        result = await self._call(endpoints.CHECK_APPLIED, path_params={"job_id": job_id})
        # Company accounts are refused here; for them nothing was ever applied.
        if result.error is not None and result.error.kind is ErrorKind.FORBIDDEN:
            return ApiResult.success(False)
        return result

    async def get_applications_for_job(self, job_id: int) -> ApiResult[list[CompanyApplication]]:
        return await self._call(endpoints.COMPANY_APPLICATIONS_FOR_JOB, path_params={"job_id": job_id})

    async def get_application_stats(self) -> ApiResult[ApplicationStats]:
        return await self._call(endpoints.COMPANY_APPLICATION_STATS)

    async def get_application_count_for_job(self, job_id: int) -> ApiResult[int]:
        result = await self.get_applications_for_job(job_id)
        if not result.ok:
            return ApiResult.failure(result.error)
        return ApiResult.success(len(result.value or []))

    async def get_all_application_counts(self, postings: Iterable[HasPostingId]) -> dict[int, int]:
        return await collect_counts(postings, self.get_application_count_for_job)

    async def get_total_applications(self, postings: Sequence[HasPostingId]) -> int:
        counts = await self.get_all_application_counts(postings)
        return sum(counts.values())

    # Matching

    async def get_matching_jobs_for_resume(self, resume_id: int) -> ApiResult[list[MatchingJob]]:
        return await self._call(endpoints.MATCHING_JOBS_FOR_RESUME, params=[("resumeId", resume_id)])

    async def get_matching_resumes_for_job(
        self,
        job_posting_id: int,
    ) -> ApiResult[list[MatchingResume]]:
        return await self._call(
            endpoints.MATCHING_RESUMES_FOR_JOB,
            params=[("jobPostingId", job_posting_id)],
        )

    async def get_job_recommendations(self, resume_id: int) -> ApiResult[list[JobRecommendation]]:
        return await self._call(endpoints.JOB_RECOMMENDATIONS, params=[("resumeId", resume_id)])

    async def get_talent_matching(self, job_posting_id: int) -> ApiResult[list[TalentMatch]]:
        return await self._call(endpoints.TALENT_MATCHING, params=[("jobPostingId", job_posting_id)])

    async def get_career_recommendations(
        self,
        resume_id: int,
        job_posting_id: int,
    ) -> ApiResult[CareerRecommendations]:
        return await self._call(
            endpoints.CAREER_RECOMMENDATIONS,
            params=[("resumeId", resume_id), ("jobPostingId", job_posting_id)],
        )

    async def rank_matching_jobs_for_resume(
        self,
        resume_id: int,
    ) -> ApiResult[list[RankedMatch[MatchingJob]]]:
        return _ranked(await self.get_matching_jobs_for_resume(resume_id))

    async def rank_matching_resumes_for_job(
        self,
        job_posting_id: int,
    ) -> ApiResult[list[RankedMatch[MatchingResume]]]:
        return _ranked(await self.get_matching_resumes_for_job(job_posting_id))

    async def rank_job_recommendations(
        self,
        resume_id: int,
    ) -> ApiResult[list[RankedMatch[JobRecommendation]]]:
        return _ranked(await self.get_job_recommendations(resume_id))

    async def rank_talent_matching(
        self,
        job_posting_id: int,
    ) -> ApiResult[list[RankedMatch[TalentMatch]]]:
        return _ranked(await self.get_talent_matching(job_posting_id))


def create_client(
    *,
    base_url: str | None = None,
    session_db_path: str | None = None,
    timeout_seconds: float | None = None,
    connect_retries: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    settings: ClientSettings | None = None,
) -> JobBridgeClient:
    resolved = settings or resolve_settings(
        base_url=base_url,
        session_db_path=session_db_path,
        timeout_seconds=timeout_seconds,
        connect_retries=connect_retries,
    )
    backend = SqliteBackend(resolved.session_db_path)
    backend.connect()
    return JobBridgeClient(
        base_url=resolved.base_url,
        session=SessionStore(durable=backend),
        transport=transport,
        timeout=resolved.timeout,
        connect_retries=resolved.connect_retries,
    )
