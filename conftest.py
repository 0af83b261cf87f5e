from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from jobbridge_client.client import JobBridgeClient
from jobbridge_client.session import InMemoryBackend, SessionStore

FAKE_BASE_URL = "http://jobbridge.test/api"


class FakeApiError(Exception):
    def __init__(self, status_code: int, body: str | dict[str, Any]) -> None:
        super().__init__(str(body))
        self.status_code = status_code
        self.body = body


@dataclass
class FakeBackendState:
    users: dict[str, dict[str, str]] = field(default_factory=dict)
    tokens: dict[str, str] = field(default_factory=dict)
    resumes: list[dict[str, Any]] = field(default_factory=list)
    postings: list[dict[str, Any]] = field(default_factory=list)
    applicants: dict[int, list[dict[str, Any]]] = field(default_factory=dict)
    applied: set[tuple[str, int]] = field(default_factory=set)
    failing_postings: set[int] = field(default_factory=set)


def _seed_state() -> FakeBackendState:
    state = FakeBackendState()
    state.users = {
        "kim@example.com": {"pw": "secret", "name": "Kim", "userType": "INDIVIDUAL"},
        "hr@acme.test": {"pw": "secret", "name": "Acme", "userType": "COMPANY"},
    }
    state.resumes = [
        {
            "id": 1,
            "title": "Backend Resume",
            "content": "Python, FastAPI, PostgreSQL",
            "userName": "Kim",
            "createdAt": "2024-05-01T09:00:00",
            "updatedAt": "2024-05-02T09:00:00",
        }
    ]
    for posting_id, title in ((10, "Backend Engineer"), (11, "Data Engineer")):
        state.postings.append(
            {
                "id": posting_id,
                "title": title,
                "description": f"{title} at Acme",
                "position": title.split()[0],
                "requiredSkills": "Python",
                "experienceLevel": "Junior",
                "location": "Seoul",
                "salary": "4000",
                "deadline": "2024-06-30T00:00:00",
                "companyName": "Acme",
                "companyEmail": "hr@acme.test",
                "createdAt": "2024-05-01T00:00:00",
            }
        )
    state.applicants[10] = [
        {
            "id": 1,
            "jobPostingId": 10,
            "applicantId": 100,
            "applicantName": "Kim",
            "applicantEmail": "kim@example.com",
            "appliedAt": "2024-05-03T10:00:00",
            "status": "PENDING",
        },
        {
            "id": 2,
            "jobPostingId": 10,
            "applicantId": 101,
            "applicantName": "Lee",
            "applicantEmail": "lee@example.com",
            "appliedAt": "2024-05-04T10:00:00",
            "status": "ACCEPTED",
        },
        {"id": 3, "jobPostingId": 10},
    ]
    state.applicants[11] = []
    return state


def create_fake_backend(state: FakeBackendState | None = None) -> FastAPI:
    app = FastAPI(title="fake-jobbridge")
    app.state.backend = state or _seed_state()
    router = APIRouter(prefix="/api")

    @app.exception_handler(FakeApiError)
    async def handle_fake_error(_: Request, exc: FakeApiError):
        if isinstance(exc.body, dict):
            return JSONResponse(status_code=exc.status_code, content=exc.body)
        return PlainTextResponse(status_code=exc.status_code, content=exc.body)

    def backend(request: Request) -> FakeBackendState:
        return request.app.state.backend

    def current_user(
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> dict[str, str]:
        state = backend(request)
        token = (authorization or "").removeprefix("Bearer ").strip()
        email = state.tokens.get(token)
        if email is None:
            raise FakeApiError(401, {"message": "토큰이 유효하지 않습니다."})
        return {"email": email, **state.users[email]}

    def company_user(user: dict[str, str] = Depends(current_user)) -> dict[str, str]:
        if user["userType"] != "COMPANY":
            raise FakeApiError(403, "기업 회원만 접근할 수 있습니다.")
        return user

    def individual_user(user: dict[str, str] = Depends(current_user)) -> dict[str, str]:
        if user["userType"] != "INDIVIDUAL":
            raise FakeApiError(403, "개인 회원만 접근할 수 있습니다.")
        return user

    @router.post("/user/login")
    async def login(payload: dict[str, Any], request: Request) -> dict[str, str]:
        state = backend(request)
        user = state.users.get(str(payload.get("email", "")))
        if user is None or user["pw"] != payload.get("pw"):
            raise FakeApiError(401, "")
        token = secrets.token_hex(8)
        state.tokens[token] = str(payload["email"])
        return {"token": token, "name": user["name"], "email": payload["email"], "userType": user["userType"]}

    @router.get("/resume/my")
    async def my_resumes(request: Request, _: dict = Depends(individual_user)) -> list[dict[str, Any]]:
        return backend(request).resumes

    @router.get("/jobs/recent")
    async def recent_jobs(request: Request, _: dict = Depends(current_user)) -> list[dict[str, Any]]:
        return backend(request).postings

    @router.get("/job-posting/my")
    async def my_postings(request: Request, _: dict = Depends(company_user)) -> list[dict[str, Any]]:
        return backend(request).postings

    @router.get("/company/applications/job/{job_id}")
    async def applicants(
        job_id: int,
        request: Request,
        _: dict = Depends(company_user),
    ) -> list[dict[str, Any]]:
        state = backend(request)
        if job_id in state.failing_postings:
            raise FakeApiError(500, "applicant index unavailable")
        if job_id not in state.applicants:
            raise FakeApiError(404, "")
        return state.applicants[job_id]

    @router.post("/apply/{job_id}")
    async def apply(job_id: int, request: Request, user: dict = Depends(individual_user)):
        backend(request).applied.add((user["email"], job_id))
        return PlainTextResponse("지원이 완료되었습니다.")

    @router.get("/applications/check/{job_id}")
    async def check_applied(job_id: int, request: Request, user: dict = Depends(individual_user)):
        return {"applied": (user["email"], job_id) in backend(request).applied}

    @router.get("/match/jobs")
    async def matching_jobs(resumeId: int, _: dict = Depends(individual_user)) -> list[dict[str, Any]]:
        return [
            {
                "id": job_id,
                "title": f"Job {job_id}",
                "description": "Matched posting",
                "createdAt": "2024-05-01T00:00:00",
                "updatedAt": "2024-05-01T00:00:00",
                "matchRate": score,
            }
            for job_id, score in ((10, 0.72), (11, 0.95), (12, 0.95))
        ]

    @router.get("/api/job-recommendation")
    async def job_recommendations(resumeId: int, _: dict = Depends(individual_user)):
        if resumeId != 1:
            raise FakeApiError(404, "")
        return [
            {
                "jobId": 10,
                "title": "Backend Engineer",
                "position": "Backend",
                "companyName": "Acme",
                "matchScore": 0.599,
                "matchReason": "Python overlap",
            },
            {
                "jobId": 11,
                "title": "Data Engineer",
                "position": "Data",
                "companyName": "Acme",
                "matchScore": 0.91,
                "matchReason": "Pipelines",
            },
        ]

    @router.get("/api/talent-matching")
    async def talent_matching(jobPostingId: int, _: dict = Depends(company_user)):
        raise FakeApiError(408, "")

    @router.get("/match/career")
    async def career(resumeId: int, jobPostingId: int, _: dict = Depends(individual_user)) -> list[str]:
        return ["Learn Kubernetes", "Contribute to open source"]

    app.include_router(router)
    return app


@pytest.fixture
def fake_backend() -> FastAPI:
    return create_fake_backend()


@pytest.fixture
def backend_state(fake_backend: FastAPI) -> FakeBackendState:
    return fake_backend.state.backend


@pytest.fixture
def jobbridge_client(fake_backend: FastAPI) -> JobBridgeClient:
    return JobBridgeClient(
        base_url=FAKE_BASE_URL,
        session=SessionStore(durable=InMemoryBackend()),
        transport=httpx.ASGITransport(app=fake_backend),
    )
