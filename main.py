import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

import config
from auth import (
    TokenService,
    clear_token_cookie,
    get_token_service,
    require_same_user,
    set_token_cookie,
    verify_token,
)
from database import db, get_db, ping
from schemas import (
    Assignment,
    AssignmentUpdate,
    CountResponse,
    DeleteResult,
    GradingUpdate,
    IdentityClaims,
    InsertResult,
    Submission,
    SuccessResponse,
    UpdateResult,
)
from services import AssignmentService, ReferenceService, SubmissionService, parse_int

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await run_in_threadpool(ping, db)
    yield


app = FastAPI(title="Group Study API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Store operation failed on %s %s", request.method, request.url.path)
    status_code = 503 if isinstance(exc, ConnectionFailure) else 500
    return JSONResponse({"detail": str(exc)}, status_code=status_code)


# Dependencies

def get_assignment_service(database: Database = Depends(get_db)) -> AssignmentService:
    return AssignmentService(database)


def get_submission_service(database: Database = Depends(get_db)) -> SubmissionService:
    return SubmissionService(database)


def get_reference_service(database: Database = Depends(get_db)) -> ReferenceService:
    return ReferenceService(database)


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "group study is running"


@app.get("/health")
def health(database: Database = Depends(get_db)):
    resp = {
        "backend": "running",
        "database": "not connected",
        "database_name": getattr(database, "name", None),
        "collections": [],
        "time": datetime.now(timezone.utc).isoformat(),
    }
    if ping(database):
        resp["database"] = "connected"
        try:
            resp["collections"] = database.list_collection_names()[:10]
        except PyMongoError as e:
            resp["database"] = f"connected but error: {str(e)[:50]}"
    return resp


# Assignments
user_router = APIRouter(prefix="/api/v1/user", tags=["user"])


@user_router.get("/assignments")
def list_assignments(
    difficulty: Optional[str] = None,
    page: Optional[str] = None,
    size: Optional[str] = None,
    service: AssignmentService = Depends(get_assignment_service),
) -> List[dict]:
    return service.list(difficulty, parse_int(page), parse_int(size))


@user_router.get("/assignmentsCount", response_model=CountResponse)
def count_assignments(service: AssignmentService = Depends(get_assignment_service)):
    return CountResponse(count=service.count())


@user_router.get("/assignments/{id}")
def get_assignment(id: str, service: AssignmentService = Depends(get_assignment_service)) -> Optional[dict]:
    return service.get(id)


@user_router.post("/assignments", response_model=InsertResult)
def create_assignment(payload: Assignment, service: AssignmentService = Depends(get_assignment_service)):
    return service.create(payload.to_document())


@user_router.put("/assignments/{id}", response_model=UpdateResult)
def update_assignment(
    id: str,
    payload: AssignmentUpdate,
    service: AssignmentService = Depends(get_assignment_service),
):
    fields = payload.to_document()
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    return service.replace_or_create(id, fields)


@user_router.delete("/assignments/{id}", response_model=DeleteResult)
def delete_assignment(id: str, service: AssignmentService = Depends(get_assignment_service)):
    return service.delete(id)


# Submitted assignments
@user_router.get("/submitted_assignments")
def list_submissions_by_status(
    status: Optional[str] = None,
    email: Optional[str] = None,
    user: dict = Depends(verify_token),
    service: SubmissionService = Depends(get_submission_service),
) -> List[dict]:
    require_same_user(user, email)
    return service.list_by_status(status)


@user_router.get("/submitted_assignments/{id}")
def get_submission(id: str, service: SubmissionService = Depends(get_submission_service)) -> Optional[dict]:
    return service.get(id)


@user_router.get("/user_submitted_assignments/{email}")
def list_user_submissions(
    email: str,
    user: dict = Depends(verify_token),
    service: SubmissionService = Depends(get_submission_service),
) -> List[dict]:
    require_same_user(user, email)
    return service.list_by_submitter(email)


@user_router.post("/submitted_assignments", response_model=InsertResult)
def create_submission(payload: Submission, service: SubmissionService = Depends(get_submission_service)):
    return service.create(payload.to_document())


@user_router.put("/submitted_assignments/{id}", response_model=UpdateResult)
def grade_submission(
    id: str,
    payload: GradingUpdate = Body(...),
    service: SubmissionService = Depends(get_submission_service),
):
    return service.update_grading(id, payload.status, payload.remark, payload.feedback)


# Reference data
@user_router.get("/featured")
def list_featured(service: ReferenceService = Depends(get_reference_service)) -> List[dict]:
    return service.list_featured()


@user_router.get("/FAQs")
def list_faqs(service: ReferenceService = Depends(get_reference_service)) -> List[dict]:
    return service.list_faqs()


# Auth
auth_router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@auth_router.post("/jwt", response_model=SuccessResponse)
def login(payload: IdentityClaims, tokens: TokenService = Depends(get_token_service)):
    token = tokens.issue(payload.model_dump())
    response = JSONResponse({"success": True})
    set_token_cookie(response, token, tokens.lifetime)
    logger.info("Issued token for %s", payload.email)
    return response


@auth_router.post("/logout", response_model=SuccessResponse)
def logout():
    response = JSONResponse({"success": True})
    clear_token_cookie(response)
    return response


app.include_router(user_router)
app.include_router(auth_router)


if __name__ == "__main__":
    import uvicorn
    logger.info("group study is running on port: %s", config.PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
