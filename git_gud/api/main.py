from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import List
import os

from git_gud.api.service import TreeService
from git_gud.api.schemas import (
    BranchResponse,
    CommitResponse,
    CreateCommitRequest,
    GraphResponse,
    MergeRequest,
    TreeStateResponse,
    UndoRequest,
    UndoResponse,
)
from git_gud.graph.counters import GLOBAL_BRANCH_COUNTER, IdCounter
from git_gud.graph.errors import GitGudError, MissingEntityError

import logging

# Configure Logging
logging.basicConfig(
    level=os.getenv("GIT_GUD_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Commit Tree Simulator API")

# Allow CORS
# In production, set ALLOWED_ORIGINS to a comma-separated list of domains
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "*")
allowed_origins = [origin.strip() for origin in allowed_origins_env.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize Service
# GIT_GUD_SHARED_BRANCHES=1 numbers branches from the process-wide counter.
shared_branches = os.getenv("GIT_GUD_SHARED_BRANCHES", "0") == "1"
service = TreeService(GLOBAL_BRANCH_COUNTER if shared_branches else IdCounter())


@app.exception_handler(GitGudError)
async def tree_error_handler(request: Request, exc: GitGudError):
    status_code = 404 if isinstance(exc, MissingEntityError) else 409
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )

@app.get("/health")
def health_check():
    return {"status": "ok", "commits": service.state().num_commits}

@app.get("/api/state", response_model=TreeStateResponse)
def get_state():
    """Head, current branch and counts."""
    return service.state()

@app.get("/api/commits", response_model=List[CommitResponse])
def get_commits(limit: int = 50, skip: int = 0):
    """Get list of commits (newest first)."""
    return service.get_commits(limit, skip)

@app.get("/api/commits/{commit_id}", response_model=CommitResponse)
def get_commit(commit_id: int):
    return service.get_commit(commit_id)

@app.post("/api/commits", response_model=CommitResponse)
def create_commit(req: CreateCommitRequest):
    """Create a new commit on HEAD, or on parent_id when given."""
    return service.create_commit(parent_id=req.parent_id, commit_id=req.commit_id)

@app.get("/api/branches", response_model=List[BranchResponse])
def get_branches():
    return service.get_branches()

@app.post("/api/branches", response_model=BranchResponse)
def create_branch():
    """Allocate a branch ID without moving HEAD."""
    return service.create_branch()

@app.post("/api/checkout/branch/{branch_id}", response_model=CommitResponse)
def checkout_branch(branch_id: int):
    return service.checkout_branch(branch_id)

@app.post("/api/checkout/commit/{commit_id}", response_model=CommitResponse)
def checkout_commit(commit_id: int):
    return service.checkout_commit(commit_id)

@app.post("/api/merge", response_model=CommitResponse)
def merge(req: MergeRequest):
    """Merge a branch into HEAD, or merge other_id onto parent_id."""
    if req.branch_id is not None:
        if req.parent_id is not None or req.other_id is not None:
            raise HTTPException(status_code=422, detail="Give branch_id or parent_id/other_id, not both")
        return service.merge_branch(req.branch_id, commit_id=req.commit_id)
    if req.parent_id is None or req.other_id is None:
        raise HTTPException(status_code=422, detail="parent_id and other_id are both required")
    return service.merge_commits(req.parent_id, req.other_id, commit_id=req.commit_id)

@app.post("/api/undo", response_model=UndoResponse)
def undo(req: UndoRequest):
    return service.undo(confirm_merge=req.confirm_merge)

@app.post("/api/reset", response_model=TreeStateResponse)
def reset():
    return service.reset()

@app.get("/api/graph", response_model=GraphResponse)
def get_graph():
    """Get the full commit graph (nodes and edges)."""
    return service.get_graph_data()

@app.get("/api/log", response_class=PlainTextResponse)
def get_log():
    return service.get_log()
