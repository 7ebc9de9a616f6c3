from typing import List, Optional
from pydantic import BaseModel

class CommitResponse(BaseModel):
    id: int
    branch_id: int
    parent_ids: List[int]
    child_ids: List[int]
    is_head: bool
    is_merge: bool
    is_new_branch: bool

class BranchResponse(BaseModel):
    id: int
    latest_commit_id: Optional[int] = None  # None until the branch gets a commit
    is_current: bool

class TreeStateResponse(BaseModel):
    head_id: Optional[int] = None
    current_branch: int
    num_commits: int
    num_branches: int

class GraphNode(BaseModel):
    id: int
    branch_id: int
    label: str
    is_head: bool
    is_merge: bool
    branch_tips: List[int]

class GraphEdge(BaseModel):
    source: int
    target: int

class GraphResponse(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]

class CreateCommitRequest(BaseModel):
    parent_id: Optional[int] = None
    commit_id: Optional[int] = None

class MergeRequest(BaseModel):
    # Either branch_id, or parent_id together with other_id
    branch_id: Optional[int] = None
    parent_id: Optional[int] = None
    other_id: Optional[int] = None
    commit_id: Optional[int] = None

class UndoRequest(BaseModel):
    confirm_merge: bool = False

class UndoResponse(BaseModel):
    changed: bool
    head: Optional[CommitResponse] = None
