import logging
import threading
from typing import List, Optional

from git_gud.api.schemas import (
    BranchResponse,
    CommitResponse,
    GraphEdge,
    GraphNode,
    GraphResponse,
    TreeStateResponse,
    UndoResponse,
)
from git_gud.graph.counters import IdCounter
from git_gud.graph.models import Commit
from git_gud.graph.render import build_graph, render_log
from git_gud.graph.tree import CommitTree

logger = logging.getLogger(__name__)


class TreeService:
    """Serialises access to one CommitTree and maps results to API schemas.

    FastAPI runs sync endpoints on a thread pool, so every call goes through
    ``self.lock``.
    """

    def __init__(self, branch_counter: Optional[IdCounter] = None):
        self.tree = CommitTree(branch_counter=branch_counter)
        self.lock = threading.Lock()

    def state(self) -> TreeStateResponse:
        with self.lock:
            head = self.tree.head
            return TreeStateResponse(
                head_id=head.id if head is not None else None,
                current_branch=self.tree.current_branch,
                num_commits=self.tree.num_commits,
                num_branches=self.tree.num_branches,
            )

    def get_commits(self, limit: int = 50, skip: int = 0) -> List[CommitResponse]:
        with self.lock:
            # Newest first, like a log
            selection = list(reversed(self.tree.all_commits))[skip : skip + limit]
            return [self._to_response(c) for c in selection]

    def get_commit(self, commit_id: int) -> CommitResponse:
        with self.lock:
            return self._to_response(self.tree.get_commit(commit_id))

    def create_commit(
        self, parent_id: Optional[int] = None, commit_id: Optional[int] = None
    ) -> CommitResponse:
        with self.lock:
            commit = self.tree.add_commit(parent_id=parent_id, commit_id=commit_id)
            return self._to_response(commit)

    def get_branches(self) -> List[BranchResponse]:
        with self.lock:
            current = self.tree.current_branch
            return [
                BranchResponse(id=bid, latest_commit_id=latest, is_current=bid == current)
                for bid, latest in self.tree.branch_heads().items()
            ]

    def create_branch(self) -> BranchResponse:
        with self.lock:
            branch_id = self.tree.branch()
            return BranchResponse(id=branch_id, latest_commit_id=None, is_current=False)

    def checkout_branch(self, branch_id: int) -> CommitResponse:
        with self.lock:
            return self._to_response(self.tree.checkout(branch_id))

    def checkout_commit(self, commit_id: int) -> CommitResponse:
        with self.lock:
            return self._to_response(self.tree.checkout_commit(commit_id))

    def merge_branch(self, branch_id: int, commit_id: Optional[int] = None) -> CommitResponse:
        with self.lock:
            return self._to_response(self.tree.merge(branch_id, commit_id=commit_id))

    def merge_commits(
        self, parent_id: int, other_id: int, commit_id: Optional[int] = None
    ) -> CommitResponse:
        with self.lock:
            commit = self.tree.merge_commits(parent_id, other_id, commit_id=commit_id)
            return self._to_response(commit)

    def undo(self, confirm_merge: bool = False) -> UndoResponse:
        with self.lock:
            changed = self.tree.undo(confirm_merge=confirm_merge)
            head = self.tree.head
            return UndoResponse(
                changed=changed,
                head=self._to_response(head) if head is not None else None,
            )

    def reset(self) -> TreeStateResponse:
        with self.lock:
            self.tree.reset()
            logger.info("Commit tree reset")
        return self.state()

    def get_graph_data(self) -> GraphResponse:
        with self.lock:
            nodes, edges = build_graph(self.tree)
        return GraphResponse(
            nodes=[
                GraphNode(
                    id=n.id,
                    branch_id=n.branch_id,
                    label=n.label,
                    is_head=n.is_head,
                    is_merge=n.is_merge,
                    branch_tips=n.branch_tips,
                )
                for n in nodes
            ],
            edges=[GraphEdge(source=e.source, target=e.target) for e in edges],
        )

    def get_log(self) -> str:
        with self.lock:
            return render_log(self.tree)

    def _to_response(self, commit: Commit) -> CommitResponse:
        return CommitResponse(
            id=commit.id,
            branch_id=commit.branch_id,
            parent_ids=list(commit.parents),
            child_ids=list(commit.children),
            is_head=self.tree.is_head(commit.id),
            is_merge=commit.is_merge_commit(),
            is_new_branch=self.tree.is_new_branch(commit.id),
        )
