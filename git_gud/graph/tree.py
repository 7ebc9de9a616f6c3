import logging
from typing import Dict, List, Optional, Set, Tuple

from git_gud.graph.counters import GLOBAL_BRANCH_COUNTER, IdCounter
from git_gud.graph.errors import (
    AlreadyHasChildError,
    DuplicateCommitError,
    InvalidMergeError,
    MergeUndoError,
    MissingEntityError,
)
from git_gud.graph.models import Commit

logger = logging.getLogger(__name__)


class CommitTree:
    """In-memory commit history: an arena of commits keyed by ID.

    The tree owns every ``Commit`` and is the only place IDs are handed out.
    Commit IDs come from a per-tree counter. Branch IDs come from
    ``branch_counter``, which defaults to the process-wide
    ``GLOBAL_BRANCH_COUNTER``; trees sharing it share one branch numbering
    space, and ``reset()`` on any of them resets it for all. A tree skips IDs
    it already holds, so a reset elsewhere never hands it one of its own
    branches again. Pass a private ``IdCounter`` to keep a tree independent.

    Not thread-safe. Callers that share a tree between threads must
    serialise every call on one lock.
    """

    def __init__(self, branch_counter: Optional[IdCounter] = None):
        self._branch_counter = (
            branch_counter if branch_counter is not None else GLOBAL_BRANCH_COUNTER
        )
        self._commit_counter = IdCounter()
        # Insertion ordered, so iteration follows creation order.
        self._commits: Dict[int, Commit] = {}
        # None marks a branch that has been allocated but has no commits yet.
        self._branch_heads: Dict[int, Optional[int]] = {}
        self._used_ids: Set[int] = set()
        self._head: Optional[int] = None
        self._current_branch = self._open_initial_branch()

    def _draw_branch_id(self) -> int:
        # A shared counter may have been reset by another tree.
        branch_id = self._branch_counter.next()
        while branch_id in self._branch_heads:
            branch_id = self._branch_counter.next()
        return branch_id

    def _open_initial_branch(self) -> int:
        branch_id = self._draw_branch_id()
        self._branch_heads[branch_id] = None
        return branch_id

    # --- ID issuance ---

    def issue_next_id(self) -> int:
        commit_id = self._commit_counter.next()
        self._used_ids.add(commit_id)
        return commit_id

    def adopt_explicit_id(self, commit_id: int) -> int:
        self._check_unused(commit_id)
        self._used_ids.add(commit_id)
        self._commit_counter.advance_past(commit_id)
        return commit_id

    def _check_unused(self, commit_id: int) -> None:
        # Undone commits keep their IDs reserved.
        if commit_id in self._used_ids:
            raise DuplicateCommitError(commit_id)

    # --- queries ---

    @property
    def head(self) -> Optional[Commit]:
        if self._head is None:
            return None
        return self._commits[self._head]

    @property
    def current_branch(self) -> int:
        return self._current_branch

    @property
    def num_commits(self) -> int:
        return len(self._commits)

    @property
    def num_branches(self) -> int:
        return len(self._branch_heads)

    @property
    def all_commits(self) -> Tuple[Commit, ...]:
        return tuple(self._commits.values())

    def is_head(self, commit_id: int) -> bool:
        return self._head is not None and self._head == commit_id

    def is_valid_commit_id(self, commit_id: int) -> bool:
        return commit_id in self._commits

    def is_valid_branch_id(self, branch_id: int) -> bool:
        return branch_id in self._branch_heads

    def get_commit(self, commit_id: int) -> Commit:
        try:
            return self._commits[commit_id]
        except KeyError:
            raise MissingEntityError("commit", commit_id) from None

    def get_latest(self, branch_id: Optional[int] = None) -> Optional[Commit]:
        """Latest commit on ``branch_id`` (default: the current branch).

        Returns None for a branch that has no commits yet.
        """
        if branch_id is None:
            branch_id = self._current_branch
        if branch_id not in self._branch_heads:
            raise MissingEntityError("branch", branch_id)
        latest = self._branch_heads[branch_id]
        return self._commits[latest] if latest is not None else None

    def get_all_commit_ids(self) -> List[int]:
        return list(self._commits)

    def get_all_branch_ids(self) -> List[int]:
        return list(self._branch_heads)

    def branch_heads(self) -> Dict[int, Optional[int]]:
        return dict(self._branch_heads)

    def pending_branches(self) -> List[int]:
        """Branches allocated by ``branch()`` that hold no commits yet."""
        return sorted(bid for bid, latest in self._branch_heads.items() if latest is None)

    def is_new_branch(self, commit_id: int) -> bool:
        return self.get_commit(commit_id).is_new_branch(self._commits)

    # --- mutations ---

    def add_commit(
        self, parent_id: Optional[int] = None, commit_id: Optional[int] = None
    ) -> Commit:
        """Creates a commit and checks it out.

        Without ``parent_id`` the commit goes on top of head, on the current
        branch. If head already has a child, the commit forks onto the oldest
        pending branch; with none pending, ``AlreadyHasChildError`` is raised.
        With ``parent_id`` the parent must be a leaf and the commit joins the
        parent's branch.
        """
        if commit_id is not None:
            self._check_unused(commit_id)

        if parent_id is None:
            parent = self.head
            branch_id = self._current_branch
            if parent is not None and parent.children:
                pending = self.pending_branches()
                if not pending:
                    raise AlreadyHasChildError(parent.id)
                branch_id = pending[0]
        else:
            parent = self.get_commit(parent_id)
            if parent.children:
                raise AlreadyHasChildError(parent.id)
            branch_id = parent.branch_id

        parents = [parent.id] if parent is not None else []
        commit = self._create(branch_id, parents, commit_id)
        logger.debug("Added commit %s on branch %s (parents %s)", commit.id, branch_id, parents)
        return commit

    def branch(self) -> int:
        """Allocates a branch ID. No commit is created and head does not move."""
        branch_id = self._draw_branch_id()
        self._branch_heads[branch_id] = None
        logger.debug("Allocated branch %s", branch_id)
        return branch_id

    def checkout(self, branch_id: int) -> Commit:
        latest = self.get_latest(branch_id)
        if latest is None:
            raise MissingEntityError("branch", branch_id, "has no commits yet")
        self._move_head(latest)
        logger.debug("Checked out branch %s at commit %s", branch_id, latest.id)
        return latest

    def checkout_commit(self, commit_id: int) -> Commit:
        commit = self.get_commit(commit_id)
        self._move_head(commit)
        logger.debug("Checked out commit %s (branch %s)", commit_id, commit.branch_id)
        return commit

    def merge(self, branch_id: int, commit_id: Optional[int] = None) -> Commit:
        """Merges the latest commit of ``branch_id`` into head."""
        if self._head is None:
            raise MissingEntityError("head", None, "is not set on an empty tree")
        other = self.get_latest(branch_id)
        if other is None:
            raise MissingEntityError("branch", branch_id, "has no commits yet")
        return self._merge(self._commits[self._head], other, commit_id)

    def merge_commits(
        self, parent_id: int, other_id: int, commit_id: Optional[int] = None
    ) -> Commit:
        """Merges ``other_id`` onto ``parent_id``; the result joins the parent's branch."""
        parent = self.get_commit(parent_id)
        other = self.get_commit(other_id)
        return self._merge(parent, other, commit_id)

    def _merge(self, parent: Commit, other: Commit, commit_id: Optional[int]) -> Commit:
        if parent.id == other.id:
            raise InvalidMergeError(parent.id)
        if commit_id is not None:
            self._check_unused(commit_id)
        commit = self._create(parent.branch_id, [parent.id, other.id], commit_id)
        logger.debug("Merged commit %s into %s as %s", other.id, parent.id, commit.id)
        return commit

    def undo(self, confirm_merge: bool = False) -> bool:
        """Removes head and checks out its first parent.

        Returns False, leaving the tree untouched, when it holds one commit
        or none. Head must be a leaf. Undoing a merge commit needs
        ``confirm_merge=True``.
        """
        if len(self._commits) <= 1:
            logger.info("Nothing to undo: tree holds %d commit(s)", len(self._commits))
            return False

        commit = self._commits[self._head]
        if commit.children:
            raise AlreadyHasChildError(commit.id)
        if commit.is_merge_commit() and not confirm_merge:
            raise MergeUndoError(commit.id)

        # Only the first commit of a tree is a root, so head has a parent here.
        for parent_id in commit.parents:
            self._commits[parent_id].remove_child(commit.id)
        del self._commits[commit.id]

        if self._branch_heads.get(commit.branch_id) == commit.id:
            self._branch_heads[commit.branch_id] = self._newest_on(commit.branch_id)
        self._move_head(self._commits[commit.parents[0]])
        logger.debug("Undid commit %s; head is now %s", commit.id, self._head)
        return True

    def reset(self) -> None:
        """Returns the tree to its freshly constructed state.

        Also resets the branch counter, which is shared with every other tree
        built on the same counter.
        """
        self._commits.clear()
        self._branch_heads.clear()
        self._used_ids.clear()
        self._head = None
        self._commit_counter.reset()
        self._branch_counter.reset()
        self._current_branch = self._open_initial_branch()
        logger.debug("Tree reset")

    # --- helpers ---

    def _create(
        self, branch_id: int, parent_ids: List[int], commit_id: Optional[int]
    ) -> Commit:
        # Preconditions are checked by the caller; nothing below can fail.
        if commit_id is None:
            new_id = self.issue_next_id()
        else:
            new_id = self.adopt_explicit_id(commit_id)
        commit = Commit(id=new_id, branch_id=branch_id)
        for parent_id in parent_ids:
            commit.add_parent(parent_id)
            self._commits[parent_id].add_child(new_id)
        self._commits[new_id] = commit
        self._branch_heads[branch_id] = new_id
        self._move_head(commit)
        return commit

    def _move_head(self, commit: Commit) -> None:
        self._head = commit.id
        self._current_branch = commit.branch_id

    def _newest_on(self, branch_id: int) -> Optional[int]:
        for commit in reversed(list(self._commits.values())):
            if commit.branch_id == branch_id:
                return commit.id
        return None
