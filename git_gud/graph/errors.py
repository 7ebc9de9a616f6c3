from typing import Optional


class GitGudError(ValueError):
    """Base class for every rejected tree operation.

    All failures are invalid-argument conditions on local state, so nothing
    here is retryable and nothing is partially applied.
    """


class SelfReferenceError(GitGudError):
    def __init__(self, commit_id: int, relation: str):
        self.commit_id = commit_id
        self.relation = relation
        super().__init__(f"Commit {commit_id} cannot be its own {relation}")


class MissingEntityError(GitGudError):
    def __init__(self, kind: str, entity_id: Optional[int], reason: str = "does not exist"):
        self.kind = kind
        self.entity_id = entity_id
        subject = kind.capitalize() if entity_id is None else f"{kind.capitalize()} {entity_id}"
        super().__init__(f"{subject} {reason}")


class AlreadyHasChildError(GitGudError):
    def __init__(self, commit_id: int):
        self.commit_id = commit_id
        super().__init__(f"Commit {commit_id} already has a child")


class DuplicateCommitError(GitGudError):
    def __init__(self, commit_id: int):
        self.commit_id = commit_id
        super().__init__(f"Commit ID {commit_id} has already been used in this tree")


class InvalidMergeError(GitGudError):
    def __init__(self, commit_id: int):
        self.commit_id = commit_id
        super().__init__(f"Cannot merge commit {commit_id} with itself")


class MergeUndoError(GitGudError):
    def __init__(self, commit_id: int):
        self.commit_id = commit_id
        super().__init__(
            f"Commit {commit_id} is a merge commit; pass confirm_merge=True to "
            f"roll back to its first parent"
        )
