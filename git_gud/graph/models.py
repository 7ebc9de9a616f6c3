from dataclasses import dataclass, field
from typing import List, Mapping

from git_gud.graph.errors import MissingEntityError, SelfReferenceError


@dataclass
class Commit:
    id: int
    branch_id: int
    # Neighbours are stored by ID; the owning tree resolves them.
    parents: List[int] = field(default_factory=list)
    children: List[int] = field(default_factory=list)

    @property
    def num_parents(self) -> int:
        return len(self.parents)

    @property
    def num_children(self) -> int:
        return len(self.children)

    def is_merge_commit(self) -> bool:
        return len(self.parents) > 1

    def is_leaf(self) -> bool:
        return not self.children

    def is_new_branch(self, dag: Mapping[int, "Commit"]) -> bool:
        """True when this is the first commit on its branch.

        That holds for a root, or when no parent found in ``dag`` shares
        this commit's branch.
        """
        if not self.parents:
            return True
        return all(
            dag[pid].branch_id != self.branch_id for pid in self.parents if pid in dag
        )

    def add_parent(self, parent_id: int) -> None:
        """Appends a parent. The parent's children are left untouched."""
        if parent_id == self.id:
            raise SelfReferenceError(self.id, "parent")
        self.parents.append(parent_id)

    def add_child(self, child_id: int) -> None:
        """Appends a child. The child's parents are left untouched."""
        if child_id == self.id:
            raise SelfReferenceError(self.id, "child")
        self.children.append(child_id)

    def remove_parent(self, parent_id: int) -> None:
        try:
            self.parents.remove(parent_id)
        except ValueError:
            raise MissingEntityError(
                "parent", parent_id, f"is not a parent of commit {self.id}"
            ) from None

    def remove_child(self, child_id: int) -> None:
        try:
            self.children.remove(child_id)
        except ValueError:
            raise MissingEntityError(
                "child", child_id, f"is not a child of commit {self.id}"
            ) from None
