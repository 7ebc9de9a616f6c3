from dataclasses import dataclass, field
from typing import List, Tuple

from git_gud.graph.tree import CommitTree


@dataclass
class GraphNode:
    id: int
    branch_id: int
    label: str
    is_head: bool = False
    is_merge: bool = False
    branch_tips: List[int] = field(default_factory=list)


@dataclass
class GraphEdge:
    source: int
    target: int


def _tips_by_commit(tree: CommitTree) -> dict:
    tips: dict = {}
    for branch_id, commit_id in tree.branch_heads().items():
        if commit_id is not None:
            tips.setdefault(commit_id, []).append(branch_id)
    return tips


def render_log(tree: CommitTree) -> str:
    """Renders the tree newest first, one commit per line.

    Example line: ``* 3 (1 2) [branch 0] merge <- branch 0, HEAD``
    """
    if tree.num_commits == 0:
        return "(empty tree)"

    tips = _tips_by_commit(tree)
    lines = []
    for commit in reversed(tree.all_commits):
        parents = " ".join(str(p) for p in commit.parents)
        line = f"* {commit.id} ({parents}) [branch {commit.branch_id}]"
        if commit.is_merge_commit():
            line += " merge"
        refs = [f"branch {b}" for b in tips.get(commit.id, [])]
        if tree.is_head(commit.id):
            refs.append("HEAD")
        if refs:
            line += " <- " + ", ".join(refs)
        lines.append(line)

    pending = tree.pending_branches()
    if pending:
        lines.append("pending branches: " + ", ".join(str(b) for b in pending))
    return "\n".join(lines)


def build_graph(tree: CommitTree) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """Builds nodes and edges for a UI. Edges point child -> parent (new -> old)."""
    tips = _tips_by_commit(tree)
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []
    for commit in tree.all_commits:
        nodes.append(GraphNode(
            id=commit.id,
            branch_id=commit.branch_id,
            label=f"{commit.id} [branch {commit.branch_id}]",
            is_head=tree.is_head(commit.id),
            is_merge=commit.is_merge_commit(),
            branch_tips=tips.get(commit.id, []),
        ))
        for parent in commit.parents:
            edges.append(GraphEdge(source=commit.id, target=parent))
    return nodes, edges
