import pytest

from git_gud.graph.counters import IdCounter
from git_gud.graph.tree import CommitTree


@pytest.fixture
def tree():
    # Private branch counter so tests never depend on each other
    return CommitTree(branch_counter=IdCounter())


@pytest.fixture
def forked_tree(tree):
    """C0 -> C1 on branch 0, C0 -> C2 on branch 1, head at C1."""
    c0 = tree.add_commit()
    c1 = tree.add_commit()
    feature = tree.branch()
    tree.checkout_commit(c0.id)
    c2 = tree.add_commit()
    tree.checkout(0)
    return tree, c0, c1, c2, feature
