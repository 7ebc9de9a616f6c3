import pytest

from git_gud.graph.counters import IdCounter
from git_gud.graph.errors import (
    AlreadyHasChildError,
    DuplicateCommitError,
    InvalidMergeError,
    MergeUndoError,
    MissingEntityError,
)
from git_gud.graph.tree import CommitTree


def snapshot(tree):
    """Everything a caller can observe about the tree."""
    head = tree.head
    return (
        head.id if head else None,
        tree.current_branch,
        tree.get_all_commit_ids(),
        tree.branch_heads(),
        [(c.id, c.branch_id, list(c.parents), list(c.children)) for c in tree.all_commits],
    )


def assert_consistent(tree):
    ids = tree.get_all_commit_ids()
    assert len(ids) == len(set(ids))
    assert all(tree.is_valid_commit_id(i) for i in ids)
    branch_ids = tree.get_all_branch_ids()
    assert len(branch_ids) == len(set(branch_ids))
    if tree.num_commits:
        assert tree.head.id in ids
        assert tree.current_branch == tree.head.branch_id


def test_empty_tree(tree):
    assert tree.head is None
    assert tree.num_commits == 0
    assert tree.num_branches == 1
    assert tree.current_branch == 0
    assert tree.get_latest() is None
    assert tree.get_all_commit_ids() == []


def test_first_commit(tree):
    c0 = tree.add_commit()

    assert c0.id == 0
    assert c0.num_parents == 0
    assert c0.num_children == 0
    assert tree.is_head(c0.id)
    assert tree.is_new_branch(c0.id)
    assert tree.get_latest(0) is c0


def test_add_commit_links_both_directions(tree):
    c0 = tree.add_commit()
    c1 = tree.add_commit()

    assert c1.parents == [c0.id]
    assert c0.children == [c1.id]
    assert tree.is_head(c1.id)
    assert not tree.is_new_branch(c1.id)


def test_add_commit_on_non_leaf_head_rejected(tree):
    c0 = tree.add_commit()
    tree.add_commit()
    tree.checkout_commit(c0.id)
    before = snapshot(tree)

    with pytest.raises(AlreadyHasChildError):
        tree.add_commit()
    assert snapshot(tree) == before


def test_add_commit_by_parent_twice_rejected(tree):
    c0 = tree.add_commit()
    tree.add_commit(parent_id=c0.id)
    before = snapshot(tree)

    with pytest.raises(AlreadyHasChildError):
        tree.add_commit(parent_id=c0.id)
    assert snapshot(tree) == before


def test_add_commit_by_parent_takes_parent_branch(forked_tree):
    tree, c0, c1, c2, feature = forked_tree

    c3 = tree.add_commit(parent_id=c2.id)

    assert c3.branch_id == feature
    assert tree.current_branch == feature
    assert tree.is_head(c3.id)
    assert tree.get_latest(feature) is c3


def test_add_commit_unknown_parent(tree):
    tree.add_commit()
    with pytest.raises(MissingEntityError):
        tree.add_commit(parent_id=42)
    assert tree.num_commits == 1


def test_add_commit_with_explicit_id(tree):
    c = tree.add_commit(commit_id=10)
    assert c.id == 10
    # The counter skips past adopted IDs
    assert tree.add_commit().id == 11


def test_explicit_id_cannot_be_reused(tree):
    tree.add_commit()
    with pytest.raises(DuplicateCommitError):
        tree.add_commit(commit_id=0)
    assert tree.num_commits == 1


def test_branch_does_not_move_head(tree):
    c0 = tree.add_commit()
    feature = tree.branch()

    assert feature == 1
    assert tree.is_head(c0.id)
    assert tree.current_branch == 0
    assert tree.is_valid_branch_id(feature)
    assert tree.pending_branches() == [feature]


def test_branch_on_empty_tree(tree):
    assert tree.branch() == 1
    assert tree.num_branches == 2
    assert tree.num_commits == 0


def test_checkout_pending_branch_fails(tree):
    tree.add_commit()
    feature = tree.branch()

    with pytest.raises(MissingEntityError):
        tree.checkout(feature)
    assert tree.current_branch == 0


def test_checkout_unknown_branch(tree):
    tree.add_commit()
    with pytest.raises(MissingEntityError):
        tree.checkout(7)


def test_checkout_commit_adopts_branch(forked_tree):
    tree, c0, c1, c2, feature = forked_tree

    tree.checkout_commit(c2.id)
    assert tree.current_branch == feature
    tree.checkout_commit(c0.id)
    assert tree.current_branch == 0


def test_checkout_unknown_commit(tree):
    tree.add_commit()
    with pytest.raises(MissingEntityError):
        tree.checkout_commit(99)
    assert tree.is_head(0)


def test_fork_starts_pending_branch(forked_tree):
    tree, c0, c1, c2, feature = forked_tree

    assert c0.children == [c1.id, c2.id]
    assert c2.branch_id == feature
    assert tree.is_new_branch(c2.id)
    assert tree.pending_branches() == []
    assert tree.get_latest(feature) is c2


def test_fork_uses_oldest_pending_branch(tree):
    c0 = tree.add_commit()
    tree.add_commit()
    first = tree.branch()
    second = tree.branch()
    tree.checkout_commit(c0.id)

    assert tree.add_commit().branch_id == first
    assert tree.pending_branches() == [second]


def test_merge_branch_into_head(forked_tree):
    tree, c0, c1, c2, feature = forked_tree

    c3 = tree.merge(feature)

    assert c3.parents == [c1.id, c2.id]
    assert c3.is_merge_commit()
    assert c3.branch_id == 0
    assert tree.is_head(c3.id)
    assert tree.get_latest(0) is c3
    assert c1.children == [c3.id]
    assert c2.children == [c3.id]
    assert_consistent(tree)


def test_merge_unknown_or_pending_branch(forked_tree):
    tree, *_ = forked_tree
    pending = tree.branch()
    before = snapshot(tree)

    with pytest.raises(MissingEntityError):
        tree.merge(99)
    with pytest.raises(MissingEntityError):
        tree.merge(pending)
    assert snapshot(tree) == before


def test_merge_branch_with_itself(tree):
    tree.add_commit()
    with pytest.raises(InvalidMergeError):
        tree.merge(0)
    assert tree.num_commits == 1


def test_merge_on_empty_tree(tree):
    with pytest.raises(MissingEntityError):
        tree.merge(0)


def test_merge_commits(forked_tree):
    tree, c0, c1, c2, feature = forked_tree

    c3 = tree.merge_commits(c2.id, c1.id)

    assert c3.parents == [c2.id, c1.id]
    assert c3.branch_id == feature
    assert tree.is_head(c3.id)
    assert tree.current_branch == feature


def test_merge_commits_unknown_id(forked_tree):
    tree, c0, c1, c2, feature = forked_tree
    before = snapshot(tree)

    with pytest.raises(MissingEntityError):
        tree.merge_commits(c1.id, 50)
    with pytest.raises(MissingEntityError):
        tree.merge_commits(50, c1.id)
    assert snapshot(tree) == before


def test_undo_single_commit_is_noop(tree):
    tree.add_commit()
    assert tree.undo() is False
    assert tree.num_commits == 1


def test_undo_empty_tree_is_noop(tree):
    assert tree.undo() is False
    assert tree.num_commits == 0


def test_undo_moves_head_to_parent(tree):
    c0 = tree.add_commit()
    c1 = tree.add_commit()

    assert tree.undo() is True

    assert tree.get_all_commit_ids() == [c0.id]
    assert not tree.is_valid_commit_id(c1.id)
    assert c0.children == []
    assert tree.is_head(c0.id)
    assert tree.get_latest(0) is c0


def test_undo_then_redo_gets_fresh_id(tree):
    tree.add_commit()
    tree.add_commit()
    c2 = tree.add_commit()
    tree.undo()

    redo = tree.add_commit()

    assert redo.id != c2.id
    assert redo.parents == c2.parents
    assert redo.branch_id == c2.branch_id
    assert tree.num_commits == 3
    with pytest.raises(DuplicateCommitError):
        tree.add_commit(commit_id=c2.id)


def test_undo_non_leaf_head_rejected(tree):
    c0 = tree.add_commit()
    tree.add_commit()
    tree.checkout_commit(c0.id)
    before = snapshot(tree)

    with pytest.raises(AlreadyHasChildError):
        tree.undo()
    assert snapshot(tree) == before


def test_undo_merge_needs_confirmation(forked_tree):
    tree, c0, c1, c2, feature = forked_tree
    c3 = tree.merge(feature)
    before = snapshot(tree)

    with pytest.raises(MergeUndoError):
        tree.undo()
    assert snapshot(tree) == before

    assert tree.undo(confirm_merge=True) is True
    assert not tree.is_valid_commit_id(c3.id)
    assert tree.is_head(c1.id)
    assert c1.children == []
    assert c2.children == []
    assert tree.get_latest(0) is c1


def test_undo_first_commit_of_branch_leaves_it_pending(forked_tree):
    tree, c0, c1, c2, feature = forked_tree
    tree.checkout(feature)

    tree.undo()

    assert tree.is_head(c0.id)
    assert tree.current_branch == 0
    assert tree.pending_branches() == [feature]
    assert tree.get_latest(feature) is None
    assert_consistent(tree)


def test_reset_matches_fresh_tree(forked_tree):
    tree, *_ = forked_tree
    tree.merge(1)
    tree.branch()

    tree.reset()

    fresh = CommitTree(branch_counter=IdCounter())
    assert snapshot(tree) == snapshot(fresh)
    assert tree.num_branches == fresh.num_branches
    assert tree.add_commit().id == 0


def test_queries_return_copies(tree):
    tree.add_commit()
    tree.get_all_commit_ids().append(5)
    tree.branch_heads()[9] = 0

    assert tree.get_all_commit_ids() == [0]
    assert not tree.is_valid_branch_id(9)


def test_get_latest_unknown_branch(tree):
    with pytest.raises(MissingEntityError):
        tree.get_latest(3)


def test_long_sequence_stays_consistent(tree):
    root = tree.add_commit()
    for _ in range(3):
        tree.add_commit()
        assert_consistent(tree)
    for _ in range(3):
        b = tree.branch()
        tree.checkout_commit(root.id)
        tree.add_commit()
        tree.add_commit()
        tree.checkout(0)
        tree.merge(b)
        assert_consistent(tree)
    tree.undo(confirm_merge=True)
    assert_consistent(tree)
    assert tree.num_commits == 1 + 3 + 3 * 3 - 1
