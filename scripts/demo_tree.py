from git_gud.graph.counters import IdCounter
from git_gud.graph.render import render_log
from git_gud.graph.tree import CommitTree

def main():
    tree = CommitTree(branch_counter=IdCounter())

    root = tree.add_commit()
    tip = tree.add_commit()
    print(f"Committed {root.id} and {tip.id} on branch {tree.current_branch}")

    feature = tree.branch()
    print(f"Allocated branch {feature}")

    # Forking at the root starts the pending branch
    tree.checkout_commit(root.id)
    side = tree.add_commit()
    print(f"Forked commit {side.id} onto branch {side.branch_id}")

    tree.checkout(tip.branch_id)
    merged = tree.merge(feature)
    print(f"Merge commit {merged.id} has parents {merged.parents}")

    print("\nLog:")
    print(render_log(tree))

if __name__ == "__main__":
    main()
