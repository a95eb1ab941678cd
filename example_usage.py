#!/usr/bin/env python3
"""
Example usage of the cost tree.

Builds the classic cake recipe as a tree of timed tasks, then shows
aggregated costs, lineage context and tree rendering.
"""

import logging

from cost_tree import InvalidArgument, RenderOptions, TaskGraph, new_composite, new_leaf, print_tree


def make_cake():
    """Build the cake recipe tree; every basic step takes one minute."""
    batter = new_composite("Make batter")
    batter << new_leaf("Add dry ingredients", 1) << new_leaf("Add liquids", 1) << new_leaf("Mix", 1)

    cake = new_composite("Make cake")
    cake.add(batter)
    cake.add(new_leaf("Fill pan", 1))
    cake.add(new_leaf("Bake", 1))
    cake.add(new_leaf("Frost", 1))
    return cake


def main():
    """Demonstrate cost tree functionality."""
    logging.basicConfig(level=logging.DEBUG)
    options = RenderOptions(cost_unit="min")

    print("1. Building the cake...")
    cake = make_cake()
    print_tree(cake, options=options)
    print(f"Total: {options.format_cost(cake.cost())} over {cake.leaf_count()} basic tasks")

    print("\n2. Adding a packaging step...")
    package = new_composite("Package cake")
    package << new_leaf("Box", 1) << new_leaf("Label", 1)
    cake.add(package)
    print(f"Total: {options.format_cost(cake.cost())}")

    print("\n3. Lineage context for 'Mix':")
    graph = TaskGraph(cake, options)
    print(graph.get_lineage_context(graph.find("Mix")))

    print("\n4. Removing the batter step...")
    batter = graph.find("Make batter")
    cake.remove(batter)
    print(f"Total: {options.format_cost(cake.cost())}, batter parent: {batter.parent}")

    print("\n5. Cycles are rejected:")
    try:
        package.add(cake)
    except InvalidArgument as e:
        print(f"Rejected: {e}")

    print("\n6. Statistics:")
    for key, value in graph.get_task_stats().items():
        print(f"  {key.replace('_', ' ').title()}: {value}")


if __name__ == "__main__":
    main()
