import logging
import math
from collections import defaultdict

from models.base import ModuleID
from models.graph import ModuleGraph
from models.metrics import Cycle, EntropyReport, NodeEntropy, Weighting

logger = logging.getLogger(__name__)


def find_cycles(graph: ModuleGraph) -> list[Cycle]:
    """Strongly connected components of size > 1, plus self-loops.

    Iterative Tarjan over ids and neighbors in sorted order. Members of each
    cycle are sorted and cycles are ordered by their smallest member, so the
    result does not depend on where the traversal started or on the order in
    which edges were inserted.
    """

    index_of: dict[ModuleID, int] = {}
    lowlink: dict[ModuleID, int] = {}
    on_stack: set[ModuleID] = set()
    stack: list[ModuleID] = []
    components: list[list[ModuleID]] = []
    counter = 0

    for start in sorted(graph.nodes):
        if start in index_of:
            continue

        work: list[tuple[ModuleID, list[ModuleID], int]] = [
            (start, graph.dependencies(start), 0)
        ]
        index_of[start] = lowlink[start] = counter
        counter += 1
        stack.append(start)
        on_stack.add(start)

        while work:
            node, neighbors, position = work[-1]
            if position < len(neighbors):
                work[-1] = (node, neighbors, position + 1)
                neighbor = neighbors[position]
                if neighbor not in index_of:
                    index_of[neighbor] = lowlink[neighbor] = counter
                    counter += 1
                    stack.append(neighbor)
                    on_stack.add(neighbor)
                    work.append((neighbor, graph.dependencies(neighbor), 0))
                elif neighbor in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[neighbor])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                component: list[ModuleID] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(component)

    cycles: list[Cycle] = []
    for component in components:
        if len(component) == 1:
            only = component[0]
            if only not in graph.dependencies(only):
                continue
        cycles.append(Cycle(members=tuple(sorted(component))))

    cycles.sort(key=lambda cycle: cycle.members[0])
    logger.debug("Found %d cycles", len(cycles))
    return cycles


def shannon_entropy(weights: list[int]) -> float:
    """Base-2 entropy of a weight distribution. 0 for zero or one weight."""

    total = sum(weights)
    if total <= 0:
        return 0.0
    result = 0.0
    for weight in weights:
        if weight <= 0:
            continue
        p = weight / total
        result -= p * math.log2(p)
    # -0.0 and tiny negative rounding noise for a single neighbor
    return max(result, 0.0)


def entropy(graph: ModuleGraph, weighting: Weighting = Weighting.SYMBOLS) -> EntropyReport:
    """Compute how evenly each module spreads its imports over its dependencies.

    Args:
        graph: The module graph.
        weighting: ``SYMBOLS`` weighs each edge by its number of imported
            symbols (at least 1), ``EDGES`` weighs each edge 1.

    Returns:
        Per-module scores and the graph score, which is the mean of the module
        scores weighted by each module's total outgoing weight.
    """

    report = EntropyReport(weighting=weighting)
    weighted_sum = 0.0
    total_weight = 0

    for module_id in sorted(graph.nodes):
        per_neighbor: dict[ModuleID, int] = defaultdict(int)
        for edge in graph.outgoing(module_id):
            per_neighbor[edge.dst] += edge.weight if weighting == Weighting.SYMBOLS else 1

        weights = [per_neighbor[neighbor] for neighbor in sorted(per_neighbor)]
        score = shannon_entropy(weights)
        weight = sum(weights)
        report.nodes[module_id] = NodeEntropy(
            entropy=score,
            out_degree=len(per_neighbor),
            in_degree=len(graph.dependents(module_id)),
            weight=weight,
        )
        if per_neighbor:
            weighted_sum += score * weight
            total_weight += weight

    report.graph_entropy = weighted_sum / total_weight if total_weight else 0.0
    return report
