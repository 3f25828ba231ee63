import logging
from collections import namedtuple

import numpy as np

MAX_ITERATIONS = 1000  # hard stop, even when tau is never reached

PageRankResult = namedtuple('PageRankResult', ['scores', 'iterations', 'converged', 'delta'])


def _edge_arrays(node_count, adjacency):
    """Flatten adjacency lists into parallel (source, target) id arrays plus out-degrees."""
    out_degree = np.fromiter((len(targets) for targets in adjacency), dtype=np.int64, count=node_count)
    sources = np.repeat(np.arange(node_count, dtype=np.int64), out_degree)
    targets = np.fromiter(
        (t for out in adjacency for t in out), dtype=np.int64, count=int(out_degree.sum())
    )
    return sources, targets, out_degree


def _frozen(vector):
    vector.setflags(write=False)
    return vector


def power_iterate(node_count, adjacency, lam, tau, max_iterations=MAX_ITERATIONS):
    """
    Power iteration with random jumps and dangling-node redistribution.

    Each round, a node sends (1 - lam) of its rank split evenly over its
    out-links (a duplicated link gets its share twice). Nodes without
    out-links spread that mass over every node instead. Every node also
    receives lam / N from the random jump.

    Stops when the L2 distance between successive estimates is <= tau, or
    after max_iterations rounds. Either way the last estimate is returned;
    `converged` tells the two apart.
    """
    if node_count == 0:
        return PageRankResult(_frozen(np.zeros(0, dtype=np.float64)), 0, True, 0.0)

    if not 0.0 <= lam <= 1.0:
        raise ValueError(f"lambda must be within [0, 1], got {lam}")
    if tau <= 0:
        raise ValueError(f"tau must be positive, got {tau}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
    if len(adjacency) != node_count:
        raise ValueError(f"adjacency has {len(adjacency)} entries for {node_count} nodes")

    sources, targets, out_degree = _edge_arrays(node_count, adjacency)
    dangling = out_degree == 0
    # only linked sources appear in `sources`, so this never divides by zero
    edge_degree = out_degree[sources].astype(np.float64)

    I = np.full(node_count, 1.0 / node_count, dtype=np.float64)
    R = I
    delta = float('inf')
    iteration = 0

    while iteration < max_iterations:
        iteration += 1
        weight = (1.0 - lam) * I

        R = np.full(node_count, lam / node_count, dtype=np.float64)
        np.add.at(R, targets, weight[sources] / edge_degree)
        R += weight[dangling].sum() / node_count

        delta = float(np.linalg.norm(I - R))
        logging.debug(f"[PAGERANK] iter={iteration} delta={delta:.6e}")
        if delta <= tau:
            logging.info(f"[PAGERANK] Converged after {iteration} iterations (delta={delta:.6e}).")
            return PageRankResult(_frozen(R), iteration, True, delta)
        I = R.copy()

    logging.info(f"[PAGERANK] Hit iteration cap of {max_iterations} (delta={delta:.6e}).")
    return PageRankResult(_frozen(R), iteration, False, delta)


def compute_pagerank(node_count, adjacency, lam, tau, max_iterations=MAX_ITERATIONS):
    return power_iterate(node_count, adjacency, lam, tau, max_iterations).scores


def build_pagerank(index, lam=0.15, tau=0.0001, max_iterations=MAX_ITERATIONS):
    """Run PageRank over a GraphIndex; returns ({url: score}, PageRankResult)."""
    result = power_iterate(index.node_count, index.adjacency, lam, tau, max_iterations)

    #logging
    logging.info(f"[PAGERANK] PageRank computed with {index.node_count} URLs and {index.edge_count} edges.")

    rank = {url: float(score) for url, score in zip(index.urls, result.scores)}
    return rank, result
