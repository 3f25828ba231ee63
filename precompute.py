# precompute.py
import argparse
import gzip
import logging
import pickle
import sys

from tqdm import tqdm

from graph_index import GraphIndex
from pageranker import MAX_ITERATIONS, build_pagerank
from top_k import top_k

# === CONFIGURATION ===
DEFAULT_INPUT = 'data/links.srt.gz'
DEFAULT_LAMBDA = 0.15
DEFAULT_TAU = 0.0001
DEFAULT_K = 75
PAGERANK_FILE = 'pagerank.txt'
INLINKS_FILE = 'inlinks.txt'
RANKINGS_FILE = 'rankings.pkl'


def read_edge_lines(path):
    with gzip.open(path, 'rt', encoding='utf-8', errors='replace') as f:
        for line in f:
            yield line


def load_graph(path, progress=True):
    index = GraphIndex()
    lines = tqdm(read_edge_lines(path), desc="Loading edges", unit=" lines", disable=not progress)
    accepted = index.load(lines)
    logging.info(f"[LOAD] {accepted} edges, {index.node_count} URLs from {path}")
    return index


def write_pagerank(entries, path):
    with open(path, 'w', encoding='utf-8') as f:
        for rank, (url, score) in enumerate(entries, start=1):
            f.write(f"{url}\t{rank}\t{score:f}\n")
    logging.info(f"[WRITE] {len(entries)} PageRank entries -> {path}")


def write_inlinks(entries, path):
    with open(path, 'w', encoding='utf-8') as f:
        for rank, (url, count) in enumerate(entries, start=1):
            f.write(f"{url}\t{rank}\t{count}\n")
    logging.info(f"[WRITE] {len(entries)} inlink entries -> {path}")


def save_pickle(obj, path):
    with open(path, 'wb') as f:
        pickle.dump(obj, f)


def run(input_file=DEFAULT_INPUT, lam=DEFAULT_LAMBDA, tau=DEFAULT_TAU, k=DEFAULT_K,
        max_iterations=MAX_ITERATIONS, pagerank_out=PAGERANK_FILE,
        inlinks_out=INLINKS_FILE, rankings_out=RANKINGS_FILE, progress=True):
    index = load_graph(input_file, progress=progress)
    pagerank, result = build_pagerank(index, lam, tau, max_iterations)

    top_pages = top_k(pagerank, k)
    top_inlinks = top_k(index.inlink_counts, k)
    logging.info(f"[TOPK] {len(top_pages)} by PageRank, {len(top_inlinks)} by inlinks (K={k})")

    write_pagerank(top_pages, pagerank_out)
    write_inlinks(top_inlinks, inlinks_out)

    rankings = {
        'pagerank': top_pages,
        'inlinks': top_inlinks,
        'nodes': index.node_count,
        'edges': index.edge_count,
        'iterations': result.iterations,
        'converged': result.converged,
    }
    if rankings_out:
        save_pickle(rankings, rankings_out)
    return rankings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Compute PageRank over a gzipped link file")
    parser.add_argument('input', nargs='?', default=DEFAULT_INPUT, help="gzip file of source<TAB>target lines")
    parser.add_argument('lam', nargs='?', type=float, default=DEFAULT_LAMBDA, help="random jump probability")
    parser.add_argument('tau', nargs='?', type=float, default=DEFAULT_TAU, help="L2 convergence threshold")
    parser.add_argument('k', nargs='?', type=int, default=DEFAULT_K, help="number of results to keep")
    parser.add_argument('--max-iterations', type=int, default=MAX_ITERATIONS)
    parser.add_argument('--pagerank-out', default=PAGERANK_FILE)
    parser.add_argument('--inlinks-out', default=INLINKS_FILE)
    parser.add_argument('--rankings-out', default=RANKINGS_FILE)
    parser.add_argument('--no-progress', action='store_true')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        format='[%(asctime)s] %(levelname)s: %(message)s',
        level=logging.DEBUG if args.verbose else logging.INFO
    )

    try:
        rankings = run(args.input, args.lam, args.tau, args.k, args.max_iterations,
                       args.pagerank_out, args.inlinks_out, args.rankings_out,
                       progress=not args.no_progress)
    except (OSError, EOFError, ValueError) as e:
        logging.error(f"[ERROR] PageRank run failed: {e}")
        return 1

    print("Precomputation complete!")
    print(f"PageRank nodes: {rankings['nodes']}")
    print(f"Edges: {rankings['edges']}")
    print(f"Iterations: {rankings['iterations']} ({'converged' if rankings['converged'] else 'iteration cap'})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
