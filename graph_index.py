# graph_index.py
from collections import defaultdict


def parse_edge_line(line):
    """Split a raw `source<TAB>target` line, or return None if it isn't one.

    Trailing empty fields are dropped before counting, so a line ending in a
    stray tab is still an edge while `source<TAB>` alone is not.
    """
    parts = line.rstrip('\r\n').split('\t')
    while parts and not parts[-1]:
        parts.pop()
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


class GraphIndex:
    """
    Intern table for URLs plus the link structure built on top of it.

    Every URL seen as a source or target gets a dense id in first-seen order.
    `adjacency[i]` holds the target ids of node i, duplicates and self-loops
    included; nodes only ever seen as targets keep an empty list.
    """

    def __init__(self):
        self._ids = {}
        self.urls = []
        self.adjacency = []
        self.inlink_counts = defaultdict(int)
        self.edge_count = 0

    @property
    def node_count(self):
        return len(self.urls)

    def register(self, url):
        node_id = self._ids.get(url)
        if node_id is None:
            node_id = len(self.urls)
            self._ids[url] = node_id
            self.urls.append(url)
            self.adjacency.append([])
        return node_id

    def lookup(self, url):
        return self._ids.get(url)

    def url(self, node_id):
        return self.urls[node_id]

    def add_edge(self, source, target):
        s_id = self.register(source)
        t_id = self.register(target)
        self.adjacency[s_id].append(t_id)
        self.inlink_counts[target] += 1
        self.edge_count += 1

    def add_line(self, line):
        edge = parse_edge_line(line)
        if edge is None:
            return False
        self.add_edge(*edge)
        return True

    def load(self, lines):
        accepted = 0
        for line in lines:
            if self.add_line(line):
                accepted += 1
        return accepted

    def __len__(self):
        return len(self.urls)

    def __contains__(self, url):
        return url in self._ids
