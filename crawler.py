# === DFS Link Harvester: writes the source<TAB>target edge file for precompute.py ===
import gzip
import os
import time
import logging
import threading
import requests
from bs4 import BeautifulSoup
from collections import defaultdict
from urllib.parse import urlparse, urljoin, urlunparse
from urllib.robotparser import RobotFileParser
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from concurrent.futures import ThreadPoolExecutor

# === CONFIGURATION ===
CRAWL_DELAY = 0.3
MAX_PAGES_PER_DOMAIN = 15
MAX_PAGES_TOTAL = 30
EDGES_FILE = 'data/links.srt.gz'
THREAD_COUNT = 8
MAX_DEPTH = 5

EXCLUDE_PATTERNS = [
    "facebook", "login", "signup", "donate", "mailto:", "tel:",
    "privacy", "terms", "itunes.apple.com", "apps.apple.com",
    "play.google.com", "twitter"
]
IGNORE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.css', '.js', '.pdf',
                     '.zip', '.mp4', '.webp', '.svg', '.woff2')

HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; linkrank-harvester/0.1)"
}

thread_local = threading.local()


def get_session():
    if not hasattr(thread_local, "session"):
        session = requests.Session()
        retries = Retry(total=3, backoff_factor=0.5, status_forcelist=[429, 500, 502, 503, 504])
        adapter = HTTPAdapter(max_retries=retries)
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        session.headers.update(HEADERS)
        thread_local.session = session
    return thread_local.session


def normalize_url(url):
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = parsed.path.rstrip('/') or '/'
    return urlunparse((scheme, netloc, path, '', '', ''))


def is_valid_url(url):
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        return False
    return not any(url.lower().endswith(ext) for ext in IGNORE_EXTENSIONS)


def is_relevant(url):
    return all(p not in url.lower() for p in EXCLUDE_PATTERNS)


def extract_links(base_url, html):
    """Normalized outbound links of a page, in document order (repeats kept)."""
    soup = BeautifulSoup(html, 'html.parser')
    links = []
    for a in soup.find_all('a', href=True):
        url = normalize_url(urljoin(base_url, a['href']))
        if is_valid_url(url) and is_relevant(url):
            links.append(url)
    return links


def throttle(domain):
    if not hasattr(thread_local, "domain_access"):
        thread_local.domain_access = defaultdict(float)

    elapsed = time.time() - thread_local.domain_access[domain]
    if elapsed < CRAWL_DELAY:
        time.sleep(CRAWL_DELAY - elapsed)
    thread_local.domain_access[domain] = time.time()


def is_allowed(url, rp_map):
    domain = urlparse(url).netloc
    if domain not in rp_map:
        rp = RobotFileParser()
        rp.set_url(f"{urlparse(url).scheme}://{domain}/robots.txt")
        try:
            rp.read()
            rp_map[domain] = rp
        except OSError as e:
            logging.debug(f"[ROBOTS] {domain} unreadable ({e}), assuming allowed")
            rp_map[domain] = None
    rp = rp_map[domain]
    return rp is None or rp.can_fetch("*", url)


def fetch(url):
    try:
        r = get_session().get(url, timeout=5, allow_redirects=True)
    except requests.RequestException as e:
        logging.warning(f"[FETCH ERROR] {url} - {e}")
        return None
    if r.status_code != 200 or 'html' not in r.headers.get('Content-Type', 'text/html'):
        return None
    return r.text


def crawl_seed(seed, rp_map=None, max_pages=MAX_PAGES_TOTAL, max_depth=MAX_DEPTH):
    """Depth-first crawl from one seed; returns the (source, target) edges it saw."""
    rp_map = {} if rp_map is None else rp_map
    stack = [(normalize_url(seed), 0)]
    visited = set()
    edges = []
    domain_hits = defaultdict(int)

    while stack and len(visited) < max_pages:
        url, depth = stack.pop()
        domain = urlparse(url).netloc
        if url in visited or depth > max_depth or domain_hits[domain] >= MAX_PAGES_PER_DOMAIN:
            continue
        visited.add(url)

        if not is_allowed(url, rp_map):
            logging.info(f"[BLOCKED BY ROBOTS] {url}")
            continue

        throttle(domain)
        html = fetch(url)
        if html is None:
            logging.info(f"[SKIP] No HTML: {url}")
            continue

        domain_hits[domain] += 1
        links = extract_links(url, html)
        logging.info(f"[CRAWL] {url} -> {len(links)} links")
        for next_url in links:
            edges.append((url, next_url))
            if next_url not in visited:
                stack.append((next_url, depth + 1))

    return edges


def crawl(seeds, max_pages=MAX_PAGES_TOTAL, max_depth=MAX_DEPTH):
    with ThreadPoolExecutor(max_workers=THREAD_COUNT) as executor:
        futures = [executor.submit(crawl_seed, seed, {}, max_pages, max_depth) for seed in seeds]
        edges = []
        for future in futures:
            edges.extend(future.result())
    logging.info(f"*Crawl finished. Total edges: {len(edges)}*")
    return edges


def write_edges(edges, path=EDGES_FILE):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with gzip.open(path, 'wt', encoding='utf-8') as f:
        for source, target in edges:
            f.write(f"{source}\t{target}\n")


if __name__ == "__main__":
    import sys

    logging.basicConfig(
        format='[%(asctime)s] %(levelname)s: %(message)s',
        level=logging.INFO
    )
    seed_urls = sys.argv[1:] or [
        "https://www.carwale.com/new/best-cars/",
        "https://www.bikewale.com/best-bikes-in-india/"
    ]
    write_edges(crawl(seed_urls))
