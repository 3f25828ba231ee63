# app.py
from flask import Flask, request, render_template, current_app
import logging
import pickle

from precompute import RANKINGS_FILE

app = Flask(__name__)
app.config.setdefault("RANKINGS_FILE", RANKINGS_FILE)

_cache = {}


def load_pickle(path):
    with open(path, 'rb') as f:
        return pickle.load(f)


def get_rankings():
    path = current_app.config["RANKINGS_FILE"]
    if path not in _cache:
        logging.info(f"[INFO] Loading rankings from {path}...")
        _cache[path] = load_pickle(path)
    return _cache[path]


@app.route("/", methods=["GET"])
def home():
    try:
        rankings = get_rankings()
    except FileNotFoundError:
        return "Rankings not computed yet. Run precompute.py first.", 503

    k = request.args.get("k", type=int)
    pagerank = rankings['pagerank']
    inlinks = rankings['inlinks']
    if k is not None and k > 0:
        pagerank, inlinks = pagerank[:k], inlinks[:k]

    return render_template("index.html", pagerank=pagerank, inlinks=inlinks, stats=rankings)


if __name__ == "__main__":
    app.run(debug=True)
