import gzip
import pickle

import pytest

import precompute


def write_links(path, lines):
    with gzip.open(path, 'wt', encoding='utf-8') as f:
        f.writelines(lines)
    return path


@pytest.fixture
def links_file(tmp_path):
    return write_links(tmp_path / "links.srt.gz", [
        "http://a\thttp://b\n",
        "http://b\thttp://a\n",
        "http://c\thttp://a\n",
        "not an edge\n",
        "http://c\thttp://d\n",
        "http://a\thttp://b\n",
    ])


def test_load_graph_reads_gzip_and_skips_bad_lines(links_file):
    index = precompute.load_graph(links_file, progress=False)

    assert index.urls == ["http://a", "http://b", "http://c", "http://d"]
    assert index.edge_count == 5
    assert index.inlink_counts["http://b"] == 2


def test_run_writes_both_rankings(links_file, tmp_path):
    pagerank_out = tmp_path / "pagerank.txt"
    inlinks_out = tmp_path / "inlinks.txt"
    rankings_out = tmp_path / "rankings.pkl"

    rankings = precompute.run(links_file, 0.15, 0.0001, 3, 1000,
                              pagerank_out, inlinks_out, rankings_out, progress=False)

    pr_lines = pagerank_out.read_text(encoding='utf-8').splitlines()
    assert len(pr_lines) == 3
    fields = [line.split('\t') for line in pr_lines]
    assert [f[1] for f in fields] == ["1", "2", "3"]
    scores = [float(f[2]) for f in fields]
    assert scores == sorted(scores, reverse=True)
    assert len(fields[0][2].split('.')[1]) == 6

    in_lines = inlinks_out.read_text(encoding='utf-8').splitlines()
    # a and b tie on two inlinks; b was first seen as a target
    assert in_lines == ["http://b\t1\t2", "http://a\t2\t2", "http://d\t3\t1"]

    with open(rankings_out, 'rb') as f:
        saved = pickle.load(f)
    assert saved == rankings
    assert saved['nodes'] == 4
    assert saved['edges'] == 5
    assert saved['converged']


def test_inlink_ranking_is_limited_to_distinct_targets(links_file, tmp_path):
    rankings = precompute.run(links_file, k=50, pagerank_out=tmp_path / "p.txt",
                              inlinks_out=tmp_path / "i.txt", rankings_out=None, progress=False)

    assert len(rankings['pagerank']) == 4
    assert len(rankings['inlinks']) == 3


def test_main_reports_missing_input(tmp_path, caplog):
    code = precompute.main([str(tmp_path / "missing.gz"), "--no-progress",
                            "--pagerank-out", str(tmp_path / "p.txt"),
                            "--inlinks-out", str(tmp_path / "i.txt"),
                            "--rankings-out", str(tmp_path / "r.pkl")])

    assert code == 1
    assert "PageRank run failed" in caplog.text
    assert not (tmp_path / "p.txt").exists()


def test_main_positional_arguments(links_file, tmp_path, capsys):
    code = precompute.main([str(links_file), "0.2", "0.001", "2", "--no-progress",
                            "--pagerank-out", str(tmp_path / "p.txt"),
                            "--inlinks-out", str(tmp_path / "i.txt"),
                            "--rankings-out", str(tmp_path / "r.pkl")])

    assert code == 0
    assert len((tmp_path / "p.txt").read_text().splitlines()) == 2
    assert "PageRank nodes: 4" in capsys.readouterr().out


def test_main_rejects_bad_lambda(links_file, tmp_path):
    code = precompute.main([str(links_file), "1.5", "--no-progress",
                            "--pagerank-out", str(tmp_path / "p.txt"),
                            "--inlinks-out", str(tmp_path / "i.txt"),
                            "--rankings-out", str(tmp_path / "r.pkl")])
    assert code == 1


def test_invalid_utf8_bytes_do_not_abort_the_run(tmp_path):
    path = tmp_path / "links.srt.gz"
    with gzip.open(path, 'wb') as f:
        f.write(b"http://a\thttp://b\n")
        f.write(b"http://b\thttp://caf\xe9\n")
        f.write(b"http://b\thttp://a\n")

    code = precompute.main([str(path), "--no-progress",
                            "--pagerank-out", str(tmp_path / "p.txt"),
                            "--inlinks-out", str(tmp_path / "i.txt"),
                            "--rankings-out", str(tmp_path / "r.pkl")])

    assert code == 0
    index = precompute.load_graph(path, progress=False)
    assert index.edge_count == 3
    assert "http://caf\ufffd" in index


def test_main_reports_truncated_gzip(links_file, tmp_path, caplog):
    data = links_file.read_bytes()
    truncated = tmp_path / "truncated.gz"
    truncated.write_bytes(data[:len(data) // 2])

    code = precompute.main([str(truncated), "--no-progress",
                            "--pagerank-out", str(tmp_path / "p.txt"),
                            "--inlinks-out", str(tmp_path / "i.txt"),
                            "--rankings-out", str(tmp_path / "r.pkl")])

    assert code == 1
    assert "PageRank run failed" in caplog.text
