"""
Unit tests for the docseek command line.
"""

import json
import logging

import pytest
from docseek.cli import main
from docseek.tfidf.persistence import load_index_file


@pytest.fixture
def docs_dir(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "glClear.xml").write_text("<refentry><refname>glClear</refname><p>clear buffers</p></refentry>")
    (docs / "glViewport.txt").write_text("glViewport sets the viewport")
    (docs / "broken.xml").write_text("<refentry>")
    return docs


def run(*argv):
    return main(["--log-file", "", "--log-level", "WARNING", *argv])


class TestIndexCommand:

    def test_builds_and_saves(self, docs_dir, tmp_path, capsys):
        output = tmp_path / "index.json"

        assert run("index", str(docs_dir), "--output", str(output)) == 0

        index = load_index_file(output)
        assert sorted(index) == [
            (docs_dir / "glClear.xml").as_posix(),
            (docs_dir / "glViewport.txt").as_posix(),
        ]
        assert "Indexed 2 documents" in capsys.readouterr().out

    def test_strict_fails_on_skipped_documents(self, docs_dir, tmp_path):
        assert run("index", str(docs_dir), "-o", str(tmp_path / "index.json"), "--strict") == 1

    def test_missing_directory(self, tmp_path):
        assert run("index", str(tmp_path / "nope"), "-o", str(tmp_path / "index.json")) == 2


class TestSearchCommand:

    def test_prints_results(self, docs_dir, tmp_path, capsys):
        output = tmp_path / "index.json"
        run("index", str(docs_dir), "-o", str(output))
        capsys.readouterr()

        assert run("search", "clear", "--index", str(output)) == 0

        results = json.loads(capsys.readouterr().out)
        assert [doc for doc, _ in results] == [(docs_dir / "glClear.xml").as_posix()]

    def test_corrupt_index(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_text("not json")
        assert run("search", "clear", "--index", str(path)) == 1

    @pytest.mark.parametrize("limit", ["0", "-1", "ten"])
    def test_invalid_limit_rejected(self, docs_dir, tmp_path, limit):
        """argparse refuses a limit below 1 with a usage error"""
        with pytest.raises(SystemExit) as exc_info:
            run("search", "clear", "--index", str(tmp_path / "index.json"), "--limit", limit)
        assert exc_info.value.code == 2

    def test_limit(self, docs_dir, tmp_path, capsys):
        output = tmp_path / "index.json"
        run("index", str(docs_dir), "-o", str(output))
        capsys.readouterr()

        assert run("search", "glviewport clear", "--index", str(output), "--limit", "1") == 0

        assert len(json.loads(capsys.readouterr().out)) == 1


class TestServeCommand:

    @pytest.fixture
    def served(self, monkeypatch):
        """Record uvicorn.run() calls instead of starting a server"""
        import uvicorn
        from docseek import main as server

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
        monkeypatch.setattr(server, "INDEX_PATH", server.INDEX_PATH)
        return server, calls

    def test_runs_app_with_index(self, served, tmp_path):
        server, calls = served
        path = str(tmp_path / "served.json")

        assert run("serve", "--index", path, "--host", "0.0.0.0", "--port", "8080") == 0

        assert calls == [(server.app, {"host": "0.0.0.0", "port": 8080})]
        assert server.INDEX_PATH == path

    def test_keeps_cli_logging(self, served, tmp_path):
        """The server module does not reconfigure logging set up by the CLI"""
        run("serve", "--index", str(tmp_path / "served.json"))

        console = [h for h in logging.getLogger().handlers if h.get_name() == "docseek.console"]
        assert len(console) == 1
        assert console[0].level == logging.WARNING
