"""Tests for the blockedit command line."""

import io
import json
import os

import pytest

from block_editor.cli import load_request, main
from block_editor.errors import ValidationError


CONTENT = "alpha\nbeta\ngamma\n"


@pytest.fixture
def project(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("BLOCKEDIT_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("BLOCKEDIT_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.chdir(tmp_path)
    (tmp_path / "notes.txt").write_text(CONTENT, encoding="utf-8")
    return tmp_path


def _request(project, **fields) -> str:
    path = project / "request.yaml"
    path.write_text(json.dumps(fields), encoding="utf-8")
    return str(path)


class TestLoadRequest:
    def test_yaml_request(self, tmp_path):
        path = tmp_path / "r.yaml"
        path.write_text(
            "path: notes.txt\n"
            "search_content: beta\n"
            "replace_content: BETA\n"
            "start_line: 2\n",
            encoding="utf-8",
        )
        request = load_request(str(path))
        assert request["start_line"] == 2

    def test_stdin_request(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(
            '{"path": "a", "search_content": "x", "replace_content": "y", "start_line": 1}'
        ))
        assert load_request("-")["path"] == "a"

    def test_missing_keys(self, tmp_path):
        path = tmp_path / "r.yaml"
        path.write_text("path: notes.txt\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="missing: search_content"):
            load_request(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "r.yaml"
        path.write_text("- 1\n", encoding="utf-8")
        with pytest.raises(ValidationError, match="must be a mapping"):
            load_request(str(path))

    def test_unreadable(self, tmp_path):
        with pytest.raises(ValidationError, match="Cannot read request"):
            load_request(str(tmp_path / "nope.yaml"))


class TestApplyCommand:
    def test_applies_and_prints_report(self, project, capsys):
        req = _request(project, path="notes.txt", search_content="beta",
                       replace_content="BETA", start_line=2)

        main(["apply", req])

        out = capsys.readouterr().out
        assert "Successfully applied diff to notes.txt" in out
        assert (project / "notes.txt").read_text() == "alpha\nBETA\ngamma\n"

    def test_metrics_written_by_default(self, project):
        req = _request(project, path="notes.txt", search_content="beta",
                       replace_content="BETA", start_line=2)
        main(["apply", req])
        assert (project / ".blockedit" / "edit_metrics.jsonl").is_file()

    def test_atomic_abort_exits_nonzero(self, project, capsys):
        req = _request(project, path="notes.txt",
                       search_content=["alpha", "zzz"],
                       replace_content=["ALPHA", "ZZZ"],
                       start_line=[1, 2])

        with pytest.raises(SystemExit) as exc_info:
            main(["apply", req])

        assert exc_info.value.code == 1
        assert "Atomic operation failed" in capsys.readouterr().err
        assert (project / "notes.txt").read_text() == CONTENT

    def test_no_atomic_flag_overrides_request(self, project, capsys):
        req = _request(project, path="notes.txt",
                       search_content=["alpha", "zzz"],
                       replace_content=["ALPHA", "ZZZ"],
                       start_line=[1, 2], atomic=True)

        main(["apply", req, "--no-atomic"])

        assert "1/2 diffs applied successfully" in capsys.readouterr().out
        assert (project / "notes.txt").read_text() == "ALPHA\nbeta\ngamma\n"

    def test_trim_from_request(self, project):
        req = _request(project, path="notes.txt", search_content="  beta ",
                       replace_content="BETA", start_line=2, trim=True)
        main(["apply", req])
        assert (project / "notes.txt").read_text() == "alpha\nBETA\ngamma\n"

    def test_quoted_false_atomic_in_request(self, project, capsys):
        req = _request(project, path="notes.txt",
                       search_content=["alpha", "zzz"],
                       replace_content=["ALPHA", "ZZZ"],
                       start_line=[1, 2], atomic="false")

        main(["apply", req])

        assert "non-atomic" in capsys.readouterr().out
        assert (project / "notes.txt").read_text() == "ALPHA\nbeta\ngamma\n"

    def test_undecodable_target_exits_nonzero(self, project, capsys):
        (project / "bin.txt").write_bytes(b"a\n\xff\xfe\n")
        req = _request(project, path="bin.txt", search_content="a",
                       replace_content="b", start_line=1)

        with pytest.raises(SystemExit) as exc_info:
            main(["apply", req])

        assert exc_info.value.code == 1
        assert "Error: Cannot decode bin.txt as UTF-8" in capsys.readouterr().err

    def test_dry_run_prints_diff(self, project, capsys):
        req = _request(project, path="notes.txt", search_content="beta",
                       replace_content="BETA", start_line=2)

        main(["apply", req, "--dry-run"])

        out = capsys.readouterr().out
        assert "-beta" in out
        assert "+BETA" in out
        assert (project / "notes.txt").read_text() == CONTENT

    def test_review_rejected(self, project, monkeypatch, capsys):
        monkeypatch.setattr("block_editor.cli.prompt_diff_approval",
                            lambda path, diff: False)
        req = _request(project, path="notes.txt", search_content="beta",
                       replace_content="BETA", start_line=2)

        with pytest.raises(SystemExit):
            main(["apply", req, "--review"])

        assert "rejected" in capsys.readouterr().err
        assert (project / "notes.txt").read_text() == CONTENT

    def test_workspace_option(self, project, tmp_path_factory):
        other = tmp_path_factory.mktemp("other")
        (other / "f.txt").write_text("x\n", encoding="utf-8")
        req = _request(project, path="f.txt", search_content="x",
                       replace_content="y", start_line=1)

        main(["--workspace", str(other), "apply", req])

        assert (other / "f.txt").read_text() == "y\n"


class TestReadCommand:
    def test_range(self, project, capsys):
        main(["read", "notes.txt", "--range", "2-3"])
        assert capsys.readouterr().out == "2 | beta\n3 | gamma\n"

    def test_missing_file(self, project, capsys):
        with pytest.raises(SystemExit):
            main(["read", "missing.txt"])
        assert "File not found" in capsys.readouterr().err

    def test_undecodable_file(self, project, capsys):
        (project / "bin.txt").write_bytes(b"\xff\xfe")
        with pytest.raises(SystemExit) as exc_info:
            main(["read", "bin.txt"])
        assert exc_info.value.code == 1
        assert "Error: Cannot decode" in capsys.readouterr().err


class TestStatsCommand:
    def test_no_metrics(self, project, capsys):
        main(["stats"])
        assert "No edit metrics found yet." in capsys.readouterr().out

    def test_after_apply(self, project, capsys):
        req = _request(project, path="notes.txt", search_content="beta",
                       replace_content="BETA", start_line=2)
        main(["apply", req])
        capsys.readouterr()

        main(["stats"])

        out = capsys.readouterr().out
        assert "Requests:            1" in out
        assert "Clean success rate:  100%" in out
