from __future__ import annotations

import orjson
import pytest
from pydantic import ValidationError

from ingestion.cli_apply_changes import load_changes
from ingestion.cli_register_repo import discover_files, register_directory


def test_load_changes_accepts_a_plain_list(tmp_path):
    path = tmp_path / "changes.json"
    path.write_bytes(
        orjson.dumps(
            [
                {"path": "a.py", "action": "modified", "content": "print(1)"},
                {"path": "b.py", "action": "removed"},
            ]
        )
    )

    changes = load_changes(path)

    assert [(c.path, c.action) for c in changes] == [("a.py", "modified"), ("b.py", "removed")]
    assert changes[1].content is None


def test_load_changes_accepts_a_wrapped_payload(tmp_path):
    path = tmp_path / "push.json"
    path.write_bytes(orjson.dumps({"changes": [{"path": "c.ts", "action": "added", "content": "x"}]}))

    assert load_changes(path)[0].path == "c.ts"


def test_load_changes_rejects_unknown_actions(tmp_path):
    path = tmp_path / "bad.json"
    path.write_bytes(orjson.dumps([{"path": "a.py", "action": "renamed"}]))

    with pytest.raises(ValidationError):
        load_changes(path)


def test_register_directory_loads_source_files(tmp_path, store, pipeline):
    root = tmp_path / "checkout"
    (root / "src").mkdir(parents=True)
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "src" / "app.py").write_text("def app():\n    return 'hello world'\n")
    (root / "src" / "notes.txt").write_text("not code")
    (root / "node_modules" / "dep" / "index.js").write_text("module.exports = 1;\n")

    assert [p.name for p in discover_files(root)] == ["app.py"]

    repo_id = register_directory(store, root, name="checkout", full_name="acme/checkout")

    files = store.list_files(repo_id)
    assert [f.path for f in files] == ["src/app.py"]
    assert pipeline.generate_all(repo_id).processed_files == 1
