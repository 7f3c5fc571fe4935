"""Tests for the taskr command-line interface."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from taskr import __version__
from taskr.interfaces.cli import app

runner = CliRunner()


def invoke(*args: str, input: str | None = None):
    return runner.invoke(app, list(args), input=input)


@pytest.fixture(autouse=True)
def isolated_home(taskr_home):
    return taskr_home


class TestBasics:
    """Tests for top-level behaviour."""

    def test_version(self):
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_empty_list(self):
        result = invoke("list")
        assert result.exit_code == 0
        assert "No tasks." in result.output


class TestTaskCommands:
    """Tests for adding, viewing and changing tasks."""

    def test_add_and_list(self):
        result = invoke("add", '/Work/"Q3 / Q4"/Slides')
        assert result.exit_code == 0
        assert "3 new" in result.output

        listing = invoke("list").output.splitlines()
        assert listing == ["- [ ] Work", "  - [ ] Q3 / Q4", "    - [ ] Slides"]

    def test_add_twice(self):
        invoke("add", "/Work")
        result = invoke("add", "/Work")
        assert "Already exists: /Work" in result.output

    def test_malformed_path_fails(self):
        result = invoke("add", '/Work/"open')
        assert result.exit_code == 1
        assert "Malformed path" in result.output

    def test_done_and_status(self):
        invoke("add", "/Work/Report")
        invoke("add", "/Home")
        invoke("done", "/Work/Report")

        result = invoke("status")

        assert "Total:     3" in result.output
        assert "Completed: 1" in result.output
        assert "Next: Work (Work)" in result.output

    def test_all_done_status(self):
        invoke("add", "/Only")
        invoke("done", "/Only")
        assert "All tasks complete!" in invoke("status").output

    def test_unknown_task_fails(self):
        result = invoke("done", "/Missing")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_path_command(self):
        invoke("add", '/"a/b"/c')
        assert invoke("path", '/"a/b"/c').output.strip() == '/"a/b"/c'

    def test_complete(self):
        invoke("add", "/Work/Report")
        invoke("add", "/Work/review")
        result = invoke("complete", "/Work/re")
        assert result.output.splitlines() == ["/Work/Report", "/Work/review"]

    def test_rename(self):
        invoke("add", "/Old")
        result = invoke("rename", "/Old", "New")
        assert "Renamed to /New" in result.output

    def test_collapse_hides_children(self):
        invoke("add", "/A/a1")
        invoke("collapse", "/A")
        assert invoke("list").output.splitlines() == ["- [ ] A [+1]"]
        assert len(invoke("list", "--all").output.splitlines()) == 2
        invoke("expand", "/A")
        assert len(invoke("list").output.splitlines()) == 2


class TestStructureCommands:
    """Tests for moving, copying and removing tasks."""

    def test_move_under_parent(self):
        invoke("add", "/A")
        invoke("add", "/B")
        result = invoke("mv", "/B", "--to", "/A")
        assert "Moved to /A/B" in result.output

    def test_move_into_own_subtree_fails(self):
        invoke("add", "/A/a1")
        result = invoke("mv", "/A", "--to", "/A/a1")
        assert result.exit_code == 1

    def test_move_up(self):
        invoke("add", "/A")
        invoke("add", "/B")
        invoke("mv", "/B", "--up")
        assert invoke("list").output.splitlines() == ["- [ ] B", "- [ ] A"]

    def test_duplicate(self):
        invoke("add", "/A/a1")
        invoke("dup", "/A")
        assert invoke("list").output.count("a1") == 2

    def test_remove(self):
        invoke("add", "/A/a1")
        result = invoke("rm", "/A")
        assert "Deleted 2 task(s)" in result.output
        assert "No tasks." in invoke("list").output

    def test_clear_reports_locked(self):
        invoke("add", "/Done")
        invoke("add", "/Kept")
        invoke("done", "/Done")
        invoke("done", "/Kept")
        invoke("lock", "/Kept")

        result = invoke("clear")

        assert "Cleared 1 task(s)" in result.output
        assert "Skipped locked task Kept" in result.output
        assert invoke("list").output.splitlines() == ["- [x] Kept (locked)"]

    def test_copy_and_paste(self):
        invoke("add", "/A/a1")
        copied = invoke("copy", "/A", "/A/a1").output
        assert copied.splitlines() == ["() - A", "\t() - a1"]

        invoke("add", "/Target")
        result = invoke("paste", "--under", "/Target", input=copied)
        assert "Pasted 2 task(s)" in result.output
        assert invoke("path", "/Target/A/a1").exit_code == 0


class TestTemplateCommands:
    """Tests for the template group."""

    def test_apply_is_idempotent(self):
        invoke("template", "new", "Trip")
        invoke("template", "add", "Trip", "/Pack/Passport")

        first = invoke("template", "apply", "Trip")
        second = invoke("template", "apply", "Trip")

        assert "Applied 'Trip' (2 new task(s))" in first.output
        assert "already applied" in second.output

    def test_list(self):
        invoke("template", "new", "Trip")
        invoke("template", "add", "Trip", "/Pack")
        assert invoke("template", "list").output.splitlines() == ["Trip", "  - [ ] Pack"]

    def test_unknown_template(self):
        result = invoke("template", "apply", "Nope")
        assert result.exit_code == 1

    def test_from_task_and_rename(self):
        invoke("add", "/Morning/Coffee")
        invoke("template", "from-task", "/Morning", "Routine")
        invoke("template", "rename", "Routine", "Daily")
        assert invoke("template", "list").output.splitlines()[0] == "Daily"


class TestTagCommands:
    """Tests for the tag group."""

    def test_tag_a_task(self):
        invoke("add", "/Work")
        invoke("tag", "new", "urgent", "--color", "red")
        result = invoke("tag", "toggle", "urgent", "/Work")
        assert "Tagged /Work #urgent" in result.output
        assert invoke("list").output.strip() == "- [ ] Work #urgent"
        assert "#urgent (red)" in invoke("tag", "list").output

    def test_unknown_tag(self):
        invoke("add", "/Work")
        assert invoke("tag", "toggle", "nope", "/Work").exit_code == 1


class TestDataCommands:
    """Tests for import, export and backups."""

    def test_export_to_stdout(self):
        invoke("add", "/Work")
        data = json.loads(invoke("export").output)
        assert [node["name"] for node in data] == ["Work"]

    def test_backup_and_restore(self, tmp_path):
        invoke("add", "/Work/Report")
        invoke("template", "new", "Trip")
        backup = tmp_path / "backup.json"
        assert invoke("backup", "--output", str(backup)).exit_code == 0

        invoke("rm", "/Work")
        invoke("template", "rm", "Trip")
        result = invoke("restore", str(backup))

        assert "Restored 2 task(s) and 1 template(s)" in result.output
        assert invoke("path", "/Work/Report").exit_code == 0

    def test_import_task_list(self, tmp_path):
        source = tmp_path / "tasks.json"
        source.write_text(
            json.dumps(
                [
                    {
                        "name": "Imported",
                        "isCompleted": True,
                        "creationDate": "2024-05-01T12:00:00Z",
                        "subtasks": [],
                    }
                ]
            ),
            encoding="utf-8",
        )
        result = invoke("import", str(source))
        assert "Imported 1 task(s)" in result.output
        assert invoke("list").output.strip() == "- [x] Imported"

    def test_restore_rejects_garbage(self, tmp_path):
        source = tmp_path / "bad.json"
        source.write_text('{"tasks": []}', encoding="utf-8")
        result = invoke("restore", str(source))
        assert result.exit_code == 1
        assert "Not a backup" in result.output

    def test_missing_import_file(self, tmp_path):
        result = invoke("import", str(tmp_path / "missing.json"))
        assert result.exit_code == 1
