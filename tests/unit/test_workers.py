"""
Unit tests for operation workers: the cm command lines they run and how
they interpret the output.
"""

from datetime import datetime
from pathlib import Path

import pytest

from cmbridge.core.exceptions import CommandFailedError, OperationError, WorkspaceError
from cmbridge.core.models.operations import DateRangeFilter, Operation, OperationKind
from cmbridge.core.models.vcs import CmVersion, FileState, WorkspaceInfo, WorkspaceState
from cmbridge.services.logging import NullLogger
from cmbridge.services.operations import WorkerContext
from cmbridge.services.operations import workers

BRANCHES_XML = (
    "<PLASTICQUERY>"
    "<BRANCH><NAME>/main</NAME><DATE>2024-03-01T10:00:00</DATE><OWNER>jane</OWNER></BRANCH>"
    "<BRANCH><NAME>/main/task</NAME><DATE>2024-03-20T10:00:00</DATE><OWNER>bob</OWNER></BRANCH>"
    "</PLASTICQUERY>"
)

CHANGELISTS_XML = (
    "<StatusOutput><Changelists>"
    "<Changelist><Name>Default</Name><Changes /></Changelist>"
    "<Changelist><Name>42</Name><Description>Earlier work</Description><Changes /></Changelist>"
    "</Changelists></StatusOutput>"
)

SHELVE_CREATED = "Created shelve sh:12@MyProject@localhost:8087 (mount:'/')\n"


@pytest.fixture
def ctx(fake_runner, settings, workspace):
    return WorkerContext(
        runner=fake_runner,
        settings=settings,
        workspace_root=str(workspace),
        logger=NullLogger(),
        info=WorkspaceInfo(
            workspace_name="MyWorkspace",
            branch="/main",
            repository="MyProject",
            server_url="localhost:8087",
            user_name="jane",
        ),
    )


def parameters_of(fake_runner, command):
    return [params for cmd, params, _ in fake_runner.calls if cmd == command]


def files_of(fake_runner, command):
    return [files for cmd, _, files in fake_runner.calls if cmd == command]


@pytest.fixture
def text_files(fake_runner, monkeypatch):
    """Contents of the name, description and comments files handed to cm, in call order."""
    contents = []
    run = fake_runner.run

    def reading_run(command, parameters=(), files=(), **kwargs):
        for parameter in parameters:
            for prefix in ("--namefile=", "--descriptionfile=", "-commentsfile="):
                if parameter.startswith(prefix):
                    contents.append(Path(parameter[len(prefix) :]).read_text(encoding="utf-8"))
        return run(command, parameters, files, **kwargs)

    monkeypatch.setattr(fake_runner, "run", reading_run)
    return contents



class TestConnect:
    """Tests for the connect worker."""

    def test_whoami_fallback(self, ctx, fake_runner):
        """Without a profile for the server, the user comes from whoami."""
        fake_runner.add("version", "11.0.16.8101\n")
        fake_runner.add("workspaceinfo", "Branch /main@MyProject@localhost:8087\n")
        fake_runner.add("getworkspacefrompath", "MyWorkspace\n")
        fake_runner.add("profile", "")
        fake_runner.add("whoami", "jane\n")
        fake_runner.add("status", "STATUS;7;MyProject;localhost:8087\n", match=["--header"])

        operation = Operation(kind=OperationKind.CONNECT)
        workers.connect(ctx, operation)

        assert operation.result.user_name == "jane"
        assert operation.result.changeset == 7
        assert ctx.version == CmVersion.parse("11.0.16.8101")

    def test_old_client_warns(self, ctx, fake_runner):
        fake_runner.add("version", "10.0.16.6000\n")
        fake_runner.add("workspaceinfo", "Branch /main@MyProject@localhost:8087\n")
        fake_runner.add("getworkspacefrompath", "MyWorkspace\n")
        fake_runner.add("profile", "localhost:8087;jane\n")
        fake_runner.add("status", "STATUS;7;MyProject;localhost:8087\n", match=["--header"])

        operation = Operation(kind=OperationKind.CONNECT)
        workers.connect(ctx, operation)

        assert any("older than" in message for message in operation.info_messages)

    def test_unrecognised_workspace(self, ctx, fake_runner):
        fake_runner.add("version", "11.0.16.8101\n")
        fake_runner.add("workspaceinfo", "Something else entirely\n")

        with pytest.raises(WorkspaceError):
            workers.connect(ctx, Operation(kind=OperationKind.CONNECT))


class TestListings:
    """Tests for listing workers."""

    def test_branches_date_window(self, ctx, fake_runner):
        """The date window becomes a cm find query."""
        fake_runner.add("find", xml=BRANCHES_XML, match=["branch"])
        window = DateRangeFilter.last_days(7, datetime(2024, 3, 31, 12, 0))
        operation = Operation(kind=OperationKind.GET_BRANCHES, params=window)

        workers.get_branches(ctx, operation)

        parameters = parameters_of(fake_runner, "find")[0]
        assert parameters[:2] == ("branch", "where date >= '2024/03/24'")
        assert "--xml" in parameters
        assert any(p.startswith("--file=") for p in parameters)
        assert [b.name for b in operation.result] == ["/main", "/main/task"]

    def test_branches_without_window(self, ctx, fake_runner):
        fake_runner.add("find", xml=BRANCHES_XML, match=["branch"])
        workers.get_branches(ctx, Operation(kind=OperationKind.GET_BRANCHES))
        assert parameters_of(fake_runner, "find")[0][:2] == ("branch", "--xml")

    def test_malformed_report_fails(self, ctx, fake_runner):
        from cmbridge.core.exceptions import ParseError

        fake_runner.add("find", xml="<PLASTICQUERY><BRANCH>", match=["branch"])
        with pytest.raises(ParseError):
            workers.get_branches(ctx, Operation(kind=OperationKind.GET_BRANCHES))

    def test_locks_without_smart_locks(self, ctx, fake_runner):
        """Older clients are not asked for retained locks."""
        fake_runner.add("lock", "", match=["list"])
        ctx.version = CmVersion.parse("11.0.16.7608")
        workers.get_locks(ctx, Operation(kind=OperationKind.GET_LOCKS))
        assert "--anystatus" not in parameters_of(fake_runner, "lock")[0]

    def test_changeset_files(self, ctx, fake_runner, workspace):
        fake_runner.add(
            "log",
            xml="<LogList><Changeset><ChangesetId>12</ChangesetId><Items>"
            "<Item><DstCmPath>/a.txt</DstCmPath><Type>Added</Type></Item>"
            "</Items></Changeset></LogList>",
        )
        operation = Operation.create(OperationKind.GET_CHANGESET_FILES, changeset_id=12)
        workers.get_changeset_files(ctx, operation)

        assert parameters_of(fake_runner, "log")[0][0] == "cs:12"
        assert operation.result[0].path == f"{workspace}/a.txt"


class TestUpdateStatus:
    """Tests for the update_status worker."""

    def test_whole_workspace(self, ctx, fake_runner, workspace):
        """Without paths the workspace root is queried as a directory."""
        path = f"{workspace}/Content/a.uasset"
        fake_runner.add("status", f"AD;{path};False;NO_MERGES\n")
        operation = Operation(kind=OperationKind.UPDATE_STATUS)

        workers.update_status(ctx, operation)

        assert files_of(fake_runner, "status")[0] == (str(workspace),)
        assert "--iscochanged" in parameters_of(fake_runner, "status")[0]
        assert [(s.path, s.state) for s in operation.result] == [(path, WorkspaceState.ADDED)]
        assert fake_runner.count("fileinfo") == 0

    def test_locked_by_other(self, ctx, fake_runner, workspace):
        """fileinfo reveals files locked by someone else."""
        (workspace / "a.uasset").write_text("data")
        path = f"{workspace}/a.uasset"
        fake_runner.add("status", "")
        fake_runner.add("fileinfo", "12;12;MyProject@localhost:8087;bob;bob-workspace\n")
        operation = Operation.create(OperationKind.UPDATE_STATUS, paths=[path])

        workers.update_status(ctx, operation)

        state = operation.result[0]
        assert state.state == WorkspaceState.LOCKED_BY_OTHER
        assert state.locked_by == "bob"
        assert operation.updated_states == list(operation.result)

    def test_merge_in_progress_marks_conflicts(self, ctx, fake_runner, workspace):
        """Files of a pending merge reported as conflicts are conflicted."""
        (workspace / ".plastic" / "plastic.mergeprogress").write_text(
            "Target: mount:1 merged from: Merge 4", encoding="utf-8"
        )
        path = f"{workspace}/Content/a.uasset"
        fake_runner.add("status", f"CO+CH;{path};False;NO_MERGES\n")
        fake_runner.add("merge", "FILE_CONFLICT /Content/a.uasset 1 4 6 903\n")
        operation = Operation.create(OperationKind.UPDATE_STATUS, paths=[path])

        workers.update_status(ctx, operation)

        assert parameters_of(fake_runner, "merge")[0] == ("cs:4", "--machinereadable")
        assert operation.result[0].state == WorkspaceState.CONFLICTED


class TestMutations:
    """Tests for mutating workers."""

    def test_check_in(self, ctx, fake_runner, workspace):
        fake_runner.add("checkin", "Created changeset cs:8@br:/main@MyProject@localhost:8087 (mount:'/')\n")
        operation = Operation.create(OperationKind.CHECK_IN, paths=["a.txt"], comment="Fix typo")

        workers.check_in(ctx, operation)

        assert parameters_of(fake_runner, "checkin")[0] == ("-c=Fix typo", "--all")
        assert files_of(fake_runner, "checkin")[0] == (f"{workspace}/a.txt",)
        assert operation.result == "Submitted changeset cs:8"

    def test_partial_update(self, ctx, fake_runner, workspace):
        """Updating given paths uses a partial update."""
        fake_runner.add("partial", f"CH {workspace}/a.txt\n")
        operation = Operation.create(OperationKind.UPDATE, paths=["a.txt"])

        workers.update(ctx, operation)

        assert parameters_of(fake_runner, "partial")[0][0] == "update"
        assert operation.result == (f"{workspace}/a.txt",)

    def test_full_update(self, ctx, fake_runner, workspace):
        fake_runner.add(
            "update",
            xml=f"<UpdatedItems><List><UpdatedItem><Path>{workspace}/a.txt</Path></UpdatedItem></List></UpdatedItems>",
        )
        operation = Operation(kind=OperationKind.UPDATE)

        workers.update(ctx, operation)

        assert "--last" in parameters_of(fake_runner, "update")[0]
        assert [s.state for s in operation.updated_states] == [WorkspaceState.CONTROLLED]

    def test_create_branch(self, ctx, fake_runner):
        fake_runner.add("branch")
        operation = Operation.create(
            OperationKind.CREATE_BRANCH,
            parent_branch="/main/",
            new_branch_name="task",
            comment="New task",
        )
        workers.create_branch(ctx, operation)

        assert parameters_of(fake_runner, "branch")[0] == ("create", "/main/task", "-c=New task")
        assert operation.result == "/main/task"

    def test_unlock_remove(self, ctx, fake_runner):
        fake_runner.add("lock")
        operation = Operation.create(OperationKind.UNLOCK, item_ids=[1, 2], remove=True)
        workers.unlock(ctx, operation)
        assert parameters_of(fake_runner, "lock")[0] == ("unlock", "--remove", "itemid:1", "itemid:2")

    def test_merge_branch(self, ctx, fake_runner):
        fake_runner.add("merge", "CH /w/a.txt\n", match=["--merge"])
        operation = Operation.create(OperationKind.MERGE_BRANCH, branch_name="/main/task")
        workers.merge_branch(ctx, operation)

        assert parameters_of(fake_runner, "merge")[0] == ("br:/main/task", "--merge", "--machinereadable")
        assert operation.updated_states[0].state == WorkspaceState.CHECKED_OUT_CHANGED

    def test_command_failure_raises(self, ctx, fake_runner):
        """A failing command raises and records its error lines."""
        fake_runner.add("branch", errors=("The branch already exists",), returncode=1)
        operation = Operation.create(OperationKind.RENAME_BRANCH, old_name="/main/a", new_name="/main/b")

        with pytest.raises(CommandFailedError):
            workers.rename_branch(ctx, operation)
        assert operation.error_messages == ["The branch already exists"]

    def test_redundant_errors_filtered(self, ctx, fake_runner, settings):
        """Configured benign error lines are dropped before judging the outcome."""
        settings.cm.redundant_error_filters = ["is not in a workspace"]
        fake_runner.add("branch", errors=("/tmp is not in a workspace.",))
        operation = Operation.create(OperationKind.DELETE_BRANCHES, branch_names=["/main/a"])

        workers.delete_branches(ctx, operation)

        assert operation.error_messages == []
        assert operation.result == ("/main/a",)


class TestFileOperations:
    """Tests for file workers; each reports the new states of its files."""

    def test_check_out(self, ctx, fake_runner, workspace):
        (workspace / "a.uasset").write_text("data")
        path = f"{workspace}/a.uasset"
        fake_runner.add("checkout")
        fake_runner.add("status", f"CO;{path};False;NO_MERGES\n")
        operation = Operation.create(OperationKind.CHECK_OUT, paths=["a.uasset"])

        workers.check_out(ctx, operation)

        assert files_of(fake_runner, "checkout") == [(path,)]
        assert [(s.path, s.state) for s in operation.updated_states] == [
            (path, WorkspaceState.CHECKED_OUT_UNCHANGED)
        ]
        assert operation.result == tuple(operation.updated_states)

    def test_mark_for_add_files(self, ctx, fake_runner, workspace):
        """A list of files is added with the wildcard that skips ignored files."""
        (workspace / "a.uasset").write_text("data")
        path = f"{workspace}/a.uasset"
        fake_runner.add("add")
        fake_runner.add("status", f"AD;{path};False;NO_MERGES\n")
        operation = Operation.create(OperationKind.MARK_FOR_ADD, paths=[path])

        workers.mark_for_add(ctx, operation)

        assert parameters_of(fake_runner, "add") == [("--parents", "?")]
        assert operation.updated_states[0].state == WorkspaceState.ADDED

    def test_mark_for_add_directory(self, ctx, fake_runner, workspace):
        """Directories are added recursively."""
        (workspace / "Content").mkdir()
        fake_runner.add("add")
        fake_runner.add("status", "")
        operation = Operation.create(OperationKind.MARK_FOR_ADD, paths=["Content"])

        workers.mark_for_add(ctx, operation)

        assert parameters_of(fake_runner, "add") == [("--parents", "-R")]

    def test_delete(self, ctx, fake_runner, workspace):
        path = f"{workspace}/a.uasset"
        fake_runner.add("remove")
        fake_runner.add("status", f"DE;{path};False;NO_MERGES\n")
        operation = Operation.create(OperationKind.DELETE, paths=["a.uasset"])

        workers.delete(ctx, operation)

        assert files_of(fake_runner, "remove") == [(path,)]
        assert operation.updated_states[0].state == WorkspaceState.DELETED

    def test_revert_by_known_state(self, ctx, fake_runner, workspace):
        """Changed files are undone with undochange, checked-out ones with undocheckout."""
        for name in ("changed.uasset", "checked_out.uasset"):
            (workspace / name).write_text("data")
        changed = f"{workspace}/changed.uasset"
        checked_out = f"{workspace}/checked_out.uasset"
        ctx.known_states = lambda: (
            FileState(path=changed, state=WorkspaceState.CHANGED),
            FileState(path=checked_out, state=WorkspaceState.CHECKED_OUT_CHANGED),
        )
        fake_runner.add("undochange")
        fake_runner.add("undocheckout")
        fake_runner.add("status", "")
        operation = Operation.create(OperationKind.REVERT, paths=[changed, checked_out])

        workers.revert(ctx, operation)

        assert files_of(fake_runner, "undochange") == [(changed,)]
        assert parameters_of(fake_runner, "undocheckout") == [()]
        assert files_of(fake_runner, "undocheckout") == [(checked_out,)]
        assert [s.state for s in operation.updated_states] == [WorkspaceState.CONTROLLED] * 2

    def test_revert_moved_file_with_origin(self, ctx, fake_runner, workspace):
        """The move origin is reverted too, and its leftover file deleted beforehand."""
        (workspace / "old.uasset").write_text("redirector")
        (workspace / "new.uasset").write_text("data")
        old, new = f"{workspace}/old.uasset", f"{workspace}/new.uasset"
        ctx.known_states = lambda: (FileState(path=new, state=WorkspaceState.MOVED, moved_from=old),)
        fake_runner.add("undocheckout")
        fake_runner.add("status", "")
        operation = Operation.create(OperationKind.REVERT, paths=[new], keep_changes=True)

        workers.revert(ctx, operation)

        assert parameters_of(fake_runner, "undocheckout") == [("--keepchanges",)]
        assert files_of(fake_runner, "undocheckout") == [(new, old)]
        assert not (workspace / "old.uasset").exists()
        assert [s.path for s in operation.updated_states] == [new]

    def test_revert_can_delete_added_files(self, ctx, fake_runner, workspace):
        (workspace / "new.uasset").write_text("data")
        path = f"{workspace}/new.uasset"
        ctx.known_states = lambda: (FileState(path=path, state=WorkspaceState.ADDED),)
        fake_runner.add("undocheckout")
        fake_runner.add("status", "")
        operation = Operation.create(OperationKind.REVERT, paths=[path], delete_added=True)

        workers.revert(ctx, operation)

        assert not (workspace / "new.uasset").exists()
        assert operation.updated_states[0].state == WorkspaceState.PRIVATE

    def test_revert_unchanged_whole_workspace(self, ctx, fake_runner, workspace):
        """Without paths the whole workspace is reverted and queried."""
        fake_runner.add("uncounchanged")
        fake_runner.add("status", "")
        operation = Operation(kind=OperationKind.REVERT_UNCHANGED)

        workers.revert_unchanged(ctx, operation)

        assert parameters_of(fake_runner, "uncounchanged") == [("-R",)]
        assert files_of(fake_runner, "uncounchanged") == [()]
        assert files_of(fake_runner, "status") == [(str(workspace),)]

    def test_revert_all(self, ctx, fake_runner, workspace):
        """Files pending before the revert are reported afterwards; private files are not."""
        (workspace / "a.uasset").write_text("data")
        changed = f"{workspace}/a.uasset"
        private = f"{workspace}/notes.txt"
        fake_runner.add("status", "", match=[changed])
        fake_runner.add("status", f"CO+CH;{changed};False;NO_MERGES\nPR;{private};False;NO_MERGES\n")
        fake_runner.add("undocheckout")
        operation = Operation(kind=OperationKind.REVERT_ALL)

        workers.revert_all(ctx, operation)

        assert parameters_of(fake_runner, "undocheckout") == [("--all",)]
        assert [(s.path, s.state) for s in operation.updated_states] == [
            (changed, WorkspaceState.CONTROLLED)
        ]

    def test_resolve(self, ctx, fake_runner, workspace):
        """Each file is merged again from the pending merge, keeping the local content."""
        (workspace / ".plastic" / "plastic.mergeprogress").write_text(
            "Target: mount:1 merged from: Merge 4", encoding="utf-8"
        )
        (workspace / "a.uasset").write_text("data")
        path = f"{workspace}/a.uasset"
        fake_runner.add("merge")
        fake_runner.add("status", f"CO+CH;{path};False;NO_MERGES\n")
        operation = Operation.create(OperationKind.RESOLVE, paths=["a.uasset"])

        workers.resolve(ctx, operation)

        assert parameters_of(fake_runner, "merge") == [("cs:4", "--merge", "--keepdestination")]
        assert files_of(fake_runner, "merge") == [(path,)]
        assert operation.updated_states[0].state == WorkspaceState.CHECKED_OUT_CHANGED

    def test_resolve_without_merge(self, ctx, fake_runner):
        operation = Operation.create(OperationKind.RESOLVE, paths=["a.uasset"])
        with pytest.raises(OperationError):
            workers.resolve(ctx, operation)
        assert fake_runner.count("merge") == 0


class TestChangelists:
    """Tests for changelist and shelve workers."""

    @pytest.fixture(autouse=True)
    def at_changeset_41(self, ctx):
        ctx.info = ctx.info.model_copy(update={"changeset": 41})

    def test_new_changelist_takes_next_free_number(self, ctx, fake_runner, text_files, workspace):
        """42 is taken, so the changelist made at changeset 41 is named 43."""
        fake_runner.add("status", xml=CHANGELISTS_XML, match=["--changelists"])
        fake_runner.add("changelist")
        operation = Operation.create(OperationKind.NEW_CHANGELIST, description="Fix the door", paths=["a.uasset"])

        workers.new_changelist(ctx, operation)

        create, move = parameters_of(fake_runner, "changelist")
        assert create[0] == "create"
        assert create[1].startswith("--namefile=")
        assert create[2].startswith("--descriptionfile=")
        assert create[3] == "--persistent"
        assert move[1] == "add"
        assert files_of(fake_runner, "changelist")[1] == (f"{workspace}/a.uasset",)
        assert text_files == ["43", "Fix the door", "43"]
        assert operation.result.name == "43"

    def test_edit_changelist(self, ctx, fake_runner, text_files):
        fake_runner.add("changelist")
        operation = Operation.create(OperationKind.EDIT_CHANGELIST, name="42", description="New text")

        workers.edit_changelist(ctx, operation)

        parameters = parameters_of(fake_runner, "changelist")[0]
        assert parameters[0] == "edit"
        assert parameters[2] == "description"
        assert text_files == ["42", "New text"]

    def test_edit_default_makes_new_changelist(self, ctx, fake_runner, text_files, workspace):
        """Editing Default moves its files to a new changelist with the description."""
        fake_runner.add("status", xml=CHANGELISTS_XML, match=["--changelists"])
        fake_runner.add("changelist")
        operation = Operation.create(
            OperationKind.EDIT_CHANGELIST,
            name="Default",
            description="Split out",
            paths=["a.uasset"],
        )

        workers.edit_changelist(ctx, operation)

        create, move = parameters_of(fake_runner, "changelist")
        assert create[0] == "create"
        assert move[1] == "add"
        assert files_of(fake_runner, "changelist")[1] == (f"{workspace}/a.uasset",)
        assert text_files == ["43", "Split out", "43"]
        assert operation.result.name == "43"

    def test_delete_default_rejected(self, ctx, fake_runner):
        operation = Operation.create(OperationKind.DELETE_CHANGELIST, name="Default")
        with pytest.raises(OperationError):
            workers.delete_changelist(ctx, operation)
        assert fake_runner.count("changelist") == 0

    def test_move_to_changelist(self, ctx, fake_runner, text_files, workspace):
        fake_runner.add("changelist")
        operation = Operation.create(OperationKind.MOVE_TO_CHANGELIST, name="Default", paths=["a.uasset"])

        workers.move_to_changelist(ctx, operation)

        assert parameters_of(fake_runner, "changelist")[0][1] == "add"
        assert files_of(fake_runner, "changelist")[0] == (f"{workspace}/a.uasset",)
        assert text_files == ["Default"]

    def test_shelve_replaces_previous(self, ctx, fake_runner, text_files):
        """The shelve comment ties it to the changelist; the older shelve is deleted."""
        fake_runner.add("shelveset", SHELVE_CREATED, match=["create"])
        fake_runner.add("shelveset", match=["delete"])
        operation = Operation.create(
            OperationKind.SHELVE,
            name="42",
            description="Earlier work",
            paths=["a.uasset"],
            previous_shelve_id=7,
        )

        workers.shelve(ctx, operation)

        assert operation.result.shelve_id == 12
        assert text_files == ["Changelist42: Earlier work"]
        assert parameters_of(fake_runner, "shelveset")[1] == ("delete", "sh:7")

    def test_unshelve_selection(self, ctx, fake_runner, workspace):
        """Selected files are applied by server path and moved to the changelist."""
        fake_runner.add("shelveset")
        fake_runner.add("changelist")
        fake_runner.add("status", "")
        operation = Operation.create(
            OperationKind.UNSHELVE,
            shelve_id=12,
            changelist="42",
            paths=["Content/a.uasset"],
        )

        workers.unshelve(ctx, operation)

        assert parameters_of(fake_runner, "shelveset") == [("apply", "sh:12")]
        assert files_of(fake_runner, "shelveset") == [("/Content/a.uasset",)]
        assert files_of(fake_runner, "changelist") == [(f"{workspace}/Content/a.uasset",)]
        assert [s.path for s in operation.updated_states] == [f"{workspace}/Content/a.uasset"]

    def test_unshelve_everything_to_default(self, ctx, fake_runner, workspace):
        """Without paths the files come from the shelve, and Default needs no move."""
        fake_runner.add("diff", 'C "Content/a.uasset"\n')
        fake_runner.add("shelveset")
        fake_runner.add("status", "")
        operation = Operation.create(OperationKind.UNSHELVE, shelve_id=12, changelist="Default")

        workers.unshelve(ctx, operation)

        assert files_of(fake_runner, "shelveset") == [()]
        assert fake_runner.count("changelist") == 0
        assert [s.path for s in operation.updated_states] == [f"{workspace}/Content/a.uasset"]

    def test_delete_part_of_shelve(self, ctx, fake_runner, text_files):
        """Remaining files are shelved again before the old shelve goes."""
        fake_runner.add("shelveset", SHELVE_CREATED, match=["create"])
        fake_runner.add("shelveset", match=["delete"])
        operation = Operation.create(
            OperationKind.DELETE_SHELVE,
            shelve_id=7,
            changelist="42",
            description="Earlier work",
            remaining_paths=["b.uasset"],
        )

        workers.delete_shelve(ctx, operation)

        assert [p[0] for p in parameters_of(fake_runner, "shelveset")] == ["create", "delete"]
        assert text_files == ["Changelist42: Earlier work"]
        assert operation.result == 12
