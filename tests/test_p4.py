"""Tests for the ``p4`` process wrapper.

Verifies the "tool failed" versus "nothing matched" classification and the
argument lists sent for each subcommand, using a fake process runner.
"""

from __future__ import annotations

import unittest

from p4chimari.p4 import (
    DIFF_CHANGED,
    DIFF_UNCHANGED,
    P4Client,
    P4CommandError,
    P4Error,
    P4NotFoundError,
    folder_wildcard,
)

from fake_p4 import FakeRunner


class QueryClassificationTests(unittest.TestCase):
    def test_success_returns_output_lines(self) -> None:
        runner = FakeRunner({("diff", "-se"): (0, "/ws/a.txt\n/ws/b.txt\n", "")})
        client = P4Client(runner=runner)
        self.assertEqual(client.diff_summary(DIFF_CHANGED), ["/ws/a.txt", "/ws/b.txt"])

    def test_non_zero_exit_with_content_is_still_parsed(self) -> None:
        runner = FakeRunner({("diff", "-sr"): (1, "/ws/c.txt\n", "some warning\n")})
        client = P4Client(runner=runner)
        self.assertEqual(client.diff_summary(DIFF_UNCHANGED), ["/ws/c.txt"])

    def test_nothing_matched_message_is_empty_success(self) -> None:
        runner = FakeRunner({("diff", "-se"): (1, "", "File(s) not opened on this client.\n")})
        client = P4Client(runner=runner)
        self.assertEqual(client.diff_summary(DIFF_CHANGED), [])

    def test_non_zero_exit_without_any_output_raises(self) -> None:
        runner = FakeRunner({("diff", "-se"): (1, "", "")})
        client = P4Client(runner=runner)
        with self.assertRaises(P4CommandError) as ctx:
            client.diff_summary(DIFF_CHANGED)
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertIn("no output", str(ctx.exception))

    def test_non_zero_exit_with_unknown_error_raises(self) -> None:
        runner = FakeRunner({("opened",): (1, "", "Perforce client error:\n\tConnect to server failed\n")})
        client = P4Client(runner=runner)
        with self.assertRaises(P4CommandError) as ctx:
            client.opened()
        self.assertIn("Connect to server failed", ctx.exception.output)

    def test_missing_executable_raises_not_found(self) -> None:
        runner = FakeRunner({("opened",): FileNotFoundError("p4")})
        client = P4Client(runner=runner)
        with self.assertRaises(P4NotFoundError):
            client.opened()

    def test_scope_is_appended_to_diff_query(self) -> None:
        runner = FakeRunner()
        P4Client(runner=runner).diff_summary(DIFF_UNCHANGED, "/ws/Project/...")
        self.assertEqual(runner.calls, [("diff", "-sr", "/ws/Project/...")])


class SubcommandTests(unittest.TestCase):
    def test_info_requires_client_name(self) -> None:
        runner = FakeRunner({("info",): (0, "User name: alice\nClient root: /ws\n", "")})
        with self.assertRaises(P4Error):
            P4Client(runner=runner).info()

    def test_info_parses_connection_details(self) -> None:
        runner = FakeRunner({("info",): (0, "User name: alice\nClient name: alice-ws\nClient root: /ws\n", "")})
        info = P4Client(runner=runner).info()
        self.assertEqual(info.client_name, "alice-ws")
        self.assertEqual(info.client_root, "/ws")
        self.assertTrue(info.current_dir)

    def test_reconcile_preview_reads_stdout_and_stderr(self) -> None:
        runner = FakeRunner(
            {
                ("reconcile", "-n", "/ws/Content/..."): (
                    0,
                    "//depot/a.txt#1 - opened for edit\n",
                    "//depot/old/... - no file(s) to reconcile.\n",
                )
            }
        )
        lines = P4Client(runner=runner).reconcile_preview("/ws/Content/")
        self.assertEqual(lines, ["//depot/a.txt#1 - opened for edit", "//depot/old/... - no file(s) to reconcile."])

    def test_reconcile_preview_keeps_last_stdout_line_apart_from_stderr(self) -> None:
        runner = FakeRunner(
            {
                ("reconcile", "-n", "/ws/C/..."): (
                    0,
                    "//depot/C/a.txt#1 - opened for edit",
                    "//depot/C/b.txt - reconcile to add\n",
                )
            }
        )
        lines = P4Client(runner=runner).reconcile_preview("/ws/C")
        self.assertEqual(lines, ["//depot/C/a.txt#1 - opened for edit", "//depot/C/b.txt - reconcile to add"])

    def test_action_output_joins_streams_on_a_line_break(self) -> None:
        runner = FakeRunner({("edit", "/ws/a.txt"): (1, "//depot/a.txt#1 - opened for edit", "warning")})
        self.assertEqual(P4Client(runner=runner).edit("/ws/a.txt").output, "//depot/a.txt#1 - opened for edit\nwarning")

    def test_depot_path_of_reads_first_where_column(self) -> None:
        runner = FakeRunner(
            {
                ("where", "/ws/a.txt"): (0, "//depot/a.txt //alice-ws/a.txt /ws/a.txt\n", ""),
                ("where", "/ws/x.txt"): (1, "", "/ws/x.txt - file(s) not in client view.\n"),
            }
        )
        client = P4Client(runner=runner)
        self.assertEqual(client.depot_path_of("/ws/a.txt"), "//depot/a.txt")
        self.assertIsNone(client.depot_path_of("/ws/x.txt"))

    def test_where_returns_none_on_failure(self) -> None:
        runner = FakeRunner({("where", "//depot/a.txt"): (1, "", "//depot/a.txt - file(s) not in client view.\n")})
        self.assertIsNone(P4Client(runner=runner).where("//depot/a.txt"))

    def test_where_returns_none_when_executable_missing(self) -> None:
        runner = FakeRunner({("where", "//depot/a.txt"): FileNotFoundError("p4")})
        self.assertIsNone(P4Client(runner=runner).where("//depot/a.txt"))

    def test_state_changing_commands_report_failures_without_raising(self) -> None:
        runner = FakeRunner(
            {
                ("edit", "/ws/a.txt"): (1, "", "/ws/a.txt - can't edit exclusive file already opened\n"),
                ("sync", "-f", "/ws/b.txt"): (0, "//depot/b.txt#3 - refreshing /ws/b.txt\n", ""),
            }
        )
        client = P4Client(runner=runner)
        failed = client.edit("/ws/a.txt")
        synced = client.sync_force("/ws/b.txt")
        self.assertFalse(failed.ok)
        self.assertIn("exclusive", failed.output)
        self.assertTrue(synced.ok)
        self.assertEqual(synced.args, ("p4", "sync", "-f", "/ws/b.txt"))

    def test_revert_unchanged_and_reconcile_arguments(self) -> None:
        runner = FakeRunner()
        client = P4Client(runner=runner)
        client.revert_unchanged()
        client.reconcile("/ws/Project")
        self.assertEqual(runner.calls, [("revert", "-a"), ("reconcile", "/ws/Project/...")])

    def test_folder_wildcard(self) -> None:
        self.assertEqual(folder_wildcard("/ws/Project"), "/ws/Project/...")
        self.assertEqual(folder_wildcard("/ws/Project/"), "/ws/Project/...")
        self.assertEqual(folder_wildcard("."), "./...")
        self.assertEqual(folder_wildcard(""), "...")


if __name__ == "__main__":
    unittest.main()
