"""
Integration tests for remotebatch CLI behavior and configuration loading.

Tests:
  - .remotebatch discovery: searching parent directories upward
  - config loading: apply_profile correctly mutates module variables
  - remotebatch init: creates a valid .remotebatch YAML, refuses overwrite without --force
  - remotebatch run: batches against an in-memory remote, result JSON and exit codes
"""
import io
import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fakes import FakeRemoteService

# ── Helpers ───────────────────────────────────────────────────────────────────

REPO_ROOT = Path(__file__).parent.parent


def run_remotebatch(*args, cwd=None, home=None):
    """Run the remotebatch CLI and return (returncode, stdout, stderr)."""
    env = {**os.environ, "PYTHONPATH": str(REPO_ROOT)}
    if home:
        env["HOME"] = str(home)
        env["XDG_CONFIG_HOME"] = str(Path(home) / "config")
    result = subprocess.run(
        [sys.executable, "-m", "remotebatch", *args],
        cwd=str(cwd or REPO_ROOT),
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
        env=env,
    )
    return result.returncode, result.stdout, result.stderr


def _reset_config():
    import remotebatch.config as cfg
    cfg.PROTOCOL = "sftp"
    cfg.HOST = "example.com"
    cfg.PORT = 22
    cfg.USER = "root"
    cfg.KEY_PATH = None
    cfg.PASSWORD = None
    cfg.REMOTE_ROOT = None
    cfg.LOCAL_ROOT = Path(".")
    cfg.PASSIVE = True
    cfg.THROWING = True


# ── Tests: .remotebatch discovery ─────────────────────────────────────────────

class TestFindProjectFile(unittest.TestCase):
    """Tests for find_project_file() — upward search through parent directories."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_find_in_same_directory(self):
        """find_project_file finds .remotebatch in the start directory."""
        from remotebatch.config import find_project_file
        (self.root / ".remotebatch").write_text("profiles: []\n", encoding="utf-8")
        self.assertEqual(find_project_file(self.root), (self.root / ".remotebatch").resolve())

    def test_find_in_parent_directory(self):
        """find_project_file searches upward and finds .remotebatch in a parent."""
        from remotebatch.config import find_project_file
        (self.root / ".remotebatch").write_text("profiles: []\n", encoding="utf-8")
        subdir = self.root / "a" / "b" / "c"
        subdir.mkdir(parents=True)
        self.assertEqual(find_project_file(subdir), (self.root / ".remotebatch").resolve())

    def test_finds_nearest_project_file(self):
        """find_project_file returns the nearest (deepest) .remotebatch."""
        from remotebatch.config import find_project_file
        (self.root / ".remotebatch").write_text("profiles: []\n", encoding="utf-8")
        sub_a = self.root / "a"
        sub_a.mkdir()
        (sub_a / ".remotebatch").write_text("profiles: []\n", encoding="utf-8")
        deep = sub_a / "b" / "c"
        deep.mkdir(parents=True)
        self.assertEqual(find_project_file(deep), (sub_a / ".remotebatch").resolve())


# ── Tests: config loading ─────────────────────────────────────────────────────

class TestLoadProfile(unittest.TestCase):
    """Tests for load_project_file, get_profile and apply_profile."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        _reset_config()

    def tearDown(self):
        _reset_config()
        self.tmpdir.cleanup()

    def _write(self, content):
        p = self.root / ".remotebatch"
        p.write_text(content, encoding="utf-8")
        return p

    def test_load_profile_basic(self):
        """apply_profile sets HOST, PORT, USER, REMOTE_ROOT and LOCAL_ROOT."""
        import remotebatch.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: default\n"
            "    server: myhost.example.com\n"
            "    port: 2222\n"
            "    user: deploy\n"
            f"    local_root: {self.root.as_posix()}\n"
            "    remote_root: /remote/path\n"
        )
        cfg.apply_profile(cfg.get_profile(cfg.load_project_file(p), "default"))
        self.assertEqual(cfg.HOST, "myhost.example.com")
        self.assertEqual(cfg.PORT, 2222)
        self.assertEqual(cfg.USER, "deploy")
        self.assertEqual(cfg.REMOTE_ROOT, "/remote/path")
        self.assertEqual(cfg.LOCAL_ROOT, self.root.resolve())

    def test_ftp_protocol_defaults_port(self):
        """A profile that names ftp without a port gets port 21."""
        import remotebatch.config as cfg
        cfg.apply_profile({"protocol": "ftp", "server": "ftp.example.com", "passive": "no"})
        self.assertEqual(cfg.PROTOCOL, "ftp")
        self.assertEqual(cfg.PORT, 21)
        self.assertFalse(cfg.PASSIVE)

    def test_unknown_protocol_is_rejected(self):
        import remotebatch.config as cfg
        with self.assertRaises(ValueError):
            cfg.apply_profile({"protocol": "gopher"})

    def test_load_profile_with_base_remote(self):
        """apply_profile prepends base_remote to a relative remote_root."""
        import remotebatch.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: default\n"
            "    server: host\n"
            "    remote_root: projects/site\n"
            "    throwing: false\n"
            "defaults:\n"
            "  base_remote: /home/user\n"
        )
        cfg.apply_profile(cfg.get_profile(cfg.load_project_file(p), "default"))
        self.assertEqual(cfg.REMOTE_ROOT, "/home/user/projects/site")
        self.assertFalse(cfg.THROWING)

    def test_get_profile_by_name(self):
        """get_profile retrieves the named profile correctly."""
        import remotebatch.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: dev\n"
            "    server: dev.example.com\n"
            "  - name: prod\n"
            "    server: prod.example.com\n"
            "    port: 2222\n"
        )
        profile = cfg.get_profile(cfg.load_project_file(p), "prod")
        self.assertEqual(profile["server"], "prod.example.com")
        self.assertEqual(profile["port"], 2222)

    def test_get_profile_falls_back_to_first(self):
        """get_profile falls back to first profile if named one not found."""
        import remotebatch.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: only\n"
            "    server: only.example.com\n"
        )
        profile = cfg.get_profile(cfg.load_project_file(p), "nonexistent")
        self.assertEqual(profile["server"], "only.example.com")


# ── Tests: remotebatch init CLI ───────────────────────────────────────────────

class TestInitCommand(unittest.TestCase):
    """Tests for the 'remotebatch init' subcommand."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cwd = Path(self.tmpdir.name) / "project"
        self.cwd.mkdir()
        self.home = Path(self.tmpdir.name) / "home"
        self.home.mkdir()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_init_creates_project_file(self):
        """'remotebatch init' creates a .remotebatch file in the current directory."""
        rc, out, err = run_remotebatch(
            "init", "--server", "myhost.com", "--remote", "www/site", "--base-remote", "/home/user",
            cwd=self.cwd, home=self.home,
        )
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        content = (self.cwd / ".remotebatch").read_text(encoding="utf-8")
        self.assertIn("myhost.com", content)
        self.assertIn("www/site", content)
        self.assertIn("/home/user", content)

    def test_init_refuses_overwrite(self):
        """'remotebatch init' refuses to overwrite an existing .remotebatch without --force."""
        (self.cwd / ".remotebatch").write_text("profiles: []\n", encoding="utf-8")
        rc, out, err = run_remotebatch("init", "--server", "myhost.com", cwd=self.cwd, home=self.home)
        self.assertNotEqual(rc, 0)
        self.assertIn("already exists", err)

    def test_init_force_overwrites(self):
        """'remotebatch init --force' overwrites an existing .remotebatch."""
        (self.cwd / ".remotebatch").write_text("profiles: []\n", encoding="utf-8")
        rc, out, err = run_remotebatch("init", "--server", "newhost.com", "--force",
                                       cwd=self.cwd, home=self.home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        self.assertIn("newhost.com", (self.cwd / ".remotebatch").read_text(encoding="utf-8"))

    def test_init_dry_run_does_not_write(self):
        """'remotebatch init --dry-run' prints the config but does not write it."""
        rc, out, err = run_remotebatch("init", "--server", "myhost.com", "--dry-run",
                                       cwd=self.cwd, home=self.home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        self.assertFalse((self.cwd / ".remotebatch").exists())
        self.assertIn("dry-run", out)

    def test_init_creates_valid_yaml(self):
        """'remotebatch init' produces valid YAML with protocol-specific defaults."""
        rc, out, err = run_remotebatch("init", "--server", "ftp.example.com", "--protocol", "ftp",
                                       "--user", "anon", cwd=self.cwd, home=self.home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        import yaml
        data = yaml.safe_load((self.cwd / ".remotebatch").read_text(encoding="utf-8"))
        profile = data["profiles"][0]
        self.assertEqual(profile["server"], "ftp.example.com")
        self.assertEqual(profile["protocol"], "ftp")
        self.assertEqual(profile["port"], 21)
        self.assertEqual(profile["user"], "anon")
        self.assertIs(profile["throwing"], True)

    def test_run_without_project_file(self):
        """'remotebatch run' fails cleanly when no profile can be found."""
        rc, out, err = run_remotebatch("run", "pwd", cwd=self.cwd, home=self.home)
        self.assertEqual(rc, 1)
        self.assertIn("no .remotebatch file found", err)


# ── Tests: remotebatch run against an in-memory remote ────────────────────────

class TestRunCommand(unittest.TestCase):
    """Tests for 'remotebatch run' with the transport replaced by a fake."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        (self.root / ".remotebatch").write_text(
            "profiles:\n"
            "  - name: default\n"
            "    server: host\n"
            f"    local_root: {self.root.as_posix()}\n",
            encoding="utf-8",
        )
        (self.root / "local.txt").write_text("payload", encoding="utf-8")
        self.remote = FakeRemoteService()
        self._cwd = os.getcwd()
        os.chdir(self.root)
        _reset_config()

    def tearDown(self):
        os.chdir(self._cwd)
        _reset_config()
        self.tmpdir.cleanup()

    def _main(self, *argv):
        from remotebatch import cli
        with mock.patch.object(sys, "argv", ["remotebatch", *argv]), \
                mock.patch("remotebatch.remote.open_service", return_value=self.remote), \
                mock.patch("remotebatch.config.load_global_config", return_value={}), \
                mock.patch("sys.stdout", new_callable=io.StringIO) as out:
            try:
                cli.main()
                code = 0
            except SystemExit as exc:
                code = exc.code
        return code, out.getvalue()

    def test_batch_result_is_printed_as_json(self):
        code, out = self._main("run", "mkdir a", "cd a", "put ./local.txt", "pwd", "-o", "result.json")
        self.assertEqual(code, 0)
        result = json.loads((self.root / "result.json").read_text(encoding="utf-8"))
        self.assertEqual(result["succeed"], 4)
        self.assertIsNone(result["message"])
        self.assertEqual(result["output_3"], "/a")
        self.assertEqual(self.remote.node("/a/local.txt"), b"payload")
        self.assertIn('"succeed": 4', out)
        self.assertFalse(self.remote.connected)

    def test_no_throw_captures_failure_and_exits_nonzero(self):
        code, out = self._main("run", "--no-throw", "pwd", "get missing.txt", "-o", "result.json")
        self.assertEqual(code, 1)
        result = json.loads((self.root / "result.json").read_text(encoding="utf-8"))
        self.assertEqual(result["succeed"], 1)
        self.assertIn("does not exist", result["message"])

    def test_throwing_failure_exits_nonzero(self):
        code, out = self._main("run", "cd nowhere")
        self.assertEqual(code, 1)
        self.assertFalse((self.root / "result.json").exists())

    def test_commands_from_file(self):
        (self.root / "batch.txt").write_text("# setup\nmkdir site\n\nput local.txt site/\n", encoding="utf-8")
        code, out = self._main("run", "-f", "batch.txt", "-o", "result.json")
        self.assertEqual(code, 0)
        self.assertEqual(self.remote.node("/site/local.txt"), b"payload")
        result = json.loads((self.root / "result.json").read_text(encoding="utf-8"))
        self.assertEqual(result["output_1"], 1)


if __name__ == "__main__":
    unittest.main()
