#!/usr/bin/env python3
"""
remotebatch  —  run batches of commands against a remote SFTP/FTP store
=======================================================================

Subcommands:
  init      Create a .remotebatch config file in the current directory.
  run       Execute commands (ls, get, put, append, rename, delete, cd,
            mkdir, rmdir, pwd) against the remote of the nearest profile.
  status    Show the connection settings of the nearest profile.

Run 'remotebatch <subcommand> --help' for more details.
"""
import argparse
import json
import sys
from pathlib import Path


def _load_profile(args) -> dict:
    """Apply the global config and the nearest .remotebatch profile; return the profile."""
    from remotebatch import config as _cfg

    global_cfg = _cfg.load_global_config()
    profile = _cfg.get_profile(global_cfg, args.profile or "default") if global_cfg else {}

    project_path = _cfg.find_project_file()
    if project_path is not None:
        if args.verbose:
            print(f"[config] Using {project_path}")
        data = _cfg.load_project_file(project_path)
        profile = {**profile, **_cfg.get_profile(data, args.profile or "default")}
    elif not profile:
        print("error: no .remotebatch file found in this directory or any parent.", file=sys.stderr)
        print("Run 'remotebatch init' to create one.", file=sys.stderr)
        sys.exit(1)

    _cfg.apply_profile(profile)
    return profile


# ── init ─────────────────────────────────────────────────────────────────────

def cmd_init(args):
    """Create a .remotebatch profile file in the current directory."""
    from remotebatch import config as _cfg

    target = Path.cwd() / _cfg.PROJECT_FILE

    if target.exists() and not args.force:
        print(f"error: {_cfg.PROJECT_FILE} already exists in {Path.cwd()}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    global_cfg = _cfg.load_global_config()
    g_defaults = global_cfg.get("defaults", {})

    protocol = (args.protocol or g_defaults.get("protocol", "sftp")).lower()
    if protocol not in _cfg.DEFAULT_PORTS:
        print(f"error: unsupported protocol {protocol!r} (expected sftp, ftp or ftps).", file=sys.stderr)
        sys.exit(1)

    server = args.server or g_defaults.get("server", "example.com")
    if not args.server and sys.stdin.isatty():
        val = input(f"Server hostname [{server}]: ").strip()
        if val:
            server = val

    user = args.user or g_defaults.get("user", "root")
    if not args.user and sys.stdin.isatty():
        val = input(f"User [{user}]: ").strip()
        if val:
            user = val

    port = args.port or int(g_defaults.get("port", _cfg.DEFAULT_PORTS[protocol]))

    local_root = str(Path(args.local or Path.cwd()).expanduser())
    remote_root = args.remote or ""
    base_remote = args.base_remote or g_defaults.get("base_remote", "")
    profile_name = args.profile or "default"

    def _yq(value: str) -> str:
        """Wrap a string in YAML single quotes, escaping embedded single quotes."""
        return "'" + value.replace("'", "''") + "'"

    lines = [
        "# .remotebatch — remotebatch project configuration",
        "#",
        "# profiles: list of connection profiles for this project.",
        "# Each profile has: name, protocol, server, port, user, local_root, remote_root.",
        "# remote_root is relative to defaults.base_remote when it does not start with '/'.",
        "profiles:",
        f"  - name: {profile_name}",
        f"    protocol: {protocol}",
        f"    server: {_yq(server)}",
        f"    port: {port}",
        f"    user: {_yq(user)}",
        f"    local_root: {_yq(local_root.replace(chr(92), '/'))}",
    ]
    if remote_root:
        lines.append(f"    remote_root: {_yq(remote_root)}")
    lines.append("    throwing: true")

    if base_remote:
        lines += [
            "defaults:",
            f"  base_remote: {_yq(base_remote)}",
        ]

    content = "\n".join(lines) + "\n"

    if args.dry_run:
        print(f"[dry-run] Would write {target}:")
        print(content)
        return

    target.write_text(content, encoding="utf-8")
    print(f"Created {target}")
    if args.verbose:
        print(content)


# ── run ──────────────────────────────────────────────────────────────────────

def cmd_run(args):
    """Run a batch of commands against the remote of the nearest profile."""
    import ftplib

    import paramiko

    from remotebatch import config as _cfg
    from remotebatch.core.dispatcher import read_commands, run
    from remotebatch.core.session import RemoteSession
    from remotebatch.errors import RemoteBatchError
    from remotebatch.remote import open_service
    from remotebatch.utils.local_storage import LocalStorage
    from remotebatch.utils.logging import error

    _load_profile(args)

    lines = list(args.commands or [])
    if args.file:
        if args.file == "-":
            lines += read_commands(sys.stdin)
        else:
            with open(args.file, "r", encoding="utf-8") as f:
                lines += read_commands(f)
    if not lines:
        print("error: no commands given (pass them as arguments or with --file).", file=sys.stderr)
        sys.exit(1)

    throwing = _cfg.THROWING and not args.no_throw
    service = open_service()
    try:
        service.connect()
        session = RemoteSession(service, LocalStorage(_cfg.LOCAL_ROOT))
        outcome = run(session, lines, throwing=throwing)
    except (RemoteBatchError, OSError, EOFError, ftplib.Error, paramiko.SSHException) as exc:
        error(str(exc))
        sys.exit(1)
    finally:
        service.disconnect()

    rendered = json.dumps(outcome.to_dict(), indent=2)
    print(rendered)
    if args.output:
        Path(args.output).write_text(rendered + "\n", encoding="utf-8")
    if outcome.message is not None:
        sys.exit(1)


# ── status ───────────────────────────────────────────────────────────────────

def cmd_status(args):
    """Show the resolved connection settings."""
    from remotebatch import config as _cfg

    profile = _load_profile(args)

    print(f"\nProfile  : {profile.get('name', 'default')}")
    print(f"Remote   : {_cfg.PROTOCOL}://{_cfg.USER}@{_cfg.HOST}:{_cfg.PORT}{_cfg.REMOTE_ROOT or ''}")
    print(f"Local    : {_cfg.LOCAL_ROOT}")
    print(f"Throwing : {'yes' if _cfg.THROWING else 'no'}")


# ── main ──────────────────────────────────────────────────────────────────────

def main():
    """CLI entry point for remotebatch"""
    parser = argparse.ArgumentParser(
        prog="remotebatch",
        description="Run batches of commands against a remote SFTP/FTP directory store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ── init ──────────────────────────────────────────────────────────────────
    init_p = subparsers.add_parser(
        "init",
        help="Create a .remotebatch config file in the current directory",
        description="Create a .remotebatch YAML config file for this project.",
    )
    init_p.add_argument("--protocol", choices=["sftp", "ftp", "ftps"],
                        help="Transport (default: sftp)")
    init_p.add_argument("--server", metavar="HOST",
                        help="Remote server hostname or IP")
    init_p.add_argument("--port", type=int, metavar="N",
                        help="Port (default: 22 for sftp, 21 for ftp/ftps)")
    init_p.add_argument("--user", metavar="NAME",
                        help="Login name (default: root)")
    init_p.add_argument("--local", metavar="PATH",
                        help="Local root for relative paths (default: current directory)")
    init_p.add_argument("--remote", metavar="PATH",
                        help="Remote directory to start in (relative to base_remote or absolute)")
    init_p.add_argument("--base-remote", metavar="PATH",
                        help="Base remote path prepended to relative remote roots")
    init_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile name to create (default: default)")
    init_p.add_argument("--force", action="store_true",
                        help="Overwrite existing .remotebatch")
    init_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview without writing files")
    init_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show extra output")

    # ── run ───────────────────────────────────────────────────────────────────
    run_p = subparsers.add_parser(
        "run",
        help="Execute a batch of commands on the remote",
        description="Execute commands in order; the first failure ends the batch.",
    )
    run_p.add_argument("commands", nargs="*", metavar="COMMAND",
                       help="Command lines, e.g. 'mkdir a' 'put ./x.txt a/'")
    run_p.add_argument("-f", "--file", metavar="FILE",
                       help="Read commands from FILE, one per line ('-' for stdin)")
    run_p.add_argument("--no-throw", action="store_true",
                       help="Capture the first failure in the result instead of aborting")
    run_p.add_argument("-o", "--output", metavar="FILE",
                       help="Also write the JSON result to FILE")
    run_p.add_argument("--profile", metavar="NAME", default="default",
                       help="Profile to use (default: default)")
    run_p.add_argument("-v", "--verbose", action="store_true",
                       help="Log every listing entry and cursor move")

    # ── status ────────────────────────────────────────────────────────────────
    status_p = subparsers.add_parser(
        "status",
        help="Show the connection settings of the nearest profile",
        description="Show the resolved settings for the nearest .remotebatch config.",
    )
    status_p.add_argument("--profile", metavar="NAME", default="default",
                          help="Profile to use (default: default)")
    status_p.add_argument("-v", "--verbose", action="store_true",
                          help="Show extra output")

    args = parser.parse_args()

    if getattr(args, "verbose", False):
        from remotebatch.utils.logging import set_verbose
        set_verbose(True)

    if args.command == "init":
        cmd_init(args)
    elif args.command == "run":
        cmd_run(args)
    elif args.command == "status":
        cmd_status(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
