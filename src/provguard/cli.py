"""provguard CLI: configuration and sidecar checks."""

import argparse
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def main():
    """Main CLI entry point for provguard commands."""
    try:
        provguard_version = get_version("provguard")
    except PackageNotFoundError:
        provguard_version = "dev"

    parser = argparse.ArgumentParser(
        prog="provguard",
        description="provguard: configuration checks and provenance sidecars for analysis steps"
    )
    parser.add_argument("--version", action="version", version=f"provguard {provguard_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-config command
    init_parser = subparsers.add_parser(
        "init-config",
        help="Create the configuration file from its template",
        parents=[parent_parser]
    )
    init_parser.add_argument(
        "--template",
        type=Path,
        required=True,
        help="Path to the configuration template"
    )
    init_parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path of the configuration file to create"
    )

    # check-config command
    check_parser = subparsers.add_parser(
        "check-config",
        help="Validate a configuration against its template",
        parents=[parent_parser]
    )
    check_parser.add_argument(
        "--template",
        type=Path,
        default=None,
        help="Path to the configuration template (declared keys)"
    )
    check_parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the configuration file"
    )

    # verify command
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify provenance sidecars against their outputs",
        parents=[parent_parser]
    )
    verify_parser.add_argument(
        "sidecars",
        type=Path,
        nargs="+",
        help="Sidecar files (*.provenance.json)"
    )
    verify_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write verify_sidecars.json to this directory"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "init-config":
        try:
            from .api import init_config

            copied = init_config(args.template, args.config)
            if not copied:
                print(f"Error: {args.config} already exists; not overwriting", file=sys.stderr)
                sys.exit(1)
            if not args.quiet:
                print("[OK] Configuration created")
                print(f"  Config: {args.config}")
                print("  Next: replace every <...> value, then run 'provguard check-config'")
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "check-config":
        from .errors import ProvguardError

        try:
            from .api import load_config

            config = load_config(args.template, args.config)
        except ProvguardError as e:
            print(f"Error: {e}", file=sys.stderr)
            if not args.quiet:
                print("  Status: FAILED")
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)

        if not args.quiet:
            print("[OK] Configuration check complete")
            print("  Status: OK")
            for key in ("data_path", "env_path", "log_level", "random_seed", "processed_path", "reports_path"):
                print(f"  {key}: {config.get(key)}")
    elif args.command == "verify":
        try:
            from .api import verify_sidecar
            from ._internal.canonical_json import canonical_dumps

            checks = [verify_sidecar(path) for path in args.sidecars]
            failed = [check for check in checks if not check.ok]

            if args.output_dir:
                output_dir = Path(args.output_dir).resolve()
                output_dir.mkdir(parents=True, exist_ok=True)
                report_out = output_dir / "verify_sidecars.json"
                report = {
                    "ok": not failed,
                    "checks": [check.model_dump() for check in checks],
                }
                report_out.write_text(canonical_dumps(report) + "\n", encoding="utf-8")
                if not args.quiet:
                    print(f"  Report: {report_out}")

            if not args.quiet:
                for check in checks:
                    print(f"[{'OK' if check.ok else 'FAILED'}] {check.path}")
                    for error in check.errors:
                        print(f"    {error}")
                print(f"  Status: {'OK' if not failed else 'FAILED'}")
                print(f"  Sidecars: {len(checks) - len(failed)}/{len(checks)} verified")
            if failed:
                sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
