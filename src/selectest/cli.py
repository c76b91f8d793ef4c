"""selectest CLI: run xcodebuild test invocations with selective testing."""

import argparse
import subprocess
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import List


def _passthrough(arguments: List[str]) -> List[str]:
    """Drop the '--' separating selectest options from xcodebuild arguments."""
    if arguments and arguments[0] == "--":
        return arguments[1:]
    return arguments


def _exit_code(returncode: int) -> int:
    """Exit status for a failed xcodebuild; signals map to 128 + signal number."""
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode or 1


def main():
    """Main CLI entry point for selectest commands."""
    try:
        selectest_version = get_version("selectest")
    except PackageNotFoundError:
        selectest_version = "dev"

    parser = argparse.ArgumentParser(
        prog="selectest",
        description="selectest: skip test targets whose inputs already passed"
    )
    parser.add_argument("--version", action="version", version=f"selectest {selectest_version}")
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    xcodebuild_parser = subparsers.add_parser(
        "xcodebuild",
        help="Run an xcodebuild test invocation, skipping cached test targets",
        parents=[parent_parser]
    )
    xcodebuild_parser.add_argument(
        "--graph",
        type=Path,
        default=None,
        help="Path to graph.json (defaults to graph.json next to -workspace/-project or in the working directory)"
    )
    xcodebuild_parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Local cache directory (overrides SELECTEST_CACHE_DIR)"
    )
    xcodebuild_parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write the run's selective testing report (JSON) to this path"
    )
    xcodebuild_parser.add_argument(
        "xcodebuild_arguments",
        nargs=argparse.REMAINDER,
        help="Arguments passed through to xcodebuild, after '--'"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "xcodebuild":
        from ._internal.cache.local import LocalCacheStorage
        from ._internal.canonical_json import canonical_dumps
        from ._internal.hasher import ContentGraphHasher
        from ._internal.io.graph_json import JsonGraphMapper
        from ._internal.selective_testing import HashMatchSelectiveTestingService
        from ._internal.xcodebuild import XcodeBuildController
        from .config import get_settings
        from .errors import SelectestError
        from .kernel.run_metadata import RunMetadataStorage
        from .logging import configure_logging
        from .service import XcodeBuildService

        settings = get_settings()
        if args.quiet:
            settings = settings.model_copy(update={"log_level": "WARNING"})
        configure_logging(settings)

        working_directory = Path.cwd()
        cache_dir = args.cache_dir if args.cache_dir is not None else settings.cache_dir
        service = XcodeBuildService(
            xcode_graph_mapper=JsonGraphMapper(args.graph.resolve() if args.graph else None),
            xcode_build_controller=XcodeBuildController(settings.xcodebuild_command, cwd=working_directory),
            cache_storage=LocalCacheStorage(cache_dir),
            selective_testing_graph_hasher=ContentGraphHasher(),
            selective_testing_service=HashMatchSelectiveTestingService(),
            additional_hash_strings=settings.hash_seeds,
        )
        run_metadata_storage = RunMetadataStorage()

        try:
            classification = service.run(
                _passthrough(args.xcodebuild_arguments),
                run_metadata_storage,
                path=working_directory,
            )
        except SelectestError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except subprocess.CalledProcessError as e:
            print(f"Error: xcodebuild failed with exit code {e.returncode}", file=sys.stderr)
            sys.exit(_exit_code(e.returncode))
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)

        if args.report is not None:
            report_path = args.report.resolve()
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(canonical_dumps(run_metadata_storage.to_report(), indent=2) + "\n", encoding="utf-8")

        if not args.quiet:
            hits = len(classification.hits)
            total = len(classification.entries)
            if classification.all_cached:
                print(f"[OK] All {total} test targets cached, xcodebuild skipped")
            else:
                print(f"[OK] Selective testing complete")
                print(f"  Skipped: {hits}/{total}")
                print(f"  Executed: {total - hits}/{total}")
            if args.report is not None:
                print(f"  Report: {args.report.resolve()}")
        sys.exit(0)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
