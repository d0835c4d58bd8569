"""
Command-line wrapper: pmac0 sign|verify.

    pmac0 sign FILE [--tag-file PATH]
    pmac0 verify FILE TAGFILE

Common options select the transform variant, the logical worker count,
the backend and the pool size. Settings are layered: defaults, then
--config JSON, then PMAC0_* environment variables, then flags.

Exit status: 0 on success (and on a verified match), 1 on a verification
mismatch or an I/O failure, 2 on usage or configuration errors.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import PMACConfig
from .errors import ConfigurationError, InputError, ReductionError
from .mac import sign_file, verify_file
from .reducer import BACKENDS, make_runner
from .transforms import TransformVariant

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--variant", choices=[v.value for v in TransformVariant], default=None,
                        help="Block transform (default: otp)")
    common.add_argument("--workers", type=int, default=None,
                        help="Logical worker count W; must match between sign and verify")
    common.add_argument("--processes", type=int, default=None,
                        help="Process pool size for the pool backend (default: CPU count)")
    common.add_argument("--backend", choices=BACKENDS, default=None,
                        help="Execution backend (default: pool)")
    common.add_argument("--config", default=None, help="JSON configuration file")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    ap = argparse.ArgumentParser(
        prog="pmac0",
        description="Parallel PMAC0 file tags",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_sign = sub.add_parser("sign", parents=[common], help="Compute and store a file's tag")
    p_sign.add_argument("file")
    p_sign.add_argument("--tag-file", default=None, help="Output path (default: <file>.tag)")

    p_verify = sub.add_parser("verify", parents=[common], help="Check a file against a stored tag")
    p_verify.add_argument("file")
    p_verify.add_argument("tagfile")

    return ap


def _load_config(args) -> PMACConfig:
    config = PMACConfig.from_json(args.config) if args.config else PMACConfig()
    config = PMACConfig.from_env(base=config)

    changes = {}
    if args.variant is not None:
        changes["variant"] = args.variant
    if args.workers is not None:
        changes["worker_count"] = args.workers
    if args.processes is not None:
        changes["processes"] = args.processes
    if args.backend is not None:
        changes["backend"] = args.backend
    return config.replace(**changes) if changes else config


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _load_config(args)
        runner = make_runner(config.backend, config.processes)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except ImportError as e:
        print(f"Backend {config.backend!r} is not available: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        if args.cmd == "sign":
            written = sign_file(args.file, config, tag_path=args.tag_file, runner=runner)
            if written is not None:
                print(f"Tag written to: {written}")
            return EXIT_OK

        result = verify_file(args.file, args.tagfile, config, runner=runner)
        if result is None:
            return EXIT_OK
        if result:
            print("Tag verification succeeded")
            return EXIT_OK
        print("Tag verification failed")
        return EXIT_FAILURE

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (InputError, ReductionError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
