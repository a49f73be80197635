from __future__ import annotations

import argparse
import json
import sys

from . import modules
from .context import CallContext
from .errors import ModulesError
from .logs import configure_logging


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _add_target(p: argparse.ArgumentParser, with_version: bool = True) -> None:
    p.add_argument("--module", default="", help="Module name (default: current module)")
    if with_version:
        p.add_argument("--version", default="", help="Version id (default: current version)")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Query and control App Engine modules")
    p.add_argument("--timeout", type=float, default=None, help="Timeout in seconds for the remote call")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List modules")

    s_ver = sub.add_parser("versions", help="List versions of a module")
    _add_target(s_ver, with_version=False)

    s_def = sub.add_parser("default-version", help="Show the default version of a module")
    _add_target(s_def, with_version=False)

    s_num = sub.add_parser("num-instances", help="Show the instance count of a version")
    _add_target(s_num)

    s_set = sub.add_parser("set-num-instances", help="Set the instance count of a version")
    _add_target(s_set)
    s_set.add_argument("--instances", type=int, required=True)

    s_start = sub.add_parser("start", help="Start a version")
    _add_target(s_start)

    s_stop = sub.add_parser("stop", help="Stop a version")
    _add_target(s_stop)

    args = p.parse_args(argv)

    ctx = CallContext(timeout_s=args.timeout)
    configure_logging(ctx.settings.log_level)

    try:
        if args.cmd == "list":
            _print(modules.list_modules(ctx))
            return 0

        if args.cmd == "versions":
            _print(modules.versions(ctx, args.module))
            return 0

        if args.cmd == "default-version":
            _print(modules.default_version(ctx, args.module))
            return 0

        if args.cmd == "num-instances":
            _print(modules.num_instances(ctx, args.module, args.version))
            return 0

        if args.cmd == "set-num-instances":
            modules.set_num_instances(ctx, args.module, args.version, args.instances)
            _print({"module": args.module, "version": args.version, "instances": args.instances})
            return 0

        if args.cmd == "start":
            modules.start_version(ctx, args.module, args.version)
            _print({"module": args.module, "version": args.version, "status": "SERVING"})
            return 0

        if args.cmd == "stop":
            modules.stop_version(ctx, args.module, args.version)
            _print({"module": args.module, "version": args.version, "status": "STOPPED"})
            return 0
    except ModulesError as e:
        _print({"error": type(e).__name__, "detail": str(e)})
        return 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
