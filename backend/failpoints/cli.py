from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI

from failpoints.core.config import ConfigurationError, Settings, get_settings, parse_listen_address
from failpoints.demo import DEMO_FAILPOINTS
from failpoints.main import build_registry, create_app, create_demo_app
from failpoints.runtime import FailpointHook

DEFAULT_LISTEN = "127.0.0.1:22381"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="failpoints",
        description="Failpoint control-plane commands.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the control plane for a fixed set of failpoints.",
    )
    serve_parser.add_argument(
        "-f",
        "--failpoint",
        dest="failpoints",
        action="append",
        required=True,
        help="Failpoint name to register; repeat for each failpoint.",
    )
    serve_parser.add_argument("--listen", default=None, help="Control-plane address, host:port.")
    serve_parser.add_argument(
        "--terms",
        default=None,
        help="Initial terms as name=spec;name=spec.",
    )

    demo_parser = subparsers.add_parser(
        "demo",
        help="Serve the example functions and their control plane together.",
    )
    demo_parser.add_argument("port", type=int, help="Port for the /call/<function> server.")
    demo_parser.add_argument("--listen", default=None, help="Control-plane address, host:port.")

    return parser


def _resolve_listen(explicit: str | None, settings: Settings) -> tuple[str, int]:
    return parse_listen_address(explicit or settings.http_listen or DEFAULT_LISTEN)


def _uvicorn_config(app: FastAPI, host: str, port: int) -> uvicorn.Config:
    return uvicorn.Config(app, host=host, port=port, log_config=None)


async def _serve_all(configs: Sequence[uvicorn.Config]) -> None:
    await asyncio.gather(*(uvicorn.Server(config).serve() for config in configs))


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    try:
        if args.command == "serve":
            if args.terms is not None:
                settings = settings.model_copy(update={"initial_failpoints": args.terms})
            host, port = _resolve_listen(args.listen, settings)
            registry = build_registry(args.failpoints, settings)
            uvicorn.run(create_app(registry, settings=settings), host=host, port=port, log_config=None)
            return 0

        if args.command == "demo":
            host, port = _resolve_listen(args.listen, settings)
            registry = build_registry(DEMO_FAILPOINTS, settings)
            hook = FailpointHook(registry)
            asyncio.run(
                _serve_all(
                    [
                        _uvicorn_config(create_demo_app(hook, settings=settings), host, args.port),
                        _uvicorn_config(create_app(registry, settings=settings), host, port),
                    ]
                )
            )
            return 0
    except (ConfigurationError, ValueError) as exc:
        parser.error(str(exc))

    parser.error(f"Unsupported command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
