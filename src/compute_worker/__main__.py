#!/usr/bin/env python3
"""
命令行入口点
支持 python -m compute_worker 方式运行
"""

import argparse
import sys

import uvicorn

from compute_worker.config.logging import setup_logging
from compute_worker.config.settings import settings


def build_parser() -> argparse.ArgumentParser:
    """构建命令行解析器，默认值取自 settings.yaml"""
    server_settings = settings().server
    log_settings = settings().logging

    parser = argparse.ArgumentParser(
        prog="compute-worker",
        description="Background compute worker"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve 子命令 - 启动 HTTP / WebSocket 服务
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host",
        default=server_settings.host,
        help=f"Host to bind (default: {server_settings.host})"
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=server_settings.port,
        help=f"Port to bind (default: {server_settings.port})"
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )

    # run 子命令 - 通过 stdin/stdout 收发消息
    run_parser = subparsers.add_parser("run", help="Run the worker over stdin/stdout")
    run_parser.add_argument(
        "--log-level",
        default=log_settings.level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "debug", "info", "warning", "error"],
        help=f"Log level (default: {log_settings.level})"
    )
    run_parser.add_argument(
        "--log-file",
        default=log_settings.log_file,
        help="Optional log file"
    )

    return parser


def main(argv=None):
    """主入口函数"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        # 启动 API 服务
        uvicorn.run(
            "compute_worker.api.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
    elif args.command == "run":
        # stdout 留给协议输出，日志写到 stderr
        setup_logging(
            level=args.log_level,
            log_file=args.log_file,
            format_string=settings().logging.format,
            stream=sys.stderr,
        )
        from compute_worker.cli import run_worker
        run_worker()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
