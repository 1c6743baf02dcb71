#!/usr/bin/env python3
"""
开发环境快速启动脚本

使用方法:
    python run.py              # 启动 API 服务 (默认 --reload)
    python run.py serve        # 启动 API 服务，主机与端口取自 config/settings.yaml
    python run.py serve --port 8080  # 指定端口
    python run.py run          # 通过 stdin/stdout 运行 worker
"""

import os
import sys

# 将 src 目录添加到 Python 路径，确保可以导入 compute_worker
src_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


def main():
    """主入口函数，参数解析交给 compute_worker.__main__"""
    from compute_worker.__main__ import main as worker_main

    argv = sys.argv[1:]
    if not argv:
        # 没有指定命令时，默认以开发模式启动 API 服务
        argv = ["serve", "--reload"]
    worker_main(argv)


if __name__ == "__main__":
    main()
