#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
tweet-sentiment 统一入口

用法：
  python run.py                  # 启动服务
  python run.py serve --reload   # 开发模式热重载
  python run.py test --phrase ibm  # 对已运行服务做冒烟测试
  python run.py info             # 查看数据库信息
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent
load_dotenv(ROOT / ".env")


def _default_port() -> int:
    # 兼容 Cloud Foundry 的 VCAP_APP_PORT
    return int(os.getenv("PORT") or os.getenv("VCAP_APP_PORT") or 3000)


def _banner(title):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def _serve(host: str, port: int, reload: bool):
    _banner("启动 tweet-sentiment API 服务")
    cmd = [sys.executable, "-m", "uvicorn", "tweet_sentiment.app:app",
           "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")
    proc = subprocess.Popen(cmd, cwd=str(ROOT))
    print(f"🚀 Server listening on port {port}")
    try:
        return proc.wait()
    except KeyboardInterrupt:
        print("\n🛑 收到中断信号，正在关闭服务...")
        proc.terminate()
        try:
            return proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            return 1


def _smoke_test(host: str, port: int, phrase: str):
    import requests
    base = f"http://{host}:{port}"

    print("[1/3] 健康检查 ...")
    r = requests.get(base + "/health", timeout=10)
    r.raise_for_status()
    print(f"      OK: {r.json()}")

    print(f"[2/3] 添加关键词 POST /sentiment {{'phrase': '{phrase}'}} ...")
    r = requests.post(base + "/sentiment", json={"phrase": phrase}, timeout=10)
    r.raise_for_status()
    print("      返回：", r.json())

    print("[3/3] 读取快照 GET /sentiment ...")
    r = requests.get(base + "/sentiment", timeout=10)
    r.raise_for_status()
    data = r.json()
    print(f"      tweets={data['tweets']}  关键词 {len(data['sentiments'])} 个")
    for s in data["sentiments"]:
        print(f"      {s['phrase']:>12}  score={s['score']:.4f}  tweets={s['tweets']}")
    print("\n✅ 冒烟测试完成。")
    return 0


def _show_info():
    from tweet_sentiment.storage.db import engine
    url = str(engine.url)
    print("Database URL:", url)
    if url.startswith("sqlite:///"):
        p = Path(url.replace("sqlite:///", "", 1))
        print("SQLite 文件存在：", p.exists())
        print("SQLite 文件路径：", p)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="tweet-sentiment Runner")
    sub = parser.add_subparsers(dest="cmd")

    p_serve = sub.add_parser("serve", help="启动 API 服务（默认命令）")
    p_serve.add_argument("--host", type=str, default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=_default_port())
    p_serve.add_argument("--reload", action="store_true")

    p_test = sub.add_parser("test", help="对已运行服务做冒烟测试")
    p_test.add_argument("--host", type=str, default="127.0.0.1")
    p_test.add_argument("--port", type=int, default=_default_port())
    p_test.add_argument("--phrase", type=str, default="ibm")

    sub.add_parser("info", help="打印数据库配置等信息")

    args = parser.parse_args(argv)
    if args.cmd is None:
        return _serve(host="0.0.0.0", port=_default_port(), reload=False)
    if args.cmd == "serve":
        return _serve(host=args.host, port=args.port, reload=args.reload)
    if args.cmd == "test":
        return _smoke_test(host=args.host, port=args.port, phrase=args.phrase)
    if args.cmd == "info":
        return _show_info()

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
