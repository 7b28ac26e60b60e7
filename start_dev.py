"""Run the Media Catalog API with auto-reload for local development.

Usage:
    python start_dev.py            # port from MEDIACAT_PORT, default 5000
    python start_dev.py --no-reload

Uses the interpreter of a ``.venv`` at the repository root when there is
one, otherwise the interpreter running this script. Ctrl+C stops the server.
"""

from __future__ import annotations

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"
VENV_PYTHON = ROOT_DIR / (".venv/Scripts/python.exe" if os.name == "nt" else ".venv/bin/python")

DEV_ENV = {
    "MEDIACAT_DEBUG": "true",
    "MEDIACAT_LOG_LEVEL": "DEBUG",
    "MEDIACAT_ENVIRONMENT": "development",
}

if os.name == "nt":
    os.system("")  # enable VT100 colours

COLORS = {"info": "\033[36m", "start": "\033[32m", "stop": "\033[33m", "error": "\033[31m"}
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    print(f"{COLORS.get(level, '')}[{level}]{RESET} {msg}")


def backend_python() -> str:
    return str(VENV_PYTHON) if VENV_PYTHON.exists() else sys.executable


def missing_dependencies(python: str) -> bool:
    result = subprocess.run(
        [python, "-c", "import fastapi, uvicorn, aiosqlite, mediacatalog"],
        cwd=BACKEND_DIR,
        capture_output=True,
        text=True,
    )
    if result.returncode == 0:
        return False
    log("error", result.stderr.strip().splitlines()[-1] if result.stderr.strip() else "import failed")
    log("error", f"Install the project first:  cd {ROOT_DIR} && pip install -e '.[dev]'")
    return True


def uvicorn_command(python: str, port: str, reload: bool) -> list[str]:
    cmd = [python, "-m", "uvicorn", "mediacatalog.main:app", "--host", "0.0.0.0", "--port", port]
    if reload:
        cmd += ["--reload", "--reload-dir", str(BACKEND_DIR / "mediacatalog")]
    return cmd


def stop(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    log("stop", f"uvicorn (pid {proc.pid})")
    if os.name == "nt":
        proc.send_signal(signal.CTRL_BREAK_EVENT)
    else:
        try:
            os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        except ProcessLookupError:
            return
    try:
        proc.wait(timeout=10)
    except subprocess.TimeoutExpired:
        proc.kill()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--no-reload", action="store_true", help="disable auto-reload")
    args = parser.parse_args(argv)

    python = backend_python()
    log("info", f"Python: {python}")
    if missing_dependencies(python):
        return 1

    env = {**DEV_ENV, **os.environ}
    port = env.get("MEDIACAT_PORT", "5000")
    cmd = uvicorn_command(python, port, reload=not args.no_reload)

    log("start", " ".join(cmd))
    popen_kw = (
        {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
        if os.name == "nt"
        else {"start_new_session": True}
    )
    proc = subprocess.Popen(cmd, cwd=BACKEND_DIR, env=env, **popen_kw)

    log("info", f"API:    http://localhost:{port}/api")
    log("info", f"Health: http://localhost:{port}/api/health")
    log("info", f"Docs:   http://localhost:{port}/docs")

    try:
        return proc.wait()
    except KeyboardInterrupt:
        print()
        return 0
    finally:
        stop(proc)


if __name__ == "__main__":
    raise SystemExit(main())
