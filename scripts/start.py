"""Production entrypoint: apply migrations, then exec uvicorn.

Host and port come from Settings (API_HOST / API_PORT); PORT overrides the
port when the platform injects one. Set RUN_MIGRATIONS=false to skip alembic.
"""

import os
import signal
import subprocess
import sys

from roome.config import get_settings


def run_migrations() -> bool:
    print("Applying migrations (alembic upgrade head)...")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            check=True,
            capture_output=True,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        print(f"Migration failed: {e.stderr}")
        return False
    if result.stdout:
        print(result.stdout)
    return True


def uvicorn_args() -> list[str]:
    settings = get_settings()
    port = os.getenv("PORT") or str(settings.api_port)
    args = [
        "uvicorn",
        "roome.main:app",
        "--host",
        settings.api_host,
        "--port",
        port,
        "--workers",
        os.getenv("API_WORKERS", "1"),
        "--proxy-headers",
        "--forwarded-allow-ips",
        "*",
    ]
    if settings.debug:
        args.append("--reload")
    return args


def _exit_on_signal(signum: int, _frame: object) -> None:
    print(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main() -> None:
    signal.signal(signal.SIGTERM, _exit_on_signal)
    signal.signal(signal.SIGINT, _exit_on_signal)

    if os.getenv("RUN_MIGRATIONS", "true").lower() == "true" and not run_migrations():
        if get_settings().is_production:
            sys.exit(1)
        print("Continuing without migrations")

    args = uvicorn_args()
    print(f"Starting {' '.join(args)}")
    os.execvp(args[0], args)


if __name__ == "__main__":
    main()
