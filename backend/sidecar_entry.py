"""Launcher for the terminology API.

Usage:
    python sidecar_entry.py --port 8000
    python sidecar_entry.py --host 0.0.0.0 --port 8000 --log-level debug
"""

import argparse


def main() -> None:
    parser = argparse.ArgumentParser(description="Termlens terminology resolution API")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="bind address")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
    )
    args = parser.parse_args()

    import uvicorn

    uvicorn.run(
        "termlens.api.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
