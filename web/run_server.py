"""
Web server launcher
Starts the backend API with uvicorn.
"""

import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Serve the scheduling engine API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    print("=" * 60)
    print("  Process Scheduling Engine - API server")
    print("=" * 60)
    print(f"API docs: http://{args.host}:{args.port}/docs")
    print("Press Ctrl+C to stop.")
    print("-" * 60)

    uvicorn.run("web.backend.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
