"""
Web server launcher
Starts the backend API server.
"""

import uvicorn

HOST = "0.0.0.0"
PORT = 8000


def main():
    print("=" * 60)
    print("  CPU Scheduling Simulator - Web Server")
    print("=" * 60)
    print()
    print("Starting the backend server...")
    print(f"API docs: http://localhost:{PORT}/docs")
    print(f"Replay:   ws://localhost:{PORT}/ws/replay")
    print()
    print("Press Ctrl+C to stop.")
    print("-" * 60)

    uvicorn.run("web.backend.app:app", host=HOST, port=PORT, reload=True)


if __name__ == "__main__":
    main()
