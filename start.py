#!/usr/bin/env python3
"""
Wrapper script to start the Standup Digest API.
Reads the port from the environment so it runs unchanged on Render.
"""
import os
import sys
import subprocess


def main():
    # Get the port from environment variable (Render sets this)
    port = os.environ.get('PORT', '8000')

    cmd = [
        sys.executable, '-m', 'uvicorn',
        'standup_digest.web.app:app',
        '--host', '0.0.0.0',
        '--port', port
    ]

    print("Starting Standup Digest")
    print(f"Command: {' '.join(cmd)}")

    subprocess.run(cmd, cwd=os.path.dirname(os.path.abspath(__file__)))


if __name__ == "__main__":
    main()
