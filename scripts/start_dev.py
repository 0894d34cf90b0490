#!/usr/bin/env python3
"""
Development startup script.

Starts the storefront API in development mode.
"""

import os
import sys
import shutil
import subprocess
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import pydantic_settings
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .")
        return False


def check_env():
    """Check if .env file exists, copying the example when it does not."""
    env_file = PROJECT_ROOT / ".env"
    env_example = PROJECT_ROOT / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created .env from example")
    else:
        print("! No configuration file found, using defaults")
    return True


def start_server(port: str):
    """Run uvicorn with reload until interrupted."""
    print(f"\n🛒 Starting Storefront on http://localhost:{port} ...")
    print(f"📍 API docs: http://localhost:{port}/docs")
    print("\nPress Ctrl+C to stop")

    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "storefront.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", port,
        ],
        cwd=PROJECT_ROOT,
        env=dict(os.environ),
    )

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Storefront stopped.")


def main():
    print("=" * 60)
    print("Storefront - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    check_env()

    print("\n✓ All checks passed!")

    start_server(os.getenv("STOREFRONT_PORT", "8001"))


if __name__ == "__main__":
    main()
