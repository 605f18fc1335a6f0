#!/usr/bin/env python3
"""
Development startup script.

Starts the mock acquirer so the iDEAL/iDIN client can be exercised locally.
"""

import os
import subprocess
import sys
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
KEYS_DIR = PROJECT_ROOT / "config" / "keys"
PORT = os.getenv("MOCK_ACQUIRER_PORT", "8002")


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import lxml
        import signxml
        import uvicorn
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print('\nRun: pip install -e ".[mock]"')
        return False


def check_keys():
    """Check if merchant and acquirer keys exist."""
    required = [
        "merchant_private.pem",
        "merchant_certificate.pem",
        "acquirer_private.pem",
        "acquirer_certificate.pem",
    ]
    missing = [name for name in required if not (KEYS_DIR / name).exists()]

    if not missing:
        print("✓ Signing keys found")
        return True
    print(f"✗ Missing keys: {', '.join(missing)}")
    print("\nRun: python scripts/generate_keys.py")
    return False


def start_acquirer():
    """Run the mock acquirer until interrupted."""
    print(f"\n🏦 Starting Mock Acquirer on http://localhost:{PORT} ...")
    print(f"\n📍 iDEAL endpoint: http://localhost:{PORT}/ideal")
    print(f"📍 iDIN endpoint:  http://localhost:{PORT}/idin")
    print(f"📍 API docs:       http://localhost:{PORT}/docs")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)

    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "app.main:create_app",
            "--factory",
            "--reload",
            "--host", "0.0.0.0",
            "--port", PORT,
        ],
        cwd=PROJECT_ROOT / "mock-acquirer",
        env={**os.environ, "PYTHONPATH": str(PROJECT_ROOT / "shared")},
    )
    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Mock Acquirer stopped.")


def main():
    print("=" * 60)
    print("iDEAL/iDIN - Development Server")
    print("=" * 60)

    # Pre-flight checks
    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_keys():
        response = input("\nGenerate keys now? [Y/n]: ")
        if response.lower() != "n":
            subprocess.run([sys.executable, str(PROJECT_ROOT / "scripts" / "generate_keys.py")])
        else:
            print("Keys are required. Exiting.")
            sys.exit(1)

    print("\n✓ All checks passed!")

    start_acquirer()


if __name__ == "__main__":
    main()
