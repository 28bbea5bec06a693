#!/usr/bin/env python3
"""
CLI script for running the weekly research digest once
Usage: python cli.py [--pretty]
"""
import argparse
import json
import sys
from pathlib import Path

# Add backend to Python path
backend_path = Path(__file__).parent / "backend"
sys.path.insert(0, str(backend_path))

from dotenv import load_dotenv  # noqa: E402

from core.config import DigestSettings  # noqa: E402
from core.digest import DigestPipeline  # noqa: E402
from core.logging_config import configure_logging  # noqa: E402
from core.openai_client import UpstreamCallError  # noqa: E402


def main(argv=None, out=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(description="Fetch this week's research digest from OpenAI.")
    parser.add_argument("--pretty", action="store_true", help="indent the JSON output")
    args = parser.parse_args(argv)
    out = out or sys.stdout
    indent = 2 if args.pretty else None

    load_dotenv()
    # Logs go to stderr so stdout stays pure JSON.
    configure_logging(stream=sys.stderr)

    try:
        result = DigestPipeline(DigestSettings.from_env()).run()
    except UpstreamCallError as exc:
        print(json.dumps({"error": "OpenAI call failed", "detail": exc.detail}, indent=indent), file=out)
        return 2
    except Exception as exc:  # noqa: BLE001 - report as JSON like the HTTP handler
        print(json.dumps({"error": "Server error", "detail": str(exc)}, indent=indent), file=out)
        return 1

    print(json.dumps(result.model_dump(), indent=indent, ensure_ascii=False), file=out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
