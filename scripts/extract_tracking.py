"""
Extract tracking numbers from a saved email.

Reads an .eml file, runs the extraction pipeline and prints the results
as JSON on stdout. Status messages go to stderr.

Usage:
    python scripts/extract_tracking.py message.eml [--llm] [--min-confidence 0.6] [--debug]
"""

import argparse
import email
import json
import sys
from pathlib import Path

from shipmail.config import load_extractor_config, load_llm_config
from shipmail.exceptions import ShipmailError
from shipmail.models import EmailContent
from shipmail.parser import extract_tracking
from shipmail.security.redaction import redact_config
from shipmail.utils.logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract tracking numbers from an .eml file"
    )
    parser.add_argument("path", type=Path, help="Path to the .eml file")
    parser.add_argument(
        "--llm", action="store_true", help="Enable the language model fallback"
    )
    parser.add_argument(
        "--min-confidence",
        type=float,
        default=None,
        help="Minimum confidence for reported results (0-1)",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose pipeline logs")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if not args.path.exists():
        print(f"❌ Email file not found: {args.path}", file=sys.stderr)
        return 1

    # stdout is reserved for the JSON results
    setup_logging("shipmail-cli", debug=args.debug, stream=sys.stderr)

    overrides: dict = {}
    if args.llm:
        overrides["enable_llm"] = True
    if args.min_confidence is not None:
        overrides["min_confidence"] = args.min_confidence
    if args.debug:
        overrides["debug_mode"] = True
    config = load_extractor_config().model_copy(update=overrides)

    llm_config = load_llm_config()
    if args.llm:
        llm_config = llm_config.model_copy(update={"enabled": True})
        print(
            f"🤖 Model fallback: {redact_config(llm_config).model_dump_json()}",
            file=sys.stderr,
        )

    with open(args.path, "r", errors="replace") as f:
        message = email.message_from_file(f)
    content = EmailContent.from_message(message)

    try:
        results = extract_tracking(content, config=config, llm_config=llm_config)
    except ShipmailError as e:
        print(f"❌ Extraction failed: {e}", file=sys.stderr)
        return 1

    print(f"✅ Found {len(results)} tracking number(s)", file=sys.stderr)
    print(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
