"""Convert an MSON model file into a System Runtime bundle.

Usage (example):
python scripts/convert_model.py sample_models/university.json -o university.bundle.json --version 1.0.0

Prints the validation findings to stderr and exits non-zero when the bundle
has errors. With --uml, prints the model as PlantUML or Mermaid instead.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from system_designer.exporters import render_uml
from system_designer.logging_config import setup_logging
from system_designer.transform import mson_to_runtime_bundle
from system_designer.validation import summarize_warnings, validate_mson_model, validate_runtime_bundle

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MSON model -> System Runtime bundle")
    parser.add_argument("model", type=Path, help="Path to an MSON model JSON file")
    parser.add_argument("-o", "--output", type=Path, help="Write the bundle here instead of stdout")
    parser.add_argument("--version", help="Bundle version (semantic version)")
    parser.add_argument("--uml", choices=["plantuml", "mermaid"], help="Render UML instead of a bundle")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    model_result = validate_mson_model(args.model.read_text())
    if model_result.model is None:
        print(summarize_warnings(model_result.warnings), file=sys.stderr)
        return 2
    if model_result.warnings:
        print(summarize_warnings(model_result.warnings), file=sys.stderr)

    if args.uml:
        print(render_uml(model_result.model, args.uml))
        return 0

    bundle = mson_to_runtime_bundle(model_result.model, args.version)
    result = validate_runtime_bundle(bundle)
    print(summarize_warnings(result.warnings), file=sys.stderr)

    text = json.dumps(bundle.to_dict(), indent=2)
    if args.output:
        args.output.write_text(text)
        logger.info(f"Bundle written to {args.output}")
    else:
        print(text)

    return 0 if result.isValid else 1


if __name__ == "__main__":
    sys.exit(run())
