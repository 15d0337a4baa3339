#!/usr/bin/env python3
"""
Sandbox entrypoint for codesafe.
Reads scan parameters from stdin JSON, scans the given files, outputs JSON to stdout.

Input (stdin JSON):
{
  "files": [
    {"path": "/tmp/uploads/0_app.js", "original_name": "app.js"}
  ],
  "severities": ["high", "medium"]  // optional, default all
}

Single-file input (also supported):
{
  "code": "eval(userInput)\n",
  "filename": "app.js"
}
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

sys.path.insert(0, str(Path(__file__).parent / "src"))

from codesafe.analyzer import analyze_upload
from codesafe.models import Severity

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def read_file_safe(file_path: str) -> tuple[str, Optional[str]]:
    """Read file content with friendly errors."""
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as handle:
            return handle.read(), None
    except FileNotFoundError:
        return "", f"File not found: {file_path}"
    except PermissionError:
        return "", f"Permission denied: {file_path}"
    except OSError as exc:
        return "", f"Failed to read file: {file_path} ({exc})"


def parse_severities(raw: Any) -> Optional[list[Severity]]:
    """Parse the optional severities list; raises ValueError on unknown values."""
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ValueError("'severities' must be a list")
    return [Severity(str(item).lower()) for item in raw]


def scan_single_file(file_info: dict, severities: Optional[list[Severity]]) -> dict:
    """Scan one file from the upload manifest."""
    file_path = file_info.get("path")
    original_name = file_info.get("original_name") or file_info.get("filename") or ""
    filename = original_name or (os.path.basename(file_path) if file_path else "")
    if not file_path:
        return {
            "filename": filename or "unknown",
            "error": "File path missing in file manifest",
        }

    content, error = read_file_safe(file_path)
    if error:
        return {"filename": filename or file_path, "error": error}

    return analyze_upload(content, filename, severities).model_dump(mode="json")


def scan_multiple_files(files: list, severities: Optional[list[Severity]]) -> dict:
    """Scan every file and aggregate counts."""
    results = []
    aggregate = {"high": 0, "medium": 0, "low": 0, "total": 0, "errors": 0}

    for file_info in files:
        result = scan_single_file(file_info, severities)
        results.append(result)
        if "error" in result:
            aggregate["errors"] += 1
            continue
        for key in ("high", "medium", "low", "total"):
            aggregate[key] += result["summary"][key]

    return {
        "files_scanned": len(results),
        "results": results,
        "aggregate": aggregate,
    }


def main() -> None:
    try:
        input_data = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        print(json.dumps({"error": f"Invalid JSON input: {e}"}))
        sys.exit(1)

    if not isinstance(input_data, dict):
        print(json.dumps({"error": "Input must be a JSON object"}))
        sys.exit(1)

    try:
        severities = parse_severities(input_data.get("severities"))
    except ValueError as e:
        print(
            json.dumps(
                {
                    "error": f"Invalid severities: {e}",
                    "valid_severities": [s.value for s in Severity],
                }
            )
        )
        sys.exit(1)

    files = input_data.get("files")
    code = input_data.get("code")

    if isinstance(files, list) and files:
        output = scan_multiple_files(files, severities)
    elif isinstance(code, str):
        filename = input_data.get("filename") or ""
        output = analyze_upload(code, filename, severities).model_dump(mode="json")
    else:
        print(
            json.dumps(
                {
                    "error": "Missing required input. Provide either 'files' or 'code' with 'filename'.",
                    "examples": {
                        "files": {"files": [{"path": "/tmp/app.js", "original_name": "app.js"}]},
                        "code": {"code": "eval(x)", "filename": "app.js"},
                    },
                }
            )
        )
        sys.exit(1)

    logger.info("Scan complete")
    print(json.dumps(output))


if __name__ == "__main__":
    main()
