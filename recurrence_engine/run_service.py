#!/usr/bin/env python3
"""Direct runner for the occurrence engine without starting a server.

Reads completed task records from a JSON file (a single object or a list),
rolls each one forward and prints or writes the resulting updates. The
input path comes from the first command-line argument or
``INPUT_JSON_FILE``; ``OUTPUT_JSON_FILE`` selects where results are saved.
"""

import json
import logging
import os
import sys

from recurrence_engine.core import PayloadError, handle_task_completion

logger = logging.getLogger(__name__)


def _configure_logging():
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _format_result(res):
    """Format a result structure into readable JSON text."""
    try:
        if isinstance(res, (dict, list)):
            return json.dumps(res, indent=2, ensure_ascii=False)
        return str(res)
    except (TypeError, ValueError) as e:
        return f"<unserializable result: {e}>"


def _write_output_file(out_file, readable):
    """Write the human-readable JSON output to `out_file`.

    Returns True on success and False on filesystem errors.
    """
    try:
        with open(out_file, "w", encoding="utf-8") as fh:
            fh.write(readable + "\n")
        return True
    except OSError as exc:
        print(f"\n❌ Failed to write result to {out_file}: {exc}", file=sys.stderr)
        return False


def _load_tasks(in_file):
    """Load task records from ``in_file`` as a list of dicts."""
    with open(in_file, "r", encoding="utf-8") as fh:
        parsed = json.load(fh)
    if isinstance(parsed, dict):
        parsed = parsed.get("tasks", [parsed])
    if not isinstance(parsed, list) or not all(isinstance(t, dict) for t in parsed):
        raise PayloadError("input must be a task object or a list of task objects")
    return parsed


def _process_tasks(tasks):
    """Roll every task forward; per-task payload errors are reported inline."""
    results = []
    for task in tasks:
        try:
            results.append({"status": "ok", "task": handle_task_completion(task)})
        except PayloadError as exc:
            logger.error("Skipping task %s: %s", task.get("id", "?"), exc)
            results.append(
                {"status": "error", "id": task.get("id"), "detail": str(exc)}
            )
    return results


def main(argv=None):
    """Run the engine over an input file and return a process exit code."""
    _configure_logging()
    argv = sys.argv[1:] if argv is None else argv
    in_file = argv[0] if argv else os.getenv("INPUT_JSON_FILE", "")
    if not in_file:
        print(
            "\n❌ No input file given (argument or INPUT_JSON_FILE)", file=sys.stderr
        )
        return 1
    try:
        tasks = _load_tasks(in_file)
        results = _process_tasks(tasks)
    except (OSError, ValueError) as e:
        print(f"\n❌ Error executing service: {e}", file=sys.stderr)
        return 1

    print(f"\n✅ Processed {len(results)} task(s)")
    readable = _format_result({"status": "ok", "results": results})
    out_file = os.getenv("OUTPUT_JSON_FILE", "")
    if out_file:
        if not _write_output_file(out_file, readable):
            print("\nResult:")
            print(readable)
            return 1
        print(f"\nResult saved to {out_file}")
    else:
        print("\nResult:")
        print(readable)
    return 0


if __name__ == "__main__":
    sys.exit(main())
