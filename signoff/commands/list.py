"""
signoff list - List initiatives.
"""

import json

from signoff.lib.errors import SignoffError
from signoff.lib.output import EXIT_OK, section
from signoff.workflow.engine import ProgressionEngine


def cmd_list(args, engine: ProgressionEngine) -> int:
    """List initiatives with their current step."""
    rows = []
    for key in engine.list_keys():
        try:
            initiative = engine.load(key)
            progress = engine.progress(initiative)
        except SignoffError as e:
            rows.append({"key": key, "error": e.code})
            continue
        rows.append({
            "key": key,
            "title": initiative.title,
            "current_step": initiative.current_step,
            "progress": f"{progress.index}/{progress.total}",
            "complete": progress.complete,
        })

    if args.json:
        print(json.dumps(rows, indent=2))
        return EXIT_OK

    if not rows:
        print("Initiatives: none")
        return EXIT_OK

    section("Initiatives")
    for row in rows:
        if "error" in row:
            print(f"  {row['key']:<16} [WARN] {row['error']}")
            continue
        step = "complete" if row["complete"] else row["current_step"]
        title = row["title"][:40] + "..." if len(row["title"]) > 40 else row["title"]
        print(f"  {row['key']:<16} {step:<14} {row['progress']:<5} {title}")
    return EXIT_OK
