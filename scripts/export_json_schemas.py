#!/usr/bin/env python
"""Write a JSON Schema file for every phase artifact and the TaskSpec input."""

from __future__ import annotations

import json
from pathlib import Path

from copy_agent.schemas.artifacts import TaskSpec
from copy_agent.schemas.registry import PHASE_ARTIFACTS


def main() -> None:
    root = Path(__file__).resolve().parents[1]
    out_dir = root / "schemas"
    out_dir.mkdir(parents=True, exist_ok=True)
    models = {"task_spec": TaskSpec, **{phase.value: entry.model for phase, entry in PHASE_ARTIFACTS.items()}}
    for name, model in models.items():
        out_path = out_dir / f"{name}.schema.json"
        schema = model.model_json_schema()
        out_path.write_text(json.dumps(schema, indent=2, ensure_ascii=True, sort_keys=True) + "\n", encoding="utf-8")
        print("wrote", out_path)


if __name__ == "__main__":
    main()
