"""GAIA dataset loader."""

from __future__ import annotations

import base64
import json
import mimetypes
import os
from pathlib import Path
from typing import Any

from datasets import load_dataset
from huggingface_hub import snapshot_download

from .base import Task, TaskFile

GAIA_REPO_ID = "gaia-benchmark/GAIA"
GAIA_YEAR = "2023"

# Extensions mimetypes does not know (or maps inconsistently across platforms)
CUSTOM_MIME_TYPES = {
    "py": "text/x-python",
    "ipynb": "application/x-ipynb+json",
    "r": "text/x-r",
    "sql": "text/x-sql",
    "sh": "text/x-sh",
    "bash": "text/x-sh",
    "yml": "text/yaml",
    "yaml": "text/yaml",
    "toml": "application/toml",
    "ini": "text/x-ini",
    "cfg": "text/x-ini",
    "conf": "text/x-ini",
    "log": "text/x-log",
    "md": "text/markdown",
    "markdown": "text/markdown",
    "json": "application/json",
    "xml": "application/xml",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "txt": "text/plain",
    "text": "text/plain",
}


def load_gaia_tasks(
    split: str = "validation",
    cache_dir: str | None = ".gaia-cache",
    token: str | None = None,
) -> list[Task]:
    """Load GAIA tasks (with inlined attachments) from HuggingFace.

    Args:
        split: Dataset split ("validation" or "test").
        cache_dir: Where the dataset snapshot is downloaded.
        token: HuggingFace token; GAIA is gated, so one is usually required.

    Returns:
        List of Task objects in dataset order.
    """
    print(f"Downloading GAIA {split} dataset from HuggingFace (with attachments)...")
    try:
        snapshot_dir = snapshot_download(
            repo_id=GAIA_REPO_ID,
            repo_type="dataset",
            cache_dir=cache_dir,
            token=token or os.environ.get("HUGGINGFACE_TOKEN"),
        )
    except Exception as e:
        print(f"ERROR: failed to download dataset: {e}")
        if "401" in str(e):
            print("  Set HUGGINGFACE_TOKEN in your .env file "
                  "(https://huggingface.co/settings/tokens).")
        raise

    data_dir = Path(snapshot_dir) / GAIA_YEAR / split
    parquet_file = data_dir / "metadata.parquet"
    if not parquet_file.exists():
        raise FileNotFoundError(f"Parquet file not found: {parquet_file}")

    ds = load_dataset("parquet", data_files=str(parquet_file), split="train")
    tasks = [_row_to_task(row, data_dir) for row in ds]

    with_files = sum(1 for t in tasks if t.files)
    print(f"Loaded {len(tasks)} tasks ({with_files} with files)")
    return tasks


def _row_to_task(row: dict[str, Any], data_dir: Path) -> Task:
    try:
        level = int(row.get("Level") or row.get("level") or 1)
    except (TypeError, ValueError):
        level = 1
    if level not in (1, 2, 3):
        level = 1

    expected = row.get("Final answer", row.get("final_answer"))
    files: tuple[TaskFile, ...] = ()
    file_name = str(row.get("file_name") or "")
    if file_name:
        file_path = data_dir / file_name
        if file_path.exists():
            files = (_load_attachment(file_name, file_path),)

    return Task(
        task_id=str(row.get("task_id") or ""),
        level=level,
        question=str(row.get("Question") or row.get("question") or ""),
        expected_answer=None if expected is None else str(expected),
        files=files,
        metadata=_parse_metadata(row.get("Annotator Metadata")),
    )


def _parse_metadata(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _load_attachment(file_name: str, file_path: Path) -> TaskFile:
    content_type = detect_content_type(file_name)
    encoded = base64.b64encode(file_path.read_bytes()).decode("ascii")
    return TaskFile(
        name=file_name,
        path=str(file_path),
        mime_type=content_type,
        inline_data=f"data:{content_type};base64,{encoded}",
    )


def detect_content_type(file_name: str) -> str:
    """Guess an attachment's MIME type from its extension."""
    guessed, _ = mimetypes.guess_type(file_name)
    if guessed:
        return guessed
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return CUSTOM_MIME_TYPES.get(extension, "application/octet-stream")
