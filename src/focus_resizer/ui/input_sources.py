"""Input source helpers (drag-and-drop and file selection) for FocusResizeApp."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from loguru import logger

SELECTABLE_INPUT_EXTENSIONS = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
)


def setup_drag_and_drop(
    app: Any,
    targets: Sequence[Any],
    *,
    tkdnd_available: bool,
    dnd_files: Optional[str],
    on_drop: Callable[[Any], Any],
) -> bool:
    """Register drop targets. Returns True when at least one widget accepts drops."""
    if not tkdnd_available or dnd_files is None:
        logger.info("Drag and drop disabled: tkinterdnd2 unavailable")
        return False

    if not hasattr(app, "drop_target_register"):
        logger.info("Drag and drop disabled: root widget does not support drop_target_register")
        return False

    registered = 0
    for widget in targets:
        try:
            widget.drop_target_register(dnd_files)
            widget.dnd_bind("<<Drop>>", on_drop)
            registered += 1
        except Exception:
            logger.exception(f"Failed to register drop target: {widget}")

    if registered:
        logger.info(f"Drag and drop enabled on {registered} widgets")
    return registered > 0


def dedupe_paths(paths: List[Path]) -> List[Path]:
    seen: set[str] = set()
    deduped: List[Path] = []
    for path in paths:
        marker = str(path).lower()
        if marker in seen:
            continue
        seen.add(marker)
        deduped.append(path)
    return deduped


def is_selectable_input_file(
    path: Path,
    *,
    selectable_input_extensions: Sequence[str] = SELECTABLE_INPUT_EXTENSIONS,
) -> bool:
    return path.suffix.lower() in selectable_input_extensions


def normalize_dropped_path_text(value: str) -> str:
    text = value.strip()
    if not text:
        return ""
    if text.startswith("file://"):
        parsed = urlparse(text)
        if parsed.scheme == "file":
            normalized = unquote(parsed.path or "")
            if parsed.netloc and parsed.netloc.lower() != "localhost":
                normalized = f"//{parsed.netloc}{normalized}"
            if os.name == "nt" and len(normalized) >= 3 and normalized[0] == "/" and normalized[2] == ":":
                normalized = normalized[1:]
            if normalized:
                text = normalized
    return text


def parse_drop_data(
    raw_data: Any,
    splitlist: Optional[Callable[[str], Sequence[str]]] = None,
) -> List[Path]:
    """Parse the Tcl list sent by tkinterdnd2 into paths.

    `splitlist` is the widget's `tk.splitlist`; without it each line is one path.
    """
    data = str(raw_data or "").strip()
    if not data:
        return []
    try:
        raw_items = list(splitlist(data)) if splitlist is not None else [data]
    except Exception:
        raw_items = [data]

    expanded_items: List[str] = []
    for item in raw_items:
        text = str(item)
        if "\n" in text:
            expanded_items.extend(line for line in text.splitlines() if line.strip())
        else:
            expanded_items.append(text)

    paths: List[Path] = []
    for item in expanded_items:
        text = str(item).strip()
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        text = text.strip().strip('"')
        text = normalize_dropped_path_text(text)
        if text:
            paths.append(Path(text))
    return dedupe_paths(paths)


def filter_dropped_files(
    paths: Sequence[Path],
    *,
    selectable_input_extensions: Sequence[str] = SELECTABLE_INPUT_EXTENSIONS,
) -> tuple[List[Path], int]:
    """Keep existing image files. Returns (files, ignored_count)."""
    files: List[Path] = []
    ignored_count = 0
    for path in paths:
        try:
            if path.is_file() and is_selectable_input_file(
                path, selectable_input_extensions=selectable_input_extensions
            ):
                files.append(path)
            else:
                ignored_count += 1
        except OSError:
            ignored_count += 1
    return dedupe_paths(files), ignored_count
