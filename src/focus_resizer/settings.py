"""リサイズ判定の設定値。

設定はプロセス内でのみ保持し、ファイルへは保存しない。
環境変数での上書きだけをサポートする。
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, Mapping, Optional, Tuple

ResizePolicy = Literal["threshold-preserve-aspect", "fixed-target"]
BaseNamePolicy = Literal["strip-extension", "keep-extension"]

RESIZE_POLICIES: Tuple[ResizePolicy, ...] = ("threshold-preserve-aspect", "fixed-target")
BASE_NAME_POLICIES: Tuple[BaseNamePolicy, ...] = ("strip-extension", "keep-extension")

DEFAULT_MAX_PIXEL_AREA = 300_000
DEFAULT_FIXED_TARGET_SIZE = (1000, 750)
DEFAULT_FOCUSED_PREFIX = "Focused "

_ENV_MAX_PIXEL_AREA = "FOCUS_RESIZER_MAX_PIXEL_AREA"
_ENV_RESIZE_POLICY = "FOCUS_RESIZER_RESIZE_POLICY"
_ENV_BASE_NAME_POLICY = "FOCUS_RESIZER_BASE_NAME_POLICY"
_ENV_TEMP_DIR = "FOCUS_RESIZER_TEMP_DIR"


def _default_temp_dir() -> Path:
    return Path(tempfile.gettempdir())


@dataclass(frozen=True)
class ResizeSettings:
    max_pixel_area: int = DEFAULT_MAX_PIXEL_AREA
    resize_policy: ResizePolicy = "threshold-preserve-aspect"
    fixed_target_size: Tuple[int, int] = DEFAULT_FIXED_TARGET_SIZE
    base_name_policy: BaseNamePolicy = "strip-extension"
    focused_prefix: str = DEFAULT_FOCUSED_PREFIX
    temp_dir: Path = field(default_factory=_default_temp_dir)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """設定値の妥当性を検証する。不正な値は ValueError。"""
        if self.max_pixel_area <= 0:
            raise ValueError(f"無効な最大ピクセル面積です: {self.max_pixel_area}. 1以上の整数が必要です")
        if self.resize_policy not in RESIZE_POLICIES:
            raise ValueError(
                f"無効なリサイズ方式です: {self.resize_policy}. "
                f"{', '.join(RESIZE_POLICIES)} のいずれかを指定してください"
            )
        if self.base_name_policy not in BASE_NAME_POLICIES:
            raise ValueError(
                f"無効なベース名方式です: {self.base_name_policy}. "
                f"{', '.join(BASE_NAME_POLICIES)} のいずれかを指定してください"
            )
        width, height = self.fixed_target_size
        if width <= 0 or height <= 0:
            raise ValueError(f"無効な固定サイズです: {width}x{height}. 幅・高さとも1以上が必要です")
        if not self.focused_prefix:
            raise ValueError("Focusedプレフィックスが空です")

    @property
    def strip_extension(self) -> bool:
        return self.base_name_policy == "strip-extension"

    def with_overrides(self, **changes: object) -> "ResizeSettings":
        return replace(self, **changes)


def settings_from_env(
    env: Optional[Mapping[str, str]] = None,
    base: Optional[ResizeSettings] = None,
) -> ResizeSettings:
    """環境変数で上書きした設定を返す。"""
    resolved_env = os.environ if env is None else env
    settings = base or ResizeSettings()
    changes: dict[str, object] = {}

    raw_area = resolved_env.get(_ENV_MAX_PIXEL_AREA, "").strip()
    if raw_area:
        try:
            changes["max_pixel_area"] = int(raw_area.replace("_", ""))
        except ValueError:
            raise ValueError(f"{_ENV_MAX_PIXEL_AREA} は整数で指定してください: {raw_area}") from None

    raw_policy = resolved_env.get(_ENV_RESIZE_POLICY, "").strip().lower()
    if raw_policy:
        changes["resize_policy"] = raw_policy

    raw_name_policy = resolved_env.get(_ENV_BASE_NAME_POLICY, "").strip().lower()
    if raw_name_policy:
        changes["base_name_policy"] = raw_name_policy

    raw_temp_dir = resolved_env.get(_ENV_TEMP_DIR, "").strip()
    if raw_temp_dir:
        changes["temp_dir"] = Path(raw_temp_dir).expanduser()

    if not changes:
        return settings
    return settings.with_overrides(**changes)
