#!/usr/bin/env python3
"""
Stream Segmenter - Configuration Loader
設定の読み込み（TOML）
"""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from stream_segmenter.domain import Settings

CONFIG_FILENAME = "config.toml"
LOCAL_CONFIG_FILENAME = "config.local.toml"


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """テーブル単位で再帰的にマージした新しい辞書を返す（override優先）"""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def load_settings(config_dir: Path | None = None) -> Settings:
    """
    TOMLファイルから設定を読み込む

    読み込み順序（後勝ち）:
    1. デフォルト値（domain/settings.py内）
    2. {config_dir}/config.toml（存在する場合）
    3. {config_dir}/config.local.toml（存在する場合）

    Args:
        config_dir: 設定ファイルのディレクトリ（省略時はカレントディレクトリ）

    Returns:
        Settingsインスタンス

    Raises:
        pydantic.ValidationError: 設定値が不正な場合
    """
    base_dir = config_dir or Path.cwd()
    config_path = base_dir / CONFIG_FILENAME
    local_config_path = base_dir / LOCAL_CONFIG_FILENAME

    config_data: dict[str, Any] = {}
    if config_path.exists():
        config_data = _read_toml(config_path)

    # config.local.tomlを読み込んでマージ（存在する場合）
    if local_config_path.exists():
        config_data = _deep_merge(config_data, _read_toml(local_config_path))

    return Settings(**config_data) if config_data else Settings()
