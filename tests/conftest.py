# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Shared fixtures.

Every test gets its own config directory and a clean PROOFREAD_*
environment, so nothing touches ~/.proofread/ or a developer's .env.
"""

import os

import pytest

from proofread import config as cfg_mod


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_dir = tmp_path / ".proofread"
    monkeypatch.setattr(cfg_mod, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(cfg_mod, "CONFIG_FILE", config_dir / "config.toml")
    for key in list(os.environ):
        if key.startswith("PROOFREAD_"):
            monkeypatch.delenv(key)
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    cfg_mod.reset_config()
    yield config_dir / "config.toml"
    cfg_mod.reset_config()
