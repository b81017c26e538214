"""
Pytest 配置文件

为所有测试配置共享的 fixtures 和设置
"""

import sys
from pathlib import Path

import pytest

# 添加 src 目录到 Python 路径（不要求已安装）
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def config_manager(tmp_path, monkeypatch):
    """替换全局配置为临时目录下的配置文件"""
    from foundry_tools.utils import config as config_mod

    manager = config_mod.ConfigManager(tmp_path / "config.json")
    monkeypatch.setattr(config_mod, "_config_manager", manager)
    return manager


@pytest.fixture
def sample_script():
    """模拟 Foundry 模块脚本"""
    return '''import { helper } from "./module/helper.js";

// Normal strings
const msg = "You have failed the saving throw!";
const label = 'Attack Bonus';
const log = `Attacking ${target.name}`;

// Localization keys and lookups
const key1 = game.i18n.localize("PF1 Error Key");
const key2 = game.i18n.format("PF1 Message Key", { name: "Test Name" });
const banner = game.settings.get("my-module", "Show Banner");
Hooks.on("Ready Hook", () => {});
libWrapper.register("pf1-improved", "Actor Sheet", fn, "WRAPPER");

// Technical strings
const path = "systems/pf1/templates/chat/attack.html";
const id = "my_module_setting";

if (status === "Not Ready") {
    ui.notifications.warn("No target selected!");
}

const opts = { "Some Key": "Some Value" };
'''
