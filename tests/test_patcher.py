"""
脚本回填测试
"""

import pytest

from foundry_tools.core.extractor import scan
from foundry_tools.core.patcher import (
    SafePatcher,
    apply_edits,
    escape_for_quote,
    patch,
    patch_source,
)
from foundry_tools.utils.logger import ScriptParseError

SOURCE = 'const msg = "Hello";\nui.notifications.info("Start");\n'


class TestPatch:
    """单个源码文本的回填"""

    def test_scan_then_patch_first_unit(self):
        units = scan(SOURCE)
        assert [u.original for u in units] == ["Hello", "Start"]

        out = patch(SOURCE, {units[0].id: "你好"})
        assert out == 'const msg = "你好";\nui.notifications.info("Start");\n'

    def test_empty_map_is_identity(self):
        assert patch(SOURCE, {}) == SOURCE

    def test_identity_translation(self):
        translations = {u.id: u.original for u in scan(SOURCE)}
        assert patch(SOURCE, translations) == SOURCE

    def test_bytes_outside_ranges_untouched(self):
        source = (
            "// header comment\r\n"
            "const a   =   'Alpha Beta';   /* keep */\r\n"
            "\tconst b = \"Gamma Delta\";\r\n"
        )
        units = scan(source)
        out = patch(source, {units[1].id: "Translated"})
        assert out == (
            "// header comment\r\n"
            "const a   =   'Alpha Beta';   /* keep */\r\n"
            "\tconst b = \"Translated\";\r\n"
        )

    def test_original_quote_style_kept(self):
        source = "const label = 'Attack Bonus';\n"
        unit = scan(source)[0]
        assert patch(source, {unit.id: "攻击加值"}) == "const label = '攻击加值';\n"

    def test_only_delimiting_quote_escaped(self):
        source = "const a = 'Say Hello';\nconst b = \"Say Goodbye\";\n"
        first, second = scan(source)
        out = patch(source, {
            first.id: 'it\'s "quoted"',
            second.id: 'it\'s "quoted"',
        })
        assert out == (
            "const a = 'it\\'s \"quoted\"';\n"
            "const b = \"it's \\\"quoted\\\"\";\n"
        )

    def test_patched_output_rescans_to_translation(self):
        source = "const a = 'Say Hello';\n"
        unit = scan(source)[0]
        out = patch(source, {unit.id: "l'homme sage"})
        assert [u.original for u in scan(out)] == ["l'homme sage"]

    def test_multibyte_prefix(self):
        source = 'const t = "标题 Title";\nconst b = "Second Line";\n'
        units = scan(source)
        out = patch(source, {units[1].id: "第二行"})
        assert out == 'const t = "标题 Title";\nconst b = "第二行";\n'

    def test_stale_ids_ignored(self):
        result = patch_source(SOURCE, {"999-1005": "nothing", "0-1": "x"})
        assert result.text == SOURCE
        assert result.applied == []
        assert sorted(result.stale) == ["0-1", "999-1005"]

    def test_none_translation_skipped(self):
        units = scan(SOURCE)
        result = patch_source(SOURCE, {units[0].id: None, units[1].id: "开始"})
        assert result.text == 'const msg = "Hello";\nui.notifications.info("开始");\n'
        assert result.applied == [units[1].id]
        assert result.stale == []

    def test_empty_string_is_applied(self):
        units = scan(SOURCE)
        assert patch(SOURCE, {units[0].id: ""}) == 'const msg = "";\nui.notifications.info("Start");\n'

    def test_excluded_literal_ids_are_stale(self):
        source = 'const k = game.i18n.localize("Some Key");\n'
        assert scan(source) == []
        literal = '"Some Key"'
        start = source.index(literal)
        uid = f"{start}-{start + len(literal)}"
        result = patch_source(source, {uid: "某个键"})
        assert result.text == source
        assert result.stale == [uid]

    def test_unparseable_source_raises(self):
        with pytest.raises(ScriptParseError):
            patch("const = 'oops\n", {"0-1": "x"})


class TestHelpers:
    """底层辅助函数"""

    def test_escape_for_quote(self):
        assert escape_for_quote('a"b\'c', '"') == 'a\\"b\'c'
        assert escape_for_quote('a"b\'c', "'") == 'a"b\\\'c'

    def test_apply_edits_out_of_order(self):
        data = b"0123456789"
        assert apply_edits(data, [(6, 8, "X"), (1, 3, "YY")]) == b"0YY345X89"

    def test_apply_edits_overlap(self):
        with pytest.raises(ValueError):
            apply_edits(b"0123456789", [(1, 5, "a"), (3, 7, "b")])


class TestSafePatcher:
    """带备份与回滚的批量回填"""

    @pytest.fixture(autouse=True)
    def _config(self, config_manager):
        return config_manager

    @pytest.fixture
    def module_dir(self, tmp_path):
        target = tmp_path / "module"
        (target / "scripts").mkdir(parents=True)
        (target / "scripts" / "main.js").write_text(SOURCE, encoding="utf-8")
        return target

    def test_patch_and_rollback(self, tmp_path, module_dir):
        main = module_dir / "scripts" / "main.js"
        units = scan(SOURCE)
        patcher = SafePatcher(tmp_path / "backup")

        result = patcher.patch_with_rollback(module_dir, {
            "scripts/main.js": {units[0].id: "你好", "1-2": "stale"},
        })

        assert result["success"] == ["scripts/main.js"]
        assert result["failed"] == []
        assert result["stale"] == {"scripts/main.js": ["1-2"]}
        assert main.read_text(encoding="utf-8").startswith('const msg = "你好";')
        assert (tmp_path / "backup" / "scripts" / "main.js").read_text(encoding="utf-8") == SOURCE

        result["rollback"]()
        assert main.read_text(encoding="utf-8") == SOURCE

    def test_missing_file(self, tmp_path, module_dir):
        result = SafePatcher(tmp_path / "backup").patch_with_rollback(
            module_dir, {"scripts/absent.js": {"1-2": "x"}}
        )
        assert result["success"] == []
        assert result["failed"] == [{"file": "scripts/absent.js", "error": "File not found"}]

    def test_unsafe_path_rejected(self, tmp_path, module_dir):
        outside = tmp_path / "outside.js"
        outside.write_text(SOURCE, encoding="utf-8")
        result = SafePatcher(tmp_path / "backup").patch_with_rollback(
            module_dir, {"../outside.js": {"12-19": "x"}}
        )
        assert result["failed"][0]["error"] == "Unsafe path"
        assert outside.read_text(encoding="utf-8") == SOURCE

    def test_verify_rejects_broken_output(self, tmp_path, module_dir):
        main = module_dir / "scripts" / "main.js"
        result = SafePatcher(tmp_path / "backup").patch_with_rollback(
            module_dir,
            {"scripts/main.js": {}},
            patch_fn=lambda text, trans: text + "const = ;\n",
        )
        assert result["success"] == []
        assert result["failed"][0]["file"] == "scripts/main.js"
        assert main.read_text(encoding="utf-8") == SOURCE

    def test_parse_failure_isolated(self, tmp_path, module_dir):
        (module_dir / "scripts" / "broken.js").write_text("function (\n", encoding="utf-8")
        units = scan(SOURCE)
        result = SafePatcher(tmp_path / "backup").patch_with_rollback(module_dir, {
            "scripts/broken.js": {"0-1": "x"},
            "scripts/main.js": {units[1].id: "开始"},
        })
        assert result["success"] == ["scripts/main.js"]
        assert [f["file"] for f in result["failed"]] == ["scripts/broken.js"]

    def test_verify_disabled_by_config(self, tmp_path, module_dir, config_manager):
        config_manager.set("verify_patches", False, auto_save=False)
        main = module_dir / "scripts" / "main.js"
        patcher = SafePatcher(tmp_path / "backup")
        assert patcher.verify is False

        result = patcher.patch_with_rollback(
            module_dir,
            {"scripts/main.js": {}},
            patch_fn=lambda text, trans: text + "const = ;\n",
        )
        assert result["success"] == ["scripts/main.js"]
        assert main.read_text(encoding="utf-8").endswith("const = ;\n")

    def test_keeps_file_encoding(self, tmp_path, module_dir):
        legacy = module_dir / "scripts" / "legacy.js"
        raw = 'const a = "Café crème";\nconst b = "Second Line";\n'.encode("cp1252")
        legacy.write_bytes(raw)
        second = scan(raw.decode("cp1252"))[1]

        result = SafePatcher(tmp_path / "backup").patch_with_rollback(module_dir, {
            "scripts/legacy.js": {second.id: "Other Line"},
        })
        assert result["success"] == ["scripts/legacy.js"]
        assert legacy.read_bytes() == raw.replace(b"Second Line", b"Other Line")
