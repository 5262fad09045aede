"""
Тесты CLI: разбор аргументов и команды end-to-end на временной БД.
"""

import json
import logging
from unittest.mock import patch

import pytest
import yaml

from topology_collector.cli import COMMANDS, main, setup_parser
from topology_collector.core.context import set_current_context

DEVICES = [
    {"name": "SW-CORE-01", "ip_address": "10.0.0.1", "vendor": "huawei", "username": "admin", "password": "secret"},
    {"name": "SW-DIST-01", "host": "10.0.0.2", "platform": "cisco"},
    {"name": "broken"},
]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Пустая рабочая директория, без TOPOLOGY_*/NET_* и с восстановлением логирования."""
    monkeypatch.chdir(tmp_path)
    for name in ("TOPOLOGY_CONFIG", "TOPOLOGY_DB_PATH", "TOPOLOGY_LOG_LEVEL",
                 "NET_USERNAME", "NET_PASSWORD", "NET_SECRET"):
        monkeypatch.delenv(name, raising=False)

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    set_current_context(None)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "topology.db")


@pytest.fixture
def devices_file(tmp_path):
    path = tmp_path / "devices.yaml"
    path.write_text(yaml.safe_dump({"devices": DEVICES}), encoding="utf-8")
    return str(path)


def _run(capsys, *argv):
    code = main(list(argv))
    return code, capsys.readouterr().out


class TestParser:

    def test_commands_registered(self):
        assert set(COMMANDS) == {
            "devices", "collect", "collect-all", "test", "auto-links", "topology",
            "links", "history", "snapshot",
        }

    def test_collect_arguments(self):
        args = setup_parser().parse_args(["--db", "x.db", "collect", "SW-01", "-o", "lldp,system"])

        assert (args.command, args.device, args.operations, args.db) == ("collect", "SW-01", "lldp,system", "x.db")

    def test_no_command_prints_help(self, capsys):
        code, out = _run(capsys)

        assert code == 0
        assert "usage" in out


class TestDevicesCommands:

    def test_import_and_list(self, capsys, db_path, devices_file):
        code, out = _run(capsys, "--db", db_path, "devices", "import", devices_file)

        assert code == 0
        assert "Добавлено: 2, обновлено: 0" in out

        code, out = _run(capsys, "--db", db_path, "devices", "list", "--json")
        devices = json.loads(out)
        assert code == 0
        assert [d["name"] for d in devices] == ["SW-CORE-01", "SW-DIST-01"]
        assert devices[1]["vendor"] == "cisco"
        assert "password" not in devices[0]

    def test_reimport_updates(self, capsys, db_path, devices_file):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        code, out = _run(capsys, "--db", db_path, "devices", "import", devices_file)

        assert "Добавлено: 0, обновлено: 2" in out

    def test_list_table(self, capsys, db_path, devices_file):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        code, out = _run(capsys, "--db", db_path, "devices", "list")

        assert "SW-CORE-01" in out
        assert "10.0.0.2" in out

    def test_empty_registry(self, capsys, db_path):
        code, out = _run(capsys, "--db", db_path, "devices", "list")

        assert "Реестр устройств пуст" in out

    def test_import_without_file(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "devices", "import")

        assert code == 1


class TestCollectCommands:

    def test_unknown_device(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "collect", "missing-switch")

        assert code == 1

    def test_bad_operation(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "collect", "SW-CORE-01", "-o", "lldp,bgp")

        assert code == 2

    def test_collect_with_mocked_ssh(self, capsys, db_path, devices_file, mock_connection_manager, load_fixture):
        mock_connection_manager.outputs["display version"] = load_fixture("huawei", "display_version.txt")
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        with patch("topology_collector.cli.utils.ConnectionManager", return_value=mock_connection_manager):
            code, out = _run(capsys, "--db", db_path, "collect", "SW-CORE-01", "-o", "system")

        result = json.loads(out)
        assert code == 0
        assert result["success"] is True
        assert result["data"]["system"]["model"] == "S5720-28X-SI-AC"

    def test_collect_all_skips_without_credentials(self, capsys, db_path, devices_file, mock_connection_manager):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        with patch("topology_collector.cli.utils.ConnectionManager", return_value=mock_connection_manager):
            code, out = _run(capsys, "--db", db_path, "collect-all", "-o", "system")

        assert code == 1
        assert "[OK] SW-CORE-01" in out
        assert "[FAIL] SW-DIST-01: SSH credentials not configured" in out
        assert "Итого: 1 успешно, 1 с ошибками" in out

    def test_invalid_config(self, capsys, tmp_path):
        (tmp_path / "config.yaml").write_text(
            yaml.safe_dump({"collection": {"max_workers": 0}}), encoding="utf-8",
        )

        code, _ = _run(capsys, "devices", "list")

        assert code == 2


class TestTopologyCommands:

    def test_topology_json(self, capsys, db_path, devices_file):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        code, out = _run(capsys, "--db", db_path, "topology", "--layout")

        graph = json.loads(out)
        assert code == 0
        assert graph["metadata"]["device_count"] == 2
        assert all("x" in node and "y" in node for node in graph["nodes"])

    def test_auto_links_empty(self, capsys, db_path):
        code, out = _run(capsys, "--db", db_path, "auto-links")

        assert code == 0
        assert json.loads(out) == {"created": 0, "already_exists": 0}


class TestLinksCommands:
    """Ручные связи: add / list / delete."""

    @pytest.fixture(autouse=True)
    def registry(self, capsys, db_path, devices_file):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

    def test_add_list_delete(self, capsys, db_path):
        code, out = _run(
            capsys, "--db", db_path, "links", "add", "SW-CORE-01", "10.0.0.2",
            "--source-interface", "GE0/0/1", "--bandwidth", "1000",
        )
        link = json.loads(out)
        assert code == 0
        assert link["link_type"] == "manual"
        assert (link["source_interface"], link["bandwidth_mbps"]) == ("GE0/0/1", 1000)

        code, out = _run(capsys, "--db", db_path, "links", "list", "--json")
        assert [item["id"] for item in json.loads(out)] == [link["id"]]

        code, out = _run(capsys, "--db", db_path, "links", "delete", link["id"])
        assert code == 0
        assert link["id"] in out

        code, out = _run(capsys, "--db", db_path, "links", "list")
        assert "Связей нет" in out

    def test_reverse_duplicate_rejected(self, capsys, db_path):
        """Связь B→A при существующей A→B не создаётся."""
        _run(capsys, "--db", db_path, "links", "add", "SW-CORE-01", "SW-DIST-01")

        code, _ = _run(capsys, "--db", db_path, "links", "add", "SW-DIST-01", "SW-CORE-01")
        _, out = _run(capsys, "--db", db_path, "links", "list", "--json")

        assert code == 1
        assert len(json.loads(out)) == 1

    def test_self_link_rejected(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "links", "add", "SW-CORE-01", "10.0.0.1")

        assert code == 2

    def test_delete_unknown(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "links", "delete", "no-such-link")

        assert code == 1


class TestHistoryCommand:

    def test_history_after_collect(self, capsys, db_path, devices_file, mock_connection_manager):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)
        with patch("topology_collector.cli.utils.ConnectionManager", return_value=mock_connection_manager):
            _run(capsys, "--db", db_path, "collect", "SW-CORE-01", "-o", "system")

        code, out = _run(capsys, "--db", db_path, "history", "SW-CORE-01", "--json")

        attempts = json.loads(out)
        assert code == 0
        assert len(attempts) == 1
        assert attempts[0]["status"] == "completed"
        assert attempts[0]["operations"] == ["system"]
        assert attempts[0]["device_name"] == "SW-CORE-01"

        code, out = _run(capsys, "--db", db_path, "history", "--limit", "5")
        assert "SW-CORE-01" in out
        assert "completed" in out

    def test_empty_history(self, capsys, db_path):
        code, out = _run(capsys, "--db", db_path, "history")

        assert code == 0
        assert "История сборов пуста" in out

    def test_unknown_device(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "history", "missing-switch")

        assert code == 1


class TestSnapshotCommands:

    def test_save_list_show_delete(self, capsys, db_path, devices_file):
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        code, out = _run(capsys, "--db", db_path, "snapshot", "save", "baseline", "-d", "до миграции")
        saved = json.loads(out)
        assert code == 0
        assert (saved["name"], saved["device_count"]) == ("baseline", 2)

        code, out = _run(capsys, "--db", db_path, "snapshot", "list", "--json")
        assert [s["id"] for s in json.loads(out)] == [saved["id"]]

        code, out = _run(capsys, "--db", db_path, "snapshot", "show", saved["id"])
        snapshot = json.loads(out)
        assert snapshot["description"] == "до миграции"
        assert len(snapshot["topology_data"]["nodes"]) == 2

        code, _ = _run(capsys, "--db", db_path, "snapshot", "delete", saved["id"])
        assert code == 0

        code, _ = _run(capsys, "--db", db_path, "snapshot", "show", saved["id"])
        assert code == 1

    def test_snapshot_keeps_graph_at_save_time(self, capsys, db_path, devices_file):
        """Снимок не меняется при изменении реестра."""
        code, out = _run(capsys, "--db", db_path, "snapshot", "save", "empty")
        snapshot_id = json.loads(out)["id"]
        _run(capsys, "--db", db_path, "devices", "import", devices_file)

        _, out = _run(capsys, "--db", db_path, "snapshot", "show", snapshot_id)

        assert json.loads(out)["topology_data"]["nodes"] == []

    def test_blank_name(self, capsys, db_path):
        code, _ = _run(capsys, "--db", db_path, "snapshot", "save", "  ")

        assert code == 2
