"""
Тесты CollectionService: сбор → история → хранилище.
"""

from unittest.mock import MagicMock

import pytest

from topology_collector.collectors import TopologyCollector
from topology_collector.core.credentials import CredentialsManager
from topology_collector.core.device import DeviceStatus
from topology_collector.core.exceptions import (
    AuthenticationError,
    ConnectionError as CollectorConnectionError,
    DeviceNotFoundError,
    PersistenceError,
)
from topology_collector.core.models import CollectionStatus
from topology_collector.parsers import ParserRegistry
from topology_collector.services import CollectionService
from topology_collector.storage import CollectionRepository, InterfaceRepository, LinkRepository


@pytest.fixture
def huawei_outputs(mock_connection_manager, load_fixture):
    mock_connection_manager.outputs.update({
        "display lldp neighbor brief": load_fixture("huawei", "display_lldp_neighbor_brief.txt"),
        "display interface brief": load_fixture("huawei", "display_interface_brief.txt"),
        "display version": load_fixture("huawei", "display_version.txt"),
        "display clock": "2026-10-18 10:00:00+03:00",
    })
    return mock_connection_manager


@pytest.fixture
def service(db, huawei_outputs):
    collector = TopologyCollector(
        ParserRegistry.default(),
        connection_manager=huawei_outputs,
        credentials=CredentialsManager(use_env=False),
        command_delay=0,
    )
    return CollectionService(db, collector)


@pytest.fixture
def core(make_device):
    return make_device("core", "10.0.0.1")


@pytest.fixture
def dist(make_device):
    return make_device("SW-DIST-01", "10.0.0.2")


class TestCollect:

    def test_success_persists_everything(self, db, service, device_repo, core, dist):
        result = service.collect(core.id)

        assert result.success
        attempts = CollectionRepository(db).list_for_device(core.id)
        assert len(attempts) == 1
        assert attempts[0].status is CollectionStatus.COMPLETED
        assert attempts[0].operations == ["lldp", "ospf", "interfaces", "system"]
        assert len(attempts[0].parsed_data["lldp"]) == 3

        assert len(InterfaceRepository(db).list_for_device(core.id)) == 4

        stored = device_repo.get(core.id)
        assert stored.status is DeviceStatus.ONLINE
        assert stored.hostname == "SW-CORE-01"
        assert stored.model == "S5720-28X-SI-AC"
        assert stored.last_seen

        link = LinkRepository(db).find_between(core.id, dist.id)
        assert link is not None
        assert LinkRepository(db).count() == 1

    def test_hostname_from_prompt_when_system_not_requested(self, service, device_repo, core):
        service.collect(core.id, ["lldp"])

        assert device_repo.get(core.id).hostname == "SW-CORE-01"

    def test_existing_hostname_kept(self, service, device_repo, make_device):
        device = make_device("core", "10.0.0.1", hostname="CORE-MAIN")

        service.collect(device.id, ["system"])

        assert device_repo.get(device.id).hostname == "CORE-MAIN"

    def test_session_lost_marks_failed(self, db, service, huawei_outputs, core):
        huawei_outputs.outputs["display ospf peer brief"] = CollectorConnectionError("reset", device="10.0.0.1")

        result = service.collect(core.id, ["lldp", "ospf"])

        assert not result.success
        attempt = CollectionRepository(db).list_for_device(core.id)[0]
        assert attempt.status is CollectionStatus.FAILED
        assert attempt.raw_output["lldp"]

    def test_connection_failure(self, db, service, huawei_outputs, device_repo, core):
        huawei_outputs.open.side_effect = CollectorConnectionError("Connection refused", device="10.0.0.1")

        result = service.collect(core.id)

        assert not result.success
        attempt = CollectionRepository(db).list_for_device(core.id)[0]
        assert attempt.status is CollectionStatus.FAILED
        assert "Connection refused" in attempt.error_message
        assert device_repo.get(core.id).status is DeviceStatus.ERROR

    def test_no_credentials_no_history(self, db, service, device_repo, make_device):
        device = make_device("noauth", "10.0.0.9", username=None, password=None)

        result = service.collect(device.id)

        assert result.skipped
        assert result.message == "SSH credentials not configured"
        assert CollectionRepository(db).list_for_device(device.id) == []
        assert device_repo.get(device.id).status is DeviceStatus.UNKNOWN

    def test_unknown_device(self, service):
        with pytest.raises(DeviceNotFoundError):
            service.collect("missing")

    def test_persistence_error_raised(self, db, service, core):
        service.inference.process_neighbors = MagicMock(side_effect=PersistenceError("database is locked"))

        with pytest.raises(PersistenceError):
            service.collect(core.id, ["lldp"])

        attempt = CollectionRepository(db).list_for_device(core.id)[0]
        assert attempt.status is CollectionStatus.FAILED
        assert attempt.error_message.startswith("Ошибка сохранения")


class TestCollectAll:

    def test_all_devices(self, db, service, make_device):
        first = make_device("SW-A", "10.0.0.1")
        second = make_device("SW-B", "10.0.0.2")
        noauth = make_device("SW-C", "10.0.0.3", username=None, password=None)

        results = service.collect_all(["system"])

        assert [r.device_id for r in results] == [first.id, second.id, noauth.id]
        assert [r.success for r in results] == [True, True, False]
        assert results[2].skipped
        history = CollectionRepository(db)
        assert len(history.list_for_device(first.id)) == 1
        assert len(history.list_for_device(second.id)) == 1
        assert history.list_for_device(noauth.id) == []

    def test_parallel(self, db, service, make_device):
        devices = [make_device(f"SW-{i}", f"10.0.1.{i}") for i in range(4)]

        results = service.collect_all(["system"], parallel=True)

        assert [r.device_id for r in results] == [d.id for d in devices]
        assert all(r.success for r in results)
        for device in devices:
            assert CollectionRepository(db).list_for_device(device.id)[0].status is CollectionStatus.COMPLETED

    def test_persistence_error_isolated(self, db, service, make_device):
        first = make_device("SW-A", "10.0.0.1")
        second = make_device("SW-B", "10.0.0.2")
        original = service.inference.process_neighbors

        def flaky(device, records, protocol):
            if device.id == first.id:
                raise PersistenceError("database is locked")
            return original(device, records, protocol)

        service.inference.process_neighbors = flaky

        results = service.collect_all(["lldp"])

        assert "database is locked" in results[0].errors["persistence"]
        assert "persistence" not in results[1].errors
        history = CollectionRepository(db)
        assert history.list_for_device(first.id)[0].status is CollectionStatus.FAILED
        assert history.list_for_device(second.id)[0].status is CollectionStatus.COMPLETED


class TestConnectionCheck:

    def test_success_sets_online(self, service, device_repo, core):
        result = service.test_connection(core.id)

        assert result.success
        assert result.output == "2026-10-18 10:00:00+03:00"
        stored = device_repo.get(core.id)
        assert stored.status is DeviceStatus.ONLINE
        assert stored.last_seen

    def test_failure_sets_error(self, service, huawei_outputs, device_repo, core):
        huawei_outputs.connect.side_effect = AuthenticationError("Неверный пароль", device="10.0.0.1")

        result = service.test_connection(core.id)

        assert not result.success
        assert device_repo.get(core.id).status is DeviceStatus.ERROR

    def test_no_credentials_status_unchanged(self, service, device_repo, make_device):
        device = make_device("noauth", "10.0.0.9", username=None, password=None)

        result = service.test_connection(device.id)

        assert not result.success
        assert device_repo.get(device.id).status is DeviceStatus.UNKNOWN
