"""
Тесты реестра парсеров и общих helper-функций парсинга.
"""

import pytest

from topology_collector.core.device import VendorType
from topology_collector.parsers import (
    CiscoParser,
    DatacomParser,
    HuaweiParser,
    JuniperParser,
    MikrotikParser,
    ParserRegistry,
    iter_data_lines,
)
from topology_collector.parsers.base import is_ipv4, is_mac, split_columns, to_int


class TestParserRegistry:
    """Тесты выбора парсера по вендору."""

    @pytest.fixture
    def registry(self):
        return ParserRegistry.default()

    @pytest.mark.parametrize("vendor, parser_class", [
        ("huawei", HuaweiParser),
        ("cisco", CiscoParser),
        ("juniper", JuniperParser),
        ("mikrotik", MikrotikParser),
        ("datacom", DatacomParser),
        (VendorType.CISCO, CiscoParser),
        ("CISCO", CiscoParser),
    ])
    def test_get_known_vendor(self, registry, vendor, parser_class):
        assert isinstance(registry.get(vendor), parser_class)

    @pytest.mark.parametrize("vendor", ["other", "unknown-vendor", None, ""])
    def test_unknown_vendor_falls_back_to_huawei(self, registry, vendor):
        """Неизвестный вендор → парсер Huawei."""
        assert isinstance(registry.get(vendor), HuaweiParser)

    def test_contains(self, registry):
        assert "cisco" in registry
        assert "other" not in registry
        assert len(registry.vendors) == 5

    def test_register_replaces_parser(self, registry):
        """Повторная регистрация вендора заменяет парсер."""
        custom = HuaweiParser()
        registry.register(custom)

        assert registry.get("huawei") is custom

    def test_empty_registry_raises(self):
        """Без парсера по умолчанию → LookupError."""
        registry = ParserRegistry([CiscoParser()])

        with pytest.raises(LookupError):
            registry.get("huawei")

    def test_registries_are_independent(self):
        """Глобального состояния нет: реестры не видят друг друга."""
        first = ParserRegistry()
        second = ParserRegistry.default()

        assert first.vendors == []
        assert "cisco" in second


class TestIterDataLines:
    """Тесты машины состояний табличного вывода."""

    def test_multiple_tables(self):
        """Пустая строка после данных возвращает к поиску заголовка."""
        output = """
Port  Status
gi1   up
gi2   down

Summary: 2 ports
ignored line

Port  Status
gi3   up
"""
        assert list(iter_data_lines(output, header="Port")) == ["gi1   up", "gi2   down", "gi3   up"]

    def test_without_header_all_lines_are_data(self):
        output = "line one\n\n----\nline two\n"

        assert list(iter_data_lines(output, header="Missing")) == ["line one", "line two"]

    def test_skip_prefixes(self):
        output = "Flags: X - disabled\n# NAME\n0 ether1\n"

        assert list(iter_data_lines(output, skip_prefixes=("Flags", "#"))) == ["0 ether1"]


class TestHelpers:
    """Тесты helper-функций."""

    @pytest.mark.parametrize("value, expected", [
        ("10.0.0.1", True),
        ("255.255.255.255", True),
        ("256.0.0.1", False),
        ("10.0.0", False),
        ("", False),
        (None, False),
    ])
    def test_is_ipv4(self, value, expected):
        assert is_ipv4(value) is expected

    @pytest.mark.parametrize("value, expected", [
        ("4C:5E:0C:11:22:33", True),
        ("4c-5e-0c-11-22-33", True),
        ("001a.3008.6c00", True),
        ("SW-ACCESS-01", False),
    ])
    def test_is_mac(self, value, expected):
        assert is_mac(value) is expected

    @pytest.mark.parametrize("value, maximum, expected", [
        ("120", None, 120),
        (" 7 ", None, 7),
        ("abc", None, None),
        ("-1", None, None),
        ("300", 255, None),
        (None, None, None),
    ])
    def test_to_int(self, value, maximum, expected):
        assert to_int(value, maximum) == expected

    def test_split_columns(self):
        assert split_columns("gi1/1    B, R    SW 01") == ["gi1/1", "B, R", "SW 01"]
