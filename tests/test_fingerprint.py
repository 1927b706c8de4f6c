"""Tests for device fingerprint collection."""

import socket
from types import SimpleNamespace

import psutil
import pytest

from pexbot_mcp import Fingerprint, collect_fingerprint
from pexbot_mcp import fingerprint as fingerprint_module
from pexbot_mcp.types import NULL_MAC


def link(address):
    return SimpleNamespace(family=psutil.AF_LINK, address=address)


def inet(address):
    return SimpleNamespace(family=socket.AF_INET, address=address)


def stats(flags="up,broadcast,running,multicast"):
    return SimpleNamespace(flags=flags)


@pytest.fixture
def interfaces(monkeypatch):
    """Replace the host's interfaces with (addrs, stats) dicts."""

    def install(addrs, nic_stats=None):
        monkeypatch.setattr(psutil, "net_if_addrs", lambda: addrs)
        monkeypatch.setattr(psutil, "net_if_stats", lambda: nic_stats or {})

    return install


def test_no_interfaces(interfaces):
    """Test the sentinel MAC when there are no interfaces."""
    interfaces({})
    assert fingerprint_module.get_mac_address() == NULL_MAC


def test_only_loopback(interfaces):
    """Test the sentinel MAC when only loopback exists."""
    interfaces(
        {"lo": [link("00:00:00:00:00:00"), inet("127.0.0.1")]},
        {"lo": stats("up,loopback,running")},
    )
    assert fingerprint_module.get_mac_address() == NULL_MAC


def test_loopback_with_address_is_skipped(interfaces):
    """Test that loopback is skipped even with a nonzero MAC."""
    interfaces(
        {"lo0": [link("02:00:00:00:00:01")], "en0": [link("a4:83:e7:11:22:33")]},
        {"lo0": stats("up,loopback,running"), "en0": stats()},
    )
    assert fingerprint_module.get_mac_address() == "a4:83:e7:11:22:33"


def test_one_qualifying_interface(interfaces):
    """Test picking the one non-loopback interface."""
    interfaces(
        {"lo": [link("00:00:00:00:00:00")], "eth0": [inet("10.0.0.2"), link("52:54:00:ab:cd:ef")]},
        {"lo": stats("up,loopback,running"), "eth0": stats()},
    )
    assert fingerprint_module.get_mac_address() == "52:54:00:ab:cd:ef"


def test_first_of_many_in_reported_order(interfaces):
    """Test that the first qualifying interface wins."""
    interfaces(
        {
            "wlan0": [link("aa:aa:aa:aa:aa:aa")],
            "eth0": [link("bb:bb:bb:bb:bb:bb")],
        },
        {"wlan0": stats(), "eth0": stats()},
    )
    assert fingerprint_module.get_mac_address() == "aa:aa:aa:aa:aa:aa"


def test_zero_mac_interface_is_skipped(interfaces):
    """Test that all-zero MACs are skipped."""
    interfaces(
        {"tun0": [link("00:00:00:00:00:00")], "eth0": [link("bb:bb:bb:bb:bb:bb")]},
    )
    assert fingerprint_module.get_mac_address() == "bb:bb:bb:bb:bb:bb"


def test_windows_mac_is_normalized(interfaces):
    """Test MAC normalization to lowercase colon form."""
    interfaces({"Ethernet": [link("A4-83-E7-11-22-33")]})
    assert fingerprint_module.get_mac_address() == "a4:83:e7:11:22:33"


def test_enumeration_error_falls_back_to_sentinel(monkeypatch):
    """Test the sentinel MAC when enumeration fails."""
    def boom():
        raise OSError("permission denied")

    monkeypatch.setattr(psutil, "net_if_addrs", boom)
    assert fingerprint_module.get_mac_address() == NULL_MAC


def test_collect_fingerprint_is_well_formed(interfaces, monkeypatch):
    """Test a full fingerprint."""
    interfaces({"eth0": [link("52:54:00:ab:cd:ef")]})
    monkeypatch.setattr(fingerprint_module, "get_cpu_model", lambda: "Test CPU @ 3.0GHz")
    monkeypatch.setattr(psutil, "cpu_count", lambda logical=True: 8)

    fp = collect_fingerprint()

    assert isinstance(fp, Fingerprint)
    assert fp.mac_address == "52:54:00:ab:cd:ef"
    assert fp.hostname
    assert fp.os
    assert fp.model_name == "Test CPU @ 3.0GHz"
    assert fp.cpu_info == "Test CPU @ 3.0GHz (8 cores)"


def test_collect_fingerprint_without_cpu_model(interfaces, monkeypatch):
    """Test a fingerprint on a host with no readable CPU model."""
    interfaces({})
    monkeypatch.setattr(fingerprint_module, "get_cpu_model", lambda: None)

    fp = collect_fingerprint()

    assert fp.mac_address == NULL_MAC
    assert fp.model_name is None
    assert fp.cpu_info is None
    assert set(fp.to_dict()) == {"mac_address", "hostname", "os"}


def test_fingerprint_is_not_cached(interfaces):
    """Test that each call reads the host again."""
    interfaces({"eth0": [link("aa:aa:aa:aa:aa:aa")]})
    first = collect_fingerprint()
    interfaces({"eth0": [link("bb:bb:bb:bb:bb:bb")]})
    second = collect_fingerprint()

    assert first.mac_address != second.mac_address
