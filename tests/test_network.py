import socket
from collections import namedtuple

import psutil

from utils import network

snic = namedtuple('snic', ['family', 'address', 'netmask', 'broadcast', 'ptp'])


def _ipv4(address):
    return snic(socket.AF_INET, address, '255.255.255.0', None, None)


def _ipv6(address):
    return snic(socket.AF_INET6, address, None, None, None)


def test_prefers_physical_interface(monkeypatch):
    monkeypatch.setattr(psutil, 'net_if_addrs', lambda: {
        'lo': [_ipv4('127.0.0.1')],
        'docker0': [_ipv4('172.17.0.1')],
        'eth0': [_ipv6('fe80::1'), _ipv4('192.168.1.50')],
    })
    assert network.get_host_address() == '192.168.1.50'


def test_virtual_interface_when_nothing_else(monkeypatch):
    monkeypatch.setattr(psutil, 'net_if_addrs', lambda: {
        'lo': [_ipv4('127.0.0.1')],
        'docker0': [_ipv4('172.17.0.1')],
    })
    assert network.get_host_address() == '172.17.0.1'


def test_skips_link_local(monkeypatch):
    monkeypatch.setattr(psutil, 'net_if_addrs', lambda: {
        'eth0': [_ipv4('169.254.10.10')],
        'wlan0': [_ipv4('10.0.0.7')],
    })
    assert network.get_host_address() == '10.0.0.7'


def test_falls_back_to_route_then_loopback(monkeypatch):
    monkeypatch.setattr(psutil, 'net_if_addrs', lambda: {'lo': [_ipv4('127.0.0.1')]})
    monkeypatch.setattr(network, '_from_route', lambda: '10.1.2.3')
    assert network.get_host_address() == '10.1.2.3'

    monkeypatch.setattr(network, '_from_route', lambda: None)
    assert network.get_host_address() == '127.0.0.1'


def test_dashboard_urls(config):
    assert network.dashboard_urls(config, host_address='10.0.0.2') == [
        'http://10.0.0.2:8080',
        'http://traefik.localhost:8080',
    ]
