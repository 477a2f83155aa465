# TRAEFIK-STACK v1.0
import ipaddress
import logging
import socket

import psutil

_log = logging.getLogger(__name__)

FALLBACK_ADDRESS = '127.0.0.1'

# Interfaces created by the container engine are never the advertised address
_VIRTUAL_PREFIXES = ('docker', 'br-', 'veth', 'virbr', 'cni', 'flannel', 'lo')


def _usable(address):
    try:
        ip = ipaddress.IPv4Address(address)
    except ipaddress.AddressValueError:
        return False
    return not (ip.is_loopback or ip.is_link_local or ip.is_unspecified)


def _from_interfaces():
    '''First usable IPv4 address of a physical-looking interface'''
    try:
        interfaces = psutil.net_if_addrs()
    except OSError as e:
        _log.debug("cannot enumerate interfaces: %s", e)
        return None

    candidates = []
    for name, addrs in interfaces.items():
        for addr in addrs:
            if addr.family == socket.AF_INET and _usable(addr.address):
                candidates.append((name.startswith(_VIRTUAL_PREFIXES), name, addr.address))

    if not candidates:
        return None
    # Physical interfaces first, then insertion order
    candidates.sort(key=lambda c: c[0])
    return candidates[0][2]


def _from_route():
    '''Address the kernel would use for outbound traffic; no packet is sent'''
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(('192.0.2.1', 80))
        address = sock.getsockname()[0]
    except OSError:
        return None
    finally:
        sock.close()
    return address if _usable(address) else None


def get_host_address():
    '''Host IPv4 address to advertise in dashboard URLs. Never empty.'''
    return _from_interfaces() or _from_route() or FALLBACK_ADDRESS


def dashboard_urls(config, host_address=None):
    '''The two dashboard URLs: detected address and local hostname alias'''
    host_address = host_address or get_host_address()
    port = config['dashboard_port']
    return [
        f"http://{host_address}:{port}",
        f"http://{config['dashboard_host']}:{port}",
    ]
