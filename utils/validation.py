# TRAEFIK-STACK v1.0 - Input validation
import re
from pathlib import PurePosixPath


def validate_container_name(name):
    '''Validate a container or network name.
    Docker names must match: [a-zA-Z0-9][a-zA-Z0-9_.-]*
    Returns the stripped name or raises ValueError.
    '''
    if not name or not isinstance(name, str):
        raise ValueError("Container name is required")

    name = name.strip()

    if len(name) > 128:
        raise ValueError("Container name too long (max 128 chars)")

    if '..' in name or '/' in name or '\\' in name:
        raise ValueError(f"Invalid characters in name: {name}")

    if not re.match(r'^[a-zA-Z0-9][a-zA-Z0-9_.-]*$', name):
        raise ValueError(f"Name must start with alphanumeric and contain only letters, digits, _, ., -: {name}")

    return name


def validate_port(port):
    '''Validate port number. Returns int or raises ValueError.'''
    if isinstance(port, bool):
        raise ValueError("Port must be a number")
    try:
        port = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Port must be a number: {port!r}")

    if not (1 <= port <= 65535):
        raise ValueError(f"Port must be between 1 and 65535: {port}")

    return port


def validate_image(image):
    '''Validate an image reference like traefik:v2.11'''
    if not image or not isinstance(image, str):
        raise ValueError("Image is required")
    image = image.strip()
    if not re.match(r'^[a-zA-Z0-9][a-zA-Z0-9_.:/@-]*$', image):
        raise ValueError(f"Invalid image reference: {image}")
    return image


def validate_hostname(hostname):
    '''Validate a DNS hostname used in router rules and URLs'''
    if not hostname or not isinstance(hostname, str):
        raise ValueError("Hostname is required")
    hostname = hostname.strip().lower()
    label = r'[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?'
    if len(hostname) > 253 or not re.match(rf'^{label}(\.{label})*$', hostname):
        raise ValueError(f"Invalid hostname: {hostname}")
    return hostname


def validate_archive_member(name, allowed_roots):
    '''Check a tar member name stays inside one of the allowed top-level dirs.
    Returns the normalized top-level directory or raises ValueError.
    '''
    if not name or '\x00' in name:
        raise ValueError("Empty or invalid member name")

    path = PurePosixPath(name)
    if path.is_absolute() or '..' in path.parts:
        raise ValueError(f"Unsafe path in archive: {name}")

    parts = [p for p in path.parts if p != '.']
    if not parts or parts[0] not in allowed_roots:
        raise ValueError(f"Unexpected path in archive: {name}")

    return parts[0]
