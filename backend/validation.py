"""Input validation utilities for SvcWatch backend"""
import re
import logging

logger = logging.getLogger("SvcWatch.Validation")

HOSTNAME_LABEL = re.compile(r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$')


def validate_ip_address(ip: str) -> bool:
    """Validate IPv4 address format"""
    pattern = r'^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$'
    match = re.match(pattern, ip)
    if not match:
        logger.warning(f"Invalid IP format: {ip}")
        return False

    octets = [int(g) for g in match.groups()]
    if not all(0 <= octet <= 255 for octet in octets):
        logger.warning(f"IP address octets out of range: {ip}")
        return False

    return True

def validate_hostname(host: str) -> bool:
    """
    Validate a DNS host name.

    Names made only of digits and dots are treated as IPv4 addresses and must
    pass validate_ip_address instead.
    """
    if not host or len(host) > 253:
        logger.warning(f"Invalid hostname length: {len(host) if host else 0}")
        return False
    if re.match(r'^[\d.]+$', host):
        return False
    labels = host.rstrip(".").split(".")
    if not all(HOSTNAME_LABEL.match(label) for label in labels):
        logger.warning(f"Invalid hostname: {host}")
        return False
    return True

def validate_host(host: str) -> bool:
    """Accept an IPv4 address or a host name"""
    if re.match(r'^[\d.]+$', host or ""):
        return validate_ip_address(host)
    return validate_hostname(host)

def validate_port(port: int) -> bool:
    """Validate port number is in valid range"""
    if not (1 <= port <= 65535):
        logger.warning(f"Port out of range (1-65535): {port}")
        return False
    return True
