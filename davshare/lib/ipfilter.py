"""
ipfilter.py
-----------

client address allow-list: single addresses and CIDR ranges.

"""

import ipaddress
import logging

log = logging.getLogger(__name__)


def parse_whitelist(value):
    """ turn a comma separated list into a tuple of ip networks

    Malformed entries are skipped with a warning.
    """
    networks = []
    for entry in (value or '').split(','):
        entry = entry.strip()
        if not entry:
            continue
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            log.warning('Ignoring malformed whitelist entry %r', entry)
    return tuple(networks)


def is_allowed(address, networks):
    """ an empty whitelist lets every address in """
    if not networks:
        return True

    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False

    # IPv4 clients on a dual stack socket
    if ip.version == 6 and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    return any(ip in net for net in networks if net.version == ip.version)
