"""Origin checks for PayFast ITNs.

PayFast publishes hostnames, not fixed addresses, so the allowlist is
resolved on every notification. Lookups run in parallel on one shared,
bounded pool and share one deadline; a hostname that fails or times out
contributes no addresses.
"""

import ipaddress
import logging
import socket
from concurrent.futures import ThreadPoolExecutor, wait

logger = logging.getLogger(__name__)

DNS_WORKERS = 8

_executor = ThreadPoolExecutor(max_workers=DNS_WORKERS, thread_name_prefix="payfast-dns")


def _normalize(ip: str):
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError:
        return None
    mapped = getattr(addr, "ipv4_mapped", None)
    return mapped or addr


def _lookup(host: str) -> set:
    infos = socket.getaddrinfo(host, None)
    return {sockaddr[0] for _, _, _, _, sockaddr in infos}


def resolve_hosts(hosts, timeout: float = 3.0) -> set:
    """Resolve every hostname in ``hosts`` and return the union of their addresses."""
    hosts = list(hosts)
    if not hosts:
        return set()

    addresses = set()
    futures = {_executor.submit(_lookup, host): host for host in hosts}
    done, pending = wait(futures, timeout=timeout)
    for future in done:
        host = futures[future]
        try:
            addresses |= future.result()
        except OSError as e:
            logger.warning("Could not resolve PayFast host %s: %s", host, e)
    for future in pending:
        # Queued lookups are dropped; running ones finish on their own
        future.cancel()
        logger.warning("Timed out resolving PayFast host %s", futures[future])
    return addresses


def is_trusted_origin(source_ip: str, hosts, timeout: float = 3.0, resolver=resolve_hosts) -> bool:
    origin = _normalize(source_ip or "")
    if origin is None:
        return False
    trusted = {_normalize(ip) for ip in resolver(hosts, timeout)}
    trusted.discard(None)
    return origin in trusted
