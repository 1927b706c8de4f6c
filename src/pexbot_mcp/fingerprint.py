"""Device fingerprint collection.

Reads a handful of host identifiers for the registration and activation
calls. Never raises: anything the OS refuses to tell us falls back to the
null MAC or an omitted field.
"""

import logging
import platform
import socket
from typing import Optional

import psutil

from .types import NULL_MAC, Fingerprint

logger = logging.getLogger(__name__)


def _normalize_mac(address: str) -> str:
    # Windows reports AA-BB-CC-DD-EE-FF
    return address.replace("-", ":").lower()


def get_mac_address() -> str:
    """Return the MAC of the first non-loopback interface with a real address.

    Interfaces are taken in the order the OS reports them.
    """
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except (OSError, psutil.Error) as e:
        logger.debug("Could not enumerate network interfaces: %s", e)
        return NULL_MAC

    for name, nics in addrs.items():
        nic_stats = stats.get(name)
        if nic_stats is not None and "loopback" in nic_stats.flags.split(","):
            continue
        for nic in nics:
            if nic.family != psutil.AF_LINK or not nic.address:
                continue
            mac = _normalize_mac(nic.address)
            if mac != NULL_MAC:
                return mac

    return NULL_MAC


def get_cpu_model() -> Optional[str]:
    """Best-effort CPU model name."""
    if platform.system() == "Linux":
        try:
            with open("/proc/cpuinfo", encoding="utf-8") as f:
                for line in f:
                    if line.startswith("model name"):
                        return line.split(":", 1)[1].strip() or None
        except OSError as e:
            logger.debug("Could not read /proc/cpuinfo: %s", e)

    return platform.processor() or None


def collect_fingerprint() -> Fingerprint:
    """Collect a fresh fingerprint of this host."""
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = platform.node()

    model = get_cpu_model()
    try:
        cores = psutil.cpu_count(logical=True)
    except (OSError, psutil.Error):
        cores = None

    cpu_info = None
    if model:
        cpu_info = f"{model} ({cores} cores)" if cores else model

    return Fingerprint(
        mac_address=get_mac_address(),
        hostname=hostname,
        os=f"{platform.system()} {platform.release()}".strip(),
        model_name=model,
        cpu_info=cpu_info,
    )
