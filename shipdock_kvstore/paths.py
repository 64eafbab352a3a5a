"""Helpers for building keys in the hierarchical namespace.

All keys handed to a backend are relative: they never start or end with a
separator, and they never contain `.` or `..` segments.
"""

import posixpath

from .exceptions import InvalidKeyError

__all__ = [
    "SEPARATOR",
    "LABEL_OWNER",
    "LABEL_OWNER_NAME",
    "LABEL_SERVICE_IP",
    "LABEL_SERVICE_PORTS",
    "LABEL_SERVICE_NAME",
    "LABEL_TASK_NAME",
    "trim_relative",
    "join_path",
    "child_path",
    "relative_to",
    "parent_path",
]

SEPARATOR = "/"

# Well-known labels promoted to first class fields on stored entities.
LABEL_OWNER = "com.docker.swarm.owner"
LABEL_OWNER_NAME = "com.docker.swarm.owner.name"
LABEL_SERVICE_IP = "com.navercorp.shipdock.lb.service_ip"
LABEL_SERVICE_PORTS = "com.navercorp.shipdock.lb.service_ports"
LABEL_SERVICE_NAME = "com.navercorp.shipdock.lb.service_name"
LABEL_TASK_NAME = "com.docker.swarm.task.name"


def trim_relative(value: str) -> str:
    """Strip whitespace and surrounding separators from a path."""
    return value.strip().strip(SEPARATOR).strip()


def join_path(*parts: str) -> str:
    """Join and normalize path parts into a relative key."""
    segments = [trim_relative(part) for part in parts if part]
    joined = posixpath.join(*segments) if segments else ""
    if not joined:
        return ""
    normalized = posixpath.normpath(joined)
    if normalized == ".":
        return ""
    return trim_relative(normalized)


def child_path(root: str, key: str) -> str:
    """Return the full key for `key` inside the subtree `root`.

    The key may contain nested segments, but must not resolve outside of the
    subtree.
    """
    cleaned = key.strip()
    if not cleaned or cleaned.startswith(SEPARATOR):
        raise InvalidKeyError(f"Invalid key '{key}' for subtree '{root}'")
    relative = posixpath.normpath(cleaned)
    if relative in (".", "..") or relative.startswith("../"):
        raise InvalidKeyError(f"Key '{key}' escapes subtree '{root}'")
    return join_path(root, relative)


def relative_to(root: str, key: str) -> str | None:
    """Return `key` relative to `root`, or None when it is not below it."""
    root = trim_relative(root)
    key = trim_relative(key)
    if not root:
        return key or None
    prefix = root + SEPARATOR
    if not key.startswith(prefix):
        return None
    return key[len(prefix) :] or None


def parent_path(key: str) -> str:
    """Return the parent directory of a key, or an empty string at the top."""
    parent = posixpath.dirname(trim_relative(key))
    return "" if parent in (".", SEPARATOR) else parent
