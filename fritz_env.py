#!/usr/bin/env python3
"""
FRITZ!OS urlader environment reader

The bootloader environment holds one 'name<whitespace>value' pair per line.
It is read from the live procfs node first and from the cached copy if the
node is not present.
"""

import os

from fritz_errors import NoLocalDevice

ENVIRONMENT_PATHS = [
    "/proc/sys/urlader/environment",
    "/var/env.cache",
]


def parse_environment(text):
    """
    Parse environment text into a dictionary.

    Lines without a value are kept with an empty string; the first
    occurrence of a name wins.
    """
    env = {}
    for line in text.splitlines():
        parts = line.strip().split(None, 1)
        if not parts:
            continue
        name = parts[0]
        value = parts[1] if len(parts) > 1 else ''
        env.setdefault(name, value)
    return env


def find_environment(candidates=None):
    """Return the first existing environment file from the candidates"""
    for path in candidates or ENVIRONMENT_PATHS:
        if os.path.isfile(path):
            return path
    return None


def read_environment(path=None):
    """
    Read the urlader environment.

    Args:
        path: Alternate environment file, replaces the default locations

    Returns:
        dict: Environment names and values

    Raises:
        NoLocalDevice: No environment file could be read
    """
    if path is None:
        path = find_environment()
        if path is None:
            raise NoLocalDevice(
                "No urlader environment found (tried: " + ", ".join(ENVIRONMENT_PATHS) + ")")

    try:
        with open(path, 'r', encoding='latin-1') as f:
            return parse_environment(f.read())
    except OSError as e:
        raise NoLocalDevice(f"Cannot read environment file {path}: {e}") from e


def get_value(name, path=None):
    """Return one environment value, None if the name is missing or empty"""
    return read_environment(path).get(name) or None
