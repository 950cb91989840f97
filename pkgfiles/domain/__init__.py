"""
Address parsing, version resolution and path checks.

Everything in this package is pure: no network and no filesystem access.
"""
