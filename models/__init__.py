"""
models/ - Domain Models
=======================
Plain dataclasses shared across layers: users, servers, metrics snapshots
and command descriptors. No I/O lives here.
"""
