"""
Notification center provider store.

Persists notifications raised by client applications in an embedded
database and exposes them through typed collections.
"""

__version__ = "0.1.0"
