# Integration Module
"""
Session layer that owns a chain on behalf of a form or display layer.

All appends are serialized; reads work on immutable snapshots.
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import session
    return getattr(session, name)

__all__ = [
    'LedgerSession',
    'system_clock_ms',
]
