"""
Capability flags a DataSource can advertise.

Design code asks ``source.supports(CAPABILITY_...)`` instead of checking
how the data was loaded.
"""

# Columns are held in memory as numpy arrays
CAPABILITY_MATERIALIZED = 'materialized'

# Columns can be read again (re-encoding, prediction on the same data)
CAPABILITY_REPEATABLE = 'repeatable'

# Loaded from a delimited text file; metadata['source_path'] names it
CAPABILITY_FILE_BACKED = 'file_backed'

ALL_CAPABILITIES = frozenset({
    CAPABILITY_MATERIALIZED,
    CAPABILITY_REPEATABLE,
    CAPABILITY_FILE_BACKED,
})

__all__ = [
    'CAPABILITY_MATERIALIZED',
    'CAPABILITY_REPEATABLE',
    'CAPABILITY_FILE_BACKED',
    'ALL_CAPABILITIES',
]
