"""
Services for cmbridge.

Running cm, executing operations on a worker pool, caching their results
and broadcasting state changes.
"""
