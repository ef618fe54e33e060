"""
Core token pipeline: load, merge, resolve, transform, emit.
"""
