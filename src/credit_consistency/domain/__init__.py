"""Domain layer: identities, events and aggregates.

Everything here is immutable except the aggregate wrappers, which hold a
state snapshot, a version counter and a queue of pending events.
"""
