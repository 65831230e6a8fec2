"""In-process storage: event store, versioned collection, repositories."""
