"""Application layer: thin command services over the repositories."""
