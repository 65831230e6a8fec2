"""Cross-cutting primitives: ids, clock, money, results, config, errors."""
