"""Pure, synchronous timeline computations over already-fetched data."""
