"""Graph extractors operating on :mod:`flowgraph.syntax` trees."""
