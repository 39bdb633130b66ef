"""Talk data: decoding, caching and upstream access."""
