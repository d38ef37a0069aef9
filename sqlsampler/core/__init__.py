"""Core building blocks: type vocabulary, argument binding, statement caching and result rendering."""
