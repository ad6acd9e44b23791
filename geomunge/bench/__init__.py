"""Namespace reserved for benchmarking; it currently holds no modules."""