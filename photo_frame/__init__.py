"""Batch-reframe photos into fixed aspect ratios with a border and a colour or blurred background."""

__version__ = "1.0.0"
