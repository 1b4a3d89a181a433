"""Decode serialized ROS 1 messages into named numeric and string time series."""

__version__ = "0.1.0"