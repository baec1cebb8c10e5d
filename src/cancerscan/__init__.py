"""CancerScan: image upload, binary cancer classification and verdict history."""

__version__ = "0.1.0"
