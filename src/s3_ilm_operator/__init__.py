"""S3 ILM Operator: declarative lifecycle rules for S3-compatible buckets."""

__version__ = "0.1.0"
