"""boto3-backed object store client."""
