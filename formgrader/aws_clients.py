import os

import boto3


def _kw(region: str | None = None, endpoint_url: str | None = None):
    k = {"region_name": region or os.getenv("AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1"))}
    endpoint = endpoint_url or os.getenv("AWS_ENDPOINT_URL")  # e.g. http://localhost:4566 for LocalStack
    if endpoint:
        k["endpoint_url"] = endpoint
    return k


def dynamodb_resource(region: str | None = None, endpoint_url: str | None = None):
    return boto3.resource("dynamodb", **_kw(region, endpoint_url))


def secretsmanager_client(region: str | None = None):
    return boto3.client("secretsmanager", **_kw(region))


def logs_client(region: str | None = None):
    return boto3.client("logs", **_kw(region))
