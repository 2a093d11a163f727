"""
Secrets Manager access for the configuration bundle.

The bundle is a JSON secret with the keys S3_BUCKET_NAME,
DYNAMODB_TABLE_NAME, SQS_QUEUE_URL, AWS_REGION_ID and GOOGLE_API_KEY.
It is fetched once per warm container and cached.

Dependencies: boto3
System role: Secret retrieval for Lambda cold starts
"""

import json
import logging
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from backend.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def get_secret_bundle(secret_name: str, region: str) -> dict[str, Any]:
    """
    Fetch and decode the configuration secret.

    Args:
        secret_name: Secrets Manager secret id
        region: Region holding the secret

    Returns:
        dict: Decoded secret key/value pairs

    Raises:
        ConfigurationError: Secret missing, unreadable or not JSON
    """
    client = boto3.client("secretsmanager", region_name=region)

    try:
        response = client.get_secret_value(SecretId=secret_name)
    except (ClientError, BotoCoreError) as e:
        logger.error("get_secret_bundle - Failed to fetch secret %s: %s", secret_name, e)
        raise ConfigurationError(
            f"Failed to fetch secret {secret_name}", {"error": str(e)}
        ) from e

    raw = response.get("SecretString")
    if raw is None and response.get("SecretBinary") is not None:
        raw = response["SecretBinary"]
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
    if raw is None:
        raise ConfigurationError("Secrets Manager returned no secret data", {"secret": secret_name})

    try:
        bundle = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Secret {secret_name} is not valid JSON", {"error": str(e)}
        ) from e

    logger.info("get_secret_bundle - Loaded secret", extra={"secret_name": secret_name})
    return bundle
