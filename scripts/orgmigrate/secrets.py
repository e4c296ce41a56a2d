"""Token resolution from the environment or a cloud secret manager.

A token value may be a reference instead of the token itself:

  aws-secret://NAME            AWS Secrets Manager, whole secret string
  aws-secret://NAME#KEY        AWS Secrets Manager, one key of a JSON secret
  gcp-secret://NAME            GCP Secret Manager, latest version in $GCP_PROJECT_ID
  gcp-secret://projects/...    GCP Secret Manager, full version resource name
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

logger = logging.getLogger("orgmigrate.secrets")

_AWS_PREFIX = "aws-secret://"
_GCP_PREFIX = "gcp-secret://"


def resolve_token(prefix: str, explicit: Optional[str] = None) -> str:
    """Token for one org side: explicit value, {PREFIX}_GITHUB_TOKEN, then GITHUB_TOKEN."""
    raw = (
        explicit
        or os.environ.get(f"{prefix}_GITHUB_TOKEN", "")
        or os.environ.get("GITHUB_TOKEN", "")
    )
    if raw.startswith(_AWS_PREFIX):
        return _aws_token(raw[len(_AWS_PREFIX):])
    if raw.startswith(_GCP_PREFIX):
        return _gcp_token(raw[len(_GCP_PREFIX):])
    return raw


def _aws_token(ref: str) -> str:
    import boto3

    secret_id, _, key = ref.partition("#")
    client = boto3.client("secretsmanager", region_name=os.environ.get("AWS_REGION", "us-east-1"))
    logger.debug("Reading token from AWS secret %s", secret_id)
    value = client.get_secret_value(SecretId=secret_id)["SecretString"]
    if key:
        return str(json.loads(value)[key])
    return value


def _gcp_token(ref: str) -> str:
    if ref.startswith("projects/"):
        name = ref
    else:
        project = os.environ.get("GCP_PROJECT_ID")
        if not project:
            raise ValueError(f"gcp-secret://{ref} needs GCP_PROJECT_ID or a full projects/... name")
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    from google.cloud import secretmanager

    logger.debug("Reading token from GCP secret %s", name)
    client = secretmanager.SecretManagerServiceClient()
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("UTF-8")
