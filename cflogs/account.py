#!/usr/bin/env python3
"""
AWS account lookup.
"""
from botocore.exceptions import BotoCoreError, ClientError

from .errors import AccountLookupError


def get_account_id(sts_client):
    """Return the caller's AWS account ID via STS GetCallerIdentity. No retry."""
    try:
        response = sts_client.get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        raise AccountLookupError(e) from e
    return response['Account']
