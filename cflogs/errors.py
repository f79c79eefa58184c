#!/usr/bin/env python3
"""
Errors raised by the provisioning steps. The CLI reports them and exits.
"""


class CloudFrontLogsError(Exception):
    """Base class for provisioning failures. Wraps the underlying AWS error."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class AccountLookupError(CloudFrontLogsError):
    def __init__(self, cause):
        super().__init__(f"Failed to get account ID: {cause}", cause)


class DistributionError(CloudFrontLogsError):
    def __init__(self, cause):
        super().__init__(f"Failed to create CloudFront distribution: {cause}", cause)


class DeliveryError(CloudFrontLogsError):
    """
    A CloudWatch Logs delivery step failed.

    step is one of 'source', 'destination' or 'delivery'.
    """

    LABELS = {
        'source': 'delivery source',
        'destination': 'delivery destination',
        'delivery': 'delivery',
    }

    def __init__(self, step, cause, action='create'):
        self.step = step
        self.action = action
        super().__init__(f"Failed to {action} {self.LABELS[step]}: {cause}", cause)
