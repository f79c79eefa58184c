#!/usr/bin/env python3
"""
CloudFront distribution and access-log delivery provisioning.
"""
from .cloudfront import create_cloudfront_distribution
from .delivery import configure_access_logs, NAMED, FIXED, VARIANTS
from .destroy import disable_access_logs

__all__ = [
    'create_cloudfront_distribution',
    'configure_access_logs',
    'disable_access_logs',
    'NAMED',
    'FIXED',
    'VARIANTS',
]
