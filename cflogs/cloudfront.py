#!/usr/bin/env python3
"""
CloudFront distribution management.
"""
import time

from botocore.exceptions import BotoCoreError, ClientError

from .errors import DistributionError

ORIGIN_ID = 'primary-origin'
PRICE_CLASS = 'PriceClass_100'


def build_distribution_config(origin_host, cache_policy_id, origin_request_policy_id,
                              response_headers_policy_id, caller_reference=None):
    """
    Build a single-origin, single-behavior distribution config for a custom HTTPS origin.

    Origin is reached over HTTPS only (TLSv1.2), viewers are redirected to HTTPS and
    caching is driven entirely by the supplied policy IDs. Price class is always the
    lowest tier.
    """
    if caller_reference is None:
        caller_reference = f"cli-reference-{int(time.time())}"

    return {
        'CallerReference': caller_reference,
        'Comment': 'Distribution created with CloudFront Access Logs V2',
        'Enabled': True,
        'Origins': {
            'Quantity': 1,
            'Items': [
                {
                    'Id': ORIGIN_ID,
                    'DomainName': origin_host,
                    'CustomOriginConfig': {
                        'HTTPPort': 80,
                        'HTTPSPort': 443,
                        'OriginProtocolPolicy': 'https-only',
                        'OriginSslProtocols': {
                            'Quantity': 1,
                            'Items': ['TLSv1.2']
                        }
                    }
                }
            ]
        },
        'DefaultCacheBehavior': {
            'TargetOriginId': ORIGIN_ID,
            'ViewerProtocolPolicy': 'redirect-to-https',
            'CachePolicyId': cache_policy_id,
            'OriginRequestPolicyId': origin_request_policy_id,
            'ResponseHeadersPolicyId': response_headers_policy_id,
        },
        'PriceClass': PRICE_CLASS,
    }


def create_cloudfront_distribution(cloudfront_client, origin_host, cache_policy_id,
                                   origin_request_policy_id, response_headers_policy_id):
    """
    Create a CloudFront distribution in front of origin_host.

    Returns the new distribution ID. Raises DistributionError if CloudFront rejects
    the request; a CallerReference collision is not retried.
    """
    distribution_config = build_distribution_config(
        origin_host,
        cache_policy_id,
        origin_request_policy_id,
        response_headers_policy_id,
    )

    print(f"Creating CloudFront distribution for origin: {origin_host}")
    try:
        response = cloudfront_client.create_distribution(DistributionConfig=distribution_config)
    except (ClientError, BotoCoreError) as e:
        raise DistributionError(e) from e

    distribution_id = response['Distribution']['Id']
    print(f"Successfully created CloudFront distribution with ID: {distribution_id}")
    domain_name = response['Distribution'].get('DomainName')
    if domain_name:
        print(f"  Domain: {domain_name}")
        print("  Note: Distribution may take 15-20 minutes to deploy")
    return distribution_id
