#!/usr/bin/env python3
"""
CloudWatch Logs delivery pipeline for CloudFront access logs (v2).

A pipeline is three registrations made in order:
delivery source (the distribution) -> delivery destination (the bucket) -> delivery.
Nothing is rolled back if a later step fails.
"""
from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError

from .errors import DeliveryError

LOG_TYPE = 'ACCESS_LOGS'
SUFFIX_PATH = '{DistributionId}/{yyyy}/{MM}/{dd}/{HH}/'


class LoggingVariant:
    """Naming scheme and output format used when wiring up a pipeline. Read-only once built."""

    def __init__(self, name, output_format, source_name=None, destination_name=None):
        object.__setattr__(self, '_name', name)
        object.__setattr__(self, '_output_format', output_format)
        object.__setattr__(self, '_source_name', source_name)
        object.__setattr__(self, '_destination_name', destination_name)

    def __setattr__(self, attr, value):
        raise AttributeError(f"LoggingVariant is read-only; cannot set '{attr}'")

    def __delattr__(self, attr):
        raise AttributeError(f"LoggingVariant is read-only; cannot delete '{attr}'")

    @property
    def name(self):
        return self._name

    @property
    def output_format(self):
        return self._output_format

    def source_name(self, distribution_id):
        if self._source_name:
            return self._source_name
        return f"CloudFront-{distribution_id}"

    def destination_name(self, distribution_id):
        if self._destination_name:
            return self._destination_name
        return f"S3-destination-cloudfrontlogs-{distribution_id}"

    def __repr__(self):
        return f"LoggingVariant({self.name!r}, {self.output_format!r})"


# Names derived from the distribution ID, plain text logs
NAMED = LoggingVariant('named', 'plain')
# Fixed names, Parquet logs
FIXED = LoggingVariant('fixed', 'parquet', source_name='S3-delivery', destination_name='S3-destination')

VARIANTS = {variant.name: variant for variant in (NAMED, FIXED)}


def distribution_arn(account_id, distribution_id):
    return f"arn:aws:cloudfront::{account_id}:distribution/{distribution_id}"


def bucket_arn(bucket_name):
    return f"arn:aws:s3:::{bucket_name}"


def delivery_destination_arn(region, account_id, destination_name):
    return f"arn:aws:logs:{region}:{account_id}:delivery-destination:{destination_name}"


def rfc3339(moment):
    """Format an aware datetime to the second, writing a zero offset as 'Z'."""
    text = moment.replace(microsecond=0).isoformat()
    if text.endswith('+00:00'):
        return text[:-6] + 'Z'
    return text


def put_delivery_source(logs_client, source_name, resource_arn):
    """Register the distribution as a log producer."""
    try:
        logs_client.put_delivery_source(
            name=source_name,
            resourceArn=resource_arn,
            logType=LOG_TYPE
        )
    except (ClientError, BotoCoreError) as e:
        raise DeliveryError('source', e) from e
    print(f"Successfully created delivery source: {source_name}")


def put_delivery_destination(logs_client, destination_name, destination_resource_arn, output_format):
    """Register the bucket as a log target."""
    try:
        logs_client.put_delivery_destination(
            name=destination_name,
            outputFormat=output_format,
            deliveryDestinationConfiguration={
                'destinationResourceArn': destination_resource_arn
            }
        )
    except (ClientError, BotoCoreError) as e:
        raise DeliveryError('destination', e) from e
    print(f"Successfully created delivery destination: {destination_name}")


def create_delivery(logs_client, source_name, destination_arn, suffix_path=SUFFIX_PATH, hive_compatible=True):
    """
    Link a registered source to a registered destination.
    Returns the delivery ID.
    """
    try:
        response = logs_client.create_delivery(
            deliverySourceName=source_name,
            deliveryDestinationArn=destination_arn,
            s3DeliveryConfiguration={
                'suffixPath': suffix_path,
                'enableHiveCompatiblePath': hive_compatible
            },
            tags={
                'Service': 'CloudFront',
                'Created': rfc3339(datetime.now().astimezone()),
            }
        )
    except (ClientError, BotoCoreError) as e:
        raise DeliveryError('delivery', e) from e

    delivery_id = response['delivery']['id']
    print(f"Successfully created delivery with ID: {delivery_id}")
    return delivery_id


def configure_access_logs(logs_client, distribution_id, bucket_name, region, account_id, variant=NAMED):
    """
    Send the distribution's access logs to an S3 bucket through CloudWatch Logs delivery.

    Args:
        logs_client: Boto3 CloudWatch Logs client
        distribution_id: CloudFront distribution ID
        bucket_name: Target S3 bucket (must already exist)
        region: Region the delivery destination is registered in
        account_id: Caller account, used to build ARNs
        variant: LoggingVariant selecting names and output format

    Returns a dict describing what was created. Raises DeliveryError on the first
    failed step; earlier steps are left in place.
    """
    source_name = variant.source_name(distribution_id)
    destination_name = variant.destination_name(distribution_id)

    # Step 1: the distribution is the source
    put_delivery_source(logs_client, source_name, distribution_arn(account_id, distribution_id))

    # Step 2: the bucket is the destination
    put_delivery_destination(logs_client, destination_name, bucket_arn(bucket_name), variant.output_format)

    # Step 3: connect them
    destination_arn = delivery_destination_arn(region, account_id, destination_name)
    delivery_id = create_delivery(logs_client, source_name, destination_arn)
    print("CloudFront access logs v2 configured!")

    return {
        'source_name': source_name,
        'destination_name': destination_name,
        'destination_arn': destination_arn,
        'delivery_id': delivery_id,
        'output_format': variant.output_format,
    }
