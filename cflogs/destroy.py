#!/usr/bin/env python3
"""
Teardown of a CloudFront access log delivery pipeline so it can be re-created.
Destroys, in order: deliveries for the source, the delivery destination, the delivery source.
"""
from botocore.exceptions import BotoCoreError, ClientError

from .delivery import NAMED
from .errors import DeliveryError


def _is_not_found(error):
    return error.response.get('Error', {}).get('Code') == 'ResourceNotFoundException'


def _find_delivery_ids(logs_client, source_name):
    """Return IDs of every delivery fed by source_name."""
    delivery_ids = []
    paginator = logs_client.get_paginator('describe_deliveries')
    for page in paginator.paginate():
        for item in page.get('deliveries', []):
            if item.get('deliverySourceName') == source_name:
                delivery_ids.append(item['id'])
    return delivery_ids


def _delete(step, label, call, **kwargs):
    """Run a delete call. Returns False if the resource was already gone."""
    try:
        call(**kwargs)
    except ClientError as e:
        if _is_not_found(e):
            print(f"  {label} already removed")
            return False
        raise DeliveryError(step, e, action='delete') from e
    except BotoCoreError as e:
        raise DeliveryError(step, e, action='delete') from e
    print(f"  Deleted {label}")
    return True


def disable_access_logs(logs_client, distribution_id, variant=NAMED):
    """
    Remove the delivery pipeline that configure_access_logs created for this variant.
    Missing resources are skipped. Returns a dict of what was deleted.
    """
    source_name = variant.source_name(distribution_id)
    destination_name = variant.destination_name(distribution_id)
    print(f"Removing CloudFront access log delivery for source: {source_name}")

    try:
        delivery_ids = _find_delivery_ids(logs_client, source_name)
    except (ClientError, BotoCoreError) as e:
        raise DeliveryError('delivery', e, action='list') from e

    deleted_deliveries = []
    for delivery_id in delivery_ids:
        if _delete('delivery', f"delivery {delivery_id}", logs_client.delete_delivery, id=delivery_id):
            deleted_deliveries.append(delivery_id)

    destination_deleted = _delete(
        'destination',
        f"delivery destination {destination_name}",
        logs_client.delete_delivery_destination,
        name=destination_name,
    )
    source_deleted = _delete(
        'source',
        f"delivery source {source_name}",
        logs_client.delete_delivery_source,
        name=source_name,
    )

    print("CloudFront access log delivery removed.")
    return {
        'deliveries': deleted_deliveries,
        'destination': destination_name if destination_deleted else None,
        'source': source_name if source_deleted else None,
    }
