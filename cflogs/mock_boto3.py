#!/usr/bin/env python3
"""
In-memory mock boto3 clients with the same interface as real AWS clients.
All state is stored in memory for testing without hitting AWS.
"""
from copy import deepcopy

from botocore.exceptions import ClientError


def _client_error(code, message="", operation_name="Operation"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation_name)


class MockSTSClient:
    """In-memory STS client."""

    def __init__(self, account_id="123456789012", user_id="test-user", arn="arn:aws:iam::123456789012:user/test"):
        self._account_id = account_id
        self._user_id = user_id
        self._arn = arn

    def get_caller_identity(self):
        return {"Account": self._account_id, "UserId": self._user_id, "Arn": self._arn}


class MockCloudFrontClient:
    """In-memory CloudFront client. State: distributions dict by id."""

    def __init__(self, state=None):
        if state is not None:
            self._distributions = state.setdefault("distributions", {})
        else:
            self._distributions = {}

    @property
    def state(self):
        return {"distributions": dict(self._distributions)}

    def create_distribution(self, DistributionConfig=None):
        for existing in self._distributions.values():
            if existing["Config"]["CallerReference"] == DistributionConfig["CallerReference"]:
                raise _client_error("DistributionAlreadyExists", "CallerReference already used", "CreateDistribution")
        dist_id = f"E{len(self._distributions) + 1}"
        domain_name = f"d{dist_id.lower()}.cloudfront.net"
        self._distributions[dist_id] = {
            "Id": dist_id,
            "DomainName": domain_name,
            "Status": "InProgress",
            "Config": deepcopy(DistributionConfig),
        }
        return {
            "Distribution": {"Id": dist_id, "DomainName": domain_name, "Status": "InProgress"},
            "ETag": f"etag-{dist_id}",
        }


class MockLogsClient:
    """
    In-memory CloudWatch Logs client covering the delivery APIs.
    State: sources and destinations by name, deliveries by id, and an ordered call log.
    """

    def __init__(self, state=None, region="us-east-1", account_id="123456789012"):
        self._region = region
        self._account_id = account_id
        state = state if state is not None else {}
        self._sources = state.setdefault("sources", {})
        self._destinations = state.setdefault("destinations", {})
        self._deliveries = state.setdefault("deliveries", {})
        self._calls = state.setdefault("calls", [])

    @property
    def state(self):
        return {
            "sources": dict(self._sources),
            "destinations": dict(self._destinations),
            "deliveries": dict(self._deliveries),
            "calls": list(self._calls),
        }

    def _destination_arn(self, name):
        return f"arn:aws:logs:{self._region}:{self._account_id}:delivery-destination:{name}"

    def put_delivery_source(self, name=None, resourceArn=None, logType=None, tags=None):
        self._calls.append("put_delivery_source")
        source = {
            "name": name,
            "arn": f"arn:aws:logs:{self._region}:{self._account_id}:delivery-source:{name}",
            "resourceArns": [resourceArn],
            "service": "cloudfront",
            "logType": logType,
        }
        self._sources[name] = source
        return {"deliverySource": deepcopy(source)}

    def put_delivery_destination(self, name=None, outputFormat=None, deliveryDestinationConfiguration=None, tags=None):
        self._calls.append("put_delivery_destination")
        destination = {
            "name": name,
            "arn": self._destination_arn(name),
            "deliveryDestinationType": "S3",
            "outputFormat": outputFormat,
            "deliveryDestinationConfiguration": deepcopy(deliveryDestinationConfiguration),
        }
        self._destinations[name] = destination
        return {"deliveryDestination": deepcopy(destination)}

    def create_delivery(self, deliverySourceName=None, deliveryDestinationArn=None,
                        s3DeliveryConfiguration=None, tags=None, **kwargs):
        self._calls.append("create_delivery")
        if deliverySourceName not in self._sources:
            raise _client_error("ResourceNotFoundException", "Delivery source not found", "CreateDelivery")
        if not any(d["arn"] == deliveryDestinationArn for d in self._destinations.values()):
            raise _client_error("ResourceNotFoundException", "Delivery destination not found", "CreateDelivery")
        for existing in self._deliveries.values():
            if (existing["deliverySourceName"] == deliverySourceName
                    and existing["deliveryDestinationArn"] == deliveryDestinationArn):
                raise _client_error("ConflictException", "Delivery already exists", "CreateDelivery")
        delivery_id = f"delivery-{len(self._deliveries) + 1:04d}"
        delivery = {
            "id": delivery_id,
            "arn": f"arn:aws:logs:{self._region}:{self._account_id}:delivery:{delivery_id}",
            "deliverySourceName": deliverySourceName,
            "deliveryDestinationArn": deliveryDestinationArn,
            "deliveryDestinationType": "S3",
            "s3DeliveryConfiguration": deepcopy(s3DeliveryConfiguration),
            "tags": dict(tags or {}),
        }
        self._deliveries[delivery_id] = delivery
        return {"delivery": deepcopy(delivery)}

    def get_paginator(self, operation_name):
        if operation_name != "describe_deliveries":
            raise ValueError(f"Unknown paginator: {operation_name}")

        class Paginator:
            def __init__(pag_self, deliveries):
                pag_self._deliveries = [deepcopy(d) for d in deliveries.values()]

            def paginate(pag_self, **kwargs):
                yield {"deliveries": pag_self._deliveries}

        return Paginator(self._deliveries)

    def delete_delivery(self, id=None):
        self._calls.append("delete_delivery")
        if id not in self._deliveries:
            raise _client_error("ResourceNotFoundException", "Delivery not found", "DeleteDelivery")
        del self._deliveries[id]
        return {}

    def delete_delivery_destination(self, name=None):
        self._calls.append("delete_delivery_destination")
        if name not in self._destinations:
            raise _client_error("ResourceNotFoundException", "Delivery destination not found", "DeleteDeliveryDestination")
        arn = self._destinations[name]["arn"]
        if any(d["deliveryDestinationArn"] == arn for d in self._deliveries.values()):
            raise _client_error("ConflictException", "Delivery destination is in use", "DeleteDeliveryDestination")
        del self._destinations[name]
        return {}

    def delete_delivery_source(self, name=None):
        self._calls.append("delete_delivery_source")
        if name not in self._sources:
            raise _client_error("ResourceNotFoundException", "Delivery source not found", "DeleteDeliverySource")
        if any(d["deliverySourceName"] == name for d in self._deliveries.values()):
            raise _client_error("ConflictException", "Delivery source is in use", "DeleteDeliverySource")
        del self._sources[name]
        return {}


class MockSession:
    """Mock boto3.Session that returns in-memory clients. State is shared per service type."""

    def __init__(self, profile_name=None, region_name=None, account_id="123456789012"):
        self.profile_name = profile_name
        self.region_name = region_name
        self.account_id = account_id
        self._cloudfront_state = {}
        self._logs_state = {}
        self._sts = MockSTSClient(account_id=account_id)
        self.clients_created = []

    def client(self, service_name):
        region = self.region_name or "us-east-1"
        self.clients_created.append(service_name)
        if service_name == "cloudfront":
            return MockCloudFrontClient(self._cloudfront_state)
        if service_name == "logs":
            return MockLogsClient(self._logs_state, region=region, account_id=self.account_id)
        if service_name == "sts":
            return self._sts
        raise ValueError(f"Unknown service: {service_name}")

    @property
    def logs_calls(self):
        return list(self._logs_state.get("calls", []))
