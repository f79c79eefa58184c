"""Unit tests for delivery and account modules using mock boto3 clients."""
import os
import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

_repo_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if _repo_root not in sys.path:
    sys.path.insert(0, _repo_root)

from cflogs.mock_boto3 import MockLogsClient, MockSTSClient
from cflogs import account, delivery
from cflogs.errors import AccountLookupError, DeliveryError

ACCOUNT = "123456789012"


def _access_denied(operation):
    return ClientError({"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, operation)


class TestVariants:
    """Tests for the logging variant presets."""

    def test_named_variant_derives_names_from_distribution(self):
        assert delivery.NAMED.source_name("E123") == "CloudFront-E123"
        assert delivery.NAMED.destination_name("E123") == "S3-destination-cloudfrontlogs-E123"
        assert delivery.NAMED.output_format == "plain"

    @pytest.mark.parametrize("distribution_id", ["E123", "E2ABCDEF", None])
    def test_fixed_variant_names_ignore_distribution(self, distribution_id):
        assert delivery.FIXED.source_name(distribution_id) == "S3-delivery"
        assert delivery.FIXED.destination_name(distribution_id) == "S3-destination"
        assert delivery.FIXED.output_format == "parquet"

    def test_variants_registry(self):
        assert delivery.VARIANTS == {"named": delivery.NAMED, "fixed": delivery.FIXED}

    @pytest.mark.parametrize("attr", ["name", "output_format", "_output_format", "_source_name"])
    def test_presets_are_read_only(self, attr):
        with pytest.raises(AttributeError):
            setattr(delivery.FIXED, attr, "plain")
        with pytest.raises(AttributeError):
            delattr(delivery.FIXED, attr)
        assert delivery.FIXED.output_format == "parquet"
        assert delivery.FIXED.source_name("E123") == "S3-delivery"


class TestRfc3339:
    """Tests for the Created tag timestamp format."""

    def test_utc_written_as_z(self):
        moment = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
        assert delivery.rfc3339(moment) == "2024-05-01T12:30:45Z"

    def test_non_utc_keeps_offset(self):
        moment = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone(timedelta(hours=-7)))
        assert delivery.rfc3339(moment) == "2024-05-01T12:30:45-07:00"

    def test_half_hour_offset(self):
        moment = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert delivery.rfc3339(moment) == "2024-05-01T12:30:45+05:30"


class TestArns:
    def test_distribution_arn(self):
        assert delivery.distribution_arn(ACCOUNT, "E123") == f"arn:aws:cloudfront::{ACCOUNT}:distribution/E123"

    def test_bucket_arn(self):
        assert delivery.bucket_arn("logs-bucket") == "arn:aws:s3:::logs-bucket"

    def test_delivery_destination_arn(self):
        assert delivery.delivery_destination_arn("us-west-2", ACCOUNT, "S3-destination") == (
            f"arn:aws:logs:us-west-2:{ACCOUNT}:delivery-destination:S3-destination"
        )


class TestGetAccountId:
    def test_returns_account(self):
        assert account.get_account_id(MockSTSClient(account_id="111122223333")) == "111122223333"

    def test_client_error_wrapped(self):
        client = MockSTSClient()
        error = _access_denied("GetCallerIdentity")
        with patch.object(client, "get_caller_identity", side_effect=error):
            with pytest.raises(AccountLookupError) as exc_info:
                account.get_account_id(client)
        assert exc_info.value.cause is error
        assert str(exc_info.value).startswith("Failed to get account ID")

    def test_connection_error_wrapped(self):
        client = MockSTSClient()
        error = EndpointConnectionError(endpoint_url="https://sts.amazonaws.com")
        with patch.object(client, "get_caller_identity", side_effect=error):
            with pytest.raises(AccountLookupError):
                account.get_account_id(client)


class TestConfigureAccessLogs:
    """Tests for configure_access_logs."""

    def test_named_pipeline(self, capsys):
        client = MockLogsClient(region="us-east-1")
        result = delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)

        source = client.state["sources"]["CloudFront-E123"]
        assert source["resourceArns"] == [f"arn:aws:cloudfront::{ACCOUNT}:distribution/E123"]
        assert source["logType"] == "ACCESS_LOGS"

        destination = client.state["destinations"]["S3-destination-cloudfrontlogs-E123"]
        assert destination["outputFormat"] == "plain"
        assert destination["deliveryDestinationConfiguration"] == {"destinationResourceArn": "arn:aws:s3:::logs-bucket"}

        assert result["source_name"] == "CloudFront-E123"
        assert result["destination_name"] == "S3-destination-cloudfrontlogs-E123"
        assert result["delivery_id"] in client.state["deliveries"]

        out = capsys.readouterr().out
        assert "Successfully created delivery source: CloudFront-E123" in out
        assert "Successfully created delivery destination: S3-destination-cloudfrontlogs-E123" in out
        assert f"Successfully created delivery with ID: {result['delivery_id']}" in out
        assert "CloudFront access logs v2 configured!" in out

    def test_fixed_parquet_pipeline(self):
        client = MockLogsClient(region="eu-west-1")
        result = delivery.configure_access_logs(
            client, "E999", "logs-bucket", "eu-west-1", ACCOUNT, variant=delivery.FIXED
        )
        assert set(client.state["sources"]) == {"S3-delivery"}
        assert set(client.state["destinations"]) == {"S3-destination"}
        assert client.state["destinations"]["S3-destination"]["outputFormat"] == "parquet"
        assert result["destination_arn"] == f"arn:aws:logs:eu-west-1:{ACCOUNT}:delivery-destination:S3-destination"

    def test_end_to_end_arns(self):
        client = MockLogsClient(region="us-west-2")
        result = delivery.configure_access_logs(client, "E123", "logs-bucket", "us-west-2", ACCOUNT)

        destination = client.state["destinations"]["S3-destination-cloudfrontlogs-E123"]
        assert destination["deliveryDestinationConfiguration"]["destinationResourceArn"] == "arn:aws:s3:::logs-bucket"
        assert result["destination_arn"] == (
            f"arn:aws:logs:us-west-2:{ACCOUNT}:delivery-destination:S3-destination-cloudfrontlogs-E123"
        )
        created = client.state["deliveries"][result["delivery_id"]]
        assert created["deliveryDestinationArn"] == result["destination_arn"]

    def test_delivery_options_and_tags(self):
        client = MockLogsClient()
        result = delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)
        created = client.state["deliveries"][result["delivery_id"]]
        assert created["deliverySourceName"] == "CloudFront-E123"
        assert created["s3DeliveryConfiguration"] == {
            "suffixPath": "{DistributionId}/{yyyy}/{MM}/{dd}/{HH}/",
            "enableHiveCompatiblePath": True,
        }
        assert created["tags"]["Service"] == "CloudFront"
        # RFC3339, seconds precision; fromisoformat only accepts "Z" from Python 3.11
        created_tag = created["tags"]["Created"]
        assert "." not in created_tag
        created_at = datetime.fromisoformat(created_tag.replace("Z", "+00:00"))
        assert created_at.tzinfo is not None

    def test_calls_are_sequential(self):
        client = MockLogsClient()
        delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)
        assert client.state["calls"] == ["put_delivery_source", "put_delivery_destination", "create_delivery"]

    def test_source_failure_stops_pipeline(self):
        client = MockLogsClient()
        with patch.object(client, "put_delivery_source", side_effect=_access_denied("PutDeliverySource")):
            with pytest.raises(DeliveryError) as exc_info:
                delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)
        assert exc_info.value.step == "source"
        assert str(exc_info.value).startswith("Failed to create delivery source")
        assert client.state["destinations"] == {}
        assert client.state["deliveries"] == {}

    def test_destination_failure_leaves_source_registered(self):
        client = MockLogsClient()
        with patch.object(client, "put_delivery_destination", side_effect=_access_denied("PutDeliveryDestination")):
            with pytest.raises(DeliveryError) as exc_info:
                delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)
        assert exc_info.value.step == "destination"
        # No rollback
        assert "CloudFront-E123" in client.state["sources"]
        assert client.state["deliveries"] == {}

    def test_delivery_failure_leaves_source_and_destination(self):
        client = MockLogsClient(region="us-east-1")
        # Destination ARN built for another region does not match the registered destination
        with pytest.raises(DeliveryError) as exc_info:
            delivery.configure_access_logs(client, "E123", "logs-bucket", "us-west-2", ACCOUNT)
        assert exc_info.value.step == "delivery"
        assert "ResourceNotFoundException" in str(exc_info.value)
        assert "CloudFront-E123" in client.state["sources"]
        assert "S3-destination-cloudfrontlogs-E123" in client.state["destinations"]

    def test_rerun_reports_existing_delivery(self):
        client = MockLogsClient()
        delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)
        with pytest.raises(DeliveryError) as exc_info:
            delivery.configure_access_logs(client, "E123", "logs-bucket", "us-east-1", ACCOUNT)
        assert exc_info.value.step == "delivery"
        assert len(client.state["deliveries"]) == 1
