#!/usr/bin/env python3
"""
CLI entry points for CloudFront distribution and access-log provisioning.

Each program is also available as a subcommand of `cflogs`:
  cflogs-create-distribution  == cflogs create-distribution
  cflogs-enable-logs          == cflogs enable-logs
  cflogs-enable-logs-parquet  == cflogs enable-logs-parquet
  cflogs-disable-logs         == cflogs disable-logs
"""
import argparse
import functools
import sys

import boto3

from . import account, cloudfront, config, delivery, destroy
from .errors import CloudFrontLogsError


def _add_flag(parser, name, help_text, **kwargs):
    """Accept both -name (Go flag style) and --name."""
    parser.add_argument(f"-{name}", f"--{name}", dest=name.replace('-', '_'), help=help_text, **kwargs)


def _add_common_flags(parser, with_bucket=True):
    if with_bucket:
        _add_flag(parser, 'bucket-name', "S3 bucket name for logs (required)")
    _add_flag(parser, 'region', f"AWS region (default: {config.DEFAULT_REGION})")
    _add_flag(parser, 'profile', "AWS profile (default: credential chain)")
    _add_flag(parser, 'config', "Path to YAML config; flags override its values")


def _add_create_distribution_flags(parser):
    _add_flag(parser, 'origin-host', "Origin host (required)")
    _add_flag(parser, 'cache-policy-id', "Cache policy ID (required)")
    _add_flag(parser, 'origin-request-policy-id', "Origin request policy ID (required)")
    _add_flag(parser, 'response-headers-policy-id', "Response headers policy ID (required)")
    _add_common_flags(parser)


def _add_enable_logs_flags(parser):
    _add_flag(parser, 'distribution-id', "CloudFront distribution ID (required)")
    _add_common_flags(parser)


def _add_disable_logs_flags(parser):
    _add_flag(parser, 'distribution-id', "CloudFront distribution ID (required for the named variant)")
    parser.add_argument('--variant', choices=sorted(delivery.VARIANTS), default=delivery.NAMED.name,
                        help="Naming scheme the pipeline was created with (default: named)")
    _add_common_flags(parser, with_bucket=False)


def _resolve_options(parser, args, required, message):
    """Merge flags with the config file and exit(1) with usage if anything required is empty."""
    cli_values = {k: v for k, v in vars(args).items() if k not in ('config', 'run', 'command_parser', 'command')}
    file_values = config.load_config(args.config) if args.config else {}
    options = config.merge_options(cli_values, file_values)

    if config.missing_options(options, required):
        print(f"Error: {message}")
        parser.print_help()
        sys.exit(1)
    return options


def _session(options):
    """Use the specified profile for AWS credentials and region."""
    if options.get('profile'):
        return boto3.Session(profile_name=options['profile'], region_name=options['region'])
    return boto3.Session(region_name=options['region'])


def _fatal(error):
    print(f"Error: {error}")
    sys.exit(1)


def run_create_distribution(parser, args):
    options = _resolve_options(
        parser, args,
        required=['origin_host', 'cache_policy_id', 'origin_request_policy_id',
                  'response_headers_policy_id', 'bucket_name'],
        message="All parameters are required",
    )
    session = _session(options)
    cloudfront_client = session.client('cloudfront')

    try:
        account_id = account.get_account_id(session.client('sts'))
        distribution_id = cloudfront.create_cloudfront_distribution(
            cloudfront_client,
            options['origin_host'],
            options['cache_policy_id'],
            options['origin_request_policy_id'],
            options['response_headers_policy_id'],
        )
        delivery.configure_access_logs(
            session.client('logs'),
            distribution_id,
            options['bucket_name'],
            options['region'],
            account_id,
            variant=delivery.NAMED,
        )
    except CloudFrontLogsError as e:
        _fatal(e)

    print("\nConfiguration Summary:")
    print(f"- Distribution ID: {distribution_id}")
    print(f"- Origin Host: {options['origin_host']}")
    print(f"- Cache Policy ID: {options['cache_policy_id']}")
    print(f"- Origin Request Policy ID: {options['origin_request_policy_id']}")
    print(f"- Response Headers Policy ID: {options['response_headers_policy_id']}")
    print(f"- S3 Bucket for Logs: {options['bucket_name']}")
    print(f"- Region: {options['region']}")


def run_enable_logs(parser, args, variant=delivery.NAMED):
    options = _resolve_options(
        parser, args,
        required=['distribution_id', 'bucket_name'],
        message="distribution-id and bucket-name are required",
    )
    session = _session(options)
    logs_client = session.client('logs')

    try:
        account_id = account.get_account_id(session.client('sts'))
        result = delivery.configure_access_logs(
            logs_client,
            options['distribution_id'],
            options['bucket_name'],
            options['region'],
            account_id,
            variant=variant,
        )
    except CloudFrontLogsError as e:
        _fatal(e)

    print("\nConfiguration Summary:")
    print(f"- Distribution ID: {options['distribution_id']}")
    print(f"- S3 Bucket: {options['bucket_name']}")
    print(f"- Delivery Source: {result['source_name']}")
    print(f"- Delivery Destination: {result['destination_name']}")
    print(f"- Output Format: {result['output_format']}")
    print(f"- Delivery ID: {result['delivery_id']}")
    print(f"- Region: {options['region']}")


def run_disable_logs(parser, args):
    variant = delivery.VARIANTS[args.variant]
    # Fixed-name pipelines don't need the distribution ID to be found
    required = ['distribution_id'] if variant is delivery.NAMED else []
    options = _resolve_options(parser, args, required=required, message="distribution-id is required")
    session = _session(options)

    try:
        destroy.disable_access_logs(session.client('logs'), options.get('distribution_id'), variant=variant)
    except CloudFrontLogsError as e:
        _fatal(e)


# command -> (flag setup, runner, description)
COMMANDS = {
    'create-distribution': (
        _add_create_distribution_flags,
        run_create_distribution,
        "Create a CloudFront distribution and send its access logs to S3",
    ),
    'enable-logs': (
        _add_enable_logs_flags,
        functools.partial(run_enable_logs, variant=delivery.NAMED),
        "Send an existing distribution's access logs to S3 (plain text, per-distribution names)",
    ),
    'enable-logs-parquet': (
        _add_enable_logs_flags,
        functools.partial(run_enable_logs, variant=delivery.FIXED),
        "Send an existing distribution's access logs to S3 (Parquet, fixed names)",
    ),
    'disable-logs': (
        _add_disable_logs_flags,
        run_disable_logs,
        "Remove an access log delivery pipeline",
    ),
}


def _run_command(command, argv=None):
    add_flags, run, description = COMMANDS[command]
    parser = argparse.ArgumentParser(description=description, allow_abbrev=False)
    add_flags(parser)
    args = parser.parse_args(argv)
    run(parser, args)


def create_distribution(argv=None):
    _run_command('create-distribution', argv)


def enable_logs(argv=None):
    _run_command('enable-logs', argv)


def enable_logs_parquet(argv=None):
    _run_command('enable-logs-parquet', argv)


def disable_logs(argv=None):
    _run_command('disable-logs', argv)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Provision CloudFront distributions and access log delivery")
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True
    for name, (add_flags, run, description) in COMMANDS.items():
        command_parser = subparsers.add_parser(name, help=description, description=description, allow_abbrev=False)
        add_flags(command_parser)
        command_parser.set_defaults(run=run, command_parser=command_parser)

    args = parser.parse_args(argv)
    args.run(args.command_parser, args)


if __name__ == "__main__":
    main()
