#!/usr/bin/env python3
"""
Configuration loading and validation.

Values come from an optional YAML file and from command-line flags; flags win.
"""
import sys

import yaml

DEFAULT_REGION = 'us-east-1'

# option name -> (section, key) in the YAML file
FILE_KEYS = {
    'region': ('aws', 'region'),
    'profile': ('aws', 'profile'),
    'origin_host': ('distribution', 'origin_host'),
    'cache_policy_id': ('distribution', 'cache_policy_id'),
    'origin_request_policy_id': ('distribution', 'origin_request_policy_id'),
    'response_headers_policy_id': ('distribution', 'response_headers_policy_id'),
    'distribution_id': ('distribution', 'id'),
    'bucket_name': ('logs', 'bucket_name'),
}


def load_config(config_file):
    """
    Load option values from a YAML file.

    Example:
        aws:
          region: us-west-2
          profile: default
        distribution:
          id: E123
        logs:
          bucket_name: logs-bucket
    """
    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError(f"expected a mapping at the top of {config_file}")

        result = {}
        for option, (section, key) in FILE_KEYS.items():
            section_config = config.get(section) or {}
            if not isinstance(section_config, dict):
                raise ValueError(f"'{section}' must be a mapping")
            value = section_config.get(key)
            if value is None:
                continue
            # YAML reads 0123 as 83 and yes as True; only quoted text is taken as-is
            if not isinstance(value, str):
                raise ValueError(f"'{section}.{key}' must be a string; quote it")
            result[option] = value
        return result
    except Exception as e:
        print(f"Error loading configuration: {str(e)}")
        sys.exit(1)


def merge_options(cli_values, file_values=None):
    """
    Merge flag values over file values over defaults.
    A flag left unset (None) does not hide the file value; an explicit empty string does.
    """
    merged = {'region': DEFAULT_REGION}
    for values in (file_values or {}, cli_values):
        merged.update({k: v for k, v in values.items() if v is not None})
    return merged


def missing_options(options, required):
    """Return the required option names whose value is missing or empty."""
    return [name for name in required if not options.get(name)]
