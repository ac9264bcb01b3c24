# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .telemetry import TelemetryConfig


@dataclass(frozen=True)
class SpRestConfig:
    """
    Transport settings for SharePoint REST client operations.

    Retries are disabled unless ``http_retries`` is set above 1.

    :param http_retries: Maximum number of attempts per HTTP request (default: 1).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds for exponential backoff (default: 0.5).
    :type http_backoff: float or None
    :param http_max_backoff: Maximum delay between retry attempts in seconds (default: 60.0).
    :type http_max_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param http_jitter: Whether to add jitter to retry delays (default: True).
    :type http_jitter: bool or None
    :param http_retry_transient_errors: Whether to retry 429, 502, 503, 504 (default: False).
    :type http_retry_transient_errors: bool or None
    :param telemetry: Optional request logging and hook configuration.
    :type telemetry: ~sp_rest_api.core.telemetry.TelemetryConfig or None
    """

    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_max_backoff: Optional[float] = None
    http_timeout: Optional[float] = None
    http_jitter: Optional[bool] = None
    http_retry_transient_errors: Optional[bool] = None

    telemetry: Optional[TelemetryConfig] = None

    @classmethod
    def from_env(cls) -> "SpRestConfig":
        """
        Create a configuration instance with default settings.

        :return: Configuration instance with default values.
        :rtype: ~sp_rest_api.core.config.SpRestConfig
        """
        return cls(
            http_retries=None,  # Will default to 1 in HttpClient
            http_backoff=None,  # Will default to 0.5 in HttpClient
            http_max_backoff=None,  # Will default to 60.0 in HttpClient
            http_timeout=None,  # Will use method-dependent defaults in HttpClient
            http_jitter=None,  # Will default to True in HttpClient
            http_retry_transient_errors=None,  # Will default to False in HttpClient
            telemetry=None,
        )
