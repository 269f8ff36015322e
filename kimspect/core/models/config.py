from __future__ import annotations

import logging
from typing import Optional

import pydantic as pd
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException
from pydantic_settings import BaseSettings, SettingsConfigDict

from kimspect.core.abstract import formatters
from kimspect.utils.logging import LogFormat, LoggingConfig, init_logging, verbosity_to_level

logger = logging.getLogger("kimspect")

DEFAULT_NAMESPACE = "default"
DEFAULT_REQUEST_TIMEOUT = 60.0


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KIMSPECT_")

    # Kubernetes Settings
    kubeconfig: Optional[str] = pd.Field(None)
    context: Optional[str] = pd.Field(None)
    request_timeout: float = pd.Field(DEFAULT_REQUEST_TIMEOUT, ge=0)

    # Logging Settings
    verbose: int = pd.Field(0, ge=0)
    log_format: LogFormat = pd.Field(LogFormat.text)

    # Output Settings
    format: str = pd.Field("text")
    width: Optional[int] = pd.Field(None, ge=1)

    # Internal
    inside_cluster: bool = False

    @property
    def Formatter(self) -> formatters.Formatter:
        return formatters.find(self.format)

    @pd.field_validator("verbose")
    @classmethod
    def validate_verbose(cls, v: int) -> int:
        return min(v, 4)

    @pd.field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        formatters.find(v)  # NOTE: raises if formatter is not found
        return v

    @property
    def kube_request_timeout(self) -> Optional[float]:
        # 0 waits for the API server forever, like kubectl
        return self.request_timeout or None

    @property
    def logging_config(self) -> LoggingConfig:
        return LoggingConfig(level=verbosity_to_level(self.verbose), format=self.log_format)

    def configure_logging(self) -> None:
        init_logging(self.logging_config)

    def load_kubeconfig(self) -> None:
        try:
            config.load_kube_config(config_file=self.kubeconfig, context=self.context)
            self.inside_cluster = False
        except ConfigException:
            config.load_incluster_config()
            self.inside_cluster = True

    def get_kube_client(self) -> Optional[client.ApiClient]:
        if self.inside_cluster:
            # The in-cluster configuration is installed as the default one
            return None

        return config.new_client_from_config(config_file=self.kubeconfig, context=self.context)

    def resolve_default_namespace(self) -> str:
        """The namespace of the selected kubeconfig context, `default` if it has none."""

        try:
            contexts, active_context = config.list_kube_config_contexts(config_file=self.kubeconfig)
        except (ConfigException, OSError):
            logger.debug(f"Could not read kubeconfig contexts, using the {DEFAULT_NAMESPACE!r} namespace")
            return DEFAULT_NAMESPACE

        if self.context is not None:
            active_context = next((c for c in contexts if c["name"] == self.context), active_context)

        namespace = (active_context or {}).get("context", {}).get("namespace")
        return namespace or DEFAULT_NAMESPACE
