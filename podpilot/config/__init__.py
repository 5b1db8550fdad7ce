from .provider import ConfigProvider, ConfigurationError, EnvConfigProvider

__all__ = ["ConfigProvider", "ConfigurationError", "EnvConfigProvider"]
