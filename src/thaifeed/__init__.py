"""ThaiFeed - 泰文地方新闻 RSS 采集服务."""

__version__ = "0.1.0"
