"""FeedVault - RSS 订阅导入与书签后台归档."""

__version__ = "0.1.0"
