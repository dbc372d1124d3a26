"""Configuration system for issue-ledger.

Key Components:
    - LedgerSettings: Main configuration container with YAML loading support
    - LoggingConfig: Log level and renderer
    - CodecConfig: Comment/metadata tag
    - SyncConfig: Tracker label and synthetic agent name

Example:
    >>> from issue_ledger.config import LedgerSettings
    >>> settings = LedgerSettings.from_yaml("issue-ledger.yaml")
    >>> settings.codec.tag
    'issue-ledger'
"""

from issue_ledger.config.settings import CodecConfig, LedgerSettings, LoggingConfig, SyncConfig

__all__ = ["CodecConfig", "LedgerSettings", "LoggingConfig", "SyncConfig"]
