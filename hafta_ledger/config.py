"""Configuration management for hafta-ledger."""

from dataclasses import dataclass, field
from pathlib import Path

from hafta_ledger.exceptions import ConfigurationError


@dataclass
class MessagingConfig:
    """Reminder message configuration."""

    sender_name: str = "VickyFinance"
    default_country_code: str = "91"
    currency_symbol: str = "₹"


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LedgerConfig:
    """Main configuration for hafta-ledger."""

    messaging: MessagingConfig = field(default_factory=MessagingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"
    locale: str = "en_IN"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        messaging = MessagingConfig(
            sender_name=os.getenv("SENDER_NAME", "VickyFinance"),
            default_country_code=os.getenv("DEFAULT_COUNTRY_CODE", "91"),
            currency_symbol=os.getenv("CURRENCY_SYMBOL", "₹"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        seed_str = os.getenv("SEED")
        try:
            seed = int(seed_str) if seed_str else None
        except ValueError as e:
            raise ConfigurationError(f"SEED must be an integer, got {seed_str!r}") from e

        return cls(
            messaging=messaging,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            locale=os.getenv("FAKER_LOCALE", "en_IN"),
        )
