"""Order Desk Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Order Desk"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Order sink: "supabase" or "memory"
    order_sink_backend: str = "supabase"
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_orders_table: str = "orders"
    order_submit_timeout_seconds: float = 15.0

    # Checkout
    max_line_quantity: int = 999
    session_max_age_hours: int = 24

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def order_sink_configured(self) -> bool:
        """Check if the order sink has everything it needs"""
        if self.order_sink_backend == "memory":
            return True
        return all([self.supabase_url, self.supabase_anon_key])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
