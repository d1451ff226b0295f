"""
Unlinked Mention Finder Configuration
Config-first approach with typed configuration objects
"""
import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

GOOGLEBOT_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"

@dataclass
class SearchConfig:
    """Google Custom Search settings"""
    pages_per_query: int = 3
    results_per_page: int = 10
    max_retries: int = 3
    timeout_s: int = 15
    daily_cap: int = 100

@dataclass
class HttpConfig:
    """Target page fetch settings"""
    user_agent: str = GOOGLEBOT_USER_AGENT
    timeout_s: int = 20
    snippet_radius: int = 75

@dataclass
class StoreConfig:
    """Tabular store and key/value persistence settings"""
    backend: str = 'json'
    data_dir: str = 'data'
    state_file: str = 'data/state.json'
    queries_collection: str = 'queries'
    results_collection: str = 'results'
    archive_collection: str = 'archive'

@dataclass
class ScheduleConfig:
    """Daily trigger settings"""
    daily_at: str = '02:00'
    poll_seconds: int = 60

@dataclass
class FinderConfig:
    """Main configuration object passed into the scanner"""
    brand_name: str
    brand_domain: str
    search: SearchConfig = field(default_factory=SearchConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    rate_limit_delay: float = 1.0

    # Environment variables
    google_custom_search_api_key: Optional[str] = field(init=False)
    google_custom_search_engine_id: Optional[str] = field(init=False)
    supabase_url: Optional[str] = field(init=False)
    supabase_key: Optional[str] = field(init=False)

    def __post_init__(self):
        """Load environment variables after initialization"""
        self.google_custom_search_api_key = os.getenv('GOOGLE_CUSTOM_SEARCH_API_KEY')
        self.google_custom_search_engine_id = os.getenv('GOOGLE_CUSTOM_SEARCH_ENGINE_ID')
        self.supabase_url = os.getenv('SUPABASE_URL')
        self.supabase_key = os.getenv('SUPABASE_KEY')

        if not self.brand_name or not self.brand_domain:
            raise ValueError("brand_name and brand_domain are required")
        self.brand_domain = self.brand_domain.strip().lower()

    @property
    def has_search_credentials(self) -> bool:
        return bool(self.google_custom_search_api_key and self.google_custom_search_engine_id)

    @classmethod
    def from_dict(cls, resolved: Dict[str, Any]) -> 'FinderConfig':
        """
        Build a typed config from the resolved ``mention_finder`` dict

        Args:
            resolved: Output of config_resolver.resolve_config()

        Returns:
            Typed FinderConfig object
        """
        section = resolved.get('mention_finder', resolved)
        try:
            search_data = section.get('search', {})
            http_data = section.get('http', {})
            store_data = section.get('store', {})
            schedule_data = section.get('schedule', {})

            return cls(
                brand_name=section['brand_name'],
                brand_domain=section['brand_domain'],
                search=SearchConfig(**search_data),
                http=HttpConfig(**http_data),
                store=StoreConfig(**store_data),
                schedule=ScheduleConfig(**schedule_data),
                rate_limit_delay=float(section.get('rate_limit_delay', 1.0)),
            )
        except KeyError as e:
            raise ValueError(f"Missing required configuration key: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid configuration section: {e}")
