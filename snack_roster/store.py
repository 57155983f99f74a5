"""
Schedule Store Client
Reads and seeds the persisted schedule table over a PostgREST-style REST API
(e.g. a Supabase project: <base_url>/rest/v1/<table>).

Semantics: the first run generates the schedule and inserts it; later runs
read it back. Inserts skip dates that already exist (on_conflict=date).
"""

import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import requests

from snack_roster.exporter import to_records

logger = logging.getLogger(__name__)

ENV_URL = "SCHEDULE_STORE_URL"
ENV_KEY = "SCHEDULE_STORE_KEY"


class ScheduleStoreClient:
    """
    Client for the schedule table
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "schedules",
        timeout: float = 30,
    ):
        """
        Initialize store client

        Args:
            base_url: Project URL (without /rest/v1)
            api_key: Anonymous/service API key
            table: Table holding one row per date
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.table = table
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json'
        })

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def fetch_schedules(self) -> List[Dict[str, Any]]:
        """
        Retrieve every stored record, ordered by date ascending

        Returns:
            List of {"date", "food_team", "drink_team", "free_team"} rows
        """
        params = {
            'select': '*',
            'order': 'date.asc'
        }

        logger.info(f"Fetching schedules from {self.endpoint}")

        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
            response.raise_for_status()

            data = response.json()
            logger.info(f"Retrieved {len(data)} schedule rows")
            return data

        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching schedules: {e}")
            raise

    def insert_schedules(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insert records; rows whose date already exists are skipped

        Args:
            records: Store records (see exporter.to_records)

        Returns:
            Rows the server reports as inserted
        """
        if not records:
            return []

        headers = {
            'Prefer': 'resolution=ignore-duplicates,return=representation'
        }
        params = {
            'on_conflict': 'date'
        }

        logger.info(f"Inserting {len(records)} schedule rows into {self.endpoint}")

        try:
            response = self.session.post(
                self.endpoint,
                json=records,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()

            data = response.json() if response.content else []
            logger.info(f"Inserted {len(data)} schedule rows")
            return data

        except requests.exceptions.RequestException as e:
            logger.error(f"Error inserting schedules: {e}")
            raise


def store_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[ScheduleStoreClient]:
    """
    Build a client from SCHEDULE_STORE_URL / SCHEDULE_STORE_KEY

    Returns None when either variable is missing.
    """
    env = os.environ if environ is None else environ
    url = env.get(ENV_URL)
    key = env.get(ENV_KEY)
    if not url or not key:
        logger.warning(f"{ENV_URL}/{ENV_KEY} not set. Schedule will not be saved.")
        return None
    return ScheduleStoreClient(url, key)


def fetch_or_generate(
    client: Optional[ScheduleStoreClient],
    generate: Callable[[], List[Dict[str, Any]]],
) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Return the stored schedule if there is one; otherwise generate and seed it.
    A failed read falls back to generating; a failed insert is logged and the
    generated schedule is still returned.

    Args:
        client: Store client, or None to generate without persisting
        generate: Zero-argument callable returning a schedule

    Returns:
        (schedule, generated)
        generated: True when the schedule came from generate()
    """
    if client is not None:
        try:
            existing = client.fetch_schedules()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Store unavailable, generating locally: {e}")
            existing = []
        if existing:
            logger.info(f"Using stored schedule ({len(existing)} dates)")
            return existing, False

    logger.info("Generating new balanced schedule...")
    schedule = generate()

    if client is not None:
        try:
            client.insert_schedules(to_records(schedule))
            logger.info("Schedule successfully saved to store")
        except requests.exceptions.RequestException as e:
            logger.error(f"Error saving schedule, continuing with generated copy: {e}")

    return schedule, True
