"""Supabase Storage helpers for raw feed archival."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from supabase import Client


def upload_json(
    client: Client,
    bucket: str,
    path: str,
    data: dict | list,
) -> str:
    """Upload a JSON payload to Supabase Storage. Returns the storage path."""
    body = json.dumps(data, ensure_ascii=False, default=str).encode("utf-8")
    client.storage.from_(bucket).upload(
        path,
        body,
        file_options={"content-type": "application/json", "upsert": "true"},
    )
    return f"{bucket}/{path}"


def archive_raw_feed(
    client: Client,
    bucket: str,
    feed: str,
    tour: str,
    payload: dict | list,
    ts: datetime | None = None,
) -> str:
    """Archive a raw DataGolf feed body to Storage and return the path.

    Path format: datagolf/{feed}/{tour}/{timestamp}.json
    """
    ts = ts or datetime.now(timezone.utc)
    ts_str = ts.strftime("%Y%m%dT%H%M%SZ")
    path = f"datagolf/{feed}/{tour}/{ts_str}.json"
    return upload_json(client, bucket, path, payload)
