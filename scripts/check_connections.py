#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database, LLM and storage connections.
Usage: python scripts/check_connections.py
"""

from botocore.exceptions import BotoCoreError, ClientError

from studentpath.core.config import get_settings
from studentpath.db.mongodb import mongo_is_reachable
from studentpath.db.postgres import postgres_is_reachable
from studentpath.services.llm_client import get_llm_client
from studentpath.services.storage_service import get_s3_client


def main():
    settings = get_settings()
    print("=" * 50)
    print("STUDENTPATH - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] PostgreSQL...")
    print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    print("    ✅ CONNECTED" if postgres_is_reachable() else "    ❌ FAILED")

    print("\n[2] MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    print("    ✅ CONNECTED" if mongo_is_reachable() else "    ❌ FAILED")

    print("\n[3] LLM API...")
    if settings.openai_api_key:
        print(f"    Base URL: {settings.openai_base_url}")
        print("    ✅ CONNECTED" if get_llm_client().test_connection() else "    ❌ FAILED")
    else:
        print("    ⚠️  API key not configured (skipped)")

    print("\n[4] Object storage...")
    print(f"    Bucket: {settings.s3_bucket}")
    try:
        get_s3_client().head_bucket(Bucket=settings.s3_bucket)
        print("    ✅ REACHABLE")
    except (BotoCoreError, ClientError) as e:
        print(f"    ❌ FAILED ({e})")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
