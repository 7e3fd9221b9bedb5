#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the store and AI model are reachable.
Usage: python scripts/check_connections.py
"""
from careerflow.core.config import get_settings
from careerflow.db.mongodb import create_mongo_client, test_mongo_connection
from careerflow.services.coach_client import CoachClient


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAREERFLOW - CONNECTION CHECK")
    print("=" * 50)

    # MongoDB
    print("\n[1] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    client = create_mongo_client()
    try:
        if test_mongo_connection(client[settings.mongodb_db]):
            print("    MongoDB: CONNECTED")
        else:
            print("    MongoDB: FAILED")
    finally:
        client.close()

    # AI model (only if API key is set)
    print("\n[2] Checking AI model...")
    if settings.ai_api_key:
        print(f"    Base URL: {settings.ai_base_url}")
        print(f"    Model: {settings.ai_model}")
        coach = CoachClient.from_settings(settings)
        try:
            if coach.test_connection():
                print("    AI model: CONNECTED")
            else:
                print("    AI model: FAILED")
        finally:
            coach.close()
    else:
        print("    AI model: AI_API_KEY not configured (skipped)")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
