import os
from dotenv import dotenv_values

config = dotenv_values(".env")

# Prioritize environment variables over .env file
GOVINDEX_EVENTS_PATH = os.getenv("GOVINDEX_EVENTS_PATH", config.get("GOVINDEX_EVENTS_PATH", "data/events.jsonl"))

if __name__ == "__main__":
    from govindex.cli import cli

    cli(["replay", GOVINDEX_EVENTS_PATH])
