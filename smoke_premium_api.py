"""Smoke run against a live Premium campaign.

Credentials come from PREMIUM_API_KEY / PREMIUM_CAMPAIGN_CODE (or .env).
Stops at the first call that reports an error.
"""

import sys
from dataclasses import asdict
from pprint import pprint

from premium_api.client import PremiumAPI
from premium_api.config import get_settings
from premium_api.shared.logging import setup_logging


def check(api: PremiumAPI, title: str, data) -> None:
    print(f"== {title}")
    pprint(asdict(api.last_debug_record))
    if api.last_error_code:
        print(f"Error #{int(api.last_error_code)}: {api.last_error}")
        sys.exit(1)
    pprint(data)
    print("-" * 60)


def main() -> None:
    settings = get_settings()
    setup_logging(settings)

    api = PremiumAPI(settings.api_key, settings.campaign_code, settings=settings)
    print("Backend:", api.user_agent)

    check(api, "Campaign information", api.info_get())
    check(api, "Campaign statistics", api.statistics_general())
    check(
        api,
        "Message list",
        api.messages_list(
            {"Time": "2010-02-07T00:00:00+00:00"},
            {"Time": "2010-02-09T00:00:00+00:00"},
        ),
    )


if __name__ == "__main__":
    main()
