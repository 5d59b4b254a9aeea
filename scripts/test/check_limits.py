# scripts/test/check_limits.py
"""Print the resolved day-off limit for a team over a date range."""

import argparse
import requests
from datetime import date, timedelta

BACKEND_URL = "http://127.0.0.1:8080/api/v1"


def main():
    parser = argparse.ArgumentParser(description="Show day-off limits for a team")
    parser.add_argument("team")
    parser.add_argument("--start", default=date.today().isoformat(), help="YYYY-MM-DD")
    parser.add_argument("--days", type=int, default=14)
    parser.add_argument("--url", default=BACKEND_URL)
    parser.add_argument("--api-key", default=None)
    args = parser.parse_args()

    headers = {"X-API-Key": args.api_key} if args.api_key else {}
    start = date.fromisoformat(args.start)
    for offset in range(args.days):
        day = start + timedelta(days=offset)
        resp = requests.get(f"{args.url}/vacation/limit", params={"date": day.isoformat(), "team": args.team},
                            headers=headers, timeout=10)
        if resp.status_code != 200:
            print(f"❌ {day}: HTTP {resp.status_code} {resp.text}")
            continue
        body = resp.json()
        print(f"{day} {day.strftime('%a')}  limit={body['limit']:<3} ({body['rule']}: {body['detail']})")


if __name__ == "__main__":
    main()
