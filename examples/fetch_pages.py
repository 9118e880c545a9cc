"""
Fetch every page of a Jira issue search concurrently.

The first page is fetched inline to learn the total; the remaining pages are
registered on a thread pool and awaited with one ``wait_for`` call. Each page
task stores its own outcome, since the barrier only reports whether all tasks
finished in time.

Environment (or .env):
    JIRA_BASE_URL, JIRA_USERNAME, JIRA_API_TOKEN, JIRA_JQL
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

import requests
from dotenv import load_dotenv

from taskbarrier import Barrier, BarrierConfig, TimeUnit
from taskbarrier.utils import setup_logging

PAGE_SIZE = 100


def _search_page(
    session: requests.Session, base_url: str, jql: str, start_at: int
) -> Dict[str, Any]:
    response = session.get(
        f"{base_url}/rest/api/2/search",
        params={
            "jql": jql,
            "startAt": start_at,
            "maxResults": PAGE_SIZE,
            "fields": "summary,status,assignee",
        },
        timeout=30,
    )
    response.raise_for_status()
    return response.json()


def main() -> None:
    load_dotenv()
    setup_logging()

    base_url = os.getenv("JIRA_BASE_URL", "").rstrip("/")
    if not base_url:
        raise RuntimeError(
            "JIRA_BASE_URL is not set. Please set it in your environment or .env file."
        )
    jql = os.getenv("JIRA_JQL", "order by created DESC")

    http = requests.Session()
    http.auth = (os.getenv("JIRA_USERNAME", ""), os.getenv("JIRA_API_TOKEN", ""))
    http.headers.update({"Accept": "application/json"})

    first = _search_page(http, base_url, jql, 0)
    total = first.get("total", 0)
    pages: Dict[int, List[Dict[str, Any]]] = {0: first.get("issues", [])}
    errors: Dict[int, str] = {}

    barrier = Barrier(BarrierConfig.from_env())
    session = barrier.session()

    def fetch(start_at: int) -> None:
        try:
            pages[start_at] = _search_page(http, base_url, jql, start_at).get("issues", [])
        except requests.RequestException as e:
            errors[start_at] = str(e)
            raise

    with ThreadPoolExecutor(max_workers=8, thread_name_prefix="jira_page") as pool:
        for start_at in range(PAGE_SIZE, total, PAGE_SIZE):
            session.register(pool, lambda start_at=start_at: fetch(start_at))
        finished = session.wait_for(60, TimeUnit.SECONDS)

    issues = [issue for start_at in sorted(pages) for issue in pages[start_at]]
    print(f"Fetched {len(issues)}/{total} issues (all pages in time: {finished})")
    for start_at, error in sorted(errors.items()):
        print(f"- page starting at {start_at} failed: {error}")
    for issue in issues[:10]:
        fields = issue.get("fields", {})
        status = (fields.get("status") or {}).get("name")
        print(f"{issue.get('key')}: [{status}] {fields.get('summary')}")


if __name__ == "__main__":
    main()
