"""GitHub enricher.

Fetches repository metadata and the FUNDING.yml file of GitHub-hosted
projects through the GitHub REST API.
"""

import base64
import binascii
import copy
import logging
from typing import Any, Optional

import yaml

from syld.enrichers.base import EnrichmentError
from syld.enrichers.http import HttpEnricher
from syld.models import FundingChannel, UpstreamProject

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"

GOOD_FIRST_ISSUES_QUERY = (
    "issues?q=is%3Aissue+is%3Aopen+label%3A%22good+first+issue%22"
)

# FUNDING.yml key -> (platform label, URL template)
FUNDING_PLATFORMS = {
    "github": ("GitHub Sponsors", "https://github.com/sponsors/{}"),
    "open_collective": ("Open Collective", "https://opencollective.com/{}"),
    "ko_fi": ("Ko-fi", "https://ko-fi.com/{}"),
    "patreon": ("Patreon", "https://www.patreon.com/{}"),
    "liberapay": ("Liberapay", "https://liberapay.com/{}"),
    "community_bridge": (
        "Community Bridge",
        "https://funding.communitybridge.org/projects/{}",
    ),
    "issuehunt": ("IssueHunt", "https://issuehunt.io/r/{}"),
    "polar": ("Polar", "https://polar.sh/{}"),
    "buy_me_a_coffee": ("Buy Me a Coffee", "https://buymeacoffee.com/{}"),
    "thanks_dev": ("thanks.dev", "https://thanks.dev/d/gh/{}"),
    "custom": ("Custom", "{}"),
}


def extract_github_owner_repo(url: str) -> Optional[str]:
    """Extract "owner/repo" from a GitHub repository URL.

    Accepts https, http and git:// URLs (with or without "www." and a
    ".git" suffix) as well as the SSH form ``git@github.com:owner/repo.git``.
    Extra path segments after the repository name are ignored.

    Args:
        url: Repository URL.

    Returns:
        The "owner/repo" string, or None if the URL is not a GitHub repository.
    """
    url = url.strip()

    if url.startswith("git@github.com:"):
        rest = url.removeprefix("git@github.com:").removesuffix(".git")
        owner, sep, repo = rest.partition("/")
        if sep and owner and repo:
            return f"{owner}/{repo}"
        return None

    for scheme in ("https://", "http://", "git://"):
        if url.startswith(scheme):
            url = url[len(scheme):]
            break
    else:
        return None

    url = url.removeprefix("www.")
    if not url.startswith("github.com/"):
        return None

    path = url.removeprefix("github.com/").rstrip("/").removesuffix(".git")
    parts = path.split("/")
    if len(parts) >= 2 and parts[0] and parts[1]:
        return f"{parts[0]}/{parts[1].removesuffix('.git')}"
    return None


def _funding_names(value: Any) -> list[str]:
    """Normalize a FUNDING.yml value (a name or a list of names) to a list."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    name = str(value).strip()
    return [name] if name else []


def parse_funding_yml(content: str) -> list[FundingChannel]:
    """Parse a GitHub FUNDING.yml file into funding channels.

    Each known platform key may hold a single name or a list of names, in
    either flow (``[a, b]``) or block (``- a``) form. Unknown keys and empty
    values are skipped.

    Args:
        content: Decoded FUNDING.yml content.

    Returns:
        Funding channels in file order.

    Raises:
        ValueError: If the content is not valid YAML.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        return []

    channels = []
    for key, value in data.items():
        platform = FUNDING_PLATFORMS.get(str(key).strip().lower())
        if platform is None:
            continue
        label, template = platform
        for name in _funding_names(value):
            channels.append(FundingChannel(platform=label, url=template.format(name)))

    return channels


def decode_content(encoded: str) -> str:
    """Decode the base64 "content" field of the GitHub contents API.

    GitHub wraps the encoding with newlines, which are dropped first.

    Raises:
        ValueError: If the content is not valid base64 or UTF-8.
    """
    clean = "".join(encoded.split())
    try:
        return base64.b64decode(clean).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid base64 content: {e}") from e


class GitHubEnricher(HttpEnricher):
    """Enricher that fetches repository metadata from the GitHub API.

    Fills in stars, homepage, the repository's SPDX license, the bug tracker,
    contributing guide and good-first-issues links, and funding channels from
    ``.github/FUNDING.yml``. Projects not hosted on GitHub are returned
    unchanged.

    Attributes:
        github_token: GitHub personal access token. The enricher is only
            available when one is configured, since unauthenticated requests
            are limited to 60 per hour.
    """

    def __init__(self, github_token: Optional[str] = None) -> None:
        super().__init__()
        self.github_token = github_token

    @property
    def name(self) -> str:
        return "github"

    def is_available(self) -> bool:
        return bool(self.github_token)

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Accept"] = "application/vnd.github+json"
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers

    async def enrich(self, project: UpstreamProject) -> UpstreamProject:
        enriched = copy.deepcopy(project)

        if not project.repo_url:
            return enriched

        owner_repo = extract_github_owner_repo(project.repo_url)
        if owner_repo is None:
            return enriched

        repo = await self._get_json(f"{GITHUB_API}/repos/{owner_repo}")
        if repo is None:
            logger.debug("GitHub repository %s not found", owner_repo)
            return enriched
        if not isinstance(repo, dict):
            raise EnrichmentError(f"github: unexpected response for {owner_repo}")

        self._apply_repo_metadata(enriched, repo)

        for channel in await self._fetch_funding(owner_repo):
            if not any(f.url == channel.url for f in enriched.funding):
                enriched.funding.append(channel)

        return enriched

    def _apply_repo_metadata(self, enriched: UpstreamProject, repo: dict) -> None:
        """Copy fields from a /repos/{owner}/{repo} response onto the project."""
        stars = repo.get("stargazers_count")
        if enriched.stars is None and isinstance(stars, int) and stars >= 0:
            enriched.stars = stars

        homepage = repo.get("homepage")
        if enriched.homepage is None and homepage:
            enriched.homepage = homepage

        spdx_id = (repo.get("license") or {}).get("spdx_id")
        if spdx_id and spdx_id != "NOASSERTION" and spdx_id not in enriched.licenses:
            enriched.licenses.append(spdx_id)

        html_url = repo.get("html_url")
        if not html_url:
            return

        if enriched.bug_tracker is None and repo.get("has_issues"):
            enriched.bug_tracker = f"{html_url}/issues"
        if enriched.good_first_issues_url is None:
            enriched.good_first_issues_url = f"{html_url}/{GOOD_FIRST_ISSUES_QUERY}"
        if enriched.contributing_url is None:
            enriched.contributing_url = f"{html_url}/blob/HEAD/CONTRIBUTING.md"

    async def _fetch_funding(self, owner_repo: str) -> list[FundingChannel]:
        """Fetch and parse .github/FUNDING.yml.

        A missing or unreadable file yields no channels; the repository
        metadata already gathered is kept.
        """
        url = f"{GITHUB_API}/repos/{owner_repo}/contents/.github/FUNDING.yml"
        try:
            data = await self._get_json(url)
        except EnrichmentError as e:
            logger.warning("Could not fetch FUNDING.yml for %s: %s", owner_repo, e)
            return []

        if not isinstance(data, dict) or "content" not in data:
            return []

        try:
            return parse_funding_yml(decode_content(data["content"]))
        except ValueError as e:
            logger.warning("Invalid FUNDING.yml content for %s: %s", owner_repo, e)
            return []
