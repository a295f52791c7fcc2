"""Grouping of installed packages into upstream projects.

Packages are first bucketed by their normalized URL. Sibling buckets that
share a parent path (e.g. ``0pointer.de/projects/avahi`` and
``0pointer.de/projects/pulseaudio``) are then folded into one group keyed by
that parent. Folding stops after one hop and needs at least two siblings, so
a lone nested path or a shared hosting prefix such as ``github.com`` never
collapses unrelated projects together.
"""

import logging
from collections import defaultdict
from typing import Optional

from syld.models import PackageRecord, ProjectGroup

logger = logging.getLogger(__name__)

NO_URL_KEY = ""

_SCHEMES = ("https://", "http://")


def normalize_url(url: Optional[str]) -> str:
    """Normalize a URL into a grouping key.

    Trims whitespace, strips trailing slashes, the scheme and a leading
    "www.", and lowercases the result, so that ``https://www.qemu.org/`` and
    ``http://QEMU.org`` group together. No percent-decoding or path
    canonicalization is done.

    The steps are repeated until the key stops changing, which keeps the
    function idempotent for inputs such as ``"https://https://x"``.

    Args:
        url: Raw URL as reported by a package manager.

    Returns:
        The grouping key, or the empty string for a missing URL.
    """
    if not url:
        return NO_URL_KEY

    key = url
    while True:
        previous = key
        key = key.strip().rstrip("/").lower()
        for scheme in _SCHEMES:
            if key.startswith(scheme):
                key = key[len(scheme):]
                break
        if key.startswith("www."):
            key = key[len("www."):]
        if key == previous:
            return key


def ancestor_of(key: str) -> Optional[str]:
    """Return the key with its final path segment removed.

    Args:
        key: A non-empty grouping key.

    Returns:
        The parent prefix, or None for a bare domain or a key with an
        empty parent.
    """
    head, sep, _ = key.rpartition("/")
    # An empty head would collide with the no-URL bucket.
    if not sep or not head:
        return None
    return head


def group_by_project(packages: list[PackageRecord]) -> list[ProjectGroup]:
    """Partition packages into upstream project groups.

    Args:
        packages: All packages from a scan.

    Returns:
        Groups sorted by key. Packages without a URL end up in the group
        keyed by the empty string.
    """
    buckets: dict[str, list[PackageRecord]] = defaultdict(list)
    for pkg in packages:
        buckets[normalize_url(pkg.url)].append(pkg)

    children: dict[str, list[str]] = defaultdict(list)
    for key in buckets:
        if key == NO_URL_KEY:
            continue
        ancestor = ancestor_of(key)
        if ancestor is not None:
            children[ancestor].append(key)

    groups: list[ProjectGroup] = []
    merged: set[str] = set()

    for ancestor, child_keys in children.items():
        if len(child_keys) < 2:
            continue

        member_urls = sorted(child_keys)
        members: list[PackageRecord] = []
        for child in member_urls:
            members.extend(buckets[child])

        logger.debug(
            "Merging %d sibling projects under %s", len(member_urls), ancestor
        )
        groups.append(
            ProjectGroup(key=ancestor, member_urls=member_urls, members=members)
        )
        merged.update(member_urls)

    for key, members in buckets.items():
        if key in merged:
            continue
        groups.append(ProjectGroup(key=key, members=list(members)))

    groups.sort(key=lambda g: g.key)
    return groups
