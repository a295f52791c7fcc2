"""OSI license classification enricher.

Determines whether a project's licenses are all OSI-approved using a
built-in list of SPDX identifiers. No network access required.
"""

import copy
import logging

from license_expression import get_spdx_licensing

from syld.enrichers.base import BaseEnricher
from syld.models import UpstreamProject

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

# OSI-approved SPDX identifiers, lowercased and without -only/-or-later/+.
# Source: https://opensource.org/licenses/
OSI_APPROVED = frozenset(
    {
        "0bsd", "aal", "afl-3.0", "agpl-3.0", "apache-1.1", "apache-2.0",
        "apsl-2.0", "artistic-1.0", "artistic-2.0", "blueoak-1.0.0",
        "bsd-1-clause", "bsd-2-clause", "bsd-2-clause-patent", "bsd-3-clause",
        "bsd-3-clause-lbnl", "bsl-1.0", "cal-1.0",
        "cal-1.0-combined-work-exception", "catosl-1.1", "cern-ohl-p-2.0",
        "cern-ohl-s-2.0", "cern-ohl-w-2.0", "cnri-python", "cpal-1.0",
        "cua-opl-1.0", "ecl-1.0", "ecl-2.0", "ecos-2.0", "efl-1.0", "efl-2.0",
        "entessa", "epl-1.0", "epl-2.0", "eupl-1.1", "eupl-1.2", "fair",
        "frameworx-1.0", "gpl-2.0", "gpl-3.0", "hpnd", "intel", "ipa",
        "ipl-1.0", "isc", "jam", "lgpl-2.0", "lgpl-2.1", "lgpl-3.0",
        "liliq-p-1.1", "liliq-r-1.1", "liliq-rplus-1.1", "lpl-1.0", "lpl-1.02",
        "lppl-1.0", "lppl-1.1", "lppl-1.2", "lppl-1.3a", "lppl-1.3c", "mit",
        "mit-0", "mit-modern-variant", "motosoto", "mpl-1.0", "mpl-1.1",
        "mpl-2.0", "ms-pl", "ms-rl", "mulanpsl-2.0", "multics", "nasa-1.3",
        "ncsa", "ngpl", "nokia", "nposl-3.0", "ntp", "oclc-2.0", "ofl-1.0",
        "ofl-1.1", "ogtsl", "oldap-2.8", "oset-pl-2.1", "osl-1.0", "osl-1.1",
        "osl-2.0", "osl-2.1", "osl-3.0", "php-3.0", "php-3.01", "postgresql",
        "python-2.0", "qpl-1.0", "rpl-1.1", "rpl-1.5", "rpsl-1.0", "rscpl",
        "simpl-2.0", "sissl", "sleepycat", "spl-1.0", "ucl-1.0",
        "unicode-dfs-2016", "unlicense", "upl-1.0", "vsl-1.0", "w3c",
        "watcom-1.0", "xnet", "zlib", "zpl-2.0", "zpl-2.1",
    }
)


def normalize_spdx(license_id: str) -> str:
    """Normalize an SPDX identifier for lookup in OSI_APPROVED.

    Lowercases and strips the ``-or-later``, ``-only`` and ``+`` suffixes,
    so "GPL-3.0-or-later" and "LGPL-2.1+" map to "gpl-3.0" and "lgpl-2.1".
    """
    s = license_id.strip().lower()
    s = s.removesuffix("-or-later")
    s = s.removesuffix("-only")
    return s.removesuffix("+")


def _license_keys(license_text: str) -> list[str]:
    """Split a license string into individual license keys.

    Compound expressions such as "MIT OR Apache-2.0" yield one key per
    license. Strings the SPDX parser rejects are kept whole.
    """
    try:
        keys = SPDX.license_keys(SPDX.parse(license_text))
    except Exception as e:
        logger.debug("Could not parse license expression %r: %s", license_text, e)
        return [license_text]
    return keys or [license_text]


def is_osi_approved(license_text: str) -> bool:
    """Return True if every license in the string is OSI-approved."""
    return all(
        normalize_spdx(key) in OSI_APPROVED for key in _license_keys(license_text)
    )


class LicenseClassifyEnricher(BaseEnricher):
    """Enricher that classifies a project as open source from its licenses.

    Sets is_open_source to True when every license is OSI-approved, and to
    False as soon as one is not. Projects without any license are left
    unclassified.
    """

    @property
    def name(self) -> str:
        return "license_classify"

    def is_available(self) -> bool:
        return True

    async def enrich(self, project: UpstreamProject) -> UpstreamProject:
        enriched = copy.deepcopy(project)
        if project.licenses:
            enriched.is_open_source = all(
                is_osi_approved(lic) for lic in project.licenses
            )
        return enriched
