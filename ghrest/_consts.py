from __future__ import annotations

__title__ = "ghrest"
__description__ = "Backend-agnostic client framework for the GitHub REST API."
__version__ = "0.1.0"
__url__ = "https://github.com/ghrest/ghrest"

#: The default ``Accept`` header sent in requests.
DEFAULT_ACCEPT = "application/vnd.github+json"

#: The default base API URL to which path endpoints are appended.
DEFAULT_API_URL = "https://api.github.com"

#: Name of the header used by the GitHub REST API to select an API version.
API_VERSION_HEADER = "X-GitHub-Api-Version"

#: The default ``X-GitHub-Api-Version`` header sent in requests.
DEFAULT_API_VERSION = "2022-11-28"

#: The default ``User-Agent`` header sent in requests.  Changes with every
#: release.
DEFAULT_USER_AGENT = f"{__title__}/{__version__} ({__url__})"

#: Maximum number of bytes pulled at once from a response body.
READ_BLOCK_SIZE = 2048
