"""GitHub API client for issue and pull request interactions.

This module provides an async wrapper around the GitHub REST API for:
- Reading issues
- Creating branch refs
- Creating trees and commits through the git data API
- Opening pull requests

Transient failures (timeouts, connection errors, 5xx) are retried with
exponential backoff for reads and for writes that are safe to repeat. Ref
and pull request creation are sent once: a repeated request after a lost
response would fail with 422 although the first one succeeded. Every other failure surfaces as GitHubAPIError, which
is a TransportError in the pipeline's error taxonomy.
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from autocoder.errors import TransportError
from autocoder.github.models import PRCreateRequest, PRCreateResult, TreeEntry


logger = logging.getLogger(__name__)


class GitHubAPIError(TransportError):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class GitHubClient:
    """Async GitHub API client with retry logic.

    Attributes:
        token: GitHub API token (PAT or GitHub App token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        max_retries: Maximum number of retry attempts for transient failures.
        base_delay: Base delay in seconds for exponential backoff.
        max_delay: Maximum delay in seconds between retries.
        timeout: Request timeout in seconds.

    Example:
        >>> async with GitHubClient(token="ghp_xxx") as client:
        ...     issue = await client.get_issue("owner", "repo", 123)
    """

    # HTTP status codes that should trigger a retry
    RETRYABLE_STATUS_CODES = {408, 500, 502, 503, 504}

    # Methods retried unless the caller says otherwise
    RETRYABLE_METHODS = {"GET"}

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            max_retries: Maximum number of retry attempts.
            base_delay: Base delay in seconds for exponential backoff.
            max_delay: Maximum delay in seconds between retries.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "autocoder-pipeline/0.1",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _calculate_backoff(self, attempt: int) -> float:
        """Calculate backoff delay with full jitter.

        Args:
            attempt: The current retry attempt (0-indexed).

        Returns:
            Delay in seconds before the next retry.
        """
        exponential_delay = self.base_delay * (2 ** attempt)
        capped_delay = min(exponential_delay, self.max_delay)
        return random.uniform(0, capped_delay)

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        retry: Optional[bool] = None,
    ) -> httpx.Response:
        """Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST).
            path: API path (e.g., /repos/owner/repo/issues/1).
            json_data: Optional JSON body for the request.
            retry: Whether transient failures are retried. Defaults to True
                   for methods in RETRYABLE_METHODS.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: If the request fails after all retries.
        """
        if retry is None:
            retry = method in self.RETRYABLE_METHODS
        max_retries = self.max_retries if retry else 0
        last_exception: Optional[Exception] = None

        for attempt in range(max_retries + 1):
            try:
                response = await self.client.request(
                    method=method,
                    url=path,
                    json=json_data,
                )

                if response.status_code in self.RETRYABLE_STATUS_CODES:
                    if attempt < max_retries:
                        delay = self._calculate_backoff(attempt)
                        logger.warning(
                            "Retryable error from GitHub API",
                            extra={
                                "status_code": response.status_code,
                                "attempt": attempt + 1,
                                "max_retries": max_retries,
                                "delay": delay,
                                "path": path,
                            },
                        )
                        await asyncio.sleep(delay)
                        continue

                if response.status_code >= 400:
                    error_body = response.text
                    logger.error(
                        "GitHub API error",
                        extra={
                            "status_code": response.status_code,
                            "path": path,
                            "method": method,
                            "response_body": error_body[:500],
                        },
                    )
                    raise GitHubAPIError(
                        message=f"GitHub API error: {response.status_code}",
                        status_code=response.status_code,
                        response_body=error_body,
                        request_url=str(response.url),
                    )

                return response

            except GitHubAPIError:
                raise
            except httpx.RequestError as e:
                last_exception = e
                if attempt < max_retries:
                    delay = self._calculate_backoff(attempt)
                    logger.warning(
                        "Request error, retrying",
                        extra={
                            "error": str(e),
                            "attempt": attempt + 1,
                            "max_retries": max_retries,
                            "delay": delay,
                            "path": path,
                        },
                    )
                    await asyncio.sleep(delay)
                    continue

        logger.error(
            "GitHub API request failed after all retries",
            extra={
                "path": path,
                "method": method,
                "max_retries": max_retries,
                "last_error": str(last_exception),
            },
        )
        raise GitHubAPIError(
            message=f"Request failed after {max_retries} retries: {last_exception}",
            request_url=f"{self.base_url}{path}",
        )

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def get_issue(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> Dict[str, Any]:
        """Get issue details.

        Returns:
            Issue data from GitHub API (title, body, labels, ...).

        Raises:
            GitHubAPIError: If the request fails; status_code is 404 when
                the issue does not exist.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}"

        logger.debug(
            "Getting issue details",
            extra={"owner": owner, "repo": repo, "issue_number": issue_number},
        )

        response = await self._request(method="GET", path=path)
        return response.json()

    # ------------------------------------------------------------------
    # Git data
    # ------------------------------------------------------------------

    async def get_branch_sha(self, owner: str, repo: str, branch: str) -> str:
        """Return the commit SHA a branch points at."""
        path = f"/repos/{owner}/{repo}/git/ref/heads/{branch}"
        response = await self._request(method="GET", path=path)
        return response.json()["object"]["sha"]

    async def create_branch(
        self,
        owner: str,
        repo: str,
        branch: str,
        sha: str,
    ) -> Dict[str, Any]:
        """Create a branch ref pointing at sha. Sent once, never retried.

        Raises:
            GitHubAPIError: status_code 422 when the ref already exists.
        """
        path = f"/repos/{owner}/{repo}/git/refs"

        logger.info(
            "Creating branch",
            extra={"owner": owner, "repo": repo, "branch": branch, "sha": sha},
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        return response.json()

    async def get_commit_tree_sha(self, owner: str, repo: str, sha: str) -> str:
        """Return the tree SHA of a commit."""
        path = f"/repos/{owner}/{repo}/git/commits/{sha}"
        response = await self._request(method="GET", path=path)
        return response.json()["tree"]["sha"]

    async def create_tree(
        self,
        owner: str,
        repo: str,
        base_tree: str,
        entries: List[TreeEntry],
    ) -> str:
        """Create a tree on top of base_tree and return its SHA.

        Trees are content-addressed, so a repeated request is harmless.
        """
        path = f"/repos/{owner}/{repo}/git/trees"
        response = await self._request(
            method="POST",
            path=path,
            json_data={
                "base_tree": base_tree,
                "tree": [entry.to_payload() for entry in entries],
            },
            retry=True,
        )
        return response.json()["sha"]

    async def create_commit(
        self,
        owner: str,
        repo: str,
        message: str,
        tree_sha: str,
        parent_sha: str,
    ) -> str:
        """Create a commit and return its SHA.

        A commit is unreachable until a ref points at it, so a repeated
        request only leaves an orphan object behind.
        """
        path = f"/repos/{owner}/{repo}/git/commits"
        response = await self._request(
            method="POST",
            path=path,
            json_data={
                "message": message,
                "tree": tree_sha,
                "parents": [parent_sha],
            },
            retry=True,
        )
        return response.json()["sha"]

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    async def create_pr(
        self,
        owner: str,
        repo: str,
        request: PRCreateRequest,
    ) -> PRCreateResult:
        """Create a pull request. Sent once, never retried.

        Returns:
            PRCreateResult with the created PR number and URL.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/pulls"

        logger.info(
            "Creating pull request",
            extra={
                "owner": owner,
                "repo": repo,
                "title": request.title,
                "head": request.head_branch,
                "base": request.base_branch,
            },
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={
                "title": request.title,
                "body": request.body,
                "head": request.head_branch,
                "base": request.base_branch,
            },
        )

        result = PRCreateResult.from_github_response(response.json())

        logger.info(
            "Pull request created successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "pr_number": result.pr_number,
                "pr_url": result.pr_url,
            },
        )

        return result
