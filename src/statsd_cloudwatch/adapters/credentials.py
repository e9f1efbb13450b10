"""EC2 instance metadata credential provider implementing CredentialProviderPort."""

import json
import logging

import httpx

from statsd_cloudwatch.core.models import Credentials
from statsd_cloudwatch.errors import CredentialFetchError

logger = logging.getLogger(__name__)

METADATA_ENDPOINT = "http://169.254.169.254"
ANY_ROLE = "any"

_TOKEN_PATH = "/latest/api/token"
_CREDENTIALS_PATH = "/latest/meta-data/iam/security-credentials/"
_TOKEN_TTL_SECONDS = "21600"


class InstanceMetadataCredentials:
    """Fetches IAM role credentials from the EC2 instance metadata service.

    An IMDSv2 session token is requested first. When the token endpoint is
    unavailable the requests are sent without one (IMDSv1).

    Args:
        role: Role name, or "any" to use the first role attached to the instance.
        endpoint: Metadata service base URL.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        role: str,
        endpoint: str = METADATA_ENDPOINT,
        timeout: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._role = role
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport

    async def fetch(self) -> Credentials:
        """Fetch credentials for the configured role.

        Raises:
            CredentialFetchError: If the metadata service is unreachable or
                returns an unusable document.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._endpoint,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                headers = await self._session_headers(client)
                role = await self._resolve_role(client, headers)
                response = await client.get(_CREDENTIALS_PATH + role, headers=headers)
                response.raise_for_status()
                document = json.loads(response.text)
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise CredentialFetchError(f"metadata service request failed: {e}") from e

        try:
            return Credentials(
                access_key_id=document["AccessKeyId"],
                secret_access_key=document["SecretAccessKey"],
                session_token=document.get("Token"),
            )
        except (KeyError, TypeError) as e:
            raise CredentialFetchError(f"malformed credentials document: {e}") from e

    async def _session_headers(self, client: httpx.AsyncClient) -> dict[str, str]:
        try:
            response = await client.put(
                _TOKEN_PATH,
                headers={"X-aws-ec2-metadata-token-ttl-seconds": _TOKEN_TTL_SECONDS},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("IMDSv2 token unavailable, falling back to IMDSv1: %s", e)
            return {}
        return {"X-aws-ec2-metadata-token": response.text}

    async def _resolve_role(
        self, client: httpx.AsyncClient, headers: dict[str, str]
    ) -> str:
        if self._role != ANY_ROLE:
            return self._role
        response = await client.get(_CREDENTIALS_PATH, headers=headers)
        response.raise_for_status()
        roles = response.text.split()
        if not roles:
            raise CredentialFetchError("no IAM role attached to this instance")
        return roles[0]
