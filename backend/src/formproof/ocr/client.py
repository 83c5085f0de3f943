"""Clarifai OCR client."""

import json
from pathlib import Path
from typing import Any

import httpx

from formproof.errors import MSG_OCR_FAILED, MSG_PAT_MISSING, FailedPrecondition, Internal
from formproof.logging_config import get_logger
from formproof.settings import Settings, settings as default_settings

logger = get_logger(__name__)


def _pat_from_deploy_config(path: str | None) -> str:
    """Read ``clarifai.pat`` from the deployment config JSON, if any."""
    if not path:
        return ""

    config_file = Path(path)
    if not config_file.is_file():
        logger.warning("deploy_config_missing", path=path)
        return ""

    try:
        config = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("deploy_config_unreadable", path=path, error=str(e))
        return ""

    clarifai = config.get("clarifai") if isinstance(config, dict) else None
    if not isinstance(clarifai, dict):
        return ""
    return str(clarifai.get("pat") or "")


def resolve_clarifai_pat(settings: Settings | None = None) -> str:
    """Resolve the Clarifai personal access token.

    The environment (``CLARIFAI_PAT``) wins over the deployment config file.

    Raises:
        FailedPrecondition: If no token is configured anywhere
    """
    settings = settings or default_settings
    pat = settings.clarifai_pat or _pat_from_deploy_config(settings.deploy_config_path)
    if not pat:
        logger.error("clarifai_pat_missing")
        raise FailedPrecondition(MSG_PAT_MISSING)
    return pat


def build_request_body(image_url: str) -> dict[str, Any]:
    return {"inputs": [{"data": {"image": {"url": image_url}}}]}


class ClarifaiOCRClient:
    """Sends image URLs to the Clarifai OCR model.

    One request per call; failures are reported, never retried here.
    """

    def __init__(
        self,
        pat: str,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url or default_settings.clarifai_ocr_url
        self._headers = {
            "Authorization": f"Key {pat}",
            "Content-Type": "application/json",
        }
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout or default_settings.request_timeout_seconds,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def recognize(self, image_url: str) -> dict[str, Any]:
        """Run OCR on an image.

        Args:
            image_url: Publicly reachable image URL

        Returns:
            Decoded provider response

        Raises:
            Internal: If the provider fails or cannot be reached
        """
        logger.debug("ocr_request", url=self.url)
        try:
            response = await self.client.post(
                self.url,
                headers=self._headers,
                json=build_request_body(image_url),
            )
        except httpx.HTTPError as e:
            logger.error("ocr_request_failed", error=str(e))
            raise Internal(MSG_OCR_FAILED) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            description = None
            if isinstance(payload, dict) and isinstance(payload.get("status"), dict):
                description = payload["status"].get("description")
            logger.error(
                "ocr_provider_error",
                status_code=response.status_code,
                description=description,
            )
            raise Internal(description or MSG_OCR_FAILED)

        if not isinstance(payload, dict):
            logger.error("ocr_invalid_response", status_code=response.status_code)
            raise Internal(MSG_OCR_FAILED)

        return payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
