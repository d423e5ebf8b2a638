"""
Public IP detection through third-party echo services.
"""

from typing import Optional, Sequence

import httpx

from shared.logging import get_logger


IP_ECHO_SERVICES = (
    "https://api.ipify.org?format=json",
    "https://api.my-ip.io/ip.json",
    "https://ipapi.co/json/",
)

DEVELOPER_PORTAL_URL = "https://developer.clashofclans.com/#/account"


class IPProbe:
    """Asks each echo service in turn; the first usable answer wins."""

    def __init__(
        self,
        services: Sequence[str] = IP_ECHO_SERVICES,
        timeout: float = 5.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.services = tuple(services)
        self.timeout = timeout
        self._transport = transport
        self.logger = get_logger("coc-proxy.ip_probe")

    async def detect(self) -> Optional[str]:
        """Return the server's public IP, or None when every service failed."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for service in self.services:
                try:
                    response = await client.get(service)
                    response.raise_for_status()
                except httpx.HTTPError as exc:
                    self.logger.warning("IP probe failed", service=service, error=str(exc))
                    continue

                ip = self._parse(response)
                if ip:
                    self.logger.info("Public IP detected", service=service, ip=ip)
                    return ip
                self.logger.warning("IP probe returned no address", service=service)
        return None

    @staticmethod
    def _parse(response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return response.text.strip() or None
        if isinstance(body, dict):
            return body.get("ip") or body.get("IP")
        if isinstance(body, str):
            return body.strip() or None
        return None

    @staticmethod
    def instructions(ip: str) -> dict:
        """Whitelisting steps returned alongside the detected IP."""
        return {
            "ip": ip,
            "message": "Add this IP to your API key in CoC developer portal",
            "url": DEVELOPER_PORTAL_URL,
            "instructions": [
                "1. Go to the URL above",
                "2. Edit your API key",
                f"3. Add this IP: {ip}",
                "4. Save changes",
                "5. Wait 1-2 minutes",
                "6. Your API will work!",
            ],
        }
