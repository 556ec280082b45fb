# xmds_client.py
from typing import Optional
from xml.etree import ElementTree
from xml.sax.saxutils import escape

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_TIMEOUT = 30
DEFAULT_HEADERS = {
    "User-Agent": "signage-client",
    "Content-Type": "text/xml; charset=utf-8",
}
XMDS_NAMESPACE = "urn:xmds"

_ENVELOPE = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/" xmlns:tns="{ns}">'
    "<soap:Body><tns:{operation}>{params}</tns:{operation}></soap:Body>"
    "</soap:Envelope>"
)


class XmdsError(Exception):
    """Raised when an XMDS call cannot be delivered or the server rejects it"""


def _new_session() -> requests.Session:
    s = requests.Session()
    # No automatic retries: a blacklist report is sent once
    adapter = HTTPAdapter(
        pool_connections=4,
        pool_maxsize=4,
        max_retries=Retry(total=0, raise_on_redirect=False, raise_on_status=False),
    )
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


def build_envelope(operation: str, **params) -> str:
    body = "".join(
        f"<{name}>{escape(str(value))}</{name}>" for name, value in params.items()
    )
    return _ENVELOPE.format(ns=XMDS_NAMESPACE, operation=operation, params=body)


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def parse_success(payload: str) -> bool:
    """
    Interpret a SOAP response body.
    Raises XmdsError on a SOAP fault; returns the value of the <success> element, or True when absent.
    """
    try:
        root = ElementTree.fromstring(payload)
    except ElementTree.ParseError as e:
        raise XmdsError(f"Unparseable XMDS response: {e}") from e

    success = None
    for element in root.iter():
        name = _local_name(element.tag)
        if name == "Fault":
            fault = next(
                (child.text for child in element.iter() if _local_name(child.tag) == "faultstring"),
                None,
            )
            raise XmdsError(f"XMDS fault: {fault or 'unknown'}")
        if name == "success":
            success = (element.text or "").strip().lower() in ("true", "1")
    return True if success is None else success


class XmdsClient:
    """Minimal XMDS (SOAP) client for the calls the blacklist needs"""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = _new_session()
        return self._session

    def call(self, operation: str, **params) -> str:
        if not self.url:
            raise XmdsError("XMDS url is not configured")

        headers = DEFAULT_HEADERS.copy()
        headers["SOAPAction"] = f"{XMDS_NAMESPACE}#{operation}"
        try:
            resp = self.session.post(
                self.url,
                data=build_envelope(operation, **params).encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise XmdsError(f"{operation} request failed: {type(e).__name__}: {e}") from e

        # SOAP faults come back as HTTP 500 with a fault body
        if resp.status_code >= 400 and "Fault" not in (resp.text or ""):
            raise XmdsError(f"{operation} returned HTTP {resp.status_code}")
        return resp.text

    def black_list(self, server_key: str, hardware_key: str, media_id: int,
                   scope: str, reason: str, version: str) -> bool:
        payload = self.call(
            "BlackList",
            serverKey=server_key,
            hardwareKey=hardware_key,
            mediaId=int(media_id),
            type=scope,
            reason=reason,
            version=version,
        )
        return parse_success(payload)
